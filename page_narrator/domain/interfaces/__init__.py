"""Domain interfaces for the page narrator."""

from .page_provider import PageProvider
from .progress_repository import ProgressRepository
from .speech import AudioSink, LocalSynthesizer, RemoteSynthesizer

__all__ = [
    "AudioSink",
    "LocalSynthesizer",
    "PageProvider",
    "ProgressRepository",
    "RemoteSynthesizer",
]
