"""Domain services for the page narrator."""

from .reading_service import ReadingService
from .speech_gateway import SpeechGateway
from .text_chunking import chunk_text

__all__ = ["ReadingService", "SpeechGateway", "chunk_text"]
