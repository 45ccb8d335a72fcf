"""Speech-related entities."""

from dataclasses import dataclass
from enum import Enum


class SpeechBackend(str, Enum):
    """Which synthesis path produced the narration."""

    NONE = "none"
    REMOTE = "remote"
    LOCAL = "local"


@dataclass(frozen=True)
class SpeechResult:
    """Outcome of a single speak operation.

    Attributes:
        completed: False when the operation was cancelled before playback ended
        backend: Synthesis path that handled the text
        chunks: Number of remote chunk requests issued
    """

    completed: bool
    backend: SpeechBackend = SpeechBackend.NONE
    chunks: int = 0
