"""Domain entities for the page narrator."""

from .document import DocumentHandle, RasterImage
from .messages import (
    ErrorOutMessage,
    NoticeMessage,
    OutboundMessage,
    PageChangeMessage,
    SessionStateMessage,
)
from .progress import ReadingProgress
from .reading_session import ReadingSession, SessionSnapshot, SessionState
from .speech import SpeechBackend, SpeechResult
from .websocket_messages import (
    ClientMessage,
    ErrorCode,
    ErrorMessage,
    MuteToggle,
    PageChange,
    PageGoto,
    PageNext,
    PagePrev,
    ReadingToggle,
    ServerMessage,
    ServerNotice,
    SessionClose,
    SessionStateUpdate,
)

__all__ = [
    # Session entities
    "ReadingSession",
    "SessionSnapshot",
    "SessionState",
    # Document entities
    "DocumentHandle",
    "RasterImage",
    # Progress entities
    "ReadingProgress",
    # Speech entities
    "SpeechBackend",
    "SpeechResult",
    # Message entities
    "OutboundMessage",
    "SessionStateMessage",
    "PageChangeMessage",
    "NoticeMessage",
    "ErrorOutMessage",
    # WebSocket message entities
    "ClientMessage",
    "ServerMessage",
    "PageNext",
    "PagePrev",
    "PageGoto",
    "ReadingToggle",
    "MuteToggle",
    "SessionClose",
    "SessionStateUpdate",
    "PageChange",
    "ServerNotice",
    "ErrorMessage",
    "ErrorCode",
]
