"""WebSocket message models for the page narrator."""

from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field

from .reading_session import SessionSnapshot


# ===== Client → Server Messages =====


class PageNext(BaseModel):
    """Request to move to the next page."""

    type: Literal["page.next"] = "page.next"


class PagePrev(BaseModel):
    """Request to move to the previous page."""

    type: Literal["page.prev"] = "page.prev"


class PageGoto(BaseModel):
    """Request to jump to a specific page."""

    type: Literal["page.goto"] = "page.goto"
    page: int = Field(ge=1)


class ReadingToggle(BaseModel):
    """Request to start or stop narration."""

    type: Literal["reading.toggle"] = "reading.toggle"


class MuteToggle(BaseModel):
    """Request to mute or unmute narration audio."""

    type: Literal["mute.toggle"] = "mute.toggle"


class SessionClose(BaseModel):
    """Request to close the current document."""

    type: Literal["session.close"] = "session.close"


# Union type for all client messages
ClientMessage = Annotated[
    Union[PageNext, PagePrev, PageGoto, ReadingToggle, MuteToggle, SessionClose],
    Field(discriminator="type"),
]


# ===== Server → Client Messages =====


class SessionStateUpdate(BaseModel):
    """Snapshot of the session after a transition."""

    type: Literal["session.state"] = "session.state"
    session: SessionSnapshot


class PageChange(BaseModel):
    """Page displayed by the session changed."""

    type: Literal["page.change"] = "page.change"
    page: int = Field(ge=1)
    direction: Optional[Literal["next", "prev", "jump"]] = None
    automatic: bool = Field(default=False, description="True when caused by auto-advance")


class ServerNotice(BaseModel):
    """Transient notice for the user."""

    type: Literal["server_notice"] = "server_notice"
    message: str


class ErrorCode(str, Enum):
    """Error codes for WebSocket errors."""

    INVALID_MESSAGE = "INVALID_MESSAGE"
    INVALID_PAGE = "INVALID_PAGE"
    DOCUMENT_LOAD_FAILED = "DOCUMENT_LOAD_FAILED"
    PAGE_RENDER_FAILED = "PAGE_RENDER_FAILED"
    SYNTHESIS_FAILED = "SYNTHESIS_FAILED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorMessage(BaseModel):
    """Error message from server."""

    type: Literal["error"] = "error"
    code: ErrorCode
    message: str


# Union type for all server messages
ServerMessage = Union[SessionStateUpdate, PageChange, ServerNotice, ErrorMessage]
