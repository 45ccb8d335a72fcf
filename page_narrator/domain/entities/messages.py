"""Outbound message entities."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal, Optional

from .reading_session import SessionSnapshot
from .websocket_messages import (
    ErrorCode,
    ErrorMessage,
    PageChange,
    ServerNotice,
    SessionStateUpdate,
)


class OutboundMessage:
    """Base class for outbound messages."""

    def to_wire(self) -> dict:
        """Return the JSON-ready payload sent to the UI."""
        raise NotImplementedError


@dataclass
class SessionStateMessage(OutboundMessage):
    """Message carrying a session snapshot."""

    snapshot: SessionSnapshot
    timestamp: float = field(default_factory=lambda: datetime.now(timezone.utc).timestamp())
    update: SessionStateUpdate = field(init=False)

    def __post_init__(self):
        self.update = SessionStateUpdate(session=self.snapshot)

    def to_wire(self) -> dict:
        return self.update.model_dump(mode="json")


@dataclass
class PageChangeMessage(OutboundMessage):
    """Message announcing that a new page is displayed."""

    page: int
    direction: Optional[Literal["next", "prev", "jump"]] = None
    automatic: bool = False
    page_change: PageChange = field(init=False)

    def __post_init__(self):
        self.page_change = PageChange(
            page=self.page,
            direction=self.direction,
            automatic=self.automatic,
        )

    def to_wire(self) -> dict:
        return self.page_change.model_dump(mode="json")


@dataclass
class NoticeMessage(OutboundMessage):
    """Message containing a notice."""

    message: str
    notice: ServerNotice = field(init=False)

    def __post_init__(self):
        self.notice = ServerNotice(message=self.message)

    def to_wire(self) -> dict:
        return self.notice.model_dump(mode="json")


@dataclass
class ErrorOutMessage(OutboundMessage):
    """Message containing an error."""

    code: ErrorCode
    message: str
    error: ErrorMessage = field(init=False)

    def __post_init__(self):
        self.error = ErrorMessage(code=self.code, message=self.message)

    def to_wire(self) -> dict:
        return self.error.model_dump(mode="json")
