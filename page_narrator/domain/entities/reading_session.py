"""Session entities for the page narrator."""
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from .document import DocumentHandle


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionState(str, Enum):
    """Reading session state enum."""
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    READING = "reading"
    ERROR = "error"


class ReadingSession(BaseModel):
    """Session entity representing the live narration of one document."""

    model_config = ConfigDict(validate_assignment=True)

    id: UUID = Field(default_factory=uuid.uuid4)
    document: Optional[DocumentHandle] = None
    current_page: int = Field(default=1, ge=1)
    total_pages: int = Field(default=0, ge=0)
    current_text: str = ""
    is_reading: bool = False
    is_muted: bool = False
    state: SessionState = SessionState.IDLE
    error_message: Optional[str] = None
    page_render_failed: bool = False
    opened_at: Optional[datetime] = None
    last_activity_at: datetime = Field(default_factory=_utcnow)

    def touch(self) -> None:
        """Record activity on the session."""
        self.last_activity_at = _utcnow()

    def snapshot(self) -> "SessionSnapshot":
        """Return a read-only view of the session for the UI."""
        return SessionSnapshot(
            current_page=self.current_page,
            total_pages=self.total_pages,
            is_reading=self.is_reading,
            is_muted=self.is_muted,
            current_text=self.current_text,
            state=self.state,
            document_id=self.document.document_id if self.document else None,
            title=self.document.title if self.document else None,
            error_message=self.error_message,
            page_render_failed=self.page_render_failed,
        )


class SessionSnapshot(BaseModel):
    """Immutable view of a reading session."""

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "current_page": 2,
                "total_pages": 12,
                "is_reading": True,
                "is_muted": False,
                "current_text": "Era uma vez...",
                "state": "reading",
                "document_id": "doc-42",
                "title": "O Pequeno Livro",
                "error_message": None,
                "page_render_failed": False,
            }
        },
    )

    current_page: int
    total_pages: int
    is_reading: bool
    is_muted: bool
    current_text: str
    state: SessionState
    document_id: Optional[str] = None
    title: Optional[str] = None
    error_message: Optional[str] = None
    page_render_failed: bool = False
