"""Reading progress entity."""

from datetime import datetime, timezone

from pydantic import BaseModel, Field


class ReadingProgress(BaseModel):
    """How far a document has been read in its latest session."""

    document_id: str
    progress: int = Field(ge=0, le=100, description="Percentage of pages reached")
    last_page: int = Field(ge=1)
    total_pages: int = Field(ge=1)
    last_read: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def for_page(cls, document_id: str, page: int, total_pages: int) -> "ReadingProgress":
        """Build progress for a session currently displaying ``page``."""
        percent = round(page * 100 / total_pages)
        return cls(
            document_id=document_id,
            progress=max(0, min(100, percent)),
            last_page=page,
            total_pages=total_pages,
        )
