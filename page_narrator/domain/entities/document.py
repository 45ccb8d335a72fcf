"""Document entities for the page narrator."""

import uuid

from pydantic import BaseModel, ConfigDict, Field


class DocumentHandle(BaseModel):
    """Opaque reference to a document opened by a reading session.

    The handle only describes where the document lives; parsing and
    caching are the page provider's business.
    """

    model_config = ConfigDict(frozen=True)

    document_id: str = Field(
        default_factory=lambda: str(uuid.uuid4()),
        description="Unique identifier for the document",
    )
    source: str = Field(min_length=1, description="Local path, s3:// URI or http(s) URL")
    title: str = Field(default="Untitled", min_length=1, max_length=200)
    language_code: str = Field(default="pt-BR", description="BCP-47 narration language")


class RasterImage(BaseModel):
    """Rendered raster output for a single page."""

    model_config = ConfigDict(frozen=True)

    page_number: int = Field(ge=1, description="Page number")
    width: int = Field(ge=0)
    height: int = Field(ge=0)
    format: str = Field(default="PNG")
    data: bytes = Field(description="Encoded image bytes", repr=False)

    @property
    def media_type(self) -> str:
        return f"image/{self.format.lower()}"
