"""Page provider protocol."""

from typing import Protocol, runtime_checkable

from ..entities.document import DocumentHandle, RasterImage


@runtime_checkable
class PageProvider(Protocol):
    """Protocol for document page providers.

    This interface is the rendering/text extraction backend consumed by a
    reading session. Implementations may cache a parsed document across
    calls, keyed by the handle's document id. Methods are synchronous; the
    reading service runs them in a worker thread.
    """

    def total_pages(self, document: DocumentHandle) -> int:
        """Return the number of pages in the document.

        Args:
            document: The document to inspect.

        Returns:
            int: Total page count (at least 1).

        Raises:
            DocumentLoadError: If the document cannot be fetched or parsed.
        """
        ...

    def render_page(self, document: DocumentHandle, page_number: int) -> RasterImage:
        """Render a single page to a raster image.

        Args:
            document: The document to render.
            page_number: 1-indexed page number.

        Returns:
            RasterImage: The rendered page.

        Raises:
            PageRenderError: If the page cannot be rendered.
        """
        ...

    def extract_text(self, document: DocumentHandle, page_number: int) -> str:
        """Extract the narration text of a page.

        Never raises: any failure yields an empty string so that page
        display is never blocked by narration problems.

        Args:
            document: The document to read.
            page_number: 1-indexed page number.

        Returns:
            str: Plain text of the page, possibly empty.
        """
        ...

    def release(self, document: DocumentHandle) -> None:
        """Drop anything cached for the document. Safe for unknown handles."""
        ...
