"""In-memory implementation of PageProvider."""

import io
import textwrap
from typing import Dict

from PIL import Image, ImageDraw

from ..domain.entities.document import DocumentHandle, RasterImage
from ..domain.errors import DocumentLoadError, PageRenderError
from ..domain.interfaces.page_provider import PageProvider


class LocalPageProvider(PageProvider):
    """Local implementation of the PageProvider protocol.

    Stores page texts in a dictionary keyed by document source and draws
    each page as a plain white image. Useful for testing, development and
    running the service without PDF tooling installed.
    """

    PAGE_WIDTH = 600
    PAGE_HEIGHT = 800

    def __init__(self):
        """Initialize the local page provider with a small sample document."""
        self._documents: Dict[str, list[str]] = {}

        self.add_document(
            "memory://sample",
            [
                "Era uma vez um livro que sabia ler em voz alta.",
                "",
                "Fim.",
            ],
        )

    def add_document(self, source: str, pages: list[str]) -> None:
        """Add or replace a document.

        Args:
            source: The source string handles will use to refer to it.
            pages: Text of each page, in order.
        """
        self._documents[source] = list(pages)

    def total_pages(self, document: DocumentHandle) -> int:
        pages = self._documents.get(document.source)
        if not pages:
            raise DocumentLoadError(f"Document {document.source} not found")
        return len(pages)

    def render_page(self, document: DocumentHandle, page_number: int) -> RasterImage:
        text = self._page_text(document, page_number)
        if text is None:
            raise PageRenderError(f"Page {page_number} of {document.source} not found")

        image = Image.new("RGB", (self.PAGE_WIDTH, self.PAGE_HEIGHT), "white")
        draw = ImageDraw.Draw(image)
        draw.multiline_text((40, 40), "\n".join(textwrap.wrap(text, width=60)), fill="black")

        buffered = io.BytesIO()
        image.save(buffered, format="PNG")
        return RasterImage(
            page_number=page_number,
            width=self.PAGE_WIDTH,
            height=self.PAGE_HEIGHT,
            format="PNG",
            data=buffered.getvalue(),
        )

    def extract_text(self, document: DocumentHandle, page_number: int) -> str:
        return self._page_text(document, page_number) or ""

    def release(self, document: DocumentHandle) -> None:
        # Nothing is cached per handle.
        pass

    def _page_text(self, document: DocumentHandle, page_number: int):
        pages = self._documents.get(document.source)
        if not pages or not 1 <= page_number <= len(pages):
            return None
        return pages[page_number - 1]
