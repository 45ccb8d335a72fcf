"""PDF implementation of PageProvider using PyPDF2 and pdf2image."""

import io
import logging
import threading
from dataclasses import dataclass
from typing import Dict

import boto3
import httpx
from pdf2image import convert_from_bytes
from PyPDF2 import PdfReader

from ..domain.entities.document import DocumentHandle, RasterImage
from ..domain.errors import DocumentLoadError, PageRenderError
from ..domain.interfaces.page_provider import PageProvider

logger = logging.getLogger(__name__)


@dataclass
class _LoadedDocument:
    """Fetched bytes and parsed reader for one document."""

    content: bytes
    reader: PdfReader


class PdfPageProvider(PageProvider):
    """PDF implementation of the PageProvider protocol.

    Documents are fetched from a local path, an ``s3://bucket/key`` URI or
    an ``http(s)://`` URL, parsed once with PyPDF2 and cached by document
    id until released. Pages are rendered one at a time with pdf2image.
    """

    def __init__(
        self,
        render_dpi: int = 108,
        region_name: str = "us-west-2",
        http_timeout: float = 30.0,
        s3_client=None,
    ):
        """Initialize the PDF page provider.

        Args:
            render_dpi: Resolution used to rasterize pages.
            region_name: AWS region for S3 downloads.
            http_timeout: Timeout in seconds for HTTP downloads.
            s3_client: Optional pre-built boto3 S3 client.
        """
        self.render_dpi = render_dpi
        self.region_name = region_name
        self.http_timeout = http_timeout
        self._s3_client = s3_client
        self._documents: Dict[str, _LoadedDocument] = {}
        self._lock = threading.Lock()

    def total_pages(self, document: DocumentHandle) -> int:
        """Return the page count of a PDF document.

        Raises:
            DocumentLoadError: If the PDF cannot be fetched or parsed.
        """
        loaded = self._load(document)
        try:
            return len(loaded.reader.pages)
        except Exception as e:
            raise DocumentLoadError(f"Could not count pages of {document.source}: {e}") from e

    def render_page(self, document: DocumentHandle, page_number: int) -> RasterImage:
        """Render one page to PNG.

        Raises:
            PageRenderError: If the page is out of range or rendering fails.
        """
        try:
            loaded = self._load(document)
        except DocumentLoadError as e:
            raise PageRenderError(str(e)) from e

        page_count = len(loaded.reader.pages)
        if not 1 <= page_number <= page_count:
            raise PageRenderError(f"Page {page_number} out of range 1-{page_count}")

        try:
            images = convert_from_bytes(
                loaded.content,
                dpi=self.render_dpi,
                first_page=page_number,
                last_page=page_number,
            )
        except Exception as e:
            raise PageRenderError(f"Could not render page {page_number} of {document.source}: {e}") from e

        if not images:
            raise PageRenderError(f"No image produced for page {page_number} of {document.source}")

        image = images[0]
        buffered = io.BytesIO()
        image.save(buffered, format="PNG")
        return RasterImage(
            page_number=page_number,
            width=image.width,
            height=image.height,
            format="PNG",
            data=buffered.getvalue(),
        )

    def extract_text(self, document: DocumentHandle, page_number: int) -> str:
        """Extract page text with whitespace collapsed; empty string on failure."""
        try:
            loaded = self._load(document)
            raw = loaded.reader.pages[page_number - 1].extract_text() or ""
        except Exception as e:
            logger.warning(f"Text extraction failed for page {page_number} of {document.source}: {e}")
            return ""

        return " ".join(raw.split())

    def release(self, document: DocumentHandle) -> None:
        """Forget the cached PDF for a document."""
        with self._lock:
            self._documents.pop(document.document_id, None)

    def _load(self, document: DocumentHandle) -> _LoadedDocument:
        with self._lock:
            cached = self._documents.get(document.document_id)
        if cached is not None:
            return cached

        content = self._fetch(document.source)
        try:
            reader = PdfReader(io.BytesIO(content))
        except Exception as e:
            raise DocumentLoadError(f"Could not parse PDF {document.source}: {e}") from e

        loaded = _LoadedDocument(content=content, reader=reader)
        with self._lock:
            self._documents[document.document_id] = loaded
        logger.info(f"Loaded PDF {document.source} ({len(content)} bytes)")
        return loaded

    def _fetch(self, source: str) -> bytes:
        """Download or read the raw PDF bytes."""
        try:
            if source.startswith("s3://"):
                bucket_name, object_key = _split_s3_uri(source)
                response = self._get_s3_client().get_object(Bucket=bucket_name, Key=object_key)
                return response["Body"].read()

            if source.startswith(("http://", "https://")):
                response = httpx.get(source, timeout=self.http_timeout, follow_redirects=True)
                response.raise_for_status()
                return response.content

            with open(source, "rb") as f:
                return f.read()
        except DocumentLoadError:
            raise
        except Exception as e:
            raise DocumentLoadError(f"Could not fetch document {source}: {e}") from e

    def _get_s3_client(self):
        if self._s3_client is None:
            self._s3_client = boto3.client("s3", region_name=self.region_name)
        return self._s3_client


def _split_s3_uri(uri: str) -> tuple[str, str]:
    s3_path = uri.replace("s3://", "", 1)
    bucket_name, _, object_key = s3_path.partition("/")
    if not bucket_name or not object_key:
        raise DocumentLoadError(f"Invalid S3 URI: {uri}")
    return bucket_name, object_key
