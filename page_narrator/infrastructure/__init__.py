"""Infrastructure layer components."""

from .dynamodb_progress_repository import DynamoDBProgressRepository
from .local_page_provider import LocalPageProvider
from .local_progress_repository import LocalProgressRepository
from .pdf_page_provider import PdfPageProvider

__all__ = [
    "DynamoDBProgressRepository",
    "LocalPageProvider",
    "LocalProgressRepository",
    "PdfPageProvider",
]
