"""Progress Repository interface."""

from typing import Protocol, runtime_checkable

from ..entities.progress import ReadingProgress


@runtime_checkable
class ProgressRepository(Protocol):
    """Protocol defining the interface for reading progress repositories.

    This interface can be implemented by different storage backends
    (in-memory, DynamoDB, etc.) to keep per-document reading history.
    """

    async def save_progress(self, progress: ReadingProgress) -> None:
        """Save (insert or replace) progress for a document.

        Args:
            progress: The progress entity to save.
        """
        ...

    async def get_progress(self, document_id: str) -> ReadingProgress:
        """Retrieve progress for a document.

        Args:
            document_id: The unique identifier of the document.

        Returns:
            ReadingProgress: The stored progress.

        Raises:
            ValueError: If no progress is stored for the document.
        """
        ...

    async def list_progress(self) -> list[ReadingProgress]:
        """List progress for every document read so far."""
        ...
