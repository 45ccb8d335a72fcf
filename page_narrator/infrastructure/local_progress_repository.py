"""Local in-memory implementation of Progress Repository."""

from typing import Dict

from ..domain.entities.progress import ReadingProgress
from ..domain.interfaces.progress_repository import ProgressRepository


class LocalProgressRepository(ProgressRepository):
    """Local in-memory implementation of the Progress Repository.

    Stores progress in a dictionary keyed by document id for testing and
    development purposes.
    """

    def __init__(self):
        """Initialize the local progress repository with an empty dictionary."""
        self._progress: Dict[str, ReadingProgress] = {}

    async def save_progress(self, progress: ReadingProgress) -> None:
        """Save progress to the in-memory dictionary, replacing any previous entry.

        Args:
            progress: The progress entity to save.
        """
        self._progress[progress.document_id] = progress

    async def get_progress(self, document_id: str) -> ReadingProgress:
        """Retrieve progress by document ID from the in-memory dictionary.

        Args:
            document_id: The unique identifier of the document.

        Returns:
            ReadingProgress: The progress entity.

        Raises:
            ValueError: If no progress is stored for the document.
        """
        if document_id not in self._progress:
            raise ValueError(f"Progress for document {document_id} not found")

        return self._progress[document_id]

    async def list_progress(self) -> list[ReadingProgress]:
        """List progress for every document, most recently read first."""
        return sorted(self._progress.values(), key=lambda p: p.last_read, reverse=True)

    def clear(self) -> None:
        """Clear all progress entries."""
        self._progress.clear()
