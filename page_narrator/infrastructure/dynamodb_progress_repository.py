"""DynamoDB implementation of Progress Repository."""

from datetime import datetime
from typing import Any, Dict

import aioboto3

from ..domain.entities.progress import ReadingProgress
from ..domain.interfaces.progress_repository import ProgressRepository


class DynamoDBProgressRepository(ProgressRepository):
    """DynamoDB repository for per-document reading progress.

    The table uses ``document_id`` as its partition key.
    """

    def __init__(self, table_name: str, region_name: str = "us-east-1"):
        """Initialize the DynamoDB progress repository.

        Args:
            table_name: The name of the DynamoDB table.
            region_name: AWS region name (default: us-east-1).
        """
        self.table_name = table_name
        self.region_name = region_name
        self._session = aioboto3.Session()

    async def save_progress(self, progress: ReadingProgress) -> None:
        """Save progress to DynamoDB, replacing any previous item.

        Args:
            progress: The progress entity to save.
        """
        async with self._session.resource("dynamodb", region_name=self.region_name) as dynamodb:
            table = await dynamodb.Table(self.table_name)
            await table.put_item(Item=self._progress_to_item(progress))

    async def get_progress(self, document_id: str) -> ReadingProgress:
        """Retrieve progress for a document from DynamoDB.

        Args:
            document_id: The unique identifier of the document.

        Returns:
            ReadingProgress: The progress entity.

        Raises:
            ValueError: If no progress is stored for the document.
        """
        async with self._session.resource("dynamodb", region_name=self.region_name) as dynamodb:
            table = await dynamodb.Table(self.table_name)
            response = await table.get_item(Key={"document_id": document_id})

            if "Item" not in response:
                raise ValueError(f"Progress for document {document_id} not found")

            return self._item_to_progress(response["Item"])

    async def list_progress(self) -> list[ReadingProgress]:
        """Scan the table and return every progress entry, most recent first."""
        items: list[Dict[str, Any]] = []
        async with self._session.resource("dynamodb", region_name=self.region_name) as dynamodb:
            table = await dynamodb.Table(self.table_name)
            scan_kwargs: Dict[str, Any] = {}
            while True:
                response = await table.scan(**scan_kwargs)
                items.extend(response.get("Items", []))
                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    break
                scan_kwargs["ExclusiveStartKey"] = last_key

        progress = [self._item_to_progress(item) for item in items]
        return sorted(progress, key=lambda p: p.last_read, reverse=True)

    def _progress_to_item(self, progress: ReadingProgress) -> Dict[str, Any]:
        """Convert a progress entity to a DynamoDB item."""
        return {
            "document_id": progress.document_id,
            "progress": progress.progress,
            "last_page": progress.last_page,
            "total_pages": progress.total_pages,
            "last_read": progress.last_read.isoformat(),
        }

    def _item_to_progress(self, item: Dict[str, Any]) -> ReadingProgress:
        """Convert a DynamoDB item to a progress entity.

        Numbers come back from DynamoDB as Decimal.
        """
        return ReadingProgress(
            document_id=item["document_id"],
            progress=int(item["progress"]),
            last_page=int(item["last_page"]),
            total_pages=int(item["total_pages"]),
            last_read=datetime.fromisoformat(item["last_read"]),
        )
