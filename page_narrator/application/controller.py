"""Session controller: the public API the UI layer talks to."""

import logging
from typing import Optional

from fastapi import WebSocket

from ..domain.entities import DocumentHandle, RasterImage, ReadingProgress, SessionSnapshot
from ..domain.interfaces.progress_repository import ProgressRepository
from ..domain.services import ReadingService
from .websocket_handler import WebSocketHandler

logger = logging.getLogger(__name__)


class SessionController:
    """
    Thin façade over the reading service.

    The controller is injected with the reading service and its providers
    and exposes the operations the REST and WebSocket endpoints need,
    keeping the API layer thin. Page text and page count are read-only to
    callers; only the reading service mutates them.
    """

    def __init__(
        self,
        reading_service: ReadingService,
        progress_repository: Optional[ProgressRepository] = None,
        default_language_code: str = "pt-BR",
    ):
        """
        Initialize the controller with injected dependencies.

        Args:
            reading_service: The service owning the session state machine
            progress_repository: Repository used to look up reading progress
            default_language_code: Language used when open() is given none
        """
        self.reading_service = reading_service
        self.progress_repository = progress_repository
        self.default_language_code = default_language_code

        logger.info("SessionController initialized")

    async def open(
        self,
        source: str,
        title: Optional[str] = None,
        language_code: Optional[str] = None,
    ) -> SessionSnapshot:
        """
        Open a document, closing any document already open.

        Args:
            source: Local path, s3:// URI or http(s) URL of the document
            title: Display title
            language_code: Narration language; defaults to the configured one

        Returns:
            Snapshot after opening; its state is "error" if loading failed
        """
        document = DocumentHandle(
            source=source,
            title=title or "Untitled",
            language_code=language_code or self.default_language_code,
        )
        return await self.reading_service.open(document)

    async def close(self) -> SessionSnapshot:
        return await self.reading_service.close()

    async def go_to_page(self, page: int) -> SessionSnapshot:
        await self.reading_service.go_to_page(page)
        return self.snapshot()

    async def next_page(self) -> SessionSnapshot:
        """Move forward one page; a no-op on the last page."""
        session = self.reading_service.session
        if session.current_page < session.total_pages:
            await self.reading_service.go_to_page(session.current_page + 1, direction="next")
        return self.snapshot()

    async def previous_page(self) -> SessionSnapshot:
        """Move back one page; a no-op on the first page."""
        session = self.reading_service.session
        if session.current_page > 1:
            await self.reading_service.go_to_page(session.current_page - 1, direction="prev")
        return self.snapshot()

    async def toggle_reading(self) -> SessionSnapshot:
        await self.reading_service.toggle_reading()
        return self.snapshot()

    def toggle_mute(self) -> SessionSnapshot:
        self.reading_service.toggle_mute()
        return self.snapshot()

    def snapshot(self) -> SessionSnapshot:
        return self.reading_service.snapshot()

    def current_page_image(self) -> Optional[RasterImage]:
        """Raster of the displayed page, or None if nothing could be rendered."""
        return self.reading_service.current_image

    async def get_progress(self, document_id: str) -> ReadingProgress:
        """
        Look up reading progress for a document.

        Raises:
            ValueError: If no progress is stored for the document.
        """
        if self.progress_repository is None:
            raise ValueError("Reading progress is not being recorded")
        return await self.progress_repository.get_progress(document_id)

    async def list_progress(self) -> list[ReadingProgress]:
        if self.progress_repository is None:
            return []
        return await self.progress_repository.list_progress()

    async def handle_websocket_connection(self, websocket: WebSocket) -> None:
        """Stream session updates to a connected client and apply its commands."""
        logger.info(f"Handling new WebSocket connection from {websocket.client}")
        handler = WebSocketHandler(controller=self)
        await handler.handle_websocket(websocket)

    def get_health_status(self) -> dict:
        """
        Get application health status.

        Returns:
            Dict containing health status information
        """
        service = self.reading_service
        gateway = service.gateway
        return {
            "status": "healthy",
            "session_state": service.state.value,
            "providers": {
                "page_provider": type(service.page_provider).__name__,
                "remote_synthesizer": type(gateway.remote).__name__ if gateway.remote else None,
                "local_synthesizer": type(gateway.local).__name__,
                "audio_sink": type(gateway.sink).__name__ if gateway.sink else None,
                "progress_repository": (
                    type(self.progress_repository).__name__ if self.progress_repository else None
                ),
            },
        }
