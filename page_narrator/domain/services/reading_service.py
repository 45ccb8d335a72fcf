"""Reading service: the state machine driving a narration session."""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Literal, Optional

from ..entities.document import DocumentHandle, RasterImage
from ..entities.messages import (
    ErrorOutMessage,
    NoticeMessage,
    OutboundMessage,
    PageChangeMessage,
    SessionStateMessage,
)
from ..entities.progress import ReadingProgress
from ..entities.reading_session import ReadingSession, SessionSnapshot, SessionState
from ..entities.websocket_messages import ErrorCode
from ..errors import DocumentLoadError, PageRenderError, SynthesisError
from ..interfaces.page_provider import PageProvider
from ..interfaces.progress_repository import ProgressRepository
from .speech_gateway import SpeechGateway

logger = logging.getLogger(__name__)

Direction = Literal["next", "prev", "jump"]


class ReadingService:
    """
    Per-document service that owns the reading session state machine.

    This service owns:
    - Session state (document, page, extracted text, reading/muted flags)
    - The single narration task (at most one gateway operation at a time)
    - Auto-advance across page boundaries when narration completes
    - Emitting state changes to the UI layer via a bounded async queue

    States: idle -> loading -> ready <-> reading, plus error when a
    document fails to load. Every transition runs under one asyncio lock,
    and navigation always cancels narration before loading the new page.

    The service is unit-testable without sockets or audio devices.
    """

    def __init__(
        self,
        page_provider: PageProvider,
        gateway: SpeechGateway,
        progress_repository: Optional[ProgressRepository] = None,
        outbound_queue_size: int = 100,
    ):
        self.page_provider = page_provider
        self.gateway = gateway
        self.progress_repository = progress_repository

        self.session: ReadingSession = ReadingSession()
        self.current_image: Optional[RasterImage] = None

        # Oldest messages are dropped when full, see _publish.
        self.outbound_queue: asyncio.Queue[OutboundMessage] = asyncio.Queue(maxsize=outbound_queue_size)

        self._lock = asyncio.Lock()
        self._narration_task: Optional[asyncio.Task] = None

        logger.info(f"ReadingService created for session {self.session.id}")

    @property
    def state(self) -> SessionState:
        return self.session.state

    def snapshot(self) -> SessionSnapshot:
        """Get a read-only view of the current session."""
        return self.session.snapshot()

    # ===== Public API methods (called by the controller) =====

    async def open(self, document: DocumentHandle) -> SessionSnapshot:
        """
        Open a document and display its first page.

        Any document already open is closed first. A provider failure
        leaves the session in the error state until open is called again.

        Args:
            document: Handle of the document to open
        """
        async with self._lock:
            if self.session.document is not None or self.session.state != SessionState.IDLE:
                await self._close_locked()

            self.session = ReadingSession(
                document=document,
                state=SessionState.LOADING,
                is_muted=self.session.is_muted,
            )
            logger.info(f"Opening document {document.document_id} ({document.source})")
            self._publish_state()

            try:
                total_pages = await asyncio.to_thread(self.page_provider.total_pages, document)
                if total_pages < 1:
                    raise DocumentLoadError(f"Document {document.document_id} has no pages")
            except DocumentLoadError as e:
                self._fail_open(str(e))
                return self.snapshot()
            except Exception as e:
                logger.error(f"Unexpected error loading document {document.document_id}: {e}", exc_info=True)
                self._fail_open(f"Could not load document: {e}")
                return self.snapshot()

            self.session.total_pages = total_pages
            self.session.opened_at = datetime.now(timezone.utc)
            await self._load_page(1)

            self.session.state = SessionState.READY
            logger.info(f"Document {document.document_id} ready with {total_pages} pages")
            self._publish_state()
            return self.snapshot()

    async def close(self) -> SessionSnapshot:
        """Stop narration, release the document and return to idle."""
        async with self._lock:
            await self._close_locked()
            return self.snapshot()

    async def go_to_page(self, page: int, direction: Optional[Direction] = None) -> bool:
        """
        Display another page.

        Out-of-range pages and the current page are ignored. If narration
        is active it is cancelled first and resumes on the new page.

        Args:
            page: 1-indexed target page
            direction: Optional hint for the UI; inferred when omitted

        Returns:
            True if the page changed, False for a no-op
        """
        async with self._lock:
            if self.session.state not in (SessionState.READY, SessionState.READING):
                logger.debug(f"Ignoring navigation to page {page} in state {self.session.state.value}")
                return False

            if not 1 <= page <= self.session.total_pages or page == self.session.current_page:
                logger.debug(
                    f"Ignoring navigation to page {page}, "
                    f"valid range: 1-{self.session.total_pages}, current {self.session.current_page}"
                )
                return False

            old_page = self.session.current_page
            was_reading = self.session.state == SessionState.READING
            if was_reading:
                await self._stop_narration()
                self.session.state = SessionState.READY

            await self._load_page(page)
            logger.info(f"Page change: {old_page} → {page}")
            self._publish(PageChangeMessage(page=page, direction=direction or _direction(old_page, page)))

            if was_reading:
                self._start_narration()

            self._publish_state()
            return True

    async def toggle_reading(self) -> bool:
        """
        Start narration in ready, stop it in reading.

        Returns:
            True if narration is active afterwards
        """
        async with self._lock:
            if self.session.state == SessionState.READY:
                logger.info(f"Starting narration at page {self.session.current_page}")
                self._start_narration()
                self._publish_state()
            elif self.session.state == SessionState.READING:
                logger.info(f"Stopping narration at page {self.session.current_page}")
                self.session.is_reading = False
                self.session.state = SessionState.READY
                await self._stop_narration()
                self._publish_state()
            else:
                logger.debug(f"Ignoring toggle reading in state {self.session.state.value}")

            return self.session.is_reading

    def toggle_mute(self) -> bool:
        """
        Flip the muted flag and forward it to the gateway.

        Returns:
            The new muted flag
        """
        muted = not self.session.is_muted
        self.session.is_muted = muted
        self.gateway.set_muted(muted)
        logger.info(f"Narration {'muted' if muted else 'unmuted'}")
        self._publish_state()
        return muted

    # ===== Narration =====

    def _start_narration(self) -> None:
        self.session.is_reading = True
        self.session.state = SessionState.READING
        self.session.touch()
        self._narration_task = asyncio.create_task(
            self._narrate(),
            name=f"narration-{self.session.id}",
        )

    async def _stop_narration(self) -> None:
        task = self._narration_task
        self._narration_task = None

        # Audio stops before the narration task is torn down.
        await self.gateway.cancel()

        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

    async def _narrate(self) -> None:
        """Speak the current page, then auto-advance until the last page."""
        me = asyncio.current_task()
        try:
            while True:
                page = self.session.current_page
                text = self.session.current_text
                language_code = self.session.document.language_code

                try:
                    result = await self.gateway.speak(text, language_code, muted=self.session.is_muted)
                except SynthesisError as e:
                    async with self._lock:
                        if self._narration_task is me:
                            self._fail_narration(page, e)
                    return

                async with self._lock:
                    if self._narration_task is not me or not self.session.is_reading:
                        return

                    if not result.completed:
                        logger.info(f"Narration of page {page} was interrupted")
                        self._finish_narration()
                        return

                    if page >= self.session.total_pages:
                        logger.info(f"Reached end of document at page {page}")
                        self._finish_narration()
                        self._publish(NoticeMessage("Reached the end of the document"))
                        return

                    await self._load_page(page + 1)
                    logger.info(f"Auto-advance: {page} → {page + 1}")
                    self._publish(PageChangeMessage(page=page + 1, direction="next", automatic=True))
                    self._publish_state()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Unexpected narration error: {e}", exc_info=True)
            async with self._lock:
                if self._narration_task is me:
                    self._finish_narration()
                    self._publish(ErrorOutMessage(ErrorCode.INTERNAL_ERROR, f"Narration stopped: {e}"))

    def _finish_narration(self) -> None:
        self._narration_task = None
        self.session.is_reading = False
        self.session.state = SessionState.READY
        self.session.touch()
        self._publish_state()

    def _fail_narration(self, page: int, error: SynthesisError) -> None:
        logger.error(f"Narration failed on page {page}: {error}")
        self._finish_narration()
        self._publish(NoticeMessage("Narration is unavailable right now; the page is still displayed"))
        self._publish(ErrorOutMessage(ErrorCode.SYNTHESIS_FAILED, str(error)))

    # ===== Page loading =====

    async def _load_page(self, page: int) -> None:
        """Extract text and render raster for a page, then make it current."""
        document = self.session.document

        try:
            text = await asyncio.to_thread(self.page_provider.extract_text, document, page)
        except Exception as e:
            logger.error(f"Text extraction raised for page {page}: {e}", exc_info=True)
            text = ""

        try:
            image = await asyncio.to_thread(self.page_provider.render_page, document, page)
            render_failed = False
        except PageRenderError as e:
            logger.warning(f"Could not render page {page}: {e}")
            image = None
            render_failed = True
            self._publish(ErrorOutMessage(ErrorCode.PAGE_RENDER_FAILED, str(e)))

        self.session.current_page = page
        self.session.current_text = text or ""
        self.session.page_render_failed = render_failed
        self.session.touch()
        self.current_image = image

        await self._record_progress()

    async def _record_progress(self) -> None:
        if self.progress_repository is None or self.session.document is None:
            return

        progress = ReadingProgress.for_page(
            document_id=self.session.document.document_id,
            page=self.session.current_page,
            total_pages=self.session.total_pages,
        )
        try:
            await self.progress_repository.save_progress(progress)
        except Exception as e:
            logger.error(f"Error saving reading progress: {e}", exc_info=True)

    # ===== Lifecycle helpers =====

    def _fail_open(self, message: str) -> None:
        logger.error(f"Failed to open document: {message}")
        self.session.state = SessionState.ERROR
        self.session.total_pages = 0
        self.session.error_message = message
        self._publish(ErrorOutMessage(ErrorCode.DOCUMENT_LOAD_FAILED, message))
        self._publish_state()

    async def _close_locked(self) -> None:
        document = self.session.document
        self.session.is_reading = False
        await self._stop_narration()

        if document is not None:
            try:
                await asyncio.to_thread(self.page_provider.release, document)
            except Exception as e:
                logger.error(f"Error releasing document {document.document_id}: {e}", exc_info=True)
            logger.info(f"Closed document {document.document_id}")

        self.session = ReadingSession(is_muted=self.session.is_muted)
        self.current_image = None
        self._publish_state()

    # ===== Outbound message helpers =====

    def _publish_state(self) -> None:
        self._publish(SessionStateMessage(self.snapshot()))

    def _publish(self, message: OutboundMessage) -> None:
        """Queue a message for the UI, dropping the oldest when full."""
        try:
            self.outbound_queue.put_nowait(message)
        except asyncio.QueueFull:
            dropped = self.outbound_queue.get_nowait()
            logger.debug(f"Outbound queue full, dropped {type(dropped).__name__}")
            self.outbound_queue.put_nowait(message)


def _direction(old_page: int, new_page: int) -> Direction:
    if new_page == old_page + 1:
        return "next"
    if new_page == old_page - 1:
        return "prev"
    return "jump"
