"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from pydantic import BaseModel, Field

from ..domain.entities import ReadingProgress, SessionSnapshot
from ..domain.interfaces.progress_repository import ProgressRepository
from ..domain.services import ReadingService, SpeechGateway
from ..infrastructure.dynamodb_progress_repository import DynamoDBProgressRepository
from ..infrastructure.local_progress_repository import LocalProgressRepository
from ..infrastructure.pdf_page_provider import PdfPageProvider
from ..infrastructure.polly_synthesizer import PollySynthesizer
from ..infrastructure.pyttsx3_synthesizer import Pyttsx3Synthesizer
from .config import Settings, settings
from .controller import SessionController

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


class OpenDocumentRequest(BaseModel):
    """Body of POST /session/open."""

    source: str = Field(min_length=1, description="Local path, s3:// URI or http(s) URL")
    title: Optional[str] = None
    language_code: Optional[str] = None


def build_controller(config: Settings) -> SessionController:
    """Wire providers, gateway and reading service from settings."""
    local = Pyttsx3Synthesizer(rate=config.local_speech_rate)
    remote = None
    sink = None
    if config.remote_synthesis_enabled:
        # PyAudio loads PortAudio on import, so only pull it in when needed
        from ..infrastructure.pyaudio_sink import PyAudioSink

        remote = PollySynthesizer(
            region_name=config.aws_region,
            engine=config.polly_engine,
            sample_rate_hz=config.sample_rate_hz,
            voice_id=config.polly_voice_id,
        )
        sink = PyAudioSink(sample_rate_hz=config.sample_rate_hz)

    gateway = SpeechGateway(
        local=local,
        remote=remote,
        sink=sink,
        chunk_size=config.synthesis_chunk_size,
    )

    progress_repository: ProgressRepository
    if config.progress_backend == "dynamodb":
        progress_repository = DynamoDBProgressRepository(
            table_name=config.progress_table_name,
            region_name=config.aws_region,
        )
    else:
        progress_repository = LocalProgressRepository()

    reading_service = ReadingService(
        page_provider=PdfPageProvider(render_dpi=config.render_dpi, region_name=config.aws_region),
        gateway=gateway,
        progress_repository=progress_repository,
        outbound_queue_size=config.outbound_queue_size,
    )
    return SessionController(
        reading_service=reading_service,
        progress_repository=progress_repository,
        default_language_code=config.default_language_code,
    )


def get_controller(request: Request) -> SessionController:
    return request.app.state.controller


router = APIRouter()


@router.get("/health")
async def health_check(controller: SessionController = Depends(get_controller)):
    """Health check endpoint."""
    return controller.get_health_status()


@router.get("/session", response_model=SessionSnapshot)
async def get_session(controller: SessionController = Depends(get_controller)):
    """Current session snapshot."""
    return controller.snapshot()


@router.post("/session/open", response_model=SessionSnapshot)
async def open_document(
    body: OpenDocumentRequest,
    controller: SessionController = Depends(get_controller),
):
    """Open a document and display its first page.

    Load failures are reported through the snapshot's ``state`` and
    ``error_message`` fields rather than an HTTP error.
    """
    try:
        return await controller.open(body.source, body.title, body.language_code)
    except Exception as e:
        logger.error(f"Error opening document {body.source}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/session/close", response_model=SessionSnapshot)
async def close_document(controller: SessionController = Depends(get_controller)):
    return await controller.close()


@router.post("/session/next", response_model=SessionSnapshot)
async def next_page(controller: SessionController = Depends(get_controller)):
    return await controller.next_page()


@router.post("/session/previous", response_model=SessionSnapshot)
async def previous_page(controller: SessionController = Depends(get_controller)):
    return await controller.previous_page()


@router.post("/session/pages/{page}", response_model=SessionSnapshot)
async def go_to_page(page: int, controller: SessionController = Depends(get_controller)):
    """Jump to a page; out-of-range pages leave the session unchanged."""
    return await controller.go_to_page(page)


@router.post("/session/reading/toggle", response_model=SessionSnapshot)
async def toggle_reading(controller: SessionController = Depends(get_controller)):
    return await controller.toggle_reading()


@router.post("/session/mute/toggle", response_model=SessionSnapshot)
async def toggle_mute(controller: SessionController = Depends(get_controller)):
    return controller.toggle_mute()


@router.get("/session/page.png")
async def get_page_image(controller: SessionController = Depends(get_controller)):
    """Raster of the displayed page."""
    image = controller.current_page_image()
    if image is None:
        raise HTTPException(status_code=404, detail="No page image available")
    return Response(content=image.data, media_type=image.media_type)


@router.get("/progress", response_model=list[ReadingProgress])
async def list_progress(controller: SessionController = Depends(get_controller)):
    """Reading progress of every document, most recently read first."""
    try:
        return await controller.list_progress()
    except Exception as e:
        logger.error(f"Error listing reading progress: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/progress/{document_id}", response_model=ReadingProgress)
async def get_progress(document_id: str, controller: SessionController = Depends(get_controller)):
    """Reading progress of one document."""
    try:
        return await controller.get_progress(document_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error getting progress for document {document_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """
    WebSocket endpoint for live session updates.

    Server → client: ``session.state``, ``page.change``, ``server_notice``
    and ``error`` JSON messages. Client → server: ``page.next``,
    ``page.prev``, ``page.goto`` (with ``page``), ``reading.toggle``,
    ``mute.toggle`` and ``session.close``.
    """
    await websocket.accept()
    controller: SessionController = websocket.app.state.controller
    await controller.handle_websocket_connection(websocket)


def create_app(controller: Optional[SessionController] = None) -> FastAPI:
    """Create the FastAPI app.

    Args:
        controller: Pre-built controller; when omitted one is wired from
            settings at startup.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "controller", None) is None:
            app.state.controller = build_controller(settings)
        logger.info(f"{settings.app_name} {settings.app_version} started")
        yield
        await app.state.controller.close()
        logger.info("Session closed on shutdown")

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.controller = controller

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router)
    return app


# Create FastAPI app instance
app = create_app()
