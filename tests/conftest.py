"""Shared fakes and fixtures for page narrator tests."""

import asyncio
from typing import Optional

import pytest

from page_narrator.domain.entities import RasterImage
from page_narrator.domain.errors import PageRenderError
from page_narrator.domain.services import ReadingService, SpeechGateway
from page_narrator.infrastructure.local_progress_repository import LocalProgressRepository


class FakeLocalSynthesizer:
    """Local synthesizer that records utterances and can be slowed down or broken."""

    def __init__(self, delay: float = 0.0, error: Optional[Exception] = None):
        self.delay = delay
        self.error = error
        self.calls: list[tuple[str, str]] = []
        self.stop_calls = 0
        self.muted_calls: list[bool] = []
        self.active = 0
        self.max_active = 0

    async def speak(self, text: str, language_code: str) -> None:
        self.calls.append((text, language_code))
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.error is not None:
                raise self.error
        finally:
            self.active -= 1

    def stop(self) -> None:
        self.stop_calls += 1

    def set_muted(self, muted: bool) -> None:
        self.muted_calls.append(muted)

    @property
    def texts(self) -> list[str]:
        return [text for text, _ in self.calls]


class FakeRemoteSynthesizer:
    """Remote synthesizer returning the UTF-8 bytes of each chunk."""

    def __init__(self, error: Optional[Exception] = None, payload: Optional[bytes] = None):
        self.error = error
        self.payload = payload
        self.calls: list[tuple[str, str]] = []

    async def synthesize(self, text: str, language_code: str) -> bytes:
        self.calls.append((text, language_code))
        if self.error is not None:
            raise self.error
        return self.payload if self.payload is not None else text.encode()


class FakeAudioSink:
    """Audio sink that records what it was asked to play."""

    def __init__(self, delay: float = 0.0, error: Optional[Exception] = None):
        self.delay = delay
        self.error = error
        self.played: list[tuple[bytes, bool]] = []
        self.stop_calls = 0
        self.muted_calls: list[bool] = []

    async def play(self, audio: bytes, muted: bool = False) -> None:
        self.played.append((audio, muted))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error

    def stop(self) -> None:
        self.stop_calls += 1

    def set_muted(self, muted: bool) -> None:
        self.muted_calls.append(muted)


class FakePageProvider:
    """Page provider over a list of page texts."""

    def __init__(self, pages: Optional[list[str]] = None):
        self.pages = list(pages) if pages is not None else ["Page one.", "Page two.", "Page three."]
        self.load_error: Optional[Exception] = None
        self.render_failures: set[int] = set()
        self.rendered: list[int] = []
        self.released: list[str] = []

    def total_pages(self, document) -> int:
        if self.load_error is not None:
            raise self.load_error
        return len(self.pages)

    def render_page(self, document, page_number: int) -> RasterImage:
        if page_number in self.render_failures:
            raise PageRenderError(f"Cannot render page {page_number}")
        self.rendered.append(page_number)
        return RasterImage(
            page_number=page_number,
            width=10,
            height=10,
            data=f"png-{page_number}".encode(),
        )

    def extract_text(self, document, page_number: int) -> str:
        return self.pages[page_number - 1]

    def release(self, document) -> None:
        self.released.append(document.document_id)


class RecordingGateway(SpeechGateway):
    """Speech gateway that logs speak and cancel calls in order.

    Cancels are logged with whether an operation was active at the time.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.log: list[tuple] = []

    async def speak(self, text, language_code, muted=False):
        self.log.append(("speak", text))
        return await super().speak(text, language_code, muted=muted)

    async def cancel(self):
        self.log.append(("cancel", self.is_active))
        await super().cancel()


@pytest.fixture
def fake_local():
    return FakeLocalSynthesizer()


@pytest.fixture
def fake_remote():
    return FakeRemoteSynthesizer()


@pytest.fixture
def fake_sink():
    return FakeAudioSink()


@pytest.fixture
def page_provider():
    return FakePageProvider()


@pytest.fixture
def progress_repository():
    return LocalProgressRepository()


@pytest.fixture
def gateway(fake_local):
    return RecordingGateway(local=fake_local)


@pytest.fixture
def reading_service(page_provider, gateway, progress_repository):
    return ReadingService(
        page_provider=page_provider,
        gateway=gateway,
        progress_repository=progress_repository,
    )


@pytest.fixture
def wait_until():
    """Poll a predicate on the running loop until it holds."""

    async def _wait_until(predicate, timeout: float = 2.0, interval: float = 0.005):
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while not predicate():
            if loop.time() > deadline:
                raise AssertionError("Condition not met before timeout")
            await asyncio.sleep(interval)

    return _wait_until
