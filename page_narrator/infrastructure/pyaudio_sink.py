"""Audio sink playing raw PCM through PyAudio."""

import asyncio
import logging
import threading
from typing import Optional

import pyaudio

from ..domain.errors import AudioPlaybackError

logger = logging.getLogger(__name__)

# Audio configuration
CHANNELS = 1
FORMAT = pyaudio.paInt16
SAMPLE_WIDTH = 2
CHUNK_SIZE = 1024


class PyAudioSink:
    """Plays signed 16-bit mono PCM on the default output device.

    Audio is written in CHUNK_SIZE-frame blocks from a worker thread so
    that ``stop`` and ``set_muted`` take effect between blocks.
    """

    def __init__(self, sample_rate_hz: int = 16000):
        self.sample_rate_hz = sample_rate_hz

        self._muted = False
        self._stop_event: Optional[threading.Event] = None
        self._play_lock = threading.Lock()

    async def play(self, audio: bytes, muted: bool = False) -> None:
        """Play PCM audio and return when it ends or is stopped.

        Raises:
            AudioPlaybackError: If the output device fails
        """
        self._muted = muted
        # One event per playback; a stopped worker stays stopped after the next play().
        stop_event = threading.Event()
        self._stop_event = stop_event
        try:
            await asyncio.to_thread(self._play_sync, audio, stop_event)
        except asyncio.CancelledError:
            stop_event.set()
            raise

    def stop(self) -> None:
        if self._stop_event is not None:
            self._stop_event.set()

    def set_muted(self, muted: bool) -> None:
        self._muted = muted

    def _play_sync(self, audio: bytes, stop_event: threading.Event) -> None:
        # Whole samples only
        audio = audio[: len(audio) - len(audio) % SAMPLE_WIDTH]
        if not audio:
            return

        duration = len(audio) / SAMPLE_WIDTH / self.sample_rate_hz
        logger.debug(f"Playing {duration:.2f}s of audio at {self.sample_rate_hz} Hz")
        block_bytes = CHUNK_SIZE * SAMPLE_WIDTH * CHANNELS

        with self._play_lock:
            p = None
            stream = None
            try:
                p = pyaudio.PyAudio()
                stream = p.open(
                    format=FORMAT,
                    channels=CHANNELS,
                    rate=self.sample_rate_hz,
                    output=True,
                )
                for start in range(0, len(audio), block_bytes):
                    if stop_event.is_set():
                        logger.debug("Playback stopped")
                        break
                    block = audio[start : start + block_bytes]
                    if self._muted:
                        block = bytes(len(block))
                    stream.write(block)
            except OSError as e:
                raise AudioPlaybackError(f"Audio playback failed: {e}") from e
            finally:
                if stream is not None:
                    stream.stop_stream()
                    stream.close()
                if p is not None:
                    p.terminate()
