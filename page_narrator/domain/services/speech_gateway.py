"""Speech synthesis gateway with remote-first, local-fallback narration."""

import asyncio
import logging
from typing import Optional

from ..entities.speech import SpeechBackend, SpeechResult
from ..errors import SynthesisError
from ..interfaces.speech import AudioSink, LocalSynthesizer, RemoteSynthesizer
from .text_chunking import chunk_text

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 3000


class SpeechGateway:
    """
    Single entry point for narrating text aloud.

    The gateway owns at most one synthesis+playback operation at a time.
    Text is first sent to the remote synthesizer in bounded chunks, the
    audio is concatenated and played through the sink; if any part of that
    path fails the local synthesizer speaks the full text instead.

    ``speak`` returns a SpeechResult whose ``completed`` flag is False when
    the operation was stopped through ``cancel`` (or superseded by a newer
    ``speak``). Cancelling the task awaiting ``speak`` also stops playback.
    """

    def __init__(
        self,
        local: LocalSynthesizer,
        remote: Optional[RemoteSynthesizer] = None,
        sink: Optional[AudioSink] = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        if remote is not None and sink is None:
            raise ValueError("A remote synthesizer needs an audio sink to play its output")

        self.local = local
        self.remote = remote
        self.sink = sink
        self.chunk_size = chunk_size

        self._muted = False
        self._task: Optional[asyncio.Task] = None
        self._cancelled_task: Optional[asyncio.Task] = None

    @property
    def is_active(self) -> bool:
        """True while a synthesis/playback operation is in flight."""
        return self._task is not None and not self._task.done()

    @property
    def muted(self) -> bool:
        return self._muted

    async def speak(self, text: str, language_code: str, muted: bool = False) -> SpeechResult:
        """
        Narrate text and wait for playback to finish.

        Args:
            text: Text to narrate; blank text resolves immediately
            language_code: BCP-47 language code for both backends
            muted: Initial mute state for this operation

        Returns:
            SpeechResult describing how the text was handled

        Raises:
            SynthesisError: If both the remote and the local path fail
        """
        # Any previous operation is stopped before a new one starts.
        await self.cancel()
        self.set_muted(muted)

        if not text or not text.strip():
            logger.debug("Nothing to narrate, resolving immediately")
            return SpeechResult(completed=True, backend=SpeechBackend.NONE)

        task = asyncio.create_task(self._run(text, language_code))
        self._task = task
        try:
            return await task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            caller_cancelled = current is not None and current.cancelling() > 0
            if self._cancelled_task is task and not caller_cancelled:
                logger.info("Narration cancelled before playback finished")
                return SpeechResult(completed=False)
            raise
        finally:
            if self._task is task:
                self._task = None

    async def cancel(self) -> None:
        """Stop the active operation, if any. Idempotent and never raises."""
        task = self._task
        if task is None or task.done():
            return

        logger.info("Cancelling active narration")
        self._cancelled_task = task
        self._stop_outputs()
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling() > 0:
                raise
        except Exception as e:
            logger.debug(f"Cancelled narration ended with error: {e}")
        finally:
            if self._task is task:
                self._task = None

    def set_muted(self, muted: bool) -> None:
        """Apply mute to ongoing playback and to future utterances."""
        self._muted = muted
        if self.sink is not None:
            self.sink.set_muted(muted)
        self.local.set_muted(muted)

    async def _run(self, text: str, language_code: str) -> SpeechResult:
        try:
            if self.remote is not None:
                try:
                    chunks = await self._speak_remote(text, language_code)
                    return SpeechResult(
                        completed=True,
                        backend=SpeechBackend.REMOTE,
                        chunks=chunks,
                    )
                except asyncio.CancelledError:
                    raise
                except Exception as e:
                    logger.warning(f"Remote synthesis failed, falling back to local synthesizer: {e}")

            await self._speak_local(text, language_code)
            return SpeechResult(completed=True, backend=SpeechBackend.LOCAL)
        except asyncio.CancelledError:
            self._stop_outputs()
            raise

    async def _speak_remote(self, text: str, language_code: str) -> int:
        chunks = chunk_text(text, self.chunk_size)
        audio = bytearray()

        # One request at a time, in text order.
        for index, chunk in enumerate(chunks, start=1):
            logger.debug(f"Requesting remote audio for chunk {index}/{len(chunks)} ({len(chunk)} chars)")
            payload = await self.remote.synthesize(chunk, language_code)
            if not payload:
                raise SynthesisError(f"Remote synthesis returned no audio for chunk {index}/{len(chunks)}")
            audio.extend(payload)

        logger.info(f"Playing {len(audio)} bytes of remote audio from {len(chunks)} chunk(s)")
        await self.sink.play(bytes(audio), muted=self._muted)
        return len(chunks)

    async def _speak_local(self, text: str, language_code: str) -> None:
        logger.info(f"Speaking {len(text)} chars with local synthesizer ({language_code})")
        try:
            await self.local.speak(text, language_code)
        except SynthesisError:
            raise
        except Exception as e:
            raise SynthesisError(f"Local synthesis failed: {e}") from e

    def _stop_outputs(self) -> None:
        for output in (self.sink, self.local):
            if output is None:
                continue
            try:
                output.stop()
            except Exception as e:
                logger.error(f"Error stopping {type(output).__name__}: {e}", exc_info=True)
