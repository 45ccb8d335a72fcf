"""Local speech synthesizer using the operating system's TTS via pyttsx3."""

import asyncio
import logging
import threading
from typing import Optional

import pyttsx3

from ..domain.errors import SynthesisError

logger = logging.getLogger(__name__)


class Pyttsx3Synthesizer:
    """Local fallback synthesizer.

    Speaks directly to the default output device. Each utterance runs in a
    worker thread; ``stop`` interrupts it from the event loop.
    """

    def __init__(self, rate: int = 180, volume: float = 1.0, voice_id: Optional[str] = None):
        self.rate = rate
        self.volume = volume
        self.voice_id = voice_id

        self._muted = False
        self._engine = None
        self._engine_lock = threading.Lock()
        self._speak_lock = threading.Lock()

    async def speak(self, text: str, language_code: str) -> None:
        """Speak text and return when the utterance ends or is stopped.

        Raises:
            SynthesisError: If the engine cannot be created or fails
        """
        await asyncio.to_thread(self._speak_sync, text, language_code)

    def stop(self) -> None:
        engine = self._engine
        if engine is None:
            return
        try:
            engine.stop()
        except Exception as e:
            logger.warning(f"Could not stop local speech engine: {e}")

    def set_muted(self, muted: bool) -> None:
        """Muted utterances run silently at zero volume."""
        self._muted = muted
        engine = self._engine
        if engine is not None:
            engine.setProperty("volume", 0.0 if muted else self.volume)

    def _speak_sync(self, text: str, language_code: str) -> None:
        with self._speak_lock:
            try:
                engine = self._get_engine()
                engine.setProperty("rate", self.rate)
                engine.setProperty("volume", 0.0 if self._muted else self.volume)
                voice = self.voice_id or self._voice_for(engine, language_code)
                if voice:
                    engine.setProperty("voice", voice)

                logger.debug(f"Local engine speaking {len(text)} chars")
                engine.say(text)
                engine.runAndWait()
            except SynthesisError:
                raise
            except Exception as e:
                raise SynthesisError(f"Local speech engine failed: {e}") from e

    def _get_engine(self):
        with self._engine_lock:
            if self._engine is None:
                try:
                    self._engine = pyttsx3.init()
                except Exception as e:
                    raise SynthesisError(f"Could not initialize local speech engine: {e}") from e
                logger.info("Local speech engine initialized")
            return self._engine

    @staticmethod
    def _voice_for(engine, language_code: str) -> Optional[str]:
        """Find an installed voice for the language, or None for the default."""
        wanted = language_code.lower().replace("_", "-")
        prefix = wanted.split("-")[0]
        fallback = None

        for voice in engine.getProperty("voices") or []:
            languages = []
            for lang in getattr(voice, "languages", None) or []:
                if isinstance(lang, bytes):
                    lang = lang.decode("utf-8", errors="ignore")
                languages.append(str(lang).lower().strip("\x05 ").replace("_", "-"))
            candidates = languages + [str(getattr(voice, "id", "")).lower()]

            if any(wanted in candidate for candidate in candidates):
                return voice.id
            if fallback is None and any(candidate.startswith(prefix) for candidate in languages):
                fallback = voice.id

        return fallback
