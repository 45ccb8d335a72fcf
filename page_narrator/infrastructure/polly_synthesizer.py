"""Amazon Polly remote synthesizer."""

import asyncio
import logging
import time
from typing import Dict, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..domain.errors import SynthesisError

logger = logging.getLogger(__name__)


class PollySynthesizer:
    """Remote synthesizer backed by Amazon Polly.

    Returns signed 16-bit little-endian mono PCM so payloads from several
    chunks can be concatenated and played as one stream.
    """

    # Per-request character limit for plain text input
    MAX_TEXT_LENGTH = 3000

    # Default voice per language
    VOICES: Dict[str, str] = {
        "pt-BR": "Camila",
        "pt-PT": "Ines",
        "en-US": "Joanna",
        "en-GB": "Amy",
        "es-ES": "Lucia",
        "es-US": "Lupe",
        "fr-FR": "Lea",
        "de-DE": "Vicki",
        "it-IT": "Bianca",
    }

    def __init__(
        self,
        region_name: str = "us-west-2",
        engine: str = "neural",
        sample_rate_hz: int = 16000,
        voice_id: Optional[str] = None,
        client=None,
    ):
        """Initialize the Polly synthesizer.

        Args:
            region_name: AWS region of the Polly endpoint
            engine: Polly engine ("standard" or "neural")
            sample_rate_hz: PCM sample rate (8000 or 16000)
            voice_id: Voice override used for every language
            client: Optional pre-built boto3 Polly client
        """
        self.region_name = region_name
        self.engine = engine
        self.sample_rate_hz = sample_rate_hz
        self.voice_id = voice_id
        self._client = client or boto3.client("polly", region_name=region_name)

    async def synthesize(self, text: str, language_code: str) -> bytes:
        """Synthesize one chunk of text to PCM.

        Raises:
            SynthesisError: If the request fails or the text is too long
        """
        if len(text) > self.MAX_TEXT_LENGTH:
            raise SynthesisError(
                f"Text of {len(text)} chars exceeds Polly limit of {self.MAX_TEXT_LENGTH}"
            )
        return await asyncio.to_thread(self._synthesize_sync, text, language_code)

    def voice_for(self, language_code: str) -> str:
        """Pick the voice for a language code."""
        if self.voice_id:
            return self.voice_id
        if language_code in self.VOICES:
            return self.VOICES[language_code]

        prefix = language_code.split("-")[0].lower()
        for code, voice in self.VOICES.items():
            if code.lower().startswith(prefix):
                return voice
        raise SynthesisError(f"No Polly voice configured for language {language_code}")

    def _synthesize_sync(self, text: str, language_code: str) -> bytes:
        start_time = time.time()
        voice_id = self.voice_for(language_code)

        try:
            response = self._client.synthesize_speech(
                Text=text,
                TextType="text",
                OutputFormat="pcm",
                SampleRate=str(self.sample_rate_hz),
                VoiceId=voice_id,
                LanguageCode=language_code,
                Engine=self.engine,
            )
            stream = response.get("AudioStream")
            if stream is None:
                return b""
            try:
                audio_data = stream.read()
            finally:
                stream.close()
        except (BotoCoreError, ClientError) as e:
            raise SynthesisError(f"Polly synthesis failed: {e}") from e

        latency_ms = int((time.time() - start_time) * 1000)
        logger.debug(
            f"Polly synthesized '{text[:30]}...' with {voice_id} "
            f"in {latency_ms}ms ({len(audio_data)} bytes)"
        )
        return audio_data
