"""Speech synthesis and playback protocols."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class RemoteSynthesizer(Protocol):
    """A network speech service returning audio payloads.

    Requests are length limited; the gateway chunks text before calling.
    """

    async def synthesize(self, text: str, language_code: str) -> bytes:
        """Synthesize one chunk of text.

        Args:
            text: Text chunk no longer than the configured limit
            language_code: BCP-47 language code

        Returns:
            Raw audio payload (may be empty if the service returned nothing)

        Raises:
            SynthesisError: If the request fails
        """
        ...


@runtime_checkable
class LocalSynthesizer(Protocol):
    """An on-device synthesizer that plays speech directly."""

    async def speak(self, text: str, language_code: str) -> None:
        """Speak text, returning when the utterance finishes.

        Raises:
            SynthesisError: If the engine reports an error
        """
        ...

    def stop(self) -> None:
        """Stop the current utterance. Safe to call when idle."""
        ...

    def set_muted(self, muted: bool) -> None:
        """Apply the mute flag to the next utterance."""
        ...


@runtime_checkable
class AudioSink(Protocol):
    """Local playback of synthesized audio payloads."""

    async def play(self, audio: bytes, muted: bool = False) -> None:
        """Play audio, returning when playback completes or is stopped.

        Raises:
            AudioPlaybackError: If the output device fails
        """
        ...

    def stop(self) -> None:
        """Stop current playback. Safe to call even if nothing is playing."""
        ...

    def set_muted(self, muted: bool) -> None:
        """Change output volume of the ongoing playback."""
        ...
