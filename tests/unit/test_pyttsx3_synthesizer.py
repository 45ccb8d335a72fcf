"""Tests for the pyttsx3 local synthesizer."""

from types import SimpleNamespace
from unittest.mock import MagicMock, call, patch

import pytest

from page_narrator.domain.errors import SynthesisError
from page_narrator.domain.interfaces.speech import LocalSynthesizer
from page_narrator.infrastructure.pyttsx3_synthesizer import Pyttsx3Synthesizer

MODULE = "page_narrator.infrastructure.pyttsx3_synthesizer"


@pytest.fixture
def engine():
    engine = MagicMock()
    voices = [
        SimpleNamespace(id="english", languages=["en-us"]),
        SimpleNamespace(id="brazil", languages=[b"\x05pt-br"]),
        SimpleNamespace(id="portugal", languages=["pt-pt"]),
    ]
    engine.getProperty.side_effect = lambda name: voices if name == "voices" else None
    return engine


@pytest.fixture
def mock_init(engine):
    with patch(f"{MODULE}.pyttsx3.init", return_value=engine) as mock_init:
        yield mock_init


class TestPyttsx3Synthesizer:
    """Test cases for Pyttsx3Synthesizer."""

    def test_implements_protocol(self):
        assert isinstance(Pyttsx3Synthesizer(), LocalSynthesizer)

    @pytest.mark.asyncio
    async def test_speak_runs_engine(self, engine, mock_init):
        synthesizer = Pyttsx3Synthesizer(rate=150, volume=0.8)

        await synthesizer.speak("Olá", "pt-BR")

        engine.setProperty.assert_any_call("rate", 150)
        engine.setProperty.assert_any_call("volume", 0.8)
        engine.setProperty.assert_any_call("voice", "brazil")
        engine.say.assert_called_once_with("Olá")
        engine.runAndWait.assert_called_once()

    @pytest.mark.asyncio
    async def test_engine_is_created_once(self, engine, mock_init):
        synthesizer = Pyttsx3Synthesizer()

        await synthesizer.speak("one", "en-US")
        await synthesizer.speak("two", "en-US")

        mock_init.assert_called_once()
        engine.setProperty.assert_any_call("voice", "english")

    @pytest.mark.asyncio
    async def test_language_prefix_fallback(self, engine, mock_init):
        synthesizer = Pyttsx3Synthesizer()

        await synthesizer.speak("hello", "en-GB")

        engine.setProperty.assert_any_call("voice", "english")

    @pytest.mark.asyncio
    async def test_explicit_voice_wins(self, engine, mock_init):
        synthesizer = Pyttsx3Synthesizer(voice_id="custom")

        await synthesizer.speak("hello", "pt-BR")

        engine.setProperty.assert_any_call("voice", "custom")

    @pytest.mark.asyncio
    async def test_muted_speaks_at_zero_volume(self, engine, mock_init):
        synthesizer = Pyttsx3Synthesizer(volume=1.0)
        synthesizer.set_muted(True)

        await synthesizer.speak("hello", "en-US")

        engine.setProperty.assert_any_call("volume", 0.0)

    @pytest.mark.asyncio
    async def test_set_muted_applies_to_live_engine(self, engine, mock_init):
        synthesizer = Pyttsx3Synthesizer(volume=0.5)
        await synthesizer.speak("hello", "en-US")
        engine.setProperty.reset_mock()

        synthesizer.set_muted(True)
        synthesizer.set_muted(False)

        assert engine.setProperty.call_args_list[-2:] == [call("volume", 0.0), call("volume", 0.5)]

    @pytest.mark.asyncio
    async def test_engine_failure_becomes_synthesis_error(self, engine, mock_init):
        engine.runAndWait.side_effect = RuntimeError("run loop already started")
        synthesizer = Pyttsx3Synthesizer()

        with pytest.raises(SynthesisError, match="run loop"):
            await synthesizer.speak("hello", "en-US")

    @pytest.mark.asyncio
    async def test_init_failure_becomes_synthesis_error(self):
        with patch(f"{MODULE}.pyttsx3.init", side_effect=OSError("libespeak.so not found")):
            with pytest.raises(SynthesisError, match="libespeak"):
                await Pyttsx3Synthesizer().speak("hello", "en-US")

    def test_stop_without_engine_is_noop(self):
        Pyttsx3Synthesizer().stop()

    @pytest.mark.asyncio
    async def test_stop_calls_engine(self, engine, mock_init):
        synthesizer = Pyttsx3Synthesizer()
        await synthesizer.speak("hello", "en-US")

        synthesizer.stop()

        engine.stop.assert_called_once()
