"""Tests for the PyAudio playback sink."""

import asyncio
import time
from unittest.mock import MagicMock, patch

import pytest

pyaudio = pytest.importorskip("pyaudio")

from page_narrator.domain.errors import AudioPlaybackError, SynthesisError  # noqa: E402
from page_narrator.domain.interfaces.speech import AudioSink  # noqa: E402
from page_narrator.infrastructure.pyaudio_sink import CHUNK_SIZE, PyAudioSink  # noqa: E402


@pytest.fixture
def stream():
    return MagicMock()


@pytest.fixture
def mock_pyaudio(stream):
    with patch("page_narrator.infrastructure.pyaudio_sink.pyaudio.PyAudio") as mock_class:
        mock_class.return_value.open.return_value = stream
        yield mock_class.return_value


class TestPyAudioSink:
    """Test cases for PyAudioSink."""

    def test_implements_protocol(self):
        assert isinstance(PyAudioSink(), AudioSink)

    @pytest.mark.asyncio
    async def test_play_writes_all_blocks(self, mock_pyaudio, stream):
        audio = b"\x01\x02" * (CHUNK_SIZE * 2 + 10)

        await PyAudioSink(sample_rate_hz=16000).play(audio)

        mock_pyaudio.open.assert_called_once_with(format=pyaudio.paInt16, channels=1, rate=16000, output=True)
        written = b"".join(c.args[0] for c in stream.write.call_args_list)
        assert written == audio
        assert stream.write.call_count == 3
        stream.close.assert_called_once()
        mock_pyaudio.terminate.assert_called_once()

    @pytest.mark.asyncio
    async def test_muted_playback_writes_silence(self, mock_pyaudio, stream):
        await PyAudioSink().play(b"\x7f\x7f" * 100, muted=True)

        written = b"".join(c.args[0] for c in stream.write.call_args_list)
        assert written == bytes(200)

    @pytest.mark.asyncio
    async def test_odd_trailing_byte_is_dropped(self, mock_pyaudio, stream):
        await PyAudioSink().play(b"\x01\x02\x03")

        stream.write.assert_called_once_with(b"\x01\x02")

    @pytest.mark.asyncio
    async def test_empty_audio_does_not_open_device(self, mock_pyaudio):
        await PyAudioSink().play(b"")

        mock_pyaudio.open.assert_not_called()

    @pytest.mark.asyncio
    async def test_stop_interrupts_between_blocks(self, mock_pyaudio, stream):
        sink = PyAudioSink()
        stream.write.side_effect = lambda block: sink.stop()

        await sink.play(bytes(CHUNK_SIZE * 2 * 5))

        assert stream.write.call_count == 1

    @pytest.mark.asyncio
    async def test_device_error_becomes_playback_error(self, mock_pyaudio):
        mock_pyaudio.open.side_effect = OSError("Invalid output device")

        with pytest.raises(AudioPlaybackError) as exc_info:
            await PyAudioSink().play(b"\x00\x00")

        assert isinstance(exc_info.value, SynthesisError)
        mock_pyaudio.terminate.assert_called_once()

    @pytest.mark.asyncio
    async def test_driver_init_error_becomes_playback_error(self):
        with patch("page_narrator.infrastructure.pyaudio_sink.pyaudio.PyAudio") as mock_class:
            mock_class.side_effect = OSError("No default output device")

            with pytest.raises(AudioPlaybackError):
                await PyAudioSink().play(b"\x00\x00")

    @pytest.mark.asyncio
    async def test_stopped_audio_does_not_resume_on_next_play(self, mock_pyaudio, stream, wait_until):
        block_bytes = CHUNK_SIZE * 2
        written = []

        def slow_write(block):
            time.sleep(0.02)
            written.append(block[:1])

        stream.write.side_effect = slow_write
        sink = PyAudioSink()

        first = asyncio.create_task(sink.play(b"A" * block_bytes * 20))
        await wait_until(lambda: len(written) >= 2)
        sink.stop()
        first.cancel()
        with pytest.raises(asyncio.CancelledError):
            await first

        await sink.play(b"B" * block_bytes * 2)

        assert written.count(b"A") < 20
        assert written[-2:] == [b"B", b"B"]
        assert b"A" not in written[written.index(b"B"):]
