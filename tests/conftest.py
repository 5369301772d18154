"""Pytest configuration and fixtures for audioscope tests."""

import pytest
import tempfile
import logging
import wave
from pathlib import Path
from typing import List

import numpy as np

from audioscope.models.audio import SampleBuffer
from audioscope.models.transcription import TranscriptionSegment
from audioscope.transcription.base import AbstractTranscriptionBackend


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without external services")
    config.addinivalue_line("markers", "integration: tests that decode real files end to end")


class MockTranscriptionBackend(AbstractTranscriptionBackend):
    """Backend that records what it was given and returns canned segments."""

    def __init__(self, segments: List[TranscriptionSegment] = None):
        super().__init__("en")
        self.segments = segments if segments is not None else [
            TranscriptionSegment(text=" hello world", start=0.0, end=1.5),
        ]
        self.received_samples = None
        self.received_rate = None
        self.initialized = False
        self.cleaned_up = False

    def transcribe(self, samples, sample_rate=16000):
        self.received_samples = np.asarray(samples)
        self.received_rate = sample_rate
        return list(self.segments)

    def initialize(self) -> bool:
        self.initialized = True
        return True

    def cleanup(self) -> None:
        self.cleaned_up = True


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


@pytest.fixture
def mock_backend():
    """Provides a mock transcription backend."""
    return MockTranscriptionBackend()


def sine_wave(freq: float = 440.0, duration_seconds: float = 1.0,
              sample_rate: int = 16000, amplitude: float = 1.0) -> np.ndarray:
    """float32 sine wave."""
    t = np.arange(int(duration_seconds * sample_rate)) / sample_rate
    return (amplitude * np.sin(2 * np.pi * freq * t)).astype(np.float32)


@pytest.fixture
def sine_buffer():
    """1 second of 440 Hz at 16 kHz."""
    return SampleBuffer(samples=sine_wave(), sample_rate=16000)


@pytest.fixture
def write_wav(temp_data_dir):
    """Factory writing integer PCM WAV files with the stdlib wave module.

    Takes an int array of shape (frames,) or (frames, channels) already in
    the target sample width's native range.
    """
    def _write(name: str, frames: np.ndarray, sample_width: int = 2, sample_rate: int = 16000) -> str:
        frames = np.asarray(frames)
        channels = 1 if frames.ndim == 1 else frames.shape[1]
        interleaved = frames.reshape(-1)

        if sample_width == 1:
            data = interleaved.astype(np.uint8).tobytes()
        elif sample_width == 2:
            data = interleaved.astype("<i2").tobytes()
        elif sample_width == 3:
            as_int = interleaved.astype("<i4").tobytes()
            # Keep the low three bytes of each little-endian int32
            data = b"".join(as_int[i:i + 3] for i in range(0, len(as_int), 4))
        elif sample_width == 4:
            data = interleaved.astype("<i4").tobytes()
        else:
            raise ValueError(f"Unsupported sample width: {sample_width}")

        file_path = Path(temp_data_dir) / name
        with wave.open(str(file_path), 'wb') as wf:
            wf.setnchannels(channels)
            wf.setsampwidth(sample_width)
            wf.setframerate(sample_rate)
            wf.writeframes(data)
        return str(file_path)

    return _write


@pytest.fixture
def sample_audio_file(write_wav):
    """Create a 16-bit mono WAV with 1 second of 440 Hz."""
    frames = (sine_wave(duration_seconds=1.0) * 32767).astype(np.int16)
    return write_wav("test_audio.wav", frames)


@pytest.fixture
def make_sine():
    """Factory for float32 sine waves."""
    return sine_wave


@pytest.fixture
def mock_backend_class():
    """The mock backend class, for tests that need custom segments."""
    return MockTranscriptionBackend
