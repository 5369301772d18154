"""Abstract base class for speech recognition backends."""

from abc import ABC, abstractmethod
from typing import List
import logging

import numpy as np

from ..errors import TranscriptionError
from ..models.transcription import TranscriptionSegment

logger = logging.getLogger(__name__)


class AbstractTranscriptionBackend(ABC):
    """Abstract base class for transcription backends.

    Backends receive peak-normalized float32 mono samples at 16kHz and
    return timestamped text segments.
    """

    def __init__(self, language: str = "en"):
        """Initialize backend with language preference."""
        self.language = language
        self.service_name = self.__class__.__name__

    @abstractmethod
    def transcribe(self, samples: np.ndarray, sample_rate: int = 16000) -> List[TranscriptionSegment]:
        """Transcribe a complete recording.

        Args:
            samples: float32 samples in [-1.0, 1.0]
            sample_rate: Sample rate of the audio in Hz

        Returns:
            Segments in chronological order
        """
        pass

    @abstractmethod
    def initialize(self) -> bool:
        """Initialize backend resources and verify configuration.

        Returns:
            True if initialization successful, False otherwise
        """
        pass

    @abstractmethod
    def cleanup(self) -> None:
        """Clean up backend resources."""
        pass

    def __enter__(self):
        if not self.initialize():
            raise TranscriptionError(f"Failed to initialize {self.service_name}")
        return self

    def __exit__(self, _exc_type, _exc_val, _exc_tb):
        self.cleanup()
