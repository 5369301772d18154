"""Local Whisper transcription backend using faster-whisper."""

import time
import logging
from typing import List

import numpy as np

from .base import AbstractTranscriptionBackend
from ..errors import TranscriptionError
from ..models.transcription import TranscriptionSegment

logger = logging.getLogger(__name__)

WHISPER_SAMPLE_RATE = 16000


class WhisperBackend(AbstractTranscriptionBackend):
    """Runs a Whisper model locally. Requires the ``whisper`` extra."""

    def __init__(self,
                 model_name: str = "base",
                 language: str = "en",
                 device: str = "cpu",
                 compute_type: str = "int8"):
        """Initialize Whisper backend.

        Args:
            model_name: Model size ('tiny', 'base', ...) or path to a converted model
            language: Spoken language code, None to auto-detect
            device: 'cpu', 'cuda' or 'auto'
            compute_type: CTranslate2 quantization, e.g. 'int8', 'float16', 'float32'
        """
        super().__init__(language)
        self.model_name = model_name
        self.device = device
        self.compute_type = compute_type
        self.model = None
        self.service_name = f"Whisper ({model_name})"

    def initialize(self) -> bool:
        """Load the Whisper model."""
        try:
            from faster_whisper import WhisperModel
        except ImportError as e:
            raise TranscriptionError(
                "faster-whisper is not installed; install audioscope[whisper]"
            ) from e

        logger.info(f"Loading Whisper model '{self.model_name}' on {self.device} ({self.compute_type})...")
        try:
            self.model = WhisperModel(self.model_name, device=self.device, compute_type=self.compute_type)
        except Exception as e:
            logger.error(f"Failed to load Whisper model '{self.model_name}': {e}")
            raise TranscriptionError(f"Failed to load Whisper model '{self.model_name}': {e}") from e
        logger.info("Whisper model loaded")
        return True

    def transcribe(self, samples: np.ndarray, sample_rate: int = WHISPER_SAMPLE_RATE) -> List[TranscriptionSegment]:
        """Transcribe samples with the loaded Whisper model."""
        if self.model is None:
            raise TranscriptionError("Whisper backend used before initialize()")
        if sample_rate != WHISPER_SAMPLE_RATE:
            raise ValueError(f"Whisper expects {WHISPER_SAMPLE_RATE}Hz audio, got {sample_rate}Hz")

        start_time = time.time()
        logger.info(f"Processing audio with Whisper ({len(samples)} samples)...")

        segments = []
        try:
            results, info = self.model.transcribe(
                np.asarray(samples, dtype=np.float32),
                language=self.language,
                task="transcribe",
                beam_size=1,
                condition_on_previous_text=False,
                word_timestamps=True,
            )
            # Segments are produced lazily; decoding errors surface here
            for result in results:
                logger.debug(f"Segment [{result.start:.2f}-{result.end:.2f}] {result.text}")
                segments.append(TranscriptionSegment(
                    text=result.text,
                    start=float(result.start),
                    end=float(result.end),
                ))
        except Exception as e:
            logger.error(f"Whisper transcription failed: {e}")
            raise TranscriptionError(f"Failed to process audio: {e}") from e

        logger.info(f"Whisper produced {len(segments)} segments in {time.time() - start_time:.2f}s")
        return segments

    def cleanup(self) -> None:
        """Release the model."""
        self.model = None
