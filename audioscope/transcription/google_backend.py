"""Google Speech-to-Text transcription backend."""

import time
import logging
from datetime import timedelta
from typing import List, Optional

import numpy as np

from .base import AbstractTranscriptionBackend
from ..errors import TranscriptionError
from ..models.transcription import TranscriptionSegment

from google.cloud import speech
from google.api_core import exceptions as gax_exceptions
from google.oauth2 import service_account

logger = logging.getLogger(__name__)

# Synchronous recognize rejects inline audio longer than about 60 seconds
MAX_REQUEST_SECONDS = 55


def to_linear16(samples: np.ndarray) -> bytes:
    """Convert float samples in [-1.0, 1.0] to little-endian 16-bit PCM bytes."""
    clipped = np.clip(np.asarray(samples, dtype=np.float32), -1.0, 1.0)
    return (clipped * 32767.0).astype("<i2").tobytes()


def _seconds(offset: Optional[timedelta]) -> Optional[float]:
    if offset is None:
        return None
    return offset.total_seconds()


class GoogleSpeechBackend(AbstractTranscriptionBackend):
    """Google Speech-to-Text API backend for transcription."""

    def __init__(self,
                 credentials_path: Optional[str] = None,
                 language: str = "en-US",
                 use_enhanced: bool = True,
                 enable_automatic_punctuation: bool = True,
                 timeout: float = 120.0):
        """Initialize Google Speech backend.

        Args:
            credentials_path: Path to Google Cloud service account JSON file
            language: Language code (e.g., 'en-US', 'es-ES')
            use_enhanced: Whether to use enhanced model (costs more but better quality)
            enable_automatic_punctuation: Enable automatic punctuation
            timeout: Per-request timeout in seconds
        """
        super().__init__(language)
        self.credentials_path = credentials_path
        if not self.credentials_path:
            raise ValueError("Google credentials path is required - cannot initialize without credentials")
        self.use_enhanced = use_enhanced
        self.enable_automatic_punctuation = enable_automatic_punctuation
        self.timeout = timeout
        self.client = None
        self.project_id = None
        self.service_name = "Google Speech-to-Text"

    def initialize(self) -> bool:
        """Initialize Google Speech client and verify credentials."""
        logger.info(f"Loading Google credentials from: {self.credentials_path}")
        credentials = service_account.Credentials.from_service_account_file(self.credentials_path)

        self.client = speech.SpeechClient(credentials=credentials)
        self.project_id = credentials.project_id
        logger.info(f"Using Google Cloud project: {self.project_id}")

        logger.info("Google Speech-to-Text backend initialized successfully")
        return True

    def recognition_config(self, sample_rate: int) -> speech.RecognitionConfig:
        return speech.RecognitionConfig(
            encoding=speech.RecognitionConfig.AudioEncoding.LINEAR16,
            sample_rate_hertz=sample_rate,
            language_code=self.language,
            use_enhanced=self.use_enhanced,
            enable_automatic_punctuation=self.enable_automatic_punctuation,
            enable_word_confidence=True,
            enable_word_time_offsets=True,
            model="latest_long",
        )

    def transcribe(self, samples: np.ndarray, sample_rate: int = 16000) -> List[TranscriptionSegment]:
        """Transcribe samples using Google Speech-to-Text.

        Synchronous recognition only accepts about a minute of inline audio,
        so longer recordings are sent as consecutive windows of at most
        MAX_REQUEST_SECONDS. Segment times are relative to the whole recording.
        """
        if self.client is None:
            raise TranscriptionError("Google Speech backend used before initialize()")

        start_time = time.time()
        window = int(MAX_REQUEST_SECONDS * sample_rate)
        window_count = max(1, -(-len(samples) // window))
        logger.debug(f"Samples: {len(samples)}; Requests: {window_count}; Language: {self.language}; "
                     f"Enhanced model: {self.use_enhanced}; Auto punctuation: {self.enable_automatic_punctuation}")

        segments = []
        for index in range(window_count):
            offset = index * window
            response = self._recognize(samples[offset:offset + window], sample_rate)
            segments.extend(self._extract_segments(response, offset / sample_rate))

        logger.debug(f"Google STT returned {len(segments)} segments in {time.time() - start_time:.3f}s")
        return segments

    def _recognize(self, samples: np.ndarray, sample_rate: int):
        audio = speech.RecognitionAudio(content=to_linear16(samples))
        try:
            return self.client.recognize(config=self.recognition_config(sample_rate),
                                         audio=audio, timeout=self.timeout)
        except gax_exceptions.DeadlineExceeded as e:
            logger.error("Google STT recognize deadline exceeded")
            raise TranscriptionError(f"Google Speech recognize timeout: {e}") from e
        except gax_exceptions.ServiceUnavailable as e:
            logger.error("Google STT service unavailable")
            raise TranscriptionError(f"Google Speech service unavailable: {e}") from e
        except gax_exceptions.GoogleAPICallError as e:
            logger.error("Google STT API call error: %s", e)
            raise TranscriptionError(f"Google Speech API error: {e}") from e

    def _extract_segments(self, response, offset: float = 0.0) -> List[TranscriptionSegment]:
        """Build segments from one response; offset is the window's start in seconds."""
        segments = []
        previous_end = 0.0

        for result in response.results:
            if not result.alternatives:
                continue
            alternative = result.alternatives[0]

            words = list(alternative.words)
            if words:
                start = _seconds(words[0].start_time) or previous_end
                end = _seconds(words[-1].end_time)
            else:
                start = previous_end
                end = _seconds(result.result_end_time)
            if end is None:
                end = start

            logger.debug(f"Transcript='{alternative.transcript}' [{offset + start:.2f}-{offset + end:.2f}] "
                         f"(conf={alternative.confidence})")
            segments.append(TranscriptionSegment(
                text=alternative.transcript,
                start=offset + start,
                end=offset + end,
                confidence=alternative.confidence,
            ))
            previous_end = end

        return segments

    def cleanup(self) -> None:
        """Clean up Google Speech client resources."""
        self.client = None
