"""Transcription service that prepares audio and runs a recognition backend."""

import logging
from typing import List, Optional

from ..audio.resample import RateNormalizer
from ..config import AudioscopeConfig
from ..models.audio import SampleBuffer
from ..models.transcription import TranscriptionSegment
from ..transcription import AbstractTranscriptionBackend, GoogleSpeechBackend, WhisperBackend

logger = logging.getLogger(__name__)

BACKENDS = ("whisper", "google")


class TranscriptionService:
    """Runs speech recognition over a decoded buffer."""

    def __init__(self, config: AudioscopeConfig,
                 backend: Optional[AbstractTranscriptionBackend] = None):
        """Initialize transcription service.

        Args:
            config: Application configuration
            backend: Backend to use; built from config when None
        """
        self.config = config
        self.backend = backend
        self.rate_normalizer = RateNormalizer(target_rate=config.get('recognition.target_rate', 16000))

    def transcribe(self, buffer: SampleBuffer) -> List[TranscriptionSegment]:
        """Resample the buffer for recognition and transcribe it.

        Segments with blank text are dropped.
        """
        prepared = self.rate_normalizer.normalize(buffer)
        if not len(prepared):
            logger.warning("Nothing to transcribe: buffer is empty")
            return []

        backend = self.backend or self.create_backend()
        with backend:
            segments = backend.transcribe(prepared.samples, prepared.sample_rate)

        kept = []
        for index, segment in enumerate(segments):
            if not segment.text.strip():
                logger.debug(f"Segment {index} is empty, skipping")
                continue
            kept.append(segment)

        if kept:
            logger.info(f"Successfully generated {len(kept)} transcription segments")
        else:
            logger.warning("No transcription segments were generated!")
        return kept

    def create_backend(self) -> AbstractTranscriptionBackend:
        """Create the backend named by recognition.backend."""
        name = self.config.get('recognition.backend', 'whisper')
        language = self.config.get('recognition.language', 'en')

        if name == "whisper":
            return self._create_whisper_backend(language)
        if name == "google":
            return self._create_google_speech_backend(language)
        raise ValueError(f"Unknown recognition backend '{name}' (expected one of {', '.join(BACKENDS)})")

    def _create_whisper_backend(self, language: str) -> WhisperBackend:
        model = self.config.get('whisper.model', 'base')
        device = self.config.get('whisper.device', 'cpu')
        compute_type = self.config.get('whisper.compute_type', 'int8')

        logger.debug(f"Config: model={model}, device={device}, compute_type={compute_type}")
        return WhisperBackend(model_name=model, language=language, device=device, compute_type=compute_type)

    def _create_google_speech_backend(self, language: str) -> GoogleSpeechBackend:
        credentials_path = self.config.get_google_credentials_path()
        use_enhanced = self.config.get('google_cloud.use_enhanced_model', True)
        enable_punctuation = self.config.get('google_cloud.enable_automatic_punctuation', True)

        # Google expects BCP-47 region codes
        if language == "en":
            language = "en-US"

        logger.debug(f"Config: language={language}, enhanced={use_enhanced}, punctuation={enable_punctuation}")
        return GoogleSpeechBackend(
            credentials_path=credentials_path,
            language=language,
            use_enhanced=use_enhanced,
            enable_automatic_punctuation=enable_punctuation
        )
