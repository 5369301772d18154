"""Analysis service that runs the full pipeline for one audio file."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from ..analysis.spectrogram import DEFAULT_FLOOR_DB, SpectralAnalyzer
from ..audio.decoder import SampleDecoder
from ..config import AudioscopeConfig
from ..models.audio import SampleBuffer
from ..models.spectrogram import Spectrogram
from ..models.transcription import TranscriptionSegment
from .transcription_service import TranscriptionService

logger = logging.getLogger(__name__)


@dataclass
class AnalysisResult:
    """Everything the visualizer needs for one file."""
    buffer: SampleBuffer
    spectrogram: Spectrogram
    segments: List[TranscriptionSegment] = field(default_factory=list)


class AnalysisService:
    """Decodes a file once and feeds it to the spectrogram and transcription paths."""

    def __init__(self, config: AudioscopeConfig,
                 decoder: Optional[SampleDecoder] = None,
                 transcription_service: Optional[TranscriptionService] = None):
        self.config = config
        self.decoder = decoder or SampleDecoder()
        self.analyzer = SpectralAnalyzer(
            window_size=config.get('analysis.window_size', 1024),
            # An explicit null keeps -inf for silent bins
            floor_db=config.get('analysis.floor_db', DEFAULT_FLOOR_DB, allow_none=True),
        )
        self.transcription_service = transcription_service or TranscriptionService(config)

    def analyze(self, path: Union[str, Path], transcribe: bool = True) -> AnalysisResult:
        """Run decode, spectrogram and (optionally) transcription.

        Raises:
            AudioscopeError: Any pipeline stage failed; nothing partial is returned
        """
        logger.info("Loading audio file...")
        buffer = self.decoder.decode(path)

        logger.info("Computing spectrogram...")
        spectrogram = self.analyzer.analyze(buffer, require_frames=True)

        segments: List[TranscriptionSegment] = []
        if transcribe:
            logger.info("Transcribing audio...")
            segments = self.transcription_service.transcribe(buffer)

        return AnalysisResult(buffer=buffer, spectrogram=spectrogram, segments=segments)
