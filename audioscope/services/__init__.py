"""Services layer for audioscope application logic."""

from .analysis_service import AnalysisResult, AnalysisService
from .transcription_service import TranscriptionService

__all__ = [
    "AnalysisResult",
    "AnalysisService",
    "TranscriptionService",
]
