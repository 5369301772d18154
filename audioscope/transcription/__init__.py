"""Speech recognition backends for audioscope."""

from .base import AbstractTranscriptionBackend
from ..models.transcription import TranscriptionSegment
from .google_backend import GoogleSpeechBackend
from .whisper_backend import WhisperBackend

__all__ = [
    "AbstractTranscriptionBackend",
    "TranscriptionSegment",
    "GoogleSpeechBackend",
    "WhisperBackend",
]
