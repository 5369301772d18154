"""Transcription-related data models."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class TranscriptionSegment:
    """A span of recognized speech."""
    text: str
    start: float  # seconds from the start of the audio
    end: float
    confidence: Optional[float] = None
