"""Data models for the audioscope application."""

from .audio import SampleBuffer
from .spectrogram import Spectrogram
from .transcription import TranscriptionSegment

__all__ = [
    "SampleBuffer",
    "Spectrogram",
    "TranscriptionSegment",
]
