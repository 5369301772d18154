"""Spectral analysis module."""

from .spectrogram import (
    DEFAULT_FLOOR_DB,
    DEFAULT_WINDOW_SIZE,
    SpectralAnalyzer,
    compute_spectrogram,
    hann_window,
    validate_window_size,
)

__all__ = [
    'DEFAULT_FLOOR_DB',
    'DEFAULT_WINDOW_SIZE',
    'SpectralAnalyzer',
    'compute_spectrogram',
    'hann_window',
    'validate_window_size',
]
