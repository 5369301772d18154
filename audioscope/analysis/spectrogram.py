"""Short-time Fourier transform spectrogram computation."""

import logging
from typing import Optional

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view
from scipy import fft

from ..errors import InsufficientSamples, InvalidWindowSize
from ..models.audio import SampleBuffer
from ..models.spectrogram import Spectrogram

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_SIZE = 1024

# log10(0) is -inf; silent bins are clamped here instead. The terminal
# renderer maps [-100, 0] dB onto its intensity scale.
DEFAULT_FLOOR_DB = -100.0

FRAMES_PER_BLOCK = 2048


def validate_window_size(window_size: int) -> None:
    """Raise InvalidWindowSize unless window_size is a power of two >= 2."""
    if (isinstance(window_size, bool) or not isinstance(window_size, (int, np.integer))
            or window_size < 2 or window_size & (window_size - 1)):
        raise InvalidWindowSize(f"Window size must be a power of two >= 2, got {window_size!r}")


def hann_window(size: int) -> np.ndarray:
    """Symmetric Hann window: 0.5 * (1 - cos(2*pi*i / (size - 1)))."""
    i = np.arange(size, dtype=np.float64)
    return (0.5 * (1.0 - np.cos(2.0 * np.pi * i / (size - 1)))).astype(np.float32)


class SpectralAnalyzer:
    """Computes log-magnitude spectrograms with a Hann window and 50% overlap."""

    def __init__(self, window_size: int = DEFAULT_WINDOW_SIZE,
                 floor_db: Optional[float] = DEFAULT_FLOOR_DB,
                 frames_per_block: int = FRAMES_PER_BLOCK):
        """Initialize spectral analyzer.

        Args:
            window_size: FFT size in samples, must be a power of two
            floor_db: Lower clamp for dB values; None keeps -inf for silent bins
            frames_per_block: Frames transformed per FFT call
        """
        validate_window_size(window_size)
        self.window_size = int(window_size)
        self.hop_size = self.window_size // 2
        self.floor_db = floor_db
        self.frames_per_block = max(1, int(frames_per_block))
        self.window = hann_window(self.window_size)

    def frame_count(self, sample_count: int) -> int:
        """Number of analysis frames for a buffer of sample_count samples."""
        if sample_count < self.window_size:
            return 0
        return (sample_count - self.window_size) // self.hop_size

    def analyze(self, buffer: SampleBuffer, require_frames: bool = False) -> Spectrogram:
        """Compute the spectrogram of a buffer at its native rate.

        Args:
            buffer: Input signal
            require_frames: Raise InsufficientSamples instead of returning an
                empty spectrogram when the buffer yields no frames

        Returns:
            Spectrogram with window_size / 2 frequency bins
        """
        if not buffer.sample_rate:
            raise InsufficientSamples("Cannot analyze an empty buffer without a sample rate")

        num_frames = self.frame_count(len(buffer))
        num_bins = self.window_size // 2
        frequencies = np.arange(num_bins, dtype=np.float64) * buffer.sample_rate / self.window_size

        if num_frames == 0:
            if require_frames:
                raise InsufficientSamples(
                    f"{len(buffer)} samples are not enough for one frame "
                    f"(window {self.window_size}, hop {self.hop_size})"
                )
            logger.warning(f"Buffer of {len(buffer)} samples is shorter than one analysis frame")
            return Spectrogram(
                time_points=np.zeros(0, dtype=np.float32),
                frequencies=frequencies,
                magnitudes=np.zeros((0, num_bins), dtype=np.float32),
            )

        logger.info(f"Computing spectrogram: {num_frames} frames, window={self.window_size}, "
                    f"hop={self.hop_size}")

        frames = sliding_window_view(buffer.samples, self.window_size)[::self.hop_size][:num_frames]
        magnitudes = np.empty((num_frames, num_bins), dtype=np.float32)

        # Only one block of windowed frames and its complex spectrum is alive at a time
        for start in range(0, num_frames, self.frames_per_block):
            block = frames[start:start + self.frames_per_block]
            spectrum = fft.fft(block * self.window, n=self.window_size, axis=1)[:, :num_bins]
            with np.errstate(divide="ignore"):
                magnitudes[start:start + len(block)] = 20.0 * np.log10(np.abs(spectrum) / self.window_size)

        if self.floor_db is not None:
            np.maximum(magnitudes, self.floor_db, out=magnitudes)

        time_points = np.arange(num_frames, dtype=np.float64) * self.hop_size / buffer.sample_rate

        return Spectrogram(
            time_points=time_points,
            frequencies=frequencies,
            magnitudes=magnitudes,
        )


def compute_spectrogram(buffer: SampleBuffer, window_size: int = DEFAULT_WINDOW_SIZE,
                        floor_db: Optional[float] = DEFAULT_FLOOR_DB,
                        require_frames: bool = False) -> Spectrogram:
    """Compute a log-magnitude STFT spectrogram of a buffer."""
    analyzer = SpectralAnalyzer(window_size=window_size, floor_db=floor_db)
    return analyzer.analyze(buffer, require_frames=require_frames)
