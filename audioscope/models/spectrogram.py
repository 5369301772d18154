"""Spectrogram data model."""

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class Spectrogram:
    """Log-magnitude STFT of a signal.

    Attributes:
        time_points: Frame start times in seconds, one per frame
        frequencies: Bin center frequencies in Hz, window_size / 2 of them
        magnitudes: dB values, shape (len(time_points), len(frequencies))
    """
    time_points: np.ndarray
    frequencies: np.ndarray
    magnitudes: np.ndarray

    def __post_init__(self):
        time_points = np.array(self.time_points, dtype=np.float32)
        frequencies = np.array(self.frequencies, dtype=np.float32)
        magnitudes = np.array(self.magnitudes, dtype=np.float32)
        if magnitudes.size == 0:
            magnitudes = magnitudes.reshape(len(time_points), len(frequencies))

        expected = (len(time_points), len(frequencies))
        if magnitudes.shape != expected:
            raise ValueError(f"Magnitudes shape {magnitudes.shape} does not match "
                             f"(frames, bins) = {expected}")

        for name, value in (("time_points", time_points),
                            ("frequencies", frequencies),
                            ("magnitudes", magnitudes)):
            value.setflags(write=False)
            object.__setattr__(self, name, value)

    @property
    def num_frames(self) -> int:
        return len(self.time_points)

    @property
    def num_bins(self) -> int:
        return len(self.frequencies)

    @property
    def window_size(self) -> int:
        return 2 * self.num_bins
