"""Audio-related data models."""

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class SampleBuffer:
    """Mono PCM signal as float32 samples in roughly [-1.0, 1.0].

    The samples array is made read-only on construction so a buffer can be
    handed to several consumers without one of them mutating it.
    """
    samples: np.ndarray
    sample_rate: int

    def __post_init__(self):
        samples = np.array(self.samples, dtype=np.float32, copy=True)
        if samples.ndim != 1:
            raise ValueError(f"SampleBuffer expects 1-D samples, got shape {samples.shape}")
        if self.sample_rate < 0:
            raise ValueError(f"Sample rate must be non-negative, got {self.sample_rate}")
        if samples.size and self.sample_rate == 0:
            raise ValueError("Sample rate must be set for a non-empty buffer")

        samples.setflags(write=False)
        object.__setattr__(self, "samples", samples)
        object.__setattr__(self, "sample_rate", int(self.sample_rate))

    def __len__(self) -> int:
        return int(self.samples.size)

    @property
    def duration_seconds(self) -> float:
        if not self.sample_rate:
            return 0.0
        return len(self) / self.sample_rate
