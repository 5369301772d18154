"""Sample-rate conversion and peak normalization for the recognition path."""

import logging
from abc import ABC, abstractmethod
from typing import Optional

import numpy as np

from ..models.audio import SampleBuffer

logger = logging.getLogger(__name__)

RECOGNITION_SAMPLE_RATE = 16000


class AbstractResampler(ABC):
    """Abstract base class for sample-rate conversion strategies."""

    @abstractmethod
    def resample(self, samples: np.ndarray, source_rate: int, target_rate: int) -> np.ndarray:
        """Convert samples from source_rate to target_rate.

        Args:
            samples: float32 mono samples
            source_rate: Rate the samples were recorded at in Hz
            target_rate: Desired output rate in Hz

        Returns:
            New float32 array at target_rate
        """
        pass


class NearestSampleResampler(AbstractResampler):
    """Drop/duplicate resampler: output sample i takes source sample floor(i / r).

    Not band-limited, so downsampling aliases. With new_len = floor(len * r)
    computed exactly in integers, every source index floor(i / r) stays below
    len(samples), so the output is always exactly new_len samples long.
    """

    def resample(self, samples: np.ndarray, source_rate: int, target_rate: int) -> np.ndarray:
        samples = np.asarray(samples, dtype=np.float32)
        if source_rate == target_rate:
            return samples.copy()

        # r = target / source; floor(len * r) and floor(i / r) in integer arithmetic
        new_len = len(samples) * target_rate // source_rate
        source_indices = np.arange(new_len, dtype=np.int64) * source_rate // target_rate
        return samples[source_indices]


def peak_normalize(samples: np.ndarray) -> np.ndarray:
    """Scale samples so the largest absolute value is at most 1.0.

    Buffers already within [-1.0, 1.0] are returned unchanged (as a copy).
    """
    samples = np.asarray(samples, dtype=np.float32)
    if not samples.size:
        return samples.copy()

    max_abs = float(np.max(np.abs(samples)))
    if max_abs > 1.0:
        logger.debug(f"Peak {max_abs:.4f} exceeds unit range, normalizing")
        return (samples / np.float32(max_abs)).astype(np.float32)
    return samples.copy()


class RateNormalizer:
    """Prepares a SampleBuffer for a speech recognition engine."""

    def __init__(self, target_rate: int = RECOGNITION_SAMPLE_RATE,
                 resampler: Optional[AbstractResampler] = None):
        """Initialize rate normalizer.

        Args:
            target_rate: Output sample rate in Hz
            resampler: Conversion strategy (defaults to NearestSampleResampler)
        """
        if target_rate <= 0:
            raise ValueError(f"Target rate must be positive, got {target_rate}")
        self.target_rate = target_rate
        self.resampler = resampler or NearestSampleResampler()

    def normalize(self, buffer: SampleBuffer) -> SampleBuffer:
        """Peak-normalize then resample a buffer to the target rate."""
        samples = peak_normalize(buffer.samples)

        if not samples.size or buffer.sample_rate == self.target_rate:
            return SampleBuffer(samples=samples, sample_rate=self.target_rate)

        logger.info(f"Resampling from {buffer.sample_rate}Hz to {self.target_rate}Hz...")
        resampled = self.resampler.resample(samples, buffer.sample_rate, self.target_rate)
        logger.info(f"Resampled to {len(resampled)} samples")
        return SampleBuffer(samples=resampled, sample_rate=self.target_rate)
