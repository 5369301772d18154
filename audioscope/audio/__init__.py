"""Audio decoding and rate conversion module."""

from .decoder import SampleDecoder, decode
from .encodings import SampleEncoding, to_float32
from .resample import (
    RECOGNITION_SAMPLE_RATE,
    AbstractResampler,
    NearestSampleResampler,
    RateNormalizer,
    peak_normalize,
)

__all__ = [
    'SampleDecoder',
    'decode',
    'SampleEncoding',
    'to_float32',
    'RECOGNITION_SAMPLE_RATE',
    'AbstractResampler',
    'NearestSampleResampler',
    'RateNormalizer',
    'peak_normalize',
]
