"""Conversion of native sample encodings to float32."""

from enum import Enum

import numpy as np


class SampleEncoding(Enum):
    """Source sample encodings the decoder knows how to normalize."""
    F32 = "f32"
    F64 = "f64"
    U8 = "u8"
    U16 = "u16"
    U24 = "u24"
    U32 = "u32"
    S8 = "s8"
    S16 = "s16"
    S24 = "s24"
    S32 = "s32"


# (divisor, offset): float = x / divisor + offset
_INTEGER_SCALING = {
    SampleEncoding.U8: (128.0, -1.0),
    SampleEncoding.U16: (32768.0, -1.0),
    SampleEncoding.U24: (8388608.0, -1.0),
    SampleEncoding.U32: (2147483648.0, -1.0),
    SampleEncoding.S8: (128.0, 0.0),
    SampleEncoding.S16: (32768.0, 0.0),
    SampleEncoding.S24: (8388608.0, 0.0),
    SampleEncoding.S32: (2147483648.0, 0.0),
}

# Sample format names as reported by FFmpeg/PyAV frames. 24-bit PCM is
# delivered left-justified in s32, so it is covered by the S32 rule.
_FFMPEG_FORMATS = {
    "u8": SampleEncoding.U8,
    "s16": SampleEncoding.S16,
    "s32": SampleEncoding.S32,
    "flt": SampleEncoding.F32,
    "dbl": SampleEncoding.F64,
}


def encoding_for_format(format_name: str) -> SampleEncoding:
    """Map an FFmpeg sample format name (packed or planar) to a SampleEncoding.

    Raises:
        ValueError: If the format has no normalization rule
    """
    base_name = format_name[:-1] if format_name.endswith("p") else format_name
    try:
        return _FFMPEG_FORMATS[base_name]
    except KeyError:
        raise ValueError(f"Unsupported sample format: {format_name}") from None


def to_float32(values: np.ndarray, encoding: SampleEncoding) -> np.ndarray:
    """Normalize raw samples of the given encoding to float32.

    Args:
        values: Samples in their native numeric representation
        encoding: Encoding the values are stored in

    Returns:
        New float32 array of the same length
    """
    if encoding is SampleEncoding.F32:
        return np.array(values, dtype=np.float32, copy=True)
    if encoding is SampleEncoding.F64:
        return np.asarray(values, dtype=np.float64).astype(np.float32)

    divisor, offset = _INTEGER_SCALING[encoding]
    scaled = np.asarray(values, dtype=np.float64) / divisor + offset
    return scaled.astype(np.float32)
