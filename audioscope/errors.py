"""Exception types raised by the audioscope pipeline."""


class AudioscopeError(Exception):
    """Base class for all audioscope errors."""


class UnreadableSource(AudioscopeError):
    """The input file could not be opened."""


class UnrecognizedFormat(AudioscopeError):
    """No container/codec probe succeeded for the input."""


class NoAudioTrack(AudioscopeError):
    """The container holds no decodable audio track."""


class DecodeError(AudioscopeError):
    """A packet failed to decode mid-stream."""


class InvalidWindowSize(AudioscopeError, ValueError):
    """FFT window size is not a power of two (or is too small)."""


class InsufficientSamples(AudioscopeError):
    """The buffer is too short to produce a single analysis frame."""


class TranscriptionError(AudioscopeError, RuntimeError):
    """A speech recognition backend failed."""
