"""Audio file decoding to a mono float32 sample buffer."""

import logging
from pathlib import Path
from typing import List, Union

import av
import numpy as np
from av.error import FFmpegError

from .encodings import encoding_for_format, to_float32
from ..errors import DecodeError, NoAudioTrack, UnreadableSource, UnrecognizedFormat
from ..models.audio import SampleBuffer

logger = logging.getLogger(__name__)


class SampleDecoder:
    """Decodes any container/codec FFmpeg understands into a SampleBuffer.

    Only the first channel of the first audio track is kept. Decoding is
    all-or-nothing: a failure on any packet discards everything decoded so far.
    """

    def decode(self, path: Union[str, Path]) -> SampleBuffer:
        """Decode an audio file fully.

        Args:
            path: Path to the audio file

        Returns:
            SampleBuffer at the file's native sample rate

        Raises:
            UnreadableSource: File cannot be opened
            UnrecognizedFormat: No container format matched
            NoAudioTrack: Container has no decodable audio track
            DecodeError: A packet failed to decode
        """
        path = Path(path)
        logger.info(f"Decoding audio file: {path}")

        try:
            source = open(path, "rb")
        except OSError as e:
            raise UnreadableSource(f"Cannot open audio file {path}: {e}") from e

        with source:
            try:
                container = av.open(source, mode="r")
            except FFmpegError as e:
                raise UnrecognizedFormat(f"Unrecognized audio format in {path}: {e}") from e

            with container:
                stream = self._select_audio_stream(container, path)
                return self._decode_stream(container, stream, path)

    def _select_audio_stream(self, container, path: Path):
        """Pick the first audio stream that has a decoder."""
        if not container.streams.audio:
            raise NoAudioTrack(f"No audio track found in {path}")

        stream = container.streams.audio[0]
        if stream.codec_context is None:
            raise NoAudioTrack(f"No decoder available for the audio track in {path}")

        codec = stream.codec_context
        logger.debug(f"Audio track: codec={codec.name}, sample_rate={codec.sample_rate}, "
                     f"channels={len(codec.layout.channels)}, format={codec.format.name if codec.format else None}")
        return stream

    def _decode_stream(self, container, stream, path: Path) -> SampleBuffer:
        chunks: List[np.ndarray] = []
        sample_rate = stream.codec_context.sample_rate or 0
        packet_count = 0

        try:
            for packet in container.demux(stream):
                for frame in packet.decode():
                    chunks.append(self._first_channel(frame))
                    if not sample_rate:
                        sample_rate = frame.sample_rate or 0
                packet_count += 1
        except FFmpegError as e:
            raise DecodeError(f"Failed to decode packet {packet_count} of {path}: {e}") from e

        samples = np.concatenate(chunks) if chunks else np.zeros(0, dtype=np.float32)
        if samples.size and not sample_rate:
            raise DecodeError(f"Audio track in {path} does not declare a sample rate")

        logger.info(f"Decoded {samples.size} samples at {sample_rate}Hz from {packet_count} packets")
        if samples.size:
            logger.debug(f"Sample range: [{samples.min():.4f}, {samples.max():.4f}]")

        return SampleBuffer(samples=samples, sample_rate=sample_rate)

    def _first_channel(self, frame) -> np.ndarray:
        """Extract channel 0 of a decoded frame as float32."""
        try:
            encoding = encoding_for_format(frame.format.name)
        except ValueError as e:
            raise DecodeError(str(e)) from e

        data = frame.to_ndarray()
        if frame.format.is_planar:
            channel = data[0]
        else:
            # Packed layouts interleave channels
            channel_count = len(frame.layout.channels)
            channel = data.reshape(-1)[::channel_count]

        return to_float32(channel, encoding)


def decode(path: Union[str, Path]) -> SampleBuffer:
    """Decode an audio file into a mono float32 SampleBuffer."""
    return SampleDecoder().decode(path)
