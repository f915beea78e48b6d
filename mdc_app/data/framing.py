"""
Fixed-length framing for the inbound byte stream.

TCP delivers arbitrary chunk boundaries. The decoder accumulates bytes and
cuts them into frames of exactly ``frame_length`` bytes in arrival order,
keeping any trailing partial frame until more data completes it.
"""

from collections.abc import Iterable, Iterator
from typing import Optional

from .models import PACKET_SIZE


class FrameDecoder:
    """Accumulating splitter for fixed-size frames. Never inspects contents."""

    def __init__(self, frame_length: int = PACKET_SIZE):
        if frame_length <= 0:
            raise ValueError(f"frame_length must be positive, got {frame_length}")
        self.frame_length = frame_length
        self._buffer = bytearray()
        self.frames_decoded = 0
        self.bytes_discarded = 0

    @property
    def pending(self) -> int:
        """Number of buffered bytes not yet forming a full frame."""
        return len(self._buffer)

    def feed(self, chunk: bytes) -> list[bytes]:
        """Append a chunk and return every frame it completes, in order."""
        self._buffer.extend(chunk)

        count = len(self._buffer) // self.frame_length
        if count == 0:
            return []

        end = count * self.frame_length
        frames = [
            bytes(self._buffer[offset:offset + self.frame_length])
            for offset in range(0, end, self.frame_length)
        ]
        del self._buffer[:end]
        self.frames_decoded += count
        return frames

    def finish(self) -> int:
        """
        Drop leftover partial bytes at end of stream.

        Returns the number of bytes discarded. A short tail is expected when a
        connection closes mid-frame and is not an error.
        """
        discarded = len(self._buffer)
        self.bytes_discarded += discarded
        self._buffer.clear()
        return discarded


def iter_frames(
    chunks: Iterable[bytes],
    frame_length: int = PACKET_SIZE,
    decoder: Optional[FrameDecoder] = None,
) -> Iterator[bytes]:
    """
    Lazily yield frames from a finite stream of chunks.

    Frames are produced as soon as the chunk completing them is read. When the
    chunk stream ends, any partial tail is discarded.
    """
    decoder = decoder or FrameDecoder(frame_length)
    try:
        for chunk in chunks:
            yield from decoder.feed(chunk)
    finally:
        decoder.finish()
