"""Upload size ceilings.

The same ceiling is enforced twice: once on the byte stream itself (reads past
the limit fail before the extra bytes reach a consumer) and once explicitly
against the size the transport reports, so client-declared metadata is never
trusted on its own.
"""

import io
import os
from typing import BinaryIO, Optional

from src.objectstore.errors import OversizedPayload


class BoundedStream:
    """Read-only view of *raw* that refuses to hand out more than *max_bytes*.

    Seeking is forwarded to the wrapped stream, so a bounded stream over a
    seekable source can be rewound and re-read any number of times.
    """

    def __init__(self, raw: BinaryIO, max_bytes: int):
        self._raw = raw
        self.max_bytes = max_bytes
        self._position = self._raw_tell()

    def _raw_tell(self) -> int:
        if self.seekable():
            return self._raw.tell()
        return 0

    def read(self, size: Optional[int] = -1) -> bytes:
        remaining = self.max_bytes - self._position
        if size is None or size < 0:
            want = remaining + 1
        else:
            want = min(size, remaining + 1)
        data = self._raw.read(want)
        if len(data) > remaining:
            raise OversizedPayload(actual=self._position + len(data), limit=self.max_bytes)
        self._position += len(data)
        return data

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        seekable = getattr(self._raw, "seekable", None)
        return bool(seekable and seekable())

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        if not self.seekable():
            raise io.UnsupportedOperation("underlying stream is not seekable")
        self._position = self._raw.seek(offset, whence)
        return self._position

    def tell(self) -> int:
        return self._position

    def close(self) -> None:
        self._raw.close()

    @property
    def closed(self) -> bool:
        return getattr(self._raw, "closed", False)


def clamp(stream: BinaryIO, max_bytes: int) -> BoundedStream:
    if isinstance(stream, BoundedStream) and stream.max_bytes <= max_bytes:
        return stream
    return BoundedStream(stream, max_bytes)


def check_declared_size(declared_size: Optional[int], max_bytes: int) -> None:
    """Raise :class:`OversizedPayload` when a known size exceeds the ceiling."""
    if declared_size is not None and declared_size > max_bytes:
        raise OversizedPayload(actual=declared_size, limit=max_bytes)


class SizeGuard:
    """Binds both checks to one configured ceiling."""

    def __init__(self, max_bytes: int):
        self.max_bytes = max_bytes

    def clamp(self, stream: BinaryIO) -> BoundedStream:
        return clamp(stream, self.max_bytes)

    def check_declared_size(self, declared_size: Optional[int]) -> None:
        check_declared_size(declared_size, self.max_bytes)
