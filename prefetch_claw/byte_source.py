"""
Random-access byte sources for the prefetch decoder.

Decoders only depend on the ByteSource protocol: exact-length reads plus
absolute and relative seeks over a finite stream. StreamSource adapts any
seekable binary file object (an open .pf file, io.BytesIO, ...) to it and
turns short reads, out-of-range seeks and stream failures into
PrefetchError subclasses.
"""

import io
import os
import struct
import logging
from typing import BinaryIO, Protocol, Union

from .errors import PrefetchIOError, TruncatedError

logger = logging.getLogger(__name__)


class ByteSource(Protocol):
    """Capability consumed by every decoder."""

    @property
    def size(self) -> int:
        ...

    def tell(self) -> int:
        ...

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        ...

    def read_exact(self, count: int) -> bytes:
        ...

    def read_u16(self) -> int:
        ...

    def read_u32(self) -> int:
        ...

    def read_u64(self) -> int:
        ...


class StreamSource:
    """ByteSource over a seekable binary stream.

    The stream size is measured once at construction; seeks past it and reads
    that would cross it fail with TruncatedError before touching the stream,
    so a hostile offset or length never triggers a large allocation.

    Args:
        stream: Seekable binary file-like object
    """

    def __init__(self, stream: BinaryIO):
        self._stream = stream
        try:
            position = stream.tell()
            self._size = stream.seek(0, os.SEEK_END)
            stream.seek(position)
        except (OSError, ValueError) as e:
            raise PrefetchIOError("Byte source is not seekable", original_error=e) from e

    @property
    def size(self) -> int:
        return self._size

    def tell(self) -> int:
        try:
            return self._stream.tell()
        except (OSError, ValueError) as e:
            raise PrefetchIOError("Failed to query stream position", original_error=e) from e

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        """Move to an absolute (SEEK_SET) or relative (SEEK_CUR) position.

        Returns:
            int: The new absolute position

        Raises:
            TruncatedError: If the target lies beyond the end of the source
            PrefetchIOError: If the target is negative or the stream fails
        """
        if whence == os.SEEK_SET:
            target = offset
        elif whence == os.SEEK_CUR:
            target = self.tell() + offset
        elif whence == os.SEEK_END:
            target = self._size + offset
        else:
            raise PrefetchIOError(f"Invalid whence value: {whence}")

        if target < 0:
            raise PrefetchIOError(f"Negative seek target: {target}", offset=target)
        if target > self._size:
            raise TruncatedError(
                f"Seek to 0x{target:X} beyond end of source (size 0x{self._size:X})",
                offset=target,
            )

        try:
            return self._stream.seek(target)
        except (OSError, ValueError) as e:
            raise PrefetchIOError(f"Failed to seek to 0x{target:X}", original_error=e,
                                  offset=target) from e

    def read_exact(self, count: int) -> bytes:
        """Read exactly `count` bytes.

        Raises:
            TruncatedError: If fewer than `count` bytes remain
            PrefetchIOError: If the underlying stream fails
        """
        position = self.tell()
        if count < 0:
            raise PrefetchIOError(f"Negative read length: {count}", offset=position)
        if position + count > self._size:
            raise TruncatedError(
                f"Need {count} bytes but only {self._size - position} remain",
                offset=position,
            )

        try:
            data = self._stream.read(count)
        except (OSError, ValueError) as e:
            raise PrefetchIOError(f"Failed to read {count} bytes", original_error=e,
                                  offset=position) from e

        if len(data) != count:
            raise TruncatedError(f"Short read: got {len(data)} of {count} bytes", offset=position)
        return data

    def read_u16(self) -> int:
        return struct.unpack("<H", self.read_exact(2))[0]

    def read_u32(self) -> int:
        return struct.unpack("<I", self.read_exact(4))[0]

    def read_u64(self) -> int:
        return struct.unpack("<Q", self.read_exact(8))[0]


def as_source(obj: Union[ByteSource, BinaryIO, bytes, bytearray, memoryview]) -> ByteSource:
    """Wrap raw bytes or a binary stream as a ByteSource; sources pass through."""
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return StreamSource(io.BytesIO(bytes(obj)))
    if hasattr(obj, "read_exact"):
        return obj
    return StreamSource(obj)
