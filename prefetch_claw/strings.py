"""
UTF-16 string readers for prefetch string tables.

Prefetch files store text as UTF-16LE in three shapes:
- fixed-width fields padded with nulls (the executable name),
- a section of null-terminated strings filling a known byte span (the
  filename strings section),
- length-prefixed strings, usually followed by an end-of-string unit (the
  directory strings of a volume).
"""

import os
import logging
from typing import List

from .byte_source import ByteSource
from .errors import InvalidStringEncodingError

logger = logging.getLogger(__name__)

UTF16_NULL = b"\x00\x00"


def _decode(data: bytes, offset: int) -> str:
    try:
        return data.decode("utf-16-le")
    except UnicodeDecodeError as e:
        raise InvalidStringEncodingError(
            f"Malformed UTF-16 string: {e.reason}",
            offset=offset + e.start,
        ) from e


def _find_null(data: bytes, start: int = 0) -> int:
    """Index of the first null code unit at or after `start`, or -1."""
    for i in range(start, len(data) - 1, 2):
        if data[i] == 0 and data[i + 1] == 0:
            return i
    return -1


def read_utf16_exact(source: ByteSource, size: int) -> str:
    """Read a fixed `size`-byte UTF-16 field, cut at the first null unit.

    Bytes after the terminator are padding and are not decoded.
    """
    offset = source.tell()
    data = source.read_exact(size)
    end = _find_null(data)
    if end >= 0:
        data = data[:end]
    return _decode(data, offset)


def read_sized_utf16(source: ByteSource) -> str:
    """Read a u16 code-unit count followed by that many UTF-16 units."""
    unit_count = source.read_u16()
    offset = source.tell()
    return _decode(source.read_exact(unit_count * 2), offset)


def read_utf16_list(source: ByteSource, size: int) -> List[str]:
    """Read a `size`-byte span of null-terminated UTF-16 strings.

    Strings are returned in file order. Empty entries (section padding) are
    skipped; an unterminated final entry is still returned.
    """
    offset = source.tell()
    data = source.read_exact(size)

    strings = []
    start = 0
    while start < len(data):
        end = _find_null(data, start)
        if end < 0:
            end = len(data)
        if end > start:
            strings.append(_decode(data[start:end], offset + start))
        start = end + 2

    logger.debug(f"Read {len(strings)} strings from {size} bytes at 0x{offset:X}")
    return strings


def read_folder_paths(source: ByteSource, count: int) -> List[str]:
    """Read `count` entries of a volume's directory strings table.

    Each entry is a length-prefixed string. A null unit right after an entry is
    its terminator and is skipped; entries packed back to back and a table
    ending at the end of the source are read as they are.

    A count larger than the remaining data ends in TruncatedError from the
    source rather than a long loop over missing entries.
    """
    folders = []
    for _ in range(count):
        folders.append(read_sized_utf16(source))
        if source.size - source.tell() >= len(UTF16_NULL):
            if source.read_exact(len(UTF16_NULL)) != UTF16_NULL:
                source.seek(-len(UTF16_NULL), os.SEEK_CUR)
    return folders
