"""
Prefetch format versions and their execution-information layouts.

The execution section is the only part of the uncompressed formats whose
position moves between Windows releases, so its offsets are kept here as
data instead of one decode routine per version.
"""

import enum
from dataclasses import dataclass
from typing import Dict

from .errors import UnsupportedVersionError


class Version(enum.IntEnum):
    """Enum representing Windows Prefetch file format versions.

    Each Windows release writes a specific format version number in the first
    four bytes of the file. WIN10 is recognized so that it can be reported
    precisely, but its payload is LZXPRESS compressed and is not decoded.
    """
    WIN_XP = 0x11   # Windows XP and Server 2003
    VISTA = 0x17    # Windows Vista and Windows 7
    WIN8 = 0x1A     # Windows 8, 8.1 and Server 2012/R2
    WIN10 = 0x30    # Windows 10 (compressed)


@dataclass(frozen=True)
class ExecutionLayout:
    """Byte offsets of the execution fields for one format version.

    Attributes:
        last_execution_offset (int): Offset of the first 8-byte FILETIME slot
        run_count_offset (int): Offset of the 4-byte run counter
        run_time_slots (int): Number of consecutive FILETIME slots stored
    """
    last_execution_offset: int
    run_count_offset: int
    run_time_slots: int = 1


LAYOUTS: Dict[Version, ExecutionLayout] = {
    Version.WIN_XP: ExecutionLayout(0x78, 0x90),
    Version.VISTA: ExecutionLayout(0x80, 0x98),
    Version.WIN8: ExecutionLayout(0x80, 0xD0, run_time_slots=8),
}

SUPPORTED_VERSIONS = frozenset(LAYOUTS)


def layout_for(version: Version) -> ExecutionLayout:
    """Return the execution layout of a decodable version.

    Raises:
        UnsupportedVersionError: If the version has no uncompressed layout (WIN10)
    """
    try:
        return LAYOUTS[version]
    except KeyError:
        raise UnsupportedVersionError(
            f"No execution layout for prefetch version {version.name}", version_code=int(version)
        ) from None
