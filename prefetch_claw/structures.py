"""
Prefetch File Structures

Record types for the fixed sections of an uncompressed Windows Prefetch file
(formats 17, 23 and 26) and the decoders that read them from a ByteSource.

Layout of the leading header (little-endian throughout):

    0x00  version code                4
    0x04  signature ('SCCA')          4
    0x08  reserved                    4
    0x0C  file size                   4
    0x10  executable name (UTF-16)   60
    0x4C  hash                        4
    0x64  first file path offset      4
    0x68  first file path size        4
    0x6C  volume information offset   4

Author: Ghassan Elsman
Version: 1.0
"""

import os
import datetime
import logging
from dataclasses import dataclass
from typing import Tuple

from .byte_source import ByteSource
from .errors import InvalidTimestampError, MalformedSignatureError, TruncatedError, UnsupportedVersionError
from .strings import read_utf16_exact
from .time_utils import filetime_to_datetime
from .versions import LAYOUTS, Version, layout_for

logger = logging.getLogger(__name__)

SIGNATURE = "SCCA"
COMPRESSED_SIGNATURE = b"MAM"

HEADER_SIZE = 0x70
EXECUTABLE_NAME_OFFSET = 0x10
EXECUTABLE_NAME_SIZE = 60
FILE_INFORMATION_OFFSET = 0x64


def _read_filetime(source: ByteSource) -> Tuple[int, datetime.datetime]:
    """Read a FILETIME slot, returning the raw value and its UTC datetime."""
    offset = source.tell()
    raw_value = source.read_u64()
    try:
        return raw_value, filetime_to_datetime(raw_value)
    except InvalidTimestampError as e:
        raise InvalidTimestampError(e.message, raw_value=raw_value, offset=offset) from e


@dataclass(frozen=True)
class Header:
    """Represents the header section of a Windows Prefetch file.

    The header holds the format version, the 'SCCA' signature, the declared
    file size, the name of the executable that was run, and the hash derived
    from the executable path (the suffix of the .pf filename, e.g. the
    AF43252D in NOTEPAD.EXE-AF43252D.pf).

    Attributes:
        version (Version): The prefetch format version
        signature (str): The 4-byte signature string, normally 'SCCA'
        file_size (int): The declared size of the prefetch file in bytes
        executable_filename (str): The name of the executed program
        hash (int): The 32-bit hash of the executable path
        first_file_path_offset (int): Start of the filename strings section
        first_file_path_size (int): Size of the filename strings section in bytes
        volume_information_offset (int): Start of the volume information record
    """
    version: Version
    signature: str
    file_size: int
    executable_filename: str
    hash: int
    first_file_path_offset: int
    first_file_path_size: int
    volume_information_offset: int

    @classmethod
    def from_reader(cls, source: ByteSource, strict_signature: bool = False) -> 'Header':
        """Parse the prefetch header.

        Args:
            source (ByteSource): Source to read from; it is seeked explicitly
            strict_signature (bool): Reject signatures other than 'SCCA'

        Returns:
            Header: Parsed header

        Raises:
            TruncatedError: If the source is shorter than the header
            UnsupportedVersionError: For unknown, compressed or Windows 10 formats
            MalformedSignatureError: If the signature is not UTF-8 (or not
                'SCCA' with strict_signature)
        """
        if source.size < HEADER_SIZE:
            raise TruncatedError(
                f"Source holds {source.size} bytes, prefetch header needs {HEADER_SIZE}",
                offset=0,
            )

        source.seek(0)
        version = cls._read_version(source)

        signature_bytes = source.read_exact(4)
        try:
            signature = signature_bytes.decode('utf-8')
        except UnicodeDecodeError as e:
            raise MalformedSignatureError(
                f"Signature is not valid UTF-8: {signature_bytes.hex()}", offset=4
            ) from e
        if strict_signature and signature != SIGNATURE:
            raise MalformedSignatureError(
                f"Invalid signature: {signature!r}, expected {SIGNATURE!r}", offset=4
            )

        source.seek(4, os.SEEK_CUR)
        file_size = source.read_u32()

        source.seek(EXECUTABLE_NAME_OFFSET)
        executable_filename = read_utf16_exact(source, EXECUTABLE_NAME_SIZE)
        hash_val = source.read_u32()

        source.seek(FILE_INFORMATION_OFFSET)
        first_file_path_offset = source.read_u32()
        first_file_path_size = source.read_u32()
        volume_information_offset = source.read_u32()

        return cls(version, signature, file_size, executable_filename, hash_val,
                   first_file_path_offset, first_file_path_size, volume_information_offset)

    @staticmethod
    def _read_version(source: ByteSource) -> Version:
        version_bytes = source.read_exact(4)
        code = int.from_bytes(version_bytes, 'little')

        if version_bytes[:3] == COMPRESSED_SIGNATURE:
            raise UnsupportedVersionError(
                "Compressed (MAM) prefetch files are not supported", version_code=code, offset=0
            )

        try:
            version = Version(code)
        except ValueError:
            raise UnsupportedVersionError(
                f"Can't match prefetch version 0x{code:X}", version_code=code, offset=0
            ) from None

        if version not in LAYOUTS:
            raise UnsupportedVersionError(
                f"Unsupported prefetch version {version.name} (0x{code:X}): payload is compressed",
                version_code=code, offset=0,
            )
        return version


@dataclass(frozen=True)
class ExecutionInfo:
    """Execution evidence: when the program last ran and how often.

    Attributes:
        last_execution_time (datetime.datetime): First run-time slot, UTC
        number_of_execution (int): Run counter
        run_times (Tuple[datetime.datetime, ...]): Every non-zero run-time
            slot in stored order; unrepresentable older slots are dropped (eight slots in format 26, one otherwise)
    """
    last_execution_time: datetime.datetime
    number_of_execution: int
    run_times: Tuple[datetime.datetime, ...] = ()

    @classmethod
    def from_reader(cls, source: ByteSource, version: Version) -> 'ExecutionInfo':
        layout = layout_for(version)

        source.seek(layout.last_execution_offset)
        raw_last, last_execution_time = _read_filetime(source)
        run_times = [last_execution_time] if raw_last != 0 else []

        # Only the first slot is required to be a valid date
        for _ in range(layout.run_time_slots - 1):
            offset = source.tell()
            raw_value = source.read_u64()
            if raw_value == 0:
                continue
            try:
                run_times.append(filetime_to_datetime(raw_value))
            except InvalidTimestampError:
                logger.debug(f"Skipping invalid run time 0x{raw_value:X} at 0x{offset:X}")

        source.seek(layout.run_count_offset)
        number_of_execution = source.read_u32()

        logger.debug(f"{version.name}: last run {last_execution_time.isoformat()}, "
                     f"{number_of_execution} runs, {len(run_times)} run times")
        return cls(last_execution_time, number_of_execution, tuple(run_times))


@dataclass(frozen=True)
class VolumeInfo:
    """Represents the volume information record of a prefetch file.

    Identifies the volume the executable was loaded from. All offsets are
    relative to the start of this record, not to the start of the file.

    Attributes:
        volume_path_offset (int): Offset of the device path string
        volume_path_size (int): Device path length in characters
        volume_creation_date (datetime.datetime): Volume creation timestamp, UTC
        volume_serial_number (int): Volume serial number
        blob1_offset (int): Offset of the file references blob
        blob1_size (int): Size of the file references blob
        folder_path_offset (int): Offset of the directory strings table
        folder_path_count (int): Number of directory strings
    """
    volume_path_offset: int
    volume_path_size: int
    volume_creation_date: datetime.datetime
    volume_serial_number: int
    blob1_offset: int
    blob1_size: int
    folder_path_offset: int
    folder_path_count: int

    @classmethod
    def from_reader(cls, source: ByteSource) -> 'VolumeInfo':
        """Parse a volume record at the current position of `source`."""
        volume_path_offset = source.read_u32()
        volume_path_size = source.read_u32()
        _, volume_creation_date = _read_filetime(source)
        volume_serial_number = source.read_u32()
        blob1_offset = source.read_u32()
        blob1_size = source.read_u32()
        folder_path_offset = source.read_u32()
        folder_path_count = source.read_u32()

        return cls(volume_path_offset, volume_path_size, volume_creation_date, volume_serial_number,
                   blob1_offset, blob1_size, folder_path_offset, folder_path_count)
