"""
Prefetch File Parser for Windows Forensic Analysis

This module decodes Windows Prefetch files (.pf), which track program
execution history on Windows systems.

Key Features:
- Supports the uncompressed Prefetch formats (XP/2003, Vista/7, 8/8.1/2012)
- Recognizes and rejects compressed Windows 10 files instead of misreading them
- Extracts execution timestamps, run counts, volume information, and the
  files and directories the executable touched
- All-or-nothing decoding: the first error aborts, no partial record

Author: Ghassan Elsman
Version: 1.0
"""

import enum
import logging
import datetime
from dataclasses import dataclass
from typing import BinaryIO, Optional, Tuple, Union

from .byte_source import ByteSource, as_source
from .errors import PrefetchError, PrefetchIOError
from .strings import read_folder_paths, read_utf16_list
from .structures import ExecutionInfo, Header, VolumeInfo

logger = logging.getLogger(__name__)


class DecodeState(enum.Enum):
    """Steps of a decode pass; each step seeks using fields read by an earlier one."""
    START = "start"
    HEADER_READ = "header_read"
    EXECUTION_INFO_READ = "execution_info_read"
    VOLUME_INFO_READ = "volume_info_read"
    FILE_PATHS_READ = "file_paths_read"
    FOLDER_PATHS_READ = "folder_paths_read"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class Prefetch:
    """Decoded Windows prefetch file.

    Forensic Value:
    - Evidence of program execution (what, when, how many times)
    - Files and directories accessed during the first seconds of execution
    - Serial number and creation date of the volume the program ran from

    Attributes:
        header (Header): Header fields
        file_information (ExecutionInfo): Last run time and run count
        volume_information (VolumeInfo): Volume record
        files (Tuple[str, ...]): Files referenced, in file order
        volumes (Tuple[str, ...]): Directories referenced on the volume, in file order
    """
    header: Header
    file_information: ExecutionInfo
    volume_information: VolumeInfo
    files: Tuple[str, ...]
    volumes: Tuple[str, ...]

    @property
    def executable_filename(self) -> str:
        return self.header.executable_filename

    @property
    def last_execution_time(self) -> datetime.datetime:
        return self.file_information.last_execution_time

    @property
    def run_count(self) -> int:
        return self.file_information.number_of_execution

    @classmethod
    def from_reader(cls, source: Union[ByteSource, BinaryIO], strict_signature: bool = False) -> 'Prefetch':
        """Decode a prefetch file from a seekable binary stream or ByteSource.

        Raises:
            PrefetchError: The first decode failure, see prefetch_claw.errors
        """
        return PrefetchDecoder(source, strict_signature=strict_signature).decode()

    @classmethod
    def from_bytes(cls, data: bytes, strict_signature: bool = False) -> 'Prefetch':
        return cls.from_reader(as_source(data), strict_signature=strict_signature)

    @classmethod
    def open(cls, file_path: str, strict_signature: bool = False) -> 'Prefetch':
        """Open and decode a prefetch file from disk.

        Args:
            file_path (str): Path to the prefetch file (.pf)
            strict_signature (bool): Reject signatures other than 'SCCA'

        Returns:
            Prefetch: Decoded prefetch record

        Raises:
            PrefetchIOError: If the file cannot be opened
            PrefetchError: If decoding fails
        """
        try:
            f = open(file_path, 'rb')
        except OSError as e:
            raise PrefetchIOError(f"Can't open file {file_path}", original_error=e) from e

        with f:
            return cls.from_reader(f, strict_signature=strict_signature)


class PrefetchDecoder:
    """Runs one decode pass over one byte source.

    The decoder walks DecodeState in order and stops at DONE or FAILED. After
    decode() returns or raises, `state` holds the terminal state and `error`
    the failure, if any. A decoder is single use; decode a second file (or the
    same file again) with a new instance.

    Args:
        source: Seekable binary stream or ByteSource
        strict_signature (bool): Reject signatures other than 'SCCA'
    """

    def __init__(self, source: Union[ByteSource, BinaryIO], strict_signature: bool = False):
        self._raw_source = source
        self.strict_signature = strict_signature
        self.state = DecodeState.START
        self.error: Optional[PrefetchError] = None

    def decode(self) -> Prefetch:
        if self.state != DecodeState.START:
            raise RuntimeError(f"Decoder already ran (state: {self.state.value})")

        try:
            return self._run()
        except PrefetchError as e:
            logger.debug(f"Decode failed after {self.state.value}: {e.details}")
            self.state = DecodeState.FAILED
            self.error = e
            raise

    def _run(self) -> Prefetch:
        source = as_source(self._raw_source)

        header = Header.from_reader(source, strict_signature=self.strict_signature)
        self.state = DecodeState.HEADER_READ
        logger.debug(f"Header: {header.executable_filename} version {header.version.name}, "
                     f"files at 0x{header.first_file_path_offset:X} ({header.first_file_path_size} bytes), "
                     f"volume info at 0x{header.volume_information_offset:X}")

        file_information = ExecutionInfo.from_reader(source, header.version)
        self.state = DecodeState.EXECUTION_INFO_READ

        source.seek(header.volume_information_offset)
        volume_information = VolumeInfo.from_reader(source)
        self.state = DecodeState.VOLUME_INFO_READ

        source.seek(header.first_file_path_offset)
        files = read_utf16_list(source, header.first_file_path_size)
        self.state = DecodeState.FILE_PATHS_READ

        source.seek(header.volume_information_offset + volume_information.folder_path_offset)
        volumes = read_folder_paths(source, volume_information.folder_path_count)
        self.state = DecodeState.FOLDER_PATHS_READ

        prefetch = Prefetch(header, file_information, volume_information, tuple(files), tuple(volumes))
        self.state = DecodeState.DONE
        return prefetch
