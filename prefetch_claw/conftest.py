"""
Shared fixtures: synthetic uncompressed prefetch images built with struct.
"""

import datetime
import struct

import pytest

from prefetch_claw.time_utils import datetime_to_filetime

UTC = datetime.timezone.utc

LAST_RUN = datetime.datetime(2023, 5, 17, 14, 30, 5, 123456, tzinfo=UTC)
VOLUME_CREATED = datetime.datetime(2019, 1, 2, 3, 4, 5, tzinfo=UTC)

# version code -> (first run-time slot offset, run count offset)
EXECUTION_OFFSETS = {
    0x11: (0x78, 0x90),
    0x17: (0x80, 0x98),
    0x1A: (0x80, 0xD0),
}

FILES_OFFSET = 0x100
FOLDER_TABLE_OFFSET = 0x40  # relative to the volume record

DEFAULT_FILES = ("\\C\\a.dll", "\\C\\b.dll")
DEFAULT_FOLDERS = ("\\Device\\HarddiskVolume1",)


def utf16_list(strings):
    return b"".join(s.encode("utf-16-le") + b"\x00\x00" for s in strings)


def folder_table(folders):
    blob = b""
    for folder in folders:
        encoded = folder.encode("utf-16-le")
        blob += struct.pack("<H", len(encoded) // 2) + encoded + b"\x00\x00"
    return blob


def build_prefetch(version=0x11, signature=b"SCCA", file_size=1000, name="TEST.EXE",
                   hash_value=0xDEADBEEF, last_run=LAST_RUN, run_count=3, run_times=None,
                   files=DEFAULT_FILES, files_blob=None, files_size=None,
                   serial=0x12345678, volume_created=VOLUME_CREATED,
                   folders=DEFAULT_FOLDERS, folder_count=None, folders_blob=None,
                   volume_offset=None):
    """Build a prefetch image.

    `last_run` and `run_times` accept datetimes or raw FILETIME integers.
    `run_times` fills consecutive slots starting at the first one and takes
    precedence over `last_run`.
    """
    if files_blob is None:
        files_blob = utf16_list(files)
    if files_size is None:
        files_size = len(files_blob)
    if folders_blob is None:
        folders_blob = folder_table(folders)
    if folder_count is None:
        folder_count = len(folders)

    volume_start = FILES_OFFSET + ((len(files_blob) + 0xF) & ~0xF) + 0x10
    end = volume_start + FOLDER_TABLE_OFFSET + len(folders_blob)
    buf = bytearray(end)

    struct.pack_into("<I", buf, 0x00, version)
    buf[0x04:0x08] = signature
    struct.pack_into("<I", buf, 0x0C, file_size)
    encoded_name = name.encode("utf-16-le")[:60]
    buf[0x10:0x10 + len(encoded_name)] = encoded_name
    struct.pack_into("<I", buf, 0x4C, hash_value)
    struct.pack_into("<III", buf, 0x64, FILES_OFFSET, files_size,
                     volume_start if volume_offset is None else volume_offset)

    time_offset, count_offset = EXECUTION_OFFSETS.get(version, (0x80, 0x98))
    slots = run_times if run_times is not None else [last_run]
    for i, value in enumerate(slots):
        if isinstance(value, datetime.datetime):
            value = datetime_to_filetime(value)
        struct.pack_into("<Q", buf, time_offset + 8 * i, value)
    struct.pack_into("<I", buf, count_offset, run_count)

    buf[FILES_OFFSET:FILES_OFFSET + len(files_blob)] = files_blob

    if isinstance(volume_created, datetime.datetime):
        volume_created = datetime_to_filetime(volume_created)
    struct.pack_into("<IIQIIIII", buf, volume_start,
                     0, 0, volume_created, serial, 0, 0, FOLDER_TABLE_OFFSET, folder_count)
    table_start = volume_start + FOLDER_TABLE_OFFSET
    buf[table_start:table_start + len(folders_blob)] = folders_blob

    return bytes(buf)


@pytest.fixture
def build():
    return build_prefetch


@pytest.fixture
def xp_image():
    return build_prefetch()


@pytest.fixture
def prefetch_dir(tmp_path):
    """Directory with two decodable files, one compressed file and a non-.pf file."""
    directory = tmp_path / "Prefetch"
    directory.mkdir()
    (directory / "TEST.EXE-DEADBEEF.pf").write_bytes(build_prefetch())
    (directory / "CALC.EXE-0AC2F1B0.pf").write_bytes(
        build_prefetch(version=0x17, name="CALC.EXE", hash_value=0x0AC2F1B0, run_count=7))
    (directory / "NOTEPAD.EXE-D8414F97.pf").write_bytes(b"MAM\x04" + b"\x00" * 0x200)
    (directory / "Layout.ini").write_text("not a prefetch file")
    return directory
