"""
Reporting helpers: turn a decoded Prefetch record into JSON or a readable text report.
"""

import os
import json
import datetime
from typing import Any, Dict, Optional

from .config import DISPLAY_TIME_FORMAT, JSON_INDENT
from .prefetch import Prefetch


def format_hex(value: int) -> str:
    """Upper-case hex without prefix, zero padded to 8 digits (e.g. DEADBEEF)."""
    return format(value, '08X')


def format_time(value: datetime.datetime) -> str:
    return value.strftime(DISPLAY_TIME_FORMAT)


def to_dict(prefetch: Prefetch) -> Dict[str, Any]:
    """JSON-ready view of a record; timestamps are ISO-8601 UTC strings.

    Decode coordinates (offsets and sizes) are left out, they only locate
    data inside the file.
    """
    header = prefetch.header
    execution = prefetch.file_information
    volume = prefetch.volume_information

    return {
        "header": {
            "version": header.version.name,
            "signature": header.signature,
            "file_size": header.file_size,
            "file_name": header.executable_filename,
            "hash": format_hex(header.hash),
        },
        "file_information": {
            "last_execution_time": execution.last_execution_time.isoformat(),
            "number_of_execution": execution.number_of_execution,
            "run_times": [t.isoformat() for t in execution.run_times],
        },
        "volume_information": {
            "volume_creation_date": volume.volume_creation_date.isoformat(),
            "volume_serial_number": format_hex(volume.volume_serial_number),
        },
        "files": list(prefetch.files),
        "volumes": list(prefetch.volumes),
    }


def to_json(prefetch: Prefetch, indent: Optional[int] = JSON_INDENT) -> str:
    return json.dumps(to_dict(prefetch), indent=indent, ensure_ascii=False)


def format_text(prefetch: Prefetch, source_filename: Optional[str] = None) -> str:
    result = []

    filename = os.path.basename(source_filename) if source_filename else "Unknown"
    result.append(f"Prefetch File: {filename}")
    result.append(f"Format: {prefetch.header.version.name} (0x{prefetch.header.version.value:X})")
    result.append(f"Executable Name: {prefetch.executable_filename}")
    result.append(f"Hash: {format_hex(prefetch.header.hash)}")
    result.append(f"Run Count: {prefetch.run_count}")
    result.append(f"Last Executed: {format_time(prefetch.last_execution_time)}")

    run_times = prefetch.file_information.run_times
    if len(run_times) > 1:
        result.append("Execution Timeline:")
        for i, time in enumerate(run_times, 1):
            result.append(f"  {i}. {format_time(time)}")

    volume = prefetch.volume_information
    result.append("Volume Information:")
    result.append(f"  Creation Date: {format_time(volume.volume_creation_date)}")
    result.append(f"  Serial Number: {format_hex(volume.volume_serial_number)}")
    if prefetch.volumes:
        result.append("  Directories Referenced:")
        for dir_path in prefetch.volumes:
            result.append(f"    {dir_path}")

    if prefetch.files:
        result.append("Resources Loaded:")
        for i, name in enumerate(prefetch.files, 1):
            result.append(f"  {i}. {name}")

    return "\n".join(result)
