"""
Batch prefetch collection.

Decodes every .pf file of a directory (a live C:\\Windows\\Prefetch or an
offline copy under a case folder) and stores one row per file in a SQLite
database. Files that fail to decode are listed in failed_prefetch_files.txt
next to the database.
"""

import os
import json
import sqlite3
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from tqdm import tqdm

from .config import COLLECTOR_CONFIG, DEFAULT_DB_NAME, FAILED_LOG_NAME, PREFETCH_EXTENSION
from .errors import PrefetchError
from .prefetch import Prefetch
from .report import format_hex, format_time

logger = logging.getLogger(__name__)

CREATE_TABLE_SQL = """
    CREATE TABLE IF NOT EXISTS prefetch_data (
        filename TEXT,
        executable_name TEXT,
        hash TEXT,
        format_version INTEGER,
        run_count INTEGER,
        last_executed TIMESTAMP,
        run_times JSON,
        volume_serial TEXT,
        volume_created TIMESTAMP,
        directories JSON,
        resources JSON,
        PRIMARY KEY(filename, hash)
    )
"""


@dataclass
class CollectionResult:
    """Outcome of a batch run.

    Attributes:
        db_path (str): Database the rows were written to
        parsed (List[str]): Files decoded and stored
        failed (List[str]): Files that could not be decoded
        failed_log_path (Optional[str]): Failure list file, when any file failed
    """
    db_path: str
    parsed: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    failed_log_path: Optional[str] = None

    @property
    def total(self) -> int:
        return len(self.parsed) + len(self.failed)


def find_prefetch_files(prefetch_dir: str) -> List[str]:
    """Sorted names of the .pf files directly inside `prefetch_dir`."""
    if not os.path.isdir(prefetch_dir):
        raise NotADirectoryError(f"Prefetch directory not found: {prefetch_dir}")
    return sorted(f for f in os.listdir(prefetch_dir) if f.lower().endswith(PREFETCH_EXTENSION))


def save_to_sqlite(conn: sqlite3.Connection, prefetch: Prefetch, filename: str,
                   skip_duplicates: bool = True) -> bool:
    """Insert one decoded file. Returns False when the row already existed and was kept."""
    verb = "INSERT OR IGNORE" if skip_duplicates else "INSERT OR REPLACE"
    volume = prefetch.volume_information

    cursor = conn.execute(f"""
        {verb} INTO prefetch_data (
            filename, executable_name, hash, format_version, run_count, last_executed,
            run_times, volume_serial, volume_created, directories, resources
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
    """, (
        filename,
        prefetch.executable_filename,
        format_hex(prefetch.header.hash),
        int(prefetch.header.version),
        prefetch.run_count,
        format_time(prefetch.last_execution_time),
        json.dumps([format_time(t) for t in prefetch.file_information.run_times]),
        format_hex(volume.volume_serial_number),
        format_time(volume.volume_creation_date),
        json.dumps(list(prefetch.volumes)),
        json.dumps(list(prefetch.files)),
    ))
    return cursor.rowcount > 0


def process_prefetch_files(prefetch_dir: str, db_path: Optional[str] = None,
                           strict_signature: Optional[bool] = None,
                           show_progress: Optional[bool] = None) -> CollectionResult:
    """
    Decode the prefetch files of a directory and store them in SQLite.

    Args:
        prefetch_dir (str): Directory holding .pf files
        db_path (str, optional): Output database; defaults to prefetch_data.db
            inside the current directory
        strict_signature (bool, optional): Reject signatures other than 'SCCA'
        show_progress (bool, optional): Display a tqdm progress bar

    Returns:
        CollectionResult: Parsed and failed file names

    Raises:
        NotADirectoryError: If `prefetch_dir` does not exist
        sqlite3.Error: If the database cannot be written
    """
    if db_path is None:
        db_path = DEFAULT_DB_NAME
    if strict_signature is None:
        strict_signature = COLLECTOR_CONFIG['strict_signature']
    if show_progress is None:
        show_progress = COLLECTOR_CONFIG['progress_bar']

    files = find_prefetch_files(prefetch_dir)
    result = CollectionResult(db_path=db_path)
    logger.info(f"Found {len(files)} prefetch files in {prefetch_dir}")

    conn = sqlite3.connect(db_path)
    try:
        conn.execute(CREATE_TABLE_SQL)

        progress_bar = tqdm(files, desc=COLLECTOR_CONFIG['progress_desc'],
                            unit=COLLECTOR_CONFIG['progress_unit'], disable=not show_progress)
        for filename in progress_bar:
            file_path = os.path.join(prefetch_dir, filename)
            try:
                prefetch = Prefetch.open(file_path, strict_signature=strict_signature)
            except PrefetchError as e:
                logger.warning(f"Error processing {filename}: [{e.kind.value}] {e.details}")
                result.failed.append(filename)
                continue

            if not save_to_sqlite(conn, prefetch, filename, COLLECTOR_CONFIG['skip_duplicates']):
                logger.debug(f"Skipped duplicate record for {filename}")
            result.parsed.append(filename)

        conn.commit()
    finally:
        conn.close()

    if result.failed:
        result.failed_log_path = os.path.join(os.path.dirname(os.path.abspath(db_path)), FAILED_LOG_NAME)
        with open(result.failed_log_path, 'w', encoding='utf-8') as f:
            for name in result.failed:
                f.write(f"{name}\n")
        logger.warning(f"Failed to process {len(result.failed)} files. List saved to {result.failed_log_path}")

    logger.info(f"Successfully processed {len(result.parsed)}/{result.total} prefetch files")
    return result
