"""Tests for the batch SQLite collector."""

import json
import logging
import sqlite3

import pytest

from prefetch_claw.collector import find_prefetch_files, process_prefetch_files
from prefetch_claw.config import FAILED_LOG_NAME


def fetch_rows(db_path):
    with sqlite3.connect(db_path) as conn:
        conn.row_factory = sqlite3.Row
        rows = conn.execute("SELECT * FROM prefetch_data ORDER BY filename").fetchall()
    return [dict(row) for row in rows]


def test_find_prefetch_files(prefetch_dir):
    assert find_prefetch_files(str(prefetch_dir)) == [
        "CALC.EXE-0AC2F1B0.pf",
        "NOTEPAD.EXE-D8414F97.pf",
        "TEST.EXE-DEADBEEF.pf",
    ]


def test_missing_directory(tmp_path):
    with pytest.raises(NotADirectoryError):
        find_prefetch_files(str(tmp_path / "nope"))


def test_process_directory(prefetch_dir, tmp_path, caplog):
    db_path = str(tmp_path / "prefetch_data.db")

    with caplog.at_level(logging.WARNING, logger="prefetch_claw"):
        result = process_prefetch_files(str(prefetch_dir), db_path, show_progress=False)

    assert result.parsed == ["CALC.EXE-0AC2F1B0.pf", "TEST.EXE-DEADBEEF.pf"]
    assert result.failed == ["NOTEPAD.EXE-D8414F97.pf"]
    assert result.total == 3
    assert "unsupported_version" in caplog.text

    rows = fetch_rows(db_path)
    assert [row["executable_name"] for row in rows] == ["CALC.EXE", "TEST.EXE"]

    test_row = rows[1]
    assert test_row["hash"] == "DEADBEEF"
    assert test_row["format_version"] == 0x11
    assert test_row["run_count"] == 3
    assert test_row["last_executed"] == "2023-05-17 14:30:05"
    assert json.loads(test_row["run_times"]) == ["2023-05-17 14:30:05"]
    assert test_row["volume_serial"] == "12345678"
    assert json.loads(test_row["resources"]) == ["\\C\\a.dll", "\\C\\b.dll"]
    assert json.loads(test_row["directories"]) == ["\\Device\\HarddiskVolume1"]
    assert rows[0]["run_count"] == 7


def test_failed_files_are_listed(prefetch_dir, tmp_path):
    db_path = tmp_path / "out" / "prefetch_data.db"
    db_path.parent.mkdir()

    result = process_prefetch_files(str(prefetch_dir), str(db_path), show_progress=False)

    assert result.failed_log_path == str(db_path.parent / FAILED_LOG_NAME)
    assert (db_path.parent / FAILED_LOG_NAME).read_text(encoding="utf-8") == "NOTEPAD.EXE-D8414F97.pf\n"


def test_second_run_keeps_existing_rows(prefetch_dir, tmp_path):
    db_path = str(tmp_path / "prefetch_data.db")
    process_prefetch_files(str(prefetch_dir), db_path, show_progress=False)
    result = process_prefetch_files(str(prefetch_dir), db_path, show_progress=False)

    assert len(result.parsed) == 2
    assert len(fetch_rows(db_path)) == 2


def test_strict_signature_rejects_files(build, tmp_path):
    directory = tmp_path / "Prefetch"
    directory.mkdir()
    (directory / "ODD.EXE-00000001.pf").write_bytes(build(signature=b"XXXX"))
    db_path = str(tmp_path / "prefetch_data.db")

    assert process_prefetch_files(str(directory), db_path, show_progress=False).parsed == ["ODD.EXE-00000001.pf"]
    strict = process_prefetch_files(str(directory), str(tmp_path / "strict.db"),
                                    strict_signature=True, show_progress=False)
    assert strict.failed == ["ODD.EXE-00000001.pf"]


def test_no_failures_writes_no_log(build, tmp_path):
    directory = tmp_path / "Prefetch"
    directory.mkdir()
    (directory / "TEST.EXE-DEADBEEF.pf").write_bytes(build())

    result = process_prefetch_files(str(directory), str(tmp_path / "prefetch_data.db"), show_progress=False)

    assert result.failed_log_path is None
    assert not (tmp_path / FAILED_LOG_NAME).exists()
