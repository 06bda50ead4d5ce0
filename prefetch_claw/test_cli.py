"""Tests for the command-line entry points."""

import json
import logging

import pytest

from prefetch_claw.cli import collect_main, main
from prefetch_claw.config import LOGGER_NAME


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers = []
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def pf_file(tmp_path, xp_image):
    path = tmp_path / "TEST.EXE-DEADBEEF.pf"
    path.write_bytes(xp_image)
    return path


def test_prints_json(pf_file, capsys):
    assert main([str(pf_file)]) == 0

    data = json.loads(capsys.readouterr().out)
    assert data["header"]["file_name"] == "TEST.EXE"
    assert data["files"] == ["\\C\\a.dll", "\\C\\b.dll"]
    assert data["volumes"] == ["\\Device\\HarddiskVolume1"]


def test_prints_text(pf_file, capsys):
    assert main([str(pf_file), "--format", "text"]) == 0

    out = capsys.readouterr().out
    assert out.startswith("Prefetch File: TEST.EXE-DEADBEEF.pf")
    assert "Run Count: 3" in out


@pytest.mark.parametrize("argv", [[], ["a.pf", "b.pf"]])
def test_wrong_argument_count_prints_usage(argv, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(argv)
    assert excinfo.value.code == 2
    captured = capsys.readouterr()
    assert "usage: prefetch" in captured.err
    assert captured.out == ""


def test_missing_file(tmp_path, capsys):
    assert main([str(tmp_path / "missing.pf")]) == 1

    captured = capsys.readouterr()
    assert "Can't open file" in captured.err
    assert captured.out == ""


def test_decode_failure(tmp_path, build, capsys):
    path = tmp_path / "WIN10.EXE-00000000.pf"
    path.write_bytes(build(version=0x30))

    assert main([str(path)]) == 1

    captured = capsys.readouterr()
    assert "Unsupported prefetch version" in captured.err
    assert captured.out == ""


def test_strict_flag(tmp_path, build, capsys):
    path = tmp_path / "ODD.EXE-00000001.pf"
    path.write_bytes(build(signature=b"XXXX"))

    assert main([str(path)]) == 0
    assert main([str(path), "--strict"]) == 1
    assert "Invalid signature" in capsys.readouterr().err


def test_verbose_log_file(pf_file, tmp_path, capsys):
    log_file = tmp_path / "decode.log"
    assert main([str(pf_file), "--verbose", "--log-file", str(log_file)]) == 0
    logging.getLogger(LOGGER_NAME).handlers[-1].flush()

    assert "Header: TEST.EXE version WIN_XP" in log_file.read_text(encoding="utf-8")


def test_verbose_keeps_json_output_clean(pf_file, capsys):
    assert main([str(pf_file), "--verbose"]) == 0

    captured = capsys.readouterr()
    assert json.loads(captured.out)["header"]["file_name"] == "TEST.EXE"
    assert "Header: TEST.EXE version WIN_XP" in captured.err


def test_collect(prefetch_dir, tmp_path, capsys):
    db_path = tmp_path / "prefetch_data.db"

    assert collect_main([str(prefetch_dir), "--db", str(db_path), "--no-progress"]) == 0

    out = capsys.readouterr().out
    assert "Processed 2/3 prefetch files" in out
    assert "Failed to process 1 files" in out
    assert db_path.exists()


def test_collect_missing_directory(tmp_path, capsys):
    assert collect_main([str(tmp_path / "nope"), "--db", str(tmp_path / "x.db"), "--no-progress"]) == 1
    assert "Prefetch directory not found" in capsys.readouterr().err
