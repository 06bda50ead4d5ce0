"""
Command-line entry points.

    prefetch FILE            decode one prefetch file and print it (JSON or text)
    prefetch-claw DIRECTORY  decode every .pf file of a directory into SQLite
"""

import sys
import logging
import argparse
import sqlite3
from typing import List, Optional

import colorama
from colorama import Fore, Style

from .collector import process_prefetch_files
from .config import DEFAULT_DB_NAME, DEFAULT_LOG_LEVEL, DEFAULT_PREFETCH_DIR, JSON_INDENT
from .error_handler import ErrorHandler
from .errors import PrefetchError, PrefetchIOError
from .prefetch import Prefetch
from .report import format_text, to_json

COLOR_SUCCESS = Fore.GREEN
COLOR_WARNING = Fore.YELLOW
COLOR_ERROR = Fore.RED
COLOR_RESET = Style.RESET_ALL


def _print_error(message: str):
    print(f"{COLOR_ERROR}{message}{COLOR_RESET}", file=sys.stderr)


def _add_logging_arguments(parser: argparse.ArgumentParser):
    parser.add_argument("--verbose", "-v", action="store_true", help="Log decode steps")
    parser.add_argument("--log-file", help="Also write log messages to this file")


def _setup(args) -> ErrorHandler:
    colorama.init()
    handler = ErrorHandler()
    handler.setup_logging(logging.DEBUG if args.verbose else DEFAULT_LOG_LEVEL, args.log_file,
                          stream=sys.stderr)
    return handler


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="prefetch", description="Export a Windows prefetch file")
    parser.add_argument("input_file", help="Prefetch file (.pf)")
    parser.add_argument("--format", "-f", choices=("json", "text"), default="json",
                        help="Output format (default: json)")
    parser.add_argument("--strict", action="store_true", help="Reject signatures other than 'SCCA'")
    _add_logging_arguments(parser)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    handler = _setup(args)

    try:
        prefetch = Prefetch.open(args.input_file, strict_signature=args.strict)
    except PrefetchError as e:
        handler.handle_error(e, f"Failed to decode {args.input_file}", log_level=logging.DEBUG,
                             raise_exception=False)
        # Open failures carry the OSError but no position in the file
        if isinstance(e, PrefetchIOError) and e.original_error is not None and e.offset is None:
            _print_error(f"Can't open file {args.input_file}")
        else:
            _print_error(e.message)
        return 1

    if args.format == "text":
        print(format_text(prefetch, args.input_file))
    else:
        print(to_json(prefetch, indent=JSON_INDENT))
    return 0


def build_collect_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="prefetch-claw",
                                     description="Parse a directory of prefetch files into SQLite")
    parser.add_argument("prefetch_dir", nargs="?", default=DEFAULT_PREFETCH_DIR,
                        help=f"Directory holding .pf files (default: {DEFAULT_PREFETCH_DIR})")
    parser.add_argument("--db", default=DEFAULT_DB_NAME, help=f"Output database (default: {DEFAULT_DB_NAME})")
    parser.add_argument("--strict", action="store_true", help="Reject signatures other than 'SCCA'")
    parser.add_argument("--no-progress", action="store_true", help="Hide the progress bar")
    _add_logging_arguments(parser)
    return parser


def collect_main(argv: Optional[List[str]] = None) -> int:
    args = build_collect_parser().parse_args(argv)
    handler = _setup(args)

    try:
        result = process_prefetch_files(args.prefetch_dir, args.db, strict_signature=args.strict,
                                        show_progress=not args.no_progress)
    except NotADirectoryError as e:
        _print_error(str(e))
        return 1
    except (OSError, sqlite3.Error) as e:
        handler.handle_error(e, f"Failed to write {args.db}", raise_exception=False)
        _print_error(f"Failed to write {args.db}: {e}")
        return 1

    if result.failed:
        print(f"{COLOR_WARNING}Failed to process {len(result.failed)} files. "
              f"List saved to {result.failed_log_path}{COLOR_RESET}")
    print(f"{COLOR_SUCCESS}Processed {len(result.parsed)}/{result.total} prefetch files. "
          f"Database saved to: {result.db_path}{COLOR_RESET}")
    return 0
