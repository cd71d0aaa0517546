# ruff: noqa: T201

from __future__ import annotations

import argparse
import logging
import sys
import threading
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from permitsync.adapters.spreadsheet import SpreadsheetError
from permitsync.app import (
    NoCandidatesError,
    export_permits_csv,
    import_permits_file,
    permit_status_summary,
    upload_history,
)
from permitsync.config import ConfigurationError, configure_logging
from permitsync.domain.errors import ImportAbortedError
from permitsync.domain.model import PermitStatus, RunStatus

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from permitsync.domain.importing import ProgressEvent
    from permitsync.domain.model import UploadRun

log = logging.getLogger(__name__)

_cancel_requested = threading.Event()
_import_running = threading.Event()


def _positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value}")
    return number


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Bulk-import and audit permit records")
    subparsers = parser.add_subparsers(dest="command", required=True)

    import_cmd = subparsers.add_parser("import", help="Import an Excel or CSV permit sheet")
    import_cmd.add_argument("file", type=Path, help="Path to the .xlsx, .xlsm or .csv file")
    import_cmd.add_argument(
        "--uploader",
        type=str,
        help="Name recorded in the upload ledger (defaults to config)",
    )
    import_cmd.add_argument(
        "--sheet",
        type=str,
        help="Worksheet to read from an Excel workbook (defaults to the first one)",
    )
    import_cmd.add_argument(
        "--quiet",
        action="store_true",
        help="Do not print per-row progress",
    )

    history = subparsers.add_parser("history", help="Show recent upload runs")
    history.add_argument(
        "--limit",
        type=_positive_int,
        default=20,
        help="Number of runs to show (default: %(default)s)",
    )

    subparsers.add_parser("summary", help="Count stored permits per status")

    export = subparsers.add_parser("export", help="Export stored permits to CSV")
    export.add_argument("file", type=Path, help="Destination CSV file")
    export.add_argument(
        "--status",
        type=PermitStatus,
        choices=list(PermitStatus),
        help="Only export permits with this status",
    )
    export.add_argument("--search", type=str, help="Filter by permit id, name or identity")

    return parser.parse_args(list(argv))


def _print_progress(event: ProgressEvent) -> None:
    print(
        f"\r[{event.percentage:3d}%] {event.current_row}/{event.total_rows} "
        f"{event.status_message}",
        end="",
        file=sys.stderr,
        flush=True,
    )


def _print_run(run: UploadRun) -> None:
    print(f"{run.source_file}: {run.status}")
    print(f"  inserted:   {run.inserted}")
    print(f"  updated:    {run.updated}")
    print(f"  skipped:    {run.skipped} ({run.duplicates} duplicates)")
    print(f"  processed:  {run.processed}/{run.total}")
    for message in run.errors:
        print(f"  - {message}")
    if run.fatal_error:
        print(f"  fatal: {run.fatal_error}")


def _run_import(args: argparse.Namespace) -> None:
    _cancel_requested.clear()
    _import_running.set()
    try:
        run = import_permits_file(
            args.file,
            uploader=args.uploader,
            sheet=args.sheet,
            progress=None if args.quiet else _print_progress,
            cancel=_cancel_requested.is_set,
        )
    finally:
        _import_running.clear()
        if not args.quiet:
            print(file=sys.stderr)
    _print_run(run)
    if run.status == RunStatus.CANCELLED:
        log.warning("Import cancelled; rows processed before cancelling were kept")


def _run_history(args: argparse.Namespace) -> None:
    runs = upload_history(limit=args.limit)
    if not runs:
        print("No uploads recorded yet")
        return
    for run in runs:
        finished = run.finished_at.isoformat(timespec="seconds") if run.finished_at else "-"
        print(
            f"{finished}  {run.status:<10} {run.source_file}  by {run.uploader}: "
            f"{run.inserted} inserted, {run.updated} updated, {run.skipped} skipped"
        )


def _run_summary() -> None:
    counts = permit_status_summary()
    for status, count in counts.items():
        print(f"{status:<14} {count}")
    print(f"{'total':<14} {sum(counts.values())}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    parsed_args: argparse.Namespace
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        configure_logging()
        parsed_args = _parse_args(args_list)
        if parsed_args.command == "import" and not parsed_args.file.is_file():
            raise ValueError(f"File not found: {parsed_args.file}")  # noqa: TRY301
    except (ValueError, ConfigurationError):
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "import":
            _run_import(parsed_args)
        elif parsed_args.command == "history":
            _run_history(parsed_args)
        elif parsed_args.command == "summary":
            _run_summary()
        elif parsed_args.command == "export":
            written = export_permits_csv(
                parsed_args.file,
                status=parsed_args.status,
                search=parsed_args.search,
            )
            print(f"Exported {written} permits to {parsed_args.file}")
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except (SpreadsheetError, NoCandidatesError, ConfigurationError):
        log.exception("Cannot run %s", parsed_args.command)
        sys.exit(2)
    except ImportAbortedError as exc:
        log.exception("Import aborted")
        _print_run(exc.run)
        sys.exit(1)
    except Exception:
        log.exception("Fatal error running %s", parsed_args.command)
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Cancel a running import after its current row; otherwise exit."""
    if _import_running.is_set() and not _cancel_requested.is_set():
        log.info("Cancelling import after the current row (Ctrl+C again to quit)")
        _cancel_requested.set()
        return
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
