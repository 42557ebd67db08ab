from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from shelfwise.adapters.review import (
    commit_result_to_payload,
    entry_to_payload,
    rating_to_payload,
    report_to_payload,
)
from shelfwise.app import (
    commit_import_payload,
    export_completed_books,
    get_entry,
    get_rating,
    list_completed_books,
    list_series,
    parse_import,
    promote,
    remove_entry,
    save_rating,
)
from shelfwise.config import configure_logging
from shelfwise.domain.model import ExportFormat, ExportType, ImportFormat

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile and import completed books")
    parser.add_argument(
        "--user-id",
        type=int,
        required=True,
        help="Owner of the books being read or written",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list", help="Print the unified completed-books list as JSON")

    import_parse = subparsers.add_parser(
        "import-parse",
        help="Classify an import file without writing anything",
    )
    import_parse.add_argument("file", type=Path, help="JSON, CSV or spreadsheet to import")
    import_parse.add_argument(
        "--format",
        dest="import_format",
        choices=[fmt.value for fmt in ImportFormat],
        help="Input format (defaults to the file extension)",
    )
    import_parse.add_argument(
        "--output",
        type=Path,
        help="Write the review report here instead of stdout",
    )

    import_commit = subparsers.add_parser(
        "import-commit",
        help="Apply a reviewed commit payload (JSON)",
    )
    import_commit.add_argument("file", type=Path, help="Commit payload produced from a review")

    promote_cmd = subparsers.add_parser("promote", help="Move a completed book into the library")
    promote_cmd.add_argument("entry_id", help="Unified id, e.g. completed_12")

    export = subparsers.add_parser("export", help="Export the unified completed-books list")
    export.add_argument(
        "--type",
        dest="export_type",
        choices=[kind.value for kind in ExportType],
        default=ExportType.COMPREHENSIVE.value,
    )
    export.add_argument(
        "--format",
        dest="export_format",
        choices=[fmt.value for fmt in ExportFormat],
        default=ExportFormat.JSON.value,
    )
    export.add_argument(
        "--output-dir",
        type=Path,
        help="Directory for the export file (defaults to the data directory)",
    )

    show = subparsers.add_parser("show", help="Print one unified entry and its rating")
    show.add_argument("entry_id")

    remove = subparsers.add_parser(
        "remove",
        help="Remove an entry (library books are marked unread instead)",
    )
    remove.add_argument("entry_id")

    rate = subparsers.add_parser("rate", help="Rate an entry from 1 to 5")
    rate.add_argument("entry_id")
    rate.add_argument("--rating", type=int, required=True)
    rate.add_argument("--comment", type=str)

    subparsers.add_parser("series", help="List known series names")

    return parser.parse_args(list(argv))


def _format_from_path(path: Path) -> str:
    suffix = path.suffix.lower().lstrip(".")
    if suffix not in {fmt.value for fmt in ImportFormat}:
        raise ValueError(f"Cannot infer import format from {path.name}; pass --format")
    return suffix


def _read_import(path: Path, import_format: ImportFormat) -> object:
    if import_format.is_spreadsheet:
        return path.read_bytes()
    text = path.read_text(encoding="utf-8-sig")
    if import_format is ImportFormat.JSON:
        return json.loads(text)
    return text


def _emit(payload: object) -> None:
    sys.stdout.write(json.dumps(payload, indent=2, ensure_ascii=False) + "\n")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    parsed_args: argparse.Namespace
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        import_format: ImportFormat | None = None
        if parsed_args.command == "import-parse":
            import_format = ImportFormat(
                parsed_args.import_format or _format_from_path(parsed_args.file)
            )
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    if parsed_args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    user_id: int = parsed_args.user_id

    try:
        if parsed_args.command == "list":
            _emit([entry_to_payload(entry) for entry in list_completed_books(user_id=user_id)])
        elif parsed_args.command == "import-parse" and import_format is not None:
            report = parse_import(
                _read_import(parsed_args.file, import_format),
                import_format,
                user_id=user_id,
            )
            payload = report_to_payload(report)
            if parsed_args.output is not None:
                parsed_args.output.write_text(
                    json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8"
                )
                log.info("Wrote review report to %s", parsed_args.output)
            else:
                _emit(payload)
        elif parsed_args.command == "import-commit":
            payload = json.loads(parsed_args.file.read_text(encoding="utf-8"))
            _emit(commit_result_to_payload(commit_import_payload(payload, user_id=user_id)))
        elif parsed_args.command == "promote":
            result = promote(parsed_args.entry_id, user_id=user_id)
            _emit({"message": result.message, "libraryBookId": result.library_book_id})
        elif parsed_args.command == "export":
            path = export_completed_books(
                user_id=user_id,
                export_type=parsed_args.export_type,
                export_format=parsed_args.export_format,
                output_dir=parsed_args.output_dir,
            )
            _emit({"path": str(path)})
        elif parsed_args.command == "show":
            entry = entry_to_payload(get_entry(parsed_args.entry_id, user_id=user_id))
            rating = get_rating(parsed_args.entry_id, user_id=user_id)
            entry["rating"] = rating_to_payload(rating) if rating is not None else None
            _emit(entry)
        elif parsed_args.command == "remove":
            remove_entry(parsed_args.entry_id, user_id=user_id)
            log.info("Removed %s", parsed_args.entry_id)
        elif parsed_args.command == "rate":
            rating, created = save_rating(
                parsed_args.entry_id,
                parsed_args.rating,
                parsed_args.comment,
                user_id=user_id,
            )
            log.info("%s rating for %s", "Created" if created else "Updated", parsed_args.entry_id)
            _emit(rating_to_payload(rating))
        elif parsed_args.command == "series":
            _emit(list_series(user_id=user_id))
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Command %s failed", parsed_args.command)
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


if __name__ == "__main__":
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()
