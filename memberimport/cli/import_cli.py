"""Run a member import from the command line.

Usage:
    memberimport-run FILE --map COLUMN=FIELD [--map COLUMN=FIELD ...]
                     [--dry-run] [--no-skip-duplicates] [--update-existing]
                     [--delay-ms MS] [--verbose]

Examples:
    memberimport-run members.csv --map "Name=fullName" --map "E-mail=email" --dry-run
    memberimport-run members.xlsx --map "First=firstName" --map "Last=lastName"

Exit codes:
    0  every valid row was imported
    1  some rows failed validation or submission
    2  the file or the mapping could not be used
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from memberimport.config import settings
from memberimport.schemas.import_schemas import ImportPolicy, ImportReport, TransformResult
from memberimport.services.import_service import (
    ColumnMapping,
    MappingIncompleteError,
    ParseError,
    ingest,
    run_import,
    transform,
)
from memberimport.services.member_client import MemberClient

EXIT_OK = 0
EXIT_ROW_ERRORS = 1
EXIT_UNUSABLE = 2


def parse_assignments(values: list[str]) -> dict[str, str | None]:
    """Parse COLUMN=FIELD pairs; an empty FIELD skips the column."""
    assignments: dict[str, str | None] = {}
    for value in values:
        if "=" not in value:
            raise ValueError(f"Expected COLUMN=FIELD, got '{value}'")
        column, field = value.rsplit("=", 1)
        assignments[column.strip()] = field.strip() or None
    return assignments


def print_validation_errors(result: TransformResult) -> None:
    """Print rows excluded by validation."""
    if not result.errors:
        return
    print(f"\n{len(result.errors)} validation error(s):")
    for error in result.errors:
        print(f"  {error.message}")


def print_report(report: ImportReport) -> None:
    """Print the outcome of an import run."""
    print(f"\n{report.summary}")
    for entry in report.errors:
        label = f"Member {entry.row_index}" if entry.row_index else "Import"
        suffix = f" ({entry.value})" if entry.value else ""
        print(f"  {label}{suffix}: {entry.message}")


def _print_progress(ratio: float) -> None:
    print(f"\rImporting... {ratio * 100:5.1f}%", end="", flush=True)


async def run(args: argparse.Namespace) -> int:
    """Execute the import described by parsed arguments."""
    path = Path(args.file)
    if not path.is_file():
        print(f"Error: file not found: {path}")
        return EXIT_UNUSABLE

    try:
        table = ingest(path.read_bytes(), path.name, max_rows=settings.import_max_rows)
        mapping = ColumnMapping.from_assignments(table.headers, parse_assignments(args.map))
        result = transform(table, mapping)
    except ParseError as e:
        print(f"Error: {e}")
        return EXIT_UNUSABLE
    except MappingIncompleteError as e:
        print(f"Error: {e}")
        print(f"Columns in file: {', '.join(table.headers)}")
        return EXIT_UNUSABLE
    except ValueError as e:
        print(f"Error: {e}")
        return EXIT_UNUSABLE

    print(f"Read {table.row_count} rows; {mapping.mapped_count()} of {len(table.headers)} columns mapped")
    print(f"{len(result.records)} member(s) ready to import")
    print_validation_errors(result)

    if args.dry_run:
        return EXIT_ROW_ERRORS if result.errors else EXIT_OK

    try:
        client = MemberClient.from_settings()
    except ValueError as e:
        print(f"Error: {e}")
        return EXIT_UNUSABLE

    delay = args.delay_ms / 1000 if args.delay_ms is not None else settings.submit_delay_seconds
    report = await run_import(
        result.records,
        client,
        policy=ImportPolicy(
            skip_duplicates=args.skip_duplicates,
            update_existing=args.update_existing,
        ),
        progress=_print_progress,
        delay=delay,
        validation_errors=result.errors,
    )
    print()
    print_report(report)

    if report.error_count or report.validation_errors:
        return EXIT_ROW_ERRORS
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="memberimport-run",
        description="Import members from a CSV or Excel spreadsheet",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("file", help="CSV, XLSX or XLS file to import")
    parser.add_argument(
        "-m", "--map",
        action="append",
        default=[],
        metavar="COLUMN=FIELD",
        help="Map a spreadsheet column to a member field key (repeatable)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate and report without creating members",
    )
    parser.add_argument(
        "--skip-duplicates",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Declare that existing members should be skipped (default: on)",
    )
    parser.add_argument(
        "--update-existing",
        action="store_true",
        help="Declare that existing members should be updated",
    )
    parser.add_argument(
        "--delay-ms",
        type=int,
        default=None,
        help="Pause between submissions in milliseconds",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def main() -> None:
    """Main entry point."""
    args = build_parser().parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
