"""Command-line interface for sheet-cleaner."""

import argparse
import json
import logging
import sys

from sheet_cleaner import __version__
from sheet_cleaner.config import CleanerConfig
from sheet_cleaner.exceptions import SheetCleanerError
from sheet_cleaner.reader import read_sheet, write_csv
from sheet_cleaner.session import CleaningSession
from sheet_cleaner.stores import build_alias_store

MODE_OPTIONS = (
    ("SIZE", "size_column"),
    ("NAME", "name_column"),
    ("PRICE", "price_column"),
)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="sheet-cleaner",
        description="Extract sizes, product names and prices from a vendor spreadsheet",
    )
    parser.add_argument("file", help="Path to a .csv or .xlsx file")
    parser.add_argument("--size-column", help="Column holding size descriptions")
    parser.add_argument("--name-column", help="Column holding product names")
    parser.add_argument("--price-column", help="Column holding prices")
    parser.add_argument("--output", help="Write cleaned rows to this CSV file")
    parser.add_argument(
        "--store-url",
        help="Alias store URL (default: ALIAS_STORE_URL env var, else no learned rules)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output summary as JSON",
    )
    parser.add_argument("--verbose", action="store_true", help="Log progress to stderr")
    parser.add_argument(
        "--version",
        action="version",
        version=f"sheet-cleaner {__version__}",
    )

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    assignments = [(mode, getattr(args, attr)) for mode, attr in MODE_OPTIONS if getattr(args, attr)]
    if not assignments:
        parser.error("at least one of --size-column, --name-column, --price-column is required")

    config = CleanerConfig.from_env()
    if args.store_url:
        config = CleanerConfig(
            alias_store_url=args.store_url,
            alias_store_token=config.alias_store_token,
            alias_store_timeout_sec=config.alias_store_timeout_sec,
            search_debounce_sec=config.search_debounce_sec,
            search_limit=config.search_limit,
        )

    session = CleaningSession(build_alias_store(config))
    try:
        session.load_dictionaries()
        sheet = read_sheet(args.file)
        session.load_sheet(sheet)
        for mode, column in assignments:
            session.assign_column(column, mode)
        summary = {mode: session.stats(mode) for mode, _ in assignments}
        cleaned = session.export()
    except SheetCleanerError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.output:
        write_csv(args.output, sheet.headers, cleaned)

    notices = session.drain_notices()
    for notice in notices:
        if notice.level == "warning":
            print(f"Warning: {notice.message}", file=sys.stderr)

    if args.json:
        payload = {
            "file": sheet.file_name,
            "rows": len(cleaned),
            "columns": dict(assignments),
            "modes": {
                mode: {**stats.model_dump(), "review": stats.review}
                for mode, stats in summary.items()
            },
            "output": args.output,
        }
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    else:
        _print_formatted(sheet.file_name, dict(assignments), summary, args.output)

    return 0


def _print_formatted(file_name, columns, summary, output) -> None:
    """Print summary in human-readable format."""
    print()
    print("  sheet-cleaner")
    print(f"  {file_name}")
    print()

    for mode, stats in summary.items():
        label = f"{mode.title()} ({columns[mode]}):"
        print(
            f"  {label:<24} {stats.matched}/{stats.total} matched, "
            f"{stats.new} new, {stats.unknown} unknown"
        )

    if output:
        print()
        print(f"  Cleaned rows written to {output}")
    print()


if __name__ == "__main__":
    sys.exit(main())
