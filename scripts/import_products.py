import argparse
import sys
from pathlib import Path

# Ensure repo root is on sys.path when running this script directly.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from openpyxl.utils.exceptions import InvalidFileException
from sqlalchemy.exc import SQLAlchemyError

from outlet_pos.core.exceptions import PosError
from outlet_pos.core.logging import setup_logging
from outlet_pos.services.import_service import import_workbook


def parse_args():
    parser = argparse.ArgumentParser(
        description="Import or update an outlet's products from an Excel workbook."
    )
    parser.add_argument("--path", required=True, help="Path to .xlsx workbook.")
    parser.add_argument("--outlet", required=True, help="Target outlet (harigala or arandara).")
    parser.add_argument("--sheet", default=None, help="Sheet to read. Default: first sheet.")
    parser.add_argument("--dry-run", action="store_true", help="Validate without saving.")
    return parser.parse_args()


def main():
    setup_logging()
    args = parse_args()
    try:
        counts = import_workbook(
            args.path,
            args.outlet,
            sheet=args.sheet,
            dry_run=args.dry_run,
        )
    except (OSError, ValueError, SQLAlchemyError, InvalidFileException, PosError) as exc:
        raise SystemExit(f"Import failed: {exc}") from exc

    print(
        f"{args.outlet}: {counts['inserted']} inserted, "
        f"{counts['updated']} updated, {counts['skipped']} skipped"
    )
    for error in counts["errors"]:
        print(f"  {error}")

    if args.dry_run:
        print("Dry run complete, no changes committed.")
    else:
        print("Import complete.")


if __name__ == "__main__":
    main()
