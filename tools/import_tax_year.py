#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
from pathlib import Path

from restaurant_payroll.services import tax_tables
from restaurant_payroll.services.tax_validation import validate_bracket_tables


def _empty_tables() -> dict:
    return {
        group: {status: [[0, 0, 0.0, 0]] for status in tax_tables.FILING_STATUSES}
        for group in tax_tables.TABLE_GROUPS.values()
    }


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a new tax-year scaffold under data/tax/{year}/")
    parser.add_argument("--year", type=int, required=True, help="Tax year to scaffold")
    parser.add_argument("--from-year", type=int, default=None, help="Optional source year to copy from")
    parser.add_argument("--data-dir", type=Path, default=None, help="Tax data root (defaults to the packaged data)")
    args = parser.parse_args(argv)

    data_root = args.data_dir or tax_tables.DATA_DIR
    target = data_root / str(args.year)
    if target.exists():
        raise SystemExit(f"Target year already exists: {target}")

    if args.from_year is not None:
        source = data_root / str(args.from_year)
        if not tax_tables.tax_year_available(args.from_year, data_root):
            raise SystemExit(f"Source year does not exist: {source}")
        target.mkdir(parents=True)
        (target / "percentage_method.json").write_text((source / "percentage_method.json").read_text())
        metadata = json.loads((source / "metadata.json").read_text())
        metadata["tax_year"] = args.year
        metadata["version"] = f"{args.year}.1"
        metadata["last_updated"] = f"{args.year}-01-01"
        metadata["notes"] = f"Copied from {args.from_year}; update brackets from IRS Pub 15-T ({args.year}) before use."
    else:
        target.mkdir(parents=True)
        (target / "percentage_method.json").write_text(json.dumps(_empty_tables(), indent=2) + "\n")
        metadata = {
            "tax_year": args.year,
            "method": "percentage",
            "source": "Fill with IRS Pub 15-T percentage method tables",
            "version": f"{args.year}.1",
            "last_updated": f"{args.year}-01-01",
            "notes": "Update percentage_method.json before using in production.",
        }
    (target / "metadata.json").write_text(json.dumps(metadata, indent=2) + "\n")

    result = validate_bracket_tables(args.year, data_root)
    for warning in result.warnings:
        print(f"warning: {warning}")
    for error in result.errors:
        print(f"error: {error}")
    print(f"Created {target}")
    return 0 if result.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
