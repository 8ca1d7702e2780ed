from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from restaurant_payroll.services import tax_tables

CONTINUITY_TOLERANCE = 1.00


@dataclass
class ValidationResult:
    ok: bool = True
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    details: dict[str, Any] = field(default_factory=dict)

    def add_error(self, message: str) -> None:
        self.ok = False
        self.errors.append(message)

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)


def _read_json(path: Path, result: ValidationResult, *, label: str) -> dict[str, Any] | None:
    try:
        with path.open("r", encoding="utf-8") as handle:
            return json.load(handle)
    except FileNotFoundError:
        result.add_error(f"Missing required file for tax year validation: {path.as_posix()}")
    except json.JSONDecodeError as exc:
        result.add_error(f"Invalid JSON in {label}: {exc}")
    return None


def validate_tax_year_data(year: int, data_dir: Path | None = None) -> ValidationResult:
    result = ValidationResult()
    year_dir = tax_tables.tax_year_dir(year, data_dir)
    metadata_path = year_dir / "metadata.json"
    tables_path = year_dir / "percentage_method.json"

    metadata = _read_json(metadata_path, result, label="metadata.json")
    if not tables_path.exists():
        result.add_error(f"Missing percentage method tables for {year} at {tables_path.as_posix()}")

    required_meta_fields = ["source", "version", "last_updated", "notes"]
    if metadata is not None:
        missing_fields = [name for name in required_meta_fields if name not in metadata]
        if missing_fields:
            result.add_error(f"metadata.json is missing required fields: {', '.join(missing_fields)}")

        if "tax_year" not in metadata:
            result.add_error("metadata.json is missing required field 'tax_year'.")
        elif metadata["tax_year"] != year:
            result.add_error(f"metadata.json tax_year mismatch: expected {year}, found {metadata['tax_year']}")

        if metadata.get("method") != "percentage":
            result.add_error("metadata.json method must be 'percentage'")

    result.details["year"] = year
    result.details["checked_files"] = [metadata_path.as_posix(), tables_path.as_posix()]
    return result


def _check_table(rows: Any, label: str, result: ValidationResult) -> dict[str, Any]:
    checks: dict[str, Any] = {"brackets": 0, "continuity": []}
    if not isinstance(rows, list) or not rows:
        result.add_error(f"Bracket table {label} is missing or empty")
        return checks
    checks["brackets"] = len(rows)

    parsed = []
    for idx, row in enumerate(rows):
        if not isinstance(row, list) or len(row) != 4 or not all(isinstance(v, (int, float)) for v in row):
            result.add_error(f"{label} bracket {idx + 1} must be [threshold, base_tax, rate, excess_over], found {row!r}")
            return checks
        parsed.append(tax_tables.Bracket(*(float(v) for v in row)))

    if parsed[0].threshold != 0:
        result.add_error(f"{label} must start at threshold 0, found {parsed[0].threshold}")

    for idx, bracket in enumerate(parsed):
        if not 0 <= bracket.rate <= 1:
            result.add_error(f"{label} bracket {idx + 1} rate {bracket.rate} is outside 0..1")
        if bracket.base_tax < 0:
            result.add_error(f"{label} bracket {idx + 1} has negative base tax {bracket.base_tax}")
        if idx == 0:
            continue
        prev = parsed[idx - 1]
        if bracket.threshold <= prev.threshold:
            result.add_error(f"{label} thresholds must ascend: {prev.threshold} then {bracket.threshold}")
            continue
        expected = prev.tax_on(bracket.threshold)
        gap = round(bracket.base_tax - expected, 2)
        checks["continuity"].append({"index": idx, "expected": round(expected, 2), "actual": bracket.base_tax})
        if abs(gap) > CONTINUITY_TOLERANCE:
            result.add_warning(
                f"{label} bracket {idx + 1} base tax {bracket.base_tax} differs from the previous bracket's tax at {bracket.threshold} ({expected:.2f})."
            )
    return checks


def validate_bracket_tables(year: int, data_dir: Path | None = None) -> ValidationResult:
    result = validate_tax_year_data(year, data_dir)
    tables_path = tax_tables.tax_year_dir(year, data_dir) / "percentage_method.json"
    if not tables_path.exists():
        return result

    raw = _read_json(tables_path, result, label="percentage_method.json")
    if raw is None:
        return result

    details: dict[str, Any] = {}
    for group in tax_tables.TABLE_GROUPS.values():
        if group not in raw:
            result.add_error(f"Missing '{group}' bracket tables for {year}")
            continue
        for status in tax_tables.FILING_STATUSES:
            label = f"{group}/{status}"
            details[label] = _check_table(raw[group].get(status), label, result)

    result.details["table_validation"] = details
    return result
