from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

from restaurant_payroll.services.errors import InvalidInputError, TaxConfigError

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parents[1] / "data" / "tax"
DEFAULT_TAX_YEAR = 2024
FILING_STATUSES = ("single", "married_joint", "head_household")
# W-4 Step 2(c) checkbox -> table group in percentage_method.json
TABLE_GROUPS = {False: "standard", True: "step2_checkbox"}


@dataclass(frozen=True)
class Bracket:
    threshold: float
    base_tax: float
    rate: float
    excess_over: float

    def tax_on(self, annual_wages: float) -> float:
        return self.base_tax + (annual_wages - self.excess_over) * self.rate


@dataclass(frozen=True)
class TaxTables:
    year: int
    tables: Mapping[tuple[str, bool], tuple[Bracket, ...]]
    metadata: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    files: tuple[str, ...] = ()

    def table_for(self, filing_status: str, multiple_jobs: bool) -> tuple[Bracket, ...]:
        if filing_status not in FILING_STATUSES:
            raise InvalidInputError(
                f"Unsupported filing status '{filing_status}'. Expected one of: {', '.join(FILING_STATUSES)}"
            )
        return self.tables[(filing_status, bool(multiple_jobs))]


def _read_json(path: Path) -> dict:
    try:
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError as exc:
        raise TaxConfigError(f"Tax tables for {path.parent.name} are missing. Please add {path.as_posix()}") from exc
    except json.JSONDecodeError as exc:
        raise TaxConfigError(f"Invalid JSON in {path.as_posix()}: {exc}") from exc


def tax_year_dir(year: int, data_dir: Path | None = None) -> Path:
    return (data_dir or DATA_DIR) / str(year)


def tax_year_available(year: int, data_dir: Path | None = None) -> bool:
    ydir = tax_year_dir(year, data_dir)
    return (ydir / "metadata.json").exists() and (ydir / "percentage_method.json").exists()


def available_tax_years(data_dir: Path | None = None) -> list[int]:
    root = data_dir or DATA_DIR
    if not root.exists():
        return []
    return sorted(int(p.name) for p in root.iterdir() if p.is_dir() and p.name.isdigit() and tax_year_available(int(p.name), root))


def _parse_bracket(row: Any, *, label: str) -> Bracket:
    if not isinstance(row, (list, tuple)) or len(row) != 4:
        raise TaxConfigError(f"Invalid bracket in {label}: expected [threshold, base_tax, rate, excess_over], found {row!r}")
    try:
        threshold, base_tax, rate, excess_over = (float(v) for v in row)
    except (TypeError, ValueError) as exc:
        raise TaxConfigError(f"Invalid bracket in {label}: {row!r}") from exc
    return Bracket(threshold, base_tax, rate, excess_over)


def load_tax_tables(year: int, data_dir: Path | None = None) -> TaxTables:
    ydir = tax_year_dir(year, data_dir)
    metadata_path = ydir / "metadata.json"
    tables_path = ydir / "percentage_method.json"

    metadata = _read_json(metadata_path)
    raw = _read_json(tables_path)

    tables: dict[tuple[str, bool], tuple[Bracket, ...]] = {}
    for multiple_jobs, group in TABLE_GROUPS.items():
        if group not in raw:
            raise TaxConfigError(f"Missing '{group}' bracket tables for {year}")
        for status in FILING_STATUSES:
            rows = raw[group].get(status)
            if not rows:
                raise TaxConfigError(f"Missing bracket table for filing status '{status}' ({year}, {group})")
            label = f"{year}/{group}/{status}"
            brackets = tuple(sorted((_parse_bracket(row, label=label) for row in rows), key=lambda b: b.threshold))
            tables[(status, multiple_jobs)] = brackets

    logger.info("Loaded %s percentage method tables from %s", year, ydir)
    return TaxTables(
        year=year,
        tables=MappingProxyType(tables),
        metadata=MappingProxyType(metadata),
        files=(
            f"data/tax/{year}/metadata.json",
            f"data/tax/{year}/percentage_method.json",
        ),
    )


@lru_cache(maxsize=8)
def get_tax_tables(year: int = DEFAULT_TAX_YEAR) -> TaxTables:
    """Tables for ``year`` from the packaged data directory, loaded once per process."""
    return load_tax_tables(year)
