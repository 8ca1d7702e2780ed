import json
import shutil
from pathlib import Path

import pytest

from restaurant_payroll.services import tax_tables
from restaurant_payroll.services.errors import InvalidInputError, TaxConfigError


def _copy_year(tmp_path: Path, year: int = 2024) -> Path:
    dst_root = tmp_path / "data" / "tax"
    shutil.copytree(tax_tables.DATA_DIR / str(year), dst_root / str(year))
    return dst_root


def test_packaged_year_has_six_tables():
    tables = tax_tables.load_tax_tables(2024)

    assert tables.year == 2024
    assert set(tables.tables) == {(status, flag) for status in tax_tables.FILING_STATUSES for flag in (False, True)}
    assert all(table[0].threshold == 0 for table in tables.tables.values())
    assert tables.metadata["method"] == "percentage"


def test_cached_tables_are_reused():
    assert tax_tables.get_tax_tables(2024) is tax_tables.get_tax_tables(2024)


def test_missing_year_raises_config_error(tmp_path):
    with pytest.raises(TaxConfigError, match="missing"):
        tax_tables.load_tax_tables(2099, data_dir=tmp_path)


def test_invalid_json_raises_config_error(tmp_path):
    data_dir = _copy_year(tmp_path)
    (data_dir / "2024" / "percentage_method.json").write_text("{not json")

    with pytest.raises(TaxConfigError, match="Invalid JSON"):
        tax_tables.load_tax_tables(2024, data_dir=data_dir)


def test_missing_filing_status_raises_config_error(tmp_path):
    data_dir = _copy_year(tmp_path)
    path = data_dir / "2024" / "percentage_method.json"
    raw = json.loads(path.read_text())
    del raw["step2_checkbox"]["head_household"]
    path.write_text(json.dumps(raw))

    with pytest.raises(TaxConfigError, match="head_household"):
        tax_tables.load_tax_tables(2024, data_dir=data_dir)


def test_malformed_bracket_raises_config_error(tmp_path):
    data_dir = _copy_year(tmp_path)
    path = data_dir / "2024" / "percentage_method.json"
    raw = json.loads(path.read_text())
    raw["standard"]["single"][2] = [26200, 1160.0, 0.12]
    path.write_text(json.dumps(raw))

    with pytest.raises(TaxConfigError, match="Invalid bracket"):
        tax_tables.load_tax_tables(2024, data_dir=data_dir)


def test_brackets_are_sorted_on_load(tmp_path):
    data_dir = _copy_year(tmp_path)
    path = data_dir / "2024" / "percentage_method.json"
    raw = json.loads(path.read_text())
    raw["standard"]["single"].reverse()
    path.write_text(json.dumps(raw))

    table = tax_tables.load_tax_tables(2024, data_dir=data_dir).table_for("single", False)

    assert [b.threshold for b in table] == sorted(b.threshold for b in table)


def test_swapping_tax_year(tmp_path):
    data_dir = _copy_year(tmp_path)
    shutil.copytree(data_dir / "2024", data_dir / "2025")

    assert tax_tables.tax_year_available(2025, data_dir)
    assert not tax_tables.tax_year_available(2026, data_dir)
    assert tax_tables.available_tax_years(data_dir) == [2024, 2025]
    assert tax_tables.load_tax_tables(2025, data_dir=data_dir).year == 2025


def test_table_lookup_rejects_unknown_status():
    with pytest.raises(InvalidInputError):
        tax_tables.get_tax_tables(2024).table_for("married_separately", False)


def test_cached_tables_are_read_only():
    tables = tax_tables.get_tax_tables(2024)

    with pytest.raises(TypeError):
        tables.tables[("single", False)] = ()
    with pytest.raises(TypeError):
        tables.metadata["tax_year"] = 1999
    assert tax_tables.get_tax_tables(2024).metadata["tax_year"] == 2024
