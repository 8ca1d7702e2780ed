import json
import shutil
from pathlib import Path

from restaurant_payroll.services import tax_tables, tax_validation


def _copy_year(tmp_path: Path, year: int) -> Path:
    dst_root = tmp_path / "data" / "tax"
    shutil.copytree(tax_tables.DATA_DIR / str(year), dst_root / str(year))
    return dst_root


def _edit_tables(data_dir: Path, edit) -> None:
    path = data_dir / "2024" / "percentage_method.json"
    raw = json.loads(path.read_text())
    edit(raw)
    path.write_text(json.dumps(raw))


def test_missing_metadata_json_fails(tmp_path):
    data_dir = _copy_year(tmp_path, 2024)
    (data_dir / "2024" / "metadata.json").unlink()

    result = tax_validation.validate_tax_year_data(2024, data_dir)

    assert result.ok is False
    assert any("metadata.json" in err for err in result.errors)


def test_metadata_tax_year_mismatch_fails(tmp_path):
    data_dir = _copy_year(tmp_path, 2024)
    metadata_path = data_dir / "2024" / "metadata.json"
    metadata = json.loads(metadata_path.read_text())
    metadata["tax_year"] = 2025
    metadata_path.write_text(json.dumps(metadata))

    result = tax_validation.validate_tax_year_data(2024, data_dir)

    assert result.ok is False
    assert any("tax_year mismatch" in err for err in result.errors)


def test_default_data_dir_is_module_setting(tmp_path, monkeypatch):
    data_dir = _copy_year(tmp_path, 2024)
    (data_dir / "2024" / "percentage_method.json").unlink()
    monkeypatch.setattr("restaurant_payroll.services.tax_tables.DATA_DIR", data_dir)

    result = tax_validation.validate_bracket_tables(2024)

    assert result.ok is False
    assert any("Missing percentage method tables" in err for err in result.errors)


def test_thresholds_must_ascend(tmp_path):
    data_dir = _copy_year(tmp_path, 2024)
    _edit_tables(data_dir, lambda raw: raw["standard"]["married_joint"].__setitem__(3, [50000, 10852.0, 0.22, 50000]))

    result = tax_validation.validate_bracket_tables(2024, data_dir)

    assert result.ok is False
    assert any("thresholds must ascend" in err for err in result.errors)


def test_rate_out_of_range_fails(tmp_path):
    data_dir = _copy_year(tmp_path, 2024)
    _edit_tables(data_dir, lambda raw: raw["step2_checkbox"]["single"].__setitem__(7, [313275, 91823.50, 37, 313275]))

    result = tax_validation.validate_bracket_tables(2024, data_dir)

    assert result.ok is False
    assert any("outside 0..1" in err for err in result.errors)


def test_base_tax_discontinuity_warns(tmp_path):
    data_dir = _copy_year(tmp_path, 2024)
    _edit_tables(data_dir, lambda raw: raw["standard"]["single"].__setitem__(2, [26200, 1260.0, 0.12, 26200]))

    result = tax_validation.validate_bracket_tables(2024, data_dir)

    assert result.ok is True
    assert any("standard/single bracket 3" in w for w in result.warnings)


def test_missing_table_group_fails(tmp_path):
    data_dir = _copy_year(tmp_path, 2024)
    _edit_tables(data_dir, lambda raw: raw.pop("step2_checkbox"))

    result = tax_validation.validate_bracket_tables(2024, data_dir)

    assert result.ok is False
    assert any("step2_checkbox" in err for err in result.errors)


def test_packaged_tables_pass():
    result = tax_validation.validate_bracket_tables(2024)

    assert result.ok is True
    assert result.errors == []
    assert result.warnings == []
    assert len(result.details["table_validation"]) == 6
