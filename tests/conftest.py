from pathlib import Path
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from restaurant_payroll.main import create_app


@pytest.fixture()
def client(tmp_path: Path) -> TestClient:
    db_path = tmp_path / "test.db"
    app = create_app(f"sqlite:///{db_path}", tax_year=2024, seed_demo=False)
    return TestClient(app)


def staff(**kwargs):
    base = dict(
        name="Test Employee",
        role="FOH",
        hourly_wage=0,
        hours_worked=0,
        overtime_hours=0,
        tips=0,
        salary=0,
        is_active=True,
        filing_status="single",
        multiple_jobs=False,
        dependent_amount_usd=0,
        other_income=0,
        deductions=0,
    )
    base.update(kwargs)
    return SimpleNamespace(**base)


def create_restaurant(client: TestClient, name: str = "Frida's Midtown", **extra) -> int:
    resp = client.post("/restaurants", json={"name": name, "location": "Midtown", **extra})
    assert resp.status_code == 201
    return resp.json()["id"]


def create_employee(client: TestClient, restaurant_id: int, name: str = "Diego Rivera", **fields) -> dict:
    resp = client.post(f"/restaurants/{restaurant_id}/employees", json={"name": name, **fields})
    assert resp.status_code == 201, resp.text
    return resp.json()
