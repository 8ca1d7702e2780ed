from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from restaurant_payroll.main import create_app
from tests.conftest import create_employee, create_restaurant


def _crew(client):
    rid = create_restaurant(client)
    server = create_employee(client, rid, "Diego Rivera", hourly_wage=20, hours_worked=40, overtime_hours=5, tips=200)
    chef = create_employee(client, rid, "Chef Frida", role="BOH", salary=2000, hours_worked=50, tips=75)
    create_employee(client, rid, "Juan O Gorman", hourly_wage=16.5, hours_worked=45, tips=100, is_active=False)
    return rid, server, chef


def test_restaurant_payroll_totals(client):
    rid, _, _ = _crew(client)

    body = client.get(f"/restaurants/{rid}/payroll").json()

    assert body["time_frame"] == "week"
    assert [row["name"] for row in body["employees"]] == ["Chef Frida", "Diego Rivera"]
    chef, server = body["employees"]
    assert chef["pay_basis"] == "boh_salaried"
    assert chef["tips_amount"] == 0
    assert server["overtime_pay"] == 150
    assert server["gross_total"] == 1150
    assert body["totals"]["active_count"] == 2
    assert body["totals"]["grand_total"] == 3150
    assert body["totals"]["total_tips"] == 200
    assert body["by_role"]["BOH"]["gross"] == 2000


def test_time_frame_change_rescales_stored_values(client):
    rid, server, chef = _crew(client)

    resp = client.put(f"/restaurants/{rid}/time-frame", json={"time_frame": "month"})

    assert resp.status_code == 200
    assert resp.json()["time_frame"] == "month"
    rows = {e["id"]: e for e in client.get(f"/restaurants/{rid}/employees").json()}
    assert rows[server["id"]]["hours_worked"] == 173.2
    assert rows[server["id"]]["overtime_hours"] == 21.7
    assert rows[server["id"]]["tips"] == 866.0
    assert rows[server["id"]]["hourly_wage"] == 20
    assert rows[chef["id"]]["salary"] == 8660.0
    assert client.get(f"/restaurants/{rid}/payroll").json()["time_frame"] == "month"


def test_unknown_time_frame_is_422(client):
    rid = create_restaurant(client)

    assert client.put(f"/restaurants/{rid}/time-frame", json={"time_frame": "quarter"}).status_code == 422


def test_employee_taxes_follow_restaurant_time_frame(client):
    rid, server, _ = _crew(client)

    body = client.get(f"/restaurants/{rid}/employees/{server['id']}/taxes").json()

    assert body["tax_year"] == 2024
    assert body["gross_pay"]["gross_total"] == 1150
    assert body["calculation_trace"]["steps"]["pay_frequency"] == "weekly"
    assert body["taxes"]["fed_income_tax"] == 99.85


def test_employee_taxes_with_explicit_frequency_and_futa(client):
    rid, server, _ = _crew(client)

    body = client.get(
        f"/restaurants/{rid}/employees/{server['id']}/taxes",
        params={"frequency": "biweekly", "include_futa": True},
    ).json()

    taxes = body["taxes"]
    assert taxes["fed_income_tax"] == 61.69
    assert taxes["ss_employee"] == 71.3
    assert taxes["ss_employer"] == 71.3
    assert taxes["med_employee"] == pytest.approx(16.68, abs=0.01)
    assert taxes["futa_employer"] == 6.9
    assert taxes["total_tax_liability"] == pytest.approx(
        taxes["total_employee_withholding"] + taxes["total_employer_cost"], abs=0.02
    )
    assert body["calculation_trace"]["files"] == [
        "data/tax/2024/metadata.json",
        "data/tax/2024/percentage_method.json",
    ]
    assert body["calculation_trace"]["steps"]["annualized_wages"] == 29900


def test_day_time_frame_needs_explicit_frequency(client):
    rid, server, _ = _crew(client)
    client.put(f"/restaurants/{rid}/time-frame", json={"time_frame": "day"})

    resp = client.get(f"/restaurants/{rid}/employees/{server['id']}/taxes")
    assert resp.status_code == 400
    assert "no pay frequency" in resp.json()["detail"]

    ok = client.get(f"/restaurants/{rid}/employees/{server['id']}/taxes", params={"frequency": "weekly"})
    assert ok.status_code == 200


def test_unknown_frequency_is_400(client):
    rid, server, _ = _crew(client)

    resp = client.get(f"/restaurants/{rid}/employees/{server['id']}/taxes", params={"frequency": "fortnightly"})

    assert resp.status_code == 400
    assert "Unsupported pay frequency" in resp.json()["detail"]
    assert client.get(f"/restaurants/{rid}/taxes", params={"frequency": "fortnightly"}).status_code == 400


def test_restaurant_tax_rollup_skips_inactive(client):
    rid, server, chef = _crew(client)

    body = client.get(f"/restaurants/{rid}/taxes", params={"frequency": "biweekly"}).json()

    assert body["tax_year"] == 2024
    assert body["frequency"] == "biweekly"
    assert sorted(row["employee_id"] for row in body["employees"]) == sorted([server["id"], chef["id"]])
    assert body["totals"]["gross_taxable_pay"] == 3150
    assert body["totals"]["ss_employee"] == pytest.approx(3150 * 0.062, abs=0.01)
    assert body["totals"]["futa_employer"] == 0


def test_missing_tax_year_returns_500_with_message(tmp_path: Path):
    client = TestClient(create_app(f"sqlite:///{tmp_path / 'test.db'}", tax_year=2099, seed_demo=False))
    rid, server, _ = _crew(client)

    resp = client.get(f"/restaurants/{rid}/employees/{server['id']}/taxes")

    assert resp.status_code == 500
    assert "missing" in resp.json()["detail"]
    assert client.get(f"/restaurants/{rid}/payroll").status_code == 200


def test_gross_pay_and_taxes_agree_to_the_cent(client):
    rid = create_restaurant(client)
    emp = create_employee(client, rid, hourly_wage=19.99, hours_worked=33.3, overtime_hours=1.1, tips=0.1)

    row = client.get(f"/restaurants/{rid}/payroll").json()["employees"][0]
    body = client.get(f"/restaurants/{rid}/employees/{emp['id']}/taxes").json()

    assert row["gross_total"] == 698.75
    assert row["regular_pay"] == 665.67
    assert body["gross_pay"]["gross_total"] == body["taxes"]["gross_taxable_pay"] == 698.75
