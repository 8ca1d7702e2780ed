from collections import defaultdict

from restaurant_payroll.services.wages import compute_gross_pay, employee_amount, employee_role
from restaurant_payroll.utils.amounts import round_hours, round_money


def role_summary(employees):
    out = defaultdict(lambda: {"headcount": 0, "hours": 0.0, "overtime_hours": 0.0, "base_pay": 0.0, "tips": 0.0, "gross": 0.0})
    for e in employees:
        if not getattr(e, "is_active", False):
            continue
        row = out[employee_role(e).value]
        breakdown = compute_gross_pay(e)
        row["headcount"] += 1
        row["hours"] += employee_amount(e, "hours_worked")
        row["overtime_hours"] += employee_amount(e, "overtime_hours")
        row["base_pay"] += breakdown.base_pay
        row["tips"] += breakdown.tips_amount
        row["gross"] += breakdown.gross_total

    summary = {}
    for role in ("FOH", "BOH"):
        row = out[role]
        summary[role] = {
            "headcount": row["headcount"],
            "hours": round_hours(row["hours"]),
            "overtime_hours": round_hours(row["overtime_hours"]),
            "base_pay": round_money(row["base_pay"]),
            "tips": round_money(row["tips"]),
            "gross": round_money(row["gross"]),
        }
    return summary
