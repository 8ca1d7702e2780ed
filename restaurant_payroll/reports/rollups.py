from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from typing import Any, Iterable

from sqlalchemy.orm import Session

from restaurant_payroll.models import Employee
from restaurant_payroll.services.payroll import TaxCalculationResult, compute_withholding, periods_per_year
from restaurant_payroll.services.tax_tables import TaxTables
from restaurant_payroll.services.timeframes import DEFAULT_TIME_FRAME, validate_time_frame
from restaurant_payroll.services.wages import compute_gross_pay, employee_amount
from restaurant_payroll.utils.amounts import round_hours, round_money


@dataclass(frozen=True)
class PayrollTotals:
    time_frame: str = DEFAULT_TIME_FRAME
    active_count: int = 0
    total_hours: float = 0.0
    total_overtime_hours: float = 0.0
    total_base_pay: float = 0.0
    total_overtime_pay: float = 0.0
    total_tips: float = 0.0
    grand_total: float = 0.0
    hourly_wage_sum: float = 0.0
    avg_wage: float = 0.0
    avg_hours: float = 0.0
    avg_overtime_hours: float = 0.0
    avg_base_pay: float = 0.0
    avg_overtime_pay: float = 0.0
    avg_tips: float = 0.0
    avg_total: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        for key, value in data.items():
            if key in {"total_hours", "total_overtime_hours", "avg_hours", "avg_overtime_hours"}:
                data[key] = round_hours(value)
            elif isinstance(value, float):
                data[key] = round_money(value)
        return data


@dataclass
class BatchTaxTotals:
    frequency: str
    include_futa: bool
    employees: list[dict[str, Any]] = field(default_factory=list)
    totals: dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "frequency": self.frequency,
            "include_futa": self.include_futa,
            "employees": self.employees,
            "totals": {key: round_money(value) for key, value in self.totals.items()},
        }


def active_employees(employees: Iterable[Any]) -> list[Any]:
    return [e for e in employees if getattr(e, "is_active", False)]


def aggregate(employees: Iterable[Any], time_frame: str = DEFAULT_TIME_FRAME) -> PayrollTotals:
    validate_time_frame(time_frame)
    active = active_employees(employees)
    count = len(active)
    if count == 0:
        return PayrollTotals(time_frame=time_frame)

    hours = overtime_hours = base = overtime = tips = grand = wage_sum = 0.0
    for employee in active:
        breakdown = compute_gross_pay(employee)
        hours += employee_amount(employee, "hours_worked")
        overtime_hours += employee_amount(employee, "overtime_hours")
        base += breakdown.base_pay
        overtime += breakdown.overtime_pay
        tips += breakdown.tips_amount
        grand += breakdown.gross_total
        wage_sum += employee_amount(employee, "hourly_wage")

    return PayrollTotals(
        time_frame=time_frame,
        active_count=count,
        total_hours=hours,
        total_overtime_hours=overtime_hours,
        total_base_pay=base,
        total_overtime_pay=overtime,
        total_tips=tips,
        grand_total=grand,
        hourly_wage_sum=wage_sum,
        avg_wage=wage_sum / count,
        avg_hours=hours / count,
        avg_overtime_hours=overtime_hours / count,
        avg_base_pay=base / count,
        avg_overtime_pay=overtime / count,
        avg_tips=tips / count,
        avg_total=grand / count,
    )


def tax_rollup(
    employees: Iterable[Any],
    frequency: str,
    include_futa: bool = False,
    tables: TaxTables | None = None,
) -> BatchTaxTotals:
    periods_per_year(frequency)
    batch = BatchTaxTotals(frequency=frequency, include_futa=include_futa)
    totals = {f.name: 0.0 for f in fields(TaxCalculationResult)}
    for employee in active_employees(employees):
        gross = compute_gross_pay(employee).gross_total
        result = compute_withholding(employee, gross, frequency, include_futa, tables)
        for key, value in asdict(result).items():
            totals[key] += value
        batch.employees.append({
            "employee_id": getattr(employee, "id", None),
            "name": getattr(employee, "name", None),
            **result.to_dict(),
        })
    batch.totals = totals
    return batch


def _restaurant_employees(db: Session, restaurant_id: int) -> list[Employee]:
    return db.query(Employee).filter(Employee.restaurant_id == restaurant_id).order_by(Employee.name.asc()).all()


def restaurant_tax_rollup(
    db: Session,
    restaurant_id: int,
    frequency: str,
    include_futa: bool = False,
    tables: TaxTables | None = None,
) -> BatchTaxTotals:
    return tax_rollup(_restaurant_employees(db, restaurant_id), frequency, include_futa, tables)
