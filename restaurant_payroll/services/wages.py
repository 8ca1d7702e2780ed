"""Gross pay for one employee and one pay period.

Exactly one formula applies per employee, picked by role and salary:

- FOH hourly: wage x hours, overtime at 1.5x, tips added to gross
- BOH salaried: the salary, tips ignored
- BOH hourly: wage x hours, overtime at 1.5x, tips not added to gross

Missing numeric fields read as zero. Values are multiplied through as given;
rejecting negative input is left to the caller's input schema.
"""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Callable

from restaurant_payroll.services.errors import InvalidInputError
from restaurant_payroll.utils.amounts import round_money, to_amount

logger = logging.getLogger(__name__)

OVERTIME_MULTIPLIER = 1.5


class Role(str, Enum):
    FOH = "FOH"
    BOH = "BOH"


class PayBasis(str, Enum):
    FOH_HOURLY = "foh_hourly"
    BOH_SALARIED = "boh_salaried"
    BOH_HOURLY = "boh_hourly"


@dataclass(frozen=True)
class GrossPayBreakdown:
    pay_basis: PayBasis
    regular_pay: float
    overtime_pay: float
    base_pay: float
    tips_amount: float
    gross_total: float

    def to_dict(self, rounded: bool = True) -> dict[str, Any]:
        data = asdict(self)
        if rounded:
            data = {key: round_money(value) if isinstance(value, float) else value for key, value in data.items()}
        data["pay_basis"] = self.pay_basis.value
        return data


def employee_amount(employee: Any, name: str) -> float:
    return to_amount(getattr(employee, name, None))


def employee_role(employee: Any) -> Role:
    raw = getattr(employee, "role", None)
    if raw is None or raw == "":
        return Role.FOH
    try:
        return Role(raw.value if isinstance(raw, Enum) else str(raw).upper())
    except ValueError as exc:
        raise InvalidInputError(f"Unsupported role '{raw}'. Expected FOH or BOH") from exc


def pay_basis(employee: Any) -> PayBasis:
    role = employee_role(employee)
    if role is Role.BOH:
        return PayBasis.BOH_SALARIED if employee_amount(employee, "salary") > 0 else PayBasis.BOH_HOURLY
    return PayBasis.FOH_HOURLY


def _hourly_components(employee: Any) -> tuple[float, float]:
    wage = employee_amount(employee, "hourly_wage")
    regular = wage * employee_amount(employee, "hours_worked")
    overtime = employee_amount(employee, "overtime_hours") * wage * OVERTIME_MULTIPLIER
    return regular, overtime


def _foh_hourly(employee: Any) -> GrossPayBreakdown:
    regular, overtime = _hourly_components(employee)
    tips = employee_amount(employee, "tips")
    base = regular + overtime
    return GrossPayBreakdown(PayBasis.FOH_HOURLY, regular, overtime, base, tips, base + tips)


def _boh_hourly(employee: Any) -> GrossPayBreakdown:
    regular, overtime = _hourly_components(employee)
    base = regular + overtime
    return GrossPayBreakdown(PayBasis.BOH_HOURLY, regular, overtime, base, 0.0, base)


def _boh_salaried(employee: Any) -> GrossPayBreakdown:
    salary = employee_amount(employee, "salary")
    return GrossPayBreakdown(PayBasis.BOH_SALARIED, salary, 0.0, salary, 0.0, salary)


GROSS_PAY_FORMULAS: dict[PayBasis, Callable[[Any], GrossPayBreakdown]] = {
    PayBasis.FOH_HOURLY: _foh_hourly,
    PayBasis.BOH_SALARIED: _boh_salaried,
    PayBasis.BOH_HOURLY: _boh_hourly,
}


def compute_gross_pay(employee: Any) -> GrossPayBreakdown:
    basis = pay_basis(employee)
    breakdown = GROSS_PAY_FORMULAS[basis](employee)
    logger.debug("Gross pay for %s (%s): %.2f", getattr(employee, "name", "employee"), basis.value, breakdown.gross_total)
    return breakdown
