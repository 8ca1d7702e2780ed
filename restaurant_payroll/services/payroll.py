"""Estimated federal payroll taxes for one pay period.

Federal income tax follows the IRS Pub 15-T percentage method for 2020+
Forms W-4 (Worksheet 1A): annualize the period's wages, adjust for Step 4(a)
and 4(b), look up the tentative annual amount in the bracket table for the
filing status and Step 2(c) checkbox, subtract the Step 3 credit and divide
back down to the pay period.

FICA is a flat share of gross pay for employee and employer alike, and FUTA
is an optional employer-only share. No wage-base caps, Additional Medicare
Tax or year-to-date tracking are applied; per-period sums are estimates and
must not be read as annual liabilities.
"""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any

from restaurant_payroll.services.errors import InvalidInputError
from restaurant_payroll.services.tax_tables import (
    DEFAULT_TAX_YEAR,
    Bracket,
    TaxTables,
    get_tax_tables,
)
from restaurant_payroll.services.wages import compute_gross_pay, employee_amount
from restaurant_payroll.utils.amounts import round_money

logger = logging.getLogger(__name__)

SS_RATE = 0.062
MEDICARE_RATE = 0.0145
FUTA_RATE = 0.006
DEPENDENT_CREDIT_PER_DEPENDENT = 2000

PERIODS_PER_YEAR = {
    "weekly": 52,
    "biweekly": 26,
    "semi_monthly": 24,
    "monthly": 12,
    "annual": 1,
}


@dataclass(frozen=True)
class TaxCalculationResult:
    gross_taxable_pay: float
    fed_income_tax: float
    ss_employee: float
    ss_employer: float
    med_employee: float
    med_employer: float
    futa_employer: float
    total_employee_withholding: float
    total_employer_cost: float
    total_tax_liability: float

    def to_dict(self, rounded: bool = True) -> dict[str, float]:
        data = asdict(self)
        if rounded:
            return {key: round_money(value) for key, value in data.items()}
        return data


def periods_per_year(frequency: str) -> int:
    try:
        return PERIODS_PER_YEAR[frequency]
    except KeyError:
        raise InvalidInputError(
            f"Unsupported pay frequency '{frequency}'. Expected one of: {', '.join(PERIODS_PER_YEAR)}"
        ) from None


def dependent_credit(dependents: int | float | None) -> float:
    """Annual W-4 Step 3 amount for a dependent count."""
    return max(0.0, float(dependents or 0)) * DEPENDENT_CREDIT_PER_DEPENDENT


def select_bracket_table(tables: TaxTables, filing_status: str | None, multiple_jobs: bool) -> tuple[Bracket, ...]:
    return tables.table_for(filing_status, multiple_jobs)


def find_bracket(table: tuple[Bracket, ...], annual_wages: float) -> Bracket:
    """Last bracket whose threshold does not exceed ``annual_wages``.

    Wages below every threshold (only possible when Step 4(b) deductions push
    the adjusted amount negative) fall into the first bracket.
    """
    selected = table[0]
    for bracket in table:
        if annual_wages >= bracket.threshold:
            selected = bracket
        else:
            break
    return selected


def annual_withholding(
    annual_wages: float,
    filing_status: str | None,
    multiple_jobs: bool,
    tables: TaxTables | None = None,
) -> float:
    """Tentative annual withholding before the Step 3 credit."""
    tables = tables or get_tax_tables(DEFAULT_TAX_YEAR)
    table = select_bracket_table(tables, filing_status, multiple_jobs)
    return find_bracket(table, annual_wages).tax_on(annual_wages)


def federal_income_tax_steps(
    employee: Any,
    gross_pay: float,
    frequency: str,
    tables: TaxTables | None = None,
) -> dict[str, Any]:
    tables = tables or get_tax_tables(DEFAULT_TAX_YEAR)
    periods = periods_per_year(frequency)
    filing_status = getattr(employee, "filing_status", None)
    multiple_jobs = bool(getattr(employee, "multiple_jobs", False))
    other_income = employee_amount(employee, "other_income")
    deductions = employee_amount(employee, "deductions")
    credit = employee_amount(employee, "dependent_amount_usd")

    annualized = gross_pay * periods + other_income - deductions
    bracket = find_bracket(select_bracket_table(tables, filing_status, multiple_jobs), annualized)
    tentative = bracket.tax_on(annualized)
    after_credit = max(0.0, tentative - credit)

    return {
        "tax_year": tables.year,
        "pay_frequency": frequency,
        "periods_per_year": periods,
        "filing_status": filing_status,
        "table": "step2_checkbox" if multiple_jobs else "standard",
        "annualized_wages": annualized,
        "step4a_other_income": other_income,
        "step4b_deductions": deductions,
        "bracket": asdict(bracket),
        "tentative_annual_withholding": tentative,
        "step3_dependent_credit": credit,
        "annual_withholding_after_credit": after_credit,
        "fed_income_tax": after_credit / periods,
    }


def compute_withholding(
    employee: Any,
    gross_pay: float,
    frequency: str,
    include_futa: bool = False,
    tables: TaxTables | None = None,
) -> TaxCalculationResult:
    gross_pay = float(gross_pay or 0.0)
    steps = federal_income_tax_steps(employee, gross_pay, frequency, tables)
    return _withholding_result(employee, gross_pay, frequency, steps["fed_income_tax"], include_futa)


def _withholding_result(
    employee: Any,
    gross_pay: float,
    frequency: str,
    fed_income_tax: float,
    include_futa: bool,
) -> TaxCalculationResult:
    ss_employee = ss_employer = gross_pay * SS_RATE
    med_employee = med_employer = gross_pay * MEDICARE_RATE
    futa_employer = gross_pay * FUTA_RATE if include_futa else 0.0

    employee_withholding = fed_income_tax + ss_employee + med_employee
    employer_cost = ss_employer + med_employer + futa_employer
    logger.debug(
        "Withholding for %s on %.2f %s: FIT %.2f, employer cost %.2f",
        getattr(employee, "name", "employee"),
        gross_pay,
        frequency,
        fed_income_tax,
        employer_cost,
    )
    return TaxCalculationResult(
        gross_taxable_pay=gross_pay,
        fed_income_tax=fed_income_tax,
        ss_employee=ss_employee,
        ss_employer=ss_employer,
        med_employee=med_employee,
        med_employer=med_employer,
        futa_employer=futa_employer,
        total_employee_withholding=employee_withholding,
        total_employer_cost=employer_cost,
        total_tax_liability=employee_withholding + employer_cost,
    )


def calculate_employee_taxes(
    employee: Any,
    frequency: str,
    include_futa: bool = False,
    tables: TaxTables | None = None,
) -> dict[str, Any]:
    """Gross pay feeding withholding for one employee, with the FIT calculation trace."""
    breakdown = compute_gross_pay(employee)
    steps = federal_income_tax_steps(employee, breakdown.gross_total, frequency, tables)
    result = _withholding_result(employee, breakdown.gross_total, frequency, steps["fed_income_tax"], include_futa)
    return {
        "gross_pay": breakdown.to_dict(),
        "taxes": result.to_dict(),
        "calculation_trace": {
            "files": list((tables or get_tax_tables(DEFAULT_TAX_YEAR)).files),
            "include_futa": include_futa,
            "steps": steps,
            "rounding": "Rounded to 2 decimals after each output line item",
        },
    }
