from __future__ import annotations

import logging
from typing import Any, Iterable

from restaurant_payroll.services.errors import InvalidInputError
from restaurant_payroll.utils.amounts import round_hours, round_money, to_amount

logger = logging.getLogger(__name__)

# weeks per time frame
TIME_FRAME_MULTIPLIERS = {
    "day": 0.2,
    "week": 1.0,
    "biweekly": 2.0,
    "month": 4.33,
    "year": 52.0,
}
DEFAULT_TIME_FRAME = "week"
HOUR_FIELDS = ("hours_worked", "overtime_hours")
CURRENCY_FIELDS = ("tips", "salary")
# the time frame a stored amount covers -> the matching withholding pay frequency
PAY_FREQUENCY_BY_TIME_FRAME = {
    "week": "weekly",
    "biweekly": "biweekly",
    "month": "monthly",
    "year": "annual",
}


def validate_time_frame(time_frame: str) -> str:
    if time_frame not in TIME_FRAME_MULTIPLIERS:
        raise InvalidInputError(
            f"Unsupported time frame '{time_frame}'. Expected one of: {', '.join(TIME_FRAME_MULTIPLIERS)}"
        )
    return time_frame


def rescale_factor(current: str, target: str) -> float:
    return TIME_FRAME_MULTIPLIERS[validate_time_frame(target)] / TIME_FRAME_MULTIPLIERS[validate_time_frame(current)]


def rescale(values: dict[str, Any], current: str, target: str) -> dict[str, float]:
    """Convert period hours, tips and salary from one time frame to another.

    Hours round to one decimal and currency to two. Fields absent from
    ``values`` are left out of the result; hourly wage never scales.
    """
    factor = rescale_factor(current, target)
    scaled: dict[str, float] = {}
    for name in HOUR_FIELDS:
        if name in values:
            scaled[name] = round_hours(to_amount(values[name]) * factor)
    for name in CURRENCY_FIELDS:
        if name in values:
            scaled[name] = round_money(to_amount(values[name]) * factor)
    return scaled


def rescale_employees(employees: Iterable[Any], current: str, target: str) -> int:
    """Rescale employee records in place; returns how many were touched."""
    rescale_factor(current, target)
    if current == target:
        return 0
    count = 0
    for employee in employees:
        values = {name: getattr(employee, name, None) for name in HOUR_FIELDS + CURRENCY_FIELDS}
        for name, value in rescale(values, current, target).items():
            setattr(employee, name, value)
        count += 1
    logger.info("Rescaled %s employees from %s to %s", count, current, target)
    return count


def pay_frequency_for(time_frame: str) -> str:
    validate_time_frame(time_frame)
    try:
        return PAY_FREQUENCY_BY_TIME_FRAME[time_frame]
    except KeyError:
        raise InvalidInputError(
            f"Time frame '{time_frame}' has no pay frequency; pass one of: weekly, biweekly, semi_monthly, monthly, annual"
        ) from None
