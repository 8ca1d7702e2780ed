from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any

from restaurant_payroll.services.errors import InvalidInputError


def to_amount(value: Any) -> float:
    """Read a numeric employee field, treating missing values as zero.

    Examples:
    - None / "" -> 0.0
    - "12.50" / Decimal("12.50") -> 12.5
    - True is rejected, it is never a wage or an hour count
    """
    if value is None:
        return 0.0
    if isinstance(value, bool):
        raise InvalidInputError("Amount must be a number, not a boolean")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, Decimal):
        return float(value)
    text = str(value).strip().lstrip("$").replace(",", "")
    if not text:
        return 0.0
    try:
        return float(Decimal(text))
    except InvalidOperation as exc:
        raise InvalidInputError(f"Amount must be a valid number, got {value!r}") from exc


def round_money(value: float) -> float:
    return round(value + 1e-9, 2)


def round_hours(value: float) -> float:
    return round(value + 1e-9, 1)
