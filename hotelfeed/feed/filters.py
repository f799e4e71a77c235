"""HOTELFEED — Filter State Assembly.

Turns raw selector values (from the UI or query string) into a FilterState.
"""

import datetime as dt
from typing import Optional, Union

from hotelfeed.core.errors import FilterValidationError
from hotelfeed.core.type_registry import normalize_type
from hotelfeed.models.feed_models import FilterState

# Selector values that mean "no restriction on the type axis"
_ANY_TYPE = {"all", "any"}


def _parse_date(value: Union[dt.date, str, None]) -> dt.date:
    if value is None or value == "":
        raise FilterValidationError("A feed date is required")
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    try:
        return dt.datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError as e:
        raise FilterValidationError(f"Invalid date '{value}', expected YYYY-MM-DD") from e


def _normalize_type_group(value: Optional[str]) -> Optional[str]:
    if value is None or value.strip().lower() in _ANY_TYPE:
        return None
    # "Check-In" selects the same group as "checkin"
    return normalize_type(value) or None


def build_filter(
    date: Union[dt.date, str, None],
    employee_id: Optional[int] = None,
    type_group: Optional[str] = None,
) -> FilterState:
    """Validate selector values and return an immutable FilterState."""
    if employee_id is not None and employee_id <= 0:
        raise FilterValidationError(f"Invalid employee id {employee_id}")
    return FilterState(
        date=_parse_date(date),
        employee_id=employee_id,
        type_group=_normalize_type_group(type_group),
    )
