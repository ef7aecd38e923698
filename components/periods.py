"""
Calendar month keys (``YYYY-MM``) and forecast horizon resolution.
"""

from datetime import date, datetime
from typing import List, Union

from dateutil.relativedelta import relativedelta

HORIZON_SIX_MONTHS = "6months"
HORIZON_YEAR_END = "yearend"
HORIZONS = (HORIZON_SIX_MONTHS, HORIZON_YEAR_END)

DateLike = Union[date, datetime, str]


def to_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def month_key(value: DateLike) -> str:
    """``YYYY-MM`` key for a date, datetime or ISO date string."""
    d = to_date(value)
    return f"{d.year:04d}-{d.month:02d}"


def month_start(key: str) -> date:
    year, month = key.split("-")
    return date(int(year), int(month), 1)


def add_months(key: str, count: int) -> str:
    return month_key(month_start(key) + relativedelta(months=count))


def resolve_horizon_months(horizon: str, as_of: DateLike) -> List[str]:
    """
    Forecast months for a horizon, always strictly after the as-of month.

    ``6months`` is the next six calendar months; ``yearend`` is every remaining
    month of the as-of year, which is empty in December.
    """
    current = month_key(as_of)
    if horizon == HORIZON_SIX_MONTHS:
        return [add_months(current, i) for i in range(1, 7)]
    if horizon == HORIZON_YEAR_END:
        remaining = 12 - month_start(current).month
        return [add_months(current, i) for i in range(1, remaining + 1)]
    raise ValueError(f"Unknown horizon '{horizon}', expected one of {', '.join(HORIZONS)}")
