"""
Runway Calculator
=================
Months until cash runs out, either read off the forecast balances or
extrapolated from the average forecast burn.
"""

from typing import Optional, Sequence

import numpy as np

from components.numeric import floor_months
from components.records import (
    RUNWAY_AVERAGE_BURN,
    RUNWAY_FORECAST_BALANCE,
    RollingForecastEntry,
    RunwayResult,
)
from components.rolling_forecast import actual_entries, forecast_entries

DIRECTION_LENGTHENING = "lengthening"
DIRECTION_SHORTENING = "shortening"
DIRECTION_STABLE = "stable"


def calculate_runway(entries: Sequence[RollingForecastEntry], current_balance: float) -> RunwayResult:
    """
    Runway for a rolling forecast.

    The first entry with a balance at or below zero wins (``forecast_balance``,
    counted over the whole timeline). Otherwise a negative mean forecast net
    gives ``floor(current_balance / burn)`` months (``average_burn``), with the
    zero-cash month resolved when it falls inside the forecast. A runway below
    one month from the average burn is reported as no runway.
    """
    for index, entry in enumerate(entries):
        if entry.balance <= 0:
            return RunwayResult(
                months=index + 1,
                method=RUNWAY_FORECAST_BALANCE,
                zero_cash_month=entry.month,
            )

    forecast = forecast_entries(entries)
    if not forecast:
        return RunwayResult()

    avg_change = float(np.mean([e.net for e in forecast]))
    if avg_change >= 0:
        return RunwayResult()

    burn = abs(avg_change)
    months = floor_months(current_balance, burn)
    if months is None or months < 1:
        return RunwayResult(avg_monthly_burn=burn)

    zero_cash_month = forecast[months - 1].month if months <= len(forecast) else None
    return RunwayResult(
        months=months,
        method=RUNWAY_AVERAGE_BURN,
        zero_cash_month=zero_cash_month,
        avg_monthly_burn=burn,
    )


def runway_direction(
    entries: Sequence[RollingForecastEntry],
    current_balance: float,
    runway_months: Optional[int],
) -> str:
    """
    Whether the forecast runway is longer or shorter than recent history implies.

    Recent runway comes from the average net of the last three actual months.
    Differences of one month or less, or a missing side (including recent
    history that was not burning cash), count as stable.
    """
    recent = actual_entries(entries)[-3:]
    if not recent or runway_months is None:
        return DIRECTION_STABLE

    avg_net = float(np.mean([e.net for e in recent]))
    historical = floor_months(current_balance, -avg_net)
    if historical is None:
        return DIRECTION_STABLE
    if runway_months > historical + 1:
        return DIRECTION_LENGTHENING
    if runway_months < historical - 1:
        return DIRECTION_SHORTENING
    return DIRECTION_STABLE
