"""
Scenario Engine
===============
Re-evaluates runway under revenue and cost shocks applied to the average
forecast month. Works on read-only entries and never touches the base forecast.
"""

from typing import List, Optional, Sequence

import numpy as np

from components.numeric import floor_months
from components.records import RollingForecastEntry, ScenarioResult, ScenarioShock
from components.rolling_forecast import forecast_entries

DEFAULT_SHOCKS = (
    ScenarioShock("Revenue -10%", revenue_shock_pct=-10),
    ScenarioShock("Revenue -20%", revenue_shock_pct=-20),
    ScenarioShock("Revenue -30%", revenue_shock_pct=-30),
    ScenarioShock("Costs +10%", cost_shock_pct=10),
    ScenarioShock("Costs +20%", cost_shock_pct=20),
)


def shocked_burn(avg_revenue: float, avg_expenses: float, shock: ScenarioShock) -> float:
    return avg_expenses * (1 + shock.cost_shock_pct / 100) - avg_revenue * (1 + shock.revenue_shock_pct / 100)


def _runway(current_balance: float, burn: float) -> Optional[int]:
    months = floor_months(current_balance, burn)
    if months is None or months < 1:
        return None
    return months


def run_scenarios(
    entries: Sequence[RollingForecastEntry],
    current_balance: float,
    shocks: Sequence[ScenarioShock] = DEFAULT_SHOCKS,
) -> List[ScenarioResult]:
    """
    Runway under each shock, relative to the unshocked average burn.

    Only forecast entries are used. A shock that leaves the business cash
    positive reports ``depletes=False`` and no runway. A burning shock on a
    balance that is already exhausted depletes with no runway. Without forecast
    months nothing depletes.
    """
    forecast = forecast_entries(entries)
    if forecast:
        avg_revenue = float(np.mean([e.income for e in forecast]))
        avg_expenses = float(np.mean([e.expenses for e in forecast]))
    else:
        avg_revenue = avg_expenses = 0.0

    base_runway = _runway(current_balance, avg_expenses - avg_revenue)

    results = []
    for shock in shocks:
        burn = shocked_burn(avg_revenue, avg_expenses, shock)
        new_runway = _runway(current_balance, burn)
        delta = None
        if new_runway is not None and base_runway is not None:
            delta = new_runway - base_runway
        results.append(ScenarioResult(
            name=shock.name,
            new_runway_months=new_runway,
            runway_delta_months=delta,
            shocked_monthly_burn=burn,
            depletes=burn > 0,
        ))
    return results
