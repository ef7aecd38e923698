"""
Rolling Forecast Builder
========================
Stitches actual months and budgeted forecast months into one balance timeline.
Every consumer (forecast, runway, scenarios, narrative context) goes through
``build_rolling_forecast`` so the stitching rules live in one place.
"""

from typing import Dict, List, Optional, Sequence

from components.budget_projector import planned_totals_for_month
from components.records import (
    ENTRY_ACTUAL,
    ENTRY_FORECAST,
    PLANNED_ITEMS_CATEGORY,
    Budget,
    MonthBucket,
    PlannedItem,
    RollingForecastEntry,
)


def starting_balance(
    balances: Dict[str, float],
    current_month: str,
    current_balance: float,
) -> float:
    """Closing balance of the latest actual month up to ``current_month``, else the current balance."""
    past = [month for month in balances if month <= current_month]
    if not past:
        return current_balance
    return balances[max(past)]


def build_rolling_forecast(
    actuals: Dict[str, MonthBucket],
    balances: Dict[str, float],
    budget: Optional[Budget],
    current_month: str,
    current_balance: float,
    planned_income: Sequence[PlannedItem] = (),
    planned_expenses: Sequence[PlannedItem] = (),
) -> List[RollingForecastEntry]:
    """
    Merge actuals and budget into an ordered list of monthly entries.

    Actual months up to ``current_month`` take their balance from ``balances``
    (opening balance plus all transactions through the month). Forecast months
    after ``current_month`` carry the running balance forward by their budgeted
    net. Future months with neither budget nor planned items are omitted, so
    the result may have gaps.

    Args:
        actuals: Month buckets from ``aggregate_actuals``
        balances: Month-end balances from ``closing_balances``
        budget: Budget to read forecast months from, or None
        current_month: As-of month key
        current_balance: Total balance, used when there are no actual months
        planned_income: Planned income items
        planned_expenses: Planned expense items

    Returns:
        Entries strictly ascending by month
    """
    forecast_months = set(budget.forecast_months) if budget else set()
    months = sorted(set(actuals) | forecast_months)
    running = starting_balance(balances, current_month, current_balance)

    entries: List[RollingForecastEntry] = []
    for month in months:
        if month in actuals and month <= current_month:
            bucket = actuals[month]
            running = balances.get(month, running)
            entries.append(RollingForecastEntry(
                month=month,
                type=ENTRY_ACTUAL,
                income=bucket.income,
                expenses=bucket.expenses,
                net=bucket.net,
                balance=running,
            ))
            continue

        if month not in forecast_months or month <= current_month:
            continue

        slot = budget.budget_data.get(month, {})
        totals = budget.month_totals(month)
        has_planned = False
        if PLANNED_ITEMS_CATEGORY not in slot:
            planned = planned_totals_for_month(month, planned_income, planned_expenses)
            has_planned = planned.has_activity
            totals.add(planned)
        if not slot and not has_planned:
            continue

        net = totals.income - totals.expenses
        running += net
        entries.append(RollingForecastEntry(
            month=month,
            type=ENTRY_FORECAST,
            income=totals.income,
            expenses=totals.expenses,
            net=net,
            balance=running,
        ))
    return entries


def _section(entries: Sequence[RollingForecastEntry]) -> Dict[str, float]:
    income = sum(e.income for e in entries)
    expenses = sum(e.expenses for e in entries)
    return {"months": len(entries), "income": income, "expenses": expenses, "net": income - expenses}


def summarize_forecast(entries: Sequence[RollingForecastEntry]) -> Dict[str, Dict[str, float]]:
    """Totals for actual months, forecast months and the whole timeline."""
    return {
        "actual": _section([e for e in entries if e.type == ENTRY_ACTUAL]),
        "forecast": _section([e for e in entries if e.type == ENTRY_FORECAST]),
        "total": _section(entries),
    }


def forecast_entries(entries: Sequence[RollingForecastEntry]) -> List[RollingForecastEntry]:
    return [e for e in entries if e.type == ENTRY_FORECAST]


def actual_entries(entries: Sequence[RollingForecastEntry]) -> List[RollingForecastEntry]:
    return [e for e in entries if e.type == ENTRY_ACTUAL]
