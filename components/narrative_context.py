"""
Narrative Context
=================
Structured numeric context for the five-stage cash narrative:

- state: where the cash position stands now
- delta: what changed since last month
- trajectory: where the balance is heading
- exposure: what could go wrong
- choice: rule-based actions

The prose itself is produced elsewhere; this module only assembles numbers.
"""

from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from components.budget_projector import planned_totals_for_month
from components.numeric import safe_div
from components.periods import add_months
from components.records import (
    CategoryGrowthRate,
    CategoryTotals,
    MonthBucket,
    PlannedItem,
    RollingForecastEntry,
    RunwayResult,
    ScenarioResult,
)
from components.rolling_forecast import forecast_entries
from components.runway_calculator import runway_direction

SEVERITY_ORDER = {"none": 0, "low": 1, "medium": 2, "high": 3}

LARGE_EXPENSE_SHARE = 0.2
VERY_LARGE_EXPENSE_SHARE = 0.5
EXPENSE_GROWTH_LIMIT = 30.0
INCOME_DECLINE_LIMIT = -20.0
DELTA_EPSILON = 0.01


def _totals(bucket: Optional[MonthBucket]) -> Dict[str, float]:
    if bucket is None:
        return {"income": 0.0, "expenses": 0.0, "net": 0.0}
    return {"income": bucket.income, "expenses": bucket.expenses, "net": bucket.net}


def build_state(actuals: Dict[str, MonthBucket], current_balance: float, current_month: str) -> Dict[str, Any]:
    """Current balance, this and last month's totals, top categories by absolute net."""
    overall: Dict[str, CategoryTotals] = {}
    for bucket in actuals.values():
        for name, totals in bucket.by_category.items():
            overall.setdefault(name, CategoryTotals()).add(totals)

    top = sorted(overall.items(), key=lambda item: abs(item[1].net), reverse=True)[:5]
    return {
        "currentBalance": current_balance,
        "currentMonth": current_month,
        "thisMonth": _totals(actuals.get(current_month)),
        "lastMonth": _totals(actuals.get(add_months(current_month, -1))),
        "topCategories": [{"category": name, **totals.to_dict(), "net": totals.net} for name, totals in top],
    }


def build_delta(actuals: Dict[str, MonthBucket], current_month: str) -> Dict[str, Any]:
    """Category-level net change between the two latest actual months."""
    months = [m for m in sorted(actuals) if m <= current_month][-2:]
    if len(months) < 2:
        return {"previousMonth": None, "latestMonth": months[-1] if months else None,
                "totalChange": 0.0, "percentChange": None, "increases": [], "decreases": []}

    previous, latest = actuals[months[0]], actuals[months[1]]
    changes = []
    for name in sorted(set(previous.by_category) | set(latest.by_category)):
        before = previous.by_category.get(name, CategoryTotals()).net
        after = latest.by_category.get(name, CategoryTotals()).net
        change = after - before
        if abs(change) > DELTA_EPSILON:
            pct = safe_div(change, abs(before))
            changes.append({
                "category": name,
                "previous": before,
                "latest": after,
                "change": change,
                "percentChange": pct * 100 if pct is not None else None,
            })

    pct_total = safe_div(latest.net - previous.net, abs(previous.net))
    return {
        "previousMonth": months[0],
        "latestMonth": months[1],
        "totalChange": latest.net - previous.net,
        "percentChange": pct_total * 100 if pct_total is not None else None,
        "increases": sorted([c for c in changes if c["change"] > 0], key=lambda c: -c["change"])[:5],
        "decreases": sorted([c for c in changes if c["change"] < 0], key=lambda c: c["change"])[:5],
    }


def build_trajectory(
    entries: Sequence[RollingForecastEntry],
    runway: RunwayResult,
    current_balance: float,
) -> Dict[str, Any]:
    forecast = forecast_entries(entries)
    forward = {}
    for label, offset in (("month3", 3), ("month6", 6)):
        forward[label] = forecast[offset - 1].balance if len(forecast) >= offset else None
    forward["end"] = forecast[-1].balance if forecast else None

    lows = sorted(forecast, key=lambda e: e.balance)[:3]
    return {
        "runway": runway.to_dict(),
        "runwayDirection": runway_direction(entries, current_balance, runway.months),
        "forwardBalances": forward,
        "lowPoints": [{"month": e.month, "balance": e.balance} for e in lows],
        "structuralLeaks": [
            {"month": e.month, "expenses": e.expenses}
            for e in forecast if e.expenses > 0 and e.income == 0
        ],
        "forecastMonths": len(forecast),
    }


def _upcoming_months(entries: Sequence[RollingForecastEntry], count: int = 3) -> List[str]:
    return [e.month for e in forecast_entries(entries)[:count]]


def upcoming_planned_expenses(
    entries: Sequence[RollingForecastEntry],
    planned_expenses: Sequence[PlannedItem],
) -> List[Dict[str, Any]]:
    """Planned expenses landing in the next three forecast months, largest first."""
    months = _upcoming_months(entries)
    items = []
    for item in planned_expenses:
        hits = [m for m in months if item.applies_to(m)]
        if hits:
            items.append({"description": item.description, "amount": item.amount,
                          "month": hits[0], "recurrence": item.recurrence})
    return sorted(items, key=lambda i: -i["amount"])[:5]


def build_exposure(
    entries: Sequence[RollingForecastEntry],
    runway: RunwayResult,
    current_balance: float,
    rates: Dict[str, CategoryGrowthRate],
    planned_income: Sequence[PlannedItem],
    planned_expenses: Sequence[PlannedItem],
    scenarios: Sequence[ScenarioResult] = (),
) -> Dict[str, Any]:
    """Risk flags ranked by severity, plus the stress-scenario results."""
    flags = []
    if runway.months is not None:
        if runway.months <= 1:
            severity = "high"
        elif runway.months <= 3:
            severity = "medium"
        elif runway.months <= 6:
            severity = "low"
        else:
            severity = None
        if severity:
            flags.append({"type": "short_runway", "severity": severity,
                          "detail": f"Cash runs out in {runway.months} month(s)"})

    balance_base = max(current_balance, 0.0)
    for item in upcoming_planned_expenses(entries, planned_expenses):
        share = safe_div(item["amount"], balance_base)
        if share is None or share > LARGE_EXPENSE_SHARE:
            flags.append({
                "type": "large_upcoming_expense",
                "severity": "high" if share is None or share > VERY_LARGE_EXPENSE_SHARE else "medium",
                "detail": f"{item['description']} ({item['amount']:.2f}) due {item['month']}",
            })

    for month in _upcoming_months(entries):
        income = planned_totals_for_month(month, planned_income, ()).income
        share = safe_div(income, balance_base)
        if income > 0 and (share is None or share > LARGE_EXPENSE_SHARE):
            flags.append({"type": "planned_income_dependency", "severity": "medium",
                          "detail": f"{income:.2f} of planned income expected in {month}"})

    negative = [e.month for e in forecast_entries(entries) if e.balance < 0]
    if negative:
        flags.append({"type": "negative_balance", "severity": "high",
                      "detail": f"Balance negative from {negative[0]} ({len(negative)} month(s))"})

    for name, rate in sorted(rates.items()):
        if rate.expense_rate > EXPENSE_GROWTH_LIMIT:
            flags.append({"type": "expense_growth", "severity": "medium",
                          "detail": f"{name} expenses growing {rate.expense_rate:.1f}% per month"})
        if rate.income_rate < INCOME_DECLINE_LIMIT:
            flags.append({"type": "income_decline", "severity": "medium",
                          "detail": f"{name} income falling {abs(rate.income_rate):.1f}% per month"})

    flags.sort(key=lambda f: -SEVERITY_ORDER[f["severity"]])
    return {
        "riskFlags": flags,
        "riskLevel": flags[0]["severity"] if flags else "none",
        "scenarios": [s.to_dict() for s in scenarios],
    }


def build_choice(
    entries: Sequence[RollingForecastEntry],
    runway: RunwayResult,
    current_balance: float,
    rates: Dict[str, CategoryGrowthRate],
    planned_expenses: Sequence[PlannedItem],
    risk_level: str = "none",
) -> Dict[str, Any]:
    """Rule-based decisions with a rough monthly cash impact."""
    decisions = []
    if runway.months is not None and runway.months <= 3:
        burn = runway.avg_monthly_burn
        if burn is None:
            forecast = forecast_entries(entries)
            burn = abs(min(0.0, float(np.mean([e.net for e in forecast])))) if forecast else 0.0
        decisions.append({"action": "Reduce monthly expenses to extend runway",
                          "priority": "high", "cashImpact": burn * 0.2})

    upcoming = upcoming_planned_expenses(entries, planned_expenses)
    if upcoming and current_balance > 0 and upcoming[0]["amount"] > LARGE_EXPENSE_SHARE * current_balance:
        decisions.append({"action": f"Delay or renegotiate {upcoming[0]['description']}",
                          "priority": "medium", "cashImpact": upcoming[0]["amount"]})

    for name, rate in sorted(rates.items()):
        if rate.income_rate < INCOME_DECLINE_LIMIT:
            decisions.append({"action": f"Investigate declining {name} income",
                              "priority": "medium", "cashImpact": None})

    forecast = forecast_entries(entries)
    if runway.months is None and forecast and float(np.mean([e.net for e in forecast])) > 0:
        decisions.append({"action": "Consider investing surplus cash",
                          "priority": "low", "cashImpact": None})

    return {"decisions": decisions, "riskLevel": risk_level}
