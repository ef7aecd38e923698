"""
Budget vs actual variance per budget month and category.
"""

from typing import Any, Dict, List

from components.numeric import safe_div
from components.records import Budget, CategoryTotals, MonthBucket


def _variance(planned: float, actual: float) -> Dict[str, Any]:
    variance = actual - planned
    pct = safe_div(variance, abs(planned))
    return {
        "planned": planned,
        "actual": actual,
        "variance": variance,
        "variancePercent": pct * 100 if pct is not None else None,
    }


def _compare(planned: CategoryTotals, actual: CategoryTotals) -> Dict[str, Any]:
    return {
        "income": _variance(planned.income, actual.income),
        "expenses": _variance(planned.expenses, actual.expenses),
        "net": _variance(planned.net, actual.net),
    }


def compute_budget_variance(
    budget: Budget,
    actuals: Dict[str, MonthBucket],
    current_month: str,
) -> List[Dict[str, Any]]:
    """
    Compare each budget month with what was actually booked.

    Months after ``current_month`` have no actuals yet and are reported with
    ``hasActuals`` false and zero actual values.
    """
    rows = []
    for month in budget.forecast_months:
        has_actuals = month <= current_month and month in actuals
        bucket = actuals.get(month) if has_actuals else None
        slot = budget.budget_data.get(month, {})

        categories = {}
        for name in sorted(set(slot) | set(bucket.by_category if bucket else {})):
            actual = bucket.by_category.get(name, CategoryTotals()) if bucket else CategoryTotals()
            categories[name] = _compare(slot.get(name, CategoryTotals()), actual)

        actual_totals = CategoryTotals(bucket.income, bucket.expenses) if bucket else CategoryTotals()
        rows.append({
            "month": month,
            "hasActuals": has_actuals,
            **_compare(budget.month_totals(month), actual_totals),
            "byCategory": categories,
        })
    return rows
