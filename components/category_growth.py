"""
Category Growth Model
=====================
Endpoint compound growth per category.

Only the first and last month with activity are used, so one anomalous month
at either end of the history skews the whole projection. That behaviour is
kept for compatibility with budgets already stored by users.
"""

from typing import Dict

from components.actuals_aggregator import category_history
from components.numeric import compound_rate
from components.records import CategoryGrowthRate, CategoryTotals, MonthBucket


def growth_rate_for(history: Dict[str, CategoryTotals]) -> CategoryGrowthRate:
    """
    Growth rate for one category from its ``{month: totals}`` history.

    Months without income or expenses are ignored. With a single active month
    both rates are 0 and that month is the last observed value.
    """
    active = [history[month] for month in sorted(history) if history[month].has_activity]
    if not active:
        raise ValueError("Category has no observed activity")

    first, last = active[0], active[-1]
    months_diff = len(active) - 1
    return CategoryGrowthRate(
        income_rate=compound_rate(first.income, last.income, months_diff),
        expense_rate=compound_rate(first.expenses, last.expenses, months_diff),
        last_observed_value=CategoryTotals(income=last.income, expenses=last.expenses),
    )


def compute_category_growth_rates(actuals: Dict[str, MonthBucket]) -> Dict[str, CategoryGrowthRate]:
    """Growth rates for every category with at least one active month."""
    rates = {}
    for name, history in category_history(actuals).items():
        if any(totals.has_activity for totals in history.values()):
            rates[name] = growth_rate_for(history)
    return rates
