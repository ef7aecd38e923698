"""
Budget Projector
================
Projects category growth forward over a horizon and folds planned income and
expense items into a synthetic "Planned Items" category.
"""

import logging
from datetime import date
from typing import Dict, List, Sequence

from components.numeric import clamp_non_negative
from components.periods import resolve_horizon_months
from components.records import (
    PLANNED_ITEMS_CATEGORY,
    Budget,
    CategoryGrowthRate,
    CategoryTotals,
    PlannedItem,
)

logger = logging.getLogger(__name__)

BudgetData = Dict[str, Dict[str, CategoryTotals]]


def project_category(rate: CategoryGrowthRate, k: int) -> CategoryTotals:
    """Projected values ``k`` months after the first forecast month (k=0 keeps the last observed value)."""
    last = rate.last_observed_value
    return CategoryTotals(
        income=clamp_non_negative(last.income * (1 + rate.income_rate / 100) ** k),
        expenses=clamp_non_negative(last.expenses * (1 + rate.expense_rate / 100) ** k),
    )


def project_budget(rates: Dict[str, CategoryGrowthRate], forecast_months: Sequence[str]) -> BudgetData:
    return {
        month: {name: project_category(rate, k) for name, rate in rates.items()}
        for k, month in enumerate(forecast_months)
    }


def planned_totals_for_month(
    month: str,
    planned_income: Sequence[PlannedItem],
    planned_expenses: Sequence[PlannedItem],
) -> CategoryTotals:
    """Sum of monthly items plus one-off items dated in ``month``."""
    return CategoryTotals(
        income=sum(clamp_non_negative(item.amount) for item in planned_income if item.applies_to(month)),
        expenses=sum(clamp_non_negative(item.amount) for item in planned_expenses if item.applies_to(month)),
    )


def _planned_slot(base: CategoryTotals, planned: CategoryTotals) -> CategoryTotals:
    slot = CategoryTotals(income=base.income, expenses=base.expenses)
    slot.add(planned)
    return slot


def fold_planned_items(
    budget_data: BudgetData,
    forecast_months: Sequence[str],
    planned_income: Sequence[PlannedItem],
    planned_expenses: Sequence[PlannedItem],
) -> BudgetData:
    """
    Add planned items to each forecast month's "Planned Items" slot.

    Values already projected into that slot are kept and added to. Months with
    nothing planned are left untouched. Returns a new mapping.
    """
    folded: BudgetData = {month: dict(slot) for month, slot in budget_data.items()}
    for month in forecast_months:
        planned = planned_totals_for_month(month, planned_income, planned_expenses)
        if not planned.has_activity:
            continue
        slot = folded.setdefault(month, {})
        slot[PLANNED_ITEMS_CATEGORY] = _planned_slot(
            slot.get(PLANNED_ITEMS_CATEGORY, CategoryTotals()), planned
        )
    return folded


def generate_budget(
    rates: Dict[str, CategoryGrowthRate],
    horizon: str,
    planned_income: Sequence[PlannedItem],
    planned_expenses: Sequence[PlannedItem],
    as_of: date,
) -> Budget:
    """
    Build a fresh budget for ``horizon`` as seen from ``as_of``.

    Args:
        rates: Category growth rates from the actuals history
        horizon: "6months" or "yearend"
        planned_income: Planned income items
        planned_expenses: Planned expense items
        as_of: Date the forecast is made on

    Returns:
        Budget with projected and planned values per forecast month
    """
    forecast_months: List[str] = resolve_horizon_months(horizon, as_of)
    budget_data = project_budget(rates, forecast_months)
    budget_data = fold_planned_items(budget_data, forecast_months, planned_income, planned_expenses)
    logger.debug("Generated %s budget over %d months for %d categories", horizon, len(forecast_months), len(rates))
    return Budget(
        horizon=horizon,
        forecast_months=forecast_months,
        category_growth_rates=dict(rates),
        budget_data=budget_data,
    )


def refresh_planned_items(
    budget: Budget,
    planned_income: Sequence[PlannedItem],
    planned_expenses: Sequence[PlannedItem],
) -> Budget:
    """
    Recompute the "Planned Items" slot of a saved budget from current planned items.

    A real category named "Planned Items" keeps its projected value; only the
    planned-item contribution is replaced.
    """
    planned_rate = budget.category_growth_rates.get(PLANNED_ITEMS_CATEGORY)
    budget_data: BudgetData = {month: dict(slot) for month, slot in budget.budget_data.items()}

    for k, month in enumerate(budget.forecast_months):
        base = project_category(planned_rate, k) if planned_rate else CategoryTotals()
        slot = _planned_slot(base, planned_totals_for_month(month, planned_income, planned_expenses))
        month_slot = budget_data.setdefault(month, {})
        if slot.has_activity:
            month_slot[PLANNED_ITEMS_CATEGORY] = slot
        else:
            month_slot.pop(PLANNED_ITEMS_CATEGORY, None)

    return Budget(
        horizon=budget.horizon,
        forecast_months=list(budget.forecast_months),
        category_growth_rates=dict(budget.category_growth_rates),
        budget_data=budget_data,
    )
