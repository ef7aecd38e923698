"""
Unit Tests for Budget Projector
================================
"""

import pytest
from datetime import date

from components.budget_projector import (
    fold_planned_items,
    generate_budget,
    planned_totals_for_month,
    project_category,
    refresh_planned_items,
)
from components.records import (
    PLANNED_ITEMS_CATEGORY,
    Budget,
    CategoryGrowthRate,
    CategoryTotals,
    PlannedItem,
)


def _rate(income_rate=0.0, expense_rate=0.0, income=0.0, expenses=0.0):
    return CategoryGrowthRate(income_rate, expense_rate, CategoryTotals(income, expenses))


class TestProjection:
    """Test suite for per-category projection."""

    def test_first_month_keeps_last_value(self):
        projected = project_category(_rate(10, 5, income=1000, expenses=400), 0)
        assert projected.income == 1000
        assert projected.expenses == 400

    def test_compound_growth(self):
        projected = project_category(_rate(10, -50, income=1000, expenses=400), 2)
        assert projected.income == pytest.approx(1210)
        assert projected.expenses == pytest.approx(100)

    def test_projection_never_negative(self):
        """Test that rates below -100% are clamped to zero."""
        for k in range(4):
            projected = project_category(_rate(-150, -250, income=100, expenses=100), k)
            assert projected.income >= 0
            assert projected.expenses >= 0

    def test_generate_budget_shape(self, as_of):
        rates = {"Sales": _rate(10, 0, income=6050), "Rent": _rate(0, 0, expenses=1000)}
        budget = generate_budget(rates, "6months", [], [], as_of)

        assert budget.horizon == "6months"
        assert budget.forecast_months == ["2024-07", "2024-08", "2024-09", "2024-10", "2024-11", "2024-12"]
        assert budget.budget_data["2024-07"]["Sales"].income == pytest.approx(6050)
        assert budget.budget_data["2024-08"]["Sales"].income == pytest.approx(6655)
        assert budget.budget_data["2024-12"]["Rent"].expenses == pytest.approx(1000)
        assert PLANNED_ITEMS_CATEGORY not in budget.budget_data["2024-07"]

    def test_generate_budget_yearend_in_december(self):
        budget = generate_budget({"Sales": _rate(income=10)}, "yearend", [], [], date(2024, 12, 5))
        assert budget.forecast_months == []
        assert budget.budget_data == {}


class TestPlannedItems:
    """Test suite for folding planned items."""

    def test_one_off_expense_only_in_its_month(self, as_of, one_off_expense):
        """Test that a one-off item lands only in the month it is dated."""
        budget = generate_budget({}, "6months", [], [one_off_expense], as_of)

        assert budget.budget_data["2024-09"][PLANNED_ITEMS_CATEGORY].expenses == 500
        for month in budget.forecast_months:
            if month != "2024-09":
                assert PLANNED_ITEMS_CATEGORY not in budget.budget_data[month]

    def test_monthly_income_every_month(self, as_of, monthly_income):
        budget = generate_budget({}, "6months", [monthly_income], [], as_of)
        for month in budget.forecast_months:
            assert budget.budget_data[month][PLANNED_ITEMS_CATEGORY].income == 300

    def test_planned_totals_sum_matching_items(self, monthly_income, one_off_expense):
        extra = PlannedItem("Tax", 200.0, date(2024, 9, 1), "one-off")
        totals = planned_totals_for_month("2024-09", [monthly_income], [one_off_expense, extra])
        assert totals.income == 300
        assert totals.expenses == 700

    def test_folding_adds_to_existing_slot(self, one_off_expense):
        """Test that planned sums add to a projected 'Planned Items' category."""
        data = {"2024-09": {PLANNED_ITEMS_CATEGORY: CategoryTotals(income=0, expenses=100)}}
        folded = fold_planned_items(data, ["2024-09"], [], [one_off_expense])

        assert folded["2024-09"][PLANNED_ITEMS_CATEGORY].expenses == 600
        assert data["2024-09"][PLANNED_ITEMS_CATEGORY].expenses == 100


class TestRefreshPlannedItems:
    """Test suite for refreshing a saved budget."""

    def _saved(self):
        return Budget(
            horizon="6months",
            forecast_months=["2024-07", "2024-08", "2024-09"],
            category_growth_rates={"Rent": _rate(expenses=1000)},
            budget_data={
                "2024-07": {"Rent": CategoryTotals(0, 1000), PLANNED_ITEMS_CATEGORY: CategoryTotals(0, 999)},
                "2024-08": {"Rent": CategoryTotals(0, 1000)},
                "2024-09": {"Rent": CategoryTotals(0, 1000)},
            },
        )

    def test_replaces_stale_planned_values(self, one_off_expense):
        saved = self._saved()
        refreshed = refresh_planned_items(saved, [], [one_off_expense])

        assert PLANNED_ITEMS_CATEGORY not in refreshed.budget_data["2024-07"]
        assert refreshed.budget_data["2024-09"][PLANNED_ITEMS_CATEGORY].expenses == 500
        assert refreshed.budget_data["2024-08"]["Rent"].expenses == 1000

    def test_does_not_mutate_saved_budget(self, one_off_expense):
        saved = self._saved()
        refresh_planned_items(saved, [], [one_off_expense])
        assert saved.budget_data["2024-07"][PLANNED_ITEMS_CATEGORY].expenses == 999
        assert PLANNED_ITEMS_CATEGORY not in saved.budget_data["2024-09"]

    def test_keeps_projected_planned_items_category(self, monthly_income):
        saved = self._saved()
        saved.category_growth_rates[PLANNED_ITEMS_CATEGORY] = _rate(expenses=50)
        refreshed = refresh_planned_items(saved, [monthly_income], [])

        slot = refreshed.budget_data["2024-08"][PLANNED_ITEMS_CATEGORY]
        assert slot.expenses == 50
        assert slot.income == 300
