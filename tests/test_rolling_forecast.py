"""
Unit Tests for Rolling Forecast Builder
========================================
"""

import pytest
from datetime import date

from components.actuals_aggregator import aggregate_actuals, closing_balances
from components.budget_projector import generate_budget
from components.category_growth import compute_category_growth_rates
from components.records import PLANNED_ITEMS_CATEGORY, Budget, CategoryTotals, Transaction
from components.rolling_forecast import build_rolling_forecast, starting_balance, summarize_forecast


def _build(transactions, as_of, planned_income=(), planned_expenses=(), budget=None, opening_balance=0.0):
    actuals = aggregate_actuals(transactions)
    if budget is None:
        rates = compute_category_growth_rates(actuals)
        budget = generate_budget(rates, "6months", planned_income, planned_expenses, as_of)
    current_balance = opening_balance + sum(t.amount for t in transactions)
    return build_rolling_forecast(
        actuals,
        closing_balances(transactions, opening_balance),
        budget,
        current_month=f"{as_of.year:04d}-{as_of.month:02d}",
        current_balance=current_balance,
        planned_income=planned_income,
        planned_expenses=planned_expenses,
    )


class TestRollingForecast:
    """Test suite for stitching actuals and budget."""

    def test_actual_then_forecast(self, sample_transactions, as_of):
        entries = _build(sample_transactions, as_of)

        assert [e.type for e in entries] == ["actual"] * 3 + ["forecast"] * 6
        assert entries[2].month == "2024-06"
        assert entries[2].balance == pytest.approx(13130)
        assert entries[3].month == "2024-07"
        assert entries[3].net == pytest.approx(4830)
        assert entries[3].balance == pytest.approx(17960)

    def test_months_strictly_increasing(self, sample_transactions, as_of):
        months = [e.month for e in _build(sample_transactions, as_of)]
        assert months == sorted(set(months))

    def test_balance_continuity(self, sample_transactions, as_of, one_off_expense, monthly_income):
        """Test balance[i] == balance[i-1] + net[i] across the whole timeline."""
        entries = _build(sample_transactions, as_of, [monthly_income], [one_off_expense], opening_balance=250)
        for prev, cur in zip(entries, entries[1:]):
            assert cur.balance == pytest.approx(prev.balance + cur.net)

    def test_actual_balances_include_opening_balance(self, sample_transactions, as_of):
        entries = _build(sample_transactions, as_of, opening_balance=1000)
        assert entries[0].balance == pytest.approx(4800)

    def test_empty_months_are_omitted(self, as_of, one_off_expense):
        """Test that forecast months with no budget and no planned items leave a gap."""
        entries = _build([], as_of, planned_expenses=[one_off_expense])
        assert [e.month for e in entries] == ["2024-09"]
        assert entries[0].expenses == 500
        assert entries[0].balance == pytest.approx(-500)

    def test_no_actuals_seeds_from_current_balance(self, as_of, monthly_income):
        actuals = {}
        budget = generate_budget({}, "6months", [monthly_income], [], as_of)
        entries = build_rolling_forecast(actuals, {}, budget, "2024-06", 1000.0, [monthly_income], [])
        assert entries[0].balance == pytest.approx(1300)
        assert entries[-1].balance == pytest.approx(2800)

    def test_planned_items_added_when_slot_absent(self, as_of, one_off_expense):
        """Test a saved budget without a Planned Items slot still picks up planned items."""
        budget = Budget(
            horizon="6months",
            forecast_months=["2024-07", "2024-08", "2024-09"],
            category_growth_rates={},
            budget_data={m: {"Rent": CategoryTotals(0, 1000)} for m in ["2024-07", "2024-08", "2024-09"]},
        )
        entries = build_rolling_forecast({}, {}, budget, "2024-06", 5000.0, [], [one_off_expense])
        assert [e.expenses for e in entries] == [1000, 1000, 1500]

    def test_planned_items_not_double_counted(self, as_of, one_off_expense):
        budget = generate_budget({}, "6months", [], [one_off_expense], as_of)
        assert PLANNED_ITEMS_CATEGORY in budget.budget_data["2024-09"]
        entries = build_rolling_forecast({}, {}, budget, "2024-06", 5000.0, [], [one_off_expense])
        assert entries[0].expenses == 500

    def test_future_dated_transaction_is_not_actual(self, sample_transactions, as_of):
        future = sample_transactions + [Transaction(-100.0, "Rent", date(2024, 8, 1))]
        entries = _build(future, as_of)
        august = next(e for e in entries if e.month == "2024-08")
        assert august.type == "forecast"

    def test_forecast_months_not_after_current_month_are_skipped(self):
        budget = Budget(
            horizon="6months",
            forecast_months=["2024-05", "2024-06", "2024-07"],
            category_growth_rates={},
            budget_data={m: {"Rent": CategoryTotals(0, 100)} for m in ["2024-05", "2024-06", "2024-07"]},
        )
        entries = build_rolling_forecast({}, {}, budget, "2024-06", 1000.0)
        assert [e.month for e in entries] == ["2024-07"]

    def test_starting_balance_ignores_future_months(self):
        balances = {"2024-05": 100.0, "2024-06": 200.0, "2024-08": 900.0}
        assert starting_balance(balances, "2024-06", 50.0) == 200.0
        assert starting_balance({}, "2024-06", 50.0) == 50.0


class TestSummary:
    """Test suite for forecast summary totals."""

    def test_summary_sections(self, sample_transactions, as_of):
        summary = summarize_forecast(_build(sample_transactions, as_of))

        assert summary["actual"]["months"] == 3
        assert summary["actual"]["income"] == pytest.approx(16550)
        assert summary["actual"]["expenses"] == pytest.approx(3420)
        assert summary["actual"]["net"] == pytest.approx(13130)
        assert summary["forecast"]["months"] == 6
        assert summary["total"]["months"] == 9
        assert summary["total"]["net"] == pytest.approx(summary["actual"]["net"] + summary["forecast"]["net"])

    def test_empty_summary(self):
        summary = summarize_forecast([])
        assert summary["total"] == {"months": 0, "income": 0, "expenses": 0, "net": 0}
