"""
Unit Tests for Narrative Context
=================================
Five-stage context built from full engine runs.
"""

import pytest
from datetime import date

from components.narrative_context import build_delta, build_state
from components.actuals_aggregator import aggregate_actuals
from components.records import PlannedItem, Transaction
from forecast_engine import ForecastEngine, ForecastInputs


@pytest.fixture
def burning_inputs():
    """Sales halving against flat rent, 1500 left after June."""
    return ForecastInputs(
        transactions=[
            Transaction(1000.0, "Sales", date(2024, 5, 3)),
            Transaction(-1000.0, "Rent", date(2024, 5, 5)),
            Transaction(500.0, "Sales", date(2024, 6, 3)),
            Transaction(-1000.0, "Rent", date(2024, 6, 5)),
        ],
        planned_expenses=[PlannedItem("Equipment", 500.0, date(2024, 9, 20), "one-off")],
        opening_balance=2000.0,
    )


def _context(inputs, as_of):
    engine = ForecastEngine()
    result = engine.run_forecast(inputs, "6months", as_of)
    return engine.build_narrative_context(inputs, result), result


class TestStateAndDelta:
    """Test suite for the state and delta stages."""

    def test_state(self, sample_transactions):
        state = build_state(aggregate_actuals(sample_transactions), 13130.0, "2024-06")

        assert state["currentBalance"] == 13130.0
        assert state["thisMonth"]["net"] == pytest.approx(5050)
        assert state["lastMonth"]["net"] == pytest.approx(4280)
        assert state["topCategories"][0]["category"] == "Sales"

    def test_delta(self, sample_transactions):
        delta = build_delta(aggregate_actuals(sample_transactions), "2024-06")

        assert delta["previousMonth"] == "2024-05"
        assert delta["latestMonth"] == "2024-06"
        assert delta["totalChange"] == pytest.approx(770)
        assert [c["category"] for c in delta["increases"]] == ["Sales", "Software"]
        assert delta["decreases"] == []
        assert delta["increases"][0]["percentChange"] == pytest.approx(10)

    def test_delta_needs_two_months(self):
        delta = build_delta(aggregate_actuals([Transaction(10.0, "Sales", date(2024, 6, 1))]), "2024-06")
        assert delta["previousMonth"] is None
        assert delta["increases"] == []


class TestFullContext:
    """Test suite for trajectory, exposure and choice."""

    def test_healthy_business(self, sample_transactions, as_of):
        context, result = _context(ForecastInputs(transactions=sample_transactions), as_of)

        trajectory = context["trajectory"]
        assert trajectory["runway"]["months"] is None
        assert trajectory["forwardBalances"]["month3"] == pytest.approx(result.rolling_forecast[5].balance)
        assert trajectory["structuralLeaks"] == []
        assert context["exposure"]["riskLevel"] == "none"
        actions = [d["action"] for d in context["choice"]["decisions"]]
        assert actions == ["Consider investing surplus cash"]
        assert context["choice"]["decisions"][0]["cashImpact"] is None

    def test_burning_business(self, burning_inputs, as_of):
        context, result = _context(burning_inputs, as_of)

        assert result.current_balance == pytest.approx(1500)
        trajectory = context["trajectory"]
        assert trajectory["runway"]["method"] == "forecast_balance"
        assert trajectory["runway"]["months"] == 5
        assert trajectory["runway"]["zeroCashMonth"] == "2024-09"
        assert len(trajectory["structuralLeaks"]) == 0
        assert trajectory["lowPoints"][0]["balance"] == min(e.balance for e in result.rolling_forecast)

        flags = {f["type"]: f["severity"] for f in context["exposure"]["riskFlags"]}
        assert flags["short_runway"] == "low"
        assert flags["negative_balance"] == "high"
        assert flags["large_upcoming_expense"] == "medium"
        assert flags["income_decline"] == "medium"
        assert context["exposure"]["riskLevel"] == "high"
        assert context["exposure"]["riskFlags"][0]["severity"] == "high"
        assert len(context["exposure"]["scenarios"]) == 5

        actions = [d["action"] for d in context["choice"]["decisions"]]
        assert "Delay or renegotiate Equipment" in actions
        assert "Investigate declining Sales income" in actions
        assert context["choice"]["riskLevel"] == "high"

    def test_structural_leaks(self, as_of):
        inputs = ForecastInputs(
            transactions=[Transaction(-100.0, "Rent", date(2024, 6, 5))],
            opening_balance=10000.0,
        )
        context, _ = _context(inputs, as_of)
        leaks = context["trajectory"]["structuralLeaks"]
        assert len(leaks) == 6
        assert leaks[0] == {"month": "2024-07", "expenses": 100.0}

    def test_short_runway_suggests_cutting_expenses(self, as_of):
        inputs = ForecastInputs(
            transactions=[Transaction(-1000.0, "Rent", date(2024, 6, 5))],
            opening_balance=1200.0,
        )
        context, result = _context(inputs, as_of)

        assert result.runway.months == 2
        decision = context["choice"]["decisions"][0]
        assert decision["action"] == "Reduce monthly expenses to extend runway"
        assert decision["cashImpact"] == pytest.approx(200)
        flags = {f["type"]: f["severity"] for f in context["exposure"]["riskFlags"]}
        assert flags["short_runway"] == "medium"
