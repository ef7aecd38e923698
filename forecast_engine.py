"""
Forecast Engine
===============
Rolling forecast pipeline: actuals -> growth rates -> budget -> rolling
forecast -> runway, plus scenarios and narrative context on demand.

The engine is pure. It works on already-loaded inputs and an explicit as-of
date; loading and persisting the budget belong to ``services.forecast_service``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Sequence, Tuple

from components.actuals_aggregator import aggregate_actuals, closing_balances
from components.budget_projector import generate_budget, refresh_planned_items
from components.category_growth import compute_category_growth_rates
from components.narrative_context import (
    build_choice,
    build_delta,
    build_exposure,
    build_state,
    build_trajectory,
)
from components.periods import HORIZONS, month_key
from components.records import (
    Budget,
    MonthBucket,
    PlannedItem,
    RollingForecastEntry,
    RunwayResult,
    ScenarioResult,
    ScenarioShock,
    Transaction,
)
from components.rolling_forecast import build_rolling_forecast, summarize_forecast
from components.runway_calculator import calculate_runway
from components.scenario_engine import DEFAULT_SHOCKS, run_scenarios

logger = logging.getLogger(__name__)


@dataclass
class ForecastInputs:
    """Everything the engine needs for one user, already fetched."""
    transactions: List[Transaction] = field(default_factory=list)
    planned_income: List[PlannedItem] = field(default_factory=list)
    planned_expenses: List[PlannedItem] = field(default_factory=list)
    opening_balance: float = 0.0

    @property
    def current_balance(self) -> float:
        return self.opening_balance + sum(t.amount for t in self.transactions)


@dataclass
class ForecastResult:
    current_balance: float
    current_month: str
    horizon: str
    actuals: Dict[str, MonthBucket]
    budget: Budget
    rolling_forecast: List[RollingForecastEntry]
    summary: Dict[str, Dict[str, float]]
    runway: RunwayResult
    budget_regenerated: bool = False
    budget_stale: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "currentBalance": self.current_balance,
            "currentMonth": self.current_month,
            "horizon": self.horizon,
            "rollingForecast": [entry.to_dict() for entry in self.rolling_forecast],
            "summary": self.summary,
            "runway": self.runway.to_dict(),
            "budgetRegenerated": self.budget_regenerated,
            "budgetStale": self.budget_stale,
        }


def is_budget_stale(budget: Budget, as_of: date) -> bool:
    """A saved budget is stale once its first forecast month is no longer in the future."""
    if not budget.forecast_months:
        return False
    return budget.forecast_months[0] <= month_key(as_of)


class ForecastEngine:
    """
    Runs the rolling forecast for one user's inputs.

    Every caller that needs the rolling forecast (the forecast itself, runway,
    scenarios, narrative context) goes through ``run_forecast``.
    """

    def resolve_budget(
        self,
        inputs: ForecastInputs,
        actuals: Dict[str, MonthBucket],
        horizon: str,
        as_of: date,
        saved_budget: Optional[Budget] = None,
    ) -> Tuple[Budget, bool, bool]:
        """
        Reuse the saved budget when its horizon matches, otherwise generate one.

        Returns:
            Tuple of (budget, regenerated, stale)
        """
        if saved_budget is not None and saved_budget.horizon == horizon:
            stale = is_budget_stale(saved_budget, as_of)
            if stale:
                logger.warning(
                    "Saved %s budget starts at %s, not after %s; reusing it as stale",
                    horizon, saved_budget.forecast_months[0], month_key(as_of),
                )
            budget = refresh_planned_items(saved_budget, inputs.planned_income, inputs.planned_expenses)
            return budget, False, stale

        if saved_budget is None:
            logger.info("No saved budget, generating %s budget", horizon)
        else:
            logger.info("Saved budget horizon %s differs from %s, regenerating", saved_budget.horizon, horizon)
        rates = compute_category_growth_rates(actuals)
        budget = generate_budget(rates, horizon, inputs.planned_income, inputs.planned_expenses, as_of)
        return budget, True, False

    def run_forecast(
        self,
        inputs: ForecastInputs,
        horizon: str,
        as_of: date,
        saved_budget: Optional[Budget] = None,
    ) -> ForecastResult:
        """
        Run the full pipeline.

        Args:
            inputs: Transactions, planned items and opening balance
            horizon: "6months" or "yearend"
            as_of: Date the forecast is made on
            saved_budget: Previously persisted budget, if any

        Returns:
            ForecastResult with the rolling forecast, summary and runway
        """
        if horizon not in HORIZONS:
            raise ValueError(f"Unknown horizon '{horizon}', expected one of {', '.join(HORIZONS)}")

        current_month = month_key(as_of)
        current_balance = inputs.current_balance
        actuals = aggregate_actuals(inputs.transactions)
        balances = closing_balances(inputs.transactions, inputs.opening_balance)

        budget, regenerated, stale = self.resolve_budget(inputs, actuals, horizon, as_of, saved_budget)

        entries = build_rolling_forecast(
            actuals,
            balances,
            budget,
            current_month=current_month,
            current_balance=current_balance,
            planned_income=inputs.planned_income,
            planned_expenses=inputs.planned_expenses,
        )
        if not entries:
            logger.info("Rolling forecast for %s is empty", current_month)

        return ForecastResult(
            current_balance=current_balance,
            current_month=current_month,
            horizon=horizon,
            actuals=actuals,
            budget=budget,
            rolling_forecast=entries,
            summary=summarize_forecast(entries),
            runway=calculate_runway(entries, current_balance),
            budget_regenerated=regenerated,
            budget_stale=stale,
        )

    def run_scenarios(
        self,
        result: ForecastResult,
        shocks: Sequence[ScenarioShock] = DEFAULT_SHOCKS,
    ) -> List[ScenarioResult]:
        return run_scenarios(result.rolling_forecast, result.current_balance, shocks)

    def build_narrative_context(
        self,
        inputs: ForecastInputs,
        result: ForecastResult,
        shocks: Sequence[ScenarioShock] = DEFAULT_SHOCKS,
    ) -> Dict[str, Any]:
        """Five-stage context (state, delta, trajectory, exposure, choice) for one forecast."""
        rates = result.budget.category_growth_rates
        exposure = build_exposure(
            result.rolling_forecast,
            result.runway,
            result.current_balance,
            rates,
            inputs.planned_income,
            inputs.planned_expenses,
            self.run_scenarios(result, shocks),
        )
        return {
            "state": build_state(result.actuals, result.current_balance, result.current_month),
            "delta": build_delta(result.actuals, result.current_month),
            "trajectory": build_trajectory(result.rolling_forecast, result.runway, result.current_balance),
            "exposure": exposure,
            "choice": build_choice(
                result.rolling_forecast,
                result.runway,
                result.current_balance,
                rates,
                inputs.planned_expenses,
                exposure["riskLevel"],
            ),
        }


def run_forecast_engine(
    inputs: ForecastInputs,
    horizon: str,
    as_of: date,
    saved_budget: Optional[Budget] = None,
) -> ForecastResult:
    """Convenience wrapper around ``ForecastEngine().run_forecast``."""
    return ForecastEngine().run_forecast(inputs, horizon, as_of, saved_budget)
