"""
Scenario Service
================
Stress scenarios on top of a user's rolling forecast.
"""

from datetime import date
from typing import Any, Dict, List, Optional, Sequence

from components.records import ScenarioShock
from components.scenario_engine import DEFAULT_SHOCKS
from services.forecast_service import ForecastService


class ScenarioService:
    """
    Service for scenario business logic.

    Scenarios are evaluated on demand and never change the base forecast.
    """

    def __init__(self, db_handler, forecast_service: Optional[ForecastService] = None):
        """
        Initialize scenario service.

        Args:
            db_handler: Database handler instance (SupabaseAPIHandler)
            forecast_service: Forecast service to reuse, built from db_handler when omitted
        """
        self.db = db_handler
        self.forecasts = forecast_service or ForecastService(db_handler)

    def run_scenarios(
        self,
        user_id: str,
        horizon: Optional[str] = None,
        as_of: Optional[date] = None,
        shocks: Optional[Sequence[ScenarioShock]] = None,
    ) -> Dict[str, Any]:
        """
        Run stress scenarios for a user.

        Args:
            user_id: Owner of the data
            horizon: "6months" or "yearend"
            as_of: Forecast date, defaults to today
            shocks: Custom shocks, defaults to revenue -10/-20/-30% and costs +10/+20%

        Returns:
            Dict with currentBalance, baseRunway and scenarios
        """
        result = self.forecasts.run_forecast(user_id, horizon, as_of)
        scenarios = self.forecasts.engine.run_scenarios(result, shocks or DEFAULT_SHOCKS)
        return {
            "currentBalance": result.current_balance,
            "baseRunway": result.runway.to_dict(),
            "scenarios": [s.to_dict() for s in scenarios],
        }

    @staticmethod
    def shocks_from_dicts(items: List[Dict[str, Any]]) -> List[ScenarioShock]:
        """Build shocks from ``{name, revenueShockPct?, costShockPct?}`` dicts."""
        return [
            ScenarioShock(
                name=str(item.get("name") or f"Scenario {i + 1}"),
                revenue_shock_pct=float(item.get("revenueShockPct") or 0.0),
                cost_shock_pct=float(item.get("costShockPct") or 0.0),
            )
            for i, item in enumerate(items)
        ]
