"""
Framework Service
=================
Five-stage narrative context (state, delta, trajectory, exposure, choice)
handed to the external summarizer and the dashboard.
"""

from datetime import date
from typing import Any, Dict, Optional

from services.forecast_service import ForecastService


class FrameworkService:
    """Builds the narrative context from one rolling forecast run."""

    def __init__(self, db_handler, forecast_service: Optional[ForecastService] = None):
        self.db = db_handler
        self.forecasts = forecast_service or ForecastService(db_handler)

    def build_context(self, user_id: str, horizon: Optional[str] = None, as_of: Optional[date] = None) -> Dict[str, Any]:
        """
        Run the forecast once and derive every stage from it.

        Returns:
            Dict with state, delta, trajectory, exposure and choice
        """
        inputs, result = self.forecasts.prepare_forecast(user_id, horizon, as_of)
        context = self.forecasts.engine.build_narrative_context(inputs, result)
        context["hasData"] = bool(result.rolling_forecast)
        return context
