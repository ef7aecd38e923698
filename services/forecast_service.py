"""
Forecast Service
================
Loads a user's inputs, resolves the budget and runs the rolling forecast.
"""

import logging
from datetime import date
from typing import Optional, Tuple

from api.config import Settings, get_settings
from api.forecast_data import load_forecast_inputs, load_saved_budget
from api.supabase_handler import DataAccessError
from forecast_engine import ForecastEngine, ForecastInputs, ForecastResult

logger = logging.getLogger(__name__)


class ForecastService:
    """
    Service for rolling forecast business logic.

    Coordinates between data loading, the forecast engine and the single
    conditional budget write.
    """

    def __init__(self, db_handler, settings: Optional[Settings] = None):
        """
        Initialize forecast service.

        Args:
            db_handler: Database handler instance (SupabaseAPIHandler)
            settings: Optional settings, read from the environment when omitted
        """
        self.db = db_handler
        self.settings = settings or get_settings()
        self.engine = ForecastEngine()

    def prepare_forecast(
        self,
        user_id: str,
        horizon: Optional[str] = None,
        as_of: Optional[date] = None,
        opening_balance: float = 0.0,
    ) -> Tuple[ForecastInputs, ForecastResult]:
        """
        Load inputs and run the forecast, persisting a regenerated budget.

        Args:
            user_id: Owner of the data
            horizon: "6months" or "yearend", defaults to the configured horizon
            as_of: Forecast date, defaults to today
            opening_balance: Balance before the first recorded transaction

        Returns:
            Tuple of (inputs, result)
        """
        horizon = horizon or self.settings.default_horizon
        as_of = as_of or date.today()

        inputs, diag = load_forecast_inputs(self.db, user_id, opening_balance)
        saved = load_saved_budget(self.db, user_id, self.settings.budget_value_cap)
        logger.debug("Loaded forecast inputs for %s: %s", user_id, diag)

        result = self.engine.run_forecast(inputs, horizon, as_of, saved)
        if result.budget_regenerated:
            self._persist_budget(user_id, result)
        return inputs, result

    def run_forecast(
        self,
        user_id: str,
        horizon: Optional[str] = None,
        as_of: Optional[date] = None,
        opening_balance: float = 0.0,
    ) -> ForecastResult:
        _, result = self.prepare_forecast(user_id, horizon, as_of, opening_balance)
        return result

    def _persist_budget(self, user_id: str, result: ForecastResult) -> None:
        # Budgets without any category history are not worth keeping.
        if not result.budget.category_growth_rates:
            return
        try:
            self.db.save_budget(user_id, result.budget.to_record())
            logger.info("Saved regenerated %s budget for user %s", result.horizon, user_id)
        except DataAccessError:
            logger.exception("Could not save regenerated budget for user %s", user_id)

    def validate_forecast_prerequisites(self, user_id: str) -> Tuple[bool, Optional[str]]:
        """
        Check that a user has anything to forecast from.

        Returns:
            Tuple of (is_valid, error_message)
        """
        inputs, _ = load_forecast_inputs(self.db, user_id)
        if not inputs.transactions and not inputs.planned_income and not inputs.planned_expenses:
            return False, "Not enough data yet: import transactions or add planned items"
        return True, None
