"""
Budget Service
==============
Generate, save, load and delete a user's budget, and compare it with actuals.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from api.config import Settings, get_settings
from api.forecast_data import load_forecast_inputs, load_saved_budget
from api.validation import budget_record_from_payload, validate_budget_payload
from components.actuals_aggregator import aggregate_actuals
from components.budget_projector import generate_budget, refresh_planned_items
from components.budget_variance import compute_budget_variance
from components.category_growth import compute_category_growth_rates
from components.periods import month_key
from components.records import Budget

logger = logging.getLogger(__name__)

MIN_HISTORY_MONTHS = 2


class BudgetService:
    """Service for budget operations."""

    def __init__(self, db_handler, settings: Optional[Settings] = None):
        self.db = db_handler
        self.settings = settings or get_settings()

    def generate_budget(self, user_id: str, horizon: Optional[str] = None, as_of: Optional[date] = None) -> Dict[str, Any]:
        """
        Generate a budget from the user's history without saving it.

        Args:
            user_id: Owner of the data
            horizon: "6months" or "yearend"
            as_of: Date the budget is generated on, defaults to today

        Returns:
            Dict with ``ok``, and either ``message`` or ``budget`` plus ``historicalMonths``
        """
        horizon = horizon or self.settings.default_horizon
        as_of = as_of or date.today()
        inputs, _ = load_forecast_inputs(self.db, user_id)
        actuals = aggregate_actuals(inputs.transactions)
        if len(actuals) < MIN_HISTORY_MONTHS:
            return {"ok": False, "message": "Need at least 2 months of historical data", "historicalMonths": len(actuals)}

        rates = compute_category_growth_rates(actuals)
        budget = generate_budget(rates, horizon, inputs.planned_income, inputs.planned_expenses, as_of)
        return {"ok": True, "budget": budget, "historicalMonths": len(actuals)}

    def save_budget(self, user_id: str, payload: Dict[str, Any]) -> Tuple[bool, List[str]]:
        """
        Validate and upsert a budget payload.

        Returns:
            Tuple of (ok, messages)
        """
        ok, msgs = validate_budget_payload(payload)
        if not ok:
            logger.info("Rejected budget save for user %s: %s", user_id, "; ".join(msgs))
            return False, msgs

        record = budget_record_from_payload(payload)
        # Round-trip through the typed model so stored values are sanitized.
        budget = Budget.from_record(record, self.settings.budget_value_cap)
        self.db.save_budget(user_id, budget.to_record())
        return True, []

    def load_budget(self, user_id: str) -> Optional[Budget]:
        """The saved budget with its Planned Items refreshed from current planned items."""
        budget = load_saved_budget(self.db, user_id, self.settings.budget_value_cap)
        if budget is None:
            return None
        inputs, _ = load_forecast_inputs(self.db, user_id)
        return refresh_planned_items(budget, inputs.planned_income, inputs.planned_expenses)

    def delete_budget(self, user_id: str) -> None:
        self.db.delete_budget(user_id)

    def budget_variance(self, user_id: str, as_of: Optional[date] = None) -> Optional[List[Dict[str, Any]]]:
        """Plan vs actual per budget month, or None without a saved budget."""
        budget = load_saved_budget(self.db, user_id, self.settings.budget_value_cap)
        if budget is None:
            return None
        inputs, _ = load_forecast_inputs(self.db, user_id)
        budget = refresh_planned_items(budget, inputs.planned_income, inputs.planned_expenses)
        actuals = aggregate_actuals(inputs.transactions)
        return compute_budget_variance(budget, actuals, month_key(as_of or date.today()))
