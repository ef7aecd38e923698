from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from supabase import Client, create_client

logger = logging.getLogger(__name__)

TRANSACTIONS_TABLE = "Transactions"
PLANNED_INCOME_TABLE = "PlannedIncome"
PLANNED_EXPENSES_TABLE = "PlannedExpenses"
BUDGET_TABLE = "Budget"

PLANNED_COLUMNS = "description, amount, expected_date, recurrence"


class DataAccessError(RuntimeError):
    """A read or write against the store failed."""


@dataclass(frozen=True)
class SupabaseEnv:
    url: str
    key: str


def _get_supabase_env() -> SupabaseEnv:
    """
    Supabase config loader.

    Expected env vars:
    - SUPABASE_URL
    - SUPABASE_SERVICE_ROLE_KEY (preferred server-side) OR SUPABASE_ANON_KEY / SUPABASE_KEY
    """
    url = os.getenv("SUPABASE_URL", "").strip()
    key = (
        os.getenv("SUPABASE_SERVICE_ROLE_KEY", "").strip()
        or os.getenv("SUPABASE_ANON_KEY", "").strip()
        or os.getenv("SUPABASE_KEY", "").strip()
    )
    if not url or not key:
        raise RuntimeError(
            "Missing Supabase env vars. Set SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY "
            "(or SUPABASE_ANON_KEY / SUPABASE_KEY)."
        )
    return SupabaseEnv(url=url, key=key)


class SupabaseAPIHandler:
    """
    User-scoped reads and writes for the forecast tables.

    Every method raises DataAccessError when the underlying query fails, so a
    forecast never runs on partial inputs.
    """

    def __init__(self, client: Optional[Client] = None):
        if client is None:
            env = _get_supabase_env()
            client = create_client(env.url, env.key)
        self.client: Client = client

    def _select(self, table: str, columns: str, user_id: str, order: Optional[str] = None) -> List[Dict[str, Any]]:
        try:
            query = self.client.table(table).select(columns).eq("user_id", user_id)
            if order:
                query = query.order(order)
            resp = query.execute()
        except Exception as exc:
            raise DataAccessError(f"Failed to read {table} for user {user_id}: {exc}") from exc
        return list(resp.data or [])

    def get_transactions(self, user_id: str) -> List[Dict[str, Any]]:
        return self._select(TRANSACTIONS_TABLE, "amount, category, booked_at", user_id, order="booked_at")

    def get_planned_income(self, user_id: str) -> List[Dict[str, Any]]:
        return self._select(PLANNED_INCOME_TABLE, PLANNED_COLUMNS, user_id, order="expected_date")

    def get_planned_expenses(self, user_id: str) -> List[Dict[str, Any]]:
        return self._select(PLANNED_EXPENSES_TABLE, PLANNED_COLUMNS, user_id, order="expected_date")

    def get_budget(self, user_id: str) -> Optional[Dict[str, Any]]:
        rows = self._select(
            BUDGET_TABLE, "horizon, forecast_months, category_growth_rates, budget_data, updated_at", user_id
        )
        return rows[0] if rows else None

    def save_budget(self, user_id: str, record: Dict[str, Any]) -> Dict[str, Any]:
        """Upsert the single budget row for a user."""
        payload = {"user_id": user_id, **record}
        try:
            resp = self.client.table(BUDGET_TABLE).upsert(payload, on_conflict="user_id").execute()
        except Exception as exc:
            raise DataAccessError(f"Failed to save budget for user {user_id}: {exc}") from exc
        rows = resp.data or []
        return rows[0] if rows else payload

    def delete_budget(self, user_id: str) -> None:
        try:
            self.client.table(BUDGET_TABLE).delete().eq("user_id", user_id).execute()
        except Exception as exc:
            raise DataAccessError(f"Failed to delete budget for user {user_id}: {exc}") from exc
        logger.info("Deleted budget for user %s", user_id)
