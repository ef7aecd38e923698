from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from components.numeric import DEFAULT_VALUE_CAP
from components.records import RECURRENCE_ONE_OFF, RECURRENCES, Budget, PlannedItem, Transaction
from forecast_engine import ForecastInputs

logger = logging.getLogger(__name__)


def _parse_dates(series: pd.Series) -> pd.Series:
    return pd.to_datetime(series.astype(str).str[:10], format="%Y-%m-%d", errors="coerce")


def transactions_from_rows(rows: List[Dict[str, Any]]) -> Tuple[List[Transaction], Dict[str, Any]]:
    """
    Coerce raw transaction rows into Transactions ordered by booking date.

    Rows without a parseable ``booked_at`` are dropped; non-numeric amounts become 0.

    Returns:
      (transactions, diag)
    """
    diag: Dict[str, Any] = {"rows": len(rows), "dropped": 0}
    if not rows:
        return [], diag

    df = pd.DataFrame(rows)
    for col in ("amount", "category", "booked_at"):
        if col not in df.columns:
            df[col] = None

    df["booked_at"] = _parse_dates(df["booked_at"])
    df["amount"] = pd.to_numeric(df["amount"], errors="coerce").fillna(0.0)

    invalid = df["booked_at"].isna()
    diag["dropped"] = int(invalid.sum())
    if diag["dropped"]:
        logger.warning("Dropped %d transaction rows without a valid booked_at", diag["dropped"])
    df = df.loc[~invalid].sort_values("booked_at", kind="stable")

    transactions = [
        Transaction(
            amount=float(row.amount),
            category=row.category if isinstance(row.category, str) else None,
            booked_at=row.booked_at.date(),
        )
        for row in df.itertuples(index=False)
    ]
    return transactions, diag


def planned_items_from_rows(rows: List[Dict[str, Any]]) -> Tuple[List[PlannedItem], Dict[str, Any]]:
    """
    Coerce planned income/expense rows into PlannedItems.

    Rows without an expected date are dropped. Amounts are taken as positive and
    unknown recurrences are treated as one-off.
    """
    diag: Dict[str, Any] = {"rows": len(rows), "dropped": 0}
    if not rows:
        return [], diag

    df = pd.DataFrame(rows)
    for col in ("description", "amount", "expected_date", "recurrence"):
        if col not in df.columns:
            df[col] = None

    df["expected_date"] = _parse_dates(df["expected_date"])
    df["amount"] = pd.to_numeric(df["amount"], errors="coerce").fillna(0.0).abs()

    invalid = df["expected_date"].isna()
    diag["dropped"] = int(invalid.sum())
    if diag["dropped"]:
        logger.warning("Dropped %d planned item rows without a valid expected_date", diag["dropped"])

    items = []
    for row in df.loc[~invalid].itertuples(index=False):
        recurrence = row.recurrence if row.recurrence in RECURRENCES else RECURRENCE_ONE_OFF
        items.append(PlannedItem(
            description=row.description if isinstance(row.description, str) else "",
            amount=float(row.amount),
            expected_date=row.expected_date.date(),
            recurrence=recurrence,
        ))
    return items, diag


def load_forecast_inputs(db, user_id: str, opening_balance: float = 0.0) -> Tuple[ForecastInputs, Dict[str, Any]]:
    """
    Fetch and coerce everything the engine needs for one user.

    Read failures propagate from the db handler.

    Returns:
      (inputs, diag)
    """
    transactions, txn_diag = transactions_from_rows(db.get_transactions(user_id))
    income, income_diag = planned_items_from_rows(db.get_planned_income(user_id))
    expenses, expense_diag = planned_items_from_rows(db.get_planned_expenses(user_id))
    diag = {"transactions": txn_diag, "planned_income": income_diag, "planned_expenses": expense_diag}
    inputs = ForecastInputs(
        transactions=transactions,
        planned_income=income,
        planned_expenses=expenses,
        opening_balance=opening_balance,
    )
    return inputs, diag


def load_saved_budget(db, user_id: str, cap: float = DEFAULT_VALUE_CAP) -> Optional[Budget]:
    """The user's stored budget, or None when there is none or it cannot be interpreted."""
    row = db.get_budget(user_id)
    if not row:
        return None
    try:
        return Budget.from_record(row, cap)
    except ValueError as exc:
        logger.warning("Ignoring stored budget for user %s: %s", user_id, exc)
        return None
