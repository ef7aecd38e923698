from __future__ import annotations

import re
from typing import Any, Dict, List, Tuple

from components.periods import HORIZONS

MONTH_KEY = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")

REQUIRED_BUDGET_FIELDS = ("horizon", "forecastMonths", "categoryGrowthRates", "budget")


def validate_budget_payload(payload: Dict[str, Any]) -> Tuple[bool, List[str]]:
    """
    Check a budget save request before it is written.

    Returns:
      (ok, messages)
    """
    msgs: List[str] = []
    if not isinstance(payload, dict):
        return False, ["Budget payload must be an object"]

    missing = [f for f in REQUIRED_BUDGET_FIELDS if payload.get(f) is None]
    if missing:
        return False, [f"Missing required fields: {', '.join(missing)}"]

    if payload["horizon"] not in HORIZONS:
        msgs.append(f"horizon must be one of {', '.join(HORIZONS)}")

    months = payload["forecastMonths"]
    if not isinstance(months, list):
        msgs.append("forecastMonths must be a list of YYYY-MM strings")
    else:
        bad = [str(m) for m in months if not isinstance(m, str) or not MONTH_KEY.match(m)]
        if bad:
            msgs.append(f"Invalid forecast months: {', '.join(bad)}")
        if len(set(months)) != len(months):
            msgs.append("forecastMonths contains duplicates")

    rates = payload["categoryGrowthRates"]
    if not isinstance(rates, dict):
        msgs.append("categoryGrowthRates must be an object")
    else:
        for name, rate in rates.items():
            if not isinstance(rate, dict):
                msgs.append(f"Growth rate for '{name}' must be an object")

    budget = payload["budget"]
    if not isinstance(budget, dict):
        msgs.append("budget must be an object keyed by month")
    elif isinstance(months, list):
        extra = sorted(set(budget) - set(months))
        if extra:
            msgs.append(f"budget has months outside forecastMonths: {', '.join(extra)}")
        for month, slot in budget.items():
            if not isinstance(slot, dict):
                msgs.append(f"budget[{month}] must be an object keyed by category")

    return not msgs, msgs


def budget_record_from_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Map a validated camelCase payload onto the stored row columns."""
    return {
        "horizon": payload["horizon"],
        "forecast_months": list(payload["forecastMonths"]),
        "category_growth_rates": payload["categoryGrowthRates"],
        "budget_data": payload["budget"],
    }
