"""
Numeric Helpers
===============
Shared guards for the cash-flow calculations: non-finite values collapse to
zero, divisions by zero yield a default, and persisted amounts are sanitized
before they reach the projection math.
"""

import logging
import math
from typing import Any, Optional

import numpy as np

logger = logging.getLogger(__name__)

DEFAULT_VALUE_CAP = 1e9


def finite_or_zero(value: Any) -> float:
    """Return ``value`` as a float, or 0.0 when it is missing, NaN or infinite."""
    try:
        result = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not np.isfinite(result):
        return 0.0
    return result


def clamp_non_negative(value: Any) -> float:
    return max(0.0, finite_or_zero(value))


def safe_div(numerator: float, denominator: float, default: Optional[float] = None) -> Optional[float]:
    """Divide, returning ``default`` for a zero or non-finite denominator."""
    if denominator == 0 or not np.isfinite(denominator):
        return default
    result = numerator / denominator
    if not np.isfinite(result):
        return default
    return float(result)


def compound_rate(first: float, last: float, periods: int) -> float:
    """
    Compound per-period growth between two endpoints, in percent.

    Returns 0 when there is no period to grow over, when the starting value
    is not positive, or when the result is not a finite real number.
    """
    if periods < 1 or first <= 0:
        return 0.0
    ratio = last / first
    if ratio < 0:
        return 0.0
    try:
        rate = (ratio ** (1.0 / periods) - 1.0) * 100.0
    except (OverflowError, ZeroDivisionError):
        return 0.0
    if isinstance(rate, complex):
        return 0.0
    return finite_or_zero(rate)


def floor_months(balance: float, monthly_burn: float) -> Optional[int]:
    """Whole months a balance lasts at a positive burn rate, or None without burn."""
    if monthly_burn <= 0 or not np.isfinite(monthly_burn):
        return None
    months = safe_div(balance, monthly_burn)
    if months is None:
        return None
    return int(math.floor(months))


def sanitize_amount(value: Any, cap: float = DEFAULT_VALUE_CAP, label: str = "") -> float:
    """Coerce a loosely-typed stored amount into a bounded, non-negative float."""
    amount = clamp_non_negative(value)
    if amount > cap:
        logger.warning("Capping stored amount %s at %s (was %s)", label or "<value>", cap, amount)
        return float(cap)
    return amount
