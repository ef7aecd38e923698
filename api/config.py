from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from components.numeric import DEFAULT_VALUE_CAP, finite_or_zero
from components.periods import HORIZON_SIX_MONTHS, HORIZONS


@dataclass(frozen=True)
class Settings:
    environment: str
    log_level: str
    default_horizon: str
    budget_value_cap: float


def get_settings() -> Settings:
    horizon = os.getenv("DEFAULT_HORIZON", HORIZON_SIX_MONTHS).strip()
    cap = finite_or_zero(os.getenv("BUDGET_VALUE_CAP", DEFAULT_VALUE_CAP))
    return Settings(
        environment=os.getenv("ENVIRONMENT", "local"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        default_horizon=horizon if horizon in HORIZONS else HORIZON_SIX_MONTHS,
        budget_value_cap=cap if cap > 0 else DEFAULT_VALUE_CAP,
    )


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
