from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Horizon = Literal["6months", "yearend"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RollingForecastEntryModel(CamelModel):
    month: str = Field(..., description="Month key YYYY-MM")
    type: Literal["actual", "forecast"]
    income: float
    expenses: float
    net: float
    balance: float


class SummarySection(CamelModel):
    months: int
    income: float
    expenses: float
    net: float


class ForecastSummary(CamelModel):
    actual: SummarySection
    forecast: SummarySection
    total: SummarySection


class RunwayModel(CamelModel):
    months: Optional[int] = Field(None, description="Months until cash runs out, null when no depletion")
    method: Optional[Literal["forecast_balance", "average_burn"]] = None
    zero_cash_month: Optional[str] = None
    avg_monthly_burn: Optional[float] = None


class RollingForecastResponse(CamelModel):
    current_balance: float
    current_month: str
    horizon: Horizon
    rolling_forecast: List[RollingForecastEntryModel]
    summary: ForecastSummary
    runway: RunwayModel
    budget_regenerated: bool = False
    budget_stale: bool = False


class RunwayResponse(CamelModel):
    current_balance: float
    runway: RunwayModel


class ScenarioShockModel(CamelModel):
    name: str = Field(..., description="Label shown for the scenario")
    revenue_shock_pct: float = Field(0.0, description="Percent change to revenue, e.g. -10")
    cost_shock_pct: float = Field(0.0, description="Percent change to costs, e.g. 20")


class ScenarioRequest(CamelModel):
    horizon: Optional[Horizon] = None
    shocks: Optional[List[ScenarioShockModel]] = Field(None, description="Defaults to the standard stress set")


class ScenarioResultModel(CamelModel):
    name: str
    new_runway_months: Optional[int] = None
    runway_delta_months: Optional[int] = None
    shocked_monthly_burn: float
    depletes: bool


class ScenarioResponse(CamelModel):
    current_balance: float
    base_runway: RunwayModel
    scenarios: List[ScenarioResultModel]


class BudgetGenerateRequest(CamelModel):
    horizon: Optional[Horizon] = None


class BudgetGenerateResponse(CamelModel):
    ok: bool
    message: Optional[str] = None
    historical_months: int = 0
    budget: Optional[Dict[str, Any]] = None


class BudgetSaveResponse(CamelModel):
    ok: bool
    messages: List[str] = Field(default_factory=list)
