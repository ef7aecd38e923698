from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, Optional

from fastapi import Body, Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from api.config import configure_logging, get_settings
from api.models import (
    BudgetGenerateRequest,
    BudgetGenerateResponse,
    BudgetSaveResponse,
    Horizon,
    RollingForecastResponse,
    RunwayResponse,
    ScenarioRequest,
    ScenarioResponse,
)
from api.serialize import to_jsonable
from api.supabase_handler import DataAccessError, SupabaseAPIHandler
from services import BudgetService, FrameworkService, ForecastService, ScenarioService

logger = logging.getLogger(__name__)

configure_logging(get_settings())

app = FastAPI(title="Cash Runway Forecast API", version="0.1.0")


@app.exception_handler(DataAccessError)
def data_access_error(request: Request, exc: DataAccessError) -> JSONResponse:
    logger.error("Data access failed for %s: %s", request.url.path, exc)
    return JSONResponse(status_code=502, content={"detail": "Could not load forecast data"})


@app.exception_handler(ValueError)
def value_error(request: Request, exc: ValueError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": str(exc)})


def get_db() -> SupabaseAPIHandler:
    return SupabaseAPIHandler()


def get_user_id(x_user_id: Optional[str] = Header(None, description="User UUID resolved by the auth gateway")) -> str:
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    return x_user_id


AsOf = Query(None, alias="asOf", description="Forecast date (defaults to today)")


@app.get("/health")
def health() -> dict:
    return {"ok": True}


@app.get("/v1/rolling-forecast", response_model=RollingForecastResponse)
def rolling_forecast(
    horizon: Optional[Horizon] = Query(None, description="6months (default) or yearend"),
    as_of: Optional[date] = AsOf,
    user_id: str = Depends(get_user_id),
    db=Depends(get_db),
):
    result = ForecastService(db).run_forecast(user_id, horizon, as_of)
    return to_jsonable(result)


@app.get("/v1/runway", response_model=RunwayResponse)
def runway(
    horizon: Optional[Horizon] = Query(None),
    as_of: Optional[date] = AsOf,
    user_id: str = Depends(get_user_id),
    db=Depends(get_db),
):
    result = ForecastService(db).run_forecast(user_id, horizon, as_of)
    return {"currentBalance": result.current_balance, "runway": to_jsonable(result.runway)}


@app.post("/v1/scenarios", response_model=ScenarioResponse)
def scenarios(
    req: Optional[ScenarioRequest] = None,
    as_of: Optional[date] = AsOf,
    user_id: str = Depends(get_user_id),
    db=Depends(get_db),
):
    req = req or ScenarioRequest()
    shocks = None
    if req.shocks:
        shocks = ScenarioService.shocks_from_dicts([s.model_dump(by_alias=True) for s in req.shocks])
    return to_jsonable(ScenarioService(db).run_scenarios(user_id, req.horizon, as_of, shocks))


@app.post("/v1/budget/generate", response_model=BudgetGenerateResponse)
def generate_budget(
    req: Optional[BudgetGenerateRequest] = None,
    as_of: Optional[date] = AsOf,
    user_id: str = Depends(get_user_id),
    db=Depends(get_db),
):
    req = req or BudgetGenerateRequest()
    return to_jsonable(BudgetService(db).generate_budget(user_id, req.horizon, as_of))


@app.post("/v1/budget", response_model=BudgetSaveResponse)
def save_budget(
    payload: Dict[str, Any] = Body(...),
    user_id: str = Depends(get_user_id),
    db=Depends(get_db),
):
    ok, msgs = BudgetService(db).save_budget(user_id, payload)
    if not ok:
        raise HTTPException(status_code=400, detail=msgs)
    return {"ok": True, "messages": []}


@app.get("/v1/budget")
def load_budget(user_id: str = Depends(get_user_id), db=Depends(get_db)) -> dict:
    budget = BudgetService(db).load_budget(user_id)
    return {"budget": to_jsonable(budget)}


@app.delete("/v1/budget")
def delete_budget(user_id: str = Depends(get_user_id), db=Depends(get_db)) -> dict:
    BudgetService(db).delete_budget(user_id)
    return {"ok": True}


@app.get("/v1/budget/variance")
def budget_variance(
    as_of: Optional[date] = AsOf,
    user_id: str = Depends(get_user_id),
    db=Depends(get_db),
) -> dict:
    rows = BudgetService(db).budget_variance(user_id, as_of)
    if rows is None:
        raise HTTPException(status_code=404, detail="No saved budget")
    return {"variance": to_jsonable(rows)}


@app.get("/v1/framework")
def framework(
    horizon: Optional[Horizon] = Query(None),
    as_of: Optional[date] = AsOf,
    user_id: str = Depends(get_user_id),
    db=Depends(get_db),
) -> dict:
    return to_jsonable(FrameworkService(db).build_context(user_id, horizon, as_of))
