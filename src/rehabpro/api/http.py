# src/rehabpro/api/http.py
from __future__ import annotations

from typing import Any

from fastapi import Body, FastAPI, HTTPException, Query

from rehabpro.adapters.config import config
from rehabpro.adapters.logging_utils import get_logger, log_context
from rehabpro.adapters.memory_repo import InMemorySettingsRepository
from rehabpro.adapters.output import rounded
from rehabpro.analysis.formulas import algorithm_summary, preview_formula
from rehabpro.analysis.variance import compute_variance
from rehabpro.domain.settings import CalculationSettings, load_settings
from rehabpro.services.budget import budget_summary
from rehabpro.services.deal_metrics import compute_deal_metrics
from rehabpro.services.portfolio import ProjectRecord, summarize_portfolio
from rehabpro.services.settings_service import apply_preset, get_settings, update_settings
from rehabpro.services.validation import prepare_deal_inputs
from .schemas import (
    BudgetSummaryRequest,
    FormulaResponse,
    MetricsRequest,
    MetricsResponse,
    PortfolioRequest,
    VarianceRequest,
    VarianceResponse,
)

logger = get_logger(__name__)

app = FastAPI(title="rehabpro")

_settings_repo = InMemorySettingsRepository()


def _resolve_settings(raw: dict[str, Any] | None, user_id: str | None) -> CalculationSettings:
    # explicit settings in the request win over the stored profile
    if raw is not None:
        return load_settings(raw)
    return get_settings(_settings_repo, user_id or config.DEFAULT_USER_ID)


def _bad_request(e: Exception, where: str) -> HTTPException:
    logger.info("request rejected", extra=log_context(endpoint=where, error=str(e)))
    return HTTPException(status_code=400, detail=str(e))


# -----------------------------
# Settings
# -----------------------------

@app.get("/settings/{user_id}")
def read_settings(user_id: str) -> dict[str, Any]:
    return get_settings(_settings_repo, user_id).model_dump()


@app.put("/settings/{user_id}")
def write_settings(user_id: str, updates: dict[str, Any] = Body(...)) -> dict[str, Any]:
    try:
        return update_settings(_settings_repo, user_id, updates).model_dump()
    except ValueError as e:
        raise _bad_request(e, "/settings") from e


@app.post("/settings/{user_id}/presets/{group}/{name}")
def write_preset(user_id: str, group: str, name: str) -> dict[str, Any]:
    try:
        return apply_preset(_settings_repo, user_id, group, name).model_dump()
    except ValueError as e:
        raise _bad_request(e, "/settings/presets") from e


# -----------------------------
# Calculations
# -----------------------------

@app.post("/metrics", response_model=MetricsResponse)
def metrics_endpoint(payload: MetricsRequest) -> MetricsResponse:
    try:
        settings = _resolve_settings(payload.settings, payload.user_id)
        inputs = prepare_deal_inputs(payload.deal)
        metrics = compute_deal_metrics(settings, inputs)
    except ValueError as e:
        raise _bad_request(e, "/metrics") from e
    return MetricsResponse(**rounded(metrics.to_dict()))


@app.post("/variance", response_model=VarianceResponse)
def variance_endpoint(payload: VarianceRequest) -> VarianceResponse:
    try:
        settings = _resolve_settings(payload.settings, payload.user_id)
        result = compute_variance(payload.baseline, payload.actual, settings)
    except ValueError as e:
        raise _bad_request(e, "/variance") from e
    return VarianceResponse(**rounded(result.to_dict()))


@app.get("/formula/{which}", response_model=FormulaResponse)
def formula_endpoint(which: str, user_id: str | None = Query(default=None)) -> FormulaResponse:
    settings = _resolve_settings(None, user_id)
    try:
        preview = preview_formula(settings, which)
    except ValueError as e:
        raise _bad_request(e, "/formula") from e
    return FormulaResponse(**preview.to_dict(), algorithm=algorithm_summary(settings))


# -----------------------------
# Rollups
# -----------------------------

@app.post("/budget/summary")
def budget_summary_endpoint(payload: BudgetSummaryRequest) -> dict[str, Any]:
    try:
        settings = _resolve_settings(payload.settings, payload.user_id)
    except ValueError as e:
        raise _bad_request(e, "/budget/summary") from e
    return rounded(budget_summary(payload.items, settings))


@app.post("/portfolio/summary")
def portfolio_summary_endpoint(payload: PortfolioRequest) -> dict[str, Any]:
    try:
        settings = _resolve_settings(payload.settings, payload.user_id)
        projects = [
            ProjectRecord(
                project_id=p.project_id,
                name=p.name,
                status=p.status,
                deal=prepare_deal_inputs(p.deal),
            )
            for p in payload.projects
        ]
    except ValueError as e:
        raise _bad_request(e, "/portfolio/summary") from e
    return rounded(summarize_portfolio(projects, settings).to_dict())
