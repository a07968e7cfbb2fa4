# src/rehabpro/api/schemas.py
from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel
from pydantic import ConfigDict, Field

from rehabpro.services.budget import BudgetItem


# --------------------------------------------
# Deal metrics
# --------------------------------------------

class MetricsRequest(BaseModel):
    """
    Raw deal payload plus optional settings.

    `deal` stays a plain dict so currency strings like "$350,000" reach the
    payload normalizer untouched. When `settings` is omitted the stored
    profile of `user_id` is used; when given, it is validated as a full
    settings record (missing keys take defaults).
    """
    model_config = ConfigDict(extra="allow")

    deal: dict[str, Any]
    settings: dict[str, Any] | None = None
    user_id: str | None = None


class MetricsResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    contingency_amount: float
    holding_costs_total: float
    selling_costs: float
    mao: float
    total_investment: float
    gross_profit: float
    roi: float
    profit_classification: str
    roi_classification: str
    warnings: list[dict[str, Any]] = Field(default_factory=list)


# --------------------------------------------
# Variance
# --------------------------------------------

class VarianceRequest(BaseModel):
    baseline: float
    actual: float
    settings: dict[str, Any] | None = None
    user_id: str | None = None


class VarianceResponse(BaseModel):
    variance: float
    variance_percent: float
    severity: Literal["none", "warning", "critical"]


# --------------------------------------------
# Formula preview
# --------------------------------------------

class FormulaResponse(BaseModel):
    name: str
    formula: str
    expanded: str
    algorithm: dict[str, str] = Field(default_factory=dict)


# --------------------------------------------
# Budget / portfolio rollups
# --------------------------------------------

class BudgetSummaryRequest(BaseModel):
    items: list[BudgetItem]
    settings: dict[str, Any] | None = None
    user_id: str | None = None


class PortfolioProject(BaseModel):
    model_config = ConfigDict(extra="allow")

    project_id: str
    name: str = ""
    status: Literal["lead", "analyzing", "under_contract", "in_rehab", "listed", "sold", "dead"] = "lead"
    deal: dict[str, Any]


class PortfolioRequest(BaseModel):
    projects: list[PortfolioProject]
    settings: dict[str, Any] | None = None
    user_id: str | None = None
