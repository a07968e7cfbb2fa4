# src/rehabpro/services/budget.py
from __future__ import annotations

from typing import Any, Iterable, Literal

import numpy as np
import pandas as pd
from pydantic import BaseModel, ConfigDict, Field

from rehabpro.analysis.variance import evaluate_variance_alerts, worst_severity
from rehabpro.domain.deal import DealInputs
from rehabpro.domain.settings import CalculationSettings

ItemStatus = Literal["not_started", "in_progress", "complete", "on_hold", "cancelled"]

_CATEGORY_COLUMNS = [
    "category",
    "item_count",
    "underwriting_total",
    "forecast_total",
    "actual_total",
    "working_total",
    "forecast_variance_total",
    "actual_variance_total",
    "total_variance_total",
    "completed_count",
    "in_progress_count",
    "not_started_count",
]


class BudgetItem(BaseModel):
    """
    One rehab line item with its three successive estimates.

    underwriting: pre-deal estimate; forecast: post-walkthrough / bid
    (0 means not forecast yet); actual: real spend, None until paid.
    """
    model_config = ConfigDict(frozen=True, extra="ignore")

    category: str
    item: str = ""
    underwriting_amount: float = Field(default=0.0, ge=0.0)
    forecast_amount: float = Field(default=0.0, ge=0.0)
    actual_amount: float | None = Field(default=None, ge=0.0)
    status: ItemStatus = "not_started"

    @property
    def working_amount(self) -> float:
        """Forecast once there is one, otherwise the underwriting number."""
        return self.forecast_amount if self.forecast_amount > 0 else self.underwriting_amount


def budget_frame(items: Iterable[BudgetItem]) -> pd.DataFrame:
    rows = [
        {
            "category": it.category,
            "item": it.item,
            "status": it.status,
            "underwriting_amount": it.underwriting_amount,
            "forecast_amount": it.forecast_amount,
            "actual_amount": np.nan if it.actual_amount is None else it.actual_amount,
            "working_amount": it.working_amount,
        }
        for it in items
    ]
    return pd.DataFrame(
        rows,
        columns=[
            "category",
            "item",
            "status",
            "underwriting_amount",
            "forecast_amount",
            "actual_amount",
            "working_amount",
        ],
    )


def summarize_by_category(items: Iterable[BudgetItem]) -> pd.DataFrame:
    """
    Per-category rollup of the three budget columns and their variances.

    Variances only count items that have the later figure: forecast
    variance skips unforecast items, actual variances skip unpaid items.
    """
    df = budget_frame(items)
    if df.empty:
        return pd.DataFrame(columns=_CATEGORY_COLUMNS)

    has_forecast = df["forecast_amount"] > 0
    has_actual = df["actual_amount"].notna()

    df = df.assign(
        forecast_variance=np.where(has_forecast, df["forecast_amount"] - df["underwriting_amount"], 0.0),
        actual_variance=np.where(has_actual, df["actual_amount"] - df["working_amount"], 0.0),
        total_variance=np.where(has_actual, df["actual_amount"] - df["underwriting_amount"], 0.0),
        is_complete=(df["status"] == "complete").astype(int),
        is_in_progress=(df["status"] == "in_progress").astype(int),
        is_not_started=(df["status"] == "not_started").astype(int),
    )

    out = (
        df.groupby("category", sort=True)
        .agg(
            item_count=("item", "size"),
            underwriting_total=("underwriting_amount", "sum"),
            forecast_total=("forecast_amount", "sum"),
            actual_total=("actual_amount", "sum"),
            working_total=("working_amount", "sum"),
            forecast_variance_total=("forecast_variance", "sum"),
            actual_variance_total=("actual_variance", "sum"),
            total_variance_total=("total_variance", "sum"),
            completed_count=("is_complete", "sum"),
            in_progress_count=("is_in_progress", "sum"),
            not_started_count=("is_not_started", "sum"),
        )
        .reset_index()
    )
    return out[_CATEGORY_COLUMNS]


def item_variance_alerts(items: Iterable[BudgetItem], settings: CalculationSettings) -> list[dict[str, Any]]:
    """
    Line items whose forecast or actual drifted past the alert thresholds.

    The forecast stage baseline is underwriting; the actual stage baseline
    is the working amount, so an item paid before it was ever bid is
    still checked against its underwriting number.
    """
    alerts: list[dict[str, Any]] = []
    for it in items:
        results = evaluate_variance_alerts(
            underwriting=it.underwriting_amount,
            forecast=it.working_amount,
            actual=it.actual_amount,
            settings=settings,
        )
        for stage, res in results.items():
            if res.severity == "none":
                continue
            alerts.append(
                {
                    "category": it.category,
                    "item": it.item,
                    "stage": stage,
                    **res.to_dict(),
                }
            )
    return alerts


def deal_inputs_from_budget(base: DealInputs, items: Iterable[BudgetItem]) -> DealInputs:
    """
    Fill the rehab fields of a deal from its line items.

    rehab_budget and category_budgets use working amounts; rehab_actual is
    None until at least one item has been paid.
    """
    items = list(items)
    df = budget_frame(items)
    if df.empty:
        return base.model_copy(
            update={
                "rehab_budget": 0.0,
                "category_budgets": {},
                "rehab_actual": None,
                "rehab_forecast": 0.0,
                "rehab_underwriting": 0.0,
            }
        )

    by_category = df.groupby("category")["working_amount"].sum()
    has_actual = df["actual_amount"].notna().any()
    return base.model_copy(
        update={
            "rehab_budget": float(df["working_amount"].sum()),
            "category_budgets": {str(k): float(v) for k, v in by_category.items()},
            "rehab_actual": float(df["actual_amount"].sum()) if has_actual else None,
            "rehab_forecast": float(df["forecast_amount"].sum()),
            "rehab_underwriting": float(df["underwriting_amount"].sum()),
        }
    )


def budget_summary(items: Iterable[BudgetItem], settings: CalculationSettings) -> dict[str, Any]:
    """Totals, category rollup and variance alerts for one project's budget."""
    items = list(items)
    categories = summarize_by_category(items)

    underwriting = float(sum(it.underwriting_amount for it in items))
    working = float(sum(it.working_amount for it in items))
    paid = [it.actual_amount for it in items if it.actual_amount is not None]
    actual = float(sum(paid)) if paid else None

    project_level = evaluate_variance_alerts(underwriting, working, actual, settings)

    return {
        "underwriting_total": underwriting,
        "working_total": working,
        "actual_total": actual,
        "categories": categories.to_dict(orient="records"),
        "project_variance": {stage: r.to_dict() for stage, r in project_level.items()},
        "project_severity": worst_severity(project_level),
        "item_alerts": item_variance_alerts(items, settings),
    }
