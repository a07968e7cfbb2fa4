# src/rehabpro/services/portfolio.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

import numpy as np
import pandas as pd
from pydantic import BaseModel, ConfigDict

from rehabpro.adapters.logging_utils import get_logger, log_context
from rehabpro.domain.deal import DealInputs, ProjectStatus
from rehabpro.domain.errors import InvalidInputError
from rehabpro.domain.settings import CalculationSettings
from rehabpro.services.deal_metrics import compute_deal_metrics

logger = get_logger(__name__)

PIPELINE_STATUSES: tuple[str, ...] = (
    "lead",
    "analyzing",
    "under_contract",
    "in_rehab",
    "listed",
    "sold",
    "dead",
)

_CLOSED_STATUSES = ("sold", "dead")

_FRAME_COLUMNS = [
    "project_id",
    "name",
    "status",
    "arv",
    "purchase_price",
    "rehab_budget",
    "rehab_actual",
    "mao",
    "roi",
    "gross_profit",
    "total_investment",
    "roi_classification",
    "profit_classification",
]


class ProjectRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    project_id: str
    name: str = ""
    status: ProjectStatus = "lead"
    deal: DealInputs


@dataclass
class PortfolioSummary:
    """
    Dashboard rollup across every project.

    Active means anything not sold or dead. Average ROI prefers realised
    (sold) deals and falls back to the active ones.
    """
    n_projects: int
    total_arv: float
    capital_deployed: float
    average_roi: float
    project_counts: dict[str, int]
    projects: pd.DataFrame
    skipped: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "n_projects": self.n_projects,
            "total_arv": self.total_arv,
            "capital_deployed": self.capital_deployed,
            "average_roi": self.average_roi,
            "project_counts": dict(self.project_counts),
            "projects": self.projects.replace({np.nan: None}).to_dict(orient="records"),
            "skipped": list(self.skipped),
        }


def metrics_frame(
    projects: Iterable[ProjectRecord],
    settings: CalculationSettings,
) -> tuple[pd.DataFrame, list[str]]:
    """
    Map step: one metrics row per project.

    Projects whose inputs the engine rejects are left out and returned by id
    so the dashboard can flag them instead of failing as a whole.
    """
    rows: list[dict[str, Any]] = []
    skipped: list[str] = []
    for p in projects:
        try:
            m = compute_deal_metrics(settings, p.deal)
        except InvalidInputError as err:
            logger.warning(
                "project skipped in portfolio rollup",
                extra=log_context(project_id=p.project_id, error=str(err)),
            )
            skipped.append(p.project_id)
            continue
        rows.append(
            {
                "project_id": p.project_id,
                "name": p.name,
                "status": p.status,
                "arv": p.deal.arv,
                "purchase_price": p.deal.purchase_price,
                "rehab_budget": p.deal.rehab_budget,
                "rehab_actual": np.nan if p.deal.rehab_actual is None else p.deal.rehab_actual,
                "mao": m.mao,
                "roi": m.roi,
                "gross_profit": m.gross_profit,
                "total_investment": m.total_investment,
                "roi_classification": m.roi_classification,
                "profit_classification": m.profit_classification,
            }
        )

    df = pd.DataFrame(rows, columns=_FRAME_COLUMNS)
    df["rehab_progress"] = rehab_progress(
        df["rehab_actual"].to_numpy(dtype=float),
        df["rehab_budget"].to_numpy(dtype=float),
    )
    return df, skipped


def rehab_progress(actual: np.ndarray, budget: np.ndarray) -> np.ndarray:
    """Percent of budget spent, rounded, capped at 100; 0 without a budget."""
    actual = np.nan_to_num(np.asarray(actual, dtype=float), nan=0.0)
    budget = np.asarray(budget, dtype=float)
    progress = np.zeros_like(budget, dtype=float)
    mask = budget > 0
    progress[mask] = np.minimum(100.0, np.round(actual[mask] / budget[mask] * 100.0))
    return progress


def summarize_portfolio(
    projects: Iterable[ProjectRecord],
    settings: CalculationSettings,
) -> PortfolioSummary:
    """Reduction step over metrics_frame."""
    df, skipped = metrics_frame(projects, settings)

    counts = {status: int((df["status"] == status).sum()) for status in PIPELINE_STATUSES}
    counts["total"] = int(len(df))

    active = df[~df["status"].isin(_CLOSED_STATUSES)]
    sold = df[df["status"] == "sold"]

    if len(sold):
        average_roi = float(sold["roi"].mean())
    elif len(active):
        average_roi = float(active["roi"].mean())
    else:
        average_roi = 0.0

    capital = active["purchase_price"].sum() + active["rehab_actual"].fillna(0.0).sum()

    return PortfolioSummary(
        n_projects=int(len(df)),
        total_arv=float(active["arv"].sum()),
        capital_deployed=float(capital),
        average_roi=average_roi,
        project_counts=counts,
        projects=df,
        skipped=skipped,
    )
