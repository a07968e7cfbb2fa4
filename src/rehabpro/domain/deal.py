# src/rehabpro/domain/deal.py
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from rehabpro.domain.errors import DegenerateResultWarning

ProjectStatus = Literal[
    "lead",
    "analyzing",
    "under_contract",
    "in_rehab",
    "listed",
    "sold",
    "dead",
]

PropertyType = Literal["sfh", "duplex", "triplex", "fourplex", "townhouse", "condo"]

MULTI_FAMILY_TYPES = frozenset({"duplex", "triplex", "fourplex"})

RehabScope = Literal["cosmetic", "standard", "full_gut"]

RoiClass = Literal["excellent", "good", "fair", "poor"]
ProfitClass = Literal["excellent", "target", "acceptable", "pass"]


class DealInputs(BaseModel):
    """
    Read-only financial view of a project, as the engine sees it.

    Ranges are not enforced here on purpose: negative or missing values
    reach the calculators, which reject them with InvalidInputError.
    """
    model_config = ConfigDict(frozen=True)

    arv: float = 0.0
    purchase_price: float = 0.0
    rehab_budget: float = 0.0
    closing_costs: float = 0.0
    hold_months: float | None = Field(default=None, description="Months from close to sale")

    sqft: float | None = None
    year_built: int | None = None
    property_type: PropertyType = "sfh"
    rehab_scope: RehabScope | None = None

    # category -> working budget amount, used by category-weighted contingency
    category_budgets: dict[str, float] = Field(default_factory=dict)

    rehab_actual: float | None = None
    rehab_forecast: float | None = None
    rehab_underwriting: float | None = None

    # cash actually deployed by the investor (down payment + out of pocket);
    # when absent, cash-on-cash falls back to total investment
    cash_invested: float | None = None

    @property
    def is_multi_family(self) -> bool:
        return self.property_type in MULTI_FAMILY_TYPES


@dataclass(frozen=True)
class DealMetrics:
    contingency_amount: float
    holding_costs_total: float
    selling_costs: float
    mao: float
    total_investment: float
    gross_profit: float
    roi: float
    profit_classification: ProfitClass
    roi_classification: RoiClass

    rehab_budget_with_contingency: float
    profit_margin: float                # gross_profit / ARV, percent
    margin_classification: ProfitClass
    spread: float | None                # MAO - purchase price (None without a price)

    warnings: tuple[DegenerateResultWarning, ...] = field(default_factory=tuple)

    @property
    def has_viable_offer(self) -> bool:
        return self.mao > 0

    def to_dict(self) -> dict[str, Any]:
        out = asdict(self)
        out["warnings"] = [w.to_dict() for w in self.warnings]
        return out
