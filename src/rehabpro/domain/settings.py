# src/rehabpro/domain/settings.py
from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from rehabpro.domain.errors import InvalidInputError

# ----------------------------
# Method selections
# ----------------------------

MaoMethod = Literal[
    "seventy_rule",
    "custom_percentage",
    "arv_minus_all",
    "gross_margin",
    "net_profit_target",
]

RoiMethod = Literal["simple", "annualized", "cash_on_cash", "irr_simplified"]

ContingencyMethod = Literal["flat_percent", "category_weighted", "tiered", "scope_based"]

HoldingCostMethod = Literal["flat_monthly", "itemized", "percentage_of_loan", "hybrid"]

MAO_METHOD_LABELS: dict[str, str] = {
    "seventy_rule": "70% Rule",
    "custom_percentage": "Custom %",
    "arv_minus_all": "ARV Minus All",
    "gross_margin": "Gross Margin",
    "net_profit_target": "Net Profit Target",
}

ROI_METHOD_LABELS: dict[str, str] = {
    "simple": "Simple ROI",
    "annualized": "Annualized ROI",
    "cash_on_cash": "Cash-on-Cash",
    "irr_simplified": "IRR (Simplified)",
}

CONTINGENCY_METHOD_LABELS: dict[str, str] = {
    "flat_percent": "Flat Percentage",
    "category_weighted": "Category-Weighted",
    "tiered": "Budget-Tiered",
    "scope_based": "Scope-Based",
}

HOLDING_COST_METHOD_LABELS: dict[str, str] = {
    "flat_monthly": "Flat Monthly",
    "itemized": "Itemized",
    "percentage_of_loan": "Loan-Based",
    "hybrid": "Hybrid",
}

# Budget categories used by rehab line items
BUDGET_CATEGORIES: tuple[str, ...] = (
    "soft_costs",
    "demo",
    "structural",
    "plumbing",
    "hvac",
    "electrical",
    "insulation_drywall",
    "interior_paint",
    "flooring",
    "tile",
    "kitchen",
    "bathrooms",
    "doors_windows",
    "interior_trim",
    "exterior",
    "landscaping",
    "finishing",
    "contingency",
)

DEFAULT_CATEGORY_RATES: dict[str, float] = {
    "soft_costs": 5.0,
    "demo": 10.0,
    "structural": 15.0,
    "plumbing": 12.0,
    "hvac": 12.0,
    "electrical": 12.0,
    "insulation_drywall": 10.0,
    "interior_paint": 8.0,
    "flooring": 8.0,
    "tile": 10.0,
    "kitchen": 10.0,
    "bathrooms": 12.0,
    "doors_windows": 8.0,
    "interior_trim": 8.0,
    "exterior": 12.0,
    "landscaping": 8.0,
    "finishing": 5.0,
    "contingency": 0.0,
}


def _to_number(v: Any) -> Any:
    """
    Accept 12, 12.5, "12", "12%", "$30,000" and hand pydantic a float.
    Anything else is passed through so pydantic reports the type error.
    """
    if isinstance(v, str):
        s = v.strip().replace("%", "").replace("$", "").replace(",", "")
        if not s:
            return v
        try:
            return float(s)
        except ValueError:
            return v
    return v


class ContingencyTier(BaseModel):
    """One budget band: applies `percent` to budgets up to `max_budget` (None = no ceiling)."""
    model_config = ConfigDict(frozen=True)

    max_budget: float | None = None
    percent: float = Field(..., ge=0.0, le=100.0)

    @field_validator("max_budget", "percent", mode="before")
    @classmethod
    def _numeric(cls, v: Any) -> Any:
        return _to_number(v)


DEFAULT_CONTINGENCY_TIERS: tuple[ContingencyTier, ...] = (
    ContingencyTier(max_budget=25_000.0, percent=15.0),
    ContingencyTier(max_budget=50_000.0, percent=12.0),
    ContingencyTier(max_budget=100_000.0, percent=10.0),
    ContingencyTier(max_budget=None, percent=8.0),
)


class HoldingCostItems(BaseModel):
    """Monthly carrying-cost components for the itemized / hybrid methods."""
    model_config = ConfigDict(frozen=True)

    taxes: float = Field(default=250.0, ge=0.0)
    insurance: float = Field(default=150.0, ge=0.0)
    utilities: float = Field(default=200.0, ge=0.0)
    loan_interest: float = Field(default=800.0, ge=0.0)
    hoa: float = Field(default=0.0, ge=0.0)
    lawn_care: float = Field(default=100.0, ge=0.0)
    other: float = Field(default=0.0, ge=0.0)

    @field_validator("*", mode="before")
    @classmethod
    def _numeric(cls, v: Any) -> Any:
        return _to_number(v)


def check_contingency_tiers(tiers: list[ContingencyTier] | tuple[ContingencyTier, ...]) -> None:
    """
    Tier sequence rules:
      - at least 2 tiers
      - exactly one open-ended tier (max_budget=None) and it is the last one
      - the remaining ceilings are positive and strictly increasing
    """
    if len(tiers) < 2:
        raise ValueError("contingency_tiers needs at least 2 tiers")
    open_ended = [i for i, t in enumerate(tiers) if t.max_budget is None]
    if len(open_ended) != 1:
        raise ValueError("contingency_tiers needs exactly one tier without max_budget")
    if open_ended[0] != len(tiers) - 1:
        raise ValueError("the tier without max_budget must be the last tier")

    prev: float | None = None
    for t in tiers[:-1]:
        ceiling = float(t.max_budget)  # type: ignore[arg-type]
        if ceiling <= 0:
            raise ValueError("tier max_budget must be positive")
        if prev is not None and ceiling <= prev:
            raise ValueError("tier max_budget values must be strictly increasing")
        prev = ceiling


class CalculationSettings(BaseModel):
    """
    Per-user configuration of the deal calculation engine.

    Percentages are stored as percentages (12.0 means 12%), except
    `mao_arv_multiplier`, which is a fraction (0.70 means 70% of ARV).
    Defaults match a freshly created settings profile.
    """
    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = "Default"

    # MAO
    mao_method: MaoMethod = "seventy_rule"
    mao_arv_multiplier: float = Field(default=0.70, ge=0.0, le=1.0)
    mao_target_profit: float = Field(default=30_000.0, ge=0.0)
    mao_target_profit_percent: float = Field(default=15.0, ge=0.0, le=100.0)
    mao_include_holding_costs: bool = True
    mao_include_selling_costs: bool = True
    mao_include_closing_costs: bool = True

    # ROI
    roi_method: RoiMethod = "simple"
    roi_annualize: bool = False
    roi_include_opportunity_cost: bool = False
    roi_opportunity_rate: float = Field(default=5.0, ge=0.0)
    roi_threshold_excellent: float = Field(default=25.0, ge=0.0)
    roi_threshold_good: float = Field(default=15.0, ge=0.0)
    roi_threshold_fair: float = Field(default=10.0, ge=0.0)
    roi_threshold_poor: float = Field(default=5.0, ge=0.0)

    # Contingency
    contingency_method: ContingencyMethod = "flat_percent"
    contingency_default_percent: float = Field(default=10.0, ge=0.0, le=25.0)
    contingency_category_rates: dict[str, float] = Field(default_factory=lambda: dict(DEFAULT_CATEGORY_RATES))
    contingency_tiers: tuple[ContingencyTier, ...] = DEFAULT_CONTINGENCY_TIERS

    # Holding costs
    holding_cost_method: HoldingCostMethod = "flat_monthly"
    holding_cost_default_monthly: float = Field(default=1_500.0, ge=0.0)
    holding_cost_loan_rate_annual: float = Field(default=12.0, ge=0.0)
    holding_cost_include_taxes: bool = True
    holding_cost_include_insurance: bool = True
    holding_cost_include_utilities: bool = True
    holding_cost_include_hoa: bool = False
    holding_cost_items: HoldingCostItems = Field(default_factory=HoldingCostItems)

    # Selling costs
    selling_cost_agent_commission: float = Field(default=5.0, ge=0.0)
    selling_cost_buyer_concessions: float = Field(default=2.0, ge=0.0)
    selling_cost_closing_percent: float = Field(default=1.0, ge=0.0)
    selling_cost_fixed_amount: float = Field(default=0.0, ge=0.0)

    # Profit thresholds
    profit_min_acceptable: float = Field(default=20_000.0, ge=0.0)
    profit_target: float = Field(default=35_000.0, ge=0.0)
    profit_excellent: float = Field(default=50_000.0, ge=0.0)
    profit_min_percent: float = Field(default=10.0, ge=0.0)
    profit_target_percent: float = Field(default=15.0, ge=0.0)
    profit_excellent_percent: float = Field(default=20.0, ge=0.0)

    # Variance alerts
    variance_alert_enabled: bool = True
    variance_warning_percent: float = Field(default=5.0, ge=0.0)
    variance_critical_percent: float = Field(default=10.0, ge=0.0)
    variance_alert_on_forecast: bool = True
    variance_alert_on_actual: bool = True

    @field_validator("mao_arv_multiplier", mode="before")
    @classmethod
    def _arv_fraction(cls, v: Any) -> Any:
        # "70%" and 70 both mean 0.70
        v = _to_number(v)
        if isinstance(v, (int, float)) and not isinstance(v, bool) and v > 1.0:
            return v / 100.0
        return v

    @field_validator(
        "mao_target_profit",
        "mao_target_profit_percent",
        "roi_opportunity_rate",
        "roi_threshold_excellent",
        "roi_threshold_good",
        "roi_threshold_fair",
        "roi_threshold_poor",
        "contingency_default_percent",
        "holding_cost_default_monthly",
        "holding_cost_loan_rate_annual",
        "selling_cost_agent_commission",
        "selling_cost_buyer_concessions",
        "selling_cost_closing_percent",
        "selling_cost_fixed_amount",
        "profit_min_acceptable",
        "profit_target",
        "profit_excellent",
        "profit_min_percent",
        "profit_target_percent",
        "profit_excellent_percent",
        "variance_warning_percent",
        "variance_critical_percent",
        mode="before",
    )
    @classmethod
    def _numeric(cls, v: Any) -> Any:
        return _to_number(v)

    @field_validator("contingency_category_rates", mode="before")
    @classmethod
    def _rates_numeric(cls, v: Any) -> Any:
        if isinstance(v, Mapping):
            return {str(k): _to_number(r) for k, r in v.items()}
        return v

    @field_validator("contingency_category_rates")
    @classmethod
    def _rates_non_negative(cls, v: dict[str, float]) -> dict[str, float]:
        for category, rate in v.items():
            if rate < 0:
                raise ValueError(f"contingency rate for {category!r} must be non-negative")
        return v

    @model_validator(mode="after")
    def _check_consistency(self) -> "CalculationSettings":
        if not (
            self.roi_threshold_excellent
            > self.roi_threshold_good
            > self.roi_threshold_fair
            > self.roi_threshold_poor
        ):
            raise ValueError("ROI thresholds must satisfy excellent > good > fair > poor")

        if not (self.profit_min_acceptable < self.profit_target < self.profit_excellent):
            raise ValueError("profit thresholds must satisfy min_acceptable < target < excellent")

        if not (self.profit_min_percent < self.profit_target_percent < self.profit_excellent_percent):
            raise ValueError("profit margin thresholds must satisfy min < target < excellent")

        if not (self.variance_warning_percent < self.variance_critical_percent):
            raise ValueError("variance_warning_percent must be below variance_critical_percent")

        check_contingency_tiers(self.contingency_tiers)
        return self

    @property
    def selling_cost_total_percent(self) -> float:
        return (
            self.selling_cost_agent_commission
            + self.selling_cost_buyer_concessions
            + self.selling_cost_closing_percent
        )


def _describe_validation_error(err: ValidationError) -> str:
    parts = []
    for e in err.errors():
        loc = ".".join(str(x) for x in e.get("loc", ()))
        msg = str(e.get("msg", "invalid value"))
        # pydantic prefixes messages from our own validators
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts)


def load_settings(raw: Mapping[str, Any] | CalculationSettings | None = None) -> CalculationSettings:
    """
    Build a validated CalculationSettings from a raw mapping.

    Missing keys take their defaults (first use). Any violated rule raises
    InvalidInputError with a readable message.
    """
    if isinstance(raw, CalculationSettings):
        return raw
    try:
        return CalculationSettings.model_validate(dict(raw or {}))
    except ValidationError as err:
        raise InvalidInputError(_describe_validation_error(err)) from err


def merge_settings(current: CalculationSettings, updates: Mapping[str, Any]) -> CalculationSettings:
    """
    Apply a partial update and re-validate the whole record.

    `holding_cost_items` may be given partially; the other item amounts are kept.
    """
    unknown = set(updates) - set(CalculationSettings.model_fields)
    if unknown:
        raise InvalidInputError(f"unknown settings field(s): {', '.join(sorted(unknown))}")

    data = current.model_dump()
    for key, value in updates.items():
        if key == "holding_cost_items" and isinstance(value, Mapping):
            data[key] = {**data[key], **dict(value)}
        else:
            data[key] = value
    return load_settings(data)


DEFAULT_SETTINGS = CalculationSettings()
