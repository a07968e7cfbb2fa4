# src/rehabpro/analysis/variance.py
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Literal

from rehabpro.domain.errors import require_non_negative
from rehabpro.domain.settings import CalculationSettings

Severity = Literal["none", "warning", "critical"]
VarianceStage = Literal["forecast", "actual"]


@dataclass(frozen=True)
class VarianceResult:
    variance: float           # actual - baseline
    variance_percent: float   # |variance| / baseline, percent
    severity: Severity

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def variance_percent(baseline: float, actual: float) -> float:
    if baseline == 0:
        return 0.0
    return abs(actual - baseline) / baseline * 100.0


def classify_variance(pct: float, settings: CalculationSettings) -> Severity:
    if not settings.variance_alert_enabled:
        return "none"
    if pct >= settings.variance_critical_percent:
        return "critical"
    if pct >= settings.variance_warning_percent:
        return "warning"
    return "none"


def compute_variance(baseline: float, actual: float, settings: CalculationSettings) -> VarianceResult:
    """
    Compare a later figure against its baseline.

    Overruns and underruns alert alike since the percent is taken on the
    absolute difference. Negative or non-finite amounts raise
    InvalidInputError.
    """
    baseline = require_non_negative(baseline, "baseline")
    actual = require_non_negative(actual, "actual")
    pct = variance_percent(baseline, actual)
    return VarianceResult(
        variance=actual - baseline,
        variance_percent=pct,
        severity=classify_variance(pct, settings),
    )


def evaluate_variance_alerts(
    underwriting: float,
    forecast: float,
    actual: float | None,
    settings: CalculationSettings,
) -> dict[VarianceStage, VarianceResult]:
    """
    Run the enabled stage checks over one tracked amount.

    "forecast" compares forecast against underwriting, "actual" compares
    actual against forecast. Disabled checks are absent from the result,
    and so is the actual check while nothing has been spent.
    """
    out: dict[VarianceStage, VarianceResult] = {}
    if not settings.variance_alert_enabled:
        return out
    if settings.variance_alert_on_forecast:
        out["forecast"] = compute_variance(underwriting, forecast, settings)
    if settings.variance_alert_on_actual and actual is not None:
        out["actual"] = compute_variance(forecast, actual, settings)
    return out


def worst_severity(results: dict[VarianceStage, VarianceResult]) -> Severity:
    rank = {"none": 0, "warning": 1, "critical": 2}
    worst: Severity = "none"
    for r in results.values():
        if rank[r.severity] > rank[worst]:
            worst = r.severity
    return worst
