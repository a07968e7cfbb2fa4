from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import typer

from rehabpro.adapters.output import rounded
from rehabpro.analysis.formulas import algorithm_summary, preview_formula
from rehabpro.analysis.variance import compute_variance
from rehabpro.domain.errors import InvalidInputError
from rehabpro.domain.settings import load_settings
from rehabpro.services.deal_metrics import evaluate_payload

app = typer.Typer(help="Rehab deal calculator: metrics, variance checks and formula previews.")


def _read_json(path: Optional[Path]) -> dict[str, Any] | None:
    if path is None:
        return None
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as err:
        raise InvalidInputError(f"{path.name} is not valid JSON: {err}") from err
    if not isinstance(payload, dict):
        raise InvalidInputError(f"{path.name} must hold a JSON object, got {type(payload).__name__}")
    return payload


def _emit(payload: dict[str, Any]) -> None:
    typer.echo(json.dumps(rounded(payload), indent=2, default=str))


@app.command("evaluate")
def evaluate_cmd(
    deal: Path = typer.Option(..., "--deal", exists=True, help="JSON file with the deal inputs"),
    settings: Optional[Path] = typer.Option(
        None, "--settings", exists=True, help="JSON file with calculation settings (defaults if omitted)"
    ),
) -> None:
    """
    Compute MAO, ROI and cost components for one deal.
    """
    try:
        metrics = evaluate_payload(_read_json(deal) or {}, _read_json(settings))
    except InvalidInputError as err:
        typer.echo(f"invalid input: {err}", err=True)
        raise typer.Exit(code=2)
    _emit(metrics.to_dict())


@app.command("variance")
def variance_cmd(
    baseline: float = typer.Option(..., help="Baseline amount (underwriting or forecast)"),
    actual: float = typer.Option(..., help="Later amount (forecast or actual)"),
    settings: Optional[Path] = typer.Option(None, "--settings", exists=True),
) -> None:
    """
    Classify the drift between two budget figures.
    """
    try:
        cfg = load_settings(_read_json(settings))
        result = compute_variance(baseline, actual, cfg)
    except InvalidInputError as err:
        typer.echo(f"invalid input: {err}", err=True)
        raise typer.Exit(code=2)
    _emit(result.to_dict())


@app.command("formula")
def formula_cmd(
    which: str = typer.Argument(..., help="mao | roi | contingency | holding | selling | profit | alerts"),
    settings: Optional[Path] = typer.Option(None, "--settings", exists=True),
) -> None:
    """
    Print the human-readable formula for the configured method.
    """
    try:
        cfg = load_settings(_read_json(settings))
        preview = preview_formula(cfg, which)
    except InvalidInputError as err:
        typer.echo(f"invalid input: {err}", err=True)
        raise typer.Exit(code=2)
    _emit({**preview.to_dict(), "algorithm": algorithm_summary(cfg)})


if __name__ == "__main__":
    app()
