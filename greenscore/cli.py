# -*- coding: utf-8 -*-
"""
GreenScore CLI
==============

Command line entry point for emissions calculation, ESG scoring,
compliance checks and action suggestions.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, NoReturn, Optional

import typer
import yaml
from pydantic import ValidationError as PydanticValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from greenscore._version import __version__
from greenscore.calculation.factor_resolver import load_local_factor_provider
from greenscore.config import get_config
from greenscore.exceptions import GreenScoreException, format_exception_chain
from greenscore.models import ActionRecord, ActivityRecord, Category, ComplianceLevel
from greenscore.service import GreenScoreService

app = typer.Typer(
    name="greenscore",
    help="GreenScore: GHG emissions, ESG scoring and RSE compliance",
    no_args_is_help=True,
    add_completion=False,
)
console = Console()

LEVEL_STYLES = {
    ComplianceLevel.CONFORMANT: "green",
    ComplianceLevel.WARNING: "yellow",
    ComplianceLevel.CRITICAL: "red",
}


@app.callback()
def _root(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """
    GreenScore - GHG emissions, ESG scoring and RSE compliance
    """
    level = logging.DEBUG if verbose else getattr(logging, get_config().log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _fail(message: str) -> NoReturn:
    console.print(f"[red][FAIL][/red] {escape(message)}")
    raise typer.Exit(2)


def _load_yaml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        _fail(f"Cannot read {path}: {e}")
    except yaml.YAMLError as e:
        _fail(f"Invalid YAML in {path}: {e}")
    if not isinstance(data, dict):
        _fail(f"{path} must contain a mapping")
    return data


def _categories(data: Dict[str, Any]) -> List[Category]:
    return [Category(**item) for item in data.get("categories") or []]


def _actions(data: Dict[str, Any]) -> List[ActionRecord]:
    actions = []
    for n, item in enumerate(data.get("actions") or [], start=1):
        item = dict(item)
        item.setdefault("id", f"A{n}")
        actions.append(ActionRecord(**item))
    return actions


def _key_value_table(title: str) -> Table:
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    return table


def _run(func, *args, **kwargs):
    """Run an engine call, mapping library errors to exit code 2."""
    try:
        return func(*args, **kwargs)
    except GreenScoreException as e:
        _fail(format_exception_chain(e))
    except PydanticValidationError as e:
        _fail(f"Invalid input: {e}")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def version():
    """Show GreenScore version"""
    console.print(f"[bold green]GreenScore v{__version__}[/bold green]")


@app.command()
def calculate(
    category: str = typer.Option(..., "--category", "-c", help="Activity category (e.g. diesel)"),
    quantity: Optional[float] = typer.Option(None, "--quantity", "-q", help="Activity quantity"),
    unit: str = typer.Option("", "--unit", "-u", help="Unit of the quantity"),
    amount: Optional[float] = typer.Option(None, "--amount", help="Amount excluding tax"),
    country: Optional[str] = typer.Option(None, "--country", help="ISO country code"),
    subcategory: Optional[str] = typer.Option(None, "--subcategory", help="Sub-category hint"),
    local_factors: bool = typer.Option(False, "--local-factors", help="Use the national reference factors"),
):
    """Calculate the emissions of one activity"""
    activity = _run(
        ActivityRecord,
        category=category,
        quantity=quantity,
        unit=unit,
        monetary_amount=amount,
        country_code=country,
        subcategory=subcategory,
    )
    provider = load_local_factor_provider() if local_factors else None
    result = _run(GreenScoreService(provider=provider).calculate, activity)

    table = _key_value_table("Emission calculation")
    table.add_row("CO2e (kg)", f"{result.co2_equivalent_kg:.2f}")
    table.add_row("CO2e (t)", f"{result.co2_equivalent_tonnes:.4f}")
    table.add_row("Uncertainty (kg)", f"{result.uncertainty_kg:.2f}")
    table.add_row("Scope", result.ghg_scope.value)
    table.add_row("Category", result.ghg_category)
    table.add_row("Factor", f"{result.emission_factor.factor_value} {result.emission_factor.factor_unit}")
    table.add_row("Source", result.emission_factor.source_name)
    table.add_row("Method", result.emission_factor.method.value)
    table.add_row("Confidence", f"{result.confidence_score:.2f}")
    console.print(table)
    console.print(f"[blue][INFO][/blue] {result.formula}")
    console.print(f"[blue][INFO][/blue] {result.methodology}")


@app.command()
def score(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="YAML with sector, revenue, categories, weights"),
):
    """Compute the ESG score of an indicator set"""
    data = _load_yaml(file)
    categories = _run(_categories, data)
    service = GreenScoreService()
    report = _run(
        service.score_esg,
        categories,
        data.get("sector"),
        float(data.get("revenue") or 0.0),
        data.get("weights"),
    )

    table = _key_value_table("ESG score")
    for category_id, value in report.category_scores.items():
        table.add_row(f"Score {category_id}", f"{value:.1f}")
    table.add_row("Total", f"{report.total_score:.1f}")
    table.add_row("Grade", f"{report.grade} ({report.grade_label})")
    console.print(table)

    comparison = service.compare_to_sector(report)
    if comparison is not None:
        console.print(
            f"[blue][INFO][/blue] Sector {comparison.sector}: "
            f"{comparison.gap_to_average:+.1f} vs average, {comparison.gap_to_top:+.1f} vs top"
        )
    for alert in service.esg_alerts(categories, report):
        console.print(f"[yellow][{alert.type.value.upper()}][/yellow] {escape(alert.title)}: {escape(alert.description)}")


@app.command()
def compliance(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="YAML with actions, metrics, thresholds, governance"),
):
    """Check RSE compliance; exits with code 1 when critical"""
    data = _load_yaml(file)
    actions = _run(_actions, data)
    report = _run(
        GreenScoreService().check_compliance,
        actions,
        data.get("metrics") or {},
        data.get("thresholds"),
        data.get("governance"),
    )

    style = LEVEL_STYLES[report.overall_level]
    console.print(
        f"[bold {style}]{report.overall_level.value.upper()}[/bold {style}] "
        f"score {report.score}/100 "
        f"({report.critical_count} critical, {report.warning_count} warning)"
    )
    if report.alerts:
        table = Table(title="Compliance alerts", show_header=True, header_style="bold magenta")
        table.add_column("Level")
        table.add_column("Id", style="cyan")
        table.add_column("Title")
        for alert in report.alerts:
            alert_style = LEVEL_STYLES[alert.level]
            table.add_row(f"[{alert_style}]{alert.level.value}[/{alert_style}]", alert.id, alert.title)
        console.print(table)

    if report.overall_level == ComplianceLevel.CRITICAL:
        raise typer.Exit(1)


@app.command()
def suggest(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="YAML with categories"),
):
    """Suggest remediation actions for low-scoring indicators"""
    data = _load_yaml(file)
    categories = _run(_categories, data)
    actions = GreenScoreService().suggest_actions(categories)
    if not actions:
        console.print("[green][OK][/green] No remediation action suggested")
        return

    table = Table(title="Suggested actions", show_header=True, header_style="bold magenta")
    table.add_column("Indicator", style="cyan")
    table.add_column("Priority")
    table.add_column("Title")
    table.add_column("Cost")
    for action in actions:
        table.add_row(
            action.linked_indicator_id,
            action.priority.value,
            action.title,
            f"{action.cost_estimated:,.0f}",
        )
    console.print(table)
    console.print(f"[blue][INFO][/blue] {len(actions)} actions suggested")


def main():
    app()


if __name__ == "__main__":
    main()
