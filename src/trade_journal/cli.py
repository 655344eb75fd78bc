"""CLI entry point for the trade journal."""

from __future__ import annotations

import json
from datetime import date, datetime
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo

import click

from .core.config import Settings, load_settings
from .core.errors import JournalError


def _echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2, default=str))


def _parse_mapping(raw: str | None) -> dict[str, str] | None:
    if raw is None:
        return None
    try:
        mapping = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise click.BadParameter(f"not valid JSON: {exc}", param_hint="--mapping")
    if not isinstance(mapping, dict):
        raise click.BadParameter("must be a JSON object", param_hint="--mapping")
    return {str(k): str(v) for k, v in mapping.items()}


def _run_import(settings: Settings, file: Path, mapping: str | None):
    from .ingest.pipeline import TradeImporter

    try:
        return TradeImporter(settings).import_source(file, _parse_mapping(mapping))
    except JournalError as exc:
        raise click.ClickException(str(exc)) from exc


file_argument = click.argument(
    "file", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
mapping_option = click.option(
    "--mapping", default=None,
    help='Column mapping as JSON, e.g. \'{"symbol": "Scrip"}\' (default: detected)',
)


@click.group()
@click.option("--config", default=None, help="TOML config file path")
@click.pass_context
def main(ctx: click.Context, config: str | None) -> None:
    """Trade journal: schema detection, trade matching and analytics."""
    from .observability.logger import setup_logging

    try:
        settings = load_settings(config)
    except JournalError as exc:
        raise click.ClickException(str(exc)) from exc
    setup_logging(
        level=settings.observability.log_level,
        format=settings.observability.log_format,
    )
    ctx.obj = settings


@main.command()
@file_argument
@click.pass_obj
def detect(settings: Settings, file: Path) -> None:
    """Detect columns and suggest a mapping for FILE."""
    from .ingest.pipeline import TradeImporter

    try:
        report = TradeImporter(settings).detect(file)
    except JournalError as exc:
        raise click.ClickException(str(exc)) from exc
    _echo_json(report.to_dict())


@main.command("import")
@file_argument
@mapping_option
@click.pass_obj
def import_(settings: Settings, file: Path, mapping: str | None) -> None:
    """Validate and match the trades in FILE."""
    result = _run_import(settings, file, mapping)
    _echo_json({
        "summary": result.summary(),
        "mapping": result.mapping,
        "matched": [t.to_dict() for t in result.match.matched],
        "open": [p.to_dict() for p in result.match.open],
    })


@main.command()
@file_argument
@mapping_option
@click.pass_obj
def report(settings: Settings, file: Path, mapping: str | None) -> None:
    """Performance, per-symbol and pattern analytics for FILE."""
    from .analytics import analyze_patterns, analyze_symbols, summarize

    result = _run_import(settings, file, mapping)
    trades = sorted(result.match.matched, key=lambda t: t.closed_at)
    _echo_json({
        "performance": summarize(trades, tz=settings.analytics.timezone).to_dict(),
        "symbols": analyze_symbols(trades, top_n=settings.analytics.top_n).to_dict(),
        "patterns": analyze_patterns(trades, tz=settings.analytics.timezone),
    })


@main.command()
@file_argument
@mapping_option
@click.option("--day", default=None, help="Day to summarize (YYYY-MM-DD, default: today)")
@click.pass_obj
def overview(settings: Settings, file: Path, mapping: str | None, day: str | None) -> None:
    """Daily P&L and risk status for FILE."""
    from .analytics import daily_overview

    try:
        target = (
            date.fromisoformat(day)
            if day
            else datetime.now(ZoneInfo(settings.analytics.timezone)).date()
        )
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--day")
    result = _run_import(settings, file, mapping)
    trades = sorted(result.match.matched, key=lambda t: t.closed_at)
    summary = daily_overview(
        trades, target, risk=settings.risk, tz=settings.analytics.timezone
    )
    _echo_json(summary.to_dict())


@main.command()
@file_argument
@mapping_option
@click.option("--what", type=click.Choice(["matched", "open"]), default="matched")
@click.option("--format", "fmt", type=click.Choice(["csv", "json"]), default="csv")
@click.pass_obj
def export(settings: Settings, file: Path, mapping: str | None, what: str, fmt: str) -> None:
    """Export matched trades or open positions from FILE."""
    from .export import TradeExporter

    result = _run_import(settings, file, mapping)
    exporter = TradeExporter()
    if what == "matched":
        out = (
            exporter.matched_to_csv(result.match.matched)
            if fmt == "csv"
            else exporter.matched_to_json(result.match.matched)
        )
    else:
        out = (
            exporter.open_to_csv(result.match.open)
            if fmt == "csv"
            else exporter.open_to_json(result.match.open)
        )
    click.echo(out, nl=False)
