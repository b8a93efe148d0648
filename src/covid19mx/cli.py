"""CLI for covid19mx."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import typer
import yaml
from pydantic import ValidationError

from .aggregator import ALL_MUNICIPALITIES, STATES_ROLLUP, MunicipalReport, filter_municipalities
from .catalog import LookupTables, load_tables
from .config import Config, default_config, resolve_config, save_config
from .diff import diff_reports
from .errors import Covid19MxError
from .http_client import HttpClient
from .logging_utils import setup_logging
from .models import StateReport
from .paths import config_path, log_dir
from .render import (
    FORMATS,
    render_diff_json,
    render_diff_table,
    render_municipal,
    render_report,
)
from .since import resolve_since
from .sources import build_client, fetch_municipal_report, fetch_snapshot, resolve_source

VERSION = "0.4.0"

app = typer.Typer(
    help="Casos de COVID-19 en México por estado y municipio.",
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _check_output(value: str) -> str:
    value = value.lower()
    if value not in FORMATS:
        raise typer.BadParameter(f"Formato no soportado: {value} (opciones: {', '.join(FORMATS)}).")
    return value


def _check_municipio(value: str) -> str:
    value = value.strip().lower()
    if not value or value in ALL_MUNICIPALITIES or value == STATES_ROLLUP:
        return value
    if len(value) == 2 and value.isdigit():
        return value
    raise typer.BadParameter("Use una clave de estado de dos dígitos, '*', 'all' o 'states'.")


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", "-v", help="Mostrar versión."),
    output: str = typer.Option(
        "table", "--output", "-o", callback=_check_output, help="Formato: json, csv, table o awk."
    ),
    source: str = typer.Option(
        "", "--source", help="URL de datos, 'auto' o ruta a un snapshot .json local."
    ),
    since: str = typer.Option(
        "", "--since", help="Comparar contra días atrás: 1d, yesterday, '2 days ago', N."
    ),
    municipio: str = typer.Option(
        "",
        "--municipio",
        "--mun",
        callback=_check_municipio,
        help="Datos municipales: clave de estado (NN), '*'/'all' o 'states'.",
    ),
    config_file: str | None = typer.Option(None, "--config", help="Ruta a config.yml."),
    verbose: bool = typer.Option(False, "--verbose", help="Mostrar logs en stderr."),
) -> None:
    """Show state case counts (default), a diff against a past day, or municipal data."""
    if version:
        typer.echo(f"covid19mx v{VERSION}")
        raise typer.Exit()
    if ctx.invoked_subcommand is not None:
        return
    if municipio and since:
        raise typer.BadParameter("--since no aplica a datos municipales.", param_hint="--since")

    setup_logging(log_dir(), level=logging.DEBUG if verbose else logging.INFO, console=verbose)
    logger = logging.getLogger("covid19mx")
    try:
        config = resolve_config(Path(config_file) if config_file else config_path())
        tables = load_tables(config.municipal_catalog_path)
        client = build_client(config, logging.getLogger("covid19mx.http"))
        if municipio:
            text = _municipal_output(client, config, tables, municipio, output)
        else:
            report = resolve_source(client, config, source)
            text = _state_output(client, config, tables, report, since, output)
    except (Covid19MxError, ValidationError, FileNotFoundError, yaml.YAMLError) as exc:
        logger.error("Fallo: %s", exc)
        typer.secho(f"Error: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    typer.echo(text)


def _state_output(
    client: HttpClient,
    config: Config,
    tables: LookupTables,
    report: StateReport,
    since: str,
    output: str,
) -> str:
    if not since:
        return render_report(report, output, tables)
    day = resolve_since(since)
    previous = fetch_snapshot(client, config.endpoints.snapshots_url, day)
    diff = diff_reports(report, previous, tables)
    if output == "json":
        return render_diff_json(diff)
    if output != "table":
        logging.getLogger("covid19mx").warning(
            "El formato %s no aplica a --since; se muestra tabla.", output
        )
    return render_diff_table(diff)


def _municipal_output(
    client: HttpClient,
    config: Config,
    tables: LookupTables,
    selector: str,
    output: str,
) -> str:
    report: MunicipalReport = fetch_municipal_report(client, config, tables)
    if selector == STATES_ROLLUP:
        rollup = StateReport(states=tuple(state for _, state in report.states))
        return render_report(rollup, output, tables)
    records = filter_municipalities(report.municipalities, selector)
    return render_municipal(records, output, tables)


@app.command()
def init() -> None:
    """Create the log folder and a default config.yml if missing."""
    setup_logging(log_dir(), console=False)
    cfg_path = config_path()
    if not cfg_path.exists():
        save_config(default_config(), cfg_path)
    typer.echo("Inicialización completada.")


@app.command("show-config")
def show_config(
    config_file: str | None = typer.Option(None, "--config", help="Ruta a config.yml."),
) -> None:
    """Print the effective configuration."""
    try:
        config = resolve_config(Path(config_file) if config_file else config_path())
    except (ValidationError, yaml.YAMLError) as exc:
        typer.secho(f"Error de validación: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    typer.echo(json.dumps(config.model_dump(), indent=2, ensure_ascii=False))
