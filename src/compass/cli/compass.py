"""Compass CLI: enrich evidence offline and check a deployment's config."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .. import __version__
from ..core.config import get_effective_config
from ..core.service import EnrichmentService
from ..errors import ConfigurationError
from ..utils.logging import configure_logging

console = Console()
err_console = Console(stderr=True)


def _load_service(ctx: click.Context, config_path: str) -> EnrichmentService:
    """Load config and build the service; configuration errors exit with 1."""
    overrides = {}
    if ctx.obj.get("log_level"):
        overrides["logging"] = {"level": ctx.obj["log_level"]}
    if ctx.obj.get("json_logs"):
        overrides.setdefault("logging", {})["json"] = True

    try:
        config = get_effective_config(Path(config_path), cli_overrides=overrides)
        configure_logging(config["logging"]["level"], json_output=bool(config["logging"]["json"]))
        return EnrichmentService.from_config(config)
    except (ConfigurationError, ValueError) as exc:
        err_console.print(f"  [red]ERROR[/red] Configuration error: {escape(str(exc))}")
        sys.exit(1)


@click.group()
@click.version_option(__version__, prog_name="compass")
@click.option("--log-level", type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False))
@click.option("--json-logs", is_flag=True, help="Emit JSON log lines")
@click.pass_context
def compass_cli(ctx: click.Context, log_level: str | None, json_logs: bool) -> None:
    """Compass - enrich policy evidence with compliance context."""
    ctx.ensure_object(dict)
    ctx.obj["log_level"] = log_level
    ctx.obj["json_logs"] = json_logs


@compass_cli.command()
@click.option("--config", "-c", "config_path", type=click.Path(exists=True, dir_okay=False), required=True)
@click.option("--evidence", "-e", "evidence_file", type=click.File("r"), default="-", help="Evidence JSON (default: stdin)")
@click.option("--source", type=str, help="Mapper to use instead of the evidence source")
@click.option("--attributes", is_flag=True, help="Input and output are flat telemetry attributes")
@click.option("--output", "-o", type=click.Path(dir_okay=False, writable=True), help="Write JSON here instead of stdout")
@click.pass_context
def enrich(
    ctx: click.Context,
    config_path: str,
    evidence_file,
    source: Optional[str],
    attributes: bool,
    output: Optional[str],
) -> None:
    """Enrich one evidence record and print the result as JSON.

    Example: compass enrich -c compass.yaml -e evidence.json
    """
    service = _load_service(ctx, config_path)

    try:
        document = json.load(evidence_file)
    except json.JSONDecodeError as exc:
        raise click.BadParameter(f"not valid JSON: {exc}", param_hint="--evidence") from exc
    if not isinstance(document, dict):
        raise click.BadParameter("expected a JSON object", param_hint="--evidence")

    if attributes:
        from ..formatters.attributes import MissingAttributesError, enrich_attributes

        try:
            enrich_attributes(document, service, source_id=source)
        except MissingAttributesError as exc:
            err_console.print(f"  [yellow]SKIPPED[/yellow] {escape(str(exc))}")
        result = document
    else:
        from ..models.evidence import EnrichmentRequest, Evidence

        try:
            if "evidence" in document:
                evidence = EnrichmentRequest.model_validate(document).evidence
            else:
                evidence = Evidence.model_validate(document)
        except ValidationError as exc:
            raise click.BadParameter(f"invalid evidence: {exc}", param_hint="--evidence") from exc
        response = service.enrich(evidence, source_id=source)
        result = response.model_dump(mode="json", by_alias=True)

    text = json.dumps(result, indent=2)
    if output:
        Path(output).write_text(text + "\n", encoding="utf-8")
    else:
        click.echo(text)


@compass_cli.command()
@click.option("--config", "-c", "config_path", type=click.Path(exists=True, dir_okay=False), required=True)
@click.pass_context
def check(ctx: click.Context, config_path: str) -> None:
    """Load catalogs and evaluation plans and summarize them."""
    service = _load_service(ctx, config_path)

    catalogs = Table(title="Catalogs")
    catalogs.add_column("Catalog", style="cyan")
    catalogs.add_column("Families", justify="right")
    catalogs.add_column("Controls", justify="right")
    for catalog_id, catalog in sorted(service.scope.items()):
        controls = sum(len(f.controls) for f in catalog.control_families)
        catalogs.add_row(catalog_id, str(len(catalog.control_families)), str(controls))

    mappers = Table(title="Mappers")
    mappers.add_column("Mapper", style="cyan")
    mappers.add_column("Catalogs")
    mappers.add_column("Plans", justify="right")
    unscoped: list[str] = []
    for mapper_id, mapper in sorted(service.mappers.items()):
        plan_catalogs = sorted(mapper.plans)
        unscoped.extend(c for c in plan_catalogs if c not in service.scope)
        mappers.add_row(mapper_id, ", ".join(plan_catalogs) or "-", str(mapper.plan_count()))

    console.print(catalogs)
    console.print(mappers)
    for catalog_id in sorted(set(unscoped)):
        console.print(f"  [yellow]WARNING[/yellow] Plans reference catalog {catalog_id} which is not loaded")


def main() -> None:
    compass_cli(obj={})


if __name__ == "__main__":
    main()
