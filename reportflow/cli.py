"""Typer based command line entry points for reportflow."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Optional

import typer

from reportflow.config import dump_document, load_document
from reportflow.core.errors import DocumentLoadError, UnknownStructureError
from reportflow.core.logger import get_logger
from reportflow.services.template_mapper import (
    TemplateDocument,
    allocate_pixel_widths,
    compile_document,
    get_adapter,
    structure_types,
)
from reportflow.services.template_mapper.schema import CardListRegion, SlotsRegion, TableRegion
from reportflow.services.template_mapper.widths import normalize_width_values, normalize_width_values_keep_index

app = typer.Typer(help="Mapping compiler for printable report templates.")


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        "INFO",
        "--log-level",
        help="Set global logging level (e.g. DEBUG/INFO/WARNING).",
    ),
) -> None:
    """Configure global CLI behaviour before executing commands."""

    logger = get_logger()

    level_value = getattr(logging, log_level.upper(), None)
    if not isinstance(level_value, int):
        raise typer.BadParameter(f"Unknown log level: {log_level}")

    logging.getLogger().setLevel(level_value)
    logger.setLevel(level_value)


def _load(path: Path) -> TemplateDocument:
    try:
        return load_document(path)
    except DocumentLoadError as exc:
        typer.secho(f"Unable to load document: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2) from exc


def _describe_region(region) -> str:
    if isinstance(region, SlotsRegion):
        return f"{region.id}[{', '.join(slot.id for slot in region.slots)}]"
    if isinstance(region, TableRegion):
        return f"{region.id}[{region.min_cols}..{region.max_cols} columns]"
    if isinstance(region, CardListRegion):
        return f"{region.id}[{', '.join(field.id for field in region.fields)}]"
    return region.id


@app.command("structures")
def cli_structures() -> None:
    """List registered structure types and their regions."""

    for name in structure_types():
        regions = get_adapter(name).regions
        described = "; ".join(_describe_region(region) for region in regions) or "(no regions)"
        typer.echo(f"{name}: {described}")


@app.command("default-mapping")
def cli_default_mapping(
    structure: str = typer.Argument(..., help="Structure type, e.g. estimate_v1"),
) -> None:
    """Print the default mapping of a structure type as JSON."""

    try:
        adapter = get_adapter(structure)
    except UnknownStructureError as exc:
        typer.secho(str(exc), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2) from exc
    typer.echo(json.dumps(adapter.create_default_mapping().to_wire(), ensure_ascii=False, indent=2))


@app.command("validate")
def cli_validate(
    document: Path = typer.Argument(..., dir_okay=False, help="Document file (.yaml/.yml/.json)"),
) -> None:
    """Validate the mapping stored in a document."""

    logger = get_logger()
    doc = _load(document)
    try:
        adapter = get_adapter(doc.structure_type)
    except UnknownStructureError as exc:
        typer.secho(str(exc), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2) from exc

    outcome = adapter.validate(doc.mapping)
    if outcome.ok:
        typer.secho(f"{document.name}: mapping is complete", fg=typer.colors.GREEN)
        return
    for issue in outcome.errors:
        typer.echo(f"{issue.path}: {issue.message}")
    logger.info("Validation of %s reported %d issue(s)", document, len(outcome.errors))
    raise typer.Exit(code=1)


@app.command("compile")
def cli_compile(
    document: Path = typer.Argument(..., dir_okay=False, help="Document file (.yaml/.yml/.json)"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the result here instead of in place"),
    check: bool = typer.Option(False, "--check", help="Write nothing; exit 1 when the element tree would change"),
) -> None:
    """Synthesize the element tree of a document from its mapping."""

    logger = get_logger()
    doc = _load(document)
    try:
        result = compile_document(doc)
    except UnknownStructureError as exc:
        typer.secho(str(exc), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2) from exc

    for issue in result.validation.errors:
        typer.secho(f"warning: {issue.path}: {issue.message}", fg=typer.colors.YELLOW)

    if check:
        if result.changed:
            typer.echo(f"{document.name}: element tree is out of date")
            raise typer.Exit(code=1)
        typer.echo(f"{document.name}: element tree is up to date")
        return

    target = dump_document(result.document, output or document)
    logger.info("Compiled %s -> %s (changed=%s)", document, target, result.changed)
    typer.echo(f"{target} {result.signature[:12]}")


@app.command("widths")
def cli_widths(
    pcts: List[float] = typer.Argument(..., help="Relative column widths"),
    total: float = typer.Option(480, "--total", min=1, help="Table width in canvas pixels"),
    keep_index: Optional[int] = typer.Option(None, "--keep-index", help="Column whose value is kept as entered"),
) -> None:
    """Normalize column percentages and allocate pixel widths."""

    if keep_index is None:
        shares = normalize_width_values(pcts)
    else:
        shares = normalize_width_values_keep_index(pcts, keep_index)
    pixels = allocate_pixel_widths(shares, total)
    typer.echo("pct: " + " ".join(str(share) for share in shares))
    typer.echo("px:  " + " ".join(str(width) for width in pixels))


if __name__ == "__main__":
    app()
