"""CLI for content trees (build, usage, pointer)."""

import json
from dataclasses import asdict
from pathlib import Path
from typing import Annotated

import typer
from loguru import logger

from content_tree.config import MAX_TREE_DEPTH, resolve_export_file
from content_tree.core.importer.repository import ExportRepository
from content_tree.core.tree.builder import NodeBuilder, build_tree
from content_tree.core.tree.pointer import decode
from content_tree.core.tree.render import render_tree_as_text, tree_to_dict
from content_tree.exceptions import InvalidPointerError, MissingRecordError, RecursionLimitExceeded
from content_tree.logging_config import configure_logging
from content_tree.models.node import ContentTree

app = typer.Typer(help="Content tree: inspect pages and their flexible content elements.")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log warnings and errors"),
) -> None:
    configure_logging(verbose=verbose, quiet=quiet)


def _open_repository(export: Path | None) -> ExportRepository:
    """Load the export file, raising typer.Exit if there is none."""
    path = export or resolve_export_file()
    if path is None or not path.is_file():
        logger.error("Export file not found: {}", path or "no default location exists")
        raise typer.Exit(1)
    return ExportRepository.from_file(path)


def _build(table: str, uid: int, export: Path | None, depth_limit: int) -> ContentTree:
    repository = _open_repository(export)
    try:
        record = repository.require(table, uid)
    except MissingRecordError as e:
        logger.error("{}", e)
        raise typer.Exit(1) from e

    builder = NodeBuilder.from_repository(repository, max_depth=depth_limit)
    try:
        return build_tree(table, record, builder=builder)
    except RecursionLimitExceeded as e:
        logger.error("{}", e)
        raise typer.Exit(2) from e


ExportOption = Annotated[
    Path | None,
    typer.Option("--export", "-e", help="JSON export file with records and data structures"),
]
DepthLimitOption = Annotated[
    int,
    typer.Option("--depth-limit", help="Abort when relations nest deeper than this"),
]


@app.command()
def build(
    table: str = typer.Argument(..., help="Table of the root record (pages or tt_content)"),
    uid: int = typer.Argument(..., help="Uid of the root record"),
    export: ExportOption = None,
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
    max_depth: Annotated[
        int | None,
        typer.Option("--max-depth", "-m", help="Max depth levels to render"),
    ] = None,
    depth_limit: DepthLimitOption = MAX_TREE_DEPTH,
) -> None:
    """Build and print the content tree of a record."""
    tree = _build(table, uid, export, depth_limit)
    if output_json:
        typer.echo(json.dumps(tree_to_dict(tree), indent=2))
    else:
        typer.echo(render_tree_as_text(tree.node, max_depth=max_depth), nl=False)


@app.command()
def usage(
    table: str = typer.Argument(..., help="Table of the root record (pages or tt_content)"),
    uid: int = typer.Argument(..., help="Uid of the root record"),
    export: ExportOption = None,
    depth_limit: DepthLimitOption = MAX_TREE_DEPTH,
) -> None:
    """Show how often each record is used in the content tree."""
    tree = _build(table, uid, export, depth_limit)
    for table_name, counts in tree.usage.items():
        for record_uid, count in counts.items():
            marker = "  (reused)" if count > 1 else ""
            typer.echo(f"  {table_name}:{record_uid}  {count}x{marker}")

    reused = tree.reused_records()
    typer.echo(f"\n{len(reused)} records used more than once")


@app.command()
def pointer(
    value: str = typer.Argument(..., help="Pointer string, e.g. pages:1:sDEF:lDEF:content:vDEF:1"),
) -> None:
    """Decode a pointer string into its parts."""
    try:
        decoded = decode(value)
    except InvalidPointerError as e:
        typer.echo(str(e))
        raise typer.Exit(1) from e

    for name, part in asdict(decoded).items():
        if part is not None:
            typer.echo(f"{name}: {part}")
