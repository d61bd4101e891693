"""Main CLI entry point for halkit."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.logging import RichHandler

from halkit import __version__

console = Console()

# Default paths (can be overridden)
DEFAULT_METADATA = "config/metadata.yml"
DEFAULT_ROUTES = "config/routes.yml"


class Context:
    """CLI context object passed to commands."""

    def __init__(self) -> None:
        self.metadata_path: Path | None = None
        self.routes_path: Path | None = None
        self.verbose: bool = False
        self._metadata_map: Any = None
        self._url_builder: Any = None

    @property
    def has_metadata(self) -> bool:
        return bool(self.metadata_path and self.metadata_path.exists())

    @property
    def metadata_map(self) -> Any:
        """Lazy-load metadata map."""
        if self._metadata_map is None:
            from halkit.core.metadata import MetadataMap

            if self.metadata_path is not None and self.metadata_path.exists():
                self._metadata_map = MetadataMap.load(self.metadata_path)
            else:
                raise click.ClickException(f"Metadata file not found: {self.metadata_path}")
        return self._metadata_map

    @property
    def url_builder(self) -> Any:
        """Lazy-load route URL builder."""
        if self._url_builder is None:
            from halkit.core.urls import RouteUrlBuilder

            if self.routes_path and self.routes_path.exists():
                self._url_builder = RouteUrlBuilder.load(self.routes_path)
            else:
                raise click.ClickException(f"Routes file not found: {self.routes_path}")
        return self._url_builder


pass_context = click.make_pass_decorator(Context, ensure=True)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@click.group()
@click.version_option(version=__version__, prog_name="halkit")
@click.option(
    "-m",
    "--metadata",
    type=click.Path(exists=False, path_type=Path),
    default=DEFAULT_METADATA,
    help="Path to metadata YAML file",
)
@click.option(
    "-r",
    "--routes",
    type=click.Path(exists=False, path_type=Path),
    default=DEFAULT_ROUTES,
    help="Path to routes YAML file",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@pass_context
def cli(ctx: Context, metadata: Path, routes: Path, verbose: bool) -> None:
    """
    Halkit - Hypermedia rendering for domain objects.

    Inspect and validate rendering metadata and render documents
    with links and embedded resources.
    """
    ctx.metadata_path = metadata
    ctx.routes_path = routes
    ctx.verbose = verbose
    configure_logging(verbose)


# Import and register subcommands
from halkit.cli.render import render
from halkit.cli.validate import validate

cli.add_command(render)
cli.add_command(validate)


@cli.command()
@pass_context
def info(ctx: Context) -> None:
    """Show registered metadata."""
    from rich.table import Table

    try:
        metadata_map = ctx.metadata_map
    except click.ClickException as e:
        console.print(f"[red]Error:[/red] {e}")
        return

    console.print(f"\n[bold]Halkit v{__version__}[/bold]\n")
    console.print("[bold cyan]Metadata Summary[/bold cyan]")
    console.print(f"  Path: {ctx.metadata_path}")
    console.print(f"  Classes: {len(metadata_map)}")
    console.print(f"  Collections: {len(metadata_map.collections())}")

    if len(metadata_map) == 0:
        return

    table = Table(title="Rendering Metadata")
    table.add_column("Class", style="cyan")
    table.add_column("Kind")
    table.add_column("Route")
    table.add_column("Identifier")
    table.add_column("Max depth", justify="right")
    table.add_column("Links", justify="right")

    for metadata in sorted(metadata_map, key=lambda m: m.cls.__qualname__):
        kind = "[magenta]collection[/magenta]" if metadata.is_collection else "entity"
        table.add_row(
            f"{metadata.cls.__module__}.{metadata.cls.__qualname__}",
            kind,
            metadata.route or metadata.url or "-",
            f"{metadata.entity_identifier_name or '-'} -> {metadata.route_identifier_name}",
            str(metadata.max_depth) if metadata.max_depth is not None else "-",
            str(len(metadata.links)),
        )

    console.print(table)


if __name__ == "__main__":
    cli()
