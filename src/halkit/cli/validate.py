"""Validation CLI command."""

from __future__ import annotations

import click
from rich.console import Console

from halkit.cli.main import Context, pass_context
from halkit.core.exceptions import HalError

console = Console()


@click.command()
@click.option(
    "--strict",
    is_flag=True,
    help="Fail on warnings",
)
@pass_context
def validate(ctx: Context, strict: bool) -> None:
    """
    Validate metadata and route declarations.

    Checks schema compliance and that every route referenced by
    metadata exists in the routes file.

    Examples:

        # Basic validation
        halkit validate

        # Strict validation
        halkit -m config/metadata.yml -r config/routes.yml validate --strict
    """
    errors: list[str] = []
    warnings: list[str] = []
    metadata_map = None
    url_builder = None

    # Load and validate metadata
    console.print("[bold]Validating metadata...[/bold]")
    try:
        metadata_map = ctx.metadata_map
        console.print(f"  [green]✓[/green] Metadata loaded: {len(metadata_map)} classes")
    except (click.ClickException, HalError) as e:
        message = e.message if isinstance(e, click.ClickException) else str(e)
        errors.append(f"Metadata validation failed: {message}")
        console.print(f"  [red]✗[/red] Metadata validation failed: {message}")

    # Load and validate routes
    console.print("[bold]Validating routes...[/bold]")
    try:
        url_builder = ctx.url_builder
        console.print(f"  [green]✓[/green] Routes loaded: {len(url_builder.routes)} routes")
    except (click.ClickException, HalError) as e:
        message = e.message if isinstance(e, click.ClickException) else str(e)
        errors.append(f"Routes validation failed: {message}")
        console.print(f"  [red]✗[/red] Routes validation failed: {message}")

    # Check route references
    if metadata_map is not None and url_builder is not None and len(metadata_map) > 0:
        console.print("[bold]Checking route references...[/bold]")
        reference_errors = 0
        for metadata in metadata_map:
            name = metadata.cls.__qualname__
            referenced: list[tuple[str, str]] = []
            if metadata.route:
                referenced.append(("route", metadata.route))
            if metadata.entity_route and metadata.entity_route != metadata.url:
                referenced.append(("entity route", metadata.entity_route))
            for link in metadata.links:
                if link.route is not None:
                    referenced.append((f"link '{link.rel}'", link.route.name))

            for label, route in referenced:
                if not url_builder.has_route(route):
                    reference_errors += 1
                    errors.append(f"{name}: {label} not found: {route}")
                    console.print(f"  [red]✗[/red] {name}: {label} not found: {route}")

            if metadata.force_self_link and not (metadata.has_route or metadata.has_url):
                warnings.append(f"{name}: force_self_link is set but no route or url is declared")
                console.print(f"  [yellow]![/yellow] {name}: self link cannot be built")

        if not reference_errors:
            console.print("  [green]✓[/green] All route references valid")

    # Summary
    console.print("\n[bold]Validation Summary[/bold]")
    console.print(f"  Errors: {len(errors)}")
    console.print(f"  Warnings: {len(warnings)}")

    if errors:
        console.print("\n[red bold]Validation failed[/red bold]")
        for err in errors:
            console.print(f"  [red]•[/red] {err}")
        raise SystemExit(1)

    if warnings and strict:
        console.print("\n[yellow bold]Validation failed (strict mode)[/yellow bold]")
        for warn in warnings:
            console.print(f"  [yellow]•[/yellow] {warn}")
        raise SystemExit(1)

    if warnings:
        console.print("\n[yellow]Warnings:[/yellow]")
        for warn in warnings:
            console.print(f"  [yellow]•[/yellow] {warn}")

    console.print("\n[green bold]Validation passed[/green bold]")
