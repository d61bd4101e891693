"""Document rendering CLI command."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import click
import yaml
from rich.console import Console

from halkit.cli.main import Context, pass_context
from halkit.core.exceptions import HalError

console = Console()


@click.command()
@click.argument("document", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--compact", is_flag=True, help="Print JSON on a single line")
@pass_context
def render(ctx: Context, document: Path, compact: bool) -> None:
    """
    Render a resource description as a hypermedia document.

    DOCUMENT is a YAML or JSON file holding either an ``entity`` mapping
    or a ``collection`` list plus routing keys.

    Examples:

        # entity.yml
        #   route: user
        #   entity: {id: 42, name: Jane}
        halkit render entity.yml

        # users.yml
        #   route: users
        #   entity_route: user
        #   paginate: true
        #   page: 2
        #   page_size: 10
        #   collection: [{id: 1}, {id: 2}]
        halkit render users.yml --compact
    """
    from halkit.core.metadata import MetadataMap
    from halkit.core.problems import ApiProblem
    from halkit.core.renderer import HalRenderer

    with document.open() as f:
        doc: dict[str, Any] = yaml.safe_load(f) or {}

    metadata_map = ctx.metadata_map if ctx.has_metadata else MetadataMap()
    renderer = HalRenderer(ctx.url_builder, metadata_map)

    try:
        resource = _build_resource(renderer, doc)
        result = renderer.render(resource)
    except HalError as e:
        raise click.ClickException(str(e)) from e

    if isinstance(result, ApiProblem):
        _emit(result.to_dict(), compact)
        raise SystemExit(1)
    _emit(result, compact)


def _build_resource(renderer: Any, doc: dict[str, Any]) -> Any:
    from halkit.core.resources import Paginator

    route = doc.get("route")
    identifier_name = doc.get("identifier_name", "id")
    if "entity" in doc:
        if not route:
            raise click.ClickException("An entity document requires a 'route'")
        return renderer.create_entity(
            doc["entity"],
            route,
            doc.get("route_identifier_name", identifier_name),
            doc.get("entity_identifier_name", identifier_name),
        )

    if "collection" in doc:
        items = doc["collection"]
        if not isinstance(items, list):
            raise click.ClickException("'collection' must be a list")
        if doc.get("paginate"):
            items = Paginator(items)
        collection = renderer.create_collection(items, route)
        collection.entity_route = doc.get("entity_route")
        collection.collection_name = doc.get("collection_name", collection.collection_name)
        collection.route_identifier_name = doc.get("route_identifier_name", identifier_name)
        collection.entity_identifier_name = doc.get("entity_identifier_name", identifier_name)
        collection.page = doc.get("page", 1)
        collection.page_size = doc.get("page_size", collection.page_size)
        return collection

    raise click.ClickException("Document must contain an 'entity' or a 'collection'")


def _emit(payload: dict[str, Any], compact: bool) -> None:
    if compact:
        click.echo(json.dumps(payload, default=str))
    else:
        console.print_json(data=payload, default=str)
