"""Builds entities and collections from domain objects and their metadata."""

from __future__ import annotations

import re
from typing import Any, Mapping, Sequence

from halkit.core.exceptions import EntityIdentifierError, InvalidMetadataError
from halkit.core.hydrators import HydratorManager
from halkit.core.links import Link, LinkCollection
from halkit.core.metadata import Metadata
from halkit.core.resources import Collection, Entity, Paginator

# A route param of the exact form "{field}" is replaced by that field's value
_FIELD_REFERENCE = re.compile(r"^\{(\w+)\}$")


class ResourceFactory:
    """Creates Entity and Collection resources driven by metadata."""

    def __init__(self, hydrators: HydratorManager) -> None:
        self.hydrators = hydrators

    def create_entity_from_metadata(
        self, obj: Any, metadata: Metadata, render_embedded_entities: bool = True
    ) -> Entity:
        """
        Wrap a domain object in an Entity.

        The identifier is read from the extracted field named by
        ``metadata.entity_identifier_name``. Metadata links are added, then
        a self link when ``force_self_link`` is set and none exists yet.
        """
        data = self.hydrators.extract(obj)
        identifier_name = metadata.entity_identifier_name
        if identifier_name and identifier_name not in data:
            raise EntityIdentifierError(
                f"Unable to determine entity identifier for object of type "
                f"{type(obj).__name__}; no field matching {identifier_name!r}"
            )
        entity_id = data[identifier_name] if identifier_name else None

        entity = Entity(obj if render_embedded_entities else {}, entity_id)
        links = entity.links
        self.marshal_metadata_links(metadata, obj, data, links)
        if metadata.force_self_link and not links.has("self"):
            links.add(
                self.marshal_link_from_metadata(
                    metadata, obj, data, entity_id, metadata.route_identifier_name
                )
            )
        return entity

    def create_collection_from_metadata(self, obj: Any, metadata: Metadata) -> Collection:
        """Wrap a collection-like object, copying routing fields from metadata."""
        fields = {} if isinstance(obj, (Sequence, Paginator)) else self.hydrators.extract(obj)
        collection = Collection(
            obj,
            metadata.entity_route,
            collection_name=metadata.collection_name,
            collection_route=metadata.route,
            collection_route_params=self.resolve_params(metadata.route_params, obj, fields),
            collection_route_options=metadata.route_options,
            route_identifier_name=metadata.route_identifier_name,
            entity_identifier_name=metadata.entity_identifier_name or "id",
        )
        links = collection.links
        self.marshal_metadata_links(metadata, obj, fields, links)
        if metadata.force_self_link and not links.has("self") and (metadata.has_url or metadata.has_route):
            links.add(self.marshal_link_from_metadata(metadata, obj, fields))
        return collection

    def marshal_link_from_metadata(
        self,
        metadata: Metadata,
        obj: Any,
        fields: Mapping[str, Any] | None = None,
        entity_id: Any = None,
        route_identifier_name: str | None = None,
        relation: str = "self",
    ) -> Link:
        """Build a link from the metadata's url, or its route and params."""
        if metadata.url is not None:
            return Link.to_url(relation, metadata.url)
        if metadata.route is None:
            raise InvalidMetadataError(
                f"Unable to create a {relation} link for resource of type "
                f"{type(obj).__name__}; metadata does not contain a route or a url"
            )
        params = self.resolve_params(metadata.route_params, obj, fields or {})
        if route_identifier_name:
            params[route_identifier_name] = entity_id
        return Link.to_route(relation, metadata.route, params, metadata.route_options)

    def marshal_metadata_links(
        self, metadata: Metadata, obj: Any, fields: Mapping[str, Any], links: LinkCollection
    ) -> None:
        """Add the metadata's extra links, resolving route params against the object."""
        for spec in metadata.links:
            if spec.route is not None:
                spec = spec.model_copy(
                    update={
                        "route": spec.route.model_copy(
                            update={"params": self.resolve_params(spec.route.params, obj, fields)}
                        )
                    }
                )
            links.add(Link.factory(spec))

    @staticmethod
    def resolve_params(params: Mapping[str, Any], obj: Any, fields: Mapping[str, Any]) -> dict[str, Any]:
        """Invoke callable params with the object and substitute ``"{field}"`` references."""
        resolved: dict[str, Any] = {}
        for key, value in params.items():
            if callable(value):
                value = value(obj)
            elif isinstance(value, str):
                match = _FIELD_REFERENCE.match(value)
                if match and match.group(1) in fields:
                    value = fields[match.group(1)]
            resolved[key] = value
        return resolved
