"""Render entities and collections into hypermedia documents."""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Sized

from halkit.core.exceptions import CircularReferenceError
from halkit.core.factory import ResourceFactory
from halkit.core.hydrators import HydratorManager
from halkit.core.injectors import PaginationInjector, SelfLinkInjector
from halkit.core.links import Link, LinkCollection, LinkCollectionAware
from halkit.core.metadata import MetadataMap
from halkit.core.problems import PaginationProblem
from halkit.core.resources import Collection, Entity, Paginator
from halkit.core.urls import LinkCollectionExtractor, LinkExtractor, UrlBuilder

logger = logging.getLogger(__name__)

LINKS_KEY = "links"
EMBEDDED_KEY = "embedded"


@dataclass
class RenderContext:
    """
    Traversal state of a single render call.

    Holds the identities of payloads currently being rendered. A fresh
    context is created for every top-level render unless one is passed in.
    """

    identity_stack: dict[int, str] = field(default_factory=dict)

    def enter(self, obj: Any) -> int:
        """Push an object's identity, raising if it is already in progress."""
        key = id(obj)
        if key in self.identity_stack:
            # Cleared so a caller that catches the error can reuse the context
            self.identity_stack.clear()
            logger.warning("Circular reference detected in %s", type(obj).__name__)
            raise CircularReferenceError(
                f"Circular reference detected in '{type(obj).__name__}'. "
                "Either set a 'max_depth' metadata attribute or remove the reference"
            )
        self.identity_stack[key] = type(obj).__name__
        return key

    def leave(self, key: int) -> None:
        self.identity_stack.pop(key, None)

    def reset(self) -> None:
        self.identity_stack.clear()


@dataclass
class RenderHooks:
    """
    Extension points consulted while rendering.

    Attributes:
        item_transform: ``(item, collection) -> item``; may replace a
            collection item before it is rendered
        identifier_resolver: ``(entity, identifier_name) -> id | None``;
            tried after the built-in identifier strategies
        entity_rendered: ``(payload, entity) -> None``; may mutate the
            rendered entity payload
        collection_rendered: ``(payload, collection) -> None``; may mutate
            the rendered collection payload
    """

    item_transform: Callable[[Any, Collection], Any] | None = None
    identifier_resolver: Callable[[Any, str], Any] | None = None
    entity_rendered: Callable[[dict[str, Any], Entity], None] | None = None
    collection_rendered: Callable[[dict[str, Any], Collection], None] | None = None


# --- Identifier resolution ---


def _from_mapping_key(entity: Any, fields: Mapping[str, Any] | None, name: str) -> Any:
    source = fields if fields is not None else entity
    if isinstance(source, Mapping):
        return source.get(name)
    return None


def _from_property(entity: Any, fields: Mapping[str, Any] | None, name: str) -> Any:
    if isinstance(entity, Mapping):
        return None
    value = getattr(entity, name, None)
    return None if callable(value) else value


def _from_accessor(entity: Any, fields: Mapping[str, Any] | None, name: str) -> Any:
    if isinstance(entity, Mapping):
        return None
    method = getattr(entity, f"get_{name}", None)
    if not callable(method):
        return None
    try:
        inspect.signature(method).bind()
    except (TypeError, ValueError):
        return None
    return method()


IDENTIFIER_STRATEGIES = (_from_mapping_key, _from_property, _from_accessor)


def _is_present(value: Any) -> bool:
    return value is not None and value is not False


def resolve_identifier(
    entity: Any,
    name: str = "id",
    override: Callable[[Any, str], Any] | None = None,
    fields: Mapping[str, Any] | None = None,
) -> Any:
    """
    Resolve an entity's identifier, or None when it has none.

    Tries, in order: the ``name`` key of ``fields`` (or of the entity when
    it is a mapping), a public ``name`` attribute, a ``get_<name>()``
    accessor, then ``override``. The first value that is neither None nor
    False wins, so ``0`` and ``""`` are valid identifiers.
    """
    for strategy in IDENTIFIER_STRATEGIES:
        value = strategy(entity, fields, name)
        if _is_present(value):
            return value
    if override is not None:
        value = override(entity, name)
        if _is_present(value):
            return value
    return None


class HalRenderer:
    """
    Renders Entity and Collection resources into nested dictionaries.

    The renderer itself holds only configuration; all traversal state
    lives in a RenderContext, so one renderer may serve concurrent calls.
    """

    def __init__(
        self,
        url_builder: UrlBuilder,
        metadata_map: MetadataMap | None = None,
        hydrators: HydratorManager | None = None,
        *,
        hooks: RenderHooks | None = None,
        render_embedded_entities: bool = True,
        render_collections: bool = True,
        links_key: str = LINKS_KEY,
        embedded_key: str = EMBEDDED_KEY,
        self_link_injector: SelfLinkInjector | None = None,
        pagination_injector: PaginationInjector | None = None,
    ) -> None:
        """
        Initialize the renderer.

        Args:
            url_builder: Assembles hrefs for route-based links
            metadata_map: Per-class rendering metadata
            hydrators: Field extraction; defaults to one bound to metadata_map
            hooks: Optional extension points
            render_embedded_entities: Render fields of entities built from metadata
            render_collections: Render fields of entities inside collections
            links_key: Key of the links section
            embedded_key: Key of the embedded section
        """
        self.metadata_map = metadata_map or MetadataMap()
        self.hydrators = hydrators or HydratorManager(self.metadata_map)
        self.resource_factory = ResourceFactory(self.hydrators)
        self.url_builder = url_builder
        self.link_extractor = LinkExtractor(url_builder)
        self.link_collection_extractor = LinkCollectionExtractor(self.link_extractor)
        self.hooks = hooks or RenderHooks()
        self.render_embedded_entities = render_embedded_entities
        self.render_collections = render_collections
        self.links_key = links_key
        self.embedded_key = embedded_key
        self.self_link_injector = self_link_injector or SelfLinkInjector()
        self.pagination_injector = pagination_injector or PaginationInjector()

    # --- Rendering ---

    def render(
        self, resource: Entity | Collection, context: RenderContext | None = None
    ) -> dict[str, Any] | PaginationProblem:
        """Render an Entity or a Collection."""
        if isinstance(resource, Collection):
            return self.render_collection(resource, context=context)
        return self.render_entity(resource, context=context)

    def render_entity(
        self,
        entity: Entity,
        render_entity: bool = True,
        depth: int = 0,
        max_depth: int | None = None,
        context: RenderContext | None = None,
    ) -> dict[str, Any]:
        """
        Render an entity with its links and embedded resources.

        Without a max depth (argument or metadata) the payload takes part
        in cycle detection; past the max depth, or when ``render_entity`` is
        false, only links are rendered.
        """
        if context is None:
            context = RenderContext()
        payload = entity.entity
        # Links found in fields are merged into a copy; the entity is left unchanged
        links = entity.links.copy()

        if max_depth is None and self.metadata_map.has(payload):
            max_depth = self.metadata_map.get(payload).max_depth

        identity = context.enter(payload) if max_depth is None else None
        try:
            if not render_entity or (max_depth is not None and depth > max_depth):
                data: dict[str, Any] = {}
            else:
                data = self.hydrators.extract(payload)

            embedded = self._resolve_fields(data, links, depth, max_depth, context)

            data[self.links_key] = self.from_link_collection(links)
            if embedded:
                data[self.embedded_key] = embedded
        finally:
            if identity is not None:
                context.leave(identity)

        if self.hooks.entity_rendered is not None:
            self.hooks.entity_rendered(data, entity)
        return data

    def render_collection(
        self,
        collection: Collection,
        depth: int = 0,
        max_depth: int | None = None,
        context: RenderContext | None = None,
    ) -> dict[str, Any] | PaginationProblem:
        """
        Render a collection with its links, embedded items and page counts.

        Returns a PaginationProblem, and renders nothing, when the
        requested page is out of range.
        """
        if context is None:
            context = RenderContext()
        items = collection.collection

        if isinstance(items, Paginator):
            problem = self.pagination_injector.inject(collection)
            if problem is not None:
                return problem

        if max_depth is None and self.metadata_map.has(items):
            max_depth = self.metadata_map.get(items).max_depth

        payload = dict(collection.attributes)
        payload[self.links_key] = self.from_resource(collection)
        payload[self.embedded_key] = {
            collection.collection_name: self.extract_collection(collection, depth, max_depth, context),
        }

        if isinstance(items, Paginator):
            payload["page_count"] = int(payload.get("page_count", items.page_count))
            payload["page_size"] = int(payload.get("page_size", collection.page_size))
            payload["total_items"] = int(payload.get("total_items", items.total_item_count))
            payload["page"] = collection.page if payload["page_count"] > 0 else 0
        elif isinstance(items, Sized):
            payload["total_items"] = int(payload.get("total_items", len(items)))

        if self.hooks.collection_rendered is not None:
            self.hooks.collection_rendered(payload, collection)
        return payload

    def extract_collection(
        self,
        collection: Collection,
        depth: int = 0,
        max_depth: int | None = None,
        context: RenderContext | None = None,
    ) -> list[dict[str, Any]]:
        """
        Render every item of a collection, in iteration order.

        Items do not add a depth level. Plain items get a self link from the
        collection's entity route when their identifier resolves; items
        without an identifier are rendered without one.
        """
        if context is None:
            context = RenderContext()
        rendered: list[dict[str, Any]] = []

        for item in collection.collection:
            if self.hooks.item_transform is not None:
                item = self.hooks.item_transform(item, collection)

            if self.metadata_map.has(item):
                item = self.resource_factory.create_entity_from_metadata(item, self.metadata_map.get(item))

            if isinstance(item, Entity):
                rendered.append(self.render_entity(item, self.render_collections, depth, max_depth, context))
                continue

            data = self.hydrators.extract(item)
            links = collection.entity_links.copy() if collection.entity_links is not None else LinkCollection()
            if isinstance(item, LinkCollectionAware) and isinstance(item.links, LinkCollection):
                links = links.merge(item.links)
            embedded = self._resolve_fields(data, links, depth, max_depth, context)

            item_id = resolve_identifier(
                item, collection.entity_identifier_name, self.hooks.identifier_resolver, fields=data
            )
            if item_id is not None and collection.entity_route:
                params = dict(collection.entity_route_params)
                params[collection.route_identifier_name] = item_id
                links.add(
                    Link.to_route("self", collection.entity_route, params, collection.entity_route_options),
                    overwrite=True,
                )
            elif item_id is None:
                logger.debug("No identifier for item in collection %s; rendering without self link",
                             collection.collection_name)

            if len(links) > 0:
                data[self.links_key] = self.from_link_collection(links)
            if embedded:
                data[self.embedded_key] = embedded
            rendered.append(data)

        return rendered

    def _resolve_fields(
        self,
        data: dict[str, Any],
        links: LinkCollection,
        depth: int,
        max_depth: int | None,
        context: RenderContext,
    ) -> dict[str, Any]:
        """
        Move resources out of a field map.

        Entities and collections are rendered one level deeper and returned
        as the embedded section; links are merged into ``links``. Handled
        fields are removed from ``data``.
        """
        embedded: dict[str, Any] = {}
        for key, value in list(data.items()):
            if self.metadata_map.has(value):
                metadata = self.metadata_map.get(value)
                if metadata.is_collection:
                    value = self.resource_factory.create_collection_from_metadata(value, metadata)
                else:
                    value = self.resource_factory.create_entity_from_metadata(
                        value, metadata, self.render_embedded_entities
                    )

            if isinstance(value, Entity):
                embedded[str(key)] = self.render_entity(value, True, depth + 1, max_depth, context)
                del data[key]
            elif isinstance(value, Collection):
                embedded[str(key)] = self.extract_collection(value, depth + 1, max_depth, context)
                del data[key]
            elif isinstance(value, Link):
                links.idempotent_add(value)
                del data[key]
            elif isinstance(value, LinkCollection):
                for link in value:
                    links.idempotent_add(link)
                del data[key]
        return embedded

    # --- Resource creation ---

    def create_entity(
        self,
        entity: Any,
        route: str,
        route_identifier_name: str = "id",
        entity_identifier_name: str = "id",
    ) -> Entity:
        """Wrap an object in an Entity (via metadata when registered) with a self link."""
        metadata = self.metadata_map.get(entity) if self.metadata_map.has(entity) else None
        if metadata is not None:
            resource = self.resource_factory.create_entity_from_metadata(entity, metadata)
        elif not isinstance(entity, Entity):
            entity_id = resolve_identifier(entity, entity_identifier_name, self.hooks.identifier_resolver)
            resource = Entity(entity, entity_id)
        else:
            resource = entity

        if metadata is None or metadata.force_self_link:
            self.inject_self_link(resource, route, route_identifier_name)
        return resource

    def create_collection(self, collection: Any, route: str | None = None) -> Collection:
        """Wrap a sequence or paginator in a Collection (via metadata when registered)."""
        if self.metadata_map.has(collection):
            collection = self.resource_factory.create_collection_from_metadata(
                collection, self.metadata_map.get(collection)
            )
        if not isinstance(collection, Collection):
            collection = Collection(collection, collection_route=route)

        if route is not None:
            if collection.collection_route is None:
                collection.collection_route = route
            self.inject_self_link(collection, route)
        return collection

    def create_entity_from_metadata(self, obj: Any, render_embedded_entities: bool = True) -> Entity:
        return self.resource_factory.create_entity_from_metadata(
            obj, self.metadata_map.get(obj), render_embedded_entities
        )

    def create_collection_from_metadata(self, obj: Any) -> Collection:
        return self.resource_factory.create_collection_from_metadata(obj, self.metadata_map.get(obj))

    def create_link(self, route: str, id: Any = None, entity: Any = None) -> str:
        """
        Build an href for a route.

        ``id=False`` disables reuse of the matched request params. When no
        id is given it is resolved from ``entity``, if one is passed.
        """
        params: dict[str, Any] = {}
        reuse_matched_params = True
        if id is None and entity is not None:
            id = resolve_identifier(entity, override=self.hooks.identifier_resolver)
        if id is False:
            reuse_matched_params = False
        elif id is not None:
            params["id"] = id
        return self.url_builder.build(route, params, {}, reuse_matched_params)

    def inject_self_link(self, resource: LinkCollectionAware, route: str, route_identifier: str = "id") -> None:
        self.self_link_injector.inject(resource, route, route_identifier)

    # --- Link rendering ---

    def from_link(self, link: Link) -> dict[str, Any]:
        return self.link_extractor.extract(link)

    def from_link_collection(self, collection: LinkCollection) -> dict[str, Any]:
        return self.link_collection_extractor.extract(collection)

    def from_resource(self, resource: LinkCollectionAware) -> dict[str, Any]:
        return self.from_link_collection(resource.links)
