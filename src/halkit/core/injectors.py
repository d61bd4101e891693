"""Injectors adding self and pagination links to resources."""

from __future__ import annotations

import logging
from typing import Any

from halkit.core.links import Link, LinkCollectionAware
from halkit.core.problems import PaginationProblem
from halkit.core.resources import Collection, Entity, Paginator

logger = logging.getLogger(__name__)

PAGINATION_RELATIONS = ("self", "first", "prev", "next", "last")


class SelfLinkInjector:
    """Adds a route-based "self" link unless one is already present."""

    def inject(self, resource: LinkCollectionAware, route: str, route_identifier: str = "id") -> None:
        links = resource.links
        if links.has("self"):
            return
        links.add(self.create_self_link(resource, route, route_identifier))

    def create_self_link(self, resource: Any, route: str, route_identifier: str = "id") -> Link:
        if isinstance(resource, Collection):
            return Link.to_route(
                "self", route, resource.collection_route_params, resource.collection_route_options
            )
        params = {}
        if isinstance(resource, Entity) and resource.id is not None:
            params[route_identifier] = resource.id
        return Link.to_route("self", route, params)


class PaginationInjector:
    """
    Adds first/prev/self/next/last links to a paginated collection.

    Links use the collection route, params and options, with
    ``options["query"]["page"]`` set per relation.
    """

    def inject(self, collection: Collection) -> PaginationProblem | None:
        """
        Configure the paginator and inject pagination links.

        Returns a PaginationProblem when the requested page is past the
        last page; nothing is injected in that case. Links from an earlier
        injection are replaced, so injecting twice gives the same link set.
        """
        paginator = collection.collection
        if not isinstance(paginator, Paginator):
            return None

        # A page size of -1 puts every item on a single page
        paginator.item_count_per_page = collection.page_size
        paginator.current_page_number = collection.page
        if collection.page_size == -1:
            logger.debug("Pagination disabled for collection %s", collection.collection_name)
            return None

        page = collection.page
        page_count = paginator.page_count
        if page_count > 0 and page > page_count:
            logger.warning(
                "Requested page %d of collection %s exceeds page count %d",
                page,
                collection.collection_name,
                page_count,
            )
            return PaginationProblem(page=page, page_count=page_count)
        if not collection.collection_route:
            logger.debug("Collection %s has no route; skipping pagination links", collection.collection_name)
            return None

        for relation in PAGINATION_RELATIONS:
            collection.links.remove(relation)
        self._add(collection, "self", page)
        if page_count == 0:
            return None

        logger.debug("Injecting pagination links: page %d of %d", page, page_count)
        self._add(collection, "first", 1)
        if page > 1:
            self._add(collection, "prev", page - 1)
        if page < page_count:
            self._add(collection, "next", page + 1)
        self._add(collection, "last", page_count)
        return None

    def create_pagination_link(self, relation: str, collection: Collection, page: int) -> Link:
        options = dict(collection.collection_route_options)
        query = dict(options.get("query") or {})
        query["page"] = page
        options["query"] = query
        return Link.to_route(relation, collection.collection_route or "", collection.collection_route_params, options)

    def _add(self, collection: Collection, relation: str, page: int) -> None:
        collection.links.add(self.create_pagination_link(relation, collection, page), overwrite=True)
