"""Resource wrappers: entities, collections and paginators."""

from __future__ import annotations

import math
from typing import Any, Iterable, Iterator, Mapping, Sequence

from halkit.core.exceptions import InvalidCollectionError, InvalidEntityError, InvalidPageError
from halkit.core.links import LinkCollection

# Values that cannot be rendered as an entity payload
_SCALAR_TYPES = (str, bytes, bytearray, int, float, complex, bool)


def _coerce_int(value: Any, label: str) -> int:
    """Accept ints and numeric strings; reject bools and everything else."""
    if isinstance(value, bool):
        raise InvalidPageError(f"{label} must be an integer; received bool")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.lstrip("-").isdigit():
            return int(text)
    raise InvalidPageError(f"{label} must be an integer; received {type(value).__name__}")


class Paginator:
    """
    In-memory paginator over a sized sequence.

    Iterating a paginator yields only the items of the current page.
    A page size below 1 puts every item on a single page.
    """

    def __init__(
        self,
        items: Sequence[Any],
        item_count_per_page: int = 10,
        current_page_number: int = 1,
    ) -> None:
        if isinstance(items, (str, bytes, Mapping)) or not isinstance(items, Sequence):
            raise InvalidCollectionError(
                f"Paginator expects a sequence; received {type(items).__name__}"
            )
        self._items = items
        self._item_count_per_page = 10
        self._current_page_number = 1
        self.item_count_per_page = item_count_per_page
        self.current_page_number = current_page_number

    @property
    def item_count_per_page(self) -> int:
        return self._item_count_per_page

    @item_count_per_page.setter
    def item_count_per_page(self, value: int) -> None:
        value = _coerce_int(value, "Item count per page")
        self._item_count_per_page = value if value >= 1 else self.total_item_count

    @property
    def current_page_number(self) -> int:
        return self._current_page_number

    @current_page_number.setter
    def current_page_number(self, value: int) -> None:
        self._current_page_number = _coerce_int(value, "Page number")

    @property
    def total_item_count(self) -> int:
        return len(self._items)

    @property
    def page_count(self) -> int:
        if self._item_count_per_page < 1:
            return 0
        return math.ceil(self.total_item_count / self._item_count_per_page)

    @property
    def current_items(self) -> list[Any]:
        """Items of the current page (page number clamped to the valid range)."""
        page_count = self.page_count
        if page_count == 0:
            return []
        page = min(max(self._current_page_number, 1), page_count)
        start = (page - 1) * self._item_count_per_page
        return list(self._items[start : start + self._item_count_per_page])

    def __iter__(self) -> Iterator[Any]:
        return iter(self.current_items)

    def __repr__(self) -> str:
        return (
            f"Paginator(page={self._current_page_number}/{self.page_count}, "
            f"per_page={self._item_count_per_page}, total={self.total_item_count})"
        )


class Entity:
    """A domain object (or mapping) plus its identifier and links."""

    def __init__(self, entity: Any, id: Any = None) -> None:
        """
        Initialize an entity.

        Args:
            entity: Domain object or mapping to render
            id: Resolved identifier (None if the entity has none)
        """
        if entity is None or isinstance(entity, _SCALAR_TYPES):
            raise InvalidEntityError(
                f"Entity expects an object or mapping; received {type(entity).__name__}"
            )
        self._entity = entity
        self._id = id
        self._links = LinkCollection()

    @property
    def entity(self) -> Any:
        return self._entity

    @property
    def id(self) -> Any:
        return self._id

    @property
    def links(self) -> LinkCollection:
        return self._links

    @links.setter
    def links(self, links: LinkCollection) -> None:
        if not isinstance(links, LinkCollection):
            raise TypeError(f"Expected a LinkCollection; received {type(links).__name__}")
        self._links = links

    def __repr__(self) -> str:
        return f"Entity({type(self._entity).__name__}, id={self._id!r})"


class Collection:
    """
    A sequence or paginator of items rendered as an embedded list.

    ``entity_route`` and friends build self links for items;
    ``collection_route`` and friends build the collection's own self and
    pagination links.
    """

    def __init__(
        self,
        collection: Iterable[Any] | Paginator,
        entity_route: str | None = None,
        entity_route_params: Mapping[str, Any] | None = None,
        entity_route_options: Mapping[str, Any] | None = None,
        *,
        collection_name: str = "items",
        collection_route: str | None = None,
        collection_route_params: Mapping[str, Any] | None = None,
        collection_route_options: Mapping[str, Any] | None = None,
        route_identifier_name: str = "id",
        entity_identifier_name: str = "id",
        page: int = 1,
        page_size: int = 30,
        attributes: Mapping[str, Any] | None = None,
    ) -> None:
        if not isinstance(collection, Paginator) and (
            isinstance(collection, (str, bytes, Mapping)) or not isinstance(collection, Iterable)
        ):
            raise InvalidCollectionError(
                f"Collection expects a list, iterable or Paginator; received {type(collection).__name__}"
            )
        self._collection = collection
        self.entity_route = entity_route
        self.entity_route_params = dict(entity_route_params or {})
        self.entity_route_options = dict(entity_route_options or {})
        self.collection_name = collection_name
        self.collection_route = collection_route
        self.collection_route_params = dict(collection_route_params or {})
        self.collection_route_options = dict(collection_route_options or {})
        self.route_identifier_name = route_identifier_name
        self.entity_identifier_name = entity_identifier_name
        self.attributes = dict(attributes or {})
        self.entity_links: LinkCollection | None = None
        self._page = 1
        self._page_size = 30
        self.page = page
        self.page_size = page_size
        self._links = LinkCollection()

    @property
    def collection(self) -> Iterable[Any] | Paginator:
        return self._collection

    @property
    def is_paginated(self) -> bool:
        return isinstance(self._collection, Paginator)

    @property
    def page(self) -> int:
        return self._page

    @page.setter
    def page(self, value: int) -> None:
        page = _coerce_int(value, "Page")
        if page < 1:
            raise InvalidPageError(f"Page must be a positive integer; received {page}")
        self._page = page

    @property
    def page_size(self) -> int:
        """Items per page; -1 disables pagination."""
        return self._page_size

    @page_size.setter
    def page_size(self, value: int) -> None:
        size = _coerce_int(value, "Page size")
        if size < 1 and size != -1:
            raise InvalidPageError(
                f"Page size must be a positive integer or -1 (to disable pagination); received {size}"
            )
        self._page_size = size

    @property
    def links(self) -> LinkCollection:
        return self._links

    @links.setter
    def links(self, links: LinkCollection) -> None:
        if not isinstance(links, LinkCollection):
            raise TypeError(f"Expected a LinkCollection; received {type(links).__name__}")
        self._links = links

    def __repr__(self) -> str:
        return f"Collection({self.collection_name}, route={self.collection_route}, page={self._page})"
