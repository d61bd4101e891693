"""Link value types and relation-keyed link collections."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Mapping, Protocol, Union, runtime_checkable

from pydantic import ValidationError

from halkit.core.exceptions import InvalidLinkError
from halkit.core.schema import LinkSchema


@dataclass(frozen=True)
class LiteralAddress:
    """A fully assembled href."""

    href: str


@dataclass(frozen=True)
class RoutedAddress:
    """A route name plus the params/options needed to assemble it."""

    route: str
    params: Mapping[str, Any] = field(default_factory=dict)
    options: Mapping[str, Any] = field(default_factory=dict)


Address = Union[LiteralAddress, RoutedAddress]


class Link:
    """
    A named relation pointing at a literal href or a route.

    Links are immutable: use ``with_route_options`` and friends to derive
    a modified copy. Two links are equal when relation and address match;
    ``props`` do not take part in equality.
    """

    def __init__(self, relation: str, address: Address, props: Mapping[str, Any] | None = None) -> None:
        if not isinstance(relation, str) or not relation:
            raise InvalidLinkError(f"Link relation must be a non-empty string; received {relation!r}")
        if not isinstance(address, (LiteralAddress, RoutedAddress)):
            raise InvalidLinkError(f"Link '{relation}' requires either a url or a route")
        if isinstance(address, RoutedAddress) and not address.route:
            raise InvalidLinkError(f"Link '{relation}' has an empty route name")
        self._relation = relation
        self._address = address
        self._props = dict(props or {})

    @classmethod
    def to_url(cls, relation: str, href: str, props: Mapping[str, Any] | None = None) -> Link:
        """Create a link with a literal href."""
        return cls(relation, LiteralAddress(href), props)

    @classmethod
    def to_route(
        cls,
        relation: str,
        route: str,
        params: Mapping[str, Any] | None = None,
        options: Mapping[str, Any] | None = None,
        props: Mapping[str, Any] | None = None,
    ) -> Link:
        """Create a route-based link."""
        return cls(relation, RoutedAddress(route, dict(params or {}), dict(options or {})), props)

    @classmethod
    def factory(cls, spec: Mapping[str, Any] | LinkSchema) -> Link:
        """
        Create a link from a declarative definition.

        Examples:
            Link.factory({"rel": "docs", "url": "https://example.com/docs"})
            Link.factory({"rel": "owner", "route": {"name": "user", "params": {"id": 1}}})
        """
        if not isinstance(spec, LinkSchema):
            try:
                spec = LinkSchema(**spec)
            except ValidationError as e:
                raise InvalidLinkError(f"Invalid link definition: {e}") from e
        if spec.url is not None:
            return cls.to_url(spec.rel, spec.url, spec.props)
        if spec.route is None:
            raise InvalidLinkError(f"Link '{spec.rel}' requires either a url or a route")
        return cls.to_route(spec.rel, spec.route.name, spec.route.params, spec.route.options, spec.props)

    @property
    def relation(self) -> str:
        return self._relation

    @property
    def address(self) -> Address:
        return self._address

    @property
    def props(self) -> dict[str, Any]:
        """Extra attributes rendered beside ``href``."""
        return dict(self._props)

    @property
    def has_url(self) -> bool:
        return isinstance(self._address, LiteralAddress)

    @property
    def href(self) -> str | None:
        if isinstance(self._address, LiteralAddress):
            return self._address.href
        return None

    @property
    def route(self) -> str | None:
        if isinstance(self._address, RoutedAddress):
            return self._address.route
        return None

    @property
    def route_params(self) -> dict[str, Any]:
        if isinstance(self._address, RoutedAddress):
            return dict(self._address.params)
        return {}

    @property
    def route_options(self) -> dict[str, Any]:
        if isinstance(self._address, RoutedAddress):
            return dict(self._address.options)
        return {}

    @property
    def is_complete(self) -> bool:
        """True when the link carries a usable href or route name."""
        return bool(self.href or self.route)

    def with_route_options(self, options: Mapping[str, Any]) -> Link:
        """Return a copy of a route-based link with replaced route options."""
        if not isinstance(self._address, RoutedAddress):
            raise InvalidLinkError(f"Link '{self._relation}' is not route-based")
        address = RoutedAddress(self._address.route, dict(self._address.params), dict(options))
        return Link(self._relation, address, self._props)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Link):
            return NotImplemented
        return self._relation == other._relation and self._address == other._address

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        target = self.href if self.has_url else f"route={self.route}"
        return f"Link({self._relation}, {target})"


class LinkCollection:
    """
    Ordered, relation-keyed multiset of links.

    Relations keep their first-insertion order; links within a relation
    keep their insertion order.
    """

    def __init__(self, links: Iterable[Link] | None = None) -> None:
        self._links: dict[str, list[Link]] = {}
        for link in links or []:
            self.add(link)

    def add(self, link: Link, overwrite: bool = False) -> LinkCollection:
        """Append a link; with ``overwrite`` replace every link of its relation."""
        if not isinstance(link, Link):
            raise InvalidLinkError(f"Expected a Link; received {type(link).__name__}")
        if overwrite:
            self._links[link.relation] = [link]
        else:
            self._links.setdefault(link.relation, []).append(link)
        return self

    def idempotent_add(self, link: Link) -> LinkCollection:
        """Append a link unless an equal link is already present."""
        if not isinstance(link, Link):
            raise InvalidLinkError(f"Expected a Link; received {type(link).__name__}")
        if link in self._links.get(link.relation, []):
            return self
        return self.add(link)

    def get(self, relation: str) -> list[Link]:
        """Get all links for a relation (empty if none)."""
        return list(self._links.get(relation, []))

    def has(self, relation: str) -> bool:
        return relation in self._links

    def remove(self, relation: str) -> LinkCollection:
        """Drop all links for a relation."""
        self._links.pop(relation, None)
        return self

    def relations(self) -> list[str]:
        return list(self._links)

    def items(self) -> Iterator[tuple[str, list[Link]]]:
        """Iterate ``(relation, links)`` pairs in insertion order."""
        for relation, links in self._links.items():
            yield relation, list(links)

    def copy(self) -> LinkCollection:
        clone = LinkCollection()
        clone._links = {relation: list(links) for relation, links in self._links.items()}
        return clone

    def merge(self, other: LinkCollection) -> LinkCollection:
        """Return a new collection: this one, then ``other``'s links added idempotently."""
        merged = self.copy()
        for link in other:
            merged.idempotent_add(link)
        return merged

    def __iter__(self) -> Iterator[Link]:
        for links in self._links.values():
            yield from links

    def __len__(self) -> int:
        return len(self._links)

    def __contains__(self, relation: object) -> bool:
        return relation in self._links

    def __repr__(self) -> str:
        return f"LinkCollection({', '.join(self._links)})"


@runtime_checkable
class LinkCollectionAware(Protocol):
    """Anything carrying its own link collection."""

    @property
    def links(self) -> LinkCollection: ...
