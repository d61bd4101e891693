"""Route-to-URL assembly and link rendering."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Mapping, Protocol
from urllib.parse import quote, quote_plus

import yaml
from pydantic import ValidationError

from halkit.core.exceptions import LinkRenderError, UrlBuildError
from halkit.core.links import Link, LinkCollection
from halkit.core.schema import RoutesSchema

_PLACEHOLDER = re.compile(r"\{(\w+)\}")
_OPTIONAL_SEGMENT = re.compile(r"\[([^\[\]]*)\]")


class UrlBuilder(Protocol):
    """Assembles a URL from a route name, params and options."""

    def build(
        self,
        route: str,
        params: Mapping[str, Any],
        options: Mapping[str, Any],
        reuse_matched_params: bool = True,
    ) -> str: ...


class RouteUrlBuilder:
    """
    URL builder backed by a table of path templates.

    Templates use ``{param}`` placeholders and ``[...]`` optional segments,
    e.g. ``/users[/{user_id}]``. Supported options are ``query`` (a
    mapping appended as a query string) and ``fragment``.
    """

    def __init__(
        self,
        routes: Mapping[str, str],
        base_url: str = "",
        matched_params: Mapping[str, Any] | None = None,
    ) -> None:
        """
        Initialize the builder.

        Args:
            routes: Route name -> path template
            base_url: Prefix for every generated URL (e.g. https://api.example.com)
            matched_params: Params of the current request, reused when asked to
        """
        self._routes = dict(routes)
        self.base_url = base_url.rstrip("/")
        self.matched_params = dict(matched_params or {})

    @classmethod
    def load(cls, path: str | Path) -> RouteUrlBuilder:
        """Load routes from YAML file."""
        path = Path(path)
        with path.open() as f:
            data = yaml.safe_load(f) or {}
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RouteUrlBuilder:
        """Create builder from ``{base_url, routes}`` dictionary."""
        try:
            schema = RoutesSchema(**data)
        except ValidationError as e:
            raise UrlBuildError(f"Invalid routes configuration: {e}") from e
        return cls(schema.routes, schema.base_url)

    @property
    def routes(self) -> dict[str, str]:
        return dict(self._routes)

    def has_route(self, route: str) -> bool:
        return route in self._routes

    def build(
        self,
        route: str,
        params: Mapping[str, Any] | None = None,
        options: Mapping[str, Any] | None = None,
        reuse_matched_params: bool = True,
    ) -> str:
        """
        Build a URL for a route.

        Examples:
            builder.build("user", {"id": 42})
            # Returns: /user/42

            builder.build("users", {}, {"query": {"page": 2}})
            # Returns: /users?page=2
        """
        template = self._routes.get(route)
        if template is None:
            raise UrlBuildError(f"Route not found: {route}")

        values = dict(self.matched_params) if reuse_matched_params else {}
        values.update(params or {})
        options = options or {}

        def optional(match: re.Match[str]) -> str:
            segment = match.group(1)
            names = _PLACEHOLDER.findall(segment)
            if names and all(values.get(n) is not None for n in names):
                return segment
            return ""

        def required(match: re.Match[str]) -> str:
            name = match.group(1)
            value = values.get(name)
            if value is None:
                raise UrlBuildError(f"Missing parameter '{name}' for route '{route}'")
            return quote(str(value), safe="")

        path = _PLACEHOLDER.sub(required, _OPTIONAL_SEGMENT.sub(optional, template))
        url = f"{self.base_url}{path}"

        query = options.get("query")
        if query:
            query_string = "&".join(
                f"{quote_plus(str(k))}={quote_plus(str(v))}" for k, v in query.items() if v is not None
            )
            if query_string:
                url = f"{url}?{query_string}"

        fragment = options.get("fragment")
        if fragment:
            url = f"{url}#{quote(str(fragment))}"

        return url


class LinkExtractor:
    """Renders a single link as ``{"href": ..., **props}``."""

    def __init__(self, url_builder: UrlBuilder) -> None:
        self.url_builder = url_builder

    def extract(self, link: Link) -> dict[str, Any]:
        if not isinstance(link, Link):
            raise LinkRenderError(f"Expected a Link; received {type(link).__name__}")

        representation = link.props
        href, route = link.href, link.route
        if href:
            representation["href"] = href
            return representation
        if not route:
            raise LinkRenderError(f"Link {link!r} is incomplete; it must contain a URL or a route")

        options = link.route_options
        reuse_matched_params = bool(options.pop("reuse_matched_params", True))
        representation["href"] = self.url_builder.build(route, link.route_params, options, reuse_matched_params)
        return representation


class LinkCollectionExtractor:
    """
    Renders a link collection.

    A relation holding one link renders as an object; a relation holding
    several renders as a list.
    """

    def __init__(self, link_extractor: LinkExtractor) -> None:
        self.link_extractor = link_extractor

    def extract(self, collection: LinkCollection) -> dict[str, Any]:
        links: dict[str, Any] = {}
        for relation, definitions in collection.items():
            if len(definitions) == 1:
                links[relation] = self.link_extractor.extract(definitions[0])
            else:
                links[relation] = [self.link_extractor.extract(link) for link in definitions]
        return links
