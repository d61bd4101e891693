"""Pydantic schemas for metadata, link and route configuration."""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Legacy and alternate option names accepted in metadata configuration
METADATA_OPTION_ALIASES: dict[str, str] = {
    "route_name": "route",
    "resource_route": "entity_route",
    "resource_route_name": "entity_route",
    "entity_route_name": "entity_route",
}

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def normalize_option_name(name: str) -> str:
    """Convert ``routeIdentifierName`` / ``route-identifier-name`` to snake_case."""
    snake = _CAMEL_BOUNDARY.sub("_", name).replace("-", "_").lower()
    return METADATA_OPTION_ALIASES.get(snake, snake)


class RouteSchema(BaseModel):
    """Route triple for a route-based link."""

    name: str
    params: dict[str, Any] = Field(default_factory=dict)
    options: dict[str, Any] = Field(default_factory=dict)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v:
            raise ValueError("Route name must be a non-empty string")
        return v


class LinkSchema(BaseModel):
    """
    Declarative link definition.

    Either ``url`` (a literal href) or ``route`` must be present. ``route``
    may be given as a bare route name or as a ``{name, params, options}``
    mapping. ``props`` are rendered beside ``href``.
    """

    rel: str
    url: str | None = None
    route: RouteSchema | None = None
    props: dict[str, Any] = Field(default_factory=dict)

    @field_validator("route", mode="before")
    @classmethod
    def normalize_route(cls, v: Any) -> Any:
        """Accept a plain route name as shorthand."""
        if isinstance(v, str):
            return {"name": v}
        return v

    @model_validator(mode="after")
    def validate_address(self) -> LinkSchema:
        if not self.rel:
            raise ValueError("Link relation must be a non-empty string")
        if self.url is None and self.route is None:
            raise ValueError(f"Link '{self.rel}' requires either a url or a route")
        return self


class MetadataSchema(BaseModel):
    """
    Schema for the rendering metadata of one domain class.

    Note: ``url`` takes precedence over ``route`` when building the self
    link, and ``entity_route`` falls back to ``route`` then ``url``.
    """

    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    # Routing
    route: str | None = None
    route_params: dict[str, Any] = Field(default_factory=dict)
    route_options: dict[str, Any] = Field(default_factory=dict)
    url: str | None = None
    entity_route: str | None = None

    # Identity
    route_identifier_name: str = "id"
    entity_identifier_name: str | None = "id"

    # Collections
    is_collection: bool = False
    collection_name: str = "items"

    # Rendering
    max_depth: int | None = Field(default=None, ge=0)
    force_self_link: bool = True
    links: list[LinkSchema] = Field(default_factory=list)
    hydrator: Any = None

    @model_validator(mode="before")
    @classmethod
    def normalize_options(cls, data: Any) -> Any:
        """Normalize option names and apply the legacy ``identifier_name``."""
        if not isinstance(data, dict):
            return data
        normalized: dict[str, Any] = {}
        legacy_identifier = None
        for key, value in data.items():
            name = normalize_option_name(str(key))
            if name == "class":
                continue
            if name == "identifier_name":
                legacy_identifier = value
                continue
            normalized[name] = value
        if isinstance(legacy_identifier, str):
            if not normalized.get("route_identifier_name"):
                normalized["route_identifier_name"] = legacy_identifier
            if not normalized.get("entity_identifier_name"):
                normalized["entity_identifier_name"] = legacy_identifier
        return normalized


class MetadataMapSchema(BaseModel):
    """
    Schema for a metadata file.

    Keys of ``metadata_map`` are dotted import paths of domain classes.
    """

    metadata_map: dict[str, MetadataSchema] = Field(default_factory=dict)

    @field_validator("metadata_map")
    @classmethod
    def validate_class_paths(cls, v: dict[str, MetadataSchema]) -> dict[str, MetadataSchema]:
        """Validate that all keys look like dotted import paths."""
        for key in v.keys():
            module, _, name = key.rpartition(".")
            if not module or not name:
                raise ValueError(f"Invalid class path for metadata key: {key}")
        return v


class RoutesSchema(BaseModel):
    """Schema for a routes file used by the route URL builder."""

    base_url: str = ""
    routes: dict[str, str] = Field(default_factory=dict)

    @field_validator("routes")
    @classmethod
    def validate_templates(cls, v: dict[str, str]) -> dict[str, str]:
        """Optional segments must be balanced and not nested."""
        for name, template in v.items():
            depth = 0
            for char in template:
                if char == "[":
                    depth += 1
                elif char == "]":
                    depth -= 1
                if depth not in (0, 1):
                    raise ValueError(f"Unbalanced optional segment in route '{name}': {template}")
            if depth != 0:
                raise ValueError(f"Unbalanced optional segment in route '{name}': {template}")
        return v
