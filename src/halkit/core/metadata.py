"""Per-type rendering metadata and the metadata map."""

from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Any, Iterator, Mapping

import yaml
from pydantic import ValidationError

from halkit.core.exceptions import InvalidMetadataError, MetadataNotFoundError
from halkit.core.schema import LinkSchema, MetadataMapSchema, MetadataSchema

logger = logging.getLogger(__name__)


def import_class(path: str) -> type:
    """Import a class from a dotted path such as ``myapp.models.User``."""
    module_name, _, attr = path.rpartition(".")
    if not module_name:
        raise InvalidMetadataError(f"Invalid class path: {path}")
    try:
        module = importlib.import_module(module_name)
        obj = getattr(module, attr)
    except (ImportError, AttributeError) as e:
        raise InvalidMetadataError(f"Class provided to metadata must exist; received {path!r}") from e
    if not isinstance(obj, type):
        raise InvalidMetadataError(f"Metadata key does not name a class: {path}")
    return obj


class Metadata:
    """
    Describes how instances of one class are rendered.

    The class is matched by exact type only; subclasses need their own
    entry.
    """

    def __init__(self, cls: type, options: Mapping[str, Any] | MetadataSchema | None = None) -> None:
        """
        Initialize metadata.

        Args:
            cls: The domain class this metadata applies to
            options: Metadata options (see MetadataSchema) or a validated schema
        """
        if not isinstance(cls, type):
            raise InvalidMetadataError(f"Metadata requires a class; received {type(cls).__name__}")
        self._cls = cls
        if isinstance(options, MetadataSchema):
            self._schema = options
        else:
            try:
                self._schema = MetadataSchema.model_validate(dict(options or {}))
            except ValidationError as e:
                raise InvalidMetadataError(f"Invalid metadata for {cls.__qualname__}: {e}") from e

    @property
    def cls(self) -> type:
        return self._cls

    @property
    def route(self) -> str | None:
        return self._schema.route

    @property
    def route_params(self) -> dict[str, Any]:
        return dict(self._schema.route_params)

    @property
    def route_options(self) -> dict[str, Any]:
        return dict(self._schema.route_options)

    @property
    def url(self) -> str | None:
        return self._schema.url

    @property
    def entity_route(self) -> str | None:
        """Route for members of a collection; defaults to ``route`` then ``url``."""
        return self._schema.entity_route or self._schema.route or self._schema.url

    @property
    def route_identifier_name(self) -> str:
        return self._schema.route_identifier_name

    @property
    def entity_identifier_name(self) -> str | None:
        return self._schema.entity_identifier_name

    @property
    def is_collection(self) -> bool:
        return self._schema.is_collection

    @property
    def collection_name(self) -> str:
        return self._schema.collection_name

    @property
    def max_depth(self) -> int | None:
        return self._schema.max_depth

    @property
    def force_self_link(self) -> bool:
        return self._schema.force_self_link

    @property
    def links(self) -> list[LinkSchema]:
        """Extra link definitions added to every rendered instance."""
        return list(self._schema.links)

    @property
    def hydrator(self) -> Any:
        """Hydrator name, dotted class path, or instance (None if unset)."""
        return self._schema.hydrator

    @property
    def has_route(self) -> bool:
        return self._schema.route is not None

    @property
    def has_url(self) -> bool:
        return self._schema.url is not None

    @property
    def has_hydrator(self) -> bool:
        return self._schema.hydrator is not None

    def to_dict(self) -> dict[str, Any]:
        """Return metadata options as a dictionary (includes class path)."""
        result = self._schema.model_dump(exclude_defaults=True)
        result["class"] = f"{self._cls.__module__}.{self._cls.__qualname__}"
        return result

    def __repr__(self) -> str:
        kind = "collection" if self.is_collection else "entity"
        return f"Metadata({self._cls.__qualname__}, {kind}, route={self.route})"


class MetadataMap:
    """
    Registry of rendering metadata keyed by exact class.

    Populated once at startup (from a YAML file or code) and read-only
    while rendering.
    """

    def __init__(self, entries: Mapping[type, Metadata] | None = None) -> None:
        self._map: dict[type, Metadata] = dict(entries or {})

    @classmethod
    def load(cls, path: str | Path) -> MetadataMap:
        """Load metadata map from YAML file."""
        path = Path(path)
        with path.open() as f:
            data = yaml.safe_load(f) or {}

        # Validate with schema
        try:
            schema = MetadataMapSchema(**data)
        except ValidationError as e:
            raise InvalidMetadataError(f"Invalid metadata file {path}: {e}") from e

        entries = {}
        for class_path, options in schema.metadata_map.items():
            klass = import_class(class_path)
            entries[klass] = Metadata(klass, options)

        logger.debug("Loaded %d metadata entries from %s", len(entries), path)
        return cls(entries)

    @classmethod
    def from_dict(cls, data: Mapping[Any, Any]) -> MetadataMap:
        """
        Create metadata map from dictionary.

        Accepts ``{"metadata_map": {...}}`` or the inner mapping directly;
        keys are classes or dotted import paths.
        """
        entries_data = data.get("metadata_map", data)
        metadata_map = cls()
        for key, options in entries_data.items():
            klass = import_class(key) if isinstance(key, str) else key
            metadata_map.register(klass, options)
        return metadata_map

    def register(self, cls: type, metadata: Metadata | Mapping[str, Any] | None = None) -> Metadata:
        """Register metadata for a class, replacing any previous entry."""
        if not isinstance(metadata, Metadata):
            metadata = Metadata(cls, metadata)
        elif metadata.cls is not cls:
            raise InvalidMetadataError(
                f"Metadata for {metadata.cls.__qualname__} cannot be registered for {cls.__qualname__}"
            )
        self._map[cls] = metadata
        logger.debug("Registered metadata for %s", cls.__qualname__)
        return metadata

    def has(self, obj: Any) -> bool:
        """True only if the object's exact type is registered."""
        return type(obj) in self._map

    def get(self, obj: Any) -> Metadata:
        """Get metadata for an object, raising if its type is not registered."""
        metadata = self._map.get(type(obj))
        if metadata is None:
            raise MetadataNotFoundError(f"No metadata registered for {type(obj).__qualname__}")
        return metadata

    def get_for_class(self, cls: type) -> Metadata | None:
        """Get metadata by class (None if not registered)."""
        return self._map.get(cls)

    def classes(self) -> list[type]:
        return list(self._map)

    def collections(self) -> list[Metadata]:
        """Get all collection metadata entries."""
        return [m for m in self._map.values() if m.is_collection]

    def __len__(self) -> int:
        return len(self._map)

    def __iter__(self) -> Iterator[Metadata]:
        return iter(self._map.values())

    def __contains__(self, cls: object) -> bool:
        return cls in self._map
