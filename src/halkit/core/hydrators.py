"""Field extraction ("hydration") for domain objects."""

from __future__ import annotations

import dataclasses
import inspect
import logging
from typing import Any, Mapping, Protocol, runtime_checkable

from pydantic import BaseModel

from halkit.core.exceptions import InvalidMetadataError
from halkit.core.metadata import MetadataMap, import_class

logger = logging.getLogger(__name__)


@runtime_checkable
class Hydrator(Protocol):
    """Extracts an ordered field map from an object."""

    def extract(self, obj: Any) -> dict[str, Any]: ...


class ObjectPropertyHydrator:
    """Public instance attributes (``__dict__`` or ``__slots__``)."""

    def extract(self, obj: Any) -> dict[str, Any]:
        if hasattr(obj, "__dict__"):
            return {k: v for k, v in vars(obj).items() if not k.startswith("_")}
        result: dict[str, Any] = {}
        for klass in reversed(type(obj).__mro__):
            for name in getattr(klass, "__slots__", ()):
                if not name.startswith("_") and hasattr(obj, name):
                    result[name] = getattr(obj, name)
        return result


class ClassMethodsHydrator:
    """
    Accessor methods taking no arguments.

    ``get_name()`` becomes ``name``; ``is_active()`` and ``has_children()``
    keep their full names.
    """

    def extract(self, obj: Any) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for name in dir(obj):
            if not name.startswith(("get_", "is_", "has_")):
                continue
            method = getattr(obj, name)
            if not callable(method) or not _takes_no_arguments(method):
                continue
            key = name[4:] if name.startswith("get_") else name
            result[key] = method()
        return result


class ArraySerializableHydrator:
    """Objects exposing ``to_dict()``."""

    def extract(self, obj: Any) -> dict[str, Any]:
        to_dict = getattr(obj, "to_dict", None)
        if not callable(to_dict):
            raise TypeError(f"{type(obj).__name__} does not provide to_dict()")
        return dict(to_dict())


BUILTIN_HYDRATORS: dict[str, type] = {
    "object_property": ObjectPropertyHydrator,
    "class_methods": ClassMethodsHydrator,
    "array_serializable": ArraySerializableHydrator,
}


def _takes_no_arguments(method: Any) -> bool:
    try:
        signature = inspect.signature(method)
    except (TypeError, ValueError):
        return False
    return all(
        p.default is not inspect.Parameter.empty or p.kind in (p.VAR_POSITIONAL, p.VAR_KEYWORD)
        for p in signature.parameters.values()
    )


def default_extract(obj: Any) -> dict[str, Any]:
    """
    Extract fields without a configured hydrator.

    Nested values are returned as-is so that embedded objects keep their
    type for metadata lookup.
    """
    if isinstance(obj, Mapping):
        return dict(obj)
    if isinstance(obj, BaseModel):
        return {name: getattr(obj, name) for name in type(obj).model_fields}
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: getattr(obj, f.name) for f in dataclasses.fields(obj)}
    if callable(getattr(obj, "to_dict", None)):
        return ArraySerializableHydrator().extract(obj)
    return ObjectPropertyHydrator().extract(obj)


class HydratorManager:
    """
    Chooses the hydrator for an object.

    Lookup order: the hydrator named in the object's metadata, then a
    hydrator registered for its class, then the default hydrator, then
    ``default_extract``.
    """

    def __init__(
        self,
        metadata_map: MetadataMap | None = None,
        hydrators: Mapping[str, Hydrator] | None = None,
        default_hydrator: Hydrator | None = None,
    ) -> None:
        self.metadata_map = metadata_map or MetadataMap()
        self._named: dict[str, Hydrator] = {name: cls() for name, cls in BUILTIN_HYDRATORS.items()}
        self._named.update(hydrators or {})
        self._class_hydrators: dict[type, Hydrator] = {}
        self._default_hydrator = default_hydrator

    def resolve(self, ref: Any) -> Hydrator:
        """Resolve a hydrator instance, registered name, or dotted class path."""
        if isinstance(ref, Hydrator) and not isinstance(ref, type):
            return ref
        if isinstance(ref, str):
            if ref in self._named:
                return self._named[ref]
            klass = import_class(ref)
            hydrator = klass()
            if not isinstance(hydrator, Hydrator):
                raise InvalidMetadataError(f"Hydrator class must provide extract(); received {ref}")
            self._named[ref] = hydrator
            logger.debug("Resolved hydrator %s", ref)
            return hydrator
        raise InvalidMetadataError(f"Cannot resolve hydrator from {type(ref).__name__}")

    def add_hydrator(self, cls: type, hydrator: Hydrator | str) -> HydratorManager:
        """Register a hydrator for a class."""
        self._class_hydrators[cls] = self.resolve(hydrator)
        return self

    def set_default_hydrator(self, hydrator: Hydrator | str | None) -> HydratorManager:
        self._default_hydrator = self.resolve(hydrator) if hydrator is not None else None
        return self

    def get_hydrator_for_entity(self, entity: Any) -> Hydrator | None:
        """Get the hydrator for an object (None means default extraction)."""
        if self.metadata_map.has(entity):
            metadata = self.metadata_map.get(entity)
            if metadata.has_hydrator:
                return self.resolve(metadata.hydrator)
        hydrator = self._class_hydrators.get(type(entity))
        if hydrator is not None:
            return hydrator
        return self._default_hydrator

    def extract(self, entity: Any) -> dict[str, Any]:
        """Extract an object into a field map."""
        if isinstance(entity, Mapping):
            return dict(entity)
        hydrator = self.get_hydrator_for_entity(entity)
        if hydrator is not None:
            return dict(hydrator.extract(entity))
        return default_extract(entity)
