"""Exception hierarchy for halkit."""

from __future__ import annotations


class HalError(Exception):
    """Base class for all halkit errors."""

    pass


class InvalidLinkError(HalError, ValueError):
    """Raised when a link is constructed without a relation or an address."""

    pass


class InvalidEntityError(HalError, ValueError):
    """Raised when an entity payload is not an object or mapping."""

    pass


class InvalidCollectionError(HalError, ValueError):
    """Raised when a collection is not iterable or is a mapping/string."""

    pass


class InvalidPageError(HalError, ValueError):
    """Raised for non-integer or out-of-range page / page size values."""

    pass


class InvalidMetadataError(HalError, ValueError):
    """Raised when metadata configuration cannot be applied."""

    pass


class MetadataNotFoundError(HalError, KeyError):
    """Raised when metadata is requested for an unregistered type."""

    pass


class EntityIdentifierError(HalError, RuntimeError):
    """Raised when metadata names an identifier field the object lacks."""

    pass


class CircularReferenceError(HalError, RuntimeError):
    """Raised when an object graph without a max depth revisits a node."""

    pass


class LinkRenderError(HalError, ValueError):
    """Raised when a link cannot be rendered into a representation."""

    pass


class UrlBuildError(HalError, LookupError):
    """Raised when a route cannot be assembled into a URL."""

    pass
