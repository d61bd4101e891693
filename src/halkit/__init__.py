"""
Halkit - Hypermedia rendering of domain objects and collections.

This package provides tools for:
- Declaring per-class rendering metadata (routes, identifiers, extra links)
- Modelling links and relation-keyed link collections
- Wrapping objects and sequences as entities and (paginated) collections
- Rendering resources into documents with links and embedded sub-resources
- Validating metadata and route configuration from the command line
"""

__version__ = "0.1.0"

from halkit.core.links import Link, LinkCollection
from halkit.core.metadata import Metadata, MetadataMap
from halkit.core.renderer import HalRenderer, RenderContext, RenderHooks
from halkit.core.resources import Collection, Entity, Paginator
from halkit.core.urls import RouteUrlBuilder

__all__ = [
    "__version__",
    "Link",
    "LinkCollection",
    "Metadata",
    "MetadataMap",
    "HalRenderer",
    "RenderContext",
    "RenderHooks",
    "Collection",
    "Entity",
    "Paginator",
    "RouteUrlBuilder",
]
