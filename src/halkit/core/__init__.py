"""Core domain models and the rendering engine."""

from halkit.core.exceptions import CircularReferenceError, HalError
from halkit.core.factory import ResourceFactory
from halkit.core.hydrators import HydratorManager
from halkit.core.injectors import PaginationInjector, SelfLinkInjector
from halkit.core.links import Link, LinkCollection, LinkCollectionAware
from halkit.core.metadata import Metadata, MetadataMap
from halkit.core.problems import ApiProblem, PaginationProblem
from halkit.core.renderer import HalRenderer, RenderContext, RenderHooks
from halkit.core.resources import Collection, Entity, Paginator
from halkit.core.schema import LinkSchema, MetadataSchema
from halkit.core.urls import RouteUrlBuilder, UrlBuilder

__all__ = [
    "CircularReferenceError",
    "HalError",
    "ResourceFactory",
    "HydratorManager",
    "PaginationInjector",
    "SelfLinkInjector",
    "Link",
    "LinkCollection",
    "LinkCollectionAware",
    "Metadata",
    "MetadataMap",
    "ApiProblem",
    "PaginationProblem",
    "HalRenderer",
    "RenderContext",
    "RenderHooks",
    "Collection",
    "Entity",
    "Paginator",
    "LinkSchema",
    "MetadataSchema",
    "RouteUrlBuilder",
    "UrlBuilder",
]
