"""Tests for factory module."""

import pytest

from halkit.core.exceptions import EntityIdentifierError, InvalidMetadataError
from halkit.core.factory import ResourceFactory
from halkit.core.hydrators import HydratorManager
from halkit.core.metadata import Metadata
from halkit.core.resources import Paginator

from sample_models import Post, User, UserList


@pytest.fixture
def factory():
    """Create a resource factory with default hydration."""
    return ResourceFactory(HydratorManager())


class TestCreateEntity:
    """Tests for entity creation from metadata."""

    def test_self_link_from_route(self, factory):
        """Test the self link uses the route and identifier."""
        entity = factory.create_entity_from_metadata(User(42, "Jane"), Metadata(User, {"route": "user"}))

        assert entity.id == 42
        [link] = entity.links.get("self")
        assert link.route == "user"
        assert link.route_params == {"id": 42}

    def test_self_link_from_url(self, factory):
        """Test a url wins over a route."""
        metadata = Metadata(User, {"route": "user", "url": "http://example.com/me"})

        entity = factory.create_entity_from_metadata(User(1, "a"), metadata)

        assert entity.links.get("self")[0].href == "http://example.com/me"

    def test_custom_identifier_names(self, factory):
        """Test route and entity identifier names are independent."""
        metadata = Metadata(Post, {"route": "post", "routeIdentifierName": "post_id", "entityIdentifierName": "title"})

        entity = factory.create_entity_from_metadata(Post(7, "hello"), metadata)

        assert entity.id == "hello"
        assert entity.links.get("self")[0].route_params == {"post_id": "hello"}

    def test_missing_identifier(self, factory):
        """Test a missing identifier field raises."""
        metadata = Metadata(User, {"route": "user", "entity_identifier_name": "uuid"})

        with pytest.raises(EntityIdentifierError):
            factory.create_entity_from_metadata(User(1, "a"), metadata)

    def test_no_address_for_self_link(self, factory):
        """Test forcing a self link without route or url raises."""
        with pytest.raises(InvalidMetadataError):
            factory.create_entity_from_metadata(User(1, "a"), Metadata(User, {}))

    def test_without_forced_self_link(self, factory):
        """Test no self link is added when not forced."""
        entity = factory.create_entity_from_metadata(User(1, "a"), Metadata(User, {"force_self_link": False}))

        assert not entity.links.has("self")

    def test_skip_embedded_payload(self, factory):
        """Test the payload is dropped when embedded entities are not rendered."""
        entity = factory.create_entity_from_metadata(
            User(1, "a"), Metadata(User, {"route": "user"}), render_embedded_entities=False
        )

        assert entity.entity == {}
        assert entity.id == 1

    def test_metadata_links(self, factory):
        """Test extra links resolve field references and callables."""
        metadata = Metadata(
            Post,
            {
                "route": "post",
                "links": [
                    {"rel": "author", "route": {"name": "user", "params": {"id": "{author}"}}},
                    {"rel": "slug", "route": {"name": "slug", "params": {"slug": lambda post: post.title.lower()}}},
                    {"rel": "describedby", "url": "http://example.com/docs", "props": {"title": "Docs"}},
                ],
            },
        )

        entity = factory.create_entity_from_metadata(Post(3, "Hello", author=9), metadata)

        assert entity.links.relations() == ["author", "slug", "describedby", "self"]
        assert entity.links.get("author")[0].route_params == {"id": 9}
        assert entity.links.get("slug")[0].route_params == {"slug": "hello"}
        assert entity.links.get("describedby")[0].props == {"title": "Docs"}

    def test_metadata_self_link_not_replaced(self, factory):
        """Test a configured self link suppresses the forced one."""
        metadata = Metadata(User, {"route": "user", "links": [{"rel": "self", "url": "/custom"}]})

        entity = factory.create_entity_from_metadata(User(1, "a"), metadata)

        assert [link.href for link in entity.links.get("self")] == ["/custom"]


class TestCreateCollection:
    """Tests for collection creation from metadata."""

    def test_collection_fields(self, factory):
        """Test routing fields are copied from metadata."""
        metadata = Metadata(
            UserList,
            {
                "is_collection": True,
                "route": "users",
                "route_options": {"query": {"sort": "name"}},
                "resource_route": "user",
                "collection_name": "users",
                "identifier_name": "uid",
            },
        )

        collection = factory.create_collection_from_metadata(UserList([User(1, "a")]), metadata)

        assert collection.collection_name == "users"
        assert collection.collection_route == "users"
        assert collection.collection_route_options == {"query": {"sort": "name"}}
        assert collection.entity_route == "user"
        assert collection.route_identifier_name == "uid"
        assert collection.entity_identifier_name == "uid"
        [link] = collection.links.get("self")
        assert link.route == "users"
        assert link.route_params == {}

    def test_paginator_collection(self, factory):
        """Test paginators are wrapped without extraction."""
        metadata = Metadata(Paginator, {"is_collection": True, "route": "users"})

        collection = factory.create_collection_from_metadata(Paginator([1, 2, 3]), metadata)

        assert collection.is_paginated

    def test_no_self_link_without_address(self, factory):
        """Test collections without a route or url get no self link."""
        metadata = Metadata(UserList, {"is_collection": True})

        collection = factory.create_collection_from_metadata(UserList(), metadata)

        assert len(collection.links) == 0
        assert collection.entity_route is None


class TestResolveParams:
    """Tests for route param resolution."""

    def test_resolve_params(self):
        """Test field references, callables and literals."""
        params = {"id": "{id}", "name": lambda user: user.name.upper(), "fixed": "v", "other": "{missing}"}

        resolved = ResourceFactory.resolve_params(params, User(1, "jane"), {"id": 1, "name": "jane"})

        assert resolved == {"id": 1, "name": "JANE", "fixed": "v", "other": "{missing}"}
