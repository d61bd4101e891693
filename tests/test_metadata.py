"""Tests for metadata module."""

import pytest

from halkit.core.exceptions import InvalidMetadataError, MetadataNotFoundError
from halkit.core.metadata import Metadata, MetadataMap, import_class

from sample_models import Post, User, UserList


class AdminUser(User):
    """Subclass used to check exact-type matching."""


@pytest.fixture
def sample_metadata_data():
    """Sample metadata file contents.

    Keys are dotted import paths of domain classes.
    """
    return {
        "metadata_map": {
            "sample_models.User": {
                "route": "user",
                "route_identifier_name": "user_id",
                "max_depth": 2,
                "links": [
                    {"rel": "avatar", "route": {"name": "user-avatar", "params": {"user_id": "{id}"}}},
                    {"rel": "docs", "url": "https://example.com/docs/user"},
                ],
            },
            "sample_models.UserList": {
                "is_collection": True,
                "collection_name": "users",
                "route": "users",
                "entity_route": "user",
            },
        }
    }


class TestMetadata:
    """Tests for Metadata class."""

    def test_defaults(self):
        """Test default metadata options."""
        metadata = Metadata(User)

        assert metadata.cls is User
        assert metadata.route is None
        assert metadata.route_identifier_name == "id"
        assert metadata.entity_identifier_name == "id"
        assert metadata.collection_name == "items"
        assert metadata.is_collection is False
        assert metadata.force_self_link is True
        assert metadata.max_depth is None
        assert metadata.links == []
        assert not metadata.has_hydrator

    def test_option_aliases(self):
        """Test legacy and camelCase option names."""
        metadata = Metadata(User, {"route_name": "user", "resourceRoute": "user-item", "maxDepth": 1})

        assert metadata.route == "user"
        assert metadata.entity_route == "user-item"
        assert metadata.max_depth == 1

    def test_legacy_identifier_name(self):
        """Test identifier_name fills both identifier names."""
        metadata = Metadata(User, {"identifier_name": "uuid"})

        assert metadata.route_identifier_name == "uuid"
        assert metadata.entity_identifier_name == "uuid"

    def test_legacy_identifier_name_does_not_override(self):
        """Test explicit identifier names win over identifier_name."""
        metadata = Metadata(User, {"identifier_name": "uuid", "route_identifier_name": "user_id"})

        assert metadata.route_identifier_name == "user_id"
        assert metadata.entity_identifier_name == "uuid"

    def test_entity_route_fallback(self):
        """Test entity_route falls back to route then url."""
        assert Metadata(User, {"route": "user"}).entity_route == "user"
        assert Metadata(User, {"url": "/static/user"}).entity_route == "/static/user"
        assert Metadata(User, {"route": "users", "entity_route": "user"}).entity_route == "user"

    def test_unknown_option(self):
        """Test unknown options are rejected."""
        with pytest.raises(InvalidMetadataError):
            Metadata(User, {"rooute": "user"})

    def test_negative_max_depth(self):
        """Test max_depth must not be negative."""
        with pytest.raises(InvalidMetadataError):
            Metadata(User, {"max_depth": -1})

    def test_requires_class(self):
        """Test metadata needs a class, not an instance."""
        with pytest.raises(InvalidMetadataError):
            Metadata(User(1, "Jane"))

    def test_to_dict(self):
        """Test metadata serialization."""
        result = Metadata(User, {"route": "user"}).to_dict()

        assert result["route"] == "user"
        assert result["class"] == "sample_models.User"


class TestMetadataMap:
    """Tests for MetadataMap class."""

    def test_from_dict(self, sample_metadata_data):
        """Test map creation from dictionary with class paths."""
        metadata_map = MetadataMap.from_dict(sample_metadata_data)

        assert len(metadata_map) == 2
        assert User in metadata_map
        assert metadata_map.get_for_class(UserList).collection_name == "users"
        assert len(metadata_map.collections()) == 1

    def test_from_dict_with_classes(self):
        """Test map creation with class keys."""
        metadata_map = MetadataMap.from_dict({User: {"route": "user"}, Post: {"route": "post"}})

        assert metadata_map.get(Post(1, "Hello")).route == "post"

    def test_has_exact_type_only(self):
        """Test that subclasses are not matched."""
        metadata_map = MetadataMap.from_dict({User: {"route": "user"}})

        assert metadata_map.has(User(1, "Jane"))
        assert not metadata_map.has(AdminUser(2, "Root"))
        assert not metadata_map.has({"id": 1})

    def test_get_unregistered(self):
        """Test lookup of an unregistered type fails."""
        metadata_map = MetadataMap()

        with pytest.raises(MetadataNotFoundError):
            metadata_map.get(User(1, "Jane"))

    def test_register(self):
        """Test code-driven registration."""
        metadata_map = MetadataMap()
        metadata = metadata_map.register(User, {"route": "user"})

        assert metadata_map.get(User(1, "Jane")) is metadata

    def test_register_mismatched_class(self):
        """Test metadata for one class cannot be registered for another."""
        with pytest.raises(InvalidMetadataError):
            MetadataMap().register(Post, Metadata(User))

    def test_load(self, tmp_path, sample_metadata_data):
        """Test loading from YAML file."""
        import yaml

        path = tmp_path / "metadata.yml"
        path.write_text(yaml.safe_dump(sample_metadata_data))

        metadata_map = MetadataMap.load(path)

        user_metadata = metadata_map.get_for_class(User)
        assert user_metadata.route_identifier_name == "user_id"
        assert [link.rel for link in user_metadata.links] == ["avatar", "docs"]

    def test_load_invalid_key(self, tmp_path):
        """Test loading rejects keys that are not class paths."""
        path = tmp_path / "metadata.yml"
        path.write_text("metadata_map:\n  User:\n    route: user\n")

        with pytest.raises(InvalidMetadataError):
            MetadataMap.load(path)

    def test_import_class_missing(self):
        """Test import of a missing class."""
        with pytest.raises(InvalidMetadataError):
            import_class("sample_models.DoesNotExist")
        with pytest.raises(InvalidMetadataError):
            import_class("sample_models.User.name")
