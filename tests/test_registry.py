"""Tests for the schema registry."""

import pytest

from surql_gen.registry import FieldSchema, Relationship, SchemaRegistry
from surql_gen.types import FieldDefinition, Reference, TableDefinition


@pytest.fixture
def registry():
    return SchemaRegistry(
        [
            TableDefinition(
                name="user",
                fields=(
                    FieldDefinition("name"),
                    FieldDefinition("team", "record", reference=Reference("team")),
                ),
            ),
            TableDefinition(
                name="post",
                fields=(
                    FieldDefinition("title"),
                    FieldDefinition("author", "record", optional=True, reference=Reference("user", True)),
                    FieldDefinition("likes", "array_of_record", reference=Reference("user")),
                ),
            ),
            TableDefinition(name="team", fields=(FieldDefinition("label"),)),
        ]
    )


class TestSchemaRegistry:
    """Tests for registering and looking up tables."""

    def test_lookup_case_insensitive(self, registry):
        """Test that table lookups ignore case."""
        assert registry.get_table_schema("POST").name == "post"
        assert "User" in registry
        assert registry.get_table_schema("missing") is None

    def test_fields_in_order(self, registry):
        """Test that field schemas keep declaration order and references."""
        post = registry.get_table_schema("post")

        assert list(post.fields) == ["title", "author", "likes"]
        assert post.fields["author"] == FieldSchema(
            "author", "record", optional=True, reference=Reference("user", True)
        )

    def test_list_tables(self, registry):
        """Test listing registered tables."""
        assert registry.list_tables() == ["user", "post", "team"]
        assert len(registry) == 3

    def test_register_replaces(self, registry):
        """Test that registering a table again replaces it."""
        registry.register_table(TableDefinition(name="TEAM", fields=(FieldDefinition("size", "int"),)))

        assert len(registry) == 3
        assert list(registry.get_table_schema("team").fields) == ["size"]

    def test_register_does_not_mutate_published_index(self, registry):
        """Test that readers holding the old index are unaffected by registration."""
        old_index = registry._schemas

        registry.register_table(TableDefinition(name="tag"))

        assert "tag" not in old_index
        assert "tag" in registry

    def test_resolve_field_path(self, registry):
        """Test following references along a path."""
        assert registry.resolve_field_path("post", ["author", "team", "label"]).name == "label"
        assert registry.resolve_field_path("post", ["title"]).type == "string"
        assert registry.resolve_field_path("post", ["title", "x"]) is None
        assert registry.resolve_field_path("post", ["nope"]) is None
        assert registry.resolve_field_path("nope", ["title"]) is None
        assert registry.resolve_field_path("post", []) is None

    def test_relationships(self, registry):
        """Test listing a table's references."""
        assert registry.get_relationships("post") == [
            Relationship("post", "user", "author", "one-to-one"),
            Relationship("post", "user", "likes", "one-to-many"),
        ]
        assert registry.get_relationships("team") == []
        assert registry.get_relationships("missing") == []
