"""Tests for configuration and boundary errors."""

import pytest

from surql_gen.config import DEFAULT_CONVENTIONS, Config, ConnectionConfig, SchemaConventions
from surql_gen.errors import ConfigError, MissingConfigError, SurqlGenError


class TestConfig:
    """Tests for building configuration from mappings."""

    def test_defaults(self):
        """Test that no data gives the defaults."""
        config = Config.from_mapping(None)

        assert config.connection == ConnectionConfig()
        assert config.conventions == DEFAULT_CONVENTIONS

    def test_from_mapping(self):
        """Test reading both sections."""
        config = Config.from_mapping(
            {
                "connection": {"url": "ws://localhost:8000", "namespace": "app", "database": "main"},
                "conventions": {
                    "system_table_prefixes": ["_", "tmp_"],
                    "float_vector_fields": ["embedding", "vector"],
                },
            }
        )

        assert config.connection.url == "ws://localhost:8000"
        assert config.connection.database == "main"
        assert config.conventions.system_table_prefixes == ("_", "tmp_")
        assert config.conventions.float_vector_fields == frozenset({"embedding", "vector"})
        assert config.conventions.array_element_marker == "[*]"

    def test_unknown_keys(self):
        """Test that unknown keys are rejected."""
        with pytest.raises(ConfigError, match="Unknown keys in 'connection': port"):
            Config.from_mapping({"connection": {"port": 8000}})

        with pytest.raises(ConfigError, match="Unknown keys in 'config': extra"):
            Config.from_mapping({"extra": 1})

    def test_not_a_mapping(self):
        """Test that non-mapping data is rejected."""
        with pytest.raises(ConfigError):
            Config.from_mapping(["connection"])

        with pytest.raises(ConfigError):
            Config.from_mapping({"conventions": "none"})

    def test_require_url(self):
        """Test that a missing URL raises MissingConfigError."""
        with pytest.raises(MissingConfigError) as exc_info:
            ConnectionConfig().require_url()

        assert exc_info.value.key == "connection.url"
        assert isinstance(exc_info.value, SurqlGenError)
        assert ConnectionConfig(url="ws://db").require_url() == "ws://db"


class TestSchemaConventions:
    """Tests for naming conventions."""

    @pytest.mark.parametrize(
        "name,expected",
        [("user", True), ("_migrations", False), ("sdb_meta", False), ("sdbx", True)],
    )
    def test_is_user_table(self, name, expected):
        """Test the system table prefixes."""
        assert DEFAULT_CONVENTIONS.is_user_table(name) is expected

    def test_is_element_field(self):
        """Test the array element marker."""
        assert DEFAULT_CONVENTIONS.is_element_field("tags[*]")
        assert not DEFAULT_CONVENTIONS.is_element_field("tags")

    def test_custom_prefixes(self):
        """Test configuring system prefixes."""
        conventions = SchemaConventions(system_table_prefixes=("tmp_",))

        assert conventions.is_user_table("_migrations")
        assert not conventions.is_user_table("tmp_x")
