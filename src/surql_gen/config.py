"""Configuration for schema extraction."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Mapping

from surql_gen.errors import ConfigError, MissingConfigError


@dataclass(frozen=True)
class ConnectionConfig:
    """Connection details handed to an introspection provider."""

    url: str | None = None
    username: str | None = None
    password: str | None = None
    namespace: str | None = None
    database: str | None = None

    def require_url(self) -> str:
        """Return the connection URL, raising if it is not configured."""
        if not self.url:
            raise MissingConfigError("connection.url")
        return self.url


@dataclass(frozen=True)
class SchemaConventions:
    """Naming conventions applied while building the table model."""

    # Tables whose names start with one of these are internal to the store
    system_table_prefixes: tuple[str, ...] = ("_", "sdb_")
    # Field names containing this marker describe array elements, not fields
    array_element_marker: str = "[*]"
    # Fields with these names always hold float vectors
    float_vector_fields: frozenset[str] = frozenset({"embedding"})

    def is_user_table(self, name: str) -> bool:
        return not any(name.startswith(prefix) for prefix in self.system_table_prefixes)

    def is_element_field(self, name: str) -> bool:
        return self.array_element_marker in name


DEFAULT_CONVENTIONS = SchemaConventions()


@dataclass(frozen=True)
class Config:
    """Top-level configuration."""

    connection: ConnectionConfig = field(default_factory=ConnectionConfig)
    conventions: SchemaConventions = DEFAULT_CONVENTIONS

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> Config:
        """Build a config from already-loaded mapping data.

        Args:
            data: Mapping with optional ``connection`` and ``conventions`` sections.

        Returns:
            A new Config instance.

        Raises:
            ConfigError: If a section is not a mapping or carries unknown keys.
        """
        if data is None:
            return cls()
        if not isinstance(data, Mapping):
            raise ConfigError("Configuration must be a mapping")
        _reject_unknown_keys("config", data, {"connection", "conventions"})

        connection = ConnectionConfig(**_section(data, "connection", ConnectionConfig))

        conventions_data = _section(data, "conventions", SchemaConventions)
        if "system_table_prefixes" in conventions_data:
            conventions_data["system_table_prefixes"] = tuple(
                conventions_data["system_table_prefixes"]
            )
        if "float_vector_fields" in conventions_data:
            conventions_data["float_vector_fields"] = frozenset(
                conventions_data["float_vector_fields"]
            )
        conventions = SchemaConventions(**conventions_data)

        return cls(connection=connection, conventions=conventions)


def _section(data: Mapping[str, Any], name: str, target: type) -> dict[str, Any]:
    """Extract a config section, validating its keys against a dataclass."""
    section = data.get(name)
    if section is None:
        return {}
    if not isinstance(section, Mapping):
        raise ConfigError(f"Configuration section '{name}' must be a mapping")
    _reject_unknown_keys(name, section, {f.name for f in fields(target)})
    return dict(section)


def _reject_unknown_keys(name: str, data: Mapping[str, Any], allowed: set[str]) -> None:
    unknown = sorted(set(data) - allowed)
    if unknown:
        raise ConfigError(f"Unknown keys in '{name}': {', '.join(unknown)}")
