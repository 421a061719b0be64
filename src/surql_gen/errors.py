"""Exceptions raised at the boundary of the surql_gen library.

Parsing and inference never raise for malformed input; these are reserved
for structurally empty or absent input supplied by a collaborator.
"""

from __future__ import annotations


class SurqlGenError(Exception):
    """Base class for surql_gen errors."""


class ConfigError(SurqlGenError):
    """Configuration data is malformed."""


class MissingConfigError(ConfigError):
    """A required configuration value is not set."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Missing required configuration value: '{key}'")
        self.key = key


class EmptySchemaError(SurqlGenError):
    """The introspection provider reported no tables."""
