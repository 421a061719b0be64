"""Name formatting helpers shared by the model and its consumers."""

from __future__ import annotations

import re


def format_schema_name(table_name: str) -> str:
    """Convert a snake_case or kebab-case table name to PascalCase."""
    parts = table_name.lower().replace("-", "_").split("_")
    return "".join(part[:1].upper() + part[1:] for part in parts)


def format_type_name(table_name: str) -> str:
    """Convert a table name to its type name: ``user_profile`` -> ``UserProfileType``."""
    return f"{format_schema_name(table_name)}Type"


def to_snake_case(text: str) -> str:
    """Convert camelCase, spaced or hyphenated text to snake_case."""
    text = re.sub(r"([a-z])([A-Z])", r"\1_\2", text)
    text = re.sub(r"[\s-]+", "_", text)
    return text.lower()


def ensure_semicolon(definition: str) -> str:
    """Return the definition trimmed and terminated with a semicolon."""
    trimmed = definition.strip()
    return trimmed if trimmed.endswith(";") else f"{trimmed};"
