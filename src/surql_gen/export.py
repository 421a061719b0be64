"""Rendering introspection responses back into a DDL document."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Mapping

from surql_gen.config import DEFAULT_CONVENTIONS, SchemaConventions
from surql_gen.introspection import IntrospectionProvider, normalize_schema_info
from surql_gen.naming import ensure_semicolon

_RULE = "-- ------------------------------"

# Database-level sections: (info key, heading, DEFINE keyword)
_DB_SECTIONS = (
    ("functions", "FUNCTIONS", "FUNCTION"),
    ("configs", "CONFIGS", "CONFIG"),
    ("analyzers", "ANALYZERS", "ANALYZER"),
    ("apis", "APIS", "API"),
    ("models", "MODELS", "MODEL"),
    ("params", "PARAMS", "PARAM"),
)

# Table-level sections: (info key, heading, DEFINE keyword)
_TABLE_SECTIONS = (
    ("indexes", "Indexes", "INDEX"),
    ("events", "Events", "EVENT"),
    ("lives", "Lives", "LIVE"),
    ("scopes", "Scopes", "SCOPE"),
    ("params", "Params", "PARAM"),
    ("accesses", "Accesses", "ACCESS"),
)


@dataclass(frozen=True)
class ExportOptions:
    """Options for rendering a schema export."""

    # Insert OVERWRITE after DEFINE <KIND> so the export can be re-applied
    apply_overwrite: bool = False
    # Replace the table TYPE (NORMAL, RELATION, ANY) on every table
    force_table_type: str | None = None
    # Replace SCHEMAFULL / SCHEMALESS on every table
    force_schema_mode: str | None = None


def export_schema_ddl(
    db_info: Any,
    table_infos: Mapping[str, Any],
    options: ExportOptions | None = None,
    conventions: SchemaConventions = DEFAULT_CONVENTIONS,
) -> str:
    """Render database and table info responses as a DDL document.

    Args:
        db_info: Raw database info response.
        table_infos: Raw table info responses keyed by table name.
        options: Rewriting options.
        conventions: System-table naming conventions.

    Returns:
        The DDL text, one definition per line, each terminated by ``;``.
    """
    options = options or ExportOptions()
    schema_info = normalize_schema_info(db_info)

    lines = [_RULE, "-- SCHEMA DEFINITIONS", _RULE, "", "OPTION IMPORT;", ""]

    for key, title, keyword in _DB_SECTIONS:
        definitions = schema_info.section(key)
        if not definitions:
            continue
        lines.extend(["", _RULE, f"-- {title}", _RULE, ""])
        for definition in definitions.values():
            if isinstance(definition, str):
                lines.append(_render(definition, keyword, options.apply_overwrite))
                lines.append("")

    user_tables = [name for name in schema_info.tables if conventions.is_user_table(name)]
    if user_tables:
        lines.extend(["", _RULE, "-- TABLES", _RULE])

    for table_name in user_tables:
        lines.extend(["", _RULE, f"-- TABLE: {table_name}", _RULE, ""])
        lines.append(
            _render_table(schema_info.tables[table_name], table_name, options)
        )
        lines.append("")

        table_info = table_infos.get(table_name)
        if not isinstance(table_info, Mapping):
            continue

        fields = table_info.get("fields")
        if isinstance(fields, Mapping):
            for definition in fields.values():
                if isinstance(definition, str):
                    lines.append(_render(definition, "FIELD", options.apply_overwrite))

        for key, title, keyword in _TABLE_SECTIONS:
            objects = table_info.get(key)
            if not isinstance(objects, Mapping) or not objects:
                continue
            lines.extend(["", f"-- {title}"])
            for definition in objects.values():
                if isinstance(definition, str):
                    lines.append(_render(definition, keyword, options.apply_overwrite))

    return "\n".join(lines)


def export_from_provider(
    provider: IntrospectionProvider,
    options: ExportOptions | None = None,
    conventions: SchemaConventions = DEFAULT_CONVENTIONS,
) -> str:
    """Collect info responses from a provider and render them as DDL."""
    db_info = provider.info_for_db()
    schema_info = normalize_schema_info(db_info)
    table_infos = {
        name: provider.info_for_table(name)
        for name in schema_info.tables
        if conventions.is_user_table(name)
    }
    return export_schema_ddl(db_info, table_infos, options, conventions)


def _render_table(raw: Any, table_name: str, options: ExportOptions) -> str:
    definition = (
        raw
        if isinstance(raw, str)
        else f"DEFINE TABLE {table_name} TYPE NORMAL SCHEMAFULL PERMISSIONS NONE"
    )
    if options.force_table_type:
        definition = re.sub(
            r"\bTYPE\s+\w+", f"TYPE {options.force_table_type.upper()}", definition, count=1,
            flags=re.IGNORECASE,
        )
    if options.force_schema_mode:
        definition = re.sub(
            r"\bSCHEMA(?:FULL|LESS)\b", options.force_schema_mode.upper(), definition, count=1,
            flags=re.IGNORECASE,
        )
    return _render(definition, "TABLE", options.apply_overwrite)


def _render(definition: str, keyword: str, apply_overwrite: bool) -> str:
    if apply_overwrite and not re.search(
        rf"^DEFINE\s+{keyword}\s+OVERWRITE\b", definition.strip(), re.IGNORECASE
    ):
        definition = re.sub(
            rf"^(\s*DEFINE\s+{keyword})\b", r"\1 OVERWRITE", definition, count=1,
            flags=re.IGNORECASE,
        )
    return ensure_semicolon(definition)
