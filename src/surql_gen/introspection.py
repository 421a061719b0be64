"""Building the table model from live introspection (INFO FOR DB / INFO FOR TABLE) responses."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Protocol, Union

from surql_gen.config import DEFAULT_CONVENTIONS, SchemaConventions
from surql_gen.errors import EmptySchemaError
from surql_gen.parsing.clauses import extract_comment
from surql_gen.parsing.ddl_parser import field_from_clauses, match_field_statement
from surql_gen.parsing.type_parser import resolve_type
from surql_gen.types import FieldDefinition, Kind, Reference, TableDefinition, TypeDescriptor

logger = logging.getLogger(__name__)

# Top-level sections of a database info response, in export order
INFO_SECTIONS = (
    "tables",
    "databases",
    "functions",
    "configs",
    "analyzers",
    "apis",
    "models",
    "params",
    "users",
    "accesses",
)

# Structured field kind of a relation endpoint such as ``in`` or ``out``
RELATION_KIND = "relation"


@dataclass
class SchemaInfo:
    """Known sections of a database info response.

    ``tables`` maps a table name to its raw ``DEFINE TABLE`` string or to a
    ``{"name": ...}`` object; the other sections map names to raw definitions.
    """

    tables: dict[str, Any] = field(default_factory=dict)
    databases: dict[str, Any] | None = None
    functions: dict[str, Any] | None = None
    configs: dict[str, Any] | None = None
    analyzers: dict[str, Any] | None = None
    apis: dict[str, Any] | None = None
    models: dict[str, Any] | None = None
    params: dict[str, Any] | None = None
    users: dict[str, Any] | None = None
    accesses: dict[str, Any] | None = None

    def section(self, name: str) -> dict[str, Any]:
        """Return a section by name, empty when absent."""
        return getattr(self, name, None) or {}


@dataclass(frozen=True)
class StringFieldInfo:
    """A field described by its raw ``DEFINE FIELD`` statement."""

    definition: str


@dataclass(frozen=True)
class StructuredFieldInfo:
    """A field described by an object carrying the raw type string."""

    type: str = Kind.STRING
    kind: str | None = None
    optional: bool = False
    value: Any = None
    comment: str | None = None


FieldInfo = Union[StringFieldInfo, StructuredFieldInfo]


class IntrospectionProvider(Protocol):
    """Source of live introspection responses."""

    def info_for_db(self) -> Any:
        """Return the database-level info response."""
        ...

    def info_for_table(self, name: str) -> Any:
        """Return the info response for one table."""
        ...


def normalize_schema_info(raw: Any) -> SchemaInfo:
    """Reshape a raw database info response into a SchemaInfo.

    Unknown top-level keys are dropped. Missing or non-mapping input, and
    sections that are not mappings, yield empty values.
    """
    if not isinstance(raw, Mapping):
        return SchemaInfo()

    info = SchemaInfo()
    for name in INFO_SECTIONS:
        value = raw.get(name)
        if isinstance(value, Mapping):
            setattr(info, name, dict(value))
    return info


def classify_field_info(raw: Any) -> FieldInfo | None:
    """Decide which descriptor variant a raw field entry is."""
    if isinstance(raw, str):
        return StringFieldInfo(definition=raw)
    if isinstance(raw, Mapping):
        raw_type = raw.get("type")
        comment = raw.get("comment")
        return StructuredFieldInfo(
            type=raw_type if isinstance(raw_type, str) and raw_type else Kind.STRING,
            kind=raw.get("kind"),
            optional=raw.get("optional") is True,
            value=raw.get("value"),
            comment=comment if isinstance(comment, str) else None,
        )
    return None


def field_from_info(name: str, info: FieldInfo) -> FieldDefinition:
    """Convert either descriptor variant into a FieldDefinition."""
    if isinstance(info, StringFieldInfo):
        definition = " ".join(info.definition.split())
        match = match_field_statement(definition)
        if match is None:
            # Not a DEFINE FIELD statement: treat the text as a bare type
            return field_from_clauses(name, f"TYPE {definition}")
        return field_from_clauses(name, match.group("rest"))

    descriptor = resolve_type(info.type)
    if info.kind == RELATION_KIND and not descriptor.is_reference:
        # Relation endpoints link to records even when no target table is named
        descriptor = TypeDescriptor(kind=Kind.RECORD, is_optional=descriptor.is_optional)
    optional = info.optional or descriptor.is_optional
    reference = descriptor.reference
    if reference is not None and optional and descriptor.kind != Kind.ARRAY_OF_RECORD:
        reference = Reference(table=reference.table, is_optional=True)

    return FieldDefinition(
        name=name,
        type=descriptor.kind,
        optional=optional,
        description=info.comment,
        default_value=None if info.value is None else str(info.value),
        reference=reference,
    )


def tables_from_info_responses(
    db_info: Any,
    table_infos: Mapping[str, Any],
    conventions: SchemaConventions = DEFAULT_CONVENTIONS,
) -> list[TableDefinition]:
    """Build TableDefinitions from database and per-table info responses.

    Args:
        db_info: Raw database info response.
        table_infos: Raw table info responses keyed by table name.
        conventions: System-table and element-field naming conventions.

    Returns:
        Tables in the order the database info lists them.
    """
    schema_info = normalize_schema_info(db_info)
    tables: list[TableDefinition] = []

    for table_name, raw_table in schema_info.tables.items():
        if not conventions.is_user_table(table_name):
            continue

        table_info = table_infos.get(table_name)
        if not isinstance(table_info, Mapping):
            logger.warning("No info for table %r, skipping", table_name)
            continue

        description = extract_comment(raw_table) if isinstance(raw_table, str) else None
        raw_fields = table_info.get("fields")
        if not isinstance(raw_fields, Mapping):
            raw_fields = {}

        fields: dict[str, FieldDefinition] = {}
        for field_name, raw_field in raw_fields.items():
            if conventions.is_element_field(field_name):
                continue
            info = classify_field_info(raw_field)
            if info is None:
                logger.warning(
                    "Field %s.%s has an unexpected format, skipping", table_name, field_name
                )
                continue
            fields[field_name] = field_from_info(field_name, info)

        tables.append(
            TableDefinition(name=table_name, description=description, fields=tuple(fields.values()))
        )

    return tables


def fetch_tables(
    provider: IntrospectionProvider,
    conventions: SchemaConventions = DEFAULT_CONVENTIONS,
) -> list[TableDefinition]:
    """Collect introspection responses from a provider and build the tables.

    Raises:
        EmptySchemaError: If the provider reports no tables at all.
    """
    schema_info = normalize_schema_info(provider.info_for_db())
    if not schema_info.tables:
        raise EmptySchemaError("No tables found in schema information")

    table_infos = {
        name: provider.info_for_table(name)
        for name in schema_info.tables
        if conventions.is_user_table(name)
    }
    return tables_from_info_responses({"tables": schema_info.tables}, table_infos, conventions)
