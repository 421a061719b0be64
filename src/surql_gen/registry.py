"""Read-only index of table schemas used for query inference."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Mapping

from surql_gen.types import COLLECTION_KINDS, Reference, TableDefinition


@dataclass(frozen=True)
class FieldSchema:
    """The parts of a field that matter for shape inference."""

    name: str
    type: str
    optional: bool = False
    reference: Reference | None = None


@dataclass(frozen=True)
class TableSchema:
    """A table's fields keyed by name, in declaration order."""

    name: str
    fields: Mapping[str, FieldSchema] = field(default_factory=dict)

    def __hash__(self) -> int:
        return hash(self.name)


@dataclass(frozen=True)
class Relationship:
    """A reference from one table to another through a field."""

    from_table: str
    to_table: str
    through_field: str
    type: str  # one-to-one, one-to-many


class SchemaRegistry:
    """Table-name index over finalized table definitions.

    Lookups are case-insensitive. Registering builds a new index and swaps it
    in with a single assignment, so readers always see either the old or the
    new set of tables, never a partial update.
    """

    def __init__(self, tables: Iterable[TableDefinition] | None = None) -> None:
        self._schemas: dict[str, TableSchema] = {}
        if tables is not None:
            self.register_tables(tables)

    def register_tables(self, tables: Iterable[TableDefinition]) -> None:
        """Register several tables, replacing any with the same name."""
        schemas = dict(self._schemas)
        for table in tables:
            schemas[table.name.lower()] = _table_schema(table)
        self._schemas = schemas

    def register_table(self, table: TableDefinition) -> None:
        """Register one table, replacing any with the same name."""
        self.register_tables([table])

    def get_table_schema(self, name: str) -> TableSchema | None:
        """Get a table schema by case-insensitive name."""
        return self._schemas.get(name.lower())

    def list_tables(self) -> list[str]:
        """List registered table names as declared."""
        return [schema.name for schema in self._schemas.values()]

    def resolve_field_path(self, table_name: str, path: list[str]) -> FieldSchema | None:
        """Resolve a dotted field path, following references between tables.

        Args:
            table_name: Table the path starts from.
            path: Field names, e.g. ``["author", "name"]``.

        Returns:
            The schema of the last field, or None if any step does not resolve.
        """
        table = self.get_table_schema(table_name)
        if table is None or not path:
            return None

        field_schema: FieldSchema | None = None
        for i, name in enumerate(path):
            field_schema = table.fields.get(name)
            if field_schema is None:
                return None
            if i < len(path) - 1:
                if field_schema.reference is None:
                    return None
                next_table = self.get_table_schema(field_schema.reference.table)
                if next_table is None:
                    return None
                table = next_table
        return field_schema

    def get_relationships(self, table_name: str) -> list[Relationship]:
        """List the references a table's fields make to other tables."""
        table = self.get_table_schema(table_name)
        if table is None:
            return []
        return [
            Relationship(
                from_table=table.name,
                to_table=f.reference.table,
                through_field=f.name,
                type="one-to-many" if f.type in COLLECTION_KINDS else "one-to-one",
            )
            for f in table.fields.values()
            if f.reference is not None
        ]

    def __contains__(self, name: str) -> bool:
        return name.lower() in self._schemas

    def __len__(self) -> int:
        return len(self._schemas)


def _table_schema(table: TableDefinition) -> TableSchema:
    fields = {
        f.name: FieldSchema(name=f.name, type=f.type, optional=f.optional, reference=f.reference)
        for f in table.fields
    }
    return TableSchema(name=table.name, fields=fields)
