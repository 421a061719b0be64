"""Schema class tying DDL parsing, validation and query inference together."""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from surql_gen.config import DEFAULT_CONVENTIONS, SchemaConventions
from surql_gen.inference import ShapeInferrer
from surql_gen.introspection import (
    IntrospectionProvider,
    fetch_tables,
    tables_from_info_responses,
)
from surql_gen.parsing.ddl_parser import DDLParser
from surql_gen.parsing.query_parser import parse_query
from surql_gen.registry import SchemaRegistry
from surql_gen.shapes import Shape
from surql_gen.types import TableDefinition
from surql_gen.validation import validate_references


class Schema:
    """Validated table definitions and the registry used to infer query shapes."""

    def __init__(
        self,
        tables: Iterable[TableDefinition],
        conventions: SchemaConventions = DEFAULT_CONVENTIONS,
    ) -> None:
        """Initialize a schema.

        Args:
            tables: Table definitions; references to undeclared tables are
                downgraded before the schema is built.
            conventions: Schema naming conventions.
        """
        self.conventions = conventions
        self.tables = validate_references(tables, conventions)
        self.registry = SchemaRegistry(self.tables)

    @classmethod
    def parse(cls, ddl: str, conventions: SchemaConventions = DEFAULT_CONVENTIONS) -> Schema:
        """Parse DDL text and create a schema.

        Args:
            ddl: Text made of DEFINE TABLE and DEFINE FIELD statements.
            conventions: Schema naming conventions.

        Returns:
            A new Schema instance.
        """
        parser = DDLParser()
        return cls(parser.parse(ddl), conventions)

    @classmethod
    def from_info_responses(
        cls,
        db_info: Any,
        table_infos: Mapping[str, Any],
        conventions: SchemaConventions = DEFAULT_CONVENTIONS,
    ) -> Schema:
        """Create a schema from database and per-table introspection responses."""
        return cls(tables_from_info_responses(db_info, table_infos, conventions), conventions)

    @classmethod
    def from_provider(
        cls,
        provider: IntrospectionProvider,
        conventions: SchemaConventions = DEFAULT_CONVENTIONS,
    ) -> Schema:
        """Create a schema from a live introspection provider.

        Raises:
            EmptySchemaError: If the provider reports no tables.
        """
        return cls(fetch_tables(provider, conventions), conventions)

    def get_table(self, name: str) -> TableDefinition:
        """Get a table definition by case-insensitive name.

        Raises:
            KeyError: If the table is not found.
        """
        for table in self.tables:
            if table.name.lower() == name.lower():
                return table
        raise KeyError(f"Unknown table: {name}")

    def list_tables(self) -> list[str]:
        """List all table names in declaration order."""
        return [table.name for table in self.tables]

    def infer(self, query: str) -> Shape:
        """Infer the result shape of a query string against this schema."""
        return ShapeInferrer(self.registry).infer(parse_query(query))

    def to_dict(self) -> list[dict[str, Any]]:
        """Convert all tables into plain data."""
        return [table.to_dict() for table in self.tables]
