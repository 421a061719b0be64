"""Inferring the result shape of a parsed query from the registered schema."""

from __future__ import annotations

import logging
from typing import Sequence

from surql_gen.parsing.query_parser import (
    SELECT,
    FieldSelection,
    NestedFieldSelection,
    ParsedQuery,
    parse_query,
)
from surql_gen.registry import FieldSchema, SchemaRegistry, TableSchema
from surql_gen.shapes import (
    BOOLEAN,
    DATE,
    INTEGER,
    NUMBER,
    OPEN_MAP,
    STRING,
    UNKNOWN,
    ArrayShape,
    LiteralShape,
    OptionalShape,
    RecordIdShape,
    Shape,
    StructShape,
    UnionShape,
)
from surql_gen.types import COLLECTION_KINDS

logger = logging.getLogger(__name__)

# What a CREATE/UPDATE/DELETE statement returns regardless of the table
STATEMENT_RESULT_SHAPE = StructShape(
    {
        "status": LiteralShape("OK"),
        "time": STRING,
        "result": UnionShape((LiteralShape(True), ArrayShape(UNKNOWN))),
    }
)

_SCALARS: dict[str, Shape] = {
    "string": STRING,
    "number": NUMBER,
    "float": NUMBER,
    "decimal": NUMBER,
    "int": INTEGER,
    "integer": INTEGER,
    "bool": BOOLEAN,
    "boolean": BOOLEAN,
    "datetime": DATE,
    "object": OPEN_MAP,
    "array": ArrayShape(UNKNOWN),
    "array_of_float": ArrayShape(NUMBER),
}


def shape_for_field(field: FieldSchema) -> Shape:
    """Map a field to its leaf shape, wrapped in an optional marker if the field is optional."""
    if field.type == "record":
        shape: Shape = RecordIdShape(field.reference.table) if field.reference else STRING
    elif field.type in COLLECTION_KINDS:
        shape = ArrayShape(RecordIdShape(field.reference.table) if field.reference else STRING)
    else:
        shape = _SCALARS.get(field.type, UNKNOWN)
    return OptionalShape(shape) if field.optional else shape


class ShapeInferrer:
    """Infers result shapes of parsed queries against a schema registry.

    Inference is pure: it reads the registry and never performs I/O, so the
    same query and registry always give the same shape.
    """

    def __init__(self, registry: SchemaRegistry) -> None:
        self.registry = registry

    def infer(self, query: ParsedQuery) -> Shape:
        """Infer the shape of a query's result."""
        if query.type != SELECT:
            return STATEMENT_RESULT_SHAPE

        table_name = query.table
        table = self.registry.get_table_schema(table_name) if table_name else None
        if table is None:
            logger.debug("No schema for table %r, shape is unknown", table_name)
            return UNKNOWN

        shape: Shape = self._select(table, query.fields)
        if query.is_array_result:
            shape = ArrayShape(shape)
        return shape

    def _select(self, table: TableSchema, selections: Sequence[FieldSelection]) -> StructShape:
        if not selections or any(s.is_wildcard for s in selections):
            fields = {name: shape_for_field(f) for name, f in table.fields.items()}
            for selection in selections:
                if selection.is_wildcard or not selection.nested:
                    continue
                field = table.fields.get(selection.field)
                if field is not None:
                    fields[selection.field] = self._expand(field, selection.nested)
            return StructShape(fields)

        return StructShape(self._pick(table, selections))

    def _pick(
        self,
        table: TableSchema,
        selections: Sequence[FieldSelection | NestedFieldSelection],
    ) -> dict[str, Shape]:
        fields: dict[str, Shape] = {}
        for selection in selections:
            if selection.field == "*":
                fields.update((name, shape_for_field(f)) for name, f in table.fields.items())
                continue
            field = table.fields.get(selection.field)
            if field is None:
                logger.debug("Field %r not in table %r, skipped", selection.field, table.name)
                continue
            if selection.nested:
                fields[selection.field] = self._expand(field, selection.nested)
            else:
                fields[selection.field] = shape_for_field(field)
        return fields

    def _expand(self, field: FieldSchema, nested: Sequence[NestedFieldSelection]) -> Shape:
        """Expand a reference field into the selected fields of the table it points to."""
        if field.reference is None:
            return UNKNOWN
        target = self.registry.get_table_schema(field.reference.table)
        if target is None:
            return UNKNOWN

        shape: Shape = StructShape(self._pick(target, nested))
        if field.type in COLLECTION_KINDS:
            shape = ArrayShape(shape)
        return shape


def infer_shape(query: ParsedQuery, registry: SchemaRegistry) -> Shape:
    """Infer the shape of a parsed query's result."""
    return ShapeInferrer(registry).infer(query)


def infer_query_shape(query: str, registry: SchemaRegistry) -> Shape:
    """Parse a query string and infer the shape of its result."""
    return infer_shape(parse_query(query), registry)
