"""Post-processing of parsed tables: dangling references and field-name conventions."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable

from surql_gen.config import DEFAULT_CONVENTIONS, SchemaConventions
from surql_gen.types import FieldDefinition, Kind, TableDefinition

logger = logging.getLogger(__name__)


def validate_references(
    tables: Iterable[TableDefinition],
    conventions: SchemaConventions = DEFAULT_CONVENTIONS,
) -> list[TableDefinition]:
    """Return tables with references to undeclared tables downgraded.

    ``array_of_record`` and ``references`` fields pointing at an unknown table
    become generic ``array`` fields; ``record`` fields keep their kind but lose
    the reference. Fields named in ``conventions.float_vector_fields`` whose
    kind is a generic ``array`` become ``array_of_float``.

    Tables and fields are never added or removed, and applying the function to
    its own output changes nothing.
    """
    tables = list(tables)
    declared = {table.name.lower() for table in tables}

    return [
        replace(
            table,
            fields=tuple(
                _validate_field(table.name, f, declared, conventions) for f in table.fields
            ),
        )
        for table in tables
    ]


def _validate_field(
    table_name: str,
    field_def: FieldDefinition,
    declared: set[str],
    conventions: SchemaConventions,
) -> FieldDefinition:
    reference = field_def.reference
    if reference is not None and reference.table.lower() not in declared:
        logger.info(
            "Field %s.%s references undeclared table %r, dropping the reference",
            table_name,
            field_def.name,
            reference.table,
        )
        if field_def.type in (Kind.ARRAY_OF_RECORD, Kind.REFERENCES):
            field_def = replace(field_def, type=Kind.ARRAY, reference=None)
        else:
            field_def = replace(field_def, reference=None)

    if field_def.name in conventions.float_vector_fields and field_def.type == Kind.ARRAY:
        field_def = replace(field_def, type=Kind.ARRAY_OF_FLOAT)

    return field_def
