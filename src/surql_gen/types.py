"""Table and field definitions for the surql_gen library."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any


class Kind:
    """Known base kinds a type expression resolves to.

    The set is open: type names the resolver does not recognise pass through
    lowercased (``decimal``, ``duration``, ``geometry`` ...).
    """

    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    FLOAT = "float"
    DECIMAL = "decimal"
    BOOLEAN = "boolean"
    DATETIME = "datetime"
    OBJECT = "object"
    ARRAY = "array"
    ARRAY_OF_FLOAT = "array_of_float"
    ARRAY_OF_RECORD = "array_of_record"
    RECORD = "record"
    REFERENCES = "references"


# Kinds that carry a pointer to another table
REFERENCE_KINDS: frozenset[str] = frozenset(
    {Kind.RECORD, Kind.REFERENCES, Kind.ARRAY_OF_RECORD}
)

# Kinds whose values are collections of records
COLLECTION_KINDS: frozenset[str] = frozenset({Kind.REFERENCES, Kind.ARRAY_OF_RECORD})


@dataclass(frozen=True)
class Reference:
    """Pointer from a field to another table."""

    table: str
    is_optional: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"table": self.table, "is_optional": self.is_optional}


@dataclass(frozen=True)
class TypeDescriptor:
    """Result of resolving a single type expression like ``option<record<user>>``."""

    kind: str = Kind.STRING
    is_optional: bool = False
    reference: Reference | None = None

    @property
    def is_reference(self) -> bool:
        """Return whether the kind points at another table."""
        return self.kind in REFERENCE_KINDS


@dataclass(frozen=True)
class FieldDefinition:
    """A field declared on a table."""

    name: str
    type: str = Kind.STRING
    optional: bool = False
    description: str | None = None
    default_value: str | None = None
    reference: Reference | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return a plain-data representation, omitting absent attributes."""
        result: dict[str, Any] = {
            "name": self.name,
            "type": self.type,
            "optional": self.optional,
        }
        if self.description is not None:
            result["description"] = self.description
        if self.default_value is not None:
            result["default_value"] = self.default_value
        if self.reference is not None:
            result["reference"] = self.reference.to_dict()
        return result


@dataclass(frozen=True)
class TableDefinition:
    """A table with its fields in declaration order."""

    name: str
    description: str | None = None
    fields: tuple[FieldDefinition, ...] = field(default_factory=tuple)

    def get_field(self, name: str) -> FieldDefinition | None:
        """Get a field by name."""
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def field_names(self) -> list[str]:
        """List field names in declaration order."""
        return [f.name for f in self.fields]

    def with_field(self, new_field: FieldDefinition) -> TableDefinition:
        """Return a copy with the field added.

        A field with the same name replaces the earlier declaration in place,
        so the last declaration wins and field order stays stable.
        """
        fields = list(self.fields)
        for i, existing in enumerate(fields):
            if existing.name == new_field.name:
                fields[i] = new_field
                return replace(self, fields=tuple(fields))
        fields.append(new_field)
        return replace(self, fields=tuple(fields))

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"name": self.name}
        if self.description is not None:
            result["description"] = self.description
        result["fields"] = [f.to_dict() for f in self.fields]
        return result
