"""Shape descriptors: the inferred structure of a query result."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union


class ScalarKind(Enum):
    """Leaf kinds of a shape tree."""

    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    DATE = "date"
    OPEN_MAP = "open_map"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ScalarShape:
    """A leaf value."""

    kind: ScalarKind


@dataclass(frozen=True)
class LiteralShape:
    """Exactly one literal value."""

    value: str | int | float | bool


@dataclass(frozen=True)
class RecordIdShape:
    """An opaque record identifier pointing into a table."""

    table: str


@dataclass(frozen=True)
class ArrayShape:
    """A list of elements of one shape."""

    element: Shape


@dataclass(frozen=True)
class StructShape:
    """An object with named fields, in selection order."""

    fields: dict[str, Shape] = field(default_factory=dict)

    def __hash__(self) -> int:
        return hash(tuple(self.fields.items()))


@dataclass(frozen=True)
class OptionalShape:
    """A value that may be absent."""

    inner: Shape


@dataclass(frozen=True)
class UnionShape:
    """One of several shapes."""

    options: tuple[Shape, ...]


Shape = Union[
    ScalarShape, LiteralShape, RecordIdShape, ArrayShape, StructShape, OptionalShape, UnionShape
]

STRING = ScalarShape(ScalarKind.STRING)
NUMBER = ScalarShape(ScalarKind.NUMBER)
INTEGER = ScalarShape(ScalarKind.INTEGER)
BOOLEAN = ScalarShape(ScalarKind.BOOLEAN)
DATE = ScalarShape(ScalarKind.DATE)
OPEN_MAP = ScalarShape(ScalarKind.OPEN_MAP)
UNKNOWN = ScalarShape(ScalarKind.UNKNOWN)


def shape_to_dict(shape: Shape) -> dict[str, Any]:
    """Convert a shape tree into plain data."""
    if isinstance(shape, ScalarShape):
        return {"type": shape.kind.value}
    if isinstance(shape, LiteralShape):
        return {"type": "literal", "value": shape.value}
    if isinstance(shape, RecordIdShape):
        return {"type": "record_id", "table": shape.table}
    if isinstance(shape, ArrayShape):
        return {"type": "array", "element": shape_to_dict(shape.element)}
    if isinstance(shape, StructShape):
        return {
            "type": "struct",
            "fields": {name: shape_to_dict(inner) for name, inner in shape.fields.items()},
        }
    if isinstance(shape, OptionalShape):
        return {"type": "optional", "inner": shape_to_dict(shape.inner)}
    if isinstance(shape, UnionShape):
        return {"type": "union", "options": [shape_to_dict(option) for option in shape.options]}
    raise TypeError(f"Not a shape: {shape!r}")


def render_shape(shape: Shape) -> str:
    """Render a shape in a compact, TypeScript-like notation.

    ``{name: string, author?: record<user>}[]``
    """
    if isinstance(shape, ScalarShape):
        return shape.kind.value
    if isinstance(shape, LiteralShape):
        return repr(shape.value) if isinstance(shape.value, str) else str(shape.value).lower()
    if isinstance(shape, RecordIdShape):
        return f"record<{shape.table}>"
    if isinstance(shape, ArrayShape):
        inner = render_shape(shape.element)
        if isinstance(shape.element, UnionShape):
            inner = f"({inner})"
        return f"{inner}[]"
    if isinstance(shape, StructShape):
        parts = []
        for name, inner in shape.fields.items():
            if isinstance(inner, OptionalShape):
                parts.append(f"{name}?: {render_shape(inner.inner)}")
            else:
                parts.append(f"{name}: {render_shape(inner)}")
        return "{" + ", ".join(parts) + "}"
    if isinstance(shape, OptionalShape):
        return f"{render_shape(shape.inner)} | none"
    if isinstance(shape, UnionShape):
        return " | ".join(render_shape(option) for option in shape.options)
    raise TypeError(f"Not a shape: {shape!r}")
