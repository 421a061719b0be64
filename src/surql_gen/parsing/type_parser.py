"""Parser and resolver for field type expressions."""

from __future__ import annotations

import logging
import re
import threading
from dataclasses import dataclass, field
from typing import Any, Union

import ply.yacc as yacc

from surql_gen.parsing.type_lexer import TypeLexer
from surql_gen.types import Kind, Reference, TypeDescriptor

logger = logging.getLogger(__name__)


@dataclass
class TypeNode:
    """A named type, possibly parameterised: ``record<user>``, ``array<string, 10>``."""

    name: str
    args: list[TypeExpr] = field(default_factory=list)


@dataclass
class UnionNode:
    """Alternatives separated by ``|``."""

    options: list[TypeExpr]


@dataclass
class LiteralNode:
    """A literal value used as a type: ``"draft"`` or ``42``."""

    value: str | int | float


TypeExpr = Union[TypeNode, UnionNode, LiteralNode]


class TypeParser:
    """Parser for type expressions."""

    tokens = TypeLexer.tokens

    def __init__(self) -> None:
        self.lexer = TypeLexer()
        self.lexer.build()
        self.parser: yacc.LRParser = None  # type: ignore

    def p_type_expr(self, p: yacc.YaccProduction) -> None:
        """type_expr : union"""
        p[0] = p[1]

    def p_union_single(self, p: yacc.YaccProduction) -> None:
        """union : term"""
        p[0] = p[1]

    def p_union_multiple(self, p: yacc.YaccProduction) -> None:
        """union : union PIPE term"""
        if isinstance(p[1], UnionNode):
            p[1].options.append(p[3])
            p[0] = p[1]
        else:
            p[0] = UnionNode(options=[p[1], p[3]])

    def p_term_name(self, p: yacc.YaccProduction) -> None:
        """term : IDENTIFIER"""
        p[0] = TypeNode(name=p[1])

    def p_term_generic(self, p: yacc.YaccProduction) -> None:
        """term : IDENTIFIER LT arg_list GT"""
        p[0] = TypeNode(name=p[1], args=p[3])

    def p_term_literal(self, p: yacc.YaccProduction) -> None:
        """term : STRING
                | NUMBER"""
        p[0] = LiteralNode(value=p[1])

    def p_arg_list_single(self, p: yacc.YaccProduction) -> None:
        """arg_list : union"""
        p[0] = [p[1]]

    def p_arg_list_multiple(self, p: yacc.YaccProduction) -> None:
        """arg_list : arg_list COMMA union"""
        p[0] = p[1] + [p[3]]

    def p_error(self, p: yacc.YaccProduction) -> None:
        if p:
            raise SyntaxError(f"Syntax error at '{p.value}' (position {p.lexpos})")
        else:
            raise SyntaxError("Syntax error at end of input")

    def build(self, **kwargs: Any) -> None:
        """Build the parser."""
        kwargs.setdefault("errorlog", yacc.NullLogger())
        self.parser = yacc.yacc(module=self, start="type_expr", **kwargs)

    def parse(self, data: str) -> TypeExpr:
        """Parse a type expression into its syntax tree."""
        if self.parser is None:
            self.build(debug=False, write_tables=False)

        return self.parser.parse(data, lexer=self.lexer.lexer)


# Decorations that follow the type in a field definition
_REFERENCE_SUFFIX = re.compile(r"\s+REFERENCE\b.*$", re.IGNORECASE | re.DOTALL)

_SCALAR_ALIASES = {
    "int": Kind.INTEGER,
    "integer": Kind.INTEGER,
    "number": Kind.INTEGER,
    "bool": Kind.BOOLEAN,
    "boolean": Kind.BOOLEAN,
    "datetime": Kind.DATETIME,
}

# Union alternatives that only express absence
_NONE_NAMES = frozenset({"none", "null"})


class TypeResolver:
    """Resolve type expressions into TypeDescriptors.

    Resolution is total: anything that fails to lex or parse resolves to a
    plain, required ``string``.
    """

    def __init__(self, parser: TypeParser | None = None) -> None:
        self.parser = parser or TypeParser()

    def resolve(self, token: str | None) -> TypeDescriptor:
        """Resolve a raw type token from a field definition."""
        text = _clean_token(token)
        if not text:
            return TypeDescriptor()

        try:
            node = self.parser.parse(text)
        except SyntaxError as exc:
            logger.debug("Unparsable type %r, falling back to string: %s", text, exc)
            return TypeDescriptor()
        if node is None:
            return TypeDescriptor()

        return self.describe(node)

    def describe(self, node: TypeExpr) -> TypeDescriptor:
        """Build a descriptor from a parsed type expression."""
        node, is_optional = _unwrap_optional(node)
        if node is None:
            return TypeDescriptor(is_optional=is_optional)

        if isinstance(node, LiteralNode):
            kind = Kind.STRING if isinstance(node.value, str) else Kind.NUMBER
            return TypeDescriptor(kind=kind, is_optional=is_optional)

        if isinstance(node, UnionNode):
            kinds = {self.describe(option).kind for option in node.options}
            kind = kinds.pop() if len(kinds) == 1 else Kind.STRING
            # Union options never share one target table
            return TypeDescriptor(kind=kind, is_optional=is_optional)

        name = node.name.lower()

        if name == "record":
            table = _single_table(node)
            if table is None:
                return TypeDescriptor(kind=Kind.RECORD, is_optional=is_optional)
            return TypeDescriptor(
                kind=Kind.RECORD,
                is_optional=is_optional,
                reference=Reference(table=table, is_optional=is_optional),
            )

        if name == "references":
            table = _single_table(node)
            if table is None:
                return TypeDescriptor(kind=Kind.REFERENCES, is_optional=is_optional)
            return TypeDescriptor(
                kind=Kind.REFERENCES,
                is_optional=is_optional,
                reference=Reference(table=table, is_optional=is_optional),
            )

        if name == "array":
            inner = node.args[0] if node.args else None
            if isinstance(inner, TypeNode) and inner.name.lower() == "record":
                table = _single_table(inner)
                if table is not None:
                    # Elements are never individually optional, only the array is
                    return TypeDescriptor(
                        kind=Kind.ARRAY_OF_RECORD,
                        is_optional=is_optional,
                        reference=Reference(table=table, is_optional=False),
                    )
            if isinstance(inner, TypeNode) and inner.name.lower() == "float" and not inner.args:
                return TypeDescriptor(kind=Kind.ARRAY_OF_FLOAT, is_optional=is_optional)
            return TypeDescriptor(kind=Kind.ARRAY, is_optional=is_optional)

        return TypeDescriptor(kind=_SCALAR_ALIASES.get(name, name), is_optional=is_optional)


def _clean_token(token: str | None) -> str:
    """Strip DDL decorations that are not part of the type grammar."""
    if not token:
        return ""
    text = _REFERENCE_SUFFIX.sub("", token.strip())
    return text.rstrip().rstrip(";").strip()


def _unwrap_optional(node: TypeExpr) -> tuple[TypeExpr | None, bool]:
    """Peel ``option<...>`` wrappers and ``| none`` alternatives."""
    is_optional = False
    while True:
        if isinstance(node, TypeNode) and node.name.lower() == "option":
            is_optional = True
            if not node.args:
                return None, is_optional
            node = node.args[0]
            continue
        if isinstance(node, UnionNode):
            present = [
                option
                for option in node.options
                if not (isinstance(option, TypeNode) and option.name.lower() in _NONE_NAMES)
            ]
            if len(present) != len(node.options):
                is_optional = True
                if not present:
                    return None, is_optional
                node = present[0] if len(present) == 1 else UnionNode(options=present)
                continue
        return node, is_optional


def _single_table(node: TypeNode) -> str | None:
    """Return the one table a ``record<...>`` style node points at, if any."""
    if len(node.args) != 1:
        return None
    target = node.args[0]
    if isinstance(target, TypeNode) and not target.args:
        return target.name
    return None


_local = threading.local()


def _default_resolver() -> TypeResolver:
    # ply parsers keep per-parse state on the instance; one per thread
    resolver = getattr(_local, "resolver", None)
    if resolver is None:
        resolver = TypeResolver()
        _local.resolver = resolver
    return resolver


def resolve_type(token: str | None) -> TypeDescriptor:
    """Resolve a type token using a shared per-thread resolver."""
    return _default_resolver().resolve(token)
