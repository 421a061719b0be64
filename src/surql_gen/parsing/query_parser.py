"""Parser for the subset of SurrealQL queries that shape inference understands."""

from __future__ import annotations

import logging
import re
import threading
from dataclasses import dataclass, field
from typing import Any

import ply.yacc as yacc

from surql_gen.parsing.query_lexer import QueryLexer

logger = logging.getLogger(__name__)

SELECT = "SELECT"
UNKNOWN = "UNKNOWN"
# Statement kinds recognized by their leading keyword
STATEMENT_KINDS = ("SELECT", "CREATE", "UPDATE", "DELETE")

# SELECT <selection> FROM <table>, up to the first FROM keyword
_HEAD_RE = re.compile(r"^(?P<head>SELECT\b.*?\bFROM\s+(?P<table>`[^`]+`|\w+))", re.IGNORECASE | re.DOTALL)
# Further comma-separated tables right after the first one
_MORE_TABLES_RE = re.compile(r"^\s*,\s*(`[^`]+`|\w+)")
_CLAUSE_END = r"(?=\s+(?:WHERE|SPLIT|GROUP|ORDER|LIMIT|START|FETCH|TIMEOUT|PARALLEL|EXPLAIN)\b|\s*;|\s*$)"
_WHERE_RE = re.compile(rf"\bWHERE\s+(?P<expr>.+?){_CLAUSE_END}", re.IGNORECASE | re.DOTALL)
_CONDITION_RE = re.compile(r"(\w+)\s*([=<>!~?]+)\s*('[^']*'|\"[^\"]*\"|[\w.:-]+)")
_LIMIT_RE = re.compile(r"\bLIMIT\s+(?:BY\s+)?(\d+)", re.IGNORECASE)
_GROUP_RE = re.compile(rf"\bGROUP(?:\s+BY)?\s+(?P<expr>.+?){_CLAUSE_END}", re.IGNORECASE | re.DOTALL)
_ORDER_RE = re.compile(rf"\bORDER(?:\s+BY)?\s+(?P<expr>.+?){_CLAUSE_END}", re.IGNORECASE | re.DOTALL)


@dataclass
class TableReference:
    """A table named after FROM."""

    name: str
    alias: str | None = None


@dataclass
class NestedFieldSelection:
    """A sub-field selected through a reference, e.g. ``name`` in ``author.name``."""

    field: str
    nested: list[NestedFieldSelection] | None = None


@dataclass
class FieldSelection:
    """One entry of the selection list: ``*``, a field, or a field with sub-selections."""

    field: str
    nested: list[NestedFieldSelection] | None = None

    @property
    def is_wildcard(self) -> bool:
        return self.field == "*"


@dataclass
class Condition:
    """A simple ``field op value`` WHERE condition."""

    field: str
    operator: str
    value: Any


@dataclass
class ReturnModifier:
    """A clause that changes how results are returned (LIMIT, GROUP, ORDER)."""

    type: str
    value: Any


@dataclass
class ParsedQuery:
    """The parts of a query that shape inference needs."""

    type: str = UNKNOWN
    tables: list[TableReference] = field(default_factory=list)
    fields: list[FieldSelection] = field(default_factory=list)
    conditions: list[Condition] = field(default_factory=list)
    return_modifiers: list[ReturnModifier] = field(default_factory=list)
    is_array_result: bool = True

    @property
    def table(self) -> str | None:
        """The first table named after FROM."""
        return self.tables[0].name if self.tables else None

    @property
    def limit(self) -> int | None:
        for modifier in self.return_modifiers:
            if modifier.type == "LIMIT":
                return modifier.value
        return None


class QueryParser:
    """Parser for SurrealQL queries.

    The leading keyword decides the statement kind. For SELECT statements the
    head, ``SELECT <selection> FROM <table>``, is parsed with an LALR grammar;
    WHERE conditions and LIMIT, GROUP BY and ORDER BY modifiers are picked
    out of the remaining text.
    """

    tokens = QueryLexer.tokens

    def __init__(self) -> None:
        self.lexer = QueryLexer()
        self.lexer.build()
        self.parser: yacc.LRParser = None  # type: ignore

    def p_select_head(self, p: yacc.YaccProduction) -> None:
        """select_head : SELECT selection FROM IDENTIFIER"""
        p[0] = (p[2], p[4])

    def p_selection_single(self, p: yacc.YaccProduction) -> None:
        """selection : select_item"""
        p[0] = [p[1]]

    def p_selection_multiple(self, p: yacc.YaccProduction) -> None:
        """selection : selection COMMA select_item"""
        p[0] = p[1] + [p[3]]

    def p_select_item_star(self, p: yacc.YaccProduction) -> None:
        """select_item : STAR"""
        p[0] = ["*"]

    def p_select_item_path(self, p: yacc.YaccProduction) -> None:
        """select_item : field_path"""
        p[0] = p[1]

    def p_field_path_single(self, p: yacc.YaccProduction) -> None:
        """field_path : IDENTIFIER"""
        p[0] = [p[1]]

    def p_field_path_dotted(self, p: yacc.YaccProduction) -> None:
        """field_path : field_path DOT IDENTIFIER
                      | field_path DOT STAR"""
        p[0] = p[1] + [p[3]]

    def p_error(self, p: yacc.YaccProduction) -> None:
        if p:
            raise SyntaxError(f"Syntax error at '{p.value}' (position {p.lexpos})")
        else:
            raise SyntaxError("Syntax error at end of input")

    def build(self, **kwargs: Any) -> None:
        """Build the parser."""
        self.parser = yacc.yacc(module=self, start="select_head", **kwargs)

    def parse_head(self, head: str) -> tuple[list[list[str]], str]:
        """Parse ``SELECT <selection> FROM <table>`` into field paths and a table name.

        Raises:
            SyntaxError: If the head is outside the supported grammar.
        """
        if self.parser is None:
            self.build(debug=False, write_tables=False, errorlog=yacc.NullLogger())

        return self.parser.parse(head, lexer=self.lexer.lexer)

    def parse(self, data: str) -> ParsedQuery:
        """Parse a query string. Never raises for malformed input."""
        text = " ".join(data.split())
        keyword = text.split(" ", 1)[0].upper() if text else ""

        if keyword != SELECT:
            kind = keyword if keyword in STATEMENT_KINDS else UNKNOWN
            return ParsedQuery(type=kind)

        match = _HEAD_RE.match(text)
        if match is None:
            logger.warning("Query has no FROM clause: %s", text)
            return ParsedQuery(type=SELECT)

        table = match.group("table").strip("`")
        tail = text[match.end():]

        try:
            paths, table = self.parse_head(match.group("head"))
            fields = [selection_from_path(path) for path in paths]
        except SyntaxError as e:
            logger.warning("Could not parse selection of %r, selecting all fields: %s", text, e)
            fields = []

        query = ParsedQuery(type=SELECT, tables=[TableReference(table)], fields=fields)

        more = _MORE_TABLES_RE.match(tail)
        while more is not None:
            query.tables.append(TableReference(more.group(1).strip("`")))
            tail = tail[more.end():]
            more = _MORE_TABLES_RE.match(tail)

        where = _WHERE_RE.search(tail)
        if where:
            query.conditions = [
                Condition(field=name, operator=op, value=_unquote(value))
                for name, op, value in _CONDITION_RE.findall(where.group("expr"))
            ]

        group = _GROUP_RE.search(tail)
        if group:
            query.return_modifiers.append(ReturnModifier("GROUP", _split_list(group.group("expr"))))

        order = _ORDER_RE.search(tail)
        if order:
            query.return_modifiers.append(ReturnModifier("ORDER", _split_list(order.group("expr"))))

        limit = _LIMIT_RE.search(tail)
        if limit:
            count = int(limit.group(1))
            query.return_modifiers.append(ReturnModifier("LIMIT", count))
            query.is_array_result = count != 1

        return query


def selection_from_path(path: list[str]) -> FieldSelection:
    """Build a field selection from the segments of one selection entry.

    ``["*"]`` is the wildcard. A path with an interior ``*`` segment
    (``a.*.b``) becomes a chain of nested selections with the ``*`` segments
    skipped. Any other dotted path is read as ``field.subfield``; segments
    past the second are not modelled.
    """
    if path == ["*"]:
        return FieldSelection(field="*")

    head, rest = path[0], path[1:]
    if not rest:
        return FieldSelection(field=head)

    if "*" in rest[:-1]:
        chain = [segment for segment in rest if segment != "*"]
        nested: list[NestedFieldSelection] | None = None
        for segment in reversed(chain):
            nested = [NestedFieldSelection(field=segment, nested=nested)]
        return FieldSelection(field=head, nested=nested)

    return FieldSelection(field=head, nested=[NestedFieldSelection(field=rest[0])])


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
        return value[1:-1]
    return value


def _split_list(expr: str) -> list[str]:
    return [item.strip() for item in expr.split(",") if item.strip()]


_local = threading.local()


def parse_query(query: str) -> ParsedQuery:
    """Parse a query with a parser private to the calling thread."""
    parser = getattr(_local, "parser", None)
    if parser is None:
        parser = _local.parser = QueryParser()
    return parser.parse(query)
