"""Parsing module for DDL statements, field types and queries."""

from surql_gen.parsing.ddl_parser import DDLParser, ParserState, parse_ddl
from surql_gen.parsing.query_parser import (
    FieldSelection,
    NestedFieldSelection,
    ParsedQuery,
    QueryParser,
    parse_query,
)
from surql_gen.parsing.type_parser import TypeParser, TypeResolver, resolve_type

__all__ = [
    "DDLParser",
    "FieldSelection",
    "NestedFieldSelection",
    "ParsedQuery",
    "ParserState",
    "QueryParser",
    "TypeParser",
    "TypeResolver",
    "parse_ddl",
    "parse_query",
    "resolve_type",
]
