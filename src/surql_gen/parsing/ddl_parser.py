"""Line-oriented parser for DEFINE TABLE / DEFINE FIELD documents.

The parser is a finite-state machine. ``DDLParser.step`` maps a state and one
logical line to the next state without touching anything else, so the parser
can be driven line by line as well as over a whole document.

Descriptions are taken, in priority order, from a ``COMMENT`` clause on the
statement line, a ``COMMENT`` clause on one of its continuation lines, or the
``--`` comment line directly above the statement.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace
from typing import Sequence

from surql_gen.parsing.clauses import (
    extract_comment,
    extract_default,
    has_optional_marker,
    is_statement_terminated,
    split_statements,
)
from surql_gen.parsing.type_parser import resolve_type
from surql_gen.types import FieldDefinition, TableDefinition

logger = logging.getLogger(__name__)

_DEFINE_RE = re.compile(r"^DEFINE\b", re.IGNORECASE)

_FIELD_PREFIX_RE = re.compile(r"^DEFINE\s+FIELD\b", re.IGNORECASE)

_TABLE_RE = re.compile(
    r"^DEFINE\s+TABLE\s+(?:OVERWRITE\s+|IF\s+NOT\s+EXISTS\s+)?`?(\w+)`?",
    re.IGNORECASE,
)

_FIELD_RE = re.compile(
    r"^DEFINE\s+FIELD\s+(?:OVERWRITE\s+|IF\s+NOT\s+EXISTS\s+)?(?P<name>\S+)"
    r"\s+ON\s+(?:TABLE\s+)?`?(?P<table>\w+)`?(?P<rest>.*)$",
    re.IGNORECASE | re.DOTALL,
)

# The type grammar never contains these keywords, so they end the type token
_TYPE_RE = re.compile(
    r"\bTYPE\s+(?P<type>.*?)\s*"
    r"(?=\b(?:DEFAULT|VALUE|COMMENT|PERMISSIONS|ASSERT|READONLY|OPTIONAL|FLEXIBLE)\b|;|$)",
    re.DOTALL,
)


@dataclass(frozen=True)
class OpenStatement:
    """A DEFINE statement that may still receive continuation lines."""

    table_index: int
    # None for a DEFINE TABLE statement
    field: FieldDefinition | None = None
    fallback_description: str | None = None


@dataclass(frozen=True)
class ParserState:
    """Immutable cursor over a DDL document."""

    tables: tuple[TableDefinition, ...] = field(default_factory=tuple)
    current_table: int | None = None
    pending_description: str | None = None
    open_statement: OpenStatement | None = None


def parse_field_statement(line: str) -> tuple[str, FieldDefinition] | None:
    """Parse a single DEFINE FIELD statement.

    Returns:
        The owning table name as written and the field, or None when the line
        is not a field definition or defines an array element or nested
        sub-field (``tags[*]``, ``tags.*``, ``address.city``).
    """
    match = match_field_statement(line)
    if match is None:
        return None

    name = match.group("name")
    if "[" in name or "." in name:
        logger.debug("Skipping sub-field definition %r", name)
        return None

    return match.group("table"), field_from_clauses(name, match.group("rest"))


def field_from_clauses(name: str, clauses: str) -> FieldDefinition:
    """Build a field from the clause text that follows ``ON <table>``."""
    # TYPE and OPTIONAL are looked up before a COMMENT clause, whose text may mention them
    before_comment = clauses.split("COMMENT", 1)[0]
    type_match = _TYPE_RE.search(before_comment)
    type_token = type_match.group("type") if type_match else ""
    descriptor = resolve_type(type_token)

    return FieldDefinition(
        name=name,
        type=descriptor.kind,
        optional=descriptor.is_optional or has_optional_marker(before_comment),
        description=extract_comment(clauses),
        default_value=extract_default(clauses),
        reference=descriptor.reference,
    )


def match_field_statement(line: str) -> re.Match[str] | None:
    """Match a DEFINE FIELD statement, exposing ``name``, ``table`` and ``rest`` groups."""
    return _FIELD_RE.match(line.strip())


def find_table(tables: Sequence[TableDefinition], name: str) -> int | None:
    """Find a table index by case-insensitive name."""
    wanted = name.lower()
    for i, table in enumerate(tables):
        if table.name.lower() == wanted:
            return i
    return None


class DDLParser:
    """Parser turning DDL text into TableDefinitions."""

    def parse(self, text: str) -> list[TableDefinition]:
        """Parse a complete DDL document."""
        state = ParserState()
        for physical_line in text.splitlines():
            for line in split_statements(physical_line):
                state = self.step(state, line)
        return self.finish(state)

    def step(self, state: ParserState, line: str) -> ParserState:
        """Advance the parser by one logical line."""
        stripped = line.strip()
        is_define = _DEFINE_RE.match(stripped) is not None

        if state.open_statement is not None:
            if stripped and not is_define and not stripped.startswith("--"):
                return self._continue_statement(state, stripped)
            state = self._close_statement(state)

        if stripped.startswith("--"):
            text = stripped[2:].strip()
            if text and text.strip("-"):
                return replace(state, pending_description=text)
            return state

        if not stripped:
            return replace(state, pending_description=None)

        table_match = _TABLE_RE.match(stripped)
        if table_match:
            return self._define_table(state, table_match.group(1), stripped)

        if _FIELD_PREFIX_RE.match(stripped) and state.current_table is not None:
            parsed = parse_field_statement(stripped)
            if parsed is not None:
                return self._define_field(state, parsed[0], parsed[1], stripped)
            return replace(state, pending_description=None)

        return state

    def finish(self, state: ParserState) -> list[TableDefinition]:
        """Close any open statement and return the tables."""
        if state.open_statement is not None:
            state = self._close_statement(state)
        return list(state.tables)

    def _define_table(self, state: ParserState, name: str, line: str) -> ParserState:
        description = extract_comment(line)
        tables = list(state.tables)
        index = find_table(tables, name)
        if index is None:
            tables.append(TableDefinition(name=name, description=description))
            index = len(tables) - 1
        elif description is not None:
            # Redeclaration reopens the table
            tables[index] = replace(tables[index], description=description)

        open_statement = None
        if not is_statement_terminated(line):
            open_statement = OpenStatement(
                table_index=index, fallback_description=state.pending_description
            )
        elif description is None and tables[index].description is None:
            tables[index] = replace(tables[index], description=state.pending_description)

        return ParserState(
            tables=tuple(tables),
            current_table=index,
            pending_description=None,
            open_statement=open_statement,
        )

    def _define_field(
        self, state: ParserState, table_name: str, new_field: FieldDefinition, line: str
    ) -> ParserState:
        index = find_table(state.tables, table_name)
        if index is None:
            logger.debug(
                "Dropping field %r: table %r is not defined", new_field.name, table_name
            )
            return replace(state, pending_description=None)

        open_statement = OpenStatement(
            table_index=index,
            field=new_field,
            fallback_description=state.pending_description,
        )
        state = replace(state, pending_description=None, open_statement=open_statement)
        if is_statement_terminated(line):
            return self._close_statement(state)
        return state

    def _continue_statement(self, state: ParserState, line: str) -> ParserState:
        statement = state.open_statement
        assert statement is not None

        if statement.field is None:
            table = state.tables[statement.table_index]
            if table.description is None:
                comment = extract_comment(line)
                if comment is not None:
                    tables = list(state.tables)
                    tables[statement.table_index] = replace(table, description=comment)
                    state = replace(state, tables=tuple(tables))
        else:
            updated = statement.field
            if updated.description is None:
                comment = extract_comment(line)
                if comment is not None:
                    updated = replace(updated, description=comment)
            if updated.default_value is None:
                default = extract_default(line)
                if default is not None:
                    updated = replace(updated, default_value=default)
            if updated is not statement.field:
                state = replace(state, open_statement=replace(statement, field=updated))

        if is_statement_terminated(line):
            return self._close_statement(state)
        return state

    def _close_statement(self, state: ParserState) -> ParserState:
        statement = state.open_statement
        assert statement is not None

        tables = list(state.tables)
        table = tables[statement.table_index]
        if statement.field is None:
            if table.description is None and statement.fallback_description is not None:
                tables[statement.table_index] = replace(
                    table, description=statement.fallback_description
                )
        else:
            new_field = statement.field
            if new_field.description is None and statement.fallback_description is not None:
                new_field = replace(new_field, description=statement.fallback_description)
            tables[statement.table_index] = table.with_field(new_field)

        return replace(state, tables=tuple(tables), open_statement=None)


def parse_ddl(text: str) -> list[TableDefinition]:
    """Parse a DDL document into TableDefinitions."""
    return DDLParser().parse(text)
