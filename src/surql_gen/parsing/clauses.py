"""Extraction of COMMENT, DEFAULT/VALUE and OPTIONAL clauses from DDL lines."""

from __future__ import annotations

import re

# A ``$VALUE`` parameter inside ASSERT is not a VALUE clause
_DEFAULT_RE = re.compile(
    r"(?<![\w$])(?:DEFAULT(?:\s+ALWAYS)?|VALUE)\s+(.+?)\s*(?=\bCOMMENT\b|\bPERMISSIONS\b|\bASSERT\b|\bREADONLY\b|;|$)",
    re.DOTALL,
)

_OPTIONAL_RE = re.compile(r"\bOPTIONAL\b")


def _quoted_span(line: str, offset: int) -> tuple[int, int] | None:
    """Return the indices of the quotes around the first string after offset."""
    quote = '"'
    start = line.find(quote, offset)
    if start == -1:
        quote = "'"
        start = line.find(quote, offset)
        if start == -1:
            return None

    search = start + 1
    while search < len(line):
        end = line.find(quote, search)
        if end == -1:
            return None
        if line[end - 1] == "\\":
            search = end + 1
            continue
        return start, end
    return None


def extract_comment(line: str) -> str | None:
    """Return the quoted payload of a ``COMMENT`` clause.

    The first double quote after the keyword opens the span, falling back to a
    single quote. The span ends at the next unescaped quote of the same kind.
    Returns None when the line has no complete quoted span after ``COMMENT``,
    or when the payload is empty.
    """
    comment_index = line.find("COMMENT")
    if comment_index == -1:
        return None

    span = _quoted_span(line, comment_index)
    if span is None:
        return None
    start, end = span
    return line[start + 1:end] or None


def strip_comment(line: str) -> str:
    """Remove a ``COMMENT`` clause and its quoted payload from a line.

    Without a complete quoted span everything from the keyword on is dropped.
    """
    comment_index = line.find("COMMENT")
    if comment_index == -1:
        return line

    span = _quoted_span(line, comment_index)
    if span is None:
        return line[:comment_index]
    return line[:comment_index] + line[span[1] + 1:]


def extract_default(line: str) -> str | None:
    """Return the expression of a ``DEFAULT [ALWAYS]`` or ``VALUE`` clause.

    Text inside a COMMENT payload is never read as a clause.
    """
    match = _DEFAULT_RE.search(strip_comment(line))
    if match is None:
        return None
    value = match.group(1).strip()
    return value or None


def has_optional_marker(line: str) -> bool:
    """Check whether a line carries the literal ``OPTIONAL`` marker."""
    return _OPTIONAL_RE.search(line) is not None


def is_statement_terminated(line: str) -> bool:
    """Check whether a line ends its statement with a semicolon."""
    return line.rstrip().endswith(";")


def split_statements(line: str) -> list[str]:
    """Split one physical line into its ``;``-terminated statements.

    Semicolons inside quoted strings do not split. A ``--`` comment trailing a
    statement on the same line is dropped; a line that is only a comment is
    returned unchanged.
    """
    stripped = line.strip()
    if not stripped or stripped.startswith("--"):
        return [stripped]

    statements: list[str] = []
    current: list[str] = []
    quote: str | None = None
    i = 0
    while i < len(stripped):
        ch = stripped[i]
        if quote is not None:
            current.append(ch)
            if ch == "\\" and i + 1 < len(stripped):
                current.append(stripped[i + 1])
                i += 2
                continue
            if ch == quote:
                quote = None
        elif ch in ('"', "'"):
            quote = ch
            current.append(ch)
        elif ch == "-" and stripped.startswith("--", i) and statements:
            # Trailing comment after a completed statement
            if not "".join(current).strip():
                break
            current.append(ch)
        elif ch == ";":
            current.append(ch)
            statements.append("".join(current).strip())
            current = []
        else:
            current.append(ch)
        i += 1

    rest = "".join(current).strip()
    if rest:
        statements.append(rest)
    return statements
