"""Tests for the query lexer and parser."""

import pytest

from surql_gen.parsing.query_lexer import QueryLexer
from surql_gen.parsing.query_parser import (
    Condition,
    FieldSelection,
    NestedFieldSelection,
    ParsedQuery,
    QueryParser,
    ReturnModifier,
    TableReference,
    parse_query,
    selection_from_path,
)


class TestQueryLexer:
    """Tests for the query lexer."""

    def test_tokenize_select(self):
        """Test tokenizing a SELECT head."""
        lexer = QueryLexer()
        lexer.build()

        tokens = lexer.tokenize("SELECT *, author.name FROM post")
        token_types = [t.type for t in tokens]

        assert token_types == [
            "SELECT", "STAR", "COMMA", "IDENTIFIER", "DOT", "IDENTIFIER", "FROM", "IDENTIFIER",
        ]

    def test_keywords_case_insensitive(self):
        """Test that keywords are recognized in any case."""
        lexer = QueryLexer()
        lexer.build()

        tokens = lexer.tokenize("select name from User")

        assert [t.type for t in tokens] == ["SELECT", "IDENTIFIER", "FROM", "IDENTIFIER"]
        assert tokens[3].value == "User"

    def test_backtick_keyword(self):
        """Test that a backtick-quoted keyword is an identifier."""
        lexer = QueryLexer()
        lexer.build()

        tokens = lexer.tokenize("SELECT `from` FROM t")

        assert tokens[1].type == "IDENTIFIER"
        assert tokens[1].value == "from"


class TestQueryParser:
    """Tests for parsing queries."""

    @pytest.fixture
    def parser(self):
        return QueryParser()

    def test_select_all(self, parser):
        """Test a wildcard select."""
        query = parser.parse("SELECT * FROM user")

        assert query == ParsedQuery(
            type="SELECT",
            tables=[TableReference("user")],
            fields=[FieldSelection("*")],
        )
        assert query.table == "user"
        assert query.is_array_result is True

    def test_select_fields(self, parser):
        """Test selecting plain fields."""
        query = parser.parse("SELECT name, age FROM user")

        assert query.fields == [FieldSelection("name"), FieldSelection("age")]

    def test_nested_wildcard(self, parser):
        """Test a wildcard alongside a reference expansion."""
        query = parser.parse("SELECT *, author.* FROM post")

        assert query.fields == [
            FieldSelection("*"),
            FieldSelection("author", nested=[NestedFieldSelection("*")]),
        ]

    def test_two_part_path(self, parser):
        """Test that a dotted path selects a sub-field."""
        query = parser.parse("SELECT author.name FROM post")

        assert query.fields == [FieldSelection("author", nested=[NestedFieldSelection("name")])]

    def test_deep_path_keeps_one_level(self, parser):
        """Test that paths past two segments keep only the first sub-field."""
        query = parser.parse("SELECT author.team.name FROM post")

        assert query.fields == [FieldSelection("author", nested=[NestedFieldSelection("team")])]

    def test_embedded_wildcard_chain(self, parser):
        """Test that interior wildcard segments build a nested chain."""
        query = parser.parse("SELECT author.*.team FROM post")

        assert query.fields == [
            FieldSelection("author", nested=[NestedFieldSelection("team")]),
        ]

    def test_limit_one_is_single(self, parser):
        """Test that LIMIT 1 makes the result a single object."""
        query = parser.parse("SELECT * FROM user LIMIT 1")

        assert query.is_array_result is False
        assert query.limit == 1

    def test_limit_many_is_array(self, parser):
        """Test that other limits keep an array result."""
        assert parser.parse("SELECT * FROM user LIMIT 10").is_array_result is True

    def test_where_conditions(self, parser):
        """Test collecting simple WHERE conditions."""
        query = parser.parse("SELECT * FROM user WHERE age >= 18 AND name = 'Ann' LIMIT 5")

        assert query.conditions == [Condition("age", ">=", "18"), Condition("name", "=", "Ann")]
        assert query.limit == 5

    def test_group_and_order(self, parser):
        """Test GROUP BY and ORDER BY modifiers."""
        query = parser.parse("SELECT country FROM user GROUP BY country ORDER BY country DESC")

        assert ReturnModifier("GROUP", ["country"]) in query.return_modifiers
        assert ReturnModifier("ORDER", ["country DESC"]) in query.return_modifiers

    def test_whitespace_and_case(self, parser):
        """Test multi-line, lower-case queries."""
        query = parser.parse("select\n    name,\n    email\nfrom\n    user\nlimit 1;")

        assert query.type == "SELECT"
        assert query.table == "user"
        assert [f.field for f in query.fields] == ["name", "email"]
        assert query.is_array_result is False

    def test_multiple_tables(self, parser):
        """Test that further FROM targets are listed after the first."""
        query = parser.parse("SELECT * FROM user, post")

        assert [t.name for t in query.tables] == ["user", "post"]
        assert query.table == "user"

    def test_record_id_target(self, parser):
        """Test selecting from a record id keeps the table name."""
        assert parser.parse("SELECT * FROM user:ann").table == "user"

    def test_unsupported_selection_falls_back(self, parser, caplog):
        """Test that an unsupported selection keeps the table and selects everything."""
        query = parser.parse("SELECT count() AS total FROM user GROUP ALL")

        assert query.table == "user"
        assert query.fields == []
        assert "count()" in caplog.text

    @pytest.mark.parametrize(
        "text,kind",
        [
            ("CREATE user SET name = 'Ann'", "CREATE"),
            ("update user SET age = 3", "UPDATE"),
            ("DELETE user:ann", "DELETE"),
            ("RELATE user:a->likes->post:b", "UNKNOWN"),
            ("", "UNKNOWN"),
        ],
    )
    def test_statement_kinds(self, parser, text, kind):
        """Test non-SELECT statements produce a minimal query."""
        query = parser.parse(text)

        assert query.type == kind
        assert query.tables == []
        assert query.fields == []

    def test_select_without_from(self, parser):
        """Test a SELECT without FROM has no table."""
        query = parser.parse("SELECT 1 + 1")

        assert query.type == "SELECT"
        assert query.table is None

    def test_parser_reusable_after_error(self, parser):
        """Test that a failed parse does not affect the next one."""
        parser.parse("SELECT a-b FROM t")

        assert parser.parse("SELECT a FROM t").fields == [FieldSelection("a")]

    def test_parse_query_function(self):
        """Test the module-level convenience function."""
        assert parse_query("SELECT * FROM post").table == "post"


class TestSelectionFromPath:
    """Tests for turning path segments into selections."""

    def test_paths(self):
        """Test each path form."""
        assert selection_from_path(["*"]) == FieldSelection("*")
        assert selection_from_path(["name"]) == FieldSelection("name")
        assert selection_from_path(["a", "*"]) == FieldSelection(
            "a", nested=[NestedFieldSelection("*")]
        )
        assert selection_from_path(["a", "*", "b", "*", "c"]) == FieldSelection(
            "a",
            nested=[NestedFieldSelection("b", nested=[NestedFieldSelection("c")])],
        )
