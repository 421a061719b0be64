"""Tests for the type expression lexer, grammar and resolver."""

import pytest

from surql_gen.parsing.type_lexer import TypeLexer
from surql_gen.parsing.type_parser import (
    LiteralNode,
    TypeNode,
    TypeParser,
    TypeResolver,
    UnionNode,
    resolve_type,
)
from surql_gen.types import Reference, TypeDescriptor


class TestTypeLexer:
    """Tests for the type lexer."""

    def test_tokenize_generic(self):
        """Test tokenizing a nested generic type."""
        lexer = TypeLexer()
        lexer.build()

        tokens = lexer.tokenize("option<record<user>>")
        token_types = [t.type for t in tokens]

        assert token_types == ["IDENTIFIER", "LT", "IDENTIFIER", "LT", "IDENTIFIER", "GT", "GT"]

    def test_tokenize_union_and_literals(self):
        """Test tokenizing unions of literals."""
        lexer = TypeLexer()
        lexer.build()

        tokens = lexer.tokenize("'draft' | \"live\" | 3")

        assert [t.type for t in tokens] == ["STRING", "PIPE", "STRING", "PIPE", "NUMBER"]
        assert [t.value for t in tokens] == ["draft", "|", "live", "|", 3]

    def test_backtick_identifier(self):
        """Test that backtick-quoted names lex as identifiers."""
        lexer = TypeLexer()
        lexer.build()

        tokens = lexer.tokenize("record<`user-profile`>")

        assert tokens[2].type == "IDENTIFIER"
        assert tokens[2].value == "user-profile"

    def test_illegal_character(self):
        """Test that an illegal character raises SyntaxError."""
        lexer = TypeLexer()
        lexer.build()

        with pytest.raises(SyntaxError):
            lexer.tokenize("record{user}")


class TestTypeParser:
    """Tests for the type expression grammar."""

    @pytest.fixture
    def parser(self):
        return TypeParser()

    def test_parse_name(self, parser):
        """Test parsing a bare type name."""
        assert parser.parse("string") == TypeNode(name="string")

    def test_parse_nested(self, parser):
        """Test parsing nested generics."""
        node = parser.parse("array<record<tag>>")

        assert node == TypeNode(name="array", args=[TypeNode(name="record", args=[TypeNode(name="tag")])])

    def test_parse_arguments(self, parser):
        """Test parsing a generic with several arguments."""
        node = parser.parse("array<float, 1536>")

        assert node.name == "array"
        assert node.args == [TypeNode(name="float"), LiteralNode(value=1536)]

    def test_parse_union(self, parser):
        """Test parsing a union."""
        node = parser.parse("string | none")

        assert isinstance(node, UnionNode)
        assert node.options == [TypeNode(name="string"), TypeNode(name="none")]

    def test_syntax_error(self, parser):
        """Test that an unbalanced generic raises SyntaxError."""
        with pytest.raises(SyntaxError):
            parser.parse("record<user")


class TestTypeResolver:
    """Tests for resolving type tokens into descriptors."""

    def test_option_record(self):
        """Test that optionality propagates into the reference."""
        descriptor = resolve_type("option<record<foo>>")

        assert descriptor == TypeDescriptor(
            kind="record", is_optional=True, reference=Reference(table="foo", is_optional=True)
        )

    def test_array_of_record(self):
        """Test that array element references are never optional."""
        descriptor = resolve_type("array<record<bar>>")

        assert descriptor.kind == "array_of_record"
        assert descriptor.reference == Reference(table="bar", is_optional=False)

    def test_optional_array_of_record(self):
        """Test that an optional array keeps a required element reference."""
        descriptor = resolve_type("option<array<record<bar>>>")

        assert descriptor.is_optional
        assert descriptor.reference == Reference(table="bar", is_optional=False)

    def test_references(self):
        """Test the references kind."""
        descriptor = resolve_type("references<comment>")

        assert descriptor.kind == "references"
        assert descriptor.reference == Reference(table="comment")

    @pytest.mark.parametrize(
        "token,kind",
        [
            ("int", "integer"),
            ("integer", "integer"),
            ("number", "integer"),
            ("bool", "boolean"),
            ("boolean", "boolean"),
            ("datetime", "datetime"),
            ("string", "string"),
            ("object", "object"),
            ("decimal", "decimal"),
            ("float", "float"),
            ("STRING", "string"),
        ],
    )
    def test_scalar_kinds(self, token, kind):
        """Test scalar token mapping."""
        assert resolve_type(token).kind == kind

    def test_array_kinds(self):
        """Test generic and float arrays."""
        assert resolve_type("array<float>").kind == "array_of_float"
        assert resolve_type("array<string>").kind == "array"
        assert resolve_type("array").kind == "array"
        assert resolve_type("array<float, 1536>").kind == "array_of_float"

    def test_reference_suffix_and_semicolon(self):
        """Test that REFERENCE decorations and semicolons are stripped."""
        descriptor = resolve_type("record<user> REFERENCE ON DELETE CASCADE;")

        assert descriptor.kind == "record"
        assert descriptor.reference == Reference(table="user")

    def test_none_union_is_optional(self):
        """Test that a none alternative marks the type optional."""
        descriptor = resolve_type("string | none")

        assert descriptor == TypeDescriptor(kind="string", is_optional=True)

    def test_literal_union(self):
        """Test that a union of string literals resolves to string."""
        assert resolve_type("'draft' | 'published'").kind == "string"

    def test_mixed_union(self):
        """Test that mixed unions fall back to string."""
        assert resolve_type("int | string").kind == "string"

    def test_multi_target_record(self):
        """Test that a record of several tables keeps no reference."""
        descriptor = resolve_type("record<user | team>")

        assert descriptor.kind == "record"
        assert descriptor.reference is None

    def test_bare_record(self):
        """Test that a record without a table keeps no reference."""
        descriptor = resolve_type("record")

        assert descriptor.kind == "record"
        assert descriptor.reference is None

    def test_bare_references(self):
        """Test that references without a table keep their kind."""
        descriptor = resolve_type("option<references>")

        assert descriptor.kind == "references"
        assert descriptor.is_optional is True
        assert descriptor.reference is None

    def test_union_of_records(self):
        """Test that a union of record types keeps the record kind without a target."""
        descriptor = resolve_type("record<user> | record<team>")

        assert descriptor.kind == "record"
        assert descriptor.reference is None

    @pytest.mark.parametrize(
        "token", ["", None, "   ", "<<<", "record<", "option<>", "array<record<a>", "$%^", ";"]
    )
    def test_totality(self, token):
        """Test that malformed tokens resolve without raising."""
        descriptor = resolve_type(token)

        assert isinstance(descriptor, TypeDescriptor)
        assert descriptor.reference is None

    def test_garbage_is_required_string(self):
        """Test that unparsable tokens resolve to a required string."""
        assert resolve_type("record<<user>") == TypeDescriptor()

    def test_resolver_instance(self):
        """Test using a dedicated resolver instance."""
        resolver = TypeResolver()

        assert resolver.resolve("option<int>") == TypeDescriptor(kind="integer", is_optional=True)
        assert resolver.resolve("record<post>").is_reference
