"""Tests for AST node rendering and equality."""

from __future__ import annotations

import pytest

from kelp.ast_nodes import (
    BlockStatement,
    CallExpression,
    ClassStatement,
    ExceptClause,
    ExpressionStatement,
    Identifier,
    ImportName,
    ImportStatement,
    InfixExpression,
    IntegerLiteral,
    LetStatement,
    MethodStatement,
    PrefixExpression,
    Program,
    ReturnStatement,
    StringLiteral,
    TryStatement,
)
from kelp.tokens import Token, TokenKind
from tests.helpers import assert_round_trip, parse_ok


def tok(kind: TokenKind, literal: str) -> Token:
    return Token(kind, literal, 1, 1)


def ident(name: str) -> Identifier:
    return Identifier(tok(TokenKind.IDENTIFIER, name), name)


class TestNodeStrings:
    def test_let_statement(self):
        program = Program([
            LetStatement(tok(TokenKind.LET, "let"), ident("myVar"), ident("anotherVar")),
        ])
        assert program.string() == "let myVar = anotherVar"
        assert program.token_literal() == "let"

    def test_empty_program(self):
        assert Program().string() == ""
        assert Program().token_literal() == ""

    def test_statements_join_with_newlines(self):
        program = Program([
            ExpressionStatement(tok(TokenKind.IDENTIFIER, "a"), ident("a")),
            ReturnStatement(tok(TokenKind.RETURN, "return")),
        ])
        assert program.string() == "a\nreturn"

    def test_prefix_spacing(self):
        minus = PrefixExpression(tok(TokenKind.MINUS, "-"), "-", ident("x"))
        negation = PrefixExpression(tok(TokenKind.NOT, "not"), "not", ident("x"))
        assert minus.string() == "(-x)"
        assert negation.string() == "(not x)"

    def test_string_literal_escapes(self):
        node = StringLiteral(tok(TokenKind.STRING, 'a"b\\c'), 'a"b\\c')
        assert node.string() == '"a\\"b\\\\c"'

    def test_empty_block(self):
        assert BlockStatement(tok(TokenKind.LBRACE, "{"), []).string() == "{ }"

    def test_class_without_methods(self):
        node = ClassStatement(tok(TokenKind.CLASS, "class"), ident("A"), ident("B"), [])
        assert node.string() == "class A extends B { }"

    def test_class_with_methods(self):
        body = BlockStatement(tok(TokenKind.LBRACE, "{"), [])
        methods = [
            MethodStatement(tok(TokenKind.IDENTIFIER, "m"), ident("m"), [ident("a")], body),
            MethodStatement(tok(TokenKind.IDENTIFIER, "n"), ident("n"), [], body),
        ]
        node = ClassStatement(tok(TokenKind.CLASS, "class"), ident("A"), None, methods)
        assert node.string() == "class A { m(a) { }; n() { } }"

    def test_import_forms(self):
        plain = ImportStatement(tok(TokenKind.IMPORT, "import"), "a.b", [], alias="c")
        from_import = ImportStatement(
            tok(TokenKind.FROM, "from"), "a", [ImportName("b", "c"), ImportName("d")], is_from=True,
        )
        assert plain.string() == "import a.b as c"
        assert from_import.string() == "from a import b as c, d"

    def test_try_statement(self):
        block = BlockStatement(tok(TokenKind.LBRACE, "{"), [])
        node = TryStatement(
            tok(TokenKind.TRY, "try"),
            block,
            [ExceptClause(ident("E"), "e", block), ExceptClause(None, None, block)],
            block,
        )
        assert node.string() == "try { } except E as e { } except { } finally { }"

    def test_call_and_infix(self):
        one = IntegerLiteral(tok(TokenKind.INT, "1"), 1)
        call = CallExpression(
            tok(TokenKind.LPAREN, "("),
            ident("f"),
            [one, InfixExpression(tok(TokenKind.PLUS, "+"), ident("a"), "+", one)],
        )
        assert call.string() == "f(1, (a + 1))"
        assert str(call) == call.string()


class TestEquality:
    def test_tokens_are_ignored(self):
        a = Identifier(Token(TokenKind.IDENTIFIER, "x", 1, 1), "x")
        b = Identifier(Token(TokenKind.IDENTIFIER, "x", 9, 4), "x")
        assert a == b

    def test_values_matter(self):
        assert ident("x") != ident("y")

    def test_same_source_parses_equal(self):
        source = "let a = [1, 2]\nfunc f(x) { return a[x] }\n"
        assert parse_ok(source) == parse_ok(source)

    def test_layout_does_not_change_the_tree(self):
        braces = parse_ok("while x { y; z }")
        indented = parse_ok("while x:\n    y\n    z\n")
        assert braces == indented

    def test_nodes_are_immutable(self):
        node = ident("x")
        with pytest.raises(AttributeError):
            node.value = "y"


ROUND_TRIP_SOURCES = [
    "let x = 5 * (2 + 3)",
    "let s = \"say \\\"hi\\\"\"",
    "let d = {\"a\": [1, 2.5], \"b\": None}",
    "x = y = not a or b and -c",
    "total += items[0].price ** 2",
    "print(add(1, 2), lambda a, b: a % b, lambda: True)",
    "let f = func(a) { return a }",
    "let v = if a { 1 } elif b { 2 } else { 3 }",
    "if x < 1:\n    pass\nelif x > 2:\n    break\nelse:\n    continue\n",
    "while running:\n    step()\n    if done(): break\n",
    "for item in items { total = total + item; }",
    "func area(w, h):\n    return w * h\n",
    "class Box extends Shape:\n    func area(self):\n        return self.w * self.h\n    describe(self) { return \"box\" }\n",
    "import os.path as p\nfrom util import read as r, write\n",
    "try:\n    risky()\nexcept ValueError as e:\n    raise\nexcept:\n    pass\nfinally:\n    cleanup()\n",
    "raise Error(\"boom\")",
]


class TestRoundTrip:
    @pytest.mark.parametrize("source", ROUND_TRIP_SOURCES)
    def test_round_trip(self, source):
        assert_round_trip(source)

    def test_whole_program(self):
        assert_round_trip("\n".join(ROUND_TRIP_SOURCES))

    def test_deeply_nested_prefix_renders(self):
        node = ident("a")
        for _ in range(450):
            node = PrefixExpression(tok(TokenKind.MINUS, "-"), "-", node)
        assert node.string() == "(-" * 450 + "a" + ")" * 450
