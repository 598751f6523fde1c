"""Tests for the Kelp Pygments lexer."""

from __future__ import annotations

import pytest
from pygments.lexers import get_lexer_for_filename
from pygments.token import Comment, Error, Keyword, Name, Number, Operator, String

from kelp.highlight import KelpLexer, highlight_source


def token_types(source: str) -> list[tuple[object, str]]:
    """Non-whitespace (type, text) pairs produced by the lexer."""
    return [(t, v) for t, v in KelpLexer().get_tokens(source) if v.strip()]


class TestKelpLexer:
    def test_function_declaration(self):
        tokens = token_types("func greet(name) { }")
        assert tokens[0] == (Keyword.Declaration, "func")
        assert tokens[1] == (Name.Function, "greet")

    def test_class_with_parent(self):
        tokens = token_types("class Dog extends Animal { }")
        assert tokens[:4] == [
            (Keyword.Declaration, "class"),
            (Name.Class, "Dog"),
            (Keyword, "extends"),
            (Name.Class, "Animal"),
        ]

    @pytest.mark.parametrize("word", ["if", "elif", "while", "return", "try", "raise"])
    def test_keywords(self, word):
        assert token_types(word)[0] == (Keyword, word)

    def test_word_operators(self):
        types = [t for t, _ in token_types("a and not b or c")]
        assert types.count(Operator.Word) == 3

    def test_constants(self):
        assert {t for t, _ in token_types("True False None")} == {Keyword.Constant}

    def test_numbers(self):
        assert token_types("3.14 42") == [(Number.Float, "3.14"), (Number.Integer, "42")]

    def test_comments(self):
        assert token_types("# note")[0] == (Comment.Single, "# note")
        assert token_types("// note")[0] == (Comment.Single, "// note")

    def test_string_escape(self):
        tokens = token_types('"say \\"hi\\""')
        assert (String.Escape, '\\"') in tokens

    def test_compound_operators(self):
        assert (Operator, "**") in token_types("a ** b")
        assert (Operator, "+=") in token_types("a += b")

    def test_unknown_character(self):
        assert (Error, "@") in token_types("@")

    def test_identifier_is_not_keyword_prefix(self):
        assert token_types("iffy")[0] == (Name, "iffy")

    def test_registered_for_extension(self):
        assert isinstance(get_lexer_for_filename("main.kp"), KelpLexer)


class TestHighlightSource:
    def test_plain(self):
        assert highlight_source("let x = 1\n", color=False) == "let x = 1\n"

    def test_colored(self):
        out = highlight_source("let x = 1\n")
        assert "\033[" in out
        assert "let" in out
