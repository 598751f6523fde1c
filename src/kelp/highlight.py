"""Pygments lexer for the Kelp scripting language."""

from __future__ import annotations

import pygments
from pygments.formatters import TerminalFormatter
from pygments.lexer import RegexLexer, bygroups, words
from pygments.token import (
    Comment,
    Error,
    Keyword,
    Name,
    Number,
    Operator,
    Punctuation,
    String,
    Text,
)


class KelpLexer(RegexLexer):
    """Pygments lexer for the Kelp scripting language."""

    name = "Kelp"
    aliases = ["kelp"]
    filenames = ["*.kp"]
    mimetypes = ["text/x-kelp"]

    tokens = {
        "root": [
            (r"\s+", Text),
            (r"#.*$", Comment.Single),
            (r"//.*$", Comment.Single),
            (r'"', String.Double, "dqstring"),
            (r"'", String.Single, "sqstring"),
            (r"[0-9]+\.[0-9]+", Number.Float),
            (r"[0-9]+", Number.Integer),
            # Declarations name what follows them
            (r"\b(func)(\s+)([A-Za-z_]\w*)", bygroups(Keyword.Declaration, Text, Name.Function)),
            (r"\b(class)(\s+)([A-Za-z_]\w*)", bygroups(Keyword.Declaration, Text, Name.Class)),
            (r"\b(extends)(\s+)([A-Za-z_]\w*)", bygroups(Keyword, Text, Name.Class)),
            (
                words(("func", "let", "class", "lambda"), prefix=r"\b", suffix=r"\b"),
                Keyword.Declaration,
            ),
            (words(("import", "from", "as"), prefix=r"\b", suffix=r"\b"), Keyword.Namespace),
            (
                words(
                    (
                        "if",
                        "elif",
                        "else",
                        "while",
                        "for",
                        "in",
                        "break",
                        "continue",
                        "return",
                        "try",
                        "except",
                        "finally",
                        "with",
                        "raise",
                        "pass",
                        "yield",
                    ),
                    prefix=r"\b",
                    suffix=r"\b",
                ),
                Keyword,
            ),
            (words(("and", "or", "not"), prefix=r"\b", suffix=r"\b"), Operator.Word),
            (r"\b(True|False|None)\b", Keyword.Constant),
            # Operators (multi-char before single-char)
            (r"\*\*|==|!=|<=|>=|\+=|-=|\*=|/=", Operator),
            (r"[+\-*/%<>=!]", Operator),
            (r"\.", Operator),
            (r"[A-Za-z_]\w*", Name),
            (r"[(),;:\[\]{}]", Punctuation),
            (r".", Error),
        ],
        "dqstring": [
            (r'\\["\\]', String.Escape),
            (r'[^"\\]+', String.Double),
            (r"\\", String.Double),
            (r'"', String.Double, "#pop"),
        ],
        "sqstring": [
            (r"\\['\\]", String.Escape),
            (r"[^'\\]+", String.Single),
            (r"\\", String.Single),
            (r"'", String.Single, "#pop"),
        ],
    }


def highlight_source(source: str, *, color: bool = True) -> str:
    """Render Kelp source for the terminal."""
    if not color:
        return source
    return pygments.highlight(source, KelpLexer(), TerminalFormatter())
