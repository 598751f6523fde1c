"""Lexer for the Kelp scripting language.

Produces tokens one at a time from source text, synthesizing Python-style
INDENT/DEDENT/NEWLINE tokens for indentation-defined blocks. Newlines
inside ``()``, ``[]`` and ``{}`` are plain whitespace.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterator

from kelp.errors import LexError
from kelp.tokens import Token, TokenKind, lookup_ident

_INT_MAX = 2**63 - 1

_TWO_CHAR_OPS: dict[str, TokenKind] = {
    "==": TokenKind.EQ,
    "!=": TokenKind.NOT_EQ,
    "<=": TokenKind.LT_EQ,
    ">=": TokenKind.GT_EQ,
    "+=": TokenKind.PLUS_ASSIGN,
    "-=": TokenKind.MINUS_ASSIGN,
    "*=": TokenKind.STAR_ASSIGN,
    "/=": TokenKind.SLASH_ASSIGN,
    "**": TokenKind.POWER,
}

_ONE_CHAR_OPS: dict[str, TokenKind] = {
    "=": TokenKind.ASSIGN,
    "+": TokenKind.PLUS,
    "-": TokenKind.MINUS,
    "!": TokenKind.BANG,
    "*": TokenKind.ASTERISK,
    "/": TokenKind.SLASH,
    "%": TokenKind.PERCENT,
    "<": TokenKind.LT,
    ">": TokenKind.GT,
    ",": TokenKind.COMMA,
    ";": TokenKind.SEMICOLON,
    ":": TokenKind.COLON,
    ".": TokenKind.DOT,
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    "{": TokenKind.LBRACE,
    "}": TokenKind.RBRACE,
    "[": TokenKind.LBRACKET,
    "]": TokenKind.RBRACKET,
}

_OPENERS = frozenset("([{")
_CLOSERS = frozenset(")]}")


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


def _is_ident_start(ch: str) -> bool:
    return ch.isalpha() or ch == "_"


def _is_ident_char(ch: str) -> bool:
    return ch.isalpha() or _is_digit(ch) or ch == "_"


class Lexer:
    """Tokenizes Kelp source code on demand.

    ``next_token()`` returns one token per call and raises ``LexError`` on
    a lexical failure. Once ``EOF`` has been produced every further call
    returns the same ``EOF`` token.
    """

    def __init__(self, source: str, filename: str = "<stdin>", *, tab_width: int = 4) -> None:
        self.source = source
        self.filename = filename
        self.tab_width = tab_width
        self.pos = 0
        self.line = 1
        self.col = 1
        self.indent_stack: list[int] = [0]
        self.bracket_depth = 0
        self._pending: deque[Token] = deque()
        self._at_start = True
        self._eof: Token | None = None

    def __iter__(self) -> Iterator[Token]:
        """Yield tokens up to and including EOF."""
        while True:
            tok = self.next_token()
            yield tok
            if tok.kind == TokenKind.EOF:
                return

    def lex(self) -> list[Token]:
        """Tokenize the remaining source and return the token list."""
        return list(self)

    def next_token(self) -> Token:
        if self._pending:
            return self._pending.popleft()
        if self._eof is not None:
            return self._eof

        if self._at_start:
            self._at_start = False
            self._queue_indentation(self._measure_indent())
            if self._pending:
                return self._pending.popleft()

        newline = self._skip_whitespace()
        if newline is not None:
            return newline

        if self.pos >= len(self.source):
            return self._finish()

        ch = self.source[self.pos]
        if _is_ident_start(ch):
            return self._lex_identifier()
        if _is_digit(ch):
            return self._lex_number()
        if ch in ('"', "'"):
            return self._lex_string()
        return self._lex_operator_or_punct()

    # ── Helpers ───────────────────────────────────────────────────

    def _peek(self, offset: int = 0) -> str:
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return "\0"

    def _advance(self) -> str:
        ch = self.source[self.pos]
        self.pos += 1
        if ch == "\n":
            self.line += 1
            self.col = 1
        else:
            self.col += 1
        return ch

    def _at_comment(self) -> bool:
        ch = self._peek()
        return ch == "#" or (ch == "/" and self._peek(1) == "/")

    def _skip_comment(self) -> None:
        while self.pos < len(self.source) and self.source[self.pos] != "\n":
            self._advance()

    def _finish(self) -> Token:
        """Drain open indentation levels and produce the final EOF."""
        while len(self.indent_stack) > 1:
            self.indent_stack.pop()
            self._pending.append(Token(TokenKind.DEDENT, "", self.line, self.col))
        self._eof = Token(TokenKind.EOF, "", self.line, self.col)
        self._pending.append(self._eof)
        return self._pending.popleft()

    # ── Whitespace and indentation ───────────────────────────────

    def _skip_whitespace(self) -> Token | None:
        """Skip whitespace and comments.

        Returns a NEWLINE token when a line break outside brackets was
        crossed; the indentation tokens for the new line are queued behind it.
        """
        while self.pos < len(self.source):
            ch = self.source[self.pos]
            if ch == "\n":
                if self.bracket_depth > 0:
                    self._advance()
                    continue
                newline = Token(TokenKind.NEWLINE, "\n", self.line, self.col)
                self._advance()
                self._queue_indentation(self._measure_indent())
                return newline
            if ch.isspace():
                self._advance()
            elif self._at_comment():
                self._skip_comment()
            else:
                break
        return None

    def _measure_indent(self) -> int:
        """Measure the width of the next significant line.

        Blank and comment-only lines are consumed. Returns 0 at end of input.
        """
        while True:
            width = 0
            while self.pos < len(self.source):
                ch = self.source[self.pos]
                if ch == " ":
                    width += 1
                elif ch == "\t":
                    width += self.tab_width
                elif ch == "\n" or not ch.isspace():
                    break
                self._advance()

            if self.pos >= len(self.source):
                return 0
            if self._at_comment():
                self._skip_comment()
                if self.pos >= len(self.source):
                    return 0
            if self.source[self.pos] == "\n":
                self._advance()
                continue
            return width

    def _queue_indentation(self, width: int) -> None:
        top = self.indent_stack[-1]
        if width > top:
            self.indent_stack.append(width)
            self._pending.append(Token(TokenKind.INDENT, "", self.line, self.col))
        elif width < top:
            while self.indent_stack[-1] > width:
                self.indent_stack.pop()
                self._pending.append(Token(TokenKind.DEDENT, "", self.line, self.col))
            if self.indent_stack[-1] != width:
                raise LexError(
                    "unindent does not match any outer indentation level",
                    self.line, 1, self.filename,
                )

    # ── Identifiers and keywords ─────────────────────────────────

    def _lex_identifier(self) -> Token:
        start_line = self.line
        start_col = self.col
        text = []
        while self.pos < len(self.source) and _is_ident_char(self.source[self.pos]):
            text.append(self._advance())
        word = "".join(text)
        return Token(lookup_ident(word), word, start_line, start_col)

    # ── Numbers ──────────────────────────────────────────────────

    def _lex_number(self) -> Token:
        start_line = self.line
        start_col = self.col
        text = []
        while self.pos < len(self.source) and _is_digit(self.source[self.pos]):
            text.append(self._advance())

        if self._peek() == "." and _is_digit(self._peek(1)):
            text.append(self._advance())  # .
            while self.pos < len(self.source) and _is_digit(self.source[self.pos]):
                text.append(self._advance())
            literal = "".join(text)
            if float(literal) == float("inf"):
                raise LexError(
                    f"invalid float literal '{literal}'",
                    start_line, start_col, self.filename,
                )
            return Token(TokenKind.FLOAT, literal, start_line, start_col)

        literal = "".join(text)
        if int(literal) > _INT_MAX:
            raise LexError(
                f"invalid integer literal '{literal}'",
                start_line, start_col, self.filename,
            )
        return Token(TokenKind.INT, literal, start_line, start_col)

    # ── Strings ──────────────────────────────────────────────────

    def _lex_string(self) -> Token:
        start_line = self.line
        start_col = self.col
        quote = self._advance()
        text = []
        while True:
            if self.pos >= len(self.source):
                raise LexError(
                    "unterminated string literal",
                    start_line, start_col, self.filename,
                )
            ch = self.source[self.pos]
            if ch == "\\" and self._peek(1) in (quote, "\\"):
                self._advance()
                text.append(self._advance())
            elif ch == quote:
                self._advance()
                break
            else:
                text.append(self._advance())
        return Token(TokenKind.STRING, "".join(text), start_line, start_col)

    # ── Operators and punctuation ────────────────────────────────

    def _lex_operator_or_punct(self) -> Token:
        start_line = self.line
        start_col = self.col

        two = self.source[self.pos:self.pos + 2]
        if two in _TWO_CHAR_OPS:
            self._advance()
            self._advance()
            return Token(_TWO_CHAR_OPS[two], two, start_line, start_col)

        ch = self._advance()
        kind = _ONE_CHAR_OPS.get(ch)
        if kind is None:
            return Token(TokenKind.ILLEGAL, ch, start_line, start_col)
        if ch in _OPENERS:
            self.bracket_depth += 1
        elif ch in _CLOSERS:
            self.bracket_depth = max(0, self.bracket_depth - 1)
        return Token(kind, ch, start_line, start_col)
