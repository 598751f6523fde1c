"""Token kinds, token representation and operator precedence for Kelp."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum, auto

from kelp.source import Span


class TokenKind(Enum):
    # Special
    ILLEGAL = auto()
    EOF = auto()

    # Identifiers and literals
    IDENTIFIER = auto()
    INT = auto()
    FLOAT = auto()
    STRING = auto()

    # Operators
    ASSIGN = auto()
    PLUS = auto()
    MINUS = auto()
    BANG = auto()
    ASTERISK = auto()
    SLASH = auto()
    PERCENT = auto()
    POWER = auto()
    EQ = auto()
    NOT_EQ = auto()
    LT = auto()
    GT = auto()
    LT_EQ = auto()
    GT_EQ = auto()
    PLUS_ASSIGN = auto()
    MINUS_ASSIGN = auto()
    STAR_ASSIGN = auto()
    SLASH_ASSIGN = auto()

    # Logical
    AND = auto()
    OR = auto()
    NOT = auto()

    # Delimiters
    COMMA = auto()
    SEMICOLON = auto()
    COLON = auto()
    DOT = auto()
    LPAREN = auto()
    RPAREN = auto()
    LBRACE = auto()
    RBRACE = auto()
    LBRACKET = auto()
    RBRACKET = auto()

    # Keywords
    FUNCTION = auto()
    LET = auto()
    TRUE = auto()
    FALSE = auto()
    IF = auto()
    ELSE = auto()
    ELIF = auto()
    RETURN = auto()
    WHILE = auto()
    FOR = auto()
    IN = auto()
    BREAK = auto()
    CONTINUE = auto()
    NONE = auto()
    CLASS = auto()
    IMPORT = auto()
    FROM = auto()
    AS = auto()
    TRY = auto()
    EXCEPT = auto()
    FINALLY = auto()
    WITH = auto()
    RAISE = auto()
    PASS = auto()
    YIELD = auto()
    LAMBDA = auto()

    # Layout
    INDENT = auto()
    DEDENT = auto()
    NEWLINE = auto()


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    literal: str
    line: int
    column: int

    def span(self, filename: str) -> Span:
        """Span covering the token's literal text (at least one column wide)."""
        lines = self.literal.split("\n")
        if len(lines) > 1 and self.kind != TokenKind.NEWLINE:
            return Span(filename, self.line, self.column,
                        self.line + len(lines) - 1, max(1, len(lines[-1])))
        width = max(1, len(self.literal))
        return Span(filename, self.line, self.column,
                    self.line, self.column + width - 1)

    def __str__(self) -> str:
        return f"{self.kind.name}({self.literal!r}) at {self.line}:{self.column}"


KEYWORDS: dict[str, TokenKind] = {
    "func": TokenKind.FUNCTION,
    "let": TokenKind.LET,
    "True": TokenKind.TRUE,
    "False": TokenKind.FALSE,
    "if": TokenKind.IF,
    "else": TokenKind.ELSE,
    "elif": TokenKind.ELIF,
    "return": TokenKind.RETURN,
    "while": TokenKind.WHILE,
    "for": TokenKind.FOR,
    "in": TokenKind.IN,
    "break": TokenKind.BREAK,
    "continue": TokenKind.CONTINUE,
    "None": TokenKind.NONE,
    "class": TokenKind.CLASS,
    "import": TokenKind.IMPORT,
    "from": TokenKind.FROM,
    "as": TokenKind.AS,
    "try": TokenKind.TRY,
    "except": TokenKind.EXCEPT,
    "finally": TokenKind.FINALLY,
    "with": TokenKind.WITH,
    "raise": TokenKind.RAISE,
    "pass": TokenKind.PASS,
    "yield": TokenKind.YIELD,
    "lambda": TokenKind.LAMBDA,
    "and": TokenKind.AND,
    "or": TokenKind.OR,
    "not": TokenKind.NOT,
}


def lookup_ident(word: str) -> TokenKind:
    """Keyword kind for *word*, or IDENTIFIER."""
    return KEYWORDS.get(word, TokenKind.IDENTIFIER)


# ── Precedence ───────────────────────────────────────────────────


class Precedence(IntEnum):
    LOWEST = auto()
    ASSIGN = auto()
    LOGICAL = auto()
    EQUALS = auto()
    LESS_GREATER = auto()
    SUM = auto()
    PRODUCT = auto()
    POWER = auto()
    PREFIX = auto()
    CALL = auto()
    INDEX = auto()
    MEMBER = auto()


PRECEDENCES: dict[TokenKind, Precedence] = {
    TokenKind.ASSIGN: Precedence.ASSIGN,
    TokenKind.PLUS_ASSIGN: Precedence.ASSIGN,
    TokenKind.MINUS_ASSIGN: Precedence.ASSIGN,
    TokenKind.STAR_ASSIGN: Precedence.ASSIGN,
    TokenKind.SLASH_ASSIGN: Precedence.ASSIGN,
    TokenKind.AND: Precedence.LOGICAL,
    TokenKind.OR: Precedence.LOGICAL,
    TokenKind.EQ: Precedence.EQUALS,
    TokenKind.NOT_EQ: Precedence.EQUALS,
    TokenKind.LT: Precedence.LESS_GREATER,
    TokenKind.GT: Precedence.LESS_GREATER,
    TokenKind.LT_EQ: Precedence.LESS_GREATER,
    TokenKind.GT_EQ: Precedence.LESS_GREATER,
    TokenKind.PLUS: Precedence.SUM,
    TokenKind.MINUS: Precedence.SUM,
    TokenKind.ASTERISK: Precedence.PRODUCT,
    TokenKind.SLASH: Precedence.PRODUCT,
    TokenKind.PERCENT: Precedence.PRODUCT,
    TokenKind.POWER: Precedence.POWER,
    TokenKind.LPAREN: Precedence.CALL,
    TokenKind.LBRACKET: Precedence.INDEX,
    TokenKind.DOT: Precedence.MEMBER,
}

# Operators whose right operand binds at one level lower, making chains
# group to the right.
RIGHT_ASSOCIATIVE: frozenset[TokenKind] = frozenset({
    TokenKind.POWER,
    TokenKind.ASSIGN,
    TokenKind.PLUS_ASSIGN,
    TokenKind.MINUS_ASSIGN,
    TokenKind.STAR_ASSIGN,
    TokenKind.SLASH_ASSIGN,
})

# Tokens that separate statements without carrying meaning.
LAYOUT: frozenset[TokenKind] = frozenset({
    TokenKind.NEWLINE,
    TokenKind.SEMICOLON,
    TokenKind.INDENT,
    TokenKind.DEDENT,
})


def precedence_of(kind: TokenKind) -> Precedence:
    return PRECEDENCES.get(kind, Precedence.LOWEST)
