"""Parser for the Kelp scripting language.

Transforms a token stream into an AST using recursive descent for
statements and a Pratt (precedence-climbing) parser for expressions.

The parser never raises on malformed input. Each sub-parser returns the
node it built or ``None`` after recording a diagnostic; a failed statement
is dropped and parsing resumes at the next token.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from types import MappingProxyType

from kelp.ast_nodes import (
    ArrayLiteral,
    AssignmentExpression,
    AttributeExpression,
    BlockStatement,
    Boolean,
    BreakStatement,
    CallExpression,
    ClassStatement,
    ContinueStatement,
    DictLiteral,
    ExceptClause,
    Expression,
    ExpressionStatement,
    FloatLiteral,
    ForStatement,
    FunctionLiteral,
    FunctionStatement,
    Identifier,
    IfExpression,
    IfStatement,
    ImportName,
    ImportStatement,
    IndexExpression,
    InfixExpression,
    IntegerLiteral,
    LambdaExpression,
    LetStatement,
    MethodStatement,
    NoneLiteral,
    PassStatement,
    PrefixExpression,
    Program,
    RaiseStatement,
    ReturnStatement,
    Statement,
    StringLiteral,
    TryStatement,
    WhileStatement,
)
from kelp.errors import PARSE_ERROR, Diagnostic, DiagnosticLabel, LexError, Severity
from kelp.lexer import Lexer
from kelp.tokens import LAYOUT, RIGHT_ASSOCIATIVE, Precedence, Token, TokenKind, precedence_of

logger = logging.getLogger(__name__)

# Tokens after which an optional ``return``/``raise`` operand is absent.
_STATEMENT_END = frozenset({
    TokenKind.NEWLINE,
    TokenKind.SEMICOLON,
    TokenKind.RBRACE,
    TokenKind.DEDENT,
    TokenKind.EOF,
})

_ASSIGNABLE = (Identifier, IndexExpression, AttributeExpression)


class Parser:
    """Parses a token sequence into a Kelp ``Program``."""

    def __init__(self, tokens: Iterable[Token], filename: str = "<stdin>") -> None:
        self.filename = filename
        self.diagnostics: list[Diagnostic] = []
        self._tokens = iter(tokens)
        self.cur_token = self._pull(None)
        self.peek_token = self._pull(self.cur_token)

    @property
    def errors(self) -> list[str]:
        return [d.message for d in self.diagnostics]

    # ── Token window ─────────────────────────────────────────────

    def _pull(self, last: Token | None) -> Token:
        if last is not None and last.kind == TokenKind.EOF:
            return last
        tok = next(self._tokens, None)
        if tok is None:
            line, col = (last.line, last.column) if last is not None else (1, 1)
            return Token(TokenKind.EOF, "", line, col)
        return tok

    def _next_token(self) -> None:
        self.cur_token = self.peek_token
        self.peek_token = self._pull(self.peek_token)

    def _cur_is(self, kind: TokenKind) -> bool:
        return self.cur_token.kind == kind

    def _peek_is(self, kind: TokenKind) -> bool:
        return self.peek_token.kind == kind

    def _expect_peek(self, kind: TokenKind) -> bool:
        if self._peek_is(kind):
            self._next_token()
            return True
        self._peek_error(kind.name)
        return False

    def _skip_semicolon(self) -> None:
        if self._peek_is(TokenKind.SEMICOLON):
            self._next_token()

    def _peek_precedence(self) -> Precedence:
        return precedence_of(self.peek_token.kind)

    def _cur_precedence(self) -> Precedence:
        return precedence_of(self.cur_token.kind)

    # ── Diagnostics ──────────────────────────────────────────────

    def _error(self, message: str, tok: Token, *notes: str) -> None:
        self.diagnostics.append(
            Diagnostic(
                severity=Severity.ERROR,
                code=PARSE_ERROR,
                message=message,
                labels=[DiagnosticLabel(span=tok.span(self.filename), message="")],
                notes=list(notes),
            )
        )

    def _peek_error(self, expected: str) -> None:
        got = self.peek_token
        self._error(f"expected next token to be {expected}, got {got.kind.name} instead", got)

    def _cur_error(self, expected: str) -> None:
        got = self.cur_token
        self._error(f"expected next token to be {expected}, got {got.kind.name} instead", got)

    def _no_prefix_error(self, tok: Token) -> None:
        self._error(f"no prefix parse function for {tok.kind.name} found", tok)

    # ── Program ──────────────────────────────────────────────────

    def parse_program(self) -> tuple[Program, list[str]]:
        """Parse the whole token stream. Returns the program and its error messages."""
        statements: list[Statement] = []
        while not self._cur_is(TokenKind.EOF):
            if self.cur_token.kind in LAYOUT:
                self._next_token()
                continue
            stmt = self._parse_statement()
            if stmt is not None:
                statements.append(stmt)
            self._next_token()

        logger.debug(
            "%s: parsed %d statement(s), %d diagnostic(s)",
            self.filename, len(statements), len(self.diagnostics),
        )
        return Program(statements), self.errors

    # ── Statements ───────────────────────────────────────────────

    def _parse_statement(self) -> Statement | None:
        match self.cur_token.kind:
            case TokenKind.LET:
                return self._parse_let_statement()
            case TokenKind.RETURN:
                return self._parse_return_statement()
            case TokenKind.FOR:
                return self._parse_for_statement()
            case TokenKind.CLASS:
                return self._parse_class_statement()
            case TokenKind.IF:
                return self._parse_if_statement()
            case TokenKind.WHILE:
                return self._parse_while_statement()
            case TokenKind.FUNCTION if self._peek_is(TokenKind.IDENTIFIER):
                return self._parse_function_statement()
            case TokenKind.IMPORT:
                return self._parse_import_statement()
            case TokenKind.FROM:
                return self._parse_from_import_statement()
            case TokenKind.TRY:
                return self._parse_try_statement()
            case TokenKind.PASS:
                return self._parse_keyword_statement(PassStatement)
            case TokenKind.BREAK:
                return self._parse_keyword_statement(BreakStatement)
            case TokenKind.CONTINUE:
                return self._parse_keyword_statement(ContinueStatement)
            case TokenKind.RAISE:
                return self._parse_raise_statement()
            case _:
                return self._parse_expression_statement()

    def _parse_let_statement(self) -> LetStatement | None:
        tok = self.cur_token
        if not self._expect_peek(TokenKind.IDENTIFIER):
            return None
        name = Identifier(self.cur_token, self.cur_token.literal)
        if not self._expect_peek(TokenKind.ASSIGN):
            return None
        self._next_token()
        value = self._parse_expression(Precedence.LOWEST)
        if value is None:
            return None
        self._skip_semicolon()
        return LetStatement(tok, name, value)

    def _parse_optional_operand(self) -> tuple[bool, Expression | None]:
        """Parse the operand of ``return``/``raise`` if one follows."""
        if self.peek_token.kind in _STATEMENT_END:
            return True, None
        self._next_token()
        value = self._parse_expression(Precedence.LOWEST)
        return value is not None, value

    def _parse_return_statement(self) -> ReturnStatement | None:
        tok = self.cur_token
        ok, value = self._parse_optional_operand()
        if not ok:
            return None
        self._skip_semicolon()
        return ReturnStatement(tok, value)

    def _parse_raise_statement(self) -> RaiseStatement | None:
        tok = self.cur_token
        ok, value = self._parse_optional_operand()
        if not ok:
            return None
        self._skip_semicolon()
        return RaiseStatement(tok, value)

    def _parse_keyword_statement(self, node_type: type[Statement]) -> Statement:
        tok = self.cur_token
        self._skip_semicolon()
        return node_type(tok)

    def _parse_expression_statement(self) -> ExpressionStatement | None:
        tok = self.cur_token
        expr = self._parse_expression(Precedence.LOWEST)
        if expr is None:
            return None
        self._skip_semicolon()
        return ExpressionStatement(tok, expr)

    def _parse_if_statement(self) -> IfStatement | None:
        tok = self.cur_token
        self._next_token()
        condition = self._parse_expression(Precedence.LOWEST)
        if condition is None:
            return None
        consequence = self._parse_block()
        if consequence is None:
            return None

        elif_branches: list[tuple[Expression, BlockStatement]] = []
        while self._peek_is(TokenKind.ELIF):
            self._next_token()
            self._next_token()
            cond = self._parse_expression(Precedence.LOWEST)
            if cond is None:
                return None
            block = self._parse_block()
            if block is None:
                return None
            elif_branches.append((cond, block))

        alternative = None
        if self._peek_is(TokenKind.ELSE):
            self._next_token()
            alternative = self._parse_block()
            if alternative is None:
                return None
        return IfStatement(tok, condition, consequence, elif_branches, alternative)

    def _parse_while_statement(self) -> WhileStatement | None:
        tok = self.cur_token
        self._next_token()
        condition = self._parse_expression(Precedence.LOWEST)
        if condition is None:
            return None
        body = self._parse_block()
        if body is None:
            return None
        return WhileStatement(tok, condition, body)

    def _parse_for_statement(self) -> ForStatement | None:
        tok = self.cur_token
        if not self._expect_peek(TokenKind.IDENTIFIER):
            return None
        iterator = Identifier(self.cur_token, self.cur_token.literal)
        if not self._expect_peek(TokenKind.IN):
            return None
        self._next_token()
        iterable = self._parse_expression(Precedence.LOWEST)
        if iterable is None:
            return None
        body = self._parse_block()
        if body is None:
            return None
        return ForStatement(tok, iterator, iterable, body)

    def _parse_function_statement(self) -> FunctionStatement | None:
        tok = self.cur_token
        self._next_token()
        name = Identifier(self.cur_token, self.cur_token.literal)
        if not self._expect_peek(TokenKind.LPAREN):
            return None
        parameters = self._parse_parameters()
        if parameters is None:
            return None
        body = self._parse_block()
        if body is None:
            return None
        return FunctionStatement(tok, name, parameters, body)

    def _parse_class_statement(self) -> ClassStatement | None:
        tok = self.cur_token
        if not self._expect_peek(TokenKind.IDENTIFIER):
            return None
        name = Identifier(self.cur_token, self.cur_token.literal)

        parent = None
        if self._peek_is(TokenKind.IDENTIFIER) and self.peek_token.literal == "extends":
            self._next_token()
            if not self._expect_peek(TokenKind.IDENTIFIER):
                return None
            parent = Identifier(self.cur_token, self.cur_token.literal)

        if self._peek_is(TokenKind.LBRACE):
            self._next_token()
            end = TokenKind.RBRACE
        elif self._peek_is(TokenKind.COLON):
            self._next_token()
            if not self._expect_peek(TokenKind.NEWLINE) or not self._expect_peek(TokenKind.INDENT):
                return None
            end = TokenKind.DEDENT
        else:
            self._peek_error("LBRACE or COLON")
            return None

        methods: list[MethodStatement] = []
        # INDENT/DEDENT pairs left behind by a method that failed to parse
        depth = 0
        self._next_token()
        while not self._cur_is(TokenKind.EOF):
            kind = self.cur_token.kind
            if kind == end and depth == 0:
                break
            if kind == TokenKind.INDENT:
                depth += 1
            elif kind == TokenKind.DEDENT:
                depth -= 1
            elif kind in LAYOUT or kind == TokenKind.PASS or depth > 0:
                pass
            else:
                if kind == TokenKind.FUNCTION and self._peek_is(TokenKind.IDENTIFIER):
                    self._next_token()
                if self._cur_is(TokenKind.IDENTIFIER):
                    method = self._parse_method()
                    if method is not None:
                        methods.append(method)
                    elif end == TokenKind.DEDENT:
                        self._skip_line()
                else:
                    self._cur_error(TokenKind.IDENTIFIER.name)
            self._next_token()

        if self._cur_is(TokenKind.EOF) and end == TokenKind.RBRACE:
            self._cur_error(TokenKind.RBRACE.name)
        return ClassStatement(tok, name, parent, methods)

    def _skip_line(self) -> None:
        """Advance to just before the next NEWLINE so the rest of a broken header is dropped."""
        if self.cur_token.kind in LAYOUT:
            return
        while not self._peek_is(TokenKind.NEWLINE) and not self._peek_is(TokenKind.EOF):
            self._next_token()

    def _parse_method(self) -> MethodStatement | None:
        tok = self.cur_token
        name = Identifier(tok, tok.literal)
        if not self._expect_peek(TokenKind.LPAREN):
            return None
        parameters = self._parse_parameters()
        if parameters is None:
            return None
        body = self._parse_block()
        if body is None:
            return None
        return MethodStatement(tok, name, parameters, body)

    # ── Imports ──────────────────────────────────────────────────

    def _parse_dotted_name(self) -> str | None:
        if not self._expect_peek(TokenKind.IDENTIFIER):
            return None
        parts = [self.cur_token.literal]
        while self._peek_is(TokenKind.DOT):
            self._next_token()
            if not self._expect_peek(TokenKind.IDENTIFIER):
                return None
            parts.append(self.cur_token.literal)
        return ".".join(parts)

    def _parse_alias(self) -> tuple[bool, str | None]:
        if not self._peek_is(TokenKind.AS):
            return True, None
        self._next_token()
        if not self._expect_peek(TokenKind.IDENTIFIER):
            return False, None
        return True, self.cur_token.literal

    def _parse_import_statement(self) -> ImportStatement | None:
        tok = self.cur_token
        module = self._parse_dotted_name()
        if module is None:
            return None
        ok, alias = self._parse_alias()
        if not ok:
            return None
        self._skip_semicolon()
        return ImportStatement(tok, module, [], alias=alias)

    def _parse_from_import_statement(self) -> ImportStatement | None:
        tok = self.cur_token
        module = self._parse_dotted_name()
        if module is None:
            return None
        if not self._expect_peek(TokenKind.IMPORT):
            return None

        names: list[ImportName] = []
        while True:
            if not self._expect_peek(TokenKind.IDENTIFIER):
                return None
            name = self.cur_token.literal
            ok, alias = self._parse_alias()
            if not ok:
                return None
            names.append(ImportName(name, alias))
            if not self._peek_is(TokenKind.COMMA):
                break
            self._next_token()

        self._skip_semicolon()
        return ImportStatement(tok, module, names, is_from=True)

    # ── Try ──────────────────────────────────────────────────────

    def _parse_try_statement(self) -> TryStatement | None:
        tok = self.cur_token
        body = self._parse_block()
        if body is None:
            return None

        handlers: list[ExceptClause] = []
        while self._peek_is(TokenKind.EXCEPT):
            self._next_token()
            exception = None
            alias = None
            if not self._peek_is(TokenKind.LBRACE) and not self._peek_is(TokenKind.COLON):
                self._next_token()
                exception = self._parse_expression(Precedence.LOWEST)
                if exception is None:
                    return None
                ok, alias = self._parse_alias()
                if not ok:
                    return None
            block = self._parse_block()
            if block is None:
                return None
            handlers.append(ExceptClause(exception, alias, block))

        finally_block = None
        if self._peek_is(TokenKind.FINALLY):
            self._next_token()
            finally_block = self._parse_block()
            if finally_block is None:
                return None

        if not handlers and finally_block is None:
            self._peek_error("EXCEPT or FINALLY")
            return None
        return TryStatement(tok, body, handlers, finally_block)

    # ── Blocks ───────────────────────────────────────────────────

    def _parse_block(self) -> BlockStatement | None:
        """Parse a ``{ ... }`` or ``: ...`` block following the current token."""
        if self._peek_is(TokenKind.LBRACE):
            self._next_token()
            return self._parse_brace_block()
        if self._peek_is(TokenKind.COLON):
            self._next_token()
            return self._parse_colon_block()
        self._peek_error("LBRACE or COLON")
        return None

    def _parse_brace_block(self) -> BlockStatement:
        tok = self.cur_token
        statements: list[Statement] = []
        self._next_token()
        while not self._cur_is(TokenKind.RBRACE) and not self._cur_is(TokenKind.EOF):
            if self.cur_token.kind in LAYOUT:
                self._next_token()
                continue
            stmt = self._parse_statement()
            if stmt is not None:
                statements.append(stmt)
            self._next_token()
        if self._cur_is(TokenKind.EOF):
            self._cur_error(TokenKind.RBRACE.name)
        return BlockStatement(tok, statements)

    def _parse_colon_block(self) -> BlockStatement | None:
        tok = self.cur_token
        if not self._peek_is(TokenKind.NEWLINE):
            # Single-line suite: ``if x: y``
            self._next_token()
            stmt = self._parse_statement()
            if stmt is None:
                return None
            return BlockStatement(tok, [stmt])

        self._next_token()
        if not self._expect_peek(TokenKind.INDENT):
            return None
        statements: list[Statement] = []
        depth = 0
        self._next_token()
        while not self._cur_is(TokenKind.EOF):
            kind = self.cur_token.kind
            if kind == TokenKind.DEDENT:
                if depth == 0:
                    break
                depth -= 1
            elif kind == TokenKind.INDENT:
                depth += 1
            elif kind not in LAYOUT:
                stmt = self._parse_statement()
                if stmt is not None:
                    statements.append(stmt)
            self._next_token()
        return BlockStatement(tok, statements)

    def _parse_parameters(self) -> list[Identifier] | None:
        """Parse ``(a, b, c)``; the current token is the opening paren."""
        params: list[Identifier] = []
        while not self._peek_is(TokenKind.RPAREN):
            if not self._expect_peek(TokenKind.IDENTIFIER):
                return None
            params.append(Identifier(self.cur_token, self.cur_token.literal))
            if self._peek_is(TokenKind.COMMA):
                self._next_token()
            elif not self._peek_is(TokenKind.RPAREN):
                self._peek_error(TokenKind.RPAREN.name)
                return None
        self._next_token()
        return params

    # ── Expressions ──────────────────────────────────────────────

    def _parse_expression(self, precedence: Precedence) -> Expression | None:
        prefix = _PREFIX_PARSERS.get(self.cur_token.kind)
        if prefix is None:
            self._no_prefix_error(self.cur_token)
            return None
        left = prefix(self)

        while left is not None and precedence < self._peek_precedence():
            infix = _INFIX_PARSERS.get(self.peek_token.kind)
            if infix is None:
                return left
            self._next_token()
            left = infix(self, left)
        return left

    def _parse_expression_list(self, end: TokenKind) -> list[Expression] | None:
        """Comma-separated expressions up to *end*; a trailing comma is allowed."""
        items: list[Expression] = []
        while not self._peek_is(end):
            self._next_token()
            item = self._parse_expression(Precedence.LOWEST)
            if item is None:
                return None
            items.append(item)
            if self._peek_is(TokenKind.COMMA):
                self._next_token()
            elif not self._peek_is(end):
                self._peek_error(end.name)
                return None
        self._next_token()
        return items

    # Prefix parsers

    def _parse_identifier(self) -> Expression:
        return Identifier(self.cur_token, self.cur_token.literal)

    def _parse_integer_literal(self) -> Expression | None:
        tok = self.cur_token
        try:
            return IntegerLiteral(tok, int(tok.literal))
        except ValueError:
            self._error(f"could not parse {tok.literal!r} as integer", tok)
            return None

    def _parse_float_literal(self) -> Expression | None:
        tok = self.cur_token
        try:
            return FloatLiteral(tok, float(tok.literal))
        except ValueError:
            self._error(f"could not parse {tok.literal!r} as float", tok)
            return None

    def _parse_string_literal(self) -> Expression:
        return StringLiteral(self.cur_token, self.cur_token.literal)

    def _parse_boolean(self) -> Expression:
        return Boolean(self.cur_token, self._cur_is(TokenKind.TRUE))

    def _parse_none(self) -> Expression:
        return NoneLiteral(self.cur_token)

    def _parse_prefix_expression(self) -> Expression | None:
        tok = self.cur_token
        # ``not`` takes a whole comparison; ``!`` and ``-`` bind tightly.
        operand_bp = Precedence.LOGICAL if tok.kind == TokenKind.NOT else Precedence.PREFIX
        self._next_token()
        right = self._parse_expression(operand_bp)
        if right is None:
            return None
        return PrefixExpression(tok, tok.literal, right)

    def _parse_grouped_expression(self) -> Expression | None:
        self._next_token()
        expr = self._parse_expression(Precedence.LOWEST)
        if expr is None or not self._expect_peek(TokenKind.RPAREN):
            return None
        return expr

    def _parse_if_expression(self) -> Expression | None:
        tok = self.cur_token
        self._next_token()
        condition = self._parse_expression(Precedence.LOWEST)
        if condition is None:
            return None
        consequence = self._parse_block()
        if consequence is None:
            return None

        alternative = None
        if self._peek_is(TokenKind.ELIF):
            # elif chains nest as an if-expression inside the else block
            self._next_token()
            nested = self._parse_if_expression()
            if nested is None:
                return None
            alternative = BlockStatement(nested.token, [ExpressionStatement(nested.token, nested)])
        elif self._peek_is(TokenKind.ELSE):
            self._next_token()
            alternative = self._parse_block()
            if alternative is None:
                return None
        return IfExpression(tok, condition, consequence, alternative)

    def _parse_function_literal(self) -> Expression | None:
        tok = self.cur_token
        if not self._expect_peek(TokenKind.LPAREN):
            return None
        parameters = self._parse_parameters()
        if parameters is None:
            return None
        body = self._parse_block()
        if body is None:
            return None
        return FunctionLiteral(tok, parameters, body)

    def _parse_array_literal(self) -> Expression | None:
        tok = self.cur_token
        elements = self._parse_expression_list(TokenKind.RBRACKET)
        if elements is None:
            return None
        return ArrayLiteral(tok, elements)

    def _parse_dict_literal(self) -> Expression | None:
        tok = self.cur_token
        pairs: list[tuple[Expression, Expression]] = []
        while not self._peek_is(TokenKind.RBRACE):
            self._next_token()
            key = self._parse_expression(Precedence.LOWEST)
            if key is None or not self._expect_peek(TokenKind.COLON):
                return None
            self._next_token()
            value = self._parse_expression(Precedence.LOWEST)
            if value is None:
                return None
            pairs.append((key, value))
            if self._peek_is(TokenKind.COMMA):
                self._next_token()
            elif not self._peek_is(TokenKind.RBRACE):
                self._peek_error(TokenKind.RBRACE.name)
                return None
        self._next_token()
        return DictLiteral(tok, pairs)

    def _parse_lambda(self) -> Expression | None:
        tok = self.cur_token
        parameters: list[Identifier] = []
        while self._peek_is(TokenKind.IDENTIFIER):
            self._next_token()
            parameters.append(Identifier(self.cur_token, self.cur_token.literal))
            if not self._peek_is(TokenKind.COMMA):
                break
            self._next_token()
        if not self._expect_peek(TokenKind.COLON):
            return None
        self._next_token()
        body = self._parse_expression(Precedence.LOWEST)
        if body is None:
            return None
        return LambdaExpression(tok, parameters, body)

    # Infix parsers

    def _parse_infix_expression(self, left: Expression) -> Expression | None:
        tok = self.cur_token
        precedence = self._cur_precedence()
        if tok.kind in RIGHT_ASSOCIATIVE:
            precedence = Precedence(precedence - 1)
        self._next_token()
        right = self._parse_expression(precedence)
        if right is None:
            return None
        return InfixExpression(tok, left, tok.literal, right)

    def _parse_assignment(self, left: Expression) -> Expression | None:
        tok = self.cur_token
        self._next_token()
        value = self._parse_expression(Precedence(Precedence.ASSIGN - 1))
        if value is None:
            return None
        if not isinstance(left, _ASSIGNABLE):
            self._error(
                f"cannot assign to {left}", tok,
                "only names, index expressions and attributes can be assigned",
            )
            return None
        return AssignmentExpression(tok, left, tok.literal, value)

    def _parse_call_expression(self, function: Expression) -> Expression | None:
        tok = self.cur_token
        arguments = self._parse_expression_list(TokenKind.RPAREN)
        if arguments is None:
            return None
        return CallExpression(tok, function, arguments)

    def _parse_index_expression(self, left: Expression) -> Expression | None:
        tok = self.cur_token
        self._next_token()
        index = self._parse_expression(Precedence.LOWEST)
        if index is None or not self._expect_peek(TokenKind.RBRACKET):
            return None
        return IndexExpression(tok, left, index)

    def _parse_attribute_expression(self, obj: Expression) -> Expression | None:
        tok = self.cur_token
        if not self._expect_peek(TokenKind.IDENTIFIER):
            return None
        attribute = Identifier(self.cur_token, self.cur_token.literal)
        return AttributeExpression(tok, obj, attribute)


# ── Dispatch tables ──────────────────────────────────────────────

PrefixParseFn = Callable[[Parser], Expression | None]
InfixParseFn = Callable[[Parser, Expression], Expression | None]

_PREFIX_PARSERS: MappingProxyType[TokenKind, PrefixParseFn] = MappingProxyType({
    TokenKind.IDENTIFIER: Parser._parse_identifier,
    TokenKind.INT: Parser._parse_integer_literal,
    TokenKind.FLOAT: Parser._parse_float_literal,
    TokenKind.STRING: Parser._parse_string_literal,
    TokenKind.TRUE: Parser._parse_boolean,
    TokenKind.FALSE: Parser._parse_boolean,
    TokenKind.NONE: Parser._parse_none,
    TokenKind.BANG: Parser._parse_prefix_expression,
    TokenKind.MINUS: Parser._parse_prefix_expression,
    TokenKind.NOT: Parser._parse_prefix_expression,
    TokenKind.LPAREN: Parser._parse_grouped_expression,
    TokenKind.IF: Parser._parse_if_expression,
    TokenKind.FUNCTION: Parser._parse_function_literal,
    TokenKind.LBRACKET: Parser._parse_array_literal,
    TokenKind.LBRACE: Parser._parse_dict_literal,
    TokenKind.LAMBDA: Parser._parse_lambda,
})

_INFIX_PARSERS: MappingProxyType[TokenKind, InfixParseFn] = MappingProxyType({
    **{kind: Parser._parse_infix_expression for kind in (
        TokenKind.PLUS, TokenKind.MINUS, TokenKind.ASTERISK, TokenKind.SLASH,
        TokenKind.PERCENT, TokenKind.POWER, TokenKind.EQ, TokenKind.NOT_EQ,
        TokenKind.LT, TokenKind.GT, TokenKind.LT_EQ, TokenKind.GT_EQ,
        TokenKind.AND, TokenKind.OR,
    )},
    **{kind: Parser._parse_assignment for kind in (
        TokenKind.ASSIGN, TokenKind.PLUS_ASSIGN, TokenKind.MINUS_ASSIGN,
        TokenKind.STAR_ASSIGN, TokenKind.SLASH_ASSIGN,
    )},
    TokenKind.LPAREN: Parser._parse_call_expression,
    TokenKind.LBRACKET: Parser._parse_index_expression,
    TokenKind.DOT: Parser._parse_attribute_expression,
})


# ── Driver ───────────────────────────────────────────────────────


def parse_source(
    source: str, filename: str = "<stdin>", *, tab_width: int = 4,
) -> tuple[Program, list[Diagnostic]]:
    """Tokenize and parse *source*.

    A lexical failure yields an empty program and a single diagnostic.
    Callers should treat any diagnostic as a reason not to proceed.
    """
    try:
        tokens = Lexer(source, filename, tab_width=tab_width).lex()
    except LexError as e:
        logger.debug("%s: lexical error: %s", filename, e)
        return Program([]), [e.to_diagnostic()]
    parser = Parser(tokens, filename)
    program, _ = parser.parse_program()
    return program, parser.diagnostics