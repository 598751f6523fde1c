"""AST node definitions for the Kelp language.

Every node keeps the token it was built from. The token is excluded from
equality, so two trees compare equal when their structure and values
match regardless of source positions. ``string()`` renders a node back to
canonical source text that parses to an equal tree.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from kelp.tokens import Token


class Node:
    token: Token

    def token_literal(self) -> str:
        return self.token.literal

    def string(self) -> str:
        raise NotImplementedError

    def __str__(self) -> str:
        return self.string()


class Statement(Node):
    pass


class Expression(Node):
    pass


def _join(nodes: list[Expression]) -> str:
    return ", ".join(n.string() for n in nodes)


# ── Program ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class Program(Node):
    statements: list[Statement] = field(default_factory=list)

    def token_literal(self) -> str:
        if self.statements:
            return self.statements[0].token_literal()
        return ""

    def string(self) -> str:
        return "\n".join(s.string() for s in self.statements)


# ── Expressions ──────────────────────────────────────────────────


@dataclass(frozen=True)
class Identifier(Expression):
    token: Token = field(compare=False, repr=False)
    value: str

    def string(self) -> str:
        return self.value


@dataclass(frozen=True)
class IntegerLiteral(Expression):
    token: Token = field(compare=False, repr=False)
    value: int

    def string(self) -> str:
        return self.token.literal


@dataclass(frozen=True)
class FloatLiteral(Expression):
    token: Token = field(compare=False, repr=False)
    value: float

    def string(self) -> str:
        return self.token.literal


@dataclass(frozen=True)
class StringLiteral(Expression):
    token: Token = field(compare=False, repr=False)
    value: str

    def string(self) -> str:
        escaped = self.value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'


@dataclass(frozen=True)
class Boolean(Expression):
    token: Token = field(compare=False, repr=False)
    value: bool

    def string(self) -> str:
        return "True" if self.value else "False"


@dataclass(frozen=True)
class NoneLiteral(Expression):
    token: Token = field(compare=False, repr=False)

    def string(self) -> str:
        return "None"


@dataclass(frozen=True)
class PrefixExpression(Expression):
    token: Token = field(compare=False, repr=False)
    operator: str
    right: Expression

    def string(self) -> str:
        sep = " " if self.operator.isalpha() else ""
        return f"({self.operator}{sep}{self.right.string()})"


@dataclass(frozen=True)
class InfixExpression(Expression):
    token: Token = field(compare=False, repr=False)
    left: Expression
    operator: str
    right: Expression

    def string(self) -> str:
        return f"({self.left.string()} {self.operator} {self.right.string()})"


@dataclass(frozen=True)
class IfExpression(Expression):
    token: Token = field(compare=False, repr=False)
    condition: Expression
    consequence: BlockStatement
    alternative: BlockStatement | None = None

    def string(self) -> str:
        out = f"(if {self.condition.string()} {self.consequence.string()}"
        if self.alternative is not None:
            out += f" else {self.alternative.string()}"
        return out + ")"


@dataclass(frozen=True)
class FunctionLiteral(Expression):
    token: Token = field(compare=False, repr=False)
    parameters: list[Identifier]
    body: BlockStatement

    def string(self) -> str:
        return f"func({_join(self.parameters)}) {self.body.string()}"


@dataclass(frozen=True)
class CallExpression(Expression):
    token: Token = field(compare=False, repr=False)
    function: Expression
    arguments: list[Expression]

    def string(self) -> str:
        return f"{self.function.string()}({_join(self.arguments)})"


@dataclass(frozen=True)
class IndexExpression(Expression):
    token: Token = field(compare=False, repr=False)
    left: Expression
    index: Expression

    def string(self) -> str:
        return f"({self.left.string()}[{self.index.string()}])"


@dataclass(frozen=True)
class ArrayLiteral(Expression):
    token: Token = field(compare=False, repr=False)
    elements: list[Expression]

    def string(self) -> str:
        return f"[{_join(self.elements)}]"


@dataclass(frozen=True)
class DictLiteral(Expression):
    token: Token = field(compare=False, repr=False)
    pairs: list[tuple[Expression, Expression]]

    def string(self) -> str:
        items = ", ".join(f"{k.string()}: {v.string()}" for k, v in self.pairs)
        return "{" + items + "}"


@dataclass(frozen=True)
class AttributeExpression(Expression):
    token: Token = field(compare=False, repr=False)
    obj: Expression
    attribute: Identifier

    def string(self) -> str:
        return f"{self.obj.string()}.{self.attribute.string()}"


@dataclass(frozen=True)
class AssignmentExpression(Expression):
    token: Token = field(compare=False, repr=False)
    target: Expression
    operator: str
    value: Expression

    def string(self) -> str:
        return f"({self.target.string()} {self.operator} {self.value.string()})"


@dataclass(frozen=True)
class LambdaExpression(Expression):
    token: Token = field(compare=False, repr=False)
    parameters: list[Identifier]
    body: Expression

    def string(self) -> str:
        if self.parameters:
            return f"(lambda {_join(self.parameters)}: {self.body.string()})"
        return f"(lambda: {self.body.string()})"


# ── Statements ───────────────────────────────────────────────────


@dataclass(frozen=True)
class LetStatement(Statement):
    token: Token = field(compare=False, repr=False)
    name: Identifier
    value: Expression

    def string(self) -> str:
        return f"let {self.name.string()} = {self.value.string()}"


@dataclass(frozen=True)
class ReturnStatement(Statement):
    token: Token = field(compare=False, repr=False)
    return_value: Expression | None = None

    def string(self) -> str:
        if self.return_value is None:
            return "return"
        return f"return {self.return_value.string()}"


@dataclass(frozen=True)
class ExpressionStatement(Statement):
    token: Token = field(compare=False, repr=False)
    expression: Expression

    def string(self) -> str:
        return self.expression.string()


@dataclass(frozen=True)
class BlockStatement(Statement):
    token: Token = field(compare=False, repr=False)
    statements: list[Statement]

    def string(self) -> str:
        if not self.statements:
            return "{ }"
        return "{ " + "; ".join(s.string() for s in self.statements) + " }"


@dataclass(frozen=True)
class IfStatement(Statement):
    token: Token = field(compare=False, repr=False)
    condition: Expression
    consequence: BlockStatement
    elif_branches: list[tuple[Expression, BlockStatement]]
    alternative: BlockStatement | None = None

    def string(self) -> str:
        out = f"if {self.condition.string()} {self.consequence.string()}"
        for cond, block in self.elif_branches:
            out += f" elif {cond.string()} {block.string()}"
        if self.alternative is not None:
            out += f" else {self.alternative.string()}"
        return out


@dataclass(frozen=True)
class WhileStatement(Statement):
    token: Token = field(compare=False, repr=False)
    condition: Expression
    body: BlockStatement

    def string(self) -> str:
        return f"while {self.condition.string()} {self.body.string()}"


@dataclass(frozen=True)
class ForStatement(Statement):
    token: Token = field(compare=False, repr=False)
    iterator: Identifier
    iterable: Expression
    body: BlockStatement

    def string(self) -> str:
        return f"for {self.iterator.string()} in {self.iterable.string()} {self.body.string()}"


@dataclass(frozen=True)
class FunctionStatement(Statement):
    token: Token = field(compare=False, repr=False)
    name: Identifier
    parameters: list[Identifier]
    body: BlockStatement

    def string(self) -> str:
        return f"func {self.name.string()}({_join(self.parameters)}) {self.body.string()}"


@dataclass(frozen=True)
class MethodStatement(Statement):
    token: Token = field(compare=False, repr=False)
    name: Identifier
    parameters: list[Identifier]
    body: BlockStatement

    def string(self) -> str:
        return f"{self.name.string()}({_join(self.parameters)}) {self.body.string()}"


@dataclass(frozen=True)
class ClassStatement(Statement):
    token: Token = field(compare=False, repr=False)
    name: Identifier
    parent: Identifier | None
    methods: list[MethodStatement]

    def string(self) -> str:
        out = f"class {self.name.string()}"
        if self.parent is not None:
            out += f" extends {self.parent.string()}"
        if not self.methods:
            return out + " { }"
        return out + " { " + "; ".join(m.string() for m in self.methods) + " }"


@dataclass(frozen=True)
class ImportName:
    name: str
    alias: str | None = None

    def string(self) -> str:
        return f"{self.name} as {self.alias}" if self.alias else self.name


@dataclass(frozen=True)
class ImportStatement(Statement):
    """``import a.b [as c]`` or ``from a.b import c [as d], e``."""

    token: Token = field(compare=False, repr=False)
    module: str
    names: list[ImportName]
    alias: str | None = None
    is_from: bool = False

    def string(self) -> str:
        if self.is_from:
            return f"from {self.module} import " + ", ".join(n.string() for n in self.names)
        if self.alias:
            return f"import {self.module} as {self.alias}"
        return f"import {self.module}"


@dataclass(frozen=True)
class ExceptClause:
    exception: Expression | None
    alias: str | None
    body: BlockStatement

    def string(self) -> str:
        out = "except"
        if self.exception is not None:
            out += f" {self.exception.string()}"
        if self.alias:
            out += f" as {self.alias}"
        return f"{out} {self.body.string()}"


@dataclass(frozen=True)
class TryStatement(Statement):
    token: Token = field(compare=False, repr=False)
    body: BlockStatement
    handlers: list[ExceptClause]
    finally_block: BlockStatement | None = None

    def string(self) -> str:
        out = f"try {self.body.string()}"
        for handler in self.handlers:
            out += f" {handler.string()}"
        if self.finally_block is not None:
            out += f" finally {self.finally_block.string()}"
        return out


@dataclass(frozen=True)
class PassStatement(Statement):
    token: Token = field(compare=False, repr=False)

    def string(self) -> str:
        return "pass"


@dataclass(frozen=True)
class BreakStatement(Statement):
    token: Token = field(compare=False, repr=False)

    def string(self) -> str:
        return "break"


@dataclass(frozen=True)
class ContinueStatement(Statement):
    token: Token = field(compare=False, repr=False)

    def string(self) -> str:
        return "continue"


@dataclass(frozen=True)
class RaiseStatement(Statement):
    token: Token = field(compare=False, repr=False)
    exception: Expression | None = None

    def string(self) -> str:
        if self.exception is None:
            return "raise"
        return f"raise {self.exception.string()}"
