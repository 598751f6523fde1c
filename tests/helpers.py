"""Shared test helpers for the Kelp test suite."""

from __future__ import annotations

from kelp.ast_nodes import Program
from kelp.lexer import Lexer
from kelp.parser import Parser


def parse(source: str) -> tuple[Program, list[str]]:
    """Lex and parse source, returning (program, error messages)."""
    tokens = Lexer(source, "<test>").lex()
    return Parser(tokens, "<test>").parse_program()


def parse_ok(source: str) -> Program:
    """Lex and parse source, asserting there are no diagnostics."""
    program, errors = parse(source)
    assert not errors, f"Unexpected errors: {errors}"
    return program


def canonical(source: str) -> str:
    """Canonical re-serialization of a clean parse."""
    return parse_ok(source).string()


def assert_round_trip(source: str) -> None:
    """Re-serialized output re-parses to an equal tree and a stable string."""
    first = parse_ok(source)
    text = first.string()
    second = parse_ok(text)
    assert second == first, f"round trip changed the tree:\n{text}\n{second.string()}"
    assert second.string() == text
