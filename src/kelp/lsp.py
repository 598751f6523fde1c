"""Kelp Language Server: pygls-based LSP for .kp files.

Publishes parse diagnostics, lists document symbols and offers keyword
completion via stdio transport.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from lsprotocol import types as lsp
from pygls.lsp.server import LanguageServer

from kelp import __version__
from kelp.ast_nodes import (
    ClassStatement,
    FunctionStatement,
    LetStatement,
    MethodStatement,
    Program,
    Statement,
)
from kelp.errors import Diagnostic, Severity
from kelp.parser import parse_source
from kelp.source import Span
from kelp.tokens import KEYWORDS

logger = logging.getLogger(__name__)

# ── Conversion helpers ────────────────────────────────────────────

_SEVERITY_MAP = {
    Severity.ERROR: lsp.DiagnosticSeverity.Error,
    Severity.WARNING: lsp.DiagnosticSeverity.Warning,
    Severity.NOTE: lsp.DiagnosticSeverity.Information,
}

_KEYWORD_COMPLETIONS = sorted(KEYWORDS.keys())

_COMPLETION_KIND = {
    lsp.SymbolKind.Function: lsp.CompletionItemKind.Function,
    lsp.SymbolKind.Class: lsp.CompletionItemKind.Class,
    lsp.SymbolKind.Variable: lsp.CompletionItemKind.Variable,
}

_ZERO_RANGE = lsp.Range(start=lsp.Position(line=0, character=0), end=lsp.Position(line=0, character=0))


def span_to_range(span: Span) -> lsp.Range:
    """Convert a 1-indexed Kelp Span to a 0-indexed LSP Range."""
    return lsp.Range(
        start=lsp.Position(line=span.start_line - 1, character=span.start_col - 1),
        end=lsp.Position(line=span.end_line - 1, character=span.end_col),
    )


def to_lsp_diagnostic(diag: Diagnostic) -> lsp.Diagnostic:
    """Convert a kelp Diagnostic to an LSP Diagnostic."""
    span = diag.span
    return lsp.Diagnostic(
        range=span_to_range(span) if span is not None else _ZERO_RANGE,
        severity=_SEVERITY_MAP.get(diag.severity, lsp.DiagnosticSeverity.Error),
        source="kelp",
        code=diag.code,
        message=diag.message,
    )


# ── Per-document state ────────────────────────────────────────────


@dataclass
class DocumentState:
    """Cached analysis results for a single open document."""

    source: str = ""
    program: Program | None = None
    diagnostics: list[lsp.Diagnostic] = field(default_factory=list)


# ── Server ────────────────────────────────────────────────────────

server = LanguageServer(
    "kelp-lsp", __version__,
    text_document_sync_kind=lsp.TextDocumentSyncKind.Full,
)
_state: dict[str, DocumentState] = {}


def _analyze(uri: str, source: str) -> DocumentState:
    """Parse the document, cache the result and return its state."""
    program, diagnostics = parse_source(source, uri)
    ds = DocumentState(
        source=source,
        program=program,
        diagnostics=[to_lsp_diagnostic(d) for d in diagnostics],
    )
    logger.debug("%s: %d diagnostic(s)", uri, len(ds.diagnostics))
    _state[uri] = ds
    return ds


def _publish(uri: str, ds: DocumentState) -> None:
    server.text_document_publish_diagnostics(lsp.PublishDiagnosticsParams(
        uri=uri,
        diagnostics=ds.diagnostics,
    ))


@server.feature(lsp.TEXT_DOCUMENT_DID_OPEN)
def did_open(params: lsp.DidOpenTextDocumentParams) -> None:
    uri = params.text_document.uri
    _publish(uri, _analyze(uri, params.text_document.text))


@server.feature(lsp.TEXT_DOCUMENT_DID_CHANGE)
def did_change(params: lsp.DidChangeTextDocumentParams) -> None:
    uri = params.text_document.uri
    # Full sync: the last change carries the whole document
    source = params.content_changes[-1].text if params.content_changes else ""
    _publish(uri, _analyze(uri, source))


@server.feature(lsp.TEXT_DOCUMENT_DID_CLOSE)
def did_close(params: lsp.DidCloseTextDocumentParams) -> None:
    _state.pop(params.text_document.uri, None)


@server.feature(
    lsp.TEXT_DOCUMENT_COMPLETION,
    lsp.CompletionOptions(trigger_characters=["."]),
)
def completion(params: lsp.CompletionParams) -> lsp.CompletionList:
    items = [
        lsp.CompletionItem(label=kw, kind=lsp.CompletionItemKind.Keyword)
        for kw in _KEYWORD_COMPLETIONS
    ]

    ds = _state.get(params.text_document.uri)
    if ds is not None and ds.program is not None:
        for sym in document_symbols(ds.program):
            items.append(lsp.CompletionItem(
                label=sym.name,
                kind=_COMPLETION_KIND.get(sym.kind, lsp.CompletionItemKind.Text),
            ))

    return lsp.CompletionList(is_incomplete=False, items=items)


@server.feature(lsp.TEXT_DOCUMENT_DOCUMENT_SYMBOL)
def document_symbol(params: lsp.DocumentSymbolParams) -> list[lsp.DocumentSymbol]:
    ds = _state.get(params.text_document.uri)
    if ds is None or ds.program is None:
        return []
    return document_symbols(ds.program)


def document_symbols(program: Program) -> list[lsp.DocumentSymbol]:
    """Top-level functions, classes (with methods) and let bindings."""
    symbols: list[lsp.DocumentSymbol] = []
    for stmt in program.statements:
        sym = _stmt_to_symbol(stmt)
        if sym is not None:
            symbols.append(sym)
    return symbols


def _symbol(name: str, kind: lsp.SymbolKind, stmt: Statement, detail: str | None = None,
            children: list[lsp.DocumentSymbol] | None = None) -> lsp.DocumentSymbol:
    rng = span_to_range(stmt.token.span("<lsp>"))
    return lsp.DocumentSymbol(
        name=name,
        kind=kind,
        range=rng,
        selection_range=rng,
        detail=detail,
        children=children,
    )


def _stmt_to_symbol(stmt: Statement) -> lsp.DocumentSymbol | None:
    """Convert a top-level statement to an LSP DocumentSymbol."""
    if isinstance(stmt, (FunctionStatement, MethodStatement)):
        params_str = ", ".join(p.value for p in stmt.parameters)
        kind = lsp.SymbolKind.Function if isinstance(stmt, FunctionStatement) else lsp.SymbolKind.Method
        return _symbol(stmt.name.value, kind, stmt, detail=f"({params_str})")
    if isinstance(stmt, ClassStatement):
        children = [_stmt_to_symbol(m) for m in stmt.methods]
        detail = f"extends {stmt.parent.value}" if stmt.parent is not None else None
        return _symbol(
            stmt.name.value, lsp.SymbolKind.Class, stmt, detail=detail,
            children=[c for c in children if c is not None] or None,
        )
    if isinstance(stmt, LetStatement):
        return _symbol(stmt.name.value, lsp.SymbolKind.Variable, stmt)
    return None


# ── Entry point ──────────────────────────────────────────────────


def main() -> None:
    """Start the Kelp language server on stdio."""
    server.start_io()
