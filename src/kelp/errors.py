"""Diagnostics, lexical errors and Rust-style diagnostic rendering."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from kelp.source import SourceFile, Span


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"
    NOTE = "note"


# ANSI color codes
_COLORS = {
    Severity.ERROR: "\033[1;31m",    # bold red
    Severity.WARNING: "\033[1;33m",  # bold yellow
    Severity.NOTE: "\033[1;36m",     # bold cyan
}
_BOLD = "\033[1m"
_BLUE = "\033[1;34m"
_RESET = "\033[0m"

LEX_ERROR = "E100"
PARSE_ERROR = "E200"


@dataclass(frozen=True)
class DiagnosticLabel:
    """A source range with an optional inline message."""

    span: Span
    message: str = ""


@dataclass
class Diagnostic:
    """One reported problem: severity, code, message, labels and notes."""

    severity: Severity
    code: str
    message: str
    labels: list[DiagnosticLabel] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)

    @property
    def span(self) -> Span | None:
        return self.labels[0].span if self.labels else None


class LexError(Exception):
    """A lexical failure: unterminated string, malformed number, bad dedent.

    Carries the 1-based line and column of the offending token's start.
    """

    def __init__(self, message: str, line: int, column: int, filename: str = "<stdin>") -> None:
        self.message = message
        self.line = line
        self.column = column
        self.filename = filename
        super().__init__(f"{message} at line {line}, column {column}")

    def to_diagnostic(self) -> Diagnostic:
        return Diagnostic(
            severity=Severity.ERROR,
            code=LEX_ERROR,
            message=str(self),
            labels=[DiagnosticLabel(Span.at(self.filename, self.line, self.column))],
        )


class DiagnosticRenderer:
    """Formats diagnostics the way rustc does, optionally with ANSI colour.

    Sources registered with ``add_source`` are used for the code excerpt;
    any other file named by a span is read from disk on first use.
    """

    def __init__(self, *, color: bool = True) -> None:
        self.color = color
        self._sources: dict[str, SourceFile | None] = {}

    def add_source(self, source: SourceFile) -> None:
        self._sources[source.name] = source

    def _paint(self, text: str, code: str) -> str:
        if not self.color:
            return text
        return f"{code}{text}{_RESET}"

    def _source_for(self, filename: str) -> SourceFile | None:
        if filename not in self._sources:
            path = Path(filename)
            try:
                self._sources[filename] = SourceFile.from_path(path) if path.is_file() else None
            except (OSError, UnicodeDecodeError):
                self._sources[filename] = None
        return self._sources[filename]

    def _gutter(self, text: str = "") -> str:
        return "  " + self._paint(f"{text:>4} |", _BLUE)

    def _excerpt(self, label: DiagnosticLabel, color: str) -> list[str]:
        span = label.span
        out = [f"  {self._paint('-->', _BLUE)} {span}", self._gutter()]

        source = self._source_for(span.file)
        text = source.line_at(span.start_line) if source is not None else None
        if text is not None:
            if span.end_line > span.start_line:
                width = len(text) - span.start_col + 1
            else:
                width = span.end_col - span.start_col + 1
            carets = "^" * max(1, width)
            out.append(f"{self._gutter(str(span.start_line))} {text}")
            out.append(f"{self._gutter()} {' ' * (span.start_col - 1)}{self._paint(carets, color)}")

        if label.message:
            out.append(f"{self._gutter()}   {self._paint(label.message, color)}")
        return out

    def render(self, diag: Diagnostic) -> str:
        color = _COLORS[diag.severity]
        head = self._paint(f"{diag.severity.value}[{diag.code}]", color)
        out = [head + self._paint(f": {diag.message}", _BOLD)]
        for label in diag.labels:
            out.extend(self._excerpt(label, color))
        out.extend(f"  {self._paint('=', _BLUE)} note: {note}" for note in diag.notes)
        return "\n".join(out)
