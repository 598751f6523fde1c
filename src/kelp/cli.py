"""Kelp command-line front end."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import fields, is_dataclass
from pathlib import Path

import click

from kelp import __version__
from kelp.config import KelpConfig, find_config, load_config
from kelp.errors import DiagnosticRenderer, LexError
from kelp.lexer import Lexer
from kelp.parser import parse_source
from kelp.project import scaffold
from kelp.source import SourceFile

logger = logging.getLogger(__name__)


def _load_config_or_default(start: Path) -> KelpConfig:
    try:
        path = find_config(start)
    except FileNotFoundError:
        logger.debug("no kelp.toml above %s, using defaults", start)
        return KelpConfig()
    logger.debug("using config %s", path)
    return load_config(path)


def _collect_sources(paths: list[Path], extension: str) -> list[Path]:
    files: list[Path] = []
    for path in paths:
        if path.is_dir():
            files.extend(sorted(path.rglob(f"*{extension}")))
        elif path.is_file():
            files.append(path)
    return files


def _echo_decode_error(path: Path, e: UnicodeDecodeError) -> None:
    click.echo(f"error: {path} is not valid UTF-8 ({e.reason} at byte {e.start})", err=True)


def _read_or_exit(path: Path) -> SourceFile:
    try:
        return SourceFile.from_path(path)
    except UnicodeDecodeError as e:
        _echo_decode_error(path, e)
        raise SystemExit(1)


def _check_file(path: Path, config: KelpConfig, renderer: DiagnosticRenderer) -> bool:
    """Parse one file and render its diagnostics. Returns True if clean."""
    try:
        source = SourceFile.from_path(path)
    except UnicodeDecodeError as e:
        _echo_decode_error(path, e)
        return False
    renderer.add_source(source)
    _, diagnostics = parse_source(source.content, source.name, tab_width=config.lexer.tab_width)
    for diag in diagnostics:
        click.echo(renderer.render(diag), err=True)
    return not diagnostics


@click.group()
@click.version_option(__version__, prog_name="kelp")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def main(verbose: bool) -> None:
    """The Kelp scripting language front end."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )


@main.command()
@click.argument("paths", nargs=-1, type=click.Path(exists=True, path_type=Path))
def check(paths: tuple[Path, ...]) -> None:
    """Parse Kelp sources and report diagnostics."""
    config = _load_config_or_default(paths[0] if paths else Path.cwd())
    if paths:
        targets = list(paths)
    elif config.root is not None:
        targets = config.source_dirs()
    else:
        targets = [Path.cwd()]

    files = _collect_sources(targets, config.source.extension)
    if not files:
        click.echo(f"warning: no {config.source.extension} files found", err=True)
        return

    renderer = DiagnosticRenderer(color=config.diagnostics.color)
    failed = 0
    for path in files:
        logger.debug("checking %s", path)
        if not _check_file(path, config, renderer):
            failed += 1

    if failed:
        click.echo(f"{failed} of {len(files)} file(s) had errors", err=True)
        raise SystemExit(1)
    click.echo(f"checked {len(files)} file(s), no errors")


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def tokens(file: Path) -> None:
    """Print the token stream of a Kelp source file."""
    config = _load_config_or_default(file)
    lexer = Lexer(_read_or_exit(file).content, str(file), tab_width=config.lexer.tab_width)
    try:
        for tok in lexer:
            click.echo(f"{tok.line}:{tok.column} {tok.kind.name} {tok.literal!r}")
    except LexError as e:
        renderer = DiagnosticRenderer(color=config.diagnostics.color)
        click.echo(renderer.render(e.to_diagnostic()), err=True)
        raise SystemExit(1)


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--canonical", is_flag=True, help="Print canonical source instead of the tree.")
def view(file: Path, canonical: bool) -> None:
    """View the AST of a Kelp source file."""
    config = _load_config_or_default(file)
    source = _read_or_exit(file)
    program, diagnostics = parse_source(
        source.content, source.name, tab_width=config.lexer.tab_width,
    )
    if diagnostics:
        renderer = DiagnosticRenderer(color=config.diagnostics.color)
        renderer.add_source(source)
        for diag in diagnostics:
            click.echo(renderer.render(diag), err=True)
        raise SystemExit(1)

    if canonical:
        click.echo(program.string())
    else:
        click.echo("\n".join(_ast_lines(program)))


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--no-color", is_flag=True, help="Print the source without escapes.")
def highlight(file: Path, no_color: bool) -> None:
    """Print a Kelp source file with syntax highlighting."""
    from kelp.highlight import highlight_source

    click.echo(highlight_source(_read_or_exit(file).content, color=not no_color), nl=False)


@main.command()
@click.argument("name")
def new(name: str) -> None:
    """Create a new Kelp project."""
    try:
        project_dir = scaffold(name)
        click.echo(f"created project '{name}' at {project_dir}")
    except FileExistsError as e:
        click.echo(f"error: {e}", err=True)
        raise SystemExit(1)


@main.command()
def lsp() -> None:
    """Start the Kelp language server."""
    from kelp.lsp import main as lsp_main

    lsp_main()


def _ast_lines(node: object, depth: int = 0) -> Iterator[str]:
    """Indented outline of a node tree, one field per line."""
    pad = "  " * depth
    if isinstance(node, tuple):
        yield f"{pad}pair"
        for item in node:
            yield from _ast_lines(item, depth + 1)
        return
    if not is_dataclass(node):
        yield f"{pad}{node!r}"
        return

    yield f"{pad}{type(node).__name__}"
    for f in fields(node):
        if f.name == "token":
            continue
        value = getattr(node, f.name)
        if value is None:
            continue
        if isinstance(value, list):
            yield f"{pad}  {f.name}:" + ("" if value else " []")
            for item in value:
                yield from _ast_lines(item, depth + 2)
        elif is_dataclass(value):
            yield f"{pad}  {f.name}:"
            yield from _ast_lines(value, depth + 2)
        else:
            yield f"{pad}  {f.name}: {value!r}"
