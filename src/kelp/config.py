"""TOML config loading for kelp.toml."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

CONFIG_NAME = "kelp.toml"


@dataclass
class PackageConfig:
    name: str = "untitled"
    version: str = "0.0.0"


@dataclass
class SourceConfig:
    paths: list[str] = field(default_factory=lambda: ["src"])
    extension: str = ".kp"


@dataclass
class LexerConfig:
    tab_width: int = 4


@dataclass
class DiagnosticsConfig:
    color: bool = True


@dataclass
class KelpConfig:
    package: PackageConfig = field(default_factory=PackageConfig)
    source: SourceConfig = field(default_factory=SourceConfig)
    lexer: LexerConfig = field(default_factory=LexerConfig)
    diagnostics: DiagnosticsConfig = field(default_factory=DiagnosticsConfig)
    root: Path | None = None

    def source_dirs(self) -> list[Path]:
        """Source directories resolved against the config's directory."""
        base = self.root or Path.cwd()
        return [base / p for p in self.source.paths]


def find_config(start_path: Path | None = None) -> Path:
    """Walk up directories to find kelp.toml. Raises FileNotFoundError."""
    path = (start_path or Path.cwd()).resolve()
    if path.is_file():
        path = path.parent
    while True:
        candidate = path / CONFIG_NAME
        if candidate.exists():
            return candidate
        parent = path.parent
        if parent == path:
            raise FileNotFoundError(f"No {CONFIG_NAME} found in any parent directory")
        path = parent


def load_config(path: Path) -> KelpConfig:
    """Parse a kelp.toml file into a KelpConfig."""
    with open(path, "rb") as f:
        data = tomllib.load(f)

    config = KelpConfig(root=path.parent)

    if "package" in data:
        pkg = data["package"]
        config.package = PackageConfig(
            name=pkg.get("name", "untitled"),
            version=pkg.get("version", "0.0.0"),
        )

    if "source" in data:
        src = data["source"]
        config.source = SourceConfig(
            paths=src.get("paths", ["src"]),
            extension=src.get("extension", ".kp"),
        )

    if "lexer" in data:
        config.lexer = LexerConfig(tab_width=data["lexer"].get("tab_width", 4))

    if "diagnostics" in data:
        config.diagnostics = DiagnosticsConfig(color=data["diagnostics"].get("color", True))

    return config
