"""Project scaffolding for `kelp new`."""

from __future__ import annotations

from pathlib import Path

_KELP_TOML_TEMPLATE = """\
[package]
name = "{name}"
version = "0.1.0"

[source]
paths = ["src"]

[lexer]
tab_width = 4

[diagnostics]
color = true
"""

_MAIN_KP_TEMPLATE = """\
# Hello from Kelp!
func greet(name):
    return "Hello, " + name

class Greeter extends Object {
    hello(who) { print(greet(who)) }
}

let names = ["world", "kelp"]
for n in names:
    Greeter().hello(n)
"""

_GITIGNORE = """\
__pycache__/
.kelp/
"""


def scaffold(name: str, parent: Path | None = None) -> Path:
    """Create a new Kelp project directory. Returns the project path."""
    base = parent or Path.cwd()
    project_dir = base / name

    if project_dir.exists():
        raise FileExistsError(f"Directory '{name}' already exists")

    src_dir = project_dir / "src"
    src_dir.mkdir(parents=True)

    (project_dir / "kelp.toml").write_text(_KELP_TOML_TEMPLATE.format(name=name))
    (src_dir / "main.kp").write_text(_MAIN_KP_TEMPLATE)
    (project_dir / ".gitignore").write_text(_GITIGNORE)

    return project_dir
