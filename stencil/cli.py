#!/usr/bin/env python3
"""Stencil CLI - Declarative project scaffolding."""

import typer
from rich.console import Console

from stencil import __version__
from stencil.cli_scaffold_commands import register_scaffold_commands
from stencil.core.logger import get_logger
from stencil.core.template_loader import TemplateLoader

app = typer.Typer(
    name="stencil",
    help="""Stencil - Declarative project scaffolding

One plan file. Directories + files + first commit.

Quick start:
  stencil plans                   # Browse bundled plans
  stencil show wasm-demo          # See what a plan writes
  stencil new ./demo              # Scaffold and commit
  stencil new ./demo --dry-run    # Preview only

More commands: stencil --help
""",
    add_completion=False,
)

console = Console()
logger = get_logger(__name__)
template_loader = TemplateLoader()

register_scaffold_commands(app, console, template_loader)


@app.command()
def version():
    """Show Stencil version."""
    console.print(f"Stencil v{__version__}")


if __name__ == "__main__":
    app()
