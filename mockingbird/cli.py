"""
Mockingbird CLI - run Jest-style test snippets written in Python.
"""

import asyncio
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel

from .formatters import ResultFormatter
from .loader import run_source
from .settings import get_settings

# Setup
app = typer.Typer(
    name="mockingbird",
    help="Run Jest-style test snippets with mocks and fake timers",
    add_completion=False,
)
console = Console()


def configure_logging():
    """Configure logging based on settings."""
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


# Configure logging on module import
configure_logging()


def _read_snippet(path: Path) -> str:
    """Read snippet source, exiting with a readable message when it is missing.

    Raises:
        SystemExit: If the file is not found
    """
    if not path.exists():
        console.print(f"[bold red]✗ Error:[/bold red] File not found: {path}")
        raise typer.Exit(code=1)
    return path.read_text(encoding="utf-8")


def _create_command_panel(title: str, path: Path, color: str) -> Panel:
    return Panel.fit(
        f"[bold {color}]{title}[/bold {color}]\nSnippet: {path.name}",
        border_style=color,
    )


@app.command()
def run(
    file: Path = typer.Argument(..., help="Snippet file to run"),
    json_output: bool = typer.Option(
        False, "--json", help="Print the result as JSON instead of a tree"
    ),
    quiet_logs: bool = typer.Option(
        False, "--no-logs", help="Hide console output captured per test"
    ),
):
    """Run a snippet file and report its tests."""
    source = _read_snippet(file)

    try:
        result = asyncio.run(run_source(source, filename=str(file)))
    except Exception as e:
        console.print(f"\n[bold red]✗ Run failed:[/bold red] {e}")
        raise typer.Exit(code=1)

    if json_output:
        typer.echo(result.to_json())
    else:
        console.print(_create_command_panel("Mockingbird Run", file, "blue"))
        ResultFormatter(console, show_logs=not quiet_logs).print_result(result)

    errored = any(line.startswith(("Execution Error", "Runtime Error")) for line in result.logs)
    if not result.success or errored:
        raise typer.Exit(code=1)


@app.command()
def version():
    """Show Mockingbird version."""
    from . import __version__

    console.print(f"Mockingbird version: [bold]{__version__}[/bold]")


if __name__ == "__main__":
    app()
