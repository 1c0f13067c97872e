"""CLI entry point — registers all subcommands."""

from pathlib import Path
from typing import Optional

import typer

from ._common import console

app = typer.Typer(
    name="content-xray",
    help="Content X-Ray - audit a content tree and map its relationships",
    add_completion=False,
    rich_markup_mode="rich",
)


@app.callback(invoke_without_command=True)
def _root(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None,
        "-c",
        "--config",
        help="Configuration file (TOML)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit",
        is_eager=True,
    ),
):
    """Content X-Ray - audit a content tree and map its relationships."""
    if version:
        from .. import __version__

        console.print(f"[bold cyan]Content X-Ray[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit(0)

    ctx.ensure_object(dict)
    ctx.obj["config"] = config

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


# Import subcommands to register them
from .graph import graph as _graph  # noqa: F401, E402
from .scan import scan as _scan  # noqa: F401, E402


def main() -> None:
    app()
