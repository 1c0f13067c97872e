"""Scan CLI command -- crawl an exported content tree and report on it."""

from pathlib import Path
from typing import Optional

import typer
from rich.markdown import Markdown
from rich.table import Table

from ..exceptions import ContentXrayError
from ..logging_config import setup_logging
from ..reports.summary import generate_summary
from ..scanning.models import ScanStatus
from ..serializers import dumps
from ..service import XRayService
from . import app
from ._common import console, load_source, resolve_settings, run_scan_to_completion

_SEVERITY_STYLE = {"critical": "red", "warning": "yellow", "info": "blue"}


@app.command()
def scan(
    ctx: typer.Context,
    source_json: Path = typer.Argument(
        ...,
        help="Content export (JSON) to scan",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    root: Optional[str] = typer.Option(None, "--root", help="Path to start the crawl from"),
    tier: Optional[int] = typer.Option(
        None, "--tier", "-t", help="1 = index only, 2 = deep scan pages, 3 = deep scan all", min=1, max=3
    ),
    max_items: Optional[int] = typer.Option(None, "--max-items", help="Stop indexing after N items", min=1),
    max_depth: Optional[int] = typer.Option(None, "--max-depth", help="Depth limit (-1 = unlimited)"),
    delay: Optional[int] = typer.Option(None, "--delay", help="Pause between requests (ms)", min=0),
    json_output: bool = typer.Option(False, "--json", help="Output the report as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show scan progress logs"),
):
    """
    Scan a content export and print a health report.

    [bold cyan]Examples:[/bold cyan]

      content-xray scan export.json

      content-xray scan export.json --tier 2 --json

      content-xray scan export.json --root /content/site --max-items 5000
    """
    setup_logging(verbose=verbose)

    try:
        settings = resolve_settings(
            ctx.obj.get("config") if ctx.obj else None,
            root_path=root,
            tier=tier,
            max_items=max_items,
            max_depth=max_depth,
            request_delay_ms=delay,
        )
        source = load_source(source_json)
        service = XRayService([source], settings)
        result = run_scan_to_completion(service, source.name)
    except ContentXrayError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if result.status is not ScanStatus.COMPLETE:
        last = result.progress.errors[-1].message if result.progress.errors else "unknown error"
        console.print(f"[red]Scan failed:[/red] {last}")
        raise typer.Exit(1)

    report = service.get_report(result.scan_id)

    if json_output:
        print(dumps(report))
        return

    console.print(Markdown(generate_summary(report)))

    if result.progress.truncated:
        console.print(
            f"[yellow]Scan truncated at {settings.scan.max_items} items.[/yellow] "
            "Raise --max-items or narrow --root."
        )
    if result.aborted:
        console.print("[yellow]Scan was aborted; results are partial.[/yellow]")

    if report.issues:
        console.print()
        table = Table(show_header=True, show_lines=False, pad_edge=True)
        table.add_column("Severity")
        table.add_column("Category")
        table.add_column("Issue", min_width=30)
        table.add_column("Path")
        for issue in report.issues[:20]:
            style = _SEVERITY_STYLE[issue.severity.value]
            table.add_row(
                f"[{style}]{issue.severity.value}[/{style}]",
                issue.category.value,
                issue.title,
                issue.item_path or "",
            )
        console.print(table)
        if len(report.issues) > 20:
            console.print(f"[dim]... and {len(report.issues) - 20} more (use --json)[/dim]")
