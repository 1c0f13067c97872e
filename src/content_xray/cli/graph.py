"""Graph CLI command -- print the knowledge graph of a content export."""

from pathlib import Path
from typing import Optional

import typer

from ..exceptions import ContentXrayError
from ..logging_config import setup_logging
from ..scanning.models import ScanStatus
from ..serializers import dumps
from ..service import XRayService
from . import app
from ._common import console, load_source, resolve_settings, run_scan_to_completion


@app.command()
def graph(
    ctx: typer.Context,
    source_json: Path = typer.Argument(
        ...,
        help="Content export (JSON) to scan",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    center: Optional[str] = typer.Option(None, "--center", help="Center the graph on this entity id"),
    max_nodes: Optional[int] = typer.Option(None, "--max-nodes", help="Node budget", min=1),
    types: Optional[str] = typer.Option(
        None,
        "--types",
        help="Comma-separated node types: item,template,media,rendering,placeholder",
    ),
    tier: Optional[int] = typer.Option(None, "--tier", "-t", help="Scan tier (1-3)", min=1, max=3),
    delay: Optional[int] = typer.Option(None, "--delay", help="Pause between requests (ms)", min=0),
):
    """
    Scan a content export and print its knowledge graph as JSON.

    [bold cyan]Examples:[/bold cyan]

      content-xray graph export.json --tier 2

      content-xray graph export.json --center "{1F2E...}" --max-nodes 200
    """
    setup_logging()
    node_types = [t.strip() for t in types.split(",") if t.strip()] if types else None

    try:
        settings = resolve_settings(
            ctx.obj.get("config") if ctx.obj else None,
            tier=tier,
            request_delay_ms=delay,
        )
        source = load_source(source_json)
        service = XRayService([source], settings)
        result = run_scan_to_completion(service, source.name)
        if result.status is not ScanStatus.COMPLETE:
            console.print("[red]Scan failed.[/red]")
            raise typer.Exit(1)
        knowledge_graph = service.get_graph(
            result.scan_id,
            node_types=node_types,
            max_nodes=max_nodes,
            center_on=center,
        )
    except ContentXrayError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    print(dumps(knowledge_graph))
