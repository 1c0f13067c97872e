"""Shared CLI helpers."""

import asyncio
from pathlib import Path
from typing import Any, Optional

from rich.console import Console

from ..config import XRaySettings, load_settings
from ..scanning.models import ScanResult
from ..service import XRayService
from ..source.memory import InMemoryContentSource

console = Console()


def resolve_settings(config: Optional[Path] = None, **scan_options: Any) -> XRaySettings:
    """Build settings from CLI options (unset options are left to the config layers)."""
    overrides = {k: v for k, v in scan_options.items() if v is not None}
    return load_settings(config_file=config, **overrides)


def load_source(source_json: Path) -> InMemoryContentSource:
    return InMemoryContentSource.from_json_file(source_json)


def run_scan_to_completion(service: XRayService, source_name: str) -> ScanResult:
    """Start a scan through the service and block until it finishes."""

    async def _run() -> ScanResult:
        started = await service.start_scan(source_name)
        return await service.wait_for_scan(started["scan_id"])

    return asyncio.run(_run())
