"""
Logging configuration for Content X-Ray.

Terminal output goes through rich on stderr so ``--json`` output on stdout
stays parseable. Scan code logs through ``ScanLogAdapter`` so every record
names the scan and the phase it was in.
"""

import logging
from typing import Callable, Optional

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "content_xray"


def setup_logging(verbose: bool = False) -> logging.Logger:
    """
    Install a rich handler on the content_xray logger tree.

    Args:
        verbose: Log at DEBUG and show source locations; WARNING otherwise

    Returns:
        The root content_xray logger
    """
    level = logging.DEBUG if verbose else logging.WARNING

    handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        tracebacks_show_locals=verbose,
        markup=False,
        show_path=verbose,
    )
    logging.basicConfig(level=level, format="%(message)s", datefmt="[%X]", handlers=[handler])

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Logger under the content_xray namespace ('scanning' -> 'content_xray.scanning')."""
    if name is None:
        return logging.getLogger(ROOT_LOGGER)
    if not name.startswith(ROOT_LOGGER):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


class ScanLogAdapter(logging.LoggerAdapter):
    """Tags records with a scan id and the scan's current phase.

    The phase is read each time a record is emitted, so one adapter follows
    the scan from phase to phase. Both values are also set as ``scan_id`` and
    ``scan_phase`` record attributes for handlers that filter on them.
    """

    def __init__(self, logger: logging.Logger, scan_id: str, phase: Callable[[], str]) -> None:
        super().__init__(logger, {"scan_id": scan_id})
        self.scan_id = scan_id
        self._phase = phase

    def process(self, msg, kwargs):
        phase = self._phase()
        kwargs["extra"] = {**kwargs.get("extra", {}), "scan_id": self.scan_id, "scan_phase": phase}
        return f"[{self.scan_id} {phase}] {msg}", kwargs
