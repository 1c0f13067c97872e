"""Configuration loading and management for Content X-Ray.

Configuration sources are merged in priority order:
    1. Defaults (defined in the dataclasses below)
    2. Global config (~/.content-xray.toml)
    3. Project config (./content-xray.toml)
    4. Explicit config file
    5. Environment variables (XRAY_* prefix)
    6. Keyword overrides

Example:
    >>> settings = load_settings(max_items=500, tier=2)
    >>> settings.scan.max_items
    500
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import ContentXrayError, InvalidConfigError

Database = Literal["master", "web"]

MB = 1024 * 1024


@dataclass(frozen=True)
class ScanConfig:
    """Parameters of a single scan.

    Attributes:
        root_path: Path the breadth-first crawl starts from
        max_depth: Maximum depth below root_path (-1 = unlimited)
        include_templates: Run the template pass
        include_media: Run the media pass
        include_renderings: Run the rendering pass
        languages: Languages to scan; the first one is used for fetches
        database: Content database to read (master/web)
        request_delay_ms: Pause after every request to the content source
        max_items: Index size at which the crawl stops (scan is truncated)
        tier: 1 = index only, 2 = index + deep scan of page-like items,
            3 = index + deep scan of every item in the subtree
        page_size: Page size for paged listings
        deep_scan_limit: Maximum number of deep-scanned items
    """

    root_path: str = "/content"
    max_depth: int = -1
    include_templates: bool = True
    include_media: bool = True
    include_renderings: bool = True
    languages: tuple[str, ...] = ("en",)
    database: Database = "master"
    request_delay_ms: int = 50
    max_items: int = 50000
    tier: int = 1
    page_size: int = 100
    deep_scan_limit: int = 1000

    def __post_init__(self) -> None:
        # Lists arrive from TOML and callers; store them immutably
        if not isinstance(self.languages, tuple):
            object.__setattr__(self, "languages", tuple(self.languages))

        if not self.root_path:
            raise InvalidConfigError("root_path", self.root_path, "must not be empty")
        if self.max_depth != -1 and self.max_depth < 1:
            raise InvalidConfigError("max_depth", self.max_depth, "must be -1 or at least 1")
        if not self.languages:
            raise InvalidConfigError("languages", self.languages, "at least one language required")
        if self.database not in ("master", "web"):
            raise InvalidConfigError("database", self.database, "expected 'master' or 'web'")
        if self.request_delay_ms < 0:
            raise InvalidConfigError("request_delay_ms", self.request_delay_ms, "must be non-negative")
        if self.max_items < 1:
            raise InvalidConfigError("max_items", self.max_items, "must be at least 1")
        if self.tier not in (1, 2, 3):
            raise InvalidConfigError("tier", self.tier, "expected 1, 2 or 3")
        if self.page_size < 1:
            raise InvalidConfigError("page_size", self.page_size, "must be at least 1")
        if self.deep_scan_limit < 0:
            raise InvalidConfigError("deep_scan_limit", self.deep_scan_limit, "must be non-negative")

    @property
    def language(self) -> str:
        """Primary language used for fetches."""
        return self.languages[0]

    @property
    def request_delay_seconds(self) -> float:
        return self.request_delay_ms / 1000.0


@dataclass(frozen=True)
class ThresholdConfig:
    """Detector thresholds.

    All comparisons are strict: a value equal to a threshold is not flagged.
    """

    nesting_warning_depth: int = 10
    nesting_critical_depth: int = 15

    media_warning_bytes: int = 5 * MB
    media_critical_bytes: int = 20 * MB

    stale_info_days: int = 365
    stale_warning_days: int = 730

    def __post_init__(self) -> None:
        if not 0 < self.nesting_warning_depth <= self.nesting_critical_depth:
            raise InvalidConfigError(
                "nesting_warning_depth",
                self.nesting_warning_depth,
                "must be positive and not above nesting_critical_depth",
            )
        if not 0 < self.media_warning_bytes <= self.media_critical_bytes:
            raise InvalidConfigError(
                "media_warning_bytes",
                self.media_warning_bytes,
                "must be positive and not above media_critical_bytes",
            )
        if not 0 < self.stale_info_days <= self.stale_warning_days:
            raise InvalidConfigError(
                "stale_info_days",
                self.stale_info_days,
                "must be positive and not above stale_warning_days",
            )


DEFAULT_THRESHOLDS = ThresholdConfig()


@dataclass(frozen=True)
class XRaySettings:
    """Top-level settings: scan defaults, detector thresholds, graph limits."""

    scan: ScanConfig = field(default_factory=ScanConfig)
    thresholds: ThresholdConfig = field(default_factory=ThresholdConfig)

    graph_max_nodes: int = 1000
    graph_center_depth: int = 3

    parallel_detectors: bool = False
    detector_workers: Optional[int] = None

    def __post_init__(self) -> None:
        if self.graph_max_nodes < 1:
            raise InvalidConfigError("graph_max_nodes", self.graph_max_nodes, "must be at least 1")
        if self.graph_center_depth < 0:
            raise InvalidConfigError(
                "graph_center_depth", self.graph_center_depth, "must be non-negative"
            )
        if self.detector_workers is not None and self.detector_workers < 1:
            raise InvalidConfigError("detector_workers", self.detector_workers, "must be at least 1")


_SCAN_FIELDS = {f.name for f in fields(ScanConfig)}
_SETTINGS_FIELDS = {f.name for f in fields(XRaySettings)} - {"scan", "thresholds"}


def load_settings(config_file: Optional[Path] = None, **overrides: Any) -> XRaySettings:
    """Load settings with auto-discovery and merging.

    Keyword overrides may name either a ``ScanConfig`` field (``tier=2``) or a
    top-level ``XRaySettings`` field (``graph_max_nodes=200``).

    Raises:
        ContentXrayError: If a config file is invalid or missing
        InvalidConfigError: If a merged value fails validation
    """
    merged: dict[str, Any] = {}

    global_config = Path.home() / ".content-xray.toml"
    if global_config.exists():
        _merge(merged, _load_toml_checked(global_config, "global config"))

    project_config = Path.cwd() / "content-xray.toml"
    if project_config.exists():
        _merge(merged, _load_toml_checked(project_config, "project config"))

    if config_file is not None:
        if not config_file.exists():
            raise ContentXrayError(f"Config file not found: {config_file}")
        _merge(merged, _load_toml_checked(config_file, "config file"))

    _merge(merged, _load_env_vars())
    _merge(merged, _split_flat(overrides))

    try:
        scan = ScanConfig(**merged.pop("scan", {}))
        thresholds = ThresholdConfig(**merged.pop("thresholds", {}))
        return XRaySettings(scan=scan, thresholds=thresholds, **merged)
    except TypeError as e:
        # Unknown field in config
        raise ContentXrayError(f"Invalid configuration: {e}")


def scan_config_with(base: ScanConfig, **overrides: Any) -> ScanConfig:
    """Return ``base`` with the given scan fields replaced (None values ignored)."""
    unknown = set(overrides) - _SCAN_FIELDS
    if unknown:
        raise ContentXrayError(f"Unknown scan options: {', '.join(sorted(unknown))}")
    changes = {k: v for k, v in overrides.items() if v is not None}
    return replace(base, **changes) if changes else base


def _split_flat(values: dict[str, Any]) -> dict[str, Any]:
    """Route flat keys to the [scan] table or the top level."""
    result: dict[str, Any] = {}
    for key, value in values.items():
        if key in ("scan", "thresholds") and isinstance(value, dict):
            result[key] = dict(value)
        elif key in _SCAN_FIELDS:
            result.setdefault("scan", {})[key] = value
        else:
            result[key] = value
    return result


def _merge(target: dict[str, Any], source: dict[str, Any]) -> None:
    """Shallow merge with one level of nesting for the [scan]/[thresholds] tables."""
    for key, value in source.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            target[key].update(value)
        elif isinstance(value, dict):
            target[key] = dict(value)
        else:
            target[key] = value


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from XRAY_* environment variables.

    Scan fields use their own name (``XRAY_MAX_ITEMS``), settings fields too
    (``XRAY_GRAPH_MAX_NODES``). ``XRAY_LANGUAGES`` is comma separated.
    """
    result: dict[str, Any] = {}

    scan_hints = get_type_hints(ScanConfig)
    settings_hints = get_type_hints(XRaySettings)

    for field_name in sorted(_SCAN_FIELDS | _SETTINGS_FIELDS):
        env_key = f"XRAY_{field_name.upper()}"
        env_value = os.environ.get(env_key)
        if env_value is None:
            continue

        type_hint = scan_hints.get(field_name) or settings_hints.get(field_name)
        try:
            parsed = _parse_env_value(env_value, type_hint)
        except ValueError as e:
            raise ContentXrayError(f"Invalid {env_key}: {e}")

        if field_name in _SCAN_FIELDS:
            result.setdefault("scan", {})[field_name] = parsed
        else:
            result[field_name] = parsed

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse an environment variable string to the annotated type.

    Raises:
        ValueError: If value can't be parsed to expected type
    """
    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        non_none = [t for t in args if t is not type(None)]
        if non_none:
            type_hint = non_none[0]

    origin = getattr(type_hint, "__origin__", None)

    if origin is tuple:
        return tuple(part.strip() for part in value.split(",") if part.strip())

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        else:
            raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is float:
        return float(value)

    return value


def _load_toml_checked(path: Path, label: str) -> dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return _split_flat(tomllib.load(f))
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ContentXrayError(f"Invalid {label} '{path}': {e}")
