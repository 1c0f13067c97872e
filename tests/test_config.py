"""Tests for configuration loading, merging and validation."""

import os

import pytest

from content_xray.config import (
    ScanConfig,
    ThresholdConfig,
    XRaySettings,
    load_settings,
    scan_config_with,
)
from content_xray.exceptions import ContentXrayError, InvalidConfigError


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    """No global/project config files and no XRAY_* variables leak in."""
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.startswith("XRAY_"):
            monkeypatch.delenv(key)
    return tmp_path


class TestDefaults:
    def test_scan_defaults(self):
        config = ScanConfig()
        assert config.root_path == "/content"
        assert config.max_depth == -1
        assert config.languages == ("en",)
        assert config.language == "en"
        assert config.database == "master"
        assert config.request_delay_ms == 50
        assert config.request_delay_seconds == 0.05
        assert config.max_items == 50000
        assert config.tier == 1

    def test_threshold_defaults(self):
        thresholds = ThresholdConfig()
        assert thresholds.nesting_warning_depth == 10
        assert thresholds.nesting_critical_depth == 15
        assert thresholds.stale_info_days == 365
        assert thresholds.stale_warning_days == 730

    def test_load_without_files(self):
        settings = load_settings()
        assert settings == XRaySettings()


class TestValidation:
    @pytest.mark.parametrize(
        "kwargs",
        [
            {"root_path": ""},
            {"max_depth": 0},
            {"languages": ()},
            {"database": "core"},
            {"request_delay_ms": -1},
            {"max_items": 0},
            {"tier": 4},
        ],
    )
    def test_bad_scan_values(self, kwargs):
        with pytest.raises(InvalidConfigError):
            ScanConfig(**kwargs)

    def test_languages_list_stored_as_tuple(self):
        assert ScanConfig(languages=["en", "de"]).languages == ("en", "de")

    def test_warning_above_critical_rejected(self):
        with pytest.raises(InvalidConfigError) as exc_info:
            ThresholdConfig(nesting_warning_depth=20, nesting_critical_depth=15)
        assert exc_info.value.key == "nesting_warning_depth"

    def test_graph_limits(self):
        with pytest.raises(InvalidConfigError):
            XRaySettings(graph_max_nodes=0)


class TestMerging:
    def test_project_config(self, isolated):
        (isolated / "content-xray.toml").write_text(
            'tier = 2\ngraph_max_nodes = 50\n\n[thresholds]\nstale_info_days = 30\n'
        )
        settings = load_settings()
        assert settings.scan.tier == 2
        assert settings.graph_max_nodes == 50
        assert settings.thresholds.stale_info_days == 30

    def test_explicit_file_over_project(self, isolated):
        (isolated / "content-xray.toml").write_text("max_items = 10\n")
        explicit = isolated / "explicit.toml"
        explicit.write_text("[scan]\nmax_items = 20\n")
        assert load_settings(explicit).scan.max_items == 20

    def test_env_over_files(self, isolated, monkeypatch):
        (isolated / "content-xray.toml").write_text("max_items = 10\n")
        monkeypatch.setenv("XRAY_MAX_ITEMS", "30")
        monkeypatch.setenv("XRAY_LANGUAGES", "en, de")
        monkeypatch.setenv("XRAY_PARALLEL_DETECTORS", "yes")
        settings = load_settings()
        assert settings.scan.max_items == 30
        assert settings.scan.languages == ("en", "de")
        assert settings.parallel_detectors is True

    def test_overrides_win(self, monkeypatch):
        monkeypatch.setenv("XRAY_TIER", "2")
        assert load_settings(tier=3).scan.tier == 3

    def test_bad_env_value(self, monkeypatch):
        monkeypatch.setenv("XRAY_PARALLEL_DETECTORS", "maybe")
        with pytest.raises(ContentXrayError, match="XRAY_PARALLEL_DETECTORS"):
            load_settings()

    def test_missing_explicit_file(self, isolated):
        with pytest.raises(ContentXrayError, match="not found"):
            load_settings(isolated / "missing.toml")

    def test_invalid_toml(self, isolated):
        broken = isolated / "broken.toml"
        broken.write_text("tier = = 2\n")
        with pytest.raises(ContentXrayError):
            load_settings(broken)

    def test_unknown_key(self, isolated):
        (isolated / "content-xray.toml").write_text("colour = 'blue'\n")
        with pytest.raises(ContentXrayError, match="Invalid configuration"):
            load_settings()


class TestScanConfigWith:
    def test_none_values_ignored(self):
        base = ScanConfig()
        assert scan_config_with(base, tier=None, max_items=None) is base

    def test_replaces_given_fields(self):
        config = scan_config_with(ScanConfig(), tier=2, root_path="/content/site")
        assert (config.tier, config.root_path) == (2, "/content/site")

    def test_unknown_option(self):
        with pytest.raises(ContentXrayError, match="Unknown scan options"):
            scan_config_with(ScanConfig(), colour="blue")

    def test_replacement_is_validated(self):
        with pytest.raises(InvalidConfigError):
            scan_config_with(ScanConfig(), tier=9)
