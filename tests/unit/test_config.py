"""Tests for settings loading: defaults, TOML, overrides, env vars."""

from decimal import Decimal

import pytest

from order_report.core.config import Settings, load_settings
from order_report.core.errors import ConfigError


class TestDefaults:
    def test_defaults(self):
        settings = load_settings()
        assert settings.aggregation.max_workers is None
        assert settings.aggregation.price_tolerance == Decimal("0.001")
        assert settings.report.details_path == "order_details.txt"
        assert settings.report.summary_path == "order_summary.txt"
        assert settings.report.product_column_width == 20
        assert settings.report.echo is True
        assert settings.observability.log_format == "console"

    def test_missing_file_is_ignored(self, tmp_path):
        settings = load_settings(config_path=tmp_path / "nope.toml")
        assert isinstance(settings, Settings)


class TestTomlFile:
    def test_values_from_file(self, tmp_path):
        path = tmp_path / "report.toml"
        path.write_text(
            "[aggregation]\nmax_workers = 3\nprice_tolerance = \"0.01\"\n"
            "[report]\nsummary_path = \"out/summary.txt\"\n"
        )
        settings = load_settings(config_path=path)
        assert settings.aggregation.max_workers == 3
        assert settings.aggregation.price_tolerance == Decimal("0.01")
        assert settings.report.summary_path == "out/summary.txt"
        assert settings.report.details_path == "order_details.txt"

    def test_overrides_merge_into_file_sections(self, tmp_path):
        path = tmp_path / "report.toml"
        path.write_text("[report]\nsummary_path = \"s.txt\"\n")
        settings = load_settings(
            config_path=path, overrides={"report": {"details_path": "d.txt"}}
        )
        assert settings.report.summary_path == "s.txt"
        assert settings.report.details_path == "d.txt"

    def test_invalid_toml(self, tmp_path):
        path = tmp_path / "broken.toml"
        path.write_text("[report\n")
        with pytest.raises(ConfigError, match="Invalid config file"):
            load_settings(config_path=path)

    def test_invalid_value(self):
        with pytest.raises(ConfigError):
            load_settings(overrides={"aggregation": {"max_workers": 0}})

    def test_unknown_log_format(self):
        with pytest.raises(ConfigError):
            load_settings(overrides={"observability": {"log_format": "xml"}})


class TestEnvironment:
    def test_nested_env_override(self, monkeypatch):
        monkeypatch.setenv("ORDER_REPORT_AGGREGATION__MAX_WORKERS", "5")
        monkeypatch.setenv("ORDER_REPORT_REPORT__ECHO", "false")
        settings = load_settings()
        assert settings.aggregation.max_workers == 5
        assert settings.report.echo is False

    def test_file_values_win_over_env(self, tmp_path, monkeypatch):
        path = tmp_path / "c.toml"
        path.write_text('[report]\nsummary_path = "from_file.txt"\n')
        monkeypatch.setenv("ORDER_REPORT_REPORT__SUMMARY_PATH", "from_env.txt")
        monkeypatch.setenv("ORDER_REPORT_REPORT__ECHO", "false")
        settings = load_settings(path)
        assert settings.report.summary_path == "from_file.txt"
        assert settings.report.echo is False

    def test_overrides_win_over_env(self, monkeypatch):
        monkeypatch.setenv("ORDER_REPORT_AGGREGATION__MAX_WORKERS", "5")
        settings = load_settings(overrides={"aggregation": {"max_workers": 2}})
        assert settings.aggregation.max_workers == 2
