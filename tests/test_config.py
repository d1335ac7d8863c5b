"""Tests for settings loading."""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from hcrunner.config import Settings, load_settings
from hcrunner.errors import ConfigurationError
from hcrunner.health import RunConfig
from hcrunner.report import ReportConfig, ReportFormat


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "hcr.yaml"
    path.write_text(textwrap.dedent("""\
        probe_providers:
          - sample_probes:PROBES
        categories: [Security, Network]
        parallel: true
        timeout: 30
        report_format: json
        report_title: Acme Prod
        unknown_key: whatever
    """))
    return path


class TestLoadSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("HCR_TIMEOUT", raising=False)
        s = load_settings()
        assert s.timeout == 120.0
        assert s.report_format == "asciidoc"
        assert s.probe_providers == []

    def test_yaml(self, config_file: Path) -> None:
        s = load_settings(config_file)
        assert s.probe_providers == ["sample_probes:PROBES"]
        assert s.categories == ["Security", "Network"]
        assert s.parallel is True
        assert s.timeout == 30.0
        assert s.report_title == "Acme Prod"

    def test_overrides_win(self, config_file: Path) -> None:
        s = load_settings(config_file, timeout=5, report_format=None)
        assert s.timeout == 5.0
        assert s.report_format == "json"

    def test_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HCR_FAIL_FAST", "true")
        assert load_settings().fail_fast is True

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="not found"):
            load_settings(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("categories: [unclosed\n")
        with pytest.raises(ConfigurationError, match="Failed to parse"):
            load_settings(path)

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigurationError, match="mapping"):
            load_settings(path)

    def test_invalid_value(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("timeout: soon\n")
        with pytest.raises(ConfigurationError, match="Invalid configuration"):
            load_settings(path)

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert isinstance(load_settings(path), Settings)


class TestConversions:
    def test_run_config(self, config_file: Path) -> None:
        cfg = RunConfig.from_settings(load_settings(config_file))
        assert cfg.parallel is True
        assert cfg.timeout == 30.0
        assert cfg.categories == ["Security", "Network"]

    def test_report_config(self, config_file: Path) -> None:
        cfg = ReportConfig.from_settings(load_settings(config_file))
        assert cfg.format is ReportFormat.JSON
        assert cfg.title == "Acme Prod"
