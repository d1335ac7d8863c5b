"""Tests for the command-line entry point."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from hcrunner.main import build_parser, main


def _run(argv: list[str]) -> int:
    with pytest.raises(SystemExit) as exc:
        main(argv)
    return exc.value.code


class TestParser:
    def test_run_flags(self) -> None:
        args = build_parser().parse_args([
            "run", "--probes", "a:b", "--probes", "c:d", "--category", "Security",
            "--parallel", "--timeout", "2.5", "--format", "json", "--no-timestamp",
        ])
        assert args.probes == ["a:b", "c:d"]
        assert args.category == ["Security"]
        assert args.parallel
        assert args.timeout == 2.5
        assert args.format == "json"
        assert args.no_timestamp

    def test_bad_format(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["run", "--format", "pdf"])


class TestRunCommand:
    def test_writes_json_report(self, tmp_path: Path) -> None:
        code = _run([
            "run", "--probes", "sample_probes:all_probes", "--format", "json",
            "--output-dir", str(tmp_path), "--filename", "out", "--no-timestamp", "--no-progress",
        ])
        assert code == 0
        data = json.loads((tmp_path / "out.json").read_text())
        assert data["summary"]["executed"] == 3
        assert {r["probe_id"] for r in data["results"]} == {"etcd-backup", "default-ingress-cert", "node-count"}

    def test_category_filter(self, tmp_path: Path) -> None:
        code = _run([
            "run", "--probes", "sample_probes:all_probes", "--category", "Security",
            "--format", "json", "--output-dir", str(tmp_path), "--filename", "out",
            "--no-timestamp", "--no-progress",
        ])
        assert code == 0
        data = json.loads((tmp_path / "out.json").read_text())
        assert [r["probe_id"] for r in data["results"]] == ["etcd-backup"]

    def test_asciidoc_default(self, tmp_path: Path) -> None:
        code = _run([
            "run", "--probes", "sample_probes:PROBES", "--output-dir", str(tmp_path),
            "--no-progress", "--no-color",
        ])
        assert code == 0
        reports = list(tmp_path.glob("health-check-report-*.adoc"))
        assert len(reports) == 1

    def test_no_providers(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        code = _run(["run", "--output-dir", str(tmp_path)])
        assert code == 1
        assert "No probe providers configured" in capsys.readouterr().out

    def test_bad_provider(self, tmp_path: Path) -> None:
        assert _run(["run", "--probes", "sample_probes:missing", "--output-dir", str(tmp_path)]) == 1

    def test_interrupt_exits_130(self, tmp_path: Path) -> None:
        with patch("hcrunner.main.Scheduler.run", side_effect=KeyboardInterrupt):
            code = _run([
                "run", "--probes", "sample_probes:PROBES", "--output-dir", str(tmp_path), "--no-progress",
            ])
        assert code == 130
        assert not list(tmp_path.iterdir())

    @pytest.mark.parametrize("provider", [
        "faulty_probes:raises",
        "faulty_probes:bad_category",
        "broken_import_probes:db_backup",
    ])
    def test_failing_provider_exits_cleanly(
        self, provider: str, tmp_path: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        assert _run(["run", "--probes", provider, "--output-dir", str(tmp_path), "--no-progress"]) == 1
        assert "Error:" in capsys.readouterr().out

    def test_unknown_category(self, tmp_path: Path) -> None:
        code = _run([
            "run", "--probes", "sample_probes:PROBES", "--category", "Databases",
            "--output-dir", str(tmp_path), "--no-progress",
        ])
        assert code == 1

    def test_config_file(self, tmp_path: Path) -> None:
        cfg = tmp_path / "hcr.yaml"
        cfg.write_text(
            "probe_providers: [sample_probes:PROBES]\n"
            f"output_dir: {tmp_path}\n"
            "report_format: summary\n"
            "report_filename: summary\n"
            "include_timestamp: false\n"
            "progress: false\n"
            "color: false\n"
        )
        assert _run(["run", "--config", str(cfg)]) == 0
        text = (tmp_path / "summary.txt").read_text()
        assert "[Warning] Default Ingress Certificate" in text


class TestListings:
    def test_categories(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert _run(["categories"]) == 0
        out = capsys.readouterr().out
        assert "Cluster Config" in out
        assert "Op-Ready" in out

    def test_probes(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert _run(["probes", "--probes", "sample_probes:all_probes"]) == 0
        assert "Registered probes (3)" in capsys.readouterr().out

    def test_no_command(self) -> None:
        assert _run([]) == 1
