"""Entry point for the health check runner."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from hcrunner import __version__
from hcrunner.config import Settings, load_settings
from hcrunner.errors import ConfigurationError, RunnerError
from hcrunner.health.scheduler import RunConfig, Scheduler
from hcrunner.probes.base import CATEGORY_ALIASES, Category, describe
from hcrunner.probes.registry import ProbeRegistry
from hcrunner.report.base import ReportConfig, ReportFormat
from hcrunner.report.summary import SummaryRenderer
from hcrunner.report.writer import write_report

console = Console()


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )


def _settings_from_args(args: argparse.Namespace) -> Settings:
    overrides: dict[str, Any] = {
        "probe_providers": args.probes or None,
        "categories": args.category or None,
        "parallel": True if args.parallel else None,
        "timeout": args.timeout,
        "fail_fast": True if args.fail_fast else None,
        "report_format": args.format,
        "output_dir": args.output_dir,
        "report_filename": args.filename,
        "report_title": args.title,
        "include_timestamp": False if args.no_timestamp else None,
        "progress": False if args.no_progress else None,
        "verbose": True if args.verbose else None,
        "color": False if args.no_color else None,
    }
    return load_settings(args.config, **overrides)


def _load_registry(settings: Settings) -> ProbeRegistry:
    if not settings.probe_providers:
        raise ConfigurationError("No probe providers configured (use --probes module:attr)")
    return ProbeRegistry.from_providers(settings.probe_providers).freeze()


def run_checks(args: argparse.Namespace) -> int:
    """Run the configured probes and write one report."""
    settings = _settings_from_args(args)
    _configure_logging(settings.log_level)

    registry = _load_registry(settings)
    run_config = RunConfig.from_settings(settings)
    report_config = ReportConfig.from_settings(settings)

    mode = "parallel" if run_config.parallel else "sequential"
    console.print(Panel(
        f"{len(registry)} probes registered · {mode} · format: {report_config.format.value}",
        title=settings.report_title,
        style="bold blue",
    ))

    scheduler = Scheduler(run_config, console=Console(stderr=True))
    try:
        run = scheduler.run(registry)
    except KeyboardInterrupt:
        scheduler.cancel()
        console.print("[bold red]Interrupted[/bold red]")
        return 130

    path = write_report(run, report_config)

    summary = SummaryRenderer(ReportConfig(
        format=ReportFormat.SUMMARY, title=settings.report_title, color=settings.color,
    ))
    console.print(Text.from_ansi(summary.render(run)))
    console.print(f"[bold green]Report written:[/bold green] {path}")
    console.print(f"[dim]{len(run.outcomes)} executed, {len(run.skipped())} skipped in {run.duration:.2f}s[/dim]")
    return 0


def list_categories(args: argparse.Namespace) -> int:
    table = Table(title="Categories")
    table.add_column("Category", style="bold")
    table.add_column("Aliases")
    for category in Category:
        aliases = sorted(a for a, c in CATEGORY_ALIASES.items() if c is category)
        table.add_row(category.value, ", ".join(aliases) or "-")
    console.print(table)
    return 0


def list_probes(args: argparse.Namespace) -> int:
    settings = load_settings(args.config, probe_providers=args.probes or None)
    _configure_logging(settings.log_level)
    registry = _load_registry(settings)

    table = Table(title=f"Registered probes ({len(registry)})")
    table.add_column("ID", style="bold")
    table.add_column("Name")
    table.add_column("Category")
    table.add_column("Description", overflow="fold")
    for p in registry:
        d = describe(p)
        table.add_row(d["id"], d["name"], d["category"], d["description"])
    console.print(table)
    return 0


def _add_source_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--probes", action="append", metavar="MODULE:ATTR",
                   help="Probe provider to load (repeatable)")
    p.add_argument("--config", type=Path, help="YAML settings file")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="hcrunner", description="Cluster health check runner")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command")

    run_p = sub.add_parser("run", help="Run probes and write a report")
    _add_source_args(run_p)
    run_p.add_argument("--category", action="append", help="Only run this category (repeatable)")
    run_p.add_argument("--parallel", action="store_true", help="Run probes concurrently")
    run_p.add_argument("--timeout", type=float, help="Per-probe timeout in seconds (0 = none)")
    run_p.add_argument("--fail-fast", action="store_true", help="Stop after the first failing probe (sequential only)")
    run_p.add_argument("--format", choices=[f.value for f in ReportFormat], help="Report format")
    run_p.add_argument("--output-dir", help="Directory for the report file")
    run_p.add_argument("--filename", help="Report file name")
    run_p.add_argument("--title", help="Report title")
    run_p.add_argument("--no-timestamp", action="store_true", help="Do not add a timestamp to the filename")
    run_p.add_argument("--no-progress", action="store_true", help="Disable the progress bar")
    run_p.add_argument("--no-color", action="store_true", help="Disable coloured terminal output")
    run_p.add_argument("-v", "--verbose", action="store_true", help="Log every probe outcome")
    run_p.set_defaults(func=run_checks)

    cat_p = sub.add_parser("categories", help="List probe categories and aliases")
    cat_p.set_defaults(func=list_categories)

    probes_p = sub.add_parser("probes", help="List probes from the configured providers")
    _add_source_args(probes_p)
    probes_p.set_defaults(func=list_probes)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not getattr(args, "func", None):
        parser.print_help()
        sys.exit(1)

    try:
        code = args.func(args)
    except RunnerError as e:
        console.print(Text.assemble(("Error: ", "bold red"), str(e)))
        sys.exit(1)
    sys.exit(code)


if __name__ == "__main__":
    main()
