"""Plain-text summary: counts by status, then only the probes that need attention."""

from __future__ import annotations

import io

from rich.console import Console
from rich.text import Text

from hcrunner.health.results import RunResult

from .base import STATUS_ORDER, STATUS_STYLES, Renderer, ReportFormat


class SummaryRenderer(Renderer):
    format = ReportFormat.SUMMARY
    extension = ".txt"

    def render(self, run: RunResult) -> str:
        buf = io.StringIO()
        color = self.config.color
        console = Console(
            file=buf,
            force_terminal=color,
            color_system="standard" if color else None,
            no_color=not color,
            markup=False,
            highlight=False,
            emoji=False,
            width=200,
        )

        def line(text: Text | str = "") -> None:
            console.print(text, soft_wrap=True)

        title = self.config.title
        line(title)
        line("=" * len(title))
        line()
        line("Summary:")

        counts = run.counts_by_status()
        for status in STATUS_ORDER:
            line(Text.assemble("- ", (status.value, STATUS_STYLES[status]), f": {counts[status]}"))
        skipped = run.skipped()
        if skipped:
            line(f"- Skipped: {len(skipped)}")
        line(f"Health score: {run.health_score():.2f}%")
        line()

        issues = run.issues()
        for info, outcome in issues:
            line(Text.assemble(
                "[", (outcome.status.value, STATUS_STYLES[outcome.status]), "] ",
                f"{info.name}: {outcome.message}",
            ))
            if outcome.recommendations:
                line("  Recommendations:")
                for rec in outcome.recommendations:
                    line(f"  - {rec}")
            line()

        if not issues:
            line("No issues found.")

        if skipped:
            if not issues:
                line()
            line("Skipped (not executed):")
            for info in skipped:
                line(f"  - {info.name}")

        return buf.getvalue()
