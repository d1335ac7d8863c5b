"""AsciiDoc compliance report.

Layout: title, disposition key, status counts, one summary table over all
probes, one scoped table per category, then a detailed section per probe.
Cell colours use the ``{set:cellbgcolor:...}`` attribute understood by the
PDF toolchain the reports are fed into.
"""

from __future__ import annotations

from hcrunner.health.results import RunResult

from .base import (
    DISPOSITIONS,
    NO_RECOMMENDATIONS,
    STATUS_COLORS,
    STATUS_ORDER,
    DispositionStyle,
    Renderer,
    ReportFormat,
    ReportRow,
    build_sections,
    code_language,
    is_asciidoc,
)

_GITHUB_ATTRIBUTES = (
    "ifdef::env-github[]\n"
    ":tip-caption: :bulb:\n"
    ":note-caption: :information_source:\n"
    ":important-caption: :heavy_exclamation_mark:\n"
    ":caution-caption: :fire:\n"
    ":warning-caption: :warning:\n"
    "endif::[]\n\n"
)

_TABLE_HEADER = (
    '[cols="1,2,2,3", options=header]\n|===\n'
    "|*Category*\n|*Item Evaluated*\n|*Observed Result*\n|*Recommendation*\n\n"
)

_RESET = "{set:cellbgcolor!}"


def _cell(text: str) -> str:
    """Escape table cell separators inside free text."""
    return text.replace("|", "\\|")


def _badge(style: DispositionStyle) -> str:
    return f'[cols="^"]\n|===\n|\n{{set:cellbgcolor:{style.color}}}\n{style.label}\n|===\n\n{_RESET}\n\n'


class AsciiDocRenderer(Renderer):
    format = ReportFormat.ASCIIDOC
    extension = ".adoc"

    def render(self, run: RunResult) -> str:
        out: list[str] = [f"= {self.config.title}\n\n", _GITHUB_ATTRIBUTES]
        out.append(self._key())
        out.append(self._status_counts(run))

        sections = build_sections(run)
        ordered = [r for _, cat_rows in sections for r in cat_rows]

        out.append("== Summary\n\n")
        out.append(self._table(ordered))

        if self.config.group_by_category:
            for category, cat_rows in sections:
                out.append(f"== {category.value}\n\n")
                out.append(self._table(cat_rows))

        if self.config.include_details:
            out.append("== Detailed Results\n\n")
            for row in ordered:
                out.append(self._detail(row))

        out.append(f"// Reset bgcolor for future tables\n[grid=none,frame=none]\n|===\n|{_RESET}\n|===\n")
        return "".join(out)

    # ── Sections ─────────────────────────────────────────────────────────────

    def _key(self) -> str:
        parts = ["== Key\n\n", '[cols="1,3", options=header]\n|===\n|Value\n|Description\n\n']
        for style in DISPOSITIONS.values():
            parts.append(
                f"|\n{{set:cellbgcolor:{style.color}}}\n{style.key_label}\n"
                f"|\n{_RESET}\n{style.legend}\n\n"
            )
        parts.append("|===\n\n")
        return "".join(parts)

    def _status_counts(self, run: RunResult) -> str:
        counts = run.counts_by_status()
        parts = ["== Status Overview\n\n", '[cols="1,1", options=header]\n|===\n|Status\n|Count\n\n']
        for status in STATUS_ORDER:
            parts.append(
                f"|{{set:cellbgcolor:{STATUS_COLORS[status]}}}\n{status.value}\n"
                f"|{_RESET}\n{counts[status]}\n\n"
            )
        skipped = len(run.skipped())
        if skipped:
            parts.append(f"|{_RESET}\nSkipped\n|{skipped}\n\n")
        parts.append(f"|===\n\n{_RESET}\n\n")
        return "".join(parts)

    def _table(self, rows: list[ReportRow]) -> str:
        parts = [_TABLE_HEADER]
        for row in rows:
            parts.append(
                f"// ---- {row.info.id}\n"
                f"|\n{_RESET}\n{row.info.category.value}\n\n"
                f"a|\n<<{row.anchor},{_cell(row.info.name)}>>\n\n"
                f"| {_cell(row.message)}\n\n"
                f"|{{set:cellbgcolor:{row.style.color}}}\n{row.style.label}\n\n"
            )
        parts.append(f"|===\n\n<<<\n\n{_RESET}\n\n")
        return "".join(parts)

    def _detail(self, row: ReportRow) -> str:
        parts = [f"[[{row.anchor}]]\n=== {row.info.name}\n\n", _badge(row.style)]

        if row.info.description:
            parts.append(f"_{row.info.description}_\n\n")

        if row.outcome is None:
            parts.append("**Observation**\n\nThis probe was not executed in this run.\n\n")
            return "".join(parts)

        outcome = row.outcome
        parts.append(f"*Status:* {outcome.status.value} +\n*Duration:* {outcome.duration:.2f}s\n\n")

        if outcome.detail:
            if is_asciidoc(outcome.detail):
                parts.append(outcome.detail.rstrip("\n") + "\n\n")
            else:
                lang = code_language(outcome.detail)
                parts.append(f"[source, {lang}]\n----\n{outcome.detail.rstrip()}\n----\n\n")

        if outcome.metadata:
            parts.append("".join(f"{k}:: {v}\n" for k, v in outcome.metadata.items()) + "\n")

        parts.append(f"**Observation**\n\n{outcome.message}\n\n")

        parts.append("**Recommendation**\n\n")
        if outcome.recommendations:
            parts.append("".join(f"* {rec}\n" for rec in outcome.recommendations) + "\n")
        else:
            parts.append(f"{NO_RECOMMENDATIONS}\n\n")

        parts.append("*Reference Link(s)*\n\n")
        links = self.references(row)
        if links:
            parts.append("".join(f"* {link}\n" for link in links) + "\n")
        else:
            parts.append(f"{NO_RECOMMENDATIONS}\n\n")
        return "".join(parts)
