"""HTML compliance report. Same structure as the AsciiDoc one, styled with CSS."""

from __future__ import annotations

from html import escape

from hcrunner.health.results import RunResult

from .base import (
    DISPOSITIONS,
    NO_RECOMMENDATIONS,
    SKIPPED_STYLE,
    STATUS_COLORS,
    STATUS_ORDER,
    Renderer,
    ReportFormat,
    ReportRow,
    build_sections,
    code_language,
    is_html,
)


def _css_name(value: str) -> str:
    return value.lower().replace(" ", "-")


def _stylesheet() -> str:
    rules = [
        "body { font-family: Arial, sans-serif; margin: 20px; color: #222; }",
        "h1 { color: #333; }",
        "table { border-collapse: collapse; width: 100%; margin-bottom: 20px; }",
        "th, td { border: 1px solid #ddd; padding: 8px; text-align: left; vertical-align: top; }",
        "th { background-color: #f2f2f2; }",
        "pre { background: #f7f7f7; padding: 8px; overflow-x: auto; }",
        ".badge { display: inline-block; padding: 4px 12px; font-weight: bold; }",
        ".probe { border-top: 1px solid #ccc; padding-top: 10px; }",
    ]
    for status, color in STATUS_COLORS.items():
        rules.append(f".status-{_css_name(status.value)} {{ background-color: {color}; }}")
    for disposition, style in DISPOSITIONS.items():
        rules.append(f".disposition-{disposition.value} {{ background-color: {style.color}; }}")
    rules.append(f".disposition-skipped {{ background-color: {SKIPPED_STYLE.color}; }}")
    return "\n".join(rules)


def _disposition_class(row: ReportRow) -> str:
    if row.outcome is None:
        return "disposition-skipped"
    return f"disposition-{row.outcome.disposition.value}"


def _status_class(row: ReportRow) -> str:
    if row.outcome is None:
        return "disposition-skipped"
    return f"status-{_css_name(row.outcome.status.value)}"


class HTMLRenderer(Renderer):
    format = ReportFormat.HTML
    extension = ".html"

    def render(self, run: RunResult) -> str:
        title = escape(self.config.title)
        sections = build_sections(run)
        ordered = [r for _, rows in sections for r in rows]

        out = [
            "<!DOCTYPE html>\n<html>\n<head>\n<meta charset=\"utf-8\">\n",
            f"<title>{title}</title>\n<style>\n{_stylesheet()}\n</style>\n</head>\n<body>\n",
            f"<h1>{title}</h1>\n",
            self._key(),
            self._status_counts(run),
            "<h2>Summary</h2>\n",
            self._table(ordered),
        ]

        if self.config.group_by_category:
            for category, rows in sections:
                out.append(f"<h2 id=\"category-{_css_name(category.value)}\">{escape(category.value)}</h2>\n")
                out.append(self._table(rows))

        if self.config.include_details:
            out.append("<h2>Detailed Results</h2>\n")
            out.extend(self._detail(row) for row in ordered)

        out.append("</body>\n</html>\n")
        return "".join(out)

    def _key(self) -> str:
        parts = ["<h2>Key</h2>\n<table class=\"key\">\n<tr><th>Value</th><th>Description</th></tr>\n"]
        for disposition, style in DISPOSITIONS.items():
            parts.append(
                f"<tr><td class=\"disposition-{disposition.value}\">{escape(style.key_label)}</td>"
                f"<td>{escape(style.legend)}</td></tr>\n"
            )
        parts.append("</table>\n")
        return "".join(parts)

    def _status_counts(self, run: RunResult) -> str:
        counts = run.counts_by_status()
        parts = ["<h2>Status Overview</h2>\n<table class=\"counts\">\n<tr><th>Status</th><th>Count</th></tr>\n"]
        for status in STATUS_ORDER:
            parts.append(
                f"<tr><td class=\"status-{_css_name(status.value)}\">{status.value}</td>"
                f"<td>{counts[status]}</td></tr>\n"
            )
        skipped = len(run.skipped())
        if skipped:
            parts.append(f"<tr><td class=\"disposition-skipped\">Skipped</td><td>{skipped}</td></tr>\n")
        parts.append("</table>\n")
        return "".join(parts)

    def _table(self, rows: list[ReportRow]) -> str:
        parts = [
            "<table class=\"results\">\n<tr><th>Category</th><th>Item Evaluated</th>"
            "<th>Observed Result</th><th>Status</th><th>Recommendation</th></tr>\n"
        ]
        for row in rows:
            parts.append(
                f"<tr><td>{escape(row.info.category.value)}</td>"
                f"<td><a href=\"#{row.anchor}\">{escape(row.info.name)}</a></td>"
                f"<td>{escape(row.message)}</td>"
                f"<td class=\"{_status_class(row)}\">{escape(row.status_label)}</td>"
                f"<td class=\"{_disposition_class(row)}\">{escape(row.style.label)}</td></tr>\n"
            )
        parts.append("</table>\n")
        return "".join(parts)

    def _detail(self, row: ReportRow) -> str:
        parts = [
            f"<section class=\"probe\" id=\"{row.anchor}\">\n",
            f"<h3>{escape(row.info.name)}</h3>\n",
            f"<div class=\"badge {_disposition_class(row)}\">{escape(row.style.label)}</div>\n",
        ]
        if row.info.description:
            parts.append(f"<p><em>{escape(row.info.description)}</em></p>\n")

        if row.outcome is None:
            parts.append("<h4>Observation</h4>\n<p>This probe was not executed in this run.</p>\n</section>\n")
            return "".join(parts)

        outcome = row.outcome
        parts.append(
            f"<p><strong>Status:</strong> <span class=\"{_status_class(row)}\">{outcome.status.value}</span>"
            f" &middot; <strong>Duration:</strong> {outcome.duration:.2f}s</p>\n"
        )

        if outcome.detail:
            if is_html(outcome.detail):
                parts.append(f"<div class=\"detail\">{outcome.detail}</div>\n")
            else:
                lang = code_language(outcome.detail)
                parts.append(f"<pre class=\"language-{lang}\">{escape(outcome.detail.rstrip())}</pre>\n")

        if outcome.metadata:
            parts.append("<dl class=\"metadata\">\n")
            parts.extend(f"<dt>{escape(k)}</dt><dd>{escape(str(v))}</dd>\n" for k, v in outcome.metadata.items())
            parts.append("</dl>\n")

        parts.append(f"<h4>Observation</h4>\n<p>{escape(outcome.message)}</p>\n")

        parts.append("<h4>Recommendation</h4>\n")
        if outcome.recommendations:
            parts.append("<ul>\n" + "".join(f"<li>{escape(r)}</li>\n" for r in outcome.recommendations) + "</ul>\n")
        else:
            parts.append(f"<p>{NO_RECOMMENDATIONS}</p>\n")

        parts.append("<h4>Reference Link(s)</h4>\n")
        links = self.references(row)
        if links:
            parts.append(
                "<ul>\n"
                + "".join(f"<li><a href=\"{escape(link, quote=True)}\">{escape(link)}</a></li>\n" for link in links)
                + "</ul>\n"
            )
        else:
            parts.append(f"<p>{NO_RECOMMENDATIONS}</p>\n")
        parts.append("</section>\n")
        return "".join(parts)
