"""Report rendering: AsciiDoc, HTML, JSON and plain-text summary."""

from .asciidoc import AsciiDocRenderer
from .base import (
    DISPOSITIONS,
    STATUS_COLORS,
    Renderer,
    ReportConfig,
    ReportFormat,
    ReportRow,
    build_rows,
    build_sections,
    code_language,
    is_asciidoc,
    is_html,
)
from .html import HTMLRenderer
from .json_report import JSONRenderer, JsonReport, build_report, parse_json_report
from .summary import SummaryRenderer
from .writer import RENDERERS, get_renderer, render_report, report_filename, write_report

__all__ = [
    "DISPOSITIONS",
    "RENDERERS",
    "STATUS_COLORS",
    "AsciiDocRenderer",
    "HTMLRenderer",
    "JSONRenderer",
    "JsonReport",
    "Renderer",
    "ReportConfig",
    "ReportFormat",
    "ReportRow",
    "SummaryRenderer",
    "build_report",
    "build_rows",
    "build_sections",
    "code_language",
    "get_renderer",
    "is_asciidoc",
    "is_html",
    "parse_json_report",
    "render_report",
    "report_filename",
    "write_report",
]
