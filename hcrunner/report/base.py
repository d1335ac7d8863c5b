"""Shared report model — colours, labels, row model and markup detection.

Every renderer reads a ``RunResult`` through ``build_rows`` /
``build_sections`` and the tables below, so status and disposition look the
same in every format. Renderers only change presentation.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, ClassVar

from hcrunner.errors import ReportError
from hcrunner.health.results import ProbeState, RunResult
from hcrunner.probes.base import Category, Disposition, Outcome, ProbeInfo, Status

if TYPE_CHECKING:
    from hcrunner.config import Settings


class ReportFormat(str, Enum):
    ASCIIDOC = "asciidoc"
    HTML = "html"
    JSON = "json"
    SUMMARY = "summary"


# ── Canonical presentation tables ────────────────────────────────────────────

# Order used for status count tables
STATUS_ORDER: tuple[Status, ...] = (
    Status.OK,
    Status.INFO,
    Status.WARNING,
    Status.CRITICAL,
    Status.UNKNOWN,
    Status.NOT_APPLICABLE,
)

STATUS_COLORS: dict[Status, str] = {
    Status.OK: "#00FF00",
    Status.INFO: "#80E5FF",
    Status.WARNING: "#FEFE20",
    Status.CRITICAL: "#FF0000",
    Status.UNKNOWN: "#FFFFFF",
    Status.NOT_APPLICABLE: "#A6B9BF",
}

# rich style names for terminal output
STATUS_STYLES: dict[Status, str] = {
    Status.OK: "green",
    Status.INFO: "cyan",
    Status.WARNING: "yellow",
    Status.CRITICAL: "red",
    Status.UNKNOWN: "white",
    Status.NOT_APPLICABLE: "bright_black",
}


@dataclass(frozen=True)
class DispositionStyle:
    label: str
    color: str
    legend: str
    legend_label: str = ""

    @property
    def key_label(self) -> str:
        return self.legend_label or self.label


DISPOSITIONS: dict[Disposition, DispositionStyle] = {
    Disposition.REQUIRED: DispositionStyle(
        "Changes Required", "#FF0000",
        "Indicates Changes Required for system stability, subscription compliance, or other reason.",
    ),
    Disposition.RECOMMENDED: DispositionStyle(
        "Changes Recommended", "#FEFE20",
        "Indicates Changes Recommended to align with recommended practices, but not urgently required.",
    ),
    Disposition.NOT_APPLICABLE: DispositionStyle(
        "Not Applicable", "#A6B9BF",
        "No advice given on line item. For line items which are data-only to provide context.",
        legend_label="N/A",
    ),
    Disposition.ADVISORY: DispositionStyle(
        "Advisory", "#80E5FF",
        "No change required or recommended, but additional information provided.",
    ),
    Disposition.NO_CHANGE: DispositionStyle(
        "No Change", "#00FF00",
        "No change required. In alignment with recommended practices.",
    ),
    Disposition.EVALUATE: DispositionStyle(
        "To Be Evaluated", "#FFFFFF",
        "Not yet evaluated. Will appear only in draft copies.",
    ),
}

# Probes that never ran (fail-fast or cancelled run)
SKIPPED_STYLE = DispositionStyle(
    "Skipped", "#D9D9D9",
    "Not executed in this run because the run stopped early.",
)

NO_RECOMMENDATIONS = "None"


# ── Row model ────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ReportRow:
    """One probe as every renderer sees it."""

    info: ProbeInfo
    outcome: Outcome | None
    state: ProbeState

    @property
    def skipped(self) -> bool:
        return self.outcome is None

    @property
    def anchor(self) -> str:
        return anchor_for(self.info.id)

    @property
    def style(self) -> DispositionStyle:
        if self.outcome is None:
            return SKIPPED_STYLE
        return DISPOSITIONS[self.outcome.disposition]

    @property
    def status(self) -> Status | None:
        return self.outcome.status if self.outcome else None

    @property
    def status_label(self) -> str:
        return self.outcome.status.value if self.outcome else SKIPPED_STYLE.label

    @property
    def status_color(self) -> str:
        return STATUS_COLORS[self.outcome.status] if self.outcome else SKIPPED_STYLE.color

    @property
    def message(self) -> str:
        return self.outcome.message if self.outcome else "Not executed"


def anchor_for(probe_id: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", probe_id.lower()).strip("-")
    return f"probe-{slug or 'unnamed'}"


def build_rows(run: RunResult) -> list[ReportRow]:
    """Rows in registration order, skipped probes included."""
    return [ReportRow(p, run.outcome(p.id), run.state(p.id)) for p in run.probes]


def build_sections(run: RunResult) -> list[tuple[Category, list[ReportRow]]]:
    """Rows grouped by category in canonical category order."""
    grouped: dict[Category, list[ReportRow]] = {}
    for row in build_rows(run):
        grouped.setdefault(row.info.category, []).append(row)
    return [(c, grouped[c]) for c in Category if c in grouped]


# ── Native markup detection ──────────────────────────────────────────────────

_ASCIIDOC_MARKERS = (
    "[source,",
    "[source, ",
    "[cols=",
    "|===",
    "----\n",
    "....\n",
    "WARNING:",
    "NOTE:",
)
_ASCIIDOC_HEADING = re.compile(r"^={2,5} \S", re.MULTILINE)
_HTML_TAG = re.compile(
    r"<(table|pre|div|p|ul|ol|dl|h[1-6]|section|code|span|br)\b[^>]*>", re.IGNORECASE
)


def is_asciidoc(text: str) -> bool:
    """True when ``text`` already carries AsciiDoc block markup."""
    return any(m in text for m in _ASCIIDOC_MARKERS) or bool(_ASCIIDOC_HEADING.search(text))


def is_html(text: str) -> bool:
    """True when ``text`` already carries HTML block markup."""
    return bool(_HTML_TAG.search(text))


def code_language(text: str) -> str:
    """Source-block language for raw probe output: yaml, json, bash or text."""
    if ("apiVersion:" in text and "kind:" in text) or ("metadata:" in text and "spec:" in text):
        return "yaml"
    if text.lstrip().startswith("{") and '":' in text:
        return "json"
    # oc / kubectl table output
    if "NAME" in text and "READY" in text:
        return "bash"
    return "text"


# ── Renderer base ────────────────────────────────────────────────────────────


@dataclass
class ReportConfig:
    """How a report is rendered and where it is written."""

    format: ReportFormat = ReportFormat.ASCIIDOC
    title: str = "Cluster Health Check Report"
    output_dir: str = "reports"
    filename: str = "health-check-report"
    include_timestamp: bool = True
    include_details: bool = True
    group_by_category: bool = True
    color: bool = False
    reference_links: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        try:
            self.format = ReportFormat(self.format)
        except ValueError:
            raise ReportError(f"Unsupported report format: {self.format}") from None

    @classmethod
    def from_settings(cls, settings: Settings) -> ReportConfig:
        return cls(
            format=settings.report_format,
            title=settings.report_title,
            output_dir=settings.output_dir,
            filename=settings.report_filename,
            include_timestamp=settings.include_timestamp,
            include_details=settings.include_details,
            group_by_category=settings.group_by_category,
            color=settings.color,
            reference_links=list(settings.reference_links),
        )


class Renderer(ABC):
    """Turns a ``RunResult`` into one document. Must not mutate the run."""

    format: ClassVar[ReportFormat]
    extension: ClassVar[str]

    def __init__(self, config: ReportConfig | None = None) -> None:
        self.config = config or ReportConfig(format=self.format)

    @abstractmethod
    def render(self, run: RunResult) -> str:
        """Return the complete document."""

    def references(self, row: ReportRow) -> list[str]:
        return list(row.info.references) or list(self.config.reference_links)
