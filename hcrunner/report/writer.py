"""Report selection and file output."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from hcrunner.errors import ReportError
from hcrunner.health.results import RunResult

from .asciidoc import AsciiDocRenderer
from .base import Renderer, ReportConfig, ReportFormat
from .html import HTMLRenderer
from .json_report import JSONRenderer
from .summary import SummaryRenderer

logger = logging.getLogger(__name__)

RENDERERS: dict[ReportFormat, type[Renderer]] = {
    ReportFormat.ASCIIDOC: AsciiDocRenderer,
    ReportFormat.HTML: HTMLRenderer,
    ReportFormat.JSON: JSONRenderer,
    ReportFormat.SUMMARY: SummaryRenderer,
}


# Extensions recognised on a user-supplied filename; any other dotted suffix is part of the name
REPORT_EXTENSIONS = frozenset({".adoc", ".asciidoc", ".html", ".htm", ".json", ".txt"})


def get_renderer(config: ReportConfig) -> Renderer:
    """Instantiate the renderer for ``config.format``."""
    return RENDERERS[config.format](config)


def report_filename(config: ReportConfig, now: datetime | None = None) -> str:
    """Path of the report relative to ``config.output_dir``.

    The timestamp goes before a recognised extension; the format extension is
    only added when the name has none. Subdirectories in the name are kept,
    absolute paths and ``..`` are rejected.
    """
    path = Path(config.filename or "health-check-report")
    if path.is_absolute() or ".." in path.parts:
        raise ReportError(f"Report filename must stay inside the output directory: {config.filename!r}")

    if path.suffix.lower() in REPORT_EXTENSIONS:
        stem, suffix = path.stem, path.suffix
    else:
        stem, suffix = path.name, RENDERERS[config.format].extension

    if config.include_timestamp:
        stamp = (now or datetime.now()).strftime("%Y%m%d-%H%M%S")
        stem = f"{stem}-{stamp}"

    return (path.parent / f"{stem}{suffix}").as_posix()


def render_report(run: RunResult, config: ReportConfig) -> str:
    renderer = get_renderer(config)
    try:
        return renderer.render(run)
    except Exception as e:
        raise ReportError(f"Failed to render {config.format.value} report: {e}") from e


def write_report(run: RunResult, config: ReportConfig, now: datetime | None = None) -> Path:
    """Render ``run`` and write it under ``config.output_dir``. Returns the path."""
    content = render_report(run, config)

    out_dir = Path(config.output_dir)
    path = out_dir / report_filename(config, now)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise ReportError(f"Failed to write report to {path}: {e}") from e

    logger.info("Wrote %s report: %s (%d bytes)", config.format.value, path, len(content.encode("utf-8")))
    return path
