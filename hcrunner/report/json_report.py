"""Machine-readable report.

The field set here is a semi-stable schema consumed by downstream tooling.
Add fields freely; rename or remove only with a ``SCHEMA_VERSION`` bump.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field

from hcrunner.health.results import ProbeState, RunResult
from hcrunner.probes.base import Disposition, Status

from .base import Renderer, ReportFormat

SCHEMA_VERSION = "1"

# ── Schema ───────────────────────────────────────────────────────────────────


class ProbeRecord(BaseModel):
    probe_id: str
    name: str
    description: str = ""
    category: str
    status: Status
    disposition: Disposition
    message: str
    detail: str = ""
    recommendations: list[str] = Field(default_factory=list)
    duration_seconds: float
    state: ProbeState
    metadata: dict[str, str] = Field(default_factory=dict)
    references: list[str] = Field(default_factory=list)


class SkippedRecord(BaseModel):
    probe_id: str
    name: str
    description: str = ""
    category: str
    state: ProbeState = ProbeState.SKIPPED


class ReportSummary(BaseModel):
    total: int
    executed: int
    skipped: int
    clean: bool
    counts_by_status: dict[Status, int]
    health_score: float
    category_scores: dict[str, float] = Field(default_factory=dict)


class JsonReport(BaseModel):
    schema_version: str = SCHEMA_VERSION
    title: str
    generated_at: datetime
    parallel: bool = False
    duration_seconds: float = 0.0
    summary: ReportSummary
    results: list[ProbeRecord] = Field(default_factory=list)
    skipped: list[SkippedRecord] = Field(default_factory=list)

    def triples(self) -> set[tuple[str, Status, Disposition]]:
        """(probe id, status, disposition) for every executed probe."""
        return {(r.probe_id, r.status, r.disposition) for r in self.results}


# ── Conversion ───────────────────────────────────────────────────────────────


def build_report(run: RunResult, title: str, generated_at: datetime | None = None) -> JsonReport:
    results = []
    skipped = []
    for info in run.probes:
        outcome = run.outcome(info.id)
        if outcome is None:
            skipped.append(SkippedRecord(
                probe_id=info.id, name=info.name,
                description=info.description, category=info.category.value,
            ))
            continue
        results.append(ProbeRecord(
            probe_id=info.id,
            name=info.name,
            description=info.description,
            category=info.category.value,
            status=outcome.status,
            disposition=outcome.disposition,
            message=outcome.message,
            detail=outcome.detail,
            recommendations=list(outcome.recommendations),
            duration_seconds=round(outcome.duration, 6),
            state=run.state(info.id),
            metadata={k: str(v) for k, v in outcome.metadata.items()},
            references=list(info.references),
        ))

    summary = ReportSummary(
        total=len(run.probes),
        executed=len(results),
        skipped=len(skipped),
        clean=run.is_clean,
        counts_by_status=run.counts_by_status(),
        health_score=run.health_score(),
        category_scores={c.value: s for c, s in run.category_scores().items()},
    )
    return JsonReport(
        title=title,
        generated_at=generated_at or datetime.now(timezone.utc).replace(microsecond=0),
        parallel=run.parallel,
        duration_seconds=round(run.duration, 6),
        summary=summary,
        results=results,
        skipped=skipped,
    )


def parse_json_report(text: str | bytes) -> JsonReport:
    """Parse a document produced by ``JSONRenderer``."""
    return JsonReport.model_validate_json(text)


class JSONRenderer(Renderer):
    format = ReportFormat.JSON
    extension = ".json"

    def render(self, run: RunResult) -> str:
        return build_report(run, self.config.title).model_dump_json(indent=2) + "\n"
