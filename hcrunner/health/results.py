"""Aggregated, read-only view over the outcomes of one run.

Every index here is a pure function of the probe list and the outcome map.
Nothing is cached: ``RunResult`` recomputes on each call, and ordering is
always probe registration order, never completion order.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType

from hcrunner.probes.base import Category, Disposition, Outcome, ProbeInfo, Status


class ProbeState(str, Enum):
    """Lifecycle of one probe within a run."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    ERRORED = "errored"
    TIMED_OUT = "timed_out"
    SKIPPED = "skipped"

    @property
    def terminal(self) -> bool:
        return self not in (ProbeState.PENDING, ProbeState.RUNNING)


# Executive-summary weights per disposition
DISPOSITION_WEIGHTS: dict[Disposition, float] = {
    Disposition.NO_CHANGE: 1.00,
    Disposition.NOT_APPLICABLE: 0.90,
    Disposition.ADVISORY: 0.80,
    Disposition.RECOMMENDED: 0.70,
    Disposition.REQUIRED: 0.00,
    Disposition.EVALUATE: 0.00,
}


# ── Pure aggregation ─────────────────────────────────────────────────────────


def ordered_outcomes(probes: Sequence[ProbeInfo], outcomes: Mapping[str, Outcome]) -> list[Outcome]:
    """Outcomes in registration order; probes without one are left out."""
    return [outcomes[p.id] for p in probes if p.id in outcomes]


def index_by_category(
    probes: Sequence[ProbeInfo], outcomes: Mapping[str, Outcome],
) -> dict[Category, list[Outcome]]:
    """Category → outcomes. Categories in canonical order, only non-empty ones."""
    grouped: dict[Category, list[Outcome]] = {}
    for p in probes:
        if p.id in outcomes:
            grouped.setdefault(p.category, []).append(outcomes[p.id])
    return {c: grouped[c] for c in Category if c in grouped}


def index_by_status(
    probes: Sequence[ProbeInfo], outcomes: Mapping[str, Outcome],
) -> dict[Status, list[Outcome]]:
    """Status → outcomes. Statuses in declaration order, only non-empty ones."""
    grouped: dict[Status, list[Outcome]] = {}
    for o in ordered_outcomes(probes, outcomes):
        grouped.setdefault(o.status, []).append(o)
    return {s: grouped[s] for s in Status if s in grouped}


def count_by_status(outcomes: Mapping[str, Outcome]) -> dict[Status, int]:
    """Count per status; every status is present, zero included."""
    counts = {s: 0 for s in Status}
    for o in outcomes.values():
        counts[o.status] += 1
    return counts


def _score(outcomes: Sequence[Outcome]) -> float:
    if not outcomes:
        return 100.0
    total = sum(DISPOSITION_WEIGHTS[o.disposition] for o in outcomes)
    return round(total / len(outcomes) * 100, 2)


def category_scores(
    probes: Sequence[ProbeInfo], outcomes: Mapping[str, Outcome],
) -> dict[Category, float]:
    """Disposition-weighted score (percent) for each category with outcomes."""
    return {c: _score(os) for c, os in index_by_category(probes, outcomes).items()}


def health_score(probes: Sequence[ProbeInfo], outcomes: Mapping[str, Outcome]) -> float:
    """Disposition-weighted score (percent) over every executed probe."""
    return _score(ordered_outcomes(probes, outcomes))


# ── RunResult ────────────────────────────────────────────────────────────────


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class RunResult:
    """Outcomes of one run plus the probes that were eligible for it.

    ``probes`` holds every probe selected for the run, executed or not.
    A probe with no entry in ``outcomes`` was skipped.
    """

    probes: tuple[ProbeInfo, ...]
    outcomes: Mapping[str, Outcome]
    states: Mapping[str, ProbeState] = field(default_factory=dict)
    parallel: bool = False
    started_at: datetime = field(default_factory=_now)
    finished_at: datetime = field(default_factory=_now)

    def __post_init__(self) -> None:
        object.__setattr__(self, "probes", tuple(self.probes))
        object.__setattr__(self, "outcomes", MappingProxyType(dict(self.outcomes)))
        states = {p.id: ProbeState.SKIPPED for p in self.probes if p.id not in self.outcomes}
        states.update(self.states)
        object.__setattr__(self, "states", MappingProxyType(states))

    # Lookups

    def info(self, probe_id: str) -> ProbeInfo | None:
        return next((p for p in self.probes if p.id == probe_id), None)

    def outcome(self, probe_id: str) -> Outcome | None:
        return self.outcomes.get(probe_id)

    def state(self, probe_id: str) -> ProbeState:
        return self.states.get(probe_id, ProbeState.PENDING)

    # Derived views

    def ordered_outcomes(self) -> list[Outcome]:
        return ordered_outcomes(self.probes, self.outcomes)

    def by_category(self) -> dict[Category, list[Outcome]]:
        return index_by_category(self.probes, self.outcomes)

    def by_status(self) -> dict[Status, list[Outcome]]:
        return index_by_status(self.probes, self.outcomes)

    def counts_by_status(self) -> dict[Status, int]:
        return count_by_status(self.outcomes)

    def category_scores(self) -> dict[Category, float]:
        return category_scores(self.probes, self.outcomes)

    def health_score(self) -> float:
        return health_score(self.probes, self.outcomes)

    def skipped(self) -> list[ProbeInfo]:
        return [p for p in self.probes if p.id not in self.outcomes]

    def issues(self) -> list[tuple[ProbeInfo, Outcome]]:
        """Warning/Critical outcomes with their probe, registration order."""
        return [
            (p, self.outcomes[p.id])
            for p in self.probes
            if p.id in self.outcomes and self.outcomes[p.id].status.is_issue
        ]

    @property
    def is_clean(self) -> bool:
        return not self.issues()

    @property
    def duration(self) -> float:
        return (self.finished_at - self.started_at).total_seconds()
