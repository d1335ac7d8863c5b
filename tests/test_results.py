"""Tests for run aggregation: ordering, counts and scores."""

from __future__ import annotations

import pytest

from hcrunner.health.results import (
    DISPOSITION_WEIGHTS,
    ProbeState,
    RunResult,
    count_by_status,
    index_by_category,
    index_by_status,
)
from hcrunner.probes.base import Category, Disposition, Outcome, ProbeInfo, Status


def _run(*specs: tuple[str, str, Status, Disposition]) -> RunResult:
    infos = tuple(ProbeInfo(pid, pid.upper(), category=cat) for pid, cat, _, _ in specs)
    outcomes = {pid: Outcome(st, f"{pid} msg", disp, probe_id=pid) for pid, _, st, disp in specs}
    return RunResult(probes=infos, outcomes=outcomes)


# ── Indexes ──────────────────────────────────────────────────────────────────


class TestIndexes:
    def test_by_category_canonical_order(self) -> None:
        run = _run(
            ("sec", "Security", Status.OK, Disposition.NO_CHANGE),
            ("net", "Networking", Status.OK, Disposition.NO_CHANGE),
            ("infra", "Infra", Status.OK, Disposition.NO_CHANGE),
        )
        assert list(run.by_category()) == [Category.CLUSTER_CONFIG, Category.NETWORKING, Category.SECURITY]

    def test_registration_order_within_category(self) -> None:
        run = _run(
            ("b", "Security", Status.OK, Disposition.NO_CHANGE),
            ("a", "Security", Status.WARNING, Disposition.RECOMMENDED),
            ("c", "Security", Status.OK, Disposition.NO_CHANGE),
        )
        assert [o.probe_id for o in run.by_category()[Category.SECURITY]] == ["b", "a", "c"]
        assert [o.probe_id for o in run.by_status()[Status.OK]] == ["b", "c"]

    def test_outcome_insertion_order_irrelevant(self) -> None:
        infos = (ProbeInfo("a", "A"), ProbeInfo("b", "B"))
        first = {"a": Outcome(Status.OK, "a"), "b": Outcome(Status.OK, "b")}
        second = {"b": Outcome(Status.OK, "b"), "a": Outcome(Status.OK, "a")}
        assert index_by_category(infos, first) == index_by_category(infos, second)
        assert index_by_status(infos, first) == index_by_status(infos, second)

    def test_by_status_only_present(self) -> None:
        run = _run(("a", "Security", Status.CRITICAL, Disposition.REQUIRED))
        assert list(run.by_status()) == [Status.CRITICAL]

    def test_deterministic(self) -> None:
        run = _run(
            ("a", "Security", Status.OK, Disposition.NO_CHANGE),
            ("b", "Storage", Status.WARNING, Disposition.RECOMMENDED),
        )
        assert run.by_category() == run.by_category()
        assert run.counts_by_status() == run.counts_by_status()


# ── Counts ───────────────────────────────────────────────────────────────────


class TestCounts:
    def test_every_status_present(self) -> None:
        counts = count_by_status({"a": Outcome(Status.WARNING, "w")})
        assert set(counts) == set(Status)
        assert counts[Status.WARNING] == 1
        assert counts[Status.OK] == 0

    def test_sum_equals_executed(self, sample_run: RunResult) -> None:
        assert sum(sample_run.counts_by_status().values()) == len(sample_run.outcomes) == 4


# ── Skipped / issues ─────────────────────────────────────────────────────────


class TestRunResult:
    def test_missing_outcome_is_skipped(self, sample_run: RunResult) -> None:
        assert [p.id for p in sample_run.skipped()] == ["monitoring"]
        assert sample_run.state("monitoring") is ProbeState.SKIPPED
        assert sample_run.outcome("monitoring") is None

    def test_issues_in_registration_order(self, sample_run: RunResult) -> None:
        assert [(i.id, o.status) for i, o in sample_run.issues()] == [
            ("etcd-backup", Status.CRITICAL),
            ("ingress-cert", Status.WARNING),
        ]
        assert not sample_run.is_clean

    def test_clean(self, clean_run: RunResult) -> None:
        assert clean_run.is_clean

    def test_read_only(self, sample_run: RunResult) -> None:
        with pytest.raises(TypeError):
            sample_run.outcomes["x"] = Outcome(Status.OK, "x")  # type: ignore[index]

    def test_info_lookup(self, sample_run: RunResult) -> None:
        assert sample_run.info("node-count").name == "Node Count"
        assert sample_run.info("missing") is None

    def test_duration_non_negative(self, sample_run: RunResult) -> None:
        assert sample_run.duration >= 0


# ── Scores ───────────────────────────────────────────────────────────────────


class TestScores:
    def test_weights(self) -> None:
        assert DISPOSITION_WEIGHTS[Disposition.NO_CHANGE] == 1.0
        assert DISPOSITION_WEIGHTS[Disposition.REQUIRED] == 0.0

    def test_health_score(self) -> None:
        run = _run(
            ("a", "Security", Status.OK, Disposition.NO_CHANGE),
            ("b", "Security", Status.WARNING, Disposition.RECOMMENDED),
            ("c", "Storage", Status.CRITICAL, Disposition.REQUIRED),
            ("d", "Storage", Status.INFO, Disposition.ADVISORY),
        )
        assert run.health_score() == 62.5
        assert run.category_scores() == {Category.STORAGE: 40.0, Category.SECURITY: 85.0}

    def test_empty_run_scores_full(self) -> None:
        run = RunResult(probes=(ProbeInfo("a", "A"),), outcomes={})
        assert run.health_score() == 100.0
        assert run.category_scores() == {}
