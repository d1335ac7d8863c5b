"""Shared test fixtures and probe builders."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterator

import pytest

from hcrunner.health.results import ProbeState, RunResult
from hcrunner.probes.base import (
    Category,
    Disposition,
    FunctionProbe,
    Outcome,
    ProbeContext,
    ProbeInfo,
    Status,
)


def make_probe(
    id: str,
    status: Status = Status.OK,
    disposition: Disposition = Disposition.NO_CHANGE,
    category: str | Category = Category.CLUSTER_CONFIG,
    message: str | None = None,
    **outcome_kwargs,
) -> FunctionProbe:
    """A probe that immediately returns a fixed outcome."""

    def body(ctx: ProbeContext) -> Outcome:
        return Outcome(status, message or f"{id} is {status.value}", disposition, **outcome_kwargs)

    return FunctionProbe(body, id=id, name=id.replace("-", " ").title(), category=category)


def raising_probe(id: str, exc: BaseException, category: str | Category = Category.CLUSTER_CONFIG) -> FunctionProbe:
    def body(ctx: ProbeContext) -> Outcome:
        raise exc

    return FunctionProbe(body, id=id, name=id, category=category)


def sleeping_probe(id: str, seconds: float, log: list[str] | None = None) -> FunctionProbe:
    """Sleeps (cancellably) then returns OK; appends its id to ``log`` when done."""

    def body(ctx: ProbeContext) -> Outcome:
        ctx.wait(seconds)
        if log is not None:
            log.append(id)
        return Outcome(Status.OK, f"{id} done", Disposition.NO_CHANGE)

    return FunctionProbe(body, id=id, name=id)


@pytest.fixture
def release() -> Iterator[threading.Event]:
    """Event that unblocks ``blocking_probe`` bodies at teardown."""
    event = threading.Event()
    yield event
    event.set()


@pytest.fixture
def blocking_probe(release: threading.Event) -> Callable[[str], FunctionProbe]:
    """Factory for probes that ignore cancellation and block until teardown."""

    def factory(id: str) -> FunctionProbe:
        def body(ctx: ProbeContext) -> Outcome:
            release.wait(30)
            return Outcome(Status.OK, "finally done", Disposition.NO_CHANGE)

        return FunctionProbe(body, id=id, name=id)

    return factory


@pytest.fixture
def sample_run() -> RunResult:
    """A finished run covering several categories, statuses and one skipped probe."""
    infos = (
        ProbeInfo("etcd-backup", "ETCD Backup", "Checks etcd backups", Category.SECURITY),
        ProbeInfo("node-count", "Node Count", "Counts nodes", Category.CLUSTER_CONFIG),
        ProbeInfo(
            "ingress-cert", "Ingress Certificate", "Checks the ingress certificate",
            Category.NETWORKING, references=("https://docs.example.com/ingress",),
        ),
        ProbeInfo("storage-class", "Default Storage Class", "", Category.STORAGE),
        ProbeInfo("monitoring", "Monitoring Stack", "", Category.OP_READY),
    )
    outcomes = {
        "etcd-backup": Outcome(
            Status.CRITICAL, "No etcd backups found", Disposition.REQUIRED,
            detail="NAME  SCHEDULE\n(none)",
            recommendations=("Schedule daily etcd backups",),
            probe_id="etcd-backup", duration=0.25,
        ),
        "node-count": Outcome(
            Status.OK, "3 worker nodes", Disposition.NO_CHANGE,
            detail="[source, bash]\n----\nworker-0\nworker-1\nworker-2\n----",
            probe_id="node-count", duration=0.1,
            metadata={"workers": "3"},
        ),
        "ingress-cert": Outcome(
            Status.WARNING, "Certificate uses a | self-signed issuer", Disposition.RECOMMENDED,
            recommendations=("Use a CA-signed certificate", "Rotate yearly"),
            probe_id="ingress-cert", duration=0.5,
        ),
        "storage-class": Outcome(
            Status.INFO, "Default storage class is gp3", Disposition.ADVISORY,
            probe_id="storage-class", duration=0.05,
        ),
    }
    states = {
        "etcd-backup": ProbeState.COMPLETED,
        "node-count": ProbeState.COMPLETED,
        "ingress-cert": ProbeState.COMPLETED,
        "storage-class": ProbeState.COMPLETED,
    }
    return RunResult(probes=infos, outcomes=outcomes, states=states)


@pytest.fixture
def clean_run() -> RunResult:
    info = ProbeInfo("node-count", "Node Count", "Counts nodes", Category.CLUSTER_CONFIG)
    outcome = Outcome(Status.OK, "3 worker nodes", Disposition.NO_CHANGE, probe_id="node-count")
    return RunResult(probes=(info,), outcomes={"node-count": outcome})


def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()
