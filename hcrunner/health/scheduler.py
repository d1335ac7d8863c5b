"""Runs a selected set of probes once and collects their outcomes.

Sequential mode runs probes in registration order and supports fail-fast.
Parallel mode starts one task per probe with no worker cap and waits for all
of them; fail-fast is not supported there, already-started probes always run
to completion or timeout.

Every probe runs in its own daemon worker thread so it can be time-boxed.
On timeout the worker is signalled through its ``ProbeContext`` and then
abandoned: side effects of a timed-out probe may continue after the run.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Iterable, Iterator
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn, TimeElapsedColumn

from hcrunner.errors import ConfigurationError, ProbeError
from hcrunner.probes.base import Category, Disposition, Outcome, Probe, ProbeContext, ProbeInfo, Status

from .results import ProbeState, RunResult

if TYPE_CHECKING:
    from hcrunner.config import Settings

logger = logging.getLogger(__name__)

TIMEOUT_MESSAGE = "Check timed out"
FAILURE_MESSAGE = "Check failed: {error}"


@dataclass
class RunConfig:
    """What to run and how."""

    categories: list[str] = field(default_factory=list)  # empty = all
    parallel: bool = False
    timeout: float = 0.0  # seconds per probe, 0 = unbounded
    fail_fast: bool = False
    progress: bool = False
    verbose: bool = False

    @classmethod
    def from_settings(cls, settings: Settings) -> RunConfig:
        return cls(
            categories=list(settings.categories),
            parallel=settings.parallel,
            timeout=settings.timeout,
            fail_fast=settings.fail_fast,
            progress=settings.progress,
            verbose=settings.verbose,
        )

    def resolved_categories(self) -> set[Category]:
        """Filter categories folded onto canonical ones."""
        resolved = set()
        for name in self.categories:
            try:
                resolved.add(Category.resolve(name))
            except ValueError as e:
                raise ConfigurationError(str(e)) from None
        return resolved


OutcomeCallback = Callable[[ProbeInfo, Outcome], Any]


class Scheduler:
    """Executes probes under one ``RunConfig``.

    Each call to ``run`` owns its own outcome map, so one scheduler never
    leaks results between runs.
    """

    def __init__(
        self,
        config: RunConfig | None = None,
        on_outcome: OutcomeCallback | None = None,
        console: Console | None = None,
    ) -> None:
        self.config = config or RunConfig()
        self.on_outcome = on_outcome
        self.console = console or Console(stderr=True)
        self._cancel_flag = threading.Event()
        self._active: set[ProbeContext] = set()
        self._active_lock = threading.Lock()

    # ── Public API ───────────────────────────────────────────────────────────

    def select(self, probes: Iterable[Probe]) -> list[Probe]:
        """Validate the probe set and apply the category filter."""
        probes = list(probes)
        if not probes:
            raise ConfigurationError("No probes registered")
        if self.config.timeout < 0:
            raise ConfigurationError(f"Timeout must be >= 0, got {self.config.timeout}")

        seen: set[str] = set()
        for p in probes:
            if p.info.id in seen:
                raise ConfigurationError(f"Duplicate probe id: {p.info.id!r}")
            seen.add(p.info.id)

        wanted = self.config.resolved_categories()
        if not wanted:
            return probes

        selected = [p for p in probes if p.info.category in wanted]
        if not selected:
            names = ", ".join(sorted(c.value for c in wanted))
            raise ConfigurationError(f"No probes match the specified categories: {names}")
        return selected

    def run(self, probes: Iterable[Probe]) -> RunResult:
        """Run the selected probes and return the aggregated result."""
        selected = self.select(probes)
        self._cancel_flag.clear()

        infos = [p.info for p in selected]
        outcomes: dict[str, Outcome] = {}
        states: dict[str, ProbeState] = {i.id: ProbeState.PENDING for i in infos}
        lock = threading.Lock()

        def record(info: ProbeInfo, outcome: Outcome, state: ProbeState) -> None:
            with lock:
                outcomes[info.id] = outcome
                states[info.id] = state
            self._report(info, outcome)

        started = datetime.now(timezone.utc)
        logger.info(
            "Running %d probes (%s, timeout=%s)",
            len(selected),
            "parallel" if self.config.parallel else "sequential",
            f"{self.config.timeout:g}s" if self.config.timeout else "none",
        )

        try:
            with self._progress(len(selected)) as advance:
                if self.config.parallel:
                    if self.config.fail_fast:
                        logger.debug("fail_fast is ignored in parallel mode")
                    self._run_parallel(selected, states, lock, record, advance)
                else:
                    self._run_sequential(selected, states, lock, record, advance)
        except KeyboardInterrupt:
            logger.warning("Run interrupted; cancelling in-flight probes")
            self.cancel()
            raise

        for probe_id, state in states.items():
            if not state.terminal:
                states[probe_id] = ProbeState.SKIPPED

        result = RunResult(
            probes=tuple(infos),
            outcomes=outcomes,
            states=states,
            parallel=self.config.parallel,
            started_at=started,
            finished_at=datetime.now(timezone.utc),
        )
        logger.info(
            "Run finished: %d executed, %d skipped in %.2fs",
            len(result.outcomes), len(result.skipped()), result.duration,
        )
        return result

    def cancel(self) -> None:
        """Stop dispatching new probes and signal in-flight ones."""
        self._cancel_flag.set()
        with self._active_lock:
            for ctx in self._active:
                ctx.cancel()

    # ── Modes ────────────────────────────────────────────────────────────────

    def _run_sequential(
        self,
        probes: list[Probe],
        states: dict[str, ProbeState],
        lock: threading.Lock,
        record: Callable[[ProbeInfo, Outcome, ProbeState], None],
        advance: Callable[[], None],
    ) -> None:
        for p in probes:
            if self._cancel_flag.is_set():
                logger.info("Run cancelled; remaining probes skipped")
                break

            with lock:
                states[p.info.id] = ProbeState.RUNNING
            outcome, state = self.execute_probe(p)
            record(p.info, outcome, state)
            advance()

            failed = state in (ProbeState.ERRORED, ProbeState.TIMED_OUT)
            if self.config.fail_fast and failed and outcome.status is Status.CRITICAL:
                logger.warning("Fail-fast: stopping after %s (%s)", p.info.id, outcome.message)
                break

    def _run_parallel(
        self,
        probes: list[Probe],
        states: dict[str, ProbeState],
        lock: threading.Lock,
        record: Callable[[ProbeInfo, Outcome, ProbeState], None],
        advance: Callable[[], None],
    ) -> None:
        def task(p: Probe) -> None:
            with lock:
                states[p.info.id] = ProbeState.RUNNING
            outcome, state = self.execute_probe(p)
            record(p.info, outcome, state)
            advance()

        with ThreadPoolExecutor(max_workers=len(probes), thread_name_prefix="probe-task") as pool:
            futures = [pool.submit(task, p) for p in probes]
        for f in futures:
            # task() only raises if bookkeeping itself is broken
            f.result()

    # ── Single probe ─────────────────────────────────────────────────────────

    def execute_probe(self, probe: Probe) -> tuple[Outcome, ProbeState]:
        """Run one probe time-boxed; never raises for probe-level failures."""
        info = probe.info
        timeout = self.config.timeout or None
        ctx = ProbeContext(info.id, timeout=timeout)
        if self._cancel_flag.is_set():
            ctx.cancel()

        future: Future[Outcome] = Future()

        def worker() -> None:
            if not future.set_running_or_notify_cancel():
                return
            try:
                result = probe.execute(ctx)
            except Exception as e:
                future.set_exception(e)
            except BaseException as e:
                future.set_exception(ProbeError(f"{type(e).__name__}: {e}"))
            else:
                future.set_result(result)

        with self._active_lock:
            self._active.add(ctx)

        logger.debug("Dispatching probe %s", info.id)
        t0 = time.perf_counter()
        thread = threading.Thread(target=worker, name=f"probe-{info.id}", daemon=True)
        thread.start()

        try:
            outcome = future.result(timeout=timeout)
        except FutureTimeout:
            ctx.cancel()
            logger.warning("Probe %s timed out after %gs; worker abandoned", info.id, timeout)
            return self._synthesize(info, TIMEOUT_MESSAGE, t0), ProbeState.TIMED_OUT
        except Exception as e:
            logger.warning("Probe %s failed: %s: %s", info.id, type(e).__name__, e)
            return self._synthesize(info, FAILURE_MESSAGE.format(error=e), t0), ProbeState.ERRORED
        except BaseException:
            # interrupted while waiting; signal the worker before it is forgotten
            ctx.cancel()
            raise
        finally:
            with self._active_lock:
                self._active.discard(ctx)

        if not isinstance(outcome, Outcome):
            logger.warning("Probe %s returned %s instead of an Outcome", info.id, type(outcome).__name__)
            error = f"probe returned {type(outcome).__name__}, expected Outcome"
            return self._synthesize(info, FAILURE_MESSAGE.format(error=error), t0), ProbeState.ERRORED

        elapsed = time.perf_counter() - t0
        return replace(outcome, probe_id=info.id, duration=elapsed), ProbeState.COMPLETED

    @staticmethod
    def _synthesize(info: ProbeInfo, message: str, t0: float) -> Outcome:
        return Outcome(
            status=Status.CRITICAL,
            message=message,
            disposition=Disposition.REQUIRED,
            duration=time.perf_counter() - t0,
            probe_id=info.id,
        )

    # ── Reporting hooks ──────────────────────────────────────────────────────

    def _report(self, info: ProbeInfo, outcome: Outcome) -> None:
        level = logging.INFO if self.config.verbose else logging.DEBUG
        logger.log(level, "[%s] %s: %s", outcome.status.value, info.name, outcome.message)
        if self.on_outcome:
            try:
                self.on_outcome(info, outcome)
            except Exception:
                logger.exception("Outcome callback error for %s", info.id)

    @contextmanager
    def _progress(self, total: int) -> Iterator[Callable[[], None]]:
        if not self.config.progress:
            yield lambda: None
            return

        progress = Progress(
            TextColumn("[bold]{task.description}"),
            BarColumn(bar_width=50),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=self.console,
            transient=False,
        )
        with progress:
            task_id = progress.add_task("Health check in progress", total=total)
            yield lambda: progress.advance(task_id)
