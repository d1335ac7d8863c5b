"""Health subsystem — probe scheduler and run aggregation."""

from .results import DISPOSITION_WEIGHTS, ProbeState, RunResult
from .scheduler import RunConfig, Scheduler

__all__ = ["DISPOSITION_WEIGHTS", "ProbeState", "RunConfig", "RunResult", "Scheduler"]
