"""Run-level error types.

Probe failures never show up here: they are converted to Critical outcomes
by the scheduler. Only failures that prevent a report from being produced
are raised to the caller.
"""

from __future__ import annotations


class RunnerError(Exception):
    """Base class for errors that fail a whole run."""


class ConfigurationError(RunnerError):
    """Raised before scheduling when the run cannot be set up."""


class ReportError(RunnerError):
    """Raised when a report cannot be rendered or written."""


class ProbeError(Exception):
    """Wraps a non-``Exception`` failure raised inside a probe body."""
