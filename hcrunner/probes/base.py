"""Probe contract — the typed boundary every diagnostic unit implements.

A probe has an identity (``ProbeInfo``) and an ``execute`` method returning
one ``Outcome``. Raising from ``execute`` means the probe could not decide;
returning a Critical outcome means it decided the target is unhealthy. The
scheduler keeps the two apart.
"""

from __future__ import annotations

import re
import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

# ── Enumerations ─────────────────────────────────────────────────────────────


class Status(str, Enum):
    """Severity axis of an outcome."""

    OK = "OK"
    INFO = "Info"
    WARNING = "Warning"
    CRITICAL = "Critical"
    NOT_APPLICABLE = "NotApplicable"
    UNKNOWN = "Unknown"

    @property
    def rank(self) -> int | None:
        """Ordinal severity, ``None`` for NotApplicable / Unknown."""
        return _STATUS_RANK.get(self)

    @property
    def is_issue(self) -> bool:
        return self in (Status.WARNING, Status.CRITICAL)


_STATUS_RANK = {
    Status.OK: 0,
    Status.INFO: 1,
    Status.WARNING: 2,
    Status.CRITICAL: 3,
}


class Disposition(str, Enum):
    """Remediation-intent axis, independent of ``Status``."""

    NO_CHANGE = "nochange"
    RECOMMENDED = "recommended"
    REQUIRED = "required"
    ADVISORY = "advisory"
    NOT_APPLICABLE = "na"
    EVALUATE = "eval"


class Category(str, Enum):
    """Canonical operational domains a probe can belong to."""

    CLUSTER_CONFIG = "Cluster Config"
    NETWORKING = "Networking"
    STORAGE = "Storage"
    APPLICATIONS = "Applications"
    SECURITY = "Security"
    OP_READY = "Op-Ready"
    PERFORMANCE = "Performance"

    @classmethod
    def resolve(cls, name: str | Category) -> Category:
        """Map a canonical name, member name or legacy alias onto a category.

        Matching ignores case and treats runs of spaces, ``-`` and ``_`` as
        one separator. Raises ``ValueError`` for anything unrecognised.
        """
        if isinstance(name, Category):
            return name
        key = _fold(name)
        try:
            return _CATEGORY_LOOKUP[key]
        except KeyError:
            raise ValueError(f"Unknown category: {name!r}") from None


def _fold(name: str) -> str:
    return re.sub(r"[\s_\-]+", " ", name.strip().lower())


# Legacy tags still used by older probe sets
CATEGORY_ALIASES: dict[str, Category] = {
    "infra": Category.CLUSTER_CONFIG,
    "infrastructure": Category.CLUSTER_CONFIG,
    "cluster": Category.CLUSTER_CONFIG,
    "network": Category.NETWORKING,
    "app dev": Category.APPLICATIONS,
    "appdev": Category.APPLICATIONS,
    "monitoring": Category.OP_READY,
    "opready": Category.OP_READY,
}

_CATEGORY_LOOKUP: dict[str, Category] = {
    **{_fold(c.value): c for c in Category},
    **{_fold(c.name): c for c in Category},
    **CATEGORY_ALIASES,
}


# ── Identity + outcome ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class ProbeInfo:
    """Identity of a probe. Stable for the lifetime of a run."""

    id: str
    name: str
    description: str = ""
    category: Category = Category.CLUSTER_CONFIG
    references: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Probe id must not be empty")
        object.__setattr__(self, "category", Category.resolve(self.category))
        object.__setattr__(self, "references", tuple(self.references))


@dataclass(frozen=True)
class Outcome:
    """Result of executing one probe.

    ``probe_id`` and ``duration`` are stamped by the scheduler; a probe body
    only has to fill in what it found.
    """

    status: Status
    message: str
    disposition: Disposition = Disposition.EVALUATE
    detail: str = ""
    recommendations: tuple[str, ...] = ()
    duration: float = 0.0  # seconds
    probe_id: str = ""
    metadata: Mapping[str, str] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "status", Status(self.status))
        object.__setattr__(self, "disposition", Disposition(self.disposition))
        object.__setattr__(self, "recommendations", tuple(self.recommendations))
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    def __str__(self) -> str:
        return f"[{self.status.value}] {self.message}"


# ── Execution context ────────────────────────────────────────────────────────


class ProbeContext:
    """Per-execution handle passed into ``Probe.execute``.

    The scheduler sets the cancellation event when the probe times out or
    the run is cancelled. Probes that loop or sleep should use ``wait`` or
    poll ``cancelled`` so abandoned workers exit promptly.
    """

    def __init__(
        self,
        probe_id: str,
        timeout: float | None = None,
        cancel_event: threading.Event | None = None,
    ) -> None:
        self.probe_id = probe_id
        self.timeout = timeout
        self._cancel = cancel_event or threading.Event()
        self._started = time.monotonic()

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    def cancel(self) -> None:
        self._cancel.set()

    def remaining(self) -> float | None:
        """Seconds left before the timeout, ``None`` when unbounded."""
        if self.timeout is None:
            return None
        return max(0.0, self.timeout - (time.monotonic() - self._started))

    def wait(self, seconds: float) -> bool:
        """Sleep up to ``seconds``; returns True if cancelled meanwhile."""
        return self._cancel.wait(seconds)


# ── Probe interface ──────────────────────────────────────────────────────────


class Probe(ABC):
    """A single independently executable diagnostic unit."""

    @property
    @abstractmethod
    def info(self) -> ProbeInfo:
        """Identity: id, name, description, category."""

    @abstractmethod
    def execute(self, ctx: ProbeContext) -> Outcome:
        """Run the probe. May block; must be safe to call from any thread."""

    @property
    def id(self) -> str:
        return self.info.id

    def __repr__(self) -> str:
        info = self.info
        return f"<{type(self).__name__} {info.id!r} ({info.category.value})>"


class BaseProbe(Probe):
    """Stores identity so subclasses only implement ``execute``."""

    def __init__(
        self,
        id: str,
        name: str,
        description: str = "",
        category: str | Category = Category.CLUSTER_CONFIG,
        references: Iterable[str] = (),
    ) -> None:
        self._info = ProbeInfo(
            id=id,
            name=name,
            description=description,
            category=Category.resolve(category),
            references=tuple(references),
        )

    @property
    def info(self) -> ProbeInfo:
        return self._info


class FunctionProbe(BaseProbe):
    """Adapts a plain ``fn(ctx) -> Outcome`` callable to the contract."""

    def __init__(
        self,
        fn: Callable[[ProbeContext], Outcome],
        id: str,
        name: str | None = None,
        description: str | None = None,
        category: str | Category = Category.CLUSTER_CONFIG,
        references: Iterable[str] = (),
    ) -> None:
        super().__init__(
            id=id,
            name=name or id,
            description=description if description is not None else (fn.__doc__ or "").strip(),
            category=category,
            references=references,
        )
        self._fn = fn

    def execute(self, ctx: ProbeContext) -> Outcome:
        return self._fn(ctx)


def probe(
    id: str,
    name: str | None = None,
    description: str | None = None,
    category: str | Category = Category.CLUSTER_CONFIG,
    references: Iterable[str] = (),
) -> Callable[[Callable[[ProbeContext], Outcome]], FunctionProbe]:
    """Decorator turning a function into a ``FunctionProbe``.

    >>> @probe("etcd-backup", "ETCD Backup", category="Security")
    ... def etcd_backup(ctx):
    ...     return Outcome(Status.OK, "Backups configured", Disposition.NO_CHANGE)
    """

    def wrap(fn: Callable[[ProbeContext], Outcome]) -> FunctionProbe:
        return FunctionProbe(
            fn, id=id, name=name, description=description,
            category=category, references=references,
        )

    return wrap


def describe(p: Probe) -> dict[str, Any]:
    """Plain-dict view of a probe's identity (used by listings and logs)."""
    info = p.info
    return {
        "id": info.id,
        "name": info.name,
        "description": info.description,
        "category": info.category.value,
        "references": list(info.references),
    }
