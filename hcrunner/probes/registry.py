"""Ordered set of probes assembled once per run.

Providers are importable ``module:attr`` references. The attribute may be a
probe, an iterable of probes, or a callable returning either. Registration
order is preserved and is the order every report is rendered in.
"""

from __future__ import annotations

import importlib
import logging
from collections.abc import Iterable, Iterator
from typing import Any

from hcrunner.errors import ConfigurationError
from hcrunner.probes.base import Category, Probe

logger = logging.getLogger(__name__)


class ProbeRegistry:
    """Holds probes in registration order; read-only once frozen."""

    def __init__(self, probes: Iterable[Probe] = ()) -> None:
        self._probes: list[Probe] = []
        self._ids: set[str] = set()
        self._frozen = False
        self.extend(probes)

    def register(self, probe: Probe) -> Probe:
        """Append a probe. Raises ``ConfigurationError`` on duplicate ids."""
        if self._frozen:
            raise ConfigurationError("Probe registry is frozen; register probes before the run starts")
        if not isinstance(probe, Probe):
            raise ConfigurationError(f"Not a probe: {probe!r}")
        probe_id = probe.info.id
        if probe_id in self._ids:
            raise ConfigurationError(f"Duplicate probe id: {probe_id!r}")
        self._ids.add(probe_id)
        self._probes.append(probe)
        return probe

    def extend(self, probes: Iterable[Probe]) -> None:
        for p in probes:
            self.register(p)

    def freeze(self) -> ProbeRegistry:
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def probes(self) -> list[Probe]:
        return list(self._probes)

    def get(self, probe_id: str) -> Probe | None:
        return next((p for p in self._probes if p.info.id == probe_id), None)

    def by_category(self) -> dict[Category, list[Probe]]:
        groups: dict[Category, list[Probe]] = {}
        for p in self._probes:
            groups.setdefault(p.info.category, []).append(p)
        return groups

    def __iter__(self) -> Iterator[Probe]:
        return iter(list(self._probes))

    def __len__(self) -> int:
        return len(self._probes)

    def __contains__(self, probe_id: object) -> bool:
        return probe_id in self._ids

    @classmethod
    def from_providers(cls, specs: Iterable[str]) -> ProbeRegistry:
        """Build a registry from ``module:attr`` provider references."""
        registry = cls()
        for spec in specs:
            probes = load_provider(spec)
            registry.extend(probes)
            logger.info("Loaded %d probes from %s", len(probes), spec)
        return registry


# ── Provider loading ─────────────────────────────────────────────────────────


def load_provider(spec: str) -> list[Probe]:
    """Import ``module:attr`` and return the probes it provides."""
    module_name, sep, attr_path = spec.partition(":")
    if not sep or not module_name or not attr_path:
        raise ConfigurationError(f"Provider must look like 'module:attr', got {spec!r}")

    try:
        target: Any = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationError(f"Cannot import probe provider module {module_name!r}: {e}") from e
    except Exception as e:
        raise ConfigurationError(f"Provider {spec!r} failed: {type(e).__name__}: {e}") from e

    for part in attr_path.split("."):
        try:
            target = getattr(target, part)
        except AttributeError:
            raise ConfigurationError(f"Provider {spec!r} has no attribute {part!r}") from None

    if callable(target) and not isinstance(target, Probe):
        try:
            target = target()
        except Exception as e:
            raise ConfigurationError(f"Provider {spec!r} failed: {type(e).__name__}: {e}") from e

    if isinstance(target, Probe):
        return [target]
    if isinstance(target, Iterable) and not isinstance(target, (str, bytes)):
        try:
            probes = list(target)
        except Exception as e:
            raise ConfigurationError(f"Provider {spec!r} failed: {type(e).__name__}: {e}") from e
        bad = [p for p in probes if not isinstance(p, Probe)]
        if bad:
            raise ConfigurationError(f"Provider {spec!r} returned non-probe items: {bad[:3]!r}")
        return probes
    raise ConfigurationError(f"Provider {spec!r} returned {type(target).__name__}, expected probes")
