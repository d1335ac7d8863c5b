"""Probe contract and registry."""

from .base import (
    CATEGORY_ALIASES,
    BaseProbe,
    Category,
    Disposition,
    FunctionProbe,
    Outcome,
    Probe,
    ProbeContext,
    ProbeInfo,
    Status,
    describe,
    probe,
)
from .registry import ProbeRegistry, load_provider

__all__ = [
    "CATEGORY_ALIASES",
    "BaseProbe",
    "Category",
    "Disposition",
    "FunctionProbe",
    "Outcome",
    "Probe",
    "ProbeContext",
    "ProbeInfo",
    "ProbeRegistry",
    "Status",
    "describe",
    "load_provider",
    "probe",
]
