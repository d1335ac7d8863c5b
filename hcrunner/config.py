"""Central configuration loaded from environment / .env file / YAML."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings

from hcrunner.errors import ConfigurationError

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Defaults for every run and report option. Env vars use the HCR_ prefix."""

    model_config = {
        "env_prefix": "HCR_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    # Probe sources (module:attr)
    probe_providers: list[str] = []

    # Run
    categories: list[str] = []  # empty = all
    parallel: bool = False
    timeout: float = 120.0  # seconds per probe, 0 = unbounded
    fail_fast: bool = False
    progress: bool = True
    verbose: bool = False

    # Report
    report_format: str = "asciidoc"  # asciidoc | html | json | summary
    report_title: str = "Cluster Health Check Report"
    report_filename: str = "health-check-report"
    output_dir: str = "reports"
    include_timestamp: bool = True
    include_details: bool = True
    group_by_category: bool = True
    color: bool = True
    reference_links: list[str] = []

    # Logging
    log_level: str = "INFO"


def load_settings(path: Path | None = None, **overrides: Any) -> Settings:
    """Build settings from env, then a YAML file, then explicit overrides.

    Unknown keys in the YAML file are ignored with a warning.
    """
    data: dict[str, Any] = {}
    if path is not None:
        if not path.exists():
            raise ConfigurationError(f"Config file not found: {path}")
        try:
            raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Failed to parse {path}: {e}") from e
        if not isinstance(raw, dict):
            raise ConfigurationError(f"{path}: expected a mapping at top level")

        known = set(Settings.model_fields)
        for key, value in raw.items():
            if key in known:
                data[key] = value
            else:
                logger.warning("Ignoring unknown config key %r in %s", key, path)

    data.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return Settings(**data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e

