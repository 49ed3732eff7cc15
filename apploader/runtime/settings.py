"""Loader runtime settings sourced from environment."""

from __future__ import annotations

import os
from dataclasses import dataclass


def _flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _choice(name: str, default: str, choices: set[str]) -> str:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    return value if value in choices else default


@dataclass(frozen=True, slots=True)
class LoaderSettings:
    """Immutable environment-driven loader settings."""

    log_level: str
    log_format: str
    log_file: str | None
    skip_capability_probe: bool


def resolve_log_level_name(default: str = "INFO") -> str:
    """Resolve log level with loader-prefixed override."""
    value = os.getenv("APPLOADER_LOG_LEVEL")
    if value is None:
        value = os.getenv("LOG_LEVEL", default)
    return value.strip().upper()


def load_loader_settings() -> LoaderSettings:
    """Load immutable loader settings from env vars."""
    log_file = os.getenv("APPLOADER_LOG_FILE", "").strip()
    return LoaderSettings(
        log_level=resolve_log_level_name(),
        log_format=_choice("APPLOADER_LOG_FORMAT", "text", {"text", "json"}),
        log_file=log_file or None,
        skip_capability_probe=_flag("APPLOADER_SKIP_CAPABILITY_PROBE", False),
    )


def enabled_capability_probe() -> bool:
    return not load_loader_settings().skip_capability_probe
