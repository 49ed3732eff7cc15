"""Public loader logging API."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class LoaderLoggingConfig:
    """Loader logging pipeline configuration."""

    level_name: str = "INFO"
    console_format: str = "text"  # text|json
    file_path: str | None = None
    file_format: str = "json"  # text|json


def configure_loader_logging(config: LoaderLoggingConfig) -> None:
    """Configure root logging using the default loader implementation."""
    from apploader.runtime.logging import configure_loader_logging as _configure

    _configure(config)


__all__ = ["LoaderLoggingConfig", "configure_loader_logging"]
