"""Loader configuration normalization."""

from __future__ import annotations

from dataclasses import replace
from enum import Enum

from apploader.api.config import (
    DEFAULT_RESTART_LIMIT,
    LoaderConfig,
    RestartMode,
    RestartType,
)
from apploader.runtime.display import with_default_presentation
from apploader.runtime.errors import LoaderConfigError

_RESTART_TYPE_ALIASES: dict[str, RestartType] = {
    "restartmodule": RestartType.RESTART_MODULE,
    "reloadpage": RestartType.RELOAD_HOST,
    "reloadhostpage": RestartType.RELOAD_HOST,
    "reloadhost": RestartType.RELOAD_HOST,
}


def normalize_loader_config(config: LoaderConfig) -> LoaderConfig:
    """Return a validated copy of `config` with defaults filled in."""
    presentation = config.presentation
    containers = config.containers
    if containers is not None:
        containers = tuple(containers)
        presentation = with_default_presentation(presentation)
    elif presentation.is_empty():
        raise LoaderConfigError(
            "external mode requires at least one presentation callback when no containers are given"
        )
    return replace(
        config,
        containers=containers,
        presentation=presentation,
        path_prefix=normalize_path_prefix(config.path_prefix),
        restart_mode=_normalize_restart_mode(config.restart_mode),
        restart_type=_normalize_restart_type(config.restart_type),
        restart_limit=_normalize_restart_limit(config.restart_limit),
        stdout_enabled=bool(config.stdout_enabled),
        stderr_enabled=bool(config.stderr_enabled),
        environment=_normalize_environment(config.environment),
        stderr_noise_prefixes=tuple(config.stderr_noise_prefixes),
    )


def normalize_path_prefix(path_prefix: str | None) -> str:
    """Ensure a non-empty prefix ends with a separator."""
    if not path_prefix:
        return ""
    if path_prefix.endswith("/"):
        return path_prefix
    return f"{path_prefix}/"


def _normalize_restart_mode(value: RestartMode | str) -> RestartMode:
    if isinstance(value, RestartMode):
        return value
    key = _token(value)
    for mode in RestartMode:
        if _token(mode.value) == key or _token(mode.name) == key:
            return mode
    raise LoaderConfigError(f"Unsupported restart mode: {value!r}")


def _normalize_restart_type(value: RestartType | str) -> RestartType:
    if isinstance(value, RestartType):
        return value
    resolved = _RESTART_TYPE_ALIASES.get(_token(value))
    if resolved is None:
        raise LoaderConfigError(f"Unsupported restart type: {value!r}")
    return resolved


def _normalize_restart_limit(value: int | None) -> int:
    if value is None:
        return DEFAULT_RESTART_LIMIT
    if isinstance(value, bool) or not isinstance(value, int):
        raise LoaderConfigError(f"restart_limit must be an integer, got {value!r}")
    if value < 0:
        raise LoaderConfigError("restart_limit must be >= 0")
    return value


def _normalize_environment(environment: object) -> dict[str, str]:
    if not hasattr(environment, "items"):
        raise LoaderConfigError("environment must be a mapping of str to str")
    normalized: dict[str, str] = {}
    for key, value in environment.items():  # type: ignore[union-attr]
        if not isinstance(key, str) or not isinstance(value, str):
            raise LoaderConfigError(
                f"environment entries must be str to str, got {key!r}={value!r}"
            )
        normalized[key] = value
    return normalized


def _token(value: str | Enum) -> str:
    raw = value.value if isinstance(value, Enum) else str(value)
    return raw.strip().lower().replace("_", "").replace("-", "").replace(" ", "")
