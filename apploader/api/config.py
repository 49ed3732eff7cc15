"""Public loader configuration contracts."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import TypeAlias

from apploader.api.display import DisplayContainer, PresentationCallbacks
from apploader.api.status import LoaderStatus


class RestartMode(Enum):
    """When the loader restarts a terminated module."""

    DO_NOT_RESTART = "DoNotRestart"
    RESTART_ON_EXIT = "RestartOnExit"
    RESTART_ON_CRASH = "RestartOnCrash"


class RestartType(Enum):
    """How the loader restarts a terminated module."""

    RESTART_MODULE = "RestartModule"
    RELOAD_HOST = "ReloadHostPage"


DEFAULT_RESTART_LIMIT = 10
DEFAULT_STDERR_NOISE_PREFIXES: tuple[str, ...] = ("bad name in getProcAddress:",)
DEFAULT_RUNNING_MARKER = "Running"

StatusObserver: TypeAlias = Callable[[LoaderStatus], None]


@dataclass(frozen=True, slots=True)
class LoaderConfig:
    """Caller-supplied loader configuration.

    `containers` selects managed mode. Without containers the loader runs in
    external mode and only invokes the supplied presentation callbacks.
    Restart mode and type accept either the enum or its string name.
    """

    containers: Sequence[DisplayContainer] | None = None
    presentation: PresentationCallbacks = field(default_factory=PresentationCallbacks)
    path_prefix: str = ""
    restart_mode: RestartMode | str = RestartMode.DO_NOT_RESTART
    restart_type: RestartType | str = RestartType.RESTART_MODULE
    restart_limit: int | None = DEFAULT_RESTART_LIMIT
    stdout_enabled: bool = True
    stderr_enabled: bool = True
    environment: Mapping[str, str] = field(default_factory=dict)
    status_changed: StatusObserver | None = None
    stderr_noise_prefixes: tuple[str, ...] = DEFAULT_STDERR_NOISE_PREFIXES
    running_marker: str = DEFAULT_RUNNING_MARKER
    reload_host: Callable[[], None] | None = None

    @property
    def managed(self) -> bool:
        return self.containers is not None


def normalize_loader_config(config: LoaderConfig) -> LoaderConfig:
    """Return a validated copy with defaults filled in."""
    from apploader.runtime.config import normalize_loader_config as _normalize

    return _normalize(config)


__all__ = [
    "DEFAULT_RESTART_LIMIT",
    "DEFAULT_RUNNING_MARKER",
    "DEFAULT_STDERR_NOISE_PREFIXES",
    "LoaderConfig",
    "RestartMode",
    "RestartType",
    "StatusObserver",
    "normalize_loader_config",
]
