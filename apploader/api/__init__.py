"""Public loader API contracts."""

from apploader.api.config import LoaderConfig, RestartMode, RestartType, normalize_loader_config
from apploader.api.display import (
    CanvasSurface,
    DisplayContainer,
    PresentationCallbacks,
    PresentationContext,
    TextSurface,
)
from apploader.api.loader import LoaderHandle, TaskQueue, create_loader
from apploader.api.logging import LoaderLoggingConfig, configure_loader_logging
from apploader.api.module import ModuleCallbacks, ModuleFactory
from apploader.api.status import (
    AbnormalExit,
    LoaderSnapshot,
    LoaderStatus,
    OrdinaryExit,
    Termination,
)
from apploader.runtime.errors import LoaderConfigError

__all__ = [
    "AbnormalExit",
    "CanvasSurface",
    "DisplayContainer",
    "LoaderConfig",
    "LoaderConfigError",
    "LoaderHandle",
    "LoaderLoggingConfig",
    "LoaderSnapshot",
    "LoaderStatus",
    "ModuleCallbacks",
    "ModuleFactory",
    "OrdinaryExit",
    "PresentationCallbacks",
    "PresentationContext",
    "RestartMode",
    "RestartType",
    "TaskQueue",
    "Termination",
    "TextSurface",
    "configure_loader_logging",
    "create_loader",
    "normalize_loader_config",
]
