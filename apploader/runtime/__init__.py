"""Loader runtime modules."""

from apploader.runtime.capability import (
    CapabilityProbe,
    can_run_application,
    default_capability_probe,
    supports_accelerated_graphics,
    supports_execution_format,
)
from apploader.runtime.config import normalize_loader_config, normalize_path_prefix
from apploader.runtime.display import DisplayDispatcher, MemoryContainer
from apploader.runtime.errors import LoaderConfigError
from apploader.runtime.flow import FlowContext, FlowProgram, FlowTransition
from apploader.runtime.lifecycle import LifecycleRecord, ModuleLoader
from apploader.runtime.logging import configure_loader_logging, setup_loader_logging
from apploader.runtime.restart import RestartController, RestartDecision, should_restart
from apploader.runtime.scheduler import AsyncioTaskQueue, DeferredTaskQueue, resolve_task_queue
from apploader.runtime.settings import LoaderSettings, load_loader_settings

__all__ = [
    "AsyncioTaskQueue",
    "CapabilityProbe",
    "DeferredTaskQueue",
    "DisplayDispatcher",
    "FlowContext",
    "FlowProgram",
    "FlowTransition",
    "LifecycleRecord",
    "LoaderConfigError",
    "LoaderSettings",
    "MemoryContainer",
    "ModuleLoader",
    "RestartController",
    "RestartDecision",
    "can_run_application",
    "configure_loader_logging",
    "default_capability_probe",
    "load_loader_settings",
    "normalize_loader_config",
    "normalize_path_prefix",
    "resolve_task_queue",
    "setup_loader_logging",
    "should_restart",
    "supports_accelerated_graphics",
    "supports_execution_format",
]
