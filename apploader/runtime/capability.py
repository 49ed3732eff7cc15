"""Host capability probes for running native application modules."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from importlib.machinery import EXTENSION_SUFFIXES

from apploader.runtime.errors import PROBE_ERRORS, log_recoverable

_LOG = logging.getLogger("apploader.capability")

EXECUTION_FORMAT_ERROR = "Error: Native modules are not supported"
ACCELERATED_GRAPHICS_ERROR = "Error: Accelerated graphics are not supported"


def supports_execution_format() -> bool:
    """Return whether the interpreter can load natively-compiled modules."""
    return len(EXTENSION_SUFFIXES) > 0


def supports_accelerated_graphics() -> bool:
    """Return whether a GPU adapter can be requested. Never raises."""
    # The GPU may be present yet blocklisted by the driver; only a real
    # adapter request tells.
    try:
        import wgpu

        gpu = getattr(wgpu, "gpu", None)
        request_adapter_sync = getattr(gpu, "request_adapter_sync", None)
        if not callable(request_adapter_sync):
            return False
        adapter = request_adapter_sync(power_preference="high-performance")
    except Exception:
        log_recoverable(_LOG, "accelerated graphics probe failed")
        return False
    return adapter is not None


def can_run_application() -> bool:
    return supports_execution_format() and supports_accelerated_graphics()


@dataclass(frozen=True, slots=True)
class CapabilityProbe:
    """Injectable pair of capability queries."""

    execution_format: Callable[[], bool] = supports_execution_format
    accelerated_graphics: Callable[[], bool] = supports_accelerated_graphics

    def supports_execution_format(self) -> bool:
        return _safe_query(self.execution_format)

    def supports_accelerated_graphics(self) -> bool:
        return _safe_query(self.accelerated_graphics)

    def can_run_application(self) -> bool:
        return self.supports_execution_format() and self.supports_accelerated_graphics()

    def failure_text(self) -> str | None:
        """Return the user-facing error for the first failing check."""
        if not self.supports_execution_format():
            return EXECUTION_FORMAT_ERROR
        if not self.supports_accelerated_graphics():
            return ACCELERATED_GRAPHICS_ERROR
        return None


def default_capability_probe() -> CapabilityProbe:
    return CapabilityProbe()


def permissive_capability_probe() -> CapabilityProbe:
    """Probe that reports every capability present."""
    return CapabilityProbe(execution_format=lambda: True, accelerated_graphics=lambda: True)


def _safe_query(query: Callable[[], bool]) -> bool:
    try:
        return bool(query())
    except PROBE_ERRORS:
        log_recoverable(_LOG, "capability query failed")
        return False
