"""Public loader handle contracts."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol

from apploader.api.config import LoaderConfig
from apploader.api.module import ModuleFactory
from apploader.api.status import LoaderSnapshot, LoaderStatus

if TYPE_CHECKING:
    from apploader.runtime.capability import CapabilityProbe


class TaskQueue(Protocol):
    """Host task queue used for deferred status commits."""

    def call_soon(self, callback: Callable[[], None]) -> int:
        """Enqueue a callback after the current synchronous burst."""

    def cancel(self, task_id: int) -> None:
        """Cancel a queued callback if it has not run yet."""


class LoaderHandle(Protocol):
    """Loader surface exposed to the embedding host."""

    @property
    def task_queue(self) -> TaskQueue:
        """Queue the loader commits status changes on."""

    @property
    def webassembly_supported(self) -> bool:
        """Whether the host can execute the module's binary format."""

    @property
    def webgl_supported(self) -> bool:
        """Whether an accelerated graphics context is available."""

    @property
    def can_load_application(self) -> bool:
        """Whether both capability checks pass."""

    @property
    def status(self) -> LoaderStatus:
        """Last committed status."""

    @property
    def crashed(self) -> bool:
        """Whether the last committed exit was abnormal."""

    @property
    def exit_code(self) -> int | None:
        """Exit code of the last committed clean exit."""

    @property
    def exit_text(self) -> str | None:
        """Message of the last committed abnormal exit."""

    @property
    def snapshot(self) -> LoaderSnapshot:
        """All committed values at once."""

    def load_application(self, module_factory: ModuleFactory) -> None:
        """Start one load cycle with the given module factory."""


def create_loader(
    config: LoaderConfig,
    *,
    task_queue: TaskQueue | None = None,
    capability_probe: CapabilityProbe | None = None,
) -> LoaderHandle:
    """Create default loader implementation.

    Without `task_queue` the loader binds to the running asyncio loop. Outside
    a running loop it gets a `DeferredTaskQueue`, and status changes commit
    only when the host drains `loader.task_queue.run_pending()`.
    """
    from apploader.runtime.lifecycle import ModuleLoader

    return ModuleLoader(config, task_queue=task_queue, capability_probe=capability_probe)


__all__ = ["LoaderHandle", "TaskQueue", "create_loader"]
