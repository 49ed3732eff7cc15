from __future__ import annotations

import pytest

from apploader.api.config import LoaderConfig
from apploader.api.display import PresentationContext
from apploader.api.module import ModuleCallbacks
from apploader.api.status import LoaderStatus
from apploader.runtime.capability import CapabilityProbe
from apploader.runtime.display import MemoryContainer
from apploader.runtime.lifecycle import ModuleLoader
from apploader.runtime.scheduler import DeferredTaskQueue


class RecordingModule:
    """Module factory that keeps every callback bundle it receives."""

    def __init__(self) -> None:
        self.bundles: list[ModuleCallbacks] = []

    def __call__(self, callbacks: ModuleCallbacks) -> None:
        self.bundles.append(callbacks)

    @property
    def current(self) -> ModuleCallbacks:
        return self.bundles[-1]

    @property
    def load_count(self) -> int:
        return len(self.bundles)


class PresentationSpy:
    """Presentation callbacks recording every invocation context."""

    def __init__(self) -> None:
        self.calls: list[PresentationContext] = []

    def __call__(self, context: PresentationContext) -> object:
        self.calls.append(context)
        return f"{context.status.value}-surface"

    def statuses(self) -> list[LoaderStatus]:
        return [context.status for context in self.calls]


@pytest.fixture
def task_queue() -> DeferredTaskQueue:
    return DeferredTaskQueue()


@pytest.fixture
def capable_probe() -> CapabilityProbe:
    return CapabilityProbe(execution_format=lambda: True, accelerated_graphics=lambda: True)


@pytest.fixture
def module() -> RecordingModule:
    return RecordingModule()


@pytest.fixture
def loader_factory(task_queue: DeferredTaskQueue, capable_probe: CapabilityProbe):
    def _make(config: LoaderConfig | None = None, **config_kwargs) -> ModuleLoader:
        if config is None:
            config_kwargs.setdefault("containers", (MemoryContainer(),))
            config = LoaderConfig(**config_kwargs)
        return ModuleLoader(config, task_queue=task_queue, capability_probe=capable_probe)

    return _make
