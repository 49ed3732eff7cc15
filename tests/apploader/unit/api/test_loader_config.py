from __future__ import annotations

import pytest

from apploader.api import LoaderConfigError
from apploader.api.config import LoaderConfig, RestartMode, RestartType, normalize_loader_config
from apploader.api.display import PresentationCallbacks
from apploader.runtime.display import (
    MemoryContainer,
    default_error_surface,
    default_exited_surface,
    default_loading_surface,
    default_running_surface,
)


def test_normalize_fills_defaults_for_managed_mode() -> None:
    container = MemoryContainer()
    config = normalize_loader_config(LoaderConfig(containers=[container]))

    assert config.containers == (container,)
    assert config.presentation.on_error is default_error_surface
    assert config.presentation.on_loading is default_loading_surface
    assert config.presentation.on_running is default_running_surface
    assert config.presentation.on_exited is default_exited_surface
    assert config.restart_mode is RestartMode.DO_NOT_RESTART
    assert config.restart_type is RestartType.RESTART_MODULE
    assert config.restart_limit == 10
    assert config.stdout_enabled is True
    assert config.stderr_enabled is True
    assert config.path_prefix == ""


def test_normalize_keeps_custom_callbacks_in_managed_mode() -> None:
    def custom_loading(context) -> str:
        return "custom"

    config = normalize_loader_config(
        LoaderConfig(
            containers=(MemoryContainer(),),
            presentation=PresentationCallbacks(on_loading=custom_loading),
        )
    )

    assert config.presentation.on_loading is custom_loading
    assert config.presentation.on_error is default_error_surface


def test_normalize_does_not_synthesize_defaults_in_external_mode() -> None:
    def on_running(context) -> None:
        return None

    config = normalize_loader_config(
        LoaderConfig(presentation=PresentationCallbacks(on_running=on_running))
    )

    assert config.containers is None
    assert config.presentation.on_running is on_running
    assert config.presentation.on_error is None
    assert config.presentation.on_loading is None
    assert config.presentation.on_exited is None


def test_normalize_rejects_external_mode_without_callbacks() -> None:
    with pytest.raises(LoaderConfigError, match="presentation callback"):
        normalize_loader_config(LoaderConfig())


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("", ""),
        ("build", "build/"),
        ("build/", "build/"),
        ("/opt/app/bin", "/opt/app/bin/"),
    ],
)
def test_normalize_path_prefix_ends_with_separator(raw: str, expected: str) -> None:
    config = normalize_loader_config(
        LoaderConfig(containers=(MemoryContainer(),), path_prefix=raw)
    )
    assert config.path_prefix == expected


def test_normalize_accepts_restart_strings() -> None:
    config = normalize_loader_config(
        LoaderConfig(
            containers=(MemoryContainer(),),
            restart_mode="RestartOnCrash",
            restart_type="ReloadPage",
        )
    )
    assert config.restart_mode is RestartMode.RESTART_ON_CRASH
    assert config.restart_type is RestartType.RELOAD_HOST

    config = normalize_loader_config(
        LoaderConfig(
            containers=(MemoryContainer(),),
            restart_mode="restart_on_exit",
            restart_type="ReloadHostPage",
        )
    )
    assert config.restart_mode is RestartMode.RESTART_ON_EXIT
    assert config.restart_type is RestartType.RELOAD_HOST


def test_normalize_rejects_unknown_restart_values() -> None:
    with pytest.raises(LoaderConfigError, match="restart mode"):
        normalize_loader_config(
            LoaderConfig(containers=(MemoryContainer(),), restart_mode="Sometimes")
        )
    with pytest.raises(LoaderConfigError, match="restart type"):
        normalize_loader_config(
            LoaderConfig(containers=(MemoryContainer(),), restart_type="Reboot")
        )


def test_normalize_restart_limit_defaults_and_validation() -> None:
    assert normalize_loader_config(
        LoaderConfig(containers=(MemoryContainer(),), restart_limit=None)
    ).restart_limit == 10
    assert normalize_loader_config(
        LoaderConfig(containers=(MemoryContainer(),), restart_limit=0)
    ).restart_limit == 0
    with pytest.raises(LoaderConfigError):
        normalize_loader_config(LoaderConfig(containers=(MemoryContainer(),), restart_limit=-1))


def test_normalize_rejects_non_string_environment() -> None:
    with pytest.raises(LoaderConfigError, match="environment"):
        normalize_loader_config(
            LoaderConfig(containers=(MemoryContainer(),), environment={"THREADS": 4})  # type: ignore[dict-item]
        )


def test_create_loader_returns_configured_runtime_loader(monkeypatch) -> None:
    import apploader
    from apploader.runtime.lifecycle import ModuleLoader
    from apploader.runtime.scheduler import DeferredTaskQueue

    monkeypatch.setenv("APPLOADER_SKIP_CAPABILITY_PROBE", "1")
    queue = DeferredTaskQueue()
    loader = apploader.create_loader(
        LoaderConfig(containers=(MemoryContainer(),), restart_mode="RestartOnExit"),
        task_queue=queue,
    )

    assert isinstance(loader, ModuleLoader)
    assert loader.task_queue is queue
    assert loader.config.restart_mode is RestartMode.RESTART_ON_EXIT
    assert loader.can_load_application is True


def test_create_loader_outside_event_loop_commits_on_drain(monkeypatch) -> None:
    import apploader
    from apploader.api.status import LoaderStatus
    from apploader.runtime.scheduler import DeferredTaskQueue

    monkeypatch.setenv("APPLOADER_SKIP_CAPABILITY_PROBE", "1")
    loader = apploader.create_loader(LoaderConfig(containers=(MemoryContainer(),)))
    loader.load_application(lambda callbacks: None)

    assert isinstance(loader.task_queue, DeferredTaskQueue)
    assert loader.status is LoaderStatus.CREATED
    loader.task_queue.run_pending()
    assert loader.status is LoaderStatus.LOADING


def test_create_loader_inside_event_loop_commits_on_loop(monkeypatch) -> None:
    import asyncio

    import apploader
    from apploader.api.status import LoaderStatus
    from apploader.runtime.scheduler import AsyncioTaskQueue

    monkeypatch.setenv("APPLOADER_SKIP_CAPABILITY_PROBE", "1")

    async def _load() -> tuple[object, LoaderStatus, LoaderStatus]:
        loader = apploader.create_loader(LoaderConfig(containers=(MemoryContainer(),)))
        loader.load_application(lambda callbacks: None)
        before = loader.status
        await asyncio.sleep(0)
        return loader.task_queue, before, loader.status

    queue, before, after = asyncio.run(_load())
    assert isinstance(queue, AsyncioTaskQueue)
    assert before is LoaderStatus.CREATED
    assert after is LoaderStatus.LOADING
