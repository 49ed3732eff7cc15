from __future__ import annotations

from apploader.api.config import LoaderConfig
from apploader.api.display import PresentationCallbacks, TextSurface
from apploader.api.status import LoaderStatus, OrdinaryExit
from apploader.runtime.display import MemoryContainer
from apploader.runtime.restart import RESTART_LIMIT_HALT_TEXT

from tests.apploader.conftest import PresentationSpy, RecordingModule


def _crash_and_settle(module: RecordingModule, task_queue, message: str = "crash") -> None:
    module.current.report_status_text("Running...")
    task_queue.run_pending()
    module.current.on_abnormal_termination(message)
    task_queue.run_pending()


def test_restart_on_crash_is_capped_by_limit(
    loader_factory, module: RecordingModule, task_queue
) -> None:
    container = MemoryContainer()
    observed: list[LoaderStatus] = []
    loader = loader_factory(
        containers=(container,),
        restart_mode="RestartOnCrash",
        restart_limit=2,
        status_changed=observed.append,
    )
    loader.load_application(module)
    task_queue.run_pending()

    _crash_and_settle(module, task_queue)
    assert loader.restart_count == 1
    assert loader.status is LoaderStatus.LOADING
    assert module.load_count == 2

    _crash_and_settle(module, task_queue)
    assert loader.restart_count == 2
    assert loader.status is LoaderStatus.LOADING
    assert module.load_count == 3

    _crash_and_settle(module, task_queue)
    assert loader.status is LoaderStatus.ERROR
    assert loader.halted is True
    assert loader.crashed is False
    assert module.load_count == 3
    assert container.children == [TextSurface(style_class="LoaderError", text=RESTART_LIMIT_HALT_TEXT)]
    assert observed[-2:] == [LoaderStatus.EXITED, LoaderStatus.ERROR]
    assert observed.count(LoaderStatus.EXITED) == 3

    loader.load_application(module)
    task_queue.run_pending()
    assert module.load_count == 3
    assert loader.status is LoaderStatus.ERROR


def test_restart_count_persists_across_successful_runs(
    loader_factory, module: RecordingModule, task_queue
) -> None:
    loader = loader_factory(restart_mode="RestartOnCrash", restart_limit=5)
    loader.load_application(module)
    task_queue.run_pending()

    _crash_and_settle(module, task_queue)
    module.current.report_status_text("Running...")
    task_queue.run_pending()
    assert loader.status is LoaderStatus.RUNNING
    _crash_and_settle(module, task_queue)

    assert loader.restart_count == 2


def test_restart_on_crash_keeps_clean_exit(
    loader_factory, module: RecordingModule, task_queue
) -> None:
    loader = loader_factory(restart_mode="RestartOnCrash")
    loader.load_application(module)
    module.current.report_status_text("Running...")
    task_queue.run_pending()
    module.current.on_termination(0, OrdinaryExit(0))
    task_queue.run_pending()

    assert loader.status is LoaderStatus.EXITED
    assert loader.exit_code == 0
    assert loader.restart_count == 0
    assert module.load_count == 1


def test_restart_on_exit_restarts_clean_exit(
    loader_factory, module: RecordingModule, task_queue
) -> None:
    loader = loader_factory(restart_mode="RestartOnExit")
    loader.load_application(module)
    module.current.report_status_text("Running...")
    task_queue.run_pending()
    module.current.on_termination(0, OrdinaryExit(0))
    task_queue.run_pending()

    assert module.load_count == 2
    assert loader.restart_count == 1
    assert loader.status is LoaderStatus.LOADING
    assert loader.exit_code is None


def test_do_not_restart_leaves_crash_display(
    loader_factory, module: RecordingModule, task_queue
) -> None:
    container = MemoryContainer()
    loader = loader_factory(containers=(container,))
    loader.load_application(module)
    _crash_and_settle(module, task_queue)

    assert loader.status is LoaderStatus.EXITED
    assert module.load_count == 1
    assert container.children[0].style_class == "LoaderExit"


def test_reload_host_restart_delegates_to_host(
    loader_factory, module: RecordingModule, task_queue
) -> None:
    reloads: list[str] = []
    loader = loader_factory(
        restart_mode="RestartOnCrash",
        restart_type="ReloadPage",
        reload_host=lambda: reloads.append("reload"),
    )
    loader.load_application(module)
    _crash_and_settle(module, task_queue)

    assert reloads == ["reload"]
    assert module.load_count == 1
    assert loader.restart_count == 1


def test_zero_limit_halts_on_first_crash(
    loader_factory, module: RecordingModule, task_queue
) -> None:
    loader = loader_factory(restart_mode="RestartOnCrash", restart_limit=0)
    loader.load_application(module)
    _crash_and_settle(module, task_queue)

    assert loader.status is LoaderStatus.ERROR
    assert module.load_count == 1


def test_superseded_cycle_callbacks_are_ignored(
    loader_factory, module: RecordingModule, task_queue
) -> None:
    loader = loader_factory(restart_mode="RestartOnCrash")
    loader.load_application(module)
    _crash_and_settle(module, task_queue)
    stale = module.bundles[0]

    stale.report_status_text("Running...")
    stale.on_abnormal_termination("late abort")
    task_queue.run_pending()

    assert loader.status is LoaderStatus.LOADING
    assert loader.restart_count == 1


def test_external_mode_with_only_running_callback(
    loader_factory, module: RecordingModule, task_queue
) -> None:
    on_running = PresentationSpy()
    loader = loader_factory(
        LoaderConfig(
            presentation=PresentationCallbacks(on_running=on_running),
            restart_mode="RestartOnCrash",
            restart_limit=0,
        )
    )
    loader.load_application(module)
    module.current.report_status_text("Running...")
    task_queue.run_pending()

    assert on_running.statuses() == [LoaderStatus.RUNNING]
    assert on_running.calls[0].container is None
    assert module.current.canvas == "Running-surface"

    module.current.on_abnormal_termination("crash")
    task_queue.run_pending()

    assert loader.status is LoaderStatus.ERROR
    assert on_running.statuses() == [LoaderStatus.RUNNING]


def test_managed_error_renders_into_every_container(
    loader_factory, module: RecordingModule, task_queue
) -> None:
    on_error = PresentationSpy()
    first = MemoryContainer(name="first")
    second = MemoryContainer(name="second")
    loader = loader_factory(
        containers=(first, second),
        presentation=PresentationCallbacks(on_error=on_error),
        restart_mode="RestartOnCrash",
        restart_limit=0,
    )
    loader.load_application(module)
    module.current.report_status_text("Running...")
    task_queue.run_pending()
    assert first.children and second.children

    module.current.on_abnormal_termination("crash")
    task_queue.run_pending()

    assert loader.status is LoaderStatus.ERROR
    assert [call.container for call in on_error.calls] == [first, second]
    assert first.children == ["Error-surface"]
    assert second.children == ["Error-surface"]
