"""Lifecycle state machine supervising one hosted module."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from apploader.api.config import LoaderConfig, RestartMode, RestartType
from apploader.api.loader import TaskQueue
from apploader.api.module import ModuleCallbacks, ModuleFactory
from apploader.api.status import (
    LoaderSnapshot,
    LoaderStatus,
    OrdinaryExit,
    Termination,
)
from apploader.runtime.capability import (
    CapabilityProbe,
    default_capability_probe,
    permissive_capability_probe,
)
from apploader.runtime.config import normalize_loader_config
from apploader.runtime.display import DisplayDispatcher
from apploader.runtime.flow import FlowContext, FlowTransition, RuntimeFlowProgram
from apploader.runtime.logging import MODULE_STDERR_LOGGER, MODULE_STDOUT_LOGGER
from apploader.runtime.restart import RestartController
from apploader.runtime.scheduler import resolve_task_queue
from apploader.runtime.settings import enabled_capability_probe

_LOG = logging.getLogger("apploader.lifecycle")
_STDOUT_LOG = logging.getLogger(MODULE_STDOUT_LOGGER)
_STDERR_LOG = logging.getLogger(MODULE_STDERR_LOGGER)

_DEFAULT_ABORT_TEXT = "Aborted"


@dataclass(slots=True)
class LifecycleRecord:
    """Mutable lifecycle values owned by one loader instance."""

    status: LoaderStatus = LoaderStatus.CREATED
    crashed: bool = False
    exit_code: int | None = None
    exit_text: str | None = None
    error_text: str | None = None
    restart_count: int = 0
    committed_status: LoaderStatus | None = LoaderStatus.CREATED
    halted: bool = False


def _not_halted(context: FlowContext[LoaderStatus]) -> bool:
    record = context.payload
    return isinstance(record, LifecycleRecord) and not record.halted


_TERMINATED = frozenset({LoaderStatus.LOADING, LoaderStatus.RUNNING})

LIFECYCLE_TRANSITIONS: tuple[FlowTransition[LoaderStatus], ...] = (
    FlowTransition(
        trigger="load",
        sources=frozenset({LoaderStatus.CREATED, LoaderStatus.EXITED, LoaderStatus.ERROR}),
        target=LoaderStatus.LOADING,
        guard=_not_halted,
    ),
    FlowTransition(trigger="capability_failed", sources=None, target=LoaderStatus.ERROR),
    FlowTransition(
        trigger="running",
        sources=frozenset({LoaderStatus.LOADING}),
        target=LoaderStatus.RUNNING,
    ),
    FlowTransition(trigger="exit", sources=_TERMINATED, target=LoaderStatus.EXITED),
    FlowTransition(
        trigger="halt",
        sources=frozenset({LoaderStatus.EXITED}),
        target=LoaderStatus.ERROR,
    ),
)


class ModuleLoader:
    """Load, supervise and restart one hosted module.

    Status changes are committed on the host task queue, after the current
    synchronous burst. Only the last status of a burst is rendered, and
    public observers only ever see committed values.
    """

    def __init__(
        self,
        config: LoaderConfig,
        *,
        task_queue: TaskQueue | None = None,
        capability_probe: CapabilityProbe | None = None,
    ) -> None:
        self._config = normalize_loader_config(config)
        self._task_queue: TaskQueue = task_queue or resolve_task_queue()
        if capability_probe is None:
            capability_probe = (
                default_capability_probe()
                if enabled_capability_probe()
                else permissive_capability_probe()
            )
        self._probe = capability_probe
        self._execution_supported = capability_probe.supports_execution_format()
        self._graphics_supported = capability_probe.supports_accelerated_graphics()
        self._record = LifecycleRecord()
        self._snapshot = LoaderSnapshot()
        self._flow = RuntimeFlowProgram(LIFECYCLE_TRANSITIONS)
        self._dispatcher = DisplayDispatcher(
            containers=self._config.containers,
            presentation=self._config.presentation,
        )
        self._restart = RestartController(
            mode=RestartMode(self._config.restart_mode),
            restart_type=RestartType(self._config.restart_type),
            limit=int(self._config.restart_limit or 0),
            reload_host=self._config.reload_host,
        )
        self._module_factory: ModuleFactory | None = None
        self._module: ModuleCallbacks | None = None
        self._cycle = 0

    @property
    def config(self) -> LoaderConfig:
        return self._config

    @property
    def task_queue(self) -> TaskQueue:
        return self._task_queue

    @property
    def webassembly_supported(self) -> bool:
        return self._execution_supported

    @property
    def webgl_supported(self) -> bool:
        return self._graphics_supported

    @property
    def can_load_application(self) -> bool:
        return self._execution_supported and self._graphics_supported

    @property
    def snapshot(self) -> LoaderSnapshot:
        return self._snapshot

    @property
    def status(self) -> LoaderStatus:
        return self._snapshot.status

    @property
    def crashed(self) -> bool:
        return self._snapshot.crashed

    @property
    def exit_code(self) -> int | None:
        return self._snapshot.exit_code

    @property
    def exit_text(self) -> str | None:
        return self._snapshot.exit_text

    @property
    def restart_count(self) -> int:
        return self._record.restart_count

    @property
    def halted(self) -> bool:
        return self._record.halted

    @property
    def module(self) -> ModuleCallbacks | None:
        """Callback bundle of the current load cycle."""
        return self._module

    def load_application(self, module_factory: ModuleFactory) -> None:
        """Start one load cycle. Never blocks; results arrive via callbacks."""
        record = self._record
        if record.halted:
            _LOG.warning("load ignored: loader halted after %d restarts", record.restart_count)
            return
        failure = self._probe.failure_text()
        if failure is not None:
            _LOG.error("capability check failed: %s", failure)
            record.error_text = failure
            self._transition("capability_failed")
            return
        if self._flow.resolve(record.status, "load", payload=record) is None:
            _LOG.warning("load ignored: cycle in flight status=%s", record.status.value)
            return

        self._module_factory = module_factory
        self._cycle += 1
        cycle = self._cycle
        record.crashed = False
        record.exit_code = None
        record.exit_text = None
        module = self._build_callbacks(cycle)
        self._module = module
        self._set_status(LoaderStatus.LOADING)
        _LOG.info("loading module cycle=%d", cycle)
        try:
            module_factory(module)
        except Exception as exc:
            _LOG.exception("module factory failed cycle=%d", cycle)
            self._handle_abort(cycle, f"{type(exc).__name__}: {exc}")

    def _build_callbacks(self, cycle: int) -> ModuleCallbacks:
        config = self._config
        module = ModuleCallbacks(
            resolve_file_path=lambda name: f"{config.path_prefix}{name}",
            report_status_text=lambda text: self._handle_status_text(cycle, text),
            write_stdout=self._write_stdout,
            write_stderr=self._write_stderr,
            on_abnormal_termination=lambda message: self._handle_abort(cycle, message),
            on_termination=lambda code, info: self._handle_termination(cycle, code, info),
            monitor_run_dependencies=lambda remaining: _LOG.debug(
                "run dependencies remaining=%d cycle=%d", remaining, cycle
            ),
        )

        def _inject_environment() -> None:
            for key, value in config.environment.items():
                module.env[key.upper()] = value

        module.pre_run.append(_inject_environment)
        return module

    def _write_stdout(self, text: str) -> None:
        if self._config.stdout_enabled:
            _STDOUT_LOG.info("%s", text)

    def _write_stderr(self, text: str) -> None:
        # Hosted graphics stacks probe every known entry point at startup.
        if any(text.startswith(prefix) for prefix in self._config.stderr_noise_prefixes):
            return
        if self._config.stderr_enabled:
            _STDERR_LOG.warning("%s", text)

    def _is_stale(self, cycle: int, callback: str) -> bool:
        if cycle == self._cycle:
            return False
        _LOG.debug("ignored %s from superseded cycle=%d current=%d", callback, cycle, self._cycle)
        return True

    def _handle_status_text(self, cycle: int, text: str) -> None:
        if self._is_stale(cycle, "status text"):
            return
        if text.startswith(self._config.running_marker):
            self._transition("running")

    def _handle_abort(self, cycle: int, message: str) -> None:
        if self._is_stale(cycle, "abort"):
            return
        if self._flow.resolve(self._record.status, "exit") is None:
            _LOG.debug("ignored abort status=%s message=%r", self._record.status.value, message)
            return
        _LOG.warning("module aborted cycle=%d message=%r", cycle, message)
        self._record.crashed = True
        self._record.exit_code = None
        self._record.exit_text = message or _DEFAULT_ABORT_TEXT
        self._set_status(LoaderStatus.EXITED)

    def _handle_termination(self, cycle: int, code: int, info: Termination) -> None:
        if self._is_stale(cycle, "termination"):
            return
        if not isinstance(info, OrdinaryExit):
            self._handle_abort(cycle, info.message or f"exit {code}")
            return
        if self._flow.resolve(self._record.status, "exit") is None:
            _LOG.debug("ignored exit status=%s code=%d", self._record.status.value, info.code)
            return
        _LOG.info("module exited cycle=%d code=%d", cycle, info.code)
        self._record.crashed = False
        self._record.exit_code = info.code
        self._record.exit_text = None
        self._set_status(LoaderStatus.EXITED)

    def _transition(self, trigger: str) -> bool:
        target = self._flow.resolve(self._record.status, trigger, payload=self._record)
        if target is None:
            _LOG.debug("ignored trigger=%s status=%s", trigger, self._record.status.value)
            return False
        self._set_status(target)
        return True

    def _set_status(self, status: LoaderStatus) -> None:
        record = self._record
        if record.status is status:
            return
        record.status = status
        if status is not LoaderStatus.EXITED:
            record.crashed = False
        _LOG.info("status=%s%s", status.value, " (crash)" if record.crashed else "")
        # Modules may report several terminal states back to back; commit once.
        self._task_queue.call_soon(self._commit_status)

    def _commit_status(self) -> None:
        record = self._record
        status = record.status
        if record.committed_status is status:
            return
        record.committed_status = status
        self._snapshot = LoaderSnapshot(
            status=status,
            crashed=record.crashed,
            exit_code=record.exit_code,
            exit_text=record.exit_text,
            error_text=record.error_text if status is LoaderStatus.ERROR else None,
        )
        self._dispatcher.render(
            status,
            record.crashed,
            record.exit_code,
            error_text=record.error_text,
            module=self._module,
        )
        if status is LoaderStatus.EXITED:
            self._handle_exit()
        observer = self._config.status_changed
        if observer is not None:
            observer(status)

    def _handle_exit(self) -> None:
        record = self._record
        decision = self._restart.evaluate(
            crashed=record.crashed,
            current_count=record.restart_count,
        )
        record.restart_count = decision.new_count
        if decision.halt_reason is not None:
            record.halted = True
            record.error_text = decision.halt_reason
            self._transition("halt")
            return
        if decision.restart:
            record.committed_status = None
            self._restart.perform(self._reload_module)

    def _reload_module(self) -> None:
        if self._module_factory is None:
            return
        self.load_application(self._module_factory)
