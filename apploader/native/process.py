"""Host a natively-compiled executable as a loader module."""

from __future__ import annotations

import asyncio
import logging
import os
import signal
from collections.abc import Callable, Sequence

from apploader.api.module import ModuleCallbacks, ModuleFactory
from apploader.api.status import OrdinaryExit

_LOG = logging.getLogger("apploader.native")

RUNNING_STATUS_TEXT = "Running..."
_READ_CHUNK_BYTES = 64 * 1024


class ProcessModule:
    """One hosted executable run, reporting through a callback bundle."""

    def __init__(
        self,
        callbacks: ModuleCallbacks,
        *,
        executable: str,
        args: Sequence[str] = (),
    ) -> None:
        self._callbacks = callbacks
        self._executable = executable
        self._args = tuple(args)
        self._process: asyncio.subprocess.Process | None = None

    @property
    def process(self) -> asyncio.subprocess.Process | None:
        return self._process

    async def run(self) -> None:
        callbacks = self._callbacks
        while callbacks.pre_run:
            callbacks.pre_run.pop(0)()
        path = callbacks.resolve_file_path(self._executable)
        env = {**os.environ, **callbacks.env}
        callbacks.monitor_run_dependencies(1)
        try:
            process = await asyncio.create_subprocess_exec(
                path,
                *self._args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=env,
            )
        except (OSError, ValueError) as exc:
            _LOG.error("failed to start module path=%r: %s", path, exc)
            callbacks.on_abnormal_termination(f"failed to start {path}: {exc}")
            return
        self._process = process
        callbacks.monitor_run_dependencies(0)
        _LOG.info("module started path=%s pid=%d", path, process.pid)
        callbacks.report_status_text(RUNNING_STATUS_TEXT)
        failure: str | None = None
        try:
            if process.stdout is None or process.stderr is None:
                raise RuntimeError("module output pipes are not connected")
            await asyncio.gather(
                _pump_lines(process.stdout, callbacks.write_stdout),
                _pump_lines(process.stderr, callbacks.write_stderr),
            )
        except Exception as exc:
            _LOG.exception("module output failed pid=%d", process.pid)
            failure = f"{type(exc).__name__}: {exc}"
            self.terminate()
        finally:
            code = await process.wait()
        if failure is not None:
            callbacks.on_abnormal_termination(failure)
            return
        if code < 0:
            callbacks.on_abnormal_termination(f"terminated by signal {_signal_name(-code)}")
            return
        callbacks.on_termination(code, OrdinaryExit(code))

    def terminate(self) -> None:
        """Ask the running executable to stop."""
        if self._process is not None and self._process.returncode is None:
            self._process.terminate()


def create_process_module_factory(
    executable: str,
    args: Sequence[str] = (),
    *,
    loop: asyncio.AbstractEventLoop | None = None,
    on_started: Callable[[ProcessModule], None] | None = None,
) -> ModuleFactory:
    """Return a module factory starting `executable` on each load cycle.

    The factory must be invoked while `loop` (or the running loop) can
    schedule tasks; the executable is spawned asynchronously.
    """
    tasks: set[asyncio.Task[None]] = set()

    def _factory(callbacks: ModuleCallbacks) -> None:
        target_loop = loop or asyncio.get_running_loop()
        module = ProcessModule(callbacks, executable=executable, args=args)
        if on_started is not None:
            on_started(module)
        task = target_loop.create_task(module.run())
        tasks.add(task)
        task.add_done_callback(tasks.discard)
        task.add_done_callback(_log_task_failure)

    return _factory


def _signal_name(number: int) -> str:
    try:
        return signal.Signals(number).name
    except ValueError:
        return str(number)


async def _pump_lines(stream: asyncio.StreamReader, sink: Callable[[str], None]) -> None:
    # Chunked reads: a single line may exceed the stream buffer limit.
    pending = b""
    while True:
        chunk = await stream.read(_READ_CHUNK_BYTES)
        if not chunk:
            break
        pending += chunk
        *lines, pending = pending.split(b"\n")
        for line in lines:
            sink(_decode_line(line))
    if pending:
        sink(_decode_line(pending))


def _decode_line(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace").rstrip("\r")


def _log_task_failure(task: asyncio.Task[None]) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        _LOG.error("module task failed", exc_info=exc)
