"""Hosted module callback contract."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TypeAlias

from apploader.api.status import Termination


@dataclass(slots=True)
class ModuleCallbacks:
    """Callback bundle handed to a module factory once per load cycle.

    The hosted module drains `pre_run` before starting and reads its
    environment from `env`. `canvas` is the render target; a module may set
    it before reporting running, otherwise the loader assigns one.
    """

    resolve_file_path: Callable[[str], str]
    report_status_text: Callable[[str], None]
    write_stdout: Callable[[str], None]
    write_stderr: Callable[[str], None]
    on_abnormal_termination: Callable[[str], None]
    on_termination: Callable[[int, Termination], None]
    monitor_run_dependencies: Callable[[int], None]
    pre_run: list[Callable[[], None]] = field(default_factory=list)
    env: dict[str, str] = field(default_factory=dict)
    canvas: object | None = None


ModuleFactory: TypeAlias = Callable[[ModuleCallbacks], None]


__all__ = ["ModuleCallbacks", "ModuleFactory"]
