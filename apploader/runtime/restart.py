"""Restart policy decisions for terminated modules."""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Callable
from dataclasses import dataclass

from apploader.api.config import RestartMode, RestartType

_LOG = logging.getLogger("apploader.restart")

RESTART_LIMIT_HALT_TEXT = (
    "Error: This application has crashed too many times and has been disabled. "
    "Reload to try again."
)


@dataclass(frozen=True, slots=True)
class RestartDecision:
    """Outcome of one restart policy evaluation."""

    restart: bool
    new_count: int
    halt_reason: str | None = None

    @property
    def halted(self) -> bool:
        return self.halt_reason is not None


def should_restart(
    mode: RestartMode,
    crashed: bool,
    current_count: int,
    limit: int,
) -> RestartDecision:
    """Decide whether a terminated module is loaded again."""
    # current_count is the count before this termination; the new count must not exceed limit.
    triggered = mode is RestartMode.RESTART_ON_EXIT or (
        mode is RestartMode.RESTART_ON_CRASH and crashed
    )
    if not triggered:
        return RestartDecision(restart=False, new_count=current_count)
    new_count = current_count + 1
    if new_count > limit:
        return RestartDecision(
            restart=False,
            new_count=new_count,
            halt_reason=RESTART_LIMIT_HALT_TEXT,
        )
    return RestartDecision(restart=True, new_count=new_count)


def reload_host_process() -> None:
    """Replace the current host process with a fresh copy of itself."""
    _LOG.warning("reloading host process argv=%r", sys.argv)
    os.execv(sys.executable, [sys.executable, *sys.argv])


class RestartController:
    """Applies a restart policy to terminated load cycles.

    Counting is scoped to one in-memory session. A host reload discards the
    count along with everything else, so reload loops are not bounded by the
    limit.
    """

    def __init__(
        self,
        *,
        mode: RestartMode,
        restart_type: RestartType,
        limit: int,
        reload_host: Callable[[], None] | None = None,
    ) -> None:
        self._mode = mode
        self._restart_type = restart_type
        self._limit = limit
        self._reload_host = reload_host or reload_host_process

    @property
    def mode(self) -> RestartMode:
        return self._mode

    @property
    def restart_type(self) -> RestartType:
        return self._restart_type

    @property
    def limit(self) -> int:
        return self._limit

    def evaluate(self, *, crashed: bool, current_count: int) -> RestartDecision:
        decision = should_restart(self._mode, crashed, current_count, self._limit)
        if decision.halted:
            _LOG.warning(
                "restart limit exhausted count=%d limit=%d", decision.new_count, self._limit
            )
        elif decision.restart:
            _LOG.warning(
                "restarting module attempt=%d limit=%d type=%s",
                decision.new_count,
                self._limit,
                self._restart_type.value,
            )
        return decision

    def perform(self, reload_module: Callable[[], None]) -> None:
        """Run the restart action for the configured restart type."""
        if self._restart_type is RestartType.RELOAD_HOST:
            self._reload_host()
            return
        reload_module()
