"""Status-driven presentation dispatch for loader containers."""

from __future__ import annotations

import logging
import random
from collections.abc import Sequence
from dataclasses import dataclass, field

from apploader.api.display import (
    CanvasSurface,
    DisplayContainer,
    PresentationCallbacks,
    PresentationContext,
    TextSurface,
)
from apploader.api.module import ModuleCallbacks
from apploader.api.status import LoaderStatus

_LOG = logging.getLogger("apploader.display")

LOADING_TEXT = "Loading application ..."
CRASH_SYMBOLS: tuple[str, ...] = (
    "\U0001F615",
    "\U0001F614",
    "\U0001F644",
    "\U0001F928",
    "\U0001F62C",
    "\U0001F915",
    "☹",
    "\U0001F62E",
    "\U0001F61E",
    "\U0001F633",
)


@dataclass(slots=True)
class MemoryContainer(DisplayContainer):
    """In-process container for headless hosts."""

    name: str = "container"
    children: list[object] = field(default_factory=list)

    def clear(self) -> None:
        self.children.clear()

    def append(self, surface: object) -> None:
        self.children.append(surface)

    def first_surface(self) -> object | None:
        return self.children[0] if self.children else None


def default_error_surface(context: PresentationContext) -> TextSurface:
    return TextSurface(style_class="LoaderError", text=context.error_text or "")


def default_loading_surface(context: PresentationContext) -> TextSurface:
    _ = context
    return TextSurface(style_class="LoaderLoading", text=LOADING_TEXT)


def default_running_surface(context: PresentationContext) -> CanvasSurface:
    return CanvasSurface(surface_id=f"{id(context.container)}")


def default_exited_surface(context: PresentationContext) -> TextSurface | None:
    if not context.crashed:
        return None
    return TextSurface(style_class="LoaderExit", text=random.choice(CRASH_SYMBOLS))


def with_default_presentation(callbacks: PresentationCallbacks) -> PresentationCallbacks:
    """Fill every missing callback with the managed-mode default."""
    return PresentationCallbacks(
        on_error=callbacks.on_error or default_error_surface,
        on_loading=callbacks.on_loading or default_loading_surface,
        on_running=callbacks.on_running or default_running_surface,
        on_exited=callbacks.on_exited or default_exited_surface,
    )


class DisplayDispatcher:
    """Render one of four presentations for the committed status.

    With containers (managed mode) every container is cleared and receives
    the surface built by one callback invocation for that container. Without
    containers (external mode) the callback is invoked once with no
    container and nothing else is touched.
    """

    def __init__(
        self,
        *,
        containers: Sequence[DisplayContainer] | None,
        presentation: PresentationCallbacks,
    ) -> None:
        self._containers = tuple(containers) if containers is not None else None
        self._presentation = presentation

    @property
    def managed(self) -> bool:
        return self._containers is not None

    def render(
        self,
        status: LoaderStatus,
        crashed: bool,
        exit_code: int | None,
        *,
        error_text: str | None = None,
        module: ModuleCallbacks | None = None,
    ) -> None:
        if status is LoaderStatus.CREATED:
            return
        # Clean exits leave the display untouched.
        if status is LoaderStatus.EXITED and not crashed:
            return
        callback = self._presentation.for_status(status)
        if callback is None:
            _LOG.debug("no presentation for status=%s", status.value)
            return
        primary: object | None = None
        if self._containers is None:
            primary = callback(
                PresentationContext(
                    status=status,
                    error_text=error_text,
                    crashed=crashed,
                    exit_code=exit_code,
                )
            )
        else:
            for container in self._containers:
                container.clear()
                surface = callback(
                    PresentationContext(
                        status=status,
                        container=container,
                        error_text=error_text,
                        crashed=crashed,
                        exit_code=exit_code,
                    )
                )
                if surface is not None:
                    container.append(surface)
            if self._containers:
                primary = self._containers[0].first_surface()
        _LOG.debug("rendered status=%s managed=%s", status.value, self.managed)
        if status is LoaderStatus.RUNNING and module is not None and module.canvas is None:
            module.canvas = primary
