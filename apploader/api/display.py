"""Display container and presentation surface contracts."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol, TypeAlias

from apploader.api.status import LoaderStatus


@dataclass(frozen=True, slots=True)
class TextSurface:
    """Placeholder text surface with a style class."""

    style_class: str
    text: str


@dataclass(frozen=True, slots=True)
class CanvasSurface:
    """Render-target surface handed to the hosted module."""

    surface_id: str
    style_class: str = "LoaderCanvas"
    provider: object | None = None


class DisplayContainer(Protocol):
    """Opaque display surface owned by a managed loader."""

    def clear(self) -> None:
        """Remove all existing children."""

    def append(self, surface: object) -> None:
        """Append one presentation surface."""

    def first_surface(self) -> object | None:
        """Return the primary (first) child surface, if any."""


@dataclass(frozen=True, slots=True)
class PresentationContext:
    """Arguments passed to every presentation callback."""

    status: LoaderStatus
    container: DisplayContainer | None = None
    error_text: str | None = None
    crashed: bool = False
    exit_code: int | None = None


PresentationCallback: TypeAlias = Callable[[PresentationContext], object | None]


@dataclass(frozen=True, slots=True)
class PresentationCallbacks:
    """Per-status presentation callbacks."""

    on_error: PresentationCallback | None = None
    on_loading: PresentationCallback | None = None
    on_running: PresentationCallback | None = None
    on_exited: PresentationCallback | None = None

    def for_status(self, status: LoaderStatus) -> PresentationCallback | None:
        if status is LoaderStatus.ERROR:
            return self.on_error
        if status is LoaderStatus.LOADING:
            return self.on_loading
        if status is LoaderStatus.RUNNING:
            return self.on_running
        if status is LoaderStatus.EXITED:
            return self.on_exited
        return None

    def is_empty(self) -> bool:
        return (
            self.on_error is None
            and self.on_loading is None
            and self.on_running is None
            and self.on_exited is None
        )


__all__ = [
    "CanvasSurface",
    "DisplayContainer",
    "PresentationCallback",
    "PresentationCallbacks",
    "PresentationContext",
    "TextSurface",
]
