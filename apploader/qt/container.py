"""Qt widget adapter for managed-mode loader containers."""

from __future__ import annotations

from collections.abc import Callable

from apploader.api.display import CanvasSurface, DisplayContainer, TextSurface

try:
    from PyQt6.QtCore import Qt
    from PyQt6.QtWidgets import QLabel, QVBoxLayout, QWidget
except Exception as exc:  # pragma: no cover
    raise RuntimeError("PyQt6 is required for Qt containers. Install dependency 'PyQt6'.") from exc

CanvasWidgetFactory = Callable[[CanvasSurface, QWidget], QWidget]


def create_render_widget(surface: CanvasSurface, parent: QWidget) -> QWidget:
    """Create a rendercanvas Qt widget the hosted module can draw into."""
    try:
        from rendercanvas.qt import QRenderWidget
    except Exception as exc:  # pragma: no cover
        raise RuntimeError(
            "rendercanvas is required for Qt render targets. Install dependency 'rendercanvas'."
        ) from exc
    widget = QRenderWidget(parent)
    widget.setObjectName(surface.style_class)
    return widget


class QtContainer(DisplayContainer):
    """Display container backed by a QWidget with a vertical layout."""

    def __init__(
        self,
        widget: QWidget,
        *,
        canvas_factory: CanvasWidgetFactory | None = None,
    ) -> None:
        self._widget = widget
        self._canvas_factory = canvas_factory or create_render_widget
        layout = widget.layout()
        if layout is None:
            layout = QVBoxLayout(widget)
            layout.setContentsMargins(0, 0, 0, 0)
        self._layout = layout

    @property
    def widget(self) -> QWidget:
        return self._widget

    def clear(self) -> None:
        while self._layout.count():
            item = self._layout.takeAt(0)
            child = item.widget() if item is not None else None
            if child is not None:
                child.setParent(None)
                child.deleteLater()

    def append(self, surface: object) -> None:
        self._layout.addWidget(self._to_widget(surface))

    def first_surface(self) -> object | None:
        if self._layout.count() == 0:
            return None
        item = self._layout.itemAt(0)
        return item.widget() if item is not None else None

    def _to_widget(self, surface: object) -> QWidget:
        if isinstance(surface, QWidget):
            return surface
        if isinstance(surface, TextSurface):
            label = QLabel(surface.text, self._widget)
            label.setObjectName(surface.style_class)
            label.setAlignment(Qt.AlignmentFlag.AlignCenter)
            return label
        if isinstance(surface, CanvasSurface):
            return self._canvas_factory(surface, self._widget)
        raise TypeError(f"Unsupported presentation surface: {type(surface).__name__}")
