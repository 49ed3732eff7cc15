"""Loader logging implementation."""

from __future__ import annotations

import json
import logging
import queue
from datetime import UTC, datetime
from logging.handlers import QueueHandler, QueueListener
from pathlib import Path

from apploader.api.logging import LoaderLoggingConfig
from apploader.runtime.settings import load_loader_settings

MODULE_STDOUT_LOGGER = "apploader.module.stdout"
MODULE_STDERR_LOGGER = "apploader.module.stderr"
_MODULE_STREAMS = {MODULE_STDOUT_LOGGER: "stdout", MODULE_STDERR_LOGGER: "stderr"}
_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_RECORD_ATTRIBUTES = frozenset(
    logging.LogRecord("", logging.NOTSET, "", 0, "", None, None).__dict__
) | {"message", "asctime"}

_listener: QueueListener | None = None


class JsonFormatter(logging.Formatter):
    """One JSON object per record; `extra=` fields land under `fields`."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, object] = {
            "ts": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        stream = _MODULE_STREAMS.get(record.name)
        if stream is not None:
            payload["stream"] = stream
        fields = {k: v for k, v in vars(record).items() if k not in _RECORD_ATTRIBUTES}
        if fields:
            payload["fields"] = fields
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True, default=str)


def configure_loader_logging(config: LoaderLoggingConfig) -> None:
    """Replace root handlers; a file sink is drained on a listener thread."""
    global _listener

    shutdown_loader_logging()
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(getattr(logging, config.level_name.upper(), logging.INFO))

    handlers = _build_handlers(config)
    if len(handlers) == 1:
        root.addHandler(handlers[0])
        return
    records: queue.SimpleQueue[logging.LogRecord] = queue.SimpleQueue()
    root.addHandler(QueueHandler(records))
    _listener = QueueListener(records, *handlers, respect_handler_level=True)
    _listener.start()


def setup_loader_logging() -> None:
    """Configure logging from env settings unless the host already did."""
    if logging.getLogger().handlers:
        return
    settings = load_loader_settings()
    configure_loader_logging(
        LoaderLoggingConfig(
            level_name=settings.log_level,
            console_format=settings.log_format,
            file_path=settings.log_file,
        )
    )


def shutdown_loader_logging() -> None:
    """Stop the file listener, flushing queued records."""
    global _listener

    if _listener is None:
        return
    _listener.stop()
    for handler in _listener.handlers:
        handler.close()
    _listener = None


def _build_handlers(config: LoaderLoggingConfig) -> list[logging.Handler]:
    console = logging.StreamHandler()
    console.setFormatter(_formatter(config.console_format))
    handlers: list[logging.Handler] = [console]
    if config.file_path:
        path = Path(config.file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        sink = logging.FileHandler(path, mode="a", encoding="utf-8", delay=True)
        sink.setFormatter(_formatter(config.file_format))
        handlers.append(sink)
    return handlers


def _formatter(kind: str) -> logging.Formatter:
    if kind.strip().lower() == "json":
        return JsonFormatter()
    return logging.Formatter(_TEXT_FORMAT)
