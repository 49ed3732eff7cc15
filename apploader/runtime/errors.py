"""Loader exception types and the tolerated-failure policy."""

from __future__ import annotations

import logging


class LoaderConfigError(ValueError):
    """Raised at construction for loader configuration usage errors."""


# Failures a capability query may raise on a host without the capability.
PROBE_ERRORS: tuple[type[Exception], ...] = (
    RuntimeError,
    OSError,
    ValueError,
    TypeError,
    AttributeError,
    ImportError,
)


def log_recoverable(
    logger: logging.Logger,
    message: str,
    *args: object,
    level: int = logging.DEBUG,
) -> None:
    """Log a tolerated exception with its traceback."""
    logger.log(level, message, *args, exc_info=True)
