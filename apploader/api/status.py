"""Lifecycle status and termination contracts."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class LoaderStatus(Enum):
    """Lifecycle status of one hosted module."""

    CREATED = "Created"
    LOADING = "Loading"
    RUNNING = "Running"
    EXITED = "Exited"
    ERROR = "Error"


@dataclass(frozen=True, slots=True)
class OrdinaryExit:
    """Module returned from main or forced an exit with a code."""

    code: int


@dataclass(frozen=True, slots=True)
class AbnormalExit:
    """Module terminated through an unexpected failure."""

    message: str


Termination = OrdinaryExit | AbnormalExit


@dataclass(frozen=True, slots=True)
class LoaderSnapshot:
    """Committed lifecycle values exposed to the embedding host."""

    status: LoaderStatus = LoaderStatus.CREATED
    crashed: bool = False
    exit_code: int | None = None
    exit_text: str | None = None
    error_text: str | None = None


__all__ = [
    "AbnormalExit",
    "LoaderSnapshot",
    "LoaderStatus",
    "OrdinaryExit",
    "Termination",
]
