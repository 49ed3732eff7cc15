"""Generic transition-table resolution."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeAlias, TypeVar

TState = TypeVar("TState")


@dataclass(frozen=True, slots=True)
class FlowContext(Generic[TState]):
    """Transition resolution context."""

    trigger: str
    source: TState
    target: TState
    payload: object | None = None


TransitionGuard: TypeAlias = Callable[[FlowContext[TState]], bool]


@dataclass(frozen=True, slots=True)
class FlowTransition(Generic[TState]):
    """Transition definition. `sources=None` matches any current state."""

    trigger: str
    sources: frozenset[TState] | None
    target: TState
    guard: TransitionGuard[TState] | None = None


class RuntimeFlowProgram(Generic[TState]):
    """Reusable transition table for resolving next state from trigger."""

    def __init__(self, transitions: tuple[FlowTransition[TState], ...]) -> None:
        self._transitions = transitions

    @property
    def transitions(self) -> tuple[FlowTransition[TState], ...]:
        return self._transitions

    def resolve(
        self, current_state: TState, trigger: str, *, payload: object | None = None
    ) -> TState | None:
        """Return the target of the first matching transition, if any."""
        for transition in self._transitions:
            if transition.trigger != trigger:
                continue
            if transition.sources is not None and current_state not in transition.sources:
                continue
            context = FlowContext(
                trigger=trigger,
                source=current_state,
                target=transition.target,
                payload=payload,
            )
            if transition.guard is not None and not transition.guard(context):
                continue
            return transition.target
        return None


FlowProgram = RuntimeFlowProgram
