"""One-shot lifecycle gate for a terminal session.

The gate is a small state machine. next_state() is a pure function of
the current state and the observed preconditions; LifecycleGate applies
it on every relevant event and runs the initialization or disposal
side effect on the transitions that call for one.

    IDLE --(all preconditions)--> READY --(initialize)--> INITIALIZED
      \\                                                       |
       +--------------(closing)--------> DISPOSED <--(closing)-+
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from termhost.domain.models import LifecycleState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GateConditions:
    """Preconditions observed at one evaluation of the gate."""

    widget_ready: bool = False
    container_ready: bool = False
    editor_available: bool = False
    fit_available: bool = False
    loading: bool = True
    closing: bool = False

    @property
    def satisfied(self) -> bool:
        return (
            self.widget_ready
            and self.container_ready
            and self.editor_available
            and self.fit_available
            and self.loading
        )


def next_state(state: LifecycleState, conditions: GateConditions) -> LifecycleState:
    if state is LifecycleState.DISPOSED or conditions.closing:
        return LifecycleState.DISPOSED
    if state is LifecycleState.INITIALIZED:
        return LifecycleState.INITIALIZED
    if conditions.satisfied:
        return LifecycleState.READY
    return LifecycleState.IDLE


class LifecycleGate:
    """Runs `initialize` at most once and `dispose` at most once.

    `dispose` is only called when a widget exists at the time the gate
    enters DISPOSED; closing before the widget was constructed is a no-op.
    """

    def __init__(self, initialize: Callable[[], None], dispose: Callable[[], None]) -> None:
        self._initialize = initialize
        self._dispose = dispose
        self._state = LifecycleState.IDLE
        self.initialize_count = 0
        self.dispose_count = 0

    @property
    def state(self) -> LifecycleState:
        return self._state

    def evaluate(self, conditions: GateConditions) -> LifecycleState:
        previous = self._state
        state = next_state(previous, conditions)

        if state is LifecycleState.READY:
            # Committed before running so re-entrant evaluations are no-ops
            self._state = LifecycleState.INITIALIZED
            self.initialize_count += 1
            logger.debug("Lifecycle gate: %s -> ready -> initialized", previous.value)
            self._initialize()
            return self._state

        if state is LifecycleState.DISPOSED and previous is not LifecycleState.DISPOSED:
            self._state = state
            logger.debug("Lifecycle gate: %s -> disposed", previous.value)
            if conditions.widget_ready:
                self.dispose_count += 1
                self._dispose()
            return state

        self._state = state
        return state
