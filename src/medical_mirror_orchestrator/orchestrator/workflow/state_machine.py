from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class RunState(str, Enum):
    RUNNING = "running"
    DONE = "done"
    HALTED = "halted"


ALLOWED_TRANSITIONS: dict[RunState, set[RunState]] = {
    RunState.RUNNING: {RunState.RUNNING, RunState.DONE, RunState.HALTED},
    RunState.DONE: set(),
    RunState.HALTED: set(),
}

TERMINAL_STATES: frozenset[RunState] = frozenset({RunState.DONE, RunState.HALTED})


class IllegalTransitionError(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class RunSnapshot:
    """Where a single engine run currently is.

    `step_index` is the index of the next step to attempt while RUNNING, and the
    index of the last attempted step once HALTED.
    """

    state: RunState
    step_index: int = 0

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    def to_json(self) -> dict[str, object]:
        return {"state": self.state.value, "step_index": self.step_index}


def transition(*, current: RunSnapshot, to: RunState) -> RunSnapshot:
    """Advance a run.

    RUNNING -> RUNNING moves on to the next step; RUNNING -> HALTED freezes the
    index at the failed step; DONE and HALTED accept no further transitions.
    """

    allowed = ALLOWED_TRANSITIONS.get(current.state, set())
    if to not in allowed:
        raise IllegalTransitionError(f"Illegal transition: {current.state.value} -> {to.value}")
    if to is RunState.RUNNING:
        return RunSnapshot(state=to, step_index=current.step_index + 1)
    return RunSnapshot(state=to, step_index=current.step_index)
