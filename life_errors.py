from __future__ import annotations
from dataclasses import dataclass


class LifeError(Exception):
    """Base class for every error raised by the board engine."""


class FormatError(LifeError, ValueError):
    """Grid text is ragged or uses a symbol outside the '0'/'1' alphabet."""


class ValidationError(LifeError, ValueError):
    """Board parameters are inconsistent (e.g. rows/cols vs. initial state)."""


class NoGenerationsError(LifeError, RuntimeError):
    """A board was advanced before generation 0 was persisted."""


class StorageError(LifeError):
    pass


class StepConflictError(StorageError):
    """
    An append did not carry the next step index for its board.
    Raised instead of writing a duplicate or leaving a gap.
    """


@dataclass(frozen=True)
class NotFound:
    '''
    Explicit absent result: an unknown board id or a step that was never materialized.
    '''
    kind: str  # "board" or "step"
    key: int

    @property
    def message(self) -> str:
        return f"{self.kind.capitalize()} not found"


@dataclass(frozen=True)
class ConvergenceFailure:
    """
    The step budget ran out before two consecutive generations were equal.
    This is an expected outcome, not a fault.
    """
    board_id: int
    max_steps: int
    last_step: int

    @property
    def message(self) -> str:
        return "Board did not reach a stable state"
