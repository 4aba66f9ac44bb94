from __future__ import annotations
from pathlib import Path
from typing import Optional, Union

from boards import Board
from event_log import log_event
from grid_codec import Grid, decode
from life_errors import ConvergenceFailure, NoGenerationsError
from sequencer import GenerationSequencer


def _grid_at(sequencer: GenerationSequencer, board: Board, step_index: int) -> Grid:
    generation = sequencer.generation_at(board, step_index)
    if generation is None:
        raise NoGenerationsError(f"board {board.id} is missing step {step_index}")
    return decode(generation.state)


def is_stable(sequencer: GenerationSequencer, board: Board) -> bool:
    """True when the last two persisted generations hold the same grid."""
    count = sequencer.count(board)
    if count < 2:
        return False
    return _grid_at(sequencer, board, count - 1) == _grid_at(sequencer, board, count - 2)


def run_to_convergence(
    sequencer: GenerationSequencer,
    board: Board,
    max_steps: int,
    *,
    event_log: Optional[Path] = None,
) -> Union[Grid, ConvergenceFailure]:
    '''
    Advance the board until a generation equals its predecessor (a fixed point),
    performing at most `max_steps` advances.

    Only period-1 stability counts: an oscillator such as a blinker keeps
    changing every step and ends in ConvergenceFailure however large the budget.
    If the stored history already ends in two equal generations, the grid is
    returned without advancing. With max_steps == 0 only the existing history
    is inspected.
    '''
    if max_steps < 0:
        raise ValueError("max_steps must be non-negative")

    count = sequencer.count(board)
    if count == 0:
        raise NoGenerationsError(f"board {board.id} has no generation 0")

    current = _grid_at(sequencer, board, count - 1)
    if count >= 2 and _grid_at(sequencer, board, count - 2) == current:
        log_event("convergence_reached", log_file=event_log, board=board.id, step=count - 1, advanced=0)
        return current

    last_step = count - 1
    for advanced in range(1, max_steps + 1):
        generation = sequencer.advance(board)
        last_step = generation.step
        nxt = decode(generation.state)
        if nxt == current:
            log_event("convergence_reached", log_file=event_log, board=board.id, step=last_step, advanced=advanced)
            return nxt
        current = nxt

    log_event("convergence_exhausted", log_file=event_log, board=board.id, step=last_step, max_steps=max_steps)
    return ConvergenceFailure(board_id=board.id, max_steps=max_steps, last_step=last_step)
