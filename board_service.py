"""
board_service.py
----------------
The operations a request handler calls: create a board, read its initial
state, advance it, read one step, and run it to a stable state.

Unknown boards and never-materialized steps come back as `NotFound` values and
an exhausted step budget as `ConvergenceFailure`, so callers can tell the three
outcomes apart without catching exceptions. Malformed input raises
`FormatError` / `ValidationError`; storage errors propagate unchanged.
"""
from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Union

from board_store import BoardStore
from boards import Board, Generation
from convergence import run_to_convergence
from event_log import log_event
from grid_codec import Grid, decode, encode
from life_errors import (
    ConvergenceFailure,
    NoGenerationsError,
    NotFound,
    StorageError,
    ValidationError,
)
from sequencer import GenerationSequencer


class BoardService:
    def __init__(self, store: BoardStore, *, event_log: Optional[Path] = None):
        self.store = store
        self.event_log = event_log
        self.sequencer = GenerationSequencer(store, event_log=event_log)

    def _board(self, board_id: int) -> Union[Board, NotFound]:
        board = self.store.load_board(board_id)
        return board if board is not None else NotFound("board", board_id)

    def create(self, initial_state: str, rows: int, cols: int) -> int:
        """
        Store a new board plus its generation 0 in one transaction and return its id.
        `rows`/`cols` must match the decoded initial state.
        """
        grid = decode(initial_state)
        if rows < 0 or cols < 0:
            raise ValidationError("rows and cols must be non-negative")
        if (grid.rows, grid.cols) != (rows, cols):
            raise ValidationError(
                f"initial state is {grid.rows}x{grid.cols}, but rows={rows} cols={cols} were given"
            )

        with self.store.transaction():
            board = self.store.create_board(encode(grid), rows, cols)
            self.sequencer.initialize(board)

        log_event("board_created", log_file=self.event_log, board=board.id, rows=rows, cols=cols)
        return board.id

    def create_from_grid(self, grid: Grid) -> int:
        return self.create(encode(grid), grid.rows, grid.cols)

    def get_initial_state(self, board_id: int) -> Union[str, NotFound]:
        board = self._board(board_id)
        if isinstance(board, NotFound):
            return board
        generation = self.sequencer.generation_at(board, 0)
        if generation is None:
            return NotFound("step", 0)
        return generation.state

    def advance_and_get(self, board_id: int) -> Union[str, NotFound]:
        board = self._board(board_id)
        if isinstance(board, NotFound):
            return board
        try:
            return self.sequencer.advance(board).state
        except (NoGenerationsError, StorageError):
            if self.store.load_board(board_id) is None:
                return NotFound("board", board_id)
            raise

    def get_at_step(self, board_id: int, step: int) -> Union[str, NotFound]:
        board = self._board(board_id)
        if isinstance(board, NotFound):
            return board
        generation = self.sequencer.generation_at(board, step)
        if generation is None:
            return NotFound("step", step)
        return generation.state

    def get_final_state(self, board_id: int, max_steps: int) -> Union[str, NotFound, ConvergenceFailure]:
        board = self._board(board_id)
        if isinstance(board, NotFound):
            return board
        if max_steps < 0:
            raise ValidationError("max_steps must be non-negative")
        try:
            result = run_to_convergence(self.sequencer, board, max_steps, event_log=self.event_log)
        except (NoGenerationsError, StorageError):
            # deleted by another request after it was loaded here
            if self.store.load_board(board_id) is None:
                return NotFound("board", board_id)
            raise
        if isinstance(result, ConvergenceFailure):
            return result
        return encode(result)

    def history(self, board_id: int) -> Union[List[Generation], NotFound]:
        board = self._board(board_id)
        if isinstance(board, NotFound):
            return board
        return self.sequencer.history(board)

    def delete(self, board_id: int) -> Union[int, NotFound]:
        """Remove a board together with all of its generations."""
        board = self._board(board_id)
        if isinstance(board, NotFound):
            return board
        if not self.store.delete_board(board):
            return NotFound("board", board_id)
        self.sequencer.forget(board)
        log_event("board_deleted", log_file=self.event_log, board=board_id)
        return board_id
