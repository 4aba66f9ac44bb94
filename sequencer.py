from __future__ import annotations

import threading
from pathlib import Path
from typing import Dict, List, Optional

from board_store import BoardStore
from boards import Board, Generation
from event_log import log_event
from grid_codec import decode, encode
from life_errors import NoGenerationsError
from simulate import step


class GenerationSequencer:
    """
    Append-only log of generations for each board.

    Exposes exactly two ways to touch the log: append the next generation
    (`initialize` / `advance`) and read one generation by exact step
    (`generation_at`). Appends to the same board are serialized with a
    per-board lock; the store rejects any append that is not the next step.
    """

    def __init__(self, store: BoardStore, *, event_log: Optional[Path] = None):
        self.store = store
        self.event_log = event_log
        self._locks: Dict[int, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, board: Board) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(board.id, threading.Lock())

    def forget(self, board: Board) -> None:
        """Drop the append lock of a deleted board."""
        with self._locks_guard:
            self._locks.pop(board.id, None)

    def initialize(self, board: Board) -> Generation:
        '''
        Persist generation 0 from the board's initial state.
        Decoding first means a malformed initial state never reaches storage.
        '''
        state = encode(decode(board.initial_state))
        generation = Generation(board.id, 0, state)
        with self._lock_for(board):
            self.store.persist_generation(board, generation)
        return generation

    def advance(self, board: Board) -> Generation:
        """Compute, persist and return the generation after the last one."""
        with self._lock_for(board):
            count = self.store.count_generations(board)
            if count == 0:
                raise NoGenerationsError(f"board {board.id} has no generation 0")
            last = self.store.load_generation(board, count - 1)
            if last is None:
                raise NoGenerationsError(f"board {board.id} is missing step {count - 1}")

            generation = Generation(board.id, count, encode(step(decode(last.state))))
            self.store.persist_generation(board, generation)

        log_event("generation_advanced", log_file=self.event_log, board=board.id, step=generation.step)
        return generation

    def generation_at(self, board: Board, step_index: int) -> Optional[Generation]:
        # read-only: steps that were never advanced to are simply absent
        if step_index < 0:
            return None
        return self.store.load_generation(board, step_index)

    def count(self, board: Board) -> int:
        return self.store.count_generations(board)

    def history(self, board: Board) -> List[Generation]:
        generations = []
        for idx in range(self.count(board)):
            generation = self.store.load_generation(board, idx)
            if generation is not None:
                generations.append(generation)
        return generations
