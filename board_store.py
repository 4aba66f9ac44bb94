"""
board_store.py
--------------
Persistence for boards and their generations.

Two stores share one interface:
  - MemoryStore   dictionaries, for tests and throwaway sessions
  - DuckDBStore   a DuckDB file (or ":memory:") used by the CLI

Both refuse any generation whose step is not the next index for its board, so
the 0..N sequence can never gain a duplicate or a gap, and both delete a
board's generations explicitly before the board itself.
"""
from __future__ import annotations

import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Protocol

import backoff
import duckdb

from boards import Board, Generation
from life_errors import StepConflictError, StorageError


class BoardStore(Protocol):
    def create_board(self, initial_state: str, rows: int, cols: int) -> Board:
        ...

    def load_board(self, board_id: int) -> Optional[Board]:
        ...

    def persist_generation(self, board: Board, generation: Generation) -> None:
        ...

    def load_generation(self, board: Board, step: int) -> Optional[Generation]:
        ...

    def count_generations(self, board: Board) -> int:
        ...

    def delete_board(self, board: Board) -> bool:
        ...

    def transaction(self):
        ...

    def close(self) -> None:
        ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _check_append(board: Board, generation: Generation, count: int) -> None:
    if generation.board_id != board.id:
        raise StorageError(
            f"generation belongs to board {generation.board_id}, not board {board.id}"
        )
    if generation.step != count:
        raise StepConflictError(
            f"board {board.id}: expected step {count}, got {generation.step}"
        )


class MemoryStore:
    def __init__(self) -> None:
        self._boards: Dict[int, Board] = {}
        self._generations: Dict[int, List[Generation]] = {}
        self._next_id = 1
        self._lock = threading.RLock()

    def create_board(self, initial_state: str, rows: int, cols: int) -> Board:
        with self._lock:
            board = Board(self._next_id, initial_state, rows, cols, created_at=_utcnow())
            self._next_id += 1
            self._boards[board.id] = board
            self._generations[board.id] = []
            return board

    def load_board(self, board_id: int) -> Optional[Board]:
        with self._lock:
            return self._boards.get(board_id)

    def persist_generation(self, board: Board, generation: Generation) -> None:
        with self._lock:
            if board.id not in self._boards:
                raise StorageError(f"board {board.id} does not exist")
            history = self._generations[board.id]
            _check_append(board, generation, len(history))
            history.append(generation)

    def load_generation(self, board: Board, step: int) -> Optional[Generation]:
        with self._lock:
            history = self._generations.get(board.id, [])
            if 0 <= step < len(history):
                return history[step]
            return None

    def count_generations(self, board: Board) -> int:
        with self._lock:
            return len(self._generations.get(board.id, []))

    def delete_board(self, board: Board) -> bool:
        with self._lock:
            if board.id not in self._boards:
                return False
            del self._generations[board.id]
            del self._boards[board.id]
            return True

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Undo every change made inside the block if it raises."""
        with self._lock:
            boards = dict(self._boards)
            generations = {k: list(v) for k, v in self._generations.items()}
            next_id = self._next_id
            try:
                yield
            except BaseException:
                self._boards = boards
                self._generations = generations
                self._next_id = next_id
                raise

    def close(self) -> None:
        pass

    def __enter__(self) -> "MemoryStore":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


_SCHEMA = (
    "CREATE SEQUENCE IF NOT EXISTS board_ids START 1",
    """
    CREATE TABLE IF NOT EXISTS boards (
        id BIGINT PRIMARY KEY,
        initial_state VARCHAR NOT NULL,
        "rows" INTEGER NOT NULL,
        "cols" INTEGER NOT NULL,
        created_at TIMESTAMP NOT NULL
    )
    """,
    # no FOREIGN KEY: the cascade on delete is done by DuckDBStore.delete_board
    """
    CREATE TABLE IF NOT EXISTS generations (
        board_id BIGINT NOT NULL,
        step INTEGER NOT NULL,
        state VARCHAR NOT NULL,
        PRIMARY KEY (board_id, step)
    )
    """,
)


def connect(path: str, *, retry_seconds: float = 10.0) -> duckdb.DuckDBPyConnection:
    """
    Open (creating if needed) a DuckDB database.
    While another process holds the file lock DuckDB raises IOException;
    retry with exponential backoff for up to `retry_seconds`.
    """
    if path != ":memory:":
        Path(path).parent.mkdir(parents=True, exist_ok=True)
    open_db = backoff.on_exception(
        backoff.expo, duckdb.IOException, max_time=retry_seconds
    )(duckdb.connect)
    return open_db(path)


class DuckDBStore:
    def __init__(self, path: str = ":memory:", *, retry_seconds: float = 10.0) -> None:
        self.path = path
        self.con = connect(path, retry_seconds=retry_seconds)
        self._lock = threading.RLock()
        self._depth = 0
        for ddl in _SCHEMA:
            self.con.execute(ddl)

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """
        BEGIN/COMMIT around the block, ROLLBACK if it raises.
        Nested use joins the outermost transaction.
        """
        with self._lock:
            if self._depth:
                self._depth += 1
                try:
                    yield
                finally:
                    self._depth -= 1
                return

            self.con.begin()
            self._depth = 1
            try:
                yield
            except BaseException:
                self.con.rollback()
                raise
            else:
                self.con.commit()
            finally:
                self._depth = 0

    def create_board(self, initial_state: str, rows: int, cols: int) -> Board:
        created_at = _utcnow()
        with self._lock:
            (board_id,) = self.con.execute(
                'INSERT INTO boards (id, initial_state, "rows", "cols", created_at) '
                "VALUES (nextval('board_ids'), ?, ?, ?, ?) RETURNING id",
                [initial_state, rows, cols, created_at],
            ).fetchone()
        return Board(int(board_id), initial_state, rows, cols, created_at=created_at)

    def load_board(self, board_id: int) -> Optional[Board]:
        with self._lock:
            row = self.con.execute(
                'SELECT id, initial_state, "rows", "cols", created_at FROM boards WHERE id = ?',
                [board_id],
            ).fetchone()
        if row is None:
            return None
        return Board(int(row[0]), row[1], int(row[2]), int(row[3]), created_at=row[4])

    def persist_generation(self, board: Board, generation: Generation) -> None:
        with self._lock:
            exists = self.con.execute(
                "SELECT count(*) FROM boards WHERE id = ?", [board.id]
            ).fetchone()[0]
            if not exists:
                raise StorageError(f"board {board.id} does not exist")
            _check_append(board, generation, self.count_generations(board))
            try:
                self.con.execute(
                    "INSERT INTO generations (board_id, step, state) VALUES (?, ?, ?)",
                    [generation.board_id, generation.step, generation.state],
                )
            except duckdb.ConstraintException as exc:
                raise StepConflictError(
                    f"board {board.id}: step {generation.step} already exists"
                ) from exc

    def load_generation(self, board: Board, step: int) -> Optional[Generation]:
        with self._lock:
            row = self.con.execute(
                "SELECT state FROM generations WHERE board_id = ? AND step = ?",
                [board.id, step],
            ).fetchone()
        if row is None:
            return None
        return Generation(board.id, step, row[0])

    def count_generations(self, board: Board) -> int:
        with self._lock:
            return int(
                self.con.execute(
                    "SELECT count(*) FROM generations WHERE board_id = ?", [board.id]
                ).fetchone()[0]
            )

    def delete_board(self, board: Board) -> bool:
        with self.transaction():
            if self.load_board(board.id) is None:
                return False
            self.con.execute("DELETE FROM generations WHERE board_id = ?", [board.id])
            self.con.execute("DELETE FROM boards WHERE id = ?", [board.id])
            return True

    def close(self) -> None:
        with self._lock:
            self.con.close()

    def __enter__(self) -> "DuckDBStore":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
