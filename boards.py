from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Board:
    '''
    One simulation instance. Never changes once generation 0 exists.
    `initial_state` is the textual grid ('0'/'1' rows joined by newlines).
    '''
    id: int
    initial_state: str
    rows: int
    cols: int
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Generation:
    """Snapshot of a board's grid at one step index (0, 1, 2, ... with no gaps)."""
    board_id: int
    step: int
    state: str
