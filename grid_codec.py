from __future__ import annotations
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from life_errors import FormatError

ALIVE = "1"
DEAD = "0"
ROW_DELIMITER = "\n"


@dataclass(frozen=True)
class Grid:
    """
    Fixed-size 2-D grid of boolean cells (True = alive), stored row-major as nested tuples.
    A grid without columns is normalized to the 0x0 grid, since its text form
    (the empty string) cannot record a row count.
    """
    cells: Tuple[Tuple[bool, ...], ...] = ()

    def __post_init__(self) -> None:
        widths = {len(row) for row in self.cells}
        if len(widths) > 1:
            raise FormatError(f"rows must all have the same length, got lengths {sorted(widths)}")
        if widths == {0}:
            object.__setattr__(self, "cells", ())

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[int]]) -> "Grid":
        """Build from nested 0/1 (or bool) sequences, e.g. [[0, 1], [1, 1]]."""
        return cls(tuple(tuple(bool(cell) for cell in row) for row in rows))

    @property
    def rows(self) -> int:
        return len(self.cells)

    @property
    def cols(self) -> int:
        return len(self.cells[0]) if self.cells else 0

    @property
    def population(self) -> int:
        return sum(sum(row) for row in self.cells)

    def alive(self, r: int, c: int) -> bool:
        return self.cells[r][c]

    def to_lists(self) -> List[List[int]]:
        return [[int(cell) for cell in row] for row in self.cells]


def decode(text: str) -> Grid:
    '''
    Parse newline-separated rows of '0'/'1' into a Grid.
    One trailing row delimiter is tolerated; the empty string is the 0x0 grid.
    Raises FormatError on ragged rows or symbols outside the alphabet.
    '''
    if not isinstance(text, str):
        raise FormatError(f"grid text must be a string, got {type(text).__name__}")
    if text == "":
        return Grid()

    lines = text.split(ROW_DELIMITER)
    if lines[-1] == "":
        lines.pop()

    width = len(lines[0])
    for idx, line in enumerate(lines):
        if len(line) != width:
            raise FormatError(f"row {idx} has length {len(line)}, expected {width}")
        invalid = set(line) - {ALIVE, DEAD}
        if invalid:
            raise FormatError(f"row {idx} contains invalid symbol(s) {sorted(invalid)!r}")

    return Grid(tuple(tuple(ch == ALIVE for ch in line) for line in lines))


def encode(grid: Grid) -> str:
    """Inverse of decode: one '0'/'1' line per row, joined by newlines."""
    return ROW_DELIMITER.join(
        "".join(ALIVE if cell else DEAD for cell in row) for row in grid.cells
    )
