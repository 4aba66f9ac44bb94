from grid_codec import Grid
from rules import CONWAY
from typing import Sequence, Tuple


def _neighbor_sum(cells: Sequence[Sequence[bool]], r: int, c: int) -> int:
    """
    Return number of live neighbors (Moore, eight cells) for cell (r,c).
    Out-of-bounds neighbors are treated as 0 (dead).
    """
    h, w = len(cells), len(cells[0])
    total = 0
    for dr in (-1, 0, 1):
        for dc in (-1, 0, 1):
            if dr == 0 and dc == 0:
                continue
            rr = r + dr
            cc = c + dc
            if 0 <= rr < h and 0 <= cc < w:
                total += cells[rr][cc]
    return total


def step(grid: Grid) -> Grid:
    """
    One synchronous Game of Life update (B3/S23, Moore neighborhood, zero boundary).
    Every neighbor count is read from the input grid, never from the one being built.
    """
    if grid.rows == 0:
        return grid

    cells = grid.cells
    nxt: Tuple[Tuple[bool, ...], ...] = tuple(
        tuple(
            bool(CONWAY(int(cells[r][c]), _neighbor_sum(cells, r, c)))
            for c in range(grid.cols)
        )
        for r in range(grid.rows)
    )
    return Grid(nxt)


def simulate(grid: Grid, timesteps: int = 1) -> Grid:
    if timesteps < 0:
        raise ValueError("timesteps must be non-negative")
    curr = grid
    for _ in range(timesteps):
        curr = step(curr)
    return curr
