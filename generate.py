import numpy as np
from typing import List
from grid_codec import Grid
from simulate import step


class BoardGenerator:
    """
    Random initial-state generator for Game of Life boards.
    Grid cells outside the rows x cols rectangle are treated as dead.
    """
    def __init__(self, rows: int, cols: int, *, seed: int = 42, density: float = 0.5):
        if rows < 0 or cols < 0:
            raise ValueError("rows and cols must be non-negative")
        if not 0.0 <= density <= 1.0:
            raise ValueError("density must be within [0, 1]")
        self.rows = rows
        self.cols = cols
        self.density = density
        self.rng = np.random.default_rng(seed)

    def generate(self) -> Grid:
        """
        Generate a random rows x cols grid where each cell is alive with probability `density`.
        """
        alive = self.rng.random((self.rows, self.cols)) < self.density
        return Grid.from_rows(alive.tolist())

    def is_trivial(self, grid: Grid) -> bool:
        """
        Return True if the board is trivial: all cells dead, all alive, or
        if one step leaves the grid unchanged.
        """
        flat = [cell for row in grid.cells for cell in row]
        if not any(flat) or all(flat):
            return True
        return step(grid) == grid

    def generate_batch(
        self,
        num_boards: int,
        trim_trivial: bool = True,
        max_attempts_factor: int = 10,
    ) -> List[Grid]:
        """
        Generate a batch of random boards.
        If trim_trivial is True, filters out trivial boards.
        """
        boards: List[Grid] = []
        attempts = 0
        max_attempts = max_attempts_factor * num_boards

        while attempts < max_attempts and len(boards) < num_boards:
            grid = self.generate()
            if not trim_trivial or not self.is_trivial(grid):
                boards.append(grid)
            attempts += 1

        if len(boards) < num_boards:
            raise RuntimeError(
                f"Could only create {len(boards)}/{num_boards} nontrivial boards "
                f"in {max_attempts} attempts."
            )

        return boards
