from __future__ import annotations

from typing import Iterable, Optional, Tuple

import numpy as np

from .pieces import TetrominoType


Coordinate = Tuple[int, int]

BOARD_WIDTH = 10
BOARD_HEIGHT = 20


class GameGrid:
    """Fixed-size playfield of locked cells.

    The grid uses 0 for empty cells and the locking piece's
    ``TetrominoType`` value for filled cells, so the renderer can color
    each cell by kind. Row 0 is the top of the board.

    Rows above the board (``y < 0``) are treated as free space: pieces
    spawn partly there and may rotate into it, but nothing is ever stored
    there.
    """

    def __init__(self, width: int = BOARD_WIDTH, height: int = BOARD_HEIGHT) -> None:
        self.width = int(width)
        self.height = int(height)
        self.grid = np.zeros((self.height, self.width), dtype=np.int8)

    def reset(self) -> None:
        self.grid.fill(0)

    def is_inside(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def is_free(self, x: int, y: int) -> bool:
        if x < 0 or x >= self.width:
            return False
        if y >= self.height:
            return False
        if y < 0:
            return True
        return bool(self.grid[y, x] == 0)

    def fits(self, cells: Iterable[Coordinate]) -> bool:
        return all(self.is_free(x, y) for x, y in cells)

    def lock(self, cells: Iterable[Coordinate], value: int) -> None:
        for x, y in cells:
            if self.is_inside(x, y):
                self.grid[y, x] = value

    def clear_lines(self) -> int:
        full = np.all(self.grid != 0, axis=1)
        num = int(np.count_nonzero(full))
        if num == 0:
            return 0
        # Kept rows keep their order and sink to the bottom
        kept = self.grid[~full]
        new_rows = np.zeros((num, self.width), dtype=np.int8)
        self.grid = np.vstack((new_rows, kept))
        return num

    def cell(self, x: int, y: int) -> Optional[TetrominoType]:
        if not self.is_inside(x, y):
            return None
        v = int(self.grid[y, x])
        return TetrominoType(v) if v else None

    def get_max_height(self) -> int:
        # y=0 is top; find first non-empty from top
        non_empty_rows = np.where(np.any(self.grid != 0, axis=1))[0]
        if non_empty_rows.size == 0:
            return 0
        top_index = int(non_empty_rows[0])
        return self.height - top_index

    def count_holes(self) -> int:
        filled = self.grid != 0
        # A hole is an empty cell with a filled cell somewhere above it
        covered = np.logical_or.accumulate(filled, axis=0)
        return int(np.count_nonzero(covered & ~filled))

    def clone_state(self) -> np.ndarray:
        return self.grid.copy()
