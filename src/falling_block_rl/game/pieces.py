from __future__ import annotations

from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Dict, Iterable, Tuple


class TetrominoType(IntEnum):
    I = 1
    O = 2
    T = 3
    S = 4
    Z = 5
    J = 6
    L = 7


Coordinate = Tuple[int, int]
Cells = Tuple[Coordinate, ...]
Color = Tuple[int, int, int]


# (col, row) offsets on a 4x4 local frame, row 0 on top
BASE_CELLS: Dict[TetrominoType, Cells] = {
    TetrominoType.I: ((0, 1), (1, 1), (2, 1), (3, 1)),
    TetrominoType.O: ((1, 0), (2, 0), (1, 1), (2, 1)),
    TetrominoType.T: ((0, 1), (1, 1), (2, 1), (1, 0)),
    TetrominoType.S: ((0, 1), (1, 1), (1, 0), (2, 0)),
    TetrominoType.Z: ((0, 0), (1, 0), (1, 1), (2, 1)),
    TetrominoType.J: ((0, 0), (0, 1), (1, 1), (2, 1)),
    TetrominoType.L: ((2, 0), (0, 1), (1, 1), (2, 1)),
}

COLORS: Dict[TetrominoType, Color] = {
    TetrominoType.I: (0, 240, 240),
    TetrominoType.O: (240, 240, 0),
    TetrominoType.T: (160, 0, 240),
    TetrominoType.S: (0, 240, 0),
    TetrominoType.Z: (240, 0, 0),
    TetrominoType.J: (0, 0, 240),
    TetrominoType.L: (240, 160, 0),
}


def _check_tables() -> None:
    for name, table in (("BASE_CELLS", BASE_CELLS), ("COLORS", COLORS)):
        missing = [kind.name for kind in TetrominoType if kind not in table]
        if missing:
            raise TypeError(f"{name} has no entry for {', '.join(missing)}")


_check_tables()


def shape(kind: TetrominoType) -> Cells:
    return BASE_CELLS[kind]


def color(kind: TetrominoType) -> Color:
    return COLORS[kind]


def rotate_cw(kind: TetrominoType, cells: Iterable[Coordinate]) -> Cells:
    """Rotate offsets 90 degrees clockwise inside the piece's local frame.

    The O piece is returned unchanged. The I piece turns inside a 4-wide
    frame, every other piece inside a 3-wide frame. The turn is about the
    frame corner, so repeated application cycles through four orientations
    without tracking which one is current.
    """
    cells = tuple(cells)
    if kind == TetrominoType.O:
        return cells
    size = 4 if kind == TetrominoType.I else 3
    return tuple((size - 1 - r, c) for c, r in cells)


@dataclass(frozen=True)
class Piece:
    kind: TetrominoType
    cells: Cells
    x: int = 0
    y: int = 0

    @classmethod
    def spawn(cls, kind: TetrominoType, board_width: int) -> "Piece":
        # Origin one row above the board so the bottom row shows at once
        return cls(kind, shape(kind), (board_width - 4) // 2, -1)

    @property
    def color(self) -> Color:
        return color(self.kind)

    def absolute_cells(self) -> Cells:
        return tuple((self.x + c, self.y + r) for c, r in self.cells)

    def rotated_cw(self) -> Cells:
        return rotate_cw(self.kind, self.cells)

    def moved(self, dx: int, dy: int) -> "Piece":
        return replace(self, x=self.x + dx, y=self.y + dy)

    def with_cells(self, cells: Cells, dx: int = 0, dy: int = 0) -> "Piece":
        return replace(self, cells=tuple(cells), x=self.x + dx, y=self.y + dy)
