from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import IntEnum
from typing import Optional, Tuple

import numpy as np

from .grid import GameGrid
from .pieces import Cells, Color, Piece, TetrominoType, color, shape
from .rules import GravityRules, ScoringRules


logger = logging.getLogger(__name__)


class Action(IntEnum):
    LEFT = 0
    RIGHT = 1
    ROTATE_CW = 2
    SOFT_DROP = 3
    HARD_DROP = 4
    NONE = 5


# Kick offsets tried in order when a rotation collides
I_KICKS: Tuple[Tuple[int, int], ...] = ((0, 0), (-1, 0), (1, 0), (-2, 0), (2, 0), (0, -1), (0, -2))
JLSTZ_KICKS: Tuple[Tuple[int, int], ...] = ((0, 0), (-1, 0), (1, 0), (0, -1), (-1, -1), (1, -1))


@dataclass
class GameConfig:
    random_seed: Optional[int] = None


@dataclass(frozen=True)
class GameSnapshot:
    """Read-only view of one frame, handed to renderers."""

    grid: np.ndarray
    piece_kind: TetrominoType
    piece_cells: Cells
    ghost_cells: Cells
    next_kind: TetrominoType
    score: int
    lines: int
    level: int
    game_over: bool
    drop_interval_ms: int

    @property
    def piece_color(self) -> Color:
        return color(self.piece_kind)

    @property
    def next_cells(self) -> Cells:
        return shape(self.next_kind)

    @property
    def next_color(self) -> Color:
        return color(self.next_kind)


class FallingBlockGame:
    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rules: Optional[ScoringRules] = None,
        gravity: Optional[GravityRules] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.config = config or GameConfig()
        self.rules = rules or ScoringRules()
        self.gravity = gravity or GravityRules()
        self.rng = rng or random.Random(self.config.random_seed)
        self.grid = GameGrid()
        self.score = 0
        self.lines = 0
        self.level = 1
        self.game_over = False
        self.current_piece: Piece = Piece.spawn(TetrominoType.O, self.grid.width)
        self.next_kind = TetrominoType.O
        self._gravity_elapsed_ms = 0
        self.reset()

    def reset(self, seed: Optional[int] = None) -> None:
        if seed is not None:
            self.rng.seed(seed)
        self.grid.reset()
        self.score = 0
        self.lines = 0
        self.level = 1
        self.game_over = False
        self._gravity_elapsed_ms = 0
        self.current_piece = Piece.spawn(self._random_kind(), self.grid.width)
        self.next_kind = self._random_kind()
        logger.debug("New game: current=%s next=%s", self.current_piece.kind.name, self.next_kind.name)

    def _random_kind(self) -> TetrominoType:
        # Independent uniform draws; repeats are allowed
        return self.rng.choice(list(TetrominoType))

    def _spawn_next(self) -> None:
        self.current_piece = Piece.spawn(self.next_kind, self.grid.width)
        self.next_kind = self._random_kind()
        if not self.grid.fits(self.current_piece.absolute_cells()):
            self.game_over = True
            logger.info("Game over: score=%d lines=%d level=%d", self.score, self.lines, self.level)
        else:
            logger.debug("Spawned %s, next %s", self.current_piece.kind.name, self.next_kind.name)

    # ---------- Commands ----------
    def try_move(self, dx: int, dy: int) -> bool:
        if self.game_over:
            return False
        moved = self.current_piece.moved(dx, dy)
        if self.grid.fits(moved.absolute_cells()):
            self.current_piece = moved
            return True
        return False

    def try_rotate(self) -> bool:
        if self.game_over:
            return False
        piece = self.current_piece
        if piece.kind == TetrominoType.O:
            return True
        rotated = piece.rotated_cw()
        kicks = I_KICKS if piece.kind == TetrominoType.I else JLSTZ_KICKS
        for dx, dy in kicks:
            candidate = piece.with_cells(rotated, dx, dy)
            if self.grid.fits(candidate.absolute_cells()):
                self.current_piece = candidate
                return True
        return False

    def soft_drop(self) -> bool:
        """Move down one row, locking the piece if it cannot fall.

        Returns True if the piece moved.
        """
        if self.game_over:
            return False
        self._gravity_elapsed_ms = 0
        if self.try_move(0, 1):
            return True
        self.lock_and_advance()
        return False

    def hard_drop(self) -> None:
        if self.game_over:
            return
        while self.try_move(0, 1):
            pass
        self._gravity_elapsed_ms = 0
        self.lock_and_advance()

    def lock_and_advance(self) -> None:
        if self.game_over:
            return
        piece = self.current_piece
        self.grid.lock(piece.absolute_cells(), int(piece.kind))
        logger.debug("Locked %s at (%d, %d)", piece.kind.name, piece.x, piece.y)

        cleared = self.grid.clear_lines()
        if cleared > 0:
            self.lines += cleared
            self.score += self.rules.score_for_lines(cleared, self.level)
            level = self.rules.level_for_lines(self.lines)
            if level != self.level:
                logger.info("Level up: %d -> %d", self.level, level)
            self.level = level
            logger.info("Cleared %d line(s): score=%d lines=%d", cleared, self.score, self.lines)

        self._spawn_next()

    def tick(self, elapsed_ms: int) -> bool:
        """Advance the gravity clock; apply one gravity step when it is due."""
        if self.game_over:
            return False
        self._gravity_elapsed_ms += max(int(elapsed_ms), 0)
        if self._gravity_elapsed_ms < self.drop_interval_ms():
            return False
        self.soft_drop()
        return True

    def step(self, action: Action) -> Tuple[np.ndarray, int, bool, dict]:
        action = Action(action)
        if self.game_over:
            return self.get_state(), 0, True, self._info()

        score_before = self.score
        if action == Action.LEFT:
            self.try_move(-1, 0)
        elif action == Action.RIGHT:
            self.try_move(1, 0)
        elif action == Action.ROTATE_CW:
            self.try_rotate()
        elif action == Action.SOFT_DROP:
            self.soft_drop()
        elif action == Action.HARD_DROP:
            self.hard_drop()
        elif action == Action.NONE:
            pass

        reward = self.score - score_before
        return self.get_state(), reward, self.game_over, self._info()

    # ---------- Queries ----------
    def drop_interval_ms(self) -> int:
        return self.gravity.drop_interval_ms(self.level)

    def ghost_cells(self) -> Cells:
        ghost = self.current_piece
        while self.grid.fits(ghost.moved(0, 1).absolute_cells()):
            ghost = ghost.moved(0, 1)
        return ghost.absolute_cells()

    def get_state(self) -> np.ndarray:
        # Overlay current piece on a copy of the grid for observation
        state = self.grid.clone_state()
        if not self.game_over:
            for x, y in self.current_piece.absolute_cells():
                if self.grid.is_inside(x, y):
                    # Use negative to indicate falling piece overlay
                    state[y, x] = -int(self.current_piece.kind)
        return state

    def snapshot(self) -> GameSnapshot:
        return GameSnapshot(
            grid=self.grid.clone_state(),
            piece_kind=self.current_piece.kind,
            piece_cells=self.current_piece.absolute_cells(),
            ghost_cells=self.ghost_cells(),
            next_kind=self.next_kind,
            score=self.score,
            lines=self.lines,
            level=self.level,
            game_over=self.game_over,
            drop_interval_ms=self.drop_interval_ms(),
        )

    def _info(self) -> dict:
        return {
            "score": self.score,
            "lines": self.lines,
            "level": self.level,
        }
