"""Game module for Falling Block RL.

Exports the core game engine and supporting classes:
- GameGrid: Board representation, collision tests and line clearing
- Piece: Positioned tetromino with clockwise rotation
- TetrominoType: Enum of available piece kinds
- ScoringRules / GravityRules: Score table, levels and drop timing
- FallingBlockGame: Game state machine driven by commands and ticks
"""

from .grid import GameGrid
from .pieces import Piece, TetrominoType, color, rotate_cw, shape
from .rules import GravityRules, ScoringRules
from .core import Action, FallingBlockGame, GameConfig, GameSnapshot

__all__ = [
    "GameGrid",
    "Piece",
    "TetrominoType",
    "shape",
    "color",
    "rotate_cw",
    "ScoringRules",
    "GravityRules",
    "FallingBlockGame",
    "GameConfig",
    "GameSnapshot",
    "Action",
]
