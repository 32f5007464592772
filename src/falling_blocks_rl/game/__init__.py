"""Game module for Falling Blocks RL.

Exports the core game engine and supporting classes:
- Board: Settled-cell grid, collision checks and line clearing
- TetrominoType: Enum of available piece types
- ActivePiece: The falling piece; moved by the functions in `controller`
- ScoringRules / SpeedRules: Line-clear rewards and fall-speed table
- TetrisGame: Command-driven state machine and snapshots
"""

from . import controller
from .grid import Board, CollisionError
from .pieces import TetrominoType, BASE_SHAPES, shape_for, rotate_shape, random_kind
from .controller import ActivePiece
from .rules import ScoringRules, SpeedRules
from .core import (
    Action,
    EventType,
    GameConfig,
    GameEvent,
    GamePhase,
    Snapshot,
    TetrisGame,
)

__all__ = [
    "controller",
    "Board",
    "CollisionError",
    "TetrominoType",
    "BASE_SHAPES",
    "shape_for",
    "rotate_shape",
    "random_kind",
    "ActivePiece",
    "ScoringRules",
    "SpeedRules",
    "Action",
    "EventType",
    "GameConfig",
    "GameEvent",
    "GamePhase",
    "Snapshot",
    "TetrisGame",
]
