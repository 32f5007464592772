"""Active piece controller.

Every function here is pure: it takes the current Board (and piece) and
returns either a new ActivePiece or None. What None means depends on the
call: a spawn collision for `spawn`, a rejected move for
`move_horizontal` and `rotate`, and "lock required" for `soft_drop`.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import List, Optional

from .grid import Board, Coordinate, shape_cells
from .pieces import Shape, TetrominoType, rotate_shape, shape_for


@dataclass(frozen=True, eq=False)
class ActivePiece:
    kind: TetrominoType
    shape: Shape
    x: int
    y: int

    @property
    def position(self) -> Coordinate:
        return self.x, self.y

    @property
    def width(self) -> int:
        return int(self.shape.shape[1])

    @property
    def height(self) -> int:
        return int(self.shape.shape[0])

    def cells(self) -> List[Coordinate]:
        return list(shape_cells(self.shape, self.position))


def spawn_position(board: Board, shape: Shape) -> Coordinate:
    return board.width // 2 - shape.shape[1] // 2, 0


def spawn(board: Board, kind: TetrominoType) -> Optional[ActivePiece]:
    shape = shape_for(kind)
    x, y = spawn_position(board, shape)
    if board.collides(shape, (x, y)):
        return None
    return ActivePiece(kind=TetrominoType(kind), shape=shape, x=x, y=y)


def move_horizontal(board: Board, piece: ActivePiece, dx: int) -> Optional[ActivePiece]:
    if dx not in (-1, 1):
        raise ValueError(f"dx must be -1 or +1, got {dx}")
    new_x = min(max(piece.x + dx, 0), board.width - piece.width)
    if board.collides(piece.shape, (new_x, piece.y)):
        return None
    return replace(piece, x=new_x)


def soft_drop(board: Board, piece: ActivePiece) -> Optional[ActivePiece]:
    new_y = piece.y + 1
    if board.collides(piece.shape, (piece.x, new_y)):
        return None
    return replace(piece, y=new_y)


def rotate(board: Board, piece: ActivePiece) -> Optional[ActivePiece]:
    # No wall kicks: a colliding orientation is simply rejected
    rotated = rotate_shape(piece.shape)
    if board.collides(rotated, piece.position):
        return None
    return replace(piece, shape=rotated)
