from __future__ import annotations

import random
from enum import IntEnum
from typing import Dict, Optional

import numpy as np


class TetrominoType(IntEnum):
    I = 1
    O = 2
    T = 3
    S = 4
    Z = 5
    J = 6
    L = 7


Shape = np.ndarray


def _frozen(rows) -> Shape:
    shape = np.array(rows, dtype=np.bool_)
    shape.flags.writeable = False
    return shape


BASE_SHAPES: Dict[TetrominoType, Shape] = {
    TetrominoType.I: _frozen([[1, 1, 1, 1]]),
    TetrominoType.O: _frozen([[1, 1], [1, 1]]),
    TetrominoType.T: _frozen([[0, 1, 0], [1, 1, 1]]),
    TetrominoType.S: _frozen([[0, 1, 1], [1, 1, 0]]),
    TetrominoType.Z: _frozen([[1, 1, 0], [0, 1, 1]]),
    TetrominoType.J: _frozen([[1, 0, 0], [1, 1, 1]]),
    TetrominoType.L: _frozen([[0, 0, 1], [1, 1, 1]]),
}


def shape_for(kind: TetrominoType) -> Shape:
    """Return the 0° shape of `kind` as a read-only boolean matrix."""
    try:
        return BASE_SHAPES[TetrominoType(kind)]
    except ValueError:
        raise ValueError(f"Unknown tetromino kind: {kind!r}") from None


def rotate_shape(shape: Shape) -> Shape:
    # Clockwise: rotated[x][N - 1 - y] = shape[y][x], N = source row count
    rotated = np.rot90(shape, 1, axes=(1, 0)).copy()
    rotated.flags.writeable = False
    return rotated


def random_kind(rng: Optional[random.Random] = None) -> TetrominoType:
    source = rng if rng is not None else random
    return source.choice(list(TetrominoType))
