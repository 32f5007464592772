from __future__ import annotations

from typing import Iterator, List, Tuple

import numpy as np

from .pieces import Shape


Coordinate = Tuple[int, int]

EMPTY = 0


class CollisionError(ValueError):
    """Raised when a piece is locked onto occupied or out-of-bounds cells."""


def shape_cells(shape: Shape, position: Coordinate) -> Iterator[Coordinate]:
    origin_x, origin_y = position
    h, w = shape.shape
    for dy in range(h):
        for dx in range(w):
            if shape[dy, dx]:
                yield origin_x + dx, origin_y + dy


class Board:
    """Fixed-size grid of settled cells.

    Cells hold 0 for empty and a positive tetromino tag otherwise; the tag
    only matters for coloring. A Board is immutable: `lock` and
    `clear_full_lines` return new boards and leave the receiver untouched.
    """

    def __init__(self, cells: np.ndarray) -> None:
        if cells.ndim != 2 or cells.shape[0] <= 0 or cells.shape[1] <= 0:
            raise ValueError(f"Board needs positive dimensions, got shape {cells.shape}")
        self._cells = cells.astype(np.int8, copy=True)
        self._cells.flags.writeable = False

    @classmethod
    def create(cls, width: int, height: int) -> "Board":
        width = int(width)
        height = int(height)
        if width <= 0 or height <= 0:
            raise ValueError(f"Board dimensions must be positive, got {width}x{height}")
        return cls(np.zeros((height, width), dtype=np.int8))

    @property
    def width(self) -> int:
        return int(self._cells.shape[1])

    @property
    def height(self) -> int:
        return int(self._cells.shape[0])

    @property
    def cells(self) -> np.ndarray:
        return self._cells

    def to_array(self) -> np.ndarray:
        return self._cells.copy()

    def is_inside(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def is_empty(self, x: int, y: int) -> bool:
        return self._cells[y, x] == EMPTY

    def collides(self, shape: Shape, position: Coordinate) -> bool:
        for x, y in shape_cells(shape, position):
            if not self.is_inside(x, y) or not self.is_empty(x, y):
                return True
        return False

    def lock(self, shape: Shape, position: Coordinate, tag: int) -> "Board":
        if self.collides(shape, position):
            raise CollisionError(f"Cannot lock shape at {position}: cells are occupied or out of bounds")
        cells = self.to_array()
        for x, y in shape_cells(shape, position):
            cells[y, x] = tag
        return Board(cells)

    def clear_full_lines(self) -> Tuple["Board", int]:
        full_rows = np.where(np.all(self._cells != EMPTY, axis=1))[0]
        if full_rows.size == 0:
            return self, 0
        num = int(full_rows.size)
        # Remove full rows and add empty rows at the top
        kept = np.delete(self._cells, full_rows, axis=0)
        new_rows = np.zeros((num, self.width), dtype=np.int8)
        return Board(np.vstack((new_rows, kept))), num

    def max_height(self) -> int:
        # y=0 is top; find first non-empty from top
        non_empty_rows = np.where(np.any(self._cells != EMPTY, axis=1))[0]
        if non_empty_rows.size == 0:
            return 0
        return self.height - int(non_empty_rows[0])

    def column_heights(self) -> List[int]:
        heights: List[int] = []
        for x in range(self.width):
            filled = np.flatnonzero(self._cells[:, x] != EMPTY)
            heights.append(self.height - int(filled[0]) if filled.size else 0)
        return heights

    def count_holes(self) -> int:
        holes = 0
        for x in range(self.width):
            column = self._cells[:, x]
            seen_block = False
            for cell in column:
                if cell != EMPTY:
                    seen_block = True
                elif seen_block:
                    holes += 1
        return holes

    def bumpiness(self) -> int:
        heights = self.column_heights()
        return sum(abs(heights[i] - heights[i + 1]) for i in range(len(heights) - 1))

    def filled_cells(self) -> int:
        return int(np.count_nonzero(self._cells))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return np.array_equal(self._cells, other._cells)

    def __hash__(self) -> int:
        return hash((self._cells.shape, self._cells.tobytes()))

    def __repr__(self) -> str:
        return f"Board(width={self.width}, height={self.height}, filled={self.filled_cells()})"

    def __str__(self) -> str:
        return "\n".join("".join("█" if cell else "·" for cell in row) for row in self._cells)
