from __future__ import annotations

from typing import Dict, Tuple


Color = Tuple[int, int, int]

PALETTE: Dict[int, Color] = {
    0: (20, 20, 26),
    1: (0, 240, 240),  # I
    2: (240, 240, 0),  # O
    3: (160, 0, 240),  # T
    4: (0, 240, 0),    # S
    5: (240, 0, 0),    # Z
    6: (0, 0, 240),    # J
    7: (240, 160, 0),  # L
}


def color_for_value(v: int) -> Color:
    # Negative tags mark the falling piece in observations
    return PALETTE.get(abs(v), (200, 200, 200))
