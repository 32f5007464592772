from __future__ import annotations

from typing import List, Tuple

import pygame

from falling_blocks_rl.game import GamePhase, Snapshot
from .palette import color_for_value


class Renderer:
    def __init__(self, cell_size: int = 30, margin: int = 20, panel_width: int = 200) -> None:
        self.cell_size = cell_size
        self.margin = margin
        self.panel_width = panel_width
        self._font = None

    def window_size(self, width: int, height: int) -> Tuple[int, int]:
        return (
            width * self.cell_size + self.margin * 3 + self.panel_width,
            height * self.cell_size + self.margin * 2,
        )

    def _grid_surface(self, snap: Snapshot) -> pygame.Surface:
        state = snap.composite()
        h, w = state.shape
        surf = pygame.Surface((w * self.cell_size, h * self.cell_size))
        surf.fill((30, 30, 36))
        for y in range(h):
            for x in range(w):
                rect = pygame.Rect(
                    x * self.cell_size,
                    y * self.cell_size,
                    self.cell_size - 1,
                    self.cell_size - 1,
                )
                pygame.draw.rect(surf, color_for_value(int(state[y, x])), rect)
        return surf

    def _panel_lines(self, snap: Snapshot) -> List[str]:
        lines = [
            f"Score: {snap.score}",
            f"High Score: {snap.high_score}",
            f"Lines: {snap.lines_cleared}",
            f"Interval: {snap.fall_interval_ms} ms",
        ]
        if snap.phase is GamePhase.NOT_STARTED:
            lines.append("Press Enter to start")
        if snap.game_over:
            lines += ["Game Over!", "R to restart, Esc to quit"]
        return lines

    def draw(self, screen: pygame.Surface, snap: Snapshot) -> None:
        if self._font is None:
            self._font = pygame.font.SysFont(None, 26)
        grid_surf = self._grid_surface(snap)
        screen.fill((10, 10, 14))
        screen.blit(grid_surf, (self.margin, self.margin))
        panel_x = self.margin * 2 + grid_surf.get_width()
        for i, line in enumerate(self._panel_lines(snap)):
            color = (240, 80, 80) if line == "Game Over!" else (255, 255, 255)
            text = self._font.render(line, True, color)
            screen.blit(text, (panel_x, self.margin + i * 30))
        pygame.display.flip()
