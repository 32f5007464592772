from __future__ import annotations

import argparse
import logging
from typing import Dict, Optional

import pygame

from falling_blocks_rl.game import Action, EventType, GameConfig, GameEvent, GamePhase, Snapshot, TetrisGame
from .renderer import Renderer


TICK_EVENT = pygame.USEREVENT + 1

KEY_TO_ACTION: Dict[int, Action] = {
    pygame.K_LEFT: Action.LEFT,
    pygame.K_RIGHT: Action.RIGHT,
    pygame.K_DOWN: Action.SOFT_DROP,
    pygame.K_SPACE: Action.ROTATE,
    pygame.K_RETURN: Action.START,
}


class TickTimer:
    """Periodic gravity source backed by a pygame timer event.

    The timer only runs while the game is running and is re-armed whenever
    the fall interval changes.
    """

    def __init__(self) -> None:
        self.interval_ms: Optional[int] = None

    def sync(self, snap: Snapshot) -> None:
        wanted = snap.fall_interval_ms if snap.phase is GamePhase.RUNNING else None
        if wanted == self.interval_ms:
            return
        pygame.time.set_timer(TICK_EVENT, wanted or 0)
        self.interval_ms = wanted

    def stop(self) -> None:
        pygame.time.set_timer(TICK_EVENT, 0)
        self.interval_ms = None


def _report(event: GameEvent) -> None:
    if event.type is EventType.GAME_OVER:
        print(f"Game over - final score {event.value}")
    elif event.type is EventType.NEW_HIGH_SCORE:
        print(f"New high score: {event.value}")


def run(config: Optional[GameConfig] = None, cell_size: int = 28) -> None:
    pygame.init()
    timer = TickTimer()
    try:
        clock = pygame.time.Clock()
        game = TetrisGame(config)
        game.subscribe(_report)
        renderer = Renderer(cell_size=cell_size)

        screen = pygame.display.set_mode(renderer.window_size(game.config.width, game.config.height))
        pygame.display.set_caption("Falling Blocks - Human Play")

        snap = game.snapshot()
        running = True
        while running:
            # Input and gravity both go through the engine's command queue
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == TICK_EVENT:
                    game.enqueue(Action.TICK)
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif event.key == pygame.K_r:
                        game.enqueue(Action.RESET)
                        game.enqueue(Action.START)
                    else:
                        action = KEY_TO_ACTION.get(event.key)
                        if action is not None:
                            game.enqueue(action)

            snap = game.process_pending()
            timer.sync(snap)
            renderer.draw(screen, snap)
            clock.tick(60)
    finally:
        timer.stop()
        pygame.quit()


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser()
    p.add_argument("--width", type=int, default=10)
    p.add_argument("--height", type=int, default=20)
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--cell-size", type=int, default=28)
    p.add_argument("--log-level", type=str, default="WARNING")
    return p


def main() -> None:
    args = build_parser().parse_args()
    logging.basicConfig(level=args.log_level.upper())
    run(GameConfig(width=args.width, height=args.height, random_seed=args.seed), cell_size=args.cell_size)


if __name__ == "__main__":  # pragma: no cover
    main()
