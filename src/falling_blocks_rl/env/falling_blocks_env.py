from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from falling_blocks_rl.game import Action, GameConfig, Snapshot, TetrisGame
from falling_blocks_rl.visualization.palette import color_for_value


# Player actions exposed to agents; TICK/START/RESET are driven by the env itself
PLAYER_ACTIONS = (Action.LEFT, Action.RIGHT, Action.ROTATE, Action.SOFT_DROP, Action.NONE)


class FallingBlocksEnv(gym.Env):
    metadata = {"render_modes": ["human", "rgb_array"], "render_fps": 30}

    def __init__(self, config: Optional[GameConfig] = None, render_mode: Optional[str] = None,
                 gravity_every: int = 1,
                 score_scale: float = 0.01,
                 reward_weights: Optional[Dict[str, float]] = None,
                 terminal_penalty: float = 1.0,
                 max_episode_steps: int = 10000) -> None:
        super().__init__()
        if gravity_every <= 0:
            raise ValueError(f"gravity_every must be positive, got {gravity_every}")
        self.game = TetrisGame(config)
        self.render_mode = render_mode
        self.gravity_every = int(gravity_every)
        self.score_scale = float(score_scale)
        self.terminal_penalty = float(terminal_penalty)
        self.max_episode_steps = int(max_episode_steps)
        self.reward_weights: Dict[str, float] = {
            # Penalize increases in undesirable board features
            "holes": 0.1,
            "height": 0.02,
            "bumpiness": 0.01,
        }
        if reward_weights:
            self.reward_weights.update({k: float(v) for k, v in reward_weights.items()})

        height, width = self.game.config.height, self.game.config.width
        n_kinds = 7
        # Settled cells are positive tags, the falling piece is negative
        self.observation_space = spaces.Box(low=-n_kinds, high=n_kinds, shape=(height, width), dtype=np.int8)
        self.action_space = spaces.Discrete(len(PLAYER_ACTIONS))

        self._last_snapshot: Optional[Snapshot] = None
        self._steps = 0

    def _get_obs(self, snap: Snapshot) -> np.ndarray:
        obs = snap.board.astype(np.int8)
        mask = snap.overlay != 0
        obs[mask] = -snap.overlay[mask]
        return obs

    def _get_info(self, snap: Snapshot) -> Dict[str, Any]:
        return {
            "score": snap.score,
            "high_score": snap.high_score,
            "lines_cleared": snap.lines_cleared,
            "fall_interval_ms": snap.fall_interval_ms,
            "events": snap.events,
            "steps": self._steps,
        }

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[np.ndarray, Dict[str, Any]]:
        super().reset(seed=seed)
        if seed is not None:
            self.game.reseed(seed)
        self._steps = 0
        snap = self.game.restart()
        self._last_snapshot = snap
        return self._get_obs(snap), self._get_info(snap)

    def step(self, action: int):
        player_action = PLAYER_ACTIONS[int(action)]
        board_before = self.game.board
        score_before = self.game.score

        snap = self.game.step(player_action)
        events = list(snap.events)
        self._steps += 1
        if self._steps % self.gravity_every == 0:
            snap = self.game.tick()
            events.extend(snap.events)

        board_after = self.game.board
        reward_components: Dict[str, float] = {
            "score": self.score_scale * float(snap.score - score_before),
            "holes": -self.reward_weights["holes"] * float(
                max(0, board_after.count_holes() - board_before.count_holes())),
            "height": -self.reward_weights["height"] * float(
                max(0, board_after.max_height() - board_before.max_height())),
            "bumpiness": -self.reward_weights["bumpiness"] * float(
                max(0, board_after.bumpiness() - board_before.bumpiness())),
        }
        terminated = bool(snap.game_over)
        truncated = self._steps >= self.max_episode_steps and not terminated
        if terminated:
            reward_components["terminal"] = -self.terminal_penalty

        reward = float(sum(reward_components.values()))
        self._last_snapshot = snap
        info = self._get_info(snap)
        info["events"] = tuple(events)
        info["reward_components"] = reward_components
        return self._get_obs(snap), reward, terminated, truncated, info

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode == "rgb_array":
            snap = self._last_snapshot or self.game.snapshot()
            grid = snap.composite()
            cell = 12
            h, w = grid.shape
            img = np.zeros((h * cell, w * cell, 3), dtype=np.uint8)
            for y in range(h):
                for x in range(w):
                    color = color_for_value(int(grid[y, x]))
                    img[y * cell : (y + 1) * cell, x * cell : (x + 1) * cell, :] = color
            return img
        # human rendering delegated to visualization.human_play; noop
        return None

    def close(self) -> None:
        pass
