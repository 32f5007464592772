import unittest

import gymnasium as gym
import numpy as np
from gymnasium.utils.env_checker import check_env

import falling_blocks_rl.env  # noqa: F401
from falling_blocks_rl.env.falling_blocks_env import PLAYER_ACTIONS, FallingBlocksEnv
from falling_blocks_rl.game import Action, EventType, GamePhase
from falling_blocks_rl.visualization.palette import PALETTE


class TestFallingBlocksEnv(unittest.TestCase):
    def test_passes_gymnasium_checker(self):
        check_env(FallingBlocksEnv(), skip_render_check=True)

    def test_registered_env_resets_to_running_game(self):
        env = gym.make("FallingBlocks-10x20-v0")
        obs, info = env.reset(seed=3)
        self.assertEqual(obs.shape, (20, 10))
        self.assertTrue(env.observation_space.contains(obs))
        self.assertEqual(info["score"], 0)
        self.assertIs(env.unwrapped.game.phase, GamePhase.RUNNING)
        # Falling piece is encoded with negative tags
        self.assertEqual(int(np.count_nonzero(obs < 0)), 4)
        env.close()

    def test_action_space_covers_player_actions(self):
        env = FallingBlocksEnv()
        self.assertEqual(env.action_space.n, 5)
        self.assertEqual(PLAYER_ACTIONS[3], Action.SOFT_DROP)

    def test_step_applies_action_then_gravity(self):
        env = FallingBlocksEnv()
        env.reset(seed=0)
        piece = env.unwrapped.game.piece
        x, y = piece.position
        env.step(PLAYER_ACTIONS.index(Action.LEFT))
        moved = env.unwrapped.game.piece
        self.assertEqual(moved.position, (x - 1, y + 1))

    def test_gravity_every_slows_ticks(self):
        env = FallingBlocksEnv(gravity_every=3)
        env.reset(seed=0)
        noop = PLAYER_ACTIONS.index(Action.NONE)
        env.step(noop)
        env.step(noop)
        self.assertEqual(env.game.piece.y, 0)
        env.step(noop)
        self.assertEqual(env.game.piece.y, 1)

    def test_invalid_gravity_every_rejected(self):
        with self.assertRaises(ValueError):
            FallingBlocksEnv(gravity_every=0)

    def test_idle_agent_reaches_game_over(self):
        env = FallingBlocksEnv(terminal_penalty=2.0)
        env.reset(seed=11)
        noop = PLAYER_ACTIONS.index(Action.NONE)
        terminated = False
        for _ in range(2000):
            obs, reward, terminated, truncated, info = env.step(noop)
            self.assertFalse(truncated)
            if terminated:
                break
        self.assertTrue(terminated)
        self.assertIn(EventType.GAME_OVER, [e.type for e in info["events"]])
        self.assertEqual(info["reward_components"]["terminal"], -2.0)
        self.assertLess(reward, 0)

    def test_bumpiness_increase_is_penalized_on_lock(self):
        env = FallingBlocksEnv(score_scale=0.0, reward_weights={"holes": 0.0, "height": 0.0, "bumpiness": 1.0})
        env.reset(seed=5)
        noop = PLAYER_ACTIONS.index(Action.NONE)
        for _ in range(40):
            _, reward, _, _, info = env.step(noop)
            if env.game.board.filled_cells() > 0:
                break
        bumpiness = env.game.board.bumpiness()
        self.assertGreater(bumpiness, 0)
        self.assertEqual(info["reward_components"]["bumpiness"], -float(bumpiness))
        self.assertEqual(reward, -float(bumpiness))

    def test_truncates_after_max_steps(self):
        env = FallingBlocksEnv(max_episode_steps=5)
        env.reset(seed=0)
        for _ in range(5):
            _, _, terminated, truncated, _ = env.step(PLAYER_ACTIONS.index(Action.NONE))
        self.assertFalse(terminated)
        self.assertTrue(truncated)

    def test_rgb_render(self):
        env = FallingBlocksEnv(render_mode="rgb_array")
        env.reset(seed=0)
        img = env.render()
        self.assertEqual(img.shape, (20 * 12, 10 * 12, 3))
        self.assertEqual(img.dtype, np.uint8)
        self.assertEqual(tuple(img[-1, -1]), PALETTE[0])
        spawn_x, spawn_y = env.game.piece.cells()[0]
        self.assertEqual(tuple(img[spawn_y * 12, spawn_x * 12]), PALETTE[int(env.game.piece.kind)])


if __name__ == "__main__":
    unittest.main()
