from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from falling_block_rl.game import Action, FallingBlockGame, GameConfig, TetrominoType, color


class FallingBlockEnv(gym.Env):
    """One env step = one player command, followed by gravity.

    With ``gravity_every=n`` the piece is pushed down one row after every
    ``n`` steps, so an agent that only ever sends ``NONE`` still loses.
    """

    metadata = {"render_modes": ["rgb_array"], "render_fps": 30}

    def __init__(self, config: Optional[GameConfig] = None, render_mode: Optional[str] = None,
                 gravity_every: int = 1,
                 line_reward_scale: float = 0.01,
                 step_penalty: float = 0.0,
                 terminal_penalty: float = -1.0,
                 max_episode_steps: int = 10000) -> None:
        super().__init__()
        self.game = FallingBlockGame(config)
        self.render_mode = render_mode

        self.gravity_every = int(gravity_every)
        self.line_reward_scale = float(line_reward_scale)
        self.step_penalty = float(step_penalty)
        self.terminal_penalty = float(terminal_penalty)
        self.max_episode_steps = int(max_episode_steps)

        h, w = self.game.grid.height, self.game.grid.width
        n_kinds = len(TetrominoType)

        # Grid holds locked kinds (1..7) and the falling piece as negative kinds
        self.observation_space = spaces.Dict(
            {
                "grid": spaces.Box(low=-n_kinds, high=n_kinds, shape=(h, w), dtype=np.int8),
                "next": spaces.Discrete(n_kinds + 1),
            }
        )
        self.action_space = spaces.Discrete(len(Action))

        self._steps = 0

    def _get_obs(self) -> Dict[str, Any]:
        return {
            "grid": self.game.get_state().astype(np.int8),
            "next": int(self.game.next_kind),
        }

    def _get_info(self) -> Dict[str, Any]:
        return {
            "score": self.game.score,
            "lines": self.game.lines,
            "level": self.game.level,
            "max_height": self.game.grid.get_max_height(),
            "holes": self.game.grid.count_holes(),
            "steps": self._steps,
        }

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        super().reset(seed=seed)
        self.game.reset(seed)
        self._steps = 0
        return self._get_obs(), self._get_info()

    def step(self, action: int):
        action = Action(int(action))
        score_before = self.game.score

        self.game.step(action)
        self._steps += 1
        if (
            self.gravity_every > 0
            and not self.game.game_over
            and action not in (Action.SOFT_DROP, Action.HARD_DROP)
            and self._steps % self.gravity_every == 0
        ):
            self.game.soft_drop()

        reward_components: Dict[str, float] = {
            "score": self.line_reward_scale * float(self.game.score - score_before),
            "step": self.step_penalty,
        }
        terminated = bool(self.game.game_over)
        truncated = self._steps >= self.max_episode_steps
        if terminated:
            reward_components["terminal"] = self.terminal_penalty

        reward = float(sum(reward_components.values()))

        info = self._get_info()
        info["reward_components"] = reward_components
        return self._get_obs(), reward, terminated, truncated, info

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode != "rgb_array":
            return None
        state = self.game.get_state()
        cell = 12
        h, w = state.shape
        img = np.zeros((h * cell, w * cell, 3), dtype=np.uint8)
        for y in range(h):
            for x in range(w):
                v = abs(int(state[y, x]))
                rgb = color(TetrominoType(v)) if v else (30, 30, 36)
                img[y * cell : (y + 1) * cell, x * cell : (x + 1) * cell, :] = rgb
        return img

    def close(self) -> None:
        pass
