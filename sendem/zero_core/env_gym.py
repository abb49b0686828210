"""
Gymnasium Environment Wrapper
=============================

Provides a standard Gymnasium interface to the arcade engine.
Reward is always 0.0 - agents compute their own from info.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple, Union

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from sendem.zero_core.config_loader import GameConfig, load_config
from sendem.zero_core.game import ArcadeEngine
from sendem.zero_core.game_state import Difficulty
from sendem.zero_core.state_snapshot import GameSnapshot

logger = logging.getLogger(__name__)

# Discrete action ids
NOOP = 0
MOVE_LEFT = 1
MOVE_RIGHT = 2
DESTROY = 3


class ArcadeEnv(gym.Env):
    """
    Send 'Em To Zero as a Gymnasium environment.

    Action Space:
        Discrete(4): 0 = noop, 1 = move left, 2 = move right, 3 = destroy.

    Observation Space:
        Dict of scalar game state, per-column features and padded object arrays.

    Step:
        Applies the action, then advances the engine by `env.frame_ms` of
        virtual time.

    Reward:
        Always 0.0. Agents must compute their own reward from the info dict.
    """

    metadata = {"render_modes": []}

    def __init__(
        self,
        config_path: Optional[str] = None,
        difficulty: Union[Difficulty, str] = Difficulty.MEDIUM,
        debug: bool = False,
    ):
        """
        Initialize environment.

        Args:
            config_path: Path to game_config.yaml. Uses default if None.
            difficulty: Difficulty used by reset() unless overridden in options.
            debug: If True, logs every step at INFO level.
        """
        super().__init__()

        self._config = load_config(config_path)
        self._difficulty = Difficulty(difficulty)
        self._debug = debug
        self._frame_ms = self._config.env.frame_ms
        self._max_steps = self._config.caps.max_env_steps
        self._steps = 0

        self._game = ArcadeEngine(config=self._config)

        self.action_space = spaces.Discrete(4)
        self.observation_space = self._build_observation_space()

    def _build_observation_space(self) -> spaces.Dict:
        """Build the observation space definition."""
        max_obj = self._config.observation.max_objects
        max_cols = max(self._config.difficulty.columns.values())
        boundary = self._config.board.boundary
        int_max = np.iinfo(np.int32).max

        return spaces.Dict({
            "score": spaces.Box(low=0, high=np.iinfo(np.int64).max, shape=(), dtype=np.int64),
            "lives": spaces.Box(low=0, high=int_max, shape=(), dtype=np.int32),
            "wave": spaces.Box(low=1, high=int_max, shape=(), dtype=np.int32),
            "objects_destroyed": spaces.Box(low=0, high=int_max, shape=(), dtype=np.int32),
            "objects_per_wave": spaces.Box(low=0, high=int_max, shape=(), dtype=np.int32),
            "player_column": spaces.Box(low=0, high=max_cols, shape=(), dtype=np.int32),
            "num_columns": spaces.Box(low=0, high=max_cols, shape=(), dtype=np.int32),
            "power_up": spaces.Box(low=0, high=2, shape=(), dtype=np.int32),
            "power_up_remaining": spaces.Box(
                low=0, high=self._config.power_ups.duration_seconds, shape=(), dtype=np.int32
            ),
            "objects_count": spaces.Box(low=0, high=int_max, shape=(), dtype=np.int32),

            "col_count": spaces.Box(low=0, high=np.iinfo(np.int16).max, shape=(max_cols,), dtype=np.int16),
            "col_highest": spaces.Box(low=0, high=np.inf, shape=(max_cols,), dtype=np.float32),
            "col_target_position": spaces.Box(low=-1, high=np.inf, shape=(max_cols,), dtype=np.float32),

            "obj_archetype_id": spaces.Box(
                low=-1, high=self._config.num_archetypes, shape=(max_obj,), dtype=np.int16
            ),
            "obj_column": spaces.Box(low=-1, high=max_cols, shape=(max_obj,), dtype=np.int16),
            "obj_position": spaces.Box(low=0, high=boundary * 2, shape=(max_obj,), dtype=np.float32),
            "obj_speed": spaces.Box(low=0, high=np.inf, shape=(max_obj,), dtype=np.float32),
            "obj_mask": spaces.MultiBinary(max_obj),
        })

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None
    ) -> Tuple[Dict[str, np.ndarray], Dict[str, Any]]:
        """
        Reset the environment and start a new game.

        Args:
            seed: Random seed for reproducibility.
            options: Optional {"difficulty": "easy" | "medium" | "hard"}.

        Returns:
            (observation, info) tuple.
        """
        super().reset(seed=seed)

        difficulty = self._difficulty
        if options and "difficulty" in options:
            difficulty = Difficulty(options["difficulty"])

        self._game.reset(seed=seed)
        self._game.select_difficulty(difficulty)
        self._game.start()
        self._steps = 0

        obs = self._snapshot_to_obs(self._game.snapshot())
        info = self._game.get_info()
        info["delta_score"] = 0
        return obs, info

    def step(
        self,
        action: Union[int, np.integer, np.ndarray]
    ) -> Tuple[Dict[str, np.ndarray], float, bool, bool, Dict[str, Any]]:
        """
        Execute one step.

        Args:
            action: Discrete action id.

        Returns:
            (observation, reward, terminated, truncated, info) tuple.
            Reward is always 0.0.
        """
        if isinstance(action, np.ndarray):
            action = int(action.item())
        action = int(action)

        score_before = self._game.score
        lives_before = self._game.lives

        if action == MOVE_LEFT:
            self._game.move_left()
        elif action == MOVE_RIGHT:
            self._game.move_right()
        elif action == DESTROY:
            self._game.destroy()
        elif action != NOOP:
            raise ValueError(f"Invalid action: {action}")

        self._game.advance(self._frame_ms)
        self._steps += 1

        obs = self._snapshot_to_obs(self._game.snapshot())
        terminated = self._game.is_over
        truncated = not terminated and self._steps >= self._max_steps

        info = self._game.get_info()
        info["delta_score"] = self._game.score - score_before
        info["delta_lives"] = self._game.lives - lives_before
        info["steps"] = self._steps

        if self._debug:
            logger.info("step %d: action=%d score=%d lives=%d objects=%d",
                        self._steps, action, info["score"], info["lives"], info["objects_count"])
            if terminated:
                logger.info("terminated at wave %d", info["wave"])

        return obs, 0.0, terminated, truncated, info

    def _snapshot_to_obs(self, snapshot: GameSnapshot) -> Dict[str, np.ndarray]:
        return snapshot.to_obs_dict()

    def close(self) -> None:
        """Nothing to release; kept for the Gymnasium API."""

    @property
    def game(self) -> ArcadeEngine:
        """Access to underlying engine (for debugging/tools)."""
        return self._game

    @property
    def config(self) -> GameConfig:
        return self._config
