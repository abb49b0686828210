"""
State Snapshot
==============

Packs game state into fixed-size numpy arrays for renderers, agents and
Gymnasium observations. Includes per-column derived features.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

import numpy as np

from sendem.zero_core.config_loader import GameConfig, get_config
from sendem.zero_core.game_state import GameState, PowerUpKind

# Integer codes for the active power-up in observations
POWER_UP_CODES = {
    PowerUpKind.NONE: 0,
    PowerUpKind.SLOW: 1,
    PowerUpKind.SHIELD: 2,
}


@dataclass
class GameSnapshot:
    """
    Complete game state snapshot.

    Object arrays are fixed-size with masking; objects are packed in spawn
    order so the last masked entry of a column is its destroy target.
    """
    # Core state
    score: int
    lives: int
    wave: int
    objects_destroyed: int
    objects_per_wave: int
    spawn_interval_ms: int
    player_column: int
    num_columns: int
    power_up: int
    power_up_remaining: int
    paused: bool
    over: bool
    objects_count: int

    # Per-column features (padded to the widest difficulty)
    col_count: np.ndarray             # (MAX_COLS,) int16
    col_highest: np.ndarray           # (MAX_COLS,) float32, 0 when empty
    col_target_position: np.ndarray   # (MAX_COLS,) float32, -1 when empty

    # Object arrays (fixed size, padded)
    obj_id: np.ndarray                # (MAX_OBJ,) int64
    obj_archetype_id: np.ndarray      # (MAX_OBJ,) int16
    obj_column: np.ndarray            # (MAX_OBJ,) int16
    obj_position: np.ndarray          # (MAX_OBJ,) float32
    obj_speed: np.ndarray             # (MAX_OBJ,) float32
    obj_mask: np.ndarray              # (MAX_OBJ,) bool

    def to_obs_dict(self) -> Dict[str, np.ndarray]:
        """Convert to Gymnasium observation dictionary."""
        return {
            "score": np.array(self.score, dtype=np.int64),
            "lives": np.array(self.lives, dtype=np.int32),
            "wave": np.array(self.wave, dtype=np.int32),
            "objects_destroyed": np.array(self.objects_destroyed, dtype=np.int32),
            "objects_per_wave": np.array(self.objects_per_wave, dtype=np.int32),
            "player_column": np.array(self.player_column, dtype=np.int32),
            "num_columns": np.array(self.num_columns, dtype=np.int32),
            "power_up": np.array(self.power_up, dtype=np.int32),
            "power_up_remaining": np.array(self.power_up_remaining, dtype=np.int32),
            "objects_count": np.array(self.objects_count, dtype=np.int32),

            "col_count": self.col_count,
            "col_highest": self.col_highest,
            "col_target_position": self.col_target_position,

            "obj_archetype_id": self.obj_archetype_id,
            "obj_column": self.obj_column,
            "obj_position": self.obj_position,
            "obj_speed": self.obj_speed,
            "obj_mask": self.obj_mask,
        }


class SnapshotBuilder:
    """Builds game state snapshots sized from the configuration."""

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._config = config
        self._max_objects = config.observation.max_objects
        self._max_columns = max(config.difficulty.columns.values())

    @property
    def max_objects(self) -> int:
        return self._max_objects

    @property
    def max_columns(self) -> int:
        return self._max_columns

    def build(self, state: GameState) -> GameSnapshot:
        """Build a snapshot from current game state."""
        obj_id = np.zeros(self._max_objects, dtype=np.int64)
        obj_archetype_id = np.full(self._max_objects, -1, dtype=np.int16)
        obj_column = np.full(self._max_objects, -1, dtype=np.int16)
        obj_position = np.zeros(self._max_objects, dtype=np.float32)
        obj_speed = np.zeros(self._max_objects, dtype=np.float32)
        obj_mask = np.zeros(self._max_objects, dtype=bool)

        col_count = np.zeros(self._max_columns, dtype=np.int16)
        col_highest = np.zeros(self._max_columns, dtype=np.float32)
        col_target_position = np.full(self._max_columns, -1.0, dtype=np.float32)

        # Column features use every object, even past the packing cap
        for obj in state.objects:
            if 0 <= obj.column < self._max_columns:
                col_count[obj.column] += 1
                col_highest[obj.column] = max(col_highest[obj.column], obj.position)
                col_target_position[obj.column] = obj.position

        count = min(len(state.objects), self._max_objects)
        for i, obj in enumerate(state.objects[:count]):
            obj_id[i] = obj.id
            obj_archetype_id[i] = obj.archetype.id
            obj_column[i] = obj.column
            obj_position[i] = obj.position
            obj_speed[i] = obj.speed
            obj_mask[i] = True

        return GameSnapshot(
            score=state.score,
            lives=state.lives,
            wave=state.wave,
            objects_destroyed=state.objects_destroyed_this_wave,
            objects_per_wave=state.objects_per_wave,
            spawn_interval_ms=state.spawn_interval_ms,
            player_column=state.player_column,
            num_columns=state.num_columns,
            power_up=POWER_UP_CODES[state.active_power_up],
            power_up_remaining=state.power_up_remaining,
            paused=state.paused,
            over=state.over,
            objects_count=len(state.objects),
            col_count=col_count,
            col_highest=col_highest,
            col_target_position=col_target_position,
            obj_id=obj_id,
            obj_archetype_id=obj_archetype_id,
            obj_column=obj_column,
            obj_position=obj_position,
            obj_speed=obj_speed,
            obj_mask=obj_mask,
        )
