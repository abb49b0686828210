"""
Game State
==========

The authoritative mutable record of one session. Owned by a single
ArcadeEngine; subsystems receive it as an argument for the duration of a
mutation pass and never keep a reference of their own.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from sendem.zero_core.archetype_catalog import Archetype


class Difficulty(str, Enum):
    """Difficulty levels; the value is the config key for the column count."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class PowerUpKind(str, Enum):
    """Timed global effects. extraLife is instant and never active."""
    NONE = "none"
    SLOW = "slow"
    SHIELD = "shield"


class WavePhase(str, Enum):
    ACTIVE = "active"
    TRANSITIONING = "transitioning"


@dataclass
class GameObject:
    """One rising entity."""
    id: int
    position: float
    column: int
    archetype: Archetype
    speed: float

    @property
    def kind(self) -> str:
        return self.archetype.name

    @property
    def splits(self) -> bool:
        return self.archetype.splits

    @property
    def is_cluster(self) -> bool:
        return self.archetype.is_cluster

    @property
    def is_power_up(self) -> bool:
        return self.archetype.is_power_up


@dataclass
class GameState:
    """
    Complete session state.

    `objects` is kept in spawn order; the destroy target in a column is the
    last matching entry.
    """
    num_columns: int
    lives: int
    spawn_interval_ms: int
    base_quota: int = 20
    player_column: int = 0
    objects: List[GameObject] = field(default_factory=list)
    score: int = 0
    wave: int = 1
    objects_destroyed_this_wave: int = 0
    active_power_up: PowerUpKind = PowerUpKind.NONE
    power_up_remaining: int = 0
    wave_phase: WavePhase = WavePhase.ACTIVE
    wave_message: Optional[str] = None
    pause_message: Optional[str] = None
    started: bool = False
    paused: bool = False
    over: bool = False

    @property
    def objects_per_wave(self) -> int:
        """Destroy quota for the current wave."""
        return self.base_quota + self.wave - 1

    @property
    def is_running(self) -> bool:
        """True while periodic tasks and player intents are accepted."""
        return self.started and not self.paused and not self.over

    def newest_in_column(self, column: int) -> Optional[GameObject]:
        """Most recently spawned object in a column, or None if empty."""
        for obj in reversed(self.objects):
            if obj.column == column:
                return obj
        return None

    def remove_object(self, object_id: int) -> None:
        self.objects = [obj for obj in self.objects if obj.id != object_id]
