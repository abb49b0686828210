"""
Core Game
=========

Main engine combining spawning, movement, destroy resolution, waves and
power-ups behind the call surface the presentation layer drives.
"""

from __future__ import annotations

import itertools
import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from sendem.zero_core.archetype_catalog import ArchetypeCatalog, get_catalog
from sendem.zero_core.config_loader import GameConfig, get_config
from sendem.zero_core.destroy_resolver import DestroyResolver, DestroyResult
from sendem.zero_core.game_state import (
    Difficulty,
    GameObject,
    GameState,
    PowerUpKind,
    WavePhase,
)
from sendem.zero_core.power_ups import PowerUpController
from sendem.zero_core.rules import BoundaryResult, GameRules
from sendem.zero_core.scheduler import CadenceScheduler
from sendem.zero_core.spawner import Spawner
from sendem.zero_core.state_snapshot import GameSnapshot, SnapshotBuilder
from sendem.zero_core.waves import WaveController, wave_announcement

logger = logging.getLogger(__name__)

PAUSE_MESSAGE = "Game Paused"


class TickKind(str, Enum):
    """Named cadences. The value doubles as the scheduler task name."""
    SPAWN = "spawn"
    MOVE = "move"
    POWER_UP = "power_up"
    WAVE_MESSAGE = "wave_message"
    WAVE_TRANSITION = "wave_transition"


@dataclass
class TickResult:
    """Result of a single cadence firing."""
    kind: TickKind
    applied: bool
    spawned: List[GameObject] = field(default_factory=list)
    boundary: BoundaryResult = field(default_factory=BoundaryResult.none)
    power_up_expired: bool = False
    wave_cleared: bool = False
    wave_started: bool = False


class ArcadeEngine:
    """
    Main game simulation class.

    Orchestrates:
    - Spawner (seeded)
    - Movement and boundary rules
    - Destroy resolution
    - Wave and power-up controllers
    - The virtual-time scheduler that serializes every mutation pass

    The engine owns exactly one GameState at a time. Every periodic task and
    player intent mutates it through the engine, one pass at a time.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None
    ):
        """
        Initialize engine.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for reproducible spawns.
            rng: Pre-built random source for the spawner (overrides seed).
        """
        if config is None:
            config = get_config()

        self._config = config

        # Subsystems
        self._catalog = get_catalog(config)
        self._rules = GameRules(config)
        self._power_ups = PowerUpController(config)
        self._waves = WaveController(self._power_ups, config)
        self._resolver = DestroyResolver(self._power_ups, config, self._catalog)
        self._spawner = Spawner(config, self._catalog, seed=seed, rng=rng)
        self._scheduler = CadenceScheduler()
        self._snapshot_builder = SnapshotBuilder(config)

        # Object ids never repeat within an engine, across restarts included
        self._ids = itertools.count(1)

        self._difficulty: Optional[Difficulty] = None
        self._state = self._new_state(0)

    def _new_state(self, num_columns: int) -> GameState:
        return GameState(
            num_columns=num_columns,
            lives=self._config.player.initial_lives,
            spawn_interval_ms=self._config.spawn.initial_interval_ms,
            base_quota=self._config.waves.base_quota,
            player_column=num_columns // 2,
        )

    def _next_id(self) -> int:
        return next(self._ids)

    @property
    def config(self) -> GameConfig:
        return self._config

    @property
    def catalog(self) -> ArchetypeCatalog:
        return self._catalog

    @property
    def scheduler(self) -> CadenceScheduler:
        return self._scheduler

    @property
    def difficulty(self) -> Optional[Difficulty]:
        return self._difficulty

    @property
    def num_columns(self) -> int:
        return self._state.num_columns

    @property
    def player_column(self) -> int:
        return self._state.player_column

    @property
    def score(self) -> int:
        return self._state.score

    @property
    def lives(self) -> int:
        return self._state.lives

    @property
    def wave(self) -> int:
        return self._state.wave

    @property
    def objects(self) -> Tuple[GameObject, ...]:
        """Objects in spawn order."""
        return tuple(self._state.objects)

    @property
    def objects_per_wave(self) -> int:
        return self._state.objects_per_wave

    @property
    def objects_destroyed_this_wave(self) -> int:
        return self._state.objects_destroyed_this_wave

    @property
    def spawn_interval_ms(self) -> int:
        return self._state.spawn_interval_ms

    @property
    def active_power_up(self) -> PowerUpKind:
        return self._state.active_power_up

    @property
    def power_up_remaining(self) -> int:
        """Seconds left on the active power-up."""
        return self._state.power_up_remaining

    @property
    def wave_message(self) -> Optional[str]:
        return self._state.wave_message

    @property
    def pause_message(self) -> Optional[str]:
        return self._state.pause_message

    @property
    def wave_phase(self) -> WavePhase:
        return self._state.wave_phase

    @property
    def is_started(self) -> bool:
        return self._state.started

    @property
    def is_paused(self) -> bool:
        return self._state.paused

    @property
    def is_over(self) -> bool:
        return self._state.over

    def select_difficulty(self, level: Union[Difficulty, str]) -> bool:
        """
        Fix the column count for the next game.

        Args:
            level: Difficulty or its name ("easy", "medium", "hard").

        Returns:
            True if applied, False if a game is already running.

        Raises:
            ValueError: If the level is unknown.
        """
        difficulty = Difficulty(level)
        if self._state.started:
            logger.debug("select_difficulty(%s) rejected: game already started", difficulty.value)
            return False

        columns = self._config.difficulty.columns_for(difficulty.value)
        self._difficulty = difficulty
        self._state = self._new_state(columns)
        logger.debug("difficulty %s: %d columns", difficulty.value, columns)
        return True

    def start(self) -> bool:
        """
        Start the game and its cadences.

        Returns:
            True if started, False without a difficulty or when already started.
        """
        state = self._state
        if self._difficulty is None:
            logger.debug("start() rejected: no difficulty selected")
            return False
        if state.started:
            return False

        state.started = True
        state.wave_message = wave_announcement(state.wave)

        self._scheduler.clear()
        self._scheduler.add_periodic(TickKind.SPAWN.value, state.spawn_interval_ms)
        self._scheduler.add_periodic(TickKind.MOVE.value, self._config.movement.interval_ms)
        self._scheduler.add_periodic(
            TickKind.POWER_UP.value, self._config.power_ups.countdown_interval_ms
        )
        self._scheduler.start_timer(TickKind.WAVE_MESSAGE.value, self._waves.message_duration_ms)

        logger.info("Game started: %s, %d columns", self._difficulty.value, state.num_columns)
        return True

    def restart(self) -> None:
        """Full reset to the pre-start state, difficulty cleared."""
        self._scheduler.clear()
        self._difficulty = None
        self._state = self._new_state(0)
        logger.info("Game restarted")

    def reset(self, seed: Optional[int] = None) -> GameSnapshot:
        """
        Restart and optionally reseed the spawner.

        Args:
            seed: New random seed. Keeps the current random stream if None.

        Returns:
            Snapshot of the fresh state.
        """
        if seed is not None:
            self._spawner.reset(seed)
        self.restart()
        return self.snapshot()

    def pause(self) -> bool:
        """Freeze every cadence. No-op if not running or already paused."""
        state = self._state
        if not state.started or state.over or state.paused:
            return False
        state.paused = True
        state.pause_message = PAUSE_MESSAGE
        self._scheduler.freeze()
        logger.info("Paused")
        return True

    def resume(self) -> bool:
        """Resume every cadence from where it stopped."""
        state = self._state
        if not state.paused:
            return False
        state.paused = False
        state.pause_message = None
        self._scheduler.thaw()
        logger.info("Resumed")
        return True

    def toggle_pause(self) -> bool:
        """The `pause` intent: pause if running, resume if paused."""
        if self._state.paused:
            return self.resume()
        return self.pause()

    def move_left(self) -> bool:
        if not self._state.is_running:
            return False
        self._state.player_column = max(self._state.player_column - 1, 0)
        return True

    def move_right(self) -> bool:
        if not self._state.is_running:
            return False
        self._state.player_column = min(self._state.player_column + 1, self._state.num_columns - 1)
        return True

    def destroy(self) -> Optional[DestroyResult]:
        """
        Destroy the newest object in the player's column.

        Returns:
            DestroyResult, or None if nothing was destroyed.
        """
        result = self._resolver.resolve(self._state, self._next_id)
        if result is None:
            return None

        # Cluster descendants are placed ahead of the parent and may land past the boundary
        if result.descendants:
            boundary = self._rules.boundary.check(self._state)
            if boundary.game_over:
                self._scheduler.clear()

        # A fresh power-up gets a full first second
        if result.power_up is not PowerUpKind.NONE and self._scheduler.get_periodic(TickKind.POWER_UP.value):
            self._scheduler.restart(TickKind.POWER_UP.value)

        self._check_wave()
        return result

    def tick(self, kind: Union[TickKind, str]) -> TickResult:
        """
        Fire one cadence by hand.

        For drivers that wire their own timers. One-shot cadences fired this
        way also cancel their pending scheduler timer.

        Args:
            kind: Which cadence to fire.

        Returns:
            TickResult; `applied` is False when the game is not running.
        """
        kind = TickKind(kind)
        if kind in (TickKind.WAVE_MESSAGE, TickKind.WAVE_TRANSITION) and self._state.is_running:
            self._scheduler.cancel_timer(kind.value)
        return self._run(kind)

    def advance(self, elapsed_ms: float) -> int:
        """
        Drive every cadence from the built-in virtual clock.

        Args:
            elapsed_ms: Real (or simulated) time since the previous call.

        Returns:
            Number of cadence firings dispatched.
        """
        if not self._state.is_running:
            return 0
        return self._scheduler.advance(elapsed_ms, self._dispatch)

    def _dispatch(self, name: str) -> None:
        self._run(TickKind(name))

    def _run(self, kind: TickKind) -> TickResult:
        """One exclusive mutation pass for a cadence."""
        state = self._state
        if not state.is_running:
            return TickResult(kind=kind, applied=False)

        result = TickResult(kind=kind, applied=True)

        if kind is TickKind.SPAWN:
            result.spawned = self._spawner.spawn(state, self._next_id)
        elif kind is TickKind.MOVE:
            # Boundary check strictly follows movement in the same pass
            result.boundary = self._rules.advance(state)
            if result.boundary.game_over:
                self._scheduler.clear()
        elif kind is TickKind.POWER_UP:
            result.power_up_expired = self._power_ups.countdown(state)
        elif kind is TickKind.WAVE_MESSAGE:
            self._waves.dismiss_message(state)
        elif kind is TickKind.WAVE_TRANSITION:
            if self._waves.complete(state):
                result.wave_started = True
                self._scheduler.set_interval(TickKind.SPAWN.value, state.spawn_interval_ms)

        result.wave_cleared = self._check_wave()
        return result

    def _check_wave(self) -> bool:
        if not self._waves.check(self._state):
            return False
        self._scheduler.start_timer(TickKind.WAVE_MESSAGE.value, self._waves.message_duration_ms)
        self._scheduler.start_timer(TickKind.WAVE_TRANSITION.value, self._waves.transition_delay_ms)
        return True

    def snapshot(self) -> GameSnapshot:
        return self._snapshot_builder.build(self._state)

    def get_info(self) -> Dict[str, Any]:
        """Summary dict for tools and the Gymnasium info channel."""
        state = self._state
        return {
            "score": state.score,
            "lives": state.lives,
            "wave": state.wave,
            "objects_destroyed": state.objects_destroyed_this_wave,
            "objects_per_wave": state.objects_per_wave,
            "objects_count": len(state.objects),
            "spawn_interval_ms": state.spawn_interval_ms,
            "power_up": state.active_power_up.value,
            "power_up_remaining": state.power_up_remaining,
            "wave_phase": state.wave_phase.value,
            "game_over": state.over,
        }

    def get_render_data(self) -> Dict[str, Any]:
        """
        Get data needed for rendering.

        Returns:
            Dict with per-object placement, HUD values and overlay messages.
        """
        state = self._state
        objects_data = [
            {
                "id": obj.id,
                "kind": obj.kind,
                "icon": obj.archetype.icon,
                "column": obj.column,
                "position": obj.position,
            }
            for obj in state.objects
        ]

        power_up = None
        if state.active_power_up is not PowerUpKind.NONE and state.power_up_remaining > 0:
            power_up = {"kind": state.active_power_up.value, "remaining": state.power_up_remaining}

        return {
            "num_columns": state.num_columns,
            "player_column": state.player_column,
            "boundary": self._rules.boundary.boundary,
            "objects": objects_data,
            "score": state.score,
            "lives": state.lives,
            "wave": state.wave,
            "objects_destroyed": state.objects_destroyed_this_wave,
            "objects_per_wave": state.objects_per_wave,
            "power_up": power_up,
            "wave_message": state.wave_message,
            "pause_message": state.pause_message,
            "started": state.started,
            "game_over": state.over,
        }
