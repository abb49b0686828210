"""
Wave Controller
===============

Tracks the per-wave destroy quota and drives wave transitions:

    Active -> Transitioning -> Active(wave + 1)

The controller only mutates state; the 2-second transition delay and the
announcement dismissal are timers on the engine's scheduler.
"""

from __future__ import annotations

import logging
from typing import Optional

from sendem.zero_core.config_loader import GameConfig, get_config
from sendem.zero_core.game_state import GameState, WavePhase
from sendem.zero_core.power_ups import PowerUpController

logger = logging.getLogger(__name__)


def wave_announcement(wave: int) -> str:
    """Announcement shown when `wave` is about to begin."""
    return f"Wave {wave} starting"


class WaveController:
    """Wave quota bookkeeping and difficulty escalation."""

    def __init__(
        self,
        power_ups: PowerUpController,
        config: Optional[GameConfig] = None
    ):
        if config is None:
            config = get_config()

        self._config = config
        self._power_ups = power_ups
        self._interval_step = config.spawn.interval_step_ms
        self._min_interval = config.spawn.min_interval_ms

    @property
    def transition_delay_ms(self) -> int:
        return self._config.waves.transition_delay_ms

    @property
    def message_duration_ms(self) -> int:
        return self._config.waves.message_duration_ms

    def quota_reached(self, state: GameState) -> bool:
        return state.objects_destroyed_this_wave >= state.objects_per_wave

    def check(self, state: GameState) -> bool:
        """
        Start a transition if the quota is met.

        Only an Active wave can trigger, so a wave transitions at most once
        no matter how many destroys land while it is Transitioning.

        Returns:
            True if a transition started.
        """
        if not state.is_running or state.wave_phase is not WavePhase.ACTIVE:
            return False
        if not self.quota_reached(state):
            return False

        state.wave_phase = WavePhase.TRANSITIONING
        state.objects.clear()
        state.wave_message = wave_announcement(state.wave + 1)
        self._power_ups.clear(state)
        logger.info("Wave %d cleared (%d destroyed), transitioning",
                    state.wave, state.objects_destroyed_this_wave)
        return True

    def next_spawn_interval(self, interval_ms: int) -> int:
        return max(self._min_interval, interval_ms - self._interval_step)

    def complete(self, state: GameState) -> bool:
        """
        Finish a pending transition.

        The bonus life is deliberately not capped at max_lives.

        Returns:
            True if a transition was pending and has now completed.
        """
        if state.wave_phase is not WavePhase.TRANSITIONING:
            return False

        state.wave += 1
        state.objects_destroyed_this_wave = 0
        state.spawn_interval_ms = self.next_spawn_interval(state.spawn_interval_ms)
        state.lives += 1
        state.wave_phase = WavePhase.ACTIVE
        logger.info("Wave %d started: quota %d, spawn interval %dms, lives %d",
                    state.wave, state.objects_per_wave, state.spawn_interval_ms, state.lives)
        return True

    def dismiss_message(self, state: GameState) -> bool:
        if state.wave_message is None:
            return False
        state.wave_message = None
        return True
