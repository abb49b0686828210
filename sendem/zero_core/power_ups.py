"""
Power-Up Controller
===================

Countdown state machine for the active power-up:

    none -> active(kind, remaining_seconds) -> none

The countdown is driven by a one-second cadence owned by the engine's
scheduler, so pausing freezes it with the rest of the game.
"""

from __future__ import annotations

import logging
from typing import Optional

from sendem.zero_core.config_loader import GameConfig, get_config
from sendem.zero_core.game_state import GameState, PowerUpKind

logger = logging.getLogger(__name__)


class PowerUpController:
    """Activates, counts down and clears timed power-ups."""

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._config = config
        self._duration = config.power_ups.duration_seconds

    @property
    def duration(self) -> int:
        return self._duration

    def activate(self, state: GameState, kind: PowerUpKind) -> None:
        """Start `kind`, replacing any active power-up and its timer."""
        if kind is PowerUpKind.NONE:
            self.clear(state)
            return
        state.active_power_up = kind
        state.power_up_remaining = self._duration
        logger.debug("power-up %s active for %ds", kind.value, self._duration)

    def clear(self, state: GameState) -> None:
        state.active_power_up = PowerUpKind.NONE
        state.power_up_remaining = 0

    def countdown(self, state: GameState) -> bool:
        """
        One second of countdown.

        Returns:
            True if the power-up expired on this tick.
        """
        if not state.is_running or state.active_power_up is PowerUpKind.NONE:
            return False

        if state.power_up_remaining > 0:
            state.power_up_remaining -= 1
        if state.power_up_remaining <= 0:
            logger.debug("power-up %s expired", state.active_power_up.value)
            self.clear(state)
            return True
        return False
