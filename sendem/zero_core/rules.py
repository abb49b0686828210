"""
Game Rules
==========

Handles object movement and the top-boundary check with its life penalty.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from sendem.zero_core.config_loader import GameConfig, get_config
from sendem.zero_core.game_state import GameObject, GameState, PowerUpKind

logger = logging.getLogger(__name__)


@dataclass
class BoundaryResult:
    """Result of one boundary check."""
    escaped: List[GameObject] = field(default_factory=list)
    lives_lost: int = 0
    game_over: bool = False

    @staticmethod
    def none() -> "BoundaryResult":
        return BoundaryResult()


class MovementRules:
    """
    Advances every object toward the boundary.

    Movement is the only place speed is applied; the slow power-up scales it
    here without touching the stored per-object speed.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize movement rules.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._slow_factor = config.power_ups.slow_factor

    def speed_factor(self, state: GameState) -> float:
        """Multiplier applied to every object's speed this tick."""
        return self._slow_factor if state.active_power_up is PowerUpKind.SLOW else 1.0

    def move(self, state: GameState) -> int:
        """
        Advance all objects by one movement tick.

        Returns:
            Number of objects moved (0 when the game is not running).
        """
        if not state.is_running:
            return 0

        factor = self.speed_factor(state)
        for obj in state.objects:
            obj.position += obj.speed * factor
        return len(state.objects)


class BoundaryGuard:
    """
    Removes objects that reached the boundary and applies life loss.

    - Power-up pickups escape for free
    - An active shield negates the penalty for everything else
    - Lives floor at 0, and reaching 0 ends the game
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize boundary guard.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._boundary = config.board.boundary

    @property
    def boundary(self) -> float:
        return self._boundary

    def check(self, state: GameState) -> BoundaryResult:
        """
        Remove escaped objects and apply penalties.

        Args:
            state: Game state, mutated in place.

        Returns:
            BoundaryResult describing what escaped and what it cost.
        """
        escaped = [obj for obj in state.objects if obj.position >= self._boundary]
        if not escaped:
            return BoundaryResult.none()

        state.objects = [obj for obj in state.objects if obj.position < self._boundary]

        result = BoundaryResult(escaped=escaped)
        shielded = state.active_power_up is PowerUpKind.SHIELD
        for obj in escaped:
            if obj.is_power_up or shielded:
                continue
            if state.lives > 0:
                state.lives -= 1
                result.lives_lost += 1
            if state.lives == 0 and not state.over:
                state.over = True
                result.game_over = True

        if result.lives_lost:
            logger.debug("%d object(s) escaped, lives now %d", result.lives_lost, state.lives)
        if result.game_over:
            logger.info("Game over at wave %d with score %d", state.wave, state.score)
        return result


class GameRules:
    """
    Combined interface for movement and boundary rules.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._config = config
        self.movement = MovementRules(config)
        self.boundary = BoundaryGuard(config)

    def advance(self, state: GameState) -> BoundaryResult:
        """One movement tick: move everything, then check the boundary."""
        if self.movement.move(state) == 0:
            return BoundaryResult.none()
        return self.boundary.check(state)
