"""
Destroy Resolver
================

Resolves a player destroy intent against the player's column: removes the
newest object there and applies its archetype effect.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from sendem.zero_core.archetype_catalog import Archetype, ArchetypeCatalog, get_catalog
from sendem.zero_core.config_loader import GameConfig, get_config
from sendem.zero_core.game_state import GameObject, GameState, PowerUpKind
from sendem.zero_core.power_ups import PowerUpController

logger = logging.getLogger(__name__)


class DestroyEffect(str, Enum):
    HEART = "heart"
    SPLIT = "split"
    POWER_UP = "power_up"
    EXTRA_LIFE = "extra_life"
    PLAIN = "plain"


@dataclass
class DestroyResult:
    """Result of a single resolved destroy."""
    destroyed: GameObject
    effect: DestroyEffect
    descendants: List[GameObject] = field(default_factory=list)
    power_up: PowerUpKind = PowerUpKind.NONE
    points: int = 1

    def __repr__(self) -> str:
        return f"DestroyResult({self.destroyed.kind} #{self.destroyed.id}, {self.effect.value})"


class DestroyResolver:
    """
    Applies destroy intents.

    Every resolved destroy scores one point and counts toward the wave quota,
    whatever the archetype.
    """

    POINTS_PER_DESTROY = 1

    def __init__(
        self,
        power_ups: PowerUpController,
        config: Optional[GameConfig] = None,
        catalog: Optional[ArchetypeCatalog] = None
    ):
        """
        Initialize destroy resolver.

        Args:
            power_ups: Controller used to activate timed power-ups.
            config: Game configuration. Uses default if None.
            catalog: Archetype catalog. Built from config if None.
        """
        if config is None:
            config = get_config()
        if catalog is None:
            catalog = get_catalog(config)

        self._config = config
        self._catalog = catalog
        self._power_ups = power_ups
        self._max_lives = config.player.max_lives
        self._cluster_offsets = config.split.cluster_offsets
        self._egg_offsets = config.split.egg_offsets

    def _gain_life(self, state: GameState) -> None:
        state.lives = min(state.lives + 1, self._max_lives)

    def _split(
        self,
        state: GameState,
        target: GameObject,
        next_id: Callable[[], int]
    ) -> List[GameObject]:
        """Build the two descendants of a split object."""
        if target.is_cluster:
            child: Archetype = self._catalog.egg
            offsets = self._cluster_offsets
        else:
            child = self._catalog.rocket
            offsets = self._egg_offsets

        columns = (state.player_column, (state.player_column + 1) % state.num_columns)
        return [
            GameObject(
                id=next_id(),
                position=target.position + offset,
                column=column,
                archetype=child,
                speed=child.base_speed
            )
            for offset, column in zip(offsets, columns)
        ]

    def resolve(
        self,
        state: GameState,
        next_id: Callable[[], int]
    ) -> Optional[DestroyResult]:
        """
        Destroy the newest object in the player's column.

        Args:
            state: Game state, mutated in place.
            next_id: Source of unique ids for split descendants.

        Returns:
            DestroyResult, or None when the intent was a no-op (game not
            running or the column is empty).
        """
        if not state.is_running:
            return None

        target = state.newest_in_column(state.player_column)
        if target is None:
            return None

        state.remove_object(target.id)
        archetype = target.archetype

        if archetype.name == self._catalog.heart.name:
            self._gain_life(state)
            result = DestroyResult(target, DestroyEffect.HEART)
        elif target.splits:
            descendants = self._split(state, target, next_id)
            state.objects.extend(descendants)
            result = DestroyResult(target, DestroyEffect.SPLIT, descendants=descendants)
        elif target.is_power_up:
            if archetype.name == self._catalog.extra_life.name:
                self._gain_life(state)
                result = DestroyResult(target, DestroyEffect.EXTRA_LIFE)
            else:
                kind = PowerUpKind(archetype.name)
                self._power_ups.activate(state, kind)
                result = DestroyResult(target, DestroyEffect.POWER_UP, power_up=kind)
        else:
            result = DestroyResult(target, DestroyEffect.PLAIN)

        result.points = self.POINTS_PER_DESTROY
        state.score += self.POINTS_PER_DESTROY
        state.objects_destroyed_this_wave += 1

        logger.debug("destroyed %s #%d in column %d (%s)",
                     target.kind, target.id, target.column, result.effect.value)
        return result
