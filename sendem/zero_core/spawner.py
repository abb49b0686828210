"""
Spawner
=======

Decides, on each spawn tick, whether and what to create.

Archetype selection walks a fixed priority list where every branch takes a
fresh uniform sample. The thresholds overlap (the slow branch at 0.10 is only
reached after the shield branch at 0.05 drew and missed), so the effective
frequencies are not the raw thresholds. This is the observed tuning and is
kept as-is rather than collapsed into one weighted draw.
"""

from __future__ import annotations

import logging
import random
from typing import Callable, List, Optional

from sendem.zero_core.archetype_catalog import Archetype, ArchetypeCatalog, get_catalog
from sendem.zero_core.config_loader import GameConfig, get_config
from sendem.zero_core.game_state import GameObject, GameState

logger = logging.getLogger(__name__)


class Spawner:
    """
    Seeded spawn policy.

    All randomness goes through one `random.Random`, so a seed reproduces the
    whole spawn sequence.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        catalog: Optional[ArchetypeCatalog] = None,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None
    ):
        """
        Initialize spawner.

        Args:
            config: Game configuration. Uses default if None.
            catalog: Archetype catalog. Built from config if None.
            seed: Random seed for reproducibility. Random if None.
            rng: Pre-built random source; overrides `seed` when given.
        """
        if config is None:
            config = get_config()
        if catalog is None:
            catalog = get_catalog(config)

        self._config = config
        self._spawn = config.spawn
        self._catalog = catalog
        self._spawn_position = config.board.spawn_position
        self._rng = rng if rng is not None else random.Random(seed)

    @property
    def rng(self) -> random.Random:
        return self._rng

    def reset(self, seed: Optional[int] = None) -> None:
        """
        Reseed the random source.

        Args:
            seed: New random seed. Keeps the current stream if None.
        """
        if seed is not None:
            self._rng.seed(seed)

    def draw(self) -> float:
        """A fresh uniform sample in [0, 1)."""
        return self._rng.random()

    def select_archetype(self, wave: int) -> Archetype:
        """Pick the archetype of the primary spawn for this wave."""
        cfg = self._spawn
        if wave >= cfg.cluster_min_wave and self.draw() < cfg.cluster_chance:
            return self._catalog.egg_cluster
        if wave >= cfg.egg_min_wave and self.draw() < cfg.egg_chance:
            return self._catalog.egg
        if self.draw() < cfg.shield_chance:
            return self._catalog.shield
        if self.draw() < cfg.slow_chance:
            return self._catalog.slow
        return self.pick_common()

    def pick_common(self) -> Archetype:
        pool = self._catalog.common_pool
        return pool[self._rng.randrange(len(pool))]

    def dual_spawn_chance(self, wave: int) -> float:
        """Probability that a spawn tick also creates a second object."""
        cfg = self._spawn
        return max(0.0, cfg.dual_base + wave * cfg.dual_per_wave - cfg.dual_offset)

    def pick_column(self, num_columns: int) -> int:
        return self._rng.randrange(num_columns)

    def pick_distinct_column(self, num_columns: int, taken: int) -> Optional[int]:
        """
        Resample a column until it differs from `taken`.

        Gives up after the configured number of retries, and immediately when
        there is no other column to choose.
        """
        if num_columns < 2:
            return None
        for _ in range(self._spawn.dual_column_retries):
            column = self.pick_column(num_columns)
            if column != taken:
                return column
        return None

    def make_object(
        self,
        object_id: int,
        archetype: Archetype,
        column: int,
        wave: int
    ) -> GameObject:
        """Build a freshly spawned object with its wave-scaled speed."""
        return GameObject(
            id=object_id,
            position=self._spawn_position,
            column=column,
            archetype=archetype,
            speed=archetype.scaled_speed(wave, self._spawn.speed_growth_per_wave)
        )

    def spawn(self, state: GameState, next_id: Callable[[], int]) -> List[GameObject]:
        """
        Run one spawn tick against the state.

        Args:
            state: Game state; new objects are appended to `state.objects`.
            next_id: Source of unique object ids.

        Returns:
            The objects created this tick (empty when the wave quota is full).
        """
        if len(state.objects) >= state.objects_per_wave:
            return []

        wave = state.wave
        archetype = self.select_archetype(wave)
        spawn_two = self.draw() < self.dual_spawn_chance(wave)

        first = self.make_object(next_id(), archetype, self.pick_column(state.num_columns), wave)
        created = [first]

        if spawn_two:
            second_type = self.pick_common()
            column = self.pick_distinct_column(state.num_columns, first.column)
            if column is not None:
                created.append(self.make_object(next_id(), second_type, column, wave))
            else:
                logger.debug("dual spawn skipped: no column distinct from %d", first.column)

        state.objects.extend(created)
        for obj in created:
            logger.debug("spawned %s #%d in column %d", obj.kind, obj.id, obj.column)
        return created
