"""
Archetype Catalog
=================

Provides convenient access to the rising-object archetypes loaded from config.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Tuple

from sendem.zero_core.config_loader import ArchetypeConfig, GameConfig, get_config


@dataclass(frozen=True)
class Archetype:
    """
    Runtime representation of an archetype.

    Wraps ArchetypeConfig with the trait flags the engine consults.
    """
    config: ArchetypeConfig

    @property
    def id(self) -> int:
        return self.config.id

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def icon(self) -> str:
        return self.config.icon

    @property
    def base_speed(self) -> float:
        return self.config.speed

    @property
    def splits(self) -> bool:
        """True if destroying this archetype yields two descendants."""
        return self.config.splits

    @property
    def is_cluster(self) -> bool:
        return self.config.cluster

    @property
    def is_power_up(self) -> bool:
        """True for pickups; these never cost a life when they escape."""
        return self.config.power_up

    def scaled_speed(self, wave: int, growth_per_wave: float) -> float:
        """Base speed scaled for the given wave."""
        return self.base_speed * (1 + (wave - 1) * growth_per_wave)

    def __repr__(self) -> str:
        return f"Archetype({self.id}: {self.name})"


class ArchetypeCatalog:
    """
    Collection of all archetypes.

    Provides indexed and by-name access plus the named archetypes the
    spawner and destroy resolver refer to.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize catalog from game config.

        Args:
            config: GameConfig instance. If None, loads from default location.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._types: Tuple[Archetype, ...] = tuple(
            Archetype(archetype_config) for archetype_config in config.archetypes
        )
        self._by_name: Dict[str, Archetype] = {a.name: a for a in self._types}
        self._common_pool: Tuple[Archetype, ...] = tuple(
            self._by_name[name] for name in config.spawn.common_pool
        )

    def __len__(self) -> int:
        return len(self._types)

    def __getitem__(self, archetype_id: int) -> Archetype:
        """Get archetype by ID."""
        if 0 <= archetype_id < len(self._types):
            return self._types[archetype_id]
        raise IndexError(f"Archetype ID {archetype_id} out of range [0, {len(self._types)})")

    def __iter__(self) -> Iterator[Archetype]:
        return iter(self._types)

    @property
    def common_pool(self) -> Tuple[Archetype, ...]:
        """Archetypes drawn uniformly by the fallback spawn branch."""
        return self._common_pool

    def get_by_name(self, name: str) -> Optional[Archetype]:
        """Get archetype by exact name."""
        return self._by_name.get(name)

    @property
    def rocket(self) -> Archetype:
        return self._by_name["rocket"]

    @property
    def heart(self) -> Archetype:
        return self._by_name["heart"]

    @property
    def egg(self) -> Archetype:
        return self._by_name["egg"]

    @property
    def egg_cluster(self) -> Archetype:
        return self._by_name["eggCluster"]

    @property
    def slow(self) -> Archetype:
        return self._by_name["slow"]

    @property
    def shield(self) -> Archetype:
        return self._by_name["shield"]

    @property
    def extra_life(self) -> Archetype:
        return self._by_name["extraLife"]


# Module-level cache
_cached_catalog: Optional[ArchetypeCatalog] = None


def get_catalog(config: Optional[GameConfig] = None) -> ArchetypeCatalog:
    """
    Get the archetype catalog.

    Args:
        config: Optional config to use. If None, uses cached or default config.

    Returns:
        ArchetypeCatalog instance.
    """
    global _cached_catalog
    if _cached_catalog is None or config is not None:
        _cached_catalog = ArchetypeCatalog(config)
    return _cached_catalog
