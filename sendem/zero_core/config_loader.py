"""
Configuration Loader
====================

Loads and validates game_config.yaml, providing typed access to all parameters.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml


# Archetype names the engine refers to directly
REQUIRED_ARCHETYPES = (
    "rocket",
    "heart",
    "egg",
    "eggCluster",
    "slow",
    "shield",
    "extraLife",
)

POWER_UP_ARCHETYPES = ("slow", "shield", "extraLife")


@dataclass(frozen=True)
class BoardConfig:
    """Column geometry (positions are percentages of column height)."""
    boundary: float        # Objects at or beyond this position are removed
    spawn_position: float  # Starting position of every spawned object


@dataclass(frozen=True)
class DifficultyConfig:
    """Column count per difficulty level."""
    columns: Dict[str, int]

    def columns_for(self, level: str) -> int:
        if level not in self.columns:
            raise ValueError(f"Unknown difficulty: {level!r}")
        return self.columns[level]


@dataclass(frozen=True)
class PlayerConfig:
    initial_lives: int
    max_lives: int


@dataclass(frozen=True)
class SpawnConfig:
    """Spawn cadence and archetype selection parameters."""
    initial_interval_ms: int
    interval_step_ms: int
    min_interval_ms: int
    speed_growth_per_wave: float
    cluster_min_wave: int
    cluster_chance: float
    egg_min_wave: int
    egg_chance: float
    shield_chance: float
    slow_chance: float
    dual_base: float
    dual_per_wave: float
    dual_offset: float
    dual_column_retries: int
    common_pool: Tuple[str, ...]


@dataclass(frozen=True)
class WaveConfig:
    base_quota: int
    transition_delay_ms: int
    message_duration_ms: int


@dataclass(frozen=True)
class PowerUpConfig:
    duration_seconds: int
    countdown_interval_ms: int
    slow_factor: float


@dataclass(frozen=True)
class MovementConfig:
    interval_ms: int


@dataclass(frozen=True)
class SplitConfig:
    """Position offsets of the two descendants created by a split."""
    cluster_offsets: Tuple[float, float]
    egg_offsets: Tuple[float, float]


@dataclass(frozen=True)
class ArchetypeConfig:
    """Configuration for a single archetype."""
    id: int
    name: str
    icon: str
    speed: float
    splits: bool = False
    cluster: bool = False
    power_up: bool = False


@dataclass(frozen=True)
class ObservationConfig:
    max_objects: int


@dataclass(frozen=True)
class CapsConfig:
    max_env_steps: int


@dataclass(frozen=True)
class EnvConfig:
    frame_ms: int


@dataclass(frozen=True)
class GameConfig:
    """
    Complete game configuration loaded from YAML.

    All values are immutable to prevent accidental modification during runtime.
    """
    board: BoardConfig
    difficulty: DifficultyConfig
    player: PlayerConfig
    spawn: SpawnConfig
    waves: WaveConfig
    power_ups: PowerUpConfig
    movement: MovementConfig
    split: SplitConfig
    archetypes: Tuple[ArchetypeConfig, ...]
    observation: ObservationConfig
    caps: CapsConfig
    env: EnvConfig

    @property
    def num_archetypes(self) -> int:
        """Total number of archetypes in the catalog."""
        return len(self.archetypes)


def _parse_pair(data: List, what: str) -> Tuple[float, float]:
    """Parse a two-element offset list from YAML."""
    if len(data) != 2:
        raise ValueError(f"{what} must have 2 values, got {data}")
    return (float(data[0]), float(data[1]))


def _parse_archetype(data: dict) -> ArchetypeConfig:
    """Parse a single archetype entry from YAML."""
    return ArchetypeConfig(
        id=int(data["id"]),
        name=str(data["name"]),
        icon=str(data.get("icon", "")),
        speed=float(data["speed"]),
        splits=bool(data.get("splits", False)),
        cluster=bool(data.get("cluster", False)),
        power_up=bool(data.get("power_up", False))
    )


def _validate_config(config: GameConfig) -> None:
    """Validate configuration consistency."""
    # Archetype IDs are sequential and names unique
    names = set()
    for i, archetype in enumerate(config.archetypes):
        if archetype.id != i:
            raise ValueError(f"Archetype ID mismatch: expected {i}, got {archetype.id}")
        if archetype.name in names:
            raise ValueError(f"Duplicate archetype name: {archetype.name}")
        if archetype.speed < 0:
            raise ValueError(f"Archetype {archetype.name} has negative speed")
        names.add(archetype.name)

    for name in REQUIRED_ARCHETYPES:
        if name not in names:
            raise ValueError(f"Missing required archetype: {name}")

    # Power-up pickups map onto a fixed set of effects
    for archetype in config.archetypes:
        if archetype.power_up and archetype.name not in POWER_UP_ARCHETYPES:
            raise ValueError(f"Unsupported power-up archetype: {archetype.name}")
        if archetype.name in POWER_UP_ARCHETYPES and not archetype.power_up:
            raise ValueError(f"Archetype {archetype.name} must be flagged power_up")
        if archetype.cluster and not archetype.splits:
            raise ValueError(f"Cluster archetype {archetype.name} must also split")

    # Common pool must be plain archetypes
    if not config.spawn.common_pool:
        raise ValueError("spawn.common_pool must not be empty")
    by_name = {a.name: a for a in config.archetypes}
    for name in config.spawn.common_pool:
        if name not in by_name:
            raise ValueError(f"spawn.common_pool references unknown archetype: {name}")
        archetype = by_name[name]
        if archetype.splits or archetype.power_up:
            raise ValueError(f"spawn.common_pool may not contain special archetype: {name}")

    for level, columns in config.difficulty.columns.items():
        if columns < 1:
            raise ValueError(f"Difficulty {level} needs at least one column, got {columns}")

    if config.player.initial_lives > config.player.max_lives:
        raise ValueError(
            f"player.initial_lives ({config.player.initial_lives}) exceeds "
            f"max_lives ({config.player.max_lives})"
        )

    # Every cadence must advance virtual time
    intervals = {
        "spawn.initial_interval_ms": config.spawn.initial_interval_ms,
        "spawn.min_interval_ms": config.spawn.min_interval_ms,
        "movement.interval_ms": config.movement.interval_ms,
        "power_ups.countdown_interval_ms": config.power_ups.countdown_interval_ms,
        "env.frame_ms": config.env.frame_ms,
    }
    for key, value in intervals.items():
        if value <= 0:
            raise ValueError(f"{key} must be positive, got {value}")

    if not 0 <= config.board.spawn_position < config.board.boundary:
        raise ValueError(
            f"board.spawn_position ({config.board.spawn_position}) must lie in "
            f"[0, {config.board.boundary})"
        )


def load_config(config_path: Optional[str] = None) -> GameConfig:
    """
    Load and validate game configuration from YAML.

    Args:
        config_path: Path to game_config.yaml. If None, uses default location.

    Returns:
        Validated GameConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config validation fails.
    """
    if config_path is None:
        config_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)),
            "game_config.yaml"
        )

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    if not isinstance(raw, dict):
        raise ValueError(f"Config root must be a mapping: {config_path}")

    try:
        config = _parse_config(raw)
    except KeyError as e:
        raise ValueError(f"Missing config key {e} in {config_path}") from None
    except (AttributeError, TypeError) as e:
        raise ValueError(f"Malformed config section in {config_path}: {e}") from e

    _validate_config(config)
    return config


def _parse_config(raw: Dict[str, Any]) -> GameConfig:
    """Build the typed config tree from the raw YAML mapping."""
    board_data = raw["board"]
    board = BoardConfig(
        boundary=float(board_data.get("boundary", 100.0)),
        spawn_position=float(board_data.get("spawn_position", 10.0))
    )

    difficulty = DifficultyConfig(
        columns={str(level): int(n) for level, n in raw["difficulty"].items()}
    )

    player_data = raw["player"]
    player = PlayerConfig(
        initial_lives=int(player_data["initial_lives"]),
        max_lives=int(player_data["max_lives"])
    )

    spawn_data = raw["spawn"]
    spawn = SpawnConfig(
        initial_interval_ms=int(spawn_data["initial_interval_ms"]),
        interval_step_ms=int(spawn_data["interval_step_ms"]),
        min_interval_ms=int(spawn_data["min_interval_ms"]),
        speed_growth_per_wave=float(spawn_data["speed_growth_per_wave"]),
        cluster_min_wave=int(spawn_data["cluster_min_wave"]),
        cluster_chance=float(spawn_data["cluster_chance"]),
        egg_min_wave=int(spawn_data["egg_min_wave"]),
        egg_chance=float(spawn_data["egg_chance"]),
        shield_chance=float(spawn_data["shield_chance"]),
        slow_chance=float(spawn_data["slow_chance"]),
        dual_base=float(spawn_data.get("dual_base", 0.01)),
        dual_per_wave=float(spawn_data.get("dual_per_wave", 0.01)),
        dual_offset=float(spawn_data.get("dual_offset", 1.0)),
        dual_column_retries=int(spawn_data.get("dual_column_retries", 16)),
        common_pool=tuple(str(name) for name in spawn_data["common_pool"])
    )

    waves_data = raw["waves"]
    waves = WaveConfig(
        base_quota=int(waves_data["base_quota"]),
        transition_delay_ms=int(waves_data.get("transition_delay_ms", 2000)),
        message_duration_ms=int(waves_data.get("message_duration_ms", 2000))
    )

    power_data = raw["power_ups"]
    power_ups = PowerUpConfig(
        duration_seconds=int(power_data["duration_seconds"]),
        countdown_interval_ms=int(power_data.get("countdown_interval_ms", 1000)),
        slow_factor=float(power_data.get("slow_factor", 0.5))
    )

    movement = MovementConfig(
        interval_ms=int(raw["movement"]["interval_ms"])
    )

    split_data = raw["split"]
    split = SplitConfig(
        cluster_offsets=_parse_pair(split_data["cluster_offsets"], "split.cluster_offsets"),
        egg_offsets=_parse_pair(split_data.get("egg_offsets", [0.0, 0.0]), "split.egg_offsets")
    )

    archetypes = tuple(_parse_archetype(a) for a in raw["archetypes"])

    observation = ObservationConfig(
        max_objects=int(raw.get("observation", {}).get("max_objects", 64))
    )

    caps = CapsConfig(
        max_env_steps=int(raw.get("caps", {}).get("max_env_steps", 20000))
    )

    env = EnvConfig(
        frame_ms=int(raw.get("env", {}).get("frame_ms", movement.interval_ms))
    )

    return GameConfig(
        board=board,
        difficulty=difficulty,
        player=player,
        spawn=spawn,
        waves=waves,
        power_ups=power_ups,
        movement=movement,
        split=split,
        archetypes=archetypes,
        observation=observation,
        caps=caps,
        env=env
    )


# Module-level cache for convenience
_cached_config: Optional[GameConfig] = None


def get_config() -> GameConfig:
    """Get the cached game configuration, loading if necessary."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reload_config(config_path: Optional[str] = None) -> GameConfig:
    """Reload the configuration (useful for testing)."""
    global _cached_config
    _cached_config = load_config(config_path)
    return _cached_config
