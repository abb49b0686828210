"""
Zero Core - The simulation engine.

This module provides the game engine, its Gymnasium wrapper and all
supporting systems (spawning, movement, destroy resolution, waves,
power-ups, scheduling).

Main exports:
- ArcadeEngine: Engine and call surface for the presentation layer
- ArcadeEnv: Gymnasium environment for agents
- GameConfig: Configuration loaded from game_config.yaml
"""

from sendem.zero_core.archetype_catalog import Archetype, ArchetypeCatalog
from sendem.zero_core.config_loader import GameConfig, load_config
from sendem.zero_core.destroy_resolver import DestroyEffect, DestroyResult
from sendem.zero_core.env_gym import ArcadeEnv
from sendem.zero_core.game import ArcadeEngine, TickKind, TickResult
from sendem.zero_core.game_state import Difficulty, GameObject, GameState, PowerUpKind, WavePhase
from sendem.zero_core.scheduler import CadenceScheduler
from sendem.zero_core.state_snapshot import GameSnapshot

__all__ = [
    "Archetype",
    "ArchetypeCatalog",
    "GameConfig",
    "load_config",
    "DestroyEffect",
    "DestroyResult",
    "ArcadeEnv",
    "ArcadeEngine",
    "TickKind",
    "TickResult",
    "Difficulty",
    "GameObject",
    "GameState",
    "PowerUpKind",
    "WavePhase",
    "CadenceScheduler",
    "GameSnapshot",
]
