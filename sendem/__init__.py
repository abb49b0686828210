"""
Send 'Em To Zero
================

Column-based reflex arcade game. This package contains the simulation
engine (zero_core) and the evaluation harness. Rendering and input wiring
live with the presentation layer; the engine only exposes intents and
read-only state.

All tunable parameters are in game_config.yaml.
"""
