"""
Evaluation Harness
==================

Plays an agent through every seed of the seed bank and reports how far it
got: score, wave reached, lives left and why each run ended.

Usage:
    python -m sendem.evaluation.run_eval [--agent path/to/agent.py] [--difficulty hard]
"""

from __future__ import annotations

import argparse
import importlib.util
import json
import logging
import os
import sys
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import numpy as np

from sendem.zero_core.env_gym import DESTROY, MOVE_LEFT, MOVE_RIGHT, NOOP, ArcadeEnv

logger = logging.getLogger(__name__)

AgentFn = Callable[[Dict[str, np.ndarray]], int]

GAME_OVER = "game_over"
STEP_CAP = "step_cap"


@dataclass
class SeedRun:
    """One full game played on a single seed."""
    seed: int
    score: int
    wave_reached: int
    lives_left: int
    steps: int
    termination_reason: str
    elapsed_time: float

    @property
    def survived(self) -> bool:
        return self.termination_reason == STEP_CAP


@dataclass
class EvalSummary:
    """Aggregate of a seed bank run; built with `from_runs`."""
    difficulty: str
    mean_score: float
    std_score: float
    min_score: int
    max_score: int
    median_score: float
    mean_wave: float
    best_wave: int
    survival_rate: float
    total_time: float
    results: List[SeedRun] = field(default_factory=list)

    @classmethod
    def from_runs(cls, runs: List[SeedRun], difficulty: str, total_time: float) -> "EvalSummary":
        scores = np.array([r.score for r in runs], dtype=np.int64)
        waves = np.array([r.wave_reached for r in runs], dtype=np.int64)
        return cls(
            difficulty=difficulty,
            mean_score=float(scores.mean()),
            std_score=float(scores.std()),
            min_score=int(scores.min()),
            max_score=int(scores.max()),
            median_score=float(np.median(scores)),
            mean_wave=float(waves.mean()),
            best_wave=int(waves.max()),
            survival_rate=sum(r.survived for r in runs) / len(runs),
            total_time=total_time,
            results=list(runs),
        )


def baseline_act(obs: Dict[str, np.ndarray]) -> int:
    """
    Chase the column whose leading object is closest to the boundary.

    Destroys when already standing in it, otherwise steps toward it.
    """
    num_columns = int(obs["num_columns"])
    counts = obs["col_count"][:num_columns]
    if not counts.any():
        return NOOP

    urgency = np.where(counts > 0, obs["col_highest"][:num_columns], -1.0)
    target = int(np.argmax(urgency))
    player = int(obs["player_column"])

    if target < player:
        return MOVE_LEFT
    if target > player:
        return MOVE_RIGHT
    return DESTROY


def load_seed_bank(path: Optional[str] = None) -> List[int]:
    """
    Load the evaluation seed bank.

    Args:
        path: Path to seed_bank.json. Uses the packaged bank if None.

    Returns:
        List of seeds.
    """
    if path is None:
        path = os.path.join(os.path.dirname(__file__), "seed_bank.json")

    with open(path, "r", encoding="utf-8") as f:
        return [int(seed) for seed in json.load(f)["seeds"]]


def load_agent(agent_path: str) -> AgentFn:
    """
    Import an agent from a directory (its agent.py) or a single file.

    The module provides either an `Agent` class whose instances have `act`,
    or a module-level `act(obs)` function.
    """
    path = Path(agent_path)
    agent_file = path / "agent.py" if path.is_dir() else path
    if not agent_file.exists():
        raise FileNotFoundError(f"Agent file not found: {agent_file}")

    spec = importlib.util.spec_from_file_location("sendem_agent", agent_file)
    if spec is None or spec.loader is None:
        raise ImportError(f"Cannot import agent from {agent_file}")
    module = importlib.util.module_from_spec(spec)
    sys.modules["sendem_agent"] = module
    spec.loader.exec_module(module)

    agent_cls = getattr(module, "Agent", None)
    if agent_cls is not None:
        act = getattr(agent_cls(), "act", None)
        if act is None:
            raise AttributeError(f"{agent_file}: Agent has no 'act' method")
        return act

    act = getattr(module, "act", None)
    if act is None:
        raise AttributeError(f"{agent_file}: define an Agent class or an act(obs) function")
    return act


def play_seed(
    agent_fn: AgentFn,
    seed: int,
    difficulty: str = "medium",
    config_path: Optional[str] = None
) -> SeedRun:
    """
    Play one game to game over or the step cap.

    Args:
        agent_fn: Maps an observation to a discrete action.
        seed: Spawn seed.
        difficulty: Difficulty name.
        config_path: Optional path to an alternative game_config.yaml.
    """
    env = ArcadeEnv(config_path=config_path, difficulty=difficulty)
    started = time.perf_counter()
    obs, info = env.reset(seed=seed)

    terminated = truncated = False
    while not (terminated or truncated):
        obs, _, terminated, truncated, info = env.step(agent_fn(obs))
    env.close()

    run = SeedRun(
        seed=seed,
        score=int(info["score"]),
        wave_reached=int(info["wave"]),
        lives_left=int(info["lives"]),
        steps=int(info["steps"]),
        termination_reason=GAME_OVER if terminated else STEP_CAP,
        elapsed_time=time.perf_counter() - started
    )
    logger.info("seed %d: score=%d wave=%d lives=%d after %d steps (%s)",
                seed, run.score, run.wave_reached, run.lives_left, run.steps,
                run.termination_reason)
    return run


def evaluate_agent(
    agent_fn: AgentFn,
    seeds: Optional[List[int]] = None,
    difficulty: str = "medium",
    config_path: Optional[str] = None
) -> EvalSummary:
    """
    Play every seed and aggregate the runs.

    Args:
        agent_fn: Maps an observation to a discrete action.
        seeds: Seeds to play. Uses the packaged seed bank if None.
        difficulty: Difficulty name.
        config_path: Optional path to an alternative game_config.yaml.

    Raises:
        ValueError: If there are no seeds.
    """
    if seeds is None:
        seeds = load_seed_bank()
    if not seeds:
        raise ValueError("No seeds to evaluate")

    logger.info("Evaluating on %d seeds (%s)", len(seeds), difficulty)
    started = time.perf_counter()
    runs = [play_seed(agent_fn, seed, difficulty, config_path) for seed in seeds]
    return EvalSummary.from_runs(runs, difficulty, time.perf_counter() - started)


def format_summary(summary: EvalSummary) -> str:
    """Per-seed table followed by the aggregate line."""
    lines = [f"{'seed':>10} {'score':>7} {'wave':>5} {'lives':>5} {'steps':>7}  end"]
    for run in summary.results:
        lines.append(
            f"{run.seed:>10} {run.score:>7} {run.wave_reached:>5} {run.lives_left:>5} "
            f"{run.steps:>7}  {run.termination_reason}"
        )
    lines.append(
        f"{summary.difficulty}: score {summary.mean_score:.1f} +/- {summary.std_score:.1f} "
        f"(median {summary.median_score:.1f}, range {summary.min_score}-{summary.max_score}), "
        f"wave {summary.mean_wave:.1f} (best {summary.best_wave}), "
        f"survived {summary.survival_rate:.0%}, {summary.total_time:.1f}s"
    )
    return "\n".join(lines)


def save_results(summary: EvalSummary, agent_name: str, output_path: str) -> None:
    """Write the summary and every run as JSON."""
    payload: Dict[str, Any] = {"agent": agent_name, "timestamp": time.strftime("%Y-%m-%d %H:%M:%S")}
    payload.update(asdict(summary))

    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)
    logger.info("Results saved to %s", output_path)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Evaluate a Send 'Em To Zero agent")
    parser.add_argument("--agent", default=None,
                        help="Agent directory or .py file (built-in baseline if omitted)")
    parser.add_argument("--difficulty", choices=["easy", "medium", "hard"], default="medium")
    parser.add_argument("--seeds", default=None, help="Seed bank JSON (packaged bank if omitted)")
    parser.add_argument("--config", default=None, help="Alternative game_config.yaml")
    parser.add_argument("--output", default=None, help="Write results JSON here")
    parser.add_argument("--quiet", action="store_true", help="Only print the summary")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s"
    )

    if args.agent:
        try:
            agent_fn = load_agent(args.agent)
        except (FileNotFoundError, ImportError, AttributeError) as e:
            logger.error("Error loading agent: %s", e)
            return 1
        agent_name = Path(args.agent).stem
    else:
        agent_fn = baseline_act
        agent_name = "baseline"

    summary = evaluate_agent(
        agent_fn,
        seeds=load_seed_bank(args.seeds) if args.seeds else None,
        difficulty=args.difficulty,
        config_path=args.config
    )
    print(format_summary(summary))

    if args.output:
        save_results(summary, agent_name, args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
