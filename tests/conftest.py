"""
Shared fixtures: a scripted random source and config-file factory.
"""

import random
from collections import deque
from pathlib import Path

import pytest
import yaml

import sendem

DEFAULT_CONFIG_PATH = Path(sendem.__file__).parent / "game_config.yaml"


class ScriptedRandom(random.Random):
    """
    Random source that replays queued values before falling back to its seed.

    `floats` feeds random(), `ints` feeds randrange(); each queue is consumed
    in order, independently of the other.
    """

    def __init__(self, seed=0):
        super().__init__(seed)
        self.floats = deque()
        self.ints = deque()

    def random(self):
        if self.floats:
            return self.floats.popleft()
        return super().random()

    def getrandbits(self, k):
        return super().getrandbits(k)

    def randrange(self, start, stop=None, step=1):
        if self.ints:
            return self.ints.popleft()
        return super().randrange(start, stop, step)

    def queue_common(self, pool_index, column, wave=1):
        """Queue one plain spawn from the common pool."""
        self.floats.extend(self._special_misses(wave) + [0.99, 0.99, 0.99])
        self.ints.extend([pool_index, column])

    def queue_pickup(self, name, column, wave=1):
        """Queue one shield or slow pickup spawn."""
        draws = {"shield": [0.0], "slow": [0.99, 0.0]}[name]
        self.floats.extend(self._special_misses(wave) + draws + [0.99])
        self.ints.append(column)

    @staticmethod
    def _special_misses(wave):
        misses = []
        if wave >= 20:
            misses.append(0.99)
        if wave >= 10:
            misses.append(0.99)
        return misses


@pytest.fixture
def scripted_rng():
    return ScriptedRandom(seed=1234)


@pytest.fixture
def make_config_file(tmp_path):
    """Write a modified copy of the default config and return its path."""
    def _make(mutate):
        raw = yaml.safe_load(DEFAULT_CONFIG_PATH.read_text(encoding="utf-8"))
        mutate(raw)
        path = tmp_path / "game_config.yaml"
        path.write_text(yaml.safe_dump(raw, allow_unicode=True), encoding="utf-8")
        return str(path)
    return _make
