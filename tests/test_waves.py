"""
Tests for wave bookkeeping: quota, transitions and escalation.
"""

import pytest

from sendem.zero_core.config_loader import load_config
from sendem.zero_core.game_state import GameState, PowerUpKind, WavePhase
from sendem.zero_core.power_ups import PowerUpController
from sendem.zero_core.waves import WaveController, wave_announcement


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def waves(config):
    return WaveController(PowerUpController(config), config)


def make_state(**overrides):
    state = GameState(num_columns=4, lives=3, spawn_interval_ms=1000, started=True)
    for key, value in overrides.items():
        setattr(state, key, value)
    return state


class TestQuota:
    """Test when a wave is cleared."""

    def test_below_quota_stays_active(self, waves):
        state = make_state(objects_destroyed_this_wave=19)

        assert not waves.check(state)
        assert state.wave_phase is WavePhase.ACTIVE

    def test_quota_starts_transition(self, waves):
        """Clearing a wave empties the board and drops the power-up."""
        state = make_state(
            objects_destroyed_this_wave=20,
            active_power_up=PowerUpKind.SLOW,
            power_up_remaining=7,
        )

        assert waves.check(state)
        assert state.wave_phase is WavePhase.TRANSITIONING
        assert state.wave_message == wave_announcement(2) == "Wave 2 starting"
        assert state.active_power_up is PowerUpKind.NONE
        assert state.power_up_remaining == 0

    def test_check_only_once(self, waves):
        state = make_state(objects_destroyed_this_wave=20)
        assert waves.check(state)

        state.objects_destroyed_this_wave = 25
        assert not waves.check(state)

    def test_paused_does_not_trigger(self, waves):
        state = make_state(objects_destroyed_this_wave=20, paused=True)
        assert not waves.check(state)


class TestCompletion:
    """Test the escalation applied when the next wave begins."""

    def test_complete_requires_transition(self, waves):
        state = make_state()
        assert not waves.complete(state)
        assert state.wave == 1

    def test_escalation(self, waves):
        state = make_state(objects_destroyed_this_wave=20)
        waves.check(state)

        assert waves.complete(state)
        assert state.wave == 2
        assert state.objects_per_wave == 21
        assert state.objects_destroyed_this_wave == 0
        assert state.spawn_interval_ms == 900
        assert state.lives == 4
        assert state.wave_phase is WavePhase.ACTIVE

    @pytest.mark.parametrize("before,after", [(300, 200), (250, 200), (200, 200)])
    def test_spawn_interval_floor(self, waves, before, after):
        """The spawn interval never drops below 200ms."""
        state = make_state(spawn_interval_ms=before, objects_destroyed_this_wave=20)
        waves.check(state)
        waves.complete(state)

        assert state.spawn_interval_ms == after

    def test_wave_bonus_exceeds_max_lives(self, waves, config):
        """The wave bonus is the one life gain not capped at max_lives."""
        state = make_state(lives=config.player.max_lives, objects_destroyed_this_wave=20)
        waves.check(state)
        waves.complete(state)

        assert state.lives == 11

    def test_dismiss_message(self, waves):
        state = make_state(wave_message="Wave 1 starting")
        assert waves.dismiss_message(state)
        assert state.wave_message is None
        assert not waves.dismiss_message(state)
