"""
Tests for the engine: lifecycle, intents, cadences, waves and snapshots.
"""

import pytest

from sendem.zero_core.config_loader import load_config
from sendem.zero_core.game import PAUSE_MESSAGE, ArcadeEngine, TickKind
from sendem.zero_core.game_state import Difficulty, PowerUpKind, WavePhase


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def engine(config, scripted_rng):
    """Started medium-difficulty engine with a scripted random source."""
    engine = ArcadeEngine(config=config, rng=scripted_rng)
    engine.select_difficulty("medium")
    engine.start()
    return engine


def spawn_and_destroy(engine, rng, count, column=2):
    """Spawn a rocket in the player's column and destroy it, `count` times."""
    for _ in range(count):
        rng.queue_common(0, column, wave=engine.wave)
        engine.tick(TickKind.SPAWN)
        assert engine.destroy() is not None


class TestLifecycle:
    """Test difficulty selection, start and restart."""

    def test_start_requires_difficulty(self, config):
        engine = ArcadeEngine(config=config, seed=1)
        assert not engine.start()
        assert not engine.is_started

    @pytest.mark.parametrize("level,columns,player", [
        ("easy", 3, 1),
        ("medium", 4, 2),
        ("hard", 5, 2),
    ])
    def test_difficulty_columns(self, config, level, columns, player):
        engine = ArcadeEngine(config=config, seed=1)
        assert engine.select_difficulty(level)
        assert engine.num_columns == columns
        assert engine.player_column == player
        assert engine.difficulty is Difficulty(level)

    def test_unknown_difficulty(self, config):
        engine = ArcadeEngine(config=config, seed=1)
        with pytest.raises(ValueError):
            engine.select_difficulty("insane")

    def test_initial_state(self, engine):
        assert engine.is_started
        assert engine.score == 0
        assert engine.lives == 3
        assert engine.wave == 1
        assert engine.objects_per_wave == 20
        assert engine.spawn_interval_ms == 1000
        assert engine.objects == ()
        assert engine.wave_message == "Wave 1 starting"

    def test_no_reselect_or_restart_while_running(self, engine):
        assert not engine.select_difficulty("hard")
        assert engine.num_columns == 4
        assert not engine.start()

    def test_restart_resets_everything(self, engine, scripted_rng):
        spawn_and_destroy(engine, scripted_rng, 3)
        scripted_rng.queue_common(1, 0)
        engine.tick(TickKind.SPAWN)

        engine.restart()

        assert not engine.is_started
        assert engine.difficulty is None
        assert engine.score == 0
        assert engine.lives == 3
        assert engine.wave == 1
        assert engine.objects == ()
        assert engine.scheduler.get_periodic(TickKind.SPAWN.value) is None
        assert engine.advance(5000) == 0

    def test_ids_unique_across_restart(self, engine, scripted_rng):
        scripted_rng.queue_common(0, 1)
        first_id = engine.tick(TickKind.SPAWN).spawned[0].id

        engine.restart()
        engine.select_difficulty("easy")
        engine.start()
        scripted_rng.queue_common(0, 1)
        second_id = engine.tick(TickKind.SPAWN).spawned[0].id

        assert second_id > first_id

    def test_wave_message_dismissed(self, engine):
        engine.advance(1999)
        assert engine.wave_message == "Wave 1 starting"
        engine.advance(1)
        assert engine.wave_message is None


class TestIntents:
    """Test move, destroy and pause intents."""

    def test_move_clamps(self, engine):
        for _ in range(5):
            engine.move_right()
        assert engine.player_column == 3

        for _ in range(5):
            engine.move_left()
        assert engine.player_column == 0

    def test_intents_rejected_before_start(self, config):
        engine = ArcadeEngine(config=config, seed=1)
        engine.select_difficulty("medium")

        assert not engine.move_left()
        assert engine.destroy() is None
        assert not engine.pause()
        assert not engine.tick(TickKind.SPAWN).applied

    def test_destroy_empty_column(self, engine, scripted_rng):
        scripted_rng.queue_common(0, 0)
        engine.tick(TickKind.SPAWN)

        assert engine.destroy() is None
        assert engine.score == 0
        assert len(engine.objects) == 1

    def test_pause_and_resume(self, engine, scripted_rng):
        scripted_rng.queue_common(0, 2)
        engine.tick(TickKind.SPAWN)

        assert engine.pause()
        assert engine.is_paused
        assert engine.pause_message == PAUSE_MESSAGE
        assert not engine.pause()

        assert not engine.move_left()
        assert engine.destroy() is None
        assert not engine.tick(TickKind.MOVE).applied
        assert engine.advance(10000) == 0
        assert engine.objects[0].position == 10.0

        assert engine.resume()
        assert engine.pause_message is None
        assert not engine.resume()
        assert engine.destroy() is not None

    def test_toggle_pause(self, engine):
        assert engine.toggle_pause()
        assert engine.is_paused
        assert engine.toggle_pause()
        assert not engine.is_paused


class TestCadences:
    """Test the virtual-time scheduler wiring."""

    def test_spawn_clock_freezes_on_pause(self, engine, scripted_rng):
        """Paused time never counts toward the next spawn."""
        scripted_rng.queue_common(0, 1)
        engine.advance(600)
        engine.pause()
        engine.advance(5000)
        engine.resume()

        engine.advance(399)
        assert engine.objects == ()

        engine.advance(1)
        assert len(engine.objects) == 1

    def test_objects_rise_monotonically(self, config):
        engine = ArcadeEngine(config=config, seed=99)
        engine.select_difficulty("hard")
        engine.start()

        last_seen = {}
        for step in range(400):
            engine.advance(32)
            if step % 10 == 0:
                engine.destroy()
            for obj in engine.objects:
                assert obj.position >= last_seen.get(obj.id, 0.0)
                last_seen[obj.id] = obj.position

        ids = [obj.id for obj in engine.objects]
        assert len(ids) == len(set(ids))

    def test_game_over_stops_cadences(self, config):
        engine = ArcadeEngine(config=config, seed=5)
        engine.select_difficulty("easy")
        engine.start()

        for _ in range(5000):
            engine.advance(32)
            if engine.is_over:
                break

        assert engine.is_over
        assert engine.lives == 0
        assert engine.scheduler.get_periodic(TickKind.SPAWN.value) is None
        assert engine.advance(10000) == 0
        assert not engine.move_right()
        assert not engine.pause()

    def test_same_seed_same_game(self, config):
        def play(seed):
            engine = ArcadeEngine(config=config)
            engine.reset(seed=seed)
            engine.select_difficulty("medium")
            engine.start()
            for _ in range(300):
                engine.advance(32)
            return [(obj.kind, obj.column, obj.position) for obj in engine.objects]

        assert play(17) == play(17)


class TestSplitAtBoundary:
    """Test split descendants that land on or past the boundary."""

    @pytest.fixture
    def early_clusters(self, make_config_file):
        def _make(initial_lives=3):
            def mutate(raw):
                raw["spawn"]["cluster_min_wave"] = 1
                raw["player"]["initial_lives"] = initial_lives
            return load_config(make_config_file(mutate))
        return _make

    def spawn_cluster_at_95(self, config, rng):
        engine = ArcadeEngine(config=config, rng=rng)
        engine.select_difficulty("medium")
        engine.start()
        # cluster hit, then no dual spawn; column 2 is the player's
        rng.floats.extend([0.0, 0.99])
        rng.ints.append(2)
        engine.tick(TickKind.SPAWN)
        # 170 moves of 0.5 carry the cluster from 10 to 95
        for _ in range(170):
            engine.tick(TickKind.MOVE)
        assert engine.objects[0].kind == "eggCluster"
        assert engine.objects[0].position == 95.0
        return engine

    def test_descendants_past_boundary_escape_at_once(self, early_clusters, scripted_rng):
        """Eggs placed at 100 and 105 escape in the destroy itself, costing lives."""
        engine = self.spawn_cluster_at_95(early_clusters(), scripted_rng)

        result = engine.destroy()
        engine.pause()

        assert [c.position for c in result.descendants] == [100.0, 105.0]
        assert engine.objects == ()
        assert engine.lives == 1
        assert engine.score == 1
        assert all(p < 100 for p in engine.snapshot().obj_position[engine.snapshot().obj_mask])

    def test_split_escape_can_end_game(self, early_clusters, scripted_rng):
        engine = self.spawn_cluster_at_95(early_clusters(initial_lives=2), scripted_rng)

        engine.destroy()

        assert engine.is_over
        assert engine.lives == 0
        assert engine.scheduler.get_periodic(TickKind.SPAWN.value) is None
        assert engine.advance(10000) == 0


class TestWaves:
    """Test wave transitions."""

    def test_wave_advances_after_quota(self, engine, scripted_rng):
        spawn_and_destroy(engine, scripted_rng, 20)

        assert engine.wave_phase is WavePhase.TRANSITIONING
        assert engine.objects == ()
        assert engine.wave_message == "Wave 2 starting"
        assert engine.wave == 1

        engine.advance(2000)

        assert engine.wave == 2
        assert engine.wave_phase is WavePhase.ACTIVE
        assert engine.objects_per_wave == 21
        assert engine.objects_destroyed_this_wave == 0
        assert engine.spawn_interval_ms == 900
        assert engine.lives == 4
        assert engine.wave_message is None
        assert engine.scheduler.get_periodic(TickKind.SPAWN.value).interval_ms == 900

    def test_transition_happens_once(self, engine, scripted_rng):
        """Destroys during the transition still score but cannot retrigger it."""
        spawn_and_destroy(engine, scripted_rng, 20)
        spawn_and_destroy(engine, scripted_rng, 1)

        assert engine.score == 21
        assert engine.objects_destroyed_this_wave == 21

        engine.advance(2000)
        assert engine.wave == 2
        assert engine.objects_destroyed_this_wave == 0

        engine.advance(4000)
        assert engine.wave == 2

    def test_wave_clear_drops_power_up(self, engine, scripted_rng):
        scripted_rng.queue_pickup("shield", 2)
        engine.tick(TickKind.SPAWN)
        engine.destroy()
        assert engine.active_power_up is PowerUpKind.SHIELD

        spawn_and_destroy(engine, scripted_rng, 19)

        assert engine.wave_phase is WavePhase.TRANSITIONING
        assert engine.active_power_up is PowerUpKind.NONE
        assert engine.power_up_remaining == 0

    def test_manual_transition_tick(self, engine, scripted_rng):
        spawn_and_destroy(engine, scripted_rng, 20)

        result = engine.tick(TickKind.WAVE_TRANSITION)

        assert result.wave_started
        assert engine.wave == 2
        assert engine.scheduler.timer_remaining(TickKind.WAVE_TRANSITION.value) is None


class TestPowerUps:
    """Test power-up timing through the engine."""

    def test_power_up_pauses_with_game(self, engine, scripted_rng):
        scripted_rng.queue_pickup("shield", 2)
        engine.tick(TickKind.SPAWN)
        engine.destroy()

        engine.advance(4000)
        assert engine.power_up_remaining == 6

        engine.pause()
        engine.advance(5000)
        assert engine.power_up_remaining == 6

        engine.resume()
        engine.advance(1000)
        assert engine.power_up_remaining == 5

    def test_power_up_expires(self, engine, scripted_rng):
        scripted_rng.queue_pickup("slow", 2)
        engine.tick(TickKind.SPAWN)
        engine.destroy()
        assert engine.active_power_up is PowerUpKind.SLOW

        engine.advance(9999)
        assert engine.active_power_up is PowerUpKind.SLOW

        engine.advance(1)
        assert engine.active_power_up is PowerUpKind.NONE

    def test_shield_protects_lives(self, engine, scripted_rng):
        scripted_rng.queue_pickup("shield", 2)
        engine.tick(TickKind.SPAWN)
        engine.destroy()
        scripted_rng.queue_common(0, 0)
        engine.tick(TickKind.SPAWN)

        # 180 moves of 0.5 carry the rocket from 10 to the boundary
        for _ in range(180):
            engine.tick(TickKind.MOVE)

        assert engine.objects == ()
        assert engine.lives == 3


class TestSnapshot:
    """Test snapshot and render data."""

    def test_snapshot_shapes(self, engine, scripted_rng):
        scripted_rng.queue_common(0, 2)
        engine.tick(TickKind.SPAWN)

        snap = engine.snapshot()

        assert snap.obj_mask.shape == (64,)
        assert snap.col_count.shape == (5,)
        assert snap.obj_mask[0] and not snap.obj_mask[1]
        assert snap.obj_archetype_id[0] == 0
        assert snap.obj_archetype_id[1] == -1
        assert snap.col_count[2] == 1
        assert snap.col_target_position[2] == pytest.approx(10.0)
        assert snap.col_target_position[0] == -1.0
        assert snap.num_columns == 4

    def test_render_data(self, engine, scripted_rng):
        scripted_rng.queue_common(2, 1)
        engine.tick(TickKind.SPAWN)

        data = engine.get_render_data()

        assert data["num_columns"] == 4
        assert data["boundary"] == 100
        assert data["objects"][0]["kind"] == "ufo"
        assert data["objects"][0]["column"] == 1
        assert data["power_up"] is None
        assert data["wave_message"] == "Wave 1 starting"
        assert not data["game_over"]
