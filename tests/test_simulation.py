"""Tests for the multi-threaded simulation driver."""

import random
import threading

import numpy as np
import pytest

from bh_nbody import (
    Body,
    EscapedBodyWarning,
    EventType,
    InvalidBodyError,
    InvalidConfigError,
    Simulation,
    SimulationAbortedError,
    SimulationConfig,
    partition,
)

# =============================================================================
# Fixtures
# =============================================================================


def _make_universe(n=64, radius=100.0, seed=7):
    rng = random.Random(seed)
    return [
        Body(
            rng.uniform(-radius, radius),
            rng.uniform(-radius, radius),
            rng.uniform(-0.1, 0.1),
            rng.uniform(-0.1, 0.1),
            mass=rng.uniform(1.0, 5.0),
        )
        for _ in range(n)
    ]


@pytest.fixture
def unit_config():
    """Unit gravity, short step, capped run."""
    return SimulationConfig(threads=2, dt=0.01, gravity=1.0, softening=1.0, max_steps=5)


class ExplodingBody(Body):
    """Body whose integration step always fails."""

    def update(self, dt):
        raise RuntimeError("integration failed")


# =============================================================================
# Partitioning
# =============================================================================


class TestPartition:
    """Tests for static range partitioning."""

    def test_even_split(self):
        """Evenly divisible counts give equal ranges."""
        assert partition(8, 4) == [(0, 2), (2, 4), (4, 6), (6, 8)]

    def test_last_range_takes_remainder(self):
        """The final range absorbs the remainder."""
        assert partition(10, 4) == [(0, 2), (2, 4), (4, 6), (6, 10)]

    def test_fewer_items_than_parts(self):
        """Leading ranges are empty when n < parts."""
        assert partition(3, 4) == [(0, 0), (0, 0), (0, 0), (0, 3)]

    def test_single_part(self):
        """One part covers everything."""
        assert partition(5, 1) == [(0, 5)]
        assert partition(0, 1) == [(0, 0)]

    @pytest.mark.parametrize("n, parts", [(1, 1), (7, 3), (100, 8), (17, 17), (2, 5)])
    def test_ranges_cover_disjointly(self, n, parts):
        """Ranges are contiguous, disjoint and cover range(n)."""
        ranges = partition(n, parts)
        assert len(ranges) == parts
        covered = [i for start, stop in ranges for i in range(start, stop)]
        assert covered == list(range(n))


# =============================================================================
# Construction and properties
# =============================================================================


class TestSimulationSetup:
    """Tests for construction and read access."""

    def test_defaults(self):
        """Default configuration is used when none is given."""
        sim = Simulation([Body(0.0, 0.0)], 10.0)
        assert sim.config == SimulationConfig()
        assert sim.radius == 10.0
        assert sim.time == 0.0
        assert sim.steps == 0
        assert sim.tree is None
        assert not sim.running

    def test_invalid_body_rejected(self):
        """Malformed bodies are rejected before the run."""
        with pytest.raises(InvalidBodyError, match="mass must be positive"):
            Simulation([Body(0.0, 0.0, mass=0.0)], 10.0)
        with pytest.raises(InvalidBodyError, match="x must be finite"):
            Simulation([Body(float("nan"), 0.0)], 10.0)

    def test_invalid_radius_rejected(self):
        """Non-positive radius is rejected."""
        with pytest.raises(InvalidConfigError, match="radius"):
            Simulation([Body(0.0, 0.0)], 0.0)

    def test_positions(self):
        """positions() returns an (n, 2) array of current positions."""
        sim = Simulation([Body(1.0, 2.0), Body(-3.0, 4.0)], 10.0)
        np.testing.assert_array_equal(sim.positions(), [[1.0, 2.0], [-3.0, 4.0]])

    def test_positions_empty(self):
        """An empty universe has a (0, 2) position array."""
        sim = Simulation([], 10.0)
        assert sim.positions().shape == (0, 2)

    def test_bodies_mutated_in_place(self, unit_config):
        """The simulation updates the caller's Body objects."""
        bodies = _make_universe(8)
        sim = Simulation(bodies, 200.0, config=unit_config)
        sim.step()
        assert all(a is b for a, b in zip(sim.bodies, bodies))


# =============================================================================
# Stepping
# =============================================================================


class TestStep:
    """Tests for single timesteps."""

    def test_two_symmetric_bodies(self):
        """Equal masses accelerate toward each other, equal and opposite."""
        a = Body(-10.0, 0.0, mass=5.0)
        b = Body(10.0, 0.0, mass=5.0)
        config = SimulationConfig(threads=2, dt=0.1, theta=0.5, gravity=1.0, softening=0.0)
        with Simulation([a, b], 20.0, config=config) as sim:
            sim.step()

        assert a.fx == pytest.approx(0.0625)
        assert b.fx == pytest.approx(-0.0625)
        assert a.fy == 0.0 and b.fy == 0.0
        assert a.vx == pytest.approx(-b.vx)
        assert a.vx > 0
        assert a.x > -10.0 and b.x < 10.0

    def test_step_advances_clock(self, unit_config):
        """Each step advances time by dt and counts the step."""
        with Simulation(_make_universe(10), 200.0, config=unit_config) as sim:
            sim.step().step()
        assert sim.steps == 2
        assert sim.time == pytest.approx(0.02)

    def test_tree_aggregates_all_bodies(self, unit_config):
        """The tree built during a step holds every body's mass."""
        bodies = _make_universe(50)
        total = sum(b.mass for b in bodies)
        with Simulation(bodies, 200.0, config=unit_config) as sim:
            sim.step()
        assert sim.tree is not None
        assert sim.tree.body_count == 50
        assert sim.tree.total_mass == pytest.approx(total)

    def test_isolated_body_stays_put(self):
        """A lone body at rest never moves."""
        body = Body(5.0, -5.0, mass=10.0)
        config = SimulationConfig(threads=3, max_steps=25)
        Simulation([body], 100.0, config=config).run()
        assert (body.x, body.y) == (5.0, -5.0)
        assert (body.vx, body.vy) == (0.0, 0.0)

    def test_thread_count_does_not_change_result(self):
        """One worker and four workers produce the same trajectories."""
        results = []
        for threads in (1, 4):
            bodies = _make_universe(64, seed=13)
            config = SimulationConfig(
                threads=threads, dt=0.01, gravity=1.0, softening=1.0, max_steps=10
            )
            sim = Simulation(bodies, 200.0, config=config).run()
            assert sim.steps == 10
            results.append(sim.positions())

        np.testing.assert_allclose(results[0], results[1], rtol=1e-9, atol=1e-9)

    def test_uneven_partition_updates_every_body(self):
        """Bodies in the remainder range are updated too."""
        bodies = [Body(float(i), 0.0, vx=1.0) for i in range(7)]
        config = SimulationConfig(threads=3, dt=1.0, gravity=1e-30, softening=1.0)
        with Simulation(bodies, 100.0, config=config) as sim:
            sim.step()
        for i, body in enumerate(bodies):
            assert body.x == pytest.approx(i + 1.0)

    def test_escaped_body_warns(self):
        """Bodies outside the universe are skipped with a warning."""
        bodies = [Body(0.0, 0.0), Body(1.0, 1.0), Body(500.0, 0.0)]
        config = SimulationConfig(threads=2, gravity=1.0)
        with Simulation(bodies, 10.0, config=config) as sim:
            with pytest.warns(EscapedBodyWarning, match="1 body"):
                sim.step()
        assert sim.tree.body_count == 2

    def test_pool_reused_across_steps(self, unit_config):
        """The worker pool survives between steps until closed."""
        sim = Simulation(_make_universe(4), 200.0, config=unit_config)
        sim.step()
        pool = sim._executor
        sim.step()
        assert sim._executor is pool
        sim.close()
        assert sim._executor is None

    def test_build_runs_on_worker_threads(self, unit_config):
        """Each build range runs as one task on the pool."""
        bodies = _make_universe(20)
        sim = Simulation(bodies, 200.0, config=unit_config)
        seen = []

        original = sim._build_range

        def checked_build(tree, start, stop):
            result = original(tree, start, stop)
            seen.append(threading.current_thread().name)
            return result

        sim._build_range = checked_build
        with sim:
            sim.step()
        assert len(seen) == unit_config.threads
        assert all(name.startswith("bh-nbody") for name in seen)


# =============================================================================
# Running
# =============================================================================


class TestRun:
    """Tests for the timestep loop."""

    def test_max_steps(self, unit_config):
        """run() stops after max_steps."""
        sim = Simulation(_make_universe(10), 200.0, config=unit_config).run()
        assert sim.steps == 5
        assert sim.time == pytest.approx(0.05)
        assert not sim.running

    def test_zero_max_steps(self):
        """max_steps=0 runs no steps."""
        sim = Simulation([Body(0.0, 0.0)], 10.0, config=SimulationConfig(max_steps=0)).run()
        assert sim.steps == 0
        assert sim.time == 0.0

    def test_duration_deadline(self):
        """run() ends once the wall-clock duration has elapsed."""
        config = SimulationConfig(threads=2, duration=0.05, gravity=1.0)
        sim = Simulation(_make_universe(5), 200.0, config=config).run()
        assert sim.steps >= 1

    def test_pool_closed_after_run(self, unit_config):
        """The worker pool is shut down when run() returns."""
        sim = Simulation(_make_universe(4), 200.0, config=unit_config).run()
        assert sim._executor is None

    def test_events(self, unit_config):
        """Start, tick and end fire in order with step and time."""
        events = []
        sim = Simulation(
            _make_universe(6),
            200.0,
            config=unit_config,
            on_start=events.append,
            on_tick=events.append,
            on_end=events.append,
        )
        sim.run()

        types = [e["type"] for e in events]
        assert types == [EventType.start] + [EventType.tick] * 5 + [EventType.end]
        assert [e["step"] for e in events[1:-1]] == [1, 2, 3, 4, 5]
        assert events[-1]["time"] == pytest.approx(sim.time)

    def test_on_string_event(self, unit_config):
        """Events can be registered by name and chained."""
        ticks = []
        sim = Simulation(_make_universe(3), 200.0, config=unit_config)
        assert sim.on("tick", ticks.append) is sim
        sim.run()
        assert len(ticks) == 5

    def test_stop_from_tick(self):
        """stop() ends the loop after the current step."""
        config = SimulationConfig(threads=2, gravity=1.0, max_steps=100)
        sim = Simulation(_make_universe(4), 200.0, config=config)
        sim.on("tick", lambda e: sim.stop() if e["step"] == 3 else None)
        sim.run()
        assert sim.steps == 3


# =============================================================================
# Failure handling
# =============================================================================


class TestWorkerFailure:
    """A failing worker aborts the run instead of hanging."""

    def test_step_raises_aborted(self):
        """A worker exception surfaces as SimulationAbortedError."""
        bodies = [Body(0.0, 0.0), ExplodingBody(1.0, 1.0), Body(2.0, 2.0)]
        sim = Simulation(bodies, 10.0, config=SimulationConfig(threads=2, gravity=1.0))
        with pytest.raises(SimulationAbortedError, match="integration failed") as excinfo:
            sim.step()
        assert isinstance(excinfo.value.__cause__, RuntimeError)
        assert sim.steps == 0
        sim.close()

    def test_run_aborts_and_closes_pool(self):
        """run() propagates the abort and still shuts the pool down."""
        ended = []
        bodies = [ExplodingBody(0.0, 0.0)]
        sim = Simulation(
            bodies,
            10.0,
            config=SimulationConfig(threads=4, max_steps=10),
            on_end=ended.append,
        )
        with pytest.raises(SimulationAbortedError):
            sim.run()
        assert not sim.running
        assert sim._executor is None
        assert ended == []
