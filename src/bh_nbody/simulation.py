"""
Timestep driver for the Barnes-Hut N-body simulation.

Each step runs two fork-join phases over a worker pool that is created once
and reused for the whole run:

1. Build: every worker inserts its own contiguous range of bodies into one
   shared BHTree while holding the tree lock.
2. Update: every worker resets, accumulates and integrates the forces on its
   own range of bodies. The tree is read-only here, so no lock is taken.

A phase completes only when every task has finished; a task that raised
aborts the run with SimulationAbortedError.
"""

from __future__ import annotations

import threading
import time
import warnings
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import TYPE_CHECKING, Any, Callable, Optional, Sequence, TypeVar

import numpy as np

if TYPE_CHECKING:
    from typing_extensions import Self

from .body import Body
from .config import SimulationConfig
from .spatial.bhtree import BHTree
from .spatial.quad import Quad
from .types import Event, EventCallback, EventType
from .validation import validate_bodies, validate_radius

T = TypeVar("T")


class EscapedBodyWarning(UserWarning):
    """Warning issued when bodies drift outside the universe square."""

    pass


class SimulationError(RuntimeError):
    """Base exception for failures while running the simulation."""

    pass


class SimulationAbortedError(SimulationError):
    """Raised when a worker task fails during a phase."""

    pass


def partition(n: int, parts: int) -> list[tuple[int, int]]:
    """
    Split range(n) into contiguous (start, stop) chunks.

    Every chunk has n // parts items except the last, which also takes the
    remainder. Chunks may be empty when n < parts.

    Args:
        n: Number of items
        parts: Number of chunks (>= 1)

    Returns:
        List of exactly `parts` half-open ranges covering range(n)
    """
    chunk = n // parts
    ranges = [(chunk * i, chunk * (i + 1)) for i in range(parts)]
    ranges[-1] = (ranges[-1][0], n)
    return ranges


class Simulation:
    """
    Barnes-Hut gravitational simulation of a fixed population of bodies.

    Example:
        config = SimulationConfig(threads=4, dt=0.1, duration=10.0)
        with Simulation(bodies, radius, config=config) as sim:
            sim.on("tick", lambda event: draw(sim.positions()))
            sim.run()
        print(f"time passed: {sim.time}")
    """

    def __init__(
        self,
        bodies: Sequence[Body],
        radius: float,
        *,
        config: Optional[SimulationConfig] = None,
        on_start: Optional[EventCallback] = None,
        on_tick: Optional[EventCallback] = None,
        on_end: Optional[EventCallback] = None,
    ) -> None:
        """
        Initialize the simulation.

        Args:
            bodies: Initial bodies. They are updated in place every step.
            radius: Half the side of the universe square centred at the origin
            config: Simulation parameters (defaults to SimulationConfig())
            on_start: Callback for start event
            on_tick: Callback for tick event (fired after every step)
            on_end: Callback for end event

        Raises:
            InvalidBodyError: If any body has non-finite state or mass <= 0
            InvalidConfigError: If radius is not positive
        """
        validate_bodies(bodies, strict=True)
        self._bodies: list[Body] = list(bodies)
        self._radius: float = validate_radius(radius)
        self._config: SimulationConfig = config if config is not None else SimulationConfig()
        self._events: dict[EventType, EventCallback] = {}

        self._time: float = 0.0
        self._steps: int = 0
        self._tree: Optional[BHTree] = None
        self._running: bool = False

        self._tree_lock = threading.Lock()
        self._executor: Optional[ThreadPoolExecutor] = None

        if on_start:
            self._events[EventType.start] = on_start
        if on_tick:
            self._events[EventType.tick] = on_tick
        if on_end:
            self._events[EventType.end] = on_end

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def bodies(self) -> list[Body]:
        """Get the list of bodies (canonical, mutated in place)."""
        return self._bodies

    @property
    def radius(self) -> float:
        """Get the universe radius."""
        return self._radius

    @property
    def config(self) -> SimulationConfig:
        """Get the simulation configuration."""
        return self._config

    @property
    def time(self) -> float:
        """Simulated time elapsed so far."""
        return self._time

    @property
    def steps(self) -> int:
        """Number of completed timesteps."""
        return self._steps

    @property
    def tree(self) -> Optional[BHTree]:
        """Tree built during the most recent step."""
        return self._tree

    @property
    def running(self) -> bool:
        """True while run() is looping."""
        return self._running

    def positions(self) -> np.ndarray:
        """Current positions as an (n, 2) float array."""
        return np.array([(b.x, b.y) for b in self._bodies], dtype=np.float64).reshape(-1, 2)

    # -------------------------------------------------------------------------
    # Event System
    # -------------------------------------------------------------------------

    def on(self, event: EventType | str, callback: EventCallback) -> Self:
        """
        Subscribe to a simulation event.

        Args:
            event: Event type (EventType enum or string name)
            callback: Function to call when event fires

        Returns:
            self (for chaining)
        """
        if isinstance(event, str):
            event = EventType[event]
        self._events[event] = callback
        return self

    def trigger(self, event: Event) -> None:
        """
        Trigger an event, calling the registered callback.

        Args:
            event: Event payload with type and optional data
        """
        event_type = event.get("type")
        if event_type is not None and event_type in self._events:
            self._events[event_type](event)

    # -------------------------------------------------------------------------
    # Lifecycle Methods
    # -------------------------------------------------------------------------

    def run(self) -> Self:
        """
        Step until the wall-clock duration elapses or max_steps is reached.

        The deadline is only checked between complete steps. The worker pool
        is shut down when the loop ends.

        Returns:
            self (for chaining)

        Raises:
            SimulationAbortedError: If a worker task fails
        """
        config = self._config
        deadline = time.monotonic() + config.duration

        self._running = True
        self.trigger({"type": EventType.start, "step": self._steps, "time": self._time})
        try:
            while self._running:
                if config.max_steps is not None and self._steps >= config.max_steps:
                    break
                self.step()
                if time.monotonic() >= deadline:
                    break
        finally:
            self._running = False
            self.close()

        self.trigger({"type": EventType.end, "step": self._steps, "time": self._time})
        return self

    def stop(self) -> Self:
        """
        Stop run() after the current step.

        Returns:
            self (for chaining)
        """
        self._running = False
        return self

    def step(self) -> Self:
        """
        Perform one timestep: build the tree, then update every body.

        Returns:
            self (for chaining)

        Raises:
            SimulationAbortedError: If a worker task fails
        """
        config = self._config
        tree = BHTree(
            Quad(0.0, 0.0, 2 * self._radius),
            theta=config.theta,
            gravity=config.gravity,
            softening=config.softening,
            max_depth=config.max_depth,
        )
        ranges = partition(len(self._bodies), config.threads)

        escaped = sum(self._fork_join(lambda r: self._build_range(tree, *r), ranges))
        if escaped:
            warnings.warn(
                f"{escaped} body(ies) outside the universe were left out of the tree.",
                EscapedBodyWarning,
                stacklevel=2,
            )

        self._fork_join(lambda r: self._update_range(tree, *r), ranges)

        self._tree = tree
        self._steps += 1
        self._time = self._steps * config.dt

        self.trigger({"type": EventType.tick, "step": self._steps, "time": self._time})
        return self

    def close(self) -> None:
        """Shut down the worker pool. A later step() starts a new one."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Phases
    # -------------------------------------------------------------------------

    def _build_range(self, tree: BHTree, start: int, stop: int) -> int:
        """Insert bodies[start:stop] into tree. Returns the number skipped."""
        inside = [body for body in self._bodies[start:stop] if body.is_in(tree.quad)]
        with self._tree_lock:
            for body in inside:
                tree.insert(body)
        return (stop - start) - len(inside)

    def _update_range(self, tree: BHTree, start: int, stop: int) -> None:
        """Recompute forces on bodies[start:stop] and advance them by dt."""
        dt = self._config.dt
        for body in self._bodies[start:stop]:
            body.reset_force()
            tree.update_force(body)
            body.update(dt)

    def _pool(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self._config.threads,
                thread_name_prefix="bh-nbody",
            )
        return self._executor

    def _fork_join(
        self,
        task: Callable[[tuple[int, int]], T],
        ranges: Sequence[tuple[int, int]],
    ) -> list[T]:
        """
        Run task once per range on the pool and wait for all of them.

        Every future is awaited before any failure is reported, so no task
        is still touching shared state when the error propagates.

        Raises:
            SimulationAbortedError: If any task raised
        """
        pool = self._pool()
        futures: list[Future[T]] = [pool.submit(task, r) for r in ranges]
        wait(futures)

        for (start, stop), future in zip(ranges, futures):
            error = future.exception()
            if error is not None:
                self._running = False
                raise SimulationAbortedError(
                    f"Worker for bodies [{start}, {stop}) failed during step "
                    f"{self._steps + 1}: {error!r}"
                ) from error

        return [future.result() for future in futures]


__all__ = [
    "EscapedBodyWarning",
    "SimulationError",
    "SimulationAbortedError",
    "Simulation",
    "partition",
]
