"""
Simulation configuration.

All tunables live in one immutable value that is handed to the driver at
construction. There is no module-level mutable state.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Optional

from .body import EPS, G
from .spatial.bhtree import MAX_DEPTH
from .validation import (
    validate_max_depth,
    validate_max_steps,
    validate_positive,
    validate_softening,
    validate_theta,
    validate_threads,
)


@dataclass(frozen=True)
class SimulationConfig:
    """
    Immutable simulation parameters.

    Attributes:
        threads: Size of the worker pool
        dt: Simulated time quantum per step
        theta: Barnes-Hut opening angle threshold
        softening: Term added to squared distances in the force law
        gravity: Gravitational constant
        duration: Wall-clock budget for run(), in seconds
        max_steps: Optional cap on the number of steps run() performs
        max_depth: Tree depth at which coincident bodies share a leaf
    """

    threads: int = 4
    dt: float = 0.1
    theta: float = 0.5
    softening: float = EPS
    gravity: float = G
    duration: float = 100.0
    max_steps: Optional[int] = None
    max_depth: int = MAX_DEPTH

    def __post_init__(self) -> None:
        """
        Validate all parameters.

        Raises:
            InvalidConfigError: If any parameter is out of range
        """
        validate_threads(self.threads)
        validate_positive(self.dt, "dt")
        validate_theta(self.theta)
        validate_softening(self.softening)
        validate_positive(self.gravity, "gravity")
        validate_positive(self.duration, "duration")
        validate_max_steps(self.max_steps)
        validate_max_depth(self.max_depth)

    def with_options(self, **changes: Any) -> SimulationConfig:
        """Return a copy with the given fields replaced (re-validated)."""
        return replace(self, **changes)


__all__ = ["SimulationConfig"]
