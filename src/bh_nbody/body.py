"""
Point masses and their equations of motion.

A Body is the canonical, mutable state of one particle. The quadtree never
stores bodies directly: it stores PointMass snapshots taken at insertion
time, so a tree built for one timestep keeps seeing the positions it was
built from while workers move the bodies during the update phase.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Union

from .types import Color

if TYPE_CHECKING:
    from .spatial.quad import Quad

G = 6.67e-11
"""Gravitational constant (SI units)."""

EPS = 3e4**2
"""Default softening: squared softening length added to d**2."""


@dataclass(frozen=True)
class PointMass:
    """
    Immutable position and mass used by the tree.

    Attributes:
        x, y: Position (or mass-weighted centroid for aggregates)
        mass: Mass (or total mass for aggregates)
        source: Originating body for leaf entries, None for pseudo-bodies
    """

    x: float
    y: float
    mass: float
    source: Optional[Body] = None

    @staticmethod
    def combine(a: PointMass, b: PointMass) -> PointMass:
        """Return the mass-weighted aggregate of two point masses."""
        mass = a.mass + b.mass
        x = (a.x * a.mass + b.x * b.mass) / mass
        y = (a.y * a.mass + b.y * b.mass) / mass
        return PointMass(x, y, mass)


class Body:
    """
    Mutable point mass with position, velocity and accumulated force.

    Attributes:
        x, y: Position
        vx, vy: Velocity
        fx, fy: Force accumulated during the current timestep
        mass: Mass (must be positive)
        color: Display colour, opaque to the simulation
    """

    __slots__ = ("x", "y", "vx", "vy", "fx", "fy", "mass", "color")

    def __init__(
        self,
        x: float,
        y: float,
        vx: float = 0.0,
        vy: float = 0.0,
        mass: float = 1.0,
        color: Color = (255, 255, 255),
    ) -> None:
        self.x = float(x)
        self.y = float(y)
        self.vx = float(vx)
        self.vy = float(vy)
        self.fx = 0.0
        self.fy = 0.0
        self.mass = float(mass)
        self.color = color

    def is_in(self, quad: Quad) -> bool:
        """True if this body's current position lies within quad."""
        return quad.contains(self.x, self.y)

    def reset_force(self) -> None:
        """Zero the force accumulator."""
        self.fx = 0.0
        self.fy = 0.0

    def add_force(
        self,
        other: Union[Body, PointMass],
        gravity: float = G,
        softening: float = EPS,
    ) -> None:
        """
        Accumulate the gravitational pull of another (pseudo-)body.

        The magnitude is gravity * m1 * m2 / (d**2 + softening), directed
        from this body toward other. Coincident points contribute nothing
        since the direction is undefined.

        Args:
            other: Body or PointMass exerting the force (never self)
            gravity: Gravitational constant
            softening: Term added to the squared distance
        """
        dx = other.x - self.x
        dy = other.y - self.y
        dist_sq = dx * dx + dy * dy
        if dist_sq == 0.0:
            return

        dist = math.sqrt(dist_sq)
        force = (gravity * self.mass * other.mass) / (dist_sq + softening)
        self.fx += force * dx / dist
        self.fy += force * dy / dist

    def update(self, dt: float) -> None:
        """Advance one explicit Euler step of length dt."""
        self.vx += dt * self.fx / self.mass
        self.vy += dt * self.fy / self.mass
        self.x += dt * self.vx
        self.y += dt * self.vy

    def snapshot(self) -> PointMass:
        """Copy the current position and mass, tagged with this body."""
        return PointMass(self.x, self.y, self.mass, self)

    def __repr__(self) -> str:
        return (
            f"Body(x={self.x:.4g}, y={self.y:.4g}, vx={self.vx:.4g}, "
            f"vy={self.vy:.4g}, mass={self.mass:.4g})"
        )


__all__ = ["G", "EPS", "Body", "PointMass"]
