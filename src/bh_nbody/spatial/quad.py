"""
Square regions of the plane and their quadrant subdivision.

Boundary convention: lower and left edges are closed, upper and right
edges are open. A point on a shared edge between two quadrants therefore
belongs to the east (or north) one, and to exactly one quadrant at every
level of the tree.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from ..validation import validate_length


class Quadrant(IntEnum):
    """Child index of a quadrant within its parent."""

    NW = 0
    NE = 1
    SW = 2
    SE = 3


@dataclass(frozen=True)
class Quad:
    """
    Axis-aligned square region.

    Attributes:
        x, y: Center of the square
        length: Side length (positive)
    """

    x: float
    y: float
    length: float

    def __post_init__(self) -> None:
        validate_length(self.length)

    @property
    def half(self) -> float:
        """Half the side length."""
        return self.length / 2

    def contains(self, x: float, y: float) -> bool:
        """Check if point (x, y) lies in [x_min, x_max) x [y_min, y_max)."""
        half = self.half
        return (
            self.x - half <= x < self.x + half
            and self.y - half <= y < self.y + half
        )

    def locate(self, x: float, y: float) -> Quadrant:
        """
        Get the quadrant a point belongs to.

        Points on the vertical midline go east, points on the horizontal
        midline go north. Insertion routes bodies with this test alone.
        """
        east = x >= self.x
        north = y >= self.y
        if north:
            return Quadrant.NE if east else Quadrant.NW
        return Quadrant.SE if east else Quadrant.SW

    def quadrant(self, which: Quadrant) -> Quad:
        """Return the child square for the given quadrant."""
        quarter = self.length / 4
        half = self.length / 2
        if which == Quadrant.NW:
            return Quad(self.x - quarter, self.y + quarter, half)
        if which == Quadrant.NE:
            return Quad(self.x + quarter, self.y + quarter, half)
        if which == Quadrant.SW:
            return Quad(self.x - quarter, self.y - quarter, half)
        return Quad(self.x + quarter, self.y - quarter, half)

    def children(self) -> tuple[Quad, Quad, Quad, Quad]:
        """All four child squares in Quadrant order."""
        return (
            self.quadrant(Quadrant.NW),
            self.quadrant(Quadrant.NE),
            self.quadrant(Quadrant.SW),
            self.quadrant(Quadrant.SE),
        )


__all__ = ["Quad", "Quadrant"]
