"""
Reader for plain-text universe descriptions.

Format (whitespace separated, line breaks insignificant):

    N
    radius
    px py vx vy mass red green blue     (N records)

Every value is validated here, before any Body reaches the simulation.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, TextIO, Union

from .body import Body
from .validation import (
    UniverseFormatError,
    validate_color,
    validate_finite,
    validate_mass,
    validate_radius,
)


@dataclass(frozen=True)
class Universe:
    """Parsed universe: radius of the bounding square and initial bodies."""

    radius: float
    bodies: tuple[Body, ...]

    def __len__(self) -> int:
        return len(self.bodies)


class _Tokens:
    """Sequential reader over whitespace-separated tokens."""

    def __init__(self, stream: TextIO) -> None:
        self._iter: Iterator[str] = (tok for line in stream for tok in line.split())
        self.position = 0

    def next(self, what: str) -> str:
        try:
            token = next(self._iter)
        except StopIteration:
            raise UniverseFormatError(
                f"Unexpected end of input while reading {what} (token {self.position})"
            ) from None
        self.position += 1
        return token

    def next_int(self, what: str) -> int:
        token = self.next(what)
        try:
            return int(token)
        except ValueError:
            raise UniverseFormatError(f"Expected integer for {what}, got {token!r}") from None

    def next_float(self, what: str) -> float:
        token = self.next(what)
        try:
            return float(token)
        except ValueError:
            raise UniverseFormatError(f"Expected number for {what}, got {token!r}") from None


def read_universe(stream: TextIO) -> Universe:
    """
    Parse a universe description from a text stream.

    Args:
        stream: Readable text stream (file, sys.stdin, io.StringIO)

    Returns:
        Universe with validated radius and bodies

    Raises:
        UniverseFormatError: If the input is truncated or not numeric
        InvalidBodyError: If a body has non-finite values, mass <= 0 or a
            colour component outside [0, 255]
        InvalidConfigError: If the radius is not positive
    """
    tokens = _Tokens(stream)

    count = tokens.next_int("body count")
    if count < 0:
        raise UniverseFormatError(f"Body count must be >= 0, got {count}")
    radius = validate_radius(tokens.next_float("radius"))

    bodies = []
    for i in range(count):
        label = f"body {i}"
        px = validate_finite(tokens.next_float(f"{label} x"), f"{label} x")
        py = validate_finite(tokens.next_float(f"{label} y"), f"{label} y")
        vx = validate_finite(tokens.next_float(f"{label} vx"), f"{label} vx")
        vy = validate_finite(tokens.next_float(f"{label} vy"), f"{label} vy")
        mass = validate_mass(tokens.next_float(f"{label} mass"))
        color = validate_color(
            (
                tokens.next_int(f"{label} red"),
                tokens.next_int(f"{label} green"),
                tokens.next_int(f"{label} blue"),
            )
        )
        bodies.append(Body(px, py, vx, vy, mass, color))

    return Universe(radius, tuple(bodies))


def load_universe(path: Union[str, Path]) -> Universe:
    """Read a universe description from a file."""
    with open(path, encoding="utf-8") as f:
        return read_universe(f)


__all__ = ["Universe", "read_universe", "load_universe"]
