"""
Input validation utilities for the N-body simulation.

Provides centralized validation functions for bodies, the universe radius,
spatial regions and simulation parameters. Malformed input is rejected here,
at the ingestion boundary, so the tree and the driver can assume finite
coordinates and positive masses.
"""

from __future__ import annotations

import math
import numbers
from typing import Any, Optional, Sequence

# Insertion recurses twice per level; deeper trees would exhaust the stack.
MAX_DEPTH_LIMIT = 256


class ValidationError(ValueError):
    """Base exception for simulation validation errors."""

    pass


class InvalidBodyError(ValidationError):
    """Raised when a body has non-finite state or a non-positive mass."""

    pass


class InvalidQuadError(ValidationError):
    """Raised when a square region has a non-positive side length."""

    pass


class InvalidConfigError(ValidationError):
    """Raised when a simulation parameter is out of range."""

    pass


class UniverseFormatError(ValidationError):
    """Raised when a universe description cannot be parsed."""

    pass


def validate_finite(value: float, name: str) -> float:
    """
    Validate that a value is a finite real number.

    Args:
        value: Value to check
        name: Name used in the error message

    Returns:
        The value as a float

    Raises:
        InvalidBodyError: If the value is NaN or infinite
    """
    value = float(value)
    if not math.isfinite(value):
        raise InvalidBodyError(f"{name} must be finite, got {value}")
    return value


def validate_mass(mass: float) -> float:
    """
    Validate that a mass is finite and strictly positive.

    Raises:
        InvalidBodyError: If mass <= 0 or not finite
    """
    mass = validate_finite(mass, "mass")
    if mass <= 0:
        raise InvalidBodyError(f"mass must be positive, got {mass}")
    return mass


def validate_color(color: Sequence[int]) -> tuple[int, int, int]:
    """
    Validate an RGB colour triple.

    Args:
        color: (red, green, blue) sequence, each component in [0, 255]

    Returns:
        Validated (red, green, blue) tuple

    Raises:
        InvalidBodyError: If the colour does not have 3 components in range
    """
    if len(color) != 3:
        raise InvalidBodyError(f"color must have 3 components (r, g, b), got {len(color)}")

    components = tuple(int(c) for c in color)
    for name, value in zip(("red", "green", "blue"), components):
        if value < 0 or value > 255:
            raise InvalidBodyError(f"color {name} component must be in [0, 255], got {value}")
    return components  # type: ignore[return-value]


def validate_radius(radius: float) -> float:
    """
    Validate the universe radius.

    Raises:
        InvalidConfigError: If radius is not a finite positive number
    """
    radius = float(radius)
    if not math.isfinite(radius) or radius <= 0:
        raise InvalidConfigError(f"radius must be a finite positive number, got {radius}")
    return radius


def validate_length(length: float) -> float:
    """Validate the side length of a square region."""
    length = float(length)
    if not length > 0:
        raise InvalidQuadError(f"Quad side length must be positive, got {length}")
    return length


def validate_bodies(bodies: Sequence[Any], strict: bool = True) -> list[tuple[int, str]]:
    """
    Validate position, velocity and mass of every body.

    Args:
        bodies: Sequence of Body objects (anything with x, y, vx, vy, mass)
        strict: If True, raises on invalid. If False, returns list of issues.

    Returns:
        List of (body_index, issue_description) tuples

    Raises:
        InvalidBodyError: If strict=True and invalid bodies found
    """
    issues: list[tuple[int, str]] = []

    for i, body in enumerate(bodies):
        for attr in ("x", "y", "vx", "vy", "mass"):
            value = getattr(body, attr, None)
            if value is None:
                issues.append((i, f"Body {i}: missing {attr}"))
            elif isinstance(value, bool) or not isinstance(value, numbers.Real):
                issues.append((i, f"Body {i}: {attr} must be a number, got {value!r}"))
            elif not math.isfinite(value):
                issues.append((i, f"Body {i}: {attr} must be finite, got {value}"))
            elif attr == "mass" and value <= 0:
                issues.append((i, f"Body {i}: mass must be positive, got {value}"))

    if strict and issues:
        msg = "Invalid bodies:\n" + "\n".join(issue[1] for issue in issues)
        raise InvalidBodyError(msg)

    return issues


def validate_threads(threads: int) -> int:
    """
    Validate worker thread count is a positive integer.

    Raises:
        InvalidConfigError: If threads is not an int or threads < 1
    """
    if isinstance(threads, bool) or not isinstance(threads, int):
        raise InvalidConfigError(f"threads must be an integer, got {threads!r}")
    if threads < 1:
        raise InvalidConfigError(f"threads must be >= 1, got {threads}")
    return threads


def validate_positive(value: float, name: str) -> float:
    """
    Validate a finite, strictly positive parameter.

    Raises:
        InvalidConfigError: If value <= 0 or not finite
    """
    value = float(value)
    if not math.isfinite(value) or value <= 0:
        raise InvalidConfigError(f"{name} must be positive, got {value}")
    return value


def validate_theta(theta: float) -> float:
    """
    Validate the Barnes-Hut opening angle.

    Returns:
        Validated theta value

    Raises:
        InvalidConfigError: If theta is negative or not finite
    """
    theta = float(theta)
    if not math.isfinite(theta) or theta < 0:
        raise InvalidConfigError(f"theta must be >= 0, got {theta}")
    return theta


def validate_softening(softening: float) -> float:
    """
    Validate the softening term added to squared distances.

    Raises:
        InvalidConfigError: If softening is negative or not finite
    """
    softening = float(softening)
    if not math.isfinite(softening) or softening < 0:
        raise InvalidConfigError(f"softening must be >= 0, got {softening}")
    return softening


def validate_max_steps(max_steps: Optional[int]) -> Optional[int]:
    """Validate an optional step cap (None means unbounded)."""
    if max_steps is not None and (isinstance(max_steps, bool) or not isinstance(max_steps, int)):
        raise InvalidConfigError(f"max_steps must be an integer, got {max_steps!r}")
    if max_steps is not None and max_steps < 0:
        raise InvalidConfigError(f"max_steps must be >= 0, got {max_steps}")
    return max_steps


def validate_max_depth(max_depth: int) -> int:
    """
    Validate the tree depth cutoff.

    Raises:
        InvalidConfigError: If max_depth is not an int in [1, MAX_DEPTH_LIMIT]
    """
    if isinstance(max_depth, bool) or not isinstance(max_depth, int):
        raise InvalidConfigError(f"max_depth must be an integer, got {max_depth!r}")
    if not 1 <= max_depth <= MAX_DEPTH_LIMIT:
        raise InvalidConfigError(
            f"max_depth must be between 1 and {MAX_DEPTH_LIMIT}, got {max_depth}"
        )
    return max_depth


__all__ = [
    "ValidationError",
    "InvalidBodyError",
    "InvalidQuadError",
    "InvalidConfigError",
    "UniverseFormatError",
    "validate_finite",
    "validate_mass",
    "validate_color",
    "validate_radius",
    "validate_length",
    "validate_bodies",
    "validate_threads",
    "validate_positive",
    "validate_theta",
    "validate_softening",
    "validate_max_steps",
    "validate_max_depth",
    "MAX_DEPTH_LIMIT",
]
