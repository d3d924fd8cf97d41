"""
Simulation diagnostics.

Provides conserved-quantity measures for monitoring a run:
- Total mass
- Center of mass
- Total linear momentum
- Kinetic energy

Barnes-Hut forces are not exactly pairwise antisymmetric, so momentum is
only approximately conserved; drift in these values is a useful accuracy
signal when tuning theta and dt.
"""

from __future__ import annotations

from typing import Any, Sequence

import numpy as np

from .body import Body


def _arrays(bodies: Sequence[Body]) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Return (masses, positions, velocities) arrays of shape (n,), (n,2), (n,2)."""
    n = len(bodies)
    masses = np.fromiter((b.mass for b in bodies), dtype=np.float64, count=n)
    positions = np.array([(b.x, b.y) for b in bodies], dtype=np.float64).reshape(n, 2)
    velocities = np.array([(b.vx, b.vy) for b in bodies], dtype=np.float64).reshape(n, 2)
    return masses, positions, velocities


def total_mass(bodies: Sequence[Body]) -> float:
    """Sum of all masses."""
    return float(sum(b.mass for b in bodies))


def center_of_mass(bodies: Sequence[Body]) -> tuple[float, float]:
    """
    Mass-weighted mean position.

    Args:
        bodies: List of bodies

    Returns:
        (x, y) center of mass, (0.0, 0.0) for an empty list
    """
    if not bodies:
        return 0.0, 0.0
    masses, positions, _ = _arrays(bodies)
    com = masses @ positions / masses.sum()
    return float(com[0]), float(com[1])


def total_momentum(bodies: Sequence[Body]) -> tuple[float, float]:
    """Total linear momentum (sum of m * v)."""
    if not bodies:
        return 0.0, 0.0
    masses, _, velocities = _arrays(bodies)
    p = masses @ velocities
    return float(p[0]), float(p[1])


def kinetic_energy(bodies: Sequence[Body]) -> float:
    """Total kinetic energy (sum of m * |v|^2 / 2)."""
    if not bodies:
        return 0.0
    masses, _, velocities = _arrays(bodies)
    return float(0.5 * np.sum(masses * np.einsum("ij,ij->i", velocities, velocities)))


def simulation_summary(bodies: Sequence[Body]) -> dict[str, Any]:
    """
    Compute all diagnostics at once.

    Args:
        bodies: List of bodies

    Returns:
        Dictionary with keys: body_count, total_mass, center_of_mass,
        total_momentum, kinetic_energy
    """
    return {
        "body_count": len(bodies),
        "total_mass": total_mass(bodies),
        "center_of_mass": center_of_mass(bodies),
        "total_momentum": total_momentum(bodies),
        "kinetic_energy": kinetic_energy(bodies),
    }


__all__ = [
    "total_mass",
    "center_of_mass",
    "total_momentum",
    "kinetic_energy",
    "simulation_summary",
]
