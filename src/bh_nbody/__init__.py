"""
bh-nbody: Barnes-Hut N-body gravitational simulation in Python.

This package simulates a fixed population of point masses in a 2D universe,
approximating pairwise gravity in O(n log n) with a quadtree.

Modules:
- body: Body state and the softened Newtonian force law
- spatial: Square regions and the Barnes-Hut quadtree
- simulation: Multi-threaded timestep driver
- universe: Reader for plain-text universe descriptions
- export: SVG rendering of simulation frames
- metrics: Conserved-quantity diagnostics
"""

__version__ = "0.1.0"

# Bodies and force law
from .body import EPS, G, Body, PointMass

# Configuration
from .config import SimulationConfig

# Diagnostics
from .metrics import (
    center_of_mass,
    kinetic_energy,
    simulation_summary,
    total_mass,
    total_momentum,
)

# Driver
from .simulation import (
    EscapedBodyWarning,
    Simulation,
    SimulationAbortedError,
    SimulationError,
    partition,
)

# Spatial data structures
from .spatial import BHTree, Quad, Quadrant
from .types import Color, Event, EventType

# Input
from .universe import Universe, load_universe, read_universe

# Validation utilities
from .validation import (
    InvalidBodyError,
    InvalidConfigError,
    InvalidQuadError,
    UniverseFormatError,
    ValidationError,
)

__all__ = [
    # Version
    "__version__",
    # Shared types
    "Color",
    "EventType",
    "Event",
    # Bodies
    "G",
    "EPS",
    "Body",
    "PointMass",
    # Spatial data structures
    "Quad",
    "Quadrant",
    "BHTree",
    # Simulation
    "SimulationConfig",
    "Simulation",
    "SimulationError",
    "SimulationAbortedError",
    "EscapedBodyWarning",
    "partition",
    # Input
    "Universe",
    "read_universe",
    "load_universe",
    # Metrics
    "total_mass",
    "center_of_mass",
    "total_momentum",
    "kinetic_energy",
    "simulation_summary",
    # Validation
    "ValidationError",
    "InvalidBodyError",
    "InvalidQuadError",
    "InvalidConfigError",
    "UniverseFormatError",
]
