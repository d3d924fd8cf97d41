"""
Common types for the N-body simulation.

This module provides the small shared types used across the package:
- Color: Opaque display attribute carried by each body
- EventType: Simulation lifecycle events
- Event: Event payload for callbacks
"""

from __future__ import annotations

from enum import IntEnum
from typing import Callable, Optional, Tuple, TypedDict

Color = Tuple[int, int, int]
"""Display colour as an (r, g, b) triple. The simulation never inspects it."""


class EventType(IntEnum):
    """
    Simulation lifecycle events.

    - start: The timestep loop is about to begin
    - tick: Fired once per completed timestep (for rendering)
    - end: The loop has terminated
    """

    start = 0
    tick = 1
    end = 2


class Event(TypedDict, total=False):
    """Event payload passed to event listeners."""

    type: EventType
    step: int
    time: float


EventCallback = Callable[[Optional[Event]], None]


__all__ = [
    "Color",
    "EventType",
    "Event",
    "EventCallback",
]
