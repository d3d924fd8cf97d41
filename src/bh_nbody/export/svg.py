"""
SVG export for simulation frames.

Renders the universe square as a fixed-size viewport with one filled
circle per body. The y axis points up in the simulation and down in SVG,
so it is flipped on output.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Optional, Sequence, Union
from xml.sax.saxutils import escape

from ..validation import validate_radius

if TYPE_CHECKING:
    from ..body import Body
    from ..simulation import Simulation
    from ..types import Color, Event


def to_svg(
    bodies: Sequence[Body],
    radius: float,
    *,
    size: float = 512.0,
    body_radius: float = 2.0,
    background: Optional[str] = "#000000",
    show_time: Optional[float] = None,
    label_color: str = "#ffffff",
    font_size: float = 12.0,
    font_family: str = "monospace",
) -> str:
    """
    Export one frame of the simulation to SVG format.

    Args:
        bodies: Bodies to draw (positions and colours are read, not modified)
        radius: Universe radius; [-radius, radius] maps onto [0, size]
        size: Width and height of the SVG viewport (default 512)
        body_radius: Radius of each drawn body in pixels (default 2)
        background: Background color (default black, None for transparent)
        show_time: If given, draw "t = <value>" in the top-left corner
        label_color: Color for the time label (default white)
        font_size: Font size for the time label (default 12)
        font_family: Font family for the time label (default monospace)

    Returns:
        SVG string representation of the frame

    Raises:
        InvalidConfigError: If radius is not a finite positive number
    """
    radius = validate_radius(radius)
    if not bodies:
        return _empty_svg(size, size, background)

    scale = size / (2 * radius)

    svg_parts = [
        f'<svg xmlns="http://www.w3.org/2000/svg" '
        f'width="{size:.1f}" height="{size:.1f}" '
        f'viewBox="0 0 {size:.1f} {size:.1f}">'
    ]

    if background:
        svg_parts.append(f'  <rect width="100%" height="100%" fill="{escape(background)}"/>')

    svg_parts.append('  <g class="bodies">')
    for body in bodies:
        svg_parts.append(_render_body(body, radius, scale, body_radius))
    svg_parts.append("  </g>")

    if show_time is not None:
        svg_parts.append(
            f'  <text x="4" y="{font_size + 2:.1f}" '
            f'fill="{escape(label_color)}" font-size="{font_size}" '
            f'font-family="{escape(font_family)}">t = {show_time:.4g}</text>'
        )

    svg_parts.append("</svg>")

    return "\n".join(svg_parts)


def write_svg_frames(
    simulation: Simulation,
    directory: Union[str, Path],
    *,
    prefix: str = "frame",
    **svg_options: object,
) -> Path:
    """
    Register a tick listener that writes one SVG file per step.

    Files are named <prefix>_00001.svg, <prefix>_00002.svg, ... after the
    step number.

    Args:
        simulation: Simulation to observe
        directory: Output directory (created if missing)
        prefix: File name prefix (default "frame")
        **svg_options: Extra keyword arguments for to_svg()

    Returns:
        The output directory
    """
    out_dir = Path(directory)
    out_dir.mkdir(parents=True, exist_ok=True)

    def on_tick(event: Optional[Event]) -> None:
        step = event.get("step", simulation.steps) if event else simulation.steps
        content = to_svg(
            simulation.bodies,
            simulation.radius,
            show_time=simulation.time,
            **svg_options,  # type: ignore[arg-type]
        )
        (out_dir / f"{prefix}_{step:05d}.svg").write_text(content, encoding="utf-8")

    simulation.on("tick", on_tick)
    return out_dir


def _empty_svg(width: float, height: float, background: Optional[str]) -> str:
    """Create an empty SVG."""
    bg = ""
    if background:
        bg = f'\n  <rect width="100%" height="100%" fill="{escape(background)}"/>'
    return (
        f'<svg xmlns="http://www.w3.org/2000/svg" '
        f'width="{width:.1f}" height="{height:.1f}" '
        f'viewBox="0 0 {width:.1f} {height:.1f}">{bg}\n</svg>'
    )


def _render_body(body: Body, radius: float, scale: float, body_radius: float) -> str:
    """Render a body as a filled circle."""
    cx = (body.x + radius) * scale
    cy = (radius - body.y) * scale
    return (
        f'    <circle cx="{cx:.1f}" cy="{cy:.1f}" r="{body_radius:.1f}" '
        f'fill="{_hex_color(body.color)}"/>'
    )


def _hex_color(color: Color) -> str:
    """Format an (r, g, b) triple as #rrggbb."""
    red, green, blue = color
    return f"#{red:02x}{green:02x}{blue:02x}"


__all__ = [
    "to_svg",
    "write_svg_frames",
]
