"""
Export functionality for simulation frames.

Example usage:
    from bh_nbody import Simulation, SimulationConfig, load_universe
    from bh_nbody.export import to_svg, write_svg_frames

    universe = load_universe("planets.txt")
    sim = Simulation(universe.bodies, universe.radius)

    # Write one file per step
    write_svg_frames(sim, "frames")
    sim.run()

    # Or render a single frame
    svg_content = to_svg(sim.bodies, sim.radius)
    with open("final.svg", "w") as f:
        f.write(svg_content)
"""

from .svg import to_svg, write_svg_frames

__all__ = [
    "to_svg",
    "write_svg_frames",
]
