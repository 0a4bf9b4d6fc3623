"""Build a toolpath in code and export it.

Usage::

    python examples/toolpath_demo.py --out ring.stl --show

Requires pythonocc-core (conda-forge) for the default kernel, and
pyglet for ``--show``.
"""

from __future__ import annotations

import argparse
import logging
import math

from toolsweep import CompoundPath, CylindricalTool, build_toolpath
from toolsweep.kernel import get_kernel


def ring_with_spokes(radius: float, spokes: int) -> CompoundPath:
    """A circle with straight spokes running out from the middle."""
    path = CompoundPath()
    path.circle([radius, 0, 0], [0, radius, 0], [-radius, 0, 0])
    for i in range(spokes):
        angle = 2.0 * math.pi * i / spokes
        path.line([0, 0, 0], [radius * math.cos(angle), radius * math.sin(angle), 0])
    return path


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--out", default="ring.stl")
    parser.add_argument("--radius", type=float, default=5.0)
    parser.add_argument("--spokes", type=int, default=3)
    parser.add_argument("--show", action="store_true", help="view intermediate shapes")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    kernel = get_kernel()
    hook = None
    if args.show:
        from toolsweep.viewer import ViewerHook
        hook = ViewerHook(kernel)

    tool = CylindricalTool(radius=0.4, height=1.0)
    toolpath = build_toolpath(ring_with_spokes(args.radius, args.spokes), tool, kernel,
                              debug_hook=hook)
    report = toolpath.mesh_surface(angular_deflection=0.3, linear_deflection=0.005)
    toolpath.write_stl(args.out, name="ring")
    print(f"{args.out}: {report.triangle_count} triangles, {toolpath.body_count()} bodies")


if __name__ == "__main__":
    main()
