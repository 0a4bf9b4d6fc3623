"""Raw swept solids, one per path segment.

Lines are swept by translation: the profile is built at the line's
start, facing along the displacement, and extruded through the whole
displacement.  Every other kind is resolved to a kernel curve and the
profile, built at the curve's start facing along the start tangent, is
swept along it.

The generalized sweep keeps the profile upright.  It traces the tool's
volume correctly only while the curve tangent stays horizontal, which
is why curve segments are restricted to a horizontal plane.  Sharp
kinks, self-intersections, or curvature radii smaller than the tool
radius are not detected here; the kernel may fail or produce invalid
solids for them.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Sequence

from toolsweep.profile import build_profile
from toolsweep.segments import SegmentKind
from toolsweep.tool import CylindricalTool

logger = logging.getLogger(__name__)

DebugHook = Callable[[Sequence[Any]], None]


def noop_hook(shapes: Sequence[Any]) -> None:
    """Debug hook that ignores everything (the production default)."""


def resolve_curve(segment, kernel):
    """The kernel curve a segment describes."""
    kind = segment.kind
    if kind is SegmentKind.LINE:
        return kernel.segment_curve(segment.start, segment.end)
    if kind is SegmentKind.ARC:
        return kernel.arc_through(segment.endpoint_a, segment.interior_point,
                                  segment.endpoint_b)
    if kind is SegmentKind.CIRCLE:
        return kernel.circle_through(segment.p1, segment.p2, segment.p3)
    if kind is SegmentKind.FITTED_CURVE:
        return kernel.interpolate(segment.points, segment.tangents)
    raise TypeError(f"not a path segment: {segment!r}")


def sweep_line(segment, tool: CylindricalTool, kernel, debug_hook: DebugHook = noop_hook):
    """Prism traced by translating the profile along a line."""
    face = build_profile(kernel, segment.displacement, segment.start, tool)
    debug_hook([face])
    return kernel.extrude(face, segment.displacement)


def sweep_curve(curve, tool: CylindricalTool, kernel, debug_hook: DebugHook = noop_hook):
    """Solid traced by sweeping the profile along ``curve``."""
    u0 = curve.first_parameter()
    face = build_profile(kernel, curve.tangent_at(u0), curve.point_at(u0), tool)
    debug_hook([face, curve])
    return kernel.sweep(face, curve)


def sweep_segment(segment, tool: CylindricalTool, kernel, debug_hook: DebugHook = noop_hook):
    """Return ``(solid, curve)`` for one segment.

    ``curve`` is the resolved kernel curve; its end points locate the
    segment's caps.
    """
    curve = resolve_curve(segment, kernel)
    if segment.kind is SegmentKind.LINE:
        solid = sweep_line(segment, tool, kernel, debug_hook)
    else:
        solid = sweep_curve(curve, tool, kernel, debug_hook)
    logger.debug("swept %s segment", segment.kind.value)
    return solid, curve


__all__ = ["DebugHook", "noop_hook", "resolve_curve", "sweep_line", "sweep_curve", "sweep_segment"]
