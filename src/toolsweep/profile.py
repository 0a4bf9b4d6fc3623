"""Rectangular tool cross-sections.

The swept profile is the tool's silhouette seen along the path: a
rectangle ``2 * radius`` wide and ``height`` tall, standing upright on
the path point and facing along the path direction.
"""

from __future__ import annotations

import logging
from typing import List

from toolsweep.errors import InvalidGeometryError
from toolsweep.geom import UP, add, horizontal_perp, scale3, vstr
from toolsweep.tool import CylindricalTool

logger = logging.getLogger(__name__)


def profile_corners(direction, base_point, width: float, height: float) -> List[list]:
    """Corners of an upright rectangle facing ``direction``.

    The bottom edge is centered on ``base_point`` and runs horizontally,
    perpendicular to ``direction``; the rectangle extends ``height``
    straight up.  Corners are returned in cyclic order: bottom right,
    top right, top left, bottom left (looking along ``direction``).

    A ``direction`` with no horizontal component raises
    ``DegenerateDirectionError``.
    """
    if width <= 0 or height <= 0:
        raise InvalidGeometryError(
            f"profile width and height must be positive, got {width!r} x {height!r}")
    side = horizontal_perp(direction)
    half = scale3(side, width / 2.0)
    lift = scale3(UP, height)

    p1 = add(base_point, scale3(half, -1.0))
    p2 = add(p1, lift)
    p4 = add(base_point, half)
    p3 = add(p4, lift)
    return [p1, p2, p3, p4]


def build_profile(kernel, direction, base_point, tool: CylindricalTool):
    """Planar face of the tool cross-section at ``base_point``."""
    corners = profile_corners(direction, base_point, tool.width, tool.height)
    logger.debug("profile at %s facing %s", vstr(base_point), vstr(direction))
    return kernel.planar_face(corners)


__all__ = ["profile_corners", "build_profile"]
