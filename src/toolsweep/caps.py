"""Cylindrical end caps.

A swept rectangle is square at both ends.  Fusing an upright cylinder
of the tool's own size at each end rounds the ends off like the real
tool and fills the wedge-shaped gaps where two segments meet at an
angle.
"""

from __future__ import annotations

import logging
from typing import List

from toolsweep.geom import vstr
from toolsweep.tool import CylindricalTool

logger = logging.getLogger(__name__)


def build_cap(location, tool: CylindricalTool, kernel):
    """Upright tool-sized cylinder with its bottom face centered on ``location``."""
    logger.debug("cap at %s", vstr(location))
    return kernel.cylinder(location, tool.radius, tool.height)


def build_caps(curve, tool: CylindricalTool, kernel) -> List:
    """Start and end caps for a resolved segment curve."""
    return [build_cap(curve.start_point(), tool, kernel),
            build_cap(curve.end_point(), tool, kernel)]


def cap_solid(solid, curve, tool: CylindricalTool, kernel):
    """``solid`` fused with the caps at both ends of ``curve``."""
    for cap in build_caps(curve, tool, kernel):
        solid = kernel.fuse(solid, cap)
    return solid


__all__ = ["build_cap", "build_caps", "cap_solid"]
