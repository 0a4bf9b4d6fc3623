"""Cylindrical tool geometry."""

from __future__ import annotations

import math
from dataclasses import dataclass

from toolsweep.errors import InvalidGeometryError
from toolsweep.geom import isgoodnum


@dataclass(frozen=True)
class CylindricalTool:
    """A flat-bottomed cylindrical tool.

    The tool is a circle of ``radius`` extruded upward by ``height``.
    Its axis is always vertical; the path describes where the center of
    the tool's bottom face travels.  Only the shape is described here,
    not a position or an orientation.
    """

    radius: float
    height: float

    def __post_init__(self):
        for name in ("radius", "height"):
            value = getattr(self, name)
            if not isgoodnum(value) or not math.isfinite(value) or value <= 0:
                raise InvalidGeometryError(
                    f"tool {name} must be a positive number, got {value!r}")
            object.__setattr__(self, name, float(value))

    @property
    def width(self) -> float:
        """Width of the rectangular cross-section swept along a segment."""
        return 2.0 * self.radius


__all__ = ["CylindricalTool"]
