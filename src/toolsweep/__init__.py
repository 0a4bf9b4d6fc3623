# -*- coding: utf-8 -*-
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("toolsweep")
except PackageNotFoundError:  # pragma: no cover - handled when package not installed
    __version__ = "unknown"

from toolsweep.errors import (
    ConfigError,
    DegenerateDirectionError,
    InvalidGeometryError,
    KernelError,
    NonPlanarPathError,
    ToolpathError,
)
from toolsweep.tool import CylindricalTool
from toolsweep.segments import (
    Arc,
    Circle,
    CompoundPath,
    FittedCurve,
    Line,
    SegmentKind,
)
from toolsweep.toolpath import MeshReport, ToolpathSolid, build_toolpath

__all__ = [
    "__version__",
    "Arc",
    "Circle",
    "CompoundPath",
    "ConfigError",
    "CylindricalTool",
    "DegenerateDirectionError",
    "FittedCurve",
    "InvalidGeometryError",
    "KernelError",
    "Line",
    "MeshReport",
    "NonPlanarPathError",
    "SegmentKind",
    "ToolpathError",
    "ToolpathSolid",
    "build_toolpath",
]
