"""
Toolpath solids: the volume a cylindrical tool sweeps along a path.

``build_toolpath`` runs the whole pipeline for a ``CompoundPath``:

1. each segment is swept (``toolsweep.sweep``) with an upright
   rectangular cross-section (``toolsweep.profile``);
2. a tool-sized cylinder is fused onto both ends (``toolsweep.caps``);
3. the capped solids are folded into one union, in declaration order
   (``toolsweep.accumulate``).

The resulting ``ToolpathSolid`` can then be meshed and written as
ASCII STL.  Everything runs sequentially in the caller's thread; any
kernel failure aborts the run with ``KernelError``.

Assumptions, none of which is checked:

- the tool axis points along +z for the whole path, and the path
  describes the center of the tool's bottom face;
- curve segments are tangent-continuous;
- the swept volume does not intersect itself (the kernel's behavior is
  undefined when it does).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional

from toolsweep.accumulate import fuse_all, fuse_into
from toolsweep.caps import cap_solid
from toolsweep.errors import ToolpathError
from toolsweep.io.stl import write_stl
from toolsweep.kernel.base import FaceTriangulation
from toolsweep.sweep import DebugHook, noop_hook, sweep_segment
from toolsweep.tool import CylindricalTool

logger = logging.getLogger(__name__)

DEFAULT_ANGULAR_DEFLECTION = 0.5
DEFAULT_LINEAR_DEFLECTION = 0.01


@dataclass(frozen=True)
class MeshReport:
    """Outcome of ``ToolpathSolid.mesh_surface``."""

    face_count: int
    meshed_faces: int
    skipped_faces: int
    triangle_count: int


class ToolpathSolid:
    """Union of every swept segment, plus its surface mesh once meshed.

    Starts empty; ``add`` fuses solids in.  ``mesh_surface`` replaces
    any previous mesh.
    """

    def __init__(self, kernel, shape: Optional[Any] = None):
        self.kernel = kernel
        self._shape = shape
        self._mesh: Optional[List[Optional[FaceTriangulation]]] = None

    @property
    def shape(self) -> Optional[Any]:
        return self._shape

    @property
    def is_empty(self) -> bool:
        return self._shape is None

    @property
    def mesh(self) -> Optional[List[Optional[FaceTriangulation]]]:
        """Per-face triangulations (``None`` for skipped faces), or ``None``."""
        return self._mesh

    @property
    def is_meshed(self) -> bool:
        return self._mesh is not None

    def add(self, shape) -> None:
        """Fuse ``shape`` into the toolpath (or adopt it, if empty)."""
        self._shape = fuse_into(self.kernel, self._shape, shape)
        self._mesh = None

    def _require_shape(self):
        if self._shape is None:
            raise ToolpathError("the toolpath is empty")
        return self._shape

    def mesh_surface(self, angular_deflection: float = DEFAULT_ANGULAR_DEFLECTION,
                     linear_deflection: float = DEFAULT_LINEAR_DEFLECTION) -> MeshReport:
        """Triangulate every boundary face of the toolpath.

        Smaller deflections give finer, slower meshes.  Faces the kernel
        cannot triangulate are skipped with a warning and left out of
        the export; the rest of the mesh is kept.

        Weird topology, self-intersections in particular, can make the
        kernel's mesher very slow.  Look at the solid first if in doubt.
        """
        if not angular_deflection > 0 or not linear_deflection > 0:
            raise ValueError(
                "mesh deflections must be positive, got "
                f"angular={angular_deflection!r} linear={linear_deflection!r}")
        shape = self._require_shape()
        self._mesh = None
        faces = self.kernel.triangulate(shape, angular_deflection, linear_deflection)

        for index, face in enumerate(faces):
            if face is None:
                logger.warning("face %d could not be triangulated; it will be "
                               "left out of the export", index)
        self._mesh = list(faces)
        report = MeshReport(
            face_count=len(faces),
            meshed_faces=sum(1 for f in faces if f is not None),
            skipped_faces=sum(1 for f in faces if f is None),
            triangle_count=self.triangle_count,
        )
        logger.info("meshed %d of %d faces into %d triangles",
                    report.meshed_faces, report.face_count, report.triangle_count)
        return report

    @property
    def triangle_count(self) -> int:
        if self._mesh is None:
            return 0
        return sum(f.triangle_count for f in self._mesh if f is not None)

    def bounding_box(self) -> List[list]:
        return self.kernel.bounding_box(self._require_shape())

    def body_count(self) -> int:
        if self._shape is None:
            return 0
        return self.kernel.solid_count(self._shape)

    def write_stl(self, path_or_file, name: str = "toolpath") -> int:
        """Write the mesh as ASCII STL; returns the number of facets."""
        if self._mesh is None:
            raise ToolpathError("the toolpath has not been meshed; call mesh_surface() first")
        return write_stl(self._mesh, path_or_file, name=name)


def build_segment_solid(segment, tool: CylindricalTool, kernel,
                        debug_hook: DebugHook = noop_hook):
    """Swept solid of one segment with caps fused onto both ends."""
    solid, curve = sweep_segment(segment, tool, kernel, debug_hook)
    capped = cap_solid(solid, curve, tool, kernel)
    debug_hook([capped])
    return capped


def build_toolpath(path: Iterable, tool: CylindricalTool, kernel,
                   debug_hook: DebugHook = noop_hook) -> ToolpathSolid:
    """Sweep ``tool`` along every segment of ``path`` and fuse the results.

    ``debug_hook`` is called with the intermediate shapes (profiles,
    curves, capped solids, and finally the whole toolpath) so they can
    be inspected in a viewer.  The default, ``noop_hook``, ignores them.
    """
    def capped_solids():
        for index, segment in enumerate(path):
            logger.debug("segment %d: %s", index, segment.kind.value)
            yield build_segment_solid(segment, tool, kernel, debug_hook)

    shape = fuse_all(kernel, capped_solids())
    toolpath = ToolpathSolid(kernel, shape)
    if shape is None:
        logger.warning("toolpath has no segments")
    else:
        debug_hook([shape])
    return toolpath


__all__ = [
    "DEFAULT_ANGULAR_DEFLECTION",
    "DEFAULT_LINEAR_DEFLECTION",
    "DebugHook",
    "noop_hook",
    "MeshReport",
    "ToolpathSolid",
    "build_segment_solid",
    "build_toolpath",
]
