"""Abstract geometric kernel used by the toolpath pipeline.

The pipeline only orchestrates: every curve, face and solid it handles
is an opaque object owned by a kernel.  ``GeometricKernel`` lists the
operations the pipeline needs; ``toolsweep.kernel.occ.OccKernel``
implements them with Open CASCADE, and the test suite implements them
with axis-aligned boxes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Sequence, Tuple

Vec3 = Tuple[float, float, float]


@dataclass(frozen=True)
class FaceTriangulation:
    """Triangle mesh of one boundary face.

    ``normals`` holds one surface normal per vertex.  ``triangles``
    holds 0-based vertex index triples wound counter-clockwise when
    seen from outside the solid.
    """

    vertices: Tuple[Vec3, ...]
    normals: Tuple[Vec3, ...]
    triangles: Tuple[Tuple[int, int, int], ...]

    def __post_init__(self):
        if len(self.normals) != len(self.vertices):
            raise ValueError("a face triangulation needs one normal per vertex")
        count = len(self.vertices)
        for tri in self.triangles:
            if len(tri) != 3 or any(i < 0 or i >= count for i in tri):
                raise ValueError(f"bad triangle {tri!r} for {count} vertices")

    @property
    def triangle_count(self) -> int:
        return len(self.triangles)


class CurveRepresentation(ABC):
    """Parametric curve resolved from a path segment."""

    @abstractmethod
    def first_parameter(self) -> float:
        ...

    @abstractmethod
    def last_parameter(self) -> float:
        ...

    @abstractmethod
    def point_at(self, u: float) -> list:
        """Point on the curve at parameter ``u``."""

    @abstractmethod
    def tangent_at(self, u: float) -> list:
        """First derivative of the curve at ``u`` (not normalized)."""

    def start_point(self) -> list:
        return self.point_at(self.first_parameter())

    def end_point(self) -> list:
        return self.point_at(self.last_parameter())

    def sample(self, count: int = 32) -> List[list]:
        """``count`` points spread evenly over the parameter range."""
        if count < 2:
            raise ValueError("need at least two samples")
        u0 = self.first_parameter()
        u1 = self.last_parameter()
        step = (u1 - u0) / (count - 1)
        return [self.point_at(u0 + i * step) for i in range(count)]


class GeometricKernel(ABC):
    """Curve, face and solid operations consumed by the pipeline.

    Builders raise ``toolsweep.errors.KernelError`` when the underlying
    kernel reports failure.  Points and vectors are passed in the
    ``toolsweep.geom`` list form.
    """

    name = "abstract"

    ## curves

    @abstractmethod
    def segment_curve(self, start, end) -> CurveRepresentation:
        """Straight curve from ``start`` to ``end``."""

    @abstractmethod
    def arc_through(self, start, interior, end) -> CurveRepresentation:
        """Arc of circle from ``start`` through ``interior`` to ``end``."""

    @abstractmethod
    def circle_through(self, p1, p2, p3) -> CurveRepresentation:
        """Full circle through three points."""

    @abstractmethod
    def interpolate(self, points: Sequence, tangents: Mapping[int, Any]) -> CurveRepresentation:
        """Tangent-continuous curve through ``points``.

        ``tangents`` maps point indices to tangent constraints.
        """

    ## faces and solids

    @abstractmethod
    def planar_face(self, corners: Sequence) -> Any:
        """Planar face bounded by the closed polygon ``corners``."""

    @abstractmethod
    def extrude(self, face, vector) -> Any:
        """Prism swept by translating ``face`` through ``vector``."""

    @abstractmethod
    def sweep(self, face, curve: CurveRepresentation) -> Any:
        """Solid swept by moving ``face`` along ``curve``."""

    @abstractmethod
    def cylinder(self, base, radius: float, height: float) -> Any:
        """Upright cylinder whose bottom face is centered on ``base``."""

    @abstractmethod
    def fuse(self, a, b) -> Any:
        """Boolean union of two solids."""

    ## meshing and queries

    @abstractmethod
    def triangulate(self, shape, angular_deflection: float,
                    linear_deflection: float) -> List[Optional[FaceTriangulation]]:
        """Discard any previous mesh on ``shape`` and triangulate it.

        Returns one entry per boundary face, in face order; ``None``
        marks a face the kernel could not triangulate.
        """

    @abstractmethod
    def bounding_box(self, shape) -> List[list]:
        """``[min_point, max_point]`` of ``shape``."""

    @abstractmethod
    def solid_count(self, shape) -> int:
        """Number of disjoint solid bodies in ``shape``."""


__all__ = ["FaceTriangulation", "CurveRepresentation", "GeometricKernel", "Vec3"]
