## Open CASCADE kernel for toolsweep
## Copyright (c) 2025 toolsweep contributors

# Permission is hereby granted, free of charge, to any person
# obtaining a copy of this software and associated documentation files
# (the "Software"), to deal in the Software without restriction,
# including without limitation the rights to use, copy, modify, merge,
# publish, distribute, sublicense, and/or sell copies of the Software,
# and to permit persons to whom the Software is furnished to do so,
# subject to the following conditions:
#
# The above copyright notice and this permission notice shall be
# included in all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND,
# EXPRESS OR IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF
# MERCHANTABILITY, FITNESS FOR A PARTICULAR PURPOSE AND
# NONINFRINGEMENT. IN NO EVENT SHALL THE AUTHORS OR COPYRIGHT HOLDERS
# BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER LIABILITY, WHETHER IN AN
# ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM, OUT OF OR IN
# CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

"""
Geometric kernel backed by `pythonocc-core` (Open CASCADE).

Importing this module on systems without pythonocc-core should not
explode; instead, we raise a clear runtime error the first time the
kernel is instantiated so users know to activate the conda
environment that provides it.

Shapes returned by ``OccKernel`` are plain ``TopoDS_Shape`` objects.
Curves are wrapped in ``OccCurve`` so the pipeline can evaluate them
without touching OCC types.
"""

from __future__ import annotations

import logging
import math
from typing import Any, List, Mapping, Optional, Sequence

try:  # pragma: no cover - exercised indirectly in environments with OCC
    from OCC.Core.gp import gp_Ax2, gp_Dir, gp_Pnt, gp_Vec
    from OCC.Core.GC import GC_MakeArcOfCircle, GC_MakeCircle, GC_MakeSegment
    from OCC.Core.GeomAPI import GeomAPI_Interpolate
    from OCC.Core.TColgp import TColgp_Array1OfVec, TColgp_HArray1OfPnt
    from OCC.Core.TColStd import TColStd_HArray1OfBoolean
    from OCC.Core.BRepBuilderAPI import (
        BRepBuilderAPI_MakeEdge,
        BRepBuilderAPI_MakeFace,
        BRepBuilderAPI_MakePolygon,
        BRepBuilderAPI_MakeWire,
    )
    from OCC.Core.BRepPrimAPI import BRepPrimAPI_MakeCylinder, BRepPrimAPI_MakePrism
    from OCC.Core.BRepOffsetAPI import BRepOffsetAPI_MakePipe
    from OCC.Core.BRepAlgoAPI import BRepAlgoAPI_Fuse
    from OCC.Core.BRepMesh import BRepMesh_IncrementalMesh
    from OCC.Core.BRepTools import breptools
    from OCC.Core.BRepLib import BRepLib_ToolTriangulatedShape
    from OCC.Core.BRep import BRep_Tool
    from OCC.Core.TopExp import TopExp_Explorer
    from OCC.Core.TopAbs import TopAbs_FACE, TopAbs_REVERSED, TopAbs_SOLID
    from OCC.Core.TopLoc import TopLoc_Location
    from OCC.Core.TopoDS import topods
    from OCC.Core.Bnd import Bnd_Box
    from OCC.Core.BRepBndLib import brepbndlib

    _OCC_IMPORT_ERROR: Optional[Exception] = None
    _HAVE_OCC = True
except ImportError as exc:  # pragma: no cover - handled during runtime detection
    _OCC_IMPORT_ERROR = exc
    _HAVE_OCC = False

from toolsweep.errors import KernelError
from toolsweep.geom import TOLERANCE, point, vect, xyz
from toolsweep.kernel.base import CurveRepresentation, FaceTriangulation, GeometricKernel

logger = logging.getLogger(__name__)


def occ_available() -> bool:
    """Return True when pythonocc-core imports succeeded."""
    return _HAVE_OCC


def require_occ() -> None:
    """
    Raise a descriptive error if pythonocc-core is not installed/activated.
    """
    if _HAVE_OCC:
        return
    raise RuntimeError(
        "pythonocc-core is not available. Install it from conda-forge "
        "(conda install -c conda-forge pythonocc-core) and activate that "
        "environment before building toolpath solids."
    ) from _OCC_IMPORT_ERROR


def _pnt(p) -> "gp_Pnt":
    return gp_Pnt(float(p[0]), float(p[1]), float(p[2]))


def _vec(v) -> "gp_Vec":
    return gp_Vec(float(v[0]), float(v[1]), float(v[2]))


class OccCurve(CurveRepresentation):
    """A ``Geom_Curve`` (segment, trimmed circle, circle or B-spline)."""

    def __init__(self, geom, label: str):
        self._geom = geom
        self.label = label

    @property
    def geom(self):
        return self._geom

    def first_parameter(self) -> float:
        return self._geom.FirstParameter()

    def last_parameter(self) -> float:
        return self._geom.LastParameter()

    def point_at(self, u: float) -> list:
        p = self._geom.Value(u)
        return point(p.X(), p.Y(), p.Z())

    def tangent_at(self, u: float) -> list:
        d = self._geom.DN(u, 1)
        return vect(d.X(), d.Y(), d.Z())

    def is_closed(self) -> bool:
        return self._geom.IsClosed()

    def __repr__(self) -> str:
        return f"OccCurve({self.label}, [{self.first_parameter():g}, {self.last_parameter():g}])"


class OccKernel(GeometricKernel):
    """``GeometricKernel`` over Open CASCADE via pythonocc-core."""

    name = "occ"

    def __init__(self, tolerance: float = TOLERANCE):
        require_occ()
        self.tolerance = tolerance

    ## curves

    def segment_curve(self, start, end) -> OccCurve:
        maker = GC_MakeSegment(_pnt(start), _pnt(end))
        if not maker.IsDone():
            raise KernelError("segment", f"{xyz(start)} -> {xyz(end)}")
        return OccCurve(maker.Value(), "segment")

    def arc_through(self, start, interior, end) -> OccCurve:
        maker = GC_MakeArcOfCircle(_pnt(start), _pnt(interior), _pnt(end))
        if not maker.IsDone():
            raise KernelError("arc of circle",
                              f"no arc through {xyz(start)}, {xyz(interior)}, {xyz(end)}")
        return OccCurve(maker.Value(), "arc")

    def circle_through(self, p1, p2, p3) -> OccCurve:
        maker = GC_MakeCircle(_pnt(p1), _pnt(p2), _pnt(p3))
        if not maker.IsDone():
            raise KernelError("circle",
                              f"no circle through {xyz(p1)}, {xyz(p2)}, {xyz(p3)}")
        return OccCurve(maker.Value(), "circle")

    def interpolate(self, points: Sequence, tangents: Mapping[int, Any]) -> OccCurve:
        count = len(points)
        pnts = TColgp_HArray1OfPnt(1, count)
        for i, p in enumerate(points):
            pnts.SetValue(i + 1, _pnt(p))

        vecs = TColgp_Array1OfVec(1, count)
        flags = TColStd_HArray1OfBoolean(1, count)
        flags.Init(False)
        for i in range(count):
            vecs.SetValue(i + 1, gp_Vec(0.0, 0.0, 0.0))
        for index, tangent in tangents.items():
            vecs.SetValue(index + 1, _vec(tangent))
            flags.SetValue(index + 1, True)

        interpolation = GeomAPI_Interpolate(pnts, False, self.tolerance)
        interpolation.Load(vecs, flags)
        interpolation.Perform()
        if not interpolation.IsDone():
            raise KernelError("interpolate", f"{count} points, {len(tangents)} tangents")
        curve = interpolation.Curve()
        if not curve.IsCN(1):
            raise KernelError("interpolate", "result is not tangent-continuous")
        return OccCurve(curve, "interpolated")

    ## faces and solids

    def planar_face(self, corners: Sequence) -> Any:
        if len(corners) != 4:
            raise ValueError("planar_face expects four corners")
        polygon = BRepBuilderAPI_MakePolygon(*[_pnt(c) for c in corners], True)
        if not polygon.IsDone():
            raise KernelError("polygon", "profile corners do not form a closed wire")
        face = BRepBuilderAPI_MakeFace(polygon.Wire(), True)
        if not face.IsDone():
            raise KernelError("planar face", "profile wire does not bound a planar face")
        return face.Face()

    def extrude(self, face, vector) -> Any:
        prism = BRepPrimAPI_MakePrism(face, _vec(vector))
        prism.Build()
        if not prism.IsDone():
            raise KernelError("extrude", f"by {xyz(vector)}")
        return prism.Shape()

    def sweep(self, face, curve: CurveRepresentation) -> Any:
        edge = BRepBuilderAPI_MakeEdge(curve.geom)
        if not edge.IsDone():
            raise KernelError("sweep", f"cannot make an edge from {curve!r}")
        wire = BRepBuilderAPI_MakeWire(edge.Edge())
        if not wire.IsDone():
            raise KernelError("sweep", f"cannot make a wire from {curve!r}")
        pipe = BRepOffsetAPI_MakePipe(wire.Wire(), face)
        pipe.Build()
        if not pipe.IsDone():
            raise KernelError("sweep", f"pipe along {curve!r} failed")
        return pipe.Shape()

    def cylinder(self, base, radius: float, height: float) -> Any:
        axis = gp_Ax2(_pnt(base), gp_Dir(0.0, 0.0, 1.0))
        maker = BRepPrimAPI_MakeCylinder(axis, radius, height)
        maker.Build()
        if not maker.IsDone():
            raise KernelError("cylinder", f"r={radius:g} h={height:g} at {xyz(base)}")
        return maker.Shape()

    def fuse(self, a, b) -> Any:
        fuse = BRepAlgoAPI_Fuse(a, b)
        if fuse.HasErrors() or not fuse.IsDone():
            raise KernelError("fuse", "boolean union reported an error")
        return fuse.Shape()

    ## meshing and queries

    def triangulate(self, shape, angular_deflection: float,
                    linear_deflection: float) -> List[Optional[FaceTriangulation]]:
        breptools.Clean(shape, True)
        mesher = BRepMesh_IncrementalMesh(shape, linear_deflection, False,
                                          angular_deflection, True)
        if not mesher.IsDone():
            raise KernelError("triangulate", "incremental mesher did not finish")

        faces: List[Optional[FaceTriangulation]] = []
        explorer = TopExp_Explorer(shape, TopAbs_FACE)
        while explorer.More():
            face = topods.Face(explorer.Current())
            faces.append(self._face_triangulation(face))
            explorer.Next()
        return faces

    def _face_triangulation(self, face) -> Optional[FaceTriangulation]:
        loc = TopLoc_Location()
        triangulation = BRep_Tool.Triangulation(face, loc)
        if triangulation is None or triangulation.NbTriangles() == 0:
            return None

        BRepLib_ToolTriangulatedShape.ComputeNormals(face, triangulation)

        trsf = loc.Transformation()
        reverse = face.Orientation() == TopAbs_REVERSED
        count = triangulation.NbNodes()

        vertices = []
        for i in range(1, count + 1):
            pnt = triangulation.Node(i).Transformed(trsf)
            vertices.append((pnt.X(), pnt.Y(), pnt.Z()))

        triangles = []
        for i in range(1, triangulation.NbTriangles() + 1):
            n1, n2, n3 = triangulation.Triangle(i).Get()
            if reverse:
                n2, n3 = n3, n2
            triangles.append((n1 - 1, n2 - 1, n3 - 1))

        if triangulation.HasNormals():
            normals = []
            for i in range(1, count + 1):
                n = triangulation.Normal(i)
                vec = gp_Vec(n.X(), n.Y(), n.Z())
                vec.Transform(trsf)
                if reverse:
                    vec.Reverse()
                normals.append((vec.X(), vec.Y(), vec.Z()))
        else:
            normals = _normals_from_triangles(vertices, triangles)

        return FaceTriangulation(tuple(vertices), tuple(normals), tuple(triangles))

    def bounding_box(self, shape) -> List[list]:
        box = Bnd_Box()
        brepbndlib.AddOptimal(shape, box, False, False)
        if box.IsVoid():
            raise KernelError("bounding box", "shape is empty")
        xmin, ymin, zmin, xmax, ymax, zmax = box.Get()
        return [point(xmin, ymin, zmin), point(xmax, ymax, zmax)]

    def solid_count(self, shape) -> int:
        count = 0
        explorer = TopExp_Explorer(shape, TopAbs_SOLID)
        while explorer.More():
            count += 1
            explorer.Next()
        return count


def _normals_from_triangles(vertices, triangles):
    """Area-weighted vertex normals, for faces the kernel left without any."""
    accum = [[0.0, 0.0, 0.0] for _ in vertices]
    for n1, n2, n3 in triangles:
        v0, v1, v2 = vertices[n1], vertices[n2], vertices[n3]
        nx = ((v1[1] - v0[1]) * (v2[2] - v0[2]) -
              (v1[2] - v0[2]) * (v2[1] - v0[1]))
        ny = ((v1[2] - v0[2]) * (v2[0] - v0[0]) -
              (v1[0] - v0[0]) * (v2[2] - v0[2]))
        nz = ((v1[0] - v0[0]) * (v2[1] - v0[1]) -
              (v1[1] - v0[1]) * (v2[0] - v0[0]))
        for idx in (n1, n2, n3):
            accum[idx][0] += nx
            accum[idx][1] += ny
            accum[idx][2] += nz

    normals = []
    for vec in accum:
        length = math.sqrt(vec[0] ** 2 + vec[1] ** 2 + vec[2] ** 2)
        if length <= 1e-12:
            normals.append((0.0, 0.0, 1.0))
        else:
            normals.append((vec[0] / length, vec[1] / length, vec[2] / length))
    return normals


__all__ = ["OccKernel", "OccCurve", "occ_available", "require_occ"]
