"""Shared fixtures: a geometric kernel made of axis-aligned boxes.

``BoxKernel`` implements ``GeometricKernel`` without any CAD library.
Solids are tuples of boxes, curves are analytic lines, arcs and
polylines, and a union keeps every box that is not already inside the
other operand.  Volumes are only as exact as a box can be, which is
enough to check how the pipeline wires the kernel together.
"""

import math

import pytest

from toolsweep.geom import point, vect
from toolsweep.kernel import KERNEL_REGISTRY
from toolsweep.kernel.base import CurveRepresentation, FaceTriangulation, GeometricKernel
from toolsweep.tool import CylindricalTool


class LineCurve(CurveRepresentation):
    def __init__(self, start, end):
        self.start = start
        self.end = end

    def first_parameter(self):
        return 0.0

    def last_parameter(self):
        return 1.0

    def point_at(self, u):
        return point([self.start[i] + u * (self.end[i] - self.start[i]) for i in range(3)])

    def tangent_at(self, u):
        return vect([self.end[i] - self.start[i] for i in range(3)])


class ArcCurve(CurveRepresentation):
    """Horizontal arc, ``theta = theta0 + sense * u`` for u in [0, sweep]."""

    def __init__(self, center, radius, theta0, sweep, sense):
        self.center = center
        self.radius = radius
        self.theta0 = theta0
        self.sweep = sweep
        self.sense = sense

    def first_parameter(self):
        return 0.0

    def last_parameter(self):
        return self.sweep

    def point_at(self, u):
        theta = self.theta0 + self.sense * u
        return point(self.center[0] + self.radius * math.cos(theta),
                     self.center[1] + self.radius * math.sin(theta),
                     self.center[2])

    def tangent_at(self, u):
        theta = self.theta0 + self.sense * u
        return vect(-self.sense * self.radius * math.sin(theta),
                    self.sense * self.radius * math.cos(theta), 0.0)


class PolylineCurve(CurveRepresentation):
    """Stands in for an interpolated curve: straight pieces, given tangents."""

    def __init__(self, points, tangents):
        self.points = [point(p) for p in points]
        self.tangents = dict(tangents)

    def first_parameter(self):
        return 0.0

    def last_parameter(self):
        return float(len(self.points) - 1)

    def _piece(self, u):
        return min(int(u), len(self.points) - 2)

    def point_at(self, u):
        i = self._piece(u)
        t = u - i
        a, b = self.points[i], self.points[i + 1]
        return point([a[k] + t * (b[k] - a[k]) for k in range(3)])

    def tangent_at(self, u):
        if float(u).is_integer() and int(u) in self.tangents:
            return vect(self.tangents[int(u)])
        i = self._piece(u)
        a, b = self.points[i], self.points[i + 1]
        return vect([b[k] - a[k] for k in range(3)])


def _circle_center(p1, p2, p3):
    ax, ay = p1[0], p1[1]
    bx, by = p2[0], p2[1]
    cx, cy = p3[0], p3[1]
    d = 2.0 * (ax * (by - cy) + bx * (cy - ay) + cx * (ay - by))
    ux = ((ax * ax + ay * ay) * (by - cy) + (bx * bx + by * by) * (cy - ay)
          + (cx * cx + cy * cy) * (ay - by)) / d
    uy = ((ax * ax + ay * ay) * (cx - bx) + (bx * bx + by * by) * (ax - cx)
          + (cx * cx + cy * cy) * (bx - ax)) / d
    return point(ux, uy, p1[2])


class FaceShape:
    def __init__(self, corners):
        self.corners = tuple(tuple(c[:3]) for c in corners)


class BoxSolid:
    def __init__(self, boxes):
        self.boxes = tuple(boxes)

    def __repr__(self):
        return f"BoxSolid({len(self.boxes)} boxes)"


def _bounds(points):
    xs, ys, zs = zip(*[p[:3] for p in points])
    return ((min(xs), min(ys), min(zs)), (max(xs), max(ys), max(zs)))


def _contains(outer, inner):
    return all(outer[0][k] <= inner[0][k] and inner[1][k] <= outer[1][k] for k in range(3))


def _touch(a, b):
    return all(a[0][k] <= b[1][k] and b[0][k] <= a[1][k] for k in range(3))


def _quad(corners, normal):
    v0, v1, v2 = corners[0], corners[1], corners[2]
    e1 = [v1[k] - v0[k] for k in range(3)]
    e2 = [v2[k] - v0[k] for k in range(3)]
    n = (e1[1] * e2[2] - e1[2] * e2[1],
         e1[2] * e2[0] - e1[0] * e2[2],
         e1[0] * e2[1] - e1[1] * e2[0])
    if sum(n[k] * normal[k] for k in range(3)) >= 0:
        triangles = ((0, 1, 2), (0, 2, 3))
    else:
        triangles = ((0, 2, 1), (0, 3, 2))
    return FaceTriangulation(tuple(corners), (tuple(normal),) * 4, triangles)


def box_faces(box):
    """The six outward-facing quads of ``box``."""
    faces = []
    for axis in range(3):
        i, j = [k for k in range(3) if k != axis]
        for side, sign in ((0, -1.0), (1, 1.0)):
            corners = []
            for a, b in ((0, 0), (1, 0), (1, 1), (0, 1)):
                c = [0.0, 0.0, 0.0]
                c[axis] = box[side][axis]
                c[i] = box[a][i]
                c[j] = box[b][j]
                corners.append(tuple(c))
            normal = [0.0, 0.0, 0.0]
            normal[axis] = sign
            faces.append(_quad(corners, normal))
    return faces


class BoxKernel(GeometricKernel):
    name = "box"

    def __init__(self):
        self.calls = []
        self.untriangulatable = set()

    def _record(self, op, *args):
        self.calls.append((op,) + args)

    def segment_curve(self, start, end):
        self._record("segment_curve")
        return LineCurve(start, end)

    def arc_through(self, start, interior, end):
        self._record("arc_through")
        c = _circle_center(start, interior, end)
        r = math.hypot(start[0] - c[0], start[1] - c[1])
        t0 = math.atan2(start[1] - c[1], start[0] - c[0])
        t1 = math.atan2(end[1] - c[1], end[0] - c[0])
        turn = ((interior[0] - start[0]) * (end[1] - interior[1])
                - (interior[1] - start[1]) * (end[0] - interior[0]))
        sense = 1.0 if turn > 0 else -1.0
        sweep = (sense * (t1 - t0)) % (2.0 * math.pi)
        return ArcCurve(c, r, t0, sweep, sense)

    def circle_through(self, p1, p2, p3):
        self._record("circle_through")
        c = _circle_center(p1, p2, p3)
        r = math.hypot(p1[0] - c[0], p1[1] - c[1])
        return ArcCurve(c, r, math.atan2(p1[1] - c[1], p1[0] - c[0]), 2.0 * math.pi, 1.0)

    def interpolate(self, points, tangents):
        self._record("interpolate")
        return PolylineCurve(points, tangents)

    def planar_face(self, corners):
        self._record("planar_face")
        return FaceShape(corners)

    def extrude(self, face, vector):
        self._record("extrude")
        moved = [[c[k] + vector[k] for k in range(3)] for c in face.corners]
        return BoxSolid([_bounds(list(face.corners) + moved)])

    def sweep(self, face, curve):
        self._record("sweep")
        u0, u1 = curve.first_parameter(), curve.last_parameter()
        origin = curve.point_at(u0)
        pts = []
        for n in range(33):
            p = curve.point_at(u0 + (u1 - u0) * n / 32.0)
            pts.extend([c[k] + p[k] - origin[k] for k in range(3)] for c in face.corners)
        return BoxSolid([_bounds(pts)])

    def cylinder(self, base, radius, height):
        self._record("cylinder", tuple(base[:3]))
        x, y, z = base[0], base[1], base[2]
        return BoxSolid([((x - radius, y - radius, z), (x + radius, y + radius, z + height))])

    def fuse(self, a, b):
        self._record("fuse", a, b)
        kept = list(a.boxes)
        for box in b.boxes:
            if not any(_contains(other, box) for other in kept):
                kept.append(box)
        return BoxSolid(kept)

    def triangulate(self, shape, angular_deflection, linear_deflection):
        self._record("triangulate", angular_deflection, linear_deflection)
        faces = []
        for box in shape.boxes:
            if box in self.untriangulatable:
                faces.extend([None] * 6)
            else:
                faces.extend(box_faces(box))
        return faces

    def bounding_box(self, shape):
        lo, hi = _bounds([c for box in shape.boxes for c in box])
        return [point(lo), point(hi)]

    def solid_count(self, shape):
        boxes = list(shape.boxes)
        seen = set()
        count = 0
        for start in range(len(boxes)):
            if start in seen:
                continue
            count += 1
            stack = [start]
            seen.add(start)
            while stack:
                i = stack.pop()
                for j in range(len(boxes)):
                    if j not in seen and _touch(boxes[i], boxes[j]):
                        seen.add(j)
                        stack.append(j)
        return count

    def ops(self):
        return [call[0] for call in self.calls]


@pytest.fixture
def box_kernel():
    return BoxKernel()


@pytest.fixture
def registered_box_kernel(monkeypatch):
    """Make ``BoxKernel`` available to ``get_kernel('box')``."""
    monkeypatch.setitem(KERNEL_REGISTRY, "box", BoxKernel)
    return BoxKernel


@pytest.fixture
def tool():
    return CylindricalTool(radius=0.5, height=1.0)
