"""Path segment descriptions.

A tool path is an ordered list of segments.  Each segment is one of
four kinds, tagged by ``SegmentKind``:

``Line``
    ``start`` plus a ``displacement``; swept by translation.
``Arc``
    two endpoints and a point strictly between them on the arc.
``Circle``
    three points on a full circle.
``FittedCurve``
    points interpolated by a tangent-continuous curve, with tangent
    constraints at some of the points (always at the first).

Segments are immutable and validated when they are built.  Arcs,
circles and fitted curves must lie on a single horizontal plane: the
generalized sweep keeps the profile upright, which only traces the
correct volume while the path tangent stays horizontal.  Lines are
swept by translation and may point in any direction that has a
horizontal component.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Mapping, Sequence, Tuple

from toolsweep.errors import InvalidGeometryError, NonPlanarPathError
from toolsweep.geom import (
    TOLERANCE,
    add,
    close,
    dist,
    dot,
    iscollinear,
    mag,
    point,
    scale3,
    sub,
    unit,
    vect,
    vstr,
    xyz,
)

logger = logging.getLogger(__name__)


class SegmentKind(Enum):
    LINE = "line"
    ARC = "arc"
    CIRCLE = "circle"
    FITTED_CURVE = "fitted_curve"


def _as_point(value, what: str) -> list:
    try:
        return point(value)
    except ValueError as exc:
        raise InvalidGeometryError(f"{what}: {exc}") from exc


def _as_vector(value, what: str) -> list:
    try:
        return vect(value)
    except ValueError as exc:
        raise InvalidGeometryError(f"{what}: {exc}") from exc


def _require_horizontal_plane(points: Sequence[list], what: str) -> None:
    z0 = points[0][2]
    for i, p in enumerate(points):
        if abs(p[2] - z0) > TOLERANCE:
            raise NonPlanarPathError(
                f"{what}: point {i} {vstr(p)} is not on the horizontal plane "
                f"z={z0:g} shared by the other points")


@dataclass(frozen=True)
class Line:
    """Straight segment from ``start`` to ``start + displacement``."""

    start: list
    displacement: list
    kind: SegmentKind = field(default=SegmentKind.LINE, init=False)

    def __post_init__(self):
        object.__setattr__(self, "start", _as_point(self.start, "line start"))
        object.__setattr__(self, "displacement",
                           _as_vector(self.displacement, "line displacement"))
        if mag(self.displacement) <= TOLERANCE:
            raise InvalidGeometryError("line displacement must be non-zero")

    @property
    def end(self) -> list:
        return add(self.start, self.displacement)


@dataclass(frozen=True)
class Arc:
    """Arc of a circle from ``endpoint_a`` to ``endpoint_b``.

    ``interior_point`` is any point on the arc strictly between the two
    endpoints (not the circle's center); it selects which of the two
    arcs joining the endpoints is meant.  Arcs span at most half a
    circle: the interior point must see the chord at an angle of 90
    degrees or more.
    """

    endpoint_a: list
    endpoint_b: list
    interior_point: list
    kind: SegmentKind = field(default=SegmentKind.ARC, init=False)

    def __post_init__(self):
        for name in ("endpoint_a", "endpoint_b", "interior_point"):
            object.__setattr__(self, name,
                               _as_point(getattr(self, name), f"arc {name}"))
        pts = (self.endpoint_a, self.interior_point, self.endpoint_b)
        if iscollinear(*pts):
            raise InvalidGeometryError(
                "arc points {}, {}, {} are collinear".format(*map(vstr, pts)))
        # inscribed angle at the interior point is >= 90 degrees only on
        # the shorter of the two arcs
        to_a = sub(self.endpoint_a, self.interior_point)
        to_b = sub(self.endpoint_b, self.interior_point)
        if dot(to_a, to_b) > TOLERANCE * mag(to_a) * mag(to_b):
            raise InvalidGeometryError(
                f"arc through {vstr(self.interior_point)} spans more than half "
                "a circle; split it into shorter arcs")
        _require_horizontal_plane(pts, "arc")

    @classmethod
    def from_center(cls, endpoint_a, endpoint_b, center) -> "Arc":
        """Build the shorter arc joining two endpoints around ``center``.

        Both endpoints must be the same distance from ``center``, and
        they must not be diametrically opposite (two half circles would
        fit).
        """
        a = _as_point(endpoint_a, "arc endpoint_a")
        b = _as_point(endpoint_b, "arc endpoint_b")
        c = _as_point(center, "arc center")
        radius = dist(a, c)
        if radius <= TOLERANCE:
            raise InvalidGeometryError("arc endpoint coincides with the center")
        if not close(dist(b, c), radius, TOLERANCE):
            raise InvalidGeometryError(
                f"arc endpoints {vstr(a)} and {vstr(b)} are not equidistant "
                f"from center {vstr(c)}")
        bisector = add(sub(a, c), sub(b, c))
        if mag(bisector) <= TOLERANCE * radius:
            raise InvalidGeometryError(
                "arc endpoints are diametrically opposite; the arc is ambiguous")
        interior = add(c, scale3(unit(bisector), radius))
        return cls(a, b, interior)


@dataclass(frozen=True)
class Circle:
    """Full circle through three distinct, non-collinear points."""

    p1: list
    p2: list
    p3: list
    kind: SegmentKind = field(default=SegmentKind.CIRCLE, init=False)

    def __post_init__(self):
        for name in ("p1", "p2", "p3"):
            object.__setattr__(self, name,
                               _as_point(getattr(self, name), f"circle {name}"))
        pts = (self.p1, self.p2, self.p3)
        if iscollinear(*pts):
            raise InvalidGeometryError(
                "circle points {}, {}, {} are collinear".format(*map(vstr, pts)))
        _require_horizontal_plane(pts, "circle")

    @property
    def points(self) -> Tuple[list, list, list]:
        return (self.p1, self.p2, self.p3)


@dataclass(frozen=True)
class FittedCurve:
    """Tangent-continuous curve interpolating ``points``.

    ``tangents`` maps a point index to the tangent the curve must have
    at that point.  A tangent is required for the first point (it
    orients the tool cross-section); the others are optional.
    """

    points: Tuple[list, ...]
    tangents: Mapping[int, list]
    kind: SegmentKind = field(default=SegmentKind.FITTED_CURVE, init=False)

    def __post_init__(self):
        pts = tuple(_as_point(p, f"fitted curve point {i}")
                    for i, p in enumerate(self.points))
        if len(pts) < 2:
            raise InvalidGeometryError(
                f"a fitted curve needs at least 2 points, got {len(pts)}")
        for i in range(1, len(pts)):
            if dist(pts[i - 1], pts[i]) <= TOLERANCE:
                raise InvalidGeometryError(
                    f"fitted curve points {i - 1} and {i} coincide")

        tangents: Dict[int, list] = {}
        for key, value in dict(self.tangents).items():
            if isinstance(key, bool) or not isinstance(key, int):
                raise InvalidGeometryError(f"tangent index {key!r} is not an integer")
            if key < 0 or key >= len(pts):
                raise InvalidGeometryError(
                    f"tangent index {key} is out of range for {len(pts)} points")
            vec = _as_vector(value, f"tangent {key}")
            if mag(vec) <= TOLERANCE:
                raise InvalidGeometryError(f"tangent {key} is a zero vector")
            if abs(vec[2]) > TOLERANCE * mag(vec):
                raise NonPlanarPathError(
                    f"tangent {key} {vstr(vec)} is not horizontal")
            tangents[key] = vec
        if not tangents:
            raise InvalidGeometryError("a fitted curve needs at least one tangent")
        if len(tangents) > len(pts):
            raise InvalidGeometryError("more tangents than points")
        if 0 not in tangents:
            raise InvalidGeometryError("a tangent must be given for the first point")
        _require_horizontal_plane(pts, "fitted curve")

        object.__setattr__(self, "points", pts)
        object.__setattr__(self, "tangents", dict(sorted(tangents.items())))

    def tangent_flags(self) -> List[bool]:
        """One flag per point: is a tangent constrained there?"""
        return [i in self.tangents for i in range(len(self.points))]


PathSegment = Any  # Line | Arc | Circle | FittedCurve

SEGMENT_TYPES = {
    SegmentKind.LINE: Line,
    SegmentKind.ARC: Arc,
    SegmentKind.CIRCLE: Circle,
    SegmentKind.FITTED_CURVE: FittedCurve,
}


def issegment(x) -> bool:
    return isinstance(x, tuple(SEGMENT_TYPES.values()))


class CompoundPath:
    """Ordered collection of path segments.

    Segments are processed in the order they were added.  The order
    does not have to follow the path's connectivity.
    """

    def __init__(self, segments: Sequence = ()):
        self._segments: List = []
        for seg in segments:
            self.add(seg)

    def add(self, segment):
        if not issegment(segment):
            raise TypeError(f"not a path segment: {segment!r}")
        self._segments.append(segment)
        logger.debug("segment %d: %s", len(self._segments) - 1, segment.kind.value)
        return segment

    def line(self, start, displacement) -> Line:
        return self.add(Line(start, displacement))

    def arc(self, endpoint_a, endpoint_b, interior_point) -> Arc:
        return self.add(Arc(endpoint_a, endpoint_b, interior_point))

    def circle(self, p1, p2, p3) -> Circle:
        return self.add(Circle(p1, p2, p3))

    def fitted_curve(self, points, tangents) -> FittedCurve:
        return self.add(FittedCurve(points, tangents))

    def by_kind(self, kind: SegmentKind) -> List:
        return [seg for seg in self._segments if seg.kind is kind]

    @property
    def segments(self) -> Tuple:
        return tuple(self._segments)

    def __iter__(self) -> Iterator:
        return iter(self._segments)

    def __len__(self) -> int:
        return len(self._segments)

    def __repr__(self) -> str:
        counts = ", ".join(f"{k.value}={len(self.by_kind(k))}"
                           for k in SegmentKind if self.by_kind(k))
        return f"CompoundPath({counts or 'empty'})"


## conversion to and from plain mappings, for job files
## ----------------------------------------------------

def _coords(p) -> List[float]:
    return list(xyz(p))


def segment_to_dict(segment) -> Dict[str, Any]:
    kind = segment.kind
    if kind is SegmentKind.LINE:
        return {"type": kind.value, "start": _coords(segment.start),
                "displacement": _coords(segment.displacement)}
    if kind is SegmentKind.ARC:
        return {"type": kind.value,
                "endpoint_a": _coords(segment.endpoint_a),
                "endpoint_b": _coords(segment.endpoint_b),
                "interior_point": _coords(segment.interior_point)}
    if kind is SegmentKind.CIRCLE:
        return {"type": kind.value, "points": [_coords(p) for p in segment.points]}
    if kind is SegmentKind.FITTED_CURVE:
        return {"type": kind.value,
                "points": [_coords(p) for p in segment.points],
                "tangents": {i: _coords(t) for i, t in segment.tangents.items()}}
    raise TypeError(f"not a path segment: {segment!r}")


def _field(data: Mapping, name: str, kind: str):
    if name not in data:
        raise InvalidGeometryError(f"{kind} segment is missing '{name}'")
    return data[name]


def segment_from_dict(data: Mapping[str, Any]):
    """Build a segment from a mapping such as ``{"type": "line", ...}``.

    Arcs accept either ``interior_point`` or ``center``.
    """
    if not isinstance(data, Mapping):
        raise InvalidGeometryError(f"segment must be a mapping, got {data!r}")
    kind_name = data.get("type")
    try:
        kind = SegmentKind(kind_name)
    except ValueError:
        valid = ", ".join(k.value for k in SegmentKind)
        raise InvalidGeometryError(
            f"unknown segment type {kind_name!r} (expected one of: {valid})") from None

    if kind is SegmentKind.LINE:
        return Line(_field(data, "start", "line"), _field(data, "displacement", "line"))
    if kind is SegmentKind.ARC:
        a = _field(data, "endpoint_a", "arc")
        b = _field(data, "endpoint_b", "arc")
        if "center" in data and "interior_point" not in data:
            return Arc.from_center(a, b, data["center"])
        return Arc(a, b, _field(data, "interior_point", "arc"))
    if kind is SegmentKind.CIRCLE:
        pts = _field(data, "points", "circle")
        if not isinstance(pts, Sequence) or len(pts) != 3:
            raise InvalidGeometryError("circle segment needs exactly 3 points")
        return Circle(*pts)
    pts = _field(data, "points", "fitted_curve")
    tangents = _field(data, "tangents", "fitted_curve")
    if not isinstance(tangents, Mapping):
        raise InvalidGeometryError("fitted_curve tangents must map index -> vector")
    return FittedCurve(pts, {_tangent_index(k): v for k, v in tangents.items()})


def _tangent_index(key) -> int:
    # YAML and JSON may hand us string keys
    if isinstance(key, str) and key.strip().lstrip("-").isdigit():
        return int(key)
    return key


__all__ = [
    "SegmentKind",
    "Line",
    "Arc",
    "Circle",
    "FittedCurve",
    "PathSegment",
    "SEGMENT_TYPES",
    "CompoundPath",
    "issegment",
    "segment_to_dict",
    "segment_from_dict",
]
