"""ASCII STL export (and re-import) of toolpath triangulations."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Tuple

from toolsweep.kernel.base import FaceTriangulation, Vec3

_NUMBER = r'([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?|[-+]?(?:inf|nan))'
_NAME_RE = re.compile(r'^\S+$')


@dataclass(frozen=True)
class Facet:
    """One STL facet: its normal and three vertices."""

    normal: Vec3
    v0: Vec3
    v1: Vec3
    v2: Vec3


def facet_normal(n0: Vec3, n1: Vec3, n2: Vec3) -> Vec3:
    """Unit-length mean of three vertex normals.

    The mean is unweighted (not by area or angle).  It is scaled to
    unit length afterwards; if the three normals cancel out the result
    is ``(0, 0, 0)``.
    """
    mx = (n0[0] + n1[0] + n2[0]) / 3.0
    my = (n0[1] + n1[1] + n2[1]) / 3.0
    mz = (n0[2] + n1[2] + n2[2]) / 3.0
    length = math.sqrt(mx * mx + my * my + mz * mz)
    if length <= 1e-12:
        return (0.0, 0.0, 0.0)
    return (mx / length, my / length, mz / length)


def iter_facets(triangulations: Iterable[Optional[FaceTriangulation]]) -> Iterator[Facet]:
    """Facets of every triangulated face, face by face.

    ``None`` entries (faces without a triangulation) are skipped.
    """
    for face in triangulations:
        if face is None:
            continue
        verts = face.vertices
        norms = face.normals
        for i0, i1, i2 in face.triangles:
            yield Facet(normal=facet_normal(norms[i0], norms[i1], norms[i2]),
                        v0=verts[i0], v1=verts[i1], v2=verts[i2])


def _fmt(value: float) -> str:
    return "%.17g" % value


def _fmt3(v: Vec3) -> str:
    return f"{_fmt(v[0])} {_fmt(v[1])} {_fmt(v[2])}"


def write_stl(triangulations: Iterable[Optional[FaceTriangulation]], path_or_file,
              name: str = 'toolpath') -> int:
    """Write triangulated faces as ASCII STL.

    ``path_or_file`` can be a filesystem path, which is always
    truncated and rewritten, or an open text stream.  Returns the number
    of facets written.
    """
    if not isinstance(name, str) or not _NAME_RE.match(name):
        raise ValueError(f"solid name must be a non-empty word without whitespace, got {name!r}")

    close_when_done = False
    if hasattr(path_or_file, 'write'):
        stream = path_or_file
    else:
        stream = open(path_or_file, 'w', encoding='ascii')
        close_when_done = True

    count = 0
    try:
        print(f"solid {name}", file=stream)
        for facet in iter_facets(triangulations):
            print(f"  facet normal {_fmt3(facet.normal)}", file=stream)
            print("    outer loop", file=stream)
            print(f"      vertex {_fmt3(facet.v0)}", file=stream)
            print(f"      vertex {_fmt3(facet.v1)}", file=stream)
            print(f"      vertex {_fmt3(facet.v2)}", file=stream)
            print("    endloop", file=stream)
            print("  endfacet", file=stream)
            count += 1
        print(f"endsolid {name}", file=stream)
    finally:
        if close_when_done:
            stream.close()
    return count


_FACET_RE = re.compile(
    r'facet\s+normal\s+' + r'\s+'.join([_NUMBER] * 3) + r'\s+'
    r'outer\s+loop\s+'
    r'vertex\s+' + r'\s+'.join([_NUMBER] * 3) + r'\s+'
    r'vertex\s+' + r'\s+'.join([_NUMBER] * 3) + r'\s+'
    r'vertex\s+' + r'\s+'.join([_NUMBER] * 3) + r'\s+'
    r'endloop\s+endfacet',
    re.IGNORECASE,
)


def _parse_ascii_stl(text: str) -> Tuple[str, List[Facet]]:
    """Parse ASCII STL text into its solid name and facets."""
    lines = [ln.strip() for ln in text.strip().splitlines() if ln.strip()]
    if not lines:
        raise ValueError("empty STL text")
    head = lines[0].split()
    tail = lines[-1].split()
    if head[0] != 'solid' or len(head) != 2:
        raise ValueError(f"expected 'solid <name>', got {lines[0]!r}")
    if tail[0] != 'endsolid' or len(tail) != 2 or tail[1] != head[1]:
        raise ValueError(f"expected 'endsolid {head[1]}', got {lines[-1]!r}")

    body = "\n".join(lines[1:-1])
    facets = []
    end = 0
    for match in _FACET_RE.finditer(body):
        if body[end:match.start()].strip():
            raise ValueError(f"unexpected text in STL body: {body[end:match.start()].strip()[:40]!r}")
        values = [float(g) for g in match.groups()]
        facets.append(Facet(normal=tuple(values[0:3]), v0=tuple(values[3:6]),
                            v1=tuple(values[6:9]), v2=tuple(values[9:12])))
        end = match.end()
    if body[end:].strip():
        raise ValueError(f"unexpected text in STL body: {body[end:].strip()[:40]!r}")
    return head[1], facets


def read_stl(path_or_file) -> Tuple[str, List[Facet]]:
    """Read an ASCII STL file written by ``write_stl``.

    Returns ``(name, facets)``.  Malformed input raises ``ValueError``.
    """
    if hasattr(path_or_file, 'read'):
        text = path_or_file.read()
        if isinstance(text, bytes):
            text = text.decode('ascii')
    else:
        with open(path_or_file, 'r', encoding='ascii') as f:
            text = f.read()
    return _parse_ascii_stl(text)


__all__ = ['Facet', 'facet_normal', 'iter_facets', 'write_stl', 'read_stl']
