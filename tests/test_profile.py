import pytest

from toolsweep.errors import DegenerateDirectionError, InvalidGeometryError
from toolsweep.geom import dot, point, sub, vclose, vect
from toolsweep.profile import build_profile, profile_corners


def test_profile_corners_facing_x():
    corners = profile_corners(vect(1, 0, 0), point(0, 0, 0), 1.0, 1.0)
    expected = [point(0, -0.5, 0), point(0, -0.5, 1), point(0, 0.5, 1), point(0, 0.5, 0)]
    assert all(vclose(c, e) for c, e in zip(corners, expected))


def test_profile_is_upright_and_faces_direction():
    direction = vect(1, 2, 0)
    base = point(3, -1, 2)
    corners = profile_corners(direction, base, 2.0, 0.5)
    # bottom edge centered on the base point
    mid = [(corners[0][k] + corners[3][k]) / 2 for k in range(3)]
    assert vclose(mid + [1.0], base)
    for c in corners:
        assert abs(dot(sub(c, base), direction)) < 1e-12
    assert corners[0][2] == corners[3][2] == 2.0
    assert corners[1][2] == corners[2][2] == 2.5


def test_profile_ignores_vertical_component_of_direction():
    flat = profile_corners(vect(1, 0, 0), point(0, 0, 0), 1.0, 1.0)
    tilted = profile_corners(vect(1, 0, 1), point(0, 0, 0), 1.0, 1.0)
    assert all(vclose(a, b) for a, b in zip(flat, tilted))


def test_profile_rejects_vertical_direction():
    with pytest.raises(DegenerateDirectionError):
        profile_corners(vect(0, 0, 1), point(0, 0, 0), 1.0, 1.0)


def test_profile_rejects_bad_size():
    with pytest.raises(InvalidGeometryError):
        profile_corners(vect(1, 0, 0), point(0, 0, 0), 0.0, 1.0)


def test_build_profile_uses_tool_size(box_kernel, tool):
    face = build_profile(box_kernel, vect(0, 1, 0), point(0, 0, 0), tool)
    assert box_kernel.ops() == ["planar_face"]
    xs = sorted({c[0] for c in face.corners})
    zs = sorted({c[2] for c in face.corners})
    assert xs == [-0.5, 0.5]
    assert zs == [0.0, 1.0]
