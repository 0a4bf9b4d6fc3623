import io
import logging
import math

import pytest

from toolsweep.errors import KernelError, ToolpathError
from toolsweep.geom import point
from toolsweep.segments import CompoundPath
from toolsweep.toolpath import (
    MeshReport,
    ToolpathSolid,
    build_segment_solid,
    build_toolpath,
    noop_hook,
)

R2 = math.sqrt(0.5)


def _single_line():
    path = CompoundPath()
    path.line([0, 0, 0], [2, 0, 0])
    return path


def test_build_segment_solid_adds_caps(box_kernel, tool):
    segment = _single_line().segments[0]
    solid = build_segment_solid(segment, tool, box_kernel)
    assert len(solid.boxes) == 3
    assert box_kernel.ops().count("cylinder") == 2


def test_build_toolpath_single_line(box_kernel, tool):
    toolpath = build_toolpath(_single_line(), tool, box_kernel)
    assert not toolpath.is_empty
    assert not toolpath.is_meshed
    assert toolpath.bounding_box() == [point(-0.5, -0.5, 0), point(2.5, 0.5, 1)]
    assert toolpath.body_count() == 1


def test_disjoint_segments_give_two_bodies(box_kernel, tool):
    path = CompoundPath()
    path.line([0, 0, 0], [1, 0, 0])
    path.line([10, 0, 0], [1, 0, 0])
    toolpath = build_toolpath(path, tool, box_kernel)
    assert toolpath.body_count() == 2


def test_segments_fuse_in_declaration_order(box_kernel, tool):
    path = CompoundPath()
    path.line([0, 0, 0], [1, 0, 0])
    path.line([5, 0, 0], [0, 1, 0])
    path.line([9, 0, 0], [1, 1, 0])
    build_toolpath(path, tool, box_kernel)
    extrudes = [i for i, op in enumerate(box_kernel.ops()) if op == "extrude"]
    fuses = [i for i, op in enumerate(box_kernel.ops()) if op == "fuse"]
    # two cap fuses per segment, then one accumulation fuse after segments 2 and 3
    assert len(fuses) == 3 * 2 + 2
    assert extrudes[1] > fuses[1]
    assert extrudes[2] > fuses[4]


def test_empty_path(box_kernel, tool, caplog):
    with caplog.at_level(logging.WARNING, logger="toolsweep.toolpath"):
        toolpath = build_toolpath(CompoundPath(), tool, box_kernel)
    assert toolpath.is_empty
    assert toolpath.body_count() == 0
    assert "no segments" in caplog.text
    with pytest.raises(ToolpathError):
        toolpath.mesh_surface()
    with pytest.raises(ToolpathError):
        toolpath.bounding_box()


def test_debug_hook_sees_every_stage(box_kernel, tool):
    seen = []
    build_toolpath(_single_line(), tool, box_kernel, debug_hook=seen.append)
    assert [len(shapes) for shapes in seen] == [1, 1, 1]
    assert len(seen[1][0].boxes) == 3


def test_default_debug_hook_ignores_shapes(box_kernel, tool):
    assert noop_hook([]) is None
    toolpath = build_toolpath(_single_line(), tool, box_kernel, debug_hook=noop_hook)
    assert toolpath.body_count() == 1


def test_fuse_failure_stops_the_build(box_kernel, tool):
    class FailingFuse(type(box_kernel)):
        def fuse(self, a, b):
            self._record("fuse", a, b)
            raise KernelError("fuse", "boolean union reported an error")

    kernel = FailingFuse()
    with pytest.raises(KernelError, match="kernel operation 'fuse' failed"):
        build_toolpath(_single_line(), tool, kernel)
    assert kernel.ops().count("fuse") == 1


def test_sweep_failure_returns_no_toolpath(box_kernel, tool):
    class FailingSweep(type(box_kernel)):
        def sweep(self, face, curve):
            self._record("sweep")
            raise KernelError("sweep", "pipe construction reported an error")

    kernel = FailingSweep()
    path = CompoundPath()
    path.arc([1, 0, 0], [0, 1, 0], [R2, R2, 0])
    path.line([0, 1, 0], [-1, 0, 0])
    result = None
    with pytest.raises(KernelError) as excinfo:
        result = build_toolpath(path, tool, kernel)
    assert result is None
    assert excinfo.value.operation == "sweep"
    # the failing segment is the first one, so nothing was capped or fused
    assert "cylinder" not in kernel.ops()
    assert "fuse" not in kernel.ops()
    assert "extrude" not in kernel.ops()


def test_mesh_surface_reports_triangles(box_kernel, tool):
    toolpath = build_toolpath(_single_line(), tool, box_kernel)
    report = toolpath.mesh_surface(0.3, 0.02)
    assert report == MeshReport(face_count=18, meshed_faces=18, skipped_faces=0,
                                triangle_count=36)
    assert toolpath.is_meshed
    assert toolpath.triangle_count == 36
    assert box_kernel.calls[-1] == ("triangulate", 0.3, 0.02)


def test_mesh_surface_is_repeatable(box_kernel, tool):
    toolpath = build_toolpath(_single_line(), tool, box_kernel)
    first = toolpath.mesh_surface()
    out1 = io.StringIO()
    toolpath.write_stl(out1)
    second = toolpath.mesh_surface()
    out2 = io.StringIO()
    toolpath.write_stl(out2)
    assert first == second
    assert out1.getvalue() == out2.getvalue()


def test_mesh_surface_skips_failed_faces(box_kernel, tool, caplog):
    box_kernel.untriangulatable.add(((-0.5, -0.5, 0.0), (0.5, 0.5, 1.0)))
    toolpath = build_toolpath(_single_line(), tool, box_kernel)
    with caplog.at_level(logging.WARNING, logger="toolsweep.toolpath"):
        report = toolpath.mesh_surface()
    assert report.skipped_faces == 6
    assert report.meshed_faces == 12
    assert report.triangle_count == 24
    assert sum(1 for face in toolpath.mesh if face is None) == 6
    assert caplog.text.count("could not be triangulated") == 6

    out = io.StringIO()
    assert toolpath.write_stl(out) == 24


@pytest.mark.parametrize("angular,linear", [(0, 0.01), (0.5, 0), (-1, 0.01), (0.5, -0.1)])
def test_mesh_surface_rejects_bad_deflection(box_kernel, tool, angular, linear):
    toolpath = build_toolpath(_single_line(), tool, box_kernel)
    with pytest.raises(ValueError):
        toolpath.mesh_surface(angular, linear)


def test_export_requires_mesh(box_kernel, tool):
    toolpath = build_toolpath(_single_line(), tool, box_kernel)
    with pytest.raises(ToolpathError, match="mesh_surface"):
        toolpath.write_stl(io.StringIO())


def test_add_invalidates_mesh(box_kernel, tool):
    toolpath = ToolpathSolid(box_kernel)
    toolpath.add(box_kernel.cylinder(point(0, 0, 0), 1.0, 1.0))
    toolpath.mesh_surface()
    assert toolpath.triangle_count == 12
    toolpath.add(box_kernel.cylinder(point(5, 0, 0), 1.0, 1.0))
    assert not toolpath.is_meshed
    assert toolpath.triangle_count == 0
    assert toolpath.body_count() == 2


def test_export_completeness(box_kernel, tool, tmp_path):
    path = CompoundPath()
    path.line([0, 0, 0], [1, 1, 0])
    toolpath = build_toolpath(path, tool, box_kernel)
    report = toolpath.mesh_surface()
    target = tmp_path / "diag.stl"
    assert toolpath.write_stl(target, name="diag") == report.triangle_count

    lines = [ln.strip() for ln in target.read_text().splitlines()]
    assert lines[0] == "solid diag"
    assert lines[-1] == "endsolid diag"
    assert sum(1 for ln in lines if ln.startswith("facet normal")) == report.triangle_count
    vertices = [ln.split()[1:] for ln in lines if ln.startswith("vertex")]
    assert len(vertices) == 3 * report.triangle_count
    assert all(len(v) == 3 for v in vertices)
    for coords in vertices:
        float(coords[0]), float(coords[1]), float(coords[2])
