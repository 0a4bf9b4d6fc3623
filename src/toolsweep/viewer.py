"""Interactive debug viewer for intermediate toolpath shapes.

``build_toolpath`` accepts a ``debug_hook``: a callable receiving a list
of kernel shapes and curves.  ``ViewerHook`` tessellates them and opens
a blocking pyglet window; the pipeline resumes when the window is
closed.  It is meant for looking at geometry during development, never
for checking correctness.

Controls: left drag orbits, right drag pans, scroll zooms, ``L`` cycles
solid / solid+mesh / mesh, ``Esc`` closes the window.
"""

from __future__ import annotations

import logging
import math
from typing import Any, List, Sequence, Tuple

import pyglet
from pyglet import graphics
from pyglet.window import key
from pyglet.gl import (
    GL_AMBIENT_AND_DIFFUSE,
    GL_COLOR_BUFFER_BIT,
    GL_COLOR_MATERIAL,
    GL_DEPTH_BUFFER_BIT,
    GL_DEPTH_TEST,
    GL_DIFFUSE,
    GL_FILL,
    GL_FRONT_AND_BACK,
    GL_LIGHT0,
    GL_LIGHTING,
    GL_LINE,
    GL_LINE_STRIP,
    GL_MODELVIEW,
    GL_POLYGON_OFFSET_LINE,
    GL_POSITION,
    GL_PROJECTION,
    GL_TRIANGLES,
    GLfloat,
    glClear,
    glClearColor,
    glColor4f,
    glColorMaterial,
    glDisable,
    glEnable,
    glLightfv,
    glLineWidth,
    glLoadIdentity,
    glMatrixMode,
    glPolygonMode,
    glPolygonOffset,
    glViewport,
    gluLookAt,
    gluPerspective,
)

from toolsweep.kernel.base import CurveRepresentation

logger = logging.getLogger(__name__)

Vec3 = Tuple[float, float, float]


def _collect(kernel, items: Sequence[Any], angular: float, linear: float):
    triangles: List[Tuple[Vec3, Vec3]] = []
    polylines: List[List[Vec3]] = []
    for item in items:
        if isinstance(item, CurveRepresentation):
            polylines.append([tuple(p[:3]) for p in item.sample(64)])
            continue
        for face in kernel.triangulate(item, angular, linear):
            if face is None:
                continue
            for tri in face.triangles:
                for idx in tri:
                    triangles.append((face.vertices[idx], face.normals[idx]))
    return triangles, polylines


def _bbox(triangles, polylines) -> Tuple[float, float, float, float, float, float]:
    pts = [v for v, _ in triangles] + [p for line in polylines for p in line]
    if not pts:
        return (-1.0, -1.0, -1.0, 1.0, 1.0, 1.0)
    xs, ys, zs = zip(*pts)
    return (min(xs), min(ys), min(zs), max(xs), max(ys), max(zs))


class ShapeWindow(pyglet.window.Window):
    """Single perspective view of tessellated shapes and sampled curves."""

    def __init__(self, triangles, polylines, caption: str = "toolsweep debug view"):
        super().__init__(width=1000, height=750, caption=caption, resizable=True)
        self.bbox = _bbox(triangles, polylines)
        span = max(self.bbox[3] - self.bbox[0], self.bbox[4] - self.bbox[1],
                   self.bbox[5] - self.bbox[2])
        self.distance = span * 2.0 or 10.0
        self.azimuth = -60.0
        self.elevation = 30.0
        self.pan_x = 0.0
        self.pan_y = 0.0
        self.render_mode = 0  # 0 = solid, 1 = solid+mesh, 2 = mesh only
        self._triangles = None
        self._polylines = []
        if triangles:
            coords: List[float] = []
            normals: List[float] = []
            for vertex, normal in triangles:
                coords.extend(vertex)
                normals.extend(normal)
            self._triangles = graphics.vertex_list(
                len(triangles), ('v3f/static', coords), ('n3f/static', normals))
        for line in polylines:
            coords = [c for p in line for c in p]
            self._polylines.append(graphics.vertex_list(len(line), ('v3f/static', coords)))

        glEnable(GL_DEPTH_TEST)
        glEnable(GL_LIGHTING)
        glEnable(GL_LIGHT0)
        glEnable(GL_COLOR_MATERIAL)
        glColorMaterial(GL_FRONT_AND_BACK, GL_AMBIENT_AND_DIFFUSE)
        glLightfv(GL_LIGHT0, GL_POSITION, (GLfloat * 4)(0.6, 0.8, 1.2, 0.0))
        glLightfv(GL_LIGHT0, GL_DIFFUSE, (GLfloat * 4)(0.8, 0.8, 0.8, 1.0))
        glClearColor(0.05, 0.05, 0.07, 1.0)

    def _apply_camera(self, width: int, height: int) -> None:
        glMatrixMode(GL_PROJECTION)
        glLoadIdentity()
        gluPerspective(45.0, max(width / max(height, 1), 0.1), 0.01, 10000.0)
        glMatrixMode(GL_MODELVIEW)
        glLoadIdentity()
        cx = (self.bbox[0] + self.bbox[3]) / 2.0 + self.pan_x
        cy = (self.bbox[1] + self.bbox[4]) / 2.0 + self.pan_y
        cz = (self.bbox[2] + self.bbox[5]) / 2.0
        theta = math.radians(self.azimuth)
        phi = math.radians(self.elevation)
        eye_x = cx + self.distance * math.cos(phi) * math.cos(theta)
        eye_y = cy + self.distance * math.cos(phi) * math.sin(theta)
        eye_z = cz + self.distance * math.sin(phi)
        # z is up in toolpath space
        gluLookAt(eye_x, eye_y, eye_z, cx, cy, cz, 0, 0, 1)

    def on_draw(self):
        self.clear()
        fb_width, fb_height = self.get_framebuffer_size()
        glViewport(0, 0, fb_width, fb_height)
        glClear(GL_COLOR_BUFFER_BIT | GL_DEPTH_BUFFER_BIT)
        self._apply_camera(fb_width, fb_height)

        if self._triangles is not None and self.render_mode in (0, 1):
            glEnable(GL_LIGHTING)
            glPolygonMode(GL_FRONT_AND_BACK, GL_FILL)
            glColor4f(0.6, 0.85, 1.0, 1.0)
            self._triangles.draw(GL_TRIANGLES)
        if self._triangles is not None and self.render_mode in (1, 2):
            glDisable(GL_LIGHTING)
            glPolygonMode(GL_FRONT_AND_BACK, GL_LINE)
            glEnable(GL_POLYGON_OFFSET_LINE)
            glPolygonOffset(-1.0, 1.0)
            glColor4f(1.0, 1.0, 1.0, 1.0)
            self._triangles.draw(GL_TRIANGLES)
            glPolygonMode(GL_FRONT_AND_BACK, GL_FILL)
            glDisable(GL_POLYGON_OFFSET_LINE)

        glDisable(GL_LIGHTING)
        glLineWidth(2.0)
        glColor4f(1.0, 0.55, 0.2, 1.0)
        for vlist in self._polylines:
            vlist.draw(GL_LINE_STRIP)
        glLineWidth(1.0)

    def on_mouse_drag(self, x, y, dx, dy, buttons, modifiers):
        if buttons & pyglet.window.mouse.LEFT:
            self.azimuth -= dx * 0.5
            self.elevation = max(-89.0, min(89.0, self.elevation - dy * 0.5))
        elif buttons & pyglet.window.mouse.RIGHT:
            scale = self.distance * 0.002
            self.pan_x -= dx * scale
            self.pan_y -= dy * scale

    def on_mouse_scroll(self, x, y, scroll_x, scroll_y):
        if scroll_y > 0:
            self.distance = max(0.01, self.distance * 0.9)
        elif scroll_y < 0:
            self.distance = self.distance * 1.1

    def on_key_press(self, symbol, modifiers):
        if symbol == key.ESCAPE:
            self.close()
        elif symbol == key.L:
            self.render_mode = (self.render_mode + 1) % 3

    def on_close(self):
        if self._triangles is not None:
            self._triangles.delete()
            self._triangles = None
        for vlist in self._polylines:
            vlist.delete()
        self._polylines = []
        super().on_close()
        pyglet.app.exit()


class ViewerHook:
    """Debug hook that shows each batch of shapes in a pyglet window.

    Tessellation uses coarse tolerances; it replaces any mesh the kernel
    had stored on the shapes.
    """

    def __init__(self, kernel, angular_deflection: float = 0.5,
                 linear_deflection: float = 0.05):
        self.kernel = kernel
        self.angular_deflection = angular_deflection
        self.linear_deflection = linear_deflection

    def __call__(self, shapes: Sequence[Any]) -> None:
        triangles, polylines = _collect(self.kernel, shapes, self.angular_deflection,
                                        self.linear_deflection)
        if not triangles and not polylines:
            logger.info("nothing to display")
            return
        logger.info("showing %d triangles and %d curves; close the window to continue",
                    len(triangles) // 3, len(polylines))
        ShapeWindow(triangles, polylines)
        pyglet.app.run()


__all__ = ["ShapeWindow", "ViewerHook"]
