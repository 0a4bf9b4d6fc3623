## point and vector helpers for toolsweep
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

"""point and vector helpers for **toolsweep**

Points and vectors are lists of four numbers, ``[x, y, z, w]``.  A
point lies in the ``w = 1`` hyperplane; a free vector (a tangent, a
displacement, a normal) has ``w = 0``.  The operations below work on
the x, y, z components and ignore w, so a point can be used wherever
a vector is expected and vice versa.

The vertical axis is +z.  The tool's axis of rotation is always
parallel to it.

``epsilon`` is the tolerance for general comparisons.  ``TOLERANCE``
is the tighter tolerance used for kernel coincidence tests, for
"lies on a common circle" checks and for "lies on a horizontal plane"
checks.
"""

from math import sqrt

from toolsweep.errors import DegenerateDirectionError

## constants
epsilon = 0.000005
TOLERANCE = 1e-7

UP = [0.0, 0.0, 1.0, 0.0]


## utility function to determine if argument is a "real" python
## number, since booleans are considered ints
def isgoodnum(n):
    """ determine if an argument is actually a scalar number, and not boolean
    """
    return (not isinstance(n, bool)) and isinstance(n, (int, float))


def close(a, b, tol=epsilon):
    """ are two scalars the same within ``tol``
    """
    return abs(a - b) < tol


def vect(a=False, b=False, c=False, d=0.0):
    """Make a free vector (``w = 0``) from scalars or a sequence.

    Unspecified components are zero.
    """
    r = [0.0, 0.0, 0.0, d]
    if isgoodnum(a):
        r[0] = float(a)
        if isgoodnum(b):
            r[1] = float(b)
            if isgoodnum(c):
                r[2] = float(c)
    elif isinstance(a, (tuple, list)):
        if len(a) < 3:
            raise ValueError(f"expected three coordinates, got {a!r}")
        for i in range(3):
            if not isgoodnum(a[i]):
                raise ValueError(f"bad coordinate {a[i]!r} in {a!r}")
            r[i] = float(a[i])
    else:
        raise ValueError(f"cannot make a vector from {a!r}")
    return r


def point(x=False, y=False, z=False):
    """Make a point (``w = 1``) from scalars or a sequence."""
    return vect(x, y, z, 1.0)


def xyz(a):
    """ the x, y, z components of ``a`` as a tuple"""
    return (float(a[0]), float(a[1]), float(a[2]))


## R^3 -> R^3 functions: ignore w component
## ------------------------------------------------
def add(a, b):
    """ 3 vector, `a + b`, as a point"""
    return [a[0] + b[0], a[1] + b[1], a[2] + b[2], 1.0]


def sub(a, b):
    """ 3 vector, `a - b`, as a free vector"""
    return [a[0] - b[0], a[1] - b[1], a[2] - b[2], 0.0]


def scale3(a, c):
    """ 3 vector, vector ``a`` times scalar ``c``, `a * c`"""
    return [a[0] * c, a[1] * c, a[2] * c, 0.0]


def cross(a, b):
    """ 3 vector cross product `a x b`"""
    return [a[1] * b[2] - a[2] * b[1],
            a[2] * b[0] - a[0] * b[2],
            a[0] * b[1] - a[1] * b[0],
            0.0]


## R^3 -> R functions -- ignore w component
## ----------------------------------------
def dot(a, b):
    """ 3 vector ``a`` dot ``b`` """
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def mag(a):
    """ compute the magnitude of 3 vector ``a``"""
    return sqrt(a[0] * a[0] + a[1] * a[1] + a[2] * a[2])


def dist(a, b):
    """ euclidean distance between two points ``a`` and ``b``"""
    return mag(sub(a, b))


def vclose(a, b, tol=epsilon):
    """ are two points/vectors the same within ``tol``"""
    return dist(a, b) < tol


def unit(a):
    """ ``a`` scaled to unit length; a zero vector is a ``ValueError``"""
    m = mag(a)
    if m <= TOLERANCE:
        raise ValueError(f"cannot normalize zero-length vector {xyz(a)}")
    return scale3(a, 1.0 / m)


def iscollinear(p1, p2, p3, tol=TOLERANCE):
    """True if the three points lie on a common line.

    The test is relative to the size of the triangle they span: the
    distance of each point from the line through the other two is
    compared against ``tol`` times the longest side.  Coincident points
    count as collinear.
    """
    longest = max(dist(p1, p2), dist(p2, p3), dist(p3, p1))
    if longest <= tol:
        return True
    area2 = mag(cross(sub(p2, p1), sub(p3, p1)))
    # twice the area over the longest side is the smallest triangle height
    return area2 / longest <= tol * longest


def horizontal_perp(direction):
    """Unit horizontal vector perpendicular to ``direction``.

    This is ``direction`` projected onto the xy plane and rotated 90
    degrees counter-clockwise: ``(-d.y, d.x, 0) / |(d.x, d.y)|``.  A
    direction with no horizontal component (pointing straight up or
    down, or zero) has no such vector and raises
    ``DegenerateDirectionError``.
    """
    horizontal = sqrt(direction[0] ** 2 + direction[1] ** 2)
    length = mag(direction)
    if length == 0.0 or horizontal / length <= TOLERANCE:
        raise DegenerateDirectionError(
            f"direction {xyz(direction)} has no horizontal component; "
            "cannot orient a tool cross-section against it")
    return [-direction[1] / horizontal, direction[0] / horizontal, 0.0, 0.0]


def vstr(a):
    """ compact string form of a point or vector"""
    return "[{:g}, {:g}, {:g}]".format(*xyz(a))


__all__ = [
    "epsilon",
    "TOLERANCE",
    "UP",
    "isgoodnum",
    "close",
    "vect",
    "point",
    "xyz",
    "add",
    "sub",
    "scale3",
    "cross",
    "dot",
    "mag",
    "dist",
    "vclose",
    "unit",
    "iscollinear",
    "horizontal_perp",
    "vstr",
]
