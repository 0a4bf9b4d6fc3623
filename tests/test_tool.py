import dataclasses
import math

import pytest

from toolsweep.errors import InvalidGeometryError
from toolsweep.tool import CylindricalTool


def test_tool_dimensions():
    tool = CylindricalTool(radius=0.5, height=2)
    assert tool.radius == 0.5
    assert tool.height == 2.0
    assert isinstance(tool.height, float)
    assert tool.width == 1.0


@pytest.mark.parametrize("radius,height", [
    (0, 1),
    (-1, 1),
    (1, 0),
    (1, -0.1),
    (math.inf, 1),
    (1, math.nan),
    (True, 1),
    ("1", 1),
])
def test_tool_rejects_bad_dimensions(radius, height):
    with pytest.raises(InvalidGeometryError):
        CylindricalTool(radius=radius, height=height)


def test_tool_is_immutable():
    tool = CylindricalTool(1.0, 1.0)
    with pytest.raises(dataclasses.FrozenInstanceError):
        tool.radius = 2.0
