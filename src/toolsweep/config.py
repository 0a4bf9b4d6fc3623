"""Toolpath job files.

A job file is YAML describing one tool, an ordered list of path
segments, and optionally the mesh tolerances, the solid name and the
output file::

    schema_version: "1.0"
    name: pocket
    tool: {radius: 0.5, height: 1.0}
    mesh: {angular_deflection: 0.5, linear_deflection: 0.01}
    output: pocket.stl
    segments:
      - {type: line, start: [0, 0, 0], displacement: [2, 0, 0]}
      - {type: arc, endpoint_a: [2, 0, 0], endpoint_b: [3, 1, 0], center: [2, 1, 0]}
      - type: fitted_curve
        points: [[3, 1, 0], [3, 3, 0], [1, 4, 0]]
        tangents: {0: [0, 1, 0]}

Relative ``output`` paths are resolved against the job file's
directory.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from toolsweep.errors import ConfigError, InvalidGeometryError
from toolsweep.segments import CompoundPath, segment_from_dict
from toolsweep.tool import CylindricalTool
from toolsweep.toolpath import DEFAULT_ANGULAR_DEFLECTION, DEFAULT_LINEAR_DEFLECTION

SCHEMA_VERSION = "1.0"


@dataclass(frozen=True)
class ToolpathJob:
    name: str
    tool: CylindricalTool
    path: CompoundPath
    angular_deflection: float = DEFAULT_ANGULAR_DEFLECTION
    linear_deflection: float = DEFAULT_LINEAR_DEFLECTION
    output: Optional[Path] = None


def _number(data: Mapping, key: str, where: str, default: Optional[float] = None) -> float:
    if key not in data:
        if default is None:
            raise ConfigError("missing required value", f"{where}.{key}")
        return default
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"expected a number, got {value!r}", f"{where}.{key}")
    return float(value)


def _section(data: Mapping, key: str, required: bool = True) -> Dict[str, Any]:
    value = data.get(key)
    if value is None:
        if required:
            raise ConfigError("missing required section", key)
        return {}
    if not isinstance(value, Mapping):
        raise ConfigError(f"expected a mapping, got {type(value).__name__}", key)
    return dict(value)


def job_from_dict(data: Mapping[str, Any], base_dir: Optional[Path] = None) -> ToolpathJob:
    """Validate a job mapping and build its tool and path."""
    if not isinstance(data, Mapping):
        raise ConfigError("expected a mapping at the root of the job")

    version = str(data.get("schema_version", SCHEMA_VERSION))
    if not version.startswith("1."):
        raise ConfigError(f"unsupported schema version '{version}', expected 1.x",
                          "schema_version")

    name = data.get("name", "toolpath")
    if not isinstance(name, str) or not name or any(c.isspace() for c in name):
        raise ConfigError(f"must be a single word, got {name!r}", "name")

    tool_data = _section(data, "tool")
    try:
        tool = CylindricalTool(radius=_number(tool_data, "radius", "tool"),
                               height=_number(tool_data, "height", "tool"))
    except InvalidGeometryError as exc:
        raise ConfigError(str(exc), "tool") from exc

    mesh = _section(data, "mesh", required=False)
    angular = _number(mesh, "angular_deflection", "mesh", DEFAULT_ANGULAR_DEFLECTION)
    linear = _number(mesh, "linear_deflection", "mesh", DEFAULT_LINEAR_DEFLECTION)
    if angular <= 0 or linear <= 0:
        raise ConfigError("deflections must be positive", "mesh")

    segments = data.get("segments")
    if not isinstance(segments, list) or not segments:
        raise ConfigError("expected a non-empty list of segments", "segments")
    path = CompoundPath()
    for index, entry in enumerate(segments):
        try:
            path.add(segment_from_dict(entry))
        except InvalidGeometryError as exc:
            raise type(exc)(f"segments[{index}]: {exc}") from exc

    output = data.get("output")
    if output is not None:
        if not isinstance(output, str) or not output:
            raise ConfigError(f"expected a file name, got {output!r}", "output")
        output = Path(output).expanduser()
        if base_dir is not None and not output.is_absolute():
            output = Path(base_dir) / output

    return ToolpathJob(name=name, tool=tool, path=path, angular_deflection=angular,
                       linear_deflection=linear, output=output)


def load_job(path) -> ToolpathJob:
    """Read and validate a YAML job file."""
    path = Path(path)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML in {path}: {exc}") from exc
    if data is None:
        raise ConfigError(f"job file {path} is empty")
    return job_from_dict(data, base_dir=path.parent)


__all__ = ["SCHEMA_VERSION", "ToolpathJob", "job_from_dict", "load_job"]
