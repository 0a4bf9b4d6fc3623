"""Command-line entry point: turn a YAML job file into an ASCII STL."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Optional, Sequence

from .config import ToolpathJob, load_job
from .errors import ToolpathError
from .kernel import get_kernel
from .toolpath import build_toolpath, noop_hook

LOG_LEVEL_ENV = "TOOLSWEEP_LOG_LEVEL"

logger = logging.getLogger(__name__)


def _log_level(verbose: int, quiet: bool) -> int:
    if quiet:
        return logging.ERROR
    if verbose >= 2:
        return logging.DEBUG
    if verbose == 1:
        return logging.INFO
    name = os.environ.get(LOG_LEVEL_ENV, "WARNING").upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.WARNING


def _output_path(job: ToolpathJob, override: Optional[str]) -> Path:
    if override:
        return Path(override)
    if job.output is not None:
        return job.output
    return Path(f"{job.name}.stl")


def run_job(job: ToolpathJob, output: Path, kernel, *, name: Optional[str] = None,
            angular: Optional[float] = None, linear: Optional[float] = None,
            debug_hook=noop_hook):
    """Build, mesh and export one job; returns the ``MeshReport``."""
    toolpath = build_toolpath(job.path, job.tool, kernel, debug_hook=debug_hook)
    report = toolpath.mesh_surface(
        angular if angular is not None else job.angular_deflection,
        linear if linear is not None else job.linear_deflection,
    )
    toolpath.write_stl(output, name=name or job.name)
    return report


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="toolsweep",
        description="Sweep a cylindrical tool along a path and export the volume as ASCII STL.")
    parser.add_argument("job", help="Path to the toolpath job YAML")
    parser.add_argument("-o", "--output", help="STL file to write (default: from the job, or NAME.stl)")
    parser.add_argument("--name", help="Solid name written to the STL (default: from the job)")
    parser.add_argument("--angular", type=float, help="Angular deflection for meshing, in radians")
    parser.add_argument("--linear", type=float, help="Linear deflection for meshing, in model units")
    parser.add_argument("--kernel", help="Geometric kernel to use (default: $TOOLSWEEP_KERNEL or occ)")
    parser.add_argument("--show", action="store_true",
                        help="Open a viewer window on every intermediate shape")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="count", default=0,
                           help="More logging (-vv for debug output)")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only log errors")

    args = parser.parse_args(argv)
    logging.basicConfig(level=_log_level(args.verbose, args.quiet),
                        format="%(levelname)s %(name)s: %(message)s")

    try:
        job = load_job(args.job)
        kernel = get_kernel(args.kernel)
        debug_hook = noop_hook
        if args.show:
            from .viewer import ViewerHook
            debug_hook = ViewerHook(kernel)
        output = _output_path(job, args.output)
        report = run_job(job, output, kernel, name=args.name, angular=args.angular,
                         linear=args.linear, debug_hook=debug_hook)
    except (ToolpathError, OSError, ValueError, RuntimeError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    print(f"STL written to {output}")
    summary = (f"{report.triangle_count} triangles from "
               f"{report.meshed_faces}/{report.face_count} faces")
    if report.skipped_faces:
        summary += f" ({report.skipped_faces} skipped)"
    print(summary)
    return 0


__all__ = ["LOG_LEVEL_ENV", "run_job", "main"]


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
