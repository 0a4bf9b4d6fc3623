"""
Exceptions raised by the toolpath pipeline.

Every failure in the pipeline is fatal for the run. The classes below
only separate *where* a failure came from so callers can report it:

- ``InvalidGeometryError``: rejected input (tool dimensions, segment
  descriptions), raised at construction time.
- ``DegenerateDirectionError``: a cross-section was requested for a
  direction with no horizontal component.
- ``NonPlanarPathError``: curve input that does not lie on a horizontal
  plane.
- ``KernelError``: the geometric kernel reported a failed operation.
- ``ConfigError``: a malformed job description.
"""


class ToolpathError(Exception):
    """Base class for every error raised by toolsweep."""


class InvalidGeometryError(ToolpathError, ValueError):
    """Input geometry that cannot describe a tool or a path segment."""


class DegenerateDirectionError(InvalidGeometryError):
    """A profile direction whose horizontal projection vanishes."""


class NonPlanarPathError(InvalidGeometryError):
    """Curve points or tangents that leave the horizontal plane."""


class KernelError(ToolpathError, RuntimeError):
    """A geometric kernel operation reported failure."""

    def __init__(self, operation: str, detail: str = ""):
        self.operation = operation
        self.detail = detail
        message = f"kernel operation '{operation}' failed"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class ConfigError(ToolpathError, ValueError):
    """A job description that is missing fields or has bad values."""

    def __init__(self, message: str, field: str = ""):
        self.field = field
        if field:
            message = f"{field}: {message}"
        super().__init__(message)


__all__ = [
    "ToolpathError",
    "InvalidGeometryError",
    "DegenerateDirectionError",
    "NonPlanarPathError",
    "KernelError",
    "ConfigError",
]
