"""Geometric kernels available to the toolpath pipeline."""

from __future__ import annotations

import os

from .base import CurveRepresentation, FaceTriangulation, GeometricKernel
from .occ import OccKernel, occ_available, require_occ

KERNEL_ENV = "TOOLSWEEP_KERNEL"
DEFAULT_KERNEL = "occ"

KERNEL_REGISTRY = {'occ': OccKernel}


def register_kernel(name: str, factory) -> None:
    """Make ``factory`` (a zero-argument callable) available as ``name``."""
    KERNEL_REGISTRY[name] = factory


def get_kernel(name: str | None = None) -> GeometricKernel:
    """Instantiate the kernel registered as ``name``.

    Without a name, ``$TOOLSWEEP_KERNEL`` is consulted, then the
    Open CASCADE kernel is used.
    """
    if name is None:
        name = os.environ.get(KERNEL_ENV, DEFAULT_KERNEL)
    factory = KERNEL_REGISTRY.get(name)
    if factory is None:
        known = ", ".join(sorted(KERNEL_REGISTRY))
        raise ValueError(f"unknown kernel '{name}' (available: {known})")
    return factory()


__all__ = [
    'CurveRepresentation',
    'FaceTriangulation',
    'GeometricKernel',
    'OccKernel',
    'occ_available',
    'require_occ',
    'KERNEL_ENV',
    'KERNEL_REGISTRY',
    'register_kernel',
    'get_kernel',
]
