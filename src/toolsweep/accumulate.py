"""Union of per-segment solids into one toolpath solid.

The accumulator starts empty.  The first solid added becomes its
shape; each later solid is fused in with a boolean union, strictly in
the order given.  Operands are never reordered, even though the
kernel's union can be more robust in one order than the other.  A
failed union raises ``KernelError`` and leaves the accumulator
unusable for the run.

Solids that do not touch are fine: the union is then a single shape
holding several disjoint bodies.
"""

from __future__ import annotations

import logging
from functools import reduce
from typing import Any, Iterable, Optional

logger = logging.getLogger(__name__)


def fuse_into(kernel, acc: Optional[Any], shape) -> Any:
    """One fold step: ``shape`` if ``acc`` is empty, else ``acc ∪ shape``."""
    if acc is None:
        logger.debug("first solid starts the union")
        return shape
    logger.debug("fusing solid into the union")
    return kernel.fuse(acc, shape)


def fuse_all(kernel, shapes: Iterable, initial: Optional[Any] = None) -> Optional[Any]:
    """Fold ``shapes`` into a single union, left to right.

    Returns ``initial`` (``None`` by default) for an empty iterable.
    """
    return reduce(lambda acc, shape: fuse_into(kernel, acc, shape), shapes, initial)


__all__ = ["fuse_into", "fuse_all"]
