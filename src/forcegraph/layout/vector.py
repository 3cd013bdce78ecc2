"""2D points and distances shared by the force model, the quadtree and the integrators."""

from __future__ import annotations

import math
from dataclasses import dataclass

# Smallest separation used when two points coincide.
MIN_DISTANCE: float = 0.01


@dataclass(frozen=True)
class Vector:
    """An immutable 2D point or offset."""

    x: float = 0.0
    y: float = 0.0


@dataclass(frozen=True)
class Distance:
    """Offset from point B to point A, with the Euclidean length precomputed."""

    x: float
    y: float
    r: float


def vector_length(x: float, y: float) -> float:
    return math.sqrt(x * x + y * y)


def distance_xy(ax: float, ay: float, bx: float, by: float) -> Distance:
    """Return the offset ``a - b``.

    Coincident points get a ``MIN_DISTANCE`` offset along a fixed diagonal so
    that the direction is defined and no force divides by zero.
    """
    dx = ax - bx
    dy = ay - by
    r = vector_length(dx, dy)
    if r < MIN_DISTANCE:
        if r == 0:
            dx = dy = MIN_DISTANCE / math.sqrt(2)
        else:
            scale = MIN_DISTANCE / r
            dx *= scale
            dy *= scale
        r = MIN_DISTANCE
    return Distance(dx, dy, r)
