"""Layout types shared across the engine, the quadtree and the integrators."""

from __future__ import annotations

from dataclasses import dataclass

from forcegraph.layout.vector import Vector


@dataclass(frozen=True)
class Area:
    """The rectangle nodes are laid out in."""

    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @property
    def left(self) -> float:
        return self.x

    @property
    def top(self) -> float:
        return self.y

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> Vector:
        return Vector(self.x + self.width / 2, self.y + self.height / 2)

    def contains(self, x: float, y: float) -> bool:
        return self.left <= x <= self.right and self.top <= y <= self.bottom

    def clamp(self, x: float, y: float) -> tuple[float, float]:
        """Pull a point back inside the rectangle."""
        return (
            max(min(x, self.right), self.left),
            max(min(y, self.bottom), self.top),
        )

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.x, self.y, self.width, self.height)


@dataclass(frozen=True)
class Barycenter:
    """Mass-weighted centre of the whole system."""

    x: float
    y: float
    mass: float
