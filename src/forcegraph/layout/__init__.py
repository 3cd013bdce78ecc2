"""Force-directed layout engine, registry and public API."""

from __future__ import annotations

from forcegraph.layout.engine import ReingoldFruchtermanLayout, SimulationBusyError
from forcegraph.layout.forces import (
    DEFAULT_FORCES,
    FORCES,
    default_link_length,
    get_barycenter,
    node_distance,
)
from forcegraph.layout.integrations import INTEGRATIONS, EulerIntegration, VerletIntegration, get_integration
from forcegraph.layout.placement import PLACEMENTS, circle_positions, init_positions, random_positions
from forcegraph.layout.quadtree import MAX_DEPTH, Cell, QuadTree
from forcegraph.layout.registry import LAYOUT_TYPES, LayoutRegistry
from forcegraph.layout.types import Area, Barycenter
from forcegraph.layout.vector import MIN_DISTANCE, Distance, Vector, distance_xy, vector_length

__all__ = [
    "DEFAULT_FORCES",
    "FORCES",
    "INTEGRATIONS",
    "LAYOUT_TYPES",
    "MAX_DEPTH",
    "MIN_DISTANCE",
    "PLACEMENTS",
    "Area",
    "Barycenter",
    "Cell",
    "Distance",
    "EulerIntegration",
    "LayoutRegistry",
    "QuadTree",
    "ReingoldFruchtermanLayout",
    "SimulationBusyError",
    "Vector",
    "VerletIntegration",
    "circle_positions",
    "default_link_length",
    "distance_xy",
    "get_barycenter",
    "get_integration",
    "init_positions",
    "node_distance",
    "random_positions",
    "vector_length",
]
