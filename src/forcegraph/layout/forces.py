"""Force model: the barycenter, repulsive and attractive passes of one iteration.

The passes measure distances and magnitudes here; how a magnitude turns into
an accumulated force on a node is decided by the layout's integration
strategy (see ``integrations.py``).

Magnitudes come from ``f(d, k)`` where ``d`` is the current distance and
``k`` the ideal link length. Repulsion is either exhaustive (every pair) or
Barnes-Hut (nearby cells exactly, distant cells as one aggregate mass).
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from typing import TYPE_CHECKING

from forcegraph.ir.graph import Node
from forcegraph.layout.quadtree import Cell
from forcegraph.layout.types import Area, Barycenter
from forcegraph.layout.vector import Distance, distance_xy
from forcegraph.types import Approximation

if TYPE_CHECKING:
    from forcegraph.layout.engine import ReingoldFruchtermanLayout

logger = logging.getLogger(__name__)

LINK_LENGTH_EXPONENT: float = 0.4


def default_link_length(area: Area, node_count: int) -> float:
    """Ideal link length derived from the available area: ``(w * h / n) ** 0.4``."""
    if node_count <= 0 or area.width <= 0 or area.height <= 0:
        return 1.0
    return math.pow(area.width * area.height / node_count, LINK_LENGTH_EXPONENT)


def node_distance(a: Node, b: Node) -> Distance:
    """Offset ``a - b``; coincident nodes are split apart in a stable direction."""
    distance = distance_xy(a.x, a.y, b.x, b.y)
    if a.x == b.x and a.y == b.y and (a.graph_name, a.key) > (b.graph_name, b.key):
        return Distance(-distance.x, -distance.y, distance.r)
    return distance


def get_barycenter(nodes: list[Node]) -> Barycenter:
    """Mass-weighted centre of ``nodes``."""
    system_mass = sum(node.mass for node in nodes)
    if system_mass == 0:
        return Barycenter(0.0, 0.0, 0.0)
    cx = sum(node.x * node.mass for node in nodes)
    cy = sum(node.y * node.mass for node in nodes)
    return Barycenter(cx / system_mass, cy / system_mass, system_mass)


# ─── Passes ──────────────────────────────────────────────────────────────────


def barycenter_forces(layout: ReingoldFruchtermanLayout) -> None:
    layout.barycenter = get_barycenter(layout.nodes)
    layout.integration.barycenter(layout, layout.barycenter)


def repulsive_forces(layout: ReingoldFruchtermanLayout) -> None:
    if layout.approximation is Approximation.BarnesHut and layout.quad_tree is not None:
        for node in layout.nodes:
            if node.fixed:
                continue
            layout.quad_tree.visit(lambda cell, node=node: barnes_hut_approximation(layout, node, cell))
        return

    for node in layout.nodes:
        if node.fixed:
            continue
        for other in layout.nodes:
            if other is node:
                continue
            _repel(layout, node, other.mass, node_distance(node, other))


def barnes_hut_approximation(layout: ReingoldFruchtermanLayout, node: Node, cell: Cell) -> bool:
    """Apply the repulsion of ``cell`` on ``node``. Returns True to descend into children."""
    if cell.is_internal:
        if cell.contains(*layout.quad_tree.area.clamp(node.x, node.y)):
            return True
        distance = distance_xy(node.x, node.y, cell.cx, cell.cy)
        if cell.size / distance.r >= layout.config.theta:
            return True
        mass = cell.mass
    else:
        others = [other for other in cell.nodes if other is not node]
        if len(others) < len(cell.nodes) or len(others) == 1:
            # Leaf members (coincident at the depth limit) split apart pairwise.
            for other in others:
                _repel(layout, node, other.mass, node_distance(node, other))
            return False
        # A shared leaf seen from outside acts as one point.
        mass = sum(other.mass for other in others)
        distance = distance_xy(
            node.x,
            node.y,
            sum(o.x * o.mass for o in others) / mass,
            sum(o.y * o.mass for o in others) / mass,
        )
    _repel(layout, node, mass, distance)
    return False


def _repel(layout: ReingoldFruchtermanLayout, node: Node, mass: float, distance: Distance) -> None:
    force = layout.repulsive_force(distance.r, layout.k)
    layout.integration.repulsive(layout, node, force * mass, distance)


def attractive_forces(layout: ReingoldFruchtermanLayout) -> None:
    for link in layout.links:
        if link.is_loop:
            continue
        distance = node_distance(link.source, link.target)
        force = layout.attractive_force(distance.r, layout.k)
        layout.integration.attractive(layout, link, force, distance)


FORCES: dict[str, Callable[[ReingoldFruchtermanLayout], None]] = {
    "barycenter": barycenter_forces,
    "repulsive": repulsive_forces,
    "attractive": attractive_forces,
}

# Order in which the passes run every iteration.
DEFAULT_FORCES: tuple[str, ...] = ("barycenter", "repulsive", "attractive")
