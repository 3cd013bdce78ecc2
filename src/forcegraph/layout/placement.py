"""Initial placement strategies.

Only nodes without a position are placed, so re-running a layout keeps the
positions it already found.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from typing import TYPE_CHECKING

from forcegraph.ir.graph import Node
from forcegraph.types import InitialPositions

if TYPE_CHECKING:
    from forcegraph.layout.engine import ReingoldFruchtermanLayout

logger = logging.getLogger(__name__)


def circle_order(layout: ReingoldFruchtermanLayout) -> list[Node]:
    """Nodes ordered so that linked nodes sit next to each other on the circle.

    Each root (a node without incoming links) is followed by everything
    reachable from it, depth first; unreachable nodes come last.
    """
    ordered: list[Node] = []
    visited: set[int] = set()

    for graph in layout.graphs:
        for root in graph.root_nodes():
            if id(root) in visited:
                continue
            visited.add(id(root))
            ordered.append(root)
            stack = [iter(graph.successors(root.key))]
            while stack:
                succ = next(stack[-1], None)
                if succ is None:
                    stack.pop()
                    continue
                if id(succ) in visited:
                    continue
                visited.add(id(succ))
                ordered.append(succ)
                stack.append(iter(graph.successors(succ.key)))

    ordered.extend(node for node in layout.nodes if id(node) not in visited)
    return ordered


def circle_positions(layout: ReingoldFruchtermanLayout) -> None:
    """Spread nodes evenly on a circle around the centre of the area.

    The circle is inscribed in the area unless ``initial_position_radius`` is set.
    """
    nodes = circle_order(layout)
    angle = 2 * math.pi / (len(nodes) + 1)
    area = layout.area
    radius = layout.config.initial_position_radius
    if radius is None:
        radius = min(area.width, area.height) / 2
    center = area.center
    for index, node in enumerate(nodes):
        if not node.placed:
            node.place(
                *area.clamp(
                    center.x + radius * math.cos(index * angle),
                    center.y + radius * math.sin(index * angle),
                )
            )


def random_positions(layout: ReingoldFruchtermanLayout) -> None:
    """Scatter nodes uniformly over the area using the layout's seeded generator."""
    area = layout.area
    for node in layout.nodes:
        if not node.placed:
            node.place(
                area.x + area.width * layout.rng.random(),
                area.y + area.height * layout.rng.random(),
            )


PLACEMENTS: dict[InitialPositions, Callable[[ReingoldFruchtermanLayout], None]] = {
    InitialPositions.Circle: circle_positions,
    InitialPositions.Random: random_positions,
}


def init_positions(layout: ReingoldFruchtermanLayout) -> None:
    """Run the configured placement; a custom callable may move any node."""
    strategy = layout.config.initial_positions
    if isinstance(strategy, InitialPositions):
        PLACEMENTS.get(strategy, circle_positions)(layout)
    else:
        strategy(layout)
    place_missing(layout)


def place_missing(layout: ReingoldFruchtermanLayout) -> None:
    """Give every node that still has no position one from the built-in strategy."""
    if all(node.placed for node in layout.nodes):
        return
    strategy = layout.config.initial_positions
    if not isinstance(strategy, InitialPositions):
        strategy = InitialPositions.default()
    logger.debug("Placing %d new node(s)", sum(1 for node in layout.nodes if not node.placed))
    PLACEMENTS.get(strategy, circle_positions)(layout)
