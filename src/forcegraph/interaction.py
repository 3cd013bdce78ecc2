"""Drag interaction: pin a node under the pointer and let the rest re-equilibrate.

The host forwards its pointer events here. While a node is pinned the
integrators leave it alone, but it keeps pushing and pulling its neighbours
from wherever the pointer put it.
"""

from __future__ import annotations

import logging

from forcegraph.ir.graph import FixedPosition, Node
from forcegraph.layout.engine import ReingoldFruchtermanLayout

logger = logging.getLogger(__name__)

# Pointer moves up to this many pixels on both axes count as a click.
DRAG_THRESHOLD: float = 5.0

Point = tuple[float, float]


class DragHandler:
    """Translates pin / drag / release gestures into layout runs."""

    def __init__(
        self,
        layout: ReingoldFruchtermanLayout,
        fixed_draggable: bool = False,
        threshold: float = DRAG_THRESHOLD,
    ) -> None:
        self.layout = layout
        self.fixed_draggable = fixed_draggable
        self.threshold = threshold

    def pin(self, node: Node, point: Point) -> None:
        """Start a gesture on ``node`` with the pointer at ``point``."""
        if not node.placed:
            logger.debug("Ignoring pin on unplaced node %r", node.key)
            return
        node.fixed_position = FixedPosition(pointer_x=point[0], pointer_y=point[1], x=node.x, y=node.y)
        node.in_drag_mode = True

    def drag(self, node: Node, point: Point) -> bool:
        """Follow the pointer. Returns True when the node actually moved."""
        origin = node.fixed_position
        if origin is None or not node.in_drag_mode:
            return False
        diff_x = origin.pointer_x - point[0]
        diff_y = origin.pointer_y - point[1]
        if abs(diff_x) <= self.threshold and abs(diff_y) <= self.threshold:
            return False

        new_x = origin.x - diff_x
        new_y = origin.y - diff_y
        if not self.layout.area.contains(new_x, new_y):
            return False
        node.place(new_x, new_y)

        layout = self.layout
        if layout.is_running:
            layout.reset_simulation()
            return True
        # One cheap iteration when nothing is animated, otherwise a full live run.
        max_iterations = None if layout.enable_simulation else 1
        layout.set_initial_rendering(False)
        try:
            layout.run(max_iterations=max_iterations)
        finally:
            layout.set_initial_rendering(True)
        return True

    def release(self, node: Node) -> None:
        """End the gesture; the node rejoins the simulation unless it stays fixed."""
        if node.fixed_position is None:
            return
        node.in_drag_mode = False
        if not self.fixed_draggable:
            node.fixed_position = None
        self.layout.run()
