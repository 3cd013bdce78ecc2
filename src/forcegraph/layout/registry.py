"""Layout registry — one shared layout per (algorithm type, area), plus a cooperative scheduler.

Graphs that ask for the same algorithm on the same area share one layout
instance and therefore one simulation universe. The registry is a plain
object owned by the host; there is no module-level instance.
"""

from __future__ import annotations

import logging

from forcegraph.config import DEFAULT_LAYOUT_TYPE, LayoutConfig
from forcegraph.ir.graph import Graph
from forcegraph.layout.engine import ReingoldFruchtermanLayout
from forcegraph.layout.types import Area

logger = logging.getLogger(__name__)

LAYOUT_TYPES: dict[str, type[ReingoldFruchtermanLayout]] = {
    ReingoldFruchtermanLayout.type: ReingoldFruchtermanLayout,
}

LayoutKey = tuple[str, Area]


def resolve_layout_type(name: str) -> str:
    if name in LAYOUT_TYPES:
        return name
    logger.warning("Unknown layout type %r; using %r", name, DEFAULT_LAYOUT_TYPE)
    return DEFAULT_LAYOUT_TYPE


class LayoutRegistry:
    """Shared layouts keyed by algorithm type and area."""

    def __init__(self) -> None:
        self._layouts: dict[LayoutKey, ReingoldFruchtermanLayout] = {}
        self._owners: dict[Graph, LayoutKey] = {}

    def __len__(self) -> int:
        return len(self._layouts)

    @property
    def layouts(self) -> list[ReingoldFruchtermanLayout]:
        return list(self._layouts.values())

    def get_layout(self, config: LayoutConfig, area: Area) -> ReingoldFruchtermanLayout:
        """Return the layout for (config.type, area), creating it on first use.

        The first config seen for a key wins; later callers share that layout.
        """
        key = (resolve_layout_type(config.type), area)
        layout = self._layouts.get(key)
        if layout is None:
            layout = LAYOUT_TYPES[key[0]](config, area)
            self._layouts[key] = layout
            logger.debug("Created %s layout for area %s", key[0], area.as_tuple())
        return layout

    def register(self, graph: Graph, config: LayoutConfig | None = None, area: Area | None = None) -> ReingoldFruchtermanLayout:
        """Attach ``graph`` to the shared layout for its type and area."""
        config = config or LayoutConfig()
        area = area or Area()
        key = (resolve_layout_type(config.type), area)
        if self._owners.get(graph) not in (None, key):
            self.deregister(graph)
        layout = self.get_layout(config, area)
        layout.add_graph(graph)
        self._owners[graph] = key
        return layout

    def deregister(self, graph: Graph) -> None:
        """Detach ``graph``; a layout left without graphs is stopped and dropped."""
        key = self._owners.pop(graph, None)
        if key is None:
            return
        layout = self._layouts[key]
        layout.remove_graph(graph)
        if not layout.registered_graphs:
            layout.stop()
            del self._layouts[key]
            logger.debug("Dropped %s layout for area %s", key[0], key[1].as_tuple())

    def layout_for(self, graph: Graph) -> ReingoldFruchtermanLayout | None:
        key = self._owners.get(graph)
        return None if key is None else self._layouts[key]

    def redraw(self) -> None:
        """Full host redraw: stop every layout, then run each again."""
        for layout in self.layouts:
            layout.stop()
        for layout in self.layouts:
            layout.run()

    def tick(self) -> bool:
        """Advance every live layout by one iteration. Returns True while any still runs."""
        running = False
        for layout in self.layouts:
            if layout.enable_simulation and layout.is_running:
                layout.tick()
            running = running or layout.is_running
        return running

    def run_until_idle(self, max_ticks: int | None = None) -> int:
        """Tick until no layout is running (or ``max_ticks`` passed). Returns the tick count."""
        ticks = 0
        while any(layout.is_running for layout in self.layouts):
            if max_ticks is not None and ticks >= max_ticks:
                break
            self.tick()
            ticks += 1
        return ticks
