"""forcegraph: force-directed 2D layout for node/link graphs."""

from collections.abc import Iterable

from forcegraph.config import LayoutConfig
from forcegraph.interaction import DragHandler
from forcegraph.ir.graph import Graph, Link, Node
from forcegraph.layout import Area, LayoutRegistry, ReingoldFruchtermanLayout
from forcegraph.types import Approximation, InitialPositions, Integration, SimulationState

__all__ = [
    "Approximation",
    "Area",
    "DragHandler",
    "Graph",
    "InitialPositions",
    "Integration",
    "LayoutConfig",
    "LayoutRegistry",
    "Link",
    "Node",
    "ReingoldFruchtermanLayout",
    "SimulationState",
    "layout_graph",
    "layout_graphs",
]


def layout_graphs(
    graphs: Iterable[Graph],
    width: float = 800.0,
    height: float = 600.0,
    config: LayoutConfig | None = None,
) -> ReingoldFruchtermanLayout:
    """Lay out several graphs in one shared area and run the simulation to its end.

    Args:
        graphs: Graphs sharing the area; their nodes repel each other.
        width: Width of the layout area.
        height: Height of the layout area.
        config: Tuning parameters (defaults when None).

    Returns:
        The finished layout; read positions from it or from the graphs.
    """
    layout = ReingoldFruchtermanLayout(config or LayoutConfig(), Area(0.0, 0.0, width, height))
    for graph in graphs:
        layout.add_graph(graph)
    layout.run()
    while layout.tick():
        pass
    return layout


def layout_graph(
    links: Iterable[object],
    nodes: Iterable[object] = (),
    width: float = 800.0,
    height: float = 600.0,
    **options: object,
) -> dict[str, tuple[float, float] | None]:
    """Lay out one graph given as link/node declarations.

    Args:
        links: ``(source, target)``, ``(source, target, weight)`` or
            ``{"from", "to", "weight"}`` declarations.
        nodes: Extra node keys or ``{"id", "mass"}`` declarations.
        width: Width of the layout area.
        height: Height of the layout area.
        **options: Layout options, camelCase (``linkLength``) or snake_case.

    Returns:
        Mapping of node key to its final ``(x, y)``.

    Raises:
        ValueError: If a link or node declaration cannot be read.
    """
    graph = Graph.from_links(links, nodes)
    layout_graphs([graph], width, height, LayoutConfig.from_options(options))
    return graph.positions()
