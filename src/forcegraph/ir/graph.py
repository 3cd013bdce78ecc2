"""Graph model — the nodes and links of one data series, backed by a networkx DiGraph.

This module owns the canonical node/link state the layout engine simulates.
Each networkx node carries its ``Node`` object under the ``data`` attribute and
each edge its ``Link`` object, so topology queries (degree, successors,
incident edges) go through networkx while positions live on the objects.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

import networkx as nx

MIN_MASS: float = 1.0


@dataclass
class FixedPosition:
    """Where a drag gesture started: pointer coordinates and the node position."""

    pointer_x: float
    pointer_y: float
    x: float
    y: float


@dataclass(eq=False)
class Node:
    """A positioned vertex of the simulation."""

    key: str
    mass_hint: float | None = None
    graph_name: str = ""
    x: float | None = None
    y: float | None = None
    prev_x: float | None = None
    prev_y: float | None = None
    vx: float = 0.0
    vy: float = 0.0
    fx: float = 0.0
    fy: float = 0.0
    mass: float = MIN_MASS
    degree: int = 1
    temperature: float = 0.0
    fixed_position: FixedPosition | None = field(default=None, repr=False)
    in_drag_mode: bool = False

    @property
    def fixed(self) -> bool:
        return self.fixed_position is not None

    @property
    def placed(self) -> bool:
        return self.x is not None and self.y is not None

    def place(self, x: float, y: float) -> None:
        """Put the node at (x, y) at rest."""
        self.x = self.prev_x = x
        self.y = self.prev_y = y
        self.vx = self.vy = 0.0
        self.fx = self.fy = 0.0

    def position(self) -> tuple[float, float] | None:
        if not self.placed:
            return None
        return (self.x, self.y)


@dataclass(eq=False)
class Link:
    """A connection between two nodes of the same graph."""

    source: Node
    target: Node
    weight: float | None = None

    @property
    def key(self) -> tuple[str, str]:
        return (self.source.key, self.target.key)

    @property
    def strength(self) -> float:
        return 1.0 if self.weight is None else float(self.weight)

    @property
    def is_loop(self) -> bool:
        return self.source is self.target

    def mass_factors(self) -> tuple[float, float]:
        """Share of the link force taken by (source, target).

        Proportional to ``1 - m / (m_source + m_target)``, scaled so two equal
        masses each take the full force. The lighter end moves more.
        """
        m1 = self.source.mass
        m2 = self.target.mass
        total = m1 + m2
        return (2 * (1 - m1 / total), 2 * (1 - m2 / total))


class Graph:
    """A named node/link collection registered with a layout.

    Wraps a networkx DiGraph and exposes the structural operations the host
    drives. ``version`` increases on every structural change so that a layout
    can notice mutations at its next iteration boundary.
    """

    def __init__(self, name: str = "series-1") -> None:
        self.name = name
        self.digraph: nx.DiGraph = nx.DiGraph()
        self.version = 0
        self._refreshed_version = -1

    @classmethod
    def from_links(
        cls,
        links: Iterable[object],
        nodes: Iterable[object] = (),
        name: str = "series-1",
    ) -> Graph:
        """Build a graph from link and node declarations (see ``set_data``)."""
        graph = cls(name)
        graph.set_data(links, nodes)
        return graph

    def __repr__(self) -> str:
        return f"Graph({self.name!r}, nodes={self.node_count()}, links={self.link_count()})"

    # ─── Queries ─────────────────────────────────────────────────────────────

    @property
    def nodes(self) -> list[Node]:
        return [attrs["data"] for _, attrs in self.digraph.nodes(data=True)]

    @property
    def links(self) -> list[Link]:
        return [attrs["data"] for _, _, attrs in self.digraph.edges(data=True)]

    def node(self, key: str) -> Node | None:
        if key not in self.digraph:
            return None
        return self.digraph.nodes[key]["data"]

    def link(self, source: str, target: str) -> Link | None:
        if not self.digraph.has_edge(source, target):
            return None
        return self.digraph.edges[source, target]["data"]

    def has_node(self, key: str) -> bool:
        return key in self.digraph

    def node_count(self) -> int:
        return self.digraph.number_of_nodes()

    def link_count(self) -> int:
        return self.digraph.number_of_edges()

    def root_nodes(self) -> list[Node]:
        """Nodes without incoming links, in insertion order."""
        return [self.digraph.nodes[key]["data"] for key in self.digraph.nodes if self.digraph.in_degree(key) == 0]

    def successors(self, key: str) -> list[Node]:
        return [self.digraph.nodes[succ]["data"] for succ in self.digraph.successors(key)]

    def positions(self) -> dict[str, tuple[float, float] | None]:
        return {node.key: node.position() for node in self.nodes}

    # ─── Structural changes ──────────────────────────────────────────────────

    def add_node(self, key: str, mass: float | None = None) -> Node:
        """Return the node for ``key``, creating it if needed.

        An existing node keeps its position and velocity; a given ``mass``
        only updates its mass hint.
        """
        existing = self.node(key)
        if existing is not None:
            if mass is not None and mass != existing.mass_hint:
                existing.mass_hint = mass
                self._touch()
            return existing
        node = Node(key=key, mass_hint=mass, graph_name=self.name)
        self.digraph.add_node(key, data=node)
        self._touch()
        return node

    def add_link(self, source: str, target: str, weight: float | None = None) -> Link:
        """Link two keys, creating missing endpoints on demand."""
        existing = self.link(source, target)
        if existing is not None:
            if weight is not None and weight != existing.weight:
                existing.weight = weight
                self._touch()
            return existing
        link = Link(source=self.add_node(source), target=self.add_node(target), weight=weight)
        self.digraph.add_edge(source, target, data=link)
        self._touch()
        return link

    def remove_node(self, key: str) -> Node:
        """Remove a node together with exactly its incident links."""
        node = self.node(key)
        if node is None:
            raise KeyError(key)
        self.digraph.remove_node(key)
        self._touch()
        return node

    def remove_link(self, link: Link) -> None:
        source, target = link.key
        if self.link(source, target) is not link:
            raise KeyError(link.key)
        self.digraph.remove_edge(source, target)
        self._touch()

    def set_data(self, links: Iterable[object], nodes: Iterable[object] = ()) -> None:
        """Rebuild the graph from link and node declarations.

        Links are ``(source, target)``, ``(source, target, weight)`` or
        mappings with ``from``/``to``/``weight``. Nodes are keys or mappings
        with ``id``/``mass``. Nodes whose key is still referenced keep their
        current position; all others are dropped with their links.
        """
        previous = {node.key: node for node in self.nodes}
        self.digraph = nx.DiGraph()

        for item in links:
            source, target, weight = _link_spec(item)
            for key in (source, target):
                if key not in self.digraph and key in previous:
                    self.digraph.add_node(key, data=previous[key])
            self.add_link(source, target, weight)

        for item in nodes:
            key, mass = _node_spec(item)
            if key not in self.digraph and key in previous:
                self.digraph.add_node(key, data=previous[key])
            self.add_node(key, mass)
        self._touch()

    def refresh(self) -> bool:
        """Recompute degree and mass if the structure changed since the last call."""
        if self._refreshed_version == self.version:
            return False
        digraph = self.digraph
        for key, attrs in digraph.nodes(data=True):
            node: Node = attrs["data"]
            node.degree = max(digraph.degree(key), 1)
            node.mass = _node_mass(node, digraph, key)
        self._refreshed_version = self.version
        return True

    def _touch(self) -> None:
        self.version += 1


def _node_mass(node: Node, digraph: nx.DiGraph, key: str) -> float:
    if node.mass_hint is not None:
        return max(float(node.mass_hint), MIN_MASS)
    weights = [
        attrs["data"].weight
        for _, _, attrs in list(digraph.in_edges(key, data=True)) + list(digraph.out_edges(key, data=True))
        if attrs["data"].weight is not None
    ]
    if not weights:
        return MIN_MASS
    return max(float(sum(weights)), MIN_MASS)


def _link_spec(item: object) -> tuple[str, str, float | None]:
    if isinstance(item, Mapping):
        try:
            return str(item["from"]), str(item["to"]), item.get("weight")
        except KeyError as e:
            raise ValueError(f"Link declaration {item!r} is missing {e.args[0]!r}") from e
    if isinstance(item, (tuple, list)) and len(item) in (2, 3):
        weight = item[2] if len(item) == 3 else None
        return str(item[0]), str(item[1]), weight
    raise ValueError(f"Cannot read link declaration {item!r}")


def _node_spec(item: object) -> tuple[str, float | None]:
    if isinstance(item, Mapping):
        try:
            return str(item["id"]), item.get("mass")
        except KeyError as e:
            raise ValueError(f"Node declaration {item!r} is missing 'id'") from e
    return str(item), None
