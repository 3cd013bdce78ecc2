"""Barnes-Hut quadtree over node positions.

The tree is an arena: every cell lives in ``QuadTree.cells`` and refers to its
children by index. Children are always appended after their parent, so a
reverse walk over the arena visits cells bottom-up, which is how masses and
centroids are aggregated. A tree is built from scratch for every iteration
and thrown away afterwards.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from forcegraph.ir.graph import Node
from forcegraph.layout.types import Area

# Below this depth a cell keeps splitting; at it, coincident nodes share a leaf.
MAX_DEPTH: int = 32


@dataclass
class Cell:
    """One quadrant of the tree."""

    x: float
    y: float
    width: float
    height: float
    depth: int
    mass: float = 0.0
    cx: float = 0.0
    cy: float = 0.0
    children: tuple[int, int, int, int] | None = None
    nodes: list[Node] = field(default_factory=list)

    @property
    def is_internal(self) -> bool:
        return self.children is not None

    @property
    def is_empty(self) -> bool:
        return self.children is None and not self.nodes

    @property
    def size(self) -> float:
        return max(self.width, self.height)

    def contains(self, x: float, y: float) -> bool:
        return self.x <= x <= self.x + self.width and self.y <= y <= self.y + self.height


class QuadTree:
    """Spatial index aggregating node mass per quadrant."""

    def __init__(self, area: Area) -> None:
        self.area = area
        self.cells: list[Cell] = [Cell(area.x, area.y, area.width, area.height, depth=0)]

    @classmethod
    def build(cls, nodes: Iterable[Node], area: Area) -> QuadTree:
        """Index the placed nodes and aggregate masses. Returns the tree."""
        tree = cls(area)
        tree.insert_nodes(nodes)
        tree.calculate_mass_and_center()
        return tree

    @property
    def root(self) -> Cell:
        return self.cells[0]

    def insert_nodes(self, nodes: Iterable[Node]) -> None:
        for node in nodes:
            if node.placed:
                self.insert(node)

    def insert(self, node: Node) -> None:
        self._insert_from(0, node)

    def _insert_from(self, index: int, node: Node) -> None:
        x, y = self.area.clamp(node.x, node.y)
        while True:
            cell = self.cells[index]
            if cell.children is not None:
                index = cell.children[_quadrant(cell, x, y)]
                continue
            if not cell.nodes or cell.depth >= MAX_DEPTH:
                cell.nodes.append(node)
                return
            residents = cell.nodes
            cell.nodes = []
            self._subdivide(index)
            for resident in residents:
                self._insert_from(index, resident)

    def _subdivide(self, index: int) -> None:
        cell = self.cells[index]
        half_w = cell.width / 2
        half_h = cell.height / 2
        first = len(self.cells)
        for row in range(2):
            for col in range(2):
                self.cells.append(
                    Cell(
                        cell.x + col * half_w,
                        cell.y + row * half_h,
                        half_w,
                        half_h,
                        depth=cell.depth + 1,
                    )
                )
        cell.children = (first, first + 1, first + 2, first + 3)

    def calculate_mass_and_center(self) -> None:
        """Aggregate mass and mass-weighted centroid from the leaves up."""
        for cell in reversed(self.cells):
            if cell.children is None:
                members = [(n.mass, n.x, n.y) for n in cell.nodes]
            else:
                members = [
                    (child.mass, child.cx, child.cy)
                    for child in (self.cells[i] for i in cell.children)
                    if child.mass > 0
                ]
            mass = sum(m for m, _, _ in members)
            cell.mass = mass
            if mass > 0:
                cell.cx = sum(m * x for m, x, _ in members) / mass
                cell.cy = sum(m * y for m, _, y in members) / mass
            else:
                cell.cx = cell.x + cell.width / 2
                cell.cy = cell.y + cell.height / 2

    def visit(self, callback: Callable[[Cell], bool]) -> None:
        """Depth-first walk from the root; descend only where ``callback`` returns True."""
        stack = [0]
        while stack:
            cell = self.cells[stack.pop()]
            if cell.is_empty:
                continue
            if callback(cell) and cell.children is not None:
                stack.extend(reversed(cell.children))

    def leaves(self) -> list[Cell]:
        return [cell for cell in self.cells if cell.children is None and cell.nodes]

    def depth(self) -> int:
        return max(cell.depth for cell in self.cells)


def _quadrant(cell: Cell, x: float, y: float) -> int:
    col = 1 if x >= cell.x + cell.width / 2 else 0
    row = 1 if y >= cell.y + cell.height / 2 else 0
    return row * 2 + col
