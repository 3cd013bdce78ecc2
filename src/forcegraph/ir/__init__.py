"""Graph model: nodes, links and the graphs that own them."""

from forcegraph.ir.graph import MIN_MASS, FixedPosition, Graph, Link, Node

__all__ = [
    "MIN_MASS",
    "FixedPosition",
    "Graph",
    "Link",
    "Node",
]
