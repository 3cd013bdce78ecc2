"""Edge-list parser.

One declaration per line::

    # comment
    A -> B
    B -- C 2.5
    C D
    lonely

Arrows (``->``, ``-->``), dashes (``--``, ``---``) or plain whitespace separate
the endpoints; an optional trailing number is the link weight. A line with a
single key declares a node without links. Keys containing spaces, dashes or
``>`` must be double-quoted.
"""

from __future__ import annotations

import re

from forcegraph.ir.graph import Graph

_COMMENT_RE = re.compile(r"#.*$")
_KEY = r"[^\s\->#]+|\"[^\"]+\""
_LINK_RE = re.compile(
    rf"^(?P<source>{_KEY})\s*(?:-{{1,2}}>|-{{2,3}}|\s)\s*(?P<target>{_KEY})(?:\s+(?P<weight>[-+]?\d+(?:\.\d*)?(?:[eE][-+]?\d+)?))?$"
)
_NODE_RE = re.compile(rf"^(?P<key>{_KEY})$")


def _unquote(key: str) -> str:
    if len(key) >= 2 and key[0] == key[-1] == '"':
        return key[1:-1]
    return key


class EdgeListParser:
    """Parses the line-based edge-list format into a single graph."""

    def __init__(self, name: str = "series-1") -> None:
        self.name = name

    def parse(self, src: str) -> list[Graph]:
        graph = Graph(self.name)
        for lineno, raw in enumerate(src.splitlines(), start=1):
            line = _COMMENT_RE.sub("", raw).strip()
            if not line:
                continue
            m = _LINK_RE.match(line)
            if m:
                weight = m.group("weight")
                graph.add_link(
                    _unquote(m.group("source")),
                    _unquote(m.group("target")),
                    float(weight) if weight is not None else None,
                )
                continue
            m = _NODE_RE.match(line)
            if m:
                graph.add_node(_unquote(m.group("key")))
                continue
            raise ValueError(f"line {lineno}: cannot parse {raw.strip()!r}")
        return [graph]
