"""JSON graph parser.

Accepts a single series::

    {"name": "deps", "nodes": ["A", {"id": "B", "mass": 3}],
     "links": [{"from": "A", "to": "B", "weight": 2}, ["B", "C"]]}

or several series sharing one layout::

    {"series": [{"name": "a", "links": [...]}, {"name": "b", "links": [...]}]}
"""

from __future__ import annotations

import json
from collections.abc import Mapping

from forcegraph.ir.graph import Graph


class JsonGraphParser:
    """Parses JSON documents into graphs."""

    def parse(self, src: str) -> list[Graph]:
        try:
            document = json.loads(src)
        except json.JSONDecodeError as e:
            raise ValueError(f"line {e.lineno}: invalid JSON: {e.msg}") from e

        if isinstance(document, list):
            document = {"links": document}
        if not isinstance(document, Mapping):
            raise ValueError("expected a JSON object or a list of links")

        if "series" in document:
            series = document["series"]
            if not isinstance(series, list):
                raise ValueError("'series' must be a list")
            return [_series_graph(entry, index) for index, entry in enumerate(series, start=1)]
        return [_series_graph(document, 1)]


def _series_graph(entry: object, index: int) -> Graph:
    if not isinstance(entry, Mapping):
        raise ValueError(f"series {index}: expected an object")
    name = str(entry.get("name", f"series-{index}"))
    links = entry.get("links", entry.get("data", []))
    nodes = entry.get("nodes", [])
    if not isinstance(links, list) or not isinstance(nodes, list):
        raise ValueError(f"series {name!r}: 'links' and 'nodes' must be lists")
    try:
        return Graph.from_links(links, nodes, name=name)
    except ValueError as e:
        raise ValueError(f"series {name!r}: {e}") from e
