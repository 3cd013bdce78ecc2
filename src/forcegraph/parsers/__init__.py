"""Parser registry — detect the input format and dispatch to the right parser."""

from __future__ import annotations

from collections.abc import Callable

from forcegraph.ir.graph import Graph
from forcegraph.parsers.base import Parser
from forcegraph.parsers.edgelist import EdgeListParser
from forcegraph.parsers.json_graph import JsonGraphParser


def detect_type(src: str) -> str:
    """Detect the input format from source text. Returns 'json' or 'edges'."""
    stripped = src.lstrip()
    if stripped.startswith("{") or stripped.startswith("["):
        return "json"
    return "edges"


_PARSERS: dict[str, Callable[[], Parser]] = {
    "edges": EdgeListParser,
    "json": JsonGraphParser,
}


def parse(src: str, fmt: str = "auto") -> list[Graph]:
    """Parse graph source text; ``fmt`` is 'auto', 'edges' or 'json'."""
    input_type = detect_type(src) if fmt == "auto" else fmt
    parser_cls = _PARSERS.get(input_type)
    if parser_cls is None:
        raise ValueError(f"Unsupported input format: {input_type}")
    parser: Parser = parser_cls()
    return parser.parse(src)
