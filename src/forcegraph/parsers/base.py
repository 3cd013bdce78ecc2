"""Base parser protocol."""

from __future__ import annotations

from typing import Protocol

from forcegraph.ir.graph import Graph


class Parser(Protocol):
    """Protocol that all graph-file parsers must implement."""

    def parse(self, src: str) -> list[Graph]:
        """Parse source text into one or more graphs."""
        ...
