"""Shared type definitions for forcegraph.

Closed sets of option values used across the config, the layout engine and
the integrators. Each enum knows its default so an unrecognised host value
can always fall back to something renderable.
"""

from __future__ import annotations

import logging
from enum import Enum, auto

logger = logging.getLogger(__name__)


class _OptionEnum(Enum):
    """Enum whose members are selected by their option string."""

    @classmethod
    def default(cls):
        raise NotImplementedError

    @classmethod
    def parse(cls, value: object):
        """Return the member for ``value``, or the default for anything unknown."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            for member in cls:
                if member.value == value.strip().lower():
                    return member
        fallback = cls.default()
        logger.warning("Unknown %s %r; falling back to %r", cls.__name__, value, fallback.value)
        return fallback


class Approximation(_OptionEnum):
    BarnesHut = "barnes-hut"
    NoApproximation = "none"

    @classmethod
    def default(cls) -> Approximation:
        return cls.NoApproximation


class Integration(_OptionEnum):
    Euler = "euler"
    Verlet = "verlet"

    @classmethod
    def default(cls) -> Integration:
        return cls.Verlet


class InitialPositions(_OptionEnum):
    Circle = "circle"
    Random = "random"

    @classmethod
    def default(cls) -> InitialPositions:
        return cls.Circle


class SimulationState(Enum):
    Idle = auto()  # nothing to lay out
    Initializing = auto()  # assigning starting positions
    Running = auto()
    Converged = auto()  # stable or iteration budget spent
    Stopped = auto()  # explicit stop()
