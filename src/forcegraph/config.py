"""Centralized configuration for forcegraph."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, fields, replace

from forcegraph.types import Approximation, InitialPositions, Integration

logger = logging.getLogger(__name__)

ForceFunction = Callable[[float, float], float]

DEFAULT_LAYOUT_TYPE = "reingold-fruchterman"

# camelCase option names as a host hands them over.
_OPTION_ALIASES: dict[str, str] = {
    "linkLength": "link_length",
    "gravitationalConstant": "gravitational_constant",
    "maxIterations": "max_iterations",
    "enableSimulation": "enable_simulation",
    "initialPositions": "initial_positions",
    "initialPositionRadius": "initial_position_radius",
    "maxSpeed": "max_speed",
    "stableThreshold": "stable_threshold",
    "repulsiveForce": "repulsive_force",
    "attractiveForce": "attractive_force",
    "forExport": "for_export",
}


@dataclass
class LayoutConfig:
    """Tuning parameters of one force-directed layout instance."""

    type: str = DEFAULT_LAYOUT_TYPE
    link_length: float | None = None
    gravitational_constant: float = 0.0625
    friction: float = -0.981
    theta: float = 0.5
    approximation: Approximation = Approximation.NoApproximation
    integration: Integration = Integration.Verlet
    max_iterations: int = 1000
    enable_simulation: bool = False
    initial_positions: InitialPositions | Callable = InitialPositions.Circle
    initial_position_radius: float | None = None
    max_speed: float = 10.0
    seed: int | None = None
    stable_threshold: float = 0.00001
    repulsive_force: ForceFunction | None = field(default=None, repr=False)
    attractive_force: ForceFunction | None = field(default=None, repr=False)
    for_export: bool | None = None

    def __post_init__(self) -> None:
        self.approximation = Approximation.parse(self.approximation)
        self.integration = Integration.parse(self.integration)
        if not callable(self.initial_positions):
            self.initial_positions = InitialPositions.parse(self.initial_positions)
        if self.link_length is not None and self.link_length <= 0:
            logger.warning("Ignoring non-positive link_length %r", self.link_length)
            self.link_length = None
        if self.initial_position_radius is not None and self.initial_position_radius <= 0:
            logger.warning("Ignoring non-positive initial_position_radius %r", self.initial_position_radius)
            self.initial_position_radius = None
        if self.max_iterations < 0:
            logger.warning("Ignoring negative max_iterations %r", self.max_iterations)
            self.max_iterations = LayoutConfig.max_iterations
        if self.for_export is not None:
            self.enable_simulation = not self.for_export

    @classmethod
    def from_options(cls, options: Mapping[str, object] | None = None) -> LayoutConfig:
        """Build a config from a host option mapping.

        Accepts both the host's camelCase keys (``linkLength``) and the
        dataclass field names (``link_length``). Unknown keys are skipped.
        """
        known = {f.name for f in fields(cls)}
        kwargs: dict[str, object] = {}
        for key, value in (options or {}).items():
            name = _OPTION_ALIASES.get(key, key)
            if name not in known:
                logger.debug("Ignoring unknown layout option %r", key)
                continue
            kwargs[name] = value
        return cls(**kwargs)

    def with_options(self, **changes: object) -> LayoutConfig:
        """Return a copy of this config with some fields replaced."""
        return replace(self, **changes)
