"""Integration strategies: how accumulated forces move the nodes.

Each strategy bundles its default force functions, the way the three forces
are accumulated on nodes, and the timestep itself:

- Euler keeps an explicit velocity, caps each step by the current cooling
  temperature, and damps the velocity with ``friction``.
- Verlet keeps the previous position instead; inertia is the position delta,
  scaled by ``-friction`` and capped per axis by ``max_speed``. Forces are
  scaled by the cooling step so a run lasts for its whole iteration budget.

Pinned nodes never accumulate force and are never integrated, but remain
sources of force for their neighbours.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from forcegraph.ir.graph import Link, Node
from forcegraph.layout.types import Barycenter
from forcegraph.layout.vector import Distance, vector_length
from forcegraph.types import Integration

if TYPE_CHECKING:
    from forcegraph.layout.engine import ReingoldFruchtermanLayout

logger = logging.getLogger(__name__)


class EulerIntegration:
    """Velocity-based integration."""

    kind = Integration.Euler

    @staticmethod
    def repulsive_force_function(d: float, k: float) -> float:
        return k * k / d

    @staticmethod
    def attractive_force_function(d: float, k: float) -> float:
        return d * d / k

    def barycenter(self, layout: ReingoldFruchtermanLayout, barycenter: Barycenter) -> None:
        """Pull every node toward the centre of the area."""
        gravity = layout.config.gravitational_constant
        center = layout.area.center
        for node in layout.nodes:
            if node.fixed:
                continue
            node.fx += (center.x - node.x) * gravity * node.mass
            node.fy += (center.y - node.y) * gravity * node.mass

    def repulsive(self, layout: ReingoldFruchtermanLayout, node: Node, force: float, distance: Distance) -> None:
        node.fx += distance.x / distance.r * force / node.degree
        node.fy += distance.y / distance.r * force / node.degree

    def attractive(self, layout: ReingoldFruchtermanLayout, link: Link, force: float, distance: Distance) -> None:
        source_share, target_share = link.mass_factors()
        tx = distance.x / distance.r * force * link.strength
        ty = distance.y / distance.r * force * link.strength
        if not link.source.fixed:
            link.source.fx -= tx * source_share / link.source.degree
            link.source.fy -= ty * source_share / link.source.degree
        if not link.target.fixed:
            link.target.fx += tx * target_share / link.target.degree
            link.target.fy += ty * target_share / link.target.degree

    def integrate(self, layout: ReingoldFruchtermanLayout, node: Node) -> None:
        node.vx += node.fx / node.mass
        node.vy += node.fy / node.mass
        speed = vector_length(node.vx, node.vy)
        step = min(speed, max(layout.temperature, 0.0))
        if speed > 0 and step > 0:
            node.x += node.vx / speed * step
            node.y += node.vy / speed * step
        node.temperature = step
        damping = 1 + layout.config.friction
        node.vx *= damping
        node.vy *= damping


class VerletIntegration:
    """Position-history integration."""

    kind = Integration.Verlet

    @staticmethod
    def repulsive_force_function(d: float, k: float) -> float:
        return (k - d) / d if d < k else 0.0

    @staticmethod
    def attractive_force_function(d: float, k: float) -> float:
        return (k - d) / d

    def barycenter(self, layout: ReingoldFruchtermanLayout, barycenter: Barycenter) -> None:
        """Shift the whole system so its barycenter drifts toward the centre of the area."""
        gravity = layout.config.gravitational_constant
        center = layout.area.center
        shift_x = (center.x - barycenter.x) * gravity
        shift_y = (center.y - barycenter.y) * gravity
        for node in layout.nodes:
            if node.fixed:
                continue
            node.fx += shift_x * node.mass
            node.fy += shift_y * node.mass

    def repulsive(self, layout: ReingoldFruchtermanLayout, node: Node, force: float, distance: Distance) -> None:
        factor = force * layout.diff_temperature / node.degree
        node.fx += distance.x * factor
        node.fy += distance.y * factor

    def attractive(self, layout: ReingoldFruchtermanLayout, link: Link, force: float, distance: Distance) -> None:
        source_share, target_share = link.mass_factors()
        tx = -distance.x * force * layout.diff_temperature * link.strength
        ty = -distance.y * force * layout.diff_temperature * link.strength
        if not link.source.fixed:
            link.source.fx -= tx * source_share / link.source.degree
            link.source.fy -= ty * source_share / link.source.degree
        if not link.target.fixed:
            link.target.fx += tx * target_share / link.target.degree
            link.target.fy += ty * target_share / link.target.degree

    def integrate(self, layout: ReingoldFruchtermanLayout, node: Node) -> None:
        inertia = -layout.config.friction
        max_speed = layout.config.max_speed
        dx = _limit((node.x - node.prev_x) * inertia + node.fx / node.mass, max_speed)
        dy = _limit((node.y - node.prev_y) * inertia + node.fy / node.mass, max_speed)
        node.prev_x = node.x
        node.prev_y = node.y
        node.x += dx
        node.y += dy
        node.temperature = vector_length(dx, dy)


def _limit(value: float, bound: float) -> float:
    return max(-bound, min(bound, value))


INTEGRATIONS: dict[Integration, type[EulerIntegration] | type[VerletIntegration]] = {
    Integration.Euler: EulerIntegration,
    Integration.Verlet: VerletIntegration,
}


def get_integration(kind: Integration | str) -> EulerIntegration | VerletIntegration:
    """Instantiate the strategy for ``kind``; unknown kinds get the default."""
    kind = Integration.parse(kind)
    strategy = INTEGRATIONS.get(kind)
    if strategy is None:
        logger.warning("No integration registered for %r; using %r", kind, Integration.default())
        strategy = INTEGRATIONS[Integration.default()]
    return strategy()
