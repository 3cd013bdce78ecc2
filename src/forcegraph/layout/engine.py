"""Force-directed layout engine (Reingold-Fruchterman with optional Barnes-Hut).

One ``ReingoldFruchtermanLayout`` simulates every graph registered with it as
a single universe: nodes of all graphs repel each other, links attract only
within their own graph. The controller is a small state machine:

    Idle -> Initializing -> Running -> Converged
                               |
                               +-> Stopped (explicit stop())

Scheduling is cooperative. With ``enable_simulation`` the host (or a
``LayoutRegistry``) calls ``tick()`` once per frame and redraws in between;
otherwise ``run()`` iterates to the end before returning. Area and graph-set
changes are staged and only take effect at the next iteration boundary.
"""

from __future__ import annotations

import logging
import math
import random
from collections.abc import Callable, Iterator

from forcegraph.config import LayoutConfig
from forcegraph.ir.graph import Graph, Link, Node
from forcegraph.layout.forces import DEFAULT_FORCES, FORCES, default_link_length
from forcegraph.layout.integrations import get_integration
from forcegraph.layout.placement import init_positions, place_missing
from forcegraph.layout.quadtree import QuadTree
from forcegraph.layout.types import Area, Barycenter
from forcegraph.types import Approximation, SimulationState

logger = logging.getLogger(__name__)

FrameCallback = Callable[["ReingoldFruchtermanLayout"], None]
FinishCallback = Callable[["ReingoldFruchtermanLayout", SimulationState], None]


class SimulationBusyError(RuntimeError):
    """Raised when an iteration is started while another one is in progress."""


class ReingoldFruchtermanLayout:
    """Simulation controller for one shared layout area."""

    type = "reingold-fruchterman"

    def __init__(
        self,
        config: LayoutConfig | None = None,
        area: Area | None = None,
        on_frame: FrameCallback | None = None,
        on_finish: FinishCallback | None = None,
    ) -> None:
        self.config = config or LayoutConfig()
        self.integration = get_integration(self.config.integration)
        self.approximation = self.config.approximation
        self.attractive_force = self.config.attractive_force or self.integration.attractive_force_function
        self.repulsive_force = self.config.repulsive_force or self.integration.repulsive_force_function
        self.forces: tuple[str, ...] = DEFAULT_FORCES
        self.enable_simulation = self.config.enable_simulation
        self.on_frame = on_frame
        self.on_finish = on_finish
        self.rng = random.Random(self.config.seed)

        self.area = area or Area()
        self.graphs: list[Graph] = []
        self.nodes: list[Node] = []
        self.links: list[Link] = []
        self._registered: list[Graph] = []
        self._pending_area: Area | None = None
        self._graphs_dirty = False
        self._seen_versions: dict[int, int] = {}

        self.state = SimulationState.Idle
        self.k = 1.0
        self.current_step = 0
        self.iterations_left = self.config.max_iterations
        self.start_temperature = 0.0
        self.temperature = 0.0
        self.diff_temperature = 0.0
        self.system_temperature = 0.0
        self.prev_system_temperature = 0.0
        self.barycenter: Barycenter | None = None
        self.quad_tree: QuadTree | None = None
        self.initial_rendering = True
        self._stepping = False

    def __repr__(self) -> str:
        return f"{type(self).__name__}(area={self.area.as_tuple()}, state={self.state.name})"

    # ─── Registration (staged until the next iteration boundary) ─────────────

    @property
    def registered_graphs(self) -> list[Graph]:
        return list(self._registered)

    def add_graph(self, graph: Graph) -> None:
        if any(g is graph for g in self._registered):
            return
        self._registered.append(graph)
        self._graphs_dirty = True

    def remove_graph(self, graph: Graph) -> None:
        self._registered = [g for g in self._registered if g is not graph]
        self._graphs_dirty = True

    def graph_of(self, node: Node) -> Graph | None:
        for graph in self._registered:
            if graph.name == node.graph_name and graph.node(node.key) is node:
                return graph
        return None

    def remove_node(self, node: Node) -> None:
        """Remove ``node`` and its links from the graph that owns it."""
        graph = self.graph_of(node)
        if graph is None:
            logger.debug("Node %r is not part of this layout", node.key)
            return
        graph.remove_node(node.key)

    def remove_link(self, link: Link) -> None:
        graph = self.graph_of(link.source)
        if graph is None or graph.link(*link.key) is not link:
            logger.debug("Link %r is not part of this layout", link.key)
            return
        graph.remove_link(link)

    def set_area(self, x: float, y: float, width: float, height: float) -> None:
        self._pending_area = Area(x, y, width, height)

    def clear(self) -> None:
        """Forget every graph and reset the simulation."""
        self._registered = []
        self._graphs_dirty = True
        self._sync()
        self.reset_simulation()
        self.state = SimulationState.Idle

    def _sync(self) -> None:
        """Apply staged area and graph changes; called only between iterations."""
        if self._pending_area is not None:
            self.area = self._pending_area
            self._pending_area = None
        changed = self._graphs_dirty or any(
            self._seen_versions.get(id(graph)) != graph.version for graph in self._registered
        )
        if not changed:
            return
        self.graphs = list(self._registered)
        self._graphs_dirty = False
        self._seen_versions = {id(graph): graph.version for graph in self.graphs}
        for graph in self.graphs:
            graph.refresh()
        self.nodes = [node for graph in self.graphs for node in graph.nodes]
        self.links = [link for graph in self.graphs for link in graph.links]

    # ─── Lifecycle ───────────────────────────────────────────────────────────

    @property
    def is_running(self) -> bool:
        return self.state is SimulationState.Running

    def run(self, max_iterations: int | None = None) -> SimulationState:
        """Start a run over the current graphs.

        Without live simulation the whole run happens here and the final state
        is returned. With live simulation the run is only armed; drive it with
        ``tick()`` or ``frames()``.
        """
        if self._stepping:
            raise SimulationBusyError("Cannot start a run from inside an iteration")
        self._sync()
        self.current_step = 0
        if not self.nodes:
            self.state = SimulationState.Idle
            logger.debug("Nothing to lay out; staying idle")
            return self.state

        if self.initial_rendering:
            self.state = SimulationState.Initializing
            init_positions(self)
        else:
            place_missing(self)
        self.set_k()
        self.reset_simulation(max_iterations)
        self.state = SimulationState.Running
        if self.iterations_left <= 0:
            self._finish(SimulationState.Converged)
            return self.state
        logger.debug(
            "Running %s: %d nodes, %d links, k=%.3f, %d iterations",
            self.integration.kind.value,
            len(self.nodes),
            len(self.links),
            self.k,
            self.iterations_left,
        )

        if not self.enable_simulation:
            while self.state is SimulationState.Running:
                self.step()
        return self.state

    def step(self) -> None:
        """Perform exactly one force-and-integrate iteration."""
        if self._stepping:
            raise SimulationBusyError("An iteration is already in progress")
        self._stepping = True
        try:
            self._sync()
            if not self.nodes:
                self._finish(SimulationState.Idle)
                return
            place_missing(self)
            self.current_step += 1
            self.iterations_left -= 1
            if self.approximation is Approximation.BarnesHut:
                self.quad_tree = QuadTree.build(self.nodes, self.area)
            for name in self.forces:
                FORCES[name](self)
            self.apply_limits()
            self.temperature = self.cool_down(self.temperature, self.diff_temperature)
            self.prev_system_temperature = self.system_temperature
            self.system_temperature = self.get_system_temperature()
            self.quad_tree = None
        finally:
            self._stepping = False

        if self.enable_simulation and self.on_frame is not None:
            self.on_frame(self)
        if self.state is SimulationState.Running and self.should_stop():
            self._finish(SimulationState.Converged)

    def tick(self) -> bool:
        """One scheduled iteration of a live run. Returns True while still running."""
        if self.state is SimulationState.Running:
            self.step()
        return self.is_running

    def frames(self) -> Iterator[ReingoldFruchtermanLayout]:
        """Run the layout, yielding after every iteration of a live run.

        Without live simulation the run completes first and a single frame is
        yielded with the final positions.
        """
        if not self.is_running:
            self.run()
        if not self.enable_simulation:
            yield self
            return
        while self.is_running:
            self.step()
            yield self

    def stop(self) -> None:
        """Stop the current run; positions keep the last complete iteration."""
        if self.state is SimulationState.Idle:
            return
        was_running = self.is_running
        self.state = SimulationState.Stopped
        logger.debug("Stopped after %d iterations", self.current_step)
        if was_running and self.on_finish is not None:
            self.on_finish(self, self.state)

    def reset(self) -> SimulationState:
        """Re-enter Running after a change.

        An active run gets a fresh iteration budget and keeps its step count;
        a converged or stopped layout starts a new run without re-placing
        the nodes it already positioned.
        """
        if self.is_running:
            self.reset_simulation()
            return self.state
        self.set_initial_rendering(False)
        try:
            return self.run()
        finally:
            self.set_initial_rendering(True)

    def _finish(self, state: SimulationState) -> None:
        self.state = state
        logger.debug(
            "Finished in %s after %d iterations (temperature %.5f, displacement %.5f)",
            state.name,
            self.current_step,
            self.temperature,
            self.system_temperature,
        )
        if self.on_finish is not None:
            self.on_finish(self, state)

    # ─── Simulation parameters ───────────────────────────────────────────────

    def set_k(self) -> None:
        self.k = self.config.link_length or default_link_length(self.area, len(self.nodes))

    def set_max_iterations(self, max_iterations: int | None = None) -> None:
        self.iterations_left = self.config.max_iterations if max_iterations is None else max_iterations

    def set_initial_rendering(self, enable: bool) -> None:
        self.initial_rendering = enable

    def set_temperature(self) -> None:
        self.temperature = self.start_temperature = math.sqrt(len(self.nodes))

    def set_diff_temperature(self) -> None:
        self.diff_temperature = self.start_temperature / (self.config.max_iterations + 1)

    def reset_simulation(self, max_iterations: int | None = None) -> None:
        self.system_temperature = 0.0
        self.prev_system_temperature = 0.0
        self.set_max_iterations(max_iterations)
        self.set_temperature()
        self.set_diff_temperature()

    @staticmethod
    def cool_down(temperature: float, step: float) -> float:
        return temperature - step

    def should_stop(self) -> bool:
        """Budget spent, fully cooled, or the system barely moved this iteration."""
        if self.iterations_left <= 0:
            return True
        if not math.isfinite(self.temperature) or self.temperature <= 0:
            return True
        return self.is_stable()

    def is_stable(self) -> bool:
        return self.system_temperature < self.config.stable_threshold

    def get_system_temperature(self) -> float:
        return sum(node.temperature for node in self.nodes if not node.fixed)

    # ─── Integration ─────────────────────────────────────────────────────────

    def apply_limits(self) -> None:
        for node in self.nodes:
            if not node.fixed:
                self.integration.integrate(self, node)
                self.apply_limit_box(node)
            node.fx = node.fy = 0.0

    def apply_limit_box(self, node: Node) -> None:
        node.x, node.y = self.area.clamp(node.x, node.y)

    # ─── Output ──────────────────────────────────────────────────────────────

    def positions(self) -> dict[str, dict[str, tuple[float, float] | None]]:
        """Current positions per graph name."""
        return {graph.name: graph.positions() for graph in self.graphs}
