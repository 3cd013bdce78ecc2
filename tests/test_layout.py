"""Tests for layout/engine.py — simulation lifecycle and end-to-end layout behaviour.

Covers:
  - run / step / tick / frames and the state machine
  - staged area and graph changes
  - convergence of small graphs under both integrations
  - Barnes-Hut against exhaustive repulsion
  - pinned nodes, multiple graphs, seeded placement
"""

from __future__ import annotations

import itertools
import math

import pytest

from forcegraph import layout_graph, layout_graphs
from forcegraph.config import LayoutConfig
from forcegraph.ir.graph import FixedPosition, Graph
from forcegraph.layout.engine import ReingoldFruchtermanLayout, SimulationBusyError
from forcegraph.layout.types import Area
from forcegraph.types import SimulationState

AREA = Area(0.0, 0.0, 800.0, 600.0)

# ─── Helpers ──────────────────────────────────────────────────────────────────


def make_layout(*graphs: Graph, **options) -> ReingoldFruchtermanLayout:
    layout = ReingoldFruchtermanLayout(LayoutConfig(**options), AREA)
    for graph in graphs:
        layout.add_graph(graph)
    return layout


def chain(*keys: str, name: str = "series-1") -> Graph:
    graph = Graph(name)
    for source, target in zip(keys, keys[1:]):
        graph.add_link(source, target)
    return graph


def dist(graph: Graph, a: str, b: str) -> float:
    na, nb = graph.node(a), graph.node(b)
    return math.hypot(na.x - nb.x, na.y - nb.y)


def pairwise(graph: Graph) -> list[float]:
    return [math.hypot(a.x - b.x, a.y - b.y) for a, b in itertools.combinations(graph.nodes, 2)]


def inside(area: Area, graph: Graph) -> bool:
    return all(area.contains(node.x, node.y) for node in graph.nodes)


# ─── Lifecycle ────────────────────────────────────────────────────────────────


class TestRun:
    def test_empty_layout_stays_idle(self):
        layout = make_layout(Graph())
        assert layout.run() is SimulationState.Idle
        assert layout.current_step == 0

    def test_single_iteration(self):
        """max_iterations=1 performs exactly one step and then converges."""
        finished = []
        layout = make_layout(chain("A", "B"), max_iterations=1)
        layout.on_finish = lambda lay, state: finished.append(state)
        assert layout.run() is SimulationState.Converged
        assert layout.current_step == 1
        assert finished == [SimulationState.Converged]

    def test_zero_iterations_only_places(self):
        graph = chain("A", "B")
        layout = make_layout(graph, max_iterations=0)
        assert layout.run() is SimulationState.Converged
        assert layout.current_step == 0
        assert all(node.placed for node in graph.nodes)

    def test_run_never_exceeds_budget(self):
        layout = make_layout(chain("A", "B", "C"), max_iterations=25)
        layout.run()
        assert layout.current_step <= 25

    def test_run_override_budget(self):
        layout = make_layout(chain("A", "B"))
        layout.run(max_iterations=3)
        assert layout.current_step == 3

    def test_initial_circle_placement(self):
        graph = chain("A", "B", "C")
        layout = make_layout(graph, max_iterations=0, initial_position_radius=10.0)
        layout.run()
        center = AREA.center
        for node in graph.nodes:
            assert math.hypot(node.x - center.x, node.y - center.y) == pytest.approx(10.0)
        # Chain order: A at angle 0, B one quarter turn further.
        assert graph.node("A").position() == pytest.approx((center.x + 10.0, center.y))
        assert graph.node("B").position() == pytest.approx((center.x, center.y + 10.0))

    def test_default_circle_is_inscribed_in_area(self):
        graph = Graph()
        for key in "ABCDEF":
            graph.add_node(key)
        make_layout(graph, max_iterations=0).run()
        center = AREA.center
        for node in graph.nodes:
            assert math.hypot(node.x - center.x, node.y - center.y) == pytest.approx(300.0)
        assert inside(AREA, graph)

    def test_custom_initial_positions(self):
        def place(layout):
            for index, node in enumerate(layout.nodes):
                node.place(100.0 + 10 * index, 200.0)

        graph = chain("A", "B")
        make_layout(graph, initial_positions=place, max_iterations=0).run()
        assert graph.positions() == {"A": (100.0, 200.0), "B": (110.0, 200.0)}

    def test_seeded_random_placement_is_reproducible(self):
        first, second = chain("A", "B", "C", "D"), chain("A", "B", "C", "D")
        make_layout(first, initial_positions="random", seed=7, max_iterations=50).run()
        make_layout(second, initial_positions="random", seed=7, max_iterations=50).run()
        assert first.positions() == second.positions()

    def test_random_placement_within_area(self):
        graph = chain("A", "B", "C", "D", "E")
        make_layout(graph, initial_positions="random", seed=3, max_iterations=0).run()
        assert inside(AREA, graph)


class TestLiveSimulation:
    def test_run_only_arms_live_layout(self):
        layout = make_layout(chain("A", "B"), enable_simulation=True, max_iterations=20)
        assert layout.run() is SimulationState.Running
        assert layout.current_step == 0

    def test_tick_steps_once(self):
        layout = make_layout(chain("A", "B"), enable_simulation=True, max_iterations=20)
        layout.run()
        assert layout.tick() is True
        assert layout.current_step == 1

    def test_ticks_until_converged(self):
        frames = []
        layout = make_layout(chain("A", "B"), enable_simulation=True, max_iterations=20)
        layout.on_frame = frames.append
        layout.run()
        while layout.tick():
            pass
        assert layout.state is SimulationState.Converged
        assert len(frames) == layout.current_step
        assert layout.current_step <= 20

    def test_frames_yield_every_iteration(self):
        layout = make_layout(chain("A", "B", "C"), enable_simulation=True, max_iterations=15)
        count = sum(1 for _ in layout.frames())
        assert count == layout.current_step
        assert layout.state is SimulationState.Converged

    def test_frames_without_live_simulation_yield_final_state(self):
        layout = make_layout(chain("A", "B"), max_iterations=10)
        frames = list(layout.frames())
        assert frames == [layout]
        assert layout.state is SimulationState.Converged

    def test_stop_keeps_last_positions(self):
        finished = []
        graph = chain("A", "B", "C")
        layout = make_layout(graph, enable_simulation=True, max_iterations=100)
        layout.on_finish = lambda lay, state: finished.append(state)
        layout.run()
        for _ in range(3):
            layout.tick()
        layout.stop()
        snapshot = graph.positions()
        assert layout.state is SimulationState.Stopped
        assert layout.tick() is False
        assert graph.positions() == snapshot
        assert finished == [SimulationState.Stopped]

    def test_stop_when_idle_is_noop(self):
        layout = make_layout(Graph())
        layout.stop()
        assert layout.state is SimulationState.Idle


class TestReentrancy:
    def test_step_inside_step_is_rejected(self):
        holder = {}

        def meddling(d, k):
            holder["layout"].step()
            return 0.0

        layout = make_layout(chain("A", "B"), repulsive_force=meddling)
        holder["layout"] = layout
        with pytest.raises(SimulationBusyError):
            layout.run()
        # The guard is released once the failed iteration unwinds.
        assert layout._stepping is False

    def test_run_inside_step_is_rejected(self):
        holder = {}

        def meddling(d, k):
            holder["layout"].run()
            return 0.0

        layout = make_layout(chain("A", "B"), repulsive_force=meddling)
        holder["layout"] = layout
        with pytest.raises(SimulationBusyError):
            layout.run()


# ─── Staged changes ───────────────────────────────────────────────────────────


class TestStagedChanges:
    def test_area_change_applies_at_next_iteration(self):
        graph = chain("A", "B", "C")
        layout = make_layout(graph, enable_simulation=True, max_iterations=50)
        layout.run()
        layout.tick()
        layout.set_area(0.0, 0.0, 100.0, 100.0)
        assert layout.area == AREA
        layout.tick()
        assert layout.area == Area(0.0, 0.0, 100.0, 100.0)
        assert inside(layout.area, graph)

    def test_graph_added_between_iterations(self):
        first, second = chain("A", "B"), chain("C", "D", name="other")
        layout = make_layout(first, enable_simulation=True, max_iterations=50)
        layout.run()
        layout.tick()
        layout.add_graph(second)
        assert len(layout.nodes) == 2
        layout.tick()
        assert len(layout.nodes) == 4
        assert all(node.placed for node in second.nodes)

    def test_removed_node_leaves_simulation(self):
        graph = chain("A", "B", "C")
        layout = make_layout(graph, max_iterations=20)
        layout.run()
        layout.remove_node(graph.node("B"))
        layout.run()
        assert {node.key for node in layout.nodes} == {"A", "C"}
        assert layout.links == []

    def test_remove_link_keeps_nodes(self):
        graph = chain("A", "B", "C")
        layout = make_layout(graph, max_iterations=20)
        layout.run()
        layout.remove_link(graph.link("A", "B"))
        layout.run()
        assert len(layout.nodes) == 3
        assert [link.key for link in layout.links] == [("B", "C")]

    def test_remove_foreign_node_is_ignored(self):
        layout = make_layout(chain("A", "B"), max_iterations=5)
        stranger = chain("X", "Y", name="stranger")
        layout.remove_node(stranger.node("X"))
        assert stranger.has_node("X")

    def test_readding_node_keeps_position(self):
        graph = chain("A", "B")
        layout = make_layout(graph, max_iterations=30)
        layout.run()
        before = graph.node("A").position()
        graph.add_node("A")
        assert graph.node("A").position() == before

    def test_reset_places_only_new_nodes(self):
        calls = []

        def place(layout):
            calls.append(len(layout.nodes))
            for index, node in enumerate(layout.nodes):
                node.place(300.0 + 40 * index, 300.0)

        graph = chain("A", "B")
        layout = make_layout(graph, initial_positions=place, max_iterations=30)
        layout.run()
        graph.add_link("B", "C")
        assert layout.reset() is SimulationState.Converged
        assert calls == [2]
        assert graph.node("C").placed
        assert layout.initial_rendering is True

    def test_reset_extends_active_run(self):
        layout = make_layout(chain("A", "B"), enable_simulation=True, max_iterations=40)
        layout.run()
        for _ in range(5):
            layout.tick()
        layout.reset()
        assert layout.iterations_left == 40
        assert layout.current_step == 5
        assert layout.is_running

    def test_clear_forgets_graphs(self):
        layout = make_layout(chain("A", "B"), max_iterations=5)
        layout.run()
        layout.clear()
        assert layout.nodes == []
        assert layout.state is SimulationState.Idle


# ─── Layout quality ───────────────────────────────────────────────────────────


class TestConvergence:
    @pytest.mark.parametrize("integration", ["euler", "verlet"])
    def test_two_linked_nodes_settle_at_link_length(self, integration):
        graph = chain("A", "B")
        make_layout(graph, integration=integration, link_length=50).run()
        assert dist(graph, "A", "B") == pytest.approx(50.0, abs=2.5)

    def test_chain_spreads_evenly(self):
        graph = chain("A", "B", "C")
        make_layout(graph, integration="euler", link_length=50, max_iterations=500).run()
        ab, bc, ac = dist(graph, "A", "B"), dist(graph, "B", "C"), dist(graph, "A", "C")
        assert 45.0 < ab < 68.0
        assert 45.0 < bc < 68.0
        assert abs(ab - bc) < 3.0
        assert ac > ab and ac > bc

    @pytest.mark.parametrize("integration", ["euler", "verlet"])
    def test_unlinked_nodes_spread_out(self, integration):
        graph = Graph()
        for key in "ABCDE":
            graph.add_node(key)
        make_layout(graph, integration=integration, link_length=50).run()
        assert min(pairwise(graph)) > 40.0
        assert inside(AREA, graph)

    def test_positions_stay_finite_and_inside(self):
        graph = Graph.from_links([(str(i), str((i * 7 + 3) % 30)) for i in range(30)])
        make_layout(graph, approximation="barnes-hut").run()
        assert all(math.isfinite(node.x) and math.isfinite(node.y) for node in graph.nodes)
        assert inside(AREA, graph)

    def test_barnes_hut_close_to_exhaustive(self):
        ring = [(str(i), str((i + 1) % 12)) for i in range(12)]
        exact, approximate = Graph.from_links(ring), Graph.from_links(ring)
        make_layout(exact, link_length=50, initial_position_radius=1.0).run()
        make_layout(approximate, link_length=50, approximation="barnes-hut", initial_position_radius=1.0).run()
        total_exact = sum(pairwise(exact))
        total_approximate = sum(pairwise(approximate))
        assert abs(total_approximate - total_exact) / total_exact < 0.25

    @pytest.mark.parametrize("integration", ["euler", "verlet"])
    @pytest.mark.parametrize("count", [3, 5])
    def test_barnes_hut_splits_coincident_start(self, integration, count):
        def stack(layout):
            for node in layout.nodes:
                node.place(100.0, 100.0)

        graph = Graph()
        for index in range(count):
            graph.add_node(f"N{index}")
        make_layout(
            graph,
            integration=integration,
            approximation="barnes-hut",
            initial_positions=stack,
            link_length=50,
            max_iterations=300,
        ).run()
        assert len({node.position() for node in graph.nodes}) == count
        assert inside(AREA, graph)


class TestPinnedNodes:
    def test_pinned_node_never_moves(self):
        graph = chain("A", "B", "C")
        layout = make_layout(graph, max_iterations=0)
        layout.run()
        pinned = graph.node("A")
        pinned.place(200.0, 150.0)
        pinned.fixed_position = FixedPosition(200.0, 150.0, 200.0, 150.0)
        others_before = {key: graph.node(key).position() for key in ("B", "C")}

        layout.run(max_iterations=200)
        assert pinned.position() == (200.0, 150.0)
        assert graph.node("B").position() != others_before["B"]


class TestMultipleGraphs:
    def test_graphs_repel_but_do_not_link(self):
        first, second = chain("A", "B", name="first"), chain("A", "B", name="second")
        layout = make_layout(first, second, link_length=50)
        layout.run()
        assert len(layout.nodes) == 4
        assert all(link.source.graph_name == link.target.graph_name for link in layout.links)
        cross = [
            math.hypot(a.x - b.x, a.y - b.y) for a in first.nodes for b in second.nodes
        ]
        assert min(cross) > 25.0

    def test_positions_per_graph(self):
        first, second = chain("A", "B", name="first"), chain("C", "D", name="second")
        layout = make_layout(first, second, max_iterations=10)
        layout.run()
        positions = layout.positions()
        assert set(positions) == {"first", "second"}
        assert set(positions["second"]) == {"C", "D"}


class TestPublicApi:
    def test_layout_graph(self):
        positions = layout_graph([("A", "B")], linkLength=50)
        (ax, ay), (bx, by) = positions["A"], positions["B"]
        assert math.hypot(ax - bx, ay - by) == pytest.approx(50.0, abs=2.5)

    def test_layout_graphs_live_config_runs_to_end(self):
        graph = chain("A", "B")
        layout = layout_graphs([graph], config=LayoutConfig(enable_simulation=True, max_iterations=30))
        assert layout.state is SimulationState.Converged
