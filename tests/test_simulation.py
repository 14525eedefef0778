import math
import random

import pytest

from notegraph.config import GraphConfig
from notegraph.layout import forces
from notegraph.layout.simulation import ForceSimulation
from notegraph.models import GraphNode, Note
from notegraph.vault.graph import build_graph


def _note(note_id: str, content: str = "") -> Note:
    return Note(id=note_id, title=note_id.upper(), content=content)


def _distance(sim: ForceSimulation, a: str, b: str) -> float:
    (ax, ay), (bx, by) = sim.position(a), sim.position(b)
    return math.hypot(ax - bx, ay - by)


def _place(sim: ForceSimulation, **positions: tuple[float, float]) -> None:
    for node_id, (x, y) in positions.items():
        node = sim.node(node_id)
        node.x, node.y = x, y


def _all_finite(sim: ForceSimulation) -> bool:
    return all(math.isfinite(v) for n in sim.nodes for v in (n.x, n.y, n.vx, n.vy))


def test_cycle_converges_and_stops() -> None:
    sim = ForceSimulation(graph=build_graph([_note("a", "[[B]]"), _note("b", "[[C]]"), _note("c", "[[A]]")]))
    assert sim.running

    ticks = sim.run_until_settled(1000)

    assert sim.converged
    assert not sim.running
    assert 290 <= ticks <= 310
    assert _all_finite(sim)


def test_step_is_a_no_op_after_convergence() -> None:
    sim = ForceSimulation(graph=build_graph([_note("a", "[[B]]"), _note("b")]))
    sim.run_until_settled(1000)
    before = sim.positions()

    assert sim.step() is False
    assert sim.positions() == before


def test_new_nodes_start_near_center() -> None:
    config = GraphConfig()
    sim = ForceSimulation(config, build_graph([_note("a"), _note("b"), _note("c")]))

    cx, cy = config.center
    for x, y in sim.positions().values():
        assert abs(x - cx) <= config.initial_spread
        assert abs(y - cy) <= config.initial_spread


def test_layout_is_deterministic_for_a_seed() -> None:
    notes = [_note("a", "[[B]] [[C]]"), _note("b", "[[C]]"), _note("c"), _note("d")]
    first = ForceSimulation(graph=build_graph(notes))
    second = ForceSimulation(graph=build_graph(notes))

    first.tick(50)
    second.tick(50)

    assert first.positions() == second.positions()


def test_coincident_nodes_separate_without_nan() -> None:
    sim = ForceSimulation(graph=build_graph([_note("a"), _note("b")]))
    _place(sim, a=(400.0, 300.0), b=(400.0, 300.0))

    sim.tick(10)

    assert _all_finite(sim)
    assert _distance(sim, "a", "b") > 0


def test_coincident_linked_nodes_stay_finite() -> None:
    sim = ForceSimulation(graph=build_graph([_note("a", "[[B]]"), _note("b")]))
    _place(sim, a=(10.0, 10.0), b=(10.0, 10.0))

    sim.tick(5)

    assert _all_finite(sim)


def test_self_loop_does_not_break_layout() -> None:
    sim = ForceSimulation(graph=build_graph([_note("a", "[[A]]"), _note("b")]))

    sim.tick(20)

    assert _all_finite(sim)


def test_repulsion_pushes_nodes_apart() -> None:
    config = GraphConfig(collision_radius=0.0)
    sim = ForceSimulation(config, build_graph([_note("a"), _note("b")]))
    _place(sim, a=(390.0, 300.0), b=(410.0, 300.0))

    sim.tick(10)

    assert _distance(sim, "a", "b") > 20.0


def test_link_spring_approaches_rest_distance() -> None:
    config = GraphConfig(charge_strength=0.0, collision_radius=0.0)
    sim = ForceSimulation(config, build_graph([_note("a", "[[B]]"), _note("b")]))
    _place(sim, a=(200.0, 300.0), b=(600.0, 300.0))

    sim.tick()
    assert _distance(sim, "a", "b") < 400.0

    sim.run_until_settled(1000)
    assert abs(_distance(sim, "a", "b") - config.link_distance) < 1.0


def test_centering_moves_graph_toward_center() -> None:
    config = GraphConfig(charge_strength=0.0, collision_radius=0.0)
    sim = ForceSimulation(config, build_graph([_note("a")]))
    cx, cy = config.center
    _place(sim, a=(cx + 50.0, cy))

    sim.tick()

    x, y = sim.position("a")
    assert abs(x - cx) < 5.0
    assert y == cy


def test_collision_separates_overlapping_nodes() -> None:
    config = GraphConfig(charge_strength=0.0)
    sim = ForceSimulation(config, build_graph([_note("a"), _note("b")]))
    _place(sim, a=(395.0, 300.0), b=(405.0, 300.0))

    sim.tick(30)

    assert _distance(sim, "a", "b") > 10.0


def test_fixed_node_holds_its_position() -> None:
    sim = ForceSimulation(graph=build_graph([_note("a", "[[B]]"), _note("b"), _note("c")]))

    assert sim.fix("a", 500.0, 500.0)
    sim.tick(5)

    node = sim.node("a")
    assert (node.x, node.y) == (500.0, 500.0)
    assert (node.vx, node.vy) == (0.0, 0.0)


def test_released_node_is_free_again() -> None:
    sim = ForceSimulation(graph=build_graph([_note("a", "[[B]]"), _note("b")]))
    sim.fix("a", 100.0, 100.0)
    sim.tick()

    assert sim.release("a")
    sim.tick(5)

    assert not sim.node("a").is_fixed
    assert sim.position("a") != (100.0, 100.0)


def test_commands_on_unknown_ids_return_false() -> None:
    sim = ForceSimulation(graph=build_graph([_note("a")]))

    assert sim.fix("missing", 0.0, 0.0) is False
    assert sim.release("missing") is False
    assert sim.position("missing") is None


def test_set_graph_preserves_existing_positions() -> None:
    sim = ForceSimulation(graph=build_graph([_note("a", "[[B]]"), _note("b")]))
    sim.run_until_settled(1000)
    before = sim.positions()

    sim.set_graph(build_graph([_note("a", "[[B]]"), _note("b"), _note("c", "[[A]]")]))

    assert sim.position("a") == before["a"]
    assert sim.position("b") == before["b"]
    assert sim.running
    assert sim.alpha == 1.0


def test_set_graph_keeps_fixed_override() -> None:
    sim = ForceSimulation(graph=build_graph([_note("a"), _note("b")]))
    sim.fix("a", 42.0, 24.0)

    sim.set_graph(build_graph([_note("a"), _note("b"), _note("c")]))

    node = sim.node("a")
    assert (node.fx, node.fy) == (42.0, 24.0)


def test_alpha_target_keeps_simulation_warm() -> None:
    sim = ForceSimulation(graph=build_graph([_note("a", "[[B]]"), _note("b")]))
    sim.run_until_settled(1000)
    assert not sim.running

    sim.set_alpha_target(0.3)
    sim.reheat(0.3)
    sim.tick(500)

    assert sim.running
    assert abs(sim.alpha - 0.3) < 1e-3


def test_empty_graph_settles() -> None:
    sim = ForceSimulation(graph=build_graph([]))

    sim.run_until_settled(1000)

    assert sim.converged
    assert sim.positions() == {}


def test_repulsion_falls_off_as_inverse_distance() -> None:
    near = [GraphNode("a", "A"), GraphNode("b", "B", x=10.0)]
    far = [GraphNode("a", "A"), GraphNode("b", "B", x=20.0)]

    for pair in (near, far):
        forces.apply_many_body(pair, strength=-300.0, alpha=1.0, rng=random.Random(0))

    assert near[0].vx < 0 < near[1].vx
    assert near[0].vx == pytest.approx(2 * far[0].vx)
