"""Force-directed layout simulation.

The simulation is the single owner of node positions and velocities.
Other components drive it through commands (``set_graph``, ``fix``,
``release``, ``reheat``) rather than writing positions directly.

Each tick:

1. ``alpha`` moves toward ``alpha_target`` by ``alpha_decay``.
2. Forces accumulate into velocities: many-body repulsion, link springs,
   centering and collision, all scaled by ``alpha``.
3. Free nodes integrate ``v *= 1 - velocity_decay; p += v``. Fixed nodes
   snap to their override and lose their velocity.

Once ``alpha`` drops below ``alpha_min`` the simulation stops ticking until
it is perturbed again.
"""

from __future__ import annotations

import logging
import random

from ..config import GraphConfig
from ..models import GraphNode, KnowledgeGraph
from . import forces

logger = logging.getLogger(__name__)


class ForceSimulation:
    """Iterative layout over a :class:`KnowledgeGraph`."""

    def __init__(self, config: GraphConfig | None = None, graph: KnowledgeGraph | None = None):
        self.config = config or GraphConfig()
        self.alpha = 1.0
        self.alpha_target = 0.0
        self.running = False
        self.ticks = 0
        self._rng = random.Random(self.config.seed)
        self._graph = KnowledgeGraph()
        self._nodes_by_id: dict[str, GraphNode] = {}
        self._counts: dict[str, int] = {}
        if graph is not None:
            self.set_graph(graph)

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def graph(self) -> KnowledgeGraph:
        return self._graph

    @property
    def nodes(self) -> list[GraphNode]:
        return self._graph.nodes

    @property
    def converged(self) -> bool:
        return self.alpha < self.config.alpha_min

    def node(self, node_id: str) -> GraphNode | None:
        return self._nodes_by_id.get(node_id)

    def position(self, node_id: str) -> tuple[float, float] | None:
        node = self._nodes_by_id.get(node_id)
        return (node.x, node.y) if node is not None else None

    def positions(self) -> dict[str, tuple[float, float]]:
        return {n.id: (n.x, n.y) for n in self._graph.nodes}

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def set_graph(self, graph: KnowledgeGraph) -> None:
        """Replace the node/link set, keeping known nodes where they were.

        Nodes whose id existed before inherit position, velocity and any
        fixed override. New nodes start near the canvas center at a
        seeded offset derived from their id. The simulation is reheated.
        """
        previous = self._nodes_by_id
        cx, cy = self.config.center
        spread = self.config.initial_spread
        added = 0
        for node in graph.nodes:
            old = previous.get(node.id)
            if old is not None:
                node.x, node.y = old.x, old.y
                node.vx, node.vy = old.vx, old.vy
                node.fx, node.fy = old.fx, old.fy
                continue
            rng = random.Random(f"{self.config.seed}:{node.id}")
            node.x = cx + (rng.random() - 0.5) * 2.0 * spread
            node.y = cy + (rng.random() - 0.5) * 2.0 * spread
            node.vx = node.vy = 0.0
            node.fx = node.fy = None
            added += 1

        self._graph = graph
        self._nodes_by_id = {node.id: node for node in graph.nodes}
        self._counts = forces.link_counts(graph.links)
        logger.debug(
            "Layout graph replaced: %d nodes (%d new), %d links",
            len(graph.nodes),
            added,
            len(graph.links),
        )
        self.reheat()

    def fix(self, node_id: str, x: float, y: float) -> bool:
        """Pin a node at (x, y) until released. Returns False for unknown ids."""
        node = self._nodes_by_id.get(node_id)
        if node is None:
            return False
        node.fx, node.fy = x, y
        return True

    def release(self, node_id: str) -> bool:
        """Drop a node's fixed override so forces move it again."""
        node = self._nodes_by_id.get(node_id)
        if node is None:
            return False
        node.fx = node.fy = None
        return True

    def reheat(self, alpha: float = 1.0) -> None:
        """Raise alpha to at least ``alpha`` and resume ticking."""
        self.alpha = max(self.alpha, alpha)
        if not self.running:
            logger.debug("Simulation resumed at alpha=%.3f", self.alpha)
        self.running = True

    def set_alpha_target(self, target: float) -> None:
        self.alpha_target = target
        if target >= self.config.alpha_min:
            self.running = True

    # ------------------------------------------------------------------
    # Ticking
    # ------------------------------------------------------------------

    def tick(self, iterations: int = 1) -> None:
        """Advance the simulation unconditionally."""
        cfg = self.config
        cx, cy = cfg.center
        nodes = self._graph.nodes
        for _ in range(iterations):
            self.alpha += (self.alpha_target - self.alpha) * cfg.alpha_decay
            alpha = self.alpha

            forces.apply_many_body(nodes, strength=cfg.charge_strength, alpha=alpha, rng=self._rng)
            forces.apply_links(
                self._nodes_by_id,
                self._graph.links,
                self._counts,
                distance=cfg.link_distance,
                alpha=alpha,
                rng=self._rng,
            )
            forces.apply_center(nodes, cx=cx, cy=cy, strength=cfg.center_strength, alpha=alpha)
            forces.apply_collide(
                nodes,
                radius=cfg.collision_radius,
                strength=cfg.collision_strength,
                alpha=alpha,
                rng=self._rng,
            )

            keep = 1.0 - cfg.velocity_decay
            for node in nodes:
                if node.is_fixed:
                    node.x, node.y = node.fx, node.fy
                    node.vx = node.vy = 0.0
                else:
                    node.vx *= keep
                    node.vy *= keep
                    node.x += node.vx
                    node.y += node.vy
            self.ticks += 1

    def step(self) -> bool:
        """One scheduled tick; does nothing once converged.

        Returns True while the simulation is still running afterwards.
        """
        if not self.running:
            return False
        self.tick()
        if self.converged:
            self.running = False
            logger.debug("Simulation converged after %d ticks", self.ticks)
        return self.running

    def run_until_settled(self, max_ticks: int = 300) -> int:
        """Step until converged or ``max_ticks`` ticks ran. Returns ticks run."""
        count = 0
        while count < max_ticks and self.running:
            self.step()
            count += 1
        return count
