"""Graph view: single owner of the graph, its layout and interaction state."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Iterable

from .config import GraphConfig
from .interaction.controller import InteractionController, Mode
from .interaction.highlight import Highlight, compute_highlight
from .interaction.view_transform import ViewTransform
from .layout.simulation import ForceSimulation
from .models import KnowledgeGraph, Note
from .vault.graph import build_graph

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Snapshot:
    """Everything needed to draw one frame."""

    graph: KnowledgeGraph
    positions: dict[str, tuple[float, float]]
    highlight: Highlight
    transform: ViewTransform
    alpha: float
    mode: Mode


class GraphView:
    """Ties note-set changes, layout ticks and pointer input together.

    Every mutation (rebuild, tick, pointer event) runs under one lock so a
    reader never observes a half-replaced graph, even when note changes
    arrive from a file watcher thread.
    """

    def __init__(
        self,
        config: GraphConfig | None = None,
        *,
        on_open: Callable[[str], None] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config or GraphConfig()
        self._lock = threading.RLock()
        self.simulation = ForceSimulation(self.config)
        self.controller = InteractionController(
            self.simulation, self.config, on_open=on_open, clock=clock
        )
        self._highlight: Highlight | None = None
        self._highlight_key: tuple[int, str | None] | None = None
        self._generation = 0

    @property
    def graph(self) -> KnowledgeGraph:
        return self.simulation.graph

    @property
    def selection(self) -> str | None:
        return self.controller.selection

    # ------------------------------------------------------------------
    # Note set
    # ------------------------------------------------------------------

    def set_notes(self, notes: Iterable[Note]) -> KnowledgeGraph:
        """Replace the whole note set and rebuild the graph."""
        graph = build_graph(notes)
        with self._lock:
            self.simulation.set_graph(graph)
            self.controller.sync_graph()
            self._generation += 1
        logger.info("Graph rebuilt: %d nodes, %d links", len(graph.nodes), len(graph.links))
        return graph

    # ------------------------------------------------------------------
    # Frames
    # ------------------------------------------------------------------

    def frame(self) -> bool:
        """Advance one display frame. Returns True while anything is still moving."""
        with self._lock:
            running = self.simulation.step()
            animating = self.controller.update()
            return running or animating or self.controller.pending_click is not None

    def settle(self, max_ticks: int = 300) -> int:
        with self._lock:
            return self.simulation.run_until_settled(max_ticks)

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def pointer_down(self, sx: float, sy: float) -> None:
        with self._lock:
            self.controller.pointer_down(sx, sy)

    def pointer_move(self, sx: float, sy: float) -> None:
        with self._lock:
            self.controller.pointer_move(sx, sy)

    def pointer_up(self, sx: float, sy: float) -> None:
        with self._lock:
            self.controller.pointer_up(sx, sy)

    def wheel(self, delta_y: float, sx: float, sy: float) -> None:
        with self._lock:
            self.controller.wheel(delta_y, sx, sy)

    def select(self, node_id: str | None) -> None:
        with self._lock:
            self.controller.select(node_id)

    def select_title(self, title: str) -> str | None:
        """Select a note by title (case-insensitive). Returns the selected id."""
        with self._lock:
            node_id = self.graph.resolve(title)
            self.controller.select(node_id)
            return self.controller.selection

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    @property
    def highlight(self) -> Highlight:
        """Current highlight, recomputed only when graph or selection changed."""
        with self._lock:
            key = (self._generation, self.controller.selection)
            if self._highlight is None or key != self._highlight_key:
                self._highlight = compute_highlight(self.graph, self.controller.selection, self.config)
                self._highlight_key = key
            return self._highlight

    def snapshot(self) -> Snapshot:
        with self._lock:
            return Snapshot(
                graph=self.graph,
                positions=self.simulation.positions(),
                highlight=self.highlight,
                transform=self.controller.transform,
                alpha=self.simulation.alpha,
                mode=self.controller.mode,
            )
