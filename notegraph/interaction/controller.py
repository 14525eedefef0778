"""Pointer interaction over the graph view.

Modes are ``idle``, ``panning`` and ``dragging``; selection is tracked
separately and survives mode changes. Pointer coordinates are in screen
space. The controller never moves nodes itself: it asks the simulation
to fix, move and release them.
"""

from __future__ import annotations

import logging
import math
import time
from enum import Enum
from typing import Callable

from ..config import GraphConfig
from ..layout.simulation import ForceSimulation
from .clicks import ClickKind, ClickTracker
from .highlight import highlight_set
from .view_transform import Transition, ViewTransform

logger = logging.getLogger(__name__)


class Mode(str, Enum):
    IDLE = "idle"
    PANNING = "panning"
    DRAGGING = "dragging"


class InteractionController:
    """State machine turning pointer events into view and layout commands."""

    def __init__(
        self,
        simulation: ForceSimulation,
        config: GraphConfig | None = None,
        *,
        on_open: Callable[[str], None] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.simulation = simulation
        self.config = config or simulation.config
        self.on_open = on_open
        self.clock = clock

        self.mode = Mode.IDLE
        self.selection: str | None = None
        self.drag_target: str | None = None
        self.transform = ViewTransform()
        self.transition: Transition | None = None

        self._clicks = ClickTracker(self.config.double_click_window)
        self._press: tuple[float, float] | None = None
        self._moved = False
        self._drag_offset = (0.0, 0.0)
        self._pan_origin = self.transform

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def animating(self) -> bool:
        return self.transition is not None

    @property
    def pending_click(self) -> str | None:
        return self._clicks.pending

    def hit_test(self, sx: float, sy: float) -> str | None:
        """Topmost node whose circle contains the screen point, if any.

        Stacking follows the draw order: graph order, with the selection
        and its neighbors raised above everything else.
        """
        wx, wy = self.transform.invert(sx, sy)
        radius = self.config.node_radius
        nodes = self.simulation.nodes
        raised = highlight_set(self.simulation.graph, self.selection)
        stacked = [n for n in nodes if n.id not in raised] + [n for n in nodes if n.id in raised]
        for node in reversed(stacked):
            if math.hypot(node.x - wx, node.y - wy) <= radius:
                return node.id
        return None

    # ------------------------------------------------------------------
    # Pointer events
    # ------------------------------------------------------------------

    def pointer_down(self, sx: float, sy: float) -> None:
        self.cancel_transition()
        if self.mode is not Mode.IDLE:
            # A second pointer while busy is ignored
            return
        self._press = (sx, sy)
        self._moved = False

        node_id = self.hit_test(sx, sy)
        if node_id is None:
            self.mode = Mode.PANNING
            self._pan_origin = self.transform
            return

        pos = self.simulation.position(node_id)
        if pos is None:
            return
        wx, wy = self.transform.invert(sx, sy)
        self._drag_offset = (wx - pos[0], wy - pos[1])
        self.mode = Mode.DRAGGING
        self.drag_target = node_id
        self.selection = node_id
        self.simulation.fix(node_id, pos[0], pos[1])
        self.simulation.set_alpha_target(self.config.alpha_drag_target)
        self.simulation.reheat(self.config.alpha_drag_target)
        logger.debug("Drag started on %s", node_id)

    def pointer_move(self, sx: float, sy: float) -> None:
        if self._press is None:
            return
        px, py = self._press
        if not self._moved and math.hypot(sx - px, sy - py) > self.config.click_tolerance:
            self._moved = True
            self._clicks.cancel()

        if self.mode is Mode.PANNING:
            self.transform = self._pan_origin.translated(sx - px, sy - py)
        elif self.mode is Mode.DRAGGING and self.drag_target is not None:
            wx, wy = self.transform.invert(sx, sy)
            ox, oy = self._drag_offset
            self.simulation.fix(self.drag_target, wx - ox, wy - oy)

    def pointer_up(self, sx: float, sy: float) -> None:
        if self._press is None:
            return
        self.pointer_move(sx, sy)
        clicked = not self._moved

        if self.mode is Mode.DRAGGING and self.drag_target is not None:
            node_id = self.drag_target
            self.simulation.release(node_id)
            self.simulation.set_alpha_target(0.0)
            self.drag_target = None
            logger.debug("Drag ended on %s", node_id)
            if clicked:
                self._node_clicked(node_id)
        elif self.mode is Mode.PANNING and clicked:
            self._clicks.cancel()
            self.selection = None

        self.mode = Mode.IDLE
        self._press = None

    def wheel(self, delta_y: float, sx: float, sy: float) -> None:
        """Zoom around the pointer; positive ``delta_y`` zooms out."""
        self.cancel_transition()
        factor = 2.0 ** (-delta_y * self.config.wheel_sensitivity)
        self.zoom_to(self.transform.k * factor, sx, sy)

    def zoom_to(self, k: float, sx: float | None = None, sy: float | None = None) -> None:
        """Set the zoom level (clamped) around a screen point, default the canvas center."""
        cx, cy = self.config.center
        self.transform = self.transform.zoomed_at(
            k,
            cx if sx is None else sx,
            cy if sy is None else sy,
            self.config.min_zoom,
            self.config.max_zoom,
        )

    # ------------------------------------------------------------------
    # Selection and time
    # ------------------------------------------------------------------

    def select(self, node_id: str | None) -> None:
        if node_id is not None and self.simulation.node(node_id) is None:
            node_id = None
        self.selection = node_id

    def clear_selection(self) -> None:
        self.selection = None

    def recenter_on(self, node_id: str) -> bool:
        """Start an animated recentre on a node at the configured zoom."""
        pos = self.simulation.position(node_id)
        if pos is None:
            return False
        target = ViewTransform.centered_on(
            pos[0], pos[1], self.config.recenter_zoom, self.config.width, self.config.height
        )
        self.transition = Transition(
            start=self.transform,
            end=target,
            started_at=self.clock(),
            duration=self.config.recenter_duration,
        )
        return True

    def cancel_transition(self) -> None:
        """Stop an in-flight recentre where it currently is."""
        if self.transition is not None:
            self.transform = self.transition.value_at(self.clock())
            self.transition = None

    def update(self) -> bool:
        """Advance timers and transitions to the current clock time.

        Returns True while a transition is still animating.
        """
        now = self.clock()
        fired = self._clicks.poll(now)
        if fired is not None and fired.kind is ClickKind.SINGLE and self.mode is Mode.IDLE:
            self.recenter_on(fired.node_id)

        if self.transition is not None:
            self.transform = self.transition.value_at(now)
            if self.transition.done(now):
                self.transition = None
        return self.transition is not None

    def sync_graph(self) -> None:
        """Drop selection, drag and pending click state for nodes that no longer exist."""
        sim = self.simulation
        if self.selection is not None and sim.node(self.selection) is None:
            self.selection = None
        if self.drag_target is not None and sim.node(self.drag_target) is None:
            self.drag_target = None
            self.mode = Mode.IDLE
            self._press = None
            sim.set_alpha_target(0.0)
        if self._clicks.pending is not None and sim.node(self._clicks.pending) is None:
            self._clicks.cancel()

    def _node_clicked(self, node_id: str) -> None:
        event = self._clicks.press(node_id, self.clock())
        if event is not None and event.kind is ClickKind.DOUBLE:
            logger.debug("Open requested for %s", node_id)
            if self.on_open is not None:
                self.on_open(node_id)
