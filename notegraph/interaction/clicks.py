"""Single versus double click disambiguation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ClickKind(str, Enum):
    SINGLE = "single"
    DOUBLE = "double"


@dataclass(frozen=True)
class ClickEvent:
    kind: ClickKind
    node_id: str


class ClickTracker:
    """Two-state machine: idle, or armed with a pending single click.

    A click arms the tracker. A second click on the same node within
    ``window`` seconds upgrades it to a double click. Otherwise ``poll``
    reports the single click once the window has elapsed. A click on a
    different node while armed replaces the pending one. Time is passed
    in explicitly so callers can drive it from any clock.
    """

    def __init__(self, window: float):
        self.window = window
        self._pending: str | None = None
        self._armed_at = 0.0

    @property
    def armed(self) -> bool:
        return self._pending is not None

    @property
    def pending(self) -> str | None:
        return self._pending

    def press(self, node_id: str, now: float) -> ClickEvent | None:
        """Register a completed click. Returns a double-click event on upgrade."""
        if self._pending == node_id and now - self._armed_at <= self.window:
            self._pending = None
            return ClickEvent(ClickKind.DOUBLE, node_id)
        self._pending = node_id
        self._armed_at = now
        return None

    def poll(self, now: float) -> ClickEvent | None:
        """Fire the pending click as a single click once its window expired."""
        if self._pending is None or now - self._armed_at <= self.window:
            return None
        node_id = self._pending
        self._pending = None
        return ClickEvent(ClickKind.SINGLE, node_id)

    def cancel(self) -> None:
        self._pending = None
