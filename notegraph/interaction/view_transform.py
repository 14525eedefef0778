"""Pan/zoom transform between world (layout) and screen coordinates."""

from __future__ import annotations

from dataclasses import dataclass


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


@dataclass(frozen=True)
class ViewTransform:
    """``screen = world * k + (x, y)``."""

    x: float = 0.0
    y: float = 0.0
    k: float = 1.0

    def apply(self, wx: float, wy: float) -> tuple[float, float]:
        return wx * self.k + self.x, wy * self.k + self.y

    def invert(self, sx: float, sy: float) -> tuple[float, float]:
        return (sx - self.x) / self.k, (sy - self.y) / self.k

    def translated(self, dx: float, dy: float) -> "ViewTransform":
        """Shift by a screen-space delta."""
        return ViewTransform(self.x + dx, self.y + dy, self.k)

    def zoomed_at(self, k: float, sx: float, sy: float, min_k: float, max_k: float) -> "ViewTransform":
        """Rescale to ``k`` (clamped) keeping the world point under (sx, sy) fixed."""
        k = clamp(k, min_k, max_k)
        wx, wy = self.invert(sx, sy)
        return ViewTransform(sx - wx * k, sy - wy * k, k)

    @classmethod
    def centered_on(cls, wx: float, wy: float, k: float, width: float, height: float) -> "ViewTransform":
        """Transform placing world point (wx, wy) at the canvas center at scale k."""
        return cls(width / 2 - wx * k, height / 2 - wy * k, k)

    def to_svg(self) -> str:
        return f"translate({self.x:.2f},{self.y:.2f}) scale({self.k:.4f})"


def ease_cubic_in_out(t: float) -> float:
    t = clamp(t, 0.0, 1.0) * 2.0
    if t <= 1.0:
        return t * t * t / 2.0
    t -= 2.0
    return (t * t * t + 2.0) / 2.0


@dataclass(frozen=True)
class Transition:
    """Time-bounded interpolation between two transforms."""

    start: ViewTransform
    end: ViewTransform
    started_at: float
    duration: float

    def progress(self, now: float) -> float:
        if self.duration <= 0:
            return 1.0
        return clamp((now - self.started_at) / self.duration, 0.0, 1.0)

    def done(self, now: float) -> bool:
        return self.progress(now) >= 1.0

    def value_at(self, now: float) -> ViewTransform:
        t = self.progress(now)
        if t >= 1.0:
            return self.end
        e = ease_cubic_in_out(t)
        a, b = self.start, self.end
        return ViewTransform(
            a.x + (b.x - a.x) * e,
            a.y + (b.y - a.y) * e,
            a.k + (b.k - a.k) * e,
        )
