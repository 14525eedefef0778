"""Force terms for the layout simulation.

Each force reads node positions and accumulates into node velocities
(centering translates positions directly). All magnitudes scale with the
simulation's current ``alpha``. Coincident points never divide by zero:
a seeded random unit vector stands in for the missing direction.
"""

from __future__ import annotations

import math
import random
from typing import Sequence

from ..models import GraphLink, GraphNode

# Many-body forces between nodes closer than this are capped
DISTANCE_MIN = 1.0


def jiggle(rng: random.Random) -> tuple[float, float]:
    """Random unit vector used as a direction for coincident points."""
    angle = rng.random() * 2.0 * math.pi
    return math.cos(angle), math.sin(angle)


def apply_many_body(
    nodes: Sequence[GraphNode], *, strength: float, alpha: float, rng: random.Random
) -> None:
    """Pairwise interaction falling off as 1/d; negative strength repels."""
    dmin2 = DISTANCE_MIN * DISTANCE_MIN
    count = len(nodes)
    for i in range(count):
        a = nodes[i]
        for j in range(i + 1, count):
            b = nodes[j]
            dx = b.x - a.x
            dy = b.y - a.y
            l2 = dx * dx + dy * dy
            if l2 == 0.0:
                dx, dy = jiggle(rng)
                l2 = 1.0
            w = strength * alpha / max(l2, dmin2)
            a.vx += dx * w
            a.vy += dy * w
            b.vx -= dx * w
            b.vy -= dy * w


def link_counts(links: Sequence[GraphLink]) -> dict[str, int]:
    """Number of non-self-loop links touching each node."""
    counts: dict[str, int] = {}
    for link in links:
        if link.is_self_loop:
            continue
        counts[link.source] = counts.get(link.source, 0) + 1
        counts[link.target] = counts.get(link.target, 0) + 1
    return counts


def apply_links(
    nodes_by_id: dict[str, GraphNode],
    links: Sequence[GraphLink],
    counts: dict[str, int],
    *,
    distance: float,
    alpha: float,
    rng: random.Random,
) -> None:
    """Spring each link toward its rest distance.

    The correction is split between both endpoints, weighted so that the
    less connected node moves more. Self-loops have zero length and no net
    effect, so they are skipped.
    """
    for link in links:
        if link.is_self_loop:
            continue
        source = nodes_by_id.get(link.source)
        target = nodes_by_id.get(link.target)
        if source is None or target is None:
            continue

        cs = counts.get(link.source, 1)
        ct = counts.get(link.target, 1)
        strength = 1.0 / min(cs, ct)
        bias = cs / (cs + ct)

        x = target.x + target.vx - source.x - source.vx
        y = target.y + target.vy - source.y - source.vy
        length = math.hypot(x, y)
        if length == 0.0:
            x, y = jiggle(rng)
            length = 1.0
        k = (length - distance) / length * alpha * strength
        x *= k
        y *= k
        target.vx -= x * bias
        target.vy -= y * bias
        source.vx += x * (1.0 - bias)
        source.vy += y * (1.0 - bias)


def apply_center(
    nodes: Sequence[GraphNode], *, cx: float, cy: float, strength: float, alpha: float
) -> None:
    """Translate free nodes so the centroid moves toward (cx, cy)."""
    if not nodes:
        return
    sx = sum(n.x for n in nodes) / len(nodes)
    sy = sum(n.y for n in nodes) / len(nodes)
    shift_x = (sx - cx) * strength * alpha
    shift_y = (sy - cy) * strength * alpha
    for node in nodes:
        if node.is_fixed:
            continue
        node.x -= shift_x
        node.y -= shift_y


def apply_collide(
    nodes: Sequence[GraphNode],
    *,
    radius: float,
    strength: float,
    alpha: float,
    rng: random.Random,
) -> None:
    """Nudge overlapping nodes apart (soft constraint).

    Two nodes overlap when their predicted centers are closer than
    ``2 * radius``. Each pair moves apart by a fraction of the overlap.
    """
    if radius <= 0:
        return
    r = 2.0 * radius
    r2 = r * r
    count = len(nodes)
    for i in range(count):
        a = nodes[i]
        ax = a.x + a.vx
        ay = a.y + a.vy
        for j in range(i + 1, count):
            b = nodes[j]
            x = ax - (b.x + b.vx)
            y = ay - (b.y + b.vy)
            l2 = x * x + y * y
            if l2 >= r2:
                continue
            if l2 == 0.0:
                x, y = jiggle(rng)
                l2 = 1.0
            length = math.sqrt(l2)
            k = (r - length) / length * strength * alpha
            x *= k
            y *= k
            # Equal radii: the correction is shared evenly
            a.vx += x * 0.5
            a.vy += y * 0.5
            b.vx -= x * 0.5
            b.vy -= y * 0.5
