"""Selection highlighting as a pure function of selection and adjacency."""

from __future__ import annotations

from dataclasses import dataclass

from ..config import GraphConfig
from ..models import KnowledgeGraph

NODE_STROKE = "#ffffff"
NEIGHBOR_STROKE = "#dcddde"


@dataclass(frozen=True)
class NodeStyle:
    opacity: float = 1.0
    raised: bool = False
    stroke: str = NODE_STROKE
    stroke_width: float = 1.5


@dataclass(frozen=True)
class LinkStyle:
    opacity: float
    color: str
    width: float
    raised: bool = False


@dataclass(frozen=True)
class Highlight:
    """Styling for every node (by id) and link (by index into ``graph.links``)."""

    selected: str | None
    highlighted: frozenset[str]
    nodes: dict[str, NodeStyle]
    links: tuple[LinkStyle, ...]
    node_order: tuple[str, ...]  # back to front
    link_order: tuple[int, ...]

    def label_opacity(self, node_id: str) -> float:
        style = self.nodes.get(node_id)
        return style.opacity if style else 1.0


def highlight_set(graph: KnowledgeGraph, selected: str | None) -> frozenset[str]:
    """The selected node plus its neighbors; empty without a selection."""
    if selected is None or selected not in graph:
        return frozenset()
    return frozenset(graph.neighbors(selected) | {selected})


def compute_highlight(
    graph: KnowledgeGraph, selected: str | None, config: GraphConfig | None = None
) -> Highlight:
    """Derive node and link styling for the current selection."""
    cfg = config or GraphConfig()
    default_link = LinkStyle(opacity=cfg.link_opacity, color=cfg.link_color, width=cfg.link_width)

    if selected is not None and selected not in graph:
        selected = None

    if selected is None:
        return Highlight(
            selected=None,
            highlighted=frozenset(),
            nodes={n.id: NodeStyle() for n in graph.nodes},
            links=tuple(default_link for _ in graph.links),
            node_order=tuple(n.id for n in graph.nodes),
            link_order=tuple(range(len(graph.links))),
        )

    lit = highlight_set(graph, selected)

    nodes: dict[str, NodeStyle] = {}
    for n in graph.nodes:
        if n.id == selected:
            nodes[n.id] = NodeStyle(opacity=1.0, raised=True, stroke=NODE_STROKE, stroke_width=3.0)
        elif n.id in lit:
            nodes[n.id] = NodeStyle(opacity=1.0, raised=True, stroke=NEIGHBOR_STROKE)
        else:
            nodes[n.id] = NodeStyle(opacity=cfg.dimmed_opacity)

    links: list[LinkStyle] = []
    for link in graph.links:
        if link.source in lit and link.target in lit:
            links.append(
                LinkStyle(opacity=1.0, color=cfg.accent_color, width=cfg.accent_width, raised=True)
            )
        else:
            links.append(
                LinkStyle(opacity=cfg.dimmed_opacity, color=cfg.link_color, width=cfg.link_width)
            )

    # Raised elements move to the front, keeping their relative order
    node_order = tuple(
        [n.id for n in graph.nodes if not nodes[n.id].raised]
        + [n.id for n in graph.nodes if nodes[n.id].raised]
    )
    link_order = tuple(
        [i for i, s in enumerate(links) if not s.raised] + [i for i, s in enumerate(links) if s.raised]
    )

    return Highlight(
        selected=selected,
        highlighted=lit,
        nodes=nodes,
        links=tuple(links),
        node_order=node_order,
        link_order=link_order,
    )
