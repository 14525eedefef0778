"""Data models for notes and the derived reference graph."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

# Visual classes a note's folder maps onto
Category = Literal["inbox", "project", "other"]

CATEGORY_BY_FOLDER: dict[str, Category] = {
    "inbox": "inbox",
    "projects": "project",
}
DEFAULT_CATEGORY: Category = "other"


def category_for_folder(folder: str | None) -> Category:
    """Map a folder label onto one of the three visual classes."""
    return CATEGORY_BY_FOLDER.get((folder or "").strip().lower(), DEFAULT_CATEGORY)


@dataclass(frozen=True)
class Note:
    """A note as owned by the surrounding application (read-only here)."""

    id: str
    title: str
    content: str = ""
    folder: str = "Inbox"
    tags: tuple[str, ...] = ()
    created_at: int = 0  # epoch millis
    updated_at: int = 0


@dataclass
class GraphNode:
    """A note's node in the layout, with mutable simulation state."""

    id: str
    title: str
    category: Category = DEFAULT_CATEGORY
    x: float = 0.0
    y: float = 0.0
    vx: float = 0.0
    vy: float = 0.0
    fx: float | None = None  # fixed-position override, only while dragged
    fy: float | None = None

    @property
    def is_fixed(self) -> bool:
        return self.fx is not None and self.fy is not None


@dataclass(frozen=True)
class GraphLink:
    """`source`'s body references `target`'s title."""

    source: str
    target: str

    @property
    def is_self_loop(self) -> bool:
        return self.source == self.target


@dataclass
class KnowledgeGraph:
    """Nodes, links and the undirected adjacency index derived from a note set."""

    nodes: list[GraphNode] = field(default_factory=list)
    links: list[GraphLink] = field(default_factory=list)
    adjacency: dict[str, set[str]] = field(default_factory=dict)
    titles: dict[str, str] = field(default_factory=dict)  # casefolded title -> id
    unresolved: dict[str, list[str]] = field(default_factory=dict)  # id -> dangling refs

    def __post_init__(self) -> None:
        self._index = {node.id: i for i, node in enumerate(self.nodes)}

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._index

    def __len__(self) -> int:
        return len(self.nodes)

    def get(self, node_id: str) -> GraphNode | None:
        idx = self._index.get(node_id)
        return self.nodes[idx] if idx is not None else None

    def resolve(self, title: str) -> str | None:
        """Resolve a title (case-insensitive) to a node id."""
        return self.titles.get(title.casefold())

    def neighbors(self, node_id: str) -> set[str]:
        return self.adjacency.get(node_id, set())

    def out_degree(self, node_id: str) -> int:
        return sum(1 for link in self.links if link.source == node_id)

    def in_degree(self, node_id: str) -> int:
        return sum(1 for link in self.links if link.target == node_id)
