"""Reference graph construction from a note set."""

from __future__ import annotations

import logging
from typing import Iterable

from ..models import GraphLink, GraphNode, KnowledgeGraph, Note, category_for_folder
from .parser import extract_links

logger = logging.getLogger(__name__)


def title_index(notes: Iterable[Note]) -> dict[str, str]:
    """Map casefolded titles to note ids.

    When two notes share a title, the later note in iteration order wins.
    """
    index: dict[str, str] = {}
    for note in notes:
        key = note.title.casefold()
        if key in index and index[key] != note.id:
            logger.debug("Duplicate title %r: %s replaces %s", note.title, note.id, index[key])
        index[key] = note.id
    return index


def build_graph(notes: Iterable[Note]) -> KnowledgeGraph:
    """Derive nodes, links and the adjacency index from a note set.

    Every reference occurrence produces its own link, so a note mentioning
    the same title twice yields two parallel links. References that do not
    resolve to a note are recorded in ``unresolved`` and never become nodes.
    """
    # Later duplicates of an id replace earlier ones, keeping first position
    by_id: dict[str, Note] = {}
    for note in notes:
        by_id[note.id] = note
    # Only surviving notes own titles
    titles = title_index(by_id.values())

    links: list[GraphLink] = []
    unresolved: dict[str, list[str]] = {}
    for note in by_id.values():
        for ref in extract_links(note.content):
            target = titles.get(ref.casefold())
            if target is None:
                unresolved.setdefault(note.id, []).append(ref)
                continue
            links.append(GraphLink(source=note.id, target=target))

    nodes = [
        GraphNode(id=note.id, title=note.title, category=category_for_folder(note.folder))
        for note in by_id.values()
    ]

    adjacency: dict[str, set[str]] = {node.id: set() for node in nodes}
    for link in links:
        adjacency[link.source].add(link.target)
        adjacency[link.target].add(link.source)

    logger.debug(
        "Built graph: %d nodes, %d links, %d unresolved references",
        len(nodes),
        len(links),
        sum(len(v) for v in unresolved.values()),
    )
    return KnowledgeGraph(
        nodes=nodes,
        links=links,
        adjacency=adjacency,
        titles=titles,
        unresolved=unresolved,
    )
