"""Tag and link reports over a note set."""

from __future__ import annotations

import json
from collections import Counter
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..vault.graph import build_graph
from ..vault.loader import load_vault
from ..vault.parser import extract_tags


def run_tags(vault_path: Path, *, output_json: bool = False, top: int = 50) -> int:
    """Count tag occurrences across all note bodies."""
    vault = load_vault(vault_path)

    counts: Counter[str] = Counter()
    notes_per_tag: dict[str, set[str]] = {}
    for note in vault.notes:
        for tag in extract_tags(note.content):
            counts[tag] += 1
            notes_per_tag.setdefault(tag, set()).add(note.id)

    rows = [
        {"tag": tag, "count": n, "notes": len(notes_per_tag[tag])}
        for tag, n in sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
    ][: max(0, top)]

    if output_json:
        print(json.dumps({"tags": rows}, indent=2))
        return 0

    console = Console()
    t = Table(title="Tags", show_header=True, header_style="bold")
    t.add_column("Tag", style="cyan", no_wrap=True)
    t.add_column("Uses", justify="right")
    t.add_column("Notes", justify="right")
    for r in rows:
        t.add_row(f"#{r['tag']}", str(r["count"]), str(r["notes"]))
    console.print(t)
    return 0


def run_links(vault_path: Path, *, output_json: bool = False, fail_on_unresolved: bool = False) -> int:
    """Report references that do not resolve to any note title."""
    vault = load_vault(vault_path)
    graph = build_graph(vault.notes)

    titles = {n.id: n.title for n in graph.nodes}
    rows = [
        {"note": titles.get(note_id, note_id), "reference": ref}
        for note_id, refs in graph.unresolved.items()
        for ref in refs
    ]

    if output_json:
        print(json.dumps({"resolved": len(graph.links), "unresolved": rows}, indent=2))
    else:
        console = Console()
        console.print(f"[bold]{len(graph.links)}[/bold] resolved references")
        if rows:
            t = Table(title="Unresolved references", show_header=True, header_style="bold")
            t.add_column("Note", style="cyan")
            t.add_column("Reference", style="yellow")
            for r in rows:
                t.add_row(escape(r["note"]), escape(f"[[{r['reference']}]]"))
            console.print(t)
        else:
            console.print("[green]All references resolve.[/green]")

    return 1 if fail_on_unresolved and rows else 0
