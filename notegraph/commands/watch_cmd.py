"""Watch command - keep a rendered graph in sync with the vault."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from ..config import GraphConfig, find_config
from ..view import GraphView
from ..vault.loader import load_vault
from ..watcher import run_watch_loop
from .graph_cmd import render


def run_watch(
    vault_path: Path,
    *,
    out: Path,
    config: GraphConfig | None = None,
    fmt: str = "html",
    select: str | None = None,
    max_ticks: int = 300,
) -> int:
    """
    Re-render the graph to ``out`` every time the vault changes.

    One GraphView lives for the whole session, so notes that survive an
    edit keep their layout position and the selection is kept when its
    note still exists. Runs until interrupted (Ctrl+C).
    """
    console = Console(stderr=True)
    config = config or find_config(vault_path)
    view = GraphView(config)
    title = f"Note graph ({vault_path.name})"
    renders = 0

    def rebuild() -> None:
        nonlocal renders
        vault = load_vault(vault_path)
        view.set_notes(vault.notes)
        ticks = view.settle(max_ticks)
        if select and renders == 0:
            view.select_title(select)
        snap = view.snapshot()
        out.write_text(render(snap, fmt=fmt, title=title, config=config, ticks=ticks), encoding="utf-8")
        renders += 1
        timestamp = datetime.now().strftime("%H:%M:%S")
        console.print(
            f"[dim]{timestamp}[/dim] {len(snap.graph.nodes)} notes, {len(snap.graph.links)} links "
            f"-> {out}"
        )

    def on_change(changed: set[str]) -> None:
        # Our own output file may live inside the vault
        if {Path(p).resolve() for p in changed} <= {out.resolve()}:
            return
        try:
            rebuild()
        except ValueError as e:
            # A backup caught mid-write; the last good render stays in place
            console.print(f"[red]Rebuild failed, keeping previous graph:[/red] {escape(str(e))}")

    console.print(f"[bold]Watching[/bold] {vault_path}")
    console.print(f"  Output: {out} ({fmt})")
    console.print()
    console.print("[dim]Press Ctrl+C to stop watching[/dim]")
    console.print()

    rebuild()
    try:
        run_watch_loop(vault_path, on_change)
    except KeyboardInterrupt:
        console.print()
        console.print(f"[bold]Stopped.[/bold] Rendered {renders} times.")
    return 0
