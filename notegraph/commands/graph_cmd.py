"""Graph command - lay out the note reference graph and render it."""

from __future__ import annotations

import html
import json
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..config import GraphConfig
from ..view import GraphView, Snapshot
from ..vault.loader import load_vault

CATEGORY_COLORS = {
    "inbox": "#facc15",
    "project": "#7c3aed",
    "other": "#3b82f6",
}
CATEGORY_LABELS = {
    "inbox": "Inbox",
    "other": "Notes",
    "project": "Projects",
}

BG = "#0f1115"
TEXT_COLOR = "#dcddde"
MARGIN = 60.0


def run_graph(
    vault_path: Path,
    *,
    config: GraphConfig | None = None,
    fmt: str = "md",
    out: Path | None = None,
    top: int = 25,
    select: str | None = None,
    max_ticks: int = 300,
) -> int:
    """Build the note graph, settle its layout and write it in the requested format."""
    console = Console(stderr=True)
    config = config or GraphConfig()

    vault = load_vault(vault_path)
    view = GraphView(config)
    view.set_notes(vault.notes)
    ticks = view.settle(max_ticks)

    if select:
        if view.select_title(select) is None:
            console.print(f"[yellow]No note titled {escape(repr(select))}; rendering without selection[/yellow]")

    snap = view.snapshot()
    title = f"Note graph ({vault_path.name})"

    if fmt == "rich":
        if out:
            rich_console = Console(record=True)
            _print_rich(snap, title=title, console=rich_console, top=top)
            out.write_text(rich_console.export_text(), encoding="utf-8")
            console.print(f"Wrote graph output to {out}", style="green")
        else:
            _print_rich(snap, title=title, console=Console(), top=top)
        return 0

    text = render(snap, fmt=fmt, title=title, config=config, top=top, ticks=ticks)

    if out:
        out.write_text(text, encoding="utf-8")
        console.print(f"Wrote graph output to {out}", style="green")
    else:
        print(text, end="" if text.endswith("\n") else "\n")

    return 0


def render(
    snap: Snapshot,
    *,
    fmt: str,
    title: str,
    config: GraphConfig,
    top: int = 25,
    ticks: int = 0,
) -> str:
    """Render a snapshot as md, json, svg or html text."""
    if fmt == "json":
        return json.dumps(_to_payload(snap, title=title, ticks=ticks), indent=2, sort_keys=True) + "\n"
    if fmt == "svg":
        return _to_svg(snap, title=title, config=config)
    if fmt == "html":
        return _wrap_html(_to_svg(snap, title=title, config=config), title=title, config=config)
    if fmt == "md":
        return _to_markdown(_summarize_graph(snap, title=title, top=top))
    raise ValueError(f"Unknown format: {fmt}")


def _summarize_graph(snap: Snapshot, *, title: str, top: int) -> dict:
    g = snap.graph

    rows = [
        {
            "name": n.title,
            "in_degree": g.in_degree(n.id),
            "out_degree": g.out_degree(n.id),
        }
        for n in g.nodes
    ]

    def top_list(key: str) -> list[dict]:
        ranked = sorted(rows, key=lambda r: (r[key], r["name"]), reverse=True)
        return ranked[: max(0, top)]

    return {
        "title": title,
        "node_count": len(g.nodes),
        "edge_count": len(g.links),
        "unresolved_count": sum(len(v) for v in g.unresolved.values()),
        "top_in_degree": top_list("in_degree"),
        "top_out_degree": top_list("out_degree"),
    }


def _to_payload(snap: Snapshot, *, title: str, ticks: int) -> dict:
    g = snap.graph
    hl = snap.highlight
    nodes = []
    for node in g.nodes:
        style = hl.nodes[node.id]
        x, y = snap.positions[node.id]
        nodes.append(
            {
                "id": node.id,
                "title": node.title,
                "category": node.category,
                "x": round(x, 2),
                "y": round(y, 2),
                "opacity": style.opacity,
                "highlighted": node.id in hl.highlighted,
            }
        )
    links = []
    for link, style in zip(g.links, hl.links):
        links.append(
            {
                "source": link.source,
                "target": link.target,
                "opacity": style.opacity,
                "color": style.color,
                "width": style.width,
            }
        )
    return {
        "title": title,
        "node_count": len(g.nodes),
        "edge_count": len(g.links),
        "alpha": round(snap.alpha, 6),
        "ticks": ticks,
        "selected": hl.selected,
        "nodes": nodes,
        "links": links,
        "adjacency": {k: sorted(v) for k, v in sorted(g.adjacency.items())},
        "unresolved": {k: list(v) for k, v in sorted(g.unresolved.items())},
    }


def _to_markdown(payload: dict) -> str:
    lines: list[str] = []
    lines.append(f"## {payload['title']}")
    lines.append("")
    lines.append(f"- Nodes: {payload['node_count']}")
    lines.append(f"- Edges: {payload['edge_count']}")
    lines.append(f"- Unresolved references: {payload['unresolved_count']}")
    lines.append("")

    def table(title: str, rows: list[dict]) -> None:
        lines.append(f"### {title}")
        lines.append("")
        lines.append("| Note | In-degree | Out-degree |")
        lines.append("|---|---:|---:|")
        for r in rows:
            lines.append(f"| `{r['name']}` | {r['in_degree']} | {r['out_degree']} |")
        lines.append("")

    table("Top in-degree", payload["top_in_degree"])
    table("Top out-degree", payload["top_out_degree"])

    return "\n".join(lines).rstrip() + "\n"


def _print_rich(snap: Snapshot, *, title: str, console: Console, top: int) -> None:
    payload = _summarize_graph(snap, title=title, top=top)
    console.print(f"[bold]{payload['title']}[/bold]")
    console.print(
        f"Nodes: {payload['node_count']}  Edges: {payload['edge_count']}  "
        f"Unresolved: {payload['unresolved_count']}"
    )
    console.print()

    def render_table(title: str, rows: list[dict]) -> None:
        t = Table(title=title, show_header=True, header_style="bold")
        t.add_column("Note", style="cyan", no_wrap=True)
        t.add_column("In", justify="right")
        t.add_column("Out", justify="right")
        for r in rows:
            t.add_row(escape(str(r["name"])), str(r["in_degree"]), str(r["out_degree"]))
        console.print(t)
        console.print()

    render_table("Top in-degree", payload["top_in_degree"])
    render_table("Top out-degree", payload["top_out_degree"])


def _bounds(positions: dict[str, tuple[float, float]], config: GraphConfig) -> tuple[float, float, float, float]:
    """World-space viewBox (x, y, width, height) around all nodes."""
    if not positions:
        return 0.0, 0.0, config.width, config.height
    xs = [p[0] for p in positions.values()]
    ys = [p[1] for p in positions.values()]
    x0, x1 = min(xs) - MARGIN, max(xs) + MARGIN
    y0, y1 = min(ys) - MARGIN, max(ys) + MARGIN
    return x0, y0, max(x1 - x0, 1.0), max(y1 - y0, 1.0)


def _to_svg(snap: Snapshot, *, title: str, config: GraphConfig) -> str:
    """Render the settled layout with the current highlight as a standalone SVG."""
    g = snap.graph
    hl = snap.highlight
    pos = snap.positions
    r = config.node_radius

    def esc(s: str) -> str:
        return html.escape(s, quote=True)

    vx, vy, vw, vh = _bounds(pos, config)
    parts: list[str] = []
    parts.append(
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{vw:.0f}" height="{vh:.0f}" '
        f'viewBox="{vx:.1f} {vy:.1f} {vw:.1f} {vh:.1f}" style="background:{BG}">'
    )
    parts.append(f"<title>{esc(title)}</title>")

    parts.append('<g class="links" stroke-linecap="round" fill="none">')
    for idx in hl.link_order:
        link = g.links[idx]
        style = hl.links[idx]
        x1, y1 = pos[link.source]
        x2, y2 = pos[link.target]
        common = (
            f'stroke="{style.color}" stroke-width="{style.width:.1f}" opacity="{style.opacity:.2f}" '
            f'data-source="{esc(link.source)}" data-target="{esc(link.target)}"'
        )
        if link.is_self_loop:
            parts.append(f'<circle cx="{x1 + r:.1f}" cy="{y1 - r:.1f}" r="{r:.1f}" {common}/>')
        else:
            parts.append(f'<line x1="{x1:.1f}" y1="{y1:.1f}" x2="{x2:.1f}" y2="{y2:.1f}" {common}/>')
    parts.append("</g>")

    nodes_by_id = {n.id: n for n in g.nodes}
    parts.append('<g class="nodes">')
    for node_id in hl.node_order:
        node = nodes_by_id[node_id]
        style = hl.nodes[node_id]
        x, y = pos[node_id]
        fill = CATEGORY_COLORS.get(node.category, CATEGORY_COLORS["other"])
        parts.append(
            f'<circle cx="{x:.1f}" cy="{y:.1f}" r="{r:.1f}" fill="{fill}" stroke="{style.stroke}" '
            f'stroke-width="{style.stroke_width:.1f}" opacity="{style.opacity:.2f}" data-id="{esc(node_id)}">'
            f"<title>{esc(node.title)}</title></circle>"
        )
    parts.append("</g>")

    parts.append('<g class="labels" font-family="Helvetica" font-size="10">')
    for node_id in hl.node_order:
        node = nodes_by_id[node_id]
        x, y = pos[node_id]
        parts.append(
            f'<text x="{x + 12:.1f}" y="{y + 3:.1f}" fill="{TEXT_COLOR}" '
            f'opacity="{hl.label_opacity(node_id):.2f}">{esc(node.title)}</text>'
        )
    parts.append("</g>")

    parts.append("</svg>")
    return "\n".join(parts) + "\n"


def _legend_html() -> str:
    items = []
    for category in ("inbox", "other", "project"):
        items.append(
            f'<span class="legend-item"><i style="background:{CATEGORY_COLORS[category]}"></i>'
            f"{CATEGORY_LABELS[category]}</span>"
        )
    return "".join(items)


def _wrap_html(svg: str, *, title: str, config: GraphConfig | None = None) -> str:
    """Wrap SVG in a standalone HTML page with pan and clamped zoom."""
    cfg = config or GraphConfig()
    t = html.escape(title, quote=True)
    return (
        "<!doctype html>\n"
        "<html>\n"
        "<head>\n"
        f"  <meta charset=\"utf-8\" />\n  <title>{t}</title>\n"
        "  <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\" />\n"
        "  <style>\n"
        "    html, body { height: 100%; }\n"
        f"    body {{ margin: 0; background: {BG}; color: {TEXT_COLOR}; font-family: system-ui, Helvetica, Arial; }}\n"
        "    .wrap { padding: 12px; height: 100vh; box-sizing: border-box; display: flex; flex-direction: column; }\n"
        "    .toolbar { display: flex; gap: 12px; align-items: center; margin: 0 0 10px 0; font-size: 12px; }\n"
        "    .legend-item { display: inline-flex; align-items: center; gap: 6px; margin-right: 10px; }\n"
        "    .legend-item i { width: 8px; height: 8px; border-radius: 50%; display: inline-block; }\n"
        "    .hint { color: #9aa4b2; }\n"
        "    .viewport { border: 1px solid #3a4154; border-radius: 10px; overflow: hidden; flex: 1; min-height: 0; }\n"
        "    svg { width: 100%; height: 100%; display: block; touch-action: none; user-select: none; }\n"
        "  </style>\n"
        "</head>\n"
        "<body>\n"
        "  <div class=\"wrap\">\n"
        "    <div class=\"toolbar\">\n"
        f"      {_legend_html()}\n"
        "      <span class=\"hint\">Drag to pan, scroll the wheel to zoom, double-click resets</span>\n"
        "    </div>\n"
        "    <div class=\"viewport\" id=\"viewport\">\n"
        f"{svg}\n"
        "    </div>\n"
        "  </div>\n"
        "  <script>\n"
        "    (function () {\n"
        "      const svg = document.querySelector('#viewport svg');\n"
        "      if (!svg) return;\n"
        f"      const MIN_ZOOM = {cfg.min_zoom}, MAX_ZOOM = {cfg.max_zoom}, SENSITIVITY = {cfg.wheel_sensitivity};\n"
        "      const vb = svg.viewBox.baseVal;\n"
        "      const home = { x: vb.x, y: vb.y, w: vb.width, h: vb.height };\n"
        "      let zoom = 1;\n"
        "\n"
        "      const toWorld = (clientX, clientY) => {\n"
        "        const rect = svg.getBoundingClientRect();\n"
        "        return {\n"
        "          x: vb.x + (clientX - rect.left) / rect.width * vb.width,\n"
        "          y: vb.y + (clientY - rect.top) / rect.height * vb.height,\n"
        "        };\n"
        "      };\n"
        "\n"
        "      const setZoom = (next, clientX, clientY) => {\n"
        "        next = Math.max(MIN_ZOOM, Math.min(MAX_ZOOM, next));\n"
        "        const p = toWorld(clientX, clientY);\n"
        "        const ratio = zoom / next;\n"
        "        vb.x = p.x - (p.x - vb.x) * ratio;\n"
        "        vb.y = p.y - (p.y - vb.y) * ratio;\n"
        "        vb.width = home.w / next;\n"
        "        vb.height = home.h / next;\n"
        "        zoom = next;\n"
        "      };\n"
        "\n"
        "      let pan = null;\n"
        "      svg.addEventListener('pointerdown', (e) => {\n"
        "        svg.setPointerCapture(e.pointerId);\n"
        "        pan = { x: e.clientX, y: e.clientY, vbX: vb.x, vbY: vb.y };\n"
        "      });\n"
        "      const endPan = () => { pan = null; };\n"
        "      svg.addEventListener('pointerup', endPan);\n"
        "      svg.addEventListener('pointercancel', endPan);\n"
        "      svg.addEventListener('pointermove', (e) => {\n"
        "        if (!pan) return;\n"
        "        const rect = svg.getBoundingClientRect();\n"
        "        vb.x = pan.vbX - (e.clientX - pan.x) * (vb.width / rect.width);\n"
        "        vb.y = pan.vbY - (e.clientY - pan.y) * (vb.height / rect.height);\n"
        "      });\n"
        "      svg.addEventListener('wheel', (e) => {\n"
        "        e.preventDefault();\n"
        "        setZoom(zoom * Math.pow(2, -e.deltaY * SENSITIVITY), e.clientX, e.clientY);\n"
        "      }, { passive: false });\n"
        "      svg.addEventListener('dblclick', () => {\n"
        "        vb.x = home.x; vb.y = home.y; vb.width = home.w; vb.height = home.h;\n"
        "        zoom = 1;\n"
        "      });\n"
        "    })();\n"
        "  </script>\n"
        "</body>\n"
        "</html>\n"
    )
