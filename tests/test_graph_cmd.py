import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from notegraph.cli import cli
from notegraph.commands.graph_cmd import render, run_graph
from notegraph.config import GraphConfig
from notegraph.models import Note
from notegraph.view import GraphView


def test_graph_json_with_selection(fixture_vault_path: Path, tmp_path: Path) -> None:
    out = tmp_path / "graph.json"

    assert run_graph(fixture_vault_path, fmt="json", out=out, select="welcome") == 0

    payload = json.loads(out.read_text(encoding="utf-8"))
    assert payload["node_count"] == 4
    assert payload["edge_count"] == 4
    assert payload["selected"] == "Inbox/welcome"
    assert payload["unresolved"] == {"Projects/roadmap": ["Nope"]}
    assert payload["adjacency"]["loose"] == []

    nodes = {n["id"]: n for n in payload["nodes"]}
    assert nodes["loose"]["highlighted"] is False
    assert nodes["loose"]["opacity"] == GraphConfig().dimmed_opacity
    assert nodes["Projects/roadmap"]["highlighted"] is True
    assert nodes["Projects/roadmap"]["category"] == "project"
    assert all(link["color"] == GraphConfig().accent_color for link in payload["links"])


def test_graph_unknown_selection_still_renders(fixture_vault_path: Path, tmp_path: Path) -> None:
    out = tmp_path / "graph.json"

    assert run_graph(fixture_vault_path, fmt="json", out=out, select="missing") == 0

    payload = json.loads(out.read_text(encoding="utf-8"))
    assert payload["selected"] is None
    assert all(n["opacity"] == 1.0 for n in payload["nodes"])


def test_graph_svg_draws_nodes_and_links(fixture_vault_path: Path, tmp_path: Path) -> None:
    out = tmp_path / "graph.svg"

    run_graph(fixture_vault_path, fmt="svg", out=out)

    svg = out.read_text(encoding="utf-8")
    assert svg.startswith("<svg")
    assert 'data-id="loose"' in svg
    assert svg.count("<line ") == 4
    assert "<title>Reading List</title>" in svg


def test_graph_markdown_summary(fixture_vault_path: Path, tmp_path: Path) -> None:
    out = tmp_path / "graph.md"

    run_graph(fixture_vault_path, fmt="md", out=out)

    md = out.read_text(encoding="utf-8")
    assert "- Nodes: 4" in md
    assert "- Unresolved references: 1" in md
    assert "### Top in-degree" in md


def test_self_loop_renders_as_circle() -> None:
    view = GraphView()
    view.set_notes([Note(id="a", title="A", content="[[A]]")])
    view.settle()

    svg = render(view.snapshot(), fmt="svg", title="t", config=view.config)

    assert 'data-source="a" data-target="a"' in svg
    assert "<line " not in svg


def test_render_rejects_unknown_format() -> None:
    view = GraphView()
    with pytest.raises(ValueError, match="Unknown format"):
        render(view.snapshot(), fmt="dot", title="t", config=view.config)


def test_cli_graph_writes_html(fixture_vault_path: Path, tmp_path: Path) -> None:
    out = tmp_path / "graph.html"

    result = CliRunner().invoke(
        cli, ["-v", str(fixture_vault_path), "graph", "--format", "html", "--out", str(out)]
    )

    assert result.exit_code == 0, result.output
    html = out.read_text(encoding="utf-8")
    assert html.startswith("<!doctype html>")
    assert 'data-id="Inbox/welcome"' in html


def test_cli_rejects_invalid_config(fixture_vault_path: Path, tmp_path: Path) -> None:
    config = tmp_path / "bad.toml"
    config.write_text("[graph]\nmin_zoom = 5\nmax_zoom = 1\n", encoding="utf-8")

    result = CliRunner().invoke(
        cli, ["-v", str(fixture_vault_path), "--config", str(config), "graph", "--format", "json"]
    )

    assert result.exit_code != 0
    assert "Invalid configuration" in result.output


def test_cli_links_reports_unresolved(fixture_vault_path: Path) -> None:
    result = CliRunner().invoke(cli, ["-v", str(fixture_vault_path), "links", "--json"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["resolved"] == 4
    assert payload["unresolved"] == [{"note": "Roadmap", "reference": "Nope"}]


def test_cli_links_strict_fails_on_unresolved(fixture_vault_path: Path) -> None:
    result = CliRunner().invoke(cli, ["-v", str(fixture_vault_path), "links", "--json", "--strict"])

    assert result.exit_code == 1


def test_cli_tags_counts_body_tags(fixture_vault_path: Path) -> None:
    result = CliRunner().invoke(cli, ["-v", str(fixture_vault_path), "tags", "--json"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["tags"] == [
        {"tag": "books", "count": 2, "notes": 1},
        {"tag": "start", "count": 1, "notes": 1},
    ]


def test_cli_graph_from_backup(tmp_path: Path) -> None:
    backup = tmp_path / "backup.json"
    backup.write_text(
        json.dumps(
            {
                "notes": [
                    {"id": "1", "title": "One", "content": "[[Two]]", "folder": "Inbox"},
                    {"id": "2", "title": "Two", "content": "", "folder": "Projects"},
                ]
            }
        ),
        encoding="utf-8",
    )
    out = tmp_path / "graph.json"

    result = CliRunner().invoke(cli, ["-v", str(backup), "graph", "--format", "json", "--out", str(out)])

    assert result.exit_code == 0, result.output
    payload = json.loads(out.read_text(encoding="utf-8"))
    assert payload["adjacency"] == {"1": ["2"], "2": ["1"]}


@pytest.mark.parametrize("body", ["{not json", '{"notes": 5}', '{"notes": [], "folders": 3}'])
@pytest.mark.parametrize("command", [["graph", "--format", "json"], ["tags"], ["links"]])
def test_cli_reports_broken_backup(tmp_path: Path, body: str, command: list[str]) -> None:
    backup = tmp_path / "backup.json"
    backup.write_text(body, encoding="utf-8")

    result = CliRunner().invoke(cli, ["-v", str(backup), *command])

    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert "Invalid JSON backup" in result.output


def test_cli_watch_reports_broken_backup(tmp_path: Path) -> None:
    backup = tmp_path / "backup.json"
    backup.write_text("{not json", encoding="utf-8")

    result = CliRunner().invoke(cli, ["-v", str(backup), "watch", "--out", str(tmp_path / "g.json")])

    assert result.exit_code == 1
    assert "Invalid JSON backup" in result.output
