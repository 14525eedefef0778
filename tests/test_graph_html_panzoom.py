from notegraph.commands.graph_cmd import _wrap_html
from notegraph.config import GraphConfig


def test_graph_html_includes_panzoom_script() -> None:
    html = _wrap_html("<svg viewBox=\"0 0 10 10\"></svg>", title="t")
    assert "<svg" in html
    assert "Drag to pan" in html
    assert "wheel" in html


def test_graph_html_zoom_limits_follow_config() -> None:
    html = _wrap_html("<svg></svg>", title="t", config=GraphConfig(min_zoom=0.5, max_zoom=2.0))
    assert "MIN_ZOOM = 0.5" in html
    assert "MAX_ZOOM = 2.0" in html


def test_graph_html_escapes_title() -> None:
    html = _wrap_html("<svg></svg>", title="<b>notes</b>")
    assert "<title>&lt;b&gt;notes&lt;/b&gt;</title>" in html
