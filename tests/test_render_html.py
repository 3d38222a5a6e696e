import pytest

from mermaid_gantt.render_html import new_diagram_id, render_html, write_html


def test_new_diagram_ids_are_unique():
    ids = {new_diagram_id() for _ in range(50)}

    assert len(ids) == 50
    assert all(diagram_id.startswith("mermaid-") for diagram_id in ids)


def test_page_embeds_chart_and_id():
    page = render_html("gantt\n    section A", title="Plan <1>", diagram_id="chart-1")

    assert '"gantt\\n    section A"' in page
    assert 'mermaid.render("chart-1", chart)' in page
    assert "<title>Plan &lt;1&gt;</title>" in page
    assert '"securityLevel": "strict"' in page


def test_script_end_tag_in_chart_is_escaped():
    page = render_html("gantt\n    title </script><b>", diagram_id="chart-1")

    assert "</script><b>" not in page
    assert "<\\/script>" in page


def test_rejects_unsafe_diagram_id():
    with pytest.raises(ValueError):
        render_html("gantt", diagram_id='x"><script>')


def test_write_html_creates_parent_dirs(tmp_path):
    out_file = tmp_path / "nested" / "chart.html"

    written = write_html(str(out_file), "gantt", title="Plan")

    assert written == out_file.resolve()
    assert "<h1>Plan</h1>" in out_file.read_text(encoding="utf-8")
