import re
import xml.etree.ElementTree as ET

from chart_models import Category, Chart
from conftest import make_task
from svg_export import render_svg

NS = "{http://www.w3.org/2000/svg}"


def _bars(svg: str):
    return re.findall(r'<rect x="([\d.]+)" y="([\d.]+)" width="([\d.]+)" height="([\d.]+)" fill="(#[0-9A-F]{6})" rx="4" opacity="0.8"/>', svg)


def test_svg_root_matches_canvas(sample_chart):
    svg = render_svg(sample_chart)
    root = ET.fromstring(svg)
    assert root.tag == f"{NS}svg"
    # 200 + 4*120 + 40 wide; 80 header + 35 band + 40 row + 40 padding high
    assert root.attrib["width"] == "720"
    assert root.attrib["height"] == "195"
    assert svg.startswith('<svg width="720" height="195" xmlns="http://www.w3.org/2000/svg"><defs><style>')
    assert svg.endswith("</svg>")


def test_svg_quarter_headers(sample_chart):
    svg = render_svg(sample_chart)
    labels = re.findall(r'class="header" text-anchor="middle">([^<]+)</text>', svg)
    assert labels == ["Q1 2024", "Q2 2024", "Q3 2024", "Q4 2024"]
    shades = re.findall(r'height="30" fill="(#[0-9a-f]+)" stroke="#ccc"', svg)
    assert shades == ["#e8e8e8", "#f5f5f5", "#e8e8e8", "#f5f5f5"]
    assert svg.count('<line x1=') == 4


def test_svg_bar_covers_columns_one_to_two(sample_chart):
    bars = _bars(render_svg(sample_chart))
    assert len(bars) == 1
    x, y, width, height, fill = bars[0]
    assert float(x) == 20 + 200 + 120 + 2
    assert float(width) == 2 * 120 - 4
    assert fill == "#2CA02C"


def test_svg_out_of_range_task_has_row_but_no_bar(sample_chart):
    cat = sample_chart.categories[0]
    outside = make_task("late", start=(2027, 1), end=(2027, 2), title="Future work")
    chart = sample_chart.model_copy(update={"categories": [cat.model_copy(update={"tasks": [outside]})]})
    svg = render_svg(chart)
    assert "Future work" in svg
    assert _bars(svg) == []
    assert 'stroke="#ddd" stroke-width="1"/>' in svg


def test_svg_wraps_long_category_name():
    name = "Customer Experience and Support Operations Excellence Program"
    chart = Chart(
        id="c",
        title="T",
        start_year=2024,
        start_quarter=1,
        end_year=2024,
        end_quarter=2,
        categories=[Category(id="cat", name=name, color="#FF0000")],
    )
    svg = render_svg(chart)
    root = ET.fromstring(svg)
    category_text = [t for t in root.iter(f"{NS}text") if t.attrib.get("class") == "category"][0]
    lines = [ts.text for ts in category_text.iter(f"{NS}tspan")]
    assert lines == ["Customer Experience and", "Support Operations Excellence", "Program"]
    # band height = 18 + 3 * 14
    assert f'width="200" height="60" fill="#FF0000" opacity="0.3"' in svg
    assert root.attrib["height"] == str(80 + 60 + 40)


def test_svg_task_description_lines():
    task = make_task("t", title="Ship it", description="Coordinate with support, marketing and sales teams")
    chart = Chart(
        id="c",
        title="T",
        start_year=2024,
        start_quarter=1,
        end_year=2024,
        end_quarter=1,
        categories=[Category(id="cat", name="Go", tasks=[task])],
    )
    root = ET.fromstring(render_svg(chart))
    desc = [t for t in root.iter(f"{NS}text") if t.attrib.get("class") == "desc"]
    assert len(desc) == 1
    assert [ts.text for ts in desc[0]] == ["Coordinate with support, marketing", "and sales teams"]


def test_svg_escapes_text():
    chart = Chart(
        id="c",
        title='R&D <"Q"> plan',
        start_year=2024,
        start_quarter=1,
        end_year=2024,
        end_quarter=1,
        categories=[Category(id="cat", name="A & B", tasks=[make_task("t", title="<script>")])],
    )
    svg = render_svg(chart)
    root = ET.fromstring(svg)
    assert "<script>" not in svg
    titles = [t.text for t in root.iter(f"{NS}text") if t.attrib.get("class") == "title"]
    assert titles == ['R&D <"Q"> plan']


def test_svg_is_deterministic(sample_chart):
    assert render_svg(sample_chart) == render_svg(sample_chart)


def test_svg_empty_range_still_draws_rows():
    chart = Chart(
        id="c",
        title="T",
        start_year=2025,
        start_quarter=1,
        end_year=2024,
        end_quarter=1,
        categories=[Category(id="cat", name="Ops", tasks=[make_task("t", title="Keep lights on")])],
    )
    svg = render_svg(chart)
    assert 'class="header"' not in svg
    assert "Keep lights on" in svg
    assert _bars(svg) == []
    assert ET.fromstring(svg).attrib["width"] == "240"


def test_svg_draws_each_category_before_its_tasks():
    cats = [
        Category(id="a", name="Alpha", tasks=[make_task("a1", title="First"), make_task("a2", title="Second")]),
        Category(id="b", name="Beta", tasks=[make_task("b1", title="Third")]),
    ]
    chart = Chart(id="o", title="", start_year=2024, start_quarter=1, end_year=2024, end_quarter=1, categories=cats)
    svg = render_svg(chart)
    positions = [svg.index(f">{name}<") for name in ("Alpha", "First", "Second", "Beta", "Third")]
    assert positions == sorted(positions)
