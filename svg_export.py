"""SVG export.

Writes the chart as one self-contained <svg> document:
  - inline <style> classes for title, header, label, category, desc text
  - category name and task title/description wrapped into <tspan> lines
  - rows sized by the dynamic height map, so long text grows its row

Output is a pure function of the chart: the same chart always yields the
same bytes.
"""

from __future__ import annotations

import html
import logging
from typing import List, Optional

from chart_models import Chart, RenderSettings
from colors import darken
from geometry import bar_rect, column_x
from layout import (
    CategoryBand,
    ChartLayout,
    TaskRow,
    UnitSystem,
    compute_layout,
    layout_config,
    compute_rows,
    task_text_lines,
)

logger = logging.getLogger(__name__)

SVG_STYLE = (
    "<defs><style>"
    ".title{font:bold 20px sans-serif;fill:#333}"
    ".header{font:bold 12px sans-serif;fill:#555}"
    ".label{font:12px sans-serif;fill:#333}"
    ".category{font:bold 14px sans-serif;fill:#222}"
    ".desc{font:10px sans-serif;fill:#666}"
    "</style></defs>"
)

HEADER_SHADES = ("#e8e8e8", "#f5f5f5")
HEADER_BORDER = "#ccc"
GUIDE_COLOR = "#ddd"
LABEL_CELL_FILL = "#fff"
LABEL_CELL_BORDER = "#ddd"

CATEGORY_LABEL_OPACITY = 0.3
CATEGORY_BAND_OPACITY = 0.05
BAR_OPACITY = 0.8


def _fmt(v: float) -> str:
    if float(v).is_integer():
        return str(int(v))
    return f"{v:.2f}".rstrip("0").rstrip(".")


def _esc(text: str) -> str:
    return html.escape(text or "", quote=True)


def _tspans(x: float, lines: List[str], first_dy: float, dy: float) -> str:
    parts = []
    for i, ln in enumerate(lines):
        parts.append(f'<tspan x="{_fmt(x)}" dy="{_fmt(first_dy if i == 0 else dy)}">{_esc(ln)}</tspan>')
    return "".join(parts)


def _header(layout: ChartLayout, background: str) -> List[str]:
    w, h = _fmt(layout.width), _fmt(layout.height)
    return [
        f'<svg width="{w}" height="{h}" xmlns="http://www.w3.org/2000/svg">',
        SVG_STYLE,
        f'<rect width="{w}" height="{h}" fill="{background}"/>',
    ]


def _title(title: str, layout: ChartLayout) -> str:
    c = layout.config
    return f'<text x="{_fmt(c.padding)}" y="{_fmt(c.padding + c.title_baseline_offset)}" class="title">{_esc(title)}</text>'


def _quarter_headers(layout: ChartLayout) -> List[str]:
    c = layout.config
    out: List[str] = []
    top = c.header_height - c.header_cell_height
    for i, q in enumerate(layout.quarters):
        x = column_x(i, c)
        shade = HEADER_SHADES[i % 2]
        out.append(
            f'<rect x="{_fmt(x)}" y="{_fmt(top)}" width="{_fmt(c.quarter_width)}" height="{_fmt(c.header_cell_height)}" '
            f'fill="{shade}" stroke="{HEADER_BORDER}" stroke-width="1"/>'
        )
        out.append(
            f'<text x="{_fmt(x + c.quarter_width / 2)}" y="{_fmt(c.header_height - c.header_label_offset)}" '
            f'class="header" text-anchor="middle">{_esc(q.label)}</text>'
        )
        out.append(
            f'<line x1="{_fmt(x)}" y1="{_fmt(c.header_height)}" x2="{_fmt(x)}" y2="{_fmt(layout.height - c.padding)}" '
            f'stroke="{GUIDE_COLOR}" stroke-width="1"/>'
        )
    return out


def _category(band: CategoryBand, layout: ChartLayout) -> List[str]:
    c = layout.config
    text_x = c.padding + c.label_text_inset
    out = [
        f'<rect x="{_fmt(c.padding)}" y="{_fmt(band.y)}" width="{_fmt(c.label_width)}" height="{_fmt(band.height)}" '
        f'fill="{band.color}" opacity="{CATEGORY_LABEL_OPACITY}"/>'
    ]

    if len(band.name_lines) <= 1:
        out.append(
            f'<text x="{_fmt(text_x)}" y="{_fmt(band.y + c.category_text_baseline)}" class="category">'
            f"{_esc(band.category.name)}</text>"
        )
    else:
        first_dy = c.category_text_baseline - c.category_base
        out.append(
            f'<text x="{_fmt(text_x)}" y="{_fmt(band.y + c.category_base)}" class="category">'
            f"{_tspans(text_x, list(band.name_lines), first_dy, c.category_line_height)}</text>"
        )

    out.append(
        f'<rect x="{_fmt(layout.timeline_x)}" y="{_fmt(band.y)}" width="{_fmt(layout.timeline_width)}" '
        f'height="{_fmt(band.height)}" fill="{band.color}" opacity="{CATEGORY_BAND_OPACITY}"/>'
    )
    return out


def _task(row: TaskRow, layout: ChartLayout) -> List[str]:
    c = layout.config
    text_x = c.padding + c.label_text_inset
    out = [
        f'<rect x="{_fmt(c.padding)}" y="{_fmt(row.y)}" width="{_fmt(c.label_width)}" height="{_fmt(row.height)}" '
        f'fill="{LABEL_CELL_FILL}" stroke="{LABEL_CELL_BORDER}" stroke-width="1"/>'
    ]

    title_lines, desc_lines = task_text_lines(row.task, c)
    text_y = row.y + c.task_text_baseline
    if title_lines:
        out.append(
            f'<text x="{_fmt(text_x)}" y="{_fmt(text_y)}" class="label">'
            f"{_tspans(text_x, title_lines, 0, c.title_line_height)}</text>"
        )
        text_y += len(title_lines) * c.title_line_height
    if desc_lines:
        desc_y = text_y + c.task_vertical_padding / 2
        out.append(
            f'<text x="{_fmt(text_x)}" y="{_fmt(desc_y)}" class="desc">'
            f"{_tspans(text_x, desc_lines, 0, c.desc_line_height)}</text>"
        )

    if row.bar is not None:
        x, y, w, h = bar_rect(row.bar, row.y, row.height, c)
        r = _fmt(c.bar_radius)
        out.append(
            f'<rect x="{_fmt(x)}" y="{_fmt(y)}" width="{_fmt(w)}" height="{_fmt(h)}" fill="{row.color}" '
            f'rx="{r}" opacity="{BAR_OPACITY}"/>'
        )
        out.append(
            f'<rect x="{_fmt(x)}" y="{_fmt(y)}" width="{_fmt(w)}" height="{_fmt(h)}" fill="none" '
            f'stroke="{darken(row.color)}" stroke-width="2" rx="{r}"/>'
        )
    return out


def render_svg(chart: Chart, settings: Optional[RenderSettings] = None) -> str:
    """
    Builds the SVG document as text.

    Heights are resolved for every category and task before the root element
    is written, since the root declares the final canvas size.
    """
    settings = settings or RenderSettings()
    layout = compute_layout(chart, layout_config(UnitSystem.SVG), dynamic=True)
    logger.debug("svg canvas %sx%s, %d quarters", _fmt(layout.width), _fmt(layout.height), len(layout.quarters))

    parts: List[str] = _header(layout, settings.background.lower())
    parts.append(_title(chart.title, layout))
    parts.extend(_quarter_headers(layout))

    bands, rows, _ = compute_rows(chart, layout)
    start = 0
    for band in bands:
        parts.extend(_category(band, layout))
        end = start + len(band.category.tasks)
        for row in rows[start:end]:
            parts.extend(_task(row, layout))
        start = end

    parts.append("</svg>")
    return "".join(parts)
