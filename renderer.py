from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from matplotlib.axes import Axes
from matplotlib.figure import Figure
from matplotlib.patches import FancyBboxPatch, Rectangle

from chart_models import Chart, RenderSettings
from colors import hex_to_rgba
from geometry import bar_rect, column_x
from layout import (
    CategoryBand,
    ChartLayout,
    TaskRow,
    UnitSystem,
    compute_layout,
    layout_config,
    compute_rows,
)
from text_wrap import truncate

logger = logging.getLogger(__name__)

MM_PER_INCH = 25.4
POINTS_PER_INCH = 72.0

# Landscape page sizes in millimetres.
PAGE_SIZES_MM = {
    "A4": (297.0, 210.0),
    "A3": (420.0, 297.0),
}

HEADER_SHADES = ("#E8E8E8", "#F5F5F5")
HEADER_BORDER = "#CCCCCC"
GUIDE_COLOR = "#DDDDDD"
LABEL_CELL_FILL = "#FFFFFF"
LABEL_CELL_BORDER = "#DDDDDD"
TEXT_COLOR = "#333333"
HEADER_TEXT_COLOR = "#555555"
CATEGORY_TEXT_COLOR = "#222222"

CATEGORY_LABEL_ALPHA = 0.3
CATEGORY_BAND_ALPHA = 0.05
BAR_ALPHA = 0.8

# Agg truncates the canvas to whole pixels; nudge so w/dpi*dpi never lands just below w.
_PIXEL_EPSILON = 1e-3

# Approximate glyph width as a fraction of font size, for character budgets.
_GLYPH_WIDTH_FACTOR = 0.55

# Document task labels are cut at a fixed length.
DOCUMENT_TITLE_CHARS = 20


def _font_family_available(family: str) -> bool:
    family = (family or "").strip()
    if not family:
        return False
    # Matplotlib stores font names; check case-insensitively.
    fam_lower = family.lower()
    from matplotlib import font_manager as fm
    for f in fm.fontManager.ttflist:
        if f.name.lower() == fam_lower:
            return True
    return False


def resolve_font_family(preferred: str) -> str:
    """
    Returns a font family name that matplotlib can actually render.
    Priority:
      1) preferred, if available
      2) Arial, if available
      3) DejaVu Sans (matplotlib default)
    """
    preferred = (preferred or "").strip()
    if preferred and _font_family_available(preferred):
        return preferred
    if _font_family_available("Arial"):
        return "Arial"
    return "DejaVu Sans"


@dataclass(frozen=True)
class TextStyle:
    """Font sizes and line width in points, plus how many data units one point spans."""

    family: str
    title_pt: float
    header_pt: float
    category_pt: float
    label_pt: float
    line_pt: float
    units_per_pt: float


def _new_axes(fig: Figure, view_w: float, view_h: float, background: str) -> Axes:
    """Full-figure axes whose data coordinates are the layout's units, y pointing down."""
    fig.patch.set_facecolor(background)
    ax = fig.add_axes((0.0, 0.0, 1.0, 1.0))
    ax.set_xlim(0, view_w)
    ax.set_ylim(view_h, 0)
    ax.axis("off")
    return ax


def _draw_background(ax: Axes, layout: ChartLayout, background: str) -> None:
    ax.add_patch(
        Rectangle((0, 0), layout.width, layout.height, facecolor=background, edgecolor="none", zorder=0)
    )


def _draw_title(ax: Axes, title: str, layout: ChartLayout, style: TextStyle) -> None:
    c = layout.config
    ax.text(
        c.padding,
        c.padding + c.title_baseline_offset,
        title,
        ha="left",
        va="baseline",
        fontsize=style.title_pt,
        fontweight="bold",
        fontfamily=style.family,
        color=TEXT_COLOR,
        zorder=4,
        parse_math=False,
    )


def _draw_quarter_headers(ax: Axes, layout: ChartLayout, style: TextStyle) -> None:
    c = layout.config
    top = c.header_height - c.header_cell_height
    for i, q in enumerate(layout.quarters):
        x = column_x(i, c)
        ax.add_patch(
            Rectangle(
                (x, top),
                c.quarter_width,
                c.header_cell_height,
                facecolor=HEADER_SHADES[i % 2],
                edgecolor=HEADER_BORDER,
                linewidth=style.line_pt,
                zorder=1,
            )
        )
        ax.text(
            x + c.quarter_width / 2.0,
            c.header_height - c.header_label_offset,
            q.label,
            ha="center",
            va="baseline",
            fontsize=style.header_pt,
            fontweight="bold",
            fontfamily=style.family,
            color=HEADER_TEXT_COLOR,
            zorder=4,
            parse_math=False,
        )
        ax.vlines(x, c.header_height, layout.height - c.padding, colors=GUIDE_COLOR, linewidth=style.line_pt, zorder=1)


def _draw_category(ax: Axes, band: CategoryBand, layout: ChartLayout, style: TextStyle) -> None:
    c = layout.config
    ax.add_patch(
        Rectangle(
            (c.padding, band.y),
            c.label_width,
            band.height,
            facecolor=hex_to_rgba(band.color, CATEGORY_LABEL_ALPHA),
            edgecolor="none",
            zorder=2,
        )
    )
    if layout.timeline_width > 0:
        ax.add_patch(
            Rectangle(
                (layout.timeline_x, band.y),
                layout.timeline_width,
                band.height,
                facecolor=hex_to_rgba(band.color, CATEGORY_BAND_ALPHA),
                edgecolor="none",
                zorder=2,
            )
        )
    max_chars = _chars_that_fit(c.label_width - 2 * c.label_text_inset, style.category_pt, style)
    ax.text(
        c.padding + c.label_text_inset,
        band.y + band.height / 2.0,
        truncate(band.category.name, max_chars),
        ha="left",
        va="center",
        fontsize=style.category_pt,
        fontweight="bold",
        fontfamily=style.family,
        color=CATEGORY_TEXT_COLOR,
        zorder=4,
        parse_math=False,
    )


def _draw_task(ax: Axes, row: TaskRow, layout: ChartLayout, style: TextStyle, *, title_chars: Optional[int]) -> None:
    c = layout.config
    ax.add_patch(
        Rectangle(
            (c.padding, row.y),
            c.label_width,
            row.height,
            facecolor=LABEL_CELL_FILL,
            edgecolor=LABEL_CELL_BORDER,
            linewidth=style.line_pt,
            zorder=2,
        )
    )
    if title_chars is None:
        title_chars = _chars_that_fit(c.label_width - 2 * c.label_text_inset, style.label_pt, style)
    ax.text(
        c.padding + c.label_text_inset,
        row.y + row.height / 2.0,
        truncate(row.task.title, title_chars),
        ha="left",
        va="center",
        fontsize=style.label_pt,
        fontfamily=style.family,
        color=TEXT_COLOR,
        zorder=4,
        parse_math=False,
    )

    if row.bar is None:
        return
    x, y, w, h = bar_rect(row.bar, row.y, row.height, c)
    if w <= 0 or h <= 0:
        return
    ax.add_patch(
        FancyBboxPatch(
            (x, y),
            w,
            h,
            boxstyle=f"round,pad=0,rounding_size={c.bar_radius}",
            facecolor=hex_to_rgba(row.color, BAR_ALPHA),
            edgecolor="none",
            zorder=3,
        )
    )


def _chars_that_fit(width_units: float, font_pt: float, style: TextStyle) -> int:
    glyph_units = font_pt * _GLYPH_WIDTH_FACTOR * style.units_per_pt
    return max(int(width_units / glyph_units), 4)


def _draw_chart(ax: Axes, chart: Chart, layout: ChartLayout, style: TextStyle, background: str, *, with_title: bool, title_chars: Optional[int] = None) -> None:
    _draw_background(ax, layout, background)
    if with_title:
        _draw_title(ax, chart.title, layout, style)
    _draw_quarter_headers(ax, layout, style)

    bands, rows, _ = compute_rows(chart, layout)
    start = 0
    for band in bands:
        _draw_category(ax, band, layout, style)
        end = start + len(band.category.tasks)
        for row in rows[start:end]:
            _draw_task(ax, row, layout, style, title_chars=title_chars)
        start = end


def render_raster_figure(chart: Chart, settings: Optional[RenderSettings] = None) -> Tuple[Figure, ChartLayout]:
    """
    Builds the raster figure: exactly layout.width x layout.height pixels at
    settings.raster_dpi, one axes in pixel coordinates, no title region.
    """
    settings = settings or RenderSettings()
    layout = compute_layout(chart, layout_config(UnitSystem.PIXEL), dynamic=False)
    dpi = settings.raster_dpi
    logger.debug("raster canvas %sx%s px, %d quarters", layout.width, layout.height, len(layout.quarters))

    fig = Figure(figsize=((layout.width + _PIXEL_EPSILON) / dpi, (layout.height + _PIXEL_EPSILON) / dpi), dpi=dpi)
    ax = _new_axes(fig, layout.width, layout.height, settings.background)

    # Sizes below are in pixels, matching the markup backend's stylesheet.
    pt_per_px = POINTS_PER_INCH / dpi
    style = TextStyle(
        family=resolve_font_family(settings.font_family),
        title_pt=20 * pt_per_px,
        header_pt=12 * pt_per_px,
        category_pt=14 * pt_per_px,
        label_pt=12 * pt_per_px,
        line_pt=1 * pt_per_px,
        units_per_pt=dpi / POINTS_PER_INCH,
    )
    _draw_chart(ax, chart, layout, style, settings.background, with_title=False)
    return fig, layout


def page_view(layout: ChartLayout, page_mm: Tuple[float, float], *, fit_to_page: bool) -> Tuple[float, float, float]:
    """
    Visible (width, height) in mm and the shrink factor applied to the chart.

    With fit_to_page, a chart larger than the page is scaled down uniformly
    so the whole thing stays on the single page.
    """
    page_w, page_h = page_mm
    scale = 1.0
    if fit_to_page:
        scale = max(1.0, layout.width / page_w, layout.height / page_h)
    return page_w * scale, page_h * scale, scale


def render_document_figure(chart: Chart, settings: Optional[RenderSettings] = None) -> Tuple[Figure, ChartLayout]:
    """
    Builds the document figure: one landscape page, one axes in millimetres,
    title at the top-left margin, task titles cut at a fixed length.
    """
    settings = settings or RenderSettings()
    layout = compute_layout(chart, layout_config(UnitSystem.MILLIMETRE), dynamic=False)
    page_w, page_h = PAGE_SIZES_MM[settings.page_size]
    view_w, view_h, scale = page_view(layout, (page_w, page_h), fit_to_page=settings.fit_to_page)
    logger.debug("document canvas %.1fx%.1f mm on %s (scale %.3f)", layout.width, layout.height, settings.page_size, scale)

    fig = Figure(figsize=(page_w / MM_PER_INCH, page_h / MM_PER_INCH))
    ax = _new_axes(fig, view_w, view_h, "#FFFFFF")

    style = TextStyle(
        family=resolve_font_family(settings.font_family),
        title_pt=16 / scale,
        header_pt=9 / scale,
        category_pt=9 / scale,
        label_pt=8 / scale,
        line_pt=0.5 / scale,
        units_per_pt=MM_PER_INCH / POINTS_PER_INCH * scale,
    )
    _draw_chart(ax, chart, layout, style, settings.background, with_title=True, title_chars=DOCUMENT_TITLE_CHARS)
    return fig, layout
