from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from chart_models import Category, Chart, Task
from colors import normalize_hex
from geometry import BarSpan, bar_span, resolve_task_color
from quarters import QuarterColumn, chart_quarters
from text_wrap import wrap_text


class UnitSystem(str, Enum):
    PIXEL = "px"  # raster device pixels
    MILLIMETRE = "mm"  # physical page units
    SVG = "svg"  # abstract vector user units


# Device units per base unit.
UNIT_SCALE: Dict[UnitSystem, float] = {
    UnitSystem.PIXEL: 1.0,
    UnitSystem.MILLIMETRE: 0.25,
    UnitSystem.SVG: 1.0,
}

# Every backend derives its geometry from this one table (expressed in pixels).
BASE_PROPORTIONS: Dict[str, float] = {
    "padding": 20,
    "header_height": 80,
    "header_cell_height": 30,
    "header_label_offset": 10,
    "title_baseline_offset": 20,
    "row_height": 40,
    "quarter_width": 120,
    "label_width": 200,
    "category_height": 35,
    "category_base": 18,
    "category_line_height": 14,
    "category_text_baseline": 22,
    "title_line_height": 14,
    "desc_line_height": 12,
    "task_vertical_padding": 8,
    "task_text_baseline": 14,
    "label_text_inset": 10,
    "bar_inset_x": 2,
    "bar_inset_y": 8,
    "min_bar_height": 12,
    "bar_radius": 4,
}

# Wrap budgets are in characters, so they don't scale.
CATEGORY_WRAP_CHARS = 30
TITLE_WRAP_CHARS = 28
DESC_WRAP_CHARS = 36


@dataclass(frozen=True)
class LayoutConfig:
    units: UnitSystem
    padding: float
    header_height: float
    header_cell_height: float
    header_label_offset: float
    title_baseline_offset: float
    row_height: float
    quarter_width: float
    label_width: float
    category_height: float
    category_base: float
    category_line_height: float
    category_text_baseline: float
    title_line_height: float
    desc_line_height: float
    task_vertical_padding: float
    task_text_baseline: float
    label_text_inset: float
    bar_inset_x: float
    bar_inset_y: float
    min_bar_height: float
    bar_radius: float
    category_wrap_chars: int = CATEGORY_WRAP_CHARS
    title_wrap_chars: int = TITLE_WRAP_CHARS
    desc_wrap_chars: int = DESC_WRAP_CHARS


def _scaled(value: float, scale: float) -> float:
    v = value * scale
    # Keep whole numbers integral so markup output reads "80", not "80.0".
    return int(v) if float(v).is_integer() else v


def layout_config(units: UnitSystem) -> LayoutConfig:
    scale = UNIT_SCALE[units]
    return LayoutConfig(units=units, **{k: _scaled(v, scale) for k, v in BASE_PROPORTIONS.items()})


@dataclass(frozen=True)
class HeightMap:
    """Resolved heights for one render call: task id -> row height, category id -> band height."""

    tasks: Dict[str, float]
    categories: Dict[str, float]

    def task_height(self, task_id: str, default: float) -> float:
        return self.tasks.get(task_id) or default

    def category_height(self, category_id: str, default: float) -> float:
        return self.categories.get(category_id) or default


def category_name_lines(category: Category, config: LayoutConfig) -> List[str]:
    return wrap_text(category.name, config.category_wrap_chars)


def task_text_lines(task: Task, config: LayoutConfig) -> Tuple[List[str], List[str]]:
    return wrap_text(task.title, config.title_wrap_chars), wrap_text(task.description, config.desc_wrap_chars)


def dynamic_category_height(line_count: int, config: LayoutConfig) -> float:
    if line_count <= 1:
        return config.category_height
    return config.category_base + line_count * config.category_line_height


def dynamic_task_height(title_lines: int, desc_lines: int, config: LayoutConfig) -> float:
    text_h = (
        title_lines * config.title_line_height
        + desc_lines * config.desc_line_height
        + config.task_vertical_padding
    )
    return max(config.row_height, text_h)


def compute_fixed_heights(chart: Chart, config: LayoutConfig) -> HeightMap:
    tasks: Dict[str, float] = {}
    categories: Dict[str, float] = {}
    for cat in chart.categories:
        categories[cat.id] = config.category_height
        for task in cat.tasks:
            tasks[task.id] = config.row_height
    return HeightMap(tasks=tasks, categories=categories)


def compute_dynamic_heights(chart: Chart, config: LayoutConfig) -> HeightMap:
    """
    Per-row heights driven by wrapped text.

    Category bands grow with the number of lines in the wrapped name; task
    rows grow with wrapped title + description, never below row_height.
    """
    tasks: Dict[str, float] = {}
    categories: Dict[str, float] = {}
    for cat in chart.categories:
        categories[cat.id] = dynamic_category_height(len(category_name_lines(cat, config)), config)
        for task in cat.tasks:
            title_lines, desc_lines = task_text_lines(task, config)
            tasks[task.id] = dynamic_task_height(len(title_lines), len(desc_lines), config)
    return HeightMap(tasks=tasks, categories=categories)


@dataclass(frozen=True)
class ChartLayout:
    config: LayoutConfig
    quarters: List[QuarterColumn]
    heights: HeightMap
    width: float
    height: float
    dynamic: bool

    @property
    def timeline_x(self) -> float:
        return self.config.padding + self.config.label_width

    @property
    def timeline_width(self) -> float:
        return len(self.quarters) * self.config.quarter_width


def total_row_count(chart: Chart) -> int:
    """One header row per category plus one row per task."""
    return sum(1 + len(cat.tasks) for cat in chart.categories)


def compute_layout(chart: Chart, config: LayoutConfig, *, dynamic: bool = False) -> ChartLayout:
    """
    Canvas size (and height map) for one render.

    Fixed mode sizes every row, category header rows included, at row_height.
    Dynamic mode sums the wrapped-text height map, which is complete before
    anything is drawn.
    """
    quarters = chart_quarters(chart)
    width = config.label_width + len(quarters) * config.quarter_width + config.padding * 2

    if dynamic:
        heights = compute_dynamic_heights(chart, config)
        body = sum(heights.category_height(c.id, config.category_height) for c in chart.categories)
        body += sum(heights.task_height(t.id, config.row_height) for c in chart.categories for t in c.tasks)
    else:
        heights = compute_fixed_heights(chart, config)
        body = total_row_count(chart) * config.row_height

    height = config.header_height + body + config.padding * 2
    return ChartLayout(config=config, quarters=quarters, heights=heights, width=width, height=height, dynamic=dynamic)


@dataclass(frozen=True)
class CategoryBand:
    category: Category
    y: float
    height: float
    color: str
    name_lines: Tuple[str, ...]


@dataclass(frozen=True)
class TaskRow:
    task: Task
    category: Category
    y: float
    height: float
    bar: Optional[BarSpan]
    color: str


def place_category(
    cat: Category,
    y: float,
    layout: ChartLayout,
) -> Tuple[CategoryBand, List[TaskRow], float]:
    """Place one category band and its task rows starting at `y`; returns the next y."""
    config = layout.config
    band_h = layout.heights.category_height(cat.id, config.category_height)
    band = CategoryBand(
        category=cat,
        y=y,
        height=band_h,
        color=normalize_hex(cat.color),
        name_lines=tuple(category_name_lines(cat, config)),
    )
    y += band_h

    rows: List[TaskRow] = []
    for task in cat.tasks:
        row_h = layout.heights.task_height(task.id, config.row_height)
        rows.append(
            TaskRow(
                task=task,
                category=cat,
                y=y,
                height=row_h,
                bar=bar_span(task, layout.quarters),
                color=resolve_task_color(task, cat),
            )
        )
        y += row_h
    return band, rows, y


def compute_rows(chart: Chart, layout: ChartLayout) -> Tuple[List[CategoryBand], List[TaskRow], float]:
    """
    Returns:
      - bands: one per category, in input order
      - rows: one per task, in input order
      - the y just below the last row
    """
    y = layout.config.header_height
    bands: List[CategoryBand] = []
    rows: List[TaskRow] = []
    for cat in chart.categories:
        band, cat_rows, y = place_category(cat, y, layout)
        bands.append(band)
        rows.extend(cat_rows)
    return bands, rows, y
