from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Sequence, Tuple

from chart_models import Category, Task
from colors import normalize_hex
from quarters import QuarterColumn, find_quarter_index

if TYPE_CHECKING:
    from layout import LayoutConfig


@dataclass(frozen=True)
class BarSpan:
    start_index: int
    end_index: int

    @property
    def columns(self) -> int:
        return self.end_index - self.start_index + 1


def bar_span(task: Task, quarters: Sequence[QuarterColumn]) -> Optional[BarSpan]:
    """
    Inclusive column span of a task, or None when it can't be placed.

    A task is unplaced if either endpoint is off the axis, or if it ends
    before it starts.
    """
    start_idx = find_quarter_index(quarters, task.start_year, task.start_quarter)
    end_idx = find_quarter_index(quarters, task.end_year, task.end_quarter)
    if start_idx is None or end_idx is None or end_idx < start_idx:
        return None
    return BarSpan(start_index=start_idx, end_index=end_idx)


def column_x(index: int, config: "LayoutConfig") -> float:
    """Left edge of timeline column `index`."""
    return config.padding + config.label_width + index * config.quarter_width


def bar_extent(span: BarSpan, config: "LayoutConfig") -> Tuple[float, float]:
    """(x, width) of the drawn bar, inset from both covered column edges."""
    x = column_x(span.start_index, config) + config.bar_inset_x
    width = span.columns * config.quarter_width - 2 * config.bar_inset_x
    return x, width


def bar_rect(span: BarSpan, row_y: float, row_height: float, config: "LayoutConfig") -> Tuple[float, float, float, float]:
    """(x, y, width, height) of the bar inside a row."""
    x, width = bar_extent(span, config)
    height = max(row_height - 2 * config.bar_inset_y, config.min_bar_height)
    return x, row_y + config.bar_inset_y, width, height


def resolve_task_color(task: Task, category: Category) -> str:
    """Task override when set, else the category color; always a usable "#RRGGBB"."""
    return normalize_hex(task.color or category.color)
