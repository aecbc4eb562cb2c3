from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple

if TYPE_CHECKING:
    from chart_models import Chart


@dataclass(frozen=True)
class QuarterColumn:
    year: int
    quarter: int

    @property
    def label(self) -> str:
        return f"Q{self.quarter} {self.year}"


def calculate_quarters(start_year: int, start_quarter: int, end_year: int, end_quarter: int) -> List[QuarterColumn]:
    """
    Timeline axis for an inclusive (year, quarter) range.

    The first year begins at start_quarter, the last year stops at end_quarter,
    every year in between contributes Q1-Q4. An inverted range yields [].
    """
    out: List[QuarterColumn] = []
    for year in range(start_year, end_year + 1):
        first = start_quarter if year == start_year else 1
        last = end_quarter if year == end_year else 4
        for q in range(first, last + 1):
            out.append(QuarterColumn(year=year, quarter=q))
    return out


def chart_quarters(chart: "Chart") -> List[QuarterColumn]:
    return calculate_quarters(chart.start_year, chart.start_quarter, chart.end_year, chart.end_quarter)


def find_quarter_index(quarters: Sequence[QuarterColumn], year: int, quarter: int) -> Optional[int]:
    """Column index of (year, quarter), or None when it is not on the axis."""
    for i, q in enumerate(quarters):
        if q.year == year and q.quarter == quarter:
            return i
    return None


def quarter_of(d: date) -> Tuple[int, int]:
    return d.year, (d.month - 1) // 3 + 1
