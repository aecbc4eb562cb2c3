from __future__ import annotations

# Quick "does everything basically work?" check: builds seeded random charts,
# round-trips them through the client JSON shape, and exports SVG/PNG/PDF.

import random
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List

# Allow running this file directly via: python scripts/smoke_test.py
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from chart_models import Category, Chart, RenderSettings, Task
from export import export_chart


@dataclass
class SmokeResult:
    iteration: int
    categories: int
    tasks: int
    svg_bytes: int
    png_bytes: int
    pdf_bytes: int


def _random_hex() -> str:
    return "#" + "".join(random.choice("0123456789ABCDEF") for _ in range(6))


def _random_quarter(first_year: int, years: int) -> tuple[int, int]:
    return first_year + random.randint(0, years - 1), random.randint(1, 4)


def build_random_chart(iteration: int) -> Chart:
    random.seed(1000 + iteration)

    names = ["Product", "Marketing", "Integration", "Customer Experience and Support Operations"]
    categories: List[Category] = []
    task_id = 1
    for c, name in enumerate(names):
        tasks: List[Task] = []
        for _ in range(random.randint(0, 8)):
            sy, sq = _random_quarter(2025, 3)
            ey, eq = _random_quarter(sy, 2)
            if (ey, eq) < (sy, sq):
                ey, eq = sy, sq
            tasks.append(
                Task(
                    id=f"T{task_id:03d}",
                    title=f"{name} task {task_id}",
                    description="Some descriptive text that might wrap depending on space." if random.random() < 0.5 else "",
                    start_year=sy,
                    start_quarter=sq,
                    end_year=ey,
                    end_quarter=eq,
                    color=_random_hex() if random.random() < 0.3 else "",
                )
            )
            task_id += 1
        categories.append(Category(id=f"cat-{c}", name=name, color=_random_hex(), tasks=tasks))

    # Out of range on both sides; rows are drawn, bars are not.
    categories[0].tasks.append(
        Task(id=f"T{task_id:03d}", title="Out of range (before)", start_year=2020, start_quarter=1, end_year=2020, end_quarter=2)
    )
    categories[-1].tasks.append(
        Task(id=f"T{task_id + 1:03d}", title="Out of range (after)", start_year=2031, start_quarter=1, end_year=2031, end_quarter=4)
    )

    return Chart(
        id=f"smoke-{iteration}",
        title=f"Smoke Roadmap {iteration}",
        start_year=2025,
        start_quarter=1,
        end_year=2025 + iteration % 3,
        end_quarter=4,
        categories=categories,
    )


def main() -> None:
    results: List[SmokeResult] = []
    settings = RenderSettings(raster_dpi=150)

    for i in range(1, 6):
        chart = build_random_chart(i)

        # Round-trip through the JSON field names the web client sends.
        chart = Chart.model_validate_json(chart.model_dump_json(by_alias=True))

        svg = export_chart(chart, "svg", settings).data
        png = export_chart(chart, "png", settings).data
        pdf = export_chart(chart, "pdf", settings).data

        assert svg.startswith(b"<svg ")
        assert png[:8] == b"\x89PNG\r\n\x1a\n"
        assert pdf[:4] == b"%PDF"

        results.append(
            SmokeResult(
                iteration=i,
                categories=len(chart.categories),
                tasks=chart.task_count(),
                svg_bytes=len(svg),
                png_bytes=len(png),
                pdf_bytes=len(pdf),
            )
        )

    print("Smoke test results")
    for r in results:
        print(
            f"- Iter {r.iteration}: categories={r.categories}, tasks={r.tasks}, "
            f"svg={r.svg_bytes:,} B, png={r.png_bytes:,} B, pdf={r.pdf_bytes:,} B"
        )

    print("OK: all iterations exported SVG, PNG, and PDF successfully.")


if __name__ == "__main__":
    main()
