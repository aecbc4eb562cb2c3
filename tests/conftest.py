import sys
from pathlib import Path

# Force a headless backend for matplotlib before anything touches a canvas.
import matplotlib

matplotlib.use("Agg")

import pytest

# Ensure project root is on sys.path for tests
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from chart_models import Category, Chart, Task  # noqa: E402


def make_task(task_id: str, start=(2024, 1), end=(2024, 1), **kwargs) -> Task:
    return Task(
        id=task_id,
        title=kwargs.pop("title", f"Task {task_id}"),
        start_year=start[0],
        start_quarter=start[1],
        end_year=end[0],
        end_quarter=end[1],
        **kwargs,
    )


@pytest.fixture
def sample_chart() -> Chart:
    """2024Q1-2024Q4, one category, one task spanning Q2-Q3."""
    return Chart(
        id="c1",
        title="Platform Roadmap",
        start_year=2024,
        start_quarter=1,
        end_year=2024,
        end_quarter=4,
        categories=[
            Category(
                id="cat1",
                name="Infrastructure",
                color="#2CA02C",
                tasks=[make_task("t1", start=(2024, 2), end=(2024, 3), title="Migrate clusters")],
            )
        ],
    )
