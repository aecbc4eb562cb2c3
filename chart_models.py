from __future__ import annotations

import uuid
from datetime import date
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from colors import parse_hex
from quarters import quarter_of


def _clean_color(v: Optional[str]) -> str:
    """Canonicalize readable colors; keep anything else as-is for render-time fallback."""
    if v is None:
        return ""
    v = str(v).strip()
    if not v:
        return ""
    return parse_hex(v) or v


class _CamelModel(BaseModel):
    # Charts arrive as camelCase JSON from the web client; Python callers use field names.
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class Task(_CamelModel):
    id: str
    title: str
    description: str = Field(default="")
    start_year: int = Field(alias="startYear")
    start_quarter: int = Field(alias="startQuarter", ge=1, le=4)
    end_year: int = Field(alias="endYear")
    end_quarter: int = Field(alias="endQuarter", ge=1, le=4)
    color: str = Field(default="")

    @field_validator("id")
    @classmethod
    def _id_not_empty(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("id is required.")
        return v

    @field_validator("title")
    @classmethod
    def _title_strip(cls, v: str) -> str:
        return (v or "").strip()

    @field_validator("description", mode="before")
    @classmethod
    def _desc_strip(cls, v: Optional[str]) -> str:
        if v is None:
            return ""
        return str(v).strip()

    @field_validator("color", mode="before")
    @classmethod
    def _normalize_color(cls, v: Optional[str]) -> str:
        return _clean_color(v)


class Category(_CamelModel):
    id: str
    name: str
    color: str = Field(default="")
    tasks: List[Task] = Field(default_factory=list)

    @field_validator("id")
    @classmethod
    def _id_not_empty(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("id is required.")
        return v

    @field_validator("name")
    @classmethod
    def _name_strip(cls, v: str) -> str:
        return (v or "").strip()

    @field_validator("color", mode="before")
    @classmethod
    def _normalize_color(cls, v: Optional[str]) -> str:
        return _clean_color(v)

    @field_validator("tasks", mode="before")
    @classmethod
    def _tasks_default(cls, v):
        return [] if v is None else v


class Chart(_CamelModel):
    id: str = Field(default="")
    title: str = Field(default="")
    start_year: int = Field(alias="startYear")
    start_quarter: int = Field(alias="startQuarter", ge=1, le=4)
    end_year: int = Field(alias="endYear")
    end_quarter: int = Field(alias="endQuarter", ge=1, le=4)
    categories: List[Category] = Field(default_factory=list)

    @field_validator("title")
    @classmethod
    def _title_strip(cls, v: str) -> str:
        return (v or "").strip()

    @field_validator("categories", mode="before")
    @classmethod
    def _categories_default(cls, v):
        return [] if v is None else v

    def task_count(self) -> int:
        return sum(len(c.tasks) for c in self.categories)


def new_chart(title: str = "New Gantt Chart", *, today: Optional[date] = None, chart_id: Optional[str] = None) -> Chart:
    """
    Empty chart covering the current quarter through Q4 of next year.
    """
    today = today or date.today()
    year, quarter = quarter_of(today)
    return Chart(
        id=chart_id or uuid.uuid4().hex,
        title=title,
        start_year=year,
        start_quarter=quarter,
        end_year=year + 1,
        end_quarter=4,
    )


class RenderSettings(BaseModel):
    """Output options shared by all backends. Defaults reproduce the stock look."""

    model_config = ConfigDict(frozen=True)

    font_family: str = Field(default="DejaVu Sans")  # Falls back at render-time if not found.
    raster_dpi: Literal[72, 100, 150, 200] = Field(default=100)
    page_size: Literal["A4", "A3"] = Field(default="A4")
    fit_to_page: bool = Field(default=True)
    background: str = Field(default="#FAFAFA")

    @field_validator("font_family")
    @classmethod
    def _font_not_empty(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            return "DejaVu Sans"
        return v

    @field_validator("background")
    @classmethod
    def _background_hex(cls, v: str) -> str:
        parsed = parse_hex(v)
        if parsed is None:
            raise ValueError("background must be a hex color like #FAFAFA.")
        return parsed
