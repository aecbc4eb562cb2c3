from __future__ import annotations

import logging
from dataclasses import dataclass
from io import BytesIO
from typing import Dict, Optional, Protocol

from matplotlib.figure import Figure

from chart_models import Chart, RenderSettings
from renderer import render_document_figure, render_raster_figure
from svg_export import render_svg

logger = logging.getLogger(__name__)


class ExportError(RuntimeError):
    """A backend failed to serialize the rendered chart; no output was produced."""

    def __init__(self, fmt: str, message: str) -> None:
        super().__init__(f"Error generating {fmt.upper()}: {message}")
        self.fmt = fmt


def _save_figure(fig: Figure, fmt: str, **savefig_kwargs) -> bytes:
    bio = BytesIO()
    try:
        fig.savefig(bio, format=fmt, **savefig_kwargs)
    except Exception as exc:
        logger.exception("%s encoding failed", fmt.upper())
        raise ExportError(fmt, str(exc)) from exc
    data = bio.getvalue()
    logger.debug("%s export: %d bytes", fmt.upper(), len(data))
    return data


def export_png_bytes(chart: Chart, settings: Optional[RenderSettings] = None) -> bytes:
    """Render the chart and return a PNG image as bytes (raster output)."""
    settings = settings or RenderSettings()
    fig, _ = render_raster_figure(chart, settings)
    return _save_figure(fig, "png", dpi=settings.raster_dpi, facecolor=fig.get_facecolor())


def export_pdf_bytes(chart: Chart, settings: Optional[RenderSettings] = None) -> bytes:
    """Render the chart and return a single-page landscape PDF as bytes (vector output)."""
    fig, _ = render_document_figure(chart, settings)
    # No CreationDate, so the same chart always gives the same document.
    return _save_figure(fig, "pdf", facecolor="white", metadata={"CreationDate": None})


def export_svg_bytes(chart: Chart, settings: Optional[RenderSettings] = None) -> bytes:
    """Render the chart and return an SVG document as UTF-8 bytes."""
    svg = render_svg(chart, settings)
    try:
        data = svg.encode("utf-8")
    except UnicodeEncodeError as exc:
        logger.exception("SVG encoding failed")
        raise ExportError("svg", str(exc)) from exc
    logger.debug("SVG export: %d bytes", len(data))
    return data


class ChartRenderer(Protocol):
    media_type: str
    extension: str

    def render(self, chart: Chart) -> bytes:
        ...


@dataclass(frozen=True)
class RasterRenderer:
    settings: Optional[RenderSettings] = None
    media_type: str = "image/png"
    extension: str = "png"

    def render(self, chart: Chart) -> bytes:
        return export_png_bytes(chart, self.settings)


@dataclass(frozen=True)
class DocumentRenderer:
    settings: Optional[RenderSettings] = None
    media_type: str = "application/pdf"
    extension: str = "pdf"

    def render(self, chart: Chart) -> bytes:
        return export_pdf_bytes(chart, self.settings)


@dataclass(frozen=True)
class MarkupRenderer:
    settings: Optional[RenderSettings] = None
    media_type: str = "image/svg+xml"
    extension: str = "svg"

    def render(self, chart: Chart) -> bytes:
        return export_svg_bytes(chart, self.settings)


def renderers(settings: Optional[RenderSettings] = None) -> Dict[str, ChartRenderer]:
    """Format name -> renderer, for every supported output."""
    return {
        "svg": MarkupRenderer(settings),
        "png": RasterRenderer(settings),
        "pdf": DocumentRenderer(settings),
    }


@dataclass(frozen=True)
class ExportResult:
    data: bytes
    media_type: str
    filename: str


def export_chart(chart: Chart, fmt: str, settings: Optional[RenderSettings] = None) -> ExportResult:
    """
    Render `chart` in one format, with what a download response needs:
    the bytes, the media type and an attachment filename.
    """
    fmt = (fmt or "").strip().lower()
    available = renderers(settings)
    if fmt not in available:
        allowed = ", ".join(sorted(available))
        raise ValueError(f"Unknown export format {fmt!r}; expected one of: {allowed}.")
    renderer = available[fmt]
    data = renderer.render(chart)
    return ExportResult(data=data, media_type=renderer.media_type, filename=f"chart-{chart.id}.{renderer.extension}")
