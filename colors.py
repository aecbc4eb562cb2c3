from __future__ import annotations

import re
from typing import Optional, Tuple

# Cornflower blue; used whenever a category or task color is missing or unreadable.
DEFAULT_COLOR = "#6495ED"

HEX_COLOR_RE = re.compile(r"^#?[0-9A-Fa-f]{6}$")

# Friendly names accepted wherever a hex color is.
COLOR_NAME_TO_HEX = {
    "blue": "#1F77B4",
    "orange": "#FF7F0E",
    "green": "#2CA02C",
    "red": "#D62728",
    "purple": "#9467BD",
    "brown": "#8C564B",
    "pink": "#E377C2",
    "gray": "#7F7F7F",
    "olive": "#BCBD22",
    "cyan": "#17BECF",
    "sky blue": "#AEC7E8",
    "peach": "#FFBB78",
    "steel blue": "#4682B4",
}


def _normalize_color_token(value: str) -> str:
    s = (value or "").strip().lower()
    s = s.replace("_", " ").replace("-", " ")
    return " ".join(s.split())


def parse_hex(value: Optional[str]) -> Optional[str]:
    """
    Returns "#RRGGBB" for a hex string or a known color name, else None.
    Blank and malformed input both give None.
    """
    s = (value or "").strip()
    if not s:
        return None
    token = _normalize_color_token(s)
    if token in COLOR_NAME_TO_HEX:
        return COLOR_NAME_TO_HEX[token]
    if not HEX_COLOR_RE.match(s):
        return None
    if not s.startswith("#"):
        s = "#" + s
    return s.upper()


def normalize_hex(value: Optional[str], default: str = DEFAULT_COLOR) -> str:
    """Like parse_hex, but never fails: unreadable input resolves to `default`."""
    return parse_hex(value) or default


def hex_to_rgb(hex_color: Optional[str]) -> Tuple[int, int, int]:
    s = normalize_hex(hex_color)[1:]
    return int(s[0:2], 16), int(s[2:4], 16), int(s[4:6], 16)


def hex_to_rgba(hex_color: Optional[str], alpha: float = 1.0) -> Tuple[float, float, float, float]:
    """matplotlib-style RGBA tuple (components in [0, 1])."""
    r, g, b = hex_to_rgb(hex_color)
    return r / 255.0, g / 255.0, b / 255.0, alpha


def darken(color: str) -> str:
    """
    Outline color for a bar.

    Bars are outlined in their own fill color; only an empty color gets the
    neutral dark fallback.
    """
    if not color:
        return "#333333"
    return color
