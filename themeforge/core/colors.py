"""Color space conversions and small color helpers.

Every function here is pure. Hex input is accepted in 3- or 6-digit form with
an optional leading ``#`` and any letter case; hex output is always the
lower-case ``#rrggbb`` form.
"""

from __future__ import annotations

import colorsys
import math
import re
from typing import NamedTuple

from themeforge.errors import FormatError

_HEX_RE = re.compile(r"^#?(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


class RGB(NamedTuple):
    r: int
    g: int
    b: int


class HSL(NamedTuple):
    h: float
    s: float
    l: float


def round_half_up(value: float) -> int:
    """Round like ``Math.round``: halves go up, not to the nearest even."""
    return int(math.floor(value + 0.5))


def is_hex_color(value: object) -> bool:
    return isinstance(value, str) and bool(_HEX_RE.match(value.strip()))


def normalize_hex(value: str) -> str:
    """Return ``value`` as ``#rrggbb`` or raise FormatError."""
    if not isinstance(value, str):
        raise FormatError(value=repr(value))
    cleaned = value.strip()
    if not _HEX_RE.match(cleaned):
        raise FormatError(value=value)
    digits = cleaned.lstrip("#")
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    return f"#{digits.lower()}"


def hex_to_rgb(value: str) -> RGB:
    digits = normalize_hex(value)[1:]
    return RGB(int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))


def _clamp_channel(value: float) -> int:
    return max(0, min(255, round_half_up(value)))


def rgb_to_hex(r: float, g: float, b: float) -> str:
    return "#{:02x}{:02x}{:02x}".format(_clamp_channel(r), _clamp_channel(g), _clamp_channel(b))


def rgb_to_hsl(r: float, g: float, b: float) -> HSL:
    """Convert 0-255 channels to HSL with h in [0, 360) and s, l in [0, 100]."""
    h, l, s = colorsys.rgb_to_hls(r / 255, g / 255, b / 255)
    return HSL((h * 360) % 360, s * 100, l * 100)


def hsl_to_rgb(h: float, s: float, l: float) -> tuple[float, float, float]:
    """Convert HSL to unrounded 0-255 channels. Hue wraps, s and l clamp."""
    s = max(0.0, min(100.0, s))
    l = max(0.0, min(100.0, l))
    r, g, b = colorsys.hls_to_rgb((h % 360) / 360, l / 100, s / 100)
    return r * 255, g * 255, b * 255


def hsl_to_hex(h: float, s: float, l: float) -> str:
    return rgb_to_hex(*hsl_to_rgb(h, s, l))


def hex_to_hsl(value: str) -> HSL:
    return rgb_to_hsl(*hex_to_rgb(value))


def brighten_color(value: str, percent: float = 20) -> str:
    """Raise lightness by ``percent`` % of the headroom left below 100."""
    hsl = hex_to_hsl(value)
    headroom = 100 - hsl.l
    lightness = min(100.0, hsl.l + headroom * max(0.0, percent) / 100)
    return hsl_to_hex(hsl.h, hsl.s, lightness)


def color_distance(first: str, second: str) -> float:
    a = hex_to_rgb(first)
    b = hex_to_rgb(second)
    return math.sqrt((a.r - b.r) ** 2 + (a.g - b.g) ** 2 + (a.b - b.b) ** 2)


def hex_to_rgb_string(value: str) -> str:
    rgb = hex_to_rgb(value)
    return f"{rgb.r},{rgb.g},{rgb.b}"


def hex_to_rgba(value: str, alpha: float = 1.0) -> str:
    rgb = hex_to_rgb(value)
    return f"rgba({rgb.r},{rgb.g},{rgb.b},{float(alpha)})"


def relative_luminance(value: str) -> float:
    """WCAG relative luminance in [0, 1]."""

    def _linear(channel: int) -> float:
        c = channel / 255
        return c / 12.92 if c <= 0.03928 else ((c + 0.055) / 1.055) ** 2.4

    rgb = hex_to_rgb(value)
    return 0.2126 * _linear(rgb.r) + 0.7152 * _linear(rgb.g) + 0.0722 * _linear(rgb.b)


def contrast_ratio(first: str, second: str) -> float:
    """WCAG contrast ratio between two colors, 1.0 to 21.0."""
    lum_a = relative_luminance(first)
    lum_b = relative_luminance(second)
    lighter, darker = max(lum_a, lum_b), min(lum_a, lum_b)
    return (lighter + 0.05) / (darker + 0.05)


# (upper hue bound, variant); red wraps around 345-15.
_YARU_HUE_TABLE: tuple[tuple[float, str], ...] = (
    (15, "Yaru-red"),
    (30, "Yaru-wartybrown"),
    (60, "Yaru-yellow"),
    (90, "Yaru-olive"),
    (165, "Yaru-sage"),
    (195, "Yaru-prussiangreen"),
    (255, "Yaru-blue"),
    (285, "Yaru-purple"),
    (345, "Yaru-magenta"),
)
DEFAULT_YARU_THEME = "Yaru-blue"


def hex_to_yaru_theme(value: str) -> str:
    """Map a color's hue to the closest Yaru icon theme variant."""
    hsl = hex_to_hsl(value)
    if hsl.s == 0:
        return DEFAULT_YARU_THEME
    for upper, name in _YARU_HUE_TABLE:
        if hsl.h < upper:
            return name
    return "Yaru-red"
