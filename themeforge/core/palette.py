"""The 16-color palette type and the per-mode palette generators.

Every generator takes the dominant colors of an image (most dominant first)
and returns a list of 16 hex colors laid out like an ANSI terminal palette:
0 background, 1-6 red/green/yellow/blue/magenta/cyan, 7 foreground,
8 bright black, 9-14 bright twins of 1-6 and 15 bright foreground.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass
from enum import Enum

from themeforge.core.analysis import (
    ANSI_HUES,
    MONOCHROME_SATURATION_THRESHOLD,
    PALETTE_SIZE,
    bright_version,
    find_best_match,
    find_by_lightness,
    has_low_color_diversity,
    is_dark_color,
    is_monochrome_image,
    pad_candidates,
    sort_by_lightness,
    with_lightness,
)
from themeforge.core.colors import HSL, hex_to_hsl, hsl_to_hex, normalize_hex
from themeforge.errors import InvalidPaletteError

logger = logging.getLogger(__name__)

SUBTLE_SATURATION = 28
MONOCHROME_SATURATION = 5
MONOCHROME_COLOR8_FACTOR = 0.5

VERY_DARK_BACKGROUND = 20
VERY_LIGHT_BACKGROUND = 80
MIN_LIGHTNESS_ON_DARK = 55
MAX_LIGHTNESS_ON_LIGHT = 45
ABSOLUTE_MIN_LIGHTNESS = 25
OUTLIER_THRESHOLD = 25
BRIGHT_THEME_THRESHOLD = 50


class ExtractionMode(str, Enum):
    NORMAL = "normal"
    MONOCHROMATIC = "monochromatic"
    ANALOGOUS = "analogous"
    PASTEL = "pastel"
    MATERIAL = "material"
    COLORFUL = "colorful"
    MUTED = "muted"
    BRIGHT = "bright"

    @classmethod
    def parse(cls, value: str | ExtractionMode | None) -> ExtractionMode:
        """Lenient lookup used for settings and CLI input; unknown values mean normal."""
        if isinstance(value, cls):
            return value
        cleaned = (value or "").strip().lower()
        for mode in cls:
            if mode.value == cleaned:
                return mode
        return cls.NORMAL


@dataclass(frozen=True, slots=True)
class Palette:
    """Exactly 16 normalized ``#rrggbb`` colors."""

    colors: tuple[str, ...]

    def __post_init__(self) -> None:
        if isinstance(self.colors, str) or len(self.colors) != PALETTE_SIZE:
            count = 1 if isinstance(self.colors, str) else len(self.colors)
            raise InvalidPaletteError(count=count)
        object.__setattr__(self, "colors", tuple(normalize_hex(c) for c in self.colors))

    @classmethod
    def from_colors(cls, colors: Sequence[str]) -> Palette:
        return cls(tuple(colors))

    def __len__(self) -> int:
        return PALETTE_SIZE

    def __iter__(self) -> Iterator[str]:
        return iter(self.colors)

    def __getitem__(self, index: int) -> str:
        return self.colors[index]

    @property
    def background(self) -> str:
        return self.colors[0]

    @property
    def foreground(self) -> str:
        return self.colors[15]

    def replace(self, index: int, color: str) -> Palette:
        updated = list(self.colors)
        updated[index] = color
        return Palette(tuple(updated))

    def to_list(self) -> list[str]:
        return list(self.colors)


# -- auto-detected palettes --


def generate_chromatic(colors: Sequence[str], light_mode: bool) -> list[str]:
    palette = [""] * PALETTE_SIZE
    background = find_by_lightness(colors, lightest=light_mode)
    used = {background}
    foreground = find_by_lightness(colors, lightest=not light_mode, exclude=used)
    used.add(foreground)

    palette[0] = colors[background]
    palette[7] = colors[foreground]
    for slot, hue in enumerate(ANSI_HUES, start=1):
        match = find_best_match(hue, colors, used)
        palette[slot] = colors[match]
        used.add(match)

    bg = hex_to_hsl(palette[0])
    color8_lightness = min(100.0, bg.l + 45) if is_dark_color(palette[0]) else max(0.0, bg.l - 40)
    palette[8] = hsl_to_hex(bg.h, bg.s * 0.5, color8_lightness)
    for slot in range(1, 7):
        palette[slot + 8] = bright_version(palette[slot])
    palette[15] = bright_version(palette[7])
    return palette


def generate_subtle(colors: Sequence[str], light_mode: bool) -> list[str]:
    """Evenly spaced, low-saturation ANSI hues for images with little hue variety."""
    ordered = sort_by_lightness(colors)
    darkest, lightest = ordered[0], ordered[-1]
    chromatic_hues = [
        hsl.h for hsl in (hex_to_hsl(c) for c in colors) if hsl.s > MONOCHROME_SATURATION_THRESHOLD
    ]
    avg_hue = sum(chromatic_hues) / len(chromatic_hues) if chromatic_hues else darkest[1].h

    palette = [""] * PALETTE_SIZE
    palette[0] = lightest[0] if light_mode else darkest[0]
    palette[7] = darkest[0] if light_mode else lightest[0]

    bright_saturation = SUBTLE_SATURATION + 8
    for i, hue in enumerate(ANSI_HUES):
        lightness = 50 + (i - 2.5) * 4
        palette[i + 1] = hsl_to_hex(hue, SUBTLE_SATURATION, lightness)
        adjusted = lightness + (-8 if light_mode else 8)
        palette[i + 9] = hsl_to_hex(hue, bright_saturation, max(0.0, min(100.0, adjusted)))

    if light_mode:
        palette[8] = hsl_to_hex(avg_hue, SUBTLE_SATURATION * 0.5, max(0.0, lightest[1].l - 40))
        palette[15] = hsl_to_hex(avg_hue, SUBTLE_SATURATION * 0.3, max(0.0, darkest[1].l - 5))
    else:
        palette[8] = hsl_to_hex(avg_hue, SUBTLE_SATURATION * 0.5, min(100.0, darkest[1].l + 45))
        palette[15] = hsl_to_hex(avg_hue, SUBTLE_SATURATION * 0.3, min(100.0, lightest[1].l + 5))
    return palette


def generate_monochrome(colors: Sequence[str], light_mode: bool) -> list[str]:
    """Grayscale palette for images that are mostly unsaturated."""
    ordered = sort_by_lightness(colors)
    (dark_hex, dark), (light_hex, light) = ordered[0], ordered[-1]
    hue = dark.h

    palette = [""] * PALETTE_SIZE
    palette[0] = light_hex if light_mode else dark_hex
    palette[7] = dark_hex if light_mode else light_hex

    if light_mode:
        start = dark.l + 10
        end = min(dark.l + 40, light.l - 10)
    else:
        start = max(dark.l + 30, light.l - 40)
        end = light.l - 10
    step = (end - start) / 5
    for slot in range(1, 7):
        palette[slot] = hsl_to_hex(hue, MONOCHROME_SATURATION, start + (slot - 1) * step)

    color8_lightness = max(0.0, dark.l + 5) if light_mode else min(100.0, light.l - 10)
    palette[8] = hsl_to_hex(hue, MONOCHROME_SATURATION * MONOCHROME_COLOR8_FACTOR, color8_lightness)

    for slot in range(1, 7):
        lightness = hex_to_hsl(palette[slot]).l + (-10 if light_mode else 10)
        palette[slot + 8] = hsl_to_hex(hue, MONOCHROME_SATURATION, max(0.0, min(100.0, lightness)))

    if light_mode:
        palette[15] = hsl_to_hex(hue, 2, max(0.0, dark.l - 5))
    else:
        palette[15] = hsl_to_hex(hue, 2, min(100.0, light.l + 5))
    return palette


# -- hue-driven palettes --


def _first_saturated(colors: Sequence[str]) -> HSL:
    for color in colors:
        hsl = hex_to_hsl(color)
        if hsl.s > MONOCHROME_SATURATION_THRESHOLD:
            return hsl
    return hex_to_hsl(colors[0])


def generate_monochromatic(colors: Sequence[str], light_mode: bool) -> list[str]:
    hue = _first_saturated(colors).h
    ordered = sort_by_lightness(colors)
    darkest, lightest = ordered[0][1].l, ordered[-1][1].l

    palette = [""] * PALETTE_SIZE
    if light_mode:
        palette[0] = hsl_to_hex(hue, 8, max(85.0, lightest))
        palette[7] = hsl_to_hex(hue, 25, min(30.0, darkest + 10))
    else:
        palette[0] = hsl_to_hex(hue, 15, min(15.0, darkest))
        palette[7] = hsl_to_hex(hue, 10, max(80.0, lightest - 10))

    saturations = (40, 50, 45, 55, 42, 48)
    bright_saturations = (60, 70, 65, 75, 62, 68)
    base = 45 if light_mode else 55
    for i in range(6):
        lightness = base + (i - 2.5) * 5
        palette[i + 1] = hsl_to_hex(hue, saturations[i], lightness)
        adjusted = lightness + (-8 if light_mode else 8)
        palette[i + 9] = hsl_to_hex(hue, bright_saturations[i], max(0.0, min(100.0, adjusted)))

    palette[8] = hsl_to_hex(hue, 20, 40 if light_mode else 65)
    if light_mode:
        palette[15] = hsl_to_hex(hue, 30, min(25.0, darkest + 5))
    else:
        palette[15] = hsl_to_hex(hue, 15, max(85.0, lightest))
    return palette


def generate_analogous(colors: Sequence[str], light_mode: bool) -> list[str]:
    saturated = [hsl for hsl in (hex_to_hsl(c) for c in colors) if hsl.s > MONOCHROME_SATURATION_THRESHOLD]
    saturated.sort(key=lambda hsl: hsl.s, reverse=True)
    hue = saturated[0].h if saturated else hex_to_hsl(colors[0]).h
    ordered = sort_by_lightness(colors)
    darkest, lightest = ordered[0][1].l, ordered[-1][1].l

    palette = [""] * PALETTE_SIZE
    if light_mode:
        palette[0] = hsl_to_hex(hue, 12, max(90.0, lightest))
        palette[7] = hsl_to_hex(hue, 30, min(25.0, darkest + 10))
    else:
        palette[0] = hsl_to_hex(hue, 18, min(12.0, darkest))
        palette[7] = hsl_to_hex(hue, 15, max(85.0, lightest - 10))

    offsets = (-30, -20, -10, 10, 20, 30)
    saturations = (45, 50, 48, 52, 47, 50)
    base = 45 if light_mode else 58
    for i in range(6):
        shifted = (hue + offsets[i] + 360) % 360
        palette[i + 1] = hsl_to_hex(shifted, saturations[i], base + (-3 if i % 2 == 0 else 3))
        palette[i + 9] = hsl_to_hex(shifted, saturations[i] + 8, 38 if light_mode else 68)

    palette[8] = hsl_to_hex(hue, 20, 55) if light_mode else hsl_to_hex(hue, 15, 45)
    palette[15] = hsl_to_hex(hue, 20, 20) if light_mode else hsl_to_hex(hue, 10, 95)
    return palette


def generate_material(colors: Sequence[str], light_mode: bool) -> list[str]:
    """Material Design neutrals with accent hues matched from the image."""
    palette = [""] * PALETTE_SIZE
    palette[0], palette[7] = ("#fafafa", "#212121") if light_mode else ("#121212", "#ffffff")

    used: set[int] = set()
    for slot, target in enumerate(ANSI_HUES, start=1):
        match = find_best_match(target, colors, used)
        hsl = hex_to_hsl(colors[match])
        if light_mode:
            lightness = max(35.0, min(60.0, hsl.l))
        else:
            lightness = max(45.0, min(70.0, hsl.l))
        palette[slot] = hsl_to_hex(hsl.h, max(hsl.s, 35.0), lightness)
        used.add(match)

    palette[8] = "#757575" if light_mode else "#9e9e9e"
    for slot in range(1, 7):
        hsl = hex_to_hsl(palette[slot])
        lightness = max(30.0, hsl.l - 8) if light_mode else min(75.0, hsl.l + 8)
        palette[slot + 8] = hsl_to_hex(hsl.h, min(100.0, hsl.s + 8), lightness)

    palette[15] = "#000000" if light_mode else "#ffffff"
    return palette


# -- chromatic transforms --

# A rule maps (hsl, light_mode) to a hex color. Slots without an entry use "default".
_Rule = Callable[[HSL, bool], str]


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _transform_chromatic(colors: Sequence[str], light_mode: bool, rules: dict[object, _Rule]) -> list[str]:
    base = generate_chromatic(colors, light_mode)
    return [
        rules.get(index, rules["default"])(hex_to_hsl(color), light_mode)
        for index, color in enumerate(base)
    ]


def _fixed(light: tuple[float, float], dark: tuple[float, float]) -> _Rule:
    """Keep the hue, force saturation and lightness."""

    def rule(hsl: HSL, light_mode: bool) -> str:
        s, l = light if light_mode else dark
        return hsl_to_hex(hsl.h, s, l)

    return rule


def _pastel_default(hsl: HSL, light_mode: bool) -> str:
    return hsl_to_hex(hsl.h, min(35.0, hsl.s), 50 if light_mode else 70)


def _colorful_default(hsl: HSL, light_mode: bool) -> str:
    saturation = _clamp(hsl.s + 30, 75, 95)
    lightness = _clamp(hsl.l, 35, 55) if light_mode else _clamp(hsl.l, 55, 70)
    return hsl_to_hex(hsl.h, saturation, lightness)


def _muted_default(hsl: HSL, light_mode: bool) -> str:
    saturation = _clamp(hsl.s * 0.5, 15, 35)
    lightness = _clamp(hsl.l, 40, 60) if light_mode else _clamp(hsl.l, 50, 65)
    return hsl_to_hex(hsl.h, saturation, lightness)


def _bright_default(hsl: HSL, light_mode: bool) -> str:
    saturation = _clamp(hsl.s, 45, 70)
    lightness = _clamp(hsl.l + 10, 45, 65) if light_mode else _clamp(hsl.l + 15, 65, 80)
    return hsl_to_hex(hsl.h, saturation, lightness)


PASTEL_RULES: dict[object, _Rule] = {
    0: _fixed(light=(10, 95), dark=(15, 20)),
    7: _fixed(light=(25, 35), dark=(20, 75)),
    15: _fixed(light=(25, 35), dark=(20, 75)),
    8: _fixed(light=(15, 65), dark=(12, 45)),
    "default": _pastel_default,
}

COLORFUL_RULES: dict[object, _Rule] = {
    0: _fixed(light=(8, 98), dark=(12, 8)),
    7: _fixed(light=(15, 10), dark=(10, 95)),
    15: _fixed(light=(15, 10), dark=(10, 95)),
    8: _fixed(light=(20, 50), dark=(15, 55)),
    "default": _colorful_default,
}

MUTED_RULES: dict[object, _Rule] = {
    0: _fixed(light=(5, 95), dark=(8, 15)),
    7: _fixed(light=(10, 20), dark=(8, 85)),
    15: _fixed(light=(10, 20), dark=(8, 85)),
    8: _fixed(light=(8, 60), dark=(6, 50)),
    "default": _muted_default,
}

BRIGHT_RULES: dict[object, _Rule] = {
    0: _fixed(light=(6, 98), dark=(10, 6)),
    7: _fixed(light=(12, 15), dark=(8, 98)),
    15: _fixed(light=(12, 15), dark=(8, 98)),
    8: _fixed(light=(15, 55), dark=(12, 65)),
    "default": _bright_default,
}


def generate_pastel(colors: Sequence[str], light_mode: bool) -> list[str]:
    return _transform_chromatic(colors, light_mode, PASTEL_RULES)


def generate_colorful(colors: Sequence[str], light_mode: bool) -> list[str]:
    return _transform_chromatic(colors, light_mode, COLORFUL_RULES)


def generate_muted(colors: Sequence[str], light_mode: bool) -> list[str]:
    return _transform_chromatic(colors, light_mode, MUTED_RULES)


def generate_bright(colors: Sequence[str], light_mode: bool) -> list[str]:
    return _transform_chromatic(colors, light_mode, BRIGHT_RULES)


_MODE_GENERATORS: dict[ExtractionMode, Callable[[Sequence[str], bool], list[str]]] = {
    ExtractionMode.MONOCHROMATIC: generate_monochromatic,
    ExtractionMode.ANALOGOUS: generate_analogous,
    ExtractionMode.PASTEL: generate_pastel,
    ExtractionMode.MATERIAL: generate_material,
    ExtractionMode.COLORFUL: generate_colorful,
    ExtractionMode.MUTED: generate_muted,
    ExtractionMode.BRIGHT: generate_bright,
}


# -- readability --


def normalize_brightness(colors: Sequence[str]) -> list[str]:
    """Pull slots 1-7 into a readable lightness band for the background.

    Adjusted slots 1-6 get their bright twins (9-14) regenerated. Returns a
    new list; the input is not modified.
    """
    palette = list(colors)
    background = hex_to_hsl(palette[0]).l
    slots = [(index, hex_to_hsl(palette[index]).l) for index in range(1, 8)]

    def adjust(index: int, lightness: float, reason: str) -> None:
        logger.debug("adjusting color %d for %s: %.1f -> %.1f", index, reason, hex_to_hsl(palette[index]).l, lightness)
        palette[index] = with_lightness(palette[index], lightness)
        if 1 <= index <= 6:
            palette[index + 8] = bright_version(palette[index])

    if background < VERY_DARK_BACKGROUND:
        for index, lightness in slots:
            if lightness < MIN_LIGHTNESS_ON_DARK:
                adjust(index, MIN_LIGHTNESS_ON_DARK + index * 3, "dark background")
        return palette

    if background > VERY_LIGHT_BACKGROUND:
        for index, lightness in slots:
            if lightness > MAX_LIGHTNESS_ON_LIGHT:
                adjust(index, max(ABSOLUTE_MIN_LIGHTNESS, MAX_LIGHTNESS_ON_LIGHT - index * 2), "light background")
        return palette

    average = sum(lightness for _, lightness in slots) / len(slots)
    bright_theme = average > BRIGHT_THEME_THRESHOLD
    for index, lightness in slots:
        if bright_theme and lightness < average - OUTLIER_THRESHOLD:
            adjust(index, average - 10, "dark outlier")
        elif not bright_theme and lightness > average + OUTLIER_THRESHOLD:
            adjust(index, average + 10, "bright outlier")
    return palette


def generate_palette(
    dominant_colors: Sequence[str],
    mode: ExtractionMode | str = ExtractionMode.NORMAL,
    light_mode: bool = False,
) -> Palette:
    """Build a readable 16-color palette from dominant colors (most dominant first)."""
    if not dominant_colors:
        raise InvalidPaletteError(message="No colors to build a palette from", count=0)

    mode = ExtractionMode.parse(mode)
    candidates = pad_candidates([normalize_hex(c) for c in dominant_colors])
    if len(candidates) > len(dominant_colors):
        logger.debug("padded %d dominant colors to %d candidates", len(dominant_colors), len(candidates))

    generator = _MODE_GENERATORS.get(mode)
    if generator is not None:
        logger.info("generating %s palette", mode.value)
    elif is_monochrome_image(candidates):
        logger.info("detected monochrome image, generating grayscale palette")
        generator = generate_monochrome
    elif has_low_color_diversity(candidates):
        logger.info("detected low color diversity, generating subtle palette")
        generator = generate_subtle
    else:
        logger.info("detected diverse image, generating chromatic palette")
        generator = generate_chromatic

    return Palette.from_colors(normalize_brightness(generator(candidates, light_mode)))
