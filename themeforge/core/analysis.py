"""Color classification and matching helpers used by the palette generators."""

from __future__ import annotations

import math
from collections.abc import Collection, Sequence

from themeforge.core.colors import HSL, hex_to_hsl, hsl_to_hex

PALETTE_SIZE = 16

MONOCHROME_SATURATION_THRESHOLD = 15
MONOCHROME_IMAGE_THRESHOLD = 0.7
MIN_CHROMATIC_SATURATION = 15
TOO_DARK_THRESHOLD = 20
TOO_BRIGHT_THRESHOLD = 85
DARK_COLOR_THRESHOLD = 50
DIVERSITY_SAMPLE_SIZE = 16
HUE_BUCKET_SIZE = 30
MIN_OCCUPIED_HUE_BUCKETS = 3

BRIGHT_LIGHTNESS_BOOST = 18
BRIGHT_SATURATION_BOOST = 1.1

# Target hues for ANSI slots 1-6: red, green, yellow, blue, magenta, cyan.
ANSI_HUES: tuple[int, ...] = (0, 120, 60, 240, 300, 180)

_PAD_STEP = 5


def is_dark_color(value: str) -> bool:
    return hex_to_hsl(value).l < DARK_COLOR_THRESHOLD


def hue_distance(first: float, second: float) -> float:
    """Shortest distance between two hues on the color wheel (0-180)."""
    diff = abs(first - second) % 360
    return 360 - diff if diff > 180 else diff


def is_monochrome_image(colors: Sequence[str]) -> bool:
    if not colors:
        return False
    low = sum(1 for color in colors if hex_to_hsl(color).s < MONOCHROME_SATURATION_THRESHOLD)
    return low / len(colors) > MONOCHROME_IMAGE_THRESHOLD


def has_low_color_diversity(colors: Sequence[str]) -> bool:
    """True when the leading chromatic colors crowd into fewer than three hue buckets."""
    hues = [
        hsl.h
        for hsl in (hex_to_hsl(color) for color in colors[:DIVERSITY_SAMPLE_SIZE])
        if hsl.s >= MONOCHROME_SATURATION_THRESHOLD
    ]
    if len(hues) < 3:
        return False
    buckets = {int(math.floor(hue / HUE_BUCKET_SIZE)) % 12 for hue in hues}
    return len(buckets) < MIN_OCCUPIED_HUE_BUCKETS


def find_by_lightness(
    colors: Sequence[str],
    lightest: bool,
    exclude: Collection[int] = (),
) -> int:
    """Index of the lightest (or darkest) color, skipping ``exclude``; first wins ties."""
    best_index = 0
    best_lightness = -1.0 if lightest else 101.0
    for index, color in enumerate(colors):
        if index in exclude:
            continue
        lightness = hex_to_hsl(color).l
        if (lightness > best_lightness) if lightest else (lightness < best_lightness):
            best_lightness = lightness
            best_index = index
    return best_index


def color_score(hsl: HSL, target_hue: float) -> float:
    """Lower is better: hue accuracy first, then saturation, then usable lightness."""
    score = hue_distance(hsl.h, target_hue) * 3
    if hsl.s < MIN_CHROMATIC_SATURATION:
        score += 50
    score += (100 - hsl.s) / 2
    if hsl.l < TOO_DARK_THRESHOLD or hsl.l > TOO_BRIGHT_THRESHOLD:
        score += 10
    return score


def find_best_match(target_hue: float, colors: Sequence[str], used: Collection[int]) -> int:
    best_index = -1
    best_score = math.inf
    for index, color in enumerate(colors):
        if index in used:
            continue
        score = color_score(hex_to_hsl(color), target_hue)
        if score < best_score:
            best_score = score
            best_index = index
    return best_index if best_index != -1 else 0


def bright_version(value: str) -> str:
    """Lighter, slightly more saturated twin used for slots 9-15."""
    hsl = hex_to_hsl(value)
    return hsl_to_hex(
        hsl.h,
        min(100.0, hsl.s * BRIGHT_SATURATION_BOOST),
        min(100.0, hsl.l + BRIGHT_LIGHTNESS_BOOST),
    )


def with_lightness(value: str, lightness: float) -> str:
    hsl = hex_to_hsl(value)
    return hsl_to_hex(hsl.h, hsl.s, lightness)


def sort_by_lightness(colors: Sequence[str]) -> list[tuple[str, HSL]]:
    """Colors paired with their HSL, darkest first. Stable for equal lightness."""
    return sorted(((color, hex_to_hsl(color)) for color in colors), key=lambda item: item[1].l)


def pad_candidates(colors: Sequence[str], target: int = PALETTE_SIZE) -> list[str]:
    """Top up a short candidate list with lighter and darker variants.

    Originals keep their order and come first. Variants step lightness by 5
    points in both directions around each original until ``target`` distinct
    colors exist, so even a single flat color yields a full set.
    """
    result = list(dict.fromkeys(colors))
    if not result or len(result) >= target:
        return result

    seen = set(result)
    bases = [(color, hex_to_hsl(color)) for color in result]
    for offset in range(_PAD_STEP, 101, _PAD_STEP):
        for _, hsl in bases:
            for lightness in (hsl.l + offset, hsl.l - offset):
                if not 0 <= lightness <= 100:
                    continue
                variant = hsl_to_hex(hsl.h, hsl.s, lightness)
                if variant in seen:
                    continue
                seen.add(variant)
                result.append(variant)
                if len(result) >= target:
                    return result
    return result
