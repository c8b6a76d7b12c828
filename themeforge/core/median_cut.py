"""Median-cut color quantization over sampled image pixels."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from themeforge.core.colors import rgb_to_hex, round_half_up
from themeforge.errors import ErrorCode, QuantizationError

logger = logging.getLogger(__name__)

IMAGE_SCALE_SIZE = 200
MAX_PIXELS_TO_SAMPLE = 40_000
ALPHA_CUTOFF = 128


@dataclass(frozen=True, slots=True)
class QuantizedColor:
    """Representative color of one bucket plus how many samples it stands for."""

    r: int
    g: int
    b: int
    count: int

    @property
    def hex(self) -> str:
        return rgb_to_hex(self.r, self.g, self.b)


class ColorBucket:
    """A box in RGB space holding an (n, 3) array of sampled colors."""

    def __init__(self, colors: np.ndarray) -> None:
        self.colors = colors
        if len(colors):
            self._low = colors.min(axis=0).astype(np.int64)
            self._high = colors.max(axis=0).astype(np.int64)
        else:
            self._low = np.zeros(3, dtype=np.int64)
            self._high = np.zeros(3, dtype=np.int64)

    def __len__(self) -> int:
        return len(self.colors)

    def channel_range(self, channel: int) -> int:
        return int(self._high[channel] - self._low[channel])

    def longest_channel(self) -> int:
        """Index of the widest channel; ties prefer R over G over B."""
        ranges = [self.channel_range(i) for i in range(3)]
        return ranges.index(max(ranges))

    def widest_range(self) -> int:
        return max(self.channel_range(i) for i in range(3))

    def volume(self) -> int:
        return (
            self.channel_range(0)
            * self.channel_range(1)
            * self.channel_range(2)
            * len(self.colors)
        )

    def split(self) -> tuple[ColorBucket, ColorBucket]:
        channel = self.longest_channel()
        order = np.argsort(self.colors[:, channel], kind="stable")
        ordered = self.colors[order]
        midpoint = len(ordered) // 2
        return ColorBucket(ordered[:midpoint]), ColorBucket(ordered[midpoint:])

    def average(self) -> QuantizedColor:
        count = len(self.colors)
        if count == 0:
            return QuantizedColor(0, 0, 0, 0)
        sums = self.colors.astype(np.int64).sum(axis=0)
        return QuantizedColor(
            r=round_half_up(int(sums[0]) / count),
            g=round_half_up(int(sums[1]) / count),
            b=round_half_up(int(sums[2]) / count),
            count=count,
        )


def load_image_pixels(image_path: str | Path, max_dimension: int = IMAGE_SCALE_SIZE) -> np.ndarray:
    """Decode an image and return an (h, w, 4) uint8 RGBA array, downscaled."""
    path = Path(image_path)
    try:
        with Image.open(path) as image:
            image = ImageOps.exif_transpose(image)
            image.thumbnail((max_dimension, max_dimension), Image.Resampling.BILINEAR)
            rgba = image.convert("RGBA")
            return np.asarray(rgba, dtype=np.uint8)
    except FileNotFoundError as exc:
        raise QuantizationError(
            message=f"Image not found: {path}",
            path=path,
            details={"original": str(exc)},
        ) from exc
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
        raise QuantizationError(path=path, details={"original": str(exc)}) from exc


def sample_pixels(rgba: np.ndarray, max_samples: int = MAX_PIXELS_TO_SAMPLE) -> np.ndarray:
    """Stride-sample an RGBA array into an (n, 3) RGB array, dropping transparent pixels."""
    height, width = rgba.shape[:2]
    step = max(1, (width * height) // max_samples)
    sampled = rgba[::step, ::step].reshape(-1, rgba.shape[2])
    if sampled.shape[1] == 4:
        sampled = sampled[sampled[:, 3] >= ALPHA_CUTOFF]
    return np.ascontiguousarray(sampled[:, :3])


def _deduplicate(colors: np.ndarray) -> list[QuantizedColor]:
    seen: dict[tuple[int, int, int], int] = {}
    for r, g, b in colors.tolist():
        key = (r, g, b)
        seen[key] = seen.get(key, 0) + 1
    return [QuantizedColor(r, g, b, count) for (r, g, b), count in seen.items()]


def _merge_representatives(averages: list[QuantizedColor]) -> list[QuantizedColor]:
    """Fold representatives with the same RGB together, keeping first-seen order."""
    merged: dict[tuple[int, int, int], int] = {}
    for color in averages:
        if color.count <= 0:
            continue
        key = (color.r, color.g, color.b)
        merged[key] = merged.get(key, 0) + color.count
    return [QuantizedColor(r, g, b, count) for (r, g, b), count in merged.items()]


def _pick_bucket_to_split(buckets: list[ColorBucket]) -> int:
    """Largest-volume splittable bucket; flat buckets fall back to widest range."""
    best_index = -1
    best_volume = 0
    for index, bucket in enumerate(buckets):
        if len(bucket) < 2:
            continue
        volume = bucket.volume()
        if volume > best_volume:
            best_volume = volume
            best_index = index
    if best_index != -1:
        return best_index

    best_range = 0
    for index, bucket in enumerate(buckets):
        if len(bucket) < 2:
            continue
        spread = bucket.widest_range()
        if spread > best_range:
            best_range = spread
            best_index = index
    return best_index


def median_cut(colors: np.ndarray, num_colors: int) -> list[QuantizedColor]:
    """Reduce sampled colors to at most ``num_colors`` representatives.

    Buckets whose members are all identical are never split, so an image with
    fewer distinct colors than ``num_colors`` yields one entry per distinct
    color rather than duplicates or empty buckets. A median split can still
    cut through a run of one color; such halves come back as a single entry
    with their counts summed.
    """
    colors = np.asarray(colors, dtype=np.uint8).reshape(-1, 3)
    if len(colors) == 0 or num_colors <= 0:
        return []
    if len(colors) <= num_colors:
        return _deduplicate(colors)

    buckets = [ColorBucket(colors)]
    while len(buckets) < num_colors:
        index = _pick_bucket_to_split(buckets)
        if index == -1:
            break
        left, right = buckets[index].split()
        buckets[index:index + 1] = [left, right]

    return _merge_representatives([bucket.average() for bucket in buckets])


def extract_dominant_colors(image_path: str | Path, num_colors: int) -> list[str]:
    """Quantize an image and return hex colors sorted by dominance."""
    pixels = sample_pixels(load_image_pixels(image_path))
    if len(pixels) == 0:
        raise QuantizationError(
            ErrorCode.IMAGE_TOO_SMALL,
            path=Path(image_path),
            details={"samples": len(pixels)},
        )

    quantized = median_cut(pixels, num_colors)
    if not quantized:
        raise QuantizationError(
            ErrorCode.IMAGE_TOO_SMALL,
            path=Path(image_path),
            details={"samples": len(pixels)},
        )

    quantized.sort(key=lambda color: color.count, reverse=True)
    logger.debug("quantized %s into %d colors from %d samples", image_path, len(quantized), len(pixels))
    return [color.hex for color in quantized]
