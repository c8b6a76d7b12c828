"""Wallpaper to palette: sample, quantize, generate, normalize, cache."""

from __future__ import annotations

import logging
from pathlib import Path

from themeforge.core.median_cut import extract_dominant_colors
from themeforge.core.palette import ExtractionMode, Palette, generate_palette
from themeforge.core.palette_cache import PaletteCache, file_digest
from themeforge.errors import QuantizationError

logger = logging.getLogger(__name__)

DOMINANT_COLORS_TO_EXTRACT = 32


class PaletteExtractor:
    """Extracts a 16-color palette from an image, optionally through a PaletteCache."""

    def __init__(
        self,
        cache: PaletteCache | None = None,
        num_colors: int = DOMINANT_COLORS_TO_EXTRACT,
    ) -> None:
        self._cache = cache
        self._num_colors = num_colors

    def extract(
        self,
        image_path: str | Path,
        mode: ExtractionMode | str = ExtractionMode.NORMAL,
        light_mode: bool = False,
    ) -> Palette:
        path = Path(image_path)
        mode = ExtractionMode.parse(mode)
        try:
            stat = path.stat()
        except FileNotFoundError as exc:
            raise QuantizationError(message=f"Image not found: {path}", path=path) from exc

        digest = ""
        if self._cache is not None:
            digest = file_digest(path)
            cached = self._cache.get(digest, mode.value, light_mode, stat.st_mtime_ns, stat.st_size)
            if cached is not None:
                logger.debug("using cached palette for %s", path.name)
                return cached

        dominant = extract_dominant_colors(path, self._num_colors)
        palette = generate_palette(dominant, mode, light_mode)
        logger.info("extracted %s palette from %s (%d dominant colors)", mode.value, path.name, len(dominant))

        if self._cache is not None:
            self._cache.put(digest, mode.value, light_mode, path, stat.st_mtime_ns, stat.st_size, palette)
        return palette


def extract_palette(
    image_path: str | Path,
    mode: ExtractionMode | str = ExtractionMode.NORMAL,
    light_mode: bool = False,
) -> Palette:
    """Uncached one-shot extraction."""
    return PaletteExtractor().extract(image_path, mode, light_mode)
