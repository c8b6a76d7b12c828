"""Sequential palette extraction over a small queue of wallpapers."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path
from threading import Event

from themeforge.core.extraction import PaletteExtractor
from themeforge.core.palette import ExtractionMode, Palette
from themeforge.errors import ThemeForgeError

logger = logging.getLogger(__name__)

MAX_BATCH_SIZE = 10


@dataclass(frozen=True, slots=True)
class BatchItemResult:
    index: int
    path: Path
    palette: Palette | None = None
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.palette is not None


ItemCallback = Callable[[BatchItemResult], None]


class BatchQueue:
    """Holds up to MAX_BATCH_SIZE wallpapers and extracts their palettes one at a time.

    Items are never processed concurrently. Cancellation is checked before
    each item; results already produced are kept. A caller-owned
    ``cancel_event`` is honoured alongside the queue's own and is never
    cleared here, so a cancel that lands before ``process`` starts still holds.
    """

    def __init__(
        self,
        extractor: PaletteExtractor | None = None,
        max_size: int = MAX_BATCH_SIZE,
        cancel_event: Event | None = None,
    ) -> None:
        self._extractor = extractor or PaletteExtractor()
        self._max_size = max_size
        self._items: list[Path] = []
        self._results: list[BatchItemResult] = []
        self._processing = False
        self._cancel_event = Event()
        self._external_cancel = cancel_event

    def __len__(self) -> int:
        return len(self._items)

    @property
    def items(self) -> list[Path]:
        return list(self._items)

    @property
    def results(self) -> list[BatchItemResult]:
        return list(self._results)

    @property
    def is_processing(self) -> bool:
        return self._processing

    @property
    def is_cancelled(self) -> bool:
        if self._external_cancel is not None and self._external_cancel.is_set():
            return True
        return self._cancel_event.is_set()

    def add(self, paths: Iterable[str | Path]) -> int:
        """Queue ``paths``, truncated to the free space. Returns how many were added."""
        if self._processing:
            logger.warning("cannot add to batch queue while processing")
            return 0
        free = self._max_size - len(self._items)
        incoming = [Path(path) for path in paths]
        accepted = incoming[:max(free, 0)]
        if incoming and not accepted:
            logger.warning("batch queue is full (max %d items)", self._max_size)
        if len(accepted) < len(incoming):
            logger.info("dropped %d item(s) over the batch limit", len(incoming) - len(accepted))
        self._items.extend(accepted)
        return len(accepted)

    def clear(self) -> bool:
        if self._processing:
            logger.warning("cannot clear batch queue while processing")
            return False
        self._items.clear()
        self._results.clear()
        return True

    def cancel(self) -> None:
        self._cancel_event.set()

    def process(
        self,
        light_mode: bool = False,
        mode: ExtractionMode | str = ExtractionMode.NORMAL,
        on_item: ItemCallback | None = None,
    ) -> list[BatchItemResult]:
        if self._processing:
            logger.warning("batch already processing")
            return self.results
        if not self._items:
            logger.info("batch queue is empty")
            return []

        self._processing = True
        self._cancel_event.clear()
        self._results = []
        total = len(self._items)
        logger.info("processing batch of %d wallpaper(s)", total)
        try:
            for index, path in enumerate(self._items):
                if self.is_cancelled:
                    logger.info("batch cancelled after %d of %d", index, total)
                    break
                try:
                    palette = self._extractor.extract(path, mode, light_mode)
                    result = BatchItemResult(index, path, palette=palette)
                except ThemeForgeError as exc:
                    logger.error("batch item %d/%d failed (%s): %s", index + 1, total, path.name, exc.message)
                    result = BatchItemResult(index, path, error=exc.message)
                self._results.append(result)
                if on_item is not None:
                    on_item(result)
        finally:
            self._processing = False

        succeeded = sum(1 for result in self._results if result.success)
        logger.info("batch finished: %d succeeded, %d failed", succeeded, len(self._results) - succeeded)
        return self.results
