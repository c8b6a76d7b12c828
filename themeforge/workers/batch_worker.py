"""Worker that runs a BatchQueue off the UI thread."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from PySide6.QtCore import Signal

from themeforge.core.batch import BatchItemResult, BatchQueue
from themeforge.core.extraction import PaletteExtractor
from themeforge.core.palette import ExtractionMode
from themeforge.workers.base_worker import BaseWorker


class BatchWorker(BaseWorker):
    """Extracts palettes for a handful of wallpapers, one after another."""

    item_completed = Signal(int, object)    # index, BatchItemResult
    item_failed = Signal(int, str)          # index, error message

    def __init__(
        self,
        paths: Iterable[str | Path],
        light_mode: bool = False,
        mode: ExtractionMode | str = ExtractionMode.NORMAL,
        extractor: PaletteExtractor | None = None,
    ) -> None:
        super().__init__()
        self._queue = BatchQueue(extractor, cancel_event=self.cancel_event)
        self._queue.add(paths)
        self._light_mode = light_mode
        self._mode = mode

    @property
    def queue(self) -> BatchQueue:
        return self._queue

    def _on_item(self, result: BatchItemResult) -> None:
        self.progress.emit(result.index + 1, len(self._queue), result.path.name)
        if result.success:
            self.item_completed.emit(result.index, result)
        else:
            self.item_failed.emit(result.index, result.error or "")

    def _work(self) -> list[BatchItemResult]:
        return self._queue.process(self._light_mode, self._mode, on_item=self._on_item)
