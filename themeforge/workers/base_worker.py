"""QObject worker base for palette jobs that run off the UI thread."""

from __future__ import annotations

import logging
from threading import Event
from typing import Any

from PySide6.QtCore import QObject, Signal

logger = logging.getLogger(__name__)


class BaseWorker(QObject):
    """Runs one palette job and reports it through Qt signals.

    Subclasses implement ``_work``; ``run`` wraps it with the started,
    cancelled, finished and error signals. The cancel event is created here
    and handed to whatever core object does the looping, so a cancel issued
    before that loop starts is still seen by it.

    Usage:
        worker = BatchWorker(paths)
        thread = QThread()
        worker.moveToThread(thread)
        thread.started.connect(worker.run)
        worker.finished.connect(thread.quit)
        worker.cancelled.connect(thread.quit)
        thread.start()
    """

    started = Signal()
    progress = Signal(int, int, str)    # done, total, wallpaper name
    finished = Signal(object)           # job result
    error = Signal(str)
    cancelled = Signal()

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._cancel_event = Event()

    @property
    def cancel_event(self) -> Event:
        return self._cancel_event

    @property
    def is_cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def cancel(self) -> None:
        logger.debug("%s cancel requested", type(self).__name__)
        self._cancel_event.set()

    def _work(self) -> Any:
        raise NotImplementedError

    def run(self) -> None:
        self.started.emit()
        if self.is_cancelled:
            self.cancelled.emit()
            return
        try:
            result = self._work()
        except Exception as e:
            logger.exception("%s failed", type(self).__name__)
            self.error.emit(str(e))
            return
        if self.is_cancelled:
            self.cancelled.emit()
        else:
            self.finished.emit(result)
