from __future__ import annotations

import logging
from typing import Dict, Optional

from PySide6.QtCore import QObject, QRunnable, QThreadPool, Signal

from core.io import decode_image

logger = logging.getLogger(__name__)


class _DecodeSignals(QObject):
    finished = Signal(int, object)


class _DecodeTask(QRunnable):
    def __init__(self, ticket: int, path: str, signals: _DecodeSignals):
        super().__init__()
        self._ticket = ticket
        self._path = path
        self._signals = signals

    def run(self) -> None:
        result = None
        try:
            result = decode_image(self._path)
        except Exception:
            logger.exception(f"Decoding {self._path} failed")
        finally:
            # Always report back so the request resolves to decoded or failed
            self._signals.finished.emit(self._ticket, result)


class ImageLoader(QObject):
    """
    Decodes images off the GUI thread.

    Results come back on the GUI thread through ``decoded``/``failed``.
    Only the latest request is delivered; older completions are dropped.
    """

    decoded = Signal(object)
    failed = Signal(str)

    def __init__(self, parent: Optional[QObject] = None, pool: Optional[QThreadPool] = None):
        super().__init__(parent)
        self._pool = pool if pool is not None else QThreadPool.globalInstance()
        self._ticket = 0
        self._paths: Dict[int, str] = {}
        self._signals = _DecodeSignals(self)
        self._signals.finished.connect(self._on_finished)

    def load(self, path: str) -> None:
        self._ticket += 1
        self._paths[self._ticket] = path
        self._pool.start(_DecodeTask(self._ticket, path, self._signals))

    def _on_finished(self, ticket: int, result: object) -> None:
        path = self._paths.pop(ticket, "")
        if ticket != self._ticket:
            logger.debug(f"Dropping stale decode of {path}")
            return
        if result is None:
            self.failed.emit(path)
            return
        self.decoded.emit(result)
