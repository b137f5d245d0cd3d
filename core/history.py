from __future__ import annotations

import logging
import threading
from typing import Callable, List, Optional, Tuple

from core.state import EditState

logger = logging.getLogger(__name__)

Observer = Callable[[EditState], None]


class History:
    """
    Linear undo/redo over immutable ``EditState`` snapshots.

    ``past`` runs oldest -> newest, ``future`` runs in redo order (next redo
    first). A commit discards the redo branch. Observers are notified with
    the new present while the lock is held, so renders arrive in mutation
    order.
    """

    def __init__(self, initial: Optional[EditState] = None, limit: Optional[int] = None):
        self._past: List[EditState] = []
        self._present: EditState = initial if initial is not None else EditState()
        self._future: List[EditState] = []
        self._limit = limit
        self._observers: List[Observer] = []
        self._lock = threading.RLock()

    @property
    def present(self) -> EditState:
        return self._present

    @property
    def past(self) -> Tuple[EditState, ...]:
        return tuple(self._past)

    @property
    def future(self) -> Tuple[EditState, ...]:
        return tuple(self._future)

    @property
    def can_undo(self) -> bool:
        return bool(self._past)

    @property
    def can_redo(self) -> bool:
        return bool(self._future)

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        with self._lock:
            self._observers.append(observer)

        def unsubscribe() -> None:
            with self._lock:
                if observer in self._observers:
                    self._observers.remove(observer)

        return unsubscribe

    def reset(self, baseline: EditState) -> None:
        """Start a fresh history at ``baseline`` (used when a new image loads)."""
        with self._lock:
            self._past.clear()
            self._future.clear()
            self._present = baseline
            logger.debug("reset: past=0 future=0")
            self._notify()

    def commit(self, next_state: EditState) -> None:
        with self._lock:
            self._past.append(self._present)
            if self._limit is not None and len(self._past) > self._limit:
                self._past.pop(0)
            self._present = next_state
            self._future.clear()
            logger.debug(f"commit: past={len(self._past)} future=0")
            self._notify()

    def undo(self) -> None:
        with self._lock:
            if not self._past:
                return
            prev = self._past.pop()
            self._future.insert(0, self._present)
            self._present = prev
            logger.debug(f"undo: past={len(self._past)} future={len(self._future)}")
            self._notify()

    def redo(self) -> None:
        with self._lock:
            if not self._future:
                return
            nxt = self._future.pop(0)
            self._past.append(self._present)
            self._present = nxt
            logger.debug(f"redo: past={len(self._past)} future={len(self._future)}")
            self._notify()

    def _notify(self) -> None:
        present = self._present
        for observer in list(self._observers):
            try:
                observer(present)
            except Exception:
                logger.exception("history observer failed")
