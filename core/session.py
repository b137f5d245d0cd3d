from __future__ import annotations

import itertools
import logging
from typing import Any, Callable, Dict, List, Optional

from PIL import Image

from core.compositor import render
from core.constants import DEFAULT_HIGH_QUALITY, DEFAULT_NEAREST_NEIGHBOR
from core.history import History
from core.io import DecodedImage, encode_png
from core.state import EditState

logger = logging.getLogger(__name__)

RenderListener = Callable[[Optional[Image.Image], EditState], None]


class EditorSession:
    """
    One editing session: the history, the decoded sources it refers to and
    the current rendered surface.

    Every user-facing change goes through ``History.commit``; the session is
    a history observer and re-renders synchronously on each change.
    """

    def __init__(self, history: Optional[History] = None):
        self.history = history if history is not None else History()
        self.output: Optional[Image.Image] = None
        self.high_quality = DEFAULT_HIGH_QUALITY
        self.nearest_neighbor = DEFAULT_NEAREST_NEIGHBOR
        self._sources: Dict[str, Image.Image] = {}
        self._ref_counter = itertools.count(1)
        self._listeners: List[RenderListener] = []
        self.history.subscribe(self._on_present_changed)
        self._rerender(self.history.present)

    @property
    def state(self) -> EditState:
        return self.history.present

    def add_render_listener(self, listener: RenderListener) -> None:
        self._listeners.append(listener)

    # ---- Load / export ----
    def on_decoded(self, decoded: DecodedImage) -> EditState:
        """
        Adopt a freshly decoded image. The loaded state becomes the new
        history baseline; snapshots of the previous image are dropped along
        with its bitmap.
        """
        ref = f"src-{next(self._ref_counter)}"
        self._sources = {ref: decoded.image}
        nxt = self.state.loaded(decoded.natural_size, ref)
        logger.info(f"Loaded source {ref} ({decoded.natural_size.w}x{decoded.natural_size.h})")
        self.history.reset(nxt)
        return nxt

    def export_png(self) -> Optional[bytes]:
        if self.output is None:
            return None
        return encode_png(self.output)

    # ---- Parameter edits ----
    def update_filter(self, name: str, raw: Any) -> None:
        if not self.state.image_loaded:
            return
        self._commit_if_changed(self.state.with_filter(name, raw))

    def update_size(self, w: Any = None, h: Any = None) -> None:
        if not self.state.image_loaded:
            return
        self._commit_if_changed(self.state.with_output_size(w=w, h=h))

    def reset_all(self) -> None:
        if not self.state.image_loaded:
            return
        self._commit_if_changed(self.state.reset())

    def undo(self) -> None:
        self.history.undo()

    def redo(self) -> None:
        self.history.redo()

    def set_resample(self, high_quality: bool, nearest_neighbor: bool) -> None:
        self.high_quality = bool(high_quality)
        self.nearest_neighbor = bool(nearest_neighbor)
        self._rerender(self.state)

    def _commit_if_changed(self, nxt: EditState) -> None:
        if nxt == self.state:
            return
        self.history.commit(nxt)

    # ---- Rendering ----
    def _on_present_changed(self, present: EditState) -> None:
        self._rerender(present)

    def _rerender(self, state: EditState) -> None:
        src = self._sources.get(state.source_ref) if state.source_ref is not None else None
        self.output = render(
            src,
            state,
            high_quality=self.high_quality,
            nearest_neighbor=self.nearest_neighbor,
        )
        for listener in list(self._listeners):
            listener(self.output, state)
