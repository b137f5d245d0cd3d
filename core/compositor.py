from __future__ import annotations

import logging
from typing import Optional

import numpy as np
from PIL import Image

from core.adjustments import apply_filter_chain, build_filter_chain
from core.constants import DEFAULT_HIGH_QUALITY, DEFAULT_NEAREST_NEIGHBOR
from core.state import EditState

logger = logging.getLogger(__name__)


def pil_to_np_rgba(img: Image.Image) -> np.ndarray:
    arr = np.array(img.convert("RGBA"), dtype=np.uint8)
    if arr.ndim != 3 or arr.shape[2] != 4:
        raise ValueError("Expected RGBA image")
    return arr


def np_rgba_to_pil(arr: np.ndarray) -> Image.Image:
    return Image.fromarray(arr)


def _resample_mode(high_quality: bool, nearest_neighbor: bool) -> Image.Resampling:
    if nearest_neighbor:
        return Image.Resampling.NEAREST
    return Image.Resampling.LANCZOS if high_quality else Image.Resampling.BILINEAR


def render(
    source: Optional[Image.Image],
    state: EditState,
    high_quality: bool = DEFAULT_HIGH_QUALITY,
    nearest_neighbor: bool = DEFAULT_NEAREST_NEIGHBOR,
) -> Optional[Image.Image]:
    """
    Render ``source`` through ``state``: scale to the output size, then run
    the filter chain. Returns None when no image is loaded. ``source`` is
    only read.
    """
    if not state.image_loaded or source is None:
        return None

    out_w = max(1, int(state.output_size.w))
    out_h = max(1, int(state.output_size.h))

    img = source.convert("RGBA") if source.mode != "RGBA" else source
    if img.size != (out_w, out_h):
        img = img.resize((out_w, out_h), resample=_resample_mode(high_quality, nearest_neighbor))

    chain = build_filter_chain(state.filters)
    if not chain:
        return img.copy()

    logger.debug(f"render {out_w}x{out_h} chain={[op.name for op in chain]}")
    arr = apply_filter_chain(pil_to_np_rgba(img), chain)
    return np_rgba_to_pil(arr)
