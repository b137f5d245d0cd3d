from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Dict, Sequence, Tuple

import numpy as np
from PIL import Image, ImageFilter

from core.constants import FILTER_ORDER
from core.state import Filters


@dataclass(frozen=True)
class FilterOp:
    name: str
    # Native scale: factor for brightness/contrast/saturation, degrees for
    # hue, 0..1 amount for warm/cool, pixels for blur.
    amount: float


def build_filter_chain(filters: Filters) -> Tuple[FilterOp, ...]:
    """Ordered ops for ``filters``; parameters at their default add nothing."""
    chain = []
    for name in FILTER_ORDER:
        value = float(filters.get(name))
        if value == 0.0:
            continue
        if name in ("brightness", "contrast", "saturation"):
            amount = (value + 100.0) / 100.0
        elif name in ("warm", "cool"):
            if value <= 0.0:
                continue
            amount = value / 100.0
        elif name == "blur":
            if value <= 0.0:
                continue
            amount = value
        else:
            amount = value
        chain.append(FilterOp(name, amount))
    return tuple(chain)


def _apply_matrix(rgb: np.ndarray, m: np.ndarray) -> np.ndarray:
    return rgb @ m.T


def _brightness(rgb: np.ndarray, amount: float) -> np.ndarray:
    return rgb * amount


def _contrast(rgb: np.ndarray, amount: float) -> np.ndarray:
    # Around mid-gray
    return (rgb - 127.5) * amount + 127.5


def _saturation(rgb: np.ndarray, amount: float) -> np.ndarray:
    s = amount
    m = np.array(
        [
            [0.213 + 0.787 * s, 0.715 - 0.715 * s, 0.072 - 0.072 * s],
            [0.213 - 0.213 * s, 0.715 + 0.285 * s, 0.072 - 0.072 * s],
            [0.213 - 0.213 * s, 0.715 - 0.715 * s, 0.072 + 0.928 * s],
        ],
        dtype=np.float64,
    )
    return _apply_matrix(rgb, m)


def _hue(rgb: np.ndarray, amount: float) -> np.ndarray:
    rad = math.radians(amount)
    c = math.cos(rad)
    s = math.sin(rad)
    m = np.array(
        [
            [0.213 + c * 0.787 - s * 0.213, 0.715 - c * 0.715 - s * 0.715, 0.072 - c * 0.072 + s * 0.928],
            [0.213 - c * 0.213 + s * 0.143, 0.715 + c * 0.285 + s * 0.140, 0.072 - c * 0.072 - s * 0.283],
            [0.213 - c * 0.213 - s * 0.787, 0.715 - c * 0.715 + s * 0.715, 0.072 + c * 0.928 + s * 0.072],
        ],
        dtype=np.float64,
    )
    return _apply_matrix(rgb, m)


def _warm(rgb: np.ndarray, amount: float) -> np.ndarray:
    # Sepia tint, interpolated by amount
    s = 1.0 - max(0.0, min(1.0, amount))
    m = np.array(
        [
            [0.393 + 0.607 * s, 0.769 - 0.769 * s, 0.189 - 0.189 * s],
            [0.349 - 0.349 * s, 0.686 + 0.314 * s, 0.168 - 0.168 * s],
            [0.272 - 0.272 * s, 0.534 - 0.534 * s, 0.131 + 0.869 * s],
        ],
        dtype=np.float64,
    )
    return _apply_matrix(rgb, m)


def _cool(rgb: np.ndarray, amount: float) -> np.ndarray:
    # Inversion tint
    a = max(0.0, min(1.0, amount))
    return rgb * (1.0 - a) + (255.0 - rgb) * a


_COLOR_OPS: Dict[str, Callable[[np.ndarray, float], np.ndarray]] = {
    "brightness": _brightness,
    "contrast": _contrast,
    "saturation": _saturation,
    "hue": _hue,
    "warm": _warm,
    "cool": _cool,
}


def _blur(rgba: np.ndarray, radius: float) -> np.ndarray:
    # Blur premultiplied color so transparent pixels don't bleed their RGB
    alpha = rgba[..., 3:4].astype(np.float64)
    pre = rgba.copy()
    pre[..., :3] = np.rint(rgba[..., :3].astype(np.float64) * alpha / 255.0).astype(np.uint8)

    img = Image.fromarray(pre)
    img = img.filter(ImageFilter.GaussianBlur(radius=float(radius)))
    blurred = np.array(img, dtype=np.uint8)

    out_alpha = blurred[..., 3:4].astype(np.float64)
    rgb = np.zeros(blurred.shape[:2] + (3,), dtype=np.float64)
    np.divide(blurred[..., :3].astype(np.float64) * 255.0, out_alpha, out=rgb, where=out_alpha > 0)
    blurred[..., :3] = np.clip(np.rint(rgb), 0, 255).astype(np.uint8)
    return blurred


def apply_filter_chain(rgba: np.ndarray, chain: Sequence[FilterOp]) -> np.ndarray:
    """Run ``chain`` over an HxWx4 uint8 array and return a new array."""
    if rgba.dtype != np.uint8 or rgba.ndim != 3 or rgba.shape[2] != 4:
        raise ValueError("rgba must be HxWx4 uint8")

    out = rgba.copy()
    rgb = None
    for op in chain:
        if op.name == "blur":
            if rgb is not None:
                out[..., :3] = np.rint(rgb).astype(np.uint8)
                rgb = None
            out = _blur(out, op.amount)
            continue
        fn = _COLOR_OPS.get(op.name)
        if fn is None:
            raise KeyError(f"unknown filter op: {op.name}")
        if rgb is None:
            rgb = out[..., :3].astype(np.float64)
        rgb = np.clip(fn(rgb, op.amount), 0.0, 255.0)

    if rgb is not None:
        out[..., :3] = np.rint(rgb).astype(np.uint8)
    return out
