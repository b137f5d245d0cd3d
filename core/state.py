from __future__ import annotations

import math
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Optional, Union

from core.constants import FILTER_DEFAULT, FILTER_ORDER, FILTER_RANGES, MAX_OUTPUT_DIM, MIN_OUTPUT_DIM

Number = Union[int, float]


def coerce_number(raw: Any, current: Number) -> Number:
    """Parse a control value; anything non-numeric keeps ``current``."""
    if isinstance(raw, bool):
        return current
    try:
        v = float(raw)
    except (TypeError, ValueError):
        return current
    if not math.isfinite(v):
        return current
    return int(v) if v.is_integer() else v


def clamp_filter(name: str, value: Number) -> Number:
    lo, hi = FILTER_RANGES[name]
    return max(lo, min(hi, value))


def clamp_dim(value: Number) -> int:
    return max(MIN_OUTPUT_DIM, min(MAX_OUTPUT_DIM, int(math.floor(value))))


@dataclass(frozen=True)
class Size:
    w: int = 1
    h: int = 1

    @classmethod
    def clamped(cls, w: Number, h: Number) -> "Size":
        return cls(clamp_dim(w), clamp_dim(h))

    def as_tuple(self) -> tuple[int, int]:
        return (self.w, self.h)


@dataclass(frozen=True)
class Filters:
    brightness: Number = FILTER_DEFAULT
    contrast: Number = FILTER_DEFAULT
    saturation: Number = FILTER_DEFAULT
    hue: Number = FILTER_DEFAULT
    warm: Number = FILTER_DEFAULT
    cool: Number = FILTER_DEFAULT
    blur: Number = FILTER_DEFAULT

    def get(self, name: str) -> Number:
        if name not in FILTER_RANGES:
            raise KeyError(f"unknown filter: {name}")
        return getattr(self, name)

    def with_value(self, name: str, raw: Any) -> "Filters":
        current = self.get(name)
        value = clamp_filter(name, coerce_number(raw, current))
        return replace(self, **{name: value})

    def is_identity(self) -> bool:
        return all(getattr(self, f.name) == FILTER_DEFAULT for f in fields(self))

    def as_dict(self) -> Dict[str, Number]:
        return {name: getattr(self, name) for name in FILTER_ORDER}


@dataclass(frozen=True)
class EditState:
    # Source dimensions, only set by ``loaded``
    natural_size: Size = field(default_factory=Size)
    # Render target, independently adjustable
    output_size: Size = field(default_factory=Size)
    filters: Filters = field(default_factory=Filters)
    image_loaded: bool = False
    # Opaque handle into the session's source registry
    source_ref: Optional[str] = None

    def loaded(self, natural_size: Size, source_ref: str) -> "EditState":
        """State committed when a decode completes."""
        # Real source dimensions; the output cap only applies to user edits
        natural = Size(max(1, int(natural_size.w)), max(1, int(natural_size.h)))
        return replace(
            self,
            natural_size=natural,
            output_size=natural,
            filters=Filters(),
            image_loaded=True,
            source_ref=source_ref,
        )

    def with_filter(self, name: str, raw: Any) -> "EditState":
        return replace(self, filters=self.filters.with_value(name, raw))

    def with_output_size(self, w: Any = None, h: Any = None) -> "EditState":
        cur = self.output_size
        new_w = cur.w if w is None else clamp_dim(coerce_number(w, cur.w))
        new_h = cur.h if h is None else clamp_dim(coerce_number(h, cur.h))
        return replace(self, output_size=Size(new_w, new_h))

    def reset(self) -> "EditState":
        return replace(self, filters=Filters(), output_size=self.natural_size)
