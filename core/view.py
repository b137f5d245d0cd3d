from __future__ import annotations

from core.constants import ZOOM_MAX_PERCENT, ZOOM_MIN_PERCENT


def zoom_scale(zoom_percent: float) -> float:
    # Display only; never feeds the render or export
    return max(ZOOM_MIN_PERCENT / 100.0, min(ZOOM_MAX_PERCENT / 100.0, float(zoom_percent) / 100.0))
