from __future__ import annotations

from typing import Optional


def resolve_shortcut(key: str, ctrl: bool = False, meta: bool = False, shift: bool = False) -> Optional[str]:
    """
    Map a key combo to ``"undo"``, ``"redo"`` or None.

    Ctrl/Cmd+Z undoes, Ctrl/Cmd+Shift+Z and Ctrl/Cmd+Y redo.
    """
    if not (ctrl or meta):
        return None
    k = (key or "").lower()
    if k == "z":
        return "redo" if shift else "undo"
    if k == "y":
        return "redo"
    return None
