from __future__ import annotations

from typing import Iterable, List

import numpy as np

from .types import Tile


def sort_tiles(tiles: Iterable[Tile]) -> List[Tile]:
    """Largest area first; ties keep generation order."""
    return sorted(tiles, key=lambda t: t.area, reverse=True)


def compose(frame: np.ndarray, tiles: Iterable[Tile]) -> np.ndarray:
    """Paste tiles over a copy of `frame`, largest first so small ones stay visible.

    Pixels are replaced, not blended. `frame` is left untouched.
    """
    canvas = frame.copy()
    for t in sort_tiles(tiles):
        canvas[t.y:t.y + t.h, t.x:t.x + t.w] = t.pixels
    return canvas


__all__ = ["sort_tiles", "compose"]
