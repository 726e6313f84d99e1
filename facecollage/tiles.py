"""Randomized tile generation.

Each tile is a crop of a region's bounding box, rescaled by a random factor
and shifted by a random jitter. Crops are always taken from the untouched
frame so earlier tiles never feed later ones.
"""

from __future__ import annotations

import logging
import math
from typing import Dict, List, Mapping, Optional

import numpy as np

from .regions import DENSE_REGIONS
from .types import RegionBounds, Tile
from .utils import clamp

logger = logging.getLogger(__name__)


def tile_count(region: str, cfg: Optional[Mapping] = None) -> int:
    col = (cfg or {}).get("collage", {})
    dense = col.get("dense_regions")
    dense = DENSE_REGIONS if dense is None else set(dense)
    if region in dense:
        return int(col.get("dense_tiles_per_region", 5))
    return int(col.get("tiles_per_region", 3))


def generate_region_tiles(
    frame: np.ndarray,
    region: str,
    bounds: RegionBounds,
    count: int,
    rng: np.random.Generator,
    cfg: Optional[Mapping] = None,
) -> List[Tile]:
    """Cut `count` jittered tiles out of `bounds`.

    Random draws per tile, in order: scale, dx, dy. Tiles with a zero side
    are dropped after drawing so the sequence does not shift.
    """
    col = (cfg or {}).get("collage", {})
    scale_min = float(col.get("scale_min", 0.6))
    scale_span = float(col.get("scale_span", 0.5))
    jitter = float(col.get("jitter", 40))

    h, w = frame.shape[:2]
    tiles: List[Tile] = []
    for _ in range(count):
        scale = scale_min + rng.random() * scale_span
        dx = int(math.floor((rng.random() - 0.5) * jitter))
        dy = int(math.floor((rng.random() - 0.5) * jitter))

        full_w = int(math.floor(bounds.width * scale))
        full_h = int(math.floor(bounds.height * scale))
        if full_w <= 0 or full_h <= 0:
            logger.debug("Skipping empty tile for %s (%dx%d)", region, full_w, full_h)
            continue
        t_w = min(full_w, w)
        t_h = min(full_h, h)

        src_x = clamp(bounds.x1, 0, w - t_w)
        src_y = clamp(bounds.y1, 0, h - t_h)
        dst_x = clamp(bounds.x1 + dx, 0, w - t_w)
        dst_y = clamp(bounds.y1 + dy, 0, h - t_h)

        pixels = frame[src_y:src_y + t_h, src_x:src_x + t_w].copy()
        tiles.append(Tile(region=region, x=dst_x, y=dst_y, w=t_w, h=t_h, src_x=src_x, src_y=src_y,
                          pixels=pixels, scaled_area=full_w * full_h))
    return tiles


def generate_tiles(
    frame: np.ndarray,
    bounds_by_region: Mapping[str, RegionBounds],
    rng: np.random.Generator,
    cfg: Optional[Mapping] = None,
) -> List[Tile]:
    tiles: List[Tile] = []
    for region, bounds in bounds_by_region.items():
        tiles.extend(generate_region_tiles(frame, region, bounds, tile_count(region, cfg), rng, cfg))
    logger.debug("Generated %d tiles from %d regions", len(tiles), len(bounds_by_region))
    return tiles


__all__ = ["tile_count", "generate_region_tiles", "generate_tiles"]
