"""Facial regions and their bounding boxes.

Region indices refer to the MediaPipe FaceMesh topology (478 points with
refined landmarks). Bounds are computed from normalized landmarks scaled to
frame size and floored, then clamped to the frame edges inclusive.
"""

from __future__ import annotations

from collections import OrderedDict
from typing import Dict, FrozenSet, List, Mapping, Optional, Sequence

import numpy as np

from .types import FaceLandmarks, RegionBounds
from .utils import clamp


REGIONS: "OrderedDict[str, List[int]]" = OrderedDict(
    [
        ("left_eye", [33, 133, 160, 159, 158, 157, 173]),
        ("right_eye", [362, 263, 387, 386, 385, 384, 398]),
        ("nose", [2, 98, 327, 195, 5, 4, 1]),
        ("mouth", [13, 14, 87, 178, 317, 402, 318]),
        ("forehead", [10, 338, 297, 68, 104]),
        ("chin", [152, 200, 427, 425, 199, 400, 379]),
        ("left_cheek", [50, 101, 234, 93, 205, 117]),
        ("right_cheek", [280, 347, 454, 330, 425, 356]),
        ("jawline_left", [234, 127, 93, 132]),
        ("jawline_right", [454, 356, 330, 323]),
        ("temples", [67, 69, 109, 108, 151, 45, 276, 283, 282, 423]),
    ]
)

# Large, low-detail areas that get more tiles
DENSE_REGIONS: FrozenSet[str] = frozenset({"forehead", "chin", "jawline_left", "jawline_right", "temples"})


def region_bounds(landmarks: FaceLandmarks, indices: Sequence[int], width: int, height: int) -> RegionBounds:
    """Return the clamped bounding box of `indices` in a `width` x `height` frame.

    Coordinates are floor(normalized * size); x1/x2 are clamped to [0, width]
    and y1/y2 to [0, height].
    """
    idxs = np.asarray(list(indices), dtype=np.int64)
    if idxs.size == 0:
        raise ValueError("Region needs at least one landmark index")
    norm = landmarks.normalized
    if int(np.min(idxs)) < 0 or int(np.max(idxs)) >= norm.shape[0]:
        raise ValueError("Landmark array too small for region indices")
    pts = norm[idxs, :2].astype(np.float64)
    xs = np.floor(pts[:, 0] * width).astype(np.int64)
    ys = np.floor(pts[:, 1] * height).astype(np.int64)
    return RegionBounds(
        x1=clamp(int(xs.min()), 0, width),
        y1=clamp(int(ys.min()), 0, height),
        x2=clamp(int(xs.max()), 0, width),
        y2=clamp(int(ys.max()), 0, height),
    )


def resolve_regions(cfg: Optional[Mapping] = None) -> "OrderedDict[str, List[int]]":
    """Return REGIONS with any `regions` overrides from cfg applied.

    Overridden names keep their position; new names are appended.
    """
    regions: "OrderedDict[str, List[int]]" = OrderedDict((k, list(v)) for k, v in REGIONS.items())
    overrides = (cfg or {}).get("regions") or {}
    for name, idxs in overrides.items():
        regions[str(name)] = [int(i) for i in idxs]
    return regions


def compute_region_bounds(
    landmarks: FaceLandmarks,
    width: int,
    height: int,
    regions: Optional[Mapping[str, Sequence[int]]] = None,
) -> Dict[str, RegionBounds]:
    regions = REGIONS if regions is None else regions
    return OrderedDict((name, region_bounds(landmarks, idxs, width, height)) for name, idxs in regions.items())


__all__ = [
    "REGIONS",
    "DENSE_REGIONS",
    "region_bounds",
    "resolve_regions",
    "compute_region_bounds",
]
