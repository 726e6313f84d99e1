from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional
import numpy as np


@dataclass
class BBox:
    x: int
    y: int
    w: int
    h: int


@dataclass
class ImageMeta:
    path: str
    width: int
    height: int
    channels: Optional[int] = None
    ext: Optional[str] = None


@dataclass
class DetectionInfo:
    bbox: Optional[BBox]
    score: Optional[float]
    face_index: int = 0


@dataclass
class FaceLandmarks:
    # Normalized (x, y, z) in [0,1] for x,y; z is relative depth from MediaPipe
    normalized: np.ndarray  # shape (N, 3)
    # Pixel coordinates (x, y), shape (N, 2)
    pixel: np.ndarray


@dataclass
class RegionBounds:
    x1: int
    y1: int
    x2: int
    y2: int

    @property
    def width(self) -> int:
        return self.x2 - self.x1

    @property
    def height(self) -> int:
        return self.y2 - self.y1


@dataclass
class Tile:
    region: str
    # Destination top-left on the canvas
    x: int
    y: int
    w: int
    h: int
    # Source top-left in the frame
    src_x: int
    src_y: int
    pixels: np.ndarray = field(repr=False)  # shape (h, w, C)
    # Scaled size before capping to the frame; orders the paste
    scaled_area: Optional[int] = None

    @property
    def area(self) -> int:
        if self.scaled_area is not None:
            return self.scaled_area
        return self.w * self.h


@dataclass
class CollageResult:
    canvas: np.ndarray
    tiles: List[Tile]
    bounds: Dict[str, RegionBounds]

    def tiles_per_region(self) -> Dict[str, int]:
        counts: Dict[str, int] = {name: 0 for name in self.bounds}
        for t in self.tiles:
            counts[t.region] = counts.get(t.region, 0) + 1
        return counts
