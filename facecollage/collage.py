"""Collage assembly.

Glue between the landmark detector and the tile/compositing steps:
region bounds -> jittered tiles -> largest-to-smallest paste.
"""

from __future__ import annotations

import logging
from typing import Mapping, Optional, Tuple

import numpy as np

from .compositor import compose
from .facemesh import FaceMeshConfig, FaceMeshDetector
from .regions import compute_region_bounds, resolve_regions
from .tiles import generate_tiles
from .types import CollageResult, DetectionInfo, FaceLandmarks, ImageMeta

logger = logging.getLogger(__name__)


def make_rng(seed: Optional[int] = None) -> np.random.Generator:
    return np.random.default_rng(None if seed is None else int(seed))


def build_collage(
    frame: np.ndarray,
    landmarks: FaceLandmarks,
    cfg: Optional[Mapping] = None,
    rng: Optional[np.random.Generator] = None,
) -> CollageResult:
    """Build a collage from a BGR frame and its face landmarks."""
    if frame.ndim != 3:
        raise ValueError("Expected an HxWxC frame")
    if rng is None:
        rng = make_rng((cfg or {}).get("runtime", {}).get("seed"))
    h, w = frame.shape[:2]
    bounds = compute_region_bounds(landmarks, w, h, resolve_regions(cfg))
    tiles = generate_tiles(frame, bounds, rng, cfg)
    canvas = compose(frame, tiles)
    return CollageResult(canvas=canvas, tiles=tiles, bounds=bounds)


class CollageMaker:
    """Detect a face and turn the frame into a collage.

    Usage:
        with CollageMaker(cfg) as maker:
            result, info = maker.make(image, meta)
    """

    def __init__(self, cfg: Optional[Mapping] = None, detector: Optional[FaceMeshDetector] = None, rng: Optional[np.random.Generator] = None):
        self.cfg = dict(cfg or {})
        self.detector = detector or FaceMeshDetector(FaceMeshConfig.from_cfg(self.cfg))
        self.rng = rng or make_rng(self.cfg.get("runtime", {}).get("seed"))

    def __enter__(self):
        self.detector.__enter__()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.detector.__exit__(exc_type, exc, tb)

    def make(self, frame: np.ndarray, meta: ImageMeta) -> Tuple[Optional[CollageResult], Optional[DetectionInfo]]:
        landmarks, info = self.detector.detect(frame, meta)
        if landmarks is None or info is None:
            logger.warning("No face detected: %s", meta.path)
            return None, None
        result = build_collage(frame, landmarks, self.cfg, self.rng)
        logger.info("Collage for %s: %d tiles", meta.path, len(result.tiles))
        return result, info


__all__ = ["make_rng", "build_collage", "CollageMaker"]
