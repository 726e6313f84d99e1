from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable

import numpy as np
import cv2


def setup_logging(level: str | int = "INFO") -> None:
    """Configure root logging with a simple, consistent format.

    Accepts either a logging level name (str) or numeric level.
    """
    if isinstance(level, str):
        lvl = logging.getLevelName(level.upper())
        if not isinstance(lvl, int):
            lvl = logging.INFO
    else:
        lvl = int(level)
    logging.basicConfig(
        level=lvl,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


def ensure_dir(path: str | os.PathLike, exist_ok: bool = True) -> Path:
    p = Path(path)
    p.mkdir(parents=True, exist_ok=exist_ok)
    return p


def is_image_file(path: str | os.PathLike, exts: Iterable[str] | None = None) -> bool:
    if exts is None:
        exts = {".jpg", ".jpeg", ".png", ".bmp", ".webp", ".tiff"}
    suffix = Path(path).suffix.lower()
    return suffix in set(e.lower() for e in exts)


def to_bgr(img: np.ndarray) -> np.ndarray:
    """Return a 3-channel BGR view of a gray, BGR or BGRA image."""
    if img.ndim == 2:
        return cv2.cvtColor(img, cv2.COLOR_GRAY2BGR)
    if img.ndim == 3 and img.shape[2] == 4:
        return cv2.cvtColor(img, cv2.COLOR_BGRA2BGR)
    if img.ndim == 3 and img.shape[2] == 1:
        return cv2.cvtColor(img[:, :, 0], cv2.COLOR_GRAY2BGR)
    return img


def clamp(val: int, lo: int, hi: int) -> int:
    """Clamp val into [lo, hi]; when hi < lo the lower bound wins."""
    return max(lo, min(val, hi))
