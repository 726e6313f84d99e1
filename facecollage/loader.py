"""Still-image input.

- Recursive image enumeration with extension whitelist and optional `max_files`.
- Unicode-safe image reading via OpenCV (imdecode) with fallback.
- Frames are normalized to 3-channel BGR before they reach the collage code.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Generator, Iterable, Optional, Tuple

import numpy as np
import cv2

from .types import ImageMeta
from .utils import is_image_file, to_bgr

logger = logging.getLogger(__name__)


class ImageLoader:
    def __init__(
        self,
        input_dir: str | Path,
        exts: Optional[Iterable[str]] = None,
        max_files: Optional[int] = None,
    ):
        self.input_dir = Path(input_dir)
        self.exts = set(e.lower() for e in (exts or {".png", ".jpg", ".jpeg", ".bmp", ".webp", ".tiff"}))
        self.max_files = max_files

    def enumerate(self) -> Generator[Path, None, None]:
        count = 0
        if not self.input_dir.exists():
            logger.warning("Input directory does not exist: %s", self.input_dir)
            return
        for p in sorted(self.input_dir.rglob("*")):
            if p.is_file() and is_image_file(p, self.exts):
                yield p
                count += 1
                if self.max_files is not None and count >= self.max_files:
                    return

    @staticmethod
    def _imread_unicode(path: Path) -> Optional[np.ndarray]:
        try:
            data = np.fromfile(str(path), dtype=np.uint8)
        except OSError as e:
            logger.debug("Cannot open %s (%s)", path, e)
            return None
        if data.size == 0:
            return None
        img = cv2.imdecode(data, cv2.IMREAD_UNCHANGED)
        if img is None:
            # Fallback to standard imread
            img = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
        return img

    def read_image(self, path: str | Path) -> Tuple[Optional[np.ndarray], Optional[ImageMeta], Optional[str]]:
        p = Path(path)
        img = self._imread_unicode(p)
        if img is None:
            return None, None, "unreadable"
        channels = 1 if img.ndim == 2 else img.shape[2]
        img = to_bgr(img)
        if img.dtype == np.uint16:
            # 16-bit PNG/TIFF
            img = (img >> 8).astype(np.uint8)
        h, w = img.shape[:2]
        meta = ImageMeta(path=str(p), width=w, height=h, channels=channels, ext=p.suffix.lower())
        return img, meta, None

__all__ = ["ImageLoader"]
