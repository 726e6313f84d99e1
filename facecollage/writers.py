"""Output writers.

Writes collage images plus a JSON index of produced/failed inputs and a
summary YAML for batch runs.
"""

from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import cv2
import numpy as np
import yaml

from .types import CollageResult, DetectionInfo, ImageMeta
from .utils import ensure_dir

logger = logging.getLogger(__name__)


def _bbox_to_dict(bbox) -> Optional[Dict[str, int]]:
    if bbox is None:
        return None
    return {"x": bbox.x, "y": bbox.y, "w": bbox.w, "h": bbox.h}


def save_image(path: str | Path, image: np.ndarray) -> str:
    """Encode by extension and write with a unicode-safe path."""
    p = Path(path)
    ensure_dir(p.parent)
    ext = p.suffix.lower() or ".png"
    try:
        ok, buf = cv2.imencode(ext, image)
    except cv2.error as e:
        raise ValueError(f"Could not encode image as {ext}: {p}") from e
    if not ok:
        raise ValueError(f"Could not encode image as {ext}: {p}")
    buf.tofile(str(p))
    return str(p)


def build_record(
    meta: ImageMeta,
    det: Optional[DetectionInfo],
    result: Optional[CollageResult],
    output: Optional[str] = None,
    reason: Optional[str] = None,
    extra: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    rec: Dict[str, Any] = {
        "file": meta.path,
        "width": meta.width,
        "height": meta.height,
        "bbox": _bbox_to_dict(det.bbox) if det else None,
        "tiles": len(result.tiles) if result else 0,
        "tiles_per_region": result.tiles_per_region() if result else {},
        "output": output,
        "ok": result is not None and output is not None,
        "reason": reason,
    }
    if extra:
        rec.update(extra)
    return rec


class ResultsWriter:
    def __init__(self, output_dir: str | Path, cfg: Optional[Dict[str, Any]] = None):
        self.output_dir = Path(output_dir)
        ensure_dir(self.output_dir)
        self.cfg = cfg or {}
        self.produced: List[Dict[str, Any]] = []
        self.failed: List[Dict[str, Any]] = []

    def collage_path(self, src_path: str | Path, base_dir: str | Path | None = None) -> Path:
        """Output path mirroring the input layout: <stem>_<output_name>."""
        name = (self.cfg.get("paths", {}) or {}).get("output_name", "editorial_collage.png")
        src_path = Path(src_path)
        try:
            rel = src_path.relative_to(base_dir) if base_dir else Path(src_path.name)
        except ValueError:
            rel = Path(src_path.name)
        return self.output_dir / rel.parent / f"{rel.stem}_{name}"

    def save_collage(self, result: CollageResult, src_path: str | Path, base_dir: str | Path | None = None) -> str:
        return save_image(self.collage_path(src_path, base_dir), result.canvas)

    def add(self, record: Dict[str, Any]) -> None:
        if record.get("ok"):
            self.produced.append(record)
        else:
            self.failed.append(record)

    def _write_json(self, path: Path, data: List[Dict[str, Any]]):
        with path.open("w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)

    def finalize(self) -> Dict[str, Any]:
        out_dir = self.output_dir
        ensure_dir(out_dir)

        self._write_json(out_dir / "collage_index.json", self.produced)
        self._write_json(out_dir / "failed_index.json", self.failed)

        reasons: Dict[str, int] = {}
        for rec in self.failed:
            key = rec.get("reason") or "unknown"
            reasons[key] = reasons.get(key, 0) + 1

        summary = {
            "counts": {
                "produced": len(self.produced),
                "failed": len(self.failed),
                "total": len(self.produced) + len(self.failed),
                "tiles": sum(int(r.get("tiles", 0)) for r in self.produced),
            },
            "failures": reasons,
            "collage": self.cfg.get("collage", {}),
            "paths": self.cfg.get("paths", {}),
        }
        with (out_dir / "summary.yaml").open("w", encoding="utf-8") as f:
            yaml.safe_dump(summary, f, sort_keys=False, allow_unicode=True)
        logger.info("Wrote %d collages (%d failed) to %s", len(self.produced), len(self.failed), out_dir)
        return summary


__all__ = [
    "save_image",
    "build_record",
    "ResultsWriter",
]
