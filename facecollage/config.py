from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, MutableMapping

import yaml

logger = logging.getLogger(__name__)


DEFAULTS: Dict[str, Any] = {
    "paths": {
        "input_dir": "images",
        "output_dir": "outputs",
        # File name used for single-image output and as the batch suffix
        "output_name": "editorial_collage.png",
    },
    "mediapipe": {
        "static_image_mode": True,
        "refine_landmarks": True,
        "max_faces": 1,
        "min_detection_confidence": 0.5,
        "min_tracking_confidence": 0.5,
    },
    "collage": {
        # Tile scale is drawn uniformly from [scale_min, scale_min + scale_span)
        "scale_min": 0.6,
        "scale_span": 0.5,
        # Max total offset in pixels; dx, dy fall in [-jitter/2, jitter/2)
        "jitter": 40,
        "tiles_per_region": 3,
        "dense_tiles_per_region": 5,
        "dense_regions": ["forehead", "chin", "jawline_left", "jawline_right", "temples"],
    },
    # Optional overrides: region name -> list of FaceMesh landmark indices
    "regions": {},
    "runtime": {
        "seed": None,  # None => fresh randomness on every run
        "workers": 0,  # 0 => single-thread; >0 => process pool size
        "max_files": None,
        "log_level": "INFO",
    },
}


def _deep_merge(base: MutableMapping[str, Any], override: Mapping[str, Any]) -> MutableMapping[str, Any]:
    for k, v in override.items():
        if k in base and isinstance(base[k], MutableMapping) and isinstance(v, Mapping):
            _deep_merge(base[k], v)
        else:
            base[k] = v
    return base


def load_yaml(path: str | Path | None) -> Dict[str, Any]:
    if not path:
        return {}
    p = Path(path)
    if not p.exists():
        logger.warning("YAML config not found: %s", p)
        return {}
    with p.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError("Top-level of YAML must be a mapping/dict")
    return data


def _validate(cfg: Mapping[str, Any]) -> None:
    col = cfg.get("collage", {})
    if float(col.get("scale_min", 0.6)) < 0 or float(col.get("scale_span", 0.5)) < 0:
        raise ValueError("collage.scale_min and collage.scale_span must be non-negative")
    if int(col.get("tiles_per_region", 3)) < 0 or int(col.get("dense_tiles_per_region", 5)) < 0:
        raise ValueError("Tile counts must be non-negative")
    regions = cfg.get("regions") or {}
    if not isinstance(regions, Mapping):
        raise ValueError("regions must be a mapping of name -> landmark indices")
    for name, idxs in regions.items():
        if not isinstance(idxs, (list, tuple)) or not idxs:
            raise ValueError(f"Region '{name}' must list at least one landmark index")


def merge_config(yaml_cfg: Mapping[str, Any] | None = None, cli_overrides: Mapping[str, Any] | None = None) -> Dict[str, Any]:
    cfg: Dict[str, Any] = {}
    _deep_merge(cfg, copy.deepcopy(DEFAULTS))
    if yaml_cfg:
        _deep_merge(cfg, dict(yaml_cfg))
    if cli_overrides:
        _deep_merge(cfg, dict(cli_overrides))
    _validate(cfg)
    return cfg


def load_and_merge(yaml_path: str | Path | None, cli_overrides: Mapping[str, Any] | None = None) -> Dict[str, Any]:
    yaml_cfg = load_yaml(yaml_path)
    return merge_config(yaml_cfg, cli_overrides)
