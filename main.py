import argparse
import logging
import os
from pathlib import Path
from concurrent.futures import ProcessPoolExecutor, as_completed

import cv2
from tqdm import tqdm

from facecollage.config import load_and_merge
from facecollage.utils import setup_logging
from facecollage.loader import ImageLoader
from facecollage.collage import CollageMaker
from facecollage.writers import ResultsWriter, save_image

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Face region glitch collage")
    # Single-image mode
    p.add_argument("--image", help="Path to a single image (PNG/JPG)")
    p.add_argument("--output", default=None, help="Collage output path (single-image mode, default editorial_collage.png)")
    p.add_argument("--save-debug", default=None, help="Optional path to save region bounds overlay (single-image mode)")
    # Batch mode
    p.add_argument("--input-dir", help="Directory of images to process (batch mode)")
    p.add_argument("--output-dir", help="Directory to write collages, JSON indices and summary")
    p.add_argument("--max-files", type=int, default=None, help="Optional max files to process (for testing)")
    p.add_argument("--workers", type=int, default=None, help="Number of worker processes (0=single-thread)")
    # Collage
    p.add_argument("--seed", type=int, default=None, help="Seed for reproducible tile placement")
    p.add_argument("--jitter", type=float, default=None, help="Max tile offset in pixels (default 40)")
    # Config
    p.add_argument("--config", default=None, help="Optional YAML config path")
    p.add_argument("--log-level", default=None, help="Override log level (e.g., INFO, WARNING)")
    return p.parse_args(argv)


def build_overrides(args: argparse.Namespace) -> dict:
    cli_overrides = {"paths": {}, "runtime": {}, "collage": {}}
    if args.input_dir:
        cli_overrides["paths"]["input_dir"] = args.input_dir
    if args.output_dir:
        cli_overrides["paths"]["output_dir"] = args.output_dir
    if args.max_files is not None:
        cli_overrides["runtime"]["max_files"] = args.max_files
    if args.workers is not None:
        cli_overrides["runtime"]["workers"] = args.workers
    if args.seed is not None:
        cli_overrides["runtime"]["seed"] = args.seed
    if args.log_level:
        cli_overrides["runtime"]["log_level"] = args.log_level
    if args.jitter is not None:
        cli_overrides["collage"]["jitter"] = args.jitter
    return cli_overrides


def draw_debug(image_bgr, bounds, out_path: str):
    vis = image_bgr.copy()
    for name, b in bounds.items():
        cv2.rectangle(vis, (b.x1, b.y1), (b.x2, b.y2), (0, 0, 255), 1)
        cv2.putText(vis, name, (b.x1, max(10, b.y1 - 3)), cv2.FONT_HERSHEY_SIMPLEX, 0.3, (0, 255, 0), 1, cv2.LINE_AA)
    save_image(out_path, vis)


def process_one_path(path_str: str, cfg: dict) -> dict:
    # Local imports to ensure picklability in multiprocessing environments
    from facecollage.loader import ImageLoader
    from facecollage.collage import CollageMaker
    from facecollage.types import ImageMeta as IMeta
    from facecollage.writers import ResultsWriter, build_record

    paths = cfg.get("paths", {})
    loader = ImageLoader(input_dir=Path(path_str).parent)
    img, meta, err = loader.read_image(path_str)
    if err or img is None or meta is None:
        meta_fallback = meta if meta is not None else IMeta(path=str(path_str), width=0, height=0)
        return build_record(meta_fallback, None, None, reason=err or "unreadable")

    try:
        with CollageMaker(cfg) as maker:
            result, info = maker.make(img, meta)
        if result is None:
            return build_record(meta, None, None, reason="no_face")

        # Indices and summary are written by the parent process
        writer = ResultsWriter(paths["output_dir"], cfg)
        out = writer.save_collage(result, path_str, base_dir=paths.get("input_dir"))
    except ValueError as e:
        logger.warning("Collage failed for %s (%s)", path_str, e)
        return build_record(meta, None, None, reason="collage_error", extra={"error": str(e)})
    return build_record(meta, info, result, output=out)


def main(argv=None):
    # Reduce TF/MediaPipe verbosity if desired
    os.environ.setdefault("TF_CPP_MIN_LOG_LEVEL", "2")

    args = parse_args(argv)
    cfg = load_and_merge(args.config, build_overrides(args))

    setup_logging(cfg.get("runtime", {}).get("log_level", "INFO"))

    # Single-image mode
    if args.image and not args.input_dir:
        loader = ImageLoader(input_dir=Path(args.image).parent)
        image, meta, err = loader.read_image(args.image)
        if err or image is None or meta is None:
            raise SystemExit(f"Failed to read image: {args.image} ({err})")

        with CollageMaker(cfg) as maker:
            result, info = maker.make(image, meta)
        if result is None or info is None:
            print("No face detected")
            return

        out_path = args.output or cfg.get("paths", {}).get("output_name", "editorial_collage.png")
        save_image(out_path, result.canvas)
        print("Face bbox:", info.bbox)
        print("Tiles:", len(result.tiles), result.tiles_per_region())
        print("Saved collage:", out_path)

        if args.save_debug:
            draw_debug(image, result.bounds, str(args.save_debug))
            print("Saved debug overlay:", args.save_debug)
        return

    # Batch mode
    input_dir = cfg.get("paths", {}).get("input_dir")
    output_dir = cfg.get("paths", {}).get("output_dir")
    if not input_dir or not output_dir:
        raise SystemExit("Batch mode requires --input-dir and --output-dir (or set in config)")

    loader = ImageLoader(input_dir=input_dir, max_files=cfg.get("runtime", {}).get("max_files"))
    paths = list(loader.enumerate())
    if not paths:
        print("No images found in", input_dir)
        return

    writer = ResultsWriter(output_dir, cfg)

    workers = int(cfg.get("runtime", {}).get("workers", 0) or 0)
    if workers <= 0:
        for p in tqdm(paths, desc="Collaging", unit="img"):
            try:
                writer.add(process_one_path(str(p), cfg))
            except Exception as e:
                print("Failed:", p, e)
    else:
        with ProcessPoolExecutor(max_workers=workers) as ex:
            futures = {ex.submit(process_one_path, str(p), cfg): p for p in paths}
            for fut in tqdm(as_completed(futures), total=len(futures), desc="Collaging", unit="img"):
                try:
                    writer.add(fut.result())
                except Exception as e:
                    print("Worker failed:", futures[fut], e)

    summary = writer.finalize()
    print("Summary:", summary["counts"])


if __name__ == "__main__":
    main()
