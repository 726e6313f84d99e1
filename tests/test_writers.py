import json
import tempfile
import unittest
from pathlib import Path

import numpy as np
import yaml

from facecollage.loader import ImageLoader
from facecollage.types import BBox, CollageResult, DetectionInfo, ImageMeta, RegionBounds, Tile
from facecollage.writers import ResultsWriter, build_record, save_image


def small_result():
    canvas = np.full((10, 12, 3), 30, dtype=np.uint8)
    tile = Tile(region="nose", x=1, y=1, w=2, h=2, src_x=0, src_y=0, pixels=np.zeros((2, 2, 3), dtype=np.uint8))
    bounds = {"nose": RegionBounds(0, 0, 3, 3), "mouth": RegionBounds(2, 2, 2, 2)}
    return CollageResult(canvas=canvas, tiles=[tile], bounds=bounds)


class TestWriters(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self.tmp.name)
        self.meta = ImageMeta(path="in/face.jpg", width=12, height=10)

    def tearDown(self):
        self.tmp.cleanup()

    def test_save_image_round_trip_unicode_path(self):
        out = save_image(self.dir / "ñ" / "collage.png", small_result().canvas)
        img, meta, err = ImageLoader(self.dir).read_image(out)
        self.assertIsNone(err)
        self.assertEqual((meta.width, meta.height), (12, 10))
        self.assertTrue((img == 30).all())

    def test_save_image_bad_extension(self):
        with self.assertRaises(ValueError):
            save_image(self.dir / "collage.nope", small_result().canvas)

    def test_build_record(self):
        det = DetectionInfo(bbox=BBox(1, 2, 3, 4), score=None)
        rec = build_record(self.meta, det, small_result(), output="out.png")
        self.assertTrue(rec["ok"])
        self.assertEqual(rec["bbox"], {"x": 1, "y": 2, "w": 3, "h": 4})
        self.assertEqual(rec["tiles"], 1)
        self.assertEqual(rec["tiles_per_region"], {"nose": 1, "mouth": 0})

        failed = build_record(self.meta, None, None, reason="no_face")
        self.assertFalse(failed["ok"])
        self.assertIsNone(failed["bbox"])
        self.assertEqual(failed["reason"], "no_face")

    def test_collage_path_mirrors_input(self):
        writer = ResultsWriter(self.dir, {"paths": {"output_name": "glitch.png"}})
        self.assertEqual(writer.collage_path("in/sub/face.jpg", "in"), self.dir / "sub" / "face_glitch.png")
        self.assertEqual(writer.collage_path("elsewhere/face.jpg", "in"), self.dir / "face_glitch.png")

    def test_finalize(self):
        writer = ResultsWriter(self.dir, {"collage": {"jitter": 40}})
        out = writer.save_collage(small_result(), "face.jpg")
        writer.add(build_record(self.meta, None, small_result(), output=out))
        writer.add(build_record(self.meta, None, None, reason="no_face"))
        writer.add(build_record(self.meta, None, None, reason="no_face"))
        summary = writer.finalize()

        self.assertEqual(summary["counts"], {"produced": 1, "failed": 2, "total": 3, "tiles": 1})
        self.assertEqual(summary["failures"], {"no_face": 2})
        self.assertTrue(Path(out).exists())
        produced = json.loads((self.dir / "collage_index.json").read_text(encoding="utf-8"))
        self.assertEqual(produced[0]["output"], out)
        failed = json.loads((self.dir / "failed_index.json").read_text(encoding="utf-8"))
        self.assertEqual(len(failed), 2)
        on_disk = yaml.safe_load((self.dir / "summary.yaml").read_text(encoding="utf-8"))
        self.assertEqual(on_disk["counts"]["total"], 3)


if __name__ == "__main__":
    unittest.main()
