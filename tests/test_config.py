import logging
import tempfile
import unittest
from pathlib import Path

from facecollage.config import DEFAULTS, load_and_merge, load_yaml, merge_config


class TestConfig(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self.tmp.name)

    def tearDown(self):
        self.tmp.cleanup()

    def test_defaults(self):
        cfg = merge_config()
        self.assertEqual(cfg["collage"]["jitter"], 40)
        self.assertEqual(cfg["collage"]["scale_min"], 0.6)
        self.assertEqual(cfg["mediapipe"]["max_faces"], 1)
        self.assertIsNone(cfg["runtime"]["seed"])

    def test_overrides_do_not_leak_into_defaults(self):
        cfg = merge_config({"collage": {"jitter": 10}}, {"paths": {"output_dir": "x"}})
        self.assertEqual(cfg["collage"]["jitter"], 10)
        self.assertEqual(cfg["collage"]["tiles_per_region"], 3)
        self.assertEqual(cfg["paths"]["output_dir"], "x")
        self.assertEqual(DEFAULTS["collage"]["jitter"], 40)
        self.assertEqual(DEFAULTS["paths"]["output_dir"], "outputs")

    def test_cli_wins_over_yaml(self):
        path = self.dir / "cfg.yaml"
        path.write_text("collage:\n  jitter: 12\n  scale_min: 0.4\n", encoding="utf-8")
        cfg = load_and_merge(path, {"collage": {"jitter": 5}})
        self.assertEqual(cfg["collage"]["jitter"], 5)
        self.assertEqual(cfg["collage"]["scale_min"], 0.4)

    def test_missing_yaml_warns(self):
        with self.assertLogs("facecollage.config", level=logging.WARNING):
            self.assertEqual(load_yaml(self.dir / "nope.yaml"), {})

    def test_non_mapping_yaml_rejected(self):
        path = self.dir / "list.yaml"
        path.write_text("- 1\n- 2\n", encoding="utf-8")
        with self.assertRaises(ValueError):
            load_yaml(path)

    def test_invalid_values_rejected(self):
        with self.assertRaises(ValueError):
            merge_config({"collage": {"scale_span": -1}})
        with self.assertRaises(ValueError):
            merge_config({"regions": {"empty": []}})
        with self.assertRaises(ValueError):
            merge_config({"regions": ["nose"]})


if __name__ == "__main__":
    unittest.main()
