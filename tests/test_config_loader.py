from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path

from siamese_db.config import load_convert_config


class ConfigLoaderTests(unittest.TestCase):
    def test_defaults_without_files(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            config = load_convert_config(search_dir=Path(tmpdir))

            self.assertEqual(config.imageset.backend, "lmdb")
            self.assertEqual(config.imageset.commit_every, 1000)
            self.assertTrue(config.imageset.strict_pairs)
            self.assertFalse(config.imageset.encoded)

    def test_file_values_are_normalized_and_cli_overrides_win(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            config_file = Path(tmpdir) / "settings.json"
            config_file.write_text(
                json.dumps(
                    {
                        "imageset": {
                            "backend": "LevelDB",
                            "resize_width": -4,
                            "encode_type": ".PNG",
                            "check_size": "yes",
                        },
                        "monitoring": {"log_level": "debug"},
                    }
                ),
                encoding="utf-8",
            )

            config = load_convert_config(
                str(config_file),
                cli_overrides={"imageset": {"backend": "lmdb", "resize_height": None}},
            )

            self.assertEqual(config.imageset.backend, "lmdb")
            self.assertEqual(config.imageset.resize_width, 0)
            self.assertEqual(config.imageset.resize_height, 0)
            self.assertEqual(config.imageset.encode_type, "png")
            self.assertTrue(config.imageset.encoded)
            self.assertTrue(config.imageset.check_size)
            self.assertEqual(config.monitoring.log_level, "DEBUG")

    def test_unknown_backend_rejected(self) -> None:
        with self.assertRaises(ValueError):
            load_convert_config(cli_overrides={"imageset": {"backend": "rocksdb"}})

    def test_missing_config_file_rejected(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            with self.assertRaises(FileNotFoundError):
                load_convert_config(str(Path(tmpdir) / "nope.toml"))

    def test_max_pairs_zero_means_no_cap_and_negative_rejected(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            search_dir = Path(tmpdir)
            config = load_convert_config(cli_overrides={"cifar": {"max_pairs": 0}}, search_dir=search_dir)
            self.assertIsNone(config.cifar.max_pairs)

            config = load_convert_config(cli_overrides={"cifar": {"max_pairs": 25}}, search_dir=search_dir)
            self.assertEqual(config.cifar.max_pairs, 25)

            with self.assertRaises(ValueError):
                load_convert_config(cli_overrides={"cifar": {"max_pairs": -1}}, search_dir=search_dir)


if __name__ == "__main__":
    unittest.main()
