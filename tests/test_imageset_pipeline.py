from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

import cv2
import numpy as np

from siamese_db.config.models import ConvertConfig
from siamese_db.datasets.imageset import ImageListDataset, parse_image_list
from siamese_db.db import Mode, get_store
from siamese_db.errors import DatasetError, LabelMismatchError, SizeCheckError
from siamese_db.pipeline.imageset import convert_image_pairs
from siamese_db.records.datum import deserialize_record


def _image(height: int, width: int, channels: int, seed: int) -> np.ndarray:
    rng = np.random.default_rng(seed)
    shape = (height, width, channels) if channels > 1 else (height, width)
    return rng.integers(0, 256, size=shape, dtype=np.uint8)


def _read_records(db_path: Path) -> list:
    store = get_store("lmdb")
    store.open(db_path, Mode.READ)
    try:
        return [deserialize_record(value) for _, value in store.iter_items()]
    finally:
        store.close()


class ImageListTests(unittest.TestCase):
    def test_parse_allows_spaces_in_paths(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "list.txt"
            path.write_text("a/cat one.png 3\n\nb.png 0\n", encoding="utf-8")

            entries = parse_image_list(path)

            self.assertEqual([(e.relative_path, e.label) for e in entries], [("a/cat one.png", 3), ("b.png", 0)])

    def test_parse_rejects_bad_label(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "list.txt"
            path.write_text("a.png cat\n", encoding="utf-8")
            with self.assertRaises(DatasetError):
                parse_image_list(path)

    def test_load_resizes_and_reports_grayscale_channel(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            cv2.imwrite(str(root / "a.png"), _image(10, 12, 3, seed=1))
            dataset = ImageListDataset(
                root,
                parse_image_list_from(root, "a.png 2\n"),
                grayscale=True,
                resize_width=8,
                resize_height=6,
            )

            sample = dataset.load(0)

            self.assertIsNotNone(sample)
            self.assertEqual((sample.height, sample.width, sample.channels), (6, 8, 1))
            self.assertEqual(sample.label, 2)

    def test_undecodable_image_returns_none(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            (root / "broken.png").write_bytes(b"not an image")
            dataset = ImageListDataset(root, parse_image_list_from(root, "broken.png 0\n"))
            self.assertIsNone(dataset.load(0))
            with self.assertRaises(DatasetError):
                dataset.load(1)

    def test_encoded_mode_keeps_original_bytes(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            cv2.imwrite(str(root / "a.png"), _image(4, 4, 3, seed=2))
            dataset = ImageListDataset(root, parse_image_list_from(root, "a.png 0\n"), encoded=True)

            sample = dataset.load(0)

            self.assertEqual(sample.encoded, (root / "a.png").read_bytes())

    def test_grayscale_encoded_sample_is_reencoded_from_pixels(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            cv2.imwrite(str(root / "a.png"), _image(6, 7, 3, seed=4))
            dataset = ImageListDataset(
                root,
                parse_image_list_from(root, "a.png 0\n"),
                grayscale=True,
                encoded=True,
                encode_type="png",
            )

            sample = dataset.load(0)

            self.assertNotEqual(sample.encoded, (root / "a.png").read_bytes())
            decoded = cv2.imdecode(np.frombuffer(sample.encoded, dtype=np.uint8), cv2.IMREAD_UNCHANGED)
            self.assertEqual(decoded.shape, (6, 7))
            np.testing.assert_array_equal(decoded, sample.pixels[:, :, 0])


def parse_image_list_from(root: Path, text: str):
    path = root / "list.txt"
    path.write_text(text, encoding="utf-8")
    return parse_image_list(path)


class ImagesetPipelineTests(unittest.TestCase):
    def _fixture(self, root: Path) -> dict[str, np.ndarray]:
        images = {
            "a.png": _image(4, 5, 3, seed=10),
            "b.png": _image(4, 5, 3, seed=11),
            "c.png": _image(4, 5, 3, seed=12),
        }
        for name, pixels in images.items():
            cv2.imwrite(str(root / name), pixels)
        (root / "list.txt").write_text("a.png 0\nb.png 0\nc.png 1\nmissing.png 1\n", encoding="utf-8")
        return images

    def test_writes_channel_stacked_pairs_and_skips_unreadable_images(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            images = self._fixture(root)
            (root / "pairs.txt").write_text("0 1 0 0\n0 3 0 1\n2 0 1 0\n", encoding="utf-8")

            summary = convert_image_pairs(root, root / "list.txt", root / "pairs.txt", root / "db")

            self.assertEqual(summary["written"], 2)
            self.assertEqual(summary["skipped"], 1)
            self.assertEqual(summary["commits"], 1)
            records = _read_records(root / "db")
            self.assertEqual([r.label for r in records], [1, 0])
            expected = (
                images["c.png"].transpose(2, 0, 1).tobytes()
                + images["a.png"].transpose(2, 0, 1).tobytes()
            )
            self.assertEqual(records[1].data, expected)
            self.assertEqual((records[1].channels, records[1].height, records[1].width), (6, 4, 5))

    def test_label_mismatch_is_fatal(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            self._fixture(root)
            (root / "pairs.txt").write_text("0 2 0 0\n", encoding="utf-8")

            with self.assertRaises(LabelMismatchError):
                convert_image_pairs(root, root / "list.txt", root / "pairs.txt", root / "db")

    def test_check_size_aborts_at_second_record(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            cv2.imwrite(str(root / "big1.png"), _image(48, 64, 1, seed=1))
            cv2.imwrite(str(root / "big2.png"), _image(48, 64, 1, seed=2))
            cv2.imwrite(str(root / "small.png"), _image(32, 64, 1, seed=3))
            (root / "list.txt").write_text("big1.png 0\nbig2.png 0\nsmall.png 0\n", encoding="utf-8")
            (root / "pairs.txt").write_text("0 1 0 0\n2 2 0 0\n", encoding="utf-8")
            config = ConvertConfig()
            config.imageset.grayscale = True
            config.imageset.check_size = True

            with self.assertRaises(SizeCheckError) as ctx:
                convert_image_pairs(root, root / "list.txt", root / "pairs.txt", root / "db", config)

            self.assertIn("4096", str(ctx.exception))
            self.assertIn("6144", str(ctx.exception))

    def test_shuffle_keeps_pair_indices_bound_to_list_order(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            images = self._fixture(root)
            lines = ["0 1 0 0", "1 2 0 1", "2 0 1 0", "0 0 0 0", "2 2 1 1"]
            (root / "pairs.txt").write_text("\n".join(lines) + "\n", encoding="utf-8")
            config = ConvertConfig()
            config.imageset.shuffle = True
            config.imageset.shuffle_seed = 3

            summary = convert_image_pairs(root, root / "list.txt", root / "pairs.txt", root / "db", config)

            self.assertEqual(summary["written"], 5)
            names = ["a.png", "b.png", "c.png"]
            expected = set()
            for line in lines:
                i, j = (int(v) for v in line.split()[:2])
                expected.add(
                    images[names[i]].transpose(2, 0, 1).tobytes()
                    + images[names[j]].transpose(2, 0, 1).tobytes()
                )
            self.assertEqual({r.data for r in _read_records(root / "db")}, expected)

    def test_commit_every_splits_transactions(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            self._fixture(root)
            (root / "pairs.txt").write_text("0 1 0 0\n" * 5, encoding="utf-8")
            config = ConvertConfig()
            config.imageset.commit_every = 2

            summary = convert_image_pairs(root, root / "list.txt", root / "pairs.txt", root / "db", config)

            self.assertEqual(summary["commits"], 3)
            self.assertEqual(len(_read_records(root / "db")), 5)


    def test_encoded_pairs_store_both_payloads_with_split_offset(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            self._fixture(root)
            (root / "pairs.txt").write_text("0 1 0 0\n2 0 1 0\n", encoding="utf-8")
            config = ConvertConfig()
            config.imageset.encoded = True
            config.imageset.encode_type = "jpg"

            summary = convert_image_pairs(root, root / "list.txt", root / "pairs.txt", root / "db", config)

            self.assertEqual(summary["written"], 2)
            records = _read_records(root / "db")
            ok, first_jpeg = cv2.imencode(".jpg", cv2.imread(str(root / "a.png"), cv2.IMREAD_COLOR))
            self.assertTrue(ok)
            record = records[0]
            self.assertTrue(record.encoded)
            self.assertEqual((record.channels, record.height, record.width, record.label), (6, 4, 5, 1))
            self.assertEqual(record.encoded_split, len(first_jpeg.tobytes()))
            self.assertEqual(record.data[: record.encoded_split], first_jpeg.tobytes())
            for half in (record.data[: record.encoded_split], record.data[record.encoded_split :]):
                self.assertTrue(half.startswith(b"\xff\xd8\xff"))
            self.assertEqual(records[1].label, 0)


if __name__ == "__main__":
    unittest.main()
