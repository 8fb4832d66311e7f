from __future__ import annotations

import unittest

from siamese_db.records.datum import Datum, deserialize_record, serialize_record
from siamese_db.types import PairedRecord


class DatumTests(unittest.TestCase):
    def test_round_trip_preserves_record(self) -> None:
        record = PairedRecord(channels=6, height=32, width=32, data=bytes(range(256)) * 24, label=1)

        restored = deserialize_record(serialize_record(record))

        self.assertEqual(restored, record)

    def test_wire_format_matches_caffe_datum_fields(self) -> None:
        record = PairedRecord(channels=2, height=1, width=1, data=b"\x01\x02", label=0)

        datum = Datum()
        datum.ParseFromString(serialize_record(record))

        self.assertEqual(datum.channels, 2)
        self.assertEqual(datum.data, b"\x01\x02")
        self.assertFalse(datum.encoded)
        # channels=2 (tag 0x08), height=1 (0x10), width=1 (0x18), data (0x22)
        self.assertTrue(serialize_record(record).startswith(b"\x08\x02\x10\x01\x18\x01\x22\x02\x01\x02"))

    def test_encoded_split_survives(self) -> None:
        record = PairedRecord(
            channels=6, height=8, width=8, data=b"abcdef", label=1, encoded=True, encoded_split=2
        )

        restored = deserialize_record(serialize_record(record))

        self.assertTrue(restored.encoded)
        self.assertEqual(restored.encoded_split, 2)


if __name__ == "__main__":
    unittest.main()
