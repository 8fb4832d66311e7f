from __future__ import annotations

from pathlib import Path
from typing import Any

from siamese_db.db import Mode, get_store
from siamese_db.errors import ConversionError
from siamese_db.records.builder import decode_record_pixels
from siamese_db.records.datum import deserialize_record


def inspect_store(
    db_path: str | Path,
    backend: str = "lmdb",
    limit: int | None = None,
) -> dict[str, Any]:
    """Read records back and summarize keys, labels and geometry."""
    store = get_store(backend)
    store.open(db_path, Mode.READ)

    records = 0
    positives = 0
    encoded = 0
    first_key: str | None = None
    last_key: str | None = None
    previous: bytes | None = None
    geometry: set[tuple[int, int, int]] = set()
    try:
        for key, value in store.iter_items():
            if previous is not None and key <= previous:
                raise ConversionError(f"Keys are not strictly increasing at {key!r}")
            previous = key

            record = deserialize_record(value)
            if record.encoded:
                encoded += 1
            else:
                decode_record_pixels(record)
            geometry.add((record.channels, record.height, record.width))
            positives += record.label

            if first_key is None:
                first_key = key.decode("ascii", errors="replace")
            last_key = key.decode("ascii", errors="replace")
            records += 1
            if limit is not None and records >= limit:
                break
    finally:
        store.close()

    return {
        "db_path": str(db_path),
        "backend": backend,
        "records": records,
        "positives": positives,
        "negatives": records - positives,
        "encoded": encoded,
        "first_key": first_key,
        "last_key": last_key,
        "geometry": [
            {"channels": c, "height": h, "width": w} for c, h, w in sorted(geometry)
        ],
    }
