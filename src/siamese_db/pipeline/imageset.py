from __future__ import annotations

import logging
import random
from pathlib import Path
from typing import Any, Iterable

from siamese_db.config.models import ConvertConfig
from siamese_db.datasets.imageset import ImageListDataset, parse_image_list
from siamese_db.db import Mode, get_store
from siamese_db.pairs.reader import PairFileReader
from siamese_db.pipeline.writer import IngestionWriter
from siamese_db.records.builder import build_paired_record, verify_pair_labels
from siamese_db.types import PairSpec

IMAGESET_KEY_WIDTH = 8

logger = logging.getLogger(__name__)


def write_image_pairs(
    dataset: ImageListDataset,
    pairs: Iterable[PairSpec],
    writer: IngestionWriter,
) -> dict[str, int]:
    positives = 0
    skipped = 0
    for spec in pairs:
        first_entry = dataset.entry(spec.first)
        second_entry = dataset.entry(spec.second)
        verify_pair_labels(spec, first_entry.label, second_entry.label)
        logger.debug("Image Pairs: %s & %s", first_entry.relative_path, second_entry.relative_path)

        first = dataset.load(spec.first)
        second = dataset.load(spec.second) if first is not None else None
        if first is None or second is None:
            skipped += 1
            logger.info("Skipping pair on line %d", spec.line_no)
            continue

        record = build_paired_record(first, second, require_equal_channels=True)
        writer.write(record)
        positives += record.label

    return {
        "written": writer.written,
        "skipped": skipped,
        "positives": positives,
        "negatives": writer.written - positives,
    }


def convert_image_pairs(
    root_folder: str | Path,
    list_file: str | Path,
    pair_file: str | Path,
    db_name: str | Path,
    config: ConvertConfig | None = None,
) -> dict[str, Any]:
    """Merge the image pairs named by ``pair_file`` into one siamese database.

    Pair indices are positions in ``list_file``. Shuffling only changes the
    order in which pairs are written, never which images a pair refers to.
    """
    config = config or ConvertConfig()
    cfg = config.imageset

    entries = parse_image_list(list_file)
    logger.info("A total of %d images.", len(entries))
    dataset = ImageListDataset(
        root_folder,
        entries,
        grayscale=cfg.grayscale,
        resize_width=cfg.resize_width,
        resize_height=cfg.resize_height,
        encoded=cfg.encoded,
        encode_type=cfg.encode_type,
    )
    if cfg.check_size and cfg.encoded:
        logger.warning("check_size does not apply to encoded records; sizes will not be checked")

    with PairFileReader(pair_file, strict=cfg.strict_pairs) as reader:
        pairs: Iterable[PairSpec] = reader
        if cfg.shuffle:
            logger.info("Shuffling pair order; indices still refer to the list file order")
            shuffled = list(reader)
            random.Random(cfg.shuffle_seed).shuffle(shuffled)
            pairs = shuffled

        store = get_store(cfg.backend, lmdb_map_size=config.store.lmdb_map_size)
        store.open(db_name, Mode.NEW)
        try:
            writer = IngestionWriter(
                store,
                key_width=IMAGESET_KEY_WIDTH,
                commit_every=cfg.commit_every,
                check_size=cfg.check_size,
                log_context={"db_path": str(db_name)},
            )
        except Exception:
            store.close()
            raise
        with writer:
            counts = write_image_pairs(dataset, pairs, writer)

    summary = {
        "db_path": str(db_name),
        "backend": cfg.backend,
        "images": len(entries),
        **counts,
        "commits": writer.commits,
    }
    logger.info("Processed %d files.", writer.written, extra={"context": summary})
    return summary
