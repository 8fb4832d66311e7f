from __future__ import annotations

import logging
from itertools import islice
from pathlib import Path
from typing import Any, Iterable

from siamese_db.config.models import ConvertConfig
from siamese_db.datasets.cifar import CifarBatchSet, open_cifar_split
from siamese_db.db import Mode, get_store
from siamese_db.pairs.reader import PairFileReader
from siamese_db.pipeline.writer import IngestionWriter
from siamese_db.records.builder import build_paired_record, verify_pair_labels
from siamese_db.types import PairSpec

CIFAR_KEY_WIDTH = 5

logger = logging.getLogger(__name__)


def cifar_db_path(output_folder: Path, split: str, db_type: str) -> Path:
    return output_folder / f"cifar10_{split}_{db_type}"


def write_cifar_pairs(
    batch_set: CifarBatchSet,
    pairs: Iterable[PairSpec],
    writer: IngestionWriter,
) -> dict[str, int]:
    positives = 0
    for spec in pairs:
        first = batch_set.read(spec.first)
        second = batch_set.read(spec.second)
        verify_pair_labels(spec, first.label, second.label)
        record = build_paired_record(first, second)
        writer.write(record)
        positives += record.label
    return {"records": writer.written, "positives": positives, "negatives": writer.written - positives}


def _convert_split(
    input_folder: Path,
    output_folder: Path,
    split: str,
    db_type: str,
    reader: PairFileReader,
    config: ConvertConfig,
) -> dict[str, Any]:
    db_path = cifar_db_path(output_folder, split, db_type)
    with open_cifar_split(input_folder, split) as batch_set:
        store = get_store(db_type, lmdb_map_size=config.store.lmdb_map_size)
        store.open(db_path, Mode.NEW)
        try:
            writer = IngestionWriter(
                store,
                key_width=CIFAR_KEY_WIDTH,
                log_context={"split": split, "db_path": str(db_path)},
            )
        except Exception:
            store.close()
            raise
        with writer:
            pairs = islice(reader, config.cifar.max_pairs) if config.cifar.max_pairs else reader
            counts = write_cifar_pairs(batch_set, pairs, writer)
        counts["commits"] = writer.commits

    return {"db_path": str(db_path), "source_records": len(batch_set), **counts}


def convert_cifar_dataset(
    input_folder: str | Path,
    output_folder: str | Path,
    db_type: str,
    train_pairs: str | Path,
    test_pairs: str | Path,
    config: ConvertConfig | None = None,
) -> dict[str, Any]:
    """Write the train and test siamese databases for a CIFAR-10 binary dataset."""
    config = config or ConvertConfig()
    input_root = Path(input_folder)
    output_root = Path(output_folder)
    output_root.mkdir(parents=True, exist_ok=True)
    strict = config.cifar.strict_pairs

    with PairFileReader(train_pairs, strict=strict) as train_reader, PairFileReader(
        test_pairs, strict=strict
    ) as test_reader:
        splits: dict[str, Any] = {}
        for split, reader in (("train", train_reader), ("test", test_reader)):
            logger.info("Writing %s data", "Training" if split == "train" else "Testing")
            splits[split] = _convert_split(input_root, output_root, split, db_type, reader, config)
            logger.info(
                "Finished %s split",
                split,
                extra={"context": {"split": split, **splits[split]}},
            )

    return {"backend": db_type, "splits": splits}
