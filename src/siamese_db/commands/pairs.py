from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from siamese_db.commands.common import emit_summary, load_command_config
from siamese_db.datasets.cifar import CifarBatchSet
from siamese_db.datasets.imageset import parse_image_list
from siamese_db.pairs.generate import generate_pairs, write_pair_file

logger = logging.getLogger(__name__)


def _read_labels(args: Any) -> list[int]:
    if args.cifar_batch:
        with CifarBatchSet([Path(p) for p in args.cifar_batch]) as batch_set:
            return batch_set.labels()
    if args.list_file:
        return [entry.label for entry in parse_image_list(args.list_file)]
    raise ValueError("make-pairs requires --cifar-batch or --list-file")


def run_make_pairs(args: Any) -> int:
    try:
        load_command_config(args)
        labels = _read_labels(args)
        count = args.count if args.count is not None else len(labels)
        pairs = generate_pairs(
            labels,
            count=count,
            seed=args.seed,
            positive_fraction=args.positive_fraction,
        )
        output = Path(args.output)
        write_pair_file(output, pairs)
        positives = sum(1 for spec in pairs if spec.first_label == spec.second_label)
        emit_summary(
            {
                "output": str(output),
                "samples": len(labels),
                "pairs": len(pairs),
                "positives": positives,
                "negatives": len(pairs) - positives,
            }
        )
        return 0
    except Exception as exc:
        logger.error("make-pairs failed: %s", exc)
        return 2
