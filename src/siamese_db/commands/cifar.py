from __future__ import annotations

import logging
from typing import Any

from siamese_db.commands.common import emit_summary, load_command_config
from siamese_db.pipeline.cifar import convert_cifar_dataset

CIFAR_USAGE = """This script converts the CIFAR dataset to the leveldb/lmdb siamese format.
Usage:
    convert_cifar_data input_folder output_folder db_type train_pairs test_pairs
Where the input folder should contain the binary batch files
(data_batch.bin or data_batch_1.bin ... data_batch_5.bin, and test_batch.bin).
The CIFAR dataset could be downloaded at
    http://www.cs.toronto.edu/~kriz/cifar.html
"""

logger = logging.getLogger(__name__)


def run_cifar(args: Any) -> int:
    if len(args.paths) != 5:
        print(CIFAR_USAGE)
        return 0

    input_folder, output_folder, db_type, train_pairs, test_pairs = args.paths
    try:
        overrides = {
            "cifar": {
                "max_pairs": args.max_pairs,
                "strict_pairs": False if args.lenient_pairs else None,
            },
        }
        config = load_command_config(args, overrides)
        summary = convert_cifar_dataset(
            input_folder=input_folder,
            output_folder=output_folder,
            db_type=db_type,
            train_pairs=train_pairs,
            test_pairs=test_pairs,
            config=config,
        )
        emit_summary(summary, args.report)
        return 0
    except Exception as exc:
        logger.error("cifar conversion failed: %s", exc)
        return 2
