from __future__ import annotations

import logging
from typing import Any

from siamese_db.commands.common import emit_summary, load_command_config
from siamese_db.pipeline.imageset import convert_image_pairs

IMAGESET_USAGE = """Convert a set of image pairs to the leveldb/lmdb siamese format.
Usage:
    convert_imageset [FLAGS] ROOTFOLDER/ LISTFILE PAIRFILE DB_NAME
"""

logger = logging.getLogger(__name__)


def _true_or_none(value: bool) -> bool | None:
    return True if value else None


def build_imageset_overrides(args: Any) -> dict[str, Any]:
    return {
        "imageset": {
            "grayscale": _true_or_none(args.gray),
            "shuffle": _true_or_none(args.shuffle),
            "shuffle_seed": args.shuffle_seed,
            "backend": args.backend,
            "resize_width": args.resize_width,
            "resize_height": args.resize_height,
            "check_size": _true_or_none(args.check_size),
            "encoded": _true_or_none(args.encoded),
            "encode_type": args.encode_type,
            "commit_every": args.commit_every,
            "strict_pairs": False if args.lenient_pairs else None,
        }
    }


def run_imageset(args: Any, usage: str = IMAGESET_USAGE) -> int:
    if len(args.paths) < 4:
        print(usage)
        return 1

    root_folder, list_file, pair_file, db_name = args.paths[:4]
    try:
        config = load_command_config(args, build_imageset_overrides(args))
        logger.debug("imageset settings", extra={"context": config.as_log_context()})
        summary = convert_image_pairs(
            root_folder=root_folder,
            list_file=list_file,
            pair_file=pair_file,
            db_name=db_name,
            config=config,
        )
        emit_summary(summary, args.report)
        return 0
    except Exception as exc:
        logger.error("imageset conversion failed: %s", exc)
        return 2
