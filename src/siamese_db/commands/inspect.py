from __future__ import annotations

import logging
from typing import Any

from siamese_db.commands.common import emit_summary, load_command_config
from siamese_db.pipeline.inspect import inspect_store

logger = logging.getLogger(__name__)


def run_inspect(args: Any) -> int:
    try:
        config = load_command_config(args)
        summary = inspect_store(
            args.db_path,
            backend=args.backend or config.imageset.backend,
            limit=args.limit,
        )
        emit_summary(summary)
        return 0
    except Exception as exc:
        logger.error("inspect failed: %s", exc)
        return 2
