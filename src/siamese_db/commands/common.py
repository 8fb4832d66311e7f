from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from siamese_db.config import ConvertConfig, load_convert_config
from siamese_db.monitoring import configure_logging
from siamese_db.utils.config_io import write_json


def load_command_config(args: Any, overrides: dict[str, Any] | None = None) -> ConvertConfig:
    payload = dict(overrides or {})
    payload["monitoring"] = {
        "log_level": getattr(args, "log_level", None),
        "json_logs": True if getattr(args, "json_logs", False) else None,
    }
    config = load_convert_config(getattr(args, "config", None), cli_overrides=payload)
    configure_logging(config.monitoring.log_level, json_logs=config.monitoring.json_logs)
    return config


def emit_summary(summary: dict[str, Any], report_path: str | None = None) -> None:
    if report_path:
        write_json(Path(report_path), summary)
    print(json.dumps(summary, ensure_ascii=True, indent=2))
