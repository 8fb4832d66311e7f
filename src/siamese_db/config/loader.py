from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from dynaconf import Dynaconf

from siamese_db.config.defaults import DEFAULT_CONFIG
from siamese_db.config.models import (
    CifarConfig,
    ConvertConfig,
    ImagesetConfig,
    MonitoringConfig,
    StoreConfig,
)
from siamese_db.db.factory import SUPPORTED_BACKENDS
from siamese_db.utils.config_io import deep_merge, prune_none

ENVVAR_PREFIX = "SIAMESE_DB"
DEFAULT_CONFIG_NAMES = (
    "siamese_db.toml",
    "siamese_db.yaml",
    "siamese_db.yml",
    "siamese_db.json",
)

logger = logging.getLogger(__name__)


def _lower_keys(obj: Any) -> Any:
    if isinstance(obj, dict):
        return {str(k).lower(): _lower_keys(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_lower_keys(item) for item in obj]
    return obj


def _load_with_dynaconf(config_paths: list[Path]) -> dict[str, Any]:
    settings = Dynaconf(
        envvar_prefix=ENVVAR_PREFIX,
        settings_files=[str(path) for path in config_paths],
        merge_enabled=True,
        environments=False,
        load_dotenv=False,
    )
    return _lower_keys(settings.as_dict())


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def _optional_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    return int(value)


def _normalize(data: dict[str, Any]) -> ConvertConfig:
    imageset_data = data.get("imageset", {})
    cifar_data = data.get("cifar", {})
    store_data = data.get("store", {})
    monitoring_data = data.get("monitoring", {})

    backend = str(imageset_data.get("backend", "lmdb")).lower().strip()
    if backend not in SUPPORTED_BACKENDS:
        raise ValueError(
            f"Unsupported backend '{backend}'; expected one of {', '.join(SUPPORTED_BACKENDS)}"
        )

    max_pairs = _optional_int(cifar_data.get("max_pairs"))
    if max_pairs is not None and max_pairs < 0:
        raise ValueError(f"cifar.max_pairs must be >= 0 (0 means no cap), got {max_pairs}")

    encode_type = str(imageset_data.get("encode_type") or "").strip().lower().lstrip(".")
    encoded = _coerce_bool(imageset_data.get("encoded", False))
    if encode_type and not encoded:
        logger.info("encode_type specified, assuming encoded=true.")
        encoded = True

    return ConvertConfig(
        imageset=ImagesetConfig(
            grayscale=_coerce_bool(imageset_data.get("grayscale", False)),
            shuffle=_coerce_bool(imageset_data.get("shuffle", False)),
            shuffle_seed=_optional_int(imageset_data.get("shuffle_seed")),
            backend=backend,
            resize_width=max(0, int(imageset_data.get("resize_width", 0))),
            resize_height=max(0, int(imageset_data.get("resize_height", 0))),
            check_size=_coerce_bool(imageset_data.get("check_size", False)),
            encoded=encoded,
            encode_type=encode_type,
            commit_every=max(1, int(imageset_data.get("commit_every", 1000))),
            strict_pairs=_coerce_bool(imageset_data.get("strict_pairs", True)),
        ),
        cifar=CifarConfig(
            strict_pairs=_coerce_bool(cifar_data.get("strict_pairs", True)),
            max_pairs=max_pairs or None,
        ),
        store=StoreConfig(
            lmdb_map_size=max(1 << 20, int(store_data.get("lmdb_map_size", 1 << 30))),
        ),
        monitoring=MonitoringConfig(
            json_logs=_coerce_bool(monitoring_data.get("json_logs", False)),
            log_level=str(monitoring_data.get("log_level", "INFO")).upper(),
        ),
    )


def _default_config_copy() -> dict[str, Any]:
    return json.loads(json.dumps(DEFAULT_CONFIG))


def load_convert_config(
    config_path: str | None = None,
    cli_overrides: dict[str, Any] | None = None,
    search_dir: Path | None = None,
) -> ConvertConfig:
    """Defaults, then settings files and SIAMESE_DB_* env vars, then CLI flags."""
    config_paths: list[Path] = []
    if config_path:
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        config_paths.append(path)
    else:
        root = search_dir or Path.cwd()
        for name in DEFAULT_CONFIG_NAMES:
            candidate = root / name
            if candidate.exists():
                config_paths.append(candidate)

    merged = _default_config_copy()
    deep_merge(merged, _load_with_dynaconf(config_paths))

    if cli_overrides:
        deep_merge(merged, _lower_keys(prune_none(cli_overrides)))

    return _normalize(merged)
