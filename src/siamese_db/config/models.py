from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ImagesetConfig:
    grayscale: bool = False
    shuffle: bool = False
    shuffle_seed: int | None = None
    backend: str = "lmdb"
    resize_width: int = 0
    resize_height: int = 0
    check_size: bool = False
    encoded: bool = False
    encode_type: str = ""
    commit_every: int = 1000
    strict_pairs: bool = True


@dataclass
class CifarConfig:
    strict_pairs: bool = True
    max_pairs: int | None = None


@dataclass
class StoreConfig:
    lmdb_map_size: int = 1 << 30


@dataclass
class MonitoringConfig:
    json_logs: bool = False
    log_level: str = "INFO"


@dataclass
class ConvertConfig:
    imageset: ImagesetConfig = field(default_factory=ImagesetConfig)
    cifar: CifarConfig = field(default_factory=CifarConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    monitoring: MonitoringConfig = field(default_factory=MonitoringConfig)

    def as_log_context(self) -> dict[str, Any]:
        return {
            "backend": self.imageset.backend,
            "grayscale": self.imageset.grayscale,
            "shuffle": self.imageset.shuffle,
            "resize": f"{self.imageset.resize_width}x{self.imageset.resize_height}",
            "check_size": self.imageset.check_size,
            "encoded": self.imageset.encoded,
            "strict_pairs": self.imageset.strict_pairs,
        }
