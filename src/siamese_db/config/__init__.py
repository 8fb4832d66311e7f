from siamese_db.config.loader import load_convert_config
from siamese_db.config.models import (
    CifarConfig,
    ConvertConfig,
    ImagesetConfig,
    MonitoringConfig,
    StoreConfig,
)

__all__ = [
    "load_convert_config",
    "ConvertConfig",
    "ImagesetConfig",
    "CifarConfig",
    "StoreConfig",
    "MonitoringConfig",
]
