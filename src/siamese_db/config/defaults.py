from __future__ import annotations


DEFAULT_CONFIG: dict = {
    "imageset": {
        "grayscale": False,
        "shuffle": False,
        "shuffle_seed": None,
        "backend": "lmdb",
        "resize_width": 0,
        "resize_height": 0,
        "check_size": False,
        "encoded": False,
        "encode_type": "",
        "commit_every": 1000,
        "strict_pairs": True,
    },
    "cifar": {
        "strict_pairs": True,
        "max_pairs": None,
    },
    "store": {
        "lmdb_map_size": 1 << 30,
    },
    "monitoring": {
        "json_logs": False,
        "log_level": "INFO",
    },
}
