from __future__ import annotations

from siamese_db.db.base import KeyValueStore
from siamese_db.errors import BackendUnavailable

SUPPORTED_BACKENDS = ("lmdb", "leveldb")


def get_store(backend: str, lmdb_map_size: int | None = None) -> KeyValueStore:
    name = backend.lower().strip()

    if name == "lmdb":
        from siamese_db.db.lmdb_store import DEFAULT_MAP_SIZE, LMDBStore

        return LMDBStore(map_size=lmdb_map_size or DEFAULT_MAP_SIZE)

    if name == "leveldb":
        from siamese_db.db.leveldb_store import LevelDBStore

        return LevelDBStore()

    raise BackendUnavailable(
        f"Unknown database backend '{backend}'; expected one of {', '.join(SUPPORTED_BACKENDS)}"
    )
