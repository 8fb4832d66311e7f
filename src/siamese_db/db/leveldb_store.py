from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterator

from siamese_db.db.base import KeyValueStore, Mode, Transaction
from siamese_db.errors import BackendUnavailable, StoreError

logger = logging.getLogger(__name__)


def _import_plyvel() -> Any:
    try:
        import plyvel
    except ImportError as exc:
        raise BackendUnavailable(
            "LevelDB backend requires plyvel. Install siamese-db[leveldb] or use lmdb."
        ) from exc
    return plyvel


class LevelDBTransaction(Transaction):
    def __init__(self, db: Any) -> None:
        self._batch = db.write_batch()
        self._pending = 0

    def put(self, key: bytes, value: bytes) -> None:
        self._batch.put(key, value)
        self._pending += 1

    def commit(self) -> None:
        self._batch.write()
        self._batch.clear()
        self._pending = 0

    def __len__(self) -> int:
        return self._pending


class LevelDBStore(KeyValueStore):
    def __init__(self, write_buffer_size: int = 268435456) -> None:
        self._write_buffer_size = write_buffer_size
        self._db: Any | None = None

    def open(self, path: str | Path, mode: Mode) -> None:
        plyvel = _import_plyvel()
        db_path = Path(path)
        if mode == Mode.READ and not db_path.exists():
            raise StoreError(f"LevelDB path not found: {db_path}")
        try:
            self._db = plyvel.DB(
                str(db_path),
                create_if_missing=mode != Mode.READ,
                error_if_exists=mode == Mode.NEW,
                write_buffer_size=self._write_buffer_size,
            )
        except plyvel.Error as exc:
            raise StoreError(f"Failed to open leveldb {db_path}: {exc}") from exc
        logger.info("Opened leveldb %s", db_path)

    def _require_db(self) -> Any:
        if self._db is None:
            raise StoreError("LevelDB store is not open")
        return self._db

    def new_transaction(self) -> Transaction:
        return LevelDBTransaction(self._require_db())

    def iter_items(self) -> Iterator[tuple[bytes, bytes]]:
        with self._require_db().iterator() as it:
            for key, value in it:
                yield key, value

    def close(self) -> None:
        if self._db is not None:
            self._db.close()
            self._db = None

    def name(self) -> str:
        return "leveldb"
