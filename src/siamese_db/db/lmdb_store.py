from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Iterator

import lmdb

from siamese_db.db.base import KeyValueStore, Mode, Transaction
from siamese_db.errors import StoreError

DEFAULT_MAP_SIZE = 1 << 30

logger = logging.getLogger(__name__)


class LMDBTransaction(Transaction):
    """Buffers puts and writes them in a single LMDB write transaction."""

    def __init__(self, store: "LMDBStore") -> None:
        self._store = store
        self._keys: list[bytes] = []
        self._values: list[bytes] = []

    def put(self, key: bytes, value: bytes) -> None:
        self._keys.append(key)
        self._values.append(value)

    def commit(self) -> None:
        env = self._store.env
        while True:
            try:
                with env.begin(write=True) as txn:
                    for key, value in zip(self._keys, self._values):
                        txn.put(key, value)
                break
            except lmdb.MapFullError:
                self._store.double_map_size()
        self._keys.clear()
        self._values.clear()

    def __len__(self) -> int:
        return len(self._keys)


class LMDBStore(KeyValueStore):
    def __init__(self, map_size: int = DEFAULT_MAP_SIZE) -> None:
        self._map_size = map_size
        self._env: lmdb.Environment | None = None

    @property
    def env(self) -> lmdb.Environment:
        if self._env is None:
            raise StoreError("LMDB store is not open")
        return self._env

    def open(self, path: str | Path, mode: Mode) -> None:
        db_path = Path(path)
        if mode == Mode.NEW:
            if db_path.exists():
                raise StoreError(f"LMDB path already exists: {db_path}")
            db_path.mkdir(parents=True)
        elif mode == Mode.READ and not db_path.exists():
            raise StoreError(f"LMDB path not found: {db_path}")

        readonly = mode == Mode.READ
        try:
            self._env = lmdb.open(
                str(db_path),
                map_size=self._map_size,
                readonly=readonly,
                lock=not readonly,
                subdir=True,
            )
        except lmdb.Error as exc:
            if mode == Mode.NEW:
                shutil.rmtree(db_path, ignore_errors=True)
            raise StoreError(f"Failed to open lmdb {db_path}: {exc}") from exc
        logger.info("Opened lmdb %s", db_path)

    def double_map_size(self) -> None:
        self._map_size *= 2
        logger.warning("LMDB map full, doubling map size to %d MB", self._map_size >> 20)
        self.env.set_mapsize(self._map_size)

    def new_transaction(self) -> Transaction:
        _ = self.env
        return LMDBTransaction(self)

    def iter_items(self) -> Iterator[tuple[bytes, bytes]]:
        with self.env.begin(write=False) as txn:
            for key, value in txn.cursor():
                yield bytes(key), bytes(value)

    def close(self) -> None:
        if self._env is not None:
            self._env.close()
            self._env = None

    def name(self) -> str:
        return "lmdb"
