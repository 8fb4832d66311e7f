from __future__ import annotations

from pathlib import Path
from typing import Iterator

import numpy as np

from siamese_db.datasets.cifar import CIFAR_IMAGE_NBYTES
from siamese_db.db.base import KeyValueStore, Mode, Transaction


def cifar_pixels(index: int) -> bytes:
    return ((np.arange(CIFAR_IMAGE_NBYTES) + index * 7) % 256).astype(np.uint8).tobytes()


def write_cifar_batch(path: Path, labels: list[int]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("wb") as handle:
        for index, label in enumerate(labels):
            handle.write(bytes([label]))
            handle.write(cifar_pixels(index))


class FakeTransaction(Transaction):
    def __init__(self, store: "FakeStore") -> None:
        self._store = store
        self._items: list[tuple[bytes, bytes]] = []

    def put(self, key: bytes, value: bytes) -> None:
        self._items.append((key, value))

    def commit(self) -> None:
        self._store.commit_sizes.append(len(self._items))
        self._store.items.update(self._items)
        self._items = []

    def __len__(self) -> int:
        return len(self._items)


class FakeStore(KeyValueStore):
    def __init__(self) -> None:
        self.items: dict[bytes, bytes] = {}
        self.commit_sizes: list[int] = []
        self.transactions = 0
        self.closed = False

    def open(self, path, mode: Mode) -> None:
        self.closed = False

    def new_transaction(self) -> Transaction:
        self.transactions += 1
        return FakeTransaction(self)

    def iter_items(self) -> Iterator[tuple[bytes, bytes]]:
        for key in sorted(self.items):
            yield key, self.items[key]

    def close(self) -> None:
        self.closed = True

    def name(self) -> str:
        return "fake"
