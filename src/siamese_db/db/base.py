from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import Iterator


class Mode(str, Enum):
    NEW = "new"
    WRITE = "write"
    READ = "read"


class Transaction(ABC):
    @abstractmethod
    def put(self, key: bytes, value: bytes) -> None:
        """Stage one key/value pair."""

    @abstractmethod
    def commit(self) -> None:
        """Persist every staged pair."""

    def __len__(self) -> int:
        return 0


class KeyValueStore(ABC):
    @abstractmethod
    def open(self, path: str | Path, mode: Mode) -> None:
        """Open or create the store at ``path``."""

    @abstractmethod
    def new_transaction(self) -> Transaction:
        """Start a write transaction."""

    @abstractmethod
    def iter_items(self) -> Iterator[tuple[bytes, bytes]]:
        """Yield all key/value pairs in key order."""

    @abstractmethod
    def close(self) -> None:
        """Release the store handle."""

    @abstractmethod
    def name(self) -> str:
        """Stable backend name for logging."""
