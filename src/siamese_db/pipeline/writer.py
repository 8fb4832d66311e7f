from __future__ import annotations

from typing import Any

from siamese_db.db.base import KeyValueStore, Transaction
from siamese_db.errors import SizeCheckError, StoreError
from siamese_db.monitoring.logging import context_logger
from siamese_db.records.datum import serialize_record
from siamese_db.types import PairedRecord


def format_key(sequence: int, width: int) -> bytes:
    if sequence < 0 or sequence >= 10**width:
        raise ValueError(f"Sequence {sequence} does not fit in a {width}-digit key")
    return f"{sequence:0{width}d}".encode("ascii")


class IngestionWriter:
    """Writes records under sequential zero-padded keys.

    The writer owns at most one open transaction. With ``commit_every`` set it
    commits after that many records and starts a fresh transaction; otherwise
    everything is committed once by ``finish``. Leaving the context with an
    exception drops the pending transaction; the store is closed either way.
    """

    def __init__(
        self,
        store: KeyValueStore,
        key_width: int,
        commit_every: int | None = None,
        check_size: bool = False,
        log_context: dict[str, Any] | None = None,
    ) -> None:
        if commit_every is not None and commit_every <= 0:
            raise ValueError("commit_every must be positive")
        self._store = store
        self._key_width = key_width
        self._commit_every = commit_every
        self._check_size = check_size
        self._expected_size: int | None = None
        self._txn: Transaction | None = store.new_transaction()
        self._pending = 0
        self.written = 0
        self.commits = 0
        self._log = context_logger(__name__, **(log_context or {}))

    def _check_record_size(self, record: PairedRecord) -> None:
        if record.encoded:
            return
        if self._expected_size is None:
            self._expected_size = record.data_size
            return
        if record.data_size != self._expected_size:
            raise SizeCheckError(
                f"Incorrect data field size {record.data_size} (expected {self._expected_size})"
            )

    def write(self, record: PairedRecord) -> bytes:
        if self._txn is None:
            raise StoreError("IngestionWriter is already finished")
        if self._check_size:
            self._check_record_size(record)

        key = format_key(self.written, self._key_width)
        self._txn.put(key, serialize_record(record))
        self.written += 1
        self._pending += 1

        if self._commit_every is not None and self._pending >= self._commit_every:
            self._commit()
            self._txn = self._store.new_transaction()
        return key

    def _commit(self) -> None:
        self._txn.commit()
        self.commits += 1
        self._pending = 0
        self._log.info("Processed %d files.", self.written)

    def finish(self) -> None:
        if self._txn is None:
            return
        if self._pending:
            self._commit()
        self._txn = None

    def abort(self) -> None:
        if self._pending:
            self._log.warning("Discarding %d uncommitted records", self._pending)
        self._txn = None
        self._pending = 0

    def __enter__(self) -> "IngestionWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if exc_type is None:
                self.finish()
            else:
                self.abort()
        finally:
            self._store.close()
