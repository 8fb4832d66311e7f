from __future__ import annotations

import re
from pathlib import Path
from typing import Iterator

from siamese_db.errors import PairFileError
from siamese_db.types import PairSpec

_ATOI_PREFIX = re.compile(r"^\s*([+-]?[0-9]+)")
_STRICT_INT = re.compile(r"[+-]?[0-9]+")


def atoi(token: str) -> int:
    """Parse the leading integer of ``token`` the way C ``atoi`` does; 0 if none."""
    match = _ATOI_PREFIX.match(token)
    if match is None:
        return 0
    return int(match.group(1))


def _parse_strict(token: str, line_no: int) -> int:
    # ASCII digits only; int() would also take underscores and other scripts.
    if _STRICT_INT.fullmatch(token) is None:
        raise PairFileError(f"Pair file line {line_no}: '{token}' is not an integer")
    return int(token)


def parse_pair_line(line: str, line_no: int, strict: bool = True) -> PairSpec | None:
    parts = line.split()
    if not parts:
        return None
    if len(parts) < 4 or (strict and len(parts) != 4):
        raise PairFileError(
            f"Pair file line {line_no}: expected 'idx1 idx2 label1 label2', got {len(parts)} fields"
        )

    if strict:
        values = [_parse_strict(token, line_no) for token in parts]
    else:
        values = [atoi(token) for token in parts[:4]]
    first, second, first_label, second_label = values
    return PairSpec(
        first=first,
        second=second,
        first_label=first_label,
        second_label=second_label,
        line_no=line_no,
    )


class PairFileReader:
    """Single-pass reader over a pairing file.

    The file is opened on construction so a missing path fails before any
    store is created. Iteration yields PairSpec records in file order and
    cannot be restarted.
    """

    def __init__(self, path: str | Path, strict: bool = True) -> None:
        self.path = Path(path)
        self.strict = strict
        self._handle = self.path.open("r", encoding="utf-8")
        self._line_no = 0

    def __iter__(self) -> Iterator[PairSpec]:
        return self

    def __next__(self) -> PairSpec:
        if self._handle is None:
            raise StopIteration
        for raw in self._handle:
            self._line_no += 1
            spec = parse_pair_line(raw, self._line_no, strict=self.strict)
            if spec is not None:
                return spec
        raise StopIteration

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None

    def __enter__(self) -> "PairFileReader":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def read_pair_specs(path: str | Path, strict: bool = True) -> Iterator[PairSpec]:
    with PairFileReader(path, strict=strict) as reader:
        yield from reader
