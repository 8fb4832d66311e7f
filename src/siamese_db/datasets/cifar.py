from __future__ import annotations

import logging
from pathlib import Path

import numpy as np

from siamese_db.errors import DatasetError
from siamese_db.types import LAYOUT_CHW, Sample

CIFAR_SIZE = 32
CIFAR_CHANNELS = 3
CIFAR_IMAGE_NBYTES = CIFAR_SIZE * CIFAR_SIZE * CIFAR_CHANNELS
CIFAR_RECORD_NBYTES = CIFAR_IMAGE_NBYTES + 1

TRAIN_BATCH_NAME = "data_batch.bin"
TRAIN_BATCH_PARTS = tuple(f"data_batch_{idx}.bin" for idx in range(1, 6))
TEST_BATCH_NAME = "test_batch.bin"

logger = logging.getLogger(__name__)


class CifarBatchFile:
    """Fixed-stride reader over one CIFAR-10 binary batch file.

    Each record is one label byte followed by 3072 pixel bytes stored as
    three 32x32 planes (R, G, B), so samples come out channel-major.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        try:
            self._handle = self.path.open("rb")
        except OSError as exc:
            raise DatasetError(f"Unable to open CIFAR batch file {self.path}") from exc
        self._size = self.path.stat().st_size

    def __len__(self) -> int:
        return self._size // CIFAR_RECORD_NBYTES

    def read(self, index: int) -> Sample:
        if self._handle is None:
            raise DatasetError(f"CIFAR batch file {self.path} is closed")
        if index < 0 or index >= len(self):
            raise DatasetError(
                f"CIFAR index {index} is out of range for {self.path} ({len(self)} records)"
            )

        self._handle.seek(CIFAR_RECORD_NBYTES * index)
        raw = self._handle.read(CIFAR_RECORD_NBYTES)
        if len(raw) != CIFAR_RECORD_NBYTES:
            raise DatasetError(f"Short read at index {index} in {self.path}")

        pixels = np.frombuffer(raw[1:], dtype=np.uint8).reshape(
            CIFAR_CHANNELS, CIFAR_SIZE, CIFAR_SIZE
        )
        return Sample(
            pixels=pixels,
            label=raw[0],
            layout=LAYOUT_CHW,
            source=f"{self.path.name}[{index}]",
        )

    def labels(self) -> list[int]:
        if self._handle is None:
            raise DatasetError(f"CIFAR batch file {self.path} is closed")
        result: list[int] = []
        for index in range(len(self)):
            self._handle.seek(CIFAR_RECORD_NBYTES * index)
            result.append(self._handle.read(1)[0])
        return result

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None


class CifarBatchSet:
    """Several batch files addressed as one contiguous index space."""

    def __init__(self, paths: list[Path]) -> None:
        if not paths:
            raise DatasetError("CifarBatchSet requires at least one batch file")
        self._files: list[CifarBatchFile] = []
        try:
            for path in paths:
                self._files.append(CifarBatchFile(path))
        except DatasetError:
            self.close()
            raise
        self._offsets: list[int] = []
        total = 0
        for batch in self._files:
            self._offsets.append(total)
            total += len(batch)
        self._total = total

    def __len__(self) -> int:
        return self._total

    @property
    def paths(self) -> list[Path]:
        return [batch.path for batch in self._files]

    def read(self, index: int) -> Sample:
        if index < 0 or index >= self._total:
            raise DatasetError(f"CIFAR index {index} is out of range ({self._total} records)")
        for batch, offset in zip(reversed(self._files), reversed(self._offsets)):
            if index >= offset:
                return batch.read(index - offset)
        raise DatasetError(f"CIFAR index {index} is out of range ({self._total} records)")

    def labels(self) -> list[int]:
        result: list[int] = []
        for batch in self._files:
            result.extend(batch.labels())
        return result

    def close(self) -> None:
        for batch in self._files:
            batch.close()

    def __enter__(self) -> "CifarBatchSet":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def split_batch_paths(input_folder: Path, split: str) -> list[Path]:
    if split == "test":
        return [input_folder / TEST_BATCH_NAME]
    if split != "train":
        raise ValueError(f"Unknown CIFAR split: {split}")

    combined = input_folder / TRAIN_BATCH_NAME
    if combined.exists():
        return [combined]
    parts = [input_folder / name for name in TRAIN_BATCH_PARTS]
    if all(path.exists() for path in parts):
        logger.info("Using %d split training batches from %s", len(parts), input_folder)
        return parts
    # Missing data is reported by CifarBatchFile with the canonical name.
    return [combined]


def open_cifar_split(input_folder: str | Path, split: str) -> CifarBatchSet:
    return CifarBatchSet(split_batch_paths(Path(input_folder), split))
