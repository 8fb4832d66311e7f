from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import cv2
import numpy as np

from siamese_db.errors import DatasetError
from siamese_db.types import LAYOUT_HWC, Sample

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImageEntry:
    relative_path: str
    label: int


def parse_image_list(path: str | Path) -> list[ImageEntry]:
    """Read a ``relative/path.jpg label`` list; the label is the last token."""
    list_path = Path(path)
    try:
        lines = list_path.read_text(encoding="utf-8").splitlines()
    except OSError as exc:
        raise DatasetError(f"Unable to open file {list_path}") from exc

    entries: list[ImageEntry] = []
    for line_no, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line:
            continue
        parts = line.rsplit(maxsplit=1)
        if len(parts) != 2:
            raise DatasetError(f"{list_path}:{line_no}: expected 'path label'")
        try:
            label = int(parts[1])
        except ValueError as exc:
            raise DatasetError(f"{list_path}:{line_no}: label '{parts[1]}' is not an integer") from exc
        entries.append(ImageEntry(relative_path=parts[0], label=label))
    return entries


def guess_encoding(filename: str) -> str:
    suffix = Path(filename).suffix
    if not suffix:
        logger.warning("Failed to guess the encoding of '%s'", filename)
        return ""
    return suffix[1:].lower()


def _normalize_encoding(value: str) -> str:
    value = value.strip().lower().lstrip(".")
    return "jpg" if value == "jpeg" else value


class ImageListDataset:
    """Decodes images named by a list file relative to a root folder."""

    def __init__(
        self,
        root_folder: str | Path,
        entries: list[ImageEntry],
        grayscale: bool = False,
        resize_width: int = 0,
        resize_height: int = 0,
        encoded: bool = False,
        encode_type: str = "",
    ) -> None:
        self.root_folder = Path(root_folder)
        self.entries = entries
        self.grayscale = grayscale
        self.resize_width = max(0, resize_width)
        self.resize_height = max(0, resize_height)
        self.encoded = encoded
        self.encode_type = encode_type

    def __len__(self) -> int:
        return len(self.entries)

    def entry(self, index: int) -> ImageEntry:
        if index < 0 or index >= len(self.entries):
            raise DatasetError(
                f"Image index {index} is out of range ({len(self.entries)} list entries)"
            )
        return self.entries[index]

    def _needs_resize(self) -> bool:
        return self.resize_width > 0 and self.resize_height > 0

    def _decode(self, path: Path) -> np.ndarray | None:
        flags = cv2.IMREAD_GRAYSCALE if self.grayscale else cv2.IMREAD_COLOR
        image = cv2.imread(str(path), flags)
        if image is None:
            return None
        if self._needs_resize():
            image = cv2.resize(image, (self.resize_width, self.resize_height))
        if image.ndim == 2:
            image = image[:, :, np.newaxis]
        return image

    def _encode(self, path: Path, image: np.ndarray) -> bytes | None:
        requested = _normalize_encoding(self.encode_type or guess_encoding(path.name))
        if not requested:
            return None
        native = _normalize_encoding(path.suffix)
        if requested == native and not self._needs_resize() and not self.grayscale:
            return path.read_bytes()

        ok, buffer = cv2.imencode(f".{requested}", image)
        if not ok:
            return None
        return buffer.tobytes()

    def load(self, index: int) -> Sample | None:
        """Return the decoded sample, or None when the image cannot be read."""
        entry = self.entry(index)
        path = self.root_folder / entry.relative_path
        image = self._decode(path)
        if image is None:
            logger.error("Could not open or find file %s", path)
            return None

        encoded_bytes = None
        if self.encoded:
            encoded_bytes = self._encode(path, image)
            if encoded_bytes is None:
                logger.error("Could not encode %s", path)
                return None

        return Sample(
            pixels=image,
            label=entry.label,
            layout=LAYOUT_HWC,
            source=entry.relative_path,
            encoded=encoded_bytes,
        )
