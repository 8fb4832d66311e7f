from __future__ import annotations

from dataclasses import dataclass

import numpy as np

LAYOUT_CHW = "chw"
LAYOUT_HWC = "hwc"


@dataclass
class Sample:
    """One source image with its ground-truth label."""

    pixels: np.ndarray
    label: int
    layout: str = LAYOUT_HWC
    source: str = ""
    encoded: bytes | None = None

    @property
    def height(self) -> int:
        if self.layout == LAYOUT_CHW:
            return int(self.pixels.shape[1])
        return int(self.pixels.shape[0])

    @property
    def width(self) -> int:
        if self.layout == LAYOUT_CHW:
            return int(self.pixels.shape[2])
        return int(self.pixels.shape[1])

    @property
    def channels(self) -> int:
        if self.layout == LAYOUT_CHW:
            return int(self.pixels.shape[0])
        return int(self.pixels.shape[2])


@dataclass(frozen=True)
class PairSpec:
    """One pairing-file line: two sample indices and their expected labels."""

    first: int
    second: int
    first_label: int
    second_label: int
    line_no: int = 0

    def to_line(self) -> str:
        return f"{self.first} {self.second} {self.first_label} {self.second_label}"


@dataclass
class PairedRecord:
    """Two samples stacked on the channel axis plus a same/different label."""

    channels: int
    height: int
    width: int
    data: bytes
    label: int
    encoded: bool = False
    encoded_split: int = 0

    @property
    def data_size(self) -> int:
        return len(self.data)
