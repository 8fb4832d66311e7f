from __future__ import annotations

import numpy as np

from siamese_db.errors import LabelMismatchError, RecordShapeError
from siamese_db.types import LAYOUT_CHW, LAYOUT_HWC, PairedRecord, PairSpec, Sample


def to_channel_major(sample: Sample) -> np.ndarray:
    if sample.layout == LAYOUT_CHW:
        return sample.pixels
    if sample.layout == LAYOUT_HWC:
        return np.transpose(sample.pixels, (2, 0, 1))
    raise RecordShapeError(f"Unknown sample layout '{sample.layout}' for {sample.source}")


def verify_pair_labels(spec: PairSpec, first_label: int, second_label: int) -> None:
    """Fail when the pairing file disagrees with the dataset's ground truth."""
    checks = (
        (spec.first, spec.first_label, first_label),
        (spec.second, spec.second_label, second_label),
    )
    for index, expected, actual in checks:
        if actual != expected:
            raise LabelMismatchError(
                f"Pair file line {spec.line_no}: sample {index} has label {actual} "
                f"but the pair file says {expected}"
            )


def pair_label(first: Sample, second: Sample) -> int:
    return 1 if first.label == second.label else 0


def build_paired_record(
    first: Sample,
    second: Sample,
    require_equal_channels: bool = False,
) -> PairedRecord:
    """Stack two samples on the channel axis.

    The data buffer holds the first sample's channel-major tensor followed by
    the second's. Samples with interleaved (HWC) pixels are transposed first.
    """
    for sample in (first, second):
        if sample.pixels.dtype != np.uint8:
            raise RecordShapeError(
                f"Image data type must be unsigned byte, got {sample.pixels.dtype} for {sample.source}"
            )
        if sample.pixels.ndim != 3:
            raise RecordShapeError(
                f"Expected a 3-dimensional image for {sample.source}, got shape {sample.pixels.shape}"
            )

    if (first.height, first.width) != (second.height, second.width):
        raise RecordShapeError(
            f"Image sizes differ: {first.source} is {first.height}x{first.width}, "
            f"{second.source} is {second.height}x{second.width}"
        )
    if require_equal_channels and first.channels != second.channels:
        raise RecordShapeError(
            f"The two image channels is mismatch: {first.channels} vs {second.channels}"
        )

    label = pair_label(first, second)
    channels = first.channels + second.channels

    if first.encoded is not None and second.encoded is not None:
        return PairedRecord(
            channels=channels,
            height=first.height,
            width=first.width,
            data=first.encoded + second.encoded,
            label=label,
            encoded=True,
            encoded_split=len(first.encoded),
        )

    merged = np.concatenate((to_channel_major(first), to_channel_major(second)), axis=0)
    return PairedRecord(
        channels=channels,
        height=first.height,
        width=first.width,
        data=np.ascontiguousarray(merged).tobytes(),
        label=label,
    )


def decode_record_pixels(record: PairedRecord) -> np.ndarray:
    """Inverse of the raw layout: a (channels, height, width) uint8 array."""
    if record.encoded:
        raise RecordShapeError("Encoded records carry compressed images, not raw pixels")
    expected = record.channels * record.height * record.width
    if len(record.data) != expected:
        raise RecordShapeError(
            f"Record data has {len(record.data)} bytes, expected {expected}"
        )
    return np.frombuffer(record.data, dtype=np.uint8).reshape(
        record.channels, record.height, record.width
    )
