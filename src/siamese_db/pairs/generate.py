from __future__ import annotations

import random
from pathlib import Path

from siamese_db.types import PairSpec


def _group_by_label(labels: list[int]) -> dict[int, list[int]]:
    grouped: dict[int, list[int]] = {}
    for index, label in enumerate(labels):
        grouped.setdefault(label, []).append(index)
    return grouped


def generate_pairs(
    labels: list[int],
    count: int,
    seed: int | None = None,
    positive_fraction: float = 0.5,
) -> list[PairSpec]:
    """Draw ``count`` random pairs, about ``positive_fraction`` of them same-label."""
    if count < 0:
        raise ValueError("count must be non-negative")
    if not 0.0 <= positive_fraction <= 1.0:
        raise ValueError("positive_fraction must be within [0, 1]")

    rng = random.Random(seed)
    grouped = _group_by_label(labels)
    positive_labels = sorted(label for label, idxs in grouped.items() if len(idxs) >= 2)
    all_labels = sorted(grouped)

    num_positive = round(count * positive_fraction)
    num_negative = count - num_positive
    if num_positive and not positive_labels:
        raise ValueError("Positive pairs need at least one label with two samples")
    if num_negative and len(all_labels) < 2:
        raise ValueError("Negative pairs need at least two distinct labels")

    pairs: list[tuple[int, int]] = []
    for _ in range(num_positive):
        label = rng.choice(positive_labels)
        first, second = rng.sample(grouped[label], 2)
        pairs.append((first, second))
    for _ in range(num_negative):
        label_a, label_b = rng.sample(all_labels, 2)
        pairs.append((rng.choice(grouped[label_a]), rng.choice(grouped[label_b])))

    rng.shuffle(pairs)
    return [
        PairSpec(
            first=first,
            second=second,
            first_label=labels[first],
            second_label=labels[second],
            line_no=line_no,
        )
        for line_no, (first, second) in enumerate(pairs, start=1)
    ]


def write_pair_file(path: Path, pairs: list[PairSpec]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        for spec in pairs:
            handle.write(spec.to_line() + "\n")
