"""Fabricated breakdown of a volume's used space.

No file is ever inspected: each named category takes an independent random
5..19 percent share of the used bytes and ``OTHER`` gets whatever is left,
which can go negative when the four draws add up to more than 100%.
"""

from __future__ import annotations

import random

from disk_info.models.volumes import CategoryUsage, FileCategory, FilesDistribution

MIN_PERCENT = 5
MAX_PERCENT = 19

NAMED_CATEGORIES: tuple[FileCategory, ...] = (
    FileCategory.APPS,
    FileCategory.PHOTOS,
    FileCategory.AUDIO,
    FileCategory.MOVIES,
)


def random_percentage(rng: random.Random | None = None) -> int:
    """Whole percent in ``[MIN_PERCENT, MAX_PERCENT]``."""
    source = rng if rng is not None else random
    return source.randint(MIN_PERCENT, MAX_PERCENT)


def generate_distribution(
    capacity: int,
    available: int,
    rng: random.Random | None = None,
) -> FilesDistribution | None:
    """Split ``capacity - available`` across the five file categories.

    Returns ``None`` when ``capacity <= 0``. ``available`` is not checked
    against ``capacity``; a negative used size flows through unchanged.
    """
    capacity = int(capacity)
    available = int(available)
    if capacity <= 0:
        return None

    used = capacity - available

    entries: list[CategoryUsage] = []
    for category in NAMED_CATEGORIES:
        p = random_percentage(rng)
        # floor(p / 100 * used) without float rounding on large volumes
        size = (p * used) // 100
        entries.append(CategoryUsage(category=category, bytes=size, percent=size / capacity))

    other = used - sum(e.bytes for e in entries)
    entries.append(CategoryUsage(category=FileCategory.OTHER, bytes=other, percent=other / capacity))

    return FilesDistribution(capacity=capacity, available=available, distribution=tuple(entries))
