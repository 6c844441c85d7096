from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class FileCategory(Enum):
    APPS = "Apps"
    PHOTOS = "Photos"
    AUDIO = "Audio"
    MOVIES = "Movies"
    OTHER = "Other"

    @property
    def display_name(self) -> str:
        return self.value


@dataclass(frozen=True)
class CategoryUsage:
    category: FileCategory
    bytes: int
    percent: float


@dataclass(frozen=True)
class FilesDistribution:
    capacity: int
    available: int
    distribution: tuple[CategoryUsage, ...] = ()

    @property
    def used(self) -> int:
        return self.capacity - self.available

    def by_category(self, category: FileCategory) -> CategoryUsage | None:
        for entry in self.distribution:
            if entry.category is category:
                return entry
        return None


@dataclass(frozen=True)
class VolumeInfo:
    name: str
    volume_type: str
    capacity: int
    available: int
    removable: bool
    file_distribution: FilesDistribution
    # Opaque icon handle, only meaningful to the presentation layer.
    image: Any = field(default=None, compare=False)
    path: str = ""

    @property
    def used(self) -> int:
        return self.capacity - self.available

    @property
    def used_percent(self) -> float:
        if self.capacity <= 0:
            return 0.0
        return self.used * 100.0 / self.capacity


@dataclass(frozen=True)
class VolumeData:
    volumes: list[VolumeInfo]
