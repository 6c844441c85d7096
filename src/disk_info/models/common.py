from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Generic, TypeVar

T = TypeVar("T")

STATUS_OK = "OK"
STATUS_WARN = "WARN"


@dataclass(frozen=True)
class CollectorResult(Generic[T]):
    ts: datetime
    status: str
    warning_count: int
    data: T
    warnings: list[str] = field(default_factory=list)

    @classmethod
    def from_warnings(cls, ts: datetime, data: T, warnings: list[str]) -> "CollectorResult[T]":
        return cls(
            ts=ts,
            status=STATUS_OK if not warnings else STATUS_WARN,
            warning_count=len(warnings),
            warnings=list(warnings),
            data=data,
        )
