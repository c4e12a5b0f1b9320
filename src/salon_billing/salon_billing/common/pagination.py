from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Generic, Sequence, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Page(Generic[T]):
    items: Sequence[T]
    page: int
    limit: int
    total: int

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    def pagination(self) -> dict:
        return {
            "currentPage": self.page,
            "totalPages": math.ceil(self.total / self.limit) if self.limit else 0,
            "total": self.total,
            "hasNext": self.skip + len(self.items) < self.total,
            "hasPrev": self.page > 1,
        }

    def to_dict(self, key: str, render: Callable[[T], Any]) -> dict:
        return {key: [render(i) for i in self.items], "pagination": self.pagination()}
