from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Generic, Optional, Sequence, TypeVar

from ..core.constants import DEFAULT_PAGE, DEFAULT_PAGE_LIMIT

T = TypeVar("T")


def _positive_int(value: Any, default: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


@dataclass(frozen=True)
class PageRequest:
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_PAGE_LIMIT

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @classmethod
    def from_query(cls, page: Optional[Any], limit: Optional[Any]) -> "PageRequest":
        return cls(page=_positive_int(page, DEFAULT_PAGE), limit=_positive_int(limit, DEFAULT_PAGE_LIMIT))


@dataclass(frozen=True)
class Page(Generic[T]):
    items: Sequence[T]
    total: int
    request: PageRequest

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.request.limit)

    def pagination(self) -> dict:
        return {
            "total": self.total,
            "pages": self.pages,
            "currentPage": self.request.page,
            "limit": self.request.limit,
        }
