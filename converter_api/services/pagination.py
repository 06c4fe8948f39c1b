"""Pagination parameters and page envelopes."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Generic, List, TypeVar

T = TypeVar("T")

DEFAULT_PAGE_NUMBER = 1
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


class PaginationParams:
    """Page number and size, clamped into range whenever they are assigned."""

    def __init__(self, page_number: int = DEFAULT_PAGE_NUMBER, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        self.page_number = page_number
        self.page_size = page_size

    @property
    def page_number(self) -> int:
        return self._page_number

    @page_number.setter
    def page_number(self, value: int) -> None:
        self._page_number = max(int(value), 1)

    @property
    def page_size(self) -> int:
        return self._page_size

    @page_size.setter
    def page_size(self, value: int) -> None:
        self._page_size = min(max(int(value), 1), MAX_PAGE_SIZE)

    @property
    def offset(self) -> int:
        return (self._page_number - 1) * self._page_size

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PaginationParams):
            return NotImplemented
        return (self.page_number, self.page_size) == (other.page_number, other.page_size)

    def __repr__(self) -> str:
        return f"PaginationParams(page_number={self.page_number}, page_size={self.page_size})"


@dataclass(frozen=True)
class PaginatedResult(Generic[T]):
    """One page of items plus the total count across all pages."""

    items: List[T] = field(default_factory=list)
    page_number: int = DEFAULT_PAGE_NUMBER
    page_size: int = DEFAULT_PAGE_SIZE
    total_count: int = 0

    @property
    def total_pages(self) -> int:
        if self.total_count <= 0:
            return 0
        return math.ceil(self.total_count / self.page_size)


def paginate(items: Sequence[T], params: PaginationParams) -> PaginatedResult[T]:
    """Slice ``items`` into the page described by ``params``."""

    start = params.offset
    page = list(items[start : start + params.page_size])
    return PaginatedResult(
        items=page,
        page_number=params.page_number,
        page_size=params.page_size,
        total_count=len(items),
    )
