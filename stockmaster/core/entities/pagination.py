"""Page-number pagination shared by list queries."""

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    """One page of a larger result set."""

    items: list[T] = Field(default_factory=list)
    page: int = 1
    limit: int = 20
    total: int = 0

    @property
    def has_more(self) -> bool:
        return (self.page - 1) * self.limit + len(self.items) < self.total


def normalize_page(
    page: int | None,
    limit: int | None,
    default_limit: int = 20,
    max_limit: int = 100,
) -> tuple[int, int, int]:
    """Clamp page/limit and return (page, limit, offset)."""
    page = max(page or 1, 1)
    limit = min(max(limit or default_limit, 1), max_limit)
    return page, limit, (page - 1) * limit
