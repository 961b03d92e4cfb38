"""Client-side pagination over the cached result set."""

import math
from dataclasses import dataclass, replace
from typing import Iterable, List, Optional, Tuple

from browse.config import MAX_PAGE_LINKS, PAGE_SIZE
from browse.models import Product

__all__ = ["ResultSet", "page_window"]


def page_window(current_page: int, total_pages: int, width: int = MAX_PAGE_LINKS) -> List[int]:
    """Up to ``width`` consecutive page numbers centered on the current page.

    The window slides to stay inside [1, total_pages].
    """
    if total_pages <= width:
        return list(range(1, total_pages + 1))

    start = max(1, current_page - width // 2)
    end = min(total_pages, start + width - 1)
    start = max(1, end - width + 1)
    return list(range(start, end + 1))


@dataclass(frozen=True)
class ResultSet:
    """The full, unpaged products of the last successful query.

    The visible page is always derived from ``products``; there is no
    second copy to keep in sync. ``reported_total`` is the server-side
    total of a structured search and only affects the item-count display.
    """

    products: Tuple[Product, ...] = ()
    page_size: int = PAGE_SIZE
    current_page: int = 1
    reported_total: Optional[int] = None

    def __post_init__(self) -> None:
        if self.page_size < 1:
            raise ValueError(f"page_size must be positive, got {self.page_size}")
        clamped = min(max(1, self.current_page), self.total_pages)
        if clamped != self.current_page:
            object.__setattr__(self, "current_page", clamped)

    @classmethod
    def from_products(
        cls,
        products: Iterable[Product],
        page_size: int = PAGE_SIZE,
        reported_total: Optional[int] = None,
    ) -> "ResultSet":
        return cls(products=tuple(products), page_size=page_size, reported_total=reported_total)

    def replace_products(
        self, products: Iterable[Product], reported_total: Optional[int] = None
    ) -> "ResultSet":
        """New result set with the same page size, back on page 1."""
        return ResultSet.from_products(products, self.page_size, reported_total)

    @property
    def total_items(self) -> int:
        if self.reported_total is not None:
            return self.reported_total
        return len(self.products)

    @property
    def total_pages(self) -> int:
        return max(1, math.ceil(len(self.products) / self.page_size))

    @property
    def is_empty(self) -> bool:
        return not self.products

    @property
    def has_previous(self) -> bool:
        return self.current_page > 1

    @property
    def has_next(self) -> bool:
        return self.current_page < self.total_pages

    def visible_page(self) -> List[Product]:
        start = (self.current_page - 1) * self.page_size
        return list(self.products[start:start + self.page_size])

    def change_page(self, page: int) -> "ResultSet":
        """Move to ``page``, clamped to [1, total_pages]. No network access."""
        return replace(self, current_page=min(max(1, page), self.total_pages))

    def page_numbers(self, width: int = MAX_PAGE_LINKS) -> List[int]:
        return page_window(self.current_page, self.total_pages, width)
