"""Data models for catalog products and filter metadata."""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from browse.config import DIMENSIONS, LOW_STOCK_THRESHOLD

__all__ = [
    "Number",
    "Product",
    "PriceRange",
    "FilterOptions",
    "ProductCounts",
    "discount_rate",
]

Number = Union[int, float]


def discount_rate(original: Optional[Number], current: Optional[Number]) -> int:
    """Percentage discount, rounded half up; 0 when there is no discount."""
    if original is None or current is None or original <= current:
        return 0
    return int(math.floor((original - current) / original * 100 + 0.5))


@dataclass
class Product:
    """A catalog product in canonical form.

    Optional fields stay None when the service did not send them; a missing
    price or stock is never coerced to 0.
    """

    # Required field
    product_id: str

    name: Optional[str] = None
    brand: Optional[str] = None

    # Up to three levels: top / mid / sub
    category_path: List[str] = field(default_factory=list)

    price: Optional[Number] = None
    original_price: Optional[Number] = None

    # None means "unknown"; stock_label keeps an unparseable raw value for display
    stock_quantity: Optional[int] = None
    stock_label: Optional[str] = None

    image: Optional[str] = None
    spec: Optional[str] = None

    @property
    def has_discount(self) -> bool:
        return (
            self.price is not None
            and self.original_price is not None
            and self.original_price > self.price
        )

    @property
    def discount_rate(self) -> int:
        return discount_rate(self.original_price, self.price)

    @property
    def stock_known(self) -> bool:
        return self.stock_quantity is not None

    @property
    def low_stock(self) -> bool:
        return self.stock_quantity is not None and self.stock_quantity <= LOW_STOCK_THRESHOLD

    @property
    def category_text(self) -> str:
        return " > ".join(self.category_path) if self.category_path else "No category"

    @property
    def stock_text(self) -> str:
        if self.stock_quantity is not None:
            return str(self.stock_quantity)
        return self.stock_label or "unknown"


@dataclass(frozen=True)
class PriceRange:
    """Global min/max price reported with the filter options."""

    min: Number
    max: Number


@dataclass
class FilterOptions:
    """Available labels per filter dimension, in server order."""

    brands: List[str] = field(default_factory=list)
    categories: List[str] = field(default_factory=list)
    sub_categories: List[str] = field(default_factory=list)
    skin_types: List[str] = field(default_factory=list)
    price_ranges: List[Any] = field(default_factory=list)

    # Set when the payload carried a single global price_range object
    price_range: Optional[PriceRange] = None

    def for_dimension(self, dimension: str) -> List[str]:
        if dimension not in DIMENSIONS:
            raise ValueError(f"Unknown filter dimension: {dimension!r}")
        return getattr(self, dimension)

    def to_dict(self) -> Dict[str, List[Any]]:
        return {
            "brands": list(self.brands),
            "categories": list(self.categories),
            "sub_categories": list(self.sub_categories),
            "skin_types": list(self.skin_types),
            "price_ranges": list(self.price_ranges),
        }


@dataclass(frozen=True)
class ProductCounts:
    """Counts reported by the service at bootstrap. Never re-derived locally."""

    total: int = 0
    active: int = 0
    inactive: int = 0
