"""Filter state: selected labels per dimension, price bounds, sort and query.

The store is a plain state container. Nothing here talks to the network;
callers decide when a changed state should be re-queried.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from browse.config import DEFAULT_SORT, DIMENSIONS, SORT_OPTIONS
from browse.models import Number, PriceRange

__all__ = ["FilterState", "PRICE_BOUNDS"]

PRICE_BOUNDS = ("min", "max")


def _empty_selections() -> Dict[str, List[str]]:
    return {dimension: [] for dimension in DIMENSIONS}


def _check_dimension(dimension: str) -> None:
    if dimension not in DIMENSIONS:
        raise ValueError(f"Unknown filter dimension: {dimension!r}")


@dataclass
class FilterState:
    """Current filter selection.

    Each dimension keeps its labels in selection order, so "first selected"
    is well defined and rendering is deterministic.
    """

    selections: Dict[str, List[str]] = field(default_factory=_empty_selections)
    price_min: Optional[Number] = None
    price_max: Optional[Number] = None
    sort_by: str = DEFAULT_SORT
    query: str = ""

    def toggle(self, dimension: str, value: str) -> bool:
        """Select value if absent, deselect it if present.

        Returns:
            True if the value is selected afterwards
        """
        _check_dimension(dimension)
        current = self.selections[dimension]
        if value in current:
            current.remove(value)
            return False
        current.append(value)
        return True

    def clear(self, dimension: str) -> None:
        _check_dimension(dimension)
        self.selections[dimension] = []

    def clear_all(self) -> None:
        """Empty every dimension and unset both price bounds."""
        self.selections = _empty_selections()
        self.price_min = None
        self.price_max = None

    def set_price_bound(self, which: str, value: Optional[Number]) -> None:
        if which not in PRICE_BOUNDS:
            raise ValueError(f"Price bound must be 'min' or 'max', got {which!r}")
        if value is not None and value < 0:
            raise ValueError(f"Price bound must be non-negative, got {value}")
        setattr(self, f"price_{which}", value)

    def adopt_price_range(self, price_range: PriceRange) -> None:
        """Use a service-reported range for whichever bounds the user has not set."""
        if self.price_min is None:
            self.price_min = price_range.min
        if self.price_max is None:
            self.price_max = price_range.max

    def set_sort(self, key: str) -> None:
        if key not in SORT_OPTIONS:
            raise ValueError(f"Unknown sort key {key!r}. Available: {list(SORT_OPTIONS)}")
        self.sort_by = key

    def set_query(self, text: Optional[str]) -> None:
        self.query = text or ""

    # ---------- read access ----------

    def selected(self, dimension: str) -> List[str]:
        _check_dimension(dimension)
        return list(self.selections[dimension])

    def is_selected(self, dimension: str, value: str) -> bool:
        _check_dimension(dimension)
        return value in self.selections[dimension]

    def first_value(self, dimension: str) -> Optional[str]:
        _check_dimension(dimension)
        values = self.selections[dimension]
        return values[0] if values else None

    @property
    def selected_count(self) -> int:
        return sum(len(values) for values in self.selections.values())

    @property
    def populated_dimensions(self) -> Tuple[str, ...]:
        return tuple(d for d in DIMENSIONS if self.selections[d])

    @property
    def has_price_bound(self) -> bool:
        return self.price_min is not None or self.price_max is not None

    @property
    def has_filters(self) -> bool:
        return self.selected_count > 0 or self.has_price_bound

    @property
    def search_text(self) -> str:
        return self.query.strip()

    @classmethod
    def single(cls, dimension: str, value: str, sort_by: str = DEFAULT_SORT) -> "FilterState":
        """A state holding exactly one selected value (one-click tag filters)."""
        state = cls(sort_by=sort_by)
        state.toggle(dimension, value)
        return state
