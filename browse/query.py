"""Query building: choose the endpoint and parameters for a filter state.

``select_strategy`` is the only place that decides which endpoint serves a
given state. Plans are plain values, so every branch can be tested without
a network.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from urllib.parse import quote

from browse.config import (
    BRAND_CATEGORY_LIMIT,
    DEFAULT_FETCH_LIMIT,
    DEFAULT_SORT,
    MAX_FETCH_LIMIT,
    MAX_QUICK_SEARCH_LIMIT,
    MAX_SEARCH_PAGE_SIZE,
    get_search_param,
)
from browse.filters import FilterState

__all__ = [
    "LIST_ALL",
    "QUICK_SEARCH",
    "BY_BRAND",
    "BY_CATEGORY",
    "STRUCTURED_SEARCH",
    "QueryPlan",
    "bounded",
    "calculate_fetch_limit",
    "list_all_plan",
    "structured_search_plan",
    "select_strategy",
    "fallback_plan",
]

# Strategies
LIST_ALL = "list_all"
QUICK_SEARCH = "quick_search"
BY_BRAND = "by_brand"
BY_CATEGORY = "by_category"
STRUCTURED_SEARCH = "structured_search"

# Single-dimension states served by a dedicated endpoint
_DIRECT_ENDPOINTS = {
    "brands": (BY_BRAND, "/brand"),
    "categories": (BY_CATEGORY, "/category"),
}


@dataclass(frozen=True)
class QueryPlan:
    """One request against the products API.

    ``path`` is relative to the products base path. ``dimension`` and
    ``value`` are set for the direct single-dimension strategies so the
    fallback can re-express the same query as a structured search.
    """

    strategy: str
    path: str
    params: Dict[str, Any] = field(default_factory=dict)
    sort_by: Optional[str] = None
    dimension: Optional[str] = None
    value: Optional[str] = None

    @property
    def has_fallback(self) -> bool:
        return self.strategy in (BY_BRAND, BY_CATEGORY)


def bounded(fetch_limit: int, cap: int) -> int:
    """Clamp a request size to [1, cap]."""
    return max(1, min(fetch_limit, cap))


def calculate_fetch_limit(count: Optional[int]) -> int:
    """Derive the fetch-size ceiling from a reported item count.

    Missing or non-positive counts use the default; the result always lies
    in [DEFAULT_FETCH_LIMIT, MAX_FETCH_LIMIT].
    """
    base = count if isinstance(count, int) and count > 0 else DEFAULT_FETCH_LIMIT
    return min(max(base, DEFAULT_FETCH_LIMIT), MAX_FETCH_LIMIT)


def list_all_plan(fetch_limit: int) -> QueryPlan:
    return QueryPlan(
        strategy=LIST_ALL,
        path="",
        params={"limit": max(1, fetch_limit or DEFAULT_FETCH_LIMIT), "offset": 0},
    )


def structured_search_plan(state: FilterState, fetch_limit: int) -> QueryPlan:
    """Structured search with the first selected value of every dimension.

    The backend accepts one value per parameter, so later selections in a
    dimension do not reach the query.
    """
    params: Dict[str, Any] = {
        "page": 1,
        "page_size": bounded(fetch_limit, MAX_SEARCH_PAGE_SIZE),
        "sort_by": state.sort_by,
    }
    for dimension in state.populated_dimensions:
        params[get_search_param(dimension)] = state.first_value(dimension)
    if state.price_min is not None:
        params["min_price"] = state.price_min
    if state.price_max is not None:
        params["max_price"] = state.price_max
    return QueryPlan(
        strategy=STRUCTURED_SEARCH,
        path="/search",
        params=params,
        sort_by=state.sort_by,
    )


def select_strategy(state: FilterState, fetch_limit: int) -> QueryPlan:
    """Pick the request for a filter state.

    1. Non-empty free text: quick search, structured filters ignored.
    2. Only brands or only categories selected, no price bound: the
       dedicated by-brand / by-category endpoint.
    3. Any other selection or price bound: structured search.
    4. Nothing selected: full listing.
    """
    text = state.search_text
    if text:
        return QueryPlan(
            strategy=QUICK_SEARCH,
            path="/search/quick",
            params={"q": text, "limit": bounded(fetch_limit, MAX_QUICK_SEARCH_LIMIT)},
        )

    populated = state.populated_dimensions
    if len(populated) == 1 and populated[0] in _DIRECT_ENDPOINTS and not state.has_price_bound:
        dimension = populated[0]
        strategy, prefix = _DIRECT_ENDPOINTS[dimension]
        value = state.first_value(dimension)
        return QueryPlan(
            strategy=strategy,
            path=f"{prefix}/{quote(str(value), safe='')}",
            params={"limit": bounded(fetch_limit, BRAND_CATEGORY_LIMIT)},
            sort_by=state.sort_by,
            dimension=dimension,
            value=value,
        )

    if state.has_filters:
        return structured_search_plan(state, fetch_limit)

    return list_all_plan(fetch_limit)


def fallback_plan(plan: QueryPlan, fetch_limit: int) -> QueryPlan:
    """Re-express a direct single-dimension plan as a structured search."""
    if not plan.has_fallback or plan.dimension is None:
        raise ValueError(f"No fallback for strategy {plan.strategy!r}")
    state = FilterState.single(plan.dimension, plan.value or "", sort_by=plan.sort_by or DEFAULT_SORT)
    return structured_search_plan(state, fetch_limit)
