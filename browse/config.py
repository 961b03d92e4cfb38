"""Configuration and constants for the catalog browser."""

import os
from typing import Dict

__all__ = [
    "API_BASE_URL",
    "PRODUCTS_PATH",
    "HEADERS",
    "REQUEST_TIMEOUT",
    "PAGE_SIZE",
    "DEFAULT_FETCH_LIMIT",
    "MAX_FETCH_LIMIT",
    "BRAND_CATEGORY_LIMIT",
    "MAX_SEARCH_PAGE_SIZE",
    "MAX_QUICK_SEARCH_LIMIT",
    "LOW_STOCK_THRESHOLD",
    "MAX_PAGE_LINKS",
    "QUICK_TAG_LIMIT",
    "DEFAULT_SORT",
    "SORT_OPTIONS",
    "DIMENSIONS",
    "DIMENSION_PARAMS",
    "DIMENSION_NAMES",
    "get_search_param",
]

# Service location (env overrides for local/dev servers)
API_BASE_URL = os.getenv("CATALOG_API_BASE", "http://localhost:8000/api").rstrip("/")
PRODUCTS_PATH = "/products"

HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}

# Request timeout (seconds)
REQUEST_TIMEOUT = float(os.getenv("CATALOG_REQUEST_TIMEOUT", "10"))

# Items per visible page
PAGE_SIZE = int(os.getenv("CATALOG_PAGE_SIZE", "12"))

# Fetch sizing
DEFAULT_FETCH_LIMIT = 150  # Floor, also used when the service reports no count
MAX_FETCH_LIMIT = 1000
BRAND_CATEGORY_LIMIT = 200
MAX_SEARCH_PAGE_SIZE = 100
MAX_QUICK_SEARCH_LIMIT = 50

LOW_STOCK_THRESHOLD = 10

# Pagination index width
MAX_PAGE_LINKS = 5

# Option tags shown before "+N more"
QUICK_TAG_LIMIT = 10

DEFAULT_SORT = "popularity"

SORT_OPTIONS: Dict[str, str] = {
    "popularity": "Most popular",
    "price_low": "Price: low to high",
    "price_high": "Price: high to low",
    "recent": "Newest",
    "discount": "Biggest discount",
}

# =============================================================================
# Filter Dimensions
# =============================================================================
# Order matters: it is the render order of selected filters.

DIMENSIONS = ("brands", "categories", "sub_categories", "skin_types")

# Dimension -> structured-search query parameter (single value per dimension)
DIMENSION_PARAMS: Dict[str, str] = {
    "brands": "brand",
    "categories": "category",
    "sub_categories": "sub_category",
    "skin_types": "skin_type",
}

DIMENSION_NAMES: Dict[str, str] = {
    "brands": "Brand",
    "categories": "Category",
    "sub_categories": "Sub-category",
    "skin_types": "Skin type",
}


def get_search_param(dimension: str) -> str:
    """Get the structured-search parameter name for a dimension."""
    try:
        return DIMENSION_PARAMS[dimension]
    except KeyError:
        raise ValueError(f"Unknown filter dimension: {dimension!r}") from None
