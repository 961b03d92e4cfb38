"""Catalog browsing client: filter composition, fallback queries and paging."""

__version__ = "0.1.0"

# Re-export main components for convenient imports
from browse.api import CatalogAPI
from browse.bootstrap import BootstrapError, run_bootstrap
from browse.errors import (
    APIError,
    CatalogError,
    MalformedResponseError,
    NotFoundError,
    ServiceUnavailableError,
)
from browse.filters import FilterState
from browse.models import FilterOptions, PriceRange, Product, ProductCounts
from browse.normalize import normalize_filter_options, normalize_product_payload
from browse.pagination import ResultSet
from browse.query import QueryPlan, calculate_fetch_limit, select_strategy
from browse.session import BrowseSession

__all__ = [
    # Version
    "__version__",
    # Client
    "CatalogAPI",
    # Models
    "Product",
    "PriceRange",
    "FilterOptions",
    "ProductCounts",
    "FilterState",
    "ResultSet",
    "QueryPlan",
    # Core functions
    "normalize_filter_options",
    "normalize_product_payload",
    "select_strategy",
    "calculate_fetch_limit",
    "run_bootstrap",
    "BrowseSession",
    # Errors
    "CatalogError",
    "ServiceUnavailableError",
    "APIError",
    "NotFoundError",
    "MalformedResponseError",
    "BootstrapError",
]
