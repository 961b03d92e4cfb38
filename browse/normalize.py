"""Normalization of catalog API payloads.

The service has shipped several response shapes over time: product lists come
back bare or wrapped in ``{"products": [...], "total": N}``, and both products
and filter options exist under current and legacy field names. Every alias is
declared once in the tables below; the functions here only walk those tables.
"""

import math
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from browse.errors import MalformedResponseError
from browse.logging_config import get_logger
from browse.models import FilterOptions, Number, PriceRange, Product

__all__ = [
    "PRODUCT_FIELD_ALIASES",
    "FILTER_OPTION_ALIASES",
    "normalize_filter_options",
    "normalize_product",
    "normalize_products",
    "normalize_product_payload",
    "parse_price_range",
]

logger = get_logger("normalize")

# Canonical field -> source keys, first present value wins
PRODUCT_FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    "product_id": ("product_id", "goodsNo", "id"),
    "name": ("name",),
    "brand": ("brand",),
    "top_category": ("first_category", "category"),
    "mid_category": ("mid_category",),
    "sub_category": ("sub_category",),
    "price": ("price_cur", "price"),
    "original_price": ("price_org", "original_price"),
    "stock": ("stock",),
    "image": ("image",),
    "spec": ("spec",),
}

FILTER_OPTION_ALIASES: Dict[str, Tuple[str, ...]] = {
    "brands": ("brands",),
    "categories": ("categories", "first_categories"),
    "sub_categories": ("sub_categories", "mid_categories"),
    "skin_types": ("skin_types", "spec"),
    "price_ranges": ("price_ranges",),
}

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def _first_present(raw: Mapping[str, Any], keys: Iterable[str]) -> Any:
    for key in keys:
        value = raw.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def _field(raw: Mapping[str, Any], name: str) -> Any:
    return _first_present(raw, PRODUCT_FIELD_ALIASES[name])


def _to_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _to_price(value: Any) -> Optional[Number]:
    """Parse a non-negative price; anything else is treated as missing."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number: Number = value
    elif isinstance(value, str):
        try:
            number = float(value.replace(",", "").strip())
        except ValueError:
            return None
        if number.is_integer():
            number = int(number)
    else:
        return None
    if isinstance(number, float) and not math.isfinite(number):
        return None
    if number < 0:
        return None
    return number


def _parse_stock(value: Any) -> Tuple[Optional[int], Optional[str]]:
    """Return (quantity, raw label). Quantity None means unknown stock."""
    # Newer payloads send {"current": n, "threshold": n, "unit_weight": ...}
    if isinstance(value, Mapping):
        value = value.get("current")

    if value is None or isinstance(value, bool):
        return None, None
    if isinstance(value, int):
        return value, None
    if isinstance(value, float):
        if math.isfinite(value):
            return int(value), None
        return None, None

    text = str(value)
    match = _LEADING_INT.match(text)
    if match:
        return int(match.group(1)), None
    return None, _to_text(text)


def _category_path(raw: Mapping[str, Any]) -> List[str]:
    levels = (
        _field(raw, "top_category"),
        _field(raw, "mid_category"),
        _field(raw, "sub_category"),
    )
    return [text for text in (_to_text(level) for level in levels) if text]


def normalize_product(raw: Mapping[str, Any]) -> Optional[Product]:
    """Convert one raw product object into a Product.

    Returns None when no identifier field is present.
    """
    product_id = _to_text(_field(raw, "product_id"))
    if product_id is None:
        return None

    quantity, label = _parse_stock(_field(raw, "stock"))

    return Product(
        product_id=product_id,
        name=_to_text(_field(raw, "name")),
        brand=_to_text(_field(raw, "brand")),
        category_path=_category_path(raw),
        price=_to_price(_field(raw, "price")),
        original_price=_to_price(_field(raw, "original_price")),
        stock_quantity=quantity,
        stock_label=label,
        image=_to_text(_field(raw, "image")),
        spec=_to_text(_field(raw, "spec")),
    )


def normalize_products(items: Iterable[Any]) -> List[Product]:
    """Normalize a sequence of raw products, skipping entries that cannot be identified."""
    products: List[Product] = []
    for index, raw in enumerate(items):
        if not isinstance(raw, Mapping):
            logger.warning(f"Skipping non-object product entry at index {index}: {type(raw).__name__}")
            continue
        product = normalize_product(raw)
        if product is None:
            logger.warning(f"Skipping product without identifier at index {index}")
            continue
        products.append(product)
    return products


def normalize_product_payload(payload: Any) -> Tuple[List[Product], Optional[int]]:
    """Normalize a product-list response.

    Accepts a bare list, ``None`` (empty body) or a mapping with a ``products``
    list and an optional ``total``.

    Returns:
        Tuple of (products, server-reported total or None)

    Raises:
        MalformedResponseError: If the payload has none of the accepted shapes
    """
    if payload is None:
        return [], None

    if isinstance(payload, list):
        return normalize_products(payload), None

    if isinstance(payload, Mapping):
        items = payload.get("products")
        if items is None and "products" not in payload:
            raise MalformedResponseError(
                f"Product response has no 'products' field (keys: {sorted(payload.keys())})"
            )
        if items is None:
            items = []
        if not isinstance(items, list):
            raise MalformedResponseError(
                f"'products' field is {type(items).__name__}, expected a list"
            )
        total = payload.get("total")
        if isinstance(total, bool) or not isinstance(total, int) or total < 0:
            total = None
        return normalize_products(items), total

    raise MalformedResponseError(f"Unexpected product response type: {type(payload).__name__}")


def parse_price_range(value: Any) -> Optional[PriceRange]:
    """Parse a ``{"min": x, "max": y}`` object; both bounds are required."""
    if not isinstance(value, Mapping):
        return None
    low = _to_price(value.get("min"))
    high = _to_price(value.get("max"))
    if low is None or high is None:
        return None
    return PriceRange(min=low, max=high)


def _labels(values: Any) -> List[str]:
    if not isinstance(values, list):
        return []
    return [str(v) for v in values if v is not None]


def normalize_filter_options(filters: Optional[Mapping[str, Any]]) -> FilterOptions:
    """Normalize a filter-options mapping; every key is present in the result."""
    filters = filters if isinstance(filters, Mapping) else {}

    def pick(name: str) -> Any:
        return _first_present(filters, FILTER_OPTION_ALIASES[name])

    price_range = parse_price_range(filters.get("price_range"))

    price_ranges = pick("price_ranges")
    if not isinstance(price_ranges, list):
        legacy_range = filters.get("price_range")
        price_ranges = [legacy_range] if legacy_range is not None else []

    return FilterOptions(
        brands=_labels(pick("brands")),
        categories=_labels(pick("categories")),
        sub_categories=_labels(pick("sub_categories")),
        skin_types=_labels(pick("skin_types")),
        price_ranges=list(price_ranges),
        price_range=price_range,
    )
