"""CSV export of browsing results."""

import csv
import os
from typing import Dict, Iterable, List

from browse.models import Product

__all__ = ["CSV_FIELDS", "product_to_row", "save_products_to_csv"]

CSV_FIELDS: List[str] = [
    "product_id",
    "brand",
    "name",
    "category_path",
    "price",
    "original_price",
    "discount_rate",
    "stock",
    "low_stock",
    "spec",
    "image",
]


def product_to_row(product: Product) -> Dict[str, object]:
    """Flatten a Product into a CSV row. Unknown values are written as empty cells."""
    return {
        "product_id": product.product_id,
        "brand": product.brand or "",
        "name": product.name or "",
        "category_path": " > ".join(product.category_path),
        "price": "" if product.price is None else product.price,
        "original_price": "" if product.original_price is None else product.original_price,
        "discount_rate": product.discount_rate if product.has_discount else "",
        "stock": product.stock_quantity if product.stock_known else (product.stock_label or ""),
        "low_stock": "yes" if product.low_stock else "",
        "spec": product.spec or "",
        "image": product.image or "",
    }


def save_products_to_csv(products: Iterable[Product], path: str) -> int:
    """Write products to ``path``.

    Returns:
        Number of rows written
    """
    rows = [product_to_row(p) for p in products]

    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for row in rows:
            writer.writerow(row)

    return len(rows)
