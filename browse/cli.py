"""Command-line interface for browsing the catalog."""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

# Load .env before config is imported (config reads the environment at import time)
load_dotenv(dotenv_path=Path(__file__).parent.parent / ".env")

from browse.api import CatalogAPI  # noqa: E402
from browse.config import (  # noqa: E402
    API_BASE_URL,
    DIMENSION_NAMES,
    DIMENSIONS,
    PAGE_SIZE,
    SORT_OPTIONS,
)
from browse.csv_utils import save_products_to_csv  # noqa: E402
from browse.logging_config import setup_logging  # noqa: E402
from browse.models import Product  # noqa: E402
from browse.session import BrowseSession  # noqa: E402

__all__ = ["main", "parse_args", "format_product", "print_page", "show_stats", "list_filters"]


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return number


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Browse the product catalog with search, filters and paging",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # First page of the full catalog
  python -m browse.cli

  # Quick search (structured filters are ignored)
  python -m browse.cli --query toner

  # Brand filter, third page, cheapest first
  python -m browse.cli --brand Torriden --sort price_low --page 3

  # One-click tag filter on a sub-category
  python -m browse.cli --quick-filter sub_categories "Skin/Toner"

  # Show available brands / export the result set
  python -m browse.cli --list-filters brands
  python -m browse.cli --category Skincare --export-csv data/skincare.csv
        """,
    )

    parser.add_argument(
        "--base-url",
        default=API_BASE_URL,
        help=f"Catalog API base URL (default: {API_BASE_URL})",
    )

    # Search and filters
    parser.add_argument("--query", help="Free-text quick search (name, brand)")
    parser.add_argument("--brand", action="append", default=[], help="Brand filter (repeatable)")
    parser.add_argument("--category", action="append", default=[], help="Category filter (repeatable)")
    parser.add_argument(
        "--sub-category", action="append", default=[], help="Sub-category filter (repeatable)"
    )
    parser.add_argument("--skin-type", action="append", default=[], help="Skin type filter (repeatable)")
    parser.add_argument("--min-price", type=float, help="Lower price bound")
    parser.add_argument("--max-price", type=float, help="Upper price bound")
    parser.add_argument("--sort", choices=list(SORT_OPTIONS.keys()), help="Sort order")
    parser.add_argument(
        "--quick-filter",
        nargs=2,
        metavar=("DIMENSION", "VALUE"),
        help=f"Single-value tag filter. Dimensions: {list(DIMENSIONS)}",
    )

    # Paging
    parser.add_argument("--page", type=int, default=1, help="Page to show (default: 1)")
    parser.add_argument(
        "--page-size",
        type=_positive_int,
        default=PAGE_SIZE,
        help=f"Items per page (default: {PAGE_SIZE})",
    )

    # Info commands
    parser.add_argument("--stats", action="store_true", help="Show catalog counts and exit")
    parser.add_argument(
        "--list-filters",
        nargs="?",
        const="",
        metavar="DIMENSION",
        help="List filter options (all dimensions, or one) and exit",
    )

    # Output
    parser.add_argument("--export-csv", metavar="PATH", help="Write the whole result set to CSV")
    parser.add_argument("--verbose", action="store_true", help="Show request-level logging")
    parser.add_argument("--no-log-file", action="store_true", help="Don't write the JSONL log")

    return parser.parse_args(argv)


def format_product(product: Product) -> str:
    """One-line summary of a product."""
    if product.price is None:
        price = "price n/a"
    else:
        price = f"{product.price:,}"
        if product.has_discount:
            price += f" (was {product.original_price:,}, -{product.discount_rate}%)"

    stock = f"stock {product.stock_text}"
    if product.low_stock:
        stock += " LOW"

    parts = [f"[{product.product_id}]", product.brand or "-", product.name or "(unnamed)", "|",
             product.category_text, "|", price, "|", stock]
    if product.spec:
        parts += ["|", product.spec]
    return " ".join(parts)


def print_page(session: BrowseSession) -> None:
    results = session.results
    print(f"\nResults: {results.total_items} items", end="")
    if results.total_items > 0:
        print(f"  |  page {results.current_page} / {results.total_pages}")
    else:
        print()

    products = session.visible_products
    if not products:
        print("  No results.")
        return

    for product in products:
        print(f"  {format_product(product)}")

    if results.total_pages > 1:
        numbers = " ".join(
            f"[{n}]" if n == results.current_page else str(n) for n in results.page_numbers()
        )
        prev_mark = "<" if results.has_previous else " "
        next_mark = ">" if results.has_next else " "
        print(f"\n  {prev_mark} {numbers} {next_mark}")


def show_stats(session: BrowseSession) -> None:
    counts = session.counts
    print(f"\n{'='*50}")
    print(f"Catalog: {session.api.base_url}")
    print(f"{'='*50}")
    print(f"Total products:    {counts.total}")
    print(f"Active products:   {counts.active}")
    print(f"Inactive products: {counts.inactive}")
    print(f"Fetch limit:       {session.fetch_limit}")
    print()


def list_filters(session: BrowseSession, dimension: Optional[str] = None) -> None:
    dimensions = [dimension] if dimension else list(DIMENSIONS)
    for dim in dimensions:
        labels = session.options.for_dimension(dim)
        print(f"\n{DIMENSION_NAMES[dim]} ({len(labels)}):")
        for label in labels:
            print(f"  {label}")
    if not dimension and session.options.price_range is not None:
        price_range = session.options.price_range
        print(f"\nPrice range: {price_range.min:,} - {price_range.max:,}")


def _has_filter_args(args: argparse.Namespace) -> bool:
    return bool(
        args.brand or args.category or args.sub_category or args.skin_type
        or args.min_price is not None or args.max_price is not None or args.sort
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for CLI."""
    args = parse_args(argv)

    setup_logging(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        log_to_file=not args.no_log_file,
    )

    if args.list_filters and args.list_filters not in DIMENSIONS:
        print(f"Unknown dimension '{args.list_filters}'. Available: {list(DIMENSIONS)}")
        return 2

    api = CatalogAPI(base_url=args.base_url)
    try:
        return _browse(BrowseSession(api, page_size=args.page_size), args)
    finally:
        api.close()


def _browse(session: BrowseSession, args: argparse.Namespace) -> int:
    if not session.bootstrap():
        print(f"Error: {session.error}")
        return 1

    if args.stats:
        show_stats(session)
        return 0

    if args.list_filters is not None:
        list_filters(session, args.list_filters or None)
        return 0

    filters = session.filters
    if args.sort:
        filters.set_sort(args.sort)
    for dimension, values in (
        ("brands", args.brand),
        ("categories", args.category),
        ("sub_categories", args.sub_category),
        ("skin_types", args.skin_type),
    ):
        for value in values:
            if not filters.is_selected(dimension, value):
                filters.toggle(dimension, value)
    if args.min_price is not None:
        filters.set_price_bound("min", args.min_price)
    if args.max_price is not None:
        filters.set_price_bound("max", args.max_price)

    ok = True
    if args.quick_filter:
        dimension, value = args.quick_filter
        if dimension not in DIMENSIONS:
            print(f"Unknown dimension '{dimension}'. Available: {list(DIMENSIONS)}")
            return 2
        ok = session.quick_filter(dimension, value)
    elif args.query:
        ok = session.search(args.query)
    elif _has_filter_args(args):
        ok = session.apply_filters()

    if not ok:
        print(f"Error: {session.error}")
        return 1

    session.change_page(args.page)

    if args.export_csv:
        count = save_products_to_csv(session.results.products, args.export_csv)
        print(f"Exported {count} products to {args.export_csv}")

    print_page(session)
    return 0


if __name__ == "__main__":
    sys.exit(main())
