"""Startup sequence: counts, then filter options, then the first product batch.

Steps run strictly in order because the fetch size of the product batch is
derived from the counts. A failing step stops the sequence; whatever the
earlier steps produced is kept on the raised error.
"""

from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional

from browse.config import DEFAULT_FETCH_LIMIT
from browse.errors import CatalogError
from browse.logging_config import log_browse_event
from browse.models import FilterOptions, Product, ProductCounts
from browse.normalize import normalize_filter_options, normalize_product_payload
from browse.query import calculate_fetch_limit

__all__ = [
    "BootstrapResult",
    "BootstrapError",
    "run_bootstrap",
    "parse_counts",
]

STEPS = ("count", "filter_options", "products")


@dataclass
class BootstrapResult:
    """State gathered so far. ``completed`` lists the finished steps."""

    counts: Optional[ProductCounts] = None
    fetch_limit: int = DEFAULT_FETCH_LIMIT
    options: Optional[FilterOptions] = None
    products: Optional[List[Product]] = None
    completed: List[str] = field(default_factory=list)


class BootstrapError(CatalogError):
    """A bootstrap step failed. ``partial`` holds the results of earlier steps."""

    def __init__(self, step: str, cause: Exception, partial: BootstrapResult):
        super().__init__(f"Bootstrap failed at step '{step}': {cause}")
        self.step = step
        self.cause = cause
        self.partial = partial


def _count(value: Any) -> int:
    return value if isinstance(value, int) and not isinstance(value, bool) and value > 0 else 0


def parse_counts(payload: Any) -> Optional[ProductCounts]:
    """Parse a count response; None unless the service reports success."""
    if not isinstance(payload, Mapping) or not payload.get("success"):
        return None
    return ProductCounts(
        total=_count(payload.get("total_count")),
        active=_count(payload.get("active_count")),
        inactive=_count(payload.get("inactive_count")),
    )


def _step(name: str, result: BootstrapResult) -> None:
    result.completed.append(name)
    log_browse_event(
        "bootstrap_step",
        {"message": f"Bootstrap step '{name}' done", "step": name,
         "fetch_limit": result.fetch_limit},
        logger_name="bootstrap",
    )


def run_bootstrap(api) -> BootstrapResult:
    """Run the startup sequence against ``api``.

    Raises:
        BootstrapError: If any step fails; carries the partial result
    """
    result = BootstrapResult()
    step = STEPS[0]
    try:
        counts = parse_counts(api.get_product_count())
        if counts is not None:
            result.counts = counts
            result.fetch_limit = calculate_fetch_limit(counts.active or counts.total)
        _step(step, result)

        step = STEPS[1]
        payload = api.get_filter_options()
        if isinstance(payload, Mapping) and payload.get("success"):
            result.options = normalize_filter_options(payload.get("filters") or {})
        _step(step, result)

        step = STEPS[2]
        products, _ = normalize_product_payload(api.get_all_products(result.fetch_limit, 0))
        result.products = products
        _step(step, result)

    except CatalogError as e:
        log_browse_event(
            "bootstrap_failed",
            {"message": f"Bootstrap failed at '{step}': {e}", "step": step,
             "completed": list(result.completed)},
            logger_name="bootstrap",
        )
        raise BootstrapError(step, e, result) from e

    return result
