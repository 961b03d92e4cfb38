"""Query execution with the structured-search fallback.

The by-brand and by-category endpoints are fast but sometimes come back empty
(or 404) for labels the structured search still matches. A direct query that
yields nothing is retried once as a structured search before the result is
accepted as empty.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from browse.errors import NotFoundError
from browse.logging_config import get_logger, log_browse_event
from browse.models import Product
from browse.normalize import normalize_product_payload
from browse.query import QueryPlan, fallback_plan

__all__ = ["Resolution", "resolve"]

logger = get_logger("fallback")


@dataclass
class Resolution:
    """Products of a resolved query."""

    products: List[Product] = field(default_factory=list)
    reported_total: Optional[int] = None
    plan: Optional[QueryPlan] = None
    used_fallback: bool = False


def _execute(api, plan: QueryPlan) -> Resolution:
    products, total = normalize_product_payload(api.fetch(plan))
    return Resolution(products=products, reported_total=total, plan=plan)


def resolve(api, plan: QueryPlan, fetch_limit: int) -> Resolution:
    """Run a plan, retrying direct single-dimension plans once on an empty result.

    A 404 from the direct endpoint counts as an empty result without retry.
    Transport and server errors, including those of the retry, propagate.
    """
    if not plan.has_fallback:
        return _execute(api, plan)

    try:
        resolution = _execute(api, plan)
    except NotFoundError:
        logger.warning(f"No results for {plan.dimension}={plan.value!r} (404)")
        return Resolution(plan=plan)

    if resolution.products:
        return resolution

    retry = fallback_plan(plan, fetch_limit)
    log_browse_event(
        "fallback",
        {"message": f"Empty {plan.strategy} result for {plan.value!r}, retrying via structured search",
         "strategy": plan.strategy, "dimension": plan.dimension, "value": plan.value},
        logger_name="fallback",
    )

    try:
        retried = _execute(api, retry)
    except NotFoundError:
        logger.warning(f"Fallback search found nothing for {plan.dimension}={plan.value!r} (404)")
        return Resolution(plan=retry, used_fallback=True)

    retried.used_fallback = True
    return retried
