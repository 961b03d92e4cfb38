"""Browsing session: the boundary between user actions and the catalog API.

A session owns the filter state and the result set. Every query action:

- is ignored while another query is outstanding (single loading gate),
- is tagged with a sequence number; a response is applied only if no newer
  query was issued for the same slot in the meantime,
- converts CatalogError into the single user-facing error slot and leaves
  the previous result set untouched.

Page changes are local and never touch the network.
"""

from typing import Callable, Dict, List, Optional, Tuple

from browse.bootstrap import BootstrapError, BootstrapResult, run_bootstrap
from browse.config import DEFAULT_FETCH_LIMIT, PAGE_SIZE, QUICK_TAG_LIMIT
from browse.errors import CatalogError
from browse.fallback import resolve
from browse.filters import FilterState
from browse.logging_config import get_logger, log_browse_event
from browse.models import FilterOptions, Product, ProductCounts
from browse.pagination import ResultSet
from browse.query import QueryPlan, list_all_plan, select_strategy

__all__ = [
    "BrowseSession",
    "RequestTracker",
    "RESULTS_SLOT",
    "BOOTSTRAP_ERROR",
    "RELOAD_ERROR",
    "SEARCH_ERROR",
    "QUICK_FILTER_ERROR",
    "APPLY_FILTERS_ERROR",
]

logger = get_logger("session")

RESULTS_SLOT = "results"

BOOTSTRAP_ERROR = "Failed to load products. Check that the catalog service is running."
RELOAD_ERROR = "Failed to load products."
SEARCH_ERROR = "Search failed."
QUICK_FILTER_ERROR = "Filter search failed."
APPLY_FILTERS_ERROR = "Failed to apply filters."


class RequestTracker:
    """Monotonic sequence numbers per logical slot."""

    def __init__(self) -> None:
        self._latest: Dict[str, int] = {}

    def issue(self, slot: str) -> int:
        token = self._latest.get(slot, 0) + 1
        self._latest[slot] = token
        return token

    def is_current(self, slot: str, token: int) -> bool:
        return self._latest.get(slot) == token


class BrowseSession:
    """Filter state, cached results and error/loading state for one user."""

    def __init__(self, api, page_size: int = PAGE_SIZE):
        self.api = api
        self.filters = FilterState()
        self.results = ResultSet(page_size=page_size)
        self.options = FilterOptions()
        self.counts = ProductCounts()
        self.fetch_limit = DEFAULT_FETCH_LIMIT

        self.error: Optional[str] = None
        self.last_exception: Optional[Exception] = None

        self.tracker = RequestTracker()
        self._in_flight = 0

    # ---------- read access ----------

    @property
    def loading(self) -> bool:
        return self._in_flight > 0

    @property
    def visible_products(self) -> List[Product]:
        return self.results.visible_page()

    def filter_tags(self, dimension: str, limit: int = QUICK_TAG_LIMIT) -> Tuple[List[str], int]:
        """Options of a dimension to show as tags, plus how many are hidden."""
        labels = self.options.for_dimension(dimension)
        return labels[:limit], max(0, len(labels) - limit)

    # ---------- internals ----------

    def _fail(self, message: str, exc: Exception) -> None:
        self.error = message
        self.last_exception = exc
        logger.error(f"{message} ({exc})")

    def _busy(self, action: str) -> bool:
        if self.loading:
            logger.info(f"Ignoring '{action}': a query is already in flight")
            return True
        return False

    def _begin(self, action: str) -> Optional[int]:
        if self._busy(action):
            return None
        self._in_flight += 1
        self.error = None
        self.last_exception = None
        return self.tracker.issue(RESULTS_SLOT)

    def _run(
        self,
        action: str,
        plan: QueryPlan,
        error_message: str,
        on_success: Optional[Callable[[], None]] = None,
    ) -> bool:
        token = self._begin(action)
        if token is None:
            return False

        log_browse_event(
            "query_start",
            {"message": f"{action}: {plan.strategy} {plan.path or '/'}", "action": action,
             "strategy": plan.strategy, "params": plan.params, "seq": token},
            logger_name="session",
        )
        try:
            resolution = resolve(self.api, plan, self.fetch_limit)
        except CatalogError as e:
            if self.tracker.is_current(RESULTS_SLOT, token):
                self._fail(error_message, e)
            return False
        finally:
            self._in_flight -= 1

        if not self.tracker.is_current(RESULTS_SLOT, token):
            log_browse_event(
                "query_discarded",
                {"message": f"Discarding stale response for '{action}'", "action": action,
                 "seq": token},
                logger_name="session",
            )
            return False

        self.results = self.results.replace_products(resolution.products, resolution.reported_total)
        if on_success is not None:
            on_success()

        log_browse_event(
            "query_complete",
            {"message": f"{action}: {len(resolution.products)} products", "action": action,
             "strategy": resolution.plan.strategy if resolution.plan else plan.strategy,
             "count": len(resolution.products), "total": self.results.total_items,
             "fallback": resolution.used_fallback, "seq": token},
            logger_name="session",
        )
        return True

    def _apply_bootstrap(self, result: BootstrapResult, token: int) -> None:
        if result.counts is not None:
            self.counts = result.counts
        self.fetch_limit = result.fetch_limit
        if result.options is not None:
            self.options = result.options
            if result.options.price_range is not None:
                self.filters.adopt_price_range(result.options.price_range)
        if result.products is not None and self.tracker.is_current(RESULTS_SLOT, token):
            self.results = ResultSet.from_products(result.products, self.results.page_size)

    # ---------- actions ----------

    def bootstrap(self) -> bool:
        """Load counts, filter options and the first product batch."""
        token = self._begin("bootstrap")
        if token is None:
            return False
        try:
            result = run_bootstrap(self.api)
        except BootstrapError as e:
            self._apply_bootstrap(e.partial, token)
            if self.tracker.is_current(RESULTS_SLOT, token):
                self._fail(BOOTSTRAP_ERROR, e)
            return False
        finally:
            self._in_flight -= 1

        self._apply_bootstrap(result, token)
        logger.info(
            f"Catalog ready: {len(result.products or [])} products loaded "
            f"(fetch limit {self.fetch_limit}, {self.counts.total} in catalog)"
        )
        return True

    def retry(self) -> bool:
        """Re-run the whole startup sequence after an error."""
        return self.bootstrap()

    def reload(self) -> bool:
        """Fetch the full listing; on success the selection and query are reset."""

        def reset_filters() -> None:
            self.filters.clear_all()
            self.filters.set_query("")

        return self._run("reload", list_all_plan(self.fetch_limit), RELOAD_ERROR, reset_filters)

    def search(self, text: Optional[str] = None) -> bool:
        """Quick search for ``text`` (or the stored query). Blank text reloads."""
        if self._busy("search"):
            return False
        if text is not None:
            self.filters.set_query(text)
        if not self.filters.search_text:
            return self.reload()
        return self._run("search", select_strategy(self.filters, self.fetch_limit), SEARCH_ERROR)

    def apply_filters(self) -> bool:
        """Query with the current selection; with nothing selected this is a reload."""
        if not self.filters.has_filters and not self.filters.search_text:
            return self.reload()
        return self._run(
            "apply_filters", select_strategy(self.filters, self.fetch_limit), APPLY_FILTERS_ERROR
        )

    def quick_filter(self, dimension: str, value: str) -> bool:
        """One-click query for a single label; the stored selection is not changed."""
        state = FilterState.single(dimension, value, sort_by=self.filters.sort_by)
        return self._run(
            "quick_filter", select_strategy(state, self.fetch_limit), QUICK_FILTER_ERROR
        )

    def clear_all_filters(self) -> bool:
        if self._busy("clear_all_filters"):
            return False
        self.filters.clear_all()
        return self.reload()

    def change_page(self, page: int) -> int:
        """Show another page of the cached results. Returns the page actually shown."""
        self.results = self.results.change_page(page)
        return self.results.current_page
