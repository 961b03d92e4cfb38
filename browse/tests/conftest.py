"""Shared fixtures: a scripted in-memory catalog API and raw payload builders."""

from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest


class FakeCatalogAPI:
    """Stand-in for CatalogAPI that serves queued responses per path.

    Each path holds a list of responses; they are consumed in order and the
    last one is repeated. A queued Exception instance is raised instead of
    returned. Every call is recorded as (path, params).
    """

    base_url = "http://catalog.test/api"

    def __init__(self) -> None:
        self.responses: Dict[str, List[Any]] = {}
        self.calls: List[Tuple[str, Dict[str, Any]]] = []
        self.on_request: Optional[Callable[[str], None]] = None
        self.closed = False

    def queue(self, path: str, *responses: Any) -> "FakeCatalogAPI":
        self.responses.setdefault(path, []).extend(responses)
        return self

    def _respond(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        self.calls.append((path, dict(params or {})))
        if self.on_request is not None:
            self.on_request(path)
        queued = self.responses.get(path)
        if not queued:
            raise AssertionError(f"Unexpected request to {path!r}")
        response = queued.pop(0) if len(queued) > 1 else queued[0]
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def paths(self) -> List[str]:
        return [path for path, _ in self.calls]

    def fetch(self, plan):
        return self._respond(plan.path, plan.params)

    def get_product_count(self):
        return self._respond("/count")

    def get_filter_options(self):
        return self._respond("/filters/options")

    def get_all_products(self, limit=100, offset=0):
        return self._respond("", {"limit": limit, "offset": offset})

    def close(self):
        self.closed = True


def make_raw_product(index: int, **overrides: Any) -> Dict[str, Any]:
    """A raw product in the current field naming."""
    raw = {
        "product_id": f"A{index:05d}",
        "brand": "Torriden",
        "name": f"Dive-in Toner {index}",
        "first_category": "Skincare",
        "mid_category": "Toner",
        "price_cur": 18000,
        "price_org": 22000,
        "stock": {"current": 42, "threshold": 5, "unit_weight": 0.2},
        "spec": "All skin types",
    }
    raw.update(overrides)
    return raw


def make_raw_products(count: int, start: int = 1) -> List[Dict[str, Any]]:
    return [make_raw_product(i) for i in range(start, start + count)]


COUNT_RESPONSE = {"success": True, "total_count": 500, "active_count": 400, "inactive_count": 100}

FILTER_OPTIONS_RESPONSE = {
    "success": True,
    "filters": {
        "brands": ["Torriden", "Round Lab", "Anua"],
        "first_categories": ["Skincare", "Makeup"],
        "mid_categories": ["Toner", "Serum"],
        "spec": ["Dry", "Oily", "All skin types"],
        "price_range": {"min": 3000, "max": 90000},
    },
}


@pytest.fixture
def fake_api():
    """Empty scripted API; tests queue what they need."""
    return FakeCatalogAPI()


@pytest.fixture
def bootstrapped_api(fake_api):
    """API scripted for a successful bootstrap with 30 products."""
    fake_api.queue("/count", COUNT_RESPONSE)
    fake_api.queue("/filters/options", FILTER_OPTIONS_RESPONSE)
    fake_api.queue("", make_raw_products(30))
    return fake_api
