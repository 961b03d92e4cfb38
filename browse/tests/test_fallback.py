"""Tests for the structured-search fallback."""

import pytest

from browse.errors import APIError, NotFoundError, ServiceUnavailableError
from browse.fallback import resolve
from browse.filters import FilterState
from browse.query import STRUCTURED_SEARCH, select_strategy
from conftest import make_raw_products


def _plan(dimension, value, fetch_limit=400, sort_by="popularity"):
    return select_strategy(FilterState.single(dimension, value, sort_by=sort_by), fetch_limit)


class TestResolve:
    """Tests for resolve()."""

    def test_direct_results_need_no_retry(self, fake_api):
        fake_api.queue("/brand/Anua", make_raw_products(3))

        resolution = resolve(fake_api, _plan("brands", "Anua"), 400)

        assert len(resolution.products) == 3
        assert resolution.used_fallback is False
        assert fake_api.paths == ["/brand/Anua"]

    def test_empty_brand_result_retries_once_via_search(self, fake_api):
        """An empty by-brand result triggers exactly one structured search with brand=<value>."""
        fake_api.queue("/brand/Anua", [])
        fake_api.queue("/search", {"products": make_raw_products(2), "total": 2})

        resolution = resolve(fake_api, _plan("brands", "Anua", sort_by="discount"), 400)

        assert fake_api.paths == ["/brand/Anua", "/search"]
        assert fake_api.calls[1][1] == {
            "page": 1,
            "page_size": 100,
            "sort_by": "discount",
            "brand": "Anua",
        }
        assert len(resolution.products) == 2
        assert resolution.reported_total == 2
        assert resolution.used_fallback is True
        assert resolution.plan.strategy == STRUCTURED_SEARCH

    def test_wrapped_empty_category_result_retries(self, fake_api):
        fake_api.queue("/category/Skincare", {"products": []})
        fake_api.queue("/search", make_raw_products(1))

        resolution = resolve(fake_api, _plan("categories", "Skincare"), 400)

        assert fake_api.calls[1] == ("/search", {
            "page": 1, "page_size": 100, "sort_by": "popularity", "category": "Skincare",
        })
        assert len(resolution.products) == 1

    def test_empty_retry_is_empty_result_not_error(self, fake_api):
        fake_api.queue("/brand/Anua", [])
        fake_api.queue("/search", {"products": [], "total": 0})

        resolution = resolve(fake_api, _plan("brands", "Anua"), 400)

        assert resolution.products == []
        assert resolution.used_fallback is True
        assert len(fake_api.calls) == 2

    def test_not_found_is_empty_without_retry(self, fake_api):
        fake_api.queue("/brand/Ghost", NotFoundError("no such brand"))

        resolution = resolve(fake_api, _plan("brands", "Ghost"), 400)

        assert resolution.products == []
        assert resolution.used_fallback is False
        assert fake_api.paths == ["/brand/Ghost"]

    def test_not_found_on_retry_is_empty(self, fake_api):
        fake_api.queue("/brand/Anua", [])
        fake_api.queue("/search", NotFoundError("gone"))

        resolution = resolve(fake_api, _plan("brands", "Anua"), 400)

        assert resolution.products == []

    @pytest.mark.parametrize(
        "error",
        [ServiceUnavailableError("down"), APIError("boom", status_code=500)],
    )
    def test_retry_transport_failure_propagates(self, fake_api, error):
        fake_api.queue("/brand/Anua", [])
        fake_api.queue("/search", error)

        with pytest.raises(type(error)):
            resolve(fake_api, _plan("brands", "Anua"), 400)

    def test_direct_server_error_propagates_without_retry(self, fake_api):
        fake_api.queue("/brand/Anua", APIError("boom", status_code=502))

        with pytest.raises(APIError):
            resolve(fake_api, _plan("brands", "Anua"), 400)
        assert fake_api.paths == ["/brand/Anua"]

    def test_structured_plan_has_no_retry(self, fake_api):
        fake_api.queue("/search", {"products": [], "total": 0})

        resolution = resolve(fake_api, _plan("skin_types", "Dry"), 400)

        assert resolution.products == []
        assert fake_api.paths == ["/search"]
