"""Tests for the startup sequence."""

import pytest

from browse.bootstrap import BootstrapError, parse_counts, run_bootstrap
from browse.errors import MalformedResponseError, ServiceUnavailableError
from browse.models import PriceRange, ProductCounts
from conftest import FILTER_OPTIONS_RESPONSE, make_raw_products


def _script(api, count_response, options=FILTER_OPTIONS_RESPONSE, products=None):
    api.queue("/count", count_response)
    api.queue("/filters/options", options)
    api.queue("", products if products is not None else make_raw_products(3))
    return api


class TestRunBootstrap:
    """Tests for run_bootstrap()."""

    @pytest.mark.parametrize(
        "active_count,expected_limit",
        [(400, 400), (0, 150), (5000, 1000)],
    )
    def test_fetch_limit_from_active_count(self, fake_api, active_count, expected_limit):
        _script(fake_api, {"success": True, "active_count": active_count})

        result = run_bootstrap(fake_api)

        assert result.fetch_limit == expected_limit
        assert fake_api.calls[-1] == ("", {"limit": expected_limit, "offset": 0})

    def test_total_count_used_when_active_missing(self, fake_api):
        _script(fake_api, {"success": True, "total_count": 320})
        assert run_bootstrap(fake_api).fetch_limit == 320

    def test_unsuccessful_count_keeps_default(self, fake_api):
        _script(fake_api, {"success": False, "active_count": 800})

        result = run_bootstrap(fake_api)

        assert result.counts is None
        assert result.fetch_limit == 150

    def test_steps_run_in_order(self, fake_api):
        _script(fake_api, {"success": True, "active_count": 400})

        result = run_bootstrap(fake_api)

        assert fake_api.paths == ["/count", "/filters/options", ""]
        assert result.completed == ["count", "filter_options", "products"]

    def test_result_contents(self, fake_api):
        _script(fake_api, {"success": True, "total_count": 500, "active_count": 400, "inactive_count": 100})

        result = run_bootstrap(fake_api)

        assert result.counts == ProductCounts(total=500, active=400, inactive=100)
        assert result.options.categories == ["Skincare", "Makeup"]
        assert result.options.price_range == PriceRange(min=3000, max=90000)
        assert [p.product_id for p in result.products] == ["A00001", "A00002", "A00003"]

    def test_unsuccessful_options_are_skipped(self, fake_api):
        _script(fake_api, {"success": True}, options={"success": False})
        result = run_bootstrap(fake_api)
        assert result.options is None
        assert result.products is not None

    def test_failure_keeps_partial_state(self, fake_api):
        fake_api.queue("/count", {"success": True, "active_count": 400})
        fake_api.queue("/filters/options", ServiceUnavailableError("down"))

        with pytest.raises(BootstrapError) as exc_info:
            run_bootstrap(fake_api)

        error = exc_info.value
        assert error.step == "filter_options"
        assert isinstance(error.cause, ServiceUnavailableError)
        assert error.partial.fetch_limit == 400
        assert error.partial.counts.active == 400
        assert error.partial.options is None
        assert error.partial.completed == ["count"]
        assert "" not in fake_api.paths

    def test_malformed_product_list_fails_last_step(self, fake_api):
        _script(fake_api, {"success": True}, products={"unexpected": True})

        with pytest.raises(BootstrapError) as exc_info:
            run_bootstrap(fake_api)

        assert exc_info.value.step == "products"
        assert isinstance(exc_info.value.cause, MalformedResponseError)
        assert exc_info.value.partial.options is not None


class TestParseCounts:
    """Tests for count response parsing."""

    def test_valid(self):
        counts = parse_counts({"success": True, "total_count": 10, "active_count": 7, "inactive_count": 3})
        assert counts == ProductCounts(total=10, active=7, inactive=3)

    def test_missing_values_default_to_zero(self):
        assert parse_counts({"success": True}) == ProductCounts()

    @pytest.mark.parametrize("payload", [None, [], {"success": False}, {"total_count": 5}])
    def test_unusable(self, payload):
        assert parse_counts(payload) is None
