"""Tests for the HTTP client (requests session is mocked)."""

from unittest.mock import MagicMock

import pytest
import requests

from browse.api import CatalogAPI, create_session
from browse.errors import (
    APIError,
    CatalogError,
    MalformedResponseError,
    NotFoundError,
    ServiceUnavailableError,
)
from browse.filters import FilterState
from browse.query import select_strategy

BASE_URL = "http://catalog.test/api"


def _response(payload=None, status_code=200, json_error=False):
    resp = MagicMock()
    resp.status_code = status_code
    if status_code >= 400:
        error = requests.exceptions.HTTPError(f"{status_code} error")
        error.response = resp
        resp.raise_for_status.side_effect = error
    if json_error:
        resp.json.side_effect = ValueError("No JSON object could be decoded")
    else:
        resp.json.return_value = payload
    return resp


@pytest.fixture
def http():
    """Mocked requests.Session."""
    session = MagicMock()
    session.request.return_value = _response([])
    return session


@pytest.fixture
def api(http):
    return CatalogAPI(base_url=BASE_URL + "/", timeout=3, session=http)


class TestRequests:
    """Tests for URL and parameter construction."""

    def test_get_all_products(self, api, http):
        http.request.return_value = _response([{"product_id": "A1"}])

        assert api.get_all_products(limit=150, offset=0) == [{"product_id": "A1"}]

        http.request.assert_called_once_with(
            "GET",
            f"{BASE_URL}/products",
            params={"limit": 150, "offset": 0},
            json=None,
            timeout=3,
        )

    def test_none_params_are_dropped(self, api, http):
        api.search_products({"page": 1, "brand": "Anua", "min_price": None})

        _, kwargs = http.request.call_args
        assert kwargs["params"] == {"page": 1, "brand": "Anua"}
        assert http.request.call_args[0][1] == f"{BASE_URL}/products/search"

    def test_quick_search_sends_q(self, api, http):
        api.quick_search("toner", limit=50)
        _, kwargs = http.request.call_args
        assert kwargs["params"] == {"q": "toner", "limit": 50}

    @pytest.mark.parametrize(
        "call,expected_path",
        [
            (lambda a: a.get_products_by_brand("Round Lab"), "/products/brand/Round%20Lab"),
            (lambda a: a.get_products_by_category("Skin/Toner"), "/products/category/Skin%2FToner"),
            (lambda a: a.get_product_by_id("A 1"), "/products/A%201"),
            (lambda a: a.get_product_count(), "/products/count"),
            (lambda a: a.get_filter_options(), "/products/filters/options"),
            (lambda a: a.get_categories(), "/products/categories"),
            (lambda a: a.get_brands(), "/products/brands"),
            (lambda a: a.get_popular_products(), "/products/recommendations/popular"),
        ],
    )
    def test_endpoint_paths(self, api, http, call, expected_path):
        call(api)
        assert http.request.call_args[0][1] == BASE_URL + expected_path

    def test_sub_categories_without_category(self, api, http):
        api.get_sub_categories()
        assert http.request.call_args[1]["params"] == {}

    def test_recommendations_is_post(self, api, http):
        body = {"skin_type": "Dry", "limit": 5}
        api.get_recommendations(body)

        args, kwargs = http.request.call_args
        assert args == ("POST", f"{BASE_URL}/products/recommendations")
        assert kwargs["json"] == body

    def test_fetch_executes_plan(self, api, http):
        state = FilterState()
        state.set_query("serum")
        plan = select_strategy(state, fetch_limit=400)

        api.fetch(plan)

        args, kwargs = http.request.call_args
        assert args[1] == f"{BASE_URL}/products/search/quick"
        assert kwargs["params"] == {"q": "serum", "limit": 50}

    def test_default_session_headers(self):
        session = create_session()
        assert session.headers["Accept"] == "application/json"
        session.close()


class TestErrorMapping:
    """Tests for mapping transport and HTTP failures onto CatalogError."""

    def test_404_is_not_found(self, api, http):
        http.request.return_value = _response(status_code=404)

        with pytest.raises(NotFoundError) as exc_info:
            api.get_products_by_brand("Ghost")

        assert exc_info.value.status_code == 404

    def test_500_is_api_error(self, api, http):
        http.request.return_value = _response(status_code=500)

        with pytest.raises(APIError) as exc_info:
            api.get_all_products()

        assert exc_info.value.status_code == 500
        assert not isinstance(exc_info.value, NotFoundError)

    @pytest.mark.parametrize(
        "exc",
        [
            requests.exceptions.ConnectionError("refused"),
            requests.exceptions.Timeout("slow"),
            requests.exceptions.TooManyRedirects("loop"),
        ],
    )
    def test_transport_errors(self, api, http, exc):
        http.request.side_effect = exc

        with pytest.raises(ServiceUnavailableError):
            api.get_product_count()

    def test_invalid_json(self, api, http):
        http.request.return_value = _response(json_error=True)

        with pytest.raises(MalformedResponseError):
            api.get_filter_options()

    def test_all_errors_share_base(self):
        for error_cls in (APIError, NotFoundError, ServiceUnavailableError, MalformedResponseError):
            assert issubclass(error_cls, CatalogError)

    def test_single_attempt(self, api, http):
        http.request.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(ServiceUnavailableError):
            api.get_all_products()

        assert http.request.call_count == 1
