"""HTTP client for the catalog products API."""

import logging
import time
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests  # type: ignore[import-untyped]

from browse.config import API_BASE_URL, HEADERS, PRODUCTS_PATH, REQUEST_TIMEOUT
from browse.errors import (
    APIError,
    MalformedResponseError,
    NotFoundError,
    ServiceUnavailableError,
)
from browse.logging_config import get_logger, log_browse_event
from browse.query import QueryPlan

__all__ = ["CatalogAPI", "create_session"]

logger = get_logger("api")


def create_session() -> requests.Session:
    """Create a requests Session with JSON headers and keep-alive."""
    session = requests.Session()
    session.headers.update(HEADERS)
    session.headers.setdefault("Accept-Encoding", "gzip, deflate")
    return session


def _encode_segment(value: Any) -> str:
    return quote(str(value), safe="")


def _clean_params(params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    return {k: v for k, v in (params or {}).items() if v is not None}


class CatalogAPI:
    """Client for the ``/api/products`` endpoints.

    Every call is a single request. Transport failures become
    ServiceUnavailableError, HTTP errors become APIError (NotFoundError for
    404), and bodies that are not JSON become MalformedResponseError.
    """

    def __init__(
        self,
        base_url: str = API_BASE_URL,
        timeout: float = REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or create_session()

    def _url(self, path: str) -> str:
        return f"{self.base_url}{PRODUCTS_PATH}{path}"

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> Any:
        url = self._url(path)
        query = _clean_params(params)
        started = time.perf_counter()

        try:
            resp = self.session.request(
                method, url, params=query, json=json_body, timeout=self.timeout
            )
            resp.raise_for_status()

        except requests.exceptions.HTTPError as e:
            status_code = e.response.status_code if e.response is not None else None
            log_browse_event(
                "request_error",
                {"message": f"HTTP {status_code} from {method} {url}", "path": path,
                 "params": query, "status_code": status_code},
                level=logging.WARNING if status_code == 404 else None,
                logger_name="api",
            )
            if status_code == 404:
                raise NotFoundError(f"Not found: {method} {url}") from e
            raise APIError(f"HTTP Error {status_code} from {method} {url}", status_code) from e

        except (requests.exceptions.ConnectionError, requests.exceptions.Timeout) as e:
            logger.error(f"Catalog service unreachable at {url}: {e}")
            raise ServiceUnavailableError(
                f"Could not reach the catalog service at {self.base_url}: {e}"
            ) from e

        except requests.exceptions.RequestException as e:
            logger.error(f"Request error for {method} {url}: {e}")
            raise ServiceUnavailableError(f"Request to {url} failed: {e}") from e

        try:
            data = resp.json()
        except ValueError as e:
            logger.error(f"Non-JSON response from {method} {url}")
            raise MalformedResponseError(f"Response from {url} is not valid JSON") from e

        log_browse_event(
            "request",
            {"message": f"{method} {path or '/'} -> {resp.status_code}", "path": path,
             "params": query, "status_code": resp.status_code,
             "elapsed_ms": round((time.perf_counter() - started) * 1000, 1)},
            logger_name="api",
        )
        return data

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self._request("GET", path, params=params)

    # ---------- endpoints used by the browser ----------

    def get_product_count(self) -> Any:
        """GET /count -> {success, total_count, active_count, inactive_count}"""
        return self._get("/count")

    def get_filter_options(self) -> Any:
        """GET /filters/options -> {success, filters: {...}}"""
        return self._get("/filters/options")

    def get_all_products(self, limit: int = 100, offset: int = 0) -> Any:
        return self._get("", {"limit": limit, "offset": offset})

    def quick_search(self, query: str, limit: int = 100) -> Any:
        """Name/brand search. The service expects the text in ``q``."""
        return self._get("/search/quick", {"q": query, "limit": limit})

    def search_products(self, params: Dict[str, Any]) -> Any:
        """Structured search (query, category, sub_category, brand, skin_type,
        min_price, max_price, sort_by, page, page_size)."""
        return self._get("/search", params)

    def get_products_by_category(self, category: str, limit: int = 20) -> Any:
        return self._get(f"/category/{_encode_segment(category)}", {"limit": limit})

    def get_products_by_brand(self, brand: str, limit: int = 20) -> Any:
        return self._get(f"/brand/{_encode_segment(brand)}", {"limit": limit})

    def fetch(self, plan: QueryPlan) -> Any:
        """Execute a plan produced by the query builder."""
        return self._get(plan.path, plan.params)

    # ---------- remaining catalog endpoints ----------

    def get_popular_products(self, limit: int = 10) -> Any:
        return self._get("/recommendations/popular", {"limit": limit})

    def get_recommendations(self, request: Dict[str, Any]) -> Any:
        return self._request("POST", "/recommendations", json_body=request)

    def get_product_by_id(self, product_id: str) -> Any:
        return self._get(f"/{_encode_segment(product_id)}")

    def get_categories(self) -> Any:
        return self._get("/categories")

    def get_sub_categories(self, category: Optional[str] = None) -> Any:
        return self._get("/sub-categories", {"category": category})

    def get_brands(self) -> Any:
        return self._get("/brands")

    def close(self) -> None:
        self.session.close()
