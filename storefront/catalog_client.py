"""HTTP client for the storefront catalog API.

Endpoints::

    GET {base}/products                    -> [Product, ...]
    GET {base}/products/search?value=<q>   -> [Product, ...]

Failing responses carry ``{"success": false, "message": "..."}``. Every
failure is raised as one of the :mod:`storefront.errors` classes; the client
never retries.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Protocol

import httpx
from pydantic import ValidationError

from .config import Settings
from .errors import GENERIC_SERVER_MESSAGE, NoResponseError, RequestSetupError, ServerError
from .models import ErrorPayload, Product, parse_products

logger = logging.getLogger(__name__)


class CatalogClient(Protocol):
    async def list_all(self) -> list[Product]: ...

    async def search(self, query: str) -> list[Product]: ...

    async def aclose(self) -> None: ...


class HttpCatalogClient:
    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or "").rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._client = httpx.AsyncClient(timeout=timeout_seconds, transport=transport)

    async def list_all(self) -> list[Product]:
        return await self._get("/products")

    async def search(self, query: str) -> list[Product]:
        # An empty value is still sent; the backend treats it as "no filter".
        return await self._get("/products/search", params={"value": query})

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "HttpCatalogClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    def _url(self, path: str) -> str:
        if not self.base_url:
            raise RequestSetupError("Catalog endpoint is not configured")
        try:
            base = httpx.URL(self.base_url)
        except httpx.InvalidURL as exc:
            raise RequestSetupError(f"Invalid catalog endpoint {self.base_url!r}: {exc}") from exc
        if base.scheme not in {"http", "https"} or not base.host:
            raise RequestSetupError(f"Catalog endpoint must be an absolute http(s) URL, got {self.base_url!r}")
        return f"{self.base_url}{path}"

    async def _get(self, path: str, params: Optional[Dict[str, str]] = None) -> list[Product]:
        url = self._url(path)
        logger.info("GET %s params=%s", url, params or {})
        try:
            response = await self._client.get(url, params=params)
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as exc:
            raise RequestSetupError(str(exc)) from exc
        except httpx.TimeoutException as exc:
            raise NoResponseError(f"Catalog request timed out after {self.timeout_seconds}s") from exc
        except httpx.TransportError as exc:
            raise NoResponseError(f"Catalog unreachable: {exc}") from exc
        except (httpx.DecodingError, httpx.TooManyRedirects) as exc:
            raise ServerError(f"Catalog sent an unreadable response: {exc}") from exc
        except httpx.RequestError as exc:
            raise NoResponseError(f"Catalog request failed: {exc}") from exc

        if response.is_error:
            raise ServerError(_error_message(response), status_code=response.status_code)

        try:
            products = parse_products(response.json())
        except (ValueError, ValidationError) as exc:
            logger.warning("Malformed catalog payload from %s: %s", url, exc)
            raise ServerError("Catalog returned a malformed response", status_code=response.status_code) from exc
        logger.info("GET %s -> %s products", url, len(products))
        return products


def _error_message(response: httpx.Response) -> str:
    try:
        body: Any = response.json()
        return ErrorPayload.model_validate(body).message
    except (ValueError, ValidationError):
        return GENERIC_SERVER_MESSAGE


def build_catalog_client(config: Settings) -> CatalogClient:
    client: CatalogClient = HttpCatalogClient(config.catalog_endpoint, config.request_timeout_seconds)
    if config.cache_enabled:
        from .cache import CachedCatalogClient, get_cache

        client = CachedCatalogClient(client, get_cache(), config.cache_ttl_seconds)
    return client
