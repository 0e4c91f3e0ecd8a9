"""HttpCatalogClient request building and error mapping."""

import httpx
import pytest

from storefront.catalog_client import HttpCatalogClient, build_catalog_client
from storefront.cache import CachedCatalogClient
from storefront.config import Settings
from storefront.errors import (
    GENERIC_SERVER_MESSAGE,
    ErrorKind,
    NoResponseError,
    RequestSetupError,
    ServerError,
)

BASE_URL = "http://catalog.test/api/v1"


def client_for(handler, base_url=BASE_URL):
    return HttpCatalogClient(base_url, timeout_seconds=1, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_list_all_hits_products_endpoint(product_records):
    seen = []

    def handler(request):
        seen.append(request.url)
        return httpx.Response(200, json=product_records)

    async with client_for(handler) as client:
        products = await client.list_all()

    assert str(seen[0]) == f"{BASE_URL}/products"
    assert [p.id for p in products] == [r["_id"] for r in product_records]
    assert products[0].name == "iPhone XR"


@pytest.mark.asyncio
async def test_search_sends_value_param(product_records):
    seen = []

    def handler(request):
        seen.append(request.url)
        return httpx.Response(200, json=product_records[:1])

    async with client_for(handler) as client:
        products = await client.search("iphone xr")

    assert seen[0].path == "/api/v1/products/search"
    assert seen[0].params["value"] == "iphone xr"
    assert len(products) == 1


@pytest.mark.asyncio
async def test_empty_search_still_sends_value(product_records):
    seen = []

    def handler(request):
        seen.append(request.url)
        return httpx.Response(200, json=product_records)

    async with client_for(handler) as client:
        products = await client.search("")

    assert "value" in seen[0].params
    assert seen[0].params["value"] == ""
    assert len(products) == len(product_records)


@pytest.mark.asyncio
async def test_trailing_slash_in_base_url(product_records):
    seen = []

    def handler(request):
        seen.append(request.url)
        return httpx.Response(200, json=product_records)

    async with client_for(handler, base_url=BASE_URL + "/") as client:
        await client.list_all()

    assert seen[0].path == "/api/v1/products"


@pytest.mark.asyncio
async def test_failing_status_uses_backend_message():
    def handler(request):
        return httpx.Response(404, json={"success": False, "message": "No products found"})

    async with client_for(handler) as client:
        with pytest.raises(ServerError) as excinfo:
            await client.search("nothing")

    assert excinfo.value.kind is ErrorKind.SERVER
    assert excinfo.value.status_code == 404
    assert excinfo.value.message == "No products found"


@pytest.mark.asyncio
async def test_failing_status_without_json_body():
    def handler(request):
        return httpx.Response(502, text="<html>Bad gateway</html>")

    async with client_for(handler) as client:
        with pytest.raises(ServerError) as excinfo:
            await client.list_all()

    assert excinfo.value.status_code == 502
    assert excinfo.value.message == GENERIC_SERVER_MESSAGE


@pytest.mark.asyncio
async def test_malformed_success_body_is_server_error():
    def handler(request):
        return httpx.Response(200, json={"products": []})

    async with client_for(handler) as client:
        with pytest.raises(ServerError):
            await client.list_all()


@pytest.mark.asyncio
async def test_connect_failure_is_no_response():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with client_for(handler) as client:
        with pytest.raises(NoResponseError) as excinfo:
            await client.search("phone")

    assert excinfo.value.kind is ErrorKind.NO_RESPONSE


@pytest.mark.asyncio
async def test_timeout_is_no_response():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    async with client_for(handler) as client:
        with pytest.raises(NoResponseError) as excinfo:
            await client.list_all()

    assert "timed out" in excinfo.value.message


@pytest.mark.asyncio
@pytest.mark.parametrize("base_url", ["", "catalog.test/api", "ftp://catalog.test/api"])
async def test_bad_endpoint_is_request_setup_error(base_url):
    sent = []

    def handler(request):
        sent.append(request)
        return httpx.Response(200, json=[])

    async with client_for(handler, base_url=base_url) as client:
        with pytest.raises(RequestSetupError) as excinfo:
            await client.search("phone")

    assert excinfo.value.kind is ErrorKind.REQUEST_SETUP
    assert sent == []


def test_build_catalog_client_respects_cache_flag(monkeypatch):
    import storefront.cache as cache_mod
    from storefront.cache import InMemoryCache

    monkeypatch.setattr(cache_mod, "_cache", InMemoryCache())

    plain = build_catalog_client(Settings(catalog_endpoint=BASE_URL, cache_enabled=False))
    cached = build_catalog_client(Settings(catalog_endpoint=BASE_URL, cache_enabled=True, cache_ttl_seconds=5))

    assert isinstance(plain, HttpCatalogClient)
    assert isinstance(cached, CachedCatalogClient)
    assert cached.ttl_seconds == 5


@pytest.mark.asyncio
async def test_corrupt_compressed_body_is_server_error():
    def handler(request):
        return httpx.Response(200, headers={"Content-Encoding": "gzip"}, stream=httpx.ByteStream(b"not gzip at all"))

    async with client_for(handler) as client:
        with pytest.raises(ServerError) as excinfo:
            await client.search("phone")

    assert excinfo.value.kind is ErrorKind.SERVER


@pytest.mark.asyncio
async def test_redirect_loop_is_server_error():
    def handler(request):
        raise httpx.TooManyRedirects("Exceeded maximum allowed redirects.", request=request)

    async with client_for(handler) as client:
        with pytest.raises(ServerError):
            await client.list_all()
