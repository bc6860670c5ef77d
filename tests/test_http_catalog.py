"""
Tests for the HTTP catalog client against a mocked transport.
"""

from __future__ import annotations

import httpx
import pytest

from menucart.application.exceptions import CatalogContractError, CatalogFetchError
from menucart.infrastructure.catalog.http_catalog_client import HttpCatalogSource

ROWS = [
    {"id": 1, "name": "Nasi Goreng", "category": "Makanan Utama", "price": 25000, "image_url": None,
     "created_at": "2024-01-01T00:00:00Z"},
    {"id": 2, "name": "Es Teh", "category": "Minuman", "price": 5000, "image_url": "https://img/es.png"},
]


def _source(handler) -> HttpCatalogSource:
    return HttpCatalogSource(
        base_url="https://catalog.example.com/",
        api_key="anon-key",
        table="menu_items",
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_fetch_parses_rows_in_order():
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json=ROWS)

    source = _source(handler)
    items = await source.fetch_items()
    await source.aclose()

    assert [i.id for i in items] == [1, 2]
    assert items[1].image_url == "https://img/es.png"
    assert items[0].is_available is True

    request = requests[0]
    assert request.url.path == "/rest/v1/menu_items"
    assert request.url.params["select"] == "*"
    assert request.headers["apikey"] == "anon-key"
    assert request.headers["Authorization"] == "Bearer anon-key"


@pytest.mark.asyncio
async def test_http_error_raises_fetch_error():
    source = _source(lambda request: httpx.Response(503, text="unavailable"))
    with pytest.raises(CatalogFetchError):
        await source.fetch_items()


@pytest.mark.asyncio
async def test_transport_error_raises_fetch_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    source = _source(handler)
    with pytest.raises(CatalogFetchError):
        await source.fetch_items()


@pytest.mark.asyncio
async def test_non_json_body_raises_fetch_error():
    source = _source(lambda request: httpx.Response(200, text="<html>oops</html>"))
    with pytest.raises(CatalogFetchError):
        await source.fetch_items()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"items": ROWS},
        [{"id": 1, "name": "No price", "category": "Minuman"}],
        [{"id": 1, "name": "Negative", "category": "Minuman", "price": -1}],
        [{"id": "1", "name": "String id", "category": "Minuman", "price": 1}],
        [ROWS[0], ROWS[0]],
    ],
)
async def test_wrong_shape_raises_contract_error(payload):
    source = _source(lambda request: httpx.Response(200, json=payload))
    with pytest.raises(CatalogContractError):
        await source.fetch_items()


def test_base_url_required():
    with pytest.raises(ValueError):
        HttpCatalogSource(base_url="", transport=httpx.MockTransport(lambda r: httpx.Response(200)))
