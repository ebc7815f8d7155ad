"""Pytest configuration and fixtures for the storefront adapter."""

from __future__ import annotations

import asyncio
import itertools
import json
import re
from typing import Any
from urllib.parse import parse_qs

import httpx
import pytest
import pytest_asyncio
from fakeredis import aioredis as fakeredis
from httpx import ASGITransport, AsyncClient

from src.config import CommerceConfig
from src.services.cache.tagged_cache import TaggedCache, get_tagged_cache
from src.services.commerce.auth import AuthProvider
from src.services.commerce.basket import BasketService
from src.services.commerce.catalog import CatalogReader
from src.services.commerce.client import SFCCClient
from src.services.commerce.recommendations import (
    RecommendationReader,
    get_recommendation_reader,
)
from src.services.commerce.storefront import (
    CachedCatalog,
    get_basket_service,
    get_storefront,
)

ORGANIZATION_ID = "f_ecom_zzte_053"
SITE_ID = "RefArch"
OCAPI_ENDPOINT = "/s/RefArch/dw/shop/v23_2"


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
    config.addinivalue_line("markers", "asyncio: marks tests as async tests")


def make_product(
    product_id: str,
    name: str | None = "Striped Silk Tie",
    prices: tuple[float | None, ...] = (19.99, 24.0),
    *,
    currency: str | None = "USD",
    image_view_types: tuple[str, ...] = ("large", "small"),
) -> dict[str, Any]:
    """Shopper Products payload for a variation master."""

    variation_values = [
        {"color": "JJ5QZXX", "size": "9LG"},
        {"color": "JJ169XX", "size": "9LG"},
        {"color": "JJ169XX", "size": "9XL"},
    ]
    return {
        "id": product_id,
        "name": name,
        "currency": currency,
        "shortDescription": f"{name} short",
        "longDescription": f"<p>{name}</p>",
        "pageTitle": f"{name} | Store",
        "pageDescription": f"Buy {name}",
        "imageGroups": [
            {
                "viewType": view_type,
                "images": [
                    {
                        "link": f"https://cdn.example.com/{product_id}-{view_type}-{n}.jpg",
                        "alt": f"{name} {view_type} {n}",
                    }
                    for n in range(2)
                ],
            }
            for view_type in image_view_types
        ],
        "variationAttributes": [
            {
                "id": "color",
                "name": "Color",
                "values": [
                    {"value": "JJ5QZXX", "name": "Navy"},
                    {"value": "JJ169XX", "name": "Black"},
                ],
            },
            {
                "id": "size",
                "name": "Size",
                "values": [
                    {"value": "9LG", "name": "L"},
                    {"value": "9XL", "name": "XL"},
                ],
            },
        ],
        "variants": [
            {
                "productId": f"{product_id}-{index}",
                "price": price,
                "orderable": index % 2 == 0,
                "variationValues": variation_values[index % len(variation_values)],
            }
            for index, price in enumerate(prices)
        ],
        "c_product-tags": ["ties"],
        "c_updated-date": "2023-05-01T10:00:00.000Z",
    }


def make_category(category_id: str, name: str | None = None) -> dict[str, Any]:
    return {
        "id": category_id,
        "name": name or category_id.title(),
        "description": f"{category_id} description",
        "pageTitle": f"{category_id} page",
    }


class FakeCommerceAPI:
    """In-memory stand-in for the commerce backend HTTP APIs."""

    UNIT_PRICE = 10.0
    TAX = 1.5

    def __init__(self) -> None:
        self.products: dict[str, dict[str, Any]] = {}
        self.categories: list[dict[str, Any]] = []
        self.search_hits: list[str] = []
        self.recommendations: dict[str, list[str]] = {}
        self.baskets: dict[str, dict[str, Any]] = {}
        self.delays: dict[str, float] = {}
        self.failures: dict[str, int] = {}
        self.rejected_tokens: set[str] = set()
        self.token_response: dict[str, Any] = {
            "access_token": "guest-token",
            "token_type": "BEARER",
            "expires_in": 1800,
        }
        self.organization_token_response: dict[str, Any] = {
            "access_token": "org-token",
            "token_type": "Bearer",
            "expires_in": 1799,
        }
        self.requests: list[httpx.Request] = []
        self.completed: list[str] = []
        self._basket_ids = itertools.count(1)
        self._item_ids = itertools.count(1)

    def add_product(self, product: dict[str, Any]) -> dict[str, Any]:
        self.products[product["id"]] = product
        return product

    def add_basket(self, items: list[dict[str, Any]], basket_id: str | None = None) -> str:
        basket_id = basket_id or f"basket-{next(self._basket_ids)}"
        basket = {"basketId": basket_id, "currency": "USD", "productItems": []}
        for item in items:
            basket["productItems"].append(self._new_item(item))
        self.baskets[basket_id] = self._with_totals(basket)
        return basket_id

    def calls(self, pattern: str, method: str | None = None) -> list[httpx.Request]:
        return [
            request
            for request in self.requests
            if re.search(pattern, request.url.path)
            and (method is None or request.method == method)
        ]

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path in self.failures:
            return httpx.Response(self.failures[path], json={"title": "Backend failure"})
        authorization = request.headers.get("Authorization", "")
        if authorization.removeprefix("Bearer ") in self.rejected_tokens:
            return httpx.Response(401, json={"title": "Unauthorized"})

        routes = (
            (r"/shopper/auth/v1/organizations/[^/]+/oauth2/token$", self._guest_token),
            (r"/dwsso/oauth2/access_token$", self._organization_token),
            (r"/products/(?P<id>[^/]+)/recommendations$", self._recommendations),
            (r"/shopper-products/v1/organizations/[^/]+/categories$", self._categories),
            (r"/shopper-products/v1/organizations/[^/]+/products/(?P<id>[^/]+)$", self._product),
            (r"/shopper-search/v1/organizations/[^/]+/product-search$", self._search),
            (r"/baskets/(?P<basket>[^/]+)/items/(?P<item>[^/]+)$", self._remove_item),
            (r"/baskets/(?P<basket>[^/]+)/items$", self._add_items),
            (r"/baskets/(?P<basket>[^/]+)$", self._basket),
            (r"/shopper-baskets/v1/organizations/[^/]+/baskets$", self._create_basket),
        )
        for pattern, route in routes:
            match = re.search(pattern, path)
            if match:
                return await route(request, **match.groupdict())
        return httpx.Response(404, json={"title": "No route"})

    async def _guest_token(self, request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=self.token_response)

    async def _organization_token(self, request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=self.organization_token_response)

    async def _categories(self, request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"data": self.categories, "total": len(self.categories)})

    async def _product(self, request: httpx.Request, id: str) -> httpx.Response:
        delay = self.delays.get(id)
        if delay:
            await asyncio.sleep(delay)
        self.completed.append(id)
        if id not in self.products:
            return httpx.Response(404, json={"title": "Product Not Found"})
        return httpx.Response(200, json=self.products[id])

    async def _search(self, request: httpx.Request) -> httpx.Response:
        body: dict[str, Any] = {"total": len(self.search_hits), "limit": 100, "offset": 0}
        if self.search_hits:
            body["hits"] = [{"productId": product_id} for product_id in self.search_hits]
        return httpx.Response(200, json=body)

    async def _recommendations(self, request: httpx.Request, id: str) -> httpx.Response:
        items = self.recommendations.get(id, [])
        return httpx.Response(
            200,
            json={
                "id": id,
                "recommendations": [
                    {
                        "recommended_item_id": item,
                        "recommendation_type": {"_type": "recommendation_type", "value": 4},
                    }
                    for item in items
                ],
            },
        )

    async def _create_basket(self, request: httpx.Request) -> httpx.Response:
        basket_id = self.add_basket([])
        return httpx.Response(200, json=self.baskets[basket_id])

    async def _basket(self, request: httpx.Request, basket: str) -> httpx.Response:
        if basket not in self.baskets:
            return httpx.Response(404, json={"title": "Basket Not Found"})
        if request.method == "PATCH":
            body = json.loads(request.content)
            self.baskets[basket]["productItems"] = body.get("productItems", [])
            self.baskets[basket] = self._with_totals(self.baskets[basket])
        return httpx.Response(200, json=self.baskets[basket])

    async def _add_items(self, request: httpx.Request, basket: str) -> httpx.Response:
        if basket not in self.baskets:
            return httpx.Response(404, json={"title": "Basket Not Found"})
        for item in json.loads(request.content):
            self.baskets[basket]["productItems"].append(self._new_item(item))
        self.baskets[basket] = self._with_totals(self.baskets[basket])
        return httpx.Response(200, json=self.baskets[basket])

    async def _remove_item(
        self, request: httpx.Request, basket: str, item: str
    ) -> httpx.Response:
        if basket not in self.baskets:
            return httpx.Response(404, json={"title": "Basket Not Found"})
        items = self.baskets[basket]["productItems"]
        self.baskets[basket]["productItems"] = [i for i in items if i["itemId"] != item]
        self.baskets[basket] = self._with_totals(self.baskets[basket])
        return httpx.Response(200, json=self.baskets[basket])

    def _new_item(self, item: dict[str, Any]) -> dict[str, Any]:
        product = self.products.get(item.get("productId"), {})
        return {
            "itemId": f"item-{next(self._item_ids)}",
            "productId": item.get("productId"),
            "productName": product.get("name"),
            "quantity": item.get("quantity", 1),
            "optionItems": [{"optionId": "giftWrap", "optionValueId": "none"}],
            "c_note": "kept",
        }

    def _with_totals(self, basket: dict[str, Any]) -> dict[str, Any]:
        items = basket.get("productItems") or []
        for item in items:
            item["price"] = self.UNIT_PRICE * item.get("quantity", 0)
        subtotal = sum(item["price"] for item in items)
        tax = self.TAX if items else 0.0
        basket.update(productTotal=subtotal, taxTotal=tax, orderTotal=subtotal + tax)
        return basket


@pytest.fixture
def product_factory():
    return make_product


@pytest.fixture
def category_factory():
    return make_category


@pytest.fixture
def commerce_config() -> CommerceConfig:
    return CommerceConfig(
        client_id="client-id",
        client_secret="client-secret",
        organization_id=ORGANIZATION_ID,
        short_code="kv7kzm78",
        site_id=SITE_ID,
        sandbox_domain="zzte-053.sandbox.us02.dx.commercecloud.salesforce.com",
        ocapi_data_endpoint=OCAPI_ENDPOINT,
    )


@pytest.fixture
def sfcc_api() -> FakeCommerceAPI:
    return FakeCommerceAPI()


@pytest_asyncio.fixture()
async def sfcc_client(commerce_config, sfcc_api):
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(sfcc_api.handler))
    client = SFCCClient(commerce_config, http_client)
    try:
        yield client
    finally:
        await client.close()


@pytest.fixture
def auth_provider(commerce_config, sfcc_client) -> AuthProvider:
    return AuthProvider(commerce_config, sfcc_client)


@pytest.fixture
def catalog_reader(commerce_config, sfcc_client, auth_provider) -> CatalogReader:
    return CatalogReader(commerce_config, sfcc_client, auth_provider)


@pytest.fixture
def recommendation_reader(sfcc_client, catalog_reader) -> RecommendationReader:
    return RecommendationReader(sfcc_client, catalog_reader)


@pytest_asyncio.fixture()
async def redis_client():
    """Provide a fake Redis client for each test."""
    client = fakeredis.FakeRedis(decode_responses=True)
    try:
        yield client
    finally:
        await client.flushdb()
        await client.aclose()


@pytest.fixture
def tagged_cache(redis_client) -> TaggedCache:
    return TaggedCache(redis_client, prefix="test:cache:")


@pytest.fixture
def storefront(catalog_reader, tagged_cache) -> CachedCatalog:
    return CachedCatalog(catalog_reader, tagged_cache)


@pytest.fixture
def basket_service(sfcc_client, auth_provider, storefront) -> BasketService:
    return BasketService(sfcc_client, auth_provider, storefront.get_product)


@pytest_asyncio.fixture()
async def client(storefront, basket_service, recommendation_reader, tagged_cache):
    """Return an HTTPX async client pointing at the FastAPI app."""
    from src.main import app

    app.dependency_overrides[get_storefront] = lambda: storefront
    app.dependency_overrides[get_basket_service] = lambda: basket_service
    app.dependency_overrides[get_recommendation_reader] = lambda: recommendation_reader
    app.dependency_overrides[get_tagged_cache] = lambda: tagged_cache
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://testserver",
        ) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()
