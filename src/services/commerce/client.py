"""HTTP client for the Salesforce Commerce Cloud Shopper APIs and OCAPI."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import httpx

from src.config import CommerceConfig, settings
from src.models.sfcc import (
    ProductRecommendations,
    SFCCBasket,
    SFCCCategoryResult,
    SFCCProduct,
    SFCCSearchResult,
    TokenResponse,
)
from src.services.commerce.errors import BackendError

logger = logging.getLogger(__name__)

SEARCH_PAGE_SIZE = 100


class SFCCClient:
    """Thin async wrapper that builds endpoint URLs and decodes responses."""

    def __init__(self, config: CommerceConfig, http_client: httpx.AsyncClient) -> None:
        self._config = config
        self._http = http_client

    @property
    def config(self) -> CommerceConfig:
        return self._config

    async def close(self) -> None:
        await self._http.aclose()

    # Authentication

    async def request_guest_token(self) -> TokenResponse:
        """Client-credentials grant against the shopper login service."""
        url = self._shopper_url("shopper/auth/v1", "oauth2/token")
        data = await self._request(
            "POST",
            url,
            auth=self._basic_auth(),
            data={
                "grant_type": "client_credentials",
                "channel_id": self._config.site_id,
            },
        )
        return TokenResponse.model_validate(data or {})

    async def request_organization_token(self) -> TokenResponse:
        """Client-credentials grant against Account Manager."""
        data = await self._request(
            "POST",
            self._config.account_manager_url,
            auth=self._basic_auth(),
            data={"grant_type": "client_credentials"},
        )
        return TokenResponse.model_validate(data or {})

    # Catalog

    async def get_categories(
        self, token: str, ids: Sequence[str]
    ) -> SFCCCategoryResult:
        data = await self._request(
            "GET",
            self._shopper_url("product/shopper-products/v1", "categories"),
            token=token,
            params={"ids": ",".join(ids), "levels": 0},
        )
        return SFCCCategoryResult.model_validate(data or {})

    async def get_product(self, token: str, product_id: str) -> SFCCProduct:
        data = await self._request(
            "GET",
            self._shopper_url(
                "product/shopper-products/v1", f"products/{product_id}"
            ),
            token=token,
        )
        return SFCCProduct.model_validate(data)

    async def product_search(
        self,
        token: str,
        *,
        q: str = "",
        refine: Sequence[str] = (),
        sort: str | None = None,
        limit: int = SEARCH_PAGE_SIZE,
    ) -> SFCCSearchResult:
        params: list[tuple[str, str | int]] = [("q", q), ("limit", limit)]
        params.extend(("refine", value) for value in refine)
        if sort:
            params.append(("sort", sort))
        data = await self._request(
            "GET",
            self._shopper_url("search/shopper-search/v1", "product-search"),
            token=token,
            params=params,
        )
        return SFCCSearchResult.model_validate(data or {})

    # Baskets

    async def create_basket(self, token: str) -> SFCCBasket:
        data = await self._request(
            "POST",
            self._shopper_url("checkout/shopper-baskets/v1", "baskets"),
            token=token,
            json={},
        )
        return SFCCBasket.model_validate(data or {})

    async def get_basket(self, token: str, basket_id: str) -> SFCCBasket:
        data = await self._request(
            "GET",
            self._shopper_url("checkout/shopper-baskets/v1", f"baskets/{basket_id}"),
            token=token,
        )
        return SFCCBasket.model_validate(data or {})

    async def update_basket(
        self, token: str, basket_id: str, body: dict[str, Any]
    ) -> SFCCBasket:
        data = await self._request(
            "PATCH",
            self._shopper_url("checkout/shopper-baskets/v1", f"baskets/{basket_id}"),
            token=token,
            json=body,
        )
        return SFCCBasket.model_validate(data or {})

    async def add_item_to_basket(
        self, token: str, basket_id: str, items: Sequence[dict[str, Any]]
    ) -> SFCCBasket:
        data = await self._request(
            "POST",
            self._shopper_url(
                "checkout/shopper-baskets/v1", f"baskets/{basket_id}/items"
            ),
            token=token,
            json=list(items),
        )
        return SFCCBasket.model_validate(data or {})

    async def remove_item_from_basket(
        self, token: str, basket_id: str, item_id: str
    ) -> SFCCBasket:
        data = await self._request(
            "DELETE",
            self._shopper_url(
                "checkout/shopper-baskets/v1",
                f"baskets/{basket_id}/items/{item_id}",
            ),
            token=token,
        )
        return SFCCBasket.model_validate(data or {})

    # Open Commerce API

    async def get_product_recommendations(
        self, product_id: str
    ) -> ProductRecommendations:
        data = await self._request(
            "GET",
            f"{self._config.ocapi_base_url}/products/{product_id}/recommendations",
            params={
                "client_id": self._config.client_id,
                "channel_id": self._config.site_id,
            },
        )
        return ProductRecommendations.model_validate(data or {})

    # Internals

    def _shopper_url(self, api: str, resource: str) -> str:
        return (
            f"{self._config.api_base_url}/{api}/organizations/"
            f"{self._config.organization_id}/{resource}"
        )

    def _basic_auth(self) -> httpx.BasicAuth:
        return httpx.BasicAuth(self._config.client_id, self._config.client_secret)

    async def _request(
        self,
        method: str,
        url: str,
        *,
        token: str | None = None,
        params: Any = None,
        **kwargs: Any,
    ) -> Any:
        headers: dict[str, str] = {}
        if token:
            headers["Authorization"] = f"Bearer {token}"
            params = self._with_site(params)

        logger.debug("%s %s", method, url)
        try:
            response = await self._http.request(
                method,
                url,
                headers=headers,
                params=params,
                timeout=self._config.request_timeout,
                **kwargs,
            )
        except httpx.RequestError as exc:
            raise BackendError(f"Request to {url} failed: {exc}") from exc

        logger.debug("%s %s -> %s", method, url, response.status_code)
        if response.status_code >= 400:
            detail = _decode_body(response)
            raise BackendError(
                f"{method} {url} returned {response.status_code}",
                status_code=response.status_code,
                detail=detail,
            )
        return _decode_body(response)

    def _with_site(self, params: Any) -> list[tuple[str, Any]]:
        """Every Shopper API call is scoped to the configured site."""
        if params is None:
            items: list[tuple[str, Any]] = []
        elif isinstance(params, dict):
            items = list(params.items())
        else:
            items = list(params)
        items.append(("siteId", self._config.site_id))
        return items


def _decode_body(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


_sfcc_client: SFCCClient | None = None


def get_sfcc_client() -> SFCCClient:
    """Return the process-wide commerce client."""

    global _sfcc_client
    if _sfcc_client is None:
        config = settings.commerce_config()
        _sfcc_client = SFCCClient(config, httpx.AsyncClient())
    return _sfcc_client


async def close_sfcc_client() -> None:
    global _sfcc_client
    if _sfcc_client is not None:
        await _sfcc_client.close()
        _sfcc_client = None
