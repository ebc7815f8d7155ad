"""Shopper basket operations exposed as storefront carts."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence

from src.models.cart import CartLineInput, CartLineUpdate
from src.models.commerce import Cart, Product
from src.models.sfcc import SFCCBasket
from src.services.commerce.auth import AuthProvider
from src.services.commerce.client import SFCCClient
from src.services.commerce.errors import BackendError, NotFoundError, ValidationError
from src.services.commerce.reshape import reshape_basket, reshape_cart_items
from src.services.commerce.tasks import gather_or_cancel

logger = logging.getLogger(__name__)

ProductLookup = Callable[[str], Awaitable[Product]]


class BasketService:
    """Creates, reads and mutates baskets, returning hydrated carts.

    Reads and additions treat backend failures as "no cart" and return
    ``None``; removals and quantity updates let errors propagate.
    """

    def __init__(
        self,
        client: SFCCClient,
        auth: AuthProvider,
        product_lookup: ProductLookup,
    ) -> None:
        self._client = client
        self._auth = auth
        self._product_lookup = product_lookup

    async def create_cart(self) -> Cart:
        basket = await self._auth.authorized(self._client.create_basket)
        logger.info("Created basket %s", basket.basket_id)
        return await self.hydrate(basket)

    async def get_cart(self, cart_id: str | None) -> Cart | None:
        if not cart_id:
            return None

        try:
            basket = await self._auth.authorized(
                lambda token: self._client.get_basket(token, cart_id)
            )
            if not basket.basket_id:
                return None
            return await self.hydrate(basket)
        except (BackendError, NotFoundError) as exc:
            logger.warning("Could not load basket %s: %s", cart_id, exc)
            return None

    async def add_to_cart(
        self, cart_id: str, lines: Sequence[CartLineInput]
    ) -> Cart | None:
        items = [
            {"productId": line.merchandise_id, "quantity": line.quantity}
            for line in lines
        ]
        try:
            basket = await self._auth.authorized(
                lambda token: self._client.add_item_to_basket(token, cart_id, items)
            )
            if not basket.basket_id:
                return None
            return await self.hydrate(basket)
        except (BackendError, NotFoundError) as exc:
            logger.warning("Could not add items to basket %s: %s", cart_id, exc)
            return None

    async def remove_from_cart(self, cart_id: str, line_ids: Sequence[str]) -> Cart:
        # Callers remove one line per request.
        if len(line_ids) != 1:
            raise ValidationError("Invalid number of line items provided")

        basket = await self._auth.authorized(
            lambda token: self._client.remove_item_from_basket(token, cart_id, line_ids[0])
        )
        return await self.hydrate(basket)

    async def update_cart(
        self, cart_id: str, lines: Sequence[CartLineUpdate]
    ) -> Cart:
        """Overwrite quantities of matching lines and submit the whole basket."""

        quantities = {line.id: line.quantity for line in lines}

        async def submit(token: str) -> SFCCBasket:
            basket = await self._client.get_basket(token, cart_id)
            updated_items = [
                item.model_copy(update={"quantity": quantities[item.item_id]})
                if item.item_id in quantities
                else item
                for item in basket.product_items or []
            ]
            payload = basket.model_copy(update={"product_items": updated_items}).to_payload()
            return await self._client.update_basket(token, cart_id, payload)

        updated = await self._auth.authorized(submit)
        return await self.hydrate(updated)

    async def hydrate(self, basket: SFCCBasket) -> Cart:
        """Resolve each line's product concurrently and build the cart."""

        product_ids = list(
            dict.fromkeys(
                item.product_id for item in basket.product_items or [] if item.product_id
            )
        )
        products = await gather_or_cancel(
            *(self._product_lookup(product_id) for product_id in product_ids)
        )
        lines = reshape_cart_items(basket, dict(zip(product_ids, products)))
        return reshape_basket(basket, lines)
