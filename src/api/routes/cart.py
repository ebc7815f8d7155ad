"""Routes implementing the shopper cart API."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from src.models.cart import CartLineInput, CartLineUpdate
from src.models.commerce import Cart
from src.services.commerce.basket import BasketService
from src.services.commerce.storefront import get_basket_service

router = APIRouter(prefix="/cart", tags=["cart"])

BasketDependency = Annotated[BasketService, Depends(get_basket_service)]


def _require(cart: Cart | None) -> Cart:
    if cart is None:
        raise HTTPException(status_code=404, detail="Cart not found")
    return cart


@router.post(
    "",
    response_model=Cart,
    status_code=status.HTTP_201_CREATED,
    summary="Create an empty cart",
)
async def create_cart(baskets: BasketDependency) -> Cart:
    return await baskets.create_cart()


@router.get("/{cart_id}", response_model=Cart)
async def get_cart(cart_id: str, baskets: BasketDependency) -> Cart:
    return _require(await baskets.get_cart(cart_id))


@router.post("/{cart_id}/lines", response_model=Cart, summary="Add items to a cart")
async def add_cart_lines(
    cart_id: str,
    lines: list[CartLineInput],
    baskets: BasketDependency,
) -> Cart:
    return _require(await baskets.add_to_cart(cart_id, lines))


@router.put(
    "/{cart_id}/lines",
    response_model=Cart,
    summary="Change line quantities",
)
async def update_cart_lines(
    cart_id: str,
    lines: list[CartLineUpdate],
    baskets: BasketDependency,
) -> Cart:
    return await baskets.update_cart(cart_id, lines)


@router.delete("/{cart_id}/lines", response_model=Cart, summary="Remove a cart line")
async def remove_cart_lines(
    cart_id: str,
    baskets: BasketDependency,
    line_ids: Annotated[list[str], Query()] = [],
) -> Cart:
    return await baskets.remove_from_cart(cart_id, line_ids)
