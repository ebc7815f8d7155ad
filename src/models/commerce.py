"""Storefront domain models returned to the frontend."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

SortKey = Literal[
    "best-matches",
    "price-low-to-high",
    "price-high-to-low",
    "product-name-ascending",
    "product-name-descending",
]

DEFAULT_SORT_KEY: SortKey = "best-matches"
DEFAULT_CURRENCY = "USD"


class StorefrontModel(BaseModel):
    """Immutable record serialized with camelCase keys."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class Money(StorefrontModel):
    amount: str = "0"
    currency_code: str = DEFAULT_CURRENCY


class Image(StorefrontModel):
    url: str
    alt_text: str = ""
    width: int = 800
    height: int = 800


class SEO(StorefrontModel):
    title: str = ""
    description: str = ""


class Collection(StorefrontModel):
    """A category from the store catalog."""

    handle: str
    title: str = ""
    description: str = ""
    seo: SEO = Field(default_factory=SEO)
    path: str
    updated_at: str = ""


class ProductOption(StorefrontModel):
    id: str
    name: str
    values: list[str] = Field(default_factory=list)


class SelectedOption(StorefrontModel):
    name: str
    value: str


class ProductVariant(StorefrontModel):
    id: str
    title: str
    available_for_sale: bool = False
    selected_options: list[SelectedOption] = Field(default_factory=list)
    price: Money = Field(default_factory=Money)


class PriceRange(StorefrontModel):
    max_variant_price: Money
    min_variant_price: Money


class Product(StorefrontModel):
    """A fully reshaped catalog product."""

    id: str
    handle: str
    title: str
    description: str = ""
    description_html: str = ""
    tags: list[str] = Field(default_factory=list)
    featured_image: Image
    price_range: PriceRange
    images: list[Image] = Field(default_factory=list)
    seo: SEO = Field(default_factory=SEO)
    options: list[ProductOption] = Field(default_factory=list)
    variants: list[ProductVariant] = Field(default_factory=list)
    available_for_sale: bool = True
    updated_at: str | None = None


class CartItemCost(StorefrontModel):
    total_amount: Money


class Merchandise(StorefrontModel):
    id: str
    title: str = ""
    selected_options: list[SelectedOption] = Field(default_factory=list)
    product: Product


class CartItem(StorefrontModel):
    id: str
    quantity: int = 0
    cost: CartItemCost
    merchandise: Merchandise


class CartCost(StorefrontModel):
    subtotal_amount: Money
    total_amount: Money
    total_tax_amount: Money


class Cart(StorefrontModel):
    """A hydrated shopper basket."""

    id: str
    checkout_url: str = "/checkout"
    cost: CartCost
    total_quantity: int = 0
    lines: list[CartItem] = Field(default_factory=list)
