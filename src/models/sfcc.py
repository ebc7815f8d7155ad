"""Commerce backend payload schemas.

Only the fields the storefront reads are declared. Basket records keep any
other field the backend sends so a basket can be submitted back unchanged.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class SFCCRecord(BaseModel):
    """Base for Shopper API records, which use camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class SFCCCategory(SFCCRecord):
    id: str
    name: str | None = None
    description: str | None = None
    page_title: str | None = None


class SFCCCategoryResult(SFCCRecord):
    data: list[SFCCCategory | None] = Field(default_factory=list)
    limit: int | None = None
    total: int | None = None


class SFCCImage(SFCCRecord):
    link: str
    alt: str | None = None
    title: str | None = None
    width: int | None = None
    height: int | None = None


class SFCCImageGroup(SFCCRecord):
    view_type: str
    images: list[SFCCImage] = Field(default_factory=list)


class SFCCVariationAttributeValue(SFCCRecord):
    value: str | None = None
    name: str | None = None
    orderable: bool | None = None


class SFCCVariationAttribute(SFCCRecord):
    id: str
    name: str | None = None
    values: list[SFCCVariationAttributeValue] = Field(default_factory=list)


class SFCCVariant(SFCCRecord):
    product_id: str
    price: float | None = None
    orderable: bool | None = None
    variation_values: dict[str, str] = Field(default_factory=dict)


class SFCCProduct(SFCCRecord):
    id: str
    name: str | None = None
    short_description: str | None = None
    long_description: str | None = None
    page_title: str | None = None
    page_description: str | None = None
    currency: str | None = None
    price: float | None = None
    image_groups: list[SFCCImageGroup] | None = None
    variation_attributes: list[SFCCVariationAttribute] | None = None
    variants: list[SFCCVariant] | None = None
    product_tags: list[str] | None = Field(default=None, alias="c_product-tags")
    updated_date: str | None = Field(default=None, alias="c_updated-date")


class SFCCSearchHit(SFCCRecord):
    product_id: str
    product_name: str | None = None


class SFCCSearchResult(SFCCRecord):
    hits: list[SFCCSearchHit] | None = None
    total: int = 0
    limit: int | None = None
    offset: int | None = None
    query: str | None = None


class SFCCOptionItem(SFCCRecord):
    model_config = ConfigDict(extra="allow")

    option_id: str | None = None
    option_value_id: str | None = None


class SFCCProductItem(SFCCRecord):
    model_config = ConfigDict(extra="allow")

    item_id: str | None = None
    product_id: str | None = None
    product_name: str | None = None
    quantity: int | None = None
    price: float | None = None
    option_items: list[SFCCOptionItem] | None = None


class SFCCBasket(SFCCRecord):
    model_config = ConfigDict(extra="allow")

    basket_id: str | None = None
    currency: str | None = None
    product_items: list[SFCCProductItem] | None = None
    product_total: float | None = None
    order_total: float | None = None
    tax_total: float | None = None

    def to_payload(self) -> dict[str, Any]:
        """Serialize back to the backend's wire format."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class TokenResponse(BaseModel):
    """OAuth token endpoint response."""

    access_token: str | None = None
    token_type: str | None = None
    expires_in: int | None = None
    customer_id: str | None = None
    usid: str | None = None


class RecommendationType(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: str | None = Field(default=None, alias="_type")
    display_value: str | None = None
    value: int | None = None


class RecommendedProduct(BaseModel):
    recommended_item_id: str
    recommendation_type: RecommendationType | None = None


class ProductRecommendations(BaseModel):
    """Open Commerce API product recommendations document."""

    id: str | None = None
    name: str | None = None
    recommendations: list[RecommendedProduct] | None = None
