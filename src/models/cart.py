"""Request schemas for cart mutations."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CartLinePayload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CartLineInput(CartLinePayload):
    """Item to append to a basket."""

    merchandise_id: str = Field(..., min_length=1, description="Product id to add")
    quantity: int = Field(1, ge=1)


class CartLineUpdate(CartLinePayload):
    """New quantity for an existing basket line."""

    id: str = Field(..., min_length=1, description="Basket line item id")
    merchandise_id: str | None = None
    quantity: int = Field(..., ge=0)
