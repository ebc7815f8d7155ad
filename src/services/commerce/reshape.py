"""Pure mapping from commerce backend records to storefront models."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import Decimal

from src.models.commerce import (
    DEFAULT_CURRENCY,
    SEO,
    Cart,
    CartCost,
    CartItem,
    CartItemCost,
    Collection,
    Image,
    Merchandise,
    Money,
    PriceRange,
    Product,
    ProductOption,
    ProductVariant,
    SelectedOption,
)
from src.models.sfcc import (
    SFCCBasket,
    SFCCCategory,
    SFCCImageGroup,
    SFCCProduct,
    SFCCProductItem,
    SFCCVariant,
)
from src.services.commerce.errors import NotFoundError, ValidationError

LARGE_VIEW_TYPE = "large"
DEFAULT_IMAGE_SIZE = 800
CHECKOUT_URL = "/checkout"


def format_amount(value: float | int | None) -> str:
    """Render a price as a plain decimal string, "0" when missing."""
    if value is None:
        return "0"
    normalized = Decimal(str(value)).normalize()
    # normalize() turns 20 into 2E+1; "f" keeps it positional
    return format(normalized, "f")


def money(value: float | int | None, currency: str | None) -> Money:
    return Money(amount=format_amount(value), currency_code=currency or DEFAULT_CURRENCY)


def reshape_category(category: SFCCCategory | None) -> Collection | None:
    if not category:
        return None

    return Collection(
        handle=category.id,
        title=category.name or "",
        description=category.description or "",
        seo=SEO(
            title=category.page_title or "",
            description=category.description or "",
        ),
        path=f"/search/{category.id}",
        updated_at="",
    )


def reshape_categories(categories: Iterable[SFCCCategory | None]) -> list[Collection]:
    collections = []
    for category in categories:
        collection = reshape_category(category)
        if collection is not None:
            collections.append(collection)
    return collections


def reshape_images(image_groups: Iterable[SFCCImageGroup] | None) -> list[Image]:
    """Flatten the large view-type groups; every other view type is dropped."""
    if not image_groups:
        return []

    return [
        Image(
            url=image.link,
            alt_text=image.alt or "",
            width=image.width or DEFAULT_IMAGE_SIZE,
            height=image.height or DEFAULT_IMAGE_SIZE,
        )
        for group in image_groups
        if group.view_type == LARGE_VIEW_TYPE
        for image in group.images
    ]


def reshape_price_range(product: SFCCProduct) -> PriceRange:
    prices = sorted(
        variant.price for variant in product.variants or [] if variant.price is not None
    )
    return PriceRange(
        max_variant_price=money(prices[-1] if prices else None, product.currency),
        min_variant_price=money(prices[0] if prices else None, product.currency),
    )


def reshape_options(product: SFCCProduct) -> list[ProductOption]:
    # The frontend matches on display names, so values carry names, not codes.
    return [
        ProductOption(
            id=attribute.id,
            name=attribute.name or attribute.id,
            values=[
                value.name or value.value
                for value in attribute.values
                if value.value is not None
            ],
        )
        for attribute in product.variation_attributes or []
    ]


def reshape_variant(variant: SFCCVariant, product: SFCCProduct) -> ProductVariant:
    attributes = {attr.id: attr for attr in product.variation_attributes or []}

    selected = []
    for key, code in variant.variation_values.items():
        attribute = attributes.get(key)
        if attribute is None:
            selected.append(SelectedOption(name=key, value=""))
            continue
        display = next(
            (value.name for value in attribute.values if value.value == code),
            None,
        )
        selected.append(
            SelectedOption(name=attribute.name or key, value=display or "")
        )

    return ProductVariant(
        id=variant.product_id,
        title=product.name or "",
        available_for_sale=bool(variant.orderable),
        selected_options=selected,
        price=money(variant.price, product.currency),
    )


def reshape_variants(
    variants: Iterable[SFCCVariant], product: SFCCProduct
) -> list[ProductVariant]:
    return [reshape_variant(variant, product) for variant in variants]


def reshape_product(product: SFCCProduct) -> Product:
    """Build a storefront product.

    Raises:
        ValidationError: the record has no name or no large image, so it
            cannot be rendered.
    """
    if not product.name:
        raise ValidationError(f"Product name is not set for product {product.id}")

    images = reshape_images(product.image_groups)
    if not images:
        raise ValidationError(f"Product image is not set for product {product.id}")

    return Product(
        id=product.id,
        handle=product.id,
        title=product.name,
        description=product.short_description or "",
        description_html=product.long_description or "",
        tags=list(product.product_tags or []),
        featured_image=images[0],
        # Date-based availability windows are not evaluated.
        available_for_sale=True,
        price_range=reshape_price_range(product),
        images=images,
        options=reshape_options(product),
        seo=SEO(
            title=product.page_title or "",
            description=product.page_description or "",
        ),
        variants=reshape_variants(product.variants or [], product),
        updated_at=product.updated_date,
    )


def reshape_products(products: Iterable[SFCCProduct | None]) -> list[Product]:
    return [reshape_product(product) for product in products if product]


def reshape_product_item(
    item: SFCCProductItem, currency: str, product: Product
) -> CartItem:
    return CartItem(
        id=item.item_id or "",
        quantity=item.quantity or 0,
        cost=CartItemCost(total_amount=money(item.price, currency)),
        merchandise=Merchandise(
            id=item.product_id or "",
            title=item.product_name or "",
            # Basket option items stay as raw ids, unlike variant options.
            selected_options=[
                SelectedOption(name=option.option_id or "", value=option.option_value_id or "")
                for option in item.option_items or []
            ],
            product=product,
        ),
    )


def reshape_cart_items(
    basket: SFCCBasket, products: Mapping[str, Product]
) -> list[CartItem]:
    """Pair every basket line with its resolved product.

    Raises:
        NotFoundError: a line references a product missing from ``products``.
    """
    currency = basket.currency or DEFAULT_CURRENCY
    lines = []
    for item in basket.product_items or []:
        product = products.get(item.product_id) if item.product_id else None
        if product is None:
            raise NotFoundError(
                f"Product {item.product_id!r} for basket line {item.item_id!r} "
                "could not be resolved"
            )
        lines.append(reshape_product_item(item, currency, product))
    return lines


def reshape_basket(basket: SFCCBasket, lines: list[CartItem]) -> Cart:
    currency = basket.currency or DEFAULT_CURRENCY
    return Cart(
        id=basket.basket_id or "",
        checkout_url=CHECKOUT_URL,
        cost=CartCost(
            subtotal_amount=money(basket.product_total, currency),
            total_amount=money(basket.order_total, currency),
            total_tax_amount=money(basket.tax_total, currency),
        ),
        total_quantity=sum(line.quantity for line in lines),
        lines=lines,
    )
