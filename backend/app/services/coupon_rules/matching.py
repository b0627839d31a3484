"""Cart item selection helpers shared by the rule evaluator and benefit calculators."""

from collections.abc import Iterable
from decimal import Decimal

from app.models.coupon_rule import DiscountTargetType, SourceType
from app.schemas.coupon_validation import CartItemWithProduct
from app.services.coupon_rules.definitions import (
    ItemFilter,
    NewArrivalRequirement,
    SourceCondition,
)


def line_total(items: Iterable[CartItemWithProduct]) -> Decimal:
    """Sum of price x quantity over cart lines."""
    return sum((item.product.price * item.quantity for item in items), Decimal("0"))


def total_quantity(items: Iterable[CartItemWithProduct]) -> int:
    return sum(item.quantity for item in items)


def product_ids(items: Iterable[CartItemWithProduct]) -> list[str]:
    return [item.product_id for item in items]


def filter_items(
    items: Iterable[CartItemWithProduct], item_filter: ItemFilter
) -> list[CartItemWithProduct]:
    """Keep items whose product passes the category and new-arrival filter."""
    return [
        item
        for item in items
        if (item_filter.category_id is None or item.product.category_id == item_filter.category_id)
        and item_filter.new_arrival.accepts(item.product.new_arrival)
    ]


def find_source_items(
    source: SourceCondition, cart_items: list[CartItemWithProduct]
) -> list[CartItemWithProduct]:
    """Cart items that count towards a rule's source condition."""
    if source.source_type is SourceType.CATEGORY:
        return [i for i in cart_items if i.product.category_id == source.category_id]
    if source.source_type is SourceType.NEW_ARRIVAL:
        return filter_items(cart_items, ItemFilter(new_arrival=source.new_arrival))
    if source.source_type is SourceType.CATEGORY_NEW_ARRIVAL:
        return [
            i
            for i in filter_items(cart_items, ItemFilter(new_arrival=source.new_arrival))
            if i.product.category_id == source.category_id
        ]
    if source.source_type is SourceType.ANY:
        return list(cart_items)
    return []


def find_discount_targets(
    target_type: DiscountTargetType,
    target: ItemFilter,
    source_items: list[CartItemWithProduct],
    cart_items: list[CartItemWithProduct],
) -> list[CartItemWithProduct]:
    """Resolve which cart items a fixed or percentage discount is computed on."""
    if target_type is DiscountTargetType.TARGET:
        return filter_items(cart_items, target)
    if target_type is DiscountTargetType.CART:
        return list(cart_items)
    return list(source_items)


def describe_source(source: SourceCondition) -> str:
    """Human-readable name for the items a source condition asks for."""
    if source.source_type is SourceType.CATEGORY:
        return "items from specified category"
    if source.source_type is SourceType.NEW_ARRIVAL:
        if source.new_arrival is NewArrivalRequirement.REQUIRE_TRUE:
            return "new arrival items"
        if source.new_arrival is NewArrivalRequirement.REQUIRE_FALSE:
            return "non-new-arrival items"
    if source.source_type is SourceType.CATEGORY_NEW_ARRIVAL:
        return "items from specified category and new arrival status"
    return "items"
