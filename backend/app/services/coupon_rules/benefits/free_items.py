"""Buy X, get Y free (or Y at a percentage off)."""

from decimal import Decimal

from app.models.coupon_rule import FreeItemSelection
from app.schemas.coupon_validation import CartItemWithProduct
from app.services.coupon_rules.definitions import BenefitOutcome, FreeItems
from app.services.coupon_rules.matching import filter_items


def select_free_items(
    items: list[CartItemWithProduct],
    quantity: int,
    selection: FreeItemSelection,
) -> list[CartItemWithProduct]:
    """Pick ``quantity`` cart lines to make free.

    ``customer_choice`` keeps cart order: the pick is a stand-in until the
    customer chooses, and callers get the whole eligible pool alongside it.
    """
    if selection is FreeItemSelection.CHEAPEST:
        ordered = sorted(items, key=lambda item: item.product.price)
    elif selection is FreeItemSelection.MOST_EXPENSIVE:
        ordered = sorted(items, key=lambda item: item.product.price, reverse=True)
    else:
        ordered = list(items)
    return ordered[:quantity]


def calculate(
    benefit: FreeItems,
    source_items: list[CartItemWithProduct],
    cart_items: list[CartItemWithProduct],
) -> BenefitOutcome:
    if benefit.target.is_unrestricted:
        eligible = list(source_items)
    else:
        eligible = filter_items(cart_items, benefit.target)

    if not eligible:
        return BenefitOutcome(discount=Decimal("0"))

    selected = select_free_items(eligible, benefit.quantity, benefit.selection)
    discount = sum(
        (
            item.product.price * min(item.quantity, benefit.quantity) * benefit.discount_percentage
            / Decimal("100")
            for item in selected
        ),
        Decimal("0"),
    )
    return BenefitOutcome(discount=discount, target_items=selected, eligible_items=eligible)
