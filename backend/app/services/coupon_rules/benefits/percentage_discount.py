from decimal import Decimal

from app.schemas.coupon_validation import CartItemWithProduct
from app.services.coupon_rules.definitions import BenefitOutcome, PercentageDiscount
from app.services.coupon_rules.matching import find_discount_targets, line_total


def calculate(
    benefit: PercentageDiscount,
    source_items: list[CartItemWithProduct],
    cart_items: list[CartItemWithProduct],
) -> BenefitOutcome:
    targets = find_discount_targets(benefit.target_type, benefit.target, source_items, cart_items)
    discount = line_total(targets) * benefit.percentage / Decimal("100")
    return BenefitOutcome(discount=discount, target_items=targets)
