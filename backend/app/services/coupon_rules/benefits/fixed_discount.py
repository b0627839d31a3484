from app.schemas.coupon_validation import CartItemWithProduct
from app.services.coupon_rules.definitions import BenefitOutcome, FixedDiscount
from app.services.coupon_rules.matching import find_discount_targets, line_total


def calculate(
    benefit: FixedDiscount,
    source_items: list[CartItemWithProduct],
    cart_items: list[CartItemWithProduct],
) -> BenefitOutcome:
    targets = find_discount_targets(benefit.target_type, benefit.target, source_items, cart_items)
    discount = benefit.amount
    # Uncapped unless configured: the flat amount may exceed what the targets cost
    if benefit.cap_to_targets:
        discount = min(discount, line_total(targets))
    return BenefitOutcome(discount=discount, target_items=targets)
