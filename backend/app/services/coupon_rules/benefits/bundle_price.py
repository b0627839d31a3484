from decimal import Decimal

from app.schemas.coupon_validation import CartItemWithProduct
from app.services.coupon_rules.definitions import BenefitOutcome, BundlePrice
from app.services.coupon_rules.matching import line_total


def calculate(
    benefit: BundlePrice,
    source_items: list[CartItemWithProduct],
    cart_items: list[CartItemWithProduct],
) -> BenefitOutcome:
    discount = max(Decimal("0"), line_total(source_items) - benefit.price)
    return BenefitOutcome(discount=discount, target_items=list(source_items))
