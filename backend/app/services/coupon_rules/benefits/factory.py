from collections.abc import Callable

from app.models.coupon_rule import BenefitType
from app.services.coupon_rules.benefits import (
    bundle_price,
    fixed_discount,
    free_items,
    percentage_discount,
)
from app.services.coupon_rules.definitions import BenefitOutcome

# Every calculator takes (benefit, source_items, cart_items)
CalculatorFn = Callable[..., BenefitOutcome]

_CALCULATORS: dict[BenefitType, CalculatorFn] = {
    BenefitType.FREE_ITEMS: free_items.calculate,
    BenefitType.FIXED_DISCOUNT: fixed_discount.calculate,
    BenefitType.PERCENTAGE_DISCOUNT: percentage_discount.calculate,
    BenefitType.BUNDLE_PRICE: bundle_price.calculate,
}


def get_benefit_calculator(benefit_type: BenefitType | None) -> CalculatorFn | None:
    if benefit_type is None:
        return None
    return _CALCULATORS.get(benefit_type)
