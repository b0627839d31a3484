"""Admin-side checks for coupon rule definitions.

The evaluator accepts any stored rule and quietly falls back to defaults for
missing fields. This module reports those cases up front so an admin sees
them before customers do. It never blocks saving a rule.
"""

from decimal import Decimal
from typing import Any

from app.core.config import settings
from app.models.coupon_rule import BenefitType, DiscountTargetType, FreeItemSelection, SourceType

_BENEFIT_FIELDS: dict[BenefitType, tuple[str, ...]] = {
    BenefitType.FREE_ITEMS: (
        "target_category_id",
        "target_new_arrival_required",
        "free_quantity",
        "free_item_selection",
        "free_discount_percentage",
    ),
    BenefitType.FIXED_DISCOUNT: (
        "discount_amount",
        "discount_target_type",
        "discount_target_category_id",
        "discount_target_new_arrival",
    ),
    BenefitType.PERCENTAGE_DISCOUNT: (
        "discount_percentage",
        "discount_target_type",
        "discount_target_category_id",
        "discount_target_new_arrival",
    ),
    BenefitType.BUNDLE_PRICE: ("bundle_fixed_price",),
}

_HUNDRED = Decimal("100")


def _value(rule: Any, name: str) -> Any:
    value = getattr(rule, name, None)
    return value.value if hasattr(value, "value") else value


def _lint_source(rule: Any) -> list[str]:
    warnings = []
    source_type = _value(rule, "source_type")
    needs_category = (SourceType.CATEGORY.value, SourceType.CATEGORY_NEW_ARRIVAL.value)
    needs_flag = (SourceType.NEW_ARRIVAL.value, SourceType.CATEGORY_NEW_ARRIVAL.value)

    if source_type in needs_category and not _value(rule, "source_category_id"):
        warnings.append(
            f"source_type '{source_type}' without source_category_id only matches "
            "uncategorized products"
        )
    if source_type in needs_flag and _value(rule, "source_new_arrival_required") is None:
        warnings.append(
            f"source_type '{source_type}' without source_new_arrival_required "
            "matches new and older products alike"
        )

    min_quantity = _value(rule, "source_min_quantity") or 1
    max_quantity = _value(rule, "source_max_quantity")
    if max_quantity is not None and max_quantity < min_quantity:
        warnings.append(
            f"source_max_quantity ({max_quantity}) is below source_min_quantity "
            f"({min_quantity}); the rule can never apply"
        )
    return warnings


def _lint_benefit(rule: Any, benefit_type: BenefitType) -> list[str]:
    warnings = []
    if benefit_type is BenefitType.FREE_ITEMS:
        if not _value(rule, "free_quantity"):
            warnings.append("free_quantity is not set; 1 item will be free")
        percentage = _value(rule, "free_discount_percentage")
        if percentage is not None and Decimal(str(percentage)) > _HUNDRED:
            warnings.append("free_discount_percentage above 100 discounts more than the item costs")
        if _value(rule, "free_item_selection") == FreeItemSelection.CUSTOMER_CHOICE.value:
            warnings.append(
                "customer_choice picks the first eligible items in cart order until "
                "the customer chooses"
            )

    elif benefit_type is BenefitType.FIXED_DISCOUNT:
        if not _value(rule, "discount_amount"):
            warnings.append("discount_amount is not set; the rule grants no discount")
        elif not settings.COUPON_CAP_FIXED_RULE_DISCOUNT:
            warnings.append(
                "fixed discounts are not capped at the value of their target items"
            )

    elif benefit_type is BenefitType.PERCENTAGE_DISCOUNT:
        percentage = _value(rule, "discount_percentage")
        if not percentage:
            warnings.append("discount_percentage is not set; the rule grants no discount")
        elif Decimal(str(percentage)) > _HUNDRED:
            warnings.append("discount_percentage above 100 discounts more than the items cost")

    elif benefit_type is BenefitType.BUNDLE_PRICE:
        if _value(rule, "bundle_fixed_price") is None:
            warnings.append("bundle_fixed_price is not set; matching items become free")

    if benefit_type in (BenefitType.FIXED_DISCOUNT, BenefitType.PERCENTAGE_DISCOUNT):
        target_type = _value(rule, "discount_target_type")
        if target_type is None:
            warnings.append("discount_target_type is not set; the source items are discounted")
        elif (
            target_type == DiscountTargetType.TARGET.value
            and not _value(rule, "discount_target_category_id")
            and _value(rule, "discount_target_new_arrival") is None
        ):
            warnings.append(
                "discount_target_type 'target' without a target filter discounts the whole cart"
            )
    return warnings


def lint_coupon_rule(rule: Any) -> list[str]:
    """List likely misconfigurations of a rule.

    Args:
        rule: A stored ``CouponRule`` or a ``CouponRuleCreate`` payload.

    Returns:
        Human-readable warnings, empty when nothing looks off.
    """
    try:
        benefit_type = BenefitType(_value(rule, "benefit_type"))
    except ValueError:
        return [f"unknown benefit_type '{_value(rule, 'benefit_type')}'; the rule grants nothing"]

    warnings = _lint_source(rule) + _lint_benefit(rule, benefit_type)

    relevant = set(_BENEFIT_FIELDS[benefit_type])
    ignored = [
        name
        for fields in _BENEFIT_FIELDS.values()
        for name in fields
        if name not in relevant and _value(rule, name) is not None
    ]
    for name in dict.fromkeys(ignored):
        warnings.append(f"{name} is ignored for benefit_type '{benefit_type.value}'")
    return warnings
