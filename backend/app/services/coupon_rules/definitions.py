"""Typed, read-only view of a stored coupon rule.

The ``coupon_rules`` table stores every benefit column side by side. The
evaluator never reads those columns directly: ``read_rule`` turns a row into
a ``RuleDefinition`` whose ``benefit`` is exactly one of ``FreeItems``,
``FixedDiscount``, ``PercentageDiscount`` or ``BundlePrice``, with defaults
applied. Unknown or missing enum values never raise; they degrade to a rule
that matches nothing or grants nothing.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, TypeVar
from uuid import UUID

from app.models.coupon_rule import (
    BenefitType,
    DiscountTargetType,
    FreeItemSelection,
    SourceType,
)

if TYPE_CHECKING:
    from app.models.coupon_rule import CouponRule
    from app.schemas.coupon_validation import CartItemWithProduct

E = TypeVar("E", bound=Enum)

DEFAULT_FREE_QUANTITY = 1
DEFAULT_FREE_DISCOUNT_PERCENTAGE = Decimal("100")


class NewArrivalRequirement(str, Enum):
    """Three-way replacement for a nullable "must be a new arrival" flag."""

    REQUIRE_TRUE = "require_true"
    REQUIRE_FALSE = "require_false"
    ANY = "any"

    @classmethod
    def from_flag(cls, flag: bool | None) -> NewArrivalRequirement:
        if flag is None:
            return cls.ANY
        return cls.REQUIRE_TRUE if flag else cls.REQUIRE_FALSE

    def accepts(self, new_arrival: bool) -> bool:
        if self is NewArrivalRequirement.ANY:
            return True
        return new_arrival == (self is NewArrivalRequirement.REQUIRE_TRUE)


@dataclass(frozen=True)
class ItemFilter:
    """Category / new-arrival filter; a None category means any category."""

    category_id: str | None = None
    new_arrival: NewArrivalRequirement = NewArrivalRequirement.ANY

    @property
    def is_unrestricted(self) -> bool:
        return self.category_id is None and self.new_arrival is NewArrivalRequirement.ANY


@dataclass(frozen=True)
class SourceCondition:
    source_type: SourceType | None
    category_id: str | None
    new_arrival: NewArrivalRequirement
    min_quantity: int
    max_quantity: int | None
    min_amount: Decimal | None


@dataclass(frozen=True)
class FreeItems:
    target: ItemFilter
    quantity: int = DEFAULT_FREE_QUANTITY
    selection: FreeItemSelection = FreeItemSelection.CHEAPEST
    discount_percentage: Decimal = DEFAULT_FREE_DISCOUNT_PERCENTAGE


@dataclass(frozen=True)
class FixedDiscount:
    amount: Decimal
    target_type: DiscountTargetType
    target: ItemFilter
    cap_to_targets: bool = False


@dataclass(frozen=True)
class PercentageDiscount:
    percentage: Decimal
    target_type: DiscountTargetType
    target: ItemFilter


@dataclass(frozen=True)
class BundlePrice:
    price: Decimal


Benefit = FreeItems | FixedDiscount | PercentageDiscount | BundlePrice


@dataclass(frozen=True)
class RuleDefinition:
    rule_id: UUID
    name: str
    description: str
    priority: int
    source: SourceCondition
    benefit_type: BenefitType | None
    benefit: Benefit | None


@dataclass
class BenefitOutcome:
    """What a benefit calculator grants for one rule."""

    discount: Decimal
    target_items: list[CartItemWithProduct] = field(default_factory=list)
    # Pool the free items were chosen from (free_items benefits only)
    eligible_items: list[CartItemWithProduct] = field(default_factory=list)


def _enum_or_none(enum_cls: type[E], value: object) -> E | None:
    try:
        return enum_cls(value)
    except ValueError:
        return None


def _decimal(value: object) -> Decimal:
    if value is None:
        return Decimal("0")
    return Decimal(str(value))


def _read_benefit(
    rule: CouponRule,
    benefit_type: BenefitType | None,
    cap_fixed_discount: bool,
) -> Benefit | None:
    discount_target = ItemFilter(
        category_id=rule.discount_target_category_id or None,  # type: ignore[arg-type]
        new_arrival=NewArrivalRequirement.from_flag(rule.discount_target_new_arrival),  # type: ignore[arg-type]
    )
    target_type = (
        _enum_or_none(DiscountTargetType, rule.discount_target_type) or DiscountTargetType.SOURCE
    )

    if benefit_type is BenefitType.FREE_ITEMS:
        return FreeItems(
            target=ItemFilter(
                category_id=rule.target_category_id or None,  # type: ignore[arg-type]
                new_arrival=NewArrivalRequirement.from_flag(rule.target_new_arrival_required),  # type: ignore[arg-type]
            ),
            # Zero is treated like "not set", same as a missing value
            quantity=rule.free_quantity or DEFAULT_FREE_QUANTITY,  # type: ignore[arg-type]
            selection=(
                _enum_or_none(FreeItemSelection, rule.free_item_selection)
                or FreeItemSelection.CHEAPEST
            ),
            discount_percentage=(
                _decimal(rule.free_discount_percentage)
                if rule.free_discount_percentage
                else DEFAULT_FREE_DISCOUNT_PERCENTAGE
            ),
        )
    if benefit_type is BenefitType.FIXED_DISCOUNT:
        return FixedDiscount(
            amount=_decimal(rule.discount_amount),
            target_type=target_type,
            target=discount_target,
            cap_to_targets=cap_fixed_discount,
        )
    if benefit_type is BenefitType.PERCENTAGE_DISCOUNT:
        return PercentageDiscount(
            percentage=_decimal(rule.discount_percentage),
            target_type=target_type,
            target=discount_target,
        )
    if benefit_type is BenefitType.BUNDLE_PRICE:
        return BundlePrice(price=_decimal(rule.bundle_fixed_price))
    return None


def read_rule(rule: CouponRule, cap_fixed_discount: bool = False) -> RuleDefinition:
    """Build the evaluator's view of a stored rule.

    Args:
        rule: The stored rule row.
        cap_fixed_discount: Cap ``fixed_discount`` benefits at the value of
            their target items.
    """
    benefit_type = _enum_or_none(BenefitType, rule.benefit_type)
    source = SourceCondition(
        source_type=_enum_or_none(SourceType, rule.source_type),
        category_id=rule.source_category_id,  # type: ignore[arg-type]
        new_arrival=NewArrivalRequirement.from_flag(rule.source_new_arrival_required),  # type: ignore[arg-type]
        min_quantity=rule.source_min_quantity if rule.source_min_quantity is not None else 1,  # type: ignore[arg-type]
        max_quantity=rule.source_max_quantity or None,  # type: ignore[arg-type]
        min_amount=(
            _decimal(rule.source_min_amount) if rule.source_min_amount else None
        ),
    )
    return RuleDefinition(
        rule_id=rule.id,  # type: ignore[arg-type]
        name=rule.rule_name,  # type: ignore[arg-type]
        description=rule.description or "",  # type: ignore[arg-type]
        priority=rule.rule_priority or 0,  # type: ignore[arg-type]
        source=source,
        benefit_type=benefit_type,
        benefit=_read_benefit(rule, benefit_type, cap_fixed_discount),
    )
