"""CouponRule model for rule-based coupon benefits."""

from enum import Enum

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, func

from app.core.database import Base
from app.models.shared import Money, Percentage, UUIDType, generate_uuid


class SourceType(str, Enum):
    CATEGORY = "category"
    NEW_ARRIVAL = "new_arrival"
    CATEGORY_NEW_ARRIVAL = "category_new_arrival"
    ANY = "any"


class BenefitType(str, Enum):
    FREE_ITEMS = "free_items"
    FIXED_DISCOUNT = "fixed_discount"
    PERCENTAGE_DISCOUNT = "percentage_discount"
    BUNDLE_PRICE = "bundle_price"


class FreeItemSelection(str, Enum):
    CHEAPEST = "cheapest"
    MOST_EXPENSIVE = "most_expensive"
    CUSTOMER_CHOICE = "customer_choice"


class DiscountTargetType(str, Enum):
    SOURCE = "source"
    TARGET = "target"
    CART = "cart"


class CouponRule(Base):
    """A single "buy this, get that" rule attached to a coupon.

    The table keeps every benefit column side by side; which of them matter
    depends on ``benefit_type``. Columns belonging to other benefit types are
    ignored by the evaluator.
    """

    __tablename__ = "coupon_rules"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    coupon_id = Column(
        UUIDType,
        ForeignKey("coupons.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    rule_name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    rule_priority = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)

    # Source condition: what the customer must buy
    source_type = Column(String(30), nullable=False, default=SourceType.ANY.value)
    source_category_id = Column(String(64), nullable=True)
    source_new_arrival_required = Column(Boolean, nullable=True)
    source_min_quantity = Column(Integer, nullable=False, default=1)
    source_max_quantity = Column(Integer, nullable=True)
    source_min_amount = Column(Money, nullable=True)

    benefit_type = Column(String(30), nullable=False)

    # free_items
    target_category_id = Column(String(64), nullable=True)
    target_new_arrival_required = Column(Boolean, nullable=True)
    free_quantity = Column(Integer, nullable=True)
    free_item_selection = Column(String(20), nullable=True)
    free_discount_percentage = Column(Percentage, nullable=True)

    # fixed_discount / percentage_discount
    discount_amount = Column(Money, nullable=True)
    discount_percentage = Column(Percentage, nullable=True)
    discount_target_type = Column(String(20), nullable=True)
    discount_target_category_id = Column(String(64), nullable=True)
    discount_target_new_arrival = Column(Boolean, nullable=True)

    # bundle_price
    bundle_fixed_price = Column(Money, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
