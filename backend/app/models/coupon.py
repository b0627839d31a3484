"""Coupon model for storefront discounts."""

from enum import Enum

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text, func

from app.core.database import Base
from app.models.shared import Money, UUIDType, generate_uuid


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class Coupon(Base):
    """Coupon redeemable at checkout.

    A coupon without rules is a "simple" coupon: ``discount_type`` and
    ``discount_value`` alone decide the discount. Codes are stored uppercase.
    """

    __tablename__ = "coupons"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    code = Column(String(64), unique=True, index=True, nullable=False)
    description = Column(Text, nullable=True)

    discount_type = Column(String(20), nullable=False, default=DiscountType.PERCENTAGE.value)
    discount_value = Column(Money, nullable=False, default=0)
    min_purchase_amount = Column(Money, nullable=False, default=0)
    max_discount_amount = Column(Money, nullable=True)

    usage_limit = Column(Integer, nullable=True)
    used_count = Column(Integer, nullable=False, default=0)

    valid_from = Column(DateTime(timezone=True), nullable=True)
    valid_until = Column(DateTime(timezone=True), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)

    max_applications_per_order = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
