from app.models.coupon import Coupon, DiscountType
from app.models.coupon_application import CouponApplication
from app.models.coupon_rule import (
    BenefitType,
    CouponRule,
    DiscountTargetType,
    FreeItemSelection,
    SourceType,
)

__all__ = [
    "BenefitType",
    "Coupon",
    "CouponApplication",
    "CouponRule",
    "DiscountTargetType",
    "DiscountType",
    "FreeItemSelection",
    "SourceType",
]
