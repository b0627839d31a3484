from app.schemas.coupon import (
    CouponAnalyticsResponse,
    CouponCreate,
    CouponResponse,
    CouponUpdate,
    CouponWithRulesResponse,
)
from app.schemas.coupon_rule import (
    CouponRuleCreate,
    CouponRuleLintResponse,
    CouponRuleResponse,
    CouponRuleUpdate,
)
from app.schemas.coupon_validation import (
    AppliedCouponRule,
    CartItemWithProduct,
    CouponApplicationResponse,
    CouponBreakdown,
    CouponValidationResult,
    ProductSnapshot,
    RedeemCouponRequest,
    RedeemCouponResponse,
    ValidateCouponRequest,
)

__all__ = [
    "AppliedCouponRule",
    "CartItemWithProduct",
    "CouponAnalyticsResponse",
    "CouponApplicationResponse",
    "CouponBreakdown",
    "CouponCreate",
    "CouponResponse",
    "CouponRuleCreate",
    "CouponRuleLintResponse",
    "CouponRuleResponse",
    "CouponRuleUpdate",
    "CouponUpdate",
    "CouponValidationResult",
    "CouponWithRulesResponse",
    "ProductSnapshot",
    "RedeemCouponRequest",
    "RedeemCouponResponse",
    "ValidateCouponRequest",
]
