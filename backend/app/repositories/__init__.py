from app.repositories.coupon_application_repository import CouponApplicationRepository
from app.repositories.coupon_repository import CouponRepository
from app.repositories.coupon_rule_repository import CouponRuleRepository

__all__ = [
    "CouponApplicationRepository",
    "CouponRepository",
    "CouponRuleRepository",
]
