"""CouponApplication repository for data access."""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.coupon_application import CouponApplication


class CouponApplicationRepository:
    """Repository for CouponApplication model."""

    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        coupon_id: UUID,
        discount_amount: Decimal,
        original_amount: Decimal,
        final_amount: Decimal,
        rule_id: UUID | None = None,
        order_id: str | None = None,
        user_id: str | None = None,
        source_items: list[str] | None = None,
        target_items: list[str] | None = None,
        rule_description: str | None = None,
    ) -> CouponApplication:
        """Record one coupon (or coupon rule) application."""
        application = CouponApplication(
            coupon_id=coupon_id,
            rule_id=rule_id,
            order_id=order_id,
            user_id=user_id,
            discount_amount=discount_amount,
            original_amount=original_amount,
            final_amount=final_amount,
            source_items=source_items or [],
            target_items=target_items or [],
            rule_description=rule_description,
        )
        self.db.add(application)
        self.db.commit()
        self.db.refresh(application)
        return application

    def get_all_by_coupon_id(self, coupon_id: UUID) -> list[CouponApplication]:
        """Get all applications of a coupon, newest first."""
        return (
            self.db.query(CouponApplication)
            .filter(CouponApplication.coupon_id == coupon_id)
            .order_by(CouponApplication.created_at.desc())
            .all()
        )

    def count_orders_by_coupon_id(self, coupon_id: UUID) -> int:
        """Count distinct orders a coupon was applied to."""
        return (
            self.db.query(func.count(func.distinct(CouponApplication.order_id)))
            .filter(CouponApplication.coupon_id == coupon_id)
            .scalar()
            or 0
        )
