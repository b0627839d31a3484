"""Coupon repository for data access."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import func, or_, update
from sqlalchemy.orm import Session

from app.models.coupon import Coupon
from app.schemas.coupon import CouponCreate, CouponUpdate


class CouponRepository:
    """Repository for Coupon model."""

    def __init__(self, db: Session):
        self.db = db

    def get_all(self, skip: int = 0, limit: int = 100) -> list[Coupon]:
        """Get all coupons, newest first."""
        return (
            self.db.query(Coupon)
            .order_by(Coupon.created_at.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def count(self) -> int:
        return self.db.query(func.count(Coupon.id)).scalar() or 0

    def get_active(self, now: datetime) -> list[Coupon]:
        """Get coupons that are switched on and inside their validity window."""
        return (
            self.db.query(Coupon)
            .filter(
                Coupon.is_active.is_(True),
                or_(Coupon.valid_from.is_(None), Coupon.valid_from <= now),
                or_(Coupon.valid_until.is_(None), Coupon.valid_until >= now),
            )
            .order_by(Coupon.created_at.desc())
            .all()
        )

    def get_by_id(self, coupon_id: UUID) -> Coupon | None:
        """Get a coupon by ID."""
        return self.db.query(Coupon).filter(Coupon.id == coupon_id).first()

    def get_by_code(self, code: str) -> Coupon | None:
        """Get a coupon by code, case-insensitively."""
        return self.db.query(Coupon).filter(Coupon.code == code.strip().upper()).first()

    def create(self, data: CouponCreate) -> Coupon:
        """Create a new coupon."""
        coupon = Coupon(
            code=data.code.upper(),
            description=data.description,
            discount_type=data.discount_type.value,
            discount_value=data.discount_value,
            min_purchase_amount=data.min_purchase_amount,
            max_discount_amount=data.max_discount_amount,
            usage_limit=data.usage_limit,
            used_count=0,
            valid_from=data.valid_from,
            valid_until=data.valid_until,
            is_active=data.is_active,
            max_applications_per_order=data.max_applications_per_order,
        )
        self.db.add(coupon)
        self.db.commit()
        self.db.refresh(coupon)
        return coupon

    def update(self, coupon_id: UUID, data: CouponUpdate) -> Coupon | None:
        """Update a coupon by ID."""
        coupon = self.get_by_id(coupon_id)
        if not coupon:
            return None

        update_data = data.model_dump(exclude_unset=True)

        if update_data.get("code"):
            update_data["code"] = update_data["code"].upper()
        if update_data.get("discount_type"):
            update_data["discount_type"] = update_data["discount_type"].value

        for key, value in update_data.items():
            setattr(coupon, key, value)

        self.db.commit()
        self.db.refresh(coupon)
        return coupon

    def delete(self, coupon_id: UUID) -> bool:
        """Delete a coupon; its rules and application log go with it (ON DELETE CASCADE)."""
        coupon = self.get_by_id(coupon_id)
        if not coupon:
            return False

        self.db.delete(coupon)
        self.db.commit()
        return True

    def increment_usage(self, code: str) -> bool:
        """Count one redemption, unless the coupon's usage limit is already reached.

        Runs as a single conditional UPDATE so two checkouts racing for the
        last use cannot both succeed.

        Returns:
            True if the counter was incremented, False if the coupon does not
            exist or has no uses left.
        """
        result = self.db.execute(
            update(Coupon)
            .where(
                Coupon.code == code.strip().upper(),
                or_(Coupon.usage_limit.is_(None), Coupon.used_count < Coupon.usage_limit),
            )
            .values(used_count=Coupon.used_count + 1)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        return result.rowcount == 1  # type: ignore[attr-defined]
