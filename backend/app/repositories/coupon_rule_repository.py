"""CouponRule repository for data access."""

from enum import Enum
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from app.models.coupon_rule import CouponRule
from app.schemas.coupon_rule import CouponRuleCreate, CouponRuleUpdate


def _column_values(values: dict[str, Any]) -> dict[str, Any]:
    """Store enum members by their plain string value."""
    return {key: v.value if isinstance(v, Enum) else v for key, v in values.items()}


class CouponRuleRepository:
    """Repository for CouponRule model."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_coupon_id(self, coupon_id: UUID) -> list[CouponRule]:
        """Get all rules for a coupon, highest priority first."""
        return (
            self.db.query(CouponRule)
            .filter(CouponRule.coupon_id == coupon_id)
            .order_by(CouponRule.rule_priority.desc(), CouponRule.created_at.asc())
            .all()
        )

    def get_by_id(self, rule_id: UUID) -> CouponRule | None:
        """Get a rule by ID."""
        return self.db.query(CouponRule).filter(CouponRule.id == rule_id).first()

    def create(self, coupon_id: UUID, data: CouponRuleCreate) -> CouponRule:
        """Create a new rule for a coupon."""
        rule = CouponRule(coupon_id=coupon_id, **_column_values(data.model_dump()))
        self.db.add(rule)
        self.db.commit()
        self.db.refresh(rule)
        return rule

    def update(self, rule_id: UUID, data: CouponRuleUpdate) -> CouponRule | None:
        """Update a rule by ID."""
        rule = self.get_by_id(rule_id)
        if not rule:
            return None

        for key, value in _column_values(data.model_dump(exclude_unset=True)).items():
            setattr(rule, key, value)

        self.db.commit()
        self.db.refresh(rule)
        return rule

    def delete(self, rule_id: UUID) -> bool:
        """Delete a rule by ID."""
        rule = self.get_by_id(rule_id)
        if not rule:
            return False

        self.db.delete(rule)
        self.db.commit()
        return True
