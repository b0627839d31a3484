"""CouponApplication model: audit trail of redeemed coupon discounts."""

from sqlalchemy import JSON, Column, DateTime, ForeignKey, String, Text, func

from app.core.database import Base
from app.models.shared import Money, UUIDType, generate_uuid


class CouponApplication(Base):
    __tablename__ = "coupon_applications"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    coupon_id = Column(
        UUIDType,
        ForeignKey("coupons.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # No FK: rules can be deleted while their history is kept
    rule_id = Column(UUIDType, nullable=True)
    order_id = Column(String(64), nullable=True, index=True)
    user_id = Column(String(64), nullable=True)

    discount_amount = Column(Money, nullable=False, default=0)
    original_amount = Column(Money, nullable=False, default=0)
    final_amount = Column(Money, nullable=False, default=0)

    source_items = Column(JSON, nullable=False, default=list)
    target_items = Column(JSON, nullable=False, default=list)
    rule_description = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
