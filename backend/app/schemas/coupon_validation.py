"""Schemas for coupon validation and redemption at checkout."""

from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.schemas.coupon import CouponWithRulesResponse, normalize_code


class ProductSnapshot(BaseModel):
    """The product attributes the rule engine looks at."""

    model_config = ConfigDict(frozen=True)

    price: Decimal = Field(..., ge=0)
    category_id: str | None = None
    new_arrival: bool = False


class CartItemWithProduct(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_id: str
    quantity: int = Field(..., ge=1)
    product: ProductSnapshot


class ValidateCouponRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=64)
    subtotal: Decimal = Field(..., ge=0)
    cart_items: list[CartItemWithProduct] | None = None

    @field_validator("code", mode="before")
    @classmethod
    def uppercase_code(cls, v: Any) -> Any:
        return normalize_code(v)


class RedeemCouponRequest(ValidateCouponRequest):
    order_id: str | None = Field(default=None, max_length=64)
    user_id: str | None = Field(default=None, max_length=64)


class AppliedCouponRule(BaseModel):
    rule_id: UUID
    rule_name: str
    rule_description: str = ""
    discount_amount: Decimal
    source_items: list[str] = Field(default_factory=list)
    target_items: list[str] = Field(default_factory=list)
    benefit_type: str
    # Free-item rules only: the pool the free items were picked from, and
    # whether the pick is a placeholder for the customer's own choice.
    eligible_items: list[str] = Field(default_factory=list)
    provisional_selection: bool = False


class CouponBreakdown(BaseModel):
    original_amount: Decimal
    discount_amount: Decimal
    final_amount: Decimal
    applied_rule_count: int
    explanation: str


class CouponValidationResult(BaseModel):
    valid: bool
    message: str
    discount: Decimal | None = None
    coupon: CouponWithRulesResponse | None = None
    applied_rules: list[AppliedCouponRule] = Field(default_factory=list)
    total_savings: Decimal | None = None
    breakdown: CouponBreakdown | None = None


class CouponApplicationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    coupon_id: UUID
    rule_id: UUID | None = None
    order_id: str | None = None
    user_id: str | None = None
    discount_amount: Decimal
    original_amount: Decimal
    final_amount: Decimal
    source_items: list[str]
    target_items: list[str]
    rule_description: str | None = None
    created_at: datetime


class RedeemCouponResponse(BaseModel):
    result: CouponValidationResult
    applications: list[CouponApplicationResponse] = Field(default_factory=list)
