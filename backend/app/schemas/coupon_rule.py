"""CouponRule schemas.

Create/update payloads stay permissive on purpose: any combination of
benefit columns can be stored. Use ``lint_coupon_rule`` to report
combinations that will not do what an admin expects.
"""

from datetime import datetime
from decimal import Decimal
from typing import Self
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.models.coupon_rule import (
    BenefitType,
    DiscountTargetType,
    FreeItemSelection,
    SourceType,
)


def reject_explicit_nulls(model: BaseModel, names: tuple[str, ...]) -> None:
    """Raise if any NOT NULL column was sent as an explicit null."""
    nulled = [
        name for name in names if name in model.model_fields_set and getattr(model, name) is None
    ]
    if nulled:
        msg = f"{', '.join(nulled)} cannot be null"
        raise ValueError(msg)


class CouponRuleCreate(BaseModel):
    rule_name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    rule_priority: int = 0
    is_active: bool = True

    source_type: SourceType = SourceType.ANY
    source_category_id: str | None = Field(default=None, max_length=64)
    source_new_arrival_required: bool | None = None
    source_min_quantity: int = Field(default=1, ge=1)
    source_max_quantity: int | None = Field(default=None, ge=1)
    source_min_amount: Decimal | None = Field(default=None, ge=0)

    benefit_type: BenefitType

    target_category_id: str | None = Field(default=None, max_length=64)
    target_new_arrival_required: bool | None = None
    free_quantity: int | None = Field(default=None, ge=0)
    free_item_selection: FreeItemSelection | None = None
    free_discount_percentage: Decimal | None = Field(default=None, ge=0)

    discount_amount: Decimal | None = Field(default=None, ge=0)
    discount_percentage: Decimal | None = Field(default=None, ge=0)
    discount_target_type: DiscountTargetType | None = None
    discount_target_category_id: str | None = Field(default=None, max_length=64)
    discount_target_new_arrival: bool | None = None

    bundle_fixed_price: Decimal | None = Field(default=None, ge=0)


class CouponRuleUpdate(BaseModel):
    rule_name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    rule_priority: int | None = None
    is_active: bool | None = None

    source_type: SourceType | None = None
    source_category_id: str | None = Field(default=None, max_length=64)
    source_new_arrival_required: bool | None = None
    source_min_quantity: int | None = Field(default=None, ge=1)
    source_max_quantity: int | None = Field(default=None, ge=1)
    source_min_amount: Decimal | None = Field(default=None, ge=0)

    benefit_type: BenefitType | None = None

    target_category_id: str | None = Field(default=None, max_length=64)
    target_new_arrival_required: bool | None = None
    free_quantity: int | None = Field(default=None, ge=0)
    free_item_selection: FreeItemSelection | None = None
    free_discount_percentage: Decimal | None = Field(default=None, ge=0)

    discount_amount: Decimal | None = Field(default=None, ge=0)
    discount_percentage: Decimal | None = Field(default=None, ge=0)
    discount_target_type: DiscountTargetType | None = None
    discount_target_category_id: str | None = Field(default=None, max_length=64)
    discount_target_new_arrival: bool | None = None

    bundle_fixed_price: Decimal | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def validate_required_fields(self) -> Self:
        reject_explicit_nulls(
            self,
            (
                "rule_name",
                "rule_priority",
                "is_active",
                "source_type",
                "source_min_quantity",
                "benefit_type",
            ),
        )
        return self


class CouponRuleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    coupon_id: UUID
    rule_name: str
    description: str | None = None
    rule_priority: int
    is_active: bool

    source_type: str
    source_category_id: str | None = None
    source_new_arrival_required: bool | None = None
    source_min_quantity: int
    source_max_quantity: int | None = None
    source_min_amount: Decimal | None = None

    benefit_type: str

    target_category_id: str | None = None
    target_new_arrival_required: bool | None = None
    free_quantity: int | None = None
    free_item_selection: str | None = None
    free_discount_percentage: Decimal | None = None

    discount_amount: Decimal | None = None
    discount_percentage: Decimal | None = None
    discount_target_type: str | None = None
    discount_target_category_id: str | None = None
    discount_target_new_arrival: bool | None = None

    bundle_fixed_price: Decimal | None = None

    created_at: datetime
    updated_at: datetime


class CouponRuleLintResponse(BaseModel):
    warnings: list[str]
