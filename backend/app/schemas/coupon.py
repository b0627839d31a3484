"""Coupon schemas."""

from datetime import UTC, datetime
from decimal import Decimal
from typing import Any, Self
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.models.coupon import DiscountType
from app.models.shared import as_utc
from app.schemas.coupon_rule import CouponRuleResponse, reject_explicit_nulls

# Columns that are NOT NULL in the coupons table
_REQUIRED_ON_UPDATE = (
    "code",
    "discount_type",
    "discount_value",
    "min_purchase_amount",
    "is_active",
    "max_applications_per_order",
)


def normalize_code(value: Any) -> Any:
    """Strip and uppercase a code before length checks run."""
    if isinstance(value, str):
        return value.strip().upper()
    return value


def to_utc(value: datetime | None) -> datetime | None:
    """Store validity bounds in UTC; naive values are taken as UTC already."""
    if value is None:
        return None
    return as_utc(value).astimezone(UTC)


def check_validity_window(valid_from: datetime | None, valid_until: datetime | None) -> None:
    if valid_from and valid_until and as_utc(valid_until) < as_utc(valid_from):
        msg = "valid_until must not be earlier than valid_from"
        raise ValueError(msg)


class CouponCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=64)
    description: str | None = None
    discount_type: DiscountType = DiscountType.PERCENTAGE
    discount_value: Decimal = Field(default=Decimal("0"), ge=0)
    min_purchase_amount: Decimal = Field(default=Decimal("0"), ge=0)
    max_discount_amount: Decimal | None = Field(default=None, gt=0)
    usage_limit: int | None = Field(default=None, ge=0)
    valid_from: datetime | None = None
    valid_until: datetime | None = None
    is_active: bool = True
    max_applications_per_order: int = Field(default=1, ge=1)

    @field_validator("code", mode="before")
    @classmethod
    def uppercase_code(cls, v: Any) -> Any:
        return normalize_code(v)

    @field_validator("valid_from", "valid_until")
    @classmethod
    def bounds_in_utc(cls, v: datetime | None) -> datetime | None:
        return to_utc(v)

    @model_validator(mode="after")
    def validate_validity_window(self) -> Self:
        """Validate valid_until does not precede valid_from."""
        check_validity_window(self.valid_from, self.valid_until)
        return self


class CouponUpdate(BaseModel):
    code: str | None = Field(default=None, min_length=1, max_length=64)
    description: str | None = None
    discount_type: DiscountType | None = None
    discount_value: Decimal | None = Field(default=None, ge=0)
    min_purchase_amount: Decimal | None = Field(default=None, ge=0)
    max_discount_amount: Decimal | None = Field(default=None, gt=0)
    usage_limit: int | None = Field(default=None, ge=0)
    valid_from: datetime | None = None
    valid_until: datetime | None = None
    is_active: bool | None = None
    max_applications_per_order: int | None = Field(default=None, ge=1)

    @field_validator("code", mode="before")
    @classmethod
    def uppercase_code(cls, v: Any) -> Any:
        return normalize_code(v)

    @field_validator("valid_from", "valid_until")
    @classmethod
    def bounds_in_utc(cls, v: datetime | None) -> datetime | None:
        return to_utc(v)

    @model_validator(mode="after")
    def validate_fields(self) -> Self:
        """Reject explicit nulls for required columns and an inverted window."""
        reject_explicit_nulls(self, _REQUIRED_ON_UPDATE)
        check_validity_window(self.valid_from, self.valid_until)
        return self


class CouponResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    code: str
    description: str | None = None
    discount_type: str
    discount_value: Decimal
    min_purchase_amount: Decimal
    max_discount_amount: Decimal | None = None
    usage_limit: int | None = None
    used_count: int
    valid_from: datetime | None = None
    valid_until: datetime | None = None
    is_active: bool
    max_applications_per_order: int
    created_at: datetime
    updated_at: datetime


class CouponWithRulesResponse(CouponResponse):
    rules: list[CouponRuleResponse] = Field(default_factory=list)


class CouponAnalyticsResponse(BaseModel):
    """Redemption analytics for a coupon."""

    used_count: int
    usage_limit: int | None = None
    remaining_uses: int | None = None
    orders_applied: int
    total_discount: Decimal
    discount_by_rule: dict[str, Decimal] = Field(default_factory=dict)
