"""Coupon rule API endpoints addressed by rule ID."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.models.coupon_rule import CouponRule
from app.repositories.coupon_rule_repository import CouponRuleRepository
from app.schemas.coupon_rule import (
    CouponRuleCreate,
    CouponRuleLintResponse,
    CouponRuleResponse,
    CouponRuleUpdate,
)
from app.services.coupon_rule_lint import lint_coupon_rule

router = APIRouter()


@router.post("/lint", response_model=CouponRuleLintResponse, summary="Lint coupon rule")
async def lint_rule(data: CouponRuleCreate) -> CouponRuleLintResponse:
    """Report likely misconfigurations of a rule definition without saving it."""
    return CouponRuleLintResponse(warnings=lint_coupon_rule(data))


@router.put(
    "/{rule_id}",
    response_model=CouponRuleResponse,
    summary="Update coupon rule",
    responses={
        404: {"description": "Coupon rule not found"},
        422: {"description": "Validation error"},
    },
)
async def update_rule(
    rule_id: UUID,
    data: CouponRuleUpdate,
    db: Session = Depends(get_db),
) -> CouponRule:
    """Update a coupon rule."""
    rule = CouponRuleRepository(db).update(rule_id, data)
    if not rule:
        raise HTTPException(status_code=404, detail="Coupon rule not found")
    return rule


@router.delete(
    "/{rule_id}",
    status_code=204,
    summary="Delete coupon rule",
    responses={404: {"description": "Coupon rule not found"}},
)
async def delete_rule(rule_id: UUID, db: Session = Depends(get_db)) -> None:
    """Delete a coupon rule."""
    if not CouponRuleRepository(db).delete(rule_id):
        raise HTTPException(status_code=404, detail="Coupon rule not found")
