"""Coupon API endpoints: admin management, checkout validation and redemption."""

from decimal import Decimal
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.models.coupon import Coupon
from app.models.coupon_rule import CouponRule
from app.models.shared import utc_now
from app.repositories.coupon_application_repository import CouponApplicationRepository
from app.repositories.coupon_repository import CouponRepository
from app.repositories.coupon_rule_repository import CouponRuleRepository
from app.schemas.coupon import (
    CouponAnalyticsResponse,
    CouponCreate,
    CouponResponse,
    CouponUpdate,
    CouponWithRulesResponse,
    check_validity_window,
)
from app.schemas.coupon_rule import CouponRuleCreate, CouponRuleResponse
from app.schemas.coupon_validation import (
    CouponApplicationResponse,
    CouponValidationResult,
    RedeemCouponRequest,
    RedeemCouponResponse,
    ValidateCouponRequest,
)
from app.services.coupon_service import (
    CouponRedemptionError,
    CouponValidationService,
    coupon_with_rules,
)

router = APIRouter()


def _get_coupon_or_404(repo: CouponRepository, coupon_id: UUID) -> Coupon:
    coupon = repo.get_by_id(coupon_id)
    if not coupon:
        raise HTTPException(status_code=404, detail="Coupon not found")
    return coupon


@router.post(
    "/",
    response_model=CouponResponse,
    status_code=201,
    summary="Create coupon",
    responses={
        409: {"description": "Coupon with this code already exists"},
        422: {"description": "Validation error"},
    },
)
async def create_coupon(data: CouponCreate, db: Session = Depends(get_db)) -> Coupon:
    """Create a new coupon. The code is stored uppercase."""
    repo = CouponRepository(db)
    if repo.get_by_code(data.code):
        raise HTTPException(status_code=409, detail="Coupon with this code already exists")
    return repo.create(data)


@router.get("/", response_model=list[CouponResponse], summary="List coupons")
async def list_coupons(
    response: Response,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    db: Session = Depends(get_db),
) -> list[Coupon]:
    """List all coupons, newest first."""
    repo = CouponRepository(db)
    response.headers["X-Total-Count"] = str(repo.count())
    return repo.get_all(skip=skip, limit=limit)


@router.get("/active", response_model=list[CouponResponse], summary="List active coupons")
async def list_active_coupons(db: Session = Depends(get_db)) -> list[Coupon]:
    """List coupons customers can use right now."""
    return CouponRepository(db).get_active(utc_now())


@router.post(
    "/validate",
    response_model=CouponValidationResult,
    summary="Validate coupon",
)
async def validate_coupon(
    data: ValidateCouponRequest,
    db: Session = Depends(get_db),
) -> CouponValidationResult:
    """Check a coupon against a cart and return the discount it would give.

    Always answers 200; ``valid`` and ``message`` tell the customer why a
    coupon does not apply.
    """
    service = CouponValidationService(db)
    return service.validate_coupon(data.code, data.subtotal, data.cart_items)


@router.post(
    "/redeem",
    response_model=RedeemCouponResponse,
    status_code=201,
    summary="Redeem coupon",
    responses={409: {"description": "Coupon is not valid for this order"}},
)
async def redeem_coupon(
    data: RedeemCouponRequest,
    db: Session = Depends(get_db),
) -> RedeemCouponResponse:
    """Count a coupon use for a completed order and log the discount given."""
    service = CouponValidationService(db)
    try:
        redemption = service.redeem_coupon(
            data.code,
            data.subtotal,
            data.cart_items,
            order_id=data.order_id,
            user_id=data.user_id,
        )
    except CouponRedemptionError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e

    return RedeemCouponResponse(
        result=redemption.result,
        applications=[
            CouponApplicationResponse.model_validate(a) for a in redemption.applications
        ],
    )


@router.get(
    "/{coupon_id}",
    response_model=CouponWithRulesResponse,
    summary="Get coupon with rules",
    responses={404: {"description": "Coupon not found"}},
)
async def get_coupon(coupon_id: UUID, db: Session = Depends(get_db)) -> CouponWithRulesResponse:
    """Get a coupon together with its rules, highest priority first."""
    coupon = _get_coupon_or_404(CouponRepository(db), coupon_id)
    return coupon_with_rules(coupon, CouponRuleRepository(db).get_by_coupon_id(coupon_id))


@router.put(
    "/{coupon_id}",
    response_model=CouponResponse,
    summary="Update coupon",
    responses={
        404: {"description": "Coupon not found"},
        409: {"description": "Coupon with this code already exists"},
        422: {"description": "Validation error"},
    },
)
async def update_coupon(
    coupon_id: UUID,
    data: CouponUpdate,
    db: Session = Depends(get_db),
) -> Coupon:
    """Update a coupon."""
    repo = CouponRepository(db)
    if data.code:
        existing = repo.get_by_code(data.code)
        if existing and existing.id != coupon_id:
            raise HTTPException(status_code=409, detail="Coupon with this code already exists")
    coupon = _get_coupon_or_404(repo, coupon_id)
    fields = data.model_fields_set
    try:
        check_validity_window(
            data.valid_from if "valid_from" in fields else coupon.valid_from,
            data.valid_until if "valid_until" in fields else coupon.valid_until,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    return repo.update(coupon_id, data)  # type: ignore[return-value]


@router.delete(
    "/{coupon_id}",
    status_code=204,
    summary="Delete coupon",
    responses={404: {"description": "Coupon not found"}},
)
async def delete_coupon(coupon_id: UUID, db: Session = Depends(get_db)) -> None:
    """Delete a coupon and all of its rules."""
    if not CouponRepository(db).delete(coupon_id):
        raise HTTPException(status_code=404, detail="Coupon not found")


@router.get(
    "/{coupon_id}/rules",
    response_model=list[CouponRuleResponse],
    summary="List coupon rules",
    responses={404: {"description": "Coupon not found"}},
)
async def list_coupon_rules(coupon_id: UUID, db: Session = Depends(get_db)) -> list[CouponRule]:
    """List a coupon's rules, highest priority first."""
    _get_coupon_or_404(CouponRepository(db), coupon_id)
    return CouponRuleRepository(db).get_by_coupon_id(coupon_id)


@router.post(
    "/{coupon_id}/rules",
    response_model=CouponRuleResponse,
    status_code=201,
    summary="Create coupon rule",
    responses={
        404: {"description": "Coupon not found"},
        422: {"description": "Validation error"},
    },
)
async def create_coupon_rule(
    coupon_id: UUID,
    data: CouponRuleCreate,
    db: Session = Depends(get_db),
) -> CouponRule:
    """Attach a new rule to a coupon."""
    _get_coupon_or_404(CouponRepository(db), coupon_id)
    return CouponRuleRepository(db).create(coupon_id, data)


@router.get(
    "/{coupon_id}/analytics",
    response_model=CouponAnalyticsResponse,
    summary="Get coupon analytics",
    responses={404: {"description": "Coupon not found"}},
)
async def get_coupon_analytics(
    coupon_id: UUID,
    db: Session = Depends(get_db),
) -> CouponAnalyticsResponse:
    """Summarize redemptions of a coupon from its application log."""
    coupon = _get_coupon_or_404(CouponRepository(db), coupon_id)

    application_repo = CouponApplicationRepository(db)
    applications = application_repo.get_all_by_coupon_id(coupon_id)

    total_discount = Decimal("0")
    discount_by_rule: dict[str, Decimal] = {}
    for application in applications:
        amount = Decimal(str(application.discount_amount or 0))
        total_discount += amount
        if application.rule_id is not None:
            key = str(application.rule_id)
            discount_by_rule[key] = discount_by_rule.get(key, Decimal("0")) + amount

    remaining_uses: int | None = None
    if coupon.usage_limit is not None:
        remaining_uses = max(0, coupon.usage_limit - coupon.used_count)  # type: ignore[assignment]

    return CouponAnalyticsResponse(
        used_count=coupon.used_count,  # type: ignore[arg-type]
        usage_limit=coupon.usage_limit,  # type: ignore[arg-type]
        remaining_uses=remaining_uses,
        orders_applied=application_repo.count_orders_by_coupon_id(coupon_id),
        total_discount=total_discount,
        discount_by_rule=discount_by_rule,
    )
