"""Coupon validation, discount calculation and redemption for checkout."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.money import format_amount, round_money
from app.models.coupon import Coupon, DiscountType
from app.models.coupon_application import CouponApplication
from app.models.coupon_rule import CouponRule, FreeItemSelection
from app.models.shared import as_utc, utc_now
from app.repositories.coupon_application_repository import CouponApplicationRepository
from app.repositories.coupon_repository import CouponRepository
from app.repositories.coupon_rule_repository import CouponRuleRepository
from app.schemas.coupon import CouponResponse, CouponWithRulesResponse
from app.schemas.coupon_rule import CouponRuleResponse
from app.schemas.coupon_validation import (
    AppliedCouponRule,
    CartItemWithProduct,
    CouponBreakdown,
    CouponValidationResult,
)
from app.services.coupon_rules import EvaluatedRule, evaluate_rules, read_rule
from app.services.coupon_rules.definitions import FreeItems
from app.services.coupon_rules.matching import product_ids

logger = logging.getLogger(__name__)

ERROR_MESSAGE = "Error validating coupon"
SUCCESS_MESSAGE = "Coupon applied successfully"
UNMET_REQUIREMENTS_MESSAGE = "Cart does not meet coupon requirements"


class CouponRedemptionError(Exception):
    """Raised when a validated coupon cannot be redeemed."""


@dataclass
class CouponRedemption:
    result: CouponValidationResult
    applications: list[CouponApplication] = field(default_factory=list)


def _invalid(message: str) -> CouponValidationResult:
    return CouponValidationResult(valid=False, message=message)


def coupon_with_rules(coupon: Coupon, rules: list[CouponRule]) -> CouponWithRulesResponse:
    return CouponWithRulesResponse(
        **CouponResponse.model_validate(coupon).model_dump(),
        rules=[CouponRuleResponse.model_validate(rule) for rule in rules],
    )


class CouponValidationService:
    """Service for validating coupons against a cart and redeeming them."""

    def __init__(self, db: Session):
        self.db = db
        self.coupon_repo = CouponRepository(db)
        self.rule_repo = CouponRuleRepository(db)
        self.application_repo = CouponApplicationRepository(db)

    def validate_coupon(
        self,
        code: str,
        subtotal: Decimal,
        cart_items: list[CartItemWithProduct] | None = None,
        now: datetime | None = None,
    ) -> CouponValidationResult:
        """Check whether a coupon applies and compute its discount.

        Never raises: invalid coupons and data store failures both come back
        as ``valid=False`` results whose message can be shown to the customer.

        Args:
            code: Coupon code as typed by the customer (any case).
            subtotal: Cart subtotal as computed by the caller.
            cart_items: Cart lines with product attributes. Without them only
                the simple percentage/fixed discount can apply.
            now: Evaluation time, defaults to the current UTC time.
        """
        if not code or not code.strip():
            return _invalid("Invalid coupon code")

        try:
            coupon = self.coupon_repo.get_by_code(code)
            if not coupon:
                return _invalid("Invalid coupon code")

            rejection = self._check_availability(coupon, as_utc(now) if now else utc_now())
            if rejection:
                logger.info("Coupon %s rejected: %s", coupon.code, rejection)
                return _invalid(rejection)

            subtotal = Decimal(str(subtotal))
            if cart_items:
                return self._apply_rules(coupon, list(cart_items), subtotal)
            return self._apply_simple(coupon, subtotal)
        except Exception:
            logger.exception("Failed to validate coupon %s", code)
            self.db.rollback()
            return _invalid(ERROR_MESSAGE)

    def _check_availability(self, coupon: Coupon, now: datetime) -> str | None:
        """Return why a coupon cannot be used right now, or None if it can."""
        if not coupon.is_active:
            return "This coupon is no longer active"

        # Either bound may be missing; a missing bound does not restrict
        if coupon.valid_from is not None and now < as_utc(coupon.valid_from):  # type: ignore[arg-type]
            return "This coupon is not yet valid"
        if coupon.valid_until is not None and now > as_utc(coupon.valid_until):  # type: ignore[arg-type]
            return "This coupon has expired"

        if coupon.usage_limit is not None and coupon.used_count >= coupon.usage_limit:
            return "This coupon has reached its usage limit"
        return None

    def _apply_simple(
        self,
        coupon: Coupon,
        subtotal: Decimal,
        rules: list[CouponRule] | None = None,
    ) -> CouponValidationResult:
        """Flat percentage or fixed discount, for coupons without active rules."""
        min_purchase = Decimal(str(coupon.min_purchase_amount or 0))
        if min_purchase and subtotal < min_purchase:
            return _invalid(
                f"Minimum purchase amount of {settings.CURRENCY_SYMBOL}"
                f"{format_amount(min_purchase)} required"
            )

        value = Decimal(str(coupon.discount_value or 0))
        if coupon.discount_type == DiscountType.PERCENTAGE.value:
            discount = subtotal * value / Decimal("100")
            if coupon.max_discount_amount is not None:
                discount = min(discount, Decimal(str(coupon.max_discount_amount)))
            explanation = f"{format_amount(value)}% discount applied"
        else:
            discount = value
            explanation = f"{settings.CURRENCY_SYMBOL}{format_amount(value)} discount applied"

        discount = round_money(min(discount, subtotal))

        return CouponValidationResult(
            valid=True,
            message=SUCCESS_MESSAGE,
            discount=discount,
            coupon=coupon_with_rules(coupon, rules or []),
            applied_rules=[],
            total_savings=discount,
            breakdown=CouponBreakdown(
                original_amount=subtotal,
                discount_amount=discount,
                final_amount=subtotal - discount,
                applied_rule_count=0,
                explanation=explanation,
            ),
        )

    def _apply_rules(
        self,
        coupon: Coupon,
        cart_items: list[CartItemWithProduct],
        subtotal: Decimal,
    ) -> CouponValidationResult:
        """Evaluate the coupon's active rules and sum the winners' discounts."""
        rules = self.rule_repo.get_by_coupon_id(coupon.id)  # type: ignore[arg-type]
        active_rules = [rule for rule in rules if rule.is_active]
        if not active_rules:
            return self._apply_simple(coupon, subtotal, rules)

        definitions = [
            read_rule(rule, cap_fixed_discount=settings.COUPON_CAP_FIXED_RULE_DISCOUNT)
            for rule in active_rules
        ]
        evaluated = evaluate_rules(definitions, cart_items, settings.CURRENCY_SYMBOL)
        applicable = [e for e in evaluated if e.can_apply]

        if not applicable:
            reasons = "; ".join(e.reason for e in evaluated if e.reason)
            logger.debug("Coupon %s: no rule applies (%s)", coupon.code, reasons)
            return _invalid(reasons or UNMET_REQUIREMENTS_MESSAGE)

        max_applications = coupon.max_applications_per_order or 1
        to_apply = applicable[:max_applications]

        applied_rules = [self._applied_rule(e) for e in to_apply]
        total_discount = sum((r.discount_amount for r in applied_rules), Decimal("0"))
        explanation = "; ".join(
            f"{r.rule_name}: {settings.CURRENCY_SYMBOL}{r.discount_amount:.2f} saved"
            for r in applied_rules
        )

        return CouponValidationResult(
            valid=True,
            message=SUCCESS_MESSAGE,
            discount=total_discount,
            coupon=coupon_with_rules(coupon, rules),
            applied_rules=applied_rules,
            total_savings=total_discount,
            breakdown=CouponBreakdown(
                original_amount=subtotal,
                discount_amount=total_discount,
                final_amount=subtotal - total_discount,
                applied_rule_count=len(applied_rules),
                explanation=explanation,
            ),
        )

    @staticmethod
    def _applied_rule(evaluated: EvaluatedRule) -> AppliedCouponRule:
        rule = evaluated.rule
        provisional = (
            isinstance(rule.benefit, FreeItems)
            and rule.benefit.selection is FreeItemSelection.CUSTOMER_CHOICE
        )
        return AppliedCouponRule(
            rule_id=rule.rule_id,
            rule_name=rule.name,
            rule_description=rule.description,
            discount_amount=round_money(evaluated.discount_amount),
            source_items=product_ids(evaluated.source_items),
            target_items=product_ids(evaluated.target_items),
            benefit_type=rule.benefit_type.value if rule.benefit_type else "",
            eligible_items=product_ids(evaluated.eligible_items),
            provisional_selection=provisional,
        )

    def redeem_coupon(
        self,
        code: str,
        subtotal: Decimal,
        cart_items: list[CartItemWithProduct] | None = None,
        order_id: str | None = None,
        user_id: str | None = None,
    ) -> CouponRedemption:
        """Validate a coupon for a completed order, count the use and log it.

        Raises:
            CouponRedemptionError: If the coupon is not valid for this cart, or
                its last use was taken by a concurrent redemption.
        """
        result = self.validate_coupon(code, subtotal, cart_items)
        if not result.valid:
            raise CouponRedemptionError(result.message)

        if not self.coupon_repo.increment_usage(code):
            logger.warning("Coupon %s hit its usage limit during redemption", code)
            raise CouponRedemptionError("This coupon has reached its usage limit")

        applications = self._log_applications(result, order_id, user_id)
        return CouponRedemption(result=result, applications=applications)

    def _log_applications(
        self,
        result: CouponValidationResult,
        order_id: str | None,
        user_id: str | None,
    ) -> list[CouponApplication]:
        """Record the redeemed discount; failures are logged, not raised."""
        coupon = result.coupon
        breakdown = result.breakdown
        if coupon is None or breakdown is None:
            return []
        try:
            if not result.applied_rules:
                return [
                    self.application_repo.create(
                        coupon_id=coupon.id,
                        order_id=order_id,
                        user_id=user_id,
                        discount_amount=breakdown.discount_amount,
                        original_amount=breakdown.original_amount,
                        final_amount=breakdown.final_amount,
                        rule_description=breakdown.explanation,
                    )
                ]
            return [
                self.application_repo.create(
                    coupon_id=coupon.id,
                    rule_id=applied.rule_id,
                    order_id=order_id,
                    user_id=user_id,
                    discount_amount=applied.discount_amount,
                    original_amount=breakdown.original_amount,
                    final_amount=breakdown.final_amount,
                    source_items=applied.source_items,
                    target_items=applied.target_items,
                    rule_description=applied.rule_description or applied.rule_name,
                )
                for applied in result.applied_rules
            ]
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Failed to log application of coupon %s", coupon.code)
            return []
