"""Evaluate coupon rules against a cart.

Every rule is evaluated on its own against the full, unmodified cart: rules
never consume items from each other. Evaluation results are transient and
rebuilt on every validation call.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal

from app.core.money import format_amount
from app.schemas.coupon_validation import CartItemWithProduct
from app.services.coupon_rules.benefits.factory import get_benefit_calculator
from app.services.coupon_rules.definitions import RuleDefinition
from app.services.coupon_rules.matching import (
    describe_source,
    find_source_items,
    line_total,
    total_quantity,
)


@dataclass
class EvaluatedRule:
    rule: RuleDefinition
    can_apply: bool
    discount_amount: Decimal = Decimal("0")
    source_items: list[CartItemWithProduct] = field(default_factory=list)
    target_items: list[CartItemWithProduct] = field(default_factory=list)
    eligible_items: list[CartItemWithProduct] = field(default_factory=list)
    reason: str | None = None


def _rejected(rule: RuleDefinition, reason: str) -> EvaluatedRule:
    return EvaluatedRule(rule=rule, can_apply=False, reason=reason)


def evaluate_rule(
    rule: RuleDefinition,
    cart_items: list[CartItemWithProduct],
    currency_symbol: str = "₹",
) -> EvaluatedRule:
    """Check a rule's source condition and, if it holds, compute its benefit.

    A rule whose source condition holds can apply even when its benefit
    works out to zero.
    """
    source = rule.source
    description = describe_source(source)
    source_items = find_source_items(source, cart_items)
    quantity = total_quantity(source_items)

    if quantity < source.min_quantity:
        return _rejected(
            rule, f"Need {source.min_quantity} {description}, but only {quantity} in cart"
        )

    if source.max_quantity is not None and quantity > source.max_quantity:
        return _rejected(
            rule,
            f"Maximum {source.max_quantity} {description} allowed for this offer, "
            f"but you have {quantity}",
        )

    if source.min_amount is not None and line_total(source_items) < source.min_amount:
        return _rejected(
            rule,
            f"Minimum purchase of {currency_symbol}{format_amount(source.min_amount)} "
            f"required for {description}",
        )

    calculator = get_benefit_calculator(rule.benefit_type)
    if calculator is None or rule.benefit is None:
        return EvaluatedRule(rule=rule, can_apply=True, source_items=source_items)

    outcome = calculator(rule.benefit, source_items, cart_items)
    return EvaluatedRule(
        rule=rule,
        can_apply=True,
        discount_amount=outcome.discount,
        source_items=source_items,
        target_items=outcome.target_items,
        eligible_items=outcome.eligible_items,
    )


def sort_by_priority(rules: Iterable[RuleDefinition]) -> list[RuleDefinition]:
    """Highest priority first; equal priorities keep their given order."""
    return sorted(rules, key=lambda rule: rule.priority, reverse=True)


def evaluate_rules(
    rules: Iterable[RuleDefinition],
    cart_items: list[CartItemWithProduct],
    currency_symbol: str = "₹",
) -> list[EvaluatedRule]:
    """Evaluate rules in priority order, each against the whole cart."""
    return [
        evaluate_rule(rule, cart_items, currency_symbol) for rule in sort_by_priority(rules)
    ]
