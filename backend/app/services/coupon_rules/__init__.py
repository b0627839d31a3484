from app.services.coupon_rules.definitions import (
    BenefitOutcome,
    BundlePrice,
    FixedDiscount,
    FreeItems,
    ItemFilter,
    NewArrivalRequirement,
    PercentageDiscount,
    RuleDefinition,
    SourceCondition,
    read_rule,
)
from app.services.coupon_rules.evaluator import (
    EvaluatedRule,
    evaluate_rule,
    evaluate_rules,
    sort_by_priority,
)

__all__ = [
    "BenefitOutcome",
    "BundlePrice",
    "EvaluatedRule",
    "FixedDiscount",
    "FreeItems",
    "ItemFilter",
    "NewArrivalRequirement",
    "PercentageDiscount",
    "RuleDefinition",
    "SourceCondition",
    "evaluate_rule",
    "evaluate_rules",
    "read_rule",
    "sort_by_priority",
]
