"""Nutrition scaling, aggregation and data quality checks."""

from nutrilog.nutrition.aggregator import (
    aggregate,
    aggregate_meal_items,
    combine,
    consumed_grams,
    scale,
    totals_by_meal,
)
from nutrilog.nutrition.validation import (
    SoftInvariantViolation,
    ValidatedFacts,
    check_soft_invariants,
    default_serving,
    validate_facts,
)

__all__ = [
    "SoftInvariantViolation",
    "ValidatedFacts",
    "aggregate",
    "aggregate_meal_items",
    "check_soft_invariants",
    "combine",
    "consumed_grams",
    "default_serving",
    "scale",
    "totals_by_meal",
    "validate_facts",
]
