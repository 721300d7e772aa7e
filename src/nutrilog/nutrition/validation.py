"""Data quality checks for nutrition facts and servings."""

import math
from collections.abc import Iterable
from dataclasses import dataclass, field

from nutrilog.config import get_settings
from nutrilog.errors import DuplicateDefaultServingError
from nutrilog.logging_config import get_logger
from nutrilog.models import NutrientValues, NutritionFacts, Serving

logger = get_logger(__name__)


@dataclass(frozen=True)
class SubNutrientRule:
    """Components that should not add up to more than their parent nutrient."""

    name: str
    parent: str
    components: tuple[str, ...]


SUB_NUTRIENT_RULES: tuple[SubNutrientRule, ...] = (
    SubNutrientRule("fat_breakdown", "fat_g", ("saturated_fat_g", "trans_fat_g")),
    SubNutrientRule("fiber_in_carbohydrate", "total_carbohydrate_g", ("dietary_fiber_g",)),
    SubNutrientRule("sugars_in_carbohydrate", "total_carbohydrate_g", ("total_sugars_g",)),
    SubNutrientRule("added_in_total_sugars", "total_sugars_g", ("added_sugars_g",)),
)


@dataclass(frozen=True)
class SoftInvariantViolation:
    """A flagged but accepted inconsistency in nutrient data."""

    rule: str
    parent_field: str
    parent_value: float
    component_fields: tuple[str, ...]
    component_total: float

    @property
    def excess(self) -> float:
        return self.component_total - self.parent_value

    @property
    def message(self) -> str:
        components = " + ".join(self.component_fields)
        return (
            f"{components} ({self.component_total:g}) exceeds "
            f"{self.parent_field} ({self.parent_value:g})"
        )


@dataclass(frozen=True)
class ValidatedFacts:
    """Accepted nutrition facts together with their data quality warnings."""

    facts: NutritionFacts
    warnings: tuple[SoftInvariantViolation, ...] = field(default_factory=tuple)

    @property
    def is_clean(self) -> bool:
        return not self.warnings


def check_soft_invariants(
    values: NutrientValues,
    tolerance: float | None = None,
) -> list[SoftInvariantViolation]:
    """
    Check that sub-nutrients do not exceed their parent nutrient.

    Label data in the wild is sometimes inconsistent, so violations are
    logged and returned rather than raised.

    Args:
        values: Nutrition facts or computed totals.
        tolerance: Allowed excess in the parent's unit. Defaults to
            ``Settings.soft_invariant_tolerance``.

    Returns:
        One SoftInvariantViolation per broken rule, empty when consistent.
    """
    if tolerance is None:
        tolerance = get_settings().soft_invariant_tolerance

    violations: list[SoftInvariantViolation] = []
    for rule in SUB_NUTRIENT_RULES:
        parent_value = getattr(values, rule.parent)
        component_total = math.fsum(getattr(values, name) for name in rule.components)
        if component_total > parent_value + tolerance:
            violations.append(
                SoftInvariantViolation(
                    rule=rule.name,
                    parent_field=rule.parent,
                    parent_value=parent_value,
                    component_fields=rule.components,
                    component_total=component_total,
                )
            )

    for violation in violations:
        logger.warning(f"Nutrient data inconsistency [{violation.rule}]: {violation.message}")

    return violations


def validate_facts(facts: NutritionFacts, tolerance: float | None = None) -> ValidatedFacts:
    """Accept ``facts`` and attach any soft invariant warnings."""
    warnings = check_soft_invariants(facts, tolerance)
    return ValidatedFacts(facts=facts, warnings=tuple(warnings))


def default_serving(servings: Iterable[Serving]) -> Serving | None:
    """
    Return the default serving among one food's servings.

    Returns None when no serving is marked default. Raises
    DuplicateDefaultServingError when more than one is.
    """
    servings = list(servings)
    food_ids = {serving.food.id for serving in servings}
    if len(food_ids) > 1:
        raise ValueError(f"Servings belong to more than one food: {sorted(food_ids)}")

    defaults = [serving for serving in servings if serving.is_default]
    if len(defaults) > 1:
        raise DuplicateDefaultServingError(
            defaults[0].food.id, [serving.id for serving in defaults]
        )
    return defaults[0] if defaults else None
