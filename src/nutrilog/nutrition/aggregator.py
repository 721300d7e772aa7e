"""Nutrition totals for meal items, meals and days."""

import math
from collections.abc import Iterable, Iterator, Mapping

from nutrilog.errors import (
    MissingNutritionFactsError,
    QuantityOverflowError,
    ServingMismatchError,
)
from nutrilog.logging_config import LoggingContext, get_logger
from nutrilog.models import (
    NUTRIENT_FIELDS,
    MealItem,
    NutrientTotals,
    NutrientValues,
    NutritionFacts,
    Serving,
)
from nutrilog.normalize.units import check_finite, check_quantity, to_grams

logger = get_logger(__name__)

FactsItem = tuple[NutritionFacts, Serving, float]


def scale(facts: NutritionFacts, serving: Serving, quantity: float) -> NutrientTotals:
    """
    Nutrients consumed by eating ``quantity`` of ``serving``.

    Facts are anchored to the serving they were entered against, so every
    field is simply multiplied by the number of servings.

    Raises:
        ServingMismatchError: If ``facts`` belong to another serving.
        InvalidQuantityError: If ``quantity`` is negative or non-finite.
        QuantityOverflowError: If a scaled field is too large to represent.
    """
    if facts.serving.id != serving.id:
        raise ServingMismatchError(facts.serving.id, serving.id)
    quantity = check_quantity(quantity)
    return NutrientTotals(
        **{
            name: check_finite(value * quantity, f"{name} x {quantity:g}")
            for name, value in facts.nutrients().items()
        }
    )


def _fsum_fields(records: Iterable[NutrientValues]) -> tuple[NutrientTotals, int]:
    # fsum is exactly rounded, so the result does not depend on input order
    columns: dict[str, list[float]] = {name: [] for name in NUTRIENT_FIELDS}
    count = 0
    for record in records:
        for name, value in record.nutrients().items():
            columns[name].append(value)
        count += 1
    sums: dict[str, float] = {}
    for name, values in columns.items():
        try:
            sums[name] = math.fsum(values)
        except OverflowError as e:
            raise QuantityOverflowError(f"Sum of {name} overflows") from e
    totals = NutrientTotals(**sums)
    return totals, count


def aggregate(items: Iterable[FactsItem]) -> NutrientTotals:
    """
    Field-wise sum of ``scale`` over ``(facts, serving, quantity)`` items.

    Order-independent. An empty input gives all-zero totals.
    """
    totals, count = _fsum_fields(
        scale(facts, serving, quantity) for facts, serving, quantity in items
    )
    logger.debug(f"Aggregated {count} items: {totals.calories_kcal:.1f} kcal")
    return totals


def combine(totals: Iterable[NutrientValues]) -> NutrientTotals:
    """Fold per-meal totals into one total (e.g. a day)."""
    combined, count = _fsum_fields(totals)
    logger.debug(f"Combined {count} totals: {combined.calories_kcal:.1f} kcal")
    return combined


def _facts_items(
    items: Iterable[MealItem],
    facts_by_serving: Mapping[int, NutritionFacts],
) -> Iterator[FactsItem]:
    for item in items:
        facts = facts_by_serving.get(item.serving.id)
        if facts is None:
            raise MissingNutritionFactsError(item.serving.id, item.id)
        yield facts, item.serving, item.quantity


def aggregate_meal_items(
    items: Iterable[MealItem],
    facts_by_serving: Mapping[int, NutritionFacts],
) -> NutrientTotals:
    """
    Aggregate meal items, looking up each item's facts by serving id.

    Args:
        items: Meal items from one or more meals.
        facts_by_serving: Nutrition facts keyed by serving id.

    Returns:
        The summed NutrientTotals.
    """
    return aggregate(_facts_items(items, facts_by_serving))


def totals_by_meal(
    items: Iterable[MealItem],
    facts_by_serving: Mapping[int, NutritionFacts],
) -> dict[int, NutrientTotals]:
    """
    Per-meal totals keyed by meal id, in order of first appearance.

    Each meal is aggregated independently; ``combine`` over the values
    equals ``aggregate_meal_items`` over all the items.
    """
    grouped: dict[int, list[MealItem]] = {}
    for item in items:
        grouped.setdefault(item.meal.id, []).append(item)

    results: dict[int, NutrientTotals] = {}
    for meal_id, meal_items in grouped.items():
        with LoggingContext(meal_id=meal_id):
            results[meal_id] = aggregate_meal_items(meal_items, facts_by_serving)

    logger.info(f"Computed totals for {len(results)} meals")
    return results


def consumed_grams(items: Iterable[MealItem]) -> float:
    """Total canonical mass eaten across ``items``."""
    return math.fsum(to_grams(item.serving, item.quantity) for item in items)
