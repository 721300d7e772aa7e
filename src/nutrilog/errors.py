"""Exceptions raised by the nutrition core.

Every error here is recoverable at the call site. The data-entry or
reporting caller decides whether to block the user or carry on.
"""

from collections.abc import Sequence
from typing import Any


class NutritionError(Exception):
    """Base exception for nutrition core errors."""


class InvalidQuantityError(NutritionError, ValueError):
    """Raised when a multiplier, amount or conversion factor is negative or non-finite."""

    def __init__(self, message: str, value: Any = None):
        super().__init__(message)
        self.value = value


class QuantityOverflowError(InvalidQuantityError):
    """Raised when a finite quantity produces a result too large to represent."""


class DensityRequiredError(NutritionError):
    """Raised when a volume serving is created without a density."""

    def __init__(self, unit: Any):
        super().__init__(f"Density (g/mL) is required to convert {unit.name} to grams")
        self.unit = unit


class ExplicitGramsRequiredError(NutritionError):
    """Raised when a container or serving-unit serving has no gram equivalence."""

    def __init__(self, unit: Any):
        super().__init__(f"An explicit gram equivalence is required for {unit.name}")
        self.unit = unit


class CyclicServingReferenceError(NutritionError):
    """Raised when serving references loop back on themselves."""

    def __init__(self, chain: Sequence[Any]):
        path = " -> ".join(str(key) for key in chain)
        super().__init__(f"Cyclic serving reference: {path}")
        self.chain = list(chain)


class UnknownServingReferenceError(NutritionError, KeyError):
    """Raised when a serving references a key that does not exist."""

    def __init__(self, key: Any, referenced_by: Any = None):
        super().__init__(f"Serving {referenced_by!r} references unknown serving {key!r}")
        self.key = key
        self.referenced_by = referenced_by

    def __str__(self) -> str:
        return self.args[0]


class ServingMismatchError(NutritionError):
    """Raised when nutrition facts are scaled against a serving they do not belong to."""

    def __init__(self, facts_serving_id: int, serving_id: int):
        super().__init__(
            f"Nutrition facts belong to serving {facts_serving_id}, not serving {serving_id}"
        )
        self.facts_serving_id = facts_serving_id
        self.serving_id = serving_id


class MissingNutritionFactsError(NutritionError, KeyError):
    """Raised when a meal item's serving has no nutrition facts."""

    def __init__(self, serving_id: int, meal_item_id: int | None = None):
        super().__init__(
            f"No nutrition facts for serving {serving_id} (meal item {meal_item_id})"
        )
        self.serving_id = serving_id
        self.meal_item_id = meal_item_id

    def __str__(self) -> str:
        return self.args[0]


class DuplicateDefaultServingError(NutritionError):
    """Raised when a food has more than one default serving."""

    def __init__(self, food_id: int, serving_ids: Sequence[int]):
        super().__init__(
            f"Food {food_id} has {len(serving_ids)} default servings: {list(serving_ids)}"
        )
        self.food_id = food_id
        self.serving_ids = list(serving_ids)


class NlogFormatError(NutritionError, ValueError):
    """Raised when NLOG text cannot be parsed."""

    def __init__(self, message: str, line_number: int | None = None):
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
        self.line_number = line_number
