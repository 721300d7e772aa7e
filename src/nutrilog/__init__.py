"""Unit normalization and nutrition aggregation for meal logs."""

from nutrilog.errors import (
    CyclicServingReferenceError,
    DensityRequiredError,
    ExplicitGramsRequiredError,
    InvalidQuantityError,
    MissingNutritionFactsError,
    NutritionError,
    QuantityOverflowError,
    ServingMismatchError,
    UnknownServingReferenceError,
)
from nutrilog.models import (
    Food,
    Meal,
    MealItem,
    MealType,
    MetricUnit,
    NutrientTotals,
    NutritionFacts,
    Serving,
    Sex,
    UnitFamily,
    UserProfile,
)
from nutrilog.normalize import derive_grams_equiv, resolve_grams_equiv, to_grams
from nutrilog.nutrition import aggregate, combine, scale

__version__ = "0.1.0"

__all__ = [
    "CyclicServingReferenceError",
    "DensityRequiredError",
    "ExplicitGramsRequiredError",
    "Food",
    "InvalidQuantityError",
    "Meal",
    "MealItem",
    "MealType",
    "MetricUnit",
    "MissingNutritionFactsError",
    "NutrientTotals",
    "NutritionError",
    "NutritionFacts",
    "QuantityOverflowError",
    "Serving",
    "ServingMismatchError",
    "Sex",
    "UnitFamily",
    "UnknownServingReferenceError",
    "UserProfile",
    "aggregate",
    "combine",
    "derive_grams_equiv",
    "resolve_grams_equiv",
    "scale",
    "to_grams",
]
