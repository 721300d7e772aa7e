"""Pydantic models for foods, servings, nutrition facts and meals."""

import math
import time
from collections.abc import Mapping
from enum import Enum, IntEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from nutrilog.errors import QuantityOverflowError

BARCODE_LENGTHS = frozenset({8, 12, 13, 14})


class UnitFamily(str, Enum):
    """Conversion family of a metric unit."""

    MASS = "mass"
    VOLUME = "volume"
    CONTAINER = "container"
    SERVING_REF = "serving_ref"


class MetricUnit(IntEnum):
    """Units a serving can be expressed in.

    The numeric values are stable identifiers shared with stored data. Use
    ``unit.family`` rather than the numeric bands to decide how to convert.
    """

    SERVING = 0

    GRAM = 100
    KILOGRAM = 101
    MILLILITER = 110
    LITER = 111

    OUNCE = 200
    POUND = 201
    FLUID_OUNCE = 210
    PINT = 211
    QUART = 220
    GALLON = 221

    TABLESPOON = 300
    CUP = 301

    PACKAGE = 900
    BOX = 901
    BAG = 902
    BOTTLE = 903
    CAN = 904
    JAR = 905

    @property
    def family(self) -> UnitFamily:
        return UNIT_FAMILIES[self]


UNIT_FAMILIES: dict[MetricUnit, UnitFamily] = {
    MetricUnit.SERVING: UnitFamily.SERVING_REF,
    MetricUnit.GRAM: UnitFamily.MASS,
    MetricUnit.KILOGRAM: UnitFamily.MASS,
    MetricUnit.OUNCE: UnitFamily.MASS,
    MetricUnit.POUND: UnitFamily.MASS,
    MetricUnit.MILLILITER: UnitFamily.VOLUME,
    MetricUnit.LITER: UnitFamily.VOLUME,
    MetricUnit.FLUID_OUNCE: UnitFamily.VOLUME,
    MetricUnit.PINT: UnitFamily.VOLUME,
    MetricUnit.QUART: UnitFamily.VOLUME,
    MetricUnit.GALLON: UnitFamily.VOLUME,
    MetricUnit.TABLESPOON: UnitFamily.VOLUME,
    MetricUnit.CUP: UnitFamily.VOLUME,
    MetricUnit.PACKAGE: UnitFamily.CONTAINER,
    MetricUnit.BOX: UnitFamily.CONTAINER,
    MetricUnit.BAG: UnitFamily.CONTAINER,
    MetricUnit.BOTTLE: UnitFamily.CONTAINER,
    MetricUnit.CAN: UnitFamily.CONTAINER,
    MetricUnit.JAR: UnitFamily.CONTAINER,
}


class MealType(IntEnum):
    """Classification of a logged meal."""

    BREAKFAST = 1
    BRUNCH = 2
    LUNCH = 3
    DINNER = 4
    NIGHT_SNACK = 8
    SNACK = 10
    CUSTOM = 99


class Sex(IntEnum):
    FEMALE = 0
    MALE = 1


class BaseEntity(BaseModel):
    """Base class for all domain records.

    Records are immutable; edits produce a new copy.
    """

    model_config = ConfigDict(frozen=True, from_attributes=True, allow_inf_nan=False)


class Food(BaseEntity):
    """A food item. A food may have several servings (1 package, 1 oz, ...)."""

    id: int
    name: str
    brand: str = ""
    category: str = ""  # Fruit, Meat, Snack, ...
    source: str = ""  # user, usda, openfoodfacts, ...
    ref_url: str = ""
    barcode: str = ""
    created_at: int = 0
    updated_at: int = 0

    @field_validator("barcode", mode="before")
    @classmethod
    def check_barcode(cls, v: Any) -> str:
        """Accept an empty barcode or a GTIN-8/12/13/14 digit string."""
        if v is None:
            return ""
        barcode = str(v).strip()
        if not barcode:
            return ""
        if not barcode.isdigit() or len(barcode) not in BARCODE_LENGTHS:
            raise ValueError(f"Barcode must be 8, 12, 13 or 14 digits, got {barcode!r}")
        return barcode

    def edit(self, updated_at: int | None = None, **changes: Any) -> "Food":
        """Return a validated copy with ``changes`` applied and ``updated_at`` bumped."""
        data = self.model_dump()
        data.update(changes)
        data["updated_at"] = updated_at if updated_at is not None else int(time.time())
        return Food.model_validate(data)


class Serving(BaseEntity):
    """A named quantity of a food pinned to a gram equivalence."""

    id: int
    food: Food
    amount: float = Field(gt=0)
    unit: MetricUnit
    grams_equiv: float = Field(gt=0)
    is_default: bool = False
    created_at: int = 0
    updated_at: int = 0


class NutrientValues(BaseEntity):
    """Nutrient amounts shared by stored facts and computed totals."""

    calories_kcal: float = Field(default=0.0, ge=0)

    fat_g: float = Field(default=0.0, ge=0)
    saturated_fat_g: float = Field(default=0.0, ge=0)
    trans_fat_g: float = Field(default=0.0, ge=0)

    cholesterol_mg: float = Field(default=0.0, ge=0)
    sodium_mg: float = Field(default=0.0, ge=0)

    total_carbohydrate_g: float = Field(default=0.0, ge=0)
    dietary_fiber_g: float = Field(default=0.0, ge=0)
    total_sugars_g: float = Field(default=0.0, ge=0)
    added_sugars_g: float = Field(default=0.0, ge=0)

    protein_g: float = Field(default=0.0, ge=0)

    vitamin_d_mcg: float = Field(default=0.0, ge=0)
    calcium_mg: float = Field(default=0.0, ge=0)
    iron_mg: float = Field(default=0.0, ge=0)

    def nutrients(self) -> dict[str, float]:
        """Nutrient fields only, keyed by field name."""
        return {name: getattr(self, name) for name in NUTRIENT_FIELDS}


NUTRIENT_FIELDS: tuple[str, ...] = tuple(NutrientValues.model_fields)


class NutritionFacts(NutrientValues):
    """Nutrient amounts for exactly one serving (per its grams_equiv, not per 100 g)."""

    serving: Serving

    @classmethod
    def from_per_100g(cls, serving: Serving, values: Mapping[str, float]) -> "NutritionFacts":
        """Rebase a per-100 g nutrient record onto ``serving``."""
        unknown = set(values) - set(NUTRIENT_FIELDS)
        if unknown:
            raise ValueError(f"Unknown nutrient fields: {sorted(unknown)}")
        ratio = serving.grams_equiv / 100.0
        return cls(serving=serving, **{name: value * ratio for name, value in values.items()})


class NutrientTotals(NutrientValues):
    """Computed nutrient amounts for a consumed quantity, meal or day.

    Ephemeral: has no serving and no id, and is never persisted.
    """

    @classmethod
    def zero(cls) -> "NutrientTotals":
        return cls()

    @classmethod
    def from_facts(cls, facts: NutrientValues) -> "NutrientTotals":
        return cls(**facts.nutrients())

    def __add__(self, other: "NutrientTotals") -> "NutrientTotals":
        if not isinstance(other, NutrientValues):
            return NotImplemented
        sums = {name: getattr(self, name) + getattr(other, name) for name in NUTRIENT_FIELDS}
        overflowed = sorted(name for name, value in sums.items() if not math.isfinite(value))
        if overflowed:
            raise QuantityOverflowError(f"Sum overflows for {overflowed}")
        return NutrientTotals(**sums)

    def __radd__(self, other: Any) -> "NutrientTotals":
        # sum() starts from 0
        if isinstance(other, (int, float)) and other == 0:
            return self
        return self.__add__(other)

    def as_dict(self) -> dict[str, float]:
        return self.nutrients()


class Meal(BaseEntity):
    """A logged eating event."""

    id: int
    occurred_at: int  # UNIX timestamp
    meal_type: MealType
    title: str = ""
    note: str = ""
    created_at: int = 0
    updated_at: int = 0


class MealItem(BaseEntity):
    """One food at a serving quantity within a meal.

    ``quantity`` is a number of servings, not grams.
    """

    id: int
    meal: Meal
    food: Food
    serving: Serving
    quantity: float = Field(ge=0)
    note: str = ""
    created_at: int = 0
    updated_at: int = 0

    @model_validator(mode="after")
    def check_serving_food(self) -> "MealItem":
        if self.serving.food.id != self.food.id:
            raise ValueError(
                f"Serving {self.serving.id} belongs to food {self.serving.food.id}, "
                f"not food {self.food.id}"
            )
        return self


class UserProfile(BaseEntity):
    """Biometric attributes consumed by downstream target calculators."""

    id: int
    name: str
    sex: Sex
    weight: float = Field(gt=0)  # kg
    height: float = Field(gt=0)  # cm
    daily_calorie_target: float | None = Field(default=None, gt=0)
