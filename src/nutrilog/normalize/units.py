"""Unit normalization: canonical gram quantities for servings."""

import math
from collections.abc import Iterable, Mapping

from pydantic import Field, model_validator

from nutrilog.errors import (
    CyclicServingReferenceError,
    DensityRequiredError,
    ExplicitGramsRequiredError,
    InvalidQuantityError,
    QuantityOverflowError,
    UnknownServingReferenceError,
)
from nutrilog.logging_config import get_logger
from nutrilog.models import BaseEntity, Food, MetricUnit, Serving, UnitFamily

logger = get_logger(__name__)

ServingKey = int | str


# =============================================================================
# Unit Conversion Tables
# =============================================================================

# Mass conversions (base unit: g)
MASS_UNITS: dict[MetricUnit, float] = {
    MetricUnit.GRAM: 1.0,
    MetricUnit.KILOGRAM: 1000.0,
    MetricUnit.OUNCE: 28.3495,
    MetricUnit.POUND: 453.592,
}

# Volume conversions (base unit: ml, US customary)
VOLUME_UNITS: dict[MetricUnit, float] = {
    MetricUnit.MILLILITER: 1.0,
    MetricUnit.LITER: 1000.0,
    MetricUnit.FLUID_OUNCE: 29.5735,
    MetricUnit.PINT: 473.176,
    MetricUnit.QUART: 946.353,
    MetricUnit.GALLON: 3785.41,
    MetricUnit.TABLESPOON: 14.7868,
    MetricUnit.CUP: 236.588,
}


# =============================================================================
# Quantity Checks
# =============================================================================


def check_quantity(value: float, name: str = "quantity", *, allow_zero: bool = True) -> float:
    """
    Validate a multiplier or conversion factor.

    Returns the value as a float. Raises InvalidQuantityError when it is
    negative, non-finite, or zero while ``allow_zero`` is False.
    """
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise InvalidQuantityError(f"{name} must be a number, got {value!r}", value) from e

    if not math.isfinite(number):
        raise InvalidQuantityError(f"{name} must be finite, got {value!r}", value)
    if number < 0 or (number == 0 and not allow_zero):
        bound = ">= 0" if allow_zero else "> 0"
        raise InvalidQuantityError(f"{name} must be {bound}, got {value!r}", value)
    return number


def check_finite(value: float, name: str) -> float:
    """Raise QuantityOverflowError when a product of valid inputs is no longer finite."""
    if not math.isfinite(value):
        raise QuantityOverflowError(f"{name} overflows: {value!r}", value)
    return value


# =============================================================================
# Conversion
# =============================================================================


def to_grams(serving: Serving, amount: float) -> float:
    """
    Canonical mass of ``amount`` servings.

    The serving's gram equivalence was fixed when it was created, so no
    unit table is consulted here.
    """
    grams = serving.grams_equiv * check_quantity(amount, "amount")
    return check_finite(grams, f"grams for {amount:g} of serving {serving.id}")


def derive_grams_equiv(
    unit: MetricUnit,
    amount: float,
    reference_grams_per_unit: float | None = None,
    *,
    density: float | None = None,
) -> float:
    """
    Compute the gram equivalence of ``amount`` of ``unit`` when creating a serving.

    Args:
        unit: Unit the serving is expressed in.
        amount: How many of ``unit`` the serving holds. Must be > 0.
        reference_grams_per_unit: Grams in one container, or in one referenced
            serving. Required for container and serving units.
        density: Food density in g/mL. Required for volume units.

    Returns:
        The serving's mass in grams.
    """
    amount = check_quantity(amount, "amount", allow_zero=False)
    family = unit.family

    if family is UnitFamily.MASS:
        grams = amount * MASS_UNITS[unit]
    elif family is UnitFamily.VOLUME:
        if density is None:
            raise DensityRequiredError(unit)
        density = check_quantity(density, "density", allow_zero=False)
        grams = amount * VOLUME_UNITS[unit] * density
    elif family in (UnitFamily.CONTAINER, UnitFamily.SERVING_REF):
        if reference_grams_per_unit is None:
            raise ExplicitGramsRequiredError(unit)
        per_unit = check_quantity(
            reference_grams_per_unit, "reference_grams_per_unit", allow_zero=False
        )
        grams = amount * per_unit
    else:
        raise AssertionError(f"Unhandled unit family: {family}")

    check_finite(grams, f"grams for {amount:g} {unit.name}")
    logger.debug(f"Derived {grams:.4f} g for {amount:g} {unit.name}")
    return grams


# =============================================================================
# Serving Resolution
# =============================================================================


class ServingDraft(BaseEntity):
    """A serving being entered, before its gram equivalence is known.

    A draft in ``MetricUnit.SERVING`` means "amount of another serving"; it
    either names that serving through ``reference`` or carries
    ``grams_per_unit`` directly.
    """

    key: ServingKey
    unit: MetricUnit
    amount: float = Field(gt=0)
    density: float | None = Field(default=None, gt=0)  # g/mL, volume units
    grams_per_unit: float | None = Field(default=None, gt=0)  # container units
    reference: ServingKey | None = None

    @model_validator(mode="after")
    def check_reference(self) -> "ServingDraft":
        if self.reference is not None and self.unit is not MetricUnit.SERVING:
            raise ValueError(
                f"Only SERVING drafts may reference another serving, not {self.unit.name}"
            )
        return self

    @property
    def is_reference(self) -> bool:
        return self.unit is MetricUnit.SERVING and self.grams_per_unit is None


def resolve_grams_equiv(
    drafts: Iterable[ServingDraft],
    existing: Mapping[ServingKey, float] | None = None,
) -> dict[ServingKey, float]:
    """
    Resolve the gram equivalence of every draft.

    References are followed to a draft (or an ``existing`` serving's grams)
    that converts on its own. Each chain is tracked so that a loop fails
    instead of spinning.

    Args:
        drafts: Servings being created.
        existing: Grams of already stored servings that drafts may reference.

    Returns:
        Dict mapping each draft key to its grams_equiv.
    """
    by_key: dict[ServingKey, ServingDraft] = {}
    for draft in drafts:
        if draft.key in by_key:
            raise ValueError(f"Duplicate serving key: {draft.key!r}")
        by_key[draft.key] = draft

    resolved: dict[ServingKey, float] = {}
    known = dict(existing or {})

    for key in by_key:
        if key not in resolved:
            _resolve_chain(key, by_key, resolved, known)

    logger.debug(f"Resolved {len(resolved)} serving drafts")
    return resolved


def _resolve_chain(
    start: ServingKey,
    by_key: Mapping[ServingKey, ServingDraft],
    resolved: dict[ServingKey, float],
    known: Mapping[ServingKey, float],
) -> None:
    chain: list[ServingKey] = []
    visited: set[ServingKey] = set()
    current = start

    while True:
        if current in resolved:
            base = resolved[current]
            break
        if current in visited:
            raise CyclicServingReferenceError(chain[chain.index(current) :] + [current])

        draft = by_key.get(current)
        if draft is None:
            if current in known:
                base = known[current]
                break
            raise UnknownServingReferenceError(current, referenced_by=chain[-1] if chain else None)

        visited.add(current)
        if draft.is_reference:
            if draft.reference is None:
                raise ExplicitGramsRequiredError(draft.unit)
            chain.append(current)
            current = draft.reference
            continue

        base = derive_grams_equiv(
            draft.unit, draft.amount, draft.grams_per_unit, density=draft.density
        )
        resolved[current] = base
        break

    # Each draft in the chain references the next one
    for key in reversed(chain):
        draft = by_key[key]
        base = derive_grams_equiv(draft.unit, draft.amount, base)
        resolved[key] = base


def build_serving(
    draft: ServingDraft,
    food: Food,
    grams_equiv: float,
    *,
    serving_id: int,
    is_default: bool = False,
    created_at: int = 0,
) -> Serving:
    """Turn a resolved draft into a Serving of ``food``."""
    return Serving(
        id=serving_id,
        food=food,
        amount=draft.amount,
        unit=draft.unit,
        grams_equiv=grams_equiv,
        is_default=is_default,
        created_at=created_at,
        updated_at=created_at,
    )
