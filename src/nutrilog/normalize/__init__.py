"""Convert servings and units into canonical gram quantities."""

from nutrilog.normalize.units import (
    MASS_UNITS,
    VOLUME_UNITS,
    ServingDraft,
    build_serving,
    check_quantity,
    derive_grams_equiv,
    resolve_grams_equiv,
    to_grams,
)

__all__ = [
    "MASS_UNITS",
    "VOLUME_UNITS",
    "ServingDraft",
    "build_serving",
    "check_quantity",
    "derive_grams_equiv",
    "resolve_grams_equiv",
    "to_grams",
]
