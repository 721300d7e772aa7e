"""NLOG/1.0: a compact pipe-delimited rendering of a meal log.

Example::

    NLOG/1.0
    H|date|food|cal|pro|carb|fat
    ---
    250210|Oatmeal with Berries|350|12.0|58.0|8.0

Dates are the meal's UTC day as YYMMDD. Calories are whole kcal; protein,
carbohydrate and fat are grams with one decimal.
"""

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import UTC, date, datetime

from nutrilog.config import get_settings
from nutrilog.errors import MissingNutritionFactsError, NlogFormatError
from nutrilog.logging_config import get_logger
from nutrilog.models import MealItem, NutritionFacts
from nutrilog.nutrition.aggregator import scale

logger = get_logger(__name__)

NLOG_MAGIC = "NLOG/1.0"
NLOG_HEADER = "H|date|food|cal|pro|carb|fat"
NLOG_SEPARATOR = "---"
NLOG_DATE_FORMAT = "%y%m%d"


@dataclass(frozen=True)
class NlogRow:
    """One logged food in an NLOG document."""

    day: date
    food: str
    calories: int
    protein: float
    carbs: float
    fat: float

    def to_line(self) -> str:
        return "|".join(
            [
                self.day.strftime(NLOG_DATE_FORMAT),
                self.food,
                str(self.calories),
                f"{self.protein:.1f}",
                f"{self.carbs:.1f}",
                f"{self.fat:.1f}",
            ]
        )


def sanitize_food_name(name: str, max_length: int | None = None) -> str:
    """Make a food name safe for a single NLOG field."""
    if max_length is None:
        max_length = get_settings().nlog_food_name_max_length
    # read_nlog splits rows with splitlines(), so every line boundary it knows must go
    name = " ".join(name.splitlines()).replace("|", "-")
    return name[:max_length]


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def to_nlog(rows: Iterable[NlogRow]) -> str:
    """Render rows as an NLOG document, in the order given."""
    lines = [NLOG_MAGIC, NLOG_HEADER, NLOG_SEPARATOR]
    lines.extend(row.to_line() for row in rows)
    return "\n".join(lines)


def write_nlog(
    items: Iterable[MealItem],
    facts_by_serving: Mapping[int, NutritionFacts],
    max_name_length: int | None = None,
) -> str:
    """
    Render meal items as an NLOG document.

    Items are ordered by their meal's ``occurred_at``; items of the same
    meal keep their input order. Each row holds the item's nutrients scaled
    by its quantity.

    Args:
        items: Meal items to export.
        facts_by_serving: Nutrition facts keyed by serving id.
        max_name_length: Food name cutoff. Defaults to
            ``Settings.nlog_food_name_max_length``.
    """
    rows: list[NlogRow] = []
    for item in sorted(items, key=lambda i: i.meal.occurred_at):
        facts = facts_by_serving.get(item.serving.id)
        if facts is None:
            raise MissingNutritionFactsError(item.serving.id, item.id)
        consumed = scale(facts, item.serving, item.quantity)
        rows.append(
            NlogRow(
                day=datetime.fromtimestamp(item.meal.occurred_at, tz=UTC).date(),
                food=sanitize_food_name(item.food.name, max_name_length),
                calories=_round_half_up(consumed.calories_kcal),
                protein=consumed.protein_g,
                carbs=consumed.total_carbohydrate_g,
                fat=consumed.fat_g,
            )
        )

    logger.info(f"Exported {len(rows)} meal items to NLOG")
    return to_nlog(rows)


def read_nlog(text: str) -> list[NlogRow]:
    """
    Parse an NLOG document.

    Two-digit years follow ``strptime``: 69-99 map to 1900s, 00-68 to 2000s.

    Raises:
        NlogFormatError: On a bad preamble or a malformed row.
    """
    lines = text.splitlines()
    while lines and not lines[-1].strip():
        lines.pop()

    preamble = (NLOG_MAGIC, NLOG_HEADER, NLOG_SEPARATOR)
    for index, expected in enumerate(preamble):
        if index >= len(lines):
            raise NlogFormatError(f"missing {expected!r}", index + 1)
        if lines[index].strip() != expected:
            raise NlogFormatError(f"expected {expected!r}, got {lines[index]!r}", index + 1)

    rows: list[NlogRow] = []
    for line_number, line in enumerate(lines[len(preamble) :], start=len(preamble) + 1):
        parts = line.split("|")
        if len(parts) != 6:
            raise NlogFormatError(f"expected 6 fields, got {len(parts)}", line_number)
        day, food, calories, protein, carbs, fat = parts
        try:
            rows.append(
                NlogRow(
                    day=datetime.strptime(day, NLOG_DATE_FORMAT).date(),
                    food=food,
                    calories=int(calories),
                    protein=float(protein),
                    carbs=float(carbs),
                    fat=float(fat),
                )
            )
        except ValueError as e:
            raise NlogFormatError(str(e), line_number) from e

    logger.debug(f"Parsed {len(rows)} NLOG rows")
    return rows
