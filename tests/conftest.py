"""Pytest configuration and shared fixtures."""

import pytest

from nutrilog.models import (
    Food,
    Meal,
    MealItem,
    MealType,
    MetricUnit,
    NutritionFacts,
    Serving,
)

# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow running")


# =============================================================================
# Food and Serving Fixtures
# =============================================================================


@pytest.fixture
def oats() -> Food:
    """A user-entered food without a barcode."""
    return Food(id=1, name="Rolled Oats", brand="Quaker", category="Grain", source="user")


@pytest.fixture
def peanut_butter() -> Food:
    """A packaged food with an EAN-13 barcode."""
    return Food(
        id=2,
        name="Peanut Butter",
        brand="Skippy",
        category="Spread",
        source="openfoodfacts",
        barcode="0037600105071",
    )


@pytest.fixture
def oats_cup(oats: Food) -> Serving:
    """1 cup of oats."""
    return Serving(id=10, food=oats, amount=1, unit=MetricUnit.CUP, grams_equiv=80.0)


@pytest.fixture
def oats_grams(oats: Food) -> Serving:
    """40 g of oats, the default serving."""
    return Serving(
        id=11, food=oats, amount=40, unit=MetricUnit.GRAM, grams_equiv=40.0, is_default=True
    )


@pytest.fixture
def peanut_butter_tbsp(peanut_butter: Food) -> Serving:
    """2 tablespoons of peanut butter."""
    return Serving(
        id=20,
        food=peanut_butter,
        amount=2,
        unit=MetricUnit.TABLESPOON,
        grams_equiv=32.0,
        is_default=True,
    )


# =============================================================================
# Nutrition Facts Fixtures
# =============================================================================


@pytest.fixture
def oats_cup_facts(oats_cup: Serving) -> NutritionFacts:
    """Facts for 1 cup of oats."""
    return NutritionFacts(
        serving=oats_cup,
        calories_kcal=300,
        fat_g=6,
        saturated_fat_g=1,
        sodium_mg=0,
        total_carbohydrate_g=54,
        dietary_fiber_g=8,
        total_sugars_g=2,
        protein_g=10,
        calcium_mg=40,
        iron_mg=3.5,
    )


@pytest.fixture
def oats_grams_facts(oats_grams: Serving) -> NutritionFacts:
    """Facts for 40 g of oats."""
    return NutritionFacts(
        serving=oats_grams,
        calories_kcal=150,
        fat_g=3,
        saturated_fat_g=0.5,
        total_carbohydrate_g=27,
        dietary_fiber_g=4,
        total_sugars_g=1,
        protein_g=5,
    )


@pytest.fixture
def peanut_butter_facts(peanut_butter_tbsp: Serving) -> NutritionFacts:
    """Facts for 2 tbsp of peanut butter."""
    return NutritionFacts(
        serving=peanut_butter_tbsp,
        calories_kcal=190,
        fat_g=16,
        saturated_fat_g=3,
        sodium_mg=140,
        total_carbohydrate_g=7,
        dietary_fiber_g=2,
        total_sugars_g=3,
        added_sugars_g=3,
        protein_g=7,
    )


@pytest.fixture
def facts_by_serving(
    oats_cup_facts: NutritionFacts,
    oats_grams_facts: NutritionFacts,
    peanut_butter_facts: NutritionFacts,
) -> dict[int, NutritionFacts]:
    """All fixture facts keyed by serving id."""
    return {
        facts.serving.id: facts
        for facts in (oats_cup_facts, oats_grams_facts, peanut_butter_facts)
    }


# =============================================================================
# Meal Fixtures
# =============================================================================


@pytest.fixture
def breakfast() -> Meal:
    """Breakfast on 2025-02-10 07:30 UTC."""
    return Meal(id=100, occurred_at=1739172600, meal_type=MealType.BREAKFAST, title="Oatmeal")


@pytest.fixture
def snack() -> Meal:
    """Afternoon snack on 2025-02-10 15:00 UTC."""
    return Meal(id=101, occurred_at=1739199600, meal_type=MealType.SNACK)


@pytest.fixture
def meal_items(
    breakfast: Meal,
    snack: Meal,
    oats: Food,
    peanut_butter: Food,
    oats_cup: Serving,
    oats_grams: Serving,
    peanut_butter_tbsp: Serving,
) -> list[MealItem]:
    """A day's meal items across two meals."""
    return [
        MealItem(id=1000, meal=breakfast, food=oats, serving=oats_cup, quantity=1),
        MealItem(
            id=1001, meal=breakfast, food=peanut_butter, serving=peanut_butter_tbsp, quantity=0.5
        ),
        MealItem(id=1002, meal=snack, food=oats, serving=oats_grams, quantity=2),
        MealItem(id=1003, meal=snack, food=peanut_butter, serving=peanut_butter_tbsp, quantity=1),
    ]
