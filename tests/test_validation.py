"""Tests for nutrient data quality checks."""

import logging

import pytest

from nutrilog.errors import DuplicateDefaultServingError
from nutrilog.models import MetricUnit, NutrientTotals, NutritionFacts, Serving
from nutrilog.nutrition.validation import (
    SUB_NUTRIENT_RULES,
    check_soft_invariants,
    default_serving,
    validate_facts,
)


class TestSoftInvariants:
    """Tests for check_soft_invariants and validate_facts."""

    def test_consistent_facts(self, oats_cup_facts):
        """Test consistent label data raises no warnings."""
        assert check_soft_invariants(oats_cup_facts, tolerance=0) == []

    def test_fat_breakdown_exceeds_fat(self, oats_grams):
        """Test saturated + trans fat above total fat is flagged, not rejected."""
        facts = NutritionFacts(serving=oats_grams, fat_g=10, saturated_fat_g=8, trans_fat_g=3)

        violations = check_soft_invariants(facts, tolerance=0)

        assert len(violations) == 1
        violation = violations[0]
        assert violation.rule == "fat_breakdown"
        assert violation.parent_field == "fat_g"
        assert violation.component_fields == ("saturated_fat_g", "trans_fat_g")
        assert violation.component_total == 11
        assert violation.excess == pytest.approx(1)
        assert "saturated_fat_g + trans_fat_g (11) exceeds fat_g (10)" == violation.message

    def test_carbohydrate_rules(self, oats_grams):
        """Test fiber, sugars and added sugars against their parents."""
        facts = NutritionFacts(
            serving=oats_grams,
            total_carbohydrate_g=5,
            dietary_fiber_g=6,
            total_sugars_g=7,
            added_sugars_g=9,
        )

        rules = {v.rule for v in check_soft_invariants(facts, tolerance=0)}

        assert rules == {
            "fiber_in_carbohydrate",
            "sugars_in_carbohydrate",
            "added_in_total_sugars",
        }

    def test_equal_is_not_a_violation(self, oats_grams):
        """Test components may add up exactly to the parent."""
        facts = NutritionFacts(serving=oats_grams, fat_g=5, saturated_fat_g=3, trans_fat_g=2)
        assert check_soft_invariants(facts, tolerance=0) == []

    def test_tolerance(self, oats_grams):
        """Test rounding noise within tolerance is accepted."""
        facts = NutritionFacts(serving=oats_grams, fat_g=5, saturated_fat_g=3, trans_fat_g=2.4)

        assert check_soft_invariants(facts, tolerance=0.5) == []
        assert len(check_soft_invariants(facts, tolerance=0.1)) == 1

    def test_default_tolerance_from_settings(self, oats_grams):
        """Test the default tolerance comes from settings (0 by default)."""
        facts = NutritionFacts(serving=oats_grams, fat_g=1, saturated_fat_g=1.5)
        assert len(check_soft_invariants(facts)) == 1

    def test_applies_to_totals(self):
        """Test computed totals can be checked too."""
        totals = NutrientTotals(fat_g=1, saturated_fat_g=2)
        assert [v.rule for v in check_soft_invariants(totals, tolerance=0)] == ["fat_breakdown"]

    def test_violations_are_logged(self, oats_grams, caplog):
        """Test violations are surfaced as warnings."""
        facts = NutritionFacts(serving=oats_grams, fat_g=1, saturated_fat_g=2)

        with caplog.at_level(logging.WARNING, logger="nutrilog"):
            check_soft_invariants(facts, tolerance=0)

        assert "fat_breakdown" in caplog.text
        assert caplog.records[0].levelno == logging.WARNING

    def test_validate_facts(self, oats_grams, oats_cup_facts):
        """Test facts are accepted together with their warnings."""
        flagged = NutritionFacts(serving=oats_grams, fat_g=1, saturated_fat_g=2)

        result = validate_facts(flagged, tolerance=0)
        assert result.facts is flagged
        assert not result.is_clean
        assert len(result.warnings) == 1

        clean = validate_facts(oats_cup_facts, tolerance=0)
        assert clean.is_clean
        assert clean.warnings == ()

    def test_rule_fields_exist(self):
        """Test every rule names real nutrient fields."""
        for rule in SUB_NUTRIENT_RULES:
            assert rule.parent in NutrientTotals.model_fields
            for name in rule.components:
                assert name in NutrientTotals.model_fields


class TestDefaultServing:
    """Tests for default_serving."""

    def test_single_default(self, oats_cup, oats_grams):
        """Test the marked serving is returned."""
        assert default_serving([oats_cup, oats_grams]) == oats_grams

    def test_no_default(self, oats_cup):
        """Test None when no serving is marked default."""
        assert default_serving([oats_cup]) is None
        assert default_serving([]) is None

    def test_duplicate_default(self, oats, oats_grams):
        """Test two default servings for one food."""
        other = Serving(
            id=12, food=oats, amount=1, unit=MetricUnit.CUP, grams_equiv=80, is_default=True
        )

        with pytest.raises(DuplicateDefaultServingError) as exc_info:
            default_serving([oats_grams, other])

        assert exc_info.value.food_id == oats.id
        assert exc_info.value.serving_ids == [11, 12]

    def test_mixed_foods(self, oats_grams, peanut_butter_tbsp):
        """Test servings of different foods are rejected."""
        with pytest.raises(ValueError, match="more than one food"):
            default_serving([oats_grams, peanut_butter_tbsp])
