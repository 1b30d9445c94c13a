"""
Unit tests for ScoreAggregator.
"""

from unittest.mock import patch

import pytest

from ecoscore.domain.product.models import Packaging, ProductDescriptor
from ecoscore.domain.scoring.aggregator import (
    DETERGENT_WEIGHTS,
    FOOD_WEIGHTS,
    ScoreAggregator,
    grade_for_score,
)
from ecoscore.domain.shared.errors import ConfigurationError


@pytest.fixture
def aggregator() -> ScoreAggregator:
    return ScoreAggregator()


class TestConstruction:
    """Test weight validation."""

    def test_default_weights_sum_to_one(self) -> None:
        assert sum(FOOD_WEIGHTS.values()) == pytest.approx(1.0)
        assert sum(DETERGENT_WEIGHTS.values()) == pytest.approx(1.0)

    def test_rejects_bad_weight_sum(self) -> None:
        weights = dict(FOOD_WEIGHTS, nutrition=0.5)
        with pytest.raises(ConfigurationError):
            ScoreAggregator(food_weights=weights)

    def test_rejects_missing_component(self) -> None:
        weights = {"processing": 0.5, "nutrition": 0.5}
        with pytest.raises(ConfigurationError):
            ScoreAggregator(food_weights=weights)

    def test_accepts_custom_weights(self) -> None:
        weights = dict(FOOD_WEIGHTS, nutrition=0.25, environmental=0.20)
        aggregator = ScoreAggregator(food_weights=weights)
        assert aggregator.food_weights["environmental"] == 0.20


class TestFoodScoring:
    """Test food products."""

    def test_nutella(self, aggregator: ScoreAggregator, nutella: ProductDescriptor) -> None:
        breakdown = aggregator.score(nutella)
        assert breakdown.category == "food"
        assert breakdown.processing.group == 4
        assert breakdown.nutrition.grade == "E"
        assert breakdown.components["processing"].score == 45
        assert breakdown.components["nutrition"].score == 68
        assert breakdown.grade == grade_for_score(breakdown.score)
        assert breakdown.improvement_suggested is True
        assert breakdown.improvement_message
        assert any(i.type == "ultra_processing" for i in breakdown.insights)

    def test_apple_compote(self, aggregator: ScoreAggregator, apple_compote: ProductDescriptor) -> None:
        breakdown = aggregator.score(apple_compote)
        assert breakdown.processing.group == 1
        assert breakdown.nutrition.grade == "A"
        assert breakdown.glycemic.index == 36
        assert breakdown.score == 84
        assert breakdown.grade == "B"
        assert breakdown.confidence == 0.68
        assert breakdown.publishable is True
        assert breakdown.improvement_suggested is False
        assert breakdown.improvement_message == ""

    def test_healthy_beats_ultra_processed(
        self,
        aggregator: ScoreAggregator,
        nutella: ProductDescriptor,
        apple_compote: ProductDescriptor,
    ) -> None:
        assert aggregator.score(apple_compote).score > aggregator.score(nutella).score

    def test_component_weights_recorded(self, aggregator: ScoreAggregator, nutella: ProductDescriptor) -> None:
        breakdown = aggregator.score(nutella)
        assert {name: c.weight for name, c in breakdown.components.items()} == FOOD_WEIGHTS

    def test_missing_nutrition_uses_base_score(self, aggregator: ScoreAggregator) -> None:
        product = ProductDescriptor.from_raw(name="Mystery", ingredients=["xanthane"])
        breakdown = aggregator.score(product)
        assert breakdown.nutrition.grade is None
        assert breakdown.components["nutrition"].score == 80
        assert breakdown.components["glycemic"].score == 80
        assert breakdown.glycemic.status == "insufficient_data"

    def test_environmental_component(self, aggregator: ScoreAggregator) -> None:
        product = ProductDescriptor.from_raw(
            name="Biscuits",
            ingredients=["farine"],
            certifications=["AB", "Fairtrade"],
            packaging=Packaging(recyclable=False, plastic=True),
        )
        component = aggregator.score(product).components["environmental"]
        assert component.score == 80 + 6 - 5 - 3
        assert component.confidence == 0.6

    def test_empty_product_is_complete(self, aggregator: ScoreAggregator) -> None:
        """Even an empty product gets a full breakdown with low confidence."""
        breakdown = aggregator.score(ProductDescriptor.from_raw())
        assert 0 <= breakdown.score <= 100
        assert breakdown.confidence < 0.6
        assert set(breakdown.components) == set(FOOD_WEIGHTS)

    def test_deterministic(self, aggregator: ScoreAggregator, nutella: ProductDescriptor) -> None:
        assert aggregator.score(nutella) == aggregator.score(nutella)

    @pytest.mark.parametrize(
        "ingredients,nutrition",
        [
            ("", {}),
            ("sucre", {"sugars": 100, "energy_kj": 1700}),
            ("e102, e110, e124, e129, e171, e433, e466, e951", {"saturated_fat": 40, "sodium": 5000}),
            (["riz"], {"fiber": 30, "proteins": 40, "fruits_vegetables": 100, "energy_kj": 0}),
        ],
    )
    def test_bounds(self, aggregator: ScoreAggregator, ingredients, nutrition) -> None:
        breakdown = aggregator.score(ProductDescriptor.from_raw(name="P", ingredients=ingredients, nutrition=nutrition))
        assert 0 <= breakdown.score <= 100
        assert 0.0 <= breakdown.confidence <= 1.0
        for component in breakdown.components.values():
            assert 0 <= component.score <= 100


class TestDetergentScoring:
    """Test household products."""

    def test_eco_detergent(self, aggregator: ScoreAggregator, eco_detergent: ProductDescriptor) -> None:
        breakdown = aggregator.score(eco_detergent)
        assert breakdown.category == "detergent"
        assert breakdown.chemical is not None
        assert breakdown.processing is None
        assert set(breakdown.components) == set(DETERGENT_WEIGHTS)
        assert breakdown.score >= 85
        assert breakdown.grade == "A"

    def test_harsh_detergent(self, aggregator: ScoreAggregator, harsh_detergent: ProductDescriptor) -> None:
        breakdown = aggregator.score(harsh_detergent)
        assert breakdown.score == breakdown.chemical.score == 34
        assert breakdown.grade == "E"
        assert "Replacement strongly recommended" in breakdown.recommendations


class TestFallback:
    def test_unexpected_error_returns_fallback(self, aggregator: ScoreAggregator, nutella: ProductDescriptor) -> None:
        """score should never raise."""
        with patch.object(aggregator, "_score_food", side_effect=RuntimeError("boom")):
            breakdown = aggregator.score(nutella)
        assert breakdown.score == 50
        assert breakdown.confidence == 0.1
        assert breakdown.publishable is False
        assert breakdown.components == {}


class TestGradeForScore:
    @pytest.mark.parametrize(
        "score,grade",
        [(100, "A"), (85, "A"), (84, "B"), (70, "B"), (69, "C"), (55, "C"), (54, "D"), (40, "D"), (39, "E"), (0, "E")],
    )
    def test_bands(self, score: int, grade: str) -> None:
        assert grade_for_score(score) == grade
