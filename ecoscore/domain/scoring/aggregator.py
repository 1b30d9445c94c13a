"""
Score aggregator.

Runs the classifiers for a product and combines their results into a
single weighted ScoreBreakdown.
"""

from __future__ import annotations

from typing import Mapping, Optional

import structlog

from ecoscore.domain.product.models import ProductCategory, ProductDescriptor
from ecoscore.domain.scoring.additives import AdditiveRiskAnalyzer
from ecoscore.domain.scoring.chemical import ChemicalRiskScorer
from ecoscore.domain.scoring.confidence import ConfidenceCalculator
from ecoscore.domain.scoring.glycemic import GlycemicEstimator
from ecoscore.domain.scoring.insights import InsightGenerator
from ecoscore.domain.scoring.models import (
    AdditiveReport,
    ComponentScore,
    GlycemicEstimate,
    NutritionGrade,
    ProcessingClassification,
    ScoreBreakdown,
)
from ecoscore.domain.scoring.nutriscore import NutritionGradeCalculator
from ecoscore.domain.scoring.processing import ProcessingClassifier
from ecoscore.domain.scoring.reference import ReferenceTables, load_reference_tables
from ecoscore.domain.shared.errors import ConfigurationError

logger = structlog.get_logger(__name__)

FOOD_WEIGHTS: dict[str, float] = {
    "processing": 0.20,
    "additives": 0.15,
    "nutrition": 0.30,
    "glycemic": 0.20,
    "environmental": 0.15,
}

DETERGENT_WEIGHTS: dict[str, float] = {
    "ecotoxicity": 0.30,
    "biodegradability": 0.25,
    "irritation": 0.25,
    "environmental": 0.20,
}

BASE_SCORE = 80
NOVA_PENALTIES = {1: 0, 2: -8, 3: -20, 4: -35}
MIN_COMPONENT_CONFIDENCE = 0.4
IMPROVEMENT_THRESHOLD = 70

_GRADE_FLOORS = (("A", 85), ("B", 70), ("C", 55), ("D", 40))


def _clamp(value: float) -> float:
    return max(0.0, min(100.0, value))


def grade_for_score(score: int) -> str:
    """
    Letter grade for an overall score.

    Example:
        >>> grade_for_score(85)
        'A'
        >>> grade_for_score(39)
        'E'
    """
    for grade, floor in _GRADE_FLOORS:
        if score >= floor:
            return grade
    return "E"


def _check_weights(name: str, weights: Mapping[str, float]) -> None:
    total = sum(weights.values())
    if abs(total - 1.0) > 0.01:
        raise ConfigurationError(f"{name} weights sum to {total:.2f}, expected 1.0")


class ScoreAggregator:
    """
    Combines component results into one product score.

    All classifiers share one ReferenceTables bundle. Weights are checked
    at construction: a bad configuration fails fast, ``score`` never raises.

    Example:
        >>> aggregator = ScoreAggregator()
        >>> product = ProductDescriptor.from_raw(
        ...     name="Compote de pommes",
        ...     ingredients="pommes",
        ...     nutrition={"energy_kj": 250, "sugars": 12, "saturated_fat": 0,
        ...                "sodium": 5, "fiber": 2, "proteins": 0.3},
        ... )
        >>> breakdown = aggregator.score(product)
        >>> 0 <= breakdown.score <= 100
        True

    Raises:
        ConfigurationError: If weights do not sum to 1.0 (+/- 0.01)
    """

    def __init__(
        self,
        tables: Optional[ReferenceTables] = None,
        food_weights: Optional[Mapping[str, float]] = None,
        detergent_weights: Optional[Mapping[str, float]] = None,
        confidence_calculator: Optional[ConfidenceCalculator] = None,
    ):
        self.tables = tables or load_reference_tables()
        self.food_weights = dict(food_weights or FOOD_WEIGHTS)
        self.detergent_weights = dict(detergent_weights or DETERGENT_WEIGHTS)
        _check_weights("Food", self.food_weights)
        _check_weights("Detergent", self.detergent_weights)
        if set(self.food_weights) != set(FOOD_WEIGHTS):
            raise ConfigurationError(f"Food weights must cover {sorted(FOOD_WEIGHTS)}")
        if set(self.detergent_weights) != set(DETERGENT_WEIGHTS):
            raise ConfigurationError(f"Detergent weights must cover {sorted(DETERGENT_WEIGHTS)}")

        self.processing = ProcessingClassifier(self.tables)
        self.additives = AdditiveRiskAnalyzer(self.tables)
        self.nutrition = NutritionGradeCalculator(self.tables)
        self.glycemic = GlycemicEstimator(self.tables)
        self.chemical = ChemicalRiskScorer(self.tables)
        self.confidence = confidence_calculator or ConfidenceCalculator()
        self.insights = InsightGenerator()

    def score(self, product: ProductDescriptor) -> ScoreBreakdown:
        """Score a product. Always returns a ScoreBreakdown."""
        try:
            if product.category == ProductCategory.DETERGENT:
                breakdown = self._score_detergent(product)
            else:
                breakdown = self._score_food(product)
        except Exception as e:
            logger.error("Unexpected scoring failure", error=str(e), product=product.name)
            return self._fallback(product)

        logger.info(
            "Product scored",
            product=product.name,
            category=breakdown.category,
            score=breakdown.score,
            grade=breakdown.grade,
            confidence=breakdown.confidence,
        )
        return breakdown

    # ═══════════════════════════════════════════════════════════
    # FOOD
    # ═══════════════════════════════════════════════════════════

    def _score_food(self, product: ProductDescriptor) -> ScoreBreakdown:
        processing = self.processing.classify(product.ingredients, product.name)
        additives = self.additives.analyze(product.ingredients)
        nutrition = self.nutrition.calculate(product.nutrition, product.is_beverage)
        glycemic = self.glycemic.estimate(product.ingredients, product.nutrition, processing.group)

        processing_penalty = NOVA_PENALTIES.get(processing.group, 0)
        raw_scores = {
            "processing": (BASE_SCORE + processing_penalty, processing.confidence),
            "additives": (self._additives_score(additives), additives.confidence),
            "nutrition": (self._nutrition_score(nutrition), nutrition.confidence),
            "glycemic": (self._glycemic_score(glycemic), glycemic.confidence),
            "environmental": self._environmental_score(product),
        }
        components = {
            name: ComponentScore(
                score=_clamp(score),
                weight=self.food_weights[name],
                confidence=round(confidence, 2),
            )
            for name, (score, confidence) in raw_scores.items()
        }

        return self._build(
            product,
            components,
            has_nutrition=not product.nutrition.is_empty(),
            processing=processing,
            additives=additives,
            nutrition=nutrition,
            glycemic=glycemic,
            insights=self.insights.insights(processing, additives, nutrition, glycemic),
            recommendations=self.insights.recommendations(
                processing_penalty,
                nutrition.impact.bonus if nutrition.grade else None,
                glycemic.impact.penalty if glycemic.index is not None else None,
            ),
        )

    @staticmethod
    def _additives_score(report: AdditiveReport) -> float:
        return (
            BASE_SCORE
            - 6 * len(report.microbiome_impact.affected)
            - 4 * report.controversial_count
            - min(len(report.detected_additives), 12)
        )

    @staticmethod
    def _nutrition_score(grade: NutritionGrade) -> float:
        if grade.grade is None or grade.confidence < MIN_COMPONENT_CONFIDENCE:
            return BASE_SCORE
        return BASE_SCORE + grade.impact.bonus

    @staticmethod
    def _glycemic_score(estimate: GlycemicEstimate) -> float:
        if estimate.index is None or estimate.confidence < MIN_COMPONENT_CONFIDENCE:
            return BASE_SCORE
        return BASE_SCORE + estimate.impact.penalty

    @staticmethod
    def _environmental_score(product: ProductDescriptor) -> tuple[float, float]:
        """Score and confidence from certifications and packaging."""
        score = BASE_SCORE + min(3 * len(product.certifications), 15)
        if product.packaging.recyclable is False:
            score -= 5
        if product.packaging.plastic is True:
            score -= 3

        known = product.packaging.recyclable is not None or product.packaging.plastic is not None
        confidence = 0.6 if known or product.certifications else 0.3
        return score, confidence

    # ═══════════════════════════════════════════════════════════
    # DETERGENT
    # ═══════════════════════════════════════════════════════════

    def _score_detergent(self, product: ProductDescriptor) -> ScoreBreakdown:
        result = self.chemical.score(product.ingredients, product.name, product.certifications)
        sub_scores = {
            "ecotoxicity": result.breakdown.ecotoxicity.score,
            "biodegradability": result.breakdown.biodegradability.score,
            "irritation": result.breakdown.irritation.score,
            "environmental": result.breakdown.environmental.score,
        }
        components = {
            name: ComponentScore(
                score=_clamp(score),
                weight=self.detergent_weights[name],
                confidence=result.confidence,
            )
            for name, score in sub_scores.items()
        }
        return self._build(
            product,
            components,
            has_nutrition=False,
            chemical=result,
            insights=result.insights,
            recommendations=tuple(alt.title for alt in result.alternatives),
        )

    # ═══════════════════════════════════════════════════════════
    # SHARED
    # ═══════════════════════════════════════════════════════════

    def _build(
        self,
        product: ProductDescriptor,
        components: dict[str, ComponentScore],
        has_nutrition: bool,
        **results,
    ) -> ScoreBreakdown:
        weighted = sum(c.score * c.weight for c in components.values())
        score = int(_clamp(round(weighted)))
        confidence = self.confidence.calculate(
            len(product.ingredients),
            has_nutrition,
            {name: (c.confidence, c.weight) for name, c in components.items()},
        )
        suggested = score < IMPROVEMENT_THRESHOLD

        return ScoreBreakdown(
            score=score,
            grade=grade_for_score(score),
            confidence=confidence,
            confidence_label=self.confidence.interpret(confidence),
            publishable=self.confidence.is_publishable(confidence),
            category=product.category.value,
            components=components,
            improvement_suggested=suggested,
            improvement_message=self._improvement_message(score) if suggested else "",
            reference_version=self.tables.version,
            **results,
        )

    @staticmethod
    def _improvement_message(score: int) -> str:
        if score < 40:
            return "Better alternatives are strongly recommended"
        if score < 55:
            return "Healthier alternatives exist for this product"
        return "Some improvements are possible"

    def _fallback(self, product: ProductDescriptor) -> ScoreBreakdown:
        score = 50
        return ScoreBreakdown(
            score=score,
            grade=grade_for_score(score),
            confidence=0.1,
            confidence_label=self.confidence.interpret(0.1),
            publishable=False,
            category=product.category.value,
            improvement_suggested=True,
            improvement_message="Score could not be fully computed",
            reference_version=self.tables.version,
        )


__all__ = [
    "DETERGENT_WEIGHTS",
    "FOOD_WEIGHTS",
    "ScoreAggregator",
    "grade_for_score",
]
