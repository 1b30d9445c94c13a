"""
Nutrition grade calculator (Nutri-Score style).

Score = negative points (energy, saturated fat, sugars, sodium)
minus positive points (fruits/vegetables, fiber, proteins).
"""

from __future__ import annotations

from typing import Optional, Sequence

import structlog

from ecoscore.domain.product.models import NutritionFacts
from ecoscore.domain.scoring.models import (
    GradeImpact,
    NegativePoints,
    NutritionGrade,
    NutritionPoints,
    PositivePoints,
)
from ecoscore.domain.scoring.reference import ReferenceTables, load_reference_tables
from ecoscore.domain.scoring.reference.nutriscore_tables import (
    KCAL_TO_KJ,
    SALT_G_TO_SODIUM_MG,
    GradeBand,
)

logger = structlog.get_logger(__name__)

_GRADE_DESCRIPTIONS = {
    "A": "Excellent nutritional quality",
    "B": "Good nutritional quality",
    "C": "Average nutritional quality",
    "D": "Poor nutritional quality",
    "E": "Very poor nutritional quality",
}


def threshold_points(value: float, thresholds: Sequence[float]) -> int:
    """
    Points for a value: index of the highest threshold strictly exceeded.

    Example:
        >>> threshold_points(336, (335, 670, 1005))
        1
        >>> threshold_points(335, (335, 670, 1005))
        0
    """
    points = 0
    for k, threshold in enumerate(thresholds, start=1):
        if value > threshold:
            points = k
        else:
            break
    return points


class NutritionGradeCalculator:
    """
    Nutri-Score-style grade from per-100 g nutrition facts.

    Missing fields count as 0 for point lookups but lower the confidence.
    Below the minimum confidence no grade is produced.

    Example:
        >>> calculator = NutritionGradeCalculator()
        >>> result = calculator.calculate(NutritionFacts(energy_kj=180, sugars=10.6,
        ...     saturated_fat=0, sodium=0, fiber=0, proteins=0))
        >>> result.grade in ("A", "B")
        True
    """

    def __init__(self, tables: Optional[ReferenceTables] = None):
        self.tables = tables or load_reference_tables()

    def calculate(self, nutrition: NutritionFacts, is_beverage: bool = False) -> NutritionGrade:
        """Grade nutrition facts. Never raises."""
        try:
            return self._calculate(nutrition, is_beverage)
        except Exception as e:
            logger.warning("Nutrition grade calculation failed", error=str(e))
            return NutritionGrade(status="error", is_beverage=is_beverage)

    def _calculate(self, nutrition: NutritionFacts, is_beverage: bool) -> NutritionGrade:
        ns = self.tables.nutriscore
        values = self.enrich(nutrition)
        supplied = tuple(name for name in ns.field_weights if values[name] is not None)
        confidence = round(sum(ns.field_weights[name] for name in supplied), 2)

        if confidence < ns.min_confidence:
            logger.debug("Not enough nutrition data for a grade", confidence=confidence)
            return NutritionGrade(
                confidence=confidence,
                status="insufficient_data",
                impact=GradeImpact(description="Not enough nutrition data"),
                is_beverage=is_beverage,
                supplied_fields=supplied,
            )

        v = {name: value or 0.0 for name, value in values.items()}

        energy = threshold_points(v["energy_kj"], ns.energy_kj)
        saturated_fat = threshold_points(v["saturated_fat"], ns.saturated_fat)
        sugars = threshold_points(v["sugars"], ns.sugars)
        sodium = threshold_points(v["sodium"], ns.sodium_mg)
        negative = energy + saturated_fat + sugars + sodium

        fruits_vegetables = 0
        for threshold, points in ns.fruits_vegetables:
            if v["fruits_vegetables"] > threshold:
                fruits_vegetables = points
        fiber = threshold_points(v["fiber"], ns.fiber)
        proteins = threshold_points(v["proteins"], ns.proteins)
        positive = fruits_vegetables + fiber + proteins

        score = negative - positive
        grade = self.grade_for(score, is_beverage)

        logger.debug("Nutrition graded", score=score, grade=grade, beverage=is_beverage)
        return NutritionGrade(
            score=score,
            grade=grade,
            confidence=confidence,
            breakdown=NutritionPoints(
                negative=NegativePoints(
                    total=negative,
                    energy=energy,
                    saturated_fat=saturated_fat,
                    sugars=sugars,
                    sodium=sodium,
                ),
                positive=PositivePoints(
                    total=positive,
                    fruits_vegetables=fruits_vegetables,
                    fiber=fiber,
                    proteins=proteins,
                ),
            ),
            impact=GradeImpact(bonus=ns.grade_bonus[grade], description=_GRADE_DESCRIPTIONS[grade]),
            is_beverage=is_beverage,
            supplied_fields=supplied,
        )

    @staticmethod
    def enrich(nutrition: NutritionFacts) -> dict[str, Optional[float]]:
        """
        Derive kJ from kcal and sodium (mg) from salt (g) when missing.

        Returns the fields used by the point tables; None means not supplied.
        """
        energy_kj = nutrition.energy_kj
        if energy_kj is None and nutrition.energy_kcal is not None:
            energy_kj = nutrition.energy_kcal * KCAL_TO_KJ

        sodium = nutrition.sodium
        if sodium is None and nutrition.salt is not None:
            sodium = nutrition.salt * SALT_G_TO_SODIUM_MG

        return {
            "energy_kj": energy_kj,
            "saturated_fat": nutrition.saturated_fat,
            "sugars": nutrition.sugars,
            "sodium": sodium,
            "fiber": nutrition.fiber,
            "proteins": nutrition.proteins,
            "fruits_vegetables": nutrition.fruits_vegetables,
        }

    def grade_for(self, score: int, is_beverage: bool = False) -> str:
        bands: Sequence[GradeBand] = (
            self.tables.nutriscore.beverage_grades if is_beverage else self.tables.nutriscore.solid_grades
        )
        for band in bands:
            if score <= band.max_score:
                return band.grade
        return bands[-1].grade
