"""
Glycemic index estimator.

Matches ingredients against the GI reference database, then adjusts the
base index for fiber, fat, protein and processing level.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Sequence

import structlog

from ecoscore.domain.product.models import IngredientList, NutritionFacts
from ecoscore.domain.scoring.models import (
    AppliedModifier,
    GlycemicBase,
    GlycemicEstimate,
    GlycemicImpact,
)
from ecoscore.domain.scoring.reference import ReferenceTables, load_reference_tables
from ecoscore.domain.scoring.reference.glycemic_index import (
    FAT_BANDS,
    FIBER_BANDS,
    GI_CATEGORY_MAX,
    GI_PENALTIES,
    GL_CATEGORY_MAX,
    MIN_MATCH_CONFIDENCE,
    PROCESSING_MODIFIERS,
    PROTEIN_BANDS,
    ModifierBand,
)

logger = structlog.get_logger(__name__)

_WORD_SPLIT = re.compile(r"[\s,_-]+")
_LEVEL_ORDER = {"low": 0, "medium": 1, "high": 2}

_EXPLANATIONS = {
    "low": "Low GI ({gi}): slow glucose absorption, stable blood sugar",
    "medium": "Moderate GI ({gi}): acceptable impact, eat in moderation",
    "high": "High GI ({gi}): fast blood sugar spike, risk of reactive hypoglycemia",
}


@dataclass(frozen=True)
class _BaseMatch:
    gi: int
    source: str
    category: str
    confidence: float


def match_confidence(ingredient: str, food_name: str) -> float:
    """
    Fuzzy match score between an ingredient and a reference food name.

    Example:
        >>> match_confidence("riz", "riz")
        0.95
        >>> match_confidence("riz complet bio", "riz complet")
        0.85
    """
    a = ingredient.lower().strip()
    b = food_name.lower().strip()
    if not a or not b:
        return 0.0
    if a == b:
        return 0.95
    if a in b or b in a:
        return 0.85

    a_words = [w for w in _WORD_SPLIT.split(a) if w]
    b_words = [w for w in _WORD_SPLIT.split(b) if w]
    matching = sum(
        1
        for word in a_words
        if len(word) > 3 and any(word in other or other in word for other in b_words)
    )
    ratio = matching / max(len(a_words), len(b_words), 1)

    if ratio >= 0.5:
        return 0.7
    if ratio >= 0.3:
        return 0.5
    if ratio > 0:
        return 0.3
    return 0.0


def _band(value: Optional[float], bands: Sequence[ModifierBand]) -> ModifierBand:
    v = value or 0.0
    for band in bands:
        if v < band.upper:
            return band
    return bands[-1]


class GlycemicEstimator:
    """
    Estimates glycemic index (0-100) and glycemic load.

    Load is computed from the final rounded index, so
    ``load == index * carbohydrates / 100`` holds exactly.

    Example:
        >>> estimator = GlycemicEstimator()
        >>> estimate = estimator.estimate(
        ...     IngredientList.from_raw(["riz"]),
        ...     NutritionFacts(fiber=1, fat=1, proteins=3),
        ...     processing_group=4,
        ... )
        >>> estimate.index, estimate.category
        (88, 'high')
    """

    def __init__(self, tables: Optional[ReferenceTables] = None):
        self.tables = tables or load_reference_tables()

    def estimate(
        self,
        ingredients: IngredientList,
        nutrition: NutritionFacts,
        processing_group: int = 1,
    ) -> GlycemicEstimate:
        """Estimate GI and GL. Never raises."""
        try:
            return self._estimate(ingredients, nutrition, processing_group)
        except Exception as e:
            logger.warning("Glycemic estimation failed", error=str(e))
            return GlycemicEstimate(
                status="error",
                explanation="Glycemic estimation failed",
            )

    def _estimate(
        self,
        ingredients: IngredientList,
        nutrition: NutritionFacts,
        processing_group: int,
    ) -> GlycemicEstimate:
        base = self.find_base(ingredients.lowered)
        if base is None:
            logger.debug("No glycemic reference found", ingredients=ingredients.items[:3])
            return GlycemicEstimate(
                status="insufficient_data",
                explanation="Ingredients not found in the glycemic index database",
            )

        fiber = _band(nutrition.fiber, FIBER_BANDS)
        fat = _band(nutrition.fat, FAT_BANDS)
        protein = _band(nutrition.proteins, PROTEIN_BANDS)
        processing_level, processing_factor = self._processing(processing_group)

        value = base.gi * fiber.factor * fat.factor * protein.factor * processing_factor
        index = max(0, min(100, round(value)))
        confidence = round(base.confidence * 0.95, 2)

        carbs = nutrition.carbohydrates
        load = index * carbs / 100 if carbs else 0.0

        category = self.categorize(index, load)
        penalty = self.penalty_for(index)

        logger.debug("Glycemic index estimated", index=index, load=load, source=base.source)
        return GlycemicEstimate(
            index=index,
            load=load,
            category=category,
            confidence=confidence,
            base=GlycemicBase(value=base.gi, source=base.source, category=base.category),
            modifiers_applied={
                "fiber": AppliedModifier(level=fiber.level, factor=fiber.factor),
                "fat": AppliedModifier(level=fat.level, factor=fat.factor),
                "protein": AppliedModifier(level=protein.level, factor=protein.factor),
                "processing": AppliedModifier(level=processing_level, factor=processing_factor),
            },
            impact=GlycemicImpact(penalty=penalty, description=self._penalty_description(index, penalty)),
            explanation=self._explanation(index, load, category),
        )

    def find_base(self, ingredients: Sequence[str]) -> Optional[_BaseMatch]:
        """Best database match, or a heuristic on the primary ingredient."""
        if not ingredients:
            return None

        best: Optional[_BaseMatch] = None
        best_score = 0.0
        for name, food in self.tables.glycemic_foods.items():
            for ingredient in ingredients:
                score = match_confidence(ingredient, name)
                if score > best_score and score >= MIN_MATCH_CONFIDENCE:
                    best_score = score
                    best = _BaseMatch(
                        gi=food.gi,
                        source=name,
                        category=food.category,
                        confidence=min(score, food.confidence),
                    )
        if best is not None:
            return best

        primary = ingredients[0]
        for fallback in self.tables.glycemic_fallbacks:
            if fallback.pattern.search(primary):
                return _BaseMatch(
                    gi=fallback.gi,
                    source=fallback.source,
                    category="default_estimation",
                    confidence=fallback.confidence,
                )
        return None

    @staticmethod
    def _processing(group: int) -> tuple[str, float]:
        for upper, level, factor in PROCESSING_MODIFIERS:
            if group <= upper:
                return level, factor
        return PROCESSING_MODIFIERS[-1][1], PROCESSING_MODIFIERS[-1][2]

    @staticmethod
    def categorize(index: float, load: float) -> str:
        """More restrictive of the GI and GL categories."""
        gi_level = "low" if index <= GI_CATEGORY_MAX["low"] else (
            "medium" if index <= GI_CATEGORY_MAX["medium"] else "high"
        )
        gl_level = "low" if load <= GL_CATEGORY_MAX["low"] else (
            "medium" if load <= GL_CATEGORY_MAX["medium"] else "high"
        )
        return gi_level if _LEVEL_ORDER[gi_level] >= _LEVEL_ORDER[gl_level] else gl_level

    @staticmethod
    def penalty_for(index: float) -> int:
        for upper, penalty in GI_PENALTIES:
            if index <= upper:
                return penalty
        return GI_PENALTIES[-1][1]

    @staticmethod
    def _penalty_description(index: int, penalty: int) -> str:
        if penalty == 0:
            return f"Very low GI ({index}), no penalty"
        return f"GI {index}, penalty {penalty} pts"

    @staticmethod
    def _explanation(index: int, load: float, category: str) -> str:
        text = _EXPLANATIONS[category].format(gi=index)
        if load > 0:
            text += f". Glycemic load: {load:.1f}"
        return text
