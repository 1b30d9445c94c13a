"""
Household chemical risk scorer.

Scores detergents and cleaning products on four axes (ecotoxicity,
biodegradability, skin irritation, environmental impact) from REACH/ECHA
based ingredient tables and eco certifications.
"""

from __future__ import annotations

from typing import Optional, Sequence

import structlog

from ecoscore.domain.product.models import IngredientList
from ecoscore.domain.scoring.models import (
    Alternative,
    BiodegradabilityScore,
    ChemicalBreakdown,
    ChemicalPenalty,
    ChemicalRiskResult,
    DetectedCertification,
    DetectedIssue,
    EnvironmentalScore,
    Insight,
    Irritant,
    IrritationScore,
    ToxicityScore,
)
from ecoscore.domain.scoring.reference import ReferenceTables, load_reference_tables
from ecoscore.domain.scoring.reference.household_chemicals import DETERGENT_KEYWORDS

logger = structlog.get_logger(__name__)

WEIGHTS = {
    "ecotoxicity": 0.30,
    "biodegradability": 0.25,
    "irritation": 0.25,
    "environmental": 0.20,
}

_IRRITATION_PENALTIES = {"severe": 25, "moderate": 15, "mild": 5}


def _clamp(value: float) -> float:
    return max(0.0, min(100.0, value))


class ChemicalRiskScorer:
    """
    Household chemical scorer.

    Every sub-score starts at 100 and is clamped to [0, 100]. The final
    score is the 30/25/25/20 weighted sum of ecotoxicity,
    biodegradability, irritation and environmental sub-scores.

    Example:
        >>> scorer = ChemicalRiskScorer()
        >>> result = scorer.score(
        ...     IngredientList.from_raw("Aqua, Coco Glucoside, Citric Acid"),
        ...     product_name="Lessive ECOCERT",
        ... )
        >>> result.score >= 80
        True
    """

    def __init__(self, tables: Optional[ReferenceTables] = None):
        self.tables = tables or load_reference_tables()

    def score(
        self,
        ingredients: IngredientList,
        product_name: str = "",
        certifications: Sequence[str] = (),
    ) -> ChemicalRiskResult:
        """Score a household product. Never raises."""
        try:
            return self._score(ingredients, product_name, certifications)
        except Exception as e:
            logger.warning("Household product scoring failed", error=str(e), product=product_name)
            return self._fallback()

    def _score(
        self,
        ingredients: IngredientList,
        product_name: str,
        certifications: Sequence[str],
    ) -> ChemicalRiskResult:
        normalized = ingredients.normalized
        detected_certs = self.detect_certifications(product_name, certifications)

        ecotoxicity = self._toxicity(normalized)
        biodegradability = self._biodegradability(normalized)
        irritation = self._irritation(normalized)
        environmental = self._environmental(normalized, detected_certs)

        final = round(
            ecotoxicity.score * WEIGHTS["ecotoxicity"]
            + biodegradability.score * WEIGHTS["biodegradability"]
            + irritation.score * WEIGHTS["irritation"]
            + environmental.score * WEIGHTS["environmental"]
        )
        final = int(_clamp(final))

        logger.info("Household product scored", product=product_name, score=final)
        return ChemicalRiskResult(
            score=final,
            confidence=self.confidence(len(normalized), product_name),
            breakdown=ChemicalBreakdown(
                ecotoxicity=ecotoxicity,
                biodegradability=biodegradability,
                irritation=irritation,
                environmental=environmental,
            ),
            detected_issues=self.detect_issues(normalized),
            detected_certifications=detected_certs,
            alternatives=self._alternatives(final, normalized),
            insights=self._insights(final, ecotoxicity, biodegradability),
        )

    @staticmethod
    def _fallback() -> ChemicalRiskResult:
        return ChemicalRiskResult(
            score=50,
            confidence=0.1,
            breakdown=ChemicalBreakdown(
                ecotoxicity=ToxicityScore(score=50),
                biodegradability=BiodegradabilityScore(score=50, biodegradable_ratio=50),
                irritation=IrritationScore(score=50, skin_safety="moderate"),
                environmental=EnvironmentalScore(score=50, sustainability="needs_improvement"),
            ),
        )

    @staticmethod
    def confidence(ingredients_count: int, product_name: str) -> float:
        confidence = 0.5
        if ingredients_count >= 5:
            confidence += 0.3
        elif ingredients_count >= 3:
            confidence += 0.2
        elif ingredients_count >= 1:
            confidence += 0.1

        if product_name and len(product_name) > 3:
            confidence += 0.2
            lowered = product_name.lower()
            if any(keyword in lowered for keyword in DETERGENT_KEYWORDS):
                confidence += 0.1

        return round(min(1.0, confidence), 2)

    # ═══════════════════════════════════════════════════════════
    # SUB-SCORES
    # ═══════════════════════════════════════════════════════════

    def _toxicity(self, ingredients: Sequence[str]) -> ToxicityScore:
        score = 100.0
        penalties: list[ChemicalPenalty] = []
        issues: list[str] = []

        for ingredient in ingredients:
            harmful = self.tables.harmful_chemicals.get(ingredient)
            if harmful is None:
                continue
            score += harmful.penalty
            penalties.append(
                ChemicalPenalty(
                    ingredient=ingredient,
                    penalty=harmful.penalty,
                    reason=harmful.toxicity,
                    source=harmful.source,
                )
            )
            if harmful.toxicity == "very_high" or harmful.carcinogen:
                issues.append(f"{ingredient}: highly toxic ({harmful.source})")

        return ToxicityScore(score=_clamp(score), penalties=tuple(penalties), issues=tuple(issues))

    def _biodegradability(self, ingredients: Sequence[str]) -> BiodegradabilityScore:
        score = 100.0
        biodegradable = 0
        persistent = 0
        analysis: list[str] = []

        for ingredient in ingredients:
            harmful = self.tables.harmful_chemicals.get(ingredient)
            eco = self.tables.eco_chemicals.get(ingredient)
            if harmful is not None and harmful.biodegradable is False:
                score -= 20
                persistent += 1
                analysis.append(f"{ingredient}: not biodegradable")
            elif eco is not None and eco.biodegradable:
                score += eco.bonus / 2
                biodegradable += 1
                analysis.append(f"{ingredient}: biodegradable")

        classified = biodegradable + persistent
        # Nothing classifiable: neutral ratio
        ratio = biodegradable / classified if classified else 0.5
        score *= ratio

        return BiodegradabilityScore(
            score=_clamp(score),
            biodegradable_ratio=round(ratio * 100),
            analysis=tuple(analysis),
        )

    def _irritation(self, ingredients: Sequence[str]) -> IrritationScore:
        score = 100.0
        allergens: list[str] = []
        irritants: list[Irritant] = []

        for ingredient in ingredients:
            harmful = self.tables.harmful_chemicals.get(ingredient)
            if harmful is not None:
                if harmful.allergen:
                    allergens.append(ingredient)
                    score -= 15
                if harmful.irritation in _IRRITATION_PENALTIES:
                    score -= _IRRITATION_PENALTIES[harmful.irritation]
                    irritants.append(Irritant(ingredient=ingredient, level=harmful.irritation))

            eco = self.tables.eco_chemicals.get(ingredient)
            if eco is not None and eco.gentle:
                score += 5

        if score > 80:
            skin_safety = "excellent"
        elif score > 60:
            skin_safety = "good"
        elif score > 40:
            skin_safety = "moderate"
        else:
            skin_safety = "poor"

        return IrritationScore(
            score=_clamp(score),
            allergens=tuple(allergens),
            irritants=tuple(irritants),
            skin_safety=skin_safety,
        )

    def _environmental(
        self,
        ingredients: Sequence[str],
        certifications: Sequence[DetectedCertification],
    ) -> EnvironmentalScore:
        score = 100.0
        eco_bonus = 0.0
        natural = 0

        for ingredient in ingredients:
            eco = self.tables.eco_chemicals.get(ingredient)
            if eco is not None:
                eco_bonus += eco.bonus / 3
                if eco.natural or eco.plant_based:
                    natural += 1
            harmful = self.tables.harmful_chemicals.get(ingredient)
            if harmful is not None and harmful.environmental:
                score -= 20

        certification_bonus = sum(cert.bonus / 2 for cert in certifications)
        natural_ratio = natural / max(1, len(ingredients))
        score += eco_bonus + certification_bonus + natural_ratio * 20

        if score > 80:
            sustainability = "excellent"
        elif score > 60:
            sustainability = "good"
        else:
            sustainability = "needs_improvement"

        return EnvironmentalScore(
            score=_clamp(score),
            natural_ratio=round(natural_ratio * 100),
            eco_bonus=round(eco_bonus),
            certification_bonus=round(certification_bonus),
            sustainability=sustainability,
        )

    # ═══════════════════════════════════════════════════════════
    # DETECTION
    # ═══════════════════════════════════════════════════════════

    def detect_issues(self, ingredients: Sequence[str]) -> tuple[DetectedIssue, ...]:
        issues: list[DetectedIssue] = []
        for ingredient in ingredients:
            harmful = self.tables.harmful_chemicals.get(ingredient)
            if harmful is None:
                continue
            if harmful.carcinogen:
                issues.append(
                    DetectedIssue(
                        severity="critical",
                        ingredient=ingredient,
                        issue=f"Carcinogen ({harmful.carcinogen})",
                        source=harmful.source,
                    )
                )
            if harmful.environmental == "eutrophication":
                issues.append(
                    DetectedIssue(
                        severity="high",
                        ingredient=ingredient,
                        issue="Water pollution (eutrophication)",
                        source=harmful.source,
                    )
                )
            if harmful.biodegradable is False and harmful.toxicity == "high":
                issues.append(
                    DetectedIssue(
                        severity="high",
                        ingredient=ingredient,
                        issue="Not biodegradable and highly toxic",
                        source=harmful.source,
                    )
                )
        return tuple(issues)

    def detect_certifications(
        self, product_name: str, certifications: Sequence[str]
    ) -> tuple[DetectedCertification, ...]:
        """Certifications named in the product name or the certification list."""
        search = " ".join([product_name, *certifications]).upper()
        return tuple(
            DetectedCertification(name=name, bonus=cert.bonus, credibility=cert.credibility)
            for name, cert in self.tables.certifications.items()
            if name in search
        )

    # ═══════════════════════════════════════════════════════════
    # ADVICE
    # ═══════════════════════════════════════════════════════════

    def _alternatives(self, score: int, ingredients: Sequence[str]) -> tuple[Alternative, ...]:
        alternatives: list[Alternative] = []
        if score >= 80:
            alternatives.append(
                Alternative(
                    type="perfection",
                    title="Home-made natural cleaner",
                    description="Baking soda, white vinegar and essential oils",
                    benefits=("100% biodegradable", "No allergens", "About 70% cheaper"),
                )
            )
        elif score >= 60:
            alternatives.append(
                Alternative(
                    type="eco_certified",
                    title="EU Ecolabel certified products",
                    description="Concentrated detergent with plant-based surfactants",
                    benefits=("Biodegradable in 28 days", "Recyclable packaging", "Proven efficacy"),
                )
            )
        else:
            alternatives.append(
                Alternative(
                    type="urgent_replacement",
                    title="Replacement strongly recommended",
                    description="Switch to a product without toxic ingredients",
                    benefits=("No irritants", "Health protection", "Less water pollution"),
                )
            )

        if any(
            (harmful := self.tables.harmful_chemicals.get(i)) is not None and harmful.irritation == "severe"
            for i in ingredients
        ):
            alternatives.append(
                Alternative(
                    type="sensitive_skin",
                    title="Hypoallergenic formulas",
                    description="Products without sulfates or MIT/BIT preservatives",
                    benefits=("Dermatologically tested", "Suitable for sensitive skin"),
                )
            )
        return tuple(alternatives)

    @staticmethod
    def _insights(
        score: int,
        ecotoxicity: ToxicityScore,
        biodegradability: BiodegradabilityScore,
    ) -> tuple[Insight, ...]:
        insights: list[Insight] = []
        if score < 40:
            insights.append(
                Insight(
                    type="health_alert",
                    title="High-risk product",
                    content="Contains several problematic ingredients listed in REACH and ECHA databases.",
                    source="European Chemicals Agency 2024",
                )
            )
        elif score < 70:
            insights.append(
                Insight(
                    type="improvement_needed",
                    title="Room for improvement",
                    content="A decent product, but greener alternatives exist.",
                    source="Life Cycle Assessment studies",
                )
            )
        else:
            insights.append(
                Insight(
                    type="good_choice",
                    title="Excellent ecological choice",
                    content="Respectful of both the environment and health.",
                    source="EU Ecolabel criteria",
                )
            )

        if biodegradability.score < 60:
            insights.append(
                Insight(
                    type="environmental_education",
                    title="Biodegradability",
                    content="Non-biodegradable surfactants accumulate in rivers.",
                    source="OECD 301 & Water Framework Directive",
                )
            )
        if ecotoxicity.issues:
            insights.append(
                Insight(
                    type="toxicity_education",
                    title="Ecotoxicity research",
                    content="Recent studies show effects on aquatic wildlife.",
                    source="Environmental research 2024",
                )
            )
        return tuple(insights)
