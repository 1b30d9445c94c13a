"""
Educational insights and recommendations for food products.
"""

from __future__ import annotations

from typing import Optional

from ecoscore.domain.scoring.models import (
    AdditiveReport,
    GlycemicEstimate,
    Insight,
    NutritionGrade,
    ProcessingClassification,
)

HIGH_GLYCEMIC_INDEX = 70


class InsightGenerator:
    """
    Turns component results into insights and recommendations.

    Pure function of its inputs; order of the output is stable:
    processing, microbiome, nutrition, glycemic.
    """

    def insights(
        self,
        processing: ProcessingClassification,
        additives: AdditiveReport,
        nutrition: NutritionGrade,
        glycemic: GlycemicEstimate,
    ) -> tuple[Insight, ...]:
        items: list[Insight] = []

        if processing.group >= 4:
            items.append(
                Insight(
                    type="ultra_processing",
                    title="Ultra-processed product",
                    content=(
                        "Ultra-processed foods raise cardiovascular risk by about 10% "
                        "per daily serving."
                    ),
                    source="BMJ 2024",
                )
            )

        affected = len(additives.microbiome_impact.affected)
        if affected:
            items.append(
                Insight(
                    type="microbiome_disruption",
                    title=f"{affected} additive(s) affecting the gut microbiome",
                    content="Emulsifiers can disturb the gut microbiome within two weeks.",
                    source="Cell 2024",
                )
            )

        if nutrition.grade in ("D", "E"):
            items.append(
                Insight(
                    type="poor_nutrition",
                    title=f"Nutrition grade {nutrition.grade}",
                    content="An unfavourable nutrition profile contributes to chronic disease.",
                    source="ANSES 2024",
                )
            )

        if glycemic.index is not None and glycemic.index > HIGH_GLYCEMIC_INDEX:
            items.append(
                Insight(
                    type="high_glycemic",
                    title=f"High glycemic index ({glycemic.index})",
                    content="A GI above 70 causes a blood sugar spike close to pure glucose.",
                    source="International GI Tables 2024",
                )
            )

        return tuple(items)

    def recommendations(
        self,
        processing_penalty: int,
        nutrition_bonus: Optional[int],
        glycemic_penalty: Optional[int],
    ) -> tuple[str, ...]:
        """High priority first; a default when nothing stands out."""
        items: list[str] = []
        if processing_penalty < -20:
            items.append("Prefer unprocessed or minimally processed foods (groups 1-2)")
        if nutrition_bonus is not None and nutrition_bonus < 0:
            items.append("Choose products with a better nutrition grade (A or B)")
        if glycemic_penalty is not None and glycemic_penalty < -10:
            items.append("Pair with fiber or protein to soften the glycemic impact")
        if not items:
            items.append("Keep favouring less processed products")
        return tuple(items)
