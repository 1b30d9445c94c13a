"""
Processing level classifier.

NOVA-style rules over the ingredient text: additive codes, industrial
ingredients, industrial processes and ultra-processed terms.
"""

from __future__ import annotations

import re
from typing import Optional

import structlog

from ecoscore.domain.product.models import IngredientList
from ecoscore.domain.scoring.models import ProcessingClassification, ProcessingMarkers
from ecoscore.domain.scoring.reference import ReferenceTables, load_reference_tables

logger = structlog.get_logger(__name__)

_E_CODE = re.compile(r"e\d{3,4}")

MAX_COUNTED_INGREDIENTS = 50


class ProcessingClassifier:
    """
    Assigns a processing group from 1 (unprocessed) to 4 (ultra-processed).

    First matching rule wins:
    - 4: 3+ additive codes, 2+ industrial ingredients or any ultra-processed term
    - 3: any additive code, any process indicator or 8+ ingredients
    - 2: 3 to 7 ingredients
    - 1: otherwise

    Example:
        >>> classifier = ProcessingClassifier()
        >>> result = classifier.classify(IngredientList.from_raw("pommes"))
        >>> result.group
        1
    """

    def __init__(self, tables: Optional[ReferenceTables] = None):
        self.tables = tables or load_reference_tables()

    def classify(self, ingredients: IngredientList, product_name: str = "") -> ProcessingClassification:
        """Classify a product. Never raises."""
        try:
            return self._classify(ingredients, product_name)
        except Exception as e:
            logger.warning("Processing classification failed", error=str(e), product=product_name)
            return ProcessingClassification(
                group=1,
                confidence=0.3,
                reasoning=("Classification error, defaulted to group 1",),
                status="error",
            )

    def _classify(self, ingredients: IngredientList, product_name: str) -> ProcessingClassification:
        counted = [item for item in ingredients.lowered if len(item) > 2][:MAX_COUNTED_INGREDIENTS]
        markers = self.detect_markers(ingredients, product_name)

        group = self._determine_group(len(counted), markers)

        confidence = 0.3
        if counted:
            confidence += 0.3
        if markers.additives_count > 0:
            confidence += 0.2
        if markers.industrial_ingredients:
            confidence += 0.2

        result = ProcessingClassification(
            group=group,
            confidence=round(min(1.0, confidence), 2),
            reasoning=self._reasoning(group, markers),
            detected_markers=markers,
            ingredients_count=len(counted),
        )
        logger.debug(
            "Processing classified",
            group=group,
            additives=markers.additives_count,
            industrial=len(markers.industrial_ingredients),
        )
        return result

    def detect_markers(self, ingredients: IngredientList, product_name: str = "") -> ProcessingMarkers:
        name = product_name.lower()
        text = f"{ingredients.text} {name}"
        rules = self.tables.nova

        return ProcessingMarkers(
            additives_count=len(_E_CODE.findall(text)),
            industrial_ingredients=tuple(
                entry.name for entry in rules.industrial_ingredients if entry.name in text
            ),
            process_indicators=tuple(term for term in rules.process_indicators if term in text),
            ultra_processed_terms=tuple(
                term for term in rules.ultra_processed_terms if term in text or term in name
            ),
        )

    @staticmethod
    def _determine_group(count: int, markers: ProcessingMarkers) -> int:
        if (
            markers.additives_count >= 3
            or len(markers.industrial_ingredients) >= 2
            or markers.ultra_processed_terms
        ):
            return 4
        if markers.additives_count >= 1 or markers.process_indicators or count >= 8:
            return 3
        if 3 <= count <= 7:
            return 2
        return 1

    @staticmethod
    def _reasoning(group: int, markers: ProcessingMarkers) -> tuple[str, ...]:
        reasons: list[str] = []
        if group == 4:
            if markers.additives_count >= 3:
                reasons.append(f"{markers.additives_count} additives detected (ultra-processing threshold)")
            if markers.industrial_ingredients:
                reasons.append("Industrial ingredients: " + ", ".join(markers.industrial_ingredients))
            if markers.ultra_processed_terms:
                reasons.append("Ultra-processed terms: " + ", ".join(markers.ultra_processed_terms))
        elif group == 3:
            if markers.additives_count >= 1:
                reasons.append(f"{markers.additives_count} additive(s) present")
            if markers.process_indicators:
                reasons.append("Industrial processes: " + ", ".join(markers.process_indicators))
            if not reasons:
                reasons.append("Long ingredient list (8 or more)")
        elif group == 2:
            reasons.append("Lightly processed product (3-7 ingredients)")
        else:
            reasons.append("Unprocessed or minimally processed product")
        return tuple(reasons)
