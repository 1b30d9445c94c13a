"""
Overall confidence calculation.

Maps data completeness and component confidences to a 0-1 score.
"""

from __future__ import annotations

from typing import Mapping

import structlog

logger = structlog.get_logger(__name__)

PUBLISHABLE_THRESHOLD = 0.4


class ConfidenceCalculator:
    """
    Confidence = 0.2 base
               + 0.3 * min(1, ingredient_count / 5)
               + 0.2 if nutrition facts were supplied
               + 0.3 * weight-averaged component confidence

    Result rounded to 2 decimals and capped at 1.0.

    Example:
        >>> calculator = ConfidenceCalculator()
        >>> calculator.calculate(5, True, {"a": (1.0, 0.5), "b": (1.0, 0.5)})
        1.0
    """

    def calculate(
        self,
        ingredient_count: int,
        has_nutrition: bool,
        components: Mapping[str, tuple[float, float]],
    ) -> float:
        """
        Args:
            ingredient_count: Number of ingredient tokens
            has_nutrition: True if any nutrition field was supplied
            components: name -> (confidence, weight)
        """
        try:
            confidence = 0.2
            confidence += 0.3 * min(1.0, max(0, ingredient_count) / 5)
            if has_nutrition:
                confidence += 0.2

            total_weight = sum(weight for _, weight in components.values())
            if total_weight > 0:
                averaged = sum(c * w for c, w in components.values()) / total_weight
                confidence += 0.3 * averaged

            return min(1.0, round(confidence, 2))
        except Exception as e:
            logger.warning("Confidence calculation failed", error=str(e))
            return 0.1

    @staticmethod
    def interpret(confidence: float) -> str:
        if confidence >= 0.8:
            return "very_high"
        if confidence >= 0.6:
            return "high"
        if confidence >= 0.4:
            return "medium"
        return "low"

    @staticmethod
    def is_publishable(confidence: float) -> bool:
        return confidence >= PUBLISHABLE_THRESHOLD
