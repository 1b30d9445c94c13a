"""
Additive risk analyzer.

Detects E-numbers and common additive names, aggregates their EFSA risk
levels and synthesizes the gut microbiome impact.
"""

from __future__ import annotations

import re
from typing import Optional

import structlog

from ecoscore.domain.product.models import IngredientList
from ecoscore.domain.scoring.models import AdditiveReport, DetectedAdditive, MicrobiomeImpact
from ecoscore.domain.scoring.reference import ReferenceTables, load_reference_tables
from ecoscore.domain.scoring.reference.additives import AdditiveEntry

logger = structlog.get_logger(__name__)

_E_NUMBER = re.compile(r"e\s*(\d{3,4})([a-z]?)")

_RISK_ORDER = {"low": 0, "medium": 1, "high": 2}

COCKTAIL_THRESHOLD = 5
COCKTAIL_RISK_FACTOR = "Additive cocktail (cumulative effect)"


class AdditiveRiskAnalyzer:
    """
    Additive detection and risk aggregation.

    Rules:
    - Overall risk is the highest individual risk
    - 5+ distinct additives escalate to "high" (cocktail effect)
    - 3-4 distinct additives are at least "medium"
    - Codes missing from the table are reported as unknown

    Example:
        >>> analyzer = AdditiveRiskAnalyzer()
        >>> report = analyzer.analyze(IngredientList.from_raw("sucre, E471, E322"))
        >>> report.risk_level
        'medium'
    """

    def __init__(self, tables: Optional[ReferenceTables] = None):
        self.tables = tables or load_reference_tables()

    def analyze(self, ingredients: IngredientList) -> AdditiveReport:
        """Analyze additives. Never raises."""
        try:
            return self._analyze(ingredients)
        except Exception as e:
            logger.warning("Additive analysis failed", error=str(e))
            return AdditiveReport(confidence=0.8, status="error")

    def _analyze(self, ingredients: IngredientList) -> AdditiveReport:
        detected = self.detect(ingredients)
        known = [a for a in detected if a.known]

        level = "low"
        factors: list[str] = []
        for additive in known:
            if _RISK_ORDER[additive.risk_level] > _RISK_ORDER[level]:
                level = additive.risk_level
            factors.extend(additive.concerns)

        if len(detected) >= COCKTAIL_THRESHOLD:
            level = "high"
            factors.append(COCKTAIL_RISK_FACTOR)
        elif len(detected) >= 3 and level == "low":
            level = "medium"

        confidence = 0.8 if not detected else max(0.4, 0.9 * len(known) / len(detected))

        report = AdditiveReport(
            detected_additives=tuple(detected),
            risk_level=level,
            risk_factors=tuple(dict.fromkeys(factors)),
            microbiome_impact=self._microbiome_impact(known),
            controversial_count=sum(1 for a in known if a.risk_level == "high"),
            confidence=round(confidence, 2),
        )
        logger.debug("Additives analyzed", count=len(detected), risk_level=level)
        return report

    def detect(self, ingredients: IngredientList) -> list[DetectedAdditive]:
        """Distinct additives in order of first appearance."""
        text = ingredients.text
        found: dict[str, DetectedAdditive] = {}

        for number, suffix in _E_NUMBER.findall(text):
            entry = self._lookup(number, suffix)
            code = entry.code if entry else f"E{number}{suffix.upper()}"
            if code not in found:
                found[code] = self._to_detected(entry) if entry else DetectedAdditive(code=code, known=False)

        for entry in self.tables.additives.values():
            if entry.code in found:
                continue
            if any(name in text for name in entry.common_names):
                found[entry.code] = self._to_detected(entry)

        return list(found.values())

    def _lookup(self, number: str, suffix: str) -> Optional[AdditiveEntry]:
        table = self.tables.additives
        return table.get(f"E{number}{suffix.upper()}") or table.get(f"E{number}")

    @staticmethod
    def _to_detected(entry: AdditiveEntry) -> DetectedAdditive:
        return DetectedAdditive(
            code=entry.code,
            name=entry.name,
            category=entry.category,
            risk_level=entry.risk_level,
            concerns=entry.concerns,
            microbiome_severity=entry.microbiome_severity,
        )

    @staticmethod
    def _microbiome_impact(additives: list[DetectedAdditive]) -> MicrobiomeImpact:
        affected = [a for a in additives if a.microbiome_severity]
        severities = {a.microbiome_severity for a in affected}

        if "severe" in severities:
            impact = "severe"
        elif "moderate" in severities or len(affected) >= 2:
            impact = "moderate"
        else:
            impact = "minimal"

        return MicrobiomeImpact(global_impact=impact, affected=tuple(a.code for a in affected))
