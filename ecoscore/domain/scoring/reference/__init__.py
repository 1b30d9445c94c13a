"""
Reference tables bundle.

All rule tables used by the classifiers, gathered in one immutable,
versioned object. Tables are validated once at load time; a broken table
raises ConfigurationError instead of producing odd scores at request time.

Example:
    >>> tables = load_reference_tables()
    >>> tables.additives["E471"].risk_level
    'medium'
"""

from __future__ import annotations

import dataclasses
import re
from dataclasses import dataclass, field
from functools import lru_cache
from types import MappingProxyType
from typing import Mapping, Sequence

import structlog

from ecoscore.domain.scoring.reference.additives import ADDITIVES, AdditiveEntry
from ecoscore.domain.scoring.reference.glycemic_index import (
    GLYCEMIC_FALLBACKS,
    GLYCEMIC_FOODS,
    GlycemicFallback,
    GlycemicFood,
)
from ecoscore.domain.scoring.reference.household_chemicals import (
    CERTIFICATIONS,
    ECO_INGREDIENTS,
    HARMFUL_INGREDIENTS,
    Certification,
    EcoIngredient,
    HarmfulIngredient,
)
from ecoscore.domain.scoring.reference.nova_rules import NOVA_RULES, NovaRules
from ecoscore.domain.scoring.reference.nutriscore_tables import (
    NUTRISCORE_TABLES,
    NutriScoreTables,
)
from ecoscore.domain.shared.errors import ConfigurationError

logger = structlog.get_logger(__name__)

REFERENCE_TABLES_VERSION = "2024.1"

_ADDITIVE_CODE = re.compile(r"^E\d{3,4}[A-Z]?$")
_RISK_LEVELS = {"low", "medium", "high"}
_SEVERITIES = {None, "mild", "moderate", "severe"}
_IRRITATION_LEVELS = {None, "mild", "moderate", "severe"}


@dataclass(frozen=True)
class ReferenceTables:
    """
    Immutable bundle of every rule table, injected into classifiers.

    The default bundle exposes its mappings as read-only proxies: it is
    shared by every classifier in the process.
    """

    version: str
    nova: NovaRules
    additives: Mapping[str, AdditiveEntry]
    nutriscore: NutriScoreTables
    glycemic_foods: Mapping[str, GlycemicFood]
    glycemic_fallbacks: tuple[GlycemicFallback, ...]
    harmful_chemicals: Mapping[str, HarmfulIngredient]
    eco_chemicals: Mapping[str, EcoIngredient]
    certifications: Mapping[str, Certification] = field(default_factory=dict)

    def validate(self) -> None:
        """
        Check table consistency.

        Raises:
            ConfigurationError: On the first inconsistency found
        """
        if not self.nova.industrial_ingredients or not self.nova.ultra_processed_terms:
            raise ConfigurationError("Processing rule tables are empty")

        for code, entry in self.additives.items():
            if code != entry.code or not _ADDITIVE_CODE.match(code):
                raise ConfigurationError(f"Invalid additive code: {code}")
            if entry.risk_level not in _RISK_LEVELS:
                raise ConfigurationError(f"Invalid risk level for {code}: {entry.risk_level}")
            if entry.microbiome_severity not in _SEVERITIES:
                raise ConfigurationError(
                    f"Invalid microbiome severity for {code}: {entry.microbiome_severity}"
                )

        ns = self.nutriscore
        for name in ("energy_kj", "saturated_fat", "sugars", "sodium_mg", "fiber", "proteins"):
            _require_increasing(name, getattr(ns, name))
        _require_increasing("fruits_vegetables", [t for t, _ in ns.fruits_vegetables])
        for bands_name in ("solid_grades", "beverage_grades"):
            bands = getattr(ns, bands_name)
            _require_increasing(bands_name, [b.max_score for b in bands])
            if [b.grade for b in bands] != ["A", "B", "C", "D", "E"]:
                raise ConfigurationError(f"{bands_name} must cover grades A to E in order")
        if abs(sum(ns.field_weights.values()) - 1.0) > 0.01:
            raise ConfigurationError("Nutrition field weights must sum to 1.0")

        for name, food in self.glycemic_foods.items():
            if not 0 <= food.gi <= 100 or not 0 <= food.confidence <= 1:
                raise ConfigurationError(f"Invalid glycemic entry: {name}")

        for name, harmful in self.harmful_chemicals.items():
            if harmful.penalty > 0:
                raise ConfigurationError(f"Harmful ingredient {name} has a positive penalty")
            if harmful.irritation not in _IRRITATION_LEVELS:
                raise ConfigurationError(f"Invalid irritation level for {name}")
        for name, eco in self.eco_chemicals.items():
            if eco.bonus < 0:
                raise ConfigurationError(f"Eco ingredient {name} has a negative bonus")
        overlap = set(self.harmful_chemicals) & set(self.eco_chemicals)
        if overlap:
            raise ConfigurationError(f"Ingredients listed as harmful and eco: {sorted(overlap)}")


def _require_increasing(name: str, values: Sequence[float]) -> None:
    if any(b <= a for a, b in zip(values, values[1:])):
        raise ConfigurationError(f"Thresholds for {name} must be strictly increasing")


@lru_cache(maxsize=1)
def load_reference_tables() -> ReferenceTables:
    """Build and validate the default tables (once per process)."""
    tables = ReferenceTables(
        version=REFERENCE_TABLES_VERSION,
        nova=NOVA_RULES,
        additives=MappingProxyType(dict(ADDITIVES)),
        nutriscore=dataclasses.replace(
            NUTRISCORE_TABLES,
            field_weights=MappingProxyType(dict(NUTRISCORE_TABLES.field_weights)),
            grade_bonus=MappingProxyType(dict(NUTRISCORE_TABLES.grade_bonus)),
        ),
        glycemic_foods=MappingProxyType(dict(GLYCEMIC_FOODS)),
        glycemic_fallbacks=GLYCEMIC_FALLBACKS,
        harmful_chemicals=MappingProxyType(dict(HARMFUL_INGREDIENTS)),
        eco_chemicals=MappingProxyType(dict(ECO_INGREDIENTS)),
        certifications=MappingProxyType(dict(CERTIFICATIONS)),
    )
    tables.validate()
    logger.info(
        "Reference tables loaded",
        version=tables.version,
        additives=len(tables.additives),
        glycemic_foods=len(tables.glycemic_foods),
    )
    return tables


__all__ = [
    "REFERENCE_TABLES_VERSION",
    "ReferenceTables",
    "load_reference_tables",
]
