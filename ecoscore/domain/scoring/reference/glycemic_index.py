"""
Glycemic index reference database.

Values follow the International GI Tables (University of Sydney) with
French and English food names. Names are lower-case.
"""

from __future__ import annotations

import re
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class GlycemicFood:
    gi: int
    category: str
    confidence: float


@dataclass(frozen=True, slots=True)
class GlycemicFallback:
    """Heuristic applied to the primary ingredient when nothing matches."""

    pattern: re.Pattern[str]
    gi: int
    confidence: float
    source: str


@dataclass(frozen=True, slots=True)
class ModifierBand:
    level: str
    upper: float  # exclusive; inf for the last band
    factor: float


_INF = float("inf")


def _foods(category: str, confidence: float, items: dict[str, int]) -> dict[str, GlycemicFood]:
    return {name: GlycemicFood(gi, category, confidence) for name, gi in items.items()}


GLYCEMIC_FOODS: dict[str, GlycemicFood] = {
    **_foods(
        "cereals",
        0.9,
        {
            "riz": 73,
            "riz blanc": 73,
            "riz complet": 68,
            "riz basmati": 58,
            "galette de riz": 82,
            "rice": 73,
            "brown rice": 68,
            "rice cake": 82,
            "farine de blé": 75,
            "wheat flour": 75,
            "pain blanc": 75,
            "white bread": 75,
            "pain complet": 69,
            "baguette": 95,
            "pâtes": 49,
            "pasta": 49,
            "flocons d'avoine": 55,
            "oats": 55,
            "corn flakes": 81,
            "quinoa": 53,
        },
    ),
    **_foods(
        "sugars",
        0.9,
        {
            "glucose": 100,
            "sucre": 65,
            "sugar": 65,
            "miel": 61,
            "honey": 61,
            "fructose": 15,
            "sirop d'érable": 54,
            "maple syrup": 54,
        },
    ),
    **_foods(
        "fruits",
        0.85,
        {
            "pomme": 36,
            "apple": 36,
            "banane": 51,
            "banana": 51,
            "orange": 43,
            "raisin": 59,
            "grapes": 59,
            "dattes": 42,
            "dates": 42,
        },
    ),
    **_foods(
        "vegetables",
        0.85,
        {
            "pomme de terre": 78,
            "potato": 78,
            "carotte": 39,
            "carrot": 39,
            "lentilles": 32,
            "lentils": 32,
            "pois chiches": 28,
            "chickpeas": 28,
        },
    ),
    **_foods("dairy", 0.85, {"lait": 39, "milk": 39, "yaourt": 41, "yogurt": 41}),
    **_foods(
        "snacks",
        0.8,
        {
            "chocolat noir": 23,
            "dark chocolate": 23,
            "chocolat au lait": 43,
            "milk chocolate": 43,
            "chips": 56,
            "biscuit": 69,
        },
    ),
}

GLYCEMIC_FALLBACKS: tuple[GlycemicFallback, ...] = (
    GlycemicFallback(re.compile(r"sucre|sugar|glucose|sirop|syrup|miel|honey"), 70, 0.6, "sugar estimate"),
    GlycemicFallback(re.compile(r"farine|flour|blé|wheat|avoine|oat"), 65, 0.5, "cereal estimate"),
    GlycemicFallback(re.compile(r"riz|rice"), 70, 0.6, "rice estimate"),
    GlycemicFallback(re.compile(r"fruit|pomme|apple|orange"), 45, 0.4, "fruit estimate"),
    GlycemicFallback(
        re.compile(r"légume|vegetable|carotte|carrot|tomate|tomato"), 35, 0.4, "vegetable estimate"
    ),
    GlycemicFallback(re.compile(r"lait|milk|yaourt|yogurt"), 35, 0.5, "dairy estimate"),
)

FIBER_BANDS = (
    ModifierBand("low", 3, 1.0),
    ModifierBand("medium", 6, 0.90),
    ModifierBand("high", _INF, 0.80),
)
FAT_BANDS = (
    ModifierBand("low", 5, 1.0),
    ModifierBand("medium", 15, 0.95),
    ModifierBand("high", _INF, 0.85),
)
PROTEIN_BANDS = (
    ModifierBand("low", 5, 1.0),
    ModifierBand("medium", 15, 0.95),
    ModifierBand("high", _INF, 0.90),
)

# processing group upper bound (inclusive) -> (level, factor)
PROCESSING_MODIFIERS: tuple[tuple[int, str, float], ...] = (
    (1, "minimal", 1.0),
    (3, "processed", 1.1),
    (4, "ultra_processed", 1.2),
)

GI_CATEGORY_MAX = {"low": 55, "medium": 69}
GL_CATEGORY_MAX = {"low": 10, "medium": 19}

# (max index inclusive, penalty)
GI_PENALTIES: tuple[tuple[float, int], ...] = (
    (35, 0),
    (55, -3),
    (69, -8),
    (84, -15),
    (_INF, -25),
)

MIN_MATCH_CONFIDENCE = 0.3
