"""
Nutri-Score point and grade tables.

A threshold tuple ``(t1, ..., tn)`` awards ``k`` points when the value is
strictly greater than ``tk`` (highest such k), and 0 otherwise.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping


@dataclass(frozen=True, slots=True)
class GradeBand:
    grade: str
    max_score: float  # inclusive upper bound; inf for the last band


@dataclass(frozen=True, slots=True)
class NutriScoreTables:
    energy_kj: tuple[float, ...]
    saturated_fat: tuple[float, ...]
    sugars: tuple[float, ...]
    sodium_mg: tuple[float, ...]
    fruits_vegetables: tuple[tuple[float, int], ...]
    fiber: tuple[float, ...]
    proteins: tuple[float, ...]
    solid_grades: tuple[GradeBand, ...]
    beverage_grades: tuple[GradeBand, ...]
    field_weights: Mapping[str, float]
    grade_bonus: Mapping[str, int]
    min_confidence: float


_INF = float("inf")

NUTRISCORE_TABLES = NutriScoreTables(
    energy_kj=tuple(335.0 * k for k in range(1, 11)),
    saturated_fat=tuple(float(k) for k in range(1, 11)),
    sugars=(4.5, 9.0, 13.5, 18.0, 22.5, 27.0, 31.0, 36.0, 40.0, 45.0),
    sodium_mg=tuple(90.0 * k for k in range(1, 11)),
    # Non-linear: (threshold %, points)
    fruits_vegetables=((40.0, 1), (60.0, 2), (80.0, 5)),
    fiber=(0.9, 1.9, 2.8, 3.7, 4.7),
    proteins=(1.6, 3.2, 4.8, 6.4, 8.0),
    solid_grades=(
        GradeBand("A", -1),
        GradeBand("B", 2),
        GradeBand("C", 10),
        GradeBand("D", 18),
        GradeBand("E", _INF),
    ),
    beverage_grades=(
        GradeBand("A", -1),
        GradeBand("B", 1),
        GradeBand("C", 5),
        GradeBand("D", 9),
        GradeBand("E", _INF),
    ),
    field_weights={
        "energy_kj": 0.25,
        "saturated_fat": 0.20,
        "sugars": 0.20,
        "sodium": 0.15,
        "fiber": 0.10,
        "proteins": 0.10,
    },
    grade_bonus={"A": 15, "B": 8, "C": 0, "D": -5, "E": -12},
    min_confidence=0.4,
)

KCAL_TO_KJ = 4.184
SALT_G_TO_SODIUM_MG = 400.0
