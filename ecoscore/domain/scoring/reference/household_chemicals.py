"""
Household chemical reference tables.

Keys are upper-case INCI-style names, matched exactly against
``IngredientList.normalized`` tokens. Sources: REACH, ECHA 2024,
EU Ecolabel, Nordic Swan.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True, slots=True)
class HarmfulIngredient:
    """Ingredient with a negative health or environmental effect."""

    penalty: int
    source: str
    toxicity: Optional[str] = None  # medium|high|very_high
    irritation: Optional[str] = None  # mild|moderate|severe
    biodegradable: Optional[bool] = None
    environmental: Optional[str] = None
    allergen: bool = False
    carcinogen: Optional[str] = None
    corrosive: bool = False


@dataclass(frozen=True, slots=True)
class EcoIngredient:
    """Ingredient with a positive environmental profile."""

    bonus: int
    source: str
    biodegradable: bool = False
    natural: bool = False
    plant_based: bool = False
    gentle: bool = False


@dataclass(frozen=True, slots=True)
class Certification:
    bonus: int
    credibility: str


HARMFUL_INGREDIENTS: dict[str, HarmfulIngredient] = {
    # Non-biodegradable surfactants
    "SODIUM LAURYL SULFATE": HarmfulIngredient(
        -25, "ECHA 2024", toxicity="high", irritation="severe", biodegradable=False
    ),
    "SODIUM LAURETH SULFATE": HarmfulIngredient(
        -15, "REACH Database", toxicity="medium", irritation="moderate", biodegradable=False
    ),
    "ALKYLBENZENE SULFONATE": HarmfulIngredient(
        -30, "OECD Guidelines", toxicity="high", irritation="moderate", biodegradable=False
    ),
    # Phosphates
    "SODIUM TRIPOLYPHOSPHATE": HarmfulIngredient(
        -40,
        "EU Regulation 648/2004",
        toxicity="high",
        environmental="eutrophication",
        biodegradable=False,
    ),
    "TETRASODIUM PYROPHOSPHATE": HarmfulIngredient(
        -20, "Water Framework Directive", toxicity="medium", environmental="eutrophication"
    ),
    # Preservatives
    "METHYLISOTHIAZOLINONE": HarmfulIngredient(
        -35, "SCCS 2024", toxicity="high", irritation="severe", allergen=True
    ),
    "BENZISOTHIAZOLINONE": HarmfulIngredient(
        -20, "ECHA CLP", toxicity="medium", irritation="moderate", allergen=True
    ),
    # Chlorinated solvents
    "DICHLOROMETHANE": HarmfulIngredient(
        -50, "IARC Monographs", toxicity="very_high", carcinogen="suspected"
    ),
    "PERCHLOROETHYLENE": HarmfulIngredient(
        -45, "EPA IRIS", toxicity="high", carcinogen="probable"
    ),
    # Bleach
    "SODIUM HYPOCHLORITE": HarmfulIngredient(
        -25, "ECHA C&L Inventory", toxicity="high", irritation="severe", corrosive=True
    ),
    # Fragrance allergens
    "LIMONENE": HarmfulIngredient(-5, "Cosmetic Regulation EC", irritation="mild", allergen=True),
    "LINALOOL": HarmfulIngredient(-5, "Cosmetic Regulation EC", irritation="mild", allergen=True),
    "HEXYL CINNAMAL": HarmfulIngredient(
        -8, "SCCS Opinion", irritation="moderate", allergen=True
    ),
}

ECO_INGREDIENTS: dict[str, EcoIngredient] = {
    "COCO GLUCOSIDE": EcoIngredient(
        15, "ECOCERT Standards", biodegradable=True, plant_based=True, gentle=True
    ),
    "LAURYL GLUCOSIDE": EcoIngredient(
        12, "Nordic Swan Criteria", biodegradable=True, plant_based=True
    ),
    "DECYL GLUCOSIDE": EcoIngredient(
        10, "NaTrue Certification", biodegradable=True, gentle=True
    ),
    "SODIUM BICARBONATE": EcoIngredient(20, "FDA GRAS", biodegradable=True, natural=True),
    "CITRIC ACID": EcoIngredient(15, "Natural derivation", biodegradable=True, natural=True),
    "SODIUM PERCARBONATE": EcoIngredient(18, "EU Ecolabel", biodegradable=True),
    "PROTEASE": EcoIngredient(10, "OECD 301 Test", biodegradable=True),
    "AMYLASE": EcoIngredient(8, "Enzyme efficiency studies", biodegradable=True),
    "LIPASE": EcoIngredient(8, "Biodegradation studies", biodegradable=True),
    "LAVANDULA ANGUSTIFOLIA OIL": EcoIngredient(5, "Aromatherapy research", natural=True),
    "TEA TREE OIL": EcoIngredient(8, "Clinical studies", natural=True),
}

CERTIFICATIONS: dict[str, Certification] = {
    "ECOCERT": Certification(15, "high"),
    "EU ECOLABEL": Certification(20, "high"),
    "NORDIC SWAN": Certification(18, "high"),
    "CRADLE TO CRADLE": Certification(25, "high"),
    "NATURE ET PROGRES": Certification(12, "medium"),
    "ECOGARANTIE": Certification(10, "medium"),
}

DETERGENT_KEYWORDS = ("lessive", "détergent", "detergent", "nettoyant", "liquide vaisselle", "savon")
