"""
Processing-level (NOVA) rule tables.

Terms are lower-case and matched as substrings of the lower-cased
ingredient text, so French and English spellings are both listed.
Entries are kept non-overlapping: one ingredient should hit one entry.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class IndustrialIngredient:
    """Ingredient rarely used in home cooking."""

    name: str
    family: str


@dataclass(frozen=True, slots=True)
class NovaRules:
    industrial_ingredients: tuple[IndustrialIngredient, ...]
    process_indicators: tuple[str, ...]
    ultra_processed_terms: tuple[str, ...]


NOVA_RULES = NovaRules(
    industrial_ingredients=(
        IndustrialIngredient("glucose-fructose", "sugar"),
        IndustrialIngredient("high fructose corn syrup", "sugar"),
        IndustrialIngredient("sirop de maïs", "sugar"),
        IndustrialIngredient("maltodextrin", "sugar"),
        IndustrialIngredient("dextrose", "sugar"),
        IndustrialIngredient("sucre inverti", "sugar"),
        IndustrialIngredient("invert sugar", "sugar"),
        IndustrialIngredient("protéines hydrolysées", "protein"),
        IndustrialIngredient("hydrolysed protein", "protein"),
        IndustrialIngredient("hydrolyzed protein", "protein"),
        IndustrialIngredient("isolat de protéine", "protein"),
        IndustrialIngredient("protein isolate", "protein"),
        IndustrialIngredient("caséinate", "protein"),
        IndustrialIngredient("caseinate", "protein"),
        IndustrialIngredient("gluten de blé", "protein"),
        IndustrialIngredient("hydrogénée", "fat"),
        IndustrialIngredient("hydrogenated", "fat"),
        IndustrialIngredient("interestérifiée", "fat"),
        IndustrialIngredient("interesterified", "fat"),
        IndustrialIngredient("huile de palme", "fat"),
        IndustrialIngredient("palm oil", "fat"),
        IndustrialIngredient("amidon modifié", "starch"),
        IndustrialIngredient("modified starch", "starch"),
        IndustrialIngredient("inuline", "fiber"),
        IndustrialIngredient("inulin", "fiber"),
        IndustrialIngredient("lactosérum en poudre", "dairy"),
        IndustrialIngredient("whey powder", "dairy"),
    ),
    process_indicators=(
        "extrudé",
        "extruded",
        "soufflé",
        "puffed",
        "reconstitué",
        "reconstituted",
        "texturé",
        "textured",
        "concentré",
        "concentrate",
        "frit",
        "fried",
        "fumé",
        "smoked",
        "pasteurisé",
        "pasteurised",
        "pasteurized",
        "affiné",
        "refined",
    ),
    ultra_processed_terms=(
        "arôme artificiel",
        "arômes artificiels",
        "artificial flavour",
        "artificial flavor",
        "édulcorant",
        "sweetener",
        "exhausteur de goût",
        "flavour enhancer",
        "flavor enhancer",
        "colorant",
        "colouring",
        "coloring",
        "émulsifiant",
        "emulsifier",
        "agent de texture",
        "nuggets",
    ),
)
