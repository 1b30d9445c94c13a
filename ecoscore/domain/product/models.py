"""
Product input models.

Every scoring request is normalized once, here, into immutable value
objects. Classifiers never see raw caller payloads.
"""

from __future__ import annotations

import hashlib
import json
import re
from enum import Enum
from typing import Any, Iterable, Optional

import structlog
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ecoscore.domain.shared.value_objects import Barcode

logger = structlog.get_logger(__name__)

# Solvents carry no scoring signal for household chemicals
SOLVENT_STOP_LIST = frozenset({"WATER", "AQUA", "EAU"})

_SPLIT_PATTERN = re.compile(r"[,;()\[\]]")


class ProductCategory(str, Enum):
    """Scoring family of a product."""

    FOOD = "food"
    DETERGENT = "detergent"


class IngredientList(BaseModel):
    """
    Ordered, normalized ingredient tokens.

    Built from free text or a list via ``from_raw``. Order is kept for
    display; matching never depends on it.

    Example:
        >>> ingredients = IngredientList.from_raw("Sugar, palm oil; E322 (soy)")
        >>> ingredients.items
        ('Sugar', 'palm oil', 'E322', 'soy')
        >>> ingredients.normalized
        ('SUGAR', 'PALM OIL', 'E322', 'SOY')
    """

    model_config = ConfigDict(frozen=True)

    items: tuple[str, ...] = Field(default_factory=tuple)

    @classmethod
    def from_raw(cls, raw: Any) -> IngredientList:
        """Normalize ``str | list[str] | None`` into an IngredientList.

        Strings are split on separators; list items are split too, so
        "a, b" inside a list yields two tokens. Non-text items are dropped.
        """
        if raw is None:
            return cls()
        if isinstance(raw, IngredientList):
            return raw
        if isinstance(raw, str):
            chunks: Iterable[Any] = [raw]
        elif isinstance(raw, (list, tuple)):
            chunks = raw
        else:
            logger.warning("Unsupported ingredients payload", type=type(raw).__name__)
            return cls()

        tokens: list[str] = []
        dropped = 0
        for chunk in chunks:
            if not isinstance(chunk, str):
                dropped += 1
                continue
            for part in _SPLIT_PATTERN.split(chunk):
                token = part.strip().rstrip(".").strip()
                if token:
                    tokens.append(token)

        if dropped:
            logger.warning("Dropped non-text ingredients", count=dropped)
        return cls(items=tuple(tokens))

    @property
    def lowered(self) -> tuple[str, ...]:
        """Lower-case tokens, used by the food classifiers."""
        return tuple(item.lower() for item in self.items)

    @property
    def normalized(self) -> tuple[str, ...]:
        """Upper-case tokens without solvents, used for household chemicals."""
        return tuple(
            upper for upper in (item.upper() for item in self.items) if upper not in SOLVENT_STOP_LIST
        )

    @property
    def text(self) -> str:
        """Lower-case joined text for substring rules."""
        return " ".join(self.lowered)

    def __len__(self) -> int:
        return len(self.items)

    def __bool__(self) -> bool:
        return bool(self.items)


NUTRITION_FIELDS = (
    "energy_kj",
    "energy_kcal",
    "fat",
    "saturated_fat",
    "carbohydrates",
    "sugars",
    "fiber",
    "proteins",
    "salt",
    "sodium",
    "fruits_vegetables",
)


class NutritionFacts(BaseModel):
    """
    Nutrition facts per 100 g (or 100 ml for beverages).

    Every field is optional. Values that are not numbers, or are negative,
    are treated as absent: they count as missing for confidence and as 0
    for point lookups.

    Attributes:
        energy_kj: Energy in kJ
        energy_kcal: Energy in kcal
        fat: Total fat in g
        saturated_fat: Saturated fat in g
        carbohydrates: Carbohydrates in g
        sugars: Sugars in g
        fiber: Dietary fiber in g
        proteins: Protein in g
        salt: Salt in g
        sodium: Sodium in mg
        fruits_vegetables: Fruit, vegetable and nut content in %
    """

    model_config = ConfigDict(frozen=True)

    energy_kj: Optional[float] = None
    energy_kcal: Optional[float] = None
    fat: Optional[float] = None
    saturated_fat: Optional[float] = None
    carbohydrates: Optional[float] = None
    sugars: Optional[float] = None
    fiber: Optional[float] = None
    proteins: Optional[float] = None
    salt: Optional[float] = None
    sodium: Optional[float] = None
    fruits_vegetables: Optional[float] = None

    @field_validator(*NUTRITION_FIELDS, mode="before")
    @classmethod
    def drop_malformed(cls, v: Any) -> Optional[float]:
        """Coerce numeric text, drop anything else or negative."""
        if v is None or isinstance(v, bool):
            return None
        if isinstance(v, str):
            try:
                v = float(v.replace(",", ".").strip())
            except ValueError:
                logger.warning("Dropped non-numeric nutrition value", value=v)
                return None
        if not isinstance(v, (int, float)):
            logger.warning("Dropped non-numeric nutrition value", type=type(v).__name__)
            return None
        if v < 0 or v != v:
            logger.warning("Dropped negative nutrition value", value=v)
            return None
        return float(v)

    @classmethod
    def from_raw(cls, raw: Any) -> NutritionFacts:
        """Build from an arbitrary mapping, ignoring unknown keys."""
        if isinstance(raw, NutritionFacts):
            return raw
        if not isinstance(raw, dict):
            if raw is not None:
                logger.warning("Unsupported nutrition payload", type=type(raw).__name__)
            return cls()
        return cls(**{k: v for k, v in raw.items() if k in NUTRITION_FIELDS})

    def supplied_fields(self) -> set[str]:
        """Names of fields that carry a value."""
        return {name for name in NUTRITION_FIELDS if getattr(self, name) is not None}

    def is_empty(self) -> bool:
        return not self.supplied_fields()


_TRUE_WORDS = frozenset({"true", "yes", "1", "oui"})
_FALSE_WORDS = frozenset({"false", "no", "0", "non"})


def coerce_flag(value: Any) -> Optional[bool]:
    """
    Lenient boolean: bools, 0/1 and yes/no words. Anything else is None.

    Example:
        >>> coerce_flag("Yes"), coerce_flag(0), coerce_flag("sometimes")
        (True, False, None)
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    return None


class Packaging(BaseModel):
    """Packaging facts used by the environmental component."""

    model_config = ConfigDict(frozen=True)

    recyclable: Optional[bool] = None
    plastic: Optional[bool] = None

    @field_validator("recyclable", "plastic", mode="before")
    @classmethod
    def lenient_flag(cls, v: Any) -> Optional[bool]:
        if v is None:
            return None
        flag = coerce_flag(v)
        if flag is None:
            logger.warning("Dropped malformed packaging flag", value=v)
        return flag


class ProductDescriptor(BaseModel):
    """
    Everything the scoring engine needs about one product.

    Example:
        >>> product = ProductDescriptor.from_raw(
        ...     name="Galettes de riz",
        ...     ingredients=["riz"],
        ...     nutrition={"fiber": 1, "fat": 1, "proteins": 3},
        ... )
        >>> product.category
        <ProductCategory.FOOD: 'food'>
    """

    model_config = ConfigDict(frozen=True)

    name: str = ""
    category: ProductCategory = ProductCategory.FOOD
    ingredients: IngredientList = Field(default_factory=IngredientList)
    nutrition: NutritionFacts = Field(default_factory=NutritionFacts)
    barcode: Optional[str] = None
    certifications: tuple[str, ...] = Field(default_factory=tuple)
    packaging: Packaging = Field(default_factory=Packaging)
    is_beverage: bool = False

    @field_validator("name", mode="before")
    @classmethod
    def clean_name(cls, v: Any) -> str:
        return v.strip() if isinstance(v, str) else ""

    @field_validator("barcode", mode="before")
    @classmethod
    def drop_invalid_barcode(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        if not isinstance(v, str) or not Barcode.looks_valid(v):
            logger.warning("Dropped invalid barcode", barcode=v)
            return None
        return v.strip()

    @field_validator("certifications", mode="before")
    @classmethod
    def clean_certifications(cls, v: Any) -> tuple[str, ...]:
        if not isinstance(v, (list, tuple)):
            return ()
        return tuple(c.strip() for c in v if isinstance(c, str) and c.strip())

    @field_validator("packaging", mode="before")
    @classmethod
    def clean_packaging(cls, v: Any) -> Any:
        if v is None:
            return Packaging()
        if isinstance(v, Packaging):
            return v
        if isinstance(v, dict):
            return {k: v[k] for k in ("recyclable", "plastic") if k in v}
        logger.warning("Dropped malformed packaging", packaging=v)
        return Packaging()

    @field_validator("is_beverage", mode="before")
    @classmethod
    def clean_is_beverage(cls, v: Any) -> bool:
        flag = coerce_flag(v)
        if flag is None:
            if v is not None:
                logger.warning("Malformed is_beverage, scoring as solid", is_beverage=v)
            return False
        return flag

    @classmethod
    def from_raw(
        cls,
        name: Any = "",
        ingredients: Any = None,
        nutrition: Any = None,
        category: Any = ProductCategory.FOOD,
        **extra: Any,
    ) -> ProductDescriptor:
        """Single normalization entry point for caller payloads."""
        try:
            resolved = ProductCategory(category)
        except ValueError:
            logger.warning("Unknown product category, scoring as food", category=category)
            resolved = ProductCategory.FOOD
        return cls(
            name=name,
            category=resolved,
            ingredients=IngredientList.from_raw(ingredients),
            nutrition=NutritionFacts.from_raw(nutrition),
            **extra,
        )

    def fingerprint(self) -> str:
        """
        SHA-256 of every scoring input except the barcode.

        Two descriptors with the same fingerprint always score the same.
        """
        payload = json.dumps(
            self.model_dump(mode="json", exclude={"barcode"}),
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
        )
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()
