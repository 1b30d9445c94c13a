"""
Unit tests for product input models.

Normalization of ingredients, nutrition facts and product descriptors.
"""

import pytest

from ecoscore.domain.product.models import (
    IngredientList,
    NutritionFacts,
    Packaging,
    ProductCategory,
    ProductDescriptor,
)


class TestIngredientList:
    """Test IngredientList normalization."""

    def test_from_text_splits_on_separators(self) -> None:
        """Should split on commas, semicolons and brackets."""
        ingredients = IngredientList.from_raw("Sugar, palm oil; E322 (soy)")
        assert ingredients.items == ("Sugar", "palm oil", "E322", "soy")

    def test_from_list_splits_items(self) -> None:
        """Should split list items that contain separators."""
        ingredients = IngredientList.from_raw(["riz", "sucre, sel"])
        assert ingredients.items == ("riz", "sucre", "sel")

    def test_drops_non_text_items(self) -> None:
        """Should drop numbers and None from lists."""
        ingredients = IngredientList.from_raw(["riz", 42, None])
        assert ingredients.items == ("riz",)

    def test_none_and_unsupported_are_empty(self) -> None:
        """Should return an empty list for None or unsupported payloads."""
        assert len(IngredientList.from_raw(None)) == 0
        assert not IngredientList.from_raw({"a": 1})

    def test_strips_trailing_period(self) -> None:
        """Should remove the trailing period of a label."""
        assert IngredientList.from_raw("eau, sel.").items == ("eau", "sel")

    def test_normalized_drops_solvents(self) -> None:
        """Should upper-case and drop water/aqua/eau."""
        ingredients = IngredientList.from_raw("Aqua, Coco Glucoside, eau")
        assert ingredients.normalized == ("COCO GLUCOSIDE",)

    def test_text_is_lowercase(self) -> None:
        """Should join lower-cased tokens."""
        assert IngredientList.from_raw("Riz, E471").text == "riz e471"

    def test_passthrough(self) -> None:
        """Should return the same instance when already normalized."""
        ingredients = IngredientList.from_raw("riz")
        assert IngredientList.from_raw(ingredients) is ingredients


class TestNutritionFacts:
    """Test NutritionFacts validation."""

    def test_numeric_text_is_coerced(self) -> None:
        """Should accept numeric strings, including comma decimals."""
        facts = NutritionFacts(sugars="10,6", fiber="2")
        assert facts.sugars == pytest.approx(10.6)
        assert facts.fiber == 2.0

    def test_malformed_values_are_dropped(self) -> None:
        """Should treat non-numeric or negative values as absent."""
        facts = NutritionFacts(sugars="lots", fat=-3, proteins=[1], fiber=True)
        assert facts.sugars is None
        assert facts.fat is None
        assert facts.proteins is None
        assert facts.fiber is None
        assert facts.is_empty()

    def test_from_raw_ignores_unknown_keys(self) -> None:
        """Should ignore keys that are not nutrition fields."""
        facts = NutritionFacts.from_raw({"sugars": 5, "vitamin_c": 12})
        assert facts.supplied_fields() == {"sugars"}

    def test_from_raw_non_mapping(self) -> None:
        """Should return empty facts for non-mapping payloads."""
        assert NutritionFacts.from_raw("100 kcal").is_empty()
        assert NutritionFacts.from_raw(None).is_empty()

    def test_zero_is_supplied(self) -> None:
        """Should count an explicit zero as supplied."""
        assert NutritionFacts(fiber=0).supplied_fields() == {"fiber"}


class TestProductDescriptor:
    """Test ProductDescriptor construction."""

    def test_from_raw_defaults_to_food(self) -> None:
        """Should default to the food category."""
        product = ProductDescriptor.from_raw(name=" Galettes de riz ", ingredients=["riz"])
        assert product.category == ProductCategory.FOOD
        assert product.name == "Galettes de riz"
        assert product.ingredients.items == ("riz",)

    def test_unknown_category_scores_as_food(self) -> None:
        """Should fall back to food for an unknown category."""
        product = ProductDescriptor.from_raw(name="Crème", category="cosmetic")
        assert product.category == ProductCategory.FOOD

    def test_detergent_category(self) -> None:
        product = ProductDescriptor.from_raw(name="Lessive", category="detergent")
        assert product.category == ProductCategory.DETERGENT

    def test_invalid_barcode_dropped(self) -> None:
        """Should drop a barcode that is not 8-14 digits."""
        product = ProductDescriptor.from_raw(name="X", barcode="not-a-code")
        assert product.barcode is None

    def test_valid_barcode_kept(self) -> None:
        product = ProductDescriptor.from_raw(name="X", barcode="3017620422003")
        assert product.barcode == "3017620422003"

    def test_certifications_cleaned(self) -> None:
        """Should drop blank and non-text certifications."""
        product = ProductDescriptor.from_raw(name="X", certifications=["Ecocert", " ", 3])
        assert product.certifications == ("Ecocert",)

    def test_packaging(self) -> None:
        product = ProductDescriptor.from_raw(
            name="X", packaging=Packaging(recyclable=False, plastic=True)
        )
        assert product.packaging.recyclable is False
        assert product.packaging.plastic is True

    def test_immutable(self) -> None:
        """Should be immutable."""
        product = ProductDescriptor.from_raw(name="X")
        with pytest.raises((AttributeError, ValueError)):
            product.name = "Y"  # noqa: SLF001


class TestMalformedInput:
    """Malformed optional fields are normalized, never rejected."""

    @pytest.mark.parametrize("raw,expected", [(True, True), ("yes", True), (1, True), ("non", False), (0, False)])
    def test_is_beverage_coerced(self, raw, expected: bool) -> None:
        assert ProductDescriptor.from_raw(name="Jus", is_beverage=raw).is_beverage is expected

    @pytest.mark.parametrize("raw", ["maybe", 2, 0.5, ["yes"], None])
    def test_malformed_is_beverage_scores_as_solid(self, raw) -> None:
        assert ProductDescriptor.from_raw(name="Jus", is_beverage=raw).is_beverage is False

    @pytest.mark.parametrize("raw", ["cardboard", 42, ["glass"], None])
    def test_malformed_packaging_dropped(self, raw) -> None:
        product = ProductDescriptor.from_raw(name="X", packaging=raw)
        assert product.packaging == Packaging()

    def test_packaging_mapping_coerced(self) -> None:
        product = ProductDescriptor.from_raw(
            name="X", packaging={"recyclable": "sometimes", "plastic": "yes", "colour": "red"}
        )
        assert product.packaging.recyclable is None
        assert product.packaging.plastic is True

    def test_packaging_flags_coerced_directly(self) -> None:
        packaging = Packaging(recyclable="false", plastic={"a": 1})
        assert packaging.recyclable is False
        assert packaging.plastic is None


class TestFingerprint:
    """Test the scoring-input fingerprint."""

    def test_ignores_barcode(self) -> None:
        with_code = ProductDescriptor.from_raw(name="Biscuit", ingredients="farine", barcode="3017620422003")
        without = ProductDescriptor.from_raw(name="Biscuit", ingredients="farine")
        assert with_code.fingerprint() == without.fingerprint()

    @pytest.mark.parametrize(
        "change",
        [
            {"nutrition": {"sugars": 30}},
            {"certifications": ["bio"]},
            {"packaging": {"plastic": True}},
            {"is_beverage": True},
            {"ingredients": "sucre, farine"},
        ],
    )
    def test_changes_with_scoring_input(self, change: dict) -> None:
        base = {"name": "Biscuit", "ingredients": "farine, sucre"}
        assert (
            ProductDescriptor.from_raw(**{**base, **change}).fingerprint()
            != ProductDescriptor.from_raw(**base).fingerprint()
        )
