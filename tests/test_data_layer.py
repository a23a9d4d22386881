"""Tests for data layer components."""
import json
import math
from dataclasses import FrozenInstanceError

import pytest

from taco_search.data_layer.exceptions import DatasetLoadError, TacoSearchError
from taco_search.data_layer.food_db import FoodDB
from taco_search.data_layer.models import Category, FoodRecord
from taco_search.data_layer.nutrient_fields import (
    FIELD_LABELS,
    NUTRIENT_ACCESSORS,
    NUTRIENT_FIELDS,
    SORTABLE_FIELDS,
    describe_fields,
    field_label,
    field_unit,
)
from taco_search.data_layer.value_coercion import coerce_nutrient

from conftest import SAMPLE_FOODS, write_dataset


class TestCoerceNutrient:
    """Tests for coerce_nutrient."""

    @pytest.mark.parametrize("token", ["", "NA", "*", "Tr", ",0,02", "  Tr  "])
    def test_sentinel_tokens_are_absent(self, token):
        """Test that sentinel tokens load as absent, not zero."""
        assert coerce_nutrient(token) is None

    def test_comma_decimal_separator(self):
        """Test that comma decimals are parsed."""
        assert coerce_nutrient("2,7") == pytest.approx(2.7)
        assert coerce_nutrient(" 12,05 ") == pytest.approx(12.05)

    def test_numbers_pass_through(self):
        """Test that numbers are returned as floats."""
        assert coerce_nutrient(5) == 5.0
        assert isinstance(coerce_nutrient(5), float)
        assert coerce_nutrient(0) == 0.0
        assert coerce_nutrient("0") == 0.0

    def test_unparsable_text_is_absent(self):
        """Test that other text becomes absent without raising."""
        assert coerce_nutrient("a") is None
        assert coerce_nutrient("1,2,3") is None
        assert coerce_nutrient("traços") is None

    def test_non_finite_and_other_types_are_absent(self):
        """Test NaN, infinity, booleans and containers."""
        assert coerce_nutrient(float("nan")) is None
        assert coerce_nutrient(float("inf")) is None
        assert coerce_nutrient("NaN") is None
        assert coerce_nutrient(True) is None
        assert coerce_nutrient(None) is None
        assert coerce_nutrient([1]) is None
        assert coerce_nutrient({"value": 1}) is None


class TestNutrientFields:
    """Tests for the nutrient field catalogue."""

    def test_fields_are_unique(self):
        assert len(NUTRIENT_FIELDS) == len(set(NUTRIENT_FIELDS))

    def test_sortable_fields_are_nutrients(self):
        assert set(SORTABLE_FIELDS) <= set(NUTRIENT_FIELDS)

    def test_every_field_has_accessor(self, make_food):
        """Test that accessors exist for every field and read the record."""
        assert set(NUTRIENT_ACCESSORS) == set(NUTRIENT_FIELDS)
        food = make_food(1, protein_g=10, **{"18:2 n-6_g": "0,5"})
        assert NUTRIENT_ACCESSORS["protein_g"](food) == 10.0
        assert NUTRIENT_ACCESSORS["18:2 n-6_g"](food) == 0.5
        assert NUTRIENT_ACCESSORS["fiber_g"](food) is None

    def test_labels_and_units(self):
        assert field_label("lipid_g") == "Fat (g)"
        assert field_label("lysine_g") == "lysine_g"
        assert field_unit("iron_mg") == "mg"
        assert field_unit("retinol_mcg") == "mcg"
        assert field_unit("humidity_percents") == "%"
        assert field_unit("energy_kj") == "kJ"
        assert set(FIELD_LABELS) >= {"id", "description", "category"}

    def test_describe_fields(self):
        fields = describe_fields()
        assert len(fields) == len(NUTRIENT_FIELDS)
        assert fields[1] == {"name": "energy_kcal", "label": "Energy (kcal)", "unit": "kcal"}


class TestCategory:
    """Tests for Category enum."""

    def test_fifteen_categories(self):
        assert len(list(Category)) == 15

    def test_from_string(self):
        assert Category.from_string("Cereais e derivados") is Category.CEREALS
        assert Category.from_string("cereais e derivados") is None
        assert Category.from_string("Sobremesas") is None


class TestFoodDB:
    """Tests for FoodDB."""

    def test_load_foods_from_json_array(self, food_db):
        """Test loading the TACO array layout."""
        foods = food_db.get_all_foods()
        assert len(food_db) == len(SAMPLE_FOODS)
        assert [food.id for food in foods] == [food["id"] for food in SAMPLE_FOODS]
        assert foods[0].description == "Arroz, integral, cozido"
        assert foods[0].category == "Cereais e derivados"

    def test_load_foods_from_object(self, tmp_path):
        """Test loading an object with a 'foods' list."""
        path = tmp_path / "foods.json"
        path.write_text(json.dumps({"foods": SAMPLE_FOODS[:2]}), encoding="utf-8")
        db = FoodDB(str(path))
        assert len(db) == 2

    def test_ids_are_unique(self, food_db):
        ids = [food.id for food in food_db.get_all_foods()]
        assert len(ids) == len(set(ids))

    def test_nutrients_are_finite_or_absent(self, food_db):
        """Test that no nutrient holds text or NaN after loading."""
        for food in food_db.get_all_foods():
            assert set(food.nutrients) == set(NUTRIENT_FIELDS)
            for value in food.nutrients.values():
                assert value is None or (isinstance(value, float) and math.isfinite(value))

    def test_trace_fiber_loads_as_absent(self, food_db):
        """Test sentinel values in the source rows."""
        sugar = food_db.get_food_by_id(7)
        assert sugar.get("lipid_g") is None  # "Tr"
        assert sugar.get("fiber_g") is None  # "*"
        assert food_db.get_food_by_id(5).get("fiber_g") is None  # "NA"
        assert food_db.get_food_by_id(8).get("fiber_g") is None  # ""

    def test_comma_decimal_and_zero(self, food_db):
        """Test that '2,7' parses and zero stays zero (not absent)."""
        assert food_db.get_food_by_id(1).get("fiber_g") == pytest.approx(2.7)
        assert food_db.get_food_by_id(5).get("carbohydrate_g") == 0.0

    def test_missing_columns_are_absent(self, food_db):
        assert food_db.get_food_by_id(2).get("calcium_mg") is None
        assert food_db.get_food_by_id(1).get("calcium_mg") == pytest.approx(5.2)

    def test_get_food_by_id(self, food_db):
        """Test that lookup returns each record by its own id."""
        for food in food_db.get_all_foods():
            assert food_db.get_food_by_id(food.id) == food
        assert food_db.get_food_by_id(9999) is None

    def test_dataset_is_immutable(self, food_db):
        foods = food_db.get_all_foods()
        assert isinstance(foods, tuple)
        with pytest.raises(TypeError):
            foods[0].nutrients["protein_g"] = 99.0

    def test_string_id_is_accepted(self, tmp_path):
        path = write_dataset(tmp_path / "foods.json", [dict(SAMPLE_FOODS[0], id="42")])
        assert FoodDB(str(path)).get_food_by_id(42) is not None

    def test_missing_file_is_fatal(self, tmp_path):
        """Test that a missing dataset raises DatasetLoadError."""
        with pytest.raises(DatasetLoadError, match="file not found"):
            FoodDB(str(tmp_path / "missing.json"))

    def test_invalid_json_is_fatal(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("[{", encoding="utf-8")
        with pytest.raises(DatasetLoadError, match="invalid JSON"):
            FoodDB(str(path))

    def test_wrong_top_level_shape_is_fatal(self, tmp_path):
        path = tmp_path / "shape.json"
        path.write_text(json.dumps({"items": []}), encoding="utf-8")
        with pytest.raises(DatasetLoadError):
            FoodDB(str(path))

    def test_unknown_category_is_fatal(self, tmp_path):
        path = write_dataset(
            tmp_path / "foods.json", [dict(SAMPLE_FOODS[0], category="Sobremesas")]
        )
        with pytest.raises(DatasetLoadError, match="unknown category"):
            FoodDB(str(path))

    def test_duplicate_id_is_fatal(self, tmp_path):
        path = write_dataset(
            tmp_path / "foods.json", [SAMPLE_FOODS[0], dict(SAMPLE_FOODS[1], id=1)]
        )
        with pytest.raises(DatasetLoadError, match="duplicate food id 1"):
            FoodDB(str(path))

    def test_empty_description_is_fatal(self, tmp_path):
        path = write_dataset(tmp_path / "foods.json", [dict(SAMPLE_FOODS[0], description=" ")])
        with pytest.raises(DatasetLoadError, match="empty description"):
            FoodDB(str(path))

    def test_invalid_id_is_fatal(self, tmp_path):
        path = write_dataset(tmp_path / "foods.json", [dict(SAMPLE_FOODS[0], id="abc")])
        with pytest.raises(DatasetLoadError, match="invalid id"):
            FoodDB(str(path))

    def test_load_error_is_search_error(self):
        assert issubclass(DatasetLoadError, TacoSearchError)

    def test_from_records(self, make_food):
        """Test building a database without a file."""
        db = FoodDB.from_records([make_food(1), make_food(2)])
        assert len(db) == 2
        assert db.get_food_by_id(2).id == 2
        with pytest.raises(DatasetLoadError):
            FoodDB.from_records([make_food(1), make_food(1)])

    def test_empty_dataset(self, tmp_path):
        path = write_dataset(tmp_path / "empty.json", [])
        db = FoodDB(str(path))
        assert len(db) == 0
        assert db.get_all_foods() == ()


class TestFoodRecord:
    """Tests for FoodRecord model."""

    def test_get_unknown_field(self, make_food):
        food = make_food(1, protein_g=3)
        assert food.get("protein_g") == 3.0
        assert food.get("sugar_g") is None

    def test_record_is_frozen(self, make_food):
        food = make_food(1)
        with pytest.raises(FrozenInstanceError):
            food.description = "Outro"

    def test_loaded_records_are_hashable(self, food_db):
        """Test that records with read-only nutrient maps work in sets and dicts."""
        foods = food_db.get_all_foods()
        assert len(set(foods)) == len(foods)
        first = food_db.get_food_by_id(1)
        assert {first: "arroz"}[food_db.get_food_by_id(1)] == "arroz"

    def test_default_nutrients(self):
        food = FoodRecord(id=1, description="Sal", category="Miscelâneas")
        assert food.get("sodium_mg") is None
