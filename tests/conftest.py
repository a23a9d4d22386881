"""Shared fixtures: a small TACO-shaped dataset."""
import json
import random
from types import MappingProxyType

import pytest

from taco_search.data_layer.food_db import FoodDB
from taco_search.data_layer.models import FoodRecord
from taco_search.data_layer.nutrient_fields import NUTRIENT_FIELDS
from taco_search.data_layer.value_coercion import coerce_nutrient
from taco_search.search.query_planner import QueryPlanner


SAMPLE_FOODS = [
    {
        "id": 1,
        "description": "Arroz, integral, cozido",
        "category": "Cereais e derivados",
        "energy_kcal": 123.5,
        "protein_g": 2.6,
        "lipid_g": 1.0,
        "carbohydrate_g": 25.8,
        "fiber_g": "2,7",
        "calcium_mg": 5.2,
    },
    {
        "id": 2,
        "description": "Arroz, integral, cru",
        "category": "Cereais e derivados",
        "energy_kcal": 359.7,
        "protein_g": 7.3,
        "lipid_g": 1.9,
        "carbohydrate_g": 77.5,
        "fiber_g": 4.8,
    },
    {
        "id": 3,
        "description": "Arroz, tipo 1, cozido",
        "category": "Cereais e derivados",
        "energy_kcal": 128.3,
        "protein_g": 2.5,
        "lipid_g": 0.2,
        "carbohydrate_g": 28.1,
        "fiber_g": 1.6,
    },
    {
        "id": 4,
        "description": "Feijão, carioca, cozido",
        "category": "Leguminosas e derivados",
        "energy_kcal": 76.4,
        "protein_g": 4.8,
        "lipid_g": 0.5,
        "carbohydrate_g": 13.6,
        "fiber_g": 8.5,
    },
    {
        "id": 5,
        "description": "Frango, peito, sem pele, grelhado",
        "category": "Carnes e derivados",
        "energy_kcal": 159.2,
        "protein_g": 32.0,
        "lipid_g": 2.5,
        "carbohydrate_g": 0,
        "fiber_g": "NA",
    },
    {
        "id": 6,
        "description": "Banana, prata, crua",
        "category": "Frutas e derivados",
        "energy_kcal": 98.3,
        "protein_g": 1.3,
        "lipid_g": 0.1,
        "carbohydrate_g": 26.0,
        "fiber_g": 2.0,
    },
    {
        "id": 7,
        "description": "Açúcar, refinado",
        "category": "Produtos açucarados",
        "energy_kcal": 386.6,
        "protein_g": 0.3,
        "lipid_g": "Tr",
        "carbohydrate_g": 99.5,
        "fiber_g": "*",
    },
    {
        "id": 8,
        "description": "Leite, de vaca, integral",
        "category": "Leite e derivados",
        "energy_kcal": 60.8,
        "protein_g": 2.9,
        "lipid_g": 3.2,
        "carbohydrate_g": 4.3,
        "fiber_g": "",
    },
    {
        "id": 9,
        "description": "Atum, conserva em óleo",
        "category": "Pescados e frutos do mar",
        "energy_kcal": 165.9,
        "protein_g": 26.2,
        "lipid_g": 6.0,
        "carbohydrate_g": 0,
        "fiber_g": "NA",
    },
    {
        "id": 10,
        "description": "Ovo, de galinha, inteiro, cozido/10minutos",
        "category": "Ovos e derivados",
        "energy_kcal": 145.7,
        "protein_g": 13.3,
        "lipid_g": 9.5,
        "carbohydrate_g": 0.6,
        "fiber_g": "NA",
    },
]


def write_dataset(path, foods):
    path.write_text(json.dumps(foods, ensure_ascii=False), encoding="utf-8")
    return path


@pytest.fixture
def make_food():
    """Factory for FoodRecord objects with coerced nutrients."""

    def _make_food(food_id, description="Alimento", category="Miscelâneas", **nutrients):
        values = {name: coerce_nutrient(nutrients.get(name)) for name in NUTRIENT_FIELDS}
        return FoodRecord(
            id=food_id,
            description=description,
            category=category,
            nutrients=MappingProxyType(values),
        )

    return _make_food


@pytest.fixture
def taco_json_path(tmp_path):
    """Path to a TACO-style JSON array with the sample foods."""
    return write_dataset(tmp_path / "TACO.json", SAMPLE_FOODS)


@pytest.fixture
def food_db(taco_json_path):
    return FoodDB(str(taco_json_path))


@pytest.fixture
def planner(food_db):
    return QueryPlanner(food_db, rng=random.Random(42))
