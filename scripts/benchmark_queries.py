#!/usr/bin/env python3
"""Benchmark index build and query latency on a synthetic TACO-sized table.

Run from repo root:
  python scripts/benchmark_queries.py

Optional: TACO_BENCH_FOODS (default 597) and TACO_BENCH_ROUNDS (default 200).
"""
from __future__ import annotations

import os
import random
import sys
import time

# Allow importing the package when run from repo root
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from taco_search.data_layer.food_db import FoodDB
from taco_search.data_layer.models import Category, FoodRecord
from taco_search.data_layer.nutrient_fields import NUTRIENT_FIELDS
from taco_search.search.query_planner import QueryPlanner
from taco_search.search.text_index import SearchIndex

WORDS = [
    "arroz", "feijao", "frango", "peito", "cozido", "cru", "integral", "assado",
    "grelhado", "banana", "leite", "queijo", "ovo", "pao", "farinha", "mandioca",
    "batata", "doce", "carne", "bovina", "suina", "peixe", "atum", "sardinha",
]


def make_food(food_id: int, rng: random.Random) -> FoodRecord:
    description = ", ".join(rng.sample(WORDS, 3)).capitalize()
    nutrients = {
        name: (None if rng.random() < 0.15 else round(rng.uniform(0, 400), 2))
        for name in NUTRIENT_FIELDS
    }
    return FoodRecord(
        id=food_id,
        description=description,
        category=rng.choice(list(Category)).value,
        nutrients=nutrients,
    )


def timed(label: str, rounds: int, func) -> None:
    t0 = time.perf_counter()
    for _ in range(rounds):
        func()
    t1 = time.perf_counter()
    print(f"{label:<28} {(t1 - t0) / rounds * 1000:8.3f} ms/query")


def main() -> None:
    n_foods = int(os.environ.get("TACO_BENCH_FOODS", "597"))
    rounds = int(os.environ.get("TACO_BENCH_ROUNDS", "200"))
    rng = random.Random(0)

    food_db = FoodDB.from_records([make_food(i, rng) for i in range(1, n_foods + 1)])

    t0 = time.perf_counter()
    index = SearchIndex.build(food_db.get_all_foods())
    t1 = time.perf_counter()
    planner = QueryPlanner(food_db, index=index, rng=rng)

    print("--- TACO query benchmark ---")
    print(f"Foods: {n_foods}")
    print(f"Index build: {(t1 - t0) * 1000:.1f} ms")
    timed("search (exact)", rounds, lambda: planner.search_foods("arroz integral"))
    timed("search (fuzzy)", rounds, lambda: planner.search_foods("aroz integrl"))
    timed("filter_by_nutrient", rounds, lambda: planner.filter_by_nutrient("protein_g", 20))
    timed(
        "advanced_search (sorted)",
        rounds,
        lambda: planner.advanced_search(
            {"query": "frango", "min_protein_g": 20, "sort_by": "protein_g"}
        ),
    )
    timed(
        "batch_search (3 items)",
        rounds,
        lambda: planner.batch_search(["arroz", {"min_fiber_g": 5}, {"query": "leite"}]),
    )


if __name__ == "__main__":
    main()
