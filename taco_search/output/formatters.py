"""Formatters turning query results into plain JSON-ready dicts.

Absent nutrient values are omitted from every rendered food.
"""

import json
import math
from typing import Any, Dict, List, Mapping, Sequence

from taco_search.data_layer.models import FoodRecord
from taco_search.data_layer.nutrient_fields import NUTRIENT_FIELDS
from taco_search.search.query_planner import AdvancedQuery, BatchItemResult
from taco_search.search.text_index import SearchHit


def format_food_json(food: FoodRecord) -> Dict[str, Any]:
    """Format a food as a dict.

    Args:
        food: FoodRecord object

    Returns:
        Dict with id, description, category and every present nutrient,
        in dataset column order
    """
    data: Dict[str, Any] = {
        "id": food.id,
        "description": food.description,
        "category": food.category,
    }
    for name in NUTRIENT_FIELDS:
        value = food.get(name)
        if value is not None:
            data[name] = value
    return data


def format_search_hit_json(hit: SearchHit) -> Dict[str, Any]:
    """Format a ranked search hit: the food plus its rounded score."""
    data = format_food_json(hit.record)
    data["score"] = round(hit.score, 4)
    return data


def format_foods_json(foods: Sequence[FoodRecord]) -> List[Dict[str, Any]]:
    return [format_food_json(food) for food in foods]


def _query_json(query: Any) -> Any:
    if isinstance(query, AdvancedQuery):
        data: Dict[str, Any] = {}
        if query.text:
            data["query"] = query.text
        for constraint in query.constraints:
            if constraint.min_value is not None:
                data[f"min_{constraint.field}"] = constraint.min_value
            if constraint.max_value is not None:
                data[f"max_{constraint.field}"] = constraint.max_value
        if query.sort_by:
            data["sort_by"] = query.sort_by
            data["sort_order"] = query.sort_order.value
        data["limit"] = query.limit
        return data
    if isinstance(query, Mapping):
        # JSON has no NaN or Infinity; echo them as text
        return {
            key: str(value) if isinstance(value, float) and not math.isfinite(value) else value
            for key, value in query.items()
        }
    return query


def format_batch_json(results: Sequence[BatchItemResult]) -> List[Dict[str, Any]]:
    """Format batch results as one block per item, in input order.

    Args:
        results: BatchItemResult objects from QueryPlanner.batch_search

    Returns:
        List of {"index", "query", "foods", "error"} dicts
    """
    return [
        {
            "index": result.index,
            "query": _query_json(result.query),
            "foods": format_foods_json(result.foods),
            "error": result.error,
        }
        for result in results
    ]


def format_json_string(data: Any, indent: int = 2) -> str:
    """Serialize formatted output, keeping Portuguese characters readable."""
    return json.dumps(data, indent=indent, ensure_ascii=False)
