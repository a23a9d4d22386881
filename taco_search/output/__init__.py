"""Output shaping for query results."""

from taco_search.output.formatters import (
    format_food_json,
    format_search_hit_json,
    format_foods_json,
    format_batch_json,
    format_json_string,
)

__all__ = [
    "format_food_json",
    "format_search_hit_json",
    "format_foods_json",
    "format_batch_json",
    "format_json_string",
]
