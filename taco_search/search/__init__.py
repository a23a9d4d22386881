"""Search layer: text index, filtering, sorting and query planning."""

from taco_search.search.text_index import (
    SearchIndex,
    SearchHit,
    SearchOptions,
    build_index,
)

from taco_search.search.text_matchers import (
    TextMatcher,
    RankedTextMatcher,
    SubstringTextMatcher,
)

from taco_search.search.predicate_filter import (
    NutrientConstraint,
    filter_records,
)

from taco_search.search.sorting import (
    SortOrder,
    DEFAULT_LIMIT,
    sort_records,
    limit_records,
)

from taco_search.search.query_planner import (
    QueryPlanner,
    AdvancedQuery,
    BatchItemResult,
)

__all__ = [
    # Text index
    "SearchIndex",
    "SearchHit",
    "SearchOptions",
    "build_index",
    # Matching strategies
    "TextMatcher",
    "RankedTextMatcher",
    "SubstringTextMatcher",
    # Filtering
    "NutrientConstraint",
    "filter_records",
    # Sorting
    "SortOrder",
    "DEFAULT_LIMIT",
    "sort_records",
    "limit_records",
    # Planning
    "QueryPlanner",
    "AdvancedQuery",
    "BatchItemResult",
]
