"""Query planner composing text matching, filtering and sorting.

The planner owns one dataset snapshot and the text index built from it.
Every operation is a pure read of that snapshot plus one query descriptor.
"""

import logging
import math
import random
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Sequence, Union

from taco_search.data_layer.exceptions import InvalidQueryError
from taco_search.data_layer.food_db import FoodDB
from taco_search.data_layer.models import FoodRecord
from taco_search.data_layer.nutrient_fields import SORTABLE_FIELDS
from taco_search.search.predicate_filter import NutrientConstraint, filter_records
from taco_search.search.sorting import DEFAULT_LIMIT, SortOrder, limit_records, sort_records
from taco_search.search.text_index import SearchHit, SearchIndex
from taco_search.search.text_matchers import RankedTextMatcher, SubstringTextMatcher

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdvancedQuery:
    """Optional text, range constraints, optional sort and a limit.

    Attributes:
        text: Substring to look for in description or category (None or ""
            means no text constraint)
        constraints: Range constraints over SORTABLE_FIELDS, combined with AND
        sort_by: Field to sort on, or None to keep dataset order
        sort_order: Sort direction (descending by default)
        limit: Maximum number of results
    """

    text: Optional[str] = None
    constraints: tuple = ()
    sort_by: Optional[str] = None
    sort_order: SortOrder = SortOrder.DESC
    limit: int = DEFAULT_LIMIT

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], default_limit: int = DEFAULT_LIMIT) -> "AdvancedQuery":
        """Build a query from the flat parameter shape used by callers.

        Accepted keys: ``query``, ``min_<field>`` / ``max_<field>`` for each
        of SORTABLE_FIELDS, ``sort_by``, ``sort_order`` and ``limit``.

        Args:
            data: Parameter mapping, e.g. {"min_protein_g": 20, "limit": 3}
            default_limit: Limit used when ``limit`` is missing

        Returns:
            AdvancedQuery object

        Raises:
            InvalidQueryError: On unknown keys or values of the wrong type
        """
        if not isinstance(data, Mapping):
            raise InvalidQueryError(f"Expected an object, got {type(data).__name__}")

        for key in data:
            if not isinstance(key, str):
                raise InvalidQueryError(f"Query parameter names must be strings, got {key!r}")

        allowed = {"query", "sort_by", "sort_order", "limit"}
        for nutrient in SORTABLE_FIELDS:
            allowed.update((f"min_{nutrient}", f"max_{nutrient}"))
        unknown = sorted(set(data) - allowed)
        if unknown:
            raise InvalidQueryError(f"Unknown query parameter(s): {', '.join(unknown)}")

        text = data.get("query")
        if text is not None and not isinstance(text, str):
            raise InvalidQueryError("'query' must be a string")

        constraints = []
        for nutrient in SORTABLE_FIELDS:
            min_value = _optional_number(data, f"min_{nutrient}")
            max_value = _optional_number(data, f"max_{nutrient}")
            if min_value is not None or max_value is not None:
                constraints.append(NutrientConstraint(nutrient, min_value, max_value))

        sort_by = data.get("sort_by")
        if sort_by is not None and sort_by not in SORTABLE_FIELDS:
            raise InvalidQueryError(
                f"'sort_by' must be one of {', '.join(SORTABLE_FIELDS)}, got {sort_by!r}"
            )

        sort_order = SortOrder.DESC
        if data.get("sort_order") is not None:
            try:
                sort_order = SortOrder.from_string(data["sort_order"])
            except ValueError as e:
                raise InvalidQueryError(str(e)) from e

        limit = default_limit
        if data.get("limit") is not None:
            limit = _integer(data["limit"], "limit")

        return cls(
            text=text,
            constraints=tuple(constraints),
            sort_by=sort_by,
            sort_order=sort_order,
            limit=limit,
        )


def _optional_number(data: Mapping[str, Any], key: str) -> Optional[float]:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidQueryError(f"'{key}' must be a number, got {value!r}")
    try:
        number = float(value)
    except OverflowError:
        number = math.inf
    if not math.isfinite(number):
        raise InvalidQueryError(f"'{key}' must be a finite number, got {value!r}")
    return number


def _integer(value: Any, key: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidQueryError(f"'{key}' must be an integer, got {value!r}")
    if isinstance(value, float):
        if not value.is_integer():
            raise InvalidQueryError(f"'{key}' must be an integer, got {value!r}")
        value = int(value)
    return value


BatchItem = Union[str, AdvancedQuery, Mapping[str, Any]]


@dataclass
class BatchItemResult:
    """Outcome of one batch item.

    ``foods`` is empty both when nothing matched and when the item failed;
    ``error`` tells the two apart.
    """

    index: int  # Position in the batch (0-based)
    query: Any  # The item as given by the caller
    foods: List[FoodRecord] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class QueryPlanner:
    """Answers the seven food queries over one immutable dataset.

    Usage::

        planner = QueryPlanner(FoodDB("data/taco/TACO.json"))
        hits = planner.search_foods("arroz integral", limit=5)
        rich = planner.advanced_search(
            AdvancedQuery.from_dict({"min_protein_g": 20, "sort_by": "protein_g"})
        )
    """

    def __init__(
        self,
        food_db: FoodDB,
        index: Optional[SearchIndex] = None,
        rng: Optional[random.Random] = None,
        default_limit: int = DEFAULT_LIMIT,
    ):
        """Initialize planner with a loaded food database.

        Args:
            food_db: Loaded FoodDB (read-only from here on)
            index: Text index over food_db; built here when omitted
            rng: Random source for random_food (seed it in tests)
            default_limit: Limit applied when a query gives none
        """
        self.food_db = food_db
        self.default_limit = default_limit
        if index is None:
            index = SearchIndex.build(food_db.get_all_foods())
        self.ranked_matcher = RankedTextMatcher(index)
        self.substring_matcher = SubstringTextMatcher()
        self._rng = rng or random.Random()

    def search_foods(self, text: str, limit: Optional[int] = None) -> List[SearchHit]:
        """Ranked fuzzy/prefix search over description and category.

        Args:
            text: Free-text query; blank text returns []
            limit: Maximum number of hits (default_limit when None)

        Returns:
            Hits, best first
        """
        limit = self.default_limit if limit is None else limit
        hits = limit_records(self.ranked_matcher.search(text), limit)
        logger.debug("search_foods(%r, limit=%d) -> %d hits", text, limit, len(hits))
        return hits

    def get_food_by_id(self, food_id: int) -> Optional[FoodRecord]:
        """Look up a food by id; None when no food has that id."""
        return self.food_db.get_food_by_id(food_id)

    def list_categories(self) -> List[str]:
        """Distinct categories in order of first appearance in the dataset."""
        return list(dict.fromkeys(food.category for food in self.food_db.get_all_foods()))

    def filter_by_nutrient(
        self,
        nutrient: str,
        min_value: Optional[float] = None,
        max_value: Optional[float] = None,
        limit: Optional[int] = None,
    ) -> List[FoodRecord]:
        """Foods whose *nutrient* lies in [min_value, max_value].

        Any of the nutrient fields may be used. An unknown field name
        matches nothing.

        Args:
            nutrient: Nutrient field name, e.g. "fiber_g"
            min_value: Inclusive lower bound (optional)
            max_value: Inclusive upper bound (optional)
            limit: Maximum number of results (default_limit when None)

        Returns:
            Matching foods in dataset order
        """
        limit = self.default_limit if limit is None else limit
        constraint = NutrientConstraint(nutrient, min_value, max_value)
        foods = limit_records(filter_records(self.food_db.get_all_foods(), [constraint]), limit)
        logger.debug("filter_by_nutrient(%s) -> %d foods", constraint, len(foods))
        return foods

    def random_food(self) -> Optional[FoodRecord]:
        """Pick a food uniformly at random; None when the dataset is empty."""
        foods = self.food_db.get_all_foods()
        if not foods:
            return None
        return self._rng.choice(foods)

    def advanced_search(self, query: Union[AdvancedQuery, Mapping[str, Any]]) -> List[FoodRecord]:
        """Substring text match, range filters, optional sort, then limit.

        Args:
            query: AdvancedQuery, or its flat parameter mapping

        Returns:
            Matching foods

        Raises:
            InvalidQueryError: If a mapping has the wrong shape
        """
        if not isinstance(query, AdvancedQuery):
            query = AdvancedQuery.from_dict(query, default_limit=self.default_limit)

        foods = self.substring_matcher.match(self.food_db.get_all_foods(), query.text)
        foods = filter_records(foods, query.constraints)
        if query.sort_by:
            foods = sort_records(foods, query.sort_by, query.sort_order)
        foods = limit_records(foods, query.limit)
        logger.debug("advanced_search(%s) -> %d foods", query, len(foods))
        return foods

    def batch_search(self, queries: Sequence[BatchItem]) -> List[BatchItemResult]:
        """Run several queries independently, keeping input order.

        A string item is a substring search over description and category
        (first default_limit foods, dataset order). A mapping or
        AdvancedQuery item is an advanced search. An item that cannot be
        interpreted gets an error message; the other items still run.

        Args:
            queries: Items to run

        Returns:
            One BatchItemResult per item, in input order
        """
        results = []
        for position, item in enumerate(queries):
            try:
                foods = self._run_batch_item(item)
            except InvalidQueryError as e:
                logger.warning("Batch item %d rejected: %s", position, e)
                results.append(BatchItemResult(index=position, query=item, error=str(e)))
                continue
            results.append(BatchItemResult(index=position, query=item, foods=foods))
        return results

    def _run_batch_item(self, item: BatchItem) -> List[FoodRecord]:
        if isinstance(item, str):
            foods = self.substring_matcher.match(self.food_db.get_all_foods(), item)
            return limit_records(foods, self.default_limit)
        if isinstance(item, (AdvancedQuery, Mapping)):
            return self.advanced_search(item)
        raise InvalidQueryError(
            f"Batch items must be strings or objects, got {type(item).__name__}"
        )
