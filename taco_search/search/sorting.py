"""Sorting and truncation of food result lists."""
from enum import Enum
from typing import List, Sequence

from taco_search.data_layer.models import FoodRecord
from taco_search.data_layer.nutrient_fields import NUTRIENT_ACCESSORS


DEFAULT_LIMIT = 10


class SortOrder(Enum):
    """Direction of a nutrient sort."""

    ASC = "asc"
    DESC = "desc"

    @classmethod
    def from_string(cls, value: str) -> "SortOrder":
        """Convert "asc"/"desc" (any case) to SortOrder.

        Raises:
            ValueError: If value is not a known order
        """
        try:
            return cls(value.lower())
        except (AttributeError, ValueError):
            raise ValueError(f"Unknown sort order {value!r}, expected 'asc' or 'desc'") from None


def sort_records(
    records: Sequence[FoodRecord], field: str, order: SortOrder = SortOrder.DESC
) -> List[FoodRecord]:
    """Sort records by a nutrient field.

    The sort is stable: equal values keep their input order. Records with
    an absent value (or any record, for an unknown field) go last in both
    directions, in input order.

    Args:
        records: Records to sort
        field: Nutrient field name
        order: Ascending or descending

    Returns:
        New sorted list
    """
    accessor = NUTRIENT_ACCESSORS.get(field)
    if accessor is None:
        return list(records)

    present = []
    absent = []
    for record in records:
        if accessor(record) is None:
            absent.append(record)
        else:
            present.append(record)

    present.sort(key=accessor, reverse=order is SortOrder.DESC)
    return present + absent


def limit_records(records: Sequence[FoodRecord], limit: int = DEFAULT_LIMIT) -> List:
    """Return the first *limit* records; zero or negative yields []."""
    if limit <= 0:
        return []
    return list(records[:limit])
