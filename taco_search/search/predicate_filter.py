"""Numeric range filtering of food records."""
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

from taco_search.data_layer.exceptions import InvalidQueryError
from taco_search.data_layer.models import FoodRecord
from taco_search.data_layer.nutrient_fields import NUTRIENT_ACCESSORS


@dataclass(frozen=True)
class NutrientConstraint:
    """Inclusive range condition on one nutrient field.

    Raises:
        InvalidQueryError: If a bound is NaN or infinite
    """

    field: str
    min_value: Optional[float] = None
    max_value: Optional[float] = None

    def __post_init__(self):
        for bound in (self.min_value, self.max_value):
            if bound is not None and not math.isfinite(bound):
                raise InvalidQueryError(
                    f"Bounds for '{self.field}' must be finite numbers, got {bound!r}"
                )

    def is_satisfied_by(self, record: FoodRecord) -> bool:
        """Check the record against this constraint.

        A record whose value is absent, or whose field is unknown, never
        satisfies the constraint.
        """
        accessor = NUTRIENT_ACCESSORS.get(self.field)
        if accessor is None:
            return False
        value = accessor(record)
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            return False
        if self.min_value is not None and not value >= self.min_value:
            return False
        if self.max_value is not None and not value <= self.max_value:
            return False
        return True


def filter_records(
    records: Sequence[FoodRecord], constraints: Sequence[NutrientConstraint]
) -> List[FoodRecord]:
    """Keep the records that satisfy every constraint.

    Args:
        records: Records to filter (order is preserved)
        constraints: Constraints combined with AND; empty keeps everything

    Returns:
        Filtered list of records
    """
    return [
        record
        for record in records
        if all(constraint.is_satisfied_by(record) for constraint in constraints)
    ]
