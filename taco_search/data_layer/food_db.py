"""Food database for loading the TACO table from JSON."""
import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Optional, Tuple

from taco_search.data_layer.exceptions import DatasetLoadError
from taco_search.data_layer.models import Category, FoodRecord
from taco_search.data_layer.nutrient_fields import NUTRIENT_FIELDS
from taco_search.data_layer.value_coercion import coerce_nutrient

logger = logging.getLogger(__name__)


class FoodDB:
    """Read-only database of food records loaded once from JSON."""

    def __init__(self, json_path: str):
        """Initialize food database from JSON file.

        Args:
            json_path: Path to JSON file containing the TACO table

        Raises:
            DatasetLoadError: If the file is missing, is not valid JSON, or
                holds records that break the dataset invariants
        """
        self.json_path = Path(json_path)
        self._foods: Tuple[FoodRecord, ...] = ()
        self._by_id: Dict[int, FoodRecord] = {}
        self._load_foods()

    @classmethod
    def from_records(cls, records: List[FoodRecord]) -> "FoodDB":
        """Build a database from already-parsed records (no file I/O).

        Args:
            records: Food records in dataset order

        Raises:
            DatasetLoadError: If two records share an id
        """
        db = cls.__new__(cls)
        db.json_path = Path("<memory>")
        db._foods = ()
        db._by_id = {}
        db._index_records(list(records))
        return db

    def _load_foods(self):
        """Load and validate every food from the JSON file."""
        try:
            with open(self.json_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError as e:
            raise DatasetLoadError(str(self.json_path), "file not found") from e
        except OSError as e:
            raise DatasetLoadError(str(self.json_path), str(e)) from e
        except json.JSONDecodeError as e:
            raise DatasetLoadError(str(self.json_path), f"invalid JSON: {e}") from e

        if isinstance(data, dict):
            foods_data = data.get("foods")
        else:
            foods_data = data
        if not isinstance(foods_data, list):
            raise DatasetLoadError(
                str(self.json_path), "expected a list of foods or an object with a 'foods' list"
            )

        records = [
            self._parse_food(food_data, position)
            for position, food_data in enumerate(foods_data)
        ]
        self._index_records(records)
        logger.info("Loaded %d foods from %s", len(self._foods), self.json_path)

    def _index_records(self, records: List[FoodRecord]):
        by_id: Dict[int, FoodRecord] = {}
        for record in records:
            if record.id in by_id:
                raise DatasetLoadError(
                    str(self.json_path), f"duplicate food id {record.id}"
                )
            by_id[record.id] = record
        self._foods = tuple(records)
        self._by_id = by_id

    def _parse_food(self, food_data: Any, position: int) -> FoodRecord:
        """Parse a single food from dictionary data.

        Args:
            food_data: Dictionary containing one row of the table
            position: Row position in the file, used in error messages

        Returns:
            FoodRecord object
        """
        if not isinstance(food_data, dict):
            raise DatasetLoadError(
                str(self.json_path), f"row {position} is not an object"
            )

        food_id = self._parse_id(food_data.get("id"), position)

        description = food_data.get("description")
        if not isinstance(description, str) or not description.strip():
            raise DatasetLoadError(
                str(self.json_path), f"food {food_id} has an empty description"
            )

        category = food_data.get("category")
        if not isinstance(category, str) or Category.from_string(category) is None:
            raise DatasetLoadError(
                str(self.json_path), f"food {food_id} has unknown category {category!r}"
            )

        # Missing columns load as absent, the same as sentinel cells
        nutrients = {
            name: coerce_nutrient(food_data.get(name)) for name in NUTRIENT_FIELDS
        }

        return FoodRecord(
            id=food_id,
            description=description,
            category=category,
            nutrients=MappingProxyType(nutrients),
        )

    def _parse_id(self, raw_id: Any, position: int) -> int:
        if isinstance(raw_id, bool):
            raw_id = None
        if isinstance(raw_id, int):
            return raw_id
        if isinstance(raw_id, float) and raw_id.is_integer():
            return int(raw_id)
        if isinstance(raw_id, str) and raw_id.strip().isdigit():
            return int(raw_id.strip())
        raise DatasetLoadError(
            str(self.json_path), f"row {position} has an invalid id {raw_id!r}"
        )

    def __len__(self) -> int:
        return len(self._foods)

    def get_all_foods(self) -> Tuple[FoodRecord, ...]:
        """Get all foods in dataset order.

        Returns:
            Immutable tuple of FoodRecord objects
        """
        return self._foods

    def get_food_by_id(self, food_id: int) -> Optional[FoodRecord]:
        """Get a food by its ID.

        Args:
            food_id: Unique food identifier

        Returns:
            FoodRecord if found, None otherwise
        """
        return self._by_id.get(food_id)
