"""Data models for the TACO food search engine."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional


class Category(Enum):
    """Food categories used by the TACO table."""

    PREPARED = "Alimentos preparados"
    BEVERAGES = "Bebidas (alcoólicas e não alcoólicas)"
    MEATS = "Carnes e derivados"
    CEREALS = "Cereais e derivados"
    FRUITS = "Frutas e derivados"
    FATS_AND_OILS = "Gorduras e óleos"
    LEGUMES = "Leguminosas e derivados"
    DAIRY = "Leite e derivados"
    MISCELLANEOUS = "Miscelâneas"
    NUTS_AND_SEEDS = "Nozes e sementes"
    INDUSTRIALIZED = "Outros alimentos industrializados"
    EGGS = "Ovos e derivados"
    SEAFOOD = "Pescados e frutos do mar"
    SUGARY = "Produtos açucarados"
    VEGETABLES = "Verduras, hortaliças e derivados"

    @classmethod
    def from_string(cls, value: str) -> Optional["Category"]:
        """Convert a dataset category string to a Category.

        Args:
            value: Category text as it appears in the dataset

        Returns:
            Category enum or None if unknown
        """
        for category in cls:
            if category.value == value:
                return category
        return None


@dataclass(frozen=True)
class FoodRecord:
    """One row of the TACO table."""

    id: int  # Stable identifier from the source file
    description: str  # Food name in Brazilian Portuguese
    category: str  # One of Category values
    # Every nutrient field maps to a finite float or None (absent, not zero)
    nutrients: Mapping[str, Optional[float]] = field(default_factory=dict)

    def get(self, field_name: str) -> Optional[float]:
        """Return a nutrient value, or None if absent or unknown."""
        return self.nutrients.get(field_name)

    def __hash__(self) -> int:
        # nutrients is an unhashable mapping; ids are unique per dataset
        return hash(self.id)
