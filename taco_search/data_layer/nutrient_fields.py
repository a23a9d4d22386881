"""Catalogue of the nutrient fields carried by every TACO food record.

Field names match the keys of the TACO JSON export. Some of them (fatty
acids such as ``"18:2 n-6_g"``) are not Python identifiers, so records keep
nutrients in a mapping and callers go through :data:`NUTRIENT_ACCESSORS`
instead of attribute access.
"""

from typing import Callable, Dict, List, Optional, Tuple


# Order matches the source columns; formatters preserve it.
NUTRIENT_FIELDS: Tuple[str, ...] = (
    "humidity_percents",
    "energy_kcal",
    "energy_kj",
    "protein_g",
    "lipid_g",
    "cholesterol_mg",
    "carbohydrate_g",
    "fiber_g",
    "ashes_g",
    # Minerals
    "calcium_mg",
    "magnesium_mg",
    "manganese_mg",
    "phosphorus_mg",
    "iron_mg",
    "sodium_mg",
    "potassium_mg",
    "copper_mg",
    "zinc_mg",
    # Vitamins
    "retinol_mcg",
    "re_mcg",
    "rae_mcg",
    "thiamine_mg",
    "riboflavin_mg",
    "pyridoxine_mg",
    "niacin_mg",
    "vitaminC_mg",
    # Fatty acids
    "saturated_g",
    "monounsaturated_g",
    "polyunsaturated_g",
    "12:0_g",
    "14:0_g",
    "16:0_g",
    "18:0_g",
    "20:0_g",
    "22:0_g",
    "24:0_g",
    "14:1_g",
    "16:1_g",
    "18:1_g",
    "20:1_g",
    "18:2 n-6_g",
    "18:3 n-3_g",
    "20:4_g",
    "20:5_g",
    "22:5_g",
    "22:6_g",
    "18:1t_g",
    "18:2t_g",
    # Amino acids
    "tryptophan_g",
    "threonine_g",
    "isoleucine_g",
    "leucine_g",
    "lysine_g",
    "methionine_g",
    "cystine_g",
    "phenylalanine_g",
    "tyrosine_g",
    "valine_g",
    "arginine_g",
    "histidine_g",
    "alanine_g",
    "aspartic_g",
    "glutamic_g",
    "glycine_g",
    "proline_g",
    "serine_g",
)

# Fields accepted by advanced search ranges and sorting.
SORTABLE_FIELDS: Tuple[str, ...] = (
    "energy_kcal",
    "protein_g",
    "carbohydrate_g",
    "lipid_g",
    "fiber_g",
)

FIELD_LABELS: Dict[str, str] = {
    "id": "ID",
    "description": "Description",
    "category": "Category",
    "humidity_percents": "Humidity (%)",
    "energy_kcal": "Energy (kcal)",
    "energy_kj": "Energy (kJ)",
    "protein_g": "Protein (g)",
    "lipid_g": "Fat (g)",
    "cholesterol_mg": "Cholesterol (mg)",
    "carbohydrate_g": "Carbohydrate (g)",
    "fiber_g": "Fiber (g)",
    "ashes_g": "Ashes (g)",
    "calcium_mg": "Calcium (mg)",
    "magnesium_mg": "Magnesium (mg)",
    "manganese_mg": "Manganese (mg)",
    "phosphorus_mg": "Phosphorus (mg)",
    "iron_mg": "Iron (mg)",
    "sodium_mg": "Sodium (mg)",
    "potassium_mg": "Potassium (mg)",
    "copper_mg": "Copper (mg)",
    "zinc_mg": "Zinc (mg)",
    "retinol_mcg": "Retinol (mcg)",
    "re_mcg": "RE (mcg)",
    "rae_mcg": "RAE (mcg)",
    "thiamine_mg": "Thiamine (mg)",
    "riboflavin_mg": "Riboflavin (mg)",
    "pyridoxine_mg": "Pyridoxine (mg)",
    "niacin_mg": "Niacin (mg)",
    "vitaminC_mg": "Vitamin C (mg)",
    "saturated_g": "Saturated Fat (g)",
    "monounsaturated_g": "Monounsaturated Fat (g)",
    "polyunsaturated_g": "Polyunsaturated Fat (g)",
}

_UNIT_SUFFIXES = {
    "percents": "%",
    "kcal": "kcal",
    "kj": "kJ",
    "g": "g",
    "mg": "mg",
    "mcg": "mcg",
}


def field_unit(field_name: str) -> Optional[str]:
    """Return the unit encoded in a field name suffix (e.g. ``"mg"``).

    Args:
        field_name: Nutrient field name such as ``"iron_mg"``

    Returns:
        Unit string, or None if the suffix is not a known unit
    """
    suffix = field_name.rsplit("_", 1)[-1]
    return _UNIT_SUFFIXES.get(suffix)


def field_label(field_name: str) -> str:
    """Return the display label for a field, falling back to its name."""
    return FIELD_LABELS.get(field_name, field_name)


def describe_fields() -> List[Dict[str, Optional[str]]]:
    """List every queryable nutrient field with its label and unit."""
    return [
        {"name": name, "label": field_label(name), "unit": field_unit(name)}
        for name in NUTRIENT_FIELDS
    ]


def _make_accessor(field_name: str) -> Callable[[object], Optional[float]]:
    def accessor(record) -> Optional[float]:
        return record.nutrients.get(field_name)

    return accessor


# Built once; filter and sort resolve field names here. Unknown names have
# no entry and therefore match nothing.
NUTRIENT_ACCESSORS: Dict[str, Callable[[object], Optional[float]]] = {
    name: _make_accessor(name) for name in NUTRIENT_FIELDS
}
