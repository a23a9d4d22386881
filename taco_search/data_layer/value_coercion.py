"""Coercion of raw spreadsheet values into nutrient numbers.

The TACO export stores many numbers as text: comma decimal separators
("1,5"), trace markers ("Tr"), not-analysed markers ("NA", "*") and a few
malformed cells (",0,02"). All of these must reach queries either as a
finite float or as None.
"""

import math
from typing import Any, Optional


ABSENT_TOKENS = frozenset({"", "NA", "*", "Tr", ",0,02"})


def coerce_nutrient(value: Any) -> Optional[float]:
    """Convert a raw dataset value to a float, or None when absent.

    Never raises: anything that is not a usable number becomes None.

    Args:
        value: Raw value from the JSON source (number, string, null, ...)

    Returns:
        Finite float, or None
    """
    # bool is an int subclass; a true/false cell is not a measurement
    if isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if text in ABSENT_TOKENS:
            return None
        try:
            number = float(text.replace(",", ".", 1))
        except ValueError:
            return None
    else:
        return None

    if not math.isfinite(number):
        return None
    return number
