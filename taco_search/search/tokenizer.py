"""Text normalization and tokenization for food names and categories."""

import re
from typing import List

from unidecode import unidecode


_SPLIT_PATTERN = re.compile(r"[^0-9a-z]+")


def normalize_text(text: str) -> str:
    """Lowercase and strip accents ("Açúcar" -> "acucar")."""
    return unidecode(text).lower()


def tokenize(text: str) -> List[str]:
    """Split text into normalized tokens.

    Any run of non-alphanumeric characters separates tokens, so
    "Arroz, integral, cozido" yields ["arroz", "integral", "cozido"].

    Args:
        text: Raw text (description, category or query)

    Returns:
        List of tokens in order of appearance (may repeat)
    """
    if not text:
        return []
    return [token for token in _SPLIT_PATTERN.split(normalize_text(text)) if token]
