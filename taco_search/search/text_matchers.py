"""Text matching strategies used by the query planner.

Simple search ranks foods through the fuzzy/prefix :class:`SearchIndex`.
Advanced and batch queries use plain case-insensitive substring containment
on description or category. The two behave differently on purpose ("arroz"
finds "Arroz, integral" either way, but only the ranked matcher forgives
"aroz"), so both are kept as named strategies behind one interface.
"""

from abc import ABC, abstractmethod
from typing import List, Sequence

from taco_search.data_layer.models import FoodRecord
from taco_search.search.text_index import SearchHit, SearchIndex


class TextMatcher(ABC):
    """Selects the records that match a free-text query."""

    @abstractmethod
    def match(self, records: Sequence[FoodRecord], text: str) -> List[FoodRecord]:
        """Return the records matching *text*.

        Args:
            records: Candidate records in dataset order
            text: Query text

        Returns:
            Matching records, in the matcher's own order
        """
        ...


class SubstringTextMatcher(TextMatcher):
    """Case-insensitive substring match on description OR category.

    Keeps dataset order. Empty text matches every record.
    """

    def match(self, records: Sequence[FoodRecord], text: str) -> List[FoodRecord]:
        if not text:
            return list(records)
        needle = text.lower()
        return [
            record
            for record in records
            if needle in record.description.lower() or needle in record.category.lower()
        ]


class RankedTextMatcher(TextMatcher):
    """Relevance-ranked fuzzy/prefix match through a SearchIndex.

    The index was built over one dataset snapshot; ``records`` passed to
    :meth:`match` only restrict which hits are kept.
    """

    def __init__(self, index: SearchIndex) -> None:
        self._index = index

    def search(self, text: str) -> List[SearchHit]:
        """Return scored hits, best first. Blank text yields no hits."""
        return self._index.search(text)

    def match(self, records: Sequence[FoodRecord], text: str) -> List[FoodRecord]:
        allowed = {record.id for record in records}
        return [hit.record for hit in self.search(text) if hit.record.id in allowed]
