"""Full-text index over food descriptions and categories.

The index is an inverted map from normalized tokens to postings, one map per
indexed field. A query token can reach indexed terms three ways:

- exact: the indexed term equals the query token
- prefix: the query token is a prefix of the indexed term ("arr" -> "arroz")
- fuzzy: Levenshtein distance within ``fuzzy * len(token)`` ("aroz" -> "arroz")

Each reached term contributes a BM25+ score for every record containing it,
scaled by the field boost and by a match weight. Exact matches weigh 1.0;
prefix and fuzzy matches weigh strictly less and lose further weight as the
distance grows. Query tokens combine with OR and scores add up.
"""

import bisect
import logging
import math
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence, Tuple

from rapidfuzz.distance import Levenshtein

from taco_search.data_layer.models import FoodRecord
from taco_search.search.tokenizer import tokenize

logger = logging.getLogger(__name__)


INDEXED_FIELDS: Tuple[str, ...] = ("description", "category")

EXACT_WEIGHT = 1.0
PREFIX_WEIGHT = 0.375
FUZZY_WEIGHT = 0.45
MAX_FUZZY_DISTANCE = 6

# BM25+ parameters
BM25_K = 1.2
BM25_B = 0.7
BM25_D = 0.5


@dataclass
class SearchOptions:
    """Matching options for the text index.

    Attributes:
        fuzzy: Edit distance tolerance as a fraction of the query token
            length (0 disables fuzzy matching)
        prefix: Whether query tokens also match longer indexed terms
        boosts: Score multiplier per indexed field
    """

    fuzzy: float = 0.2
    prefix: bool = True
    boosts: Dict[str, float] = field(
        default_factory=lambda: {"description": 2.0, "category": 1.0}
    )


@dataclass(frozen=True)
class SearchHit:
    """A record returned by the text index with its relevance score."""

    record: FoodRecord
    score: float
    terms: Tuple[str, ...] = ()  # Indexed terms that matched


class SearchIndex:
    """Inverted index built once over a snapshot of food records.

    Usage::

        index = SearchIndex.build(food_db.get_all_foods())
        hits = index.search("arroz integral")
        best = hits[0].record
    """

    def __init__(self, records: Sequence[FoodRecord], options: SearchOptions = None):
        """Index every record.

        Args:
            records: Food records in dataset order; ties in search results
                keep this order
            options: Matching options (defaults to SearchOptions())
        """
        self.options = options or SearchOptions()
        self._records: Tuple[FoodRecord, ...] = tuple(records)
        # field -> term -> {record position: term frequency}
        self._postings: Dict[str, Dict[str, Dict[int, int]]] = {
            name: defaultdict(dict) for name in INDEXED_FIELDS
        }
        self._field_lengths: Dict[str, List[int]] = {name: [] for name in INDEXED_FIELDS}
        self._average_lengths: Dict[str, float] = {}
        self._vocabulary: List[str] = []
        self._build()

    @classmethod
    def build(cls, records: Iterable[FoodRecord], options: SearchOptions = None) -> "SearchIndex":
        return cls(list(records), options)

    def _build(self):
        vocabulary = set()
        for position, record in enumerate(self._records):
            for field_name in INDEXED_FIELDS:
                tokens = tokenize(getattr(record, field_name))
                self._field_lengths[field_name].append(len(tokens))
                postings = self._postings[field_name]
                for token in tokens:
                    postings[token][position] = postings[token].get(position, 0) + 1
                    vocabulary.add(token)

        for field_name, lengths in self._field_lengths.items():
            self._average_lengths[field_name] = (sum(lengths) / len(lengths)) if lengths else 0.0
        self._vocabulary = sorted(vocabulary)
        logger.info(
            "Indexed %d foods (%d distinct terms)", len(self._records), len(self._vocabulary)
        )

    def __len__(self) -> int:
        return len(self._records)

    def search(self, text: str) -> List[SearchHit]:
        """Search the index with free text.

        Args:
            text: Query text; blank text returns no hits

        Returns:
            Hits ordered by descending score, ties in dataset order
        """
        query_tokens = list(dict.fromkeys(tokenize(text or "")))
        if not query_tokens:
            return []

        scores: Dict[int, float] = defaultdict(float)
        matched_terms: Dict[int, List[str]] = defaultdict(list)

        for query_token in query_tokens:
            expansion = self._expand(query_token)
            for field_name in INDEXED_FIELDS:
                field_postings = self._postings[field_name]
                # Document frequency is shared by every term the token reaches
                reached = set()
                for term in expansion:
                    reached.update(field_postings.get(term, ()))
                if not reached:
                    continue
                idf = self._idf(len(reached))
                boost = self.options.boosts.get(field_name, 1.0)
                for term, weight in expansion.items():
                    postings = field_postings.get(term)
                    if not postings:
                        continue
                    for position, frequency in postings.items():
                        relevance = self._term_relevance(field_name, position, frequency)
                        scores[position] += weight * boost * idf * relevance
                        if term not in matched_terms[position]:
                            matched_terms[position].append(term)

        ranked = sorted(scores.items(), key=lambda item: (-item[1], item[0]))
        return [
            SearchHit(
                record=self._records[position],
                score=score,
                terms=tuple(matched_terms[position]),
            )
            for position, score in ranked
        ]

    def _expand(self, query_token: str) -> Dict[str, float]:
        """Map a query token to the indexed terms it reaches, with weights."""
        weights: Dict[str, float] = {}
        length = len(query_token)

        if self._has_term(query_token):
            weights[query_token] = EXACT_WEIGHT

        if self.options.prefix:
            start = bisect.bisect_right(self._vocabulary, query_token)
            for term in self._vocabulary[start:]:
                if not term.startswith(query_token):
                    break
                distance = len(term) - length
                weights[term] = PREFIX_WEIGHT * length / (length + 0.3 * distance)

        max_distance = self._max_fuzzy_distance(length)
        if max_distance > 0:
            for term in self._vocabulary:
                if term == query_token or abs(len(term) - length) > max_distance:
                    continue
                distance = Levenshtein.distance(query_token, term, score_cutoff=max_distance)
                if distance > max_distance:
                    continue
                weight = FUZZY_WEIGHT * length / (length + distance)
                if weight > weights.get(term, 0.0):
                    weights[term] = weight

        return weights

    def _has_term(self, term: str) -> bool:
        position = bisect.bisect_left(self._vocabulary, term)
        return position < len(self._vocabulary) and self._vocabulary[position] == term

    def _max_fuzzy_distance(self, length: int) -> int:
        if self.options.fuzzy <= 0:
            return 0
        # Round half up
        return min(MAX_FUZZY_DISTANCE, int(length * self.options.fuzzy + 0.5))

    def _idf(self, document_frequency: int) -> float:
        total = len(self._records)
        return math.log(1 + (total - document_frequency + 0.5) / (document_frequency + 0.5))

    def _term_relevance(self, field_name: str, position: int, frequency: int) -> float:
        average = self._average_lengths[field_name] or 1.0
        field_length = self._field_lengths[field_name][position]
        normalization = 1 - BM25_B + BM25_B * field_length / average
        return BM25_D + frequency * (BM25_K + 1) / (frequency + BM25_K * normalization)


def build_index(records: Iterable[FoodRecord], options: SearchOptions = None) -> SearchIndex:
    """Build a SearchIndex over records (convenience wrapper)."""
    return SearchIndex.build(records, options)
