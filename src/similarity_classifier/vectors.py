"""Sparse term-weight vectors, the default document model.

A ``TermVector`` maps terms (words or word n-grams) to weights. It
implements the ``DocumentModel`` operations directly on the mapping:

- ``merge``: elementwise convex combination over the union of terms
- ``intersect``: terms present in both, weighted by the mean weight
- ``subtract``: terms of this vector absent from the other
- ``similarity``: cosine similarity

Vectors are immutable; every operation returns a new vector.
"""

from __future__ import annotations

import math
import re
from collections import Counter
from collections.abc import Mapping
from dataclasses import dataclass

from .models import Document, DocumentModel
from .parsers import extract_text

_WORD_RE = re.compile(r"\b[a-zA-Z][a-zA-Z'-]*[a-zA-Z]\b|\b[a-zA-Z]\b")

_STOP_WORDS: frozenset[str] = frozenset({
    "a", "an", "the", "and", "or", "but", "in", "on", "at", "to", "for",
    "of", "with", "by", "from", "as", "is", "was", "are", "were", "be",
    "been", "being", "have", "has", "had", "do", "does", "did", "will",
    "would", "could", "should", "may", "might", "shall", "can", "must",
    "not", "no", "nor", "so", "if", "then", "than", "that", "this",
    "these", "those", "it", "its", "he", "she", "they", "them", "their",
    "his", "her", "our", "your", "we", "you", "who", "whom", "which",
    "what", "where", "when", "how", "all", "each", "every", "both",
    "few", "more", "most", "other", "some", "such", "any", "only",
    "own", "same", "too", "very", "just", "about", "above", "after",
    "again", "also", "because", "before", "between", "during", "into",
    "through", "under", "until", "up", "out", "over", "here", "there",
})


def tokenize(text: str) -> list[str]:
    """Extract lowercase word tokens from text."""
    return [m.group().lower() for m in _WORD_RE.finditer(text)]


def ngrams(tokens: list[str], n: int) -> list[str]:
    """Generate n-grams from a token list."""
    if n <= 1:
        return tokens
    return ["_".join(tokens[i : i + n]) for i in range(len(tokens) - n + 1)]


class TermVector(DocumentModel):
    """Immutable sparse vector of term weights.

    Args:
        weights: Mapping of term to weight. Zero weights are dropped.
    """

    def __init__(self, weights: Mapping[str, float] | None = None) -> None:
        self._weights: dict[str, float] = {
            term: float(w) for term, w in (weights or {}).items() if w != 0
        }

    @property
    def weights(self) -> dict[str, float]:
        """A copy of the term weights."""
        return dict(self._weights)

    def norm(self) -> float:
        return math.sqrt(sum(w * w for w in self._weights.values()))

    def merge(self, other: DocumentModel, weight: float) -> TermVector:
        other = _as_vector(other)
        if not 0.0 <= weight <= 1.0:
            raise ValueError(f"Merge weight must be in [0, 1], got {weight}")

        keep = 1.0 - weight
        merged = {term: keep * w for term, w in self._weights.items()}
        for term, w in other._weights.items():
            merged[term] = merged.get(term, 0.0) + weight * w
        return TermVector(merged)

    def intersect(self, other: DocumentModel) -> TermVector:
        other = _as_vector(other)
        return TermVector({
            term: (w + other._weights[term]) / 2
            for term, w in self._weights.items()
            if term in other._weights
        })

    def subtract(self, other: DocumentModel) -> TermVector:
        other = _as_vector(other)
        return TermVector({
            term: w for term, w in self._weights.items() if term not in other._weights
        })

    def similarity(self, other: DocumentModel) -> float:
        """Cosine similarity; 0.0 when either vector is empty."""
        other = _as_vector(other)
        norms = self.norm() * other.norm()
        if norms == 0:
            return 0.0
        small, large = sorted((self._weights, other._weights), key=len)
        dot = sum(w * large.get(term, 0.0) for term, w in small.items())
        return dot / norms

    def __len__(self) -> int:
        return len(self._weights)

    def __contains__(self, term: object) -> bool:
        return term in self._weights

    def __getitem__(self, term: str) -> float:
        return self._weights[term]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TermVector):
            return NotImplemented
        return self._weights == other._weights

    def __repr__(self) -> str:
        return f"TermVector({len(self._weights)} terms)"


def _as_vector(model: DocumentModel) -> TermVector:
    if not isinstance(model, TermVector):
        raise TypeError(f"Expected a TermVector, got {type(model).__name__}")
    return model


@dataclass
class TermVectorLoader:
    """Builds a ``TermVector`` from a document file.

    Instances are callable and serve as the model loader of a
    ``ModelBuilder``. They hold configuration only, so one instance can be
    shared across worker threads.

    Args:
        ngram_range: Tuple of (min_n, max_n) word n-gram sizes.
        use_stopwords: Whether to filter English stopwords.
        sublinear_tf: Use ``1 + log(tf)`` instead of raw term frequency.
    """

    ngram_range: tuple[int, int] = (1, 1)
    use_stopwords: bool = True
    sublinear_tf: bool = False

    def __post_init__(self) -> None:
        min_n, max_n = self.ngram_range
        if min_n < 1 or max_n < min_n:
            raise ValueError(f"Invalid ngram_range {self.ngram_range}")

    def __call__(self, document: Document) -> TermVector:
        return self.from_text(extract_text(document))

    def from_text(self, text: str) -> TermVector:
        """Build a vector from raw text."""
        tf = Counter(self._extract_terms(text))
        if self.sublinear_tf:
            return TermVector({term: 1 + math.log(count) for term, count in tf.items()})
        return TermVector(tf)

    def _extract_terms(self, text: str) -> list[str]:
        tokens = tokenize(text)
        if self.use_stopwords:
            tokens = [t for t in tokens if t not in _STOP_WORDS]

        terms: list[str] = []
        min_n, max_n = self.ngram_range
        for n in range(min_n, max_n + 1):
            terms.extend(ngrams(tokens, n))
        return terms
