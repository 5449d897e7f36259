"""
Module for comparing embedding vectors.
Provides a bounded cosine similarity and the qualitative bands used to
describe a score.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Optional

import numpy as np

Bands = tuple[tuple[float, str], ...]

# Thresholds are exclusive lower bounds, checked top-down.
DETAILED_BANDS: Bands = (
    (0.8, "very high"),
    (0.6, "strong"),
    (0.4, "moderate"),
    (0.2, "slight"),
)
DETAILED_FALLBACK = "low"

COARSE_BANDS: Bands = (
    (0.8, "very similar"),
    (0.5, "moderately similar"),
    (0.3, "slightly similar"),
)
COARSE_FALLBACK = "not similar"

_FALLBACKS: dict[Bands, str] = {
    DETAILED_BANDS: DETAILED_FALLBACK,
    COARSE_BANDS: COARSE_FALLBACK,
}


@dataclass(frozen=True)
class SimilarityResult:
    score: float
    label: str


def cosine_similarity(a: Optional[Sequence[float]], b: Optional[Sequence[float]]) -> float:
    """
    Calculates the cosine similarity between two vectors, clamped to [-1, 1].

    Absent, empty or differently sized vectors score 0.0 instead of raising.
    Identical vectors score exactly 1.0.
    """
    if a is None or b is None:
        return 0.0
    v1 = np.asarray(a, dtype=np.float64)
    v2 = np.asarray(b, dtype=np.float64)
    if v1.size == 0 or v1.shape != v2.shape:
        return 0.0
    if np.array_equal(v1, v2):
        return 1.0

    norm1 = float(np.linalg.norm(v1))
    norm2 = float(np.linalg.norm(v2))
    if norm1 == 0 or norm2 == 0:
        return 0.0
    score = float(np.dot(v1, v2) / (norm1 * norm2))
    if np.isnan(score):
        return 0.0
    return min(1.0, max(-1.0, score))


def classify(score: float, bands: Bands = DETAILED_BANDS, fallback: Optional[str] = None) -> str:
    """Returns the label of the first band whose threshold the score exceeds."""
    for threshold, label in bands:
        if score > threshold:
            return label
    return fallback if fallback is not None else _FALLBACKS.get(bands, DETAILED_FALLBACK)


def classify_coarse(score: float) -> str:
    """Labels a score with the coarse four-way banding."""
    return classify(score, COARSE_BANDS, COARSE_FALLBACK)


def compare(a: Optional[Sequence[float]], b: Optional[Sequence[float]], bands: Bands = DETAILED_BANDS) -> SimilarityResult:
    score = cosine_similarity(a, b)
    return SimilarityResult(score, classify(score, bands))


def rank_references(
    query: Sequence[float],
    references: Mapping[str, Sequence[float]],
    n: Optional[int] = None,
    bands: Bands = DETAILED_BANDS,
) -> list[tuple[str, SimilarityResult]]:
    """
    Scores a query vector against named reference vectors.

    Returns:
        (name, result) pairs sorted by descending score, limited to n when given.
    """
    results = [(name, compare(query, vector, bands)) for name, vector in references.items()]
    results.sort(key=lambda item: item[1].score, reverse=True)
    return results if n is None else results[:n]
