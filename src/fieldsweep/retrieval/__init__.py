"""
Nearest-neighbour retrieval over an embedding index.
"""

from fieldsweep.retrieval.matcher import (
    Match,
    RetrievalMatcher,
    cosine_similarities,
    cosine_similarity,
)

__all__ = [
    "Match",
    "RetrievalMatcher",
    "cosine_similarities",
    "cosine_similarity",
]
