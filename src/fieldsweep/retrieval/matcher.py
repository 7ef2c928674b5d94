"""
Nearest-neighbour retrieval over an EmbeddingIndex.

The query is embedded with the same provider that built the index, then
compared to every record by cosine similarity. Using a different provider
than the one that built the index gives meaningless scores; that is not
checked here.

Usage:
    from fieldsweep.retrieval.matcher import RetrievalMatcher

    matcher = RetrievalMatcher(embedder)
    best = matcher.query("Which users placed orders last week?", index, k=1)[0]
    print(best.similarity, best.record.target_value)
"""

from dataclasses import dataclass

import numpy as np

from fieldsweep.logging import get_logger
from fieldsweep.vectorstore.embeddings import BaseEmbedder
from fieldsweep.vectorstore.index import EmbeddingIndex, EmbeddingRecord

logger = get_logger(__name__, component="matcher")


@dataclass
class Match:
    """One retrieved record and its similarity to the query."""
    record: EmbeddingRecord
    similarity: float
    rank: int

    @property
    def target_value(self) -> str:
        return self.record.target_value


def cosine_similarity(a: np.ndarray, b: np.ndarray) -> float:
    """Cosine of the angle between two vectors, 0 when either is all zeros."""
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    norm = np.linalg.norm(a) * np.linalg.norm(b)
    if norm == 0:
        return 0.0
    return float(np.dot(a, b) / norm)


def cosine_similarities(matrix: np.ndarray, vector: np.ndarray) -> np.ndarray:
    """Cosine similarity of every row of matrix against vector."""
    vector = np.asarray(vector, dtype=float)
    row_norms = np.linalg.norm(matrix, axis=1)
    norms = row_norms * np.linalg.norm(vector)
    dots = matrix @ vector

    similarities = np.zeros(len(matrix), dtype=float)
    nonzero = norms > 0
    similarities[nonzero] = dots[nonzero] / norms[nonzero]
    return similarities


class RetrievalMatcher:
    """Top-k cosine retrieval against an index."""

    def __init__(self, embedder: BaseEmbedder):
        self.embedder = embedder

    def query(self, text: str, index: EmbeddingIndex, k: int = 1) -> list[Match]:
        """
        Return the k records most similar to text, best first.

        Records with equal similarity keep their insertion order, so the
        earlier training row wins a tie.

        Raises:
            ValueError: If k < 1
        """
        if k < 1:
            raise ValueError(f"k must be at least 1, got {k}")
        if len(index) == 0:
            return []

        query_vector = self.embedder.embed_query(text)
        similarities = cosine_similarities(index.matrix, query_vector)

        # Stable sort on negated scores keeps insertion order among ties
        order = np.argsort(-similarities, kind="stable")[:k]

        matches = [
            Match(record=index.records[i], similarity=float(similarities[i]), rank=rank)
            for rank, i in enumerate(order, 1)
        ]

        logger.debug(
            "query_matched",
            query=text[:50],
            k=k,
            top_similarity=matches[0].similarity,
        )
        return matches
