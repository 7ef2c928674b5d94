"""Tests for cosine retrieval."""

import numpy as np
import pytest

from fieldsweep.combinations import Combination
from fieldsweep.retrieval.matcher import (
    RetrievalMatcher,
    cosine_similarities,
    cosine_similarity,
)
from fieldsweep.vectorstore.index import EmbeddingIndex, EmbeddingRecord

TITLE = Combination(fields=("title",))


def make_index(vectors, targets=None) -> EmbeddingIndex:
    targets = targets or [f"t{i}" for i in range(len(vectors))]
    records = [
        EmbeddingRecord(vector=np.asarray(v, dtype=float), target_value=t, row_position=i)
        for i, (v, t) in enumerate(zip(vectors, targets))
    ]
    return EmbeddingIndex(TITLE, records)


class FixedQueryEmbedder:
    """Always embeds the query as the same vector."""

    def __init__(self, vector):
        self.vector = np.asarray(vector, dtype=float)

    def embed_query(self, query: str) -> np.ndarray:
        return self.vector


class TestCosine:

    def test_identical_vectors(self):
        assert cosine_similarity([1, 2, 3], [1, 2, 3]) == pytest.approx(1.0)

    @pytest.mark.parametrize("a, b", [
        ([1, 2, 3], [4, 5, 6]),
        ([-1, 2], [3, 1]),
        ([1, 0], [0, 0]),
        ([0.5, -2.0, 7.0], [3.0, 0.0, -1.0]),
    ])
    def test_symmetric(self, a, b):
        assert cosine_similarity(a, b) == pytest.approx(cosine_similarity(b, a))

    def test_opposite_vectors(self):
        assert cosine_similarity([1, 0], [-1, 0]) == pytest.approx(-1.0)

    def test_orthogonal_vectors(self):
        assert cosine_similarity([1, 0], [0, 1]) == pytest.approx(0.0)

    def test_zero_vector_scores_zero(self):
        assert cosine_similarity([0, 0], [1, 1]) == 0.0

    def test_scale_invariant(self):
        assert cosine_similarity([1, 2], [10, 20]) == pytest.approx(1.0)

    def test_matrix_form_matches_pairwise(self):
        matrix = np.array([[1.0, 0.0], [0.0, 0.0], [1.0, 1.0]])
        vector = np.array([1.0, 1.0])

        expected = [cosine_similarity(row, vector) for row in matrix]
        assert cosine_similarities(matrix, vector) == pytest.approx(expected)


class TestRetrievalMatcher:

    def test_best_match_first(self):
        index = make_index([[0, 1], [1, 0], [1, 1]], ["up", "right", "diagonal"])
        matcher = RetrievalMatcher(FixedQueryEmbedder([1, 0.1]))

        matches = matcher.query("anything", index, k=3)

        assert [m.target_value for m in matches] == ["right", "diagonal", "up"]
        assert [m.rank for m in matches] == [1, 2, 3]
        similarities = [m.similarity for m in matches]
        assert similarities == sorted(similarities, reverse=True)

    def test_k_larger_than_index(self):
        index = make_index([[1, 0], [0, 1]])
        matcher = RetrievalMatcher(FixedQueryEmbedder([1, 0]))

        assert len(matcher.query("q", index, k=10)) == 2

    def test_tie_goes_to_earliest_record(self):
        index = make_index([[0, 1], [1, 0], [2, 0], [1, 0]], ["a", "b", "c", "d"])
        matcher = RetrievalMatcher(FixedQueryEmbedder([1, 0]))

        matches = matcher.query("q", index, k=3)

        assert [m.target_value for m in matches] == ["b", "c", "d"]
        assert matches[0].record.row_position == 1

    def test_k_below_one_rejected(self):
        index = make_index([[1, 0]])
        matcher = RetrievalMatcher(FixedQueryEmbedder([1, 0]))

        with pytest.raises(ValueError):
            matcher.query("q", index, k=0)

    def test_empty_index_returns_nothing(self):
        matcher = RetrievalMatcher(FixedQueryEmbedder([1, 0]))

        assert matcher.query("q", EmbeddingIndex(TITLE, []), k=1) == []

    def test_with_built_index(self, embedder):
        rows = [
            {"title": "credit risk exposure", "sql": "A"},
            {"title": "liquidity coverage", "sql": "B"},
        ]
        index = EmbeddingIndex.build(rows, TITLE, "sql", embedder)
        matcher = RetrievalMatcher(embedder)

        best = matcher.query("liquidity coverage", index, k=1)[0]

        assert best.target_value == "B"
        assert best.similarity == pytest.approx(1.0)
