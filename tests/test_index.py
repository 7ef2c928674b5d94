"""Tests for the per-combination embedding index."""

import numpy as np
import pytest
from structlog.testing import capture_logs

from fieldsweep.combinations import Combination
from fieldsweep.errors import EmptyIndex, ProviderFailure
from fieldsweep.vectorstore.embeddings import BaseEmbedder
from fieldsweep.vectorstore.index import EmbeddingIndex, combination_text

TITLE_BODY = Combination(fields=("title", "body"))


class WrongShapeEmbedder(BaseEmbedder):
    """Returns one vector fewer than it was given texts."""

    @property
    def dimension(self) -> int:
        return 3

    def embed_documents(self, texts: list[str]) -> np.ndarray:
        return np.ones((max(len(texts) - 1, 0), 3))

    def embed_query(self, query: str) -> np.ndarray:
        return np.ones(3)


def test_combination_text_joins_in_field_order():
    row = {"title": "Loans", "body": "Rates", "year": 2024}

    assert combination_text(row, ["body", "title"]) == "Rates | Loans"
    assert combination_text(row, ["year"]) == "2024"


def test_build_one_record_per_row(embedder):
    rows = [
        {"title": "Users", "body": "All users", "sql": "SELECT * FROM users"},
        {"title": "Orders", "body": "All orders", "sql": "SELECT * FROM orders"},
    ]

    index = EmbeddingIndex.build(rows, TITLE_BODY, "sql", embedder)

    assert len(index) == 2
    assert index.dimension == embedder.dimension
    assert [r.target_value for r in index.records] == [
        "SELECT * FROM users",
        "SELECT * FROM orders",
    ]
    assert [r.row_position for r in index.records] == [0, 1]
    assert embedder.document_calls == 1


def test_rows_missing_a_field_are_skipped_with_warning(embedder):
    rows = [
        {"title": "Users", "body": None, "sql": "SELECT * FROM users"},
        {"title": "Orders", "body": "All orders", "sql": "SELECT * FROM orders"},
        {"title": "Products", "body": "Catalogue"},
    ]

    with capture_logs() as logs:
        index = EmbeddingIndex.build(rows, TITLE_BODY, "sql", embedder)

    assert len(index) == 1
    assert index.records[0].row_position == 1

    skipped = [entry for entry in logs if entry["event"] == "row_skipped"]
    assert [entry["row"] for entry in skipped] == [0, 2]
    assert skipped[0]["missing"] == ["body"]
    assert skipped[1]["missing"] == ["sql"]
    assert all(entry["log_level"] == "warning" for entry in skipped)


def test_empty_string_is_not_missing(embedder):
    rows = [{"title": "", "body": "", "sql": ""}]

    index = EmbeddingIndex.build(rows, TITLE_BODY, "sql", embedder)

    assert len(index) == 1


def test_no_usable_rows_raises_empty_index(embedder):
    rows = [{"title": "Users", "sql": "SELECT 1"}]

    with pytest.raises(EmptyIndex):
        EmbeddingIndex.build(rows, TITLE_BODY, "sql", embedder)


def test_no_rows_at_all_raises_empty_index(embedder):
    with pytest.raises(EmptyIndex):
        EmbeddingIndex.build([], TITLE_BODY, "sql", embedder)


def test_provider_error_becomes_provider_failure(broken_embedder):
    rows = [{"title": "Users", "body": "All users", "sql": "SELECT 1"}]

    with pytest.raises(ProviderFailure) as excinfo:
        EmbeddingIndex.build(rows, TITLE_BODY, "sql", broken_embedder)

    assert isinstance(excinfo.value.__cause__, ConnectionError)


def test_wrong_vector_count_is_provider_failure():
    rows = [
        {"title": "Users", "body": "All users", "sql": "SELECT 1"},
        {"title": "Orders", "body": "All orders", "sql": "SELECT 2"},
    ]

    with pytest.raises(ProviderFailure):
        EmbeddingIndex.build(rows, TITLE_BODY, "sql", WrongShapeEmbedder())


def test_structured_target_rendered_as_text(embedder):
    rows = [{"title": "Users", "body": "x", "answer": {"b": 1, "a": [2]}}]

    index = EmbeddingIndex.build(rows, TITLE_BODY, "answer", embedder)

    assert index.records[0].target_value == '{"a":[2],"b":1}'


def test_ragged_vectors_are_provider_failure(ragged_embedder):
    rows = [
        {"title": "Users", "body": "All users", "sql": "SELECT 1"},
        {"title": "Orders", "body": "All orders", "sql": "SELECT 2"},
    ]

    with pytest.raises(ProviderFailure) as excinfo:
        EmbeddingIndex.build(rows, TITLE_BODY, "sql", ragged_embedder)

    assert isinstance(excinfo.value.__cause__, ValueError)
    assert "title + body" in str(excinfo.value)
