"""Pytest configuration and shared fixtures."""

import re
import zlib

import numpy as np
import pytest

from fieldsweep.vectorstore.embeddings import BaseEmbedder


class FakeEmbedder(BaseEmbedder):
    """Deterministic bag-of-words embedder; no model download needed."""

    provider = "fake"

    def __init__(self, dimension: int = 64):
        self._dimension = dimension
        self.document_calls = 0
        self.query_calls = 0

    @property
    def dimension(self) -> int:
        return self._dimension

    def _vector(self, text: str) -> np.ndarray:
        vector = np.zeros(self._dimension)
        for word in re.findall(r"\w+", text.lower()):
            vector[zlib.crc32(word.encode()) % self._dimension] += 1.0
        return vector

    def embed_documents(self, texts: list[str]) -> np.ndarray:
        self.document_calls += 1
        if not texts:
            return np.empty((0, self._dimension))
        return np.vstack([self._vector(text) for text in texts])

    def embed_query(self, query: str) -> np.ndarray:
        self.query_calls += 1
        return self._vector(query)


class BrokenEmbedder(FakeEmbedder):
    """Fails every document batch, as an unreachable provider would."""

    def embed_documents(self, texts: list[str]) -> np.ndarray:
        raise ConnectionError("embedding service unavailable")


class RaggedEmbedder(FakeEmbedder):
    """Returns a plain list of vectors, the last one a dimension short."""

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        vectors = [self._vector(text).tolist() for text in texts]
        vectors[-1] = vectors[-1][:-1]
        return vectors


@pytest.fixture
def embedder() -> FakeEmbedder:
    return FakeEmbedder()


@pytest.fixture
def broken_embedder() -> BrokenEmbedder:
    return BrokenEmbedder()


@pytest.fixture
def ragged_embedder() -> RaggedEmbedder:
    return RaggedEmbedder()


SQL_TOPICS = [
    ("users", "id, name", "List every user", "All registered user accounts"),
    ("orders", "id, total", "Show order totals", "Order amounts per purchase"),
    ("products", "sku, price", "Product prices", "Catalogue items and their price"),
    ("invoices", "id, due_date", "Invoice due dates", "When each invoice must be paid"),
    ("payments", "id, amount", "Payment amounts", "Money received from customers"),
]


@pytest.fixture
def sql_rows() -> list[dict]:
    """Twenty rows pairing a question with the SQL that answers it."""
    rows = []
    for i in range(20):
        table, columns, title, description = SQL_TOPICS[i % len(SQL_TOPICS)]
        rows.append({
            "id": i,
            "title": title,
            "description": description,
            "category": table,
            "question": f"{title.lower()} please, variant {i}",
            "sql": f"SELECT {columns} FROM {table}",
        })
    return rows


@pytest.fixture
def sql_config():
    from fieldsweep.experiment.models import ExperimentConfig

    return ExperimentConfig(
        experiment_name="sql lookup",
        candidate_fields=["title", "description"],
        target_field="sql",
        query_field="question",
        answer_field="sql",
        scoring_engine="structured-query",
        training_ratio=0.8,
        seed=7,
    )
