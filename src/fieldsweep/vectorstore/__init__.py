"""
Embedding providers and the per-combination embedding index.

This module handles:
- OpenAI and sentence-transformers embedding backends
- Building an in-memory index from a combination's training rows

Usage:
    from fieldsweep.vectorstore import EmbeddingIndex, get_embedder

    embedder = get_embedder("local")
    index = EmbeddingIndex.build(rows, combination, "answer", embedder)
"""

from fieldsweep.vectorstore.embeddings import (
    BaseEmbedder,
    LocalEmbedder,
    OpenAIEmbedder,
    get_embedder,
)
from fieldsweep.vectorstore.index import (
    EmbeddingIndex,
    EmbeddingRecord,
    combination_text,
)

__all__ = [
    "BaseEmbedder",
    "LocalEmbedder",
    "OpenAIEmbedder",
    "get_embedder",
    "EmbeddingIndex",
    "EmbeddingRecord",
    "combination_text",
]
