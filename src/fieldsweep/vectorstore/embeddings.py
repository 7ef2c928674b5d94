"""
Text embeddings for field-combination retrieval.

Supports two embedding backends:
1. OpenAI: hosted, requires API key
2. Local (sentence-transformers): free, runs locally

Both must return the same vector for the same text; the experiment relies
on it for reproducible retrieval.

Usage:
    from fieldsweep.vectorstore.embeddings import get_embedder

    embedder = get_embedder("local")

    # Embed index texts (one batch per combination)
    vectors = embedder.embed_documents(["title | body", "title | body"])

    # Embed a held-out query
    query_vector = embedder.embed_query("How do I reset my password?")
"""

from abc import ABC, abstractmethod

import numpy as np

from fieldsweep.config import Settings, get_settings
from fieldsweep.logging import get_logger

logger = get_logger(__name__, component="embeddings")

PROVIDERS = ("openai", "local")


class BaseEmbedder(ABC):
    """Abstract base class for embedders."""

    provider: str = "base"

    @property
    @abstractmethod
    def dimension(self) -> int:
        """Return the embedding dimension."""
        pass

    @abstractmethod
    def embed_documents(self, texts: list[str]) -> np.ndarray:
        """Embed multiple documents into an array of shape (len(texts), dimension)."""
        pass

    @abstractmethod
    def embed_query(self, query: str) -> np.ndarray:
        """Embed a single query."""
        pass

    def embed(self, text: str) -> np.ndarray:
        """Embed one text; alias of embed_query."""
        return self.embed_query(text)


class OpenAIEmbedder(BaseEmbedder):
    """
    OpenAI embeddings, text-embedding-3-small by default.

    Texts are sent in batches; the API keeps the input order in its
    response so vectors line up with the texts that produced them.
    """

    provider = "openai"

    MODEL_DIMENSIONS = {
        "text-embedding-3-small": 1536,
        "text-embedding-3-large": 3072,
        "text-embedding-ada-002": 1536,
    }

    def __init__(
            self,
            model_name: str | None = None,
            settings: Settings | None = None,
            batch_size: int | None = None,
    ):
        """
        Initialize OpenAI embedder.

        Args:
            model_name: OpenAI embedding model. Defaults to settings.openai_embedding_model
            settings: Settings carrying the API key
            batch_size: Texts per API call (max 2048)
        """
        from openai import OpenAI

        settings = settings or get_settings()

        api_key = settings.openai_api_key
        if not api_key:
            raise ValueError(
                "OPENAI_API_KEY not set. Add it to your .env file."
            )

        self.client = OpenAI(api_key=api_key.get_secret_value())
        self.model_name = model_name or settings.openai_embedding_model
        self.batch_size = batch_size or settings.embedding_batch_size
        self._dimension = self.MODEL_DIMENSIONS.get(self.model_name, 1536)

        logger.info("openai_embedder_initialized", model=self.model_name, dimension=self._dimension)

    @property
    def dimension(self) -> int:
        return self._dimension

    def embed_documents(self, texts: list[str]) -> np.ndarray:
        if not texts:
            return np.empty((0, self._dimension))

        logger.debug("embedding_documents_openai", count=len(texts))

        all_embeddings = []
        for i in range(0, len(texts), self.batch_size):
            batch = texts[i:i + self.batch_size]

            response = self.client.embeddings.create(
                model=self.model_name,
                input=batch,
            )
            all_embeddings.extend(item.embedding for item in response.data)

        embeddings = np.array(all_embeddings, dtype=float)
        logger.debug("embedding_complete_openai", shape=embeddings.shape)
        return embeddings

    def embed_query(self, query: str) -> np.ndarray:
        response = self.client.embeddings.create(
            model=self.model_name,
            input=query,
        )
        return np.array(response.data[0].embedding, dtype=float)


class LocalEmbedder(BaseEmbedder):
    """
    Local embeddings using sentence-transformers.

    The model is downloaded on first use. Vectors are L2-normalised, so
    cosine similarity reduces to a dot product.
    """

    provider = "local"

    def __init__(
            self,
            model_name: str | None = None,
            settings: Settings | None = None,
            batch_size: int | None = None,
    ):
        """
        Initialize local embedder.

        Args:
            model_name: HuggingFace model name. Defaults to settings.local_embedding_model
            settings: Settings to read defaults from
            batch_size: Texts per encode call
        """
        try:
            from sentence_transformers import SentenceTransformer
        except ImportError:
            raise ImportError(
                "sentence-transformers not installed. Install with: pip install 'fieldsweep[local]'"
            )

        settings = settings or get_settings()
        self.model_name = model_name or settings.local_embedding_model
        self.batch_size = batch_size or settings.embedding_batch_size

        logger.info("loading_local_embedding_model", model=self.model_name)

        self.model = SentenceTransformer(self.model_name)
        self._dimension = self.model.get_sentence_embedding_dimension()

        logger.info("local_embedder_initialized", model=self.model_name, dimension=self._dimension)

    @property
    def dimension(self) -> int:
        return self._dimension

    def embed_documents(self, texts: list[str]) -> np.ndarray:
        if not texts:
            return np.empty((0, self._dimension))

        logger.debug("embedding_documents_local", count=len(texts))

        embeddings = self.model.encode(
            texts,
            batch_size=self.batch_size,
            normalize_embeddings=True,
            show_progress_bar=False,
        )
        return np.asarray(embeddings, dtype=float)

    def embed_query(self, query: str) -> np.ndarray:
        return np.asarray(self.model.encode(query, normalize_embeddings=True), dtype=float)


def get_embedder(
        provider: str | None = None,
        model_name: str | None = None,
        settings: Settings | None = None,
) -> BaseEmbedder:
    """
    Build an embedder for the given provider.

    Args:
        provider: "openai" or "local". Defaults to settings.embedding_provider
        model_name: Model name (provider-specific)
        settings: Settings to read defaults and credentials from

    Returns:
        A new embedder instance
    """
    settings = settings or get_settings()
    provider = (provider or settings.embedding_provider).lower()

    if provider == "openai":
        return OpenAIEmbedder(model_name=model_name, settings=settings)
    if provider == "local":
        return LocalEmbedder(model_name=model_name, settings=settings)

    raise ValueError(f"Unknown provider: {provider}. Use 'openai' or 'local'.")
