"""Text embedding providers for dish semantics."""

from palate.embedding.client import (
    BaseEmbeddingClient,
    EmbeddingDimensionError,
    EmbeddingError,
    EmbeddingResponseError,
    EmbeddingTimeoutError,
    EmbeddingUnavailableError,
    OpenAIEmbeddingClient,
    get_embedding_client,
)

__all__ = [
    "BaseEmbeddingClient",
    "EmbeddingDimensionError",
    "EmbeddingError",
    "EmbeddingResponseError",
    "EmbeddingTimeoutError",
    "EmbeddingUnavailableError",
    "OpenAIEmbeddingClient",
    "get_embedding_client",
]
