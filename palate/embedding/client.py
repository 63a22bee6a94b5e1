"""Text embedding clients and their failure taxonomy."""

from __future__ import annotations

import logging
from functools import lru_cache

import openai
from openai import AsyncOpenAI

from palate.core.config import settings
from palate.embedding.observability import CircuitOpenError, EmbeddingMonitor, embedding_monitor

logger = logging.getLogger("palate.embedding.client")


class EmbeddingError(Exception):
    """Base failure for embedding calls; ``retryable`` marks transient ones."""
    retryable = False


class EmbeddingDimensionError(EmbeddingError):
    """The provider returned a vector of the wrong length."""


class EmbeddingResponseError(EmbeddingError):
    """The provider answered with something that is not an embedding."""


class EmbeddingTimeoutError(EmbeddingError):
    retryable = True


class EmbeddingUnavailableError(EmbeddingError):
    """Network failure, rate limiting, provider outage, or an open circuit."""
    retryable = True


class BaseEmbeddingClient:
    """Abstract text embedding interface."""
    provider: str
    model: str
    dimension: int

    async def embed(self, text: str) -> list[float]:
        """Return the embedding for ``text``; raise EmbeddingError on failure."""
        raise NotImplementedError

    def check_dimension(self, vector: list[float]) -> list[float]:
        if len(vector) != self.dimension:
            raise EmbeddingDimensionError(
                f"Generated embedding has incorrect dimension: {len(vector)} (expected {self.dimension})"
            )
        return vector


class OpenAIEmbeddingClient(BaseEmbeddingClient):
    """Embeddings from the OpenAI API, guarded by a per-model circuit."""
    provider = "openai"

    def __init__(
        self,
        *,
        api_key: str | None = None,
        model: str | None = None,
        dimension: int | None = None,
        timeout_seconds: float | None = None,
        monitor: EmbeddingMonitor | None = None,
    ) -> None:
        self.model = model or settings.embedding_model
        self.dimension = dimension or settings.embedding_dimension
        self._monitor = monitor or embedding_monitor
        self._api_key = api_key
        self._timeout_seconds = timeout_seconds or settings.embedding_timeout_seconds
        self._client: AsyncOpenAI | None = None

    def _openai(self) -> AsyncOpenAI:
        if self._client is None:
            try:
                # Retries happen through the backfill sweep, not inside the request.
                self._client = AsyncOpenAI(api_key=self._api_key, timeout=self._timeout_seconds, max_retries=0)
            except openai.OpenAIError as exc:
                raise EmbeddingUnavailableError(f"OpenAI client unavailable: {exc}") from exc
        return self._client

    async def embed(self, text: str) -> list[float]:
        cleaned = text.strip()
        if not cleaned:
            raise EmbeddingError("Cannot embed empty text")
        try:
            async with self._monitor.guard(self.model, chars=len(cleaned)):
                return await self._request(cleaned)
        except CircuitOpenError as exc:
            raise EmbeddingUnavailableError(str(exc)) from exc

    async def _request(self, text: str) -> list[float]:
        try:
            response = await self._openai().embeddings.create(model=self.model, input=text)
        except openai.APITimeoutError as exc:
            raise EmbeddingTimeoutError(f"Embedding request timed out: {exc}") from exc
        except (openai.APIConnectionError, openai.RateLimitError) as exc:
            raise EmbeddingUnavailableError(f"Embedding provider unavailable: {exc}") from exc
        except openai.APIStatusError as exc:
            if exc.status_code >= 500:
                raise EmbeddingUnavailableError(f"Embedding provider error {exc.status_code}") from exc
            raise EmbeddingError(f"Embedding request rejected ({exc.status_code}): {exc.message}") from exc

        if not response.data:
            raise EmbeddingResponseError("Embedding response contained no data")
        try:
            vector = [float(value) for value in response.data[0].embedding]
        except (TypeError, ValueError) as exc:
            raise EmbeddingResponseError(f"Malformed embedding payload: {exc}") from exc
        return self.check_dimension(vector)


@lru_cache
def get_embedding_client() -> BaseEmbeddingClient:
    """Return the process-wide embedding client.

    Built lazily so the API key is read after settings are loaded.
    """
    if not settings.openai_api_key:
        logger.critical("OPENAI_API_KEY is not set; embedding calls will fail.")
    return OpenAIEmbeddingClient(api_key=settings.openai_api_key)
