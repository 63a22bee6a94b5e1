"""OpenAI embedding client error mapping and circuit breaking."""

from __future__ import annotations

from types import SimpleNamespace

import httpx
import openai
import pytest

from palate.embedding.client import (
    EmbeddingDimensionError,
    EmbeddingError,
    EmbeddingResponseError,
    EmbeddingTimeoutError,
    EmbeddingUnavailableError,
    OpenAIEmbeddingClient,
)
from palate.embedding.observability import EmbeddingMonitor

REQUEST = httpx.Request("POST", "https://api.openai.com/v1/embeddings")


class _StubEmbeddings:
    def __init__(self, outcome):
        self.outcome = outcome
        self.calls: list[dict] = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome


def _client(outcome, *, dimension: int = 3, monitor: EmbeddingMonitor | None = None):
    client = OpenAIEmbeddingClient(
        api_key="sk-test",
        model="text-embedding-3-small",
        dimension=dimension,
        monitor=monitor or EmbeddingMonitor(threshold=5),
    )
    stub = _StubEmbeddings(outcome)
    client._client = SimpleNamespace(embeddings=stub)
    return client, stub


def _response(vector):
    return SimpleNamespace(data=[SimpleNamespace(embedding=vector)])


@pytest.mark.asyncio
async def test_embed_returns_vector_of_configured_dimension():
    client, stub = _client(_response([0.1, 0.2, 0.3]))

    assert await client.embed("  Pad thai  ") == [0.1, 0.2, 0.3]
    assert stub.calls == [{"model": "text-embedding-3-small", "input": "Pad thai"}]


@pytest.mark.asyncio
async def test_wrong_dimension_is_not_retryable():
    client, _ = _client(_response([0.1, 0.2]))

    with pytest.raises(EmbeddingDimensionError) as excinfo:
        await client.embed("Pad thai")
    assert excinfo.value.retryable is False


@pytest.mark.asyncio
async def test_empty_text_is_rejected_without_a_call():
    client, stub = _client(_response([0.1, 0.2, 0.3]))

    with pytest.raises(EmbeddingError):
        await client.embed("   ")
    assert stub.calls == []


@pytest.mark.asyncio
async def test_empty_response_is_a_response_error():
    client, _ = _client(SimpleNamespace(data=[]))

    with pytest.raises(EmbeddingResponseError):
        await client.embed("Pad thai")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error, expected",
    [
        (openai.APITimeoutError(request=REQUEST), EmbeddingTimeoutError),
        (openai.APIConnectionError(request=REQUEST), EmbeddingUnavailableError),
        (
            openai.RateLimitError("slow down", response=httpx.Response(429, request=REQUEST), body=None),
            EmbeddingUnavailableError,
        ),
        (
            openai.InternalServerError("boom", response=httpx.Response(503, request=REQUEST), body=None),
            EmbeddingUnavailableError,
        ),
    ],
)
async def test_transient_provider_errors_are_retryable(error, expected):
    client, _ = _client(error)

    with pytest.raises(expected) as excinfo:
        await client.embed("Pad thai")
    assert excinfo.value.retryable is True


@pytest.mark.asyncio
async def test_rejected_request_is_not_retryable():
    error = openai.BadRequestError("bad input", response=httpx.Response(400, request=REQUEST), body=None)
    client, _ = _client(error)

    with pytest.raises(EmbeddingError) as excinfo:
        await client.embed("Pad thai")
    assert excinfo.value.retryable is False


@pytest.mark.asyncio
async def test_open_circuit_fails_fast_as_unavailable():
    monitor = EmbeddingMonitor(threshold=1, cooldown_seconds=60)
    client, stub = _client(openai.APIConnectionError(request=REQUEST), monitor=monitor)

    with pytest.raises(EmbeddingUnavailableError):
        await client.embed("Pad thai")
    with pytest.raises(EmbeddingUnavailableError, match="circuit open"):
        await client.embed("Pad thai")
    assert len(stub.calls) == 1


@pytest.mark.asyncio
async def test_missing_api_key_is_unavailable(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    client = OpenAIEmbeddingClient(api_key=None, dimension=3, monitor=EmbeddingMonitor())

    with pytest.raises(EmbeddingUnavailableError):
        await client.embed("Pad thai")
