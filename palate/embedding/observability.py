"""Per-model circuit breaker and call counters for the embedding client.

Only transient failures (timeouts, outages, rate limits) count towards opening
a circuit; a request the provider rejects outright says nothing about its
availability.
"""

from __future__ import annotations

import json
import logging
import time
from contextlib import asynccontextmanager
from dataclasses import asdict, dataclass
from typing import Any, AsyncIterator

from palate.core.config import settings

logger = logging.getLogger("palate.embedding")


class CircuitOpenError(Exception):
    """Raised instead of calling a model whose circuit is open."""


@dataclass
class ModelStats:
    calls: int = 0
    succeeded: int = 0
    failed: int = 0
    rejected: int = 0
    consecutive_failures: int = 0
    open_until: float = 0.0
    cooldown_seconds: float = 0.0
    last_latency_ms: float | None = None
    last_error: str | None = None

    def remaining_cooldown(self) -> float:
        return max(0.0, self.open_until - time.monotonic())


def _emit(event: str, model: str, **fields: Any) -> None:
    level = logging.INFO if event == "embedding_success" else logging.WARNING
    logger.log(level, json.dumps({"event": event, "model": model, **fields}))


class EmbeddingMonitor:
    def __init__(
        self,
        *,
        threshold: int = 3,
        cooldown_seconds: float = 15.0,
        max_cooldown_seconds: float = 300.0,
    ) -> None:
        self.threshold = threshold
        self.base_cooldown = cooldown_seconds
        self.max_cooldown = max_cooldown_seconds
        self._models: dict[str, ModelStats] = {}

    def _stats(self, model: str) -> ModelStats:
        if model not in self._models:
            self._models[model] = ModelStats(cooldown_seconds=self.base_cooldown)
        return self._models[model]

    def is_open(self, model: str) -> bool:
        return self._stats(model).remaining_cooldown() > 0

    @asynccontextmanager
    async def guard(self, model: str, *, chars: int = 0) -> AsyncIterator[None]:
        """Wrap one embed call: fail fast while open, count and log the outcome."""
        stats = self._stats(model)
        remaining = stats.remaining_cooldown()
        if remaining > 0:
            stats.rejected += 1
            _emit("embedding_circuit_open", model, remaining_cooldown=round(remaining, 2))
            raise CircuitOpenError(f"{model} circuit open for {remaining:.2f}s")

        stats.calls += 1
        start = time.monotonic()
        try:
            yield
        except Exception as exc:
            stats.failed += 1
            stats.last_latency_ms = (time.monotonic() - start) * 1000
            stats.last_error = str(exc)
            transient = getattr(exc, "retryable", True)
            if transient:
                self._record_transient_failure(stats)
            _emit(
                "embedding_failure",
                model,
                error=stats.last_error,
                transient=transient,
                latency_ms=round(stats.last_latency_ms, 2),
                chars=chars,
                consecutive_failures=stats.consecutive_failures,
            )
            raise

        stats.succeeded += 1
        stats.consecutive_failures = 0
        stats.cooldown_seconds = self.base_cooldown
        stats.last_latency_ms = (time.monotonic() - start) * 1000
        stats.last_error = None
        _emit("embedding_success", model, latency_ms=round(stats.last_latency_ms, 2), chars=chars)

    def _record_transient_failure(self, stats: ModelStats) -> None:
        stats.consecutive_failures += 1
        if stats.consecutive_failures < self.threshold:
            return
        stats.open_until = time.monotonic() + stats.cooldown_seconds
        stats.consecutive_failures = 0
        stats.cooldown_seconds = min(stats.cooldown_seconds * 2, self.max_cooldown)

    def snapshot(self) -> dict[str, dict[str, Any]]:
        summary: dict[str, dict[str, Any]] = {}
        for model, stats in self._models.items():
            entry = asdict(stats)
            del entry["open_until"]
            entry["remaining_cooldown"] = round(stats.remaining_cooldown(), 2)
            summary[model] = entry
        return summary


embedding_monitor = EmbeddingMonitor(threshold=settings.embedding_circuit_threshold)
