"""FastAPI application entrypoint and health reporting utilities.

Invariants:
- Health detail is only exposed to authenticated users or allowlisted hosts.
"""

import ipaddress
from typing import Any

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from palate.api.deps import get_db, get_optional_current_user
from palate.api.router import api_router
from palate.core.config import settings
from palate.embedding.observability import embedding_monitor
from palate.jobs.schedule_registry import ensure_schedules
from palate.models.dish import Dish, EmbeddingStatus
from palate.models.user import User
from palate.services.task_queue import task_queue

REPEATED_FAILURE_THRESHOLD = 3

app = FastAPI(title=settings.app_name)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(api_router, prefix=settings.api_prefix)


@app.on_event("startup")
async def _register_schedules() -> None:
    """Register scheduled jobs on startup."""
    ensure_schedules()


@app.on_event("shutdown")
async def _drain_inline_tasks() -> None:
    await task_queue.drain()


def _summarize_models(snapshot: dict[str, dict[str, Any]]) -> dict[str, Any]:
    """Condense per-model embedding stats into health telemetry.

    An open circuit or a failing last call marks a model degraded.
    """
    issues: list[dict[str, Any]] = []
    models: dict[str, Any] = {}
    for model, stats in snapshot.items():
        circuit_open = stats["remaining_cooldown"] > 0
        if circuit_open:
            issues.append({"model": model, "reason": "circuit_open", "remaining_cooldown": stats["remaining_cooldown"]})
        if stats["last_error"]:
            issues.append({"model": model, "reason": "last_error", "error": stats["last_error"]})
        if stats["failed"] >= REPEATED_FAILURE_THRESHOLD:
            issues.append({"model": model, "reason": "repeated_failures", "failed": stats["failed"]})
        models[model] = {
            **stats,
            "state": "degraded" if circuit_open or stats["last_error"] else "ok",
            "circuit_open": circuit_open,
        }
    return {"models": models, "issues": issues}


async def _embedding_backlog(session: AsyncSession) -> dict[str, int]:
    """Dish counts per embedding status."""
    result = await session.execute(select(Dish.embedding_status, func.count()).group_by(Dish.embedding_status))
    counts = {status.value: 0 for status in EmbeddingStatus}
    for status, count in result.all():
        counts[EmbeddingStatus(status).value] = count
    return counts


def _entry_matches(entry: str, candidate: str) -> bool:
    """Return True if an allowlist entry matches a candidate host/IP."""
    try:
        network = ipaddress.ip_network(entry, strict=False)
        return ipaddress.ip_address(candidate) in network
    except ValueError:
        return entry.casefold() == candidate.casefold()


def _ip_or_host_allowlisted(request: Request) -> bool:
    if not settings.health_allowlist:
        return False
    candidates: list[str] = []
    if request.client and request.client.host:
        candidates.append(request.client.host)
    host_header = request.headers.get("host")
    if host_header:
        candidates.append(host_header.split(":")[0])
    return any(
        entry and _entry_matches(entry, candidate)
        for candidate in candidates
        for entry in settings.health_allowlist
    )


def _can_view_health_detail(request: Request, current_user: User | None) -> bool:
    if current_user:
        return True
    return _ip_or_host_allowlisted(request)


@app.get("/health", tags=["internal"])
@app.get(f"{settings.api_prefix}/health", tags=["internal"])
async def health(
    request: Request,
    current_user: User | None = Depends(get_optional_current_user),
    session: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    """Return health status and optionally include embedding telemetry."""
    if not _can_view_health_detail(request, current_user):
        return {"status": "ok"}

    telemetry = _summarize_models(embedding_monitor.snapshot())
    telemetry["backlog"] = await _embedding_backlog(session)
    status = "ok" if not telemetry["issues"] else "degraded"
    return {"status": status, "embeddings": telemetry, "queue": task_queue.snapshot()}
